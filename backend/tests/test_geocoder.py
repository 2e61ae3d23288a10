"""
Tests for geocoder.py: Nominatim address parsing and best-effort failure handling.
"""

import httpx
import pytest

from geocoder import ReverseGeocoder, pick_city, pick_country


def _geocoder(handler) -> ReverseGeocoder:
    http = httpx.Client(transport=httpx.MockTransport(handler))
    return ReverseGeocoder("https://nominatim.test/", "CourseResolverTests/1.0", client=http)


class TestPickers:
    def test_city_precedence(self):
        assert pick_city({"village": "Carmel", "county": "Monterey County"}) == "Carmel"
        assert pick_city({"town": "Pacific Grove", "village": "x"}) == "Pacific Grove"
        assert pick_city({"county": "Monterey County"}) == "Monterey County"

    def test_first_present_key_decides(self):
        # A present but blank city does not fall through to town
        assert pick_city({"city": "  ", "town": "Pacific Grove"}) is None

    def test_non_string_is_missing(self):
        assert pick_city({"city": 12}) is None
        assert pick_country({"country": ["US"]}) is None

    def test_missing_address(self):
        assert pick_city(None) is None
        assert pick_country("nope") is None
        assert pick_city({}) is None


class TestReverseGeocoder:
    def test_request_and_parse(self):
        seen = {}

        def handler(request: httpx.Request):
            seen["path"] = request.url.path
            seen["params"] = dict(request.url.params)
            seen["ua"] = request.headers.get("User-Agent")
            return httpx.Response(200, json={"address": {"city": "Pebble Beach", "country": "United States"}})

        assert _geocoder(handler).city_country(36.5725, -121.9486) == ("Pebble Beach", "United States")
        assert seen["path"] == "/reverse"
        assert seen["params"]["format"] == "jsonv2"
        assert seen["params"]["zoom"] == "10"
        assert seen["params"]["addressdetails"] == "1"
        assert seen["params"]["lon"] == "-121.9486"
        assert seen["ua"] == "CourseResolverTests/1.0"

    @pytest.mark.parametrize("response", [
        httpx.Response(429, text="slow down"),
        httpx.Response(200, text="not json"),
        httpx.Response(200, json=["unexpected"]),
        httpx.Response(200, json={"error": "Unable to geocode"}),
    ])
    def test_failures_yield_nothing(self, response):
        assert _geocoder(lambda request: response).city_country(0.0, 0.0) == (None, None)

    def test_transport_error_yields_nothing(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        assert _geocoder(handler).city_country(1.0, 2.0) == (None, None)
