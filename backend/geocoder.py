"""City/country backfill from Nominatim reverse geocoding.

Best effort only: any failure (timeout, 429, bad JSON) yields (None, None)
and never blocks a resolution.
"""
from typing import Optional

import httpx

# Nominatim address keys, most specific first
_CITY_KEYS = ("city", "town", "village", "hamlet", "municipality", "county")


def _pick_str(addr: dict, *keys: str) -> Optional[str]:
    for k in keys:
        v = addr.get(k)
        if v is None:
            continue
        if isinstance(v, str) and v.strip():
            return v.strip()
        return None
    return None


def pick_city(addr: Optional[dict]) -> Optional[str]:
    if not isinstance(addr, dict):
        return None
    return _pick_str(addr, *_CITY_KEYS)


def pick_country(addr: Optional[dict]) -> Optional[str]:
    if not isinstance(addr, dict):
        return None
    return _pick_str(addr, "country")


class ReverseGeocoder:
    def __init__(
        self,
        base_url: str,
        user_agent: str,
        timeout: float = 10.0,
        client: Optional[httpx.Client] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.user_agent = user_agent
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout)

    def city_country(self, lat: float, lng: float) -> tuple[Optional[str], Optional[str]]:
        params = {
            "format": "jsonv2",
            "lat": str(lat),
            "lon": str(lng),
            "zoom": "10",
            "addressdetails": "1",
        }
        headers = {"Accept": "application/json", "User-Agent": self.user_agent}
        try:
            resp = self._client.get(f"{self.base_url}/reverse", params=params, headers=headers)
            resp.raise_for_status()
            data = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            print(f"  [Geocoder] Reverse lookup failed ({lat}, {lng}): {type(e).__name__}")
            return None, None

        addr = data.get("address") if isinstance(data, dict) else None
        return pick_city(addr), pick_country(addr)

    def close(self):
        if self._owns_client:
            self._client.close()
