"""
Shared pytest fixtures for the Course Resolver backend test suite.
"""

import sys
from pathlib import Path

import pytest

# Ensure the backend directory is on sys.path so we can import modules directly
BACKEND_DIR = Path(__file__).resolve().parent.parent
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))


# =====================================================================
# Lock registry reset (autouse)
# =====================================================================

@pytest.fixture(autouse=True)
def _reset_locks():
    """Reset the per-course lock registry between tests."""
    from course_store import CourseStore

    CourseStore._reset_locks_for_testing()
    yield
    CourseStore._reset_locks_for_testing()


# =====================================================================
# Override settings to stable test defaults
# =====================================================================

@pytest.fixture(autouse=True)
def _test_settings(tmp_path):
    """Override settings so tests never touch the network or a real database."""
    from config import settings

    original_values = {
        "golfcourse_api_key": settings.golfcourse_api_key,
        "reverse_geocode_enabled": settings.reverse_geocode_enabled,
        "db_path": settings.db_path,
        "golfcourse_max_km_named": settings.golfcourse_max_km_named,
        "golfcourse_max_km_unnamed": settings.golfcourse_max_km_unnamed,
        "golfcourse_min_name_similarity": settings.golfcourse_min_name_similarity,
        "golfcourse_min_final_score": settings.golfcourse_min_final_score,
        "golfcourse_min_final_score_unnamed": settings.golfcourse_min_final_score_unnamed,
    }

    settings.golfcourse_api_key = ""
    settings.reverse_geocode_enabled = False
    settings.db_path = str(tmp_path / "courses.db")
    settings.golfcourse_max_km_named = 60.0
    settings.golfcourse_max_km_unnamed = 40.0
    settings.golfcourse_min_name_similarity = 0.30
    settings.golfcourse_min_final_score = 0.55
    settings.golfcourse_min_final_score_unnamed = 0.65

    yield settings

    for key, val in original_values.items():
        setattr(settings, key, val)


# =====================================================================
# Fakes
# =====================================================================

class FakeCatalog:
    """Catalog stand-in: query -> list of raw course dicts, with call counting."""

    def __init__(self, responses=None, default=None, errors=None):
        self.responses = responses or {}
        self.default = default if default is not None else []
        # query -> UpstreamCallError to raise
        self.errors = errors or {}
        self.calls: list[str] = []

    def search(self, query):
        from catalog_adapter import parse_search_response

        self.calls.append(query)
        if query in self.errors:
            raise self.errors[query]
        raw = self.responses.get(query, self.default)
        return parse_search_response({"courses": raw})


class FakeGeocoder:
    def __init__(self, city="Pebble Beach", country="United States"):
        self.city = city
        self.country = country
        self.calls = 0

    def city_country(self, lat, lng):
        self.calls += 1
        return self.city, self.country


@pytest.fixture
def fake_catalog():
    return FakeCatalog()


@pytest.fixture
def fake_geocoder():
    return FakeGeocoder()


# =====================================================================
# Store / policy
# =====================================================================

@pytest.fixture
def store(tmp_path):
    from course_store import CourseStore

    s = CourseStore(str(tmp_path / "test_courses.db"))
    s.open()
    yield s
    s.close()


@pytest.fixture
def policy():
    from models import MatchPolicy

    return MatchPolicy()


# =====================================================================
# Sample catalog data
# =====================================================================

PEBBLE = {"lat": 36.5725, "lng": -121.9486}


def offset_north(lat, km):
    """Latitude shifted north by `km` kilometres (same longitude)."""
    return lat + km / 111.19492664455873


def make_holes(yardages, pars=None, handicaps=None, start=1):
    pars = pars or [4] * len(yardages)
    holes = []
    for i, y in enumerate(yardages):
        h = {"hole_number": start + i, "par": pars[i], "yardage": y}
        if handicaps:
            h["handicap"] = handicaps[i]
        holes.append(h)
    return holes


def make_catalog_course(
    course_id=1001,
    club_name="Pebble Beach Golf Links",
    course_name="",
    lat=PEBBLE["lat"],
    lng=PEBBLE["lng"],
    tees=None,
):
    return {
        "id": course_id,
        "club_name": club_name,
        "course_name": course_name,
        "location": {"latitude": lat, "longitude": lng, "city": "Pebble Beach"},
        "tees": tees if tees is not None else {},
    }


@pytest.fixture
def split_tee():
    """An 18-hole men's tee with front/back ratings (yields 3 tee rows)."""
    yards = [380, 502, 390, 331, 195, 523, 106, 428, 505, 446, 380, 202, 445, 580, 397, 403, 178, 543]
    pars = [4, 5, 4, 4, 3, 5, 3, 4, 4, 4, 4, 3, 4, 5, 4, 4, 3, 5]
    return {
        "tee_name": "Blue",
        "course_rating": 74.9,
        "slope_rating": 144,
        "bogey_rating": 101.2,
        "total_yards": 6828,
        "par_total": 72,
        "number_of_holes": 18,
        "front_course_rating": 37.3,
        "front_slope_rating": 140,
        "front_bogey_rating": 50.1,
        "back_course_rating": 37.6,
        "back_slope_rating": 148,
        "back_bogey_rating": 51.1,
        "holes": make_holes(yards, pars),
    }


@pytest.fixture
def pebble_payload(split_tee):
    """Catalog record for Pebble Beach with a split men's tee and a plain ladies tee."""
    ladies = {
        "tee_name": "Red",
        "course_rating": 72.1,
        "slope_rating": 130,
        "holes": make_holes([300, 420, 310, 290, 150, 450, 90, 350, 400]),
    }
    return make_catalog_course(tees={"male": [split_tee], "Ladies": [ladies]})


@pytest.fixture
def resolve_body():
    return {
        "osm_id": "way/1",
        "name": "Pebble Beach Golf Links",
        "lat": PEBBLE["lat"],
        "lng": PEBBLE["lng"],
    }
