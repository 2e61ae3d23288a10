"""
GolfCourseAPI JSON -> canonical catalog models.

This is the only module that knows the catalog's alternate field names
(location.latitude vs lat, total_yards vs yards vs yardage, hole_number vs hole ...).
Everything downstream works with CatalogCandidate / CatalogTee / CatalogHole.
"""

import math
from typing import Any, Optional

from models import CatalogCandidate, CatalogHole, CatalogTee

INT64_MAX = 2 ** 63 - 1
INT64_MIN = -(2 ** 63)


def to_num(v: Any) -> Optional[float]:
    """Finite number or None. Blank strings, bools, NaN and inf are treated as missing."""
    if v is None or isinstance(v, bool):
        return None
    if isinstance(v, str):
        v = v.strip()
        if not v:
            return None
    try:
        x = float(v)
    except (TypeError, ValueError):
        return None
    return x if math.isfinite(x) else None


def _first_num(*values: Any) -> Optional[float]:
    for v in values:
        x = to_num(v)
        if x is not None:
            return x
    return None


def _first_present(d: dict, *keys: str) -> Any:
    """First key whose value is not None, mirroring `a ?? b ?? c` on the raw record."""
    for k in keys:
        v = d.get(k)
        if v is not None:
            return v
    return None


def _text(v: Any) -> Optional[str]:
    if v is None:
        return None
    s = str(v).strip()
    return s or None


def pick_lat(raw: dict) -> Optional[float]:
    loc = raw.get("location") if isinstance(raw.get("location"), dict) else {}
    return _first_num(loc.get("latitude"), loc.get("lat"), raw.get("latitude"), raw.get("lat"))


def pick_lng(raw: dict) -> Optional[float]:
    loc = raw.get("location") if isinstance(raw.get("location"), dict) else {}
    return _first_num(
        loc.get("longitude"), loc.get("lng"), loc.get("lon"),
        raw.get("longitude"), raw.get("lng"), raw.get("lon"),
    )


def parse_hole(raw: dict) -> CatalogHole:
    number = to_num(_first_present(raw, "hole_number", "hole"))
    return CatalogHole(
        hole_number=int(number) if number and 0 < number <= INT64_MAX else None,
        par=to_num(raw.get("par")),
        yardage=to_num(_first_present(raw, "yardage", "yards")),
        handicap=to_num(raw.get("handicap")),
    )


def parse_tee(raw: dict) -> CatalogTee:
    holes_raw = raw.get("holes")
    holes = [parse_hole(h) for h in holes_raw if isinstance(h, dict)] if isinstance(holes_raw, list) else []
    return CatalogTee(
        name=_text(_first_present(raw, "tee_name", "name")),
        total_yards=to_num(_first_present(raw, "total_yards", "yards", "yardage")),
        par_total=to_num(_first_present(raw, "par_total", "par")),
        course_rating=to_num(_first_present(raw, "course_rating", "rating")),
        slope_rating=to_num(_first_present(raw, "slope_rating", "slope")),
        bogey_rating=to_num(raw.get("bogey_rating")),
        total_meters=to_num(raw.get("total_meters")),
        number_of_holes=to_num(raw.get("number_of_holes")),
        front_course_rating=to_num(raw.get("front_course_rating")),
        front_slope_rating=to_num(raw.get("front_slope_rating")),
        front_bogey_rating=to_num(raw.get("front_bogey_rating")),
        back_course_rating=to_num(raw.get("back_course_rating")),
        back_slope_rating=to_num(raw.get("back_slope_rating")),
        back_bogey_rating=to_num(raw.get("back_bogey_rating")),
        holes=holes,
    )


def parse_candidate(raw: dict) -> CatalogCandidate:
    tees: dict[str, list[CatalogTee]] = {}
    tees_raw = raw.get("tees")
    if isinstance(tees_raw, dict):
        for gender_label, arr in tees_raw.items():
            items = arr if isinstance(arr, list) else []
            tees[str(gender_label)] = [parse_tee(t) for t in items if isinstance(t, dict)]

    return CatalogCandidate(
        id=_text(raw.get("id")),
        club_name=_text(raw.get("club_name")),
        course_name=_text(raw.get("course_name")),
        name=_text(raw.get("name")),
        lat=pick_lat(raw),
        lng=pick_lng(raw),
        tees=tees,
        raw=raw,
    )


def parse_search_response(payload: Any) -> list[CatalogCandidate]:
    """`{"courses": [...]}` -> candidates. Anything else is an empty result."""
    if not isinstance(payload, dict):
        return []
    courses = payload.get("courses")
    if not isinstance(courses, list):
        return []
    return [parse_candidate(c) for c in courses if isinstance(c, dict)]
