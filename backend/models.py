"""
Pydantic models for the course resolver.
Defines the incoming resolve request, the canonical catalog shapes produced by the
adapter, persisted rows (courses, tee boxes, holes), and the resolution result.
"""

import math
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, field_validator


# =====================================================================
# Incoming resolve request
# =====================================================================

class ResolveRequest(BaseModel):
    """Map record to resolve. osm_id/name/lat/lng are required."""
    osm_id: str
    name: str
    lat: float
    lng: float
    city: Optional[str] = None
    country: Optional[str] = None

    model_config = {"extra": "allow"}

    @field_validator("osm_id", "name", mode="before")
    @classmethod
    def _required_text(cls, v):
        if v is None or not str(v).strip():
            raise ValueError("must be a non-empty string")
        return str(v).strip()

    @field_validator("lat", "lng", mode="before")
    @classmethod
    def _number_only(cls, v):
        # JSON numbers only: no booleans, no numeric strings
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            raise ValueError("must be a number")
        return v

    @field_validator("lat", "lng")
    @classmethod
    def _finite(cls, v: float) -> float:
        if not math.isfinite(v):
            raise ValueError("must be a finite number")
        return v

    @field_validator("city", "country", mode="before")
    @classmethod
    def _blank_to_none(cls, v):
        if v is None:
            return None
        s = str(v).strip()
        return s or None


# =====================================================================
# Matching policy
# =====================================================================

class MatchPolicy(BaseModel):
    """Geo gates (km) and score thresholds. Immutable once built."""
    max_km_named: float = 60.0
    max_km_unnamed: float = 40.0
    min_name_similarity: float = 0.30
    min_final_score: float = 0.55
    min_final_score_unnamed: float = 0.65

    model_config = {"frozen": True}

    def max_km(self, unnamed: bool) -> float:
        return self.max_km_unnamed if unnamed else self.max_km_named

    def min_final(self, unnamed: bool) -> float:
        return self.min_final_score_unnamed if unnamed else self.min_final_score

    def as_debug(self, unnamed: bool) -> dict:
        return {
            "maxKm": self.max_km(unnamed),
            "minNameSim": self.min_name_similarity,
            "minFinal": self.min_final(unnamed),
        }


# =====================================================================
# Canonical catalog shapes (built by catalog_adapter only)
# =====================================================================

class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    UNISEX = "unisex"


class CatalogHole(BaseModel):
    hole_number: Optional[int] = None
    par: Optional[float] = None
    yardage: Optional[float] = None
    handicap: Optional[float] = None


class CatalogTee(BaseModel):
    name: Optional[str] = None
    total_yards: Optional[float] = None
    par_total: Optional[float] = None
    course_rating: Optional[float] = None
    slope_rating: Optional[float] = None
    bogey_rating: Optional[float] = None
    total_meters: Optional[float] = None
    number_of_holes: Optional[float] = None
    front_course_rating: Optional[float] = None
    front_slope_rating: Optional[float] = None
    front_bogey_rating: Optional[float] = None
    back_course_rating: Optional[float] = None
    back_slope_rating: Optional[float] = None
    back_bogey_rating: Optional[float] = None
    holes: list[CatalogHole] = []

    @property
    def has_half_ratings(self) -> bool:
        return any(
            v is not None
            for v in (
                self.front_course_rating, self.front_slope_rating, self.front_bogey_rating,
                self.back_course_rating, self.back_slope_rating, self.back_bogey_rating,
            )
        )


class CatalogCandidate(BaseModel):
    id: Optional[str] = None
    club_name: Optional[str] = None
    course_name: Optional[str] = None
    name: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    # gender label (as given by the catalog) -> tee definitions
    tees: dict[str, list[CatalogTee]] = {}
    # Untouched upstream record, persisted for audit
    raw: dict[str, Any] = {}

    @property
    def display_name(self) -> str:
        joined = f"{self.club_name or ''} {self.course_name or ''}".strip()
        return joined or self.course_name or self.club_name or self.name or ""


class ScoredCandidate(BaseModel):
    candidate: CatalogCandidate
    name: str
    km: float
    name_score: float
    final_score: float
    query: str
    strategy: str

    def as_debug(self) -> dict:
        return {
            "id": self.candidate.id,
            "name": self.name,
            "km": round(self.km, 2),
            "nameScore": round(self.name_score, 3),
            "finalScore": round(self.final_score, 3),
        }


# =====================================================================
# Persisted rows
# =====================================================================

class Course(BaseModel):
    id: Optional[int] = None
    osm_id: str
    name: str
    name_original: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    city: Optional[str] = None
    country: Optional[str] = None
    source: str = "osm"
    golfcourseapi_id: Optional[str] = None
    golfcourseapi_raw: Optional[dict[str, Any]] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class TeeBox(BaseModel):
    id: Optional[int] = None
    course_id: Optional[int] = None
    name: str
    gender: Gender = Gender.UNISEX
    yards: Optional[int] = None
    par: Optional[int] = None
    rating: Optional[float] = None
    slope: Optional[int] = None
    bogey_rating: Optional[float] = None
    total_meters: Optional[int] = None
    holes_count: Optional[int] = None
    front_course_rating: Optional[float] = None
    front_slope_rating: Optional[int] = None
    front_bogey_rating: Optional[float] = None
    back_course_rating: Optional[float] = None
    back_slope_rating: Optional[int] = None
    back_bogey_rating: Optional[float] = None
    sort_order: int = 0


class Hole(BaseModel):
    id: Optional[int] = None
    tee_box_id: Optional[int] = None
    hole_number: int
    par: Optional[int] = None
    yardage: Optional[int] = None
    handicap: Optional[int] = None


class IngestedTee(BaseModel):
    """A tee box ready to insert plus the holes that hang off it."""
    tee: TeeBox
    holes: list[Hole] = []


class TeeBoxDetail(TeeBox):
    holes: list[Hole] = []


class CourseDetail(BaseModel):
    course: Course
    tee_boxes: list[TeeBoxDetail] = []

    @property
    def enriched(self) -> bool:
        return bool(self.course.golfcourseapi_id) and len(self.tee_boxes) > 0


# =====================================================================
# Resolution output
# =====================================================================

class ResolveResult(BaseModel):
    """Structured outcome of one resolve call. Every path returns one of these."""
    course_id: Optional[int] = None
    enriched: bool = False
    from_cache: Optional[bool] = None
    tee_count: Optional[int] = None
    hole_count: Optional[int] = None
    matched_name: Optional[str] = None
    match_km: Optional[float] = None
    match_score: Optional[float] = None
    match_query: Optional[str] = None
    reason: Optional[str] = None
    note: Optional[str] = None
    error: Optional[str] = None
    received: Optional[dict[str, Any]] = None
    debug: Optional[list[dict[str, Any]]] = None
    policy: Optional[dict[str, float]] = None
    city: Optional[str] = None
    country: Optional[str] = None

    # HTTP status the surface should use (not part of the body)
    status: int = 200

    def to_response(self) -> dict:
        return self.model_dump(exclude_none=True, exclude={"status"})
