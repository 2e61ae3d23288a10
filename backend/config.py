"""
Application settings loaded from .env file via pydantic-settings.
Env names match the deployed service (GOLFCOURSE_API_KEY, GOLFCOURSE_MAX_KM_NAMED, ...).
"""

from pydantic_settings import BaseSettings
from pydantic import model_validator

from models import MatchPolicy


# -----------------------------------------------------------------
# Token profiles used by the name normalizer
# -----------------------------------------------------------------

NOISE_WORDS = frozenset({"the", "at", "and", "of", "de", "la", "le"})

GENERIC_GOLF_WORDS = frozenset({
    "golf", "course", "club", "gc", "g.c", "links", "resort",
    "centre", "center", "country", "cc",
})

CORPORATE_SUFFIXES = frozenset({"ltd", "limited"})

# Free-text gender labels from the catalog -> stored gender category
GENDER_ALIASES = {
    "female": ["f", "female", "women", "womens", "ladies", "lady", "w"],
    "male": ["m", "male", "men", "mens"],
}

SOURCE_MAP = "osm"
SOURCE_MAP_CATALOG = "osm+golfcourseapi"


class Settings(BaseSettings):
    # GolfCourseAPI catalog
    golfcourse_api_base: str = "https://api.golfcourseapi.com"
    golfcourse_api_key: str = ""

    # Geo gates (km): tighter when the map record has no usable name
    golfcourse_max_km_named: float = 60.0
    golfcourse_max_km_unnamed: float = 40.0

    # Thresholds
    golfcourse_min_name_similarity: float = 0.30
    golfcourse_min_final_score: float = 0.55
    golfcourse_min_final_score_unnamed: float = 0.65

    # Nominatim reverse geocoding (city/country backfill)
    nominatim_base: str = "https://nominatim.openstreetmap.org"
    nominatim_user_agent: str = "CourseResolver/1.0 (contact: dev@example.com)"
    reverse_geocode_enabled: bool = True

    # Storage
    db_path: str = "data/courses.db"

    # Outbound HTTP
    http_timeout_s: float = 10.0

    # Known-course search (RapidFuzz score 0-100)
    search_fuzzy_threshold: int = 60

    @model_validator(mode="after")
    def _check_gates(self):
        """Geo gates must be positive so closeness stays finite."""
        if self.golfcourse_max_km_named <= 0 or self.golfcourse_max_km_unnamed <= 0:
            raise ValueError("geo gates must be > 0 km")
        return self

    @property
    def has_catalog_key(self) -> bool:
        return bool(self.golfcourse_api_key.strip())

    @property
    def match_policy(self) -> MatchPolicy:
        """Immutable snapshot of the matching thresholds handed to the resolver."""
        return MatchPolicy(
            max_km_named=self.golfcourse_max_km_named,
            max_km_unnamed=self.golfcourse_max_km_unnamed,
            min_name_similarity=self.golfcourse_min_name_similarity,
            min_final_score=self.golfcourse_min_final_score,
            min_final_score_unnamed=self.golfcourse_min_final_score_unnamed,
        )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


settings = Settings()
