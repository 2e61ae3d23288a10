"""
Course resolution: map record -> stored course, enriched from the catalog when possible.

Flow for one request:
  1. validate             (400, no side effects)
  2. cache check          enriched course with tee boxes -> from_cache, no catalog calls
  3. get-or-create        course row keyed by osm_id, city/country backfilled
  4. credential check     no catalog key -> enriched=False, retried next call
  5. match                planned queries, geo + name gates, blended score
  6. ingest + replace     tee boxes and holes replaced in one transaction

Every path returns a ResolveResult; nothing raised here crosses resolve().
"""

from typing import Any, Optional, Protocol, Union

import pydantic

from catalog_client import CatalogClient
from config import SOURCE_MAP, Settings
from course_store import CourseStore
from display_name import choose_display_name
from errors import ConfigurationError, NoMatchError, PersistenceError, ValidationError
from geocoder import ReverseGeocoder
from matcher import CandidateMatcher, CatalogSearch, MatchOutcome
from models import Course, MatchPolicy, ResolveRequest, ResolveResult
from tee_ingest import build_tee_rows

MISSING_KEY_REASON = "Missing GOLFCOURSE_API_KEY"
NO_MATCH_REASON = "No match found"
MISSING_ID_REASON = "Matched candidate missing id"
NO_TEES_NOTE = "Matched course has no tee data"


class CityCountryLookup(Protocol):
    def city_country(self, lat: float, lng: float) -> tuple[Optional[str], Optional[str]]: ...


def validate_request(payload: Union[ResolveRequest, dict, Any]) -> ResolveRequest:
    if isinstance(payload, ResolveRequest):
        return payload
    if not isinstance(payload, dict):
        raise ValidationError("Missing osm_id/name/lat/lng")
    try:
        return ResolveRequest(**payload)
    except pydantic.ValidationError as e:
        fields = sorted({str(err["loc"][0]) for err in e.errors() if err.get("loc")})
        raise ValidationError(f"Missing or invalid: {', '.join(fields) or 'osm_id/name/lat/lng'}") from e


class CourseResolver:
    def __init__(
        self,
        store: CourseStore,
        catalog: CatalogSearch,
        policy: MatchPolicy,
        geocoder: Optional[CityCountryLookup] = None,
        catalog_configured: bool = True,
    ):
        self.store = store
        self.policy = policy
        self.geocoder = geocoder
        self.catalog_configured = catalog_configured
        self.matcher = CandidateMatcher(catalog, policy)

    # -----------------------------------------------------------------
    # Public entry point
    # -----------------------------------------------------------------

    def resolve(self, payload: Union[ResolveRequest, dict]) -> ResolveResult:
        try:
            request = validate_request(payload)
        except ValidationError as e:
            return ResolveResult(error=str(e), status=400)

        try:
            with self.store.course_lock(request.osm_id):
                return self._resolve_locked(request)
        except PersistenceError as e:
            print(f"  [Resolver] Persistence failure for {request.osm_id}: {e}")
            return ResolveResult(course_id=e.course_id, enriched=False, error=str(e), status=500)

    # -----------------------------------------------------------------
    # Steps
    # -----------------------------------------------------------------

    def _resolve_locked(self, request: ResolveRequest) -> ResolveResult:
        course = self.store.get_by_osm_id(request.osm_id)

        if course is not None and self.store.is_enriched(course):
            course = self._with_context(course.id, self.store.backfill_location, course, request.city, request.country)
            return self._cache_hit(course)

        city, country = self._city_country(request, course)

        if course is None:
            course = self.store.create_course(Course(
                osm_id=request.osm_id,
                name=request.name,
                name_original=request.name,
                lat=request.lat,
                lng=request.lng,
                source=SOURCE_MAP,
                city=city,
                country=country,
            ))
        course = self._with_context(course.id, self.store.backfill_location, course, city, country)
        city, country = course.city or city, course.country or country

        try:
            return self._with_context(course.id, self._enrich, course, request, city, country)
        except ConfigurationError as e:
            print(f"  [Resolver] {request.osm_id}: {e}")
            return ResolveResult(course_id=course.id, enriched=False, reason=str(e), city=city, country=country)
        except NoMatchError as e:
            outcome: MatchOutcome = e.outcome
            return ResolveResult(
                course_id=course.id,
                enriched=False,
                reason=str(e),
                received={
                    "name": request.name,
                    "lat": request.lat,
                    "lng": request.lng,
                    "unnamed": outcome.unnamed,
                    "queries": outcome.queries,
                },
                debug=outcome.debug,
                policy=self.policy.as_debug(outcome.unnamed),
                city=city,
                country=country,
            )

    def _enrich(self, course: Course, request: ResolveRequest,
                city: Optional[str], country: Optional[str]) -> ResolveResult:
        if not self.catalog_configured:
            raise ConfigurationError(MISSING_KEY_REASON)

        outcome = self.matcher.match(request.name, request.lat, request.lng)
        if outcome.best is None:
            raise NoMatchError(NO_MATCH_REASON, outcome=outcome)

        best = outcome.best
        catalog_id = best.candidate.id
        if not catalog_id:
            return ResolveResult(
                course_id=course.id, enriched=False, reason=MISSING_ID_REASON,
                debug=outcome.debug, city=city, country=country,
            )

        matched_name = choose_display_name(request.name, best.candidate.display_name or best.name)
        rows = build_tee_rows(best.candidate.tees)

        counts = self.store.apply_enrichment(
            course.id,
            golfcourseapi_id=catalog_id,
            raw=best.candidate.raw,
            name=matched_name,
            city=city,
            country=country,
            rows=rows,
        )
        if counts is None:
            # Enriched by a concurrent writer while we were matching
            current = self.store.get_course(course.id) or course
            return self._cache_hit(current)

        tee_count, hole_count = counts
        print(
            f"  [Resolver] {request.osm_id} -> catalog {catalog_id} '{matched_name}': "
            f"{tee_count} tees, {hole_count} holes"
        )
        return ResolveResult(
            course_id=course.id,
            enriched=True,
            tee_count=tee_count,
            hole_count=hole_count,
            matched_name=matched_name,
            match_km=best.km,
            match_score=best.final_score,
            match_query=best.query,
            note=None if rows else NO_TEES_NOTE,
            debug=outcome.debug,
            city=city,
            country=country,
        )

    # -----------------------------------------------------------------
    # Helpers
    # -----------------------------------------------------------------

    def _cache_hit(self, course: Course) -> ResolveResult:
        return ResolveResult(
            course_id=course.id,
            enriched=True,
            from_cache=True,
            tee_count=self._with_context(course.id, self.store.count_tee_boxes, course.id),
            city=course.city,
            country=course.country,
        )

    def _city_country(self, request: ResolveRequest,
                      course: Optional[Course]) -> tuple[Optional[str], Optional[str]]:
        """Caller values first; reverse geocode only for fields still missing everywhere."""
        city, country = request.city, request.country
        need_city = not city and not (course and course.city)
        need_country = not country and not (course and course.country)
        if (need_city or need_country) and self.geocoder is not None:
            geo_city, geo_country = self.geocoder.city_country(request.lat, request.lng)
            city = city or geo_city
            country = country or geo_country
        return city, country

    @staticmethod
    def _with_context(course_id: Optional[int], fn, *args, **kwargs):
        """Run a store step, tagging any PersistenceError with the course id."""
        try:
            return fn(*args, **kwargs)
        except PersistenceError as e:
            if e.course_id is None:
                e.course_id = course_id
            raise


def build_resolver(settings: Settings, store: CourseStore) -> tuple[CourseResolver, CatalogClient, Optional[ReverseGeocoder]]:
    """Wire the resolver from settings. Callers own (and close) the returned clients."""
    catalog = CatalogClient(
        settings.golfcourse_api_base,
        settings.golfcourse_api_key,
        timeout=settings.http_timeout_s,
    )
    geocoder = None
    if settings.reverse_geocode_enabled:
        geocoder = ReverseGeocoder(
            settings.nominatim_base,
            settings.nominatim_user_agent,
            timeout=settings.http_timeout_s,
        )
    resolver = CourseResolver(
        store,
        catalog,
        settings.match_policy,
        geocoder=geocoder,
        catalog_configured=settings.has_catalog_key,
    )
    return resolver, catalog, geocoder
