"""
Course Resolver: HTTP backend.
Resolves map (OSM) golf course records against GolfCourseAPI, stores courses,
tee boxes and holes in SQLite, and serves them back.

Run with: uvicorn server:app --host 0.0.0.0 --port 8000 --reload
"""

import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import settings
from course_store import CourseStore
from fuzzy_match import CourseNameIndex
from resolver import CourseResolver, build_resolver

_start_time = time.time()

store: Optional[CourseStore] = None
resolver: Optional[CourseResolver] = None
name_index = CourseNameIndex()
_index_dirty = True


# -----------------------------------------------------------------
# Lifespan: open the store and wire the resolver on startup
# -----------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    global store, resolver, name_index, _index_dirty

    store = CourseStore(settings.db_path)
    store.open()
    resolver, catalog, geocoder = build_resolver(settings, store)
    name_index = CourseNameIndex(threshold=settings.search_fuzzy_threshold)
    _index_dirty = True

    policy = settings.match_policy
    print(f"\n{'='*60}")
    print(f"  Course Resolver")
    print(f"{'='*60}")
    print(f"  Database:        {settings.db_path}")
    print(f"  Courses stored:  {store.count_courses()}")
    print(f"  Catalog:         {settings.golfcourse_api_base}")
    catalog_display = "configured" if settings.has_catalog_key else "not configured (no enrichment)"
    print(f"  Catalog key:     {catalog_display}")
    print(f"  Geo gates:       {policy.max_km_named} km named / {policy.max_km_unnamed} km unnamed")
    print(f"  Min score:       {policy.min_final_score} named / {policy.min_final_score_unnamed} unnamed")
    print(f"  Reverse geocode: {'on' if geocoder else 'off'}")
    print(f"{'='*60}\n")
    yield
    catalog.close()
    if geocoder:
        geocoder.close()
    store.close()


app = FastAPI(title="Course Resolver", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


def _refresh_index():
    global _index_dirty
    if _index_dirty:
        name_index.build_index(store.list_courses())
        _index_dirty = False


# -----------------------------------------------------------------
# Endpoints
# -----------------------------------------------------------------

@app.post("/courses/resolve")
def resolve_course(body: dict):
    """
    Resolve a map record: {osm_id, name, lat, lng, city?, country?}.
    Returns the stored course id and, when the catalog matched, tee/hole counts.
    """
    global _index_dirty
    result = resolver.resolve(body)
    if result.course_id is not None:
        _index_dirty = True
    return JSONResponse(status_code=result.status, content=result.to_response())


@app.get("/courses/search")
def search_courses(q: str = Query(""), limit: int = Query(10, ge=1, le=50)):
    """Fuzzy search over courses already stored locally."""
    if not q.strip():
        return {"items": []}
    _refresh_index()
    items = [
        {
            "course_id": course.id,
            "osm_id": course.osm_id,
            "name": course.name,
            "city": course.city,
            "country": course.country,
            "score": round(score, 1),
        }
        for course, score in name_index.search(q, limit=limit)
    ]
    return {"items": items}


@app.get("/courses/{course_id}")
def course_detail(course_id: int):
    """Course with tee boxes (by sort_order) and their holes."""
    detail = store.get_detail(course_id)
    if detail is None:
        raise HTTPException(404, f"Course not found: {course_id}")
    out = detail.model_dump(mode="json")
    out["enriched"] = detail.enriched
    return out


@app.get("/health")
def health_check():
    return {
        "status": "ok",
        "uptime": round(time.time() - _start_time, 1),
        "courses": store.count_courses(),
        "catalog_configured": settings.has_catalog_key,
    }
