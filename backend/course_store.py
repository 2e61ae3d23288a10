"""
SQLite persistence for courses, tee boxes and holes.

Tables:
  courses           one row per osm_id (unique)
  course_tee_boxes  FK course_id -> courses(id) ON DELETE CASCADE
  course_tee_holes  FK tee_box_id -> course_tee_boxes(id) ON DELETE CASCADE

Every call opens its own connection, so the store can be shared across request
threads. Enrichment (course update + tee/hole replacement) runs inside a single
BEGIN IMMEDIATE transaction.
"""

import json
import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterator, Optional

from config import SOURCE_MAP_CATALOG
from errors import PersistenceError
from models import Course, CourseDetail, Hole, IngestedTee, TeeBoxDetail

_SCHEMA = """
CREATE TABLE IF NOT EXISTS courses (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    osm_id TEXT NOT NULL UNIQUE,
    name TEXT NOT NULL,
    name_original TEXT,
    lat REAL,
    lng REAL,
    city TEXT,
    country TEXT,
    source TEXT NOT NULL DEFAULT 'osm',
    golfcourseapi_id TEXT,
    golfcourseapi_raw TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS course_tee_boxes (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    course_id INTEGER NOT NULL REFERENCES courses(id) ON DELETE CASCADE,
    name TEXT NOT NULL,
    gender TEXT,
    yards INTEGER,
    par INTEGER,
    rating REAL,
    slope INTEGER,
    bogey_rating REAL,
    total_meters INTEGER,
    holes_count INTEGER,
    front_course_rating REAL,
    front_slope_rating INTEGER,
    front_bogey_rating REAL,
    back_course_rating REAL,
    back_slope_rating INTEGER,
    back_bogey_rating REAL,
    sort_order INTEGER NOT NULL DEFAULT 0,
    UNIQUE (course_id, sort_order)
);

CREATE INDEX IF NOT EXISTS course_tee_boxes_course_idx
    ON course_tee_boxes (course_id, sort_order);

CREATE TABLE IF NOT EXISTS course_tee_holes (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    tee_box_id INTEGER NOT NULL REFERENCES course_tee_boxes(id) ON DELETE CASCADE,
    hole_number INTEGER NOT NULL,
    par INTEGER,
    yardage INTEGER,
    handicap INTEGER,
    UNIQUE (tee_box_id, hole_number)
);
"""

_TEE_COLUMNS = (
    "course_id", "name", "gender", "yards", "par", "rating", "slope", "bogey_rating",
    "total_meters", "holes_count",
    "front_course_rating", "front_slope_rating", "front_bogey_rating",
    "back_course_rating", "back_slope_rating", "back_bogey_rating",
    "sort_order",
)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _row_to_course(row: sqlite3.Row) -> Course:
    data = dict(row)
    raw = data.get("golfcourseapi_raw")
    data["golfcourseapi_raw"] = json.loads(raw) if raw else None
    return Course(**data)


class CourseStore:
    """Courses / tee boxes / holes backed by one SQLite file."""

    # osm_id -> [lock, holders]; serializes resolutions of the same course in this
    # process. An entry is dropped when its last holder or waiter leaves.
    _locks: dict[str, list] = {}
    _locks_guard = threading.Lock()

    def __init__(self, path: str):
        self.path = Path(path)

    def open(self):
        """Create the database file and schema if missing."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self._connect() as conn:
            conn.executescript(_SCHEMA)
        print(f"  [Store] Opened {self.path}")

    def close(self):
        """Connections are per call; nothing is held open."""

    # -----------------------------------------------------------------
    # Connection / transaction helpers
    # -----------------------------------------------------------------

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        try:
            conn = sqlite3.connect(str(self.path), timeout=10.0, isolation_level=None)
        except sqlite3.Error as e:
            raise PersistenceError(f"open failed: {e}") from e
        conn.row_factory = sqlite3.Row
        try:
            conn.execute("PRAGMA foreign_keys = ON")
            yield conn
        except (sqlite3.Error, OverflowError) as e:
            raise PersistenceError(str(e)) from e
        finally:
            conn.close()

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        with self._connect() as conn:
            conn.execute("BEGIN IMMEDIATE")
            try:
                yield conn
            except BaseException:
                conn.execute("ROLLBACK")
                raise
            conn.execute("COMMIT")

    @classmethod
    @contextmanager
    def course_lock(cls, osm_id: str) -> Iterator[None]:
        """Advisory per-course lock for the whole check-then-replace sequence."""
        with cls._locks_guard:
            entry = cls._locks.setdefault(osm_id, [threading.Lock(), 0])
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with cls._locks_guard:
                entry[1] -= 1
                if entry[1] == 0 and cls._locks.get(osm_id) is entry:
                    del cls._locks[osm_id]

    @classmethod
    def _reset_locks_for_testing(cls):
        with cls._locks_guard:
            cls._locks.clear()

    # -----------------------------------------------------------------
    # Courses
    # -----------------------------------------------------------------

    def get_by_osm_id(self, osm_id: str) -> Optional[Course]:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM courses WHERE osm_id = ?", (osm_id,)).fetchone()
        return _row_to_course(row) if row else None

    def get_course(self, course_id: int) -> Optional[Course]:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM courses WHERE id = ?", (course_id,)).fetchone()
        return _row_to_course(row) if row else None

    def list_courses(self) -> list[Course]:
        with self._connect() as conn:
            rows = conn.execute("SELECT * FROM courses ORDER BY id").fetchall()
        return [_row_to_course(r) for r in rows]

    def count_courses(self) -> int:
        with self._connect() as conn:
            return conn.execute("SELECT COUNT(*) FROM courses").fetchone()[0]

    def create_course(self, course: Course) -> Course:
        """Insert an unenriched course. If the osm_id already exists, return that row."""
        now = _now()
        try:
            with self._connect() as conn:
                cur = conn.execute(
                    "INSERT INTO courses (osm_id, name, name_original, lat, lng, city, country, "
                    "source, created_at, updated_at) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                    (course.osm_id, course.name, course.name_original, course.lat, course.lng,
                     course.city, course.country, course.source, now, now),
                )
                course_id = cur.lastrowid
        except PersistenceError as e:
            if isinstance(e.__cause__, sqlite3.IntegrityError):
                existing = self.get_by_osm_id(course.osm_id)
                if existing:
                    return existing
            raise
        print(f"  [Store] Created course #{course_id} for {course.osm_id}")
        return course.model_copy(update={"id": course_id, "created_at": now, "updated_at": now})

    def backfill_location(self, course: Course, city: Optional[str], country: Optional[str]) -> Course:
        """Fill city/country only where the stored value is missing."""
        patch: dict[str, Any] = {}
        if not course.city and city:
            patch["city"] = city
        if not course.country and country:
            patch["country"] = country
        if not patch:
            return course
        patch["updated_at"] = _now()
        assignments = ", ".join(f"{k} = ?" for k in patch)
        with self._connect() as conn:
            conn.execute(
                f"UPDATE courses SET {assignments} WHERE id = ?",
                (*patch.values(), course.id),
            )
        return course.model_copy(update=patch)

    # -----------------------------------------------------------------
    # Tee boxes / holes
    # -----------------------------------------------------------------

    def count_tee_boxes(self, course_id: int) -> int:
        with self._connect() as conn:
            return conn.execute(
                "SELECT COUNT(*) FROM course_tee_boxes WHERE course_id = ?", (course_id,)
            ).fetchone()[0]

    def is_enriched(self, course: Course) -> bool:
        return bool(course.golfcourseapi_id) and self.count_tee_boxes(course.id) > 0

    def apply_enrichment(
        self,
        course_id: int,
        golfcourseapi_id: str,
        raw: dict,
        name: str,
        city: Optional[str],
        country: Optional[str],
        rows: list[IngestedTee],
    ) -> Optional[tuple[int, int]]:
        """
        Update the course and fully replace its tee boxes and holes in one transaction.
        Returns (tee_count, hole_count), or None if another writer enriched the
        course first (nothing is written in that case).
        """
        with self._transaction() as conn:
            current = conn.execute(
                "SELECT c.golfcourseapi_id, "
                "(SELECT COUNT(*) FROM course_tee_boxes t WHERE t.course_id = c.id) AS tee_count "
                "FROM courses c WHERE c.id = ?",
                (course_id,),
            ).fetchone()
            if current is None:
                raise PersistenceError(f"course #{course_id} not found", course_id=course_id)
            if current["golfcourseapi_id"] and current["tee_count"] > 0:
                return None

            patch: dict[str, Any] = {
                "golfcourseapi_id": golfcourseapi_id,
                "golfcourseapi_raw": json.dumps(raw, default=str),
                "source": SOURCE_MAP_CATALOG,
                "name": name,
                "updated_at": _now(),
            }
            if city:
                patch["city"] = city
            if country:
                patch["country"] = country
            assignments = ", ".join(f"{k} = ?" for k in patch)
            conn.execute(f"UPDATE courses SET {assignments} WHERE id = ?", (*patch.values(), course_id))

            # Holes go with their tee boxes via ON DELETE CASCADE
            conn.execute("DELETE FROM course_tee_boxes WHERE course_id = ?", (course_id,))

            placeholders = ", ".join("?" for _ in _TEE_COLUMNS)
            hole_count = 0
            for row in rows:
                values = row.tee.model_dump(mode="json")
                values["course_id"] = course_id
                cur = conn.execute(
                    f"INSERT INTO course_tee_boxes ({', '.join(_TEE_COLUMNS)}) VALUES ({placeholders})",
                    tuple(values[c] for c in _TEE_COLUMNS),
                )
                tee_box_id = cur.lastrowid
                conn.executemany(
                    "INSERT INTO course_tee_holes (tee_box_id, hole_number, par, yardage, handicap) "
                    "VALUES (?, ?, ?, ?, ?)",
                    [(tee_box_id, h.hole_number, h.par, h.yardage, h.handicap) for h in row.holes],
                )
                hole_count += len(row.holes)

        print(f"  [Store] Course #{course_id}: {len(rows)} tee boxes, {hole_count} holes")
        return len(rows), hole_count

    def get_detail(self, course_id: int) -> Optional[CourseDetail]:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM courses WHERE id = ?", (course_id,)).fetchone()
            if row is None:
                return None
            tee_rows = conn.execute(
                "SELECT * FROM course_tee_boxes WHERE course_id = ? ORDER BY sort_order",
                (course_id,),
            ).fetchall()
            hole_rows = conn.execute(
                "SELECT h.* FROM course_tee_holes h "
                "JOIN course_tee_boxes t ON t.id = h.tee_box_id "
                "WHERE t.course_id = ? ORDER BY h.tee_box_id, h.hole_number",
                (course_id,),
            ).fetchall()

        holes_by_tee: dict[int, list[Hole]] = {}
        for h in hole_rows:
            holes_by_tee.setdefault(h["tee_box_id"], []).append(Hole(**dict(h)))

        tees = [
            TeeBoxDetail(**dict(t), holes=holes_by_tee.get(t["id"], []))
            for t in tee_rows
        ]
        return CourseDetail(course=_row_to_course(row), tee_boxes=tees)
