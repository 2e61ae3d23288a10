"""
Fuzzy lookup over courses already stored locally.

Handles the many ways a known course gets typed into the search box:
  - Stored:  "Pebble Beach Golf Links"    Query: "pebble beach"
  - Stored:  "Golf de Saint-Cloud"        Query: "st cloud golf"
  - Stored:  "Royal Troon Golf Club"      Query: "Troon Royal"

Strategy:
  1. Normalize with the same canonical form the matcher uses
  2. RapidFuzz token_sort_ratio against every stored name variant, with a threshold
  3. Keep the best-scoring entry per course
"""

from rapidfuzz import fuzz, process

from models import Course
from normalizer import normalize_name

# Minimum fuzzy score to accept a match (0-100)
FUZZY_THRESHOLD = 60


class CourseNameIndex:
    """
    Ranks stored courses against free-text queries.

    Usage:
        index = CourseNameIndex()
        index.build_index(store.list_courses())
        hits = index.search("pebble beach", limit=10)
    """

    def __init__(self, threshold: int = FUZZY_THRESHOLD):
        self.threshold = threshold
        # list of (normalized_name, course) for fuzzy search
        self._corpus: list[tuple[str, Course]] = []

    def build_index(self, courses: list[Course]):
        self._corpus.clear()

        for course in courses:
            for variant in {course.name, course.name_original or course.name}:
                normalized = normalize_name(variant)
                if not normalized:
                    continue
                self._corpus.append((normalized, course))

    def search(self, query: str, limit: int = 10) -> list[tuple[Course, float]]:
        """Courses ranked by fuzzy score, one entry per course."""
        normalized = normalize_name(query)
        if not normalized or not self._corpus:
            return []

        corpus_names = [n for n, _ in self._corpus]
        results = process.extract(
            normalized,
            corpus_names,
            scorer=fuzz.token_sort_ratio,
            score_cutoff=self.threshold,
            limit=None,
        )

        hits: list[tuple[Course, float]] = []
        seen: set[int] = set()
        for _, score, idx in results:
            course = self._corpus[idx][1]
            if course.id in seen:
                continue
            seen.add(course.id)
            hits.append((course, score))
            if len(hits) >= limit:
                break
        return hits
