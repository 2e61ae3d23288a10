"""
Search-query planning for catalog lookups.

The catalog search is a plain text match, so one query rarely covers every spelling.
Queries are tried in order, trading precision for recall:
  1. original  - the map name as given               "Royal Oak Golf Club 2"
  2. cleaned   - noise and generic golf words removed "royal oak 2"
  3. broad     - "golf", letting the geo gate do the work
"""

from enum import Enum
from typing import NamedTuple

from normalizer import tokens_for_query_rewrite

BROAD_QUERY = "golf"


class AttemptStrategy(str, Enum):
    ORIGINAL = "original"
    CLEANED = "cleaned"
    BROAD = "broad"


class QueryAttempt(NamedTuple):
    strategy: AttemptStrategy
    query: str


def plan_queries(name: str) -> list[QueryAttempt]:
    """Ordered, de-duplicated attempts. A query string only appears once (first strategy wins)."""
    original = (name or "").strip()
    cleaned = " ".join(tokens_for_query_rewrite(original)).strip()

    planned: list[QueryAttempt] = []
    if original:
        planned.append(QueryAttempt(AttemptStrategy.ORIGINAL, original))
    if cleaned and cleaned != original:
        planned.append(QueryAttempt(AttemptStrategy.CLEANED, cleaned))
    planned.append(QueryAttempt(AttemptStrategy.BROAD, BROAD_QUERY))

    seen: set[str] = set()
    attempts = []
    for attempt in planned:
        if attempt.query in seen:
            continue
        seen.add(attempt.query)
        attempts.append(attempt)
    return attempts
