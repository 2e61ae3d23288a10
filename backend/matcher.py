"""
Catalog candidate matching and ranking.

For each planned query (see query_planner), candidates are:
  1. geo-gated   - dropped if farther than the active max_km (tighter for unnamed records)
  2. name-gated  - named records only; dropped below min_name_similarity
  3. scored      - distance dominates, name similarity breaks near-ties:
                     unnamed: closeness
                     named:   0.85 * closeness + 0.15 * name_similarity
The best candidate is tracked across all queries, and iteration stops as soon as it
clears the acceptance threshold. A miss is not an error: the outcome carries
best=None plus the per-query diagnostic trail.
"""

from typing import Optional, Protocol

from pydantic import BaseModel

from errors import UpstreamCallError
from models import CatalogCandidate, MatchPolicy, ScoredCandidate
from normalizer import is_unnamed
from query_planner import QueryAttempt, plan_queries
from similarity import clamp01, distance_km, name_similarity

NAME_WEIGHT = 0.15
DISTANCE_WEIGHT = 0.85
DEBUG_TOP_N = 5


class CatalogSearch(Protocol):
    def search(self, query: str) -> list[CatalogCandidate]: ...


class MatchOutcome(BaseModel):
    best: Optional[ScoredCandidate] = None
    unnamed: bool
    max_km: float
    queries: list[str] = []
    debug: list[dict] = []

    @property
    def matched(self) -> bool:
        return self.best is not None


def score_candidate(
    name: str,
    lat: float,
    lng: float,
    candidate: CatalogCandidate,
    unnamed: bool,
    policy: MatchPolicy,
    attempt: QueryAttempt,
) -> Optional[ScoredCandidate]:
    """Score one candidate, or None if it fails a gate."""
    if candidate.lat is None or candidate.lng is None:
        return None

    max_km = policy.max_km(unnamed)
    km = distance_km(lat, lng, candidate.lat, candidate.lng)
    if km > max_km:
        return None

    cand_name = candidate.display_name
    ns = 0.0 if unnamed else name_similarity(name, cand_name)
    if not unnamed and ns < policy.min_name_similarity:
        return None

    closeness = clamp01(1 - km / max_km)
    final = closeness if unnamed else DISTANCE_WEIGHT * closeness + NAME_WEIGHT * ns

    return ScoredCandidate(
        candidate=candidate,
        name=cand_name,
        km=km,
        name_score=ns,
        final_score=final,
        query=attempt.query,
        strategy=attempt.strategy.value,
    )


def _rank_key(s: ScoredCandidate) -> tuple[float, float]:
    return (-s.final_score, s.km)


class CandidateMatcher:
    """Drives catalog lookups across the planned queries and picks the global best."""

    def __init__(self, catalog: CatalogSearch, policy: MatchPolicy):
        self.catalog = catalog
        self.policy = policy

    def match(self, name: str, lat: float, lng: float) -> MatchOutcome:
        unnamed = is_unnamed(name)
        attempts = plan_queries(name)
        outcome = MatchOutcome(
            unnamed=unnamed,
            max_km=self.policy.max_km(unnamed),
            queries=[a.query for a in attempts],
        )
        accept = self.policy.min_final(unnamed)

        for attempt in attempts:
            try:
                candidates = self.catalog.search(attempt.query)
            except UpstreamCallError as e:
                outcome.debug.append({"query": attempt.query, "strategy": attempt.strategy.value, **e.as_debug()})
                continue

            if not candidates:
                outcome.debug.append({
                    "query": attempt.query,
                    "strategy": attempt.strategy.value,
                    "resultsCount": 0,
                    "top": [],
                })
                continue

            scored = []
            for c in candidates:
                s = score_candidate(name, lat, lng, c, unnamed, self.policy, attempt)
                if s is not None:
                    scored.append(s)
            scored.sort(key=_rank_key)

            outcome.debug.append({
                "query": attempt.query,
                "strategy": attempt.strategy.value,
                "resultsCount": len(candidates),
                "top": [s.as_debug() for s in scored[:DEBUG_TOP_N]],
            })

            if scored and (outcome.best is None or _rank_key(scored[0]) < _rank_key(outcome.best)):
                outcome.best = scored[0]

            if outcome.best is not None and outcome.best.final_score >= accept:
                break

        if outcome.best is None:
            print(f"  [Matcher] No match for '{name}' after {len(attempts)} queries")
        else:
            b = outcome.best
            print(
                f"  [Matcher] '{name}' -> '{b.name}' "
                f"({b.km:.2f} km, score {b.final_score:.3f}, query '{b.query}')"
            )
        return outcome
