"""
Name similarity and great-circle distance.
"""

from math import asin, cos, radians, sin, sqrt

from normalizer import tokens_for_similarity, tokens_without_noise

EARTH_RADIUS_KM = 6371.0


def jaccard(a: set[str], b: set[str]) -> float:
    if not a or not b:
        return 0.0
    inter = len(a & b)
    union = len(a | b)
    return inter / union if union else 0.0


def name_similarity(a: str, b: str) -> float:
    """
    Token-set Jaccard on the strict profile. A strict score of exactly 0 falls back
    to a relaxed pass that keeps generic golf words, so "The Links" vs "Links Club"
    is not scored as unrelated.
    """
    strict = jaccard(set(tokens_for_similarity(a)), set(tokens_for_similarity(b)))
    if strict > 0:
        return strict
    return jaccard(set(tokens_without_noise(a)), set(tokens_without_noise(b)))


def distance_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Haversine distance in kilometres."""
    d_lat = radians(lat2 - lat1)
    d_lng = radians(lng2 - lng1)
    h = sin(d_lat / 2) ** 2 + cos(radians(lat1)) * cos(radians(lat2)) * sin(d_lng / 2) ** 2
    return 2 * EARTH_RADIUS_KM * asin(min(1.0, sqrt(h)))


def clamp01(x: float) -> float:
    return max(0.0, min(1.0, x))
