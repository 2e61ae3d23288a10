"""
Course name normalization.

Handles the many ways one course can be spelled across the map database and the catalog:
  - OSM:     "Golf de Saint-Cloud"      Catalog: "Golf De St Cloud"
  - OSM:     "Pebble Beach Golf Links"  Catalog: "Pebble Beach Golf Links (1012346)"
  - OSM:     "Unnamed Golf Course"      Catalog: "Riverside Golf Club Ltd"

Strategy:
  1. Canonical form: strip diacritics, lowercase, punctuation -> space, "st" -> "saint"
  2. Token profiles drop words that carry no identity (noise, generic golf words)
"""

import re
import unicodedata

from config import NOISE_WORDS, GENERIC_GOLF_WORDS, CORPORATE_SUFFIXES

_COMBINING_MARKS = re.compile(r"[\u0300-\u036f]")
_PARENS = re.compile(r"[()]")
_NON_ALNUM = re.compile(r"[^a-z0-9\s]")
_WHITESPACE = re.compile(r"\s+")
_SAINT = re.compile(r"\bst\b")
_NUMERIC = re.compile(r"^[0-9]+$")

# "(1012346)" style reference codes the catalog appends to club names
_PAREN_CODE = re.compile(r"\(\s*[0-9]+\s*\)")
_CORPORATE = re.compile(r"\b(ltd|limited)\b", re.IGNORECASE)


def strip_diacritics(s: str) -> str:
    return _COMBINING_MARKS.sub("", unicodedata.normalize("NFD", s or ""))


def normalize_name(name: str) -> str:
    """
    Canonical form used for every comparison.
    "Golf de Saint-Cloud" -> "golf de saint cloud"
    "St. Andrews (Old)"   -> "saint andrews old"
    "Club de Golf Méndez" -> "club de golf mendez"
    """
    s = strip_diacritics(name).lower()
    s = _PARENS.sub(" ", s)
    s = _NON_ALNUM.sub(" ", s)
    s = _WHITESPACE.sub(" ", s).strip()
    return _SAINT.sub("saint", s)


def tokenize(name: str) -> list[str]:
    return [t for t in normalize_name(name).split(" ") if t]


def is_unnamed(name: str) -> bool:
    """OSM placeholder names carry no identity; matching falls back to distance only."""
    n = normalize_name(name)
    return not n or n == "unnamed golf course" or n.startswith("unnamed")


def tokens_for_similarity(name: str) -> list[str]:
    """Strict profile: noise, generic golf words, corporate suffixes and bare numbers removed."""
    return [
        t for t in tokenize(name)
        if t not in NOISE_WORDS
        and t not in GENERIC_GOLF_WORDS
        and t not in CORPORATE_SUFFIXES
        and not _NUMERIC.match(t)
    ]


def tokens_without_noise(name: str) -> list[str]:
    return [t for t in tokenize(name) if t not in NOISE_WORDS]


def tokens_for_query_rewrite(name: str) -> list[str]:
    """Search profile: numbers and suffixes stay, they can be real search terms."""
    return [
        t for t in tokenize(name)
        if t not in NOISE_WORDS and t not in GENERIC_GOLF_WORDS
    ]


def clean_catalog_name(raw: str) -> str:
    """
    "Riverside Golf Club Ltd (1012346)" -> "Riverside Golf Club"
    """
    s = _PAREN_CODE.sub(" ", raw or "")
    s = _CORPORATE.sub(" ", s)
    return _WHITESPACE.sub(" ", s).strip()
