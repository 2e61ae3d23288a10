"""
Pick one display name when the map record and the catalog disagree.

  OSM "Unnamed Golf Course"  + catalog "Riverside GC Ltd (1012346)" -> "Riverside GC"
  OSM "Royal Oak"            + catalog "Royal Oak Golf Club"        -> "Royal Oak"
  OSM "Course 4471"          + catalog "Hillcrest Golf"             -> "Hillcrest Golf"
"""

import re

from normalizer import clean_catalog_name, is_unnamed, tokenize

_DIGIT = re.compile(r"[0-9]")


def _digit_count(s: str) -> int:
    return len(_DIGIT.findall(s))


def choose_display_name(original_name: str, catalog_name: str) -> str:
    """Fewer embedded digits wins, then fewer tokens, then the original."""
    original = (original_name or "").strip()
    cleaned = clean_catalog_name(catalog_name or "")

    if is_unnamed(original):
        return cleaned or catalog_name or original
    if not cleaned:
        return original or catalog_name

    a_digits, b_digits = _digit_count(original), _digit_count(cleaned)
    if a_digits != b_digits:
        return original if a_digits < b_digits else cleaned

    a_tokens, b_tokens = len(tokenize(original)), len(tokenize(cleaned))
    if a_tokens != b_tokens:
        return original if a_tokens < b_tokens else cleaned

    return original
