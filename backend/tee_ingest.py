"""
Catalog tees -> normalized tee box + hole rows.

  - Gender labels ("Ladies", "mens", "M") collapse to male / female / unisex.
  - An 18-hole tee that carries any front/back rating is split into three rows:
      "Blue"            full 18, keeps the front_* / back_* fields
      "Blue (Front 9)"  holes 1-9, rated with the front_* fields
      "Blue (Back 9)"   holes 10-18, rated with the back_* fields
  - Missing totals are summed from the holes; meters = round(yards * 0.9144).
  - Missing stroke indexes are derived from yardage (70%) and par (30%).
  - Rows are ordered by rating, slope, yards (all descending) -> sort_order.
"""

from typing import Optional

from catalog_adapter import INT64_MAX, INT64_MIN
from config import GENDER_ALIASES
from models import CatalogHole, CatalogTee, Gender, Hole, IngestedTee, TeeBox

YARDS_TO_METERS = 0.9144
DEFAULT_TEE_NAME = "Tee"
FRONT_SUFFIX = " (Front 9)"
BACK_SUFFIX = " (Back 9)"

_GENDER_LOOKUP = {alias: gender for gender, aliases in GENDER_ALIASES.items() for alias in aliases}


def normalize_gender(label: str) -> Gender:
    return Gender(_GENDER_LOOKUP.get((label or "").strip().lower(), Gender.UNISEX.value))


def _int(x: Optional[float]) -> Optional[int]:
    if x is None:
        return None
    n = int(round(x))
    # Values that do not fit a SQLite INTEGER are treated as missing
    return n if INT64_MIN <= n <= INT64_MAX else None


def sum_yards(holes: list[CatalogHole]) -> float:
    return sum(h.yardage or 0 for h in holes)


def sum_par(holes: list[CatalogHole]) -> float:
    return sum(h.par or 0 for h in holes)


def yards_to_meters(yards: Optional[float]) -> Optional[int]:
    return None if yards is None else _int(yards * YARDS_TO_METERS)


def derive_stroke_indexes(holes: list[CatalogHole]) -> list[int]:
    """
    Rank holes by difficulty, 1 = hardest. Yardage dominates, par is scaled up
    so a par 5 outranks a par 3 of similar length. Ties keep source order.
    """
    scores = [(h.yardage or 0) * 0.7 + (h.par or 0) * 50 * 0.3 for h in holes]
    order = sorted(range(len(holes)), key=lambda i: -scores[i])
    si = [0] * len(holes)
    for rank, idx in enumerate(order, start=1):
        si[idx] = rank
    return si


def _hole_numbers(holes: list[CatalogHole], renumber: bool) -> list[int]:
    positional = list(range(1, len(holes) + 1))
    if renumber:
        return positional
    numbers = [h.hole_number or pos for h, pos in zip(holes, positional)]
    # Duplicate source numbering would break per-tee uniqueness
    if len(set(numbers)) != len(numbers):
        return positional
    return numbers


def build_holes(holes: list[CatalogHole], renumber: bool = False) -> list[Hole]:
    derived = derive_stroke_indexes(holes)
    numbers = _hole_numbers(holes, renumber)
    return [
        Hole(
            hole_number=numbers[i],
            par=_int(h.par),
            yardage=_int(h.yardage),
            handicap=_int(h.handicap) if h.handicap is not None else derived[i],
        )
        for i, h in enumerate(holes)
    ]


def _half_row(name: str, gender: Gender, holes: list[CatalogHole],
              rating: Optional[float], slope: Optional[float], bogey: Optional[float]) -> IngestedTee:
    yards = _int(sum_yards(holes))
    tee = TeeBox(
        name=name,
        gender=gender,
        yards=yards,
        par=_int(sum_par(holes)),
        rating=rating,
        slope=_int(slope),
        bogey_rating=bogey,
        total_meters=yards_to_meters(yards),
        holes_count=9,
    )
    return IngestedTee(tee=tee, holes=build_holes(holes, renumber=True))


def split_tee(t: CatalogTee, name: str, gender: Gender) -> list[IngestedTee]:
    """Full 18 + Front 9 + Back 9."""
    holes = t.holes
    yards = _int(t.total_yards if t.total_yards is not None else sum_yards(holes))
    full = TeeBox(
        name=name,
        gender=gender,
        yards=yards,
        par=_int(t.par_total if t.par_total is not None else sum_par(holes)),
        rating=t.course_rating,
        slope=_int(t.slope_rating),
        bogey_rating=t.bogey_rating,
        total_meters=_int(t.total_meters) if t.total_meters is not None else yards_to_meters(yards),
        holes_count=_int(t.number_of_holes) if t.number_of_holes is not None else 18,
        front_course_rating=t.front_course_rating,
        front_slope_rating=_int(t.front_slope_rating),
        front_bogey_rating=t.front_bogey_rating,
        back_course_rating=t.back_course_rating,
        back_slope_rating=_int(t.back_slope_rating),
        back_bogey_rating=t.back_bogey_rating,
    )
    return [
        IngestedTee(tee=full, holes=build_holes(holes)),
        _half_row(name + FRONT_SUFFIX, gender, holes[:9],
                  t.front_course_rating, t.front_slope_rating, t.front_bogey_rating),
        _half_row(name + BACK_SUFFIX, gender, holes[9:18],
                  t.back_course_rating, t.back_slope_rating, t.back_bogey_rating),
    ]


def single_tee(t: CatalogTee, name: str, gender: Gender) -> IngestedTee:
    holes = t.holes
    yards = t.total_yards
    if yards is None and holes:
        yards = sum_yards(holes)
    yards = _int(yards)
    par = t.par_total
    if par is None and holes:
        par = sum_par(holes)
    tee = TeeBox(
        name=name,
        gender=gender,
        yards=yards,
        par=_int(par),
        rating=t.course_rating,
        slope=_int(t.slope_rating),
        bogey_rating=t.bogey_rating,
        total_meters=_int(t.total_meters) if t.total_meters is not None else yards_to_meters(yards),
        holes_count=_int(t.number_of_holes) if t.number_of_holes is not None else len(holes),
        front_course_rating=t.front_course_rating,
        front_slope_rating=_int(t.front_slope_rating),
        front_bogey_rating=t.front_bogey_rating,
        back_course_rating=t.back_course_rating,
        back_slope_rating=_int(t.back_slope_rating),
        back_bogey_rating=t.back_bogey_rating,
    )
    return IngestedTee(tee=tee, holes=build_holes(holes))


def _sort_key(row: IngestedTee) -> tuple[float, float, float]:
    t = row.tee
    rating = t.rating if t.rating is not None else -1
    slope = t.slope if t.slope is not None else -1
    yards = t.yards if t.yards is not None else -1
    return (-rating, -slope, -yards)


def build_tee_rows(tees: dict[str, list[CatalogTee]]) -> list[IngestedTee]:
    """All tee rows for one matched course, ordered, with sort_order assigned."""
    rows: list[IngestedTee] = []
    for gender_label, tee_list in tees.items():
        gender = normalize_gender(gender_label)
        for t in tee_list:
            name = (t.name or "").strip() or DEFAULT_TEE_NAME
            if len(t.holes) == 18 and t.has_half_ratings:
                rows.extend(split_tee(t, name, gender))
            else:
                rows.append(single_tee(t, name, gender))

    rows = sorted(rows, key=_sort_key)
    for idx, row in enumerate(rows):
        row.tee.sort_order = idx
    return rows
