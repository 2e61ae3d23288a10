"""
Tests for tee_ingest.py: gender mapping, front/back splitting, derived totals,
stroke-index derivation, hole numbering and tee ordering.
"""

import pytest

from conftest import make_holes
from catalog_adapter import parse_candidate
from models import CatalogHole, Gender
from tee_ingest import (
    build_tee_rows,
    derive_stroke_indexes,
    normalize_gender,
    yards_to_meters,
)


def _rows(tees_raw):
    return build_tee_rows(parse_candidate({"tees": tees_raw}).tees)


# =====================================================================
# Gender
# =====================================================================

class TestNormalizeGender:
    @pytest.mark.parametrize("label", ["female", "Women", "womens", "LADIES", "lady", "f", "w"])
    def test_female(self, label):
        assert normalize_gender(label) == Gender.FEMALE

    @pytest.mark.parametrize("label", ["male", "Men", "mens", "M"])
    def test_male(self, label):
        assert normalize_gender(label) == Gender.MALE

    @pytest.mark.parametrize("label", ["", "juniors", "mixed", None])
    def test_other_is_unisex(self, label):
        assert normalize_gender(label) == Gender.UNISEX


# =====================================================================
# Stroke index
# =====================================================================

class TestDeriveStrokeIndexes:
    def test_decreasing_yardage_is_one_to_nine(self):
        holes = [CatalogHole(par=4, yardage=450 - 10 * i) for i in range(9)]
        assert derive_stroke_indexes(holes) == [1, 2, 3, 4, 5, 6, 7, 8, 9]

    def test_longest_hole_is_hardest(self):
        holes = [CatalogHole(par=4, yardage=y) for y in (300, 450, 380)]
        assert derive_stroke_indexes(holes) == [3, 1, 2]

    def test_exact_ties_keep_source_order(self):
        holes = [CatalogHole(par=4, yardage=400) for _ in range(4)]
        assert derive_stroke_indexes(holes) == [1, 2, 3, 4]

    def test_par_contributes(self):
        # 0.7*480 + 15*5 = 411 vs 0.7*500 + 15*3 = 395
        holes = [CatalogHole(par=3, yardage=500), CatalogHole(par=5, yardage=480)]
        assert derive_stroke_indexes(holes) == [2, 1]

    def test_missing_values_count_as_zero(self):
        holes = [CatalogHole(), CatalogHole(par=3, yardage=150)]
        assert derive_stroke_indexes(holes) == [2, 1]

    def test_empty(self):
        assert derive_stroke_indexes([]) == []


# =====================================================================
# Split tees
# =====================================================================

class TestSplitTee:
    def test_three_rows(self, split_tee):
        rows = _rows({"male": [split_tee]})
        names = sorted(r.tee.name for r in rows)
        assert names == ["Blue", "Blue (Back 9)", "Blue (Front 9)"]

    def test_full_row_keeps_half_fields(self, split_tee):
        full = next(r for r in _rows({"male": [split_tee]}) if r.tee.name == "Blue")
        assert full.tee.rating == 74.9
        assert full.tee.slope == 144
        assert full.tee.yards == 6828
        assert full.tee.par == 72
        assert full.tee.holes_count == 18
        assert full.tee.front_course_rating == 37.3
        assert full.tee.back_slope_rating == 148
        assert full.tee.total_meters == yards_to_meters(6828)
        assert [h.hole_number for h in full.holes] == list(range(1, 19))

    def test_half_rows_use_half_ratings(self, split_tee):
        rows = {r.tee.name: r for r in _rows({"male": [split_tee]})}
        front, back = rows["Blue (Front 9)"], rows["Blue (Back 9)"]

        assert front.tee.rating == 37.3
        assert front.tee.slope == 140
        assert front.tee.bogey_rating == 50.1
        assert back.tee.rating == 37.6
        assert back.tee.slope == 148

        for half in (front, back):
            assert half.tee.holes_count == 9
            assert half.tee.front_course_rating is None
            assert half.tee.front_slope_rating is None
            assert half.tee.back_course_rating is None
            assert half.tee.back_bogey_rating is None
            assert [h.hole_number for h in half.holes] == list(range(1, 10))

    def test_half_totals_summed_from_holes(self, split_tee):
        rows = {r.tee.name: r for r in _rows({"male": [split_tee]})}
        front_yards = sum(h["yardage"] for h in split_tee["holes"][:9])
        back_par = sum(h["par"] for h in split_tee["holes"][9:])
        assert rows["Blue (Front 9)"].tee.yards == front_yards
        assert rows["Blue (Front 9)"].tee.total_meters == round(front_yards * 0.9144)
        assert rows["Blue (Back 9)"].tee.par == back_par

    def test_back_nine_renumbered_even_with_source_numbers(self, split_tee):
        back = next(r for r in _rows({"male": [split_tee]}) if r.tee.name == "Blue (Back 9)")
        assert back.holes[0].yardage == split_tee["holes"][9]["yardage"]
        assert back.holes[0].hole_number == 1

    def test_split_halves_derive_their_own_stroke_index(self, split_tee):
        rows = {r.tee.name: r for r in _rows({"male": [split_tee]})}
        assert sorted(h.handicap for h in rows["Blue (Front 9)"].holes) == list(range(1, 10))
        assert sorted(h.handicap for h in rows["Blue"].holes) == list(range(1, 19))

    def test_single_half_field_triggers_split(self):
        tee = {"tee_name": "Gold", "back_bogey_rating": 55.0, "holes": make_holes([400] * 18)}
        assert len(_rows({"male": [tee]})) == 3

    def test_no_split_without_eighteen_holes(self):
        tee = {"tee_name": "Gold", "front_course_rating": 35.0, "holes": make_holes([400] * 9)}
        rows = _rows({"male": [tee]})
        assert len(rows) == 1
        assert rows[0].tee.front_course_rating == 35.0

    def test_no_split_without_half_fields(self):
        tee = {"tee_name": "Gold", "course_rating": 70.0, "holes": make_holes([400] * 18)}
        assert len(_rows({"male": [tee]})) == 1


# =====================================================================
# Single tees
# =====================================================================

class TestSingleTee:
    def test_totals_derived_from_holes(self):
        tee = {"tee_name": "White", "holes": make_holes([300, 400, 500], pars=[3, 4, 5])}
        row = _rows({"male": [tee]})[0]
        assert row.tee.yards == 1200
        assert row.tee.par == 12
        assert row.tee.total_meters == round(1200 * 0.9144)
        assert row.tee.holes_count == 3

    def test_source_totals_win(self):
        tee = {"tee_name": "White", "total_yards": 6000, "par_total": 70, "total_meters": 5480,
               "holes": make_holes([300, 400])}
        row = _rows({"male": [tee]})[0]
        assert row.tee.yards == 6000
        assert row.tee.par == 70
        assert row.tee.total_meters == 5480

    def test_zero_holes_is_valid(self):
        tee = {"tee_name": "Yellow", "course_rating": 68.1, "slope_rating": 118}
        row = _rows({"female": [tee]})[0]
        assert row.holes == []
        assert row.tee.holes_count == 0
        assert row.tee.yards is None
        assert row.tee.par is None
        assert row.tee.total_meters is None
        assert row.tee.gender == Gender.FEMALE

    def test_default_tee_name(self):
        row = _rows({"male": [{"tee_name": "   "}]})[0]
        assert row.tee.name == "Tee"

    def test_source_handicap_preferred(self):
        tee = {"tee_name": "W", "holes": make_holes([300, 400, 500], handicaps=[1, 3, 2])}
        row = _rows({"male": [tee]})[0]
        assert [h.handicap for h in row.holes] == [1, 3, 2]

    def test_mixed_source_and_derived_handicap(self):
        holes = make_holes([300, 400, 500])
        holes[0]["handicap"] = 9
        row = _rows({"male": [{"tee_name": "W", "holes": holes}]})[0]
        assert [h.handicap for h in row.holes] == [9, 2, 1]

    def test_source_hole_numbers_used(self):
        row = _rows({"male": [{"tee_name": "W", "holes": make_holes([300, 400], start=10)}]})[0]
        assert [h.hole_number for h in row.holes] == [10, 11]

    def test_positional_numbers_when_missing_or_duplicated(self):
        holes = [{"par": 4, "yardage": 300}, {"hole": 1, "par": 4, "yardage": 320}]
        row = _rows({"male": [{"tee_name": "W", "holes": holes}]})[0]
        assert [h.hole_number for h in row.holes] == [1, 2]

    def test_non_finite_values_become_null(self):
        tee = {"tee_name": "W", "course_rating": "NaN", "slope_rating": "n/a"}
        row = _rows({"male": [tee]})[0]
        assert row.tee.rating is None
        assert row.tee.slope is None

    def test_oversized_integers_become_null(self):
        holes = make_holes([1e19, 400, 380])
        tee = {"tee_name": "W", "slope_rating": 1e30, "holes": holes}
        row = _rows({"male": [tee]})[0]
        assert row.holes[0].yardage is None
        assert row.holes[1].yardage == 400
        assert row.tee.slope is None
        assert row.tee.yards is None
        assert row.tee.total_meters is None
        # Derived stroke index still ranks the huge hole first
        assert row.holes[0].handicap == 1


# =====================================================================
# Ordering
# =====================================================================

class TestOrdering:
    def test_rating_then_slope_then_yards(self):
        tees = {
            "male": [
                {"tee_name": "A", "course_rating": 70.0, "slope_rating": 120, "total_yards": 6000},
                {"tee_name": "B", "course_rating": 72.0, "slope_rating": 110, "total_yards": 6200},
                {"tee_name": "C", "course_rating": 70.0, "slope_rating": 125, "total_yards": 5900},
                {"tee_name": "D", "course_rating": 70.0, "slope_rating": 125, "total_yards": 6100},
                {"tee_name": "E"},
            ]
        }
        rows = _rows(tees)
        assert [r.tee.name for r in rows] == ["B", "D", "C", "A", "E"]
        assert [r.tee.sort_order for r in rows] == [0, 1, 2, 3, 4]

    def test_stable_for_full_ties(self):
        tees = {"male": [{"tee_name": "X"}, {"tee_name": "Y"}], "female": [{"tee_name": "Z"}]}
        assert [r.tee.name for r in _rows(tees)] == ["X", "Y", "Z"]

    def test_split_rows_ordered_with_others(self, split_tee):
        rows = _rows({"male": [split_tee]})
        assert [r.tee.name for r in rows] == ["Blue", "Blue (Back 9)", "Blue (Front 9)"]

    def test_empty_tees(self):
        assert build_tee_rows({}) == []
