import math

import pytest

from worldforge.rng import (
    clamp01,
    clamp_int,
    clamp_signed,
    mean,
    pick_unique,
    rng01,
    rng_int,
    rng_pick,
    round_half_up,
    weighted_pick,
)
from worldforge.text import ensure_min_unique, slug_token, unique_strings


class TestKeyedDraws:
    """Test the stateless (seed, label) random source."""

    def test_rng01_is_repeatable(self):
        assert rng01(42, "biome:0") == rng01(42, "biome:0")

    def test_rng01_range(self):
        for i in range(200):
            value = rng01(7, f"probe:{i}")
            assert 0.0 <= value < 1.0

    def test_labels_are_independent_streams(self):
        values = {rng01(42, f"stream:{i}") for i in range(50)}
        assert len(values) > 40

    def test_rng_int_bounds_inclusive(self):
        seen = {rng_int(3, f"die:{i}", 1, 3) for i in range(200)}
        assert seen == {1, 2, 3}

    def test_rng_int_swapped_bounds(self):
        for i in range(50):
            assert 2 <= rng_int(3, f"swap:{i}", 5, 2) <= 5

    def test_rng_int_degenerate_span(self):
        assert rng_int(9, "flat", 4, 4) == 4

    def test_rng_pick_empty_pool_raises(self):
        with pytest.raises(ValueError, match="empty pool"):
            rng_pick(1, "x", [])


class TestWeightedPick:
    """Test weighted selection."""

    def test_zero_weight_never_chosen(self):
        for i in range(200):
            assert weighted_pick(11, f"w:{i}", [("never", 0), ("always", 1)]) == "always"

    def test_negative_weight_never_chosen(self):
        for i in range(100):
            assert weighted_pick(11, f"n:{i}", [("a", 2), ("b", -5)]) == "a"

    def test_all_zero_returns_first(self):
        assert weighted_pick(5, "zero", [("first", 0), ("second", 0)]) == "first"

    def test_heavy_weight_dominates(self):
        picks = [weighted_pick(5, f"h:{i}", [("rare", 1), ("common", 99)]) for i in range(200)]
        assert picks.count("common") > 150

    def test_empty_raises(self):
        with pytest.raises(ValueError):
            weighted_pick(1, "x", [])


class TestPickUnique:
    """Test distinct selection from a pool."""

    def test_distinct_entries(self):
        pool = ["a", "b", "c", "d", "e", "f"]
        picked = pick_unique(99, "u", pool, 4)
        assert len(picked) == 4
        assert len(set(picked)) == 4
        assert set(picked) <= set(pool)

    def test_count_clamped_to_pool(self):
        assert sorted(pick_unique(1, "x", ["a", "b"], 5)) == ["a", "b"]

    def test_case_insensitive_dedup(self):
        picked = pick_unique(1, "x", ["Wolf", "wolf", "Bear"], 2)
        assert sorted(p.lower() for p in picked) == ["bear", "wolf"]

    def test_negative_count(self):
        assert pick_unique(1, "x", ["a"], -2) == []


class TestClampAndRound:
    """Test numeric helpers."""

    def test_clamp01(self):
        assert clamp01(-0.5) == 0.0
        assert clamp01(1.5) == 1.0
        assert clamp01(0.25) == 0.25
        assert clamp01(math.nan) == 0.0

    def test_clamp01_infinities(self):
        assert clamp01(math.inf) == 1.0
        assert clamp01(-math.inf) == 0.0

    def test_clamp_int_floors_first(self):
        assert clamp_int(3.9, 0, 5) == 3
        assert clamp_int(-2.5, 0, 5) == 0
        assert clamp_int(12, 0, 5) == 5
        assert clamp_int(math.inf, 1, 9) == 1

    def test_clamp_signed(self):
        assert clamp_signed(-3) == -1.0
        assert clamp_signed(0.4) == 0.4

    def test_round_half_up(self):
        assert round_half_up(0.5) == 1
        assert round_half_up(2.5) == 3
        assert round_half_up(-0.5) == 0
        assert round_half_up(-1.5) == -1

    def test_mean(self):
        assert mean([1, 2, 3]) == 2
        assert mean([], default=0.4) == 0.4


class TestTextHelpers:
    """Test string list helpers."""

    def test_unique_strings_keeps_first_spelling(self):
        assert unique_strings(["  Dark ", "dark", "", "Grim"]) == ["Dark", "Grim"]

    def test_ensure_min_unique_pads(self):
        assert ensure_min_unique(["a"], 3, ["a", "b", "c", "d"]) == ["a", "b", "c"]

    def test_ensure_min_unique_leaves_long_lists(self):
        assert ensure_min_unique(["a", "b", "c"], 2, ["z"]) == ["a", "b", "c"]

    def test_slug_token(self):
        assert slug_token("Iron Lantern Order") == "iron_lantern_order"
        assert slug_token("ex-temple courier") == "ex_temple_courier"
        assert slug_token("!!!") == "token"
