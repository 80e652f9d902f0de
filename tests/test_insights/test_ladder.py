"""Tests for ThresholdLadder: first-match evaluation, catch-all, rung ordering."""

from __future__ import annotations

import pytest

from bfcm_report.insights.ladder import ThresholdLadder, above, at_least


def _grade() -> ThresholdLadder[str]:
    return ThresholdLadder(
        "grade", [(at_least(90), "A"), (at_least(80), "B")], otherwise="F",
    )


class TestThreshold:
    def test_strict_and_inclusive(self):
        assert above(10)(10.01)
        assert not above(10)(10)
        assert at_least(10)(10)
        assert not at_least(10)(9.99)

    def test_str(self):
        assert str(above(2.5)) == "> 2.5"
        assert str(at_least(90)) == ">= 90"


class TestLadder:
    def test_first_match_wins(self):
        assert _grade().evaluate(95) == "A"
        assert _grade().evaluate(90) == "A"
        assert _grade().evaluate(85) == "B"

    def test_catch_all(self):
        assert _grade().evaluate(0) == "F"
        assert _grade().evaluate(-5) == "F"

    def test_rung_index(self):
        ladder = _grade()
        assert ladder.rung_index(99) == 0
        assert ladder.rung_index(80) == 1
        assert ladder.rung_index(10) == 2

    def test_missing_catch_all_rejected(self):
        with pytest.raises(ValueError, match="no catch-all"):
            ThresholdLadder("bad", [(above(1), "x")])

    def test_out_of_order_rejected(self):
        with pytest.raises(ValueError, match="can never match first"):
            ThresholdLadder("bad", [(above(10), "x"), (above(20), "y")], otherwise="z")

    def test_custom_predicates_allowed_anywhere(self):
        ladder = ThresholdLadder(
            "mixed",
            [(lambda v: v == 0, "zero"), (above(10), "big")],
            otherwise="small",
        )
        assert ladder.evaluate(0) == "zero"
        assert ladder.evaluate(11) == "big"
        assert ladder.evaluate(5) == "small"

    def test_none_is_a_valid_catch_all(self):
        ladder = ThresholdLadder("optional", [(above(0), "some")], otherwise=None)
        assert ladder.evaluate(0) is None
