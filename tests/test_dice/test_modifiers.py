"""Tests for the keep/drop, reroll and explode folds in src/rollbot/dice/evaluator.py."""
from __future__ import annotations

import itertools
import random

import pytest

from rollbot.dice.errors import EvaluationError, EvaluationErrorKind
from rollbot.dice.evaluator import DieRoll, explode, reroll, select, select_where
from rollbot.models.expression import DieOpOption


def _rolls(*values):
    return [DieRoll(v) for v in values]


def _kept(rolls):
    return [r.value for r in rolls if r.kept]


class TestSelect:
    @pytest.mark.parametrize("option, n, expected", [
        (DieOpOption.KEEP_HIGH, 2, [5, 6]),
        (DieOpOption.KEEP_LOW, 2, [1, 3]),
        (DieOpOption.DROP_HIGH, 1, [1, 5, 3]),
        (DieOpOption.DROP_LOW, 1, [5, 3, 6]),
    ])
    def test_options(self, option, n, expected):
        assert _kept(select(_rolls(1, 5, 3, 6), option, n)) == expected

    def test_positions_preserved(self):
        result = select(_rolls(4, 1, 6), DieOpOption.KEEP_HIGH, 1)
        assert [r.value for r in result] == [4, 1, 6]
        assert [r.kept for r in result] == [False, False, True]

    def test_ties_resolved_by_position(self):
        result = select(_rolls(3, 3, 3), DieOpOption.KEEP_HIGH, 1)
        assert [r.kept for r in result] == [True, False, False]
        result = select(_rolls(3, 3, 3), DieOpOption.DROP_LOW, 1)
        assert [r.kept for r in result] == [False, True, True]

    @pytest.mark.parametrize("n", [0, 1, 2, 4, 7])
    def test_keep_count(self, n):
        result = select(_rolls(2, 8, 4, 4), DieOpOption.KEEP_LOW, n)
        assert len(_kept(result)) == min(n, 4)

    def test_drop_complements_keep(self):
        rng = random.Random(3)
        for _ in range(50):
            rolls = _rolls(*(rng.randint(1, 6) for _ in range(6)))
            for n in range(7):
                kept_high = select(rolls, DieOpOption.KEEP_HIGH, n)
                dropped_low = select(rolls, DieOpOption.DROP_LOW, 6 - n)
                assert sorted(_kept(kept_high)) == sorted(_kept(dropped_low))

    def test_ignores_already_dropped(self):
        rolls = select(_rolls(1, 5, 3, 6), DieOpOption.DROP_LOW, 1)
        result = select(rolls, DieOpOption.KEEP_LOW, 1)
        assert _kept(result) == [3]

    def test_negative(self):
        with pytest.raises(EvaluationError) as exc:
            select(_rolls(1, 2), DieOpOption.KEEP_HIGH, -1)
        assert exc.value.kind is EvaluationErrorKind.NEGATIVE_COUNT


class TestSelectWhere:
    def test_keep_matching(self):
        result = select_where(_rolls(1, 5, 3, 6), lambda v: v > 3, True)
        assert [r.kept for r in result] == [False, True, False, True]

    def test_drop_matching(self):
        result = select_where(_rolls(1, 5, 3, 6), lambda v: v > 3, False)
        assert _kept(result) == [1, 3]

    def test_keep_and_drop_split_the_rolls(self):
        rolls = _rolls(4, 2, 6, 2, 5)
        kept = _kept(select_where(rolls, lambda v: v == 2, True))
        dropped = _kept(select_where(rolls, lambda v: v == 2, False))
        assert sorted(kept + dropped) == sorted(r.value for r in rolls)
        assert kept == [2, 2]

    def test_already_dropped_stay_dropped(self):
        rolls = [DieRoll(6, kept=False), DieRoll(6)]
        result = select_where(rolls, lambda v: v == 6, True)
        assert [r.kept for r in result] == [False, True]


class TestReroll:
    def test_once_rerolls_a_single_time(self):
        draws = iter([1, 4])
        result = reroll(_rolls(1, 6), lambda v: v == 1, lambda: next(draws), False, 100)
        assert [r.value for r in result] == [1, 6]
        assert result[0].discarded == (1,)

    def test_recur_until_clear(self):
        draws = iter([1, 2, 1, 5])
        result = reroll(_rolls(1), lambda v: v <= 2, lambda: next(draws), True, 100)
        assert result[0].value == 5
        assert result[0].discarded == (1, 1, 2, 1)

    def test_nothing_matches(self):
        rolls = _rolls(3, 4)
        result = reroll(rolls, lambda v: v == 1, lambda: pytest.fail("no draw expected"), True, 100)
        assert result == rolls

    def test_cap(self):
        with pytest.raises(EvaluationError) as exc:
            reroll(_rolls(1), lambda v: True, lambda: 1, True, 10)
        assert exc.value.kind is EvaluationErrorKind.REROLL_CAP_EXCEEDED

    def test_fragment(self):
        roll = DieRoll(4, discarded=(1, 2))
        assert roll.fragment() == "~~1~~ ~~2~~ 4"
        assert roll.label == "~~1~~ ~~2~~ 4"


class TestExplode:
    def test_chain(self):
        draws = iter([6, 6, 2])
        result = explode(_rolls(6, 3), lambda v: v == 6, lambda: next(draws), 100)
        assert [r.value for r in result] == [6, 6, 6, 2, 3]
        assert [r.exploded for r in result] == [True, True, True, False, False]

    def test_no_explosion_leaves_rolls(self):
        rolls = _rolls(1, 2, 3)
        assert explode(rolls, lambda v: v == 6, lambda: 6, 100) == rolls

    def test_dropped_dice_do_not_explode(self):
        rolls = [DieRoll(6, kept=False), DieRoll(2)]
        assert explode(rolls, lambda v: v == 6, lambda: 6, 100) == rolls

    def test_cap(self):
        with pytest.raises(EvaluationError) as exc:
            explode(_rolls(6), lambda v: True, lambda: 6, 20)
        assert exc.value.kind is EvaluationErrorKind.REROLL_CAP_EXCEEDED

    def test_fragment(self):
        assert DieRoll(6, exploded=True).fragment() == "6!"
        assert DieRoll(6, kept=False).fragment() == "~~6~~"


class TestDieRollLabel:
    @pytest.mark.parametrize("roll", [DieRoll(3), DieRoll(3, kept=False)])
    def test_plain_rolls_have_no_label(self, roll):
        assert roll.label == ""

    def test_every_combination_renders(self):
        for kept, exploded in itertools.product([True, False], repeat=2):
            fragment = DieRoll(5, (2,), kept, exploded).fragment()
            assert fragment.startswith("~~2~~ ")
