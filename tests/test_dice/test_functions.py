"""Tests for src/rollbot/dice/functions.py."""
from __future__ import annotations

import pytest

from rollbot.config import DiceSettings
from rollbot.dice.errors import EvaluationError, EvaluationErrorKind
from rollbot.dice.functions import FUNCTIONS, get_function, supported_functions
from rollbot.models.value import Element, ValueKind


def _call(name, *args, settings=None):
    return get_function(name).apply(list(args), settings or DiceSettings())


def _elements(*values):
    return [Element(v) for v in values]


class TestScalarFunctions:
    @pytest.mark.parametrize("name, args, expected", [
        ("abs", (-4,), 4),
        ("id", (7,), 7),
        ("negate", (7,), -7),
        ("max", (3, 9), 9),
        ("min", (3, 9), 3),
        ("mod", (7, 3), 1),
        ("mod", (-7, 3), 2),
        ("mod", (7, -3), -2),
    ])
    def test_values(self, name, args, expected):
        assert _call(name, *args) == expected

    def test_mod_by_zero(self):
        with pytest.raises(EvaluationError) as exc:
            _call("mod", 5, 0)
        assert exc.value.kind is EvaluationErrorKind.DIVIDE_BY_ZERO


class TestListFunctions:
    def test_sum_and_length(self):
        assert _call("sum", _elements(1, 2, 3)) == 6
        assert _call("sum", []) == 0
        assert _call("length", _elements(4, 4)) == 2

    def test_maximum_minimum(self):
        assert _call("maximum", _elements(2, 8, 5)) == 8
        assert _call("minimum", _elements(2, 8, 5)) == 2

    @pytest.mark.parametrize("name", ["maximum", "minimum"])
    def test_empty(self, name):
        with pytest.raises(EvaluationError) as exc:
            _call(name, [])
        assert exc.value.kind is EvaluationErrorKind.EMPTY_LIST

    def test_sort_is_stable_and_keeps_labels(self):
        items = [Element(3, "a"), Element(1, "b"), Element(3, "c")]
        assert _call("sort", items) == [Element(1, "b"), Element(3, "a"), Element(3, "c")]

    def test_reverse(self):
        assert _call("reverse", _elements(1, 2, 3)) == _elements(3, 2, 1)

    def test_take_and_drop(self):
        items = _elements(1, 2, 3)
        assert _call("take", 2, items) == _elements(1, 2)
        assert _call("take", 10, items) == items
        assert _call("drop", 2, items) == _elements(3)
        assert _call("drop", 10, items) == []

    @pytest.mark.parametrize("name", ["take", "drop"])
    def test_negative_count(self, name):
        with pytest.raises(EvaluationError) as exc:
            _call(name, -1, _elements(1))
        assert exc.value.kind is EvaluationErrorKind.NEGATIVE_COUNT

    def test_between(self):
        assert _call("between", 2, 4) == _elements(2, 3, 4)
        assert _call("between", 4, 2) == []

    def test_between_limit(self):
        with pytest.raises(EvaluationError) as exc:
            _call("between", 1, 11, settings=DiceSettings(max_list_length=10))
        assert exc.value.kind is EvaluationErrorKind.OVERFLOW


class TestRegistry:
    def test_unknown(self):
        with pytest.raises(EvaluationError) as exc:
            get_function("nope")
        assert exc.value.kind is EvaluationErrorKind.UNKNOWN_FUNCTION

    def test_signatures(self):
        signatures = dict(supported_functions())
        assert signatures["max"] == "max(int, int) -> int"
        assert signatures["sum"] == "sum(list) -> int"
        assert signatures["take"] == "take(int, list) -> list"

    def test_listing_matches_registry(self):
        names = [name for name, _ in supported_functions()]
        assert names == list(FUNCTIONS)
        assert names[0] == "abs"

    def test_arity_and_kinds(self):
        fn = FUNCTIONS["between"]
        assert fn.arity == 2
        assert fn.returns is ValueKind.LIST
        assert fn.description
