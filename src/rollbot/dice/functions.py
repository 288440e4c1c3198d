"""Functions callable from dice expressions, e.g. ``max(1d20, 1d20)``.

Each entry declares the kind of every parameter so the evaluator can
check arity and scalar/list arguments before calling ``apply``. List
arguments arrive as lists of ``Element`` so labels survive reordering.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

from rollbot.config import DiceSettings
from rollbot.dice.errors import EvaluationError, EvaluationErrorKind
from rollbot.models.value import Element, ValueKind

INT = ValueKind.SCALAR
LIST = ValueKind.LIST


@dataclass(frozen=True)
class DiceFunction:
    name: str
    parameters: tuple[ValueKind, ...]
    returns: ValueKind
    apply: Callable[[list[Any], DiceSettings], Any]
    description: str = ""

    @property
    def arity(self) -> int:
        return len(self.parameters)

    @property
    def signature(self) -> str:
        params = ", ".join(_KIND_NAMES[p] for p in self.parameters)
        return f"{self.name}({params}) -> {_KIND_NAMES[self.returns]}"


_KIND_NAMES = {INT: "int", LIST: "list"}


def _values(elements: list[Element]) -> list[int]:
    return [e.value for e in elements]


def _non_empty(name: str, elements: list[Element]) -> list[int]:
    if not elements:
        raise EvaluationError(EvaluationErrorKind.EMPTY_LIST, f"{name} needs at least one value")
    return _values(elements)


def _non_negative(name: str, n: int) -> int:
    if n < 0:
        raise EvaluationError(EvaluationErrorKind.NEGATIVE_COUNT, f"{name} got {n}")
    return n


def _mod(args: list[Any], settings: DiceSettings) -> int:
    a, b = args
    if b == 0:
        raise EvaluationError(EvaluationErrorKind.DIVIDE_BY_ZERO, "mod by zero")
    return a % b


def _between(args: list[Any], settings: DiceSettings) -> list[Element]:
    low, high = args
    if high - low + 1 > settings.max_list_length:
        raise EvaluationError(
            EvaluationErrorKind.OVERFLOW,
            f"between would make more than {settings.max_list_length} values",
        )
    return [Element(v) for v in range(low, high + 1)]


_TABLE: list[DiceFunction] = [
    DiceFunction("abs", (INT,), INT, lambda a, s: abs(a[0]), "absolute value"),
    DiceFunction("id", (INT,), INT, lambda a, s: a[0], "the value unchanged"),
    DiceFunction("negate", (INT,), INT, lambda a, s: -a[0], "the value negated"),
    DiceFunction("max", (INT, INT), INT, lambda a, s: max(a), "the larger value"),
    DiceFunction("min", (INT, INT), INT, lambda a, s: min(a), "the smaller value"),
    DiceFunction("mod", (INT, INT), INT, _mod, "remainder, with the sign of the divisor"),
    DiceFunction("sum", (LIST,), INT, lambda a, s: sum(_values(a[0])), "total of the values"),
    DiceFunction("length", (LIST,), INT, lambda a, s: len(a[0]), "number of values"),
    DiceFunction("maximum", (LIST,), INT, lambda a, s: max(_non_empty("maximum", a[0])), "largest value"),
    DiceFunction("minimum", (LIST,), INT, lambda a, s: min(_non_empty("minimum", a[0])), "smallest value"),
    DiceFunction("sort", (LIST,), LIST, lambda a, s: sorted(a[0], key=lambda e: e.value), "values in ascending order"),
    DiceFunction("reverse", (LIST,), LIST, lambda a, s: list(reversed(a[0])), "values in reverse order"),
    DiceFunction("take", (INT, LIST), LIST, lambda a, s: a[1][: _non_negative("take", a[0])], "the first n values"),
    DiceFunction("drop", (INT, LIST), LIST, lambda a, s: a[1][_non_negative("drop", a[0]):], "all but the first n values"),
    DiceFunction("between", (INT, INT), LIST, _between, "every integer from a to b inclusive"),
]

FUNCTIONS: dict[str, DiceFunction] = {f.name: f for f in _TABLE}


def get_function(name: str) -> DiceFunction:
    fn = FUNCTIONS.get(name)
    if fn is None:
        raise EvaluationError(EvaluationErrorKind.UNKNOWN_FUNCTION, name)
    return fn


def supported_functions() -> list[tuple[str, str]]:
    """(name, signature) for every function, in registration order."""
    return [(f.name, f.signature) for f in _TABLE]
