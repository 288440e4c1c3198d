"""Exceptions raised while parsing or evaluating dice expressions."""
from __future__ import annotations

from enum import Enum

from rollbot.utils import format_list_or


class DiceError(ValueError):
    """Base class for every user-facing dice failure."""


class ParseError(DiceError):
    """The text is not a dice expression.

    ``position`` is the character offset of the furthest point any grammar
    alternative reached; ``expected`` lists what would have been accepted
    there.
    """

    def __init__(self, position: int, expected: list[str] | tuple[str, ...] = (), found: str | None = None):
        self.position = position
        self.expected = tuple(sorted(set(expected)))
        self.found = found
        super().__init__(self._build_message())

    def _build_message(self) -> str:
        msg = f"did not understand expression at position {self.position}"
        if self.expected:
            msg += f": expected {format_list_or(list(self.expected))}"
        if self.found is None:
            msg += "; found end of input"
        else:
            msg += f'; found "{self.found}"'
        return msg


class EvaluationErrorKind(str, Enum):
    DIVIDE_BY_ZERO = "divide_by_zero"
    NEGATIVE_OR_ZERO_DIE_SIDES = "negative_or_zero_die_sides"
    NEGATIVE_COUNT = "negative_count"
    NEGATIVE_EXPONENT = "negative_exponent"
    EMPTY_LIST = "empty_list"
    UNKNOWN_FUNCTION = "unknown_function"
    ARITY_MISMATCH = "arity_mismatch"
    ARGUMENT_KIND_MISMATCH = "argument_kind_mismatch"
    REROLL_CAP_EXCEEDED = "reroll_cap_exceeded"
    OVERFLOW = "overflow"


_KIND_MESSAGES = {
    EvaluationErrorKind.DIVIDE_BY_ZERO: "division by zero",
    EvaluationErrorKind.NEGATIVE_OR_ZERO_DIE_SIDES: "a die needs at least one side",
    EvaluationErrorKind.NEGATIVE_COUNT: "count cannot be negative",
    EvaluationErrorKind.NEGATIVE_EXPONENT: "exponent cannot be negative",
    EvaluationErrorKind.EMPTY_LIST: "list is empty",
    EvaluationErrorKind.UNKNOWN_FUNCTION: "unknown function",
    EvaluationErrorKind.ARITY_MISMATCH: "wrong number of arguments",
    EvaluationErrorKind.ARGUMENT_KIND_MISMATCH: "wrong kind of value",
    EvaluationErrorKind.REROLL_CAP_EXCEEDED: "too many rerolls",
    EvaluationErrorKind.OVERFLOW: "number too large",
}


class EvaluationError(DiceError):
    """A well-formed expression that cannot be evaluated."""

    def __init__(self, kind: EvaluationErrorKind, detail: str = ""):
        self.kind = kind
        self.detail = detail
        msg = _KIND_MESSAGES[kind]
        if detail:
            msg = f"{msg}: {detail}"
        super().__init__(msg)
