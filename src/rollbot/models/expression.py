"""Dice expression syntax tree, immutable and built once per parse."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union


class BinaryOperator(str, Enum):
    ADD = "+"
    SUBTRACT = "-"
    MULTIPLY = "*"
    DIVIDE = "/"
    POWER = "^"


class Comparison(str, Enum):
    EQ = "="
    LT = "<"
    GT = ">"
    LE = "<="
    GE = ">="

    def matches(self, value: int, target: int) -> bool:
        if self is Comparison.EQ:
            return value == target
        if self is Comparison.LT:
            return value < target
        if self is Comparison.GT:
            return value > target
        if self is Comparison.LE:
            return value <= target
        return value >= target


class DieOpOption(str, Enum):
    KEEP_HIGH = "kh"
    KEEP_LOW = "kl"
    DROP_HIGH = "dh"
    DROP_LOW = "dl"
    REROLL_ONCE = "rr"
    REROLL_RECUR = "rr!"
    EXPLODE = "!"
    KEEP_WHERE = "k"
    DROP_WHERE = "d"

    @property
    def is_selection(self) -> bool:
        return self in (
            DieOpOption.KEEP_HIGH, DieOpOption.KEEP_LOW,
            DieOpOption.DROP_HIGH, DieOpOption.DROP_LOW,
        )

    @property
    def is_filter(self) -> bool:
        return self in (DieOpOption.KEEP_WHERE, DieOpOption.DROP_WHERE)


class RollKind(str, Enum):
    SCALAR = "scalar"
    LIST = "list"


@dataclass(frozen=True)
class IntLiteral:
    value: int


@dataclass(frozen=True)
class Parenthesised:
    inner: Expression


@dataclass(frozen=True)
class BinaryOp:
    op: BinaryOperator
    left: Expression
    right: Expression


@dataclass(frozen=True)
class Negate:
    inner: Expression


@dataclass(frozen=True)
class Die:
    """A single die; ``sides`` is evaluated at roll time."""

    sides: Expression


@dataclass(frozen=True)
class CustomDie:
    """A die whose faces are listed explicitly, e.g. ``d{1,2,3,10}``."""

    faces: tuple[Expression, ...]


@dataclass(frozen=True)
class Condition:
    comparison: Comparison
    target: Expression


@dataclass(frozen=True)
class DieModifier:
    """One keep/drop/reroll/explode suffix on a dice set.

    Selection options carry ``count``; reroll and filter options (``k>3``,
    ``d<2``) carry ``condition``. An explode with no condition explodes on
    the die's highest face.
    """

    option: DieOpOption
    count: Expression | None = None
    condition: Condition | None = None


@dataclass(frozen=True)
class DiceSet:
    """``NdX`` plus its modifiers, applied left to right.

    ``count`` is ``None`` for the implicit single die of ``d20kh1``.
    """

    count: Expression | None
    die: Die | CustomDie
    modifiers: tuple[DieModifier, ...] = ()


@dataclass(frozen=True)
class FunctionCall:
    name: str
    args: tuple[Expression, ...] = ()


@dataclass(frozen=True)
class ListLiteral:
    items: tuple[Expression, ...]


@dataclass(frozen=True)
class MultipleValues:
    """``N#item``: evaluate ``inner`` ``count`` times and concatenate."""

    count: Expression
    inner: Expression


Expression = Union[
    IntLiteral,
    Parenthesised,
    BinaryOp,
    Negate,
    Die,
    CustomDie,
    DiceSet,
    FunctionCall,
    ListLiteral,
    MultipleValues,
]


@dataclass(frozen=True)
class ParsedRoll:
    """Top-level parse result: which grammar matched and the tree it built."""

    kind: RollKind
    expression: Expression
    source: str = ""
