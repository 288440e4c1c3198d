"""Dice expression evaluator.

Walks a parsed tree and returns ``(value, trace)`` from every node: the
value is what the expression came to, the trace is the human-readable
account of how (which faces came up, which dice were dropped). Both
come out of the same call so they cannot drift apart.

Randomness is always passed in; nothing here touches the global
``random`` state.
"""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass, replace
from typing import Callable

from rollbot.config import DiceSettings
from rollbot.dice.errors import EvaluationError, EvaluationErrorKind
from rollbot.dice.functions import get_function
from rollbot.dice.pretty import pretty
from rollbot.models.expression import (
    BinaryOp,
    BinaryOperator,
    Condition,
    CustomDie,
    DiceSet,
    Die,
    DieModifier,
    DieOpOption,
    Expression,
    FunctionCall,
    IntLiteral,
    ListLiteral,
    MultipleValues,
    Negate,
    Parenthesised,
    ParsedRoll,
    RollKind,
)
from rollbot.models.value import Element, ListValue, Scalar, Value, ValueKind

logger = logging.getLogger(__name__)

# Items of ``N#item`` that keep their own value kind; anything else is
# summed to one number per repetition.
_LIST_ITEMS = (ListLiteral, FunctionCall)


@dataclass(frozen=True)
class DieRoll:
    """One die in a dice set, with everything that happened to it."""

    value: int
    discarded: tuple[int, ...] = ()
    kept: bool = True
    exploded: bool = False

    def fragment(self) -> str:
        parts = [f"~~{v}~~" for v in self.discarded]
        current = str(self.value) if self.kept else f"~~{self.value}~~"
        if self.exploded:
            current += "!"
        parts.append(current)
        return " ".join(parts)

    @property
    def label(self) -> str:
        if self.discarded or self.exploded:
            return self.fragment()
        return ""


@dataclass
class _PreparedDie:
    draw: Callable[[], int]
    highest: int
    trace: str


# -- Modifier folds (pure over the roll sequence) --


def select(rolls: list[DieRoll], option: DieOpOption, n: int) -> list[DieRoll]:
    """Apply keep/drop highest/lowest ``n`` to the rolls still kept.

    Order among equal values follows position, so the choice is stable;
    the returned list keeps every roll in its original position, with the
    losers marked as not kept.
    """
    if n < 0:
        raise EvaluationError(EvaluationErrorKind.NEGATIVE_COUNT, f"{option.value}{n}")
    active = [i for i, r in enumerate(rolls) if r.kept]
    active_set = set(active)
    high_first = option in (DieOpOption.KEEP_HIGH, DieOpOption.DROP_HIGH)
    ordered = sorted(active, key=lambda i: rolls[i].value, reverse=high_first)
    chosen = set(ordered[:n])
    keep_chosen = option in (DieOpOption.KEEP_HIGH, DieOpOption.KEEP_LOW)
    result = []
    for i, r in enumerate(rolls):
        if i in active_set and ((i in chosen) != keep_chosen):
            r = replace(r, kept=False)
        result.append(r)
    return result


def select_where(rolls: list[DieRoll], matches: Callable[[int], bool], keep: bool) -> list[DieRoll]:
    """Keep (or, with ``keep=False``, drop) the kept rolls that match."""
    return [
        r if not r.kept or matches(r.value) == keep else replace(r, kept=False)
        for r in rolls
    ]


def reroll(
    rolls: list[DieRoll],
    matches: Callable[[int], bool],
    draw: Callable[[], int],
    recur: bool,
    cap: int,
) -> list[DieRoll]:
    """Reroll kept dice that match, once or until they stop matching.

    Every replaced value is remembered in ``discarded``. A die that still
    matches after ``cap`` rerolls is an error rather than a silent stop.
    """
    result = []
    for r in rolls:
        if r.kept and matches(r.value):
            if not recur:
                r = replace(r, value=draw(), discarded=r.discarded + (r.value,))
            else:
                attempts = 0
                while matches(r.value):
                    if attempts >= cap:
                        raise EvaluationError(
                            EvaluationErrorKind.REROLL_CAP_EXCEEDED,
                            f"still matching after {cap} rerolls",
                        )
                    r = replace(r, value=draw(), discarded=r.discarded + (r.value,))
                    attempts += 1
        result.append(r)
    return result


def explode(
    rolls: list[DieRoll],
    matches: Callable[[int], bool],
    draw: Callable[[], int],
    cap: int,
) -> list[DieRoll]:
    """Add an extra die after every kept die that matches, chaining."""
    result = []
    for r in rolls:
        if not (r.kept and matches(r.value)):
            result.append(r)
            continue
        chain = 0
        while r.kept and matches(r.value):
            if chain >= cap:
                raise EvaluationError(
                    EvaluationErrorKind.REROLL_CAP_EXCEEDED,
                    f"exploded more than {cap} times",
                )
            result.append(replace(r, exploded=True))
            r = DieRoll(draw())
            chain += 1
        result.append(r)
    return result


class Evaluator:
    def __init__(self, rng: random.Random | None = None, settings: DiceSettings | None = None):
        self.rng = rng if rng is not None else random.Random()
        self.settings = settings or DiceSettings()

    # -- Entry points --

    def evaluate_roll(self, parsed: ParsedRoll) -> tuple[Value, str]:
        if parsed.kind is RollKind.SCALAR:
            value, trace = self.scalar(parsed.expression)
            result: Value = Scalar(value)
        else:
            result, trace = self.evaluate(parsed.expression)
        logger.debug("Evaluated %r -> %r", parsed.source, result)
        return result, trace

    def evaluate(self, node: Expression) -> tuple[Value, str]:
        """The node's natural value: a list for dice sets and list forms."""
        if isinstance(node, IntLiteral):
            return Scalar(self._check(node.value)), str(node.value)
        if isinstance(node, Parenthesised):
            value, trace = self.evaluate(node.inner)
            return value, f"({trace})"
        if isinstance(node, DiceSet):
            rolls, trace = self._roll_dice_set(node)
            elements = tuple(Element(r.value, r.label) for r in rolls if r.kept)
            return ListValue(elements), trace
        if isinstance(node, FunctionCall):
            return self._call(node)
        if isinstance(node, ListLiteral):
            return self._list_literal(node)
        if isinstance(node, MultipleValues):
            return self._repeat(node)
        if isinstance(node, (BinaryOp, Negate, Die, CustomDie)):
            value, trace = self.scalar(node)
            return Scalar(value), trace
        raise TypeError(f"Not a dice expression node: {node!r}")

    def scalar(self, node: Expression, context: str = "") -> tuple[int, str]:
        """Evaluate ``node`` where a single number is needed.

        Dice sets are summed; any other list is an argument-kind error.
        """
        if isinstance(node, BinaryOp):
            return self._binary(node)
        if isinstance(node, Negate):
            value, trace = self.scalar(node.inner)
            return self._check(-value), f"-{trace}"
        if isinstance(node, Parenthesised):
            value, trace = self.scalar(node.inner, context)
            return value, f"({trace})"
        if isinstance(node, (Die, CustomDie)):
            prepared = self._prepare_die(node)
            value = prepared.draw()
            return value, f"{prepared.trace} [{value}]"
        if isinstance(node, DiceSet):
            rolls, trace = self._roll_dice_set(node)
            return self._check(sum(r.value for r in rolls if r.kept)), trace
        value, trace = self.evaluate(node)
        if not isinstance(value, Scalar):
            where = f" for {context}" if context else ""
            raise EvaluationError(
                EvaluationErrorKind.ARGUMENT_KIND_MISMATCH,
                f"expected a number{where}, got a list from {pretty(node)}",
            )
        return value.value, trace

    def list_value(self, node: Expression, context: str = "") -> tuple[ListValue, str]:
        """Evaluate ``node`` where a list is needed."""
        value, trace = self.evaluate(node)
        if not isinstance(value, ListValue):
            where = f" for {context}" if context else ""
            raise EvaluationError(
                EvaluationErrorKind.ARGUMENT_KIND_MISMATCH,
                f"expected a list{where}, got a number from {pretty(node)}",
            )
        return value, trace

    # -- Arithmetic --

    def _binary(self, node: BinaryOp) -> tuple[int, str]:
        left, left_trace = self.scalar(node.left)
        right, right_trace = self.scalar(node.right)
        op = node.op
        if op is BinaryOperator.ADD:
            result = left + right
        elif op is BinaryOperator.SUBTRACT:
            result = left - right
        elif op is BinaryOperator.MULTIPLY:
            result = left * right
        elif op is BinaryOperator.DIVIDE:
            result = self._divide(left, right)
        else:
            result = self._power(left, right)
        if op is BinaryOperator.POWER:
            trace = f"{left_trace}^{right_trace}"
        else:
            trace = f"{left_trace} {op.value} {right_trace}"
        return self._check(result), trace

    @staticmethod
    def _divide(left: int, right: int) -> int:
        if right == 0:
            raise EvaluationError(EvaluationErrorKind.DIVIDE_BY_ZERO, f"{left} / 0")
        quotient = abs(left) // abs(right)
        # Truncate toward zero.
        return quotient if (left >= 0) == (right > 0) else -quotient

    def _power(self, base: int, exponent: int) -> int:
        if exponent < 0:
            raise EvaluationError(EvaluationErrorKind.NEGATIVE_EXPONENT, f"{base}^{exponent}")
        if abs(base) > 1 and (abs(base).bit_length() - 1) * exponent > self.settings.integer_limit.bit_length():
            raise EvaluationError(EvaluationErrorKind.OVERFLOW, f"{base}^{exponent}")
        return base ** exponent

    def _check(self, value: int) -> int:
        if abs(value) > self.settings.integer_limit:
            raise EvaluationError(EvaluationErrorKind.OVERFLOW, f"{value} is over {self.settings.integer_limit}")
        return value

    # -- Dice --

    def _prepare_die(self, die: Die | CustomDie) -> _PreparedDie:
        if isinstance(die, CustomDie):
            if not die.faces:
                raise EvaluationError(EvaluationErrorKind.EMPTY_LIST, "a custom die needs at least one face")
            faces: list[int] = []
            traces: list[str] = []
            for face in die.faces:
                value, trace = self.scalar(face)
                faces.append(value)
                traces.append(trace)
            return _PreparedDie(
                draw=lambda: faces[self.rng.randrange(len(faces))],
                highest=max(faces),
                trace="d{" + ", ".join(traces) + "}",
            )
        sides, sides_trace = self.scalar(die.sides)
        if sides <= 0:
            raise EvaluationError(EvaluationErrorKind.NEGATIVE_OR_ZERO_DIE_SIDES, f"d{sides}")
        if sides > self.settings.max_die_sides:
            raise EvaluationError(
                EvaluationErrorKind.OVERFLOW,
                f"d{sides} has more than {self.settings.max_die_sides} sides",
            )
        return _PreparedDie(
            draw=lambda: self.rng.randint(1, sides),
            highest=sides,
            trace=f"d{sides_trace}",
        )

    def _roll_dice_set(self, node: DiceSet) -> tuple[list[DieRoll], str]:
        """Roll every die, fold the modifiers over them, and trace it.

        The returned rolls include dropped dice (``kept=False``) so the
        trace can show them.
        """
        if node.count is None:
            count, count_trace = 1, ""
        else:
            count, count_trace = self.scalar(node.count)
        if count < 0:
            raise EvaluationError(EvaluationErrorKind.NEGATIVE_COUNT, f"cannot roll {count} dice")
        if count > self.settings.max_dice:
            raise EvaluationError(
                EvaluationErrorKind.OVERFLOW,
                f"cannot roll more than {self.settings.max_dice} dice",
            )
        prepared = self._prepare_die(node.die)
        rolls = [DieRoll(prepared.draw()) for _ in range(count)]
        modifier_traces = []
        for modifier in node.modifiers:
            rolls, modifier_trace = self._apply_modifier(modifier, rolls, prepared)
            modifier_traces.append(modifier_trace)
        fragments = ", ".join(r.fragment() for r in rolls)
        trace = f"{count_trace}{prepared.trace}{''.join(modifier_traces)} [{fragments}]"
        return rolls, trace

    def _apply_modifier(
        self,
        modifier: DieModifier,
        rolls: list[DieRoll],
        prepared: _PreparedDie,
    ) -> tuple[list[DieRoll], str]:
        option = modifier.option
        cap = self.settings.reroll_cap
        if option.is_selection:
            n, n_trace = self.scalar(modifier.count)
            return select(rolls, option, n), f"{option.value}{n_trace}"
        if option.is_filter:
            matches, cond_trace = self._condition(modifier.condition)
            keep = option is DieOpOption.KEEP_WHERE
            return select_where(rolls, matches, keep), f"{option.value}{cond_trace}"
        if option is DieOpOption.EXPLODE:
            if modifier.condition is None:
                highest = prepared.highest
                return explode(rolls, lambda v: v == highest, prepared.draw, cap), "!"
            matches, cond_trace = self._condition(modifier.condition)
            return explode(rolls, matches, prepared.draw, cap), f"!{cond_trace}"
        matches, cond_trace = self._condition(modifier.condition)
        recur = option is DieOpOption.REROLL_RECUR
        trace = f"rr{cond_trace}" + ("!" if recur else "")
        return reroll(rolls, matches, prepared.draw, recur, cap), trace

    def _condition(self, condition: Condition) -> tuple[Callable[[int], bool], str]:
        target, target_trace = self.scalar(condition.target)
        comparison = condition.comparison
        return (lambda v: comparison.matches(v, target)), f"{comparison.value}{target_trace}"

    # -- Functions and lists --

    def _call(self, node: FunctionCall) -> tuple[Value, str]:
        fn = get_function(node.name)
        if len(node.args) != fn.arity:
            raise EvaluationError(
                EvaluationErrorKind.ARITY_MISMATCH,
                f"{fn.name} takes {fn.arity} argument(s), got {len(node.args)}",
            )
        args = []
        traces = []
        for kind, arg in zip(fn.parameters, node.args):
            if kind is ValueKind.SCALAR:
                value, trace = self.scalar(arg, context=fn.name)
                args.append(value)
            else:
                list_value, trace = self.list_value(arg, context=fn.name)
                args.append(list(list_value.elements))
            traces.append(trace)
        result = fn.apply(args, self.settings)
        trace = f"{fn.name}({', '.join(traces)})"
        if fn.returns is ValueKind.SCALAR:
            return Scalar(self._check(result)), trace
        return ListValue(tuple(result)), trace

    def _list_literal(self, node: ListLiteral) -> tuple[ListValue, str]:
        elements = []
        for item in node.items:
            value, trace = self.scalar(item)
            elements.append(Element(value, _label(value, trace)))
        return ListValue(tuple(elements)), pretty(node)

    def _repeat(self, node: MultipleValues) -> tuple[ListValue, str]:
        count, count_trace = self.scalar(node.count)
        limit = self.settings.max_list_length
        if count < 0:
            raise EvaluationError(EvaluationErrorKind.NEGATIVE_COUNT, f"cannot repeat {count} times")
        if count > limit:
            raise EvaluationError(EvaluationErrorKind.OVERFLOW, f"cannot make more than {limit} values")
        elements: list[Element] = []
        for _ in range(count):
            if isinstance(node.inner, _LIST_ITEMS):
                value, trace = self.evaluate(node.inner)
            else:
                number, trace = self.scalar(node.inner)
                value = Scalar(number)
            if isinstance(value, Scalar):
                elements.append(Element(value.value, _label(value.value, trace)))
            else:
                elements.extend(value.elements)
            if len(elements) > limit:
                raise EvaluationError(EvaluationErrorKind.OVERFLOW, f"cannot make more than {limit} values")
        return ListValue(tuple(elements)), f"{count_trace}#{pretty(node.inner)}"


def _label(value: int, trace: str) -> str:
    """A list element's label: its trace, unless that is just the number."""
    return "" if trace == str(value) else trace


def evaluate(
    roll: ParsedRoll | Expression,
    rng: random.Random | None = None,
    settings: DiceSettings | None = None,
) -> tuple[Value, str]:
    """Evaluate a parsed roll (or a bare node) with a fresh evaluator."""
    evaluator = Evaluator(rng, settings)
    if isinstance(roll, ParsedRoll):
        return evaluator.evaluate_roll(roll)
    return evaluator.evaluate(roll)
