"""Render a syntax tree back to canonical dice notation."""
from __future__ import annotations

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
)


def pretty(node: Expression | ParsedRoll) -> str:
    """Canonical text for ``node``; parsing it again gives the same tree."""
    if isinstance(node, ParsedRoll):
        return pretty(node.expression)
    if isinstance(node, IntLiteral):
        return str(node.value)
    if isinstance(node, Parenthesised):
        return f"({pretty(node.inner)})"
    if isinstance(node, BinaryOp):
        if node.op is BinaryOperator.POWER:
            return f"{pretty(node.left)}^{pretty(node.right)}"
        return f"{pretty(node.left)} {node.op.value} {pretty(node.right)}"
    if isinstance(node, Negate):
        return f"-{pretty(node.inner)}"
    if isinstance(node, Die):
        return f"d{pretty(node.sides)}"
    if isinstance(node, CustomDie):
        return "d{" + ", ".join(pretty(f) for f in node.faces) + "}"
    if isinstance(node, DiceSet):
        count = pretty(node.count) if node.count is not None else ""
        mods = "".join(pretty_modifier(m) for m in node.modifiers)
        return f"{count}{pretty(node.die)}{mods}"
    if isinstance(node, FunctionCall):
        return f"{node.name}(" + ", ".join(pretty(a) for a in node.args) + ")"
    if isinstance(node, ListLiteral):
        return "{" + ", ".join(pretty(i) for i in node.items) + "}"
    if isinstance(node, MultipleValues):
        return f"{pretty(node.count)}#{pretty(node.inner)}"
    raise TypeError(f"Not a dice expression node: {node!r}")


def pretty_condition(condition: Condition) -> str:
    return f"{condition.comparison.value}{pretty(condition.target)}"


def pretty_modifier(modifier: DieModifier) -> str:
    option = modifier.option
    if option.is_selection:
        return f"{option.value}{pretty(modifier.count)}"
    if option is DieOpOption.REROLL_ONCE:
        return f"rr{pretty_condition(modifier.condition)}"
    if option is DieOpOption.REROLL_RECUR:
        return f"rr{pretty_condition(modifier.condition)}!"
    if option.is_filter:
        return f"{option.value}{pretty_condition(modifier.condition)}"
    if modifier.condition is None:
        return "!"
    return f"!{pretty_condition(modifier.condition)}"

