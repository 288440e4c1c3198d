"""Parse, evaluate, and package a roll in one call."""
from __future__ import annotations

import random

from rollbot.config import Settings, load_settings
from rollbot.dice.evaluator import evaluate
from rollbot.dice.parser import parse
from rollbot.dice.pretty import pretty
from rollbot.models.value import RollOutcome


def roll(
    text: str | None = None,
    rng: random.Random | None = None,
    settings: Settings | None = None,
    description: str | None = None,
) -> RollOutcome:
    """Roll ``text``, or the configured default roll when it is blank.

    Raises ``ParseError`` or ``EvaluationError`` (both ``DiceError``).
    """
    settings = settings or load_settings()
    source = text.strip() if text and text.strip() else settings.dice.default_roll
    parsed = parse(source, settings.dice)
    value, trace = evaluate(parsed, rng, settings.dice)
    return RollOutcome(value=value, trace=trace, expression=pretty(parsed), description=description)
