from __future__ import annotations

from rollbot.dice.errors import DiceError, EvaluationError, EvaluationErrorKind, ParseError
from rollbot.dice.evaluator import Evaluator, evaluate
from rollbot.dice.formatter import RollFormatter
from rollbot.dice.functions import supported_functions
from rollbot.dice.genchar import RPG_SYSTEMS, UnknownSystemError, genchar
from rollbot.dice.parser import parse
from rollbot.dice.pretty import pretty
from rollbot.dice.roller import roll

__all__ = [
    "DiceError",
    "EvaluationError",
    "EvaluationErrorKind",
    "ParseError",
    "Evaluator",
    "evaluate",
    "RollFormatter",
    "supported_functions",
    "RPG_SYSTEMS",
    "UnknownSystemError",
    "genchar",
    "parse",
    "pretty",
    "roll",
]
