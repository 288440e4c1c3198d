"""Stat-array presets for character generation."""
from __future__ import annotations

import random

from rollbot.config import Settings
from rollbot.dice.errors import DiceError
from rollbot.dice.roller import roll
from rollbot.models.value import RollOutcome
from rollbot.utils import format_list_or

# The first entry is the default system.
RPG_SYSTEMS: dict[str, str] = {
    "dnd": "6#4d6dl1",
    "wfrp": "8#(20+1d10)",
}


class UnknownSystemError(DiceError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"unknown system {name!r}; try {format_list_or(list(RPG_SYSTEMS))}")


def default_system() -> str:
    return next(iter(RPG_SYSTEMS))


def genchar(
    system: str | None = None,
    rng: random.Random | None = None,
    settings: Settings | None = None,
) -> RollOutcome:
    """Roll the stat array for ``system`` (default: the first preset)."""
    name = (system or default_system()).lower()
    expression = RPG_SYSTEMS.get(name)
    if expression is None:
        raise UnknownSystemError(name)
    return roll(expression, rng=rng, settings=settings, description=f"genchar for {name}")
