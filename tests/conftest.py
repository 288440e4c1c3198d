"""Shared fixtures for the rollbot test suite."""
from __future__ import annotations

import random

import pytest

from rollbot.config import DiceSettings, Settings


class ScriptedRandom:
    """Replays fixed draws so a roll's outcome is known in advance.

    ``randint`` hands out the next scripted face; ``randrange`` the next
    scripted index (used by custom dice).
    """

    def __init__(self, values: list[int]):
        self.values = list(values)

    def _next(self) -> int:
        if not self.values:
            raise AssertionError("ran out of scripted draws")
        return self.values.pop(0)

    def randint(self, a: int, b: int) -> int:
        value = self._next()
        assert a <= value <= b, f"scripted {value} outside [{a}, {b}]"
        return value

    def randrange(self, stop: int) -> int:
        value = self._next()
        assert 0 <= value < stop, f"scripted index {value} outside [0, {stop})"
        return value


@pytest.fixture
def scripted():
    return ScriptedRandom


@pytest.fixture
def seeded_rng():
    return random.Random(42)


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def dice_settings() -> DiceSettings:
    return DiceSettings()
