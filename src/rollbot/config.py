"""Settings for the dice engine, loaded from config.toml."""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "config.toml"
CONFIG_ENV_VAR = "ROLLBOT_CONFIG"


class DiceSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    reroll_cap: int = Field(default=100, gt=0)
    max_dice: int = Field(default=1000, gt=0)
    max_die_sides: int = Field(default=1_000_000, gt=0)
    max_list_length: int = Field(default=1000, gt=0)
    integer_limit: int = Field(default=2**63 - 1, gt=0)
    max_depth: int = Field(default=100, gt=0)
    default_roll: str = "1d20"


class FormattingSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    budget: int = Field(default=199, gt=1)
    max_message_length: int = Field(default=2000, gt=0)


class Settings(BaseModel):
    dice: DiceSettings = Field(default_factory=DiceSettings)
    formatting: FormattingSettings = Field(default_factory=FormattingSettings)


def _read_toml(path: Path) -> dict[str, Any]:
    import tomllib

    with open(path, "rb") as f:
        return tomllib.load(f)


def load_settings(path: str | Path | None = None) -> Settings:
    """Load settings from ``path``, $ROLLBOT_CONFIG, or the project root.

    A missing file gives the defaults; a malformed value raises
    ``pydantic.ValidationError``.
    """
    if path is None:
        env_path = os.environ.get(CONFIG_ENV_VAR)
        path = Path(env_path) if env_path else DEFAULT_CONFIG_PATH
    path = Path(path)
    if not path.exists():
        logger.debug("No config at %s, using defaults.", path)
        return Settings()
    data = _read_toml(path)
    logger.debug("Loaded config from %s", path)
    return Settings.model_validate(data)
