"""Tests for src/rollbot/config.py."""
from __future__ import annotations

import pytest
from pydantic import ValidationError

from rollbot.config import CONFIG_ENV_VAR, DEFAULT_CONFIG_PATH, Settings, load_settings


def test_missing_file_gives_defaults(tmp_path):
    settings = load_settings(tmp_path / "nope.toml")
    assert settings == Settings()
    assert settings.dice.reroll_cap == 100
    assert settings.dice.integer_limit == 2**63 - 1
    assert settings.formatting.budget == 199
    assert settings.dice.max_depth == 100


def test_shipped_config_matches_defaults():
    assert DEFAULT_CONFIG_PATH.exists()
    assert load_settings(DEFAULT_CONFIG_PATH) == Settings()


def test_reads_toml(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text('[dice]\nreroll_cap = 5\ndefault_roll = "2d6"\n\n[formatting]\nbudget = 50\n')
    settings = load_settings(path)
    assert settings.dice.reroll_cap == 5
    assert settings.dice.default_roll == "2d6"
    assert settings.dice.max_dice == 1000
    assert settings.formatting.budget == 50


def test_env_var(tmp_path, monkeypatch):
    path = tmp_path / "custom.toml"
    path.write_text("[dice]\nmax_dice = 12\n")
    monkeypatch.setenv(CONFIG_ENV_VAR, str(path))
    assert load_settings().dice.max_dice == 12


@pytest.mark.parametrize("body", [
    "[dice]\nreroll_cap = 0\n",
    "[formatting]\nbudget = -1\n",
    "[formatting]\nbudget = 1\n",
    "[dice]\nmax_depth = 0\n",
    "[dice]\nunknown_key = 1\n",
])
def test_invalid_values(tmp_path, body):
    path = tmp_path / "bad.toml"
    path.write_text(body)
    with pytest.raises(ValidationError):
        load_settings(path)
