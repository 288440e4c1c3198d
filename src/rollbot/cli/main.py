"""Typer CLI application."""
from __future__ import annotations

import logging
import random
from typing import Optional

import typer

app = typer.Typer(
    name="rollbot",
    help="Roll dice expressions and generate stat arrays",
    no_args_is_help=False,
)


def _rng(seed: Optional[int]) -> random.Random | None:
    return random.Random(seed) if seed is not None else None


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log parsing and evaluation details"),
) -> None:
    if verbose:
        from rich.logging import RichHandler

        logging.basicConfig(level=logging.DEBUG, format="%(message)s", handlers=[RichHandler()])


@app.command("roll")
def roll_command(
    expression: Optional[str] = typer.Argument(None, help="Dice expression, e.g. 4d6dl1 + 2"),
    description: Optional[str] = typer.Option(None, "--description", "-d", help="What the roll is for"),
    author: str = typer.Option("You", "--as", help="Name shown as the roller"),
    seed: Optional[int] = typer.Option(None, "--seed", help="Seed for a repeatable roll"),
) -> None:
    """Roll an expression (default: the configured default roll)."""
    from rollbot.cli.display import Display
    from rollbot.config import load_settings
    from rollbot.dice import DiceError, roll

    settings = load_settings()
    display = Display(settings.formatting)
    try:
        outcome = roll(expression, rng=_rng(seed), settings=settings, description=description)
    except DiceError as exc:
        display.show_error(str(exc))
        raise typer.Exit(code=1)
    display.show_roll(outcome, author)


@app.command("genchar")
def genchar_command(
    system: Optional[str] = typer.Argument(None, help="Preset to roll, e.g. dnd or wfrp"),
    author: str = typer.Option("You", "--as", help="Name shown as the roller"),
    seed: Optional[int] = typer.Option(None, "--seed", help="Seed for a repeatable roll"),
) -> None:
    """Generate a stat array for a supported system."""
    from rollbot.cli.display import Display
    from rollbot.config import load_settings
    from rollbot.dice import DiceError, genchar

    settings = load_settings()
    display = Display(settings.formatting)
    try:
        outcome = genchar(system, rng=_rng(seed), settings=settings)
    except DiceError as exc:
        display.show_error(str(exc))
        raise typer.Exit(code=1)
    display.show_roll(outcome, author)


@app.command("functions")
def functions_command() -> None:
    """List the functions usable inside expressions."""
    from rollbot.cli.display import Display

    Display().show_functions()


if __name__ == "__main__":
    app()
