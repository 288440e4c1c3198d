"""Rich terminal display for rolls."""
from __future__ import annotations

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from rollbot.config import FormattingSettings
from rollbot.dice.formatter import RollFormatter
from rollbot.dice.functions import FUNCTIONS, supported_functions
from rollbot.dice.genchar import RPG_SYSTEMS
from rollbot.models.value import RollOutcome

console = Console()


class Display:
    def __init__(self, settings: FormattingSettings | None = None, console_: Console | None = None):
        self.console = console_ or console
        self.formatter = RollFormatter(settings)

    def show_roll(self, outcome: RollOutcome, author: str = "You") -> None:
        # Text() so brackets in traces are not read as rich markup.
        message = self.formatter.render(outcome, author)
        self.console.print(Panel(
            Text(message),
            title=outcome.expression,
            border_style="cyan",
            box=box.ROUNDED,
        ))

    def show_error(self, message: str) -> None:
        self.console.print(Text(message, style="bold red"))

    def show_functions(self) -> None:
        table = Table(title="Functions", box=box.SIMPLE)
        table.add_column("Name", style="cyan")
        table.add_column("Signature")
        table.add_column("Description", style="dim")
        for name, signature in supported_functions():
            table.add_row(name, signature, FUNCTIONS[name].description)
        self.console.print(table)
        self.console.print(f"genchar systems: {', '.join(RPG_SYSTEMS)}", style="dim")
