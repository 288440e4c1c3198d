"""Turn a roll outcome into the message shown to the player."""
from __future__ import annotations

import logging

from rollbot.config import FormattingSettings
from rollbot.models.value import Element, ListValue, RollOutcome, Scalar, Value

logger = logging.getLogger(__name__)

PLACEHOLDER_LABEL = "..."
UNDISPLAYABLE = "[could not display rolls]"


def count_formatting(text: str) -> int:
    """Weighted count of markup characters: backticks cost 2, ~ _ * cost 1, per 4."""
    weight = 0
    for c in text:
        if c == "`":
            weight += 2
        elif c in "~_*":
            weight += 1
    return weight // 4


def code(text: str) -> str:
    return f"`{text}`"


def simplify(value: Value) -> Value:
    """Replace every list label with a placeholder, keeping the numbers."""
    if isinstance(value, ListValue):
        return ListValue(tuple(Element(e.value, PLACEHOLDER_LABEL) for e in value.elements))
    return value


def strip_markup(text: str) -> str:
    """``text`` without any character that counts toward the budget."""
    return "".join(c for c in text if c not in "`~_*")


def strip_labels(value: Value) -> Value:
    if isinstance(value, ListValue):
        return ListValue(tuple(Element(e.value) for e in value.elements))
    return value


class RollFormatter:
    def __init__(self, settings: FormattingSettings | None = None):
        self.settings = settings or FormattingSettings()

    def header(self, author: str, description: str | None = None) -> str:
        if description:
            return f'{author} rolled "{description}": '
        return f"{author} rolled: "

    def make_line(self, element: Element) -> str:
        shown = str(element.value)
        padding = " " * max(0, 6 - len(shown))
        return f"{code(shown)}{padding} ⟵ {element.label}"

    def make_message(self, header: str, value: Value, trace: str) -> str:
        if isinstance(value, Scalar):
            return f"{header}{trace}.\nOutput: {value.value}"
        if not value.elements:
            return f"{header}No output."
        if all(not e.label for e in value.elements):
            values = ", ".join(str(v) for v in value.values)
            return f"{header}{code(trace)}\nOutput: {{{values}}}"
        lines = "\n  ".join(self.make_line(e) for e in value.elements)
        return f"{header}{code(trace)}\n  {lines}"

    def fits(self, message: str) -> bool:
        return count_formatting(message) < self.settings.budget

    def render(self, outcome: RollOutcome, author: str = "You") -> str:
        """Full message, falling back to simpler forms when over budget.

        The first fallback swaps the trace for the expression itself and
        every label for a placeholder. The last one drops labels and the
        expression too, leaving only the numbers, and strips markup from
        the header so a description cannot push it over budget.
        """
        header = self.header(author, outcome.description)
        marker = UNDISPLAYABLE if isinstance(outcome.value, ListValue) else code(UNDISPLAYABLE)
        message = self.make_message(header, outcome.value, outcome.trace)
        if not self.fits(message):
            logger.info(
                "Roll of %r is over the formatting budget (%d), simplifying.",
                outcome.expression, self.settings.budget,
            )
            message = self.make_message(header, simplify(outcome.value), f"{outcome.expression} {marker}")
        if not self.fits(message):
            message = self.make_message(strip_markup(header), strip_labels(outcome.value), marker)
        return self.truncate(message)

    def truncate(self, message: str) -> str:
        limit = self.settings.max_message_length
        if len(message) <= limit:
            return message
        return message[: limit - 1] + "…"
