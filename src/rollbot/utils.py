"""Shared utility functions for rollbot."""
from __future__ import annotations


def format_list(items: list[str], conjunction: str) -> str:
    """Join items with commas and ``conjunction`` before the last one.

    Two items get no comma ("a or b"); three or more get a serial comma
    ("a, b, or c").
    """
    if not items:
        return ""
    if len(items) == 1:
        return items[0]
    if len(items) == 2:
        return f"{items[0]} {conjunction} {items[1]}"
    return ", ".join(items[:-1]) + f", {conjunction} {items[-1]}"


def format_list_and(items: list[str]) -> str:
    return format_list(items, "and")


def format_list_or(items: list[str]) -> str:
    return format_list(items, "or")
