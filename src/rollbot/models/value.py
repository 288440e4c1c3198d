from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union


class ValueKind(str, Enum):
    SCALAR = "scalar"
    LIST = "list"


@dataclass(frozen=True)
class Element:
    value: int
    label: str = ""


@dataclass(frozen=True)
class Scalar:
    value: int

    @property
    def kind(self) -> ValueKind:
        return ValueKind.SCALAR


@dataclass(frozen=True)
class ListValue:
    elements: tuple[Element, ...] = ()

    @property
    def kind(self) -> ValueKind:
        return ValueKind.LIST

    @property
    def values(self) -> list[int]:
        return [e.value for e in self.elements]

    def __len__(self) -> int:
        return len(self.elements)


Value = Union[Scalar, ListValue]


@dataclass
class RollOutcome:
    """Everything a caller needs to display one roll."""

    value: Value
    trace: str
    expression: str = ""
    description: str | None = None
