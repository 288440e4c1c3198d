"""Tokenizer for dice expressions."""
from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from rollbot.dice.errors import ParseError


class TokenType(str, Enum):
    INT = "int"
    WORD = "word"
    SYMBOL = "symbol"
    END = "end"


@dataclass(frozen=True)
class Token:
    type: TokenType
    text: str
    position: int

    def is_symbol(self, *symbols: str) -> bool:
        return self.type is TokenType.SYMBOL and self.text in symbols

    def is_word(self, *words: str) -> bool:
        return self.type is TokenType.WORD and self.text in words


# Two-character comparisons must be tried before their one-character prefixes.
_TOKEN_RE = re.compile(
    r"(?P<space>\s+)"
    r"|(?P<int>\d+)"
    r"|(?P<word>[A-Za-z]+)"
    r"|(?P<symbol><=|>=|[-+*/^(){},#!<>=])"
)


def tokenize(text: str) -> list[Token]:
    """Split ``text`` into tokens, always ending with an END token.

    Words are lower-cased so ``3D6`` and ``3d6`` read the same.
    """
    tokens: list[Token] = []
    pos = 0
    while pos < len(text):
        m = _TOKEN_RE.match(text, pos)
        if not m:
            raise ParseError(pos, found=text[pos])
        kind = m.lastgroup
        if kind == "int":
            tokens.append(Token(TokenType.INT, m.group(), pos))
        elif kind == "word":
            tokens.append(Token(TokenType.WORD, m.group().lower(), pos))
        elif kind == "symbol":
            tokens.append(Token(TokenType.SYMBOL, m.group(), pos))
        pos = m.end()
    tokens.append(Token(TokenType.END, "", len(text)))
    return tokens
