"""Recursive-descent parser for dice expressions.

Every grammar method returns the node it built, or ``None`` after
recording what it expected at the current token. The top level tries
its alternatives in a fixed order (see ``Parser.alternatives``), rewinding the
token position between attempts, and reports the failure that got
furthest into the input. Nesting deeper than ``max_depth`` and literals
with more digits than ``integer_limit`` fail the parse outright.
"""
from __future__ import annotations

import logging
from typing import Callable

from rollbot.config import DiceSettings
from rollbot.dice.errors import ParseError
from rollbot.dice.lexer import Token, TokenType, tokenize
from rollbot.models.expression import (
    BinaryOp,
    BinaryOperator,
    Comparison,
    Condition,
    CustomDie,
    DiceSet,
    Die,
    DieModifier,
    DieOpOption,
    Expression,
    FunctionCall,
    IntLiteral,
    ListLiteral,
    MultipleValues,
    Negate,
    Parenthesised,
    ParsedRoll,
    RollKind,
)

logger = logging.getLogger(__name__)

DIE_WORD = "d"
SELECTION_WORDS = {
    "kh": DieOpOption.KEEP_HIGH,
    "kl": DieOpOption.KEEP_LOW,
    "dh": DieOpOption.DROP_HIGH,
    "dl": DieOpOption.DROP_LOW,
}
FILTER_WORDS = {
    "k": DieOpOption.KEEP_WHERE,
    "d": DieOpOption.DROP_WHERE,
}
REROLL_WORD = "rr"
RESERVED_WORDS = frozenset({DIE_WORD, REROLL_WORD, *SELECTION_WORDS, *FILTER_WORDS})

_COMPARISONS = {c.value: c for c in Comparison}


class Parser:
    def __init__(self, text: str, settings: DiceSettings | None = None):
        self.text = text
        self.settings = settings or DiceSettings()
        self.tokens = tokenize(text)
        self.pos = 0
        self._depth = 0
        self._fail_position = -1
        self._fail_expected: set[str] = set()
        self._fail_found: str | None = None

    # -- Entry point --

    def alternatives(self) -> list[tuple[RollKind, Callable[[], Expression | None]]]:
        """Top-level grammars in the order they are tried.

        The order is the contract for ambiguous input: list-producing forms
        win over a plain arithmetic expression that reads the same text.
        """
        return [
            (RollKind.LIST, self._parse_repeated),
            (RollKind.LIST, self._parse_list_literal),
            (RollKind.LIST, self._parse_call),
            (RollKind.LIST, self._parse_modified_dice),
            (RollKind.SCALAR, self._parse_expr),
        ]

    def parse(self) -> ParsedRoll:
        for kind, alternative in self.alternatives():
            self.pos = 0
            self._depth = 0
            node = alternative()
            if node is not None and self._at_end():
                logger.debug("Parsed %r via %s as %s", self.text, alternative.__name__, kind.value)
                return ParsedRoll(kind=kind, expression=node, source=self.text)
        raise ParseError(self._fail_position, sorted(self._fail_expected), self._fail_found)

    # -- Token helpers --

    def _peek(self) -> Token:
        return self.tokens[self.pos]

    def _advance(self) -> Token:
        tok = self.tokens[self.pos]
        if tok.type is not TokenType.END:
            self.pos += 1
        return tok

    def _peek_next(self) -> Token:
        return self.tokens[min(self.pos + 1, len(self.tokens) - 1)]

    def _descend(self) -> None:
        """Go one level deeper, failing the whole parse past ``max_depth``.

        Callers restore ``_depth`` when they return. The limit keeps both
        this parser and the evaluator's walk well inside the stack.
        """
        self._depth += 1
        limit = self.settings.max_depth
        if self._depth > limit:
            tok = self._peek()
            raise ParseError(
                tok.position,
                (f"at most {limit} levels of nesting",),
                tok.text if tok.type is not TokenType.END else None,
            )

    def _expected(self, *descriptions: str) -> None:
        tok = self._peek()
        if tok.position > self._fail_position:
            self._fail_position = tok.position
            self._fail_expected = set()
            self._fail_found = tok.text if tok.type is not TokenType.END else None
        if tok.position == self._fail_position:
            self._fail_expected.update(descriptions)

    def _accept_symbol(self, *symbols: str) -> Token | None:
        tok = self._peek()
        if tok.is_symbol(*symbols):
            return self._advance()
        self._expected(*(f'"{s}"' for s in symbols))
        return None

    def _at_end(self) -> bool:
        if self._peek().type is TokenType.END:
            return True
        self._expected("end of input")
        return False

    # -- Top-level alternatives --

    def _parse_repeated(self) -> MultipleValues | None:
        count = self._parse_count()
        if count is None or self._accept_symbol("#") is None:
            return None
        if self._peek().is_symbol("{"):
            inner = self._parse_list_literal()
        else:
            inner = self._parse_expr()
        if inner is None:
            return None
        return MultipleValues(count=count, inner=inner)

    def _parse_list_literal(self) -> ListLiteral | None:
        if self._accept_symbol("{") is None:
            return None
        items = self._parse_separated(self._parse_expr, "}")
        if items is None:
            return None
        return ListLiteral(items=tuple(items))

    def _parse_call(self) -> FunctionCall | None:
        tok = self._peek()
        if tok.type is not TokenType.WORD or tok.text in RESERVED_WORDS:
            self._expected("a function name")
            return None
        self._advance()
        if self._accept_symbol("(") is None:
            return None
        if self._peek().is_symbol(")"):
            self._advance()
            return FunctionCall(name=tok.text)
        args = self._parse_separated(self._parse_arg, ")")
        if args is None:
            return None
        return FunctionCall(name=tok.text, args=tuple(args))

    def _parse_modified_dice(self) -> DiceSet | None:
        count = None
        if not self._peek().is_word(DIE_WORD):
            count = self._parse_count()
            if count is None:
                return None
            if not self._peek().is_word(DIE_WORD):
                self._expected('"d"')
                return None
        node = self._parse_dice(count)
        if not isinstance(node, DiceSet) or not node.modifiers:
            self._expected('"kh"', '"kl"', '"dh"', '"dl"', '"k"', '"rr"', '"!"')
            return None
        return node

    # -- Arithmetic --

    def _parse_expr(self) -> Expression | None:
        depth = self._depth
        try:
            self._descend()
            left = self._parse_term()
            if left is None:
                return None
            while True:
                tok = self._accept_symbol("+", "-")
                if tok is None:
                    return left
                # Every operand adds a level to the left-leaning tree.
                self._descend()
                right = self._parse_term()
                if right is None:
                    return None
                left = BinaryOp(BinaryOperator(tok.text), left, right)
        finally:
            self._depth = depth

    def _parse_term(self) -> Expression | None:
        depth = self._depth
        try:
            left = self._parse_negation()
            if left is None:
                return None
            while True:
                tok = self._accept_symbol("*", "/")
                if tok is None:
                    return left
                self._descend()
                right = self._parse_negation()
                if right is None:
                    return None
                left = BinaryOp(BinaryOperator(tok.text), left, right)
        finally:
            self._depth = depth

    def _parse_negation(self) -> Expression | None:
        if not self._peek().is_symbol("-"):
            return self._parse_power()
        self._advance()
        depth = self._depth
        try:
            self._descend()
            inner = self._parse_negation()
        finally:
            self._depth = depth
        return Negate(inner) if inner is not None else None

    def _parse_power(self) -> Expression | None:
        base = self._parse_primary()
        if base is None:
            return None
        if self._accept_symbol("^") is None:
            return base
        depth = self._depth
        try:
            self._descend()
            exponent = self._parse_power()
        finally:
            self._depth = depth
        if exponent is None:
            return None
        return BinaryOp(BinaryOperator.POWER, base, exponent)

    def _parse_primary(self) -> Expression | None:
        tok = self._peek()
        if tok.type is TokenType.INT or tok.is_symbol("("):
            count = self._parse_count()
            if count is None:
                return None
            if self._peek().is_word(DIE_WORD):
                return self._parse_dice(count)
            return count
        if tok.is_word(DIE_WORD):
            return self._parse_dice(None)
        if tok.type is TokenType.WORD and tok.text not in RESERVED_WORDS:
            return self._parse_call()
        self._expected("a number", '"("', '"d"', "a function name")
        return None

    def _parse_count(self) -> Expression | None:
        tok = self._peek()
        if tok.type is TokenType.INT:
            self._check_digits(tok)
            self._advance()
            return IntLiteral(int(tok.text))
        if self._accept_symbol("(") is None:
            self._expected("a number")
            return None
        inner = self._parse_expr()
        if inner is None or self._accept_symbol(")") is None:
            return None
        return Parenthesised(inner)

    def _check_digits(self, tok: Token) -> None:
        """Reject literals too long to ever fit under ``integer_limit``.

        Shorter literals that are still too large fail at evaluation with
        an overflow error.
        """
        max_digits = len(str(self.settings.integer_limit))
        if len(tok.text.lstrip("0")) > max_digits:
            raise ParseError(
                tok.position,
                (f"a number of at most {max_digits} digits",),
                tok.text[:max_digits] + "...",
            )

    def _parse_separated(self, item_parser, closing: str) -> list[Expression] | None:
        depth = self._depth
        try:
            self._descend()
            items = []
            while True:
                item = item_parser()
                if item is None:
                    return None
                items.append(item)
                tok = self._accept_symbol(",", closing)
                if tok is None:
                    return None
                if tok.text == closing:
                    return items
        finally:
            self._depth = depth

    def _parse_arg(self) -> Expression | None:
        if self._peek().is_symbol("{"):
            return self._parse_list_literal()
        start = self.pos
        repeated = self._parse_repeated()
        if repeated is not None:
            return repeated
        self.pos = start
        return self._parse_expr()

    # -- Dice --

    def _parse_dice(self, count: Expression | None) -> Expression | None:
        self._advance()  # the "d"
        die = self._parse_die_spec()
        if die is None:
            return None
        modifiers = self._parse_modifiers()
        if modifiers is None:
            return None
        if count is None and not modifiers:
            return die
        return DiceSet(count=count, die=die, modifiers=tuple(modifiers))

    def _parse_die_spec(self) -> Die | CustomDie | None:
        if self._peek().is_symbol("{"):
            self._advance()
            faces = self._parse_separated(self._parse_expr, "}")
            if faces is None:
                return None
            return CustomDie(faces=tuple(faces))
        sides = self._parse_count()
        if sides is None:
            self._expected('"{"')
            return None
        return Die(sides=sides)

    def _parse_modifiers(self) -> list[DieModifier] | None:
        modifiers: list[DieModifier] = []
        while True:
            tok = self._peek()
            if tok.type is TokenType.WORD and tok.text in SELECTION_WORDS:
                self._advance()
                count = self._parse_count()
                if count is None:
                    return None
                modifiers.append(DieModifier(SELECTION_WORDS[tok.text], count=count))
            elif tok.is_word(REROLL_WORD):
                self._advance()
                condition = self._parse_condition()
                if condition is None:
                    return None
                option = DieOpOption.REROLL_ONCE
                # A "!" straight after the condition always means "reroll until
                # clear", so a single reroll cannot be followed by an explode.
                if self._peek().is_symbol("!"):
                    self._advance()
                    option = DieOpOption.REROLL_RECUR
                modifiers.append(DieModifier(option, condition=condition))
            elif (
                tok.type is TokenType.WORD
                and tok.text in FILTER_WORDS
                and self._peek_next().is_symbol(*_COMPARISONS)
            ):
                # "k" and "d" need an explicit comparison, so "d" stays unambiguous.
                self._advance()
                condition = self._parse_condition()
                if condition is None:
                    return None
                modifiers.append(DieModifier(FILTER_WORDS[tok.text], condition=condition))
            elif tok.is_symbol("!"):
                self._advance()
                condition = None
                if self._peek().is_symbol(*_COMPARISONS):
                    condition = self._parse_condition()
                    if condition is None:
                        return None
                modifiers.append(DieModifier(DieOpOption.EXPLODE, condition=condition))
            else:
                return modifiers

    def _parse_condition(self) -> Condition | None:
        comparison = Comparison.EQ
        if self._peek().is_symbol(*_COMPARISONS):
            comparison = _COMPARISONS[self._advance().text]
        target = self._parse_count()
        if target is None:
            self._expected(*(f'"{c}"' for c in _COMPARISONS))
            return None
        return Condition(comparison, target)


def parse(text: str, settings: DiceSettings | None = None) -> ParsedRoll:
    """Parse ``text`` into a scalar or list roll, raising ``ParseError``."""
    return Parser(text, settings).parse()
