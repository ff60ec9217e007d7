"""Calculation engine — safe arithmetic for calculated (velocity) fields.

Evaluates formulas like ``Running Distance / (Running Time / 60)`` against a
snapshot of field values with a recursive-descent parser. No eval().

Supported: + - * /, unary minus, parentheses, numeric literals, field names.

The public entry points never raise: a missing dependency, a syntax error,
division by zero or a non-finite result all come back as None.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Sequence

import structlog

logger = structlog.get_logger()

_NUMBER_RE = re.compile(r"\d+\.?\d*")
_OPERATORS = "+-*/"
_MAX_NESTING = 100


class CalcError(Exception):
    """Raised inside the engine; evaluate() turns it into None."""


class LexicalError(CalcError):
    pass


class ParseError(CalcError):
    pass


class TokenType(str, Enum):
    number = "number"
    operator = "operator"
    paren_open = "paren_open"
    paren_close = "paren_close"


@dataclass(frozen=True, slots=True)
class Token:
    type: TokenType
    value: float | str | None = None


def _to_number(value: Any) -> float | None:
    """Coerce a snapshot value to float. None when it can't stand in for a number."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


class SymbolTable:
    """Field names known for one evaluation, longest first.

    Greedy longest match keeps "Time" from matching inside "Running Time".
    sorted() is stable, so names of equal length keep mapping order.
    """

    def __init__(self, field_values: Mapping[str, Any]):
        self._values = dict(field_values)
        self._names = sorted((n for n in self._values if isinstance(n, str) and n), key=len, reverse=True)

    def match(self, text: str, pos: int) -> str | None:
        for name in self._names:
            if text.startswith(name, pos):
                return name
        return None

    def value(self, name: str) -> float | None:
        return _to_number(self._values.get(name))


def tokenize(expression: str, field_values: Mapping[str, Any]) -> list[Token] | None:
    """Split an expression into tokens, substituting field values inline.

    Returns None when a referenced field has no value: one missing
    dependency invalidates the whole expression.
    Raises LexicalError on characters that start no token.
    """
    text = expression.strip()
    symbols = SymbolTable(field_values)
    tokens: list[Token] = []
    pos = 0

    while pos < len(text):
        ch = text[pos]

        if ch.isspace():
            pos += 1
            continue

        if ch == "(":
            tokens.append(Token(TokenType.paren_open))
            pos += 1
            continue

        if ch == ")":
            tokens.append(Token(TokenType.paren_close))
            pos += 1
            continue

        if ch in _OPERATORS:
            tokens.append(Token(TokenType.operator, ch))
            pos += 1
            continue

        num = _NUMBER_RE.match(text, pos)
        if num:
            tokens.append(Token(TokenType.number, float(num.group())))
            pos = num.end()
            continue

        name = symbols.match(text, pos)
        if name is None:
            raise LexicalError(f"Unexpected character at position {pos}: {ch!r}")
        value = symbols.value(name)
        if value is None:
            return None
        tokens.append(Token(TokenType.number, value))
        pos += len(name)

    return tokens


class _Parser:
    """Recursive descent over a token list.

    Sub-results are float | None; None (division by zero) poisons every
    enclosing operation but parsing continues so trailing garbage is still
    detected.
    Parenthesis nesting is capped at _MAX_NESTING.
    """

    def __init__(self, tokens: list[Token]):
        self.tokens = tokens
        self.pos = 0
        self.depth = 0

    def peek(self) -> Token | None:
        if self.pos < len(self.tokens):
            return self.tokens[self.pos]
        return None

    def consume(self) -> Token | None:
        token = self.peek()
        self.pos += 1
        return token

    def at_end(self) -> bool:
        return self.pos >= len(self.tokens)

    def parse_expression(self) -> float | None:
        """Expression := Term (('+' | '-') Term)*"""
        left = self.parse_term()
        while True:
            token = self.peek()
            if token is None or token.type is not TokenType.operator or token.value not in ("+", "-"):
                return left
            self.consume()
            right = self.parse_term()
            if left is None or right is None:
                left = None
            elif token.value == "+":
                left = left + right
            else:
                left = left - right

    def parse_term(self) -> float | None:
        """Term := Factor (('*' | '/') Factor)*"""
        left = self.parse_factor()
        while True:
            token = self.peek()
            if token is None or token.type is not TokenType.operator or token.value not in ("*", "/"):
                return left
            self.consume()
            right = self.parse_factor()
            if left is None or right is None:
                left = None
            elif token.value == "*":
                left = left * right
            elif right == 0:
                left = None
            else:
                left = left / right

    def parse_factor(self) -> float | None:
        """Factor := '-'* (NUMBER | '(' Expression ')')"""
        negate = False
        token = self.consume()
        # A run of unary minuses folds into one sign flip
        while token is not None and token.type is TokenType.operator and token.value == "-":
            negate = not negate
            token = self.consume()

        if token is None:
            raise ParseError("Unexpected end of expression")

        if token.type is TokenType.number:
            result = token.value
        elif token.type is TokenType.paren_open:
            if self.depth >= _MAX_NESTING:
                raise ParseError(f"Parentheses nested deeper than {_MAX_NESTING}")
            self.depth += 1
            result = self.parse_expression()
            self.depth -= 1
            closing = self.consume()
            if closing is None or closing.type is not TokenType.paren_close:
                raise ParseError("Missing closing parenthesis")
        else:
            raise ParseError(f"Unexpected token: {token.type.value} {token.value or ''}".rstrip())

        if result is None:
            return None
        return -result if negate else result  # type: ignore[operator,return-value]


def evaluate(expression: str | None, field_values: Mapping[str, Any] | None) -> float | None:
    """Evaluate a calculation formula against a field-value snapshot.

    Returns None when the formula is empty or malformed, references a field
    without a value, divides by zero, or produces a non-finite number.
    """
    if not expression or not isinstance(expression, str):
        return None
    if not isinstance(field_values, Mapping):
        field_values = {}

    try:
        tokens = tokenize(expression, field_values)
        if tokens is None:
            return None
        parser = _Parser(tokens)
        result = parser.parse_expression()
        if not parser.at_end():
            logger.warning("calc_engine_trailing_tokens", expression=expression, position=parser.pos)
            return None
    except CalcError as e:
        logger.warning("calc_engine_error", expression=expression, error=str(e))
        return None

    if result is None or not math.isfinite(result):
        return None
    return result


def get_dependencies(expression: str | None, all_field_names: Sequence[str]) -> list[str]:
    """Field names that appear anywhere in the expression text, in schema order.

    Plain substring containment: a name hidden inside a longer word is still
    reported.
    """
    if not expression or not isinstance(expression, str):
        return []
    return [name for name in all_field_names or () if isinstance(name, str) and name in expression]
