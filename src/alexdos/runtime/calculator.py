"""Arithmetic evaluator for the ``calc`` command.

Accepts decimal numbers, ``+ - * /``, unary signs and parentheses. Anything
else is rejected with :class:`InvalidInputError`; no Python code is evaluated.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum, auto
from typing import List

from ..errors import InvalidInputError


class TokenKind(Enum):
    NUMBER = auto()
    OPERATOR = auto()
    LPAREN = auto()
    RPAREN = auto()
    END = auto()


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    text: str
    position: int


_OPERATORS = frozenset("+-*/")


def tokenize(expression: str) -> List[Token]:
    """Split ``expression`` into tokens, terminated by an ``END`` token."""

    tokens: List[Token] = []
    index = 0
    length = len(expression)
    while index < length:
        char = expression[index]
        if char.isspace():
            index += 1
            continue
        if char in _OPERATORS:
            tokens.append(Token(TokenKind.OPERATOR, char, index))
            index += 1
            continue
        if char == "(":
            tokens.append(Token(TokenKind.LPAREN, char, index))
            index += 1
            continue
        if char == ")":
            tokens.append(Token(TokenKind.RPAREN, char, index))
            index += 1
            continue
        if char.isdigit() or char == ".":
            start = index
            index = _scan_number(expression, index)
            tokens.append(Token(TokenKind.NUMBER, expression[start:index], start))
            continue
        raise InvalidInputError(f"unexpected character {char!r} at position {index + 1}")
    tokens.append(Token(TokenKind.END, "", length))
    return tokens


def _scan_number(text: str, index: int) -> int:
    length = len(text)
    has_digits = False
    while index < length and text[index].isdigit():
        index += 1
        has_digits = True
    if index < length and text[index] == ".":
        index += 1
        while index < length and text[index].isdigit():
            index += 1
            has_digits = True
    if not has_digits:
        raise InvalidInputError("number is missing digits")
    if index < length and text[index] in "eE":
        exponent = index + 1
        if exponent < length and text[exponent] in "+-":
            exponent += 1
        if exponent < length and text[exponent].isdigit():
            index = exponent
            while index < length and text[index].isdigit():
                index += 1
    return index


class ExpressionEvaluator:
    """Recursive-descent evaluator over the token stream."""

    def __init__(self, expression: str) -> None:
        self._expression = expression
        self._tokens = tokenize(expression)
        self._index = 0

    def evaluate(self) -> float:
        if self._peek().kind is TokenKind.END:
            raise InvalidInputError("expression is empty")
        value = self._parse_expression()
        token = self._peek()
        if token.kind is not TokenKind.END:
            if token.kind is TokenKind.RPAREN:
                raise InvalidInputError("expression has unmatched ')'")
            raise InvalidInputError(
                f"unexpected trailing input: {self._expression[token.position:]}"
            )
        return value

    def _peek(self) -> Token:
        return self._tokens[self._index]

    def _advance(self) -> Token:
        token = self._tokens[self._index]
        if token.kind is not TokenKind.END:
            self._index += 1
        return token

    def _match_operator(self, symbol: str) -> bool:
        token = self._peek()
        if token.kind is TokenKind.OPERATOR and token.text == symbol:
            self._advance()
            return True
        return False

    def _parse_expression(self) -> float:
        value = self._parse_term()
        while True:
            if self._match_operator("+"):
                value += self._parse_term()
            elif self._match_operator("-"):
                value -= self._parse_term()
            else:
                return value

    def _parse_term(self) -> float:
        value = self._parse_factor()
        while True:
            if self._match_operator("*"):
                value *= self._parse_factor()
            elif self._match_operator("/"):
                divisor = self._parse_factor()
                if divisor == 0:
                    raise InvalidInputError("division by zero")
                value /= divisor
            else:
                return value

    def _parse_factor(self) -> float:
        if self._match_operator("+"):
            return self._parse_factor()
        if self._match_operator("-"):
            return -self._parse_factor()
        return self._parse_primary()

    def _parse_primary(self) -> float:
        token = self._advance()
        if token.kind is TokenKind.NUMBER:
            return float(token.text)
        if token.kind is TokenKind.LPAREN:
            value = self._parse_expression()
            if self._advance().kind is not TokenKind.RPAREN:
                raise InvalidInputError("expression has unmatched '('")
            return value
        if token.kind is TokenKind.END:
            raise InvalidInputError("expression ended unexpectedly")
        raise InvalidInputError(f"unexpected {token.text!r} at position {token.position + 1}")


def evaluate(expression: str) -> float:
    """Return the value of ``expression``."""

    value = ExpressionEvaluator(expression).evaluate()
    if math.isnan(value) or math.isinf(value):
        raise InvalidInputError("expression produced a non-finite result")
    return value


def format_result(value: float) -> str:
    if value.is_integer():
        return str(int(value))
    return repr(value)


__all__ = [
    "ExpressionEvaluator",
    "Token",
    "TokenKind",
    "evaluate",
    "format_result",
    "tokenize",
]
