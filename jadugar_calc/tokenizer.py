"""Tokenizer: turns expression text into a flat token list."""

from __future__ import annotations

import re
from typing import NamedTuple

from .types import LexError

NUMBER = "NUMBER"
IDENTIFIER = "IDENTIFIER"
OPERATOR = "OPERATOR"
LPAREN = "LPAREN"
RPAREN = "RPAREN"
COMMA = "COMMA"
END = "END"

_TOKEN_RE = re.compile(
    r"""
    (?P<NUMBER>(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)
    |(?P<IDENTIFIER>[A-Za-z_][A-Za-z0-9_]*)
    |(?P<OPERATOR>\*\*|[-+*/^=])
    |(?P<LPAREN>\()
    |(?P<RPAREN>\))
    |(?P<COMMA>,)
    |(?P<SPACE>\s+)
    """,
    re.VERBOSE,
)


class Token(NamedTuple):
    kind: str
    value: object
    position: int

    def describe(self) -> str:
        if self.kind == END:
            return "end of input"
        if self.kind == NUMBER:
            return f"'{self.value:g}'"
        return f"'{self.value}'"


def normalize_decimal_commas(text: str) -> str:
    """Replace decimal commas with periods outside of any parentheses.

    Inside parentheses a comma always separates call arguments, so
    ``log(100,10)`` keeps its comma while ``3,5*2`` becomes ``3.5*2``.
    The result has the same length as the input.
    """
    chars = list(text)
    depth = 0
    for i, char in enumerate(chars):
        if char == "(":
            depth += 1
        elif char == ")":
            depth = max(depth - 1, 0)
        elif (
            char == ","
            and depth == 0
            and 0 < i < len(chars) - 1
            and chars[i - 1].isdigit()
            and chars[i + 1].isdigit()
        ):
            chars[i] = "."
    return "".join(chars)


def tokenize(text: str) -> list[Token]:
    """Scan ``text`` into tokens, always terminated by an END token.

    Raises:
        LexError: on a character that starts no token.
    """
    source = normalize_decimal_commas(text.strip())
    tokens: list[Token] = []
    pos = 0
    while pos < len(source):
        match = _TOKEN_RE.match(source, pos)
        if match is None:
            raise LexError(
                f"Unexpected character '{source[pos]}' at position {pos}",
                position=pos,
            )
        kind = match.lastgroup
        lexeme = match.group()
        if kind == NUMBER:
            tokens.append(Token(NUMBER, float(lexeme), pos))
        elif kind == OPERATOR:
            tokens.append(Token(OPERATOR, "^" if lexeme == "**" else lexeme, pos))
        elif kind != "SPACE":
            tokens.append(Token(kind, lexeme, pos))
        pos = match.end()
    tokens.append(Token(END, None, len(source)))
    return tokens
