"""Input parsing module.

This module handles:
- Input validation (length, nesting depth, balanced parentheses)
- The equation pre-parse step that rewrites ``lhs = rhs`` into root form
- Recursive-descent parsing of the token stream into an expression tree

Precedence, lowest to highest::

    + -        left-associative
    * /        left-associative
    unary - +  prefix
    ^          right-associative (2^3^2 == 2^(3^2))
    call, parenthesized primary
"""

from __future__ import annotations

from functools import lru_cache

from .config import (
    CACHE_SIZE_PARSE,
    MAX_EXPRESSION_DEPTH,
    MAX_EXPRESSION_NODES,
    MAX_INPUT_LENGTH,
    MAX_TREE_DEPTH,
)
from .logging_config import get_logger
from .nodes import EMPTY, BinaryOp, Call, Node, NumberLiteral, UnaryOp, Variable, children
from .tokenizer import (
    COMMA,
    END,
    IDENTIFIER,
    LPAREN,
    NUMBER,
    OPERATOR,
    RPAREN,
    Token,
    tokenize,
)
from .types import CalcError, ParseError, ValidationError

logger = get_logger("parser")


def is_balanced(input_str: str) -> tuple[bool, int | None]:
    """Check if parentheses are balanced. Returns (is_balanced, error_position)."""
    stack: list[int] = []
    for i, char in enumerate(input_str):
        if char == "(":
            stack.append(i)
        elif char == ")":
            if not stack:
                return False, i
            stack.pop()
    if stack:
        return False, stack[0]  # Return position of first unmatched
    return True, None


def split_top_level(
    input_str: str, separator: str = ",", keep_empty: bool = False
) -> list[str]:
    """Split string by ``separator`` where it is not inside parentheses."""
    parts: list[str] = []
    current: list[str] = []
    depth = 0
    for char in input_str:
        if char == separator and depth == 0:
            part = "".join(current).strip()
            if part or keep_empty:
                parts.append(part)
            current = []
            continue
        if char == "(":
            depth += 1
        elif char == ")":
            depth = max(0, depth - 1)
        current.append(char)
    last = "".join(current).strip()
    if last or keep_empty:
        parts.append(last)
    return parts


def to_root_form(text: str) -> str:
    """Rewrite an equation ``lhs = rhs`` as ``(lhs) - (rhs)``.

    Text without a top-level ``=`` is returned unchanged.

    Raises:
        ParseError: if there is more than one top-level ``=`` or a side is empty.
    """
    sides = split_top_level(text, "=", keep_empty=True)
    if len(sides) == 1:
        return text
    if len(sides) > 2:
        raise ParseError(
            "Invalid equation format: expected exactly one '=' but found "
            f"{len(sides) - 1}"
        )
    lhs, rhs = sides
    if not lhs or not rhs:
        raise ParseError("Invalid equation format: both sides of '=' are required")
    return f"({lhs}) - ({rhs})"


class _Parser:
    """Recursive-descent parser over a token list."""

    def __init__(self, tokens: list[Token]):
        self.tokens = tokens
        self.index = 0
        self.depth = 0

    @property
    def current(self) -> Token:
        return self.tokens[self.index]

    def _advance(self) -> Token:
        token = self.tokens[self.index]
        if token.kind != END:
            self.index += 1
        return token

    def _at_operator(self, *symbols: str) -> bool:
        return self.current.kind == OPERATOR and self.current.value in symbols

    def _error(self, token: Token, message: str | None = None) -> ParseError:
        if message is None:
            if token.kind == END:
                message = "Missing operand at end of input"
            elif token.kind == OPERATOR and token.value == "=":
                message = (
                    f"Unexpected '=' at position {token.position}; "
                    "an equation must contain exactly one top-level '='"
                )
            else:
                message = (
                    f"Unexpected token {token.describe()} at position {token.position}"
                )
        return ParseError(message, position=token.position)

    def _nest(self) -> None:
        self.depth += 1
        if self.depth > MAX_EXPRESSION_DEPTH:
            raise ValidationError(
                f"Expression too deeply nested (>{MAX_EXPRESSION_DEPTH} levels)",
                reason="TOO_DEEP",
                position=self.current.position,
            )

    def parse(self) -> Node:
        node = self._expression()
        if self.current.kind != END:
            raise self._error(self.current)
        return node

    def _expression(self) -> Node:
        self._nest()
        node = self._term()
        while self._at_operator("+", "-"):
            op = self._advance().value
            node = BinaryOp(op, node, self._term())
        self.depth -= 1
        return node

    def _term(self) -> Node:
        node = self._unary()
        while self._at_operator("*", "/"):
            op = self._advance().value
            node = BinaryOp(op, node, self._unary())
        return node

    def _unary(self) -> Node:
        if self._at_operator("-", "+"):
            op = self._advance().value
            self._nest()
            operand = self._unary()
            self.depth -= 1
            return UnaryOp("-", operand) if op == "-" else operand
        return self._power()

    def _power(self) -> Node:
        base = self._primary()
        if self._at_operator("^"):
            self._advance()
            self._nest()
            exponent = self._unary()
            self.depth -= 1
            return BinaryOp("^", base, exponent)
        return base

    def _primary(self) -> Node:
        token = self.current
        if token.kind == NUMBER:
            self._advance()
            return NumberLiteral(token.value)
        if token.kind == IDENTIFIER:
            self._advance()
            if self.current.kind == LPAREN:
                return Call(token.value, self._arguments())
            return Variable(token.value)
        if token.kind == LPAREN:
            self._advance()
            node = self._expression()
            if self.current.kind != RPAREN:
                raise self._error(
                    self.current,
                    f"Unmatched '(' at position {token.position}"
                    if self.current.kind == END
                    else None,
                )
            self._advance()
            return node
        raise self._error(token)

    def _arguments(self) -> tuple[Node, ...]:
        opening = self._advance()
        args: list[Node] = []
        if self.current.kind == RPAREN:
            self._advance()
            return ()
        while True:
            args.append(self._expression())
            if self.current.kind == COMMA:
                self._advance()
                continue
            if self.current.kind == RPAREN:
                self._advance()
                return tuple(args)
            if self.current.kind == END:
                raise self._error(
                    self.current, f"Unmatched '(' at position {opening.position}"
                )
            raise self._error(self.current)


def _validate_tree(root: Node) -> None:
    """Reject trees too deep or too large for the recursive tree walkers.

    Operator chains such as ``1+1+...+1`` parse iteratively but nest one
    level per operator, so the depth is measured on the finished tree.
    """
    node_count = 0
    stack = [(root, 1)]
    while stack:
        node, depth = stack.pop()
        node_count += 1
        if node_count > MAX_EXPRESSION_NODES:
            raise ValidationError(
                f"Expression too complex (>{MAX_EXPRESSION_NODES} nodes)",
                reason="TOO_COMPLEX",
            )
        if depth > MAX_TREE_DEPTH:
            raise ValidationError(
                f"Expression too deeply nested (>{MAX_TREE_DEPTH} levels)",
                reason="TOO_DEEP",
            )
        stack.extend((child, depth + 1) for child in children(node))


@lru_cache(maxsize=CACHE_SIZE_PARSE)
def _parse_cached(source: str) -> Node:
    balanced, position = is_balanced(source)
    if not balanced:
        char = source[position]
        raise ParseError(
            f"Unmatched '{char}' at position {position}", position=position
        )
    tree = _Parser(tokenize(source)).parse()
    _validate_tree(tree)
    return tree


def parse(text: str | None) -> Node:
    """Parse expression text into a tree.

    Blank input returns the ``EMPTY`` sentinel instead of failing.

    Raises:
        LexError: on an unscannable character.
        ParseError: on malformed grammar.
        ValidationError: if the input is too long, too deeply nested or has
            too many nodes.
    """
    source = text.strip() if text else ""
    if not source:
        return EMPTY
    if len(source) > MAX_INPUT_LENGTH:
        raise ValidationError(
            f"Input too long (>{MAX_INPUT_LENGTH} characters)", reason="TOO_LONG"
        )
    try:
        return _parse_cached(source)
    except CalcError as e:
        logger.debug(
            "Parse failed for %r: %s",
            source[:100],
            e,
            extra={"error_code": e.code, "subject": e.subject},
        )
        raise


def clear_caches() -> None:
    """Drop all memoized parse trees."""
    _parse_cached.cache_clear()
