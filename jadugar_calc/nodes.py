"""Expression tree nodes.

Nodes are frozen dataclasses: they compare structurally, hash, and can be
shared freely between callers because nothing mutates them after
construction. ``str(node)`` renders the tree back to expression text with
the minimum parentheses the parser needs to rebuild the same tree.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterator, Union

ADDITIVE = 1
MULTIPLICATIVE = 2
UNARY = 3
POWER = 4
ATOM = 5

BINARY_PRECEDENCE = {"+": ADDITIVE, "-": ADDITIVE, "*": MULTIPLICATIVE, "/": MULTIPLICATIVE, "^": POWER}


def _format_literal(value: float) -> str:
    if math.isfinite(value) and value == int(value) and abs(value) < 1e16:
        return str(int(value))
    return repr(value)


@dataclass(frozen=True)
class NumberLiteral:
    value: float

    @property
    def precedence(self) -> int:
        return UNARY if self.value < 0 else ATOM

    def __str__(self) -> str:
        return _format_literal(self.value)


@dataclass(frozen=True)
class Variable:
    name: str

    precedence = ATOM

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class UnaryOp:
    op: str
    operand: "Node"

    precedence = UNARY

    def __str__(self) -> str:
        inner = str(self.operand)
        if self.operand.precedence <= UNARY:
            inner = f"({inner})"
        return f"{self.op}{inner}"


@dataclass(frozen=True)
class BinaryOp:
    op: str
    left: "Node"
    right: "Node"

    @property
    def precedence(self) -> int:
        return BINARY_PRECEDENCE[self.op]

    def __str__(self) -> str:
        prec = self.precedence
        left, right = str(self.left), str(self.right)
        if self.op == "^":
            # right-associative: a parenthesized left operand of equal rank
            if self.left.precedence <= prec:
                left = f"({left})"
            if self.right.precedence < prec:
                right = f"({right})"
            return f"{left}^{right}"
        if self.left.precedence < prec:
            left = f"({left})"
        if self.right.precedence <= prec:
            right = f"({right})"
        if prec == ADDITIVE:
            return f"{left} {self.op} {right}"
        return f"{left}{self.op}{right}"


@dataclass(frozen=True)
class Call:
    function: str
    args: tuple["Node", ...] = ()

    precedence = ATOM

    def __str__(self) -> str:
        return f"{self.function}({', '.join(str(arg) for arg in self.args)})"


@dataclass(frozen=True)
class Empty:
    """Sentinel produced for blank input so callers can short-circuit."""

    precedence = ATOM

    def __str__(self) -> str:
        return ""


EMPTY = Empty()

Node = Union[NumberLiteral, Variable, UnaryOp, BinaryOp, Call, Empty]


def children(node: Node) -> tuple[Node, ...]:
    if isinstance(node, UnaryOp):
        return (node.operand,)
    if isinstance(node, BinaryOp):
        return (node.left, node.right)
    if isinstance(node, Call):
        return node.args
    return ()


def walk(node: Node) -> Iterator[Node]:
    """Yield ``node`` and all of its descendants, depth first.

    Uses an explicit stack, so long operator chains do not hit the
    interpreter recursion limit.
    """
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(children(current)))


def free_variables(node: Node) -> set[str]:
    """Names of every variable referenced by the tree."""
    return {n.name for n in walk(node) if isinstance(n, Variable)}


def depends_on(node: Node, variable: str) -> bool:
    return any(isinstance(n, Variable) and n.name == variable for n in walk(node))


# Constructors used when building new trees (derivatives). They fold the
# trivial cases, 0 + a, 1*a, a^1 and literal arithmetic, so results stay
# readable; for finite operands the folded tree has the same value.


def num(value: float) -> NumberLiteral:
    return NumberLiteral(float(value))


def is_number(node: Node, value: float | None = None) -> bool:
    if not isinstance(node, NumberLiteral):
        return False
    return value is None or node.value == value


def neg(node: Node) -> Node:
    if isinstance(node, NumberLiteral):
        return num(-node.value)
    if isinstance(node, UnaryOp) and node.op == "-":
        return node.operand
    return UnaryOp("-", node)


def add(left: Node, right: Node) -> Node:
    if is_number(left, 0):
        return right
    if is_number(right, 0):
        return left
    if is_number(left) and is_number(right):
        return num(left.value + right.value)
    if isinstance(right, UnaryOp) and right.op == "-":
        return sub(left, right.operand)
    return BinaryOp("+", left, right)


def sub(left: Node, right: Node) -> Node:
    if is_number(right, 0):
        return left
    if is_number(left, 0):
        return neg(right)
    if is_number(left) and is_number(right):
        return num(left.value - right.value)
    return BinaryOp("-", left, right)


def mul(left: Node, right: Node) -> Node:
    if is_number(left, 0) or is_number(right, 0):
        return num(0)
    if is_number(left, 1):
        return right
    if is_number(right, 1):
        return left
    if is_number(left) and is_number(right):
        return num(left.value * right.value)
    if is_number(left, -1):
        return neg(right)
    if is_number(right, -1):
        return neg(left)
    return BinaryOp("*", left, right)


def div(left: Node, right: Node) -> Node:
    if is_number(left, 0):
        return num(0)
    if is_number(right, 1):
        return left
    if is_number(left) and is_number(right) and right.value != 0:
        return num(left.value / right.value)
    return BinaryOp("/", left, right)


def power(base: Node, exponent: Node) -> Node:
    if is_number(exponent, 0):
        return num(1)
    if is_number(exponent, 1):
        return base
    return BinaryOp("^", base, exponent)


def call(function: str, *args: Node) -> Call:
    return Call(function, tuple(args))
