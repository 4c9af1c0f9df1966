"""Bridge between expression trees and SymPy.

SymPy is used for presentation and cross-checking only: simplifying a
derivative for display, and computing a reference derivative in the health
check and tests. Evaluation and differentiation themselves never go through
SymPy.
"""

from __future__ import annotations

import math

import sympy as sp

from .nodes import BinaryOp, Call, Empty, Node, NumberLiteral, UnaryOp, Variable

SYMPY_CONSTANTS = {
    "pi": sp.pi,
    "e": sp.E,
}

SYMPY_FUNCTIONS = {
    "sin": sp.sin,
    "cos": sp.cos,
    "tan": sp.tan,
    "asin": sp.asin,
    "acos": sp.acos,
    "atan": sp.atan,
    "ln": sp.log,
    "log": sp.log,
    "log10": lambda x: sp.log(x, 10),
    "sqrt": sp.sqrt,
    "abs": sp.Abs,
    "exp": sp.exp,
    "factorial": sp.factorial,
    "pi": lambda: sp.pi,
    "e": lambda: sp.E,
}


def _number(value: float) -> sp.Expr:
    if value == int(value) and abs(value) < 1e16:
        return sp.Integer(int(value))
    return sp.Rational(repr(value))


def to_sympy(node: Node, symbols: dict[str, sp.Symbol] | None = None) -> sp.Expr:
    """Convert an expression tree to an equivalent SymPy expression.

    Args:
        node: Expression tree
        symbols: Optional cache of already created symbols, filled in place

    Raises:
        ValueError: for the empty sentinel or non-finite literals.
    """
    if symbols is None:
        symbols = {}
    if isinstance(node, NumberLiteral):
        if not math.isfinite(node.value):
            raise ValueError(f"Cannot convert non-finite literal {node.value}")
        return _number(node.value)
    if isinstance(node, Variable):
        if node.name in SYMPY_CONSTANTS:
            return SYMPY_CONSTANTS[node.name]
        if node.name not in symbols:
            symbols[node.name] = sp.Symbol(node.name)
        return symbols[node.name]
    if isinstance(node, UnaryOp):
        return -to_sympy(node.operand, symbols)
    if isinstance(node, BinaryOp):
        left = to_sympy(node.left, symbols)
        right = to_sympy(node.right, symbols)
        if node.op == "+":
            return left + right
        if node.op == "-":
            return left - right
        if node.op == "*":
            return left * right
        if node.op == "/":
            return left / right
        return sp.Pow(left, right)
    if isinstance(node, Call):
        args = [to_sympy(arg, symbols) for arg in node.args]
        fn = SYMPY_FUNCTIONS.get(node.function)
        if fn is None:
            return sp.Function(node.function)(*args)
        return fn(*args)
    if isinstance(node, Empty):
        raise ValueError("Cannot convert an empty expression")
    raise ValueError(f"Unsupported node type: {type(node).__name__}")


def simplify_text(node: Node) -> str:
    """Simplified SymPy rendering of ``node`` using ``^`` for powers."""
    return str(sp.simplify(to_sympy(node))).replace("**", "^")


def sympy_derivative(node: Node, variable: str) -> sp.Expr:
    """Reference derivative computed by SymPy."""
    symbols: dict[str, sp.Symbol] = {}
    expr = to_sympy(node, symbols)
    return sp.diff(expr, symbols.get(variable, sp.Symbol(variable)))


def equivalent(first: Node, second: Node) -> bool:
    """True when SymPy can prove the two trees equal."""
    difference = sp.simplify(to_sympy(first) - to_sympy(second))
    return difference == 0