"""Symbolic differentiation of expression trees.

The differentiator is purely structural: it never evaluates anything, it
only builds a new tree. Domain problems in the result (for example ``ln`` of
a negative base produced by the logarithmic power rule) surface later, when
the derivative is evaluated.
"""

from __future__ import annotations

from .functions import lookup
from .nodes import (
    BinaryOp,
    Call,
    Empty,
    Node,
    NumberLiteral,
    UnaryOp,
    Variable,
    add,
    call,
    depends_on,
    div,
    is_number,
    mul,
    neg,
    num,
    power,
    sub,
)
from .types import NonDifferentiableError, UnknownFunctionError


def _power_rule(node: BinaryOp, variable: str) -> Node:
    base, exponent = node.left, node.right
    base_varies = depends_on(base, variable)
    exponent_varies = depends_on(exponent, variable)
    if not base_varies and not exponent_varies:
        return num(0)
    if not exponent_varies:
        # d(f^n) = n * f^(n-1) * f'
        if is_number(exponent):
            reduced = num(exponent.value - 1)
        else:
            reduced = sub(exponent, num(1))
        return mul(mul(exponent, power(base, reduced)), differentiate(base, variable))
    if not base_varies:
        # d(a^g) = a^g * ln(a) * g'
        return mul(mul(node, call("ln", base)), differentiate(exponent, variable))
    # d(f^g) = f^g * (g' * ln(f) + g * f'/f)
    return mul(
        node,
        add(
            mul(differentiate(exponent, variable), call("ln", base)),
            mul(exponent, div(differentiate(base, variable), base)),
        ),
    )


def _chain_rule(node: Call, variable: str) -> Node:
    try:
        spec = lookup(node.function)
    except UnknownFunctionError as e:
        raise NonDifferentiableError(
            f"Cannot differentiate unknown function {node.function}",
            subject=node.function,
        ) from e
    if spec.max_args == 0:
        return num(0)
    if node.function == "log" and len(node.args) == 2:
        value, base = node.args
        return differentiate(div(call("ln", value), call("ln", base)), variable)
    if spec.derivative is None:
        raise NonDifferentiableError(
            f"Cannot differentiate {node.function}: {spec.reason}",
            subject=node.function,
        )
    if len(node.args) != 1:
        raise NonDifferentiableError(
            f"Cannot differentiate {node.function} with {len(node.args)} arguments",
            subject=node.function,
        )
    (inner,) = node.args
    if not depends_on(inner, variable):
        return num(0)
    return mul(spec.derivative(inner), differentiate(inner, variable))


def differentiate(ast: Node, variable: str) -> Node:
    """Return a new tree for d(ast)/d(variable).

    Raises:
        NonDifferentiableError: for abs, factorial, unknown functions and
            the empty sentinel.
    """
    if isinstance(ast, NumberLiteral):
        return num(0)
    if isinstance(ast, Variable):
        return num(1) if ast.name == variable else num(0)
    if isinstance(ast, UnaryOp):
        return neg(differentiate(ast.operand, variable))
    if isinstance(ast, BinaryOp):
        left, right = ast.left, ast.right
        if ast.op == "+":
            return add(differentiate(left, variable), differentiate(right, variable))
        if ast.op == "-":
            return sub(differentiate(left, variable), differentiate(right, variable))
        if ast.op == "*":
            return add(
                mul(differentiate(left, variable), right),
                mul(left, differentiate(right, variable)),
            )
        if ast.op == "/":
            # (f'g - fg') / g^2
            return div(
                sub(
                    mul(differentiate(left, variable), right),
                    mul(left, differentiate(right, variable)),
                ),
                power(right, num(2)),
            )
        if ast.op == "^":
            return _power_rule(ast, variable)
    if isinstance(ast, Call):
        return _chain_rule(ast, variable)
    if isinstance(ast, Empty):
        raise NonDifferentiableError("Cannot differentiate an empty expression")
    raise NonDifferentiableError(f"Cannot differentiate {type(ast).__name__}")
