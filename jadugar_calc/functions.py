"""Static function table: numeric implementation and derivative rule per name.

Every entry pairs the float implementation used by the evaluator with the
outer derivative ``f'(u)`` used by the differentiator's chain rule. Entries
whose ``derivative`` is ``None`` cannot be differentiated.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Optional

from . import config
from .nodes import Node, add, call, div, mul, neg, num, power, sub
from .types import ArgumentError, MathDomainError, UnknownFunctionError

CONSTANTS = {
    "pi": math.pi,
    "e": math.e,
}

# 171! exceeds the largest finite float
MAX_FINITE_FACTORIAL = 170


def divide(numerator: float, denominator: float) -> float:
    """IEEE-style division: x/0 is a signed infinity and 0/0 is NaN."""
    if denominator == 0:
        if numerator == 0 or math.isnan(numerator):
            return math.nan
        return math.copysign(math.inf, numerator) * math.copysign(1.0, denominator)
    return numerator / denominator


def raise_power(base: float, exponent: float) -> float:
    """``base ** exponent`` with 0^0 == 1, 0^-n == inf and overflow to infinity.

    A zero base with a negative odd integer exponent keeps the sign of the
    zero, so ``(-0)^-1`` is ``-inf`` as in IEEE ``pow``.
    """
    if base == 0 and exponent < 0:
        if float(exponent).is_integer() and exponent % 2 == 1:
            return math.copysign(math.inf, base)
        return math.inf
    if base < 0 and math.isfinite(exponent) and not float(exponent).is_integer():
        raise MathDomainError(
            f"Cannot raise negative number {base:g} to non-integer power {exponent:g}"
        )
    try:
        result = base**exponent
    except OverflowError:
        negative = base < 0 and float(exponent).is_integer() and exponent % 2 == 1
        return -math.inf if negative else math.inf
    return float(result)


def _checked(name: str, fn: Callable[[float], float]) -> Callable[[float], float]:
    def wrapper(x: float) -> float:
        try:
            return fn(x)
        except OverflowError:
            return math.inf
        except ValueError as e:
            raise MathDomainError(f"{name}({x:g}) is undefined: {e}") from e

    return wrapper


def _natural_log(x: float) -> float:
    if math.isnan(x):
        return math.nan
    if x < 0:
        raise MathDomainError(f"Logarithm of negative number {x:g} is undefined")
    if x == 0:
        return -math.inf
    return math.log(x)


def _log(x: float, base: Optional[float] = None) -> float:
    if base is None:
        return _natural_log(x)
    return divide(_natural_log(x), _natural_log(base))


def _log10(x: float) -> float:
    return divide(_natural_log(x), math.log(10))


def _sqrt(x: float) -> float:
    if x < 0:
        raise MathDomainError(f"Square root of negative number {x:g} is undefined")
    return math.sqrt(x)


def _inverse_trig(name: str, fn: Callable[[float], float]) -> Callable[[float], float]:
    def wrapper(x: float) -> float:
        if abs(x) > 1:
            raise MathDomainError(f"{name}({x:g}) is undefined outside [-1, 1]")
        return fn(x)

    return wrapper


def _factorial(n: float) -> float:
    if math.isnan(n) or n < 0:
        raise MathDomainError(f"Factorial of negative number {n:g} is undefined")
    if math.isinf(n):
        return math.inf
    rounded = round(n)
    if abs(n - rounded) > config.FACTORIAL_TOLERANCE:
        raise MathDomainError(f"Factorial of non-integer {n:g} is undefined")
    if rounded > MAX_FINITE_FACTORIAL:
        return math.inf
    return float(math.factorial(int(rounded)))


def _reciprocal_sqrt_one_minus_square(u: Node) -> Node:
    return div(num(1), call("sqrt", sub(num(1), power(u, num(2)))))


@dataclass(frozen=True)
class FunctionSpec:
    """One row of the function table."""

    name: str
    min_args: int
    max_args: int
    evaluate: Callable[..., float]
    derivative: Optional[Callable[[Node], Node]] = None
    reason: str = ""

    def check_arity(self, count: int) -> None:
        if not self.min_args <= count <= self.max_args:
            if self.min_args == self.max_args:
                expected = str(self.min_args)
            else:
                expected = f"{self.min_args} to {self.max_args}"
            raise ArgumentError(
                f"Function {self.name} expects {expected} argument(s), got {count}",
                subject=self.name,
            )


_TABLE = [
    FunctionSpec("sin", 1, 1, _checked("sin", math.sin), lambda u: call("cos", u)),
    FunctionSpec("cos", 1, 1, _checked("cos", math.cos), lambda u: neg(call("sin", u))),
    FunctionSpec(
        "tan",
        1,
        1,
        _checked("tan", math.tan),
        lambda u: div(num(1), power(call("cos", u), num(2))),
    ),
    FunctionSpec(
        "asin",
        1,
        1,
        _inverse_trig("asin", math.asin),
        _reciprocal_sqrt_one_minus_square,
    ),
    FunctionSpec(
        "acos",
        1,
        1,
        _inverse_trig("acos", math.acos),
        lambda u: neg(_reciprocal_sqrt_one_minus_square(u)),
    ),
    FunctionSpec(
        "atan",
        1,
        1,
        _checked("atan", math.atan),
        lambda u: div(num(1), add(num(1), power(u, num(2)))),
    ),
    # log(x, base) is differentiated by rewriting it as ln(x)/ln(base)
    FunctionSpec("log", 1, 2, _log, lambda u: div(num(1), u)),
    FunctionSpec("ln", 1, 1, _natural_log, lambda u: div(num(1), u)),
    FunctionSpec(
        "log10",
        1,
        1,
        _log10,
        lambda u: div(num(1), mul(u, call("ln", num(10)))),
    ),
    FunctionSpec(
        "sqrt",
        1,
        1,
        _sqrt,
        lambda u: div(num(1), mul(num(2), call("sqrt", u))),
    ),
    FunctionSpec("exp", 1, 1, _checked("exp", math.exp), lambda u: call("exp", u)),
    FunctionSpec(
        "abs", 1, 1, abs, reason="abs is not differentiable at its kink (x = 0)"
    ),
    FunctionSpec(
        "factorial",
        1,
        1,
        _factorial,
        reason="factorial is only defined on integers",
    ),
    FunctionSpec("pi", 0, 0, lambda: CONSTANTS["pi"]),
    FunctionSpec("e", 0, 0, lambda: CONSTANTS["e"]),
]

FUNCTIONS: dict[str, FunctionSpec] = {spec.name: spec for spec in _TABLE}


def lookup(name: str) -> FunctionSpec:
    """Return the table entry for ``name``.

    Raises:
        UnknownFunctionError: if no such function exists.
    """
    spec = FUNCTIONS.get(name)
    if spec is None:
        raise UnknownFunctionError(f"Unknown function {name}", subject=name)
    return spec


def call_function(name: str, args: list[float]) -> float:
    spec = lookup(name)
    spec.check_arity(len(args))
    return spec.evaluate(*args)
