"""Public API for Jadugar Calc - text in, structured results out, no side effects.

These helpers chain the pre-parse step (decimal commas, equation root form),
the parser and the core engine, and convert every failure into a typed value.
"""

from __future__ import annotations

import math
from typing import Any, Optional

from .calculus import differentiate
from .config import VAR_NAME_RE
from .evaluator import Scope, evaluate
from .formatter import format_result
from .logging_config import get_logger
from .nodes import EMPTY, Node
from .parser import parse, split_top_level, to_root_form
from .solver import find_roots, solve
from .symbolic import simplify_text
from .tokenizer import normalize_decimal_commas
from .types import (
    CalcError,
    DerivativeResult,
    ErrorKind,
    EvalResult,
    Failure,
    NumberResult,
    ParseError,
    SequenceResult,
    SolveOutcome,
)

logger = get_logger("api")


def prepare(text: str | None) -> str:
    """Normalize decimal commas and rewrite ``lhs = rhs`` as ``(lhs) - (rhs)``.

    Raises:
        ParseError: for a malformed equation (several ``=`` or an empty side).
    """
    if text is None:
        return ""
    raw = normalize_decimal_commas(str(text).strip())
    if not raw:
        return ""
    return to_root_form(raw)


def parse_text(text: str | None) -> Node:
    """Prepare and parse caller text; blank text gives the EMPTY sentinel."""
    prepared = prepare(text)
    return parse(prepared) if prepared else EMPTY


def parse_scope(scope_string: str | None) -> dict[str, Any]:
    """Parse ``"a=2,b=3,c=1"`` style bindings.

    Values that read as finite numbers bind as floats, anything else as text.

    Example:
        >>> parse_scope("a=2, b=3, name=Ada")
        {'a': 2.0, 'b': 3.0, 'name': 'Ada'}

    Raises:
        ParseError: if a name is not a valid identifier.
    """
    scope: dict[str, Any] = {}
    for entry in (scope_string or "").split(","):
        entry = entry.strip()
        if not entry:
            continue
        name, sep, raw_value = entry.partition("=")
        name, raw_value = name.strip(), raw_value.strip()
        if not sep or not name or not raw_value:
            continue
        if not VAR_NAME_RE.match(name):
            raise ParseError(f"Invalid variable name '{name}' in scope", subject=name)
        try:
            number = float(raw_value)
        except ValueError:
            scope[name] = raw_value
            continue
        scope[name] = number if math.isfinite(number) else raw_value
    return scope


def evaluate_text(text: str | None, scope: Optional[Scope] = None) -> EvalResult:
    """Evaluate caller text with optional variable bindings.

    Example:
        >>> evaluate_text("a*b + c", {"a": 2, "b": 3, "c": 1})
        NumberResult(value=7.0)
    """
    try:
        ast = parse_text(text)
    except CalcError as e:
        return Failure.from_error(e)
    except Exception as e:
        logger.error("Unexpected parse error: %s", e, exc_info=True)
        return Failure(ErrorKind.PARSE_ERROR, "invalid expression")
    return evaluate(ast, scope)


def calculate(text: str | None, scope: Optional[Scope] = None) -> str:
    """Evaluate and format in one step; never raises.

    Example:
        >>> calculate("2+2")
        '4'
        >>> calculate("sqrt(-1)")
        'Error: Square root of negative number -1 is undefined'
    """
    return format_result(evaluate_text(text, scope))


def evaluate_batch(text: str | None, scope: Optional[Scope] = None) -> SequenceResult:
    """Evaluate ``;``-separated expressions, preserving their order."""
    parts = split_top_level(text or "", ";")
    return SequenceResult(tuple(evaluate_text(part, scope) for part in parts))


def _check_variable(variable: str | None) -> str | Failure:
    name = (variable or "").strip()
    if not name:
        return Failure(ErrorKind.PARSE_ERROR, "No variable specified")
    if not VAR_NAME_RE.match(name):
        return Failure(ErrorKind.PARSE_ERROR, f"Invalid variable name '{name}'", subject=name)
    return name


def solve_for(
    text: str | None,
    variable: str | None = "x",
    guess: Any = None,
    scope: Optional[Scope] = None,
) -> SolveOutcome:
    """Solve an equation or root-form expression for ``variable``.

    Args:
        text: Equation (``"x^2 = 4"``) or expression assumed equal to zero
        variable: Unknown to solve for
        guess: Initial guess; strings are accepted, non-numbers fall back to 1
        scope: Bindings for the other names in the equation

    Example:
        >>> round(solve_for("x^2 - 4", "x", 1).value, 9)
        2.0
    """
    name = _check_variable(variable)
    if isinstance(name, Failure):
        return name
    if not (text or "").strip():
        return Failure(ErrorKind.PARSE_ERROR, "No expression")
    try:
        ast = parse_text(text)
    except CalcError as e:
        return Failure.from_error(e)
    return solve(ast, name, guess, scope)


def derivative(text: str | None, variable: str | None = "x") -> DerivativeResult:
    """Differentiate caller text with respect to ``variable``.

    Example:
        >>> derivative("x^3", "x").expression
        '3*x^2'
    """
    name = _check_variable(variable)
    if isinstance(name, Failure):
        return DerivativeResult(ok=False, error=name.message, code=name.kind)
    try:
        result = differentiate(parse_text(text), name)
    except CalcError as e:
        return DerivativeResult(ok=False, error=e.message, code=e.code)
    try:
        simplified = simplify_text(result)
    except (ValueError, TypeError, AttributeError) as e:
        logger.debug("SymPy could not simplify %s: %s", result, e)
        simplified = None
    return DerivativeResult(ok=True, expression=str(result), simplified=simplified)


def roots(
    text: str | None,
    variable: str | None = "x",
    lower: float | None = None,
    upper: float | None = None,
    scope: Optional[Scope] = None,
) -> SequenceResult | Failure:
    """Scan ``[lower, upper]`` for every root of an equation.

    Example:
        >>> format_result(roots("x^2 = 4", "x", -5, 5))
        '[-2, 2]'
    """
    name = _check_variable(variable)
    if isinstance(name, Failure):
        return name
    try:
        ast = parse_text(text)
        found = find_roots(ast, name, lower, upper, scope=scope)
    except CalcError as e:
        return Failure.from_error(e)
    return SequenceResult(tuple(NumberResult(root) for root in found))


def validate_expression(expression: str) -> tuple[bool, str | None]:
    """Validate an expression without evaluating it.

    Returns:
        Tuple of (is_valid, error_message)

    Example:
        >>> validate_expression("2 + 2")
        (True, None)
        >>> validate_expression("2 +")
        (False, 'Missing operand at end of input')
    """
    try:
        parse_text(expression)
        return True, None
    except CalcError as e:
        return False, e.message
    except Exception as e:
        logger.warning("Unexpected validation error: %s", e, exc_info=True)
        return False, "Unexpected validation error"
