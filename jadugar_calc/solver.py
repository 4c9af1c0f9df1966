"""Newton-Raphson equation solving.

This module provides:
- ``solve``: single-guess Newton-Raphson iteration on a root-form tree
- ``find_roots``: an interval scan that seeds Newton-Raphson from every
  sign change, for callers that want to "try another guess" automatically

Both work on the root form of an equation (``lhs - rhs``); the derivative
comes from the symbolic differentiator, never from finite differences.

Zero-derivative policy (``config.ZERO_DERIVATIVE_POLICY``):
- ``"fail"`` (default): a vanishing derivative away from a root returns a
  ``ZERO_DERIVATIVE`` failure so the caller can pick another guess.
- ``"stall"``: the step is taken as zero. The next step-size test then
  reports convergence at the current point even though it is not a root.
"""

from __future__ import annotations

import math
from typing import Any, Optional

import numpy as np

from . import config
from .calculus import differentiate
from .evaluator import Scope, evaluate
from .logging_config import get_logger
from .nodes import Node
from .types import (
    Converged,
    ErrorKind,
    Failure,
    NonDifferentiableError,
    NotConverged,
    NumberResult,
    SolveOutcome,
    TextResult,
)

logger = get_logger("solver")


def initial_guess(guess: Any) -> float:
    """Coerce a user-supplied guess to a finite float, falling back to DEFAULT_GUESS."""
    try:
        value = float(guess)
    except (TypeError, ValueError):
        return config.DEFAULT_GUESS
    return value if math.isfinite(value) else config.DEFAULT_GUESS


def _numeric_value(ast: Node, bindings: dict[str, Any]) -> float | Failure:
    result = evaluate(ast, bindings)
    if isinstance(result, NumberResult):
        return result.value
    if isinstance(result, Failure):
        return result
    shown = result.text if isinstance(result, TextResult) else result
    return Failure(ErrorKind.TYPE_ERROR, f"Expression did not evaluate to a number: {shown}")


def newton_raphson(
    ast: Node,
    derivative: Node,
    variable: str,
    guess: float,
    scope: Optional[Scope] = None,
) -> SolveOutcome:
    """Iterate x <- x - f(x)/f'(x) from ``guess`` with a precomputed derivative."""
    bindings = dict(scope or {})
    x = guess
    for iteration in range(1, config.MAX_NEWTON_ITERATIONS + 1):
        bindings[variable] = x
        fx = _numeric_value(ast, bindings)
        if isinstance(fx, Failure):
            return fx
        dfx = _numeric_value(derivative, bindings)
        if isinstance(dfx, Failure):
            return dfx
        logger.debug("Newton iteration %d: %s=%r f=%r f'=%r", iteration, variable, x, fx, dfx)
        if not (math.isfinite(fx) and math.isfinite(dfx)):
            return NotConverged(x, iteration, "function or derivative is not finite")
        if abs(fx) < config.RESIDUAL_TOLERANCE:
            return Converged(x, iteration)
        if dfx == 0:
            if config.ZERO_DERIVATIVE_POLICY != "stall":
                return Failure(
                    ErrorKind.ZERO_DERIVATIVE,
                    f"Derivative is zero at {variable} = {x:g}; try another initial guess",
                    subject=variable,
                )
            step = 0.0
        else:
            step = fx / dfx
        x_new = x - step
        if not math.isfinite(x_new):
            return NotConverged(x, iteration, "iteration diverged")
        if abs(x_new - x) < config.STEP_TOLERANCE:
            return Converged(x_new, iteration)
        x = x_new
    return NotConverged(x, config.MAX_NEWTON_ITERATIONS, "iteration limit reached")


def solve(
    ast: Node,
    variable: str,
    guess: Any = None,
    scope: Optional[Scope] = None,
) -> SolveOutcome:
    """Find a value of ``variable`` making the root-form tree ``ast`` zero.

    Args:
        ast: Root form of the equation (``lhs - rhs``)
        variable: Name of the unknown
        guess: Starting point; anything that is not a finite number means DEFAULT_GUESS
        scope: Extra bindings for the other names in the equation

    Returns:
        Converged, NotConverged or Failure (NON_DIFFERENTIABLE, ZERO_DERIVATIVE
        or any evaluation failure)
    """
    try:
        derivative = differentiate(ast, variable)
    except NonDifferentiableError as e:
        logger.debug(
            "Solve aborted, no derivative for %s: %s",
            variable,
            e,
            extra={"error_code": e.code, "subject": e.subject},
        )
        return Failure.from_error(e)
    start = initial_guess(guess)
    outcome = newton_raphson(ast, derivative, variable, start, scope)
    logger.info("Solve %s for %s from %r: %s", ast, variable, start, outcome)
    return outcome


def find_roots(
    ast: Node,
    variable: str,
    lower: float | None = None,
    upper: float | None = None,
    samples: int | None = None,
    scope: Optional[Scope] = None,
) -> list[float]:
    """Find the distinct real roots of ``ast`` inside ``[lower, upper]``.

    Samples the interval, seeds Newton-Raphson from every sign change (from
    every sample when there is none) and keeps the converged values that lie
    in the interval and actually zero the expression.

    Raises:
        NonDifferentiableError: if the expression has no derivative.
    """
    lower = config.ROOT_SCAN_LOWER if lower is None else float(lower)
    upper = config.ROOT_SCAN_UPPER if upper is None else float(upper)
    if lower > upper:
        lower, upper = upper, lower
    samples = max(samples or config.ROOT_SCAN_SAMPLES, 2)
    derivative = differentiate(ast, variable)
    bindings = dict(scope or {})

    grid = np.linspace(lower, upper, samples)
    values = []
    for point in grid:
        bindings[variable] = float(point)
        value = _numeric_value(ast, bindings)
        values.append(value if isinstance(value, float) else math.nan)

    candidates = [
        float(grid[idx - 1])
        for idx in range(1, len(grid))
        if values[idx - 1] * values[idx] <= 0
    ]
    if not candidates:
        candidates = [float(point) for point in grid]

    roots: list[float] = []
    for candidate in candidates:
        outcome = newton_raphson(ast, derivative, variable, candidate, scope)
        if not isinstance(outcome, Converged):
            continue
        root = outcome.value
        if not lower - config.ROOT_DEDUP_TOLERANCE <= root <= upper + config.ROOT_DEDUP_TOLERANCE:
            continue
        bindings[variable] = root
        residual = _numeric_value(ast, bindings)
        if not isinstance(residual, float) or abs(residual) > config.ROOT_DEDUP_TOLERANCE:
            continue
        if not any(abs(existing - root) < config.ROOT_DEDUP_TOLERANCE for existing in roots):
            roots.append(root)
    logger.debug("Root scan of %s on [%s, %s] found %s", ast, lower, upper, roots)
    return sorted(roots)
