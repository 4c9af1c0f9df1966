"""Result formatting.

``format_result`` turns any evaluation result into display text and never
raises. The superscript helpers are used for human-readable CLI output of
symbolic results such as derivatives.
"""

from __future__ import annotations

import json
import math
import re
from typing import Any

from . import config
from .logging_config import get_logger
from .types import (
    Converged,
    EvalResult,
    Failure,
    NotConverged,
    NumberResult,
    SequenceResult,
    SolveOutcome,
    TextResult,
)

logger = get_logger("formatter")


def superscriptify(input_str: str) -> str:
    """Convert numeric string to Unicode superscript characters.

    Args:
        input_str: Input string with digits and '-' (e.g., "123", "-5")

    Returns:
        String with superscript Unicode characters (e.g., "¹²³", "⁻⁵")
    """
    mapping = {
        "0": "⁰",
        "1": "¹",
        "2": "²",
        "3": "³",
        "4": "⁴",
        "5": "⁵",
        "6": "⁶",
        "7": "⁷",
        "8": "⁸",
        "9": "⁹",
        "-": "⁻",
        "n": "ⁿ",
    }
    return "".join(mapping.get(char, char) for char in input_str)


def format_superscript(expr_str: str) -> str:
    """Replace integer powers (``**`` or ``^``) with Unicode superscripts.

    Args:
        expr_str: Expression string (e.g., "x**2", "x^-3")

    Returns:
        String with superscripts (e.g., "x²", "x⁻³")
    """
    return re.sub(
        r"(?:\*\*|\^)(?:\((-?\d+)\)|(-?\d+)(?![\d.]))",
        lambda m: superscriptify(m.group(1) or m.group(2)),
        expr_str,
    )


def format_number(val: Any, precision: int | None = None) -> str:
    """Format a numeric value with ``precision`` significant digits.

    Infinities render as ``Infinity``/``-Infinity``, NaN as ``NaN`` and
    negative zero as ``0``.
    """
    if precision is None:
        precision = config.OUTPUT_PRECISION
    try:
        number = float(val)
        if math.isnan(number):
            return "NaN"
        if math.isinf(number):
            return "Infinity" if number > 0 else "-Infinity"
        if number == 0:
            return "0"
        fmt = "{:." + str(int(precision)) + "g}"
        return fmt.format(number)
    except (ValueError, TypeError, OverflowError):
        # Fallback for non-numeric or invalid values
        return str(val)


def _format_item(item: EvalResult, precision: int | None) -> str:
    if isinstance(item, TextResult):
        return json.dumps(item.text, ensure_ascii=False)
    return format_result(item, precision)


def format_result(result: EvalResult, precision: int | None = None) -> str:
    """Render an evaluation result for display.

    Numbers use ``precision`` significant digits (default OUTPUT_PRECISION),
    text is returned verbatim, sequences as ``[a, b]`` and failures as
    ``Error: <message>``.
    """
    try:
        if isinstance(result, NumberResult):
            return format_number(result.value, precision)
        if isinstance(result, TextResult):
            return result.text
        if isinstance(result, SequenceResult):
            return "[" + ", ".join(_format_item(i, precision) for i in result.items) + "]"
        if isinstance(result, Failure):
            return f"Error: {result.message}"
        return str(result)
    except Exception as e:
        logger.warning("Could not format result %r: %s", result, e)
        try:
            return str(result)
        except Exception:
            return "[unformattable]"


def format_solution(outcome: SolveOutcome, variable: str) -> str:
    """Render a solve outcome, e.g. ``x ≈ 2``."""
    if isinstance(outcome, Converged):
        return f"{variable} ≈ {format_number(outcome.value)}"
    if isinstance(outcome, NotConverged):
        return (
            f"No convergence ({outcome.reason}); "
            "try a different initial guess or scan an interval for roots"
        )
    return format_result(outcome)
