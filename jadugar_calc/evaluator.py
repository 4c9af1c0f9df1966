"""Tree-walking evaluator.

``evaluate`` never raises: any failure inside the walk is reported as a
``Failure`` value carrying the error kind, and the first failure aborts the
whole evaluation.
"""

from __future__ import annotations

import math
import numbers
from typing import Mapping, Optional, Union

from .functions import CONSTANTS, call_function, divide, raise_power
from .logging_config import get_logger
from .nodes import BinaryOp, Call, Empty, Node, NumberLiteral, UnaryOp, Variable
from .types import (
    CalcError,
    ErrorKind,
    EvalResult,
    Failure,
    NumberResult,
    TextResult,
    TypeMismatchError,
    UndefinedVariableError,
)

logger = get_logger("evaluator")

Scope = Mapping[str, Union[float, int, str]]

_BINARY = {
    "+": lambda a, b: a + b,
    "-": lambda a, b: a - b,
    "*": lambda a, b: a * b,
    "/": divide,
    "^": raise_power,
}


def _numeric(value: Union[float, str], context: str) -> float:
    if isinstance(value, str):
        raise TypeMismatchError(
            f"Cannot use text value '{value}' in {context}", subject=value
        )
    return value


def _lookup(name: str, scope: Scope) -> Union[float, str]:
    if name in scope:
        value = scope[name]
        if isinstance(value, numbers.Real) and not isinstance(value, bool):
            return float(value)
        return str(value)
    if name in CONSTANTS:
        return CONSTANTS[name]
    raise UndefinedVariableError(f"Undefined symbol {name}", subject=name)


def _eval(node: Node, scope: Scope) -> Union[float, str]:
    if isinstance(node, NumberLiteral):
        return node.value
    if isinstance(node, Variable):
        return _lookup(node.name, scope)
    if isinstance(node, UnaryOp):
        return -_numeric(_eval(node.operand, scope), f"'{node.op}'")
    if isinstance(node, BinaryOp):
        left = _numeric(_eval(node.left, scope), f"'{node.op}'")
        right = _numeric(_eval(node.right, scope), f"'{node.op}'")
        try:
            return _BINARY[node.op](left, right)
        except OverflowError:
            return math.inf
    if isinstance(node, Call):
        args = [
            _numeric(_eval(arg, scope), f"{node.function}()") for arg in node.args
        ]
        return call_function(node.function, args)
    raise TypeError(f"Unsupported node type: {type(node).__name__}")


def evaluate(ast: Node, scope: Optional[Scope] = None) -> EvalResult:
    """Evaluate ``ast`` with the variable bindings in ``scope``.

    Args:
        ast: Parsed expression tree
        scope: Variable bindings; numbers bind numerically, anything else as text

    Returns:
        NumberResult, TextResult (text bindings and the empty sentinel) or Failure
    """
    if isinstance(ast, Empty):
        return TextResult("")
    try:
        value = _eval(ast, scope or {})
    except CalcError as e:
        return Failure.from_error(e)
    except RecursionError:
        # only reachable for trees built by hand; parsed trees are depth-checked
        logger.warning("Evaluation exceeded the recursion limit")
        return Failure(
            ErrorKind.VALIDATION_ERROR, "Expression too deeply nested to evaluate"
        )
    except (ArithmeticError, ValueError, TypeError) as e:
        logger.error("Unexpected evaluation error: %s", e, exc_info=True)
        return Failure(ErrorKind.MATH_DOMAIN_ERROR, f"Evaluation failed: {e}")
    if isinstance(value, str):
        return TextResult(value)
    return NumberResult(value)
