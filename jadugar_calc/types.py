"""Type definitions: error taxonomy, evaluation results and solve outcomes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Union


class ErrorKind(str, Enum):
    """Distinguishable failure categories reported by the engine."""

    LEX_ERROR = "LEX_ERROR"
    PARSE_ERROR = "PARSE_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    UNDEFINED_VARIABLE = "UNDEFINED_VARIABLE"
    UNKNOWN_FUNCTION = "UNKNOWN_FUNCTION"
    MATH_DOMAIN_ERROR = "MATH_DOMAIN_ERROR"
    ARGUMENT_ERROR = "ARGUMENT_ERROR"
    TYPE_ERROR = "TYPE_ERROR"
    NON_DIFFERENTIABLE = "NON_DIFFERENTIABLE"
    ZERO_DERIVATIVE = "ZERO_DERIVATIVE"

    def __str__(self) -> str:
        return self.value


class CalcError(Exception):
    """Base class for every failure raised inside the engine."""

    default_code = ErrorKind.PARSE_ERROR

    def __init__(
        self,
        message: str,
        code: ErrorKind | None = None,
        position: int | None = None,
        subject: str | None = None,
    ):
        self.message = message
        self.code = code or self.default_code
        self.position = position
        self.subject = subject
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


class LexError(CalcError):
    """Raised when the tokenizer meets a character it cannot scan."""

    default_code = ErrorKind.LEX_ERROR


class ParseError(CalcError):
    """Raised when parsing fails."""

    default_code = ErrorKind.PARSE_ERROR


class ValidationError(CalcError):
    """Raised when input validation fails (too long, too deeply nested)."""

    default_code = ErrorKind.VALIDATION_ERROR

    def __init__(self, message: str, reason: str = "VALIDATION_ERROR", **kwargs: Any):
        self.reason = reason
        super().__init__(message, **kwargs)


class EvaluationError(CalcError):
    """Raised while reducing an expression tree to a value."""

    default_code = ErrorKind.MATH_DOMAIN_ERROR


class UndefinedVariableError(EvaluationError):
    default_code = ErrorKind.UNDEFINED_VARIABLE


class UnknownFunctionError(EvaluationError):
    default_code = ErrorKind.UNKNOWN_FUNCTION


class MathDomainError(EvaluationError):
    default_code = ErrorKind.MATH_DOMAIN_ERROR


class ArgumentError(EvaluationError):
    default_code = ErrorKind.ARGUMENT_ERROR


class TypeMismatchError(EvaluationError):
    default_code = ErrorKind.TYPE_ERROR


class NonDifferentiableError(CalcError):
    """Raised when no differentiation rule applies to a construct."""

    default_code = ErrorKind.NON_DIFFERENTIABLE


@dataclass(frozen=True)
class NumberResult:
    """A numeric evaluation result."""

    value: float

    @property
    def ok(self) -> bool:
        return True

    def to_dict(self) -> dict[str, Any]:
        return {"ok": True, "type": "number", "value": self.value}


@dataclass(frozen=True)
class TextResult:
    """An opaque textual result, e.g. a variable bound to user text."""

    text: str

    @property
    def ok(self) -> bool:
        return True

    def to_dict(self) -> dict[str, Any]:
        return {"ok": True, "type": "text", "text": self.text}


@dataclass(frozen=True)
class SequenceResult:
    """An ordered list of results."""

    items: tuple["EvalResult", ...] = ()

    @property
    def ok(self) -> bool:
        return all(item.ok for item in self.items)

    def to_dict(self) -> dict[str, Any]:
        return {
            "ok": self.ok,
            "type": "sequence",
            "items": [item.to_dict() for item in self.items],
        }


@dataclass(frozen=True)
class Failure:
    """A typed failure; shared by evaluation results and solve outcomes."""

    kind: ErrorKind
    message: str
    subject: str | None = None

    @property
    def ok(self) -> bool:
        return False

    @classmethod
    def from_error(cls, error: CalcError) -> "Failure":
        return cls(kind=error.code, message=error.message, subject=error.subject)

    def to_dict(self) -> dict[str, Any]:
        result_dict = {"ok": False, "error": self.message, "code": str(self.kind)}
        if self.subject is not None:
            result_dict["subject"] = self.subject
        return result_dict


EvalResult = Union[NumberResult, TextResult, SequenceResult, Failure]


@dataclass(frozen=True)
class Converged:
    """The solver found a value satisfying the equation."""

    value: float
    iterations: int = 0

    @property
    def ok(self) -> bool:
        return True

    def to_dict(self) -> dict[str, Any]:
        return {
            "ok": True,
            "type": "converged",
            "value": self.value,
            "iterations": self.iterations,
        }


@dataclass(frozen=True)
class NotConverged:
    """The solver stopped without a root; the caller may retry with another guess."""

    last_value: float | None = None
    iterations: int = 0
    reason: str = "iteration limit reached"

    @property
    def ok(self) -> bool:
        return False

    def to_dict(self) -> dict[str, Any]:
        return {
            "ok": False,
            "type": "not_converged",
            "last_value": self.last_value,
            "iterations": self.iterations,
            "reason": self.reason,
        }


SolveOutcome = Union[Converged, NotConverged, Failure]


@dataclass(frozen=True)
class DerivativeResult:
    """Result of differentiating an expression given as text."""

    ok: bool
    expression: str | None = None
    simplified: str | None = None
    error: str | None = None
    code: ErrorKind | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result_dict: dict[str, Any] = {"ok": self.ok}
        if self.expression is not None:
            result_dict["expression"] = self.expression
        if self.simplified is not None:
            result_dict["simplified"] = self.simplified
        if self.error is not None:
            result_dict["error"] = self.error
        if self.code is not None:
            result_dict["code"] = str(self.code)
        return result_dict
