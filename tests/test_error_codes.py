"""Test error codes returned by various functions."""

import unittest

from jadugar_calc.api import evaluate_text, solve_for
from jadugar_calc.parser import parse
from jadugar_calc.types import (
    CalcError,
    ErrorKind,
    Failure,
    LexError,
    NonDifferentiableError,
    ParseError,
    UndefinedVariableError,
    ValidationError,
)


class TestErrorCodes(unittest.TestCase):
    """Test that functions return appropriate error codes."""

    def test_too_long_error_code(self):
        """Overly long input is a validation failure with reason TOO_LONG."""
        try:
            parse("x" * 10001)  # Exceeds MAX_INPUT_LENGTH
            self.fail("Should have raised ValidationError")
        except ValidationError as e:
            self.assertEqual(e.reason, "TOO_LONG")
            self.assertIn("too long", str(e).lower())

    def test_invalid_equation_format_error(self):
        result = solve_for("x = x = 1", "x")
        self.assertIsInstance(result, Failure)
        self.assertIn("invalid equation format", result.message.lower())

    def test_every_kind_reachable_from_text(self):
        cases = {
            "1 # 2": ErrorKind.LEX_ERROR,
            "(1 + 2": ErrorKind.PARSE_ERROR,
            "missing": ErrorKind.UNDEFINED_VARIABLE,
            "nope(2)": ErrorKind.UNKNOWN_FUNCTION,
            "sqrt(-4)": ErrorKind.MATH_DOMAIN_ERROR,
            "exp(1, 2)": ErrorKind.ARGUMENT_ERROR,
        }
        for text, kind in cases.items():
            with self.subTest(text=text):
                self.assertEqual(evaluate_text(text).kind, kind)

    def test_error_kind_string_value(self):
        self.assertEqual(str(ErrorKind.ZERO_DERIVATIVE), "ZERO_DERIVATIVE")

    def test_hierarchy(self):
        for cls in (LexError, ParseError, ValidationError, UndefinedVariableError, NonDifferentiableError):
            self.assertTrue(issubclass(cls, CalcError))

    def test_default_codes(self):
        self.assertEqual(LexError("x").code, ErrorKind.LEX_ERROR)
        self.assertEqual(UndefinedVariableError("x").code, ErrorKind.UNDEFINED_VARIABLE)
        self.assertEqual(ParseError("x", code=ErrorKind.VALIDATION_ERROR).code, ErrorKind.VALIDATION_ERROR)

    def test_failure_from_error(self):
        failure = Failure.from_error(UndefinedVariableError("Undefined symbol q", subject="q"))
        self.assertEqual(failure, Failure(ErrorKind.UNDEFINED_VARIABLE, "Undefined symbol q", "q"))


if __name__ == "__main__":
    unittest.main()
