"""Unit tests for result formatting."""

import math
import unittest

from jadugar_calc.api import calculate
from jadugar_calc.formatter import (
    format_number,
    format_result,
    format_solution,
    format_superscript,
    superscriptify,
)
from jadugar_calc.types import (
    Converged,
    ErrorKind,
    Failure,
    NotConverged,
    NumberResult,
    SequenceResult,
    TextResult,
)


class TestFormatNumber(unittest.TestCase):
    """Test numeric rendering."""

    def test_integers_have_no_decimal_point(self):
        self.assertEqual(format_number(4.0), "4")
        self.assertEqual(format_number(-120.0), "-120")

    def test_significant_digits(self):
        self.assertEqual(format_number(1 / 3), "0.33333333333333")
        self.assertEqual(format_number(math.pi, 4), "3.142")
        self.assertEqual(format_number(1e20), "1e+20")

    def test_special_values(self):
        self.assertEqual(format_number(math.inf), "Infinity")
        self.assertEqual(format_number(-math.inf), "-Infinity")
        self.assertEqual(format_number(math.nan), "NaN")
        self.assertEqual(format_number(-0.0), "0")


class TestFormatResult(unittest.TestCase):
    """Test formatting of every result kind."""

    def test_number(self):
        self.assertEqual(format_result(NumberResult(21.0)), "21")

    def test_text_verbatim(self):
        self.assertEqual(format_result(TextResult("hello")), "hello")
        self.assertEqual(format_result(TextResult("")), "")

    def test_sequence(self):
        result = SequenceResult((NumberResult(1.0), TextResult("a"), NumberResult(0.5)))
        self.assertEqual(format_result(result), '[1, "a", 0.5]')

    def test_nested_sequence(self):
        inner = SequenceResult((NumberResult(2.0),))
        self.assertEqual(format_result(SequenceResult((inner, NumberResult(3.0)))), "[[2], 3]")

    def test_failure(self):
        failure = Failure(ErrorKind.UNDEFINED_VARIABLE, "Undefined symbol q", subject="q")
        self.assertEqual(format_result(failure), "Error: Undefined symbol q")

    def test_reformatting_is_stable(self):
        for expr in ["1/3", "2^0.5", "1e20/7", "-123.456", "exp(10)"]:
            with self.subTest(expr=expr):
                once = calculate(expr)
                self.assertEqual(calculate(once), once)


class TestSuperscripts(unittest.TestCase):
    """Test human-readable exponent rendering."""

    def test_superscriptify(self):
        self.assertEqual(superscriptify("-12"), "⁻¹²")

    def test_integer_powers(self):
        self.assertEqual(format_superscript("x^2 + x**-3"), "x² + x⁻³")
        self.assertEqual(format_superscript("x^(-2)"), "x⁻²")

    def test_non_integer_powers_untouched(self):
        self.assertEqual(format_superscript("x^2.5"), "x^2.5")
        self.assertEqual(format_superscript("x^(2+1)"), "x^(2+1)")


class TestFormatSolution(unittest.TestCase):
    """Test solve outcome rendering."""

    def test_converged(self):
        self.assertEqual(format_solution(Converged(2.0, 5), "x"), "x ≈ 2")

    def test_not_converged(self):
        text = format_solution(NotConverged(3.0, 80), "x")
        self.assertTrue(text.startswith("No convergence (iteration limit reached)"))

    def test_failure(self):
        failure = Failure(ErrorKind.ZERO_DERIVATIVE, "Derivative is zero")
        self.assertEqual(format_solution(failure, "x"), "Error: Derivative is zero")


if __name__ == "__main__":
    unittest.main()
