"""Unit tests for the evaluator and the function table."""

import math
import sys
import time
import unittest

import pytest

from jadugar_calc.evaluator import evaluate
from jadugar_calc.functions import FUNCTIONS, call_function, divide, lookup, raise_power
from jadugar_calc.nodes import EMPTY, BinaryOp, NumberLiteral
from jadugar_calc.parser import parse
from jadugar_calc.types import (
    ArgumentError,
    ErrorKind,
    Failure,
    MathDomainError,
    NumberResult,
    TextResult,
    UnknownFunctionError,
)


class TestEvaluate(unittest.TestCase):
    """Test tree evaluation."""

    def test_arithmetic(self):
        self.assertEqual(evaluate(parse("(1+2)*(3+4)")), NumberResult(21.0))
        self.assertEqual(evaluate(parse("2^3^2")), NumberResult(512.0))
        self.assertEqual(evaluate(parse("-2^2")), NumberResult(-4.0))
        self.assertEqual(evaluate(parse("7 - 2 - 1")), NumberResult(4.0))

    def test_constants(self):
        self.assertAlmostEqual(evaluate(parse("pi")).value, math.pi)
        self.assertAlmostEqual(evaluate(parse("e()")).value, math.e)

    def test_scope_bindings(self):
        result = evaluate(parse("a*b + c"), {"a": 2, "b": 3, "c": 1})
        self.assertEqual(result, NumberResult(7.0))

    def test_scope_shadows_constants(self):
        self.assertEqual(evaluate(parse("pi"), {"pi": 3}), NumberResult(3.0))

    def test_text_binding(self):
        self.assertEqual(evaluate(parse("name"), {"name": "Ada"}), TextResult("Ada"))

    def test_text_in_arithmetic_is_type_error(self):
        result = evaluate(parse("name + 1"), {"name": "Ada"})
        self.assertIsInstance(result, Failure)
        self.assertEqual(result.kind, ErrorKind.TYPE_ERROR)

    def test_undefined_variable(self):
        result = evaluate(parse("unknownVar + 1"))
        self.assertEqual(result.kind, ErrorKind.UNDEFINED_VARIABLE)
        self.assertEqual(result.subject, "unknownVar")

    def test_unknown_function(self):
        result = evaluate(parse("foo(1)"))
        self.assertEqual(result.kind, ErrorKind.UNKNOWN_FUNCTION)
        self.assertEqual(result.subject, "foo")

    def test_wrong_arity(self):
        result = evaluate(parse("sin(1, 2)"))
        self.assertEqual(result.kind, ErrorKind.ARGUMENT_ERROR)
        self.assertEqual(result.subject, "sin")

    def test_empty_sentinel(self):
        self.assertEqual(evaluate(EMPTY), TextResult(""))

    def test_first_failure_wins(self):
        result = evaluate(parse("sqrt(-1) + missing"))
        self.assertEqual(result.kind, ErrorKind.MATH_DOMAIN_ERROR)

    def test_tree_deeper_than_stack_is_failure(self):
        tree = NumberLiteral(1.0)
        for _ in range(max(5000, 2 * sys.getrecursionlimit())):
            tree = BinaryOp("+", tree, NumberLiteral(1.0))
        result = evaluate(tree)
        self.assertIsInstance(result, Failure)
        self.assertEqual(result.kind, ErrorKind.VALIDATION_ERROR)


class TestSpecialValues:
    """Division by zero, overflow and domain edges."""

    def test_division_by_zero(self):
        assert evaluate(parse("5/0")) == NumberResult(math.inf)
        assert evaluate(parse("-5/0")) == NumberResult(-math.inf)
        assert math.isnan(evaluate(parse("0/0")).value)

    def test_overflow_is_infinite(self):
        assert evaluate(parse("10^400")) == NumberResult(math.inf)
        assert evaluate(parse("exp(1000)")) == NumberResult(math.inf)

    def test_zero_to_negative_power(self):
        assert evaluate(parse("0^-1")) == NumberResult(math.inf)

    def test_zero_to_zero(self):
        assert evaluate(parse("0^0")) == NumberResult(1.0)

    def test_negative_zero_to_negative_power(self):
        assert evaluate(parse("(-0)^-1")) == NumberResult(-math.inf)
        assert evaluate(parse("(-0)^-2")) == NumberResult(math.inf)
        assert evaluate(parse("0^-3")) == NumberResult(math.inf)

    def test_large_factorial_is_infinite_without_exact_product(self):
        start = time.perf_counter()
        assert evaluate(parse("factorial(1e6)")) == NumberResult(math.inf)
        assert evaluate(parse("factorial(1e12)")) == NumberResult(math.inf)
        assert time.perf_counter() - start < 1.0

    def test_factorial_float_boundary(self):
        assert math.isfinite(evaluate(parse("factorial(170)")).value)
        assert evaluate(parse("factorial(171)")) == NumberResult(math.inf)

    def test_log_of_zero(self):
        assert evaluate(parse("ln(0)")) == NumberResult(-math.inf)

    @pytest.mark.parametrize(
        "expr",
        ["sqrt(-1)", "ln(-1)", "log(-10, 10)", "asin(2)", "(-8)^(1/3)", "factorial(-1)", "factorial(2.5)"],
    )
    def test_domain_errors(self, expr):
        result = evaluate(parse(expr))
        assert isinstance(result, Failure)
        assert result.kind == ErrorKind.MATH_DOMAIN_ERROR

    def test_negative_base_integer_power(self):
        assert evaluate(parse("(-2)^3")) == NumberResult(-8.0)


class TestFunctionTable(unittest.TestCase):
    """Test the static function table."""

    def test_every_entry_has_matching_name(self):
        for name, spec in FUNCTIONS.items():
            self.assertEqual(name, spec.name)

    def test_non_differentiable_entries_give_reason(self):
        for spec in FUNCTIONS.values():
            if spec.derivative is None and spec.max_args > 0:
                self.assertTrue(spec.reason, spec.name)

    def test_values(self):
        self.assertEqual(call_function("factorial", [5.0]), 120.0)
        self.assertEqual(call_function("log", [100.0, 10.0]), 2.0)
        self.assertAlmostEqual(call_function("log10", [1000.0]), 3.0)
        self.assertAlmostEqual(call_function("exp", [1.0]), math.e)
        self.assertEqual(call_function("abs", [-3.0]), 3.0)

    def test_lookup_unknown(self):
        with self.assertRaises(UnknownFunctionError) as ctx:
            lookup("nope")
        self.assertEqual(ctx.exception.subject, "nope")

    def test_arity_checked(self):
        with self.assertRaises(ArgumentError):
            call_function("log", [1.0, 2.0, 3.0])
        with self.assertRaises(ArgumentError):
            call_function("pi", [1.0])

    def test_divide_and_power_helpers(self):
        self.assertEqual(divide(1.0, -0.0), -math.inf)
        self.assertEqual(raise_power(2.0, 10.0), 1024.0)
        with self.assertRaises(MathDomainError):
            raise_power(-1.0, 0.5)


if __name__ == "__main__":
    unittest.main()
