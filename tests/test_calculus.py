"""Unit tests for symbolic differentiation."""

import math
import unittest

import pytest
import sympy as sp

from jadugar_calc.calculus import differentiate
from jadugar_calc.evaluator import evaluate
from jadugar_calc.nodes import EMPTY, NumberLiteral
from jadugar_calc.parser import parse
from jadugar_calc.symbolic import equivalent, sympy_derivative, to_sympy
from jadugar_calc.types import ErrorKind, NonDifferentiableError


def _value(node, x):
    return evaluate(node, {"x": x}).value


class TestDifferentiation(unittest.TestCase):
    """Test differentiation rules."""

    def test_basic_differentiation(self):
        result = differentiate(parse("x^2"), "x")
        self.assertEqual(str(result), "2*x")
        self.assertEqual(_value(result, 3), 6.0)

    def test_constants_and_variables(self):
        self.assertEqual(differentiate(parse("5"), "x"), NumberLiteral(0.0))
        self.assertEqual(differentiate(parse("y"), "x"), NumberLiteral(0.0))
        self.assertEqual(differentiate(parse("x"), "x"), NumberLiteral(1.0))
        self.assertEqual(differentiate(parse("pi()"), "x"), NumberLiteral(0.0))

    def test_differentiation_with_variable(self):
        result = differentiate(parse("y^3 + x"), "y")
        self.assertEqual(str(result), "3*y^2")

    def test_trig_differentiation(self):
        self.assertEqual(str(differentiate(parse("sin(x)"), "x")), "cos(x)")
        self.assertEqual(str(differentiate(parse("cos(x)"), "x")), "-sin(x)")

    def test_constant_inner_function(self):
        self.assertEqual(differentiate(parse("sin(y)*x"), "x"), parse("sin(y)"))

    def test_abs_not_differentiable(self):
        with self.assertRaises(NonDifferentiableError) as ctx:
            differentiate(parse("abs(x)"), "x")
        self.assertEqual(ctx.exception.code, ErrorKind.NON_DIFFERENTIABLE)
        self.assertEqual(ctx.exception.subject, "abs")

    def test_factorial_not_differentiable(self):
        with self.assertRaises(NonDifferentiableError):
            differentiate(parse("factorial(x)"), "x")

    def test_unknown_function_not_differentiable(self):
        with self.assertRaises(NonDifferentiableError) as ctx:
            differentiate(parse("foo(x)"), "x")
        self.assertEqual(ctx.exception.subject, "foo")

    def test_empty_not_differentiable(self):
        with self.assertRaises(NonDifferentiableError):
            differentiate(EMPTY, "x")


FINITE_DIFFERENCE_CASES = [
    "x^3 - 2*x + 1",
    "sin(x)*cos(x)",
    "exp(2*x)/x",
    "ln(x^2 + 1)",
    "sqrt(x)",
    "x^x",
    "2^x",
    "tan(x)",
    "log(x, 2)",
    "log(x)",
    "log10(x)",
    "atan(x)",
    "asin(x/2)",
    "acos(x/2)",
    "(x + 1)/(x - 3)",
    "-x^2 + x^-1",
    "e^x * pi",
]


class TestDerivativeAgreement:
    """Derivatives agree with finite differences and with SymPy."""

    @pytest.mark.parametrize("expr", FINITE_DIFFERENCE_CASES)
    @pytest.mark.parametrize("x", [0.7, 1.3])
    def test_matches_finite_difference(self, expr, x):
        tree = parse(expr)
        derivative = differentiate(tree, "x")
        h = 1e-6
        estimate = (_value(tree, x + h) - _value(tree, x - h)) / (2 * h)
        exact = _value(derivative, x)
        assert math.isclose(exact, estimate, rel_tol=1e-4, abs_tol=1e-4)

    @pytest.mark.parametrize(
        "expr",
        ["x^3 - 2*x + 1", "sin(x)*cos(x)", "exp(2*x)/x", "ln(x^2 + 1)", "x^x", "2^x", "log(x, 2)"],
    )
    def test_matches_sympy(self, expr):
        tree = parse(expr)
        ours = to_sympy(differentiate(tree, "x"))
        assert sp.simplify(ours - sympy_derivative(tree, "x")) == 0

    def test_equivalent_helper(self):
        assert equivalent(differentiate(parse("x^2"), "x"), parse("x + x"))
        assert not equivalent(parse("x"), parse("x + 1"))


if __name__ == "__main__":
    unittest.main()
