from __future__ import annotations

import argparse
import json
import re
import sys
from collections import deque
from typing import Any

from . import config
from .api import (
    calculate,
    derivative,
    evaluate_batch,
    evaluate_text,
    parse_scope,
    roots,
    solve_for,
)
from .config import FORMULA_PRESETS, VERSION
from .formatter import format_number, format_result, format_solution, format_superscript
from .logging_config import get_logger
from .types import CalcError, Converged, DerivativeResult, Failure, NotConverged

logger = get_logger("cli")

SOLVE_RE = re.compile(
    r"^solve\s+(?P<expr>.+?)\s+for\s+(?P<var>[A-Za-z_]\w*)(?:\s+from\s+(?P<guess>\S+))?$",
    re.IGNORECASE,
)
DIFF_RE = re.compile(
    r"^diff\s+(?P<expr>.+?)(?:\s+for\s+(?P<var>[A-Za-z_]\w*))?$", re.IGNORECASE
)
ROOTS_RE = re.compile(
    r"^roots\s+(?P<expr>.+?)\s+for\s+(?P<var>[A-Za-z_]\w*)"
    r"(?:\s+in\s+(?P<low>[-+.\deE]+)\s*\.\.\s*(?P<high>[-+.\deE]+))?$",
    re.IGNORECASE,
)


def _health_check() -> int:
    """Run health check to verify dependencies and basic operations.

    Returns:
        Exit code (0 for success, non-zero for failures)
    """
    checks_passed = 0
    checks_failed = 0

    print("Running Jadugar Calc health check...")
    print("-" * 50)

    try:
        import sympy as sp

        print(f"[OK] SymPy {sp.__version__} imported successfully")
        checks_passed += 1
    except ImportError as e:
        print(f"[FAIL] SymPy import failed: {e}")
        checks_failed += 1

    try:
        import numpy

        print(f"[OK] NumPy {numpy.__version__} imported successfully")
        checks_passed += 1
    except ImportError as e:
        print(f"[FAIL] NumPy import failed: {e}")
        checks_failed += 1

    result = calculate("2 + 2")
    if result == "4":
        print("[OK] Basic evaluation works")
        checks_passed += 1
    else:
        print(f"[FAIL] Basic evaluation failed: expected 4, got {result}")
        checks_failed += 1

    outcome = solve_for("x^2 - 4", "x", 1)
    if isinstance(outcome, Converged) and abs(outcome.value - 2) < 1e-9:
        print("[OK] Newton-Raphson solving works")
        checks_passed += 1
    else:
        print(f"[FAIL] Solving check failed: {outcome}")
        checks_failed += 1

    try:
        from .api import parse_text
        from .calculus import differentiate
        from .symbolic import sympy_derivative, to_sympy

        ast = parse_text("x^2 * sin(x)")
        ours = to_sympy(differentiate(ast, "x"))
        if sp.simplify(ours - sympy_derivative(ast, "x")) == 0:
            print("[OK] Differentiation agrees with SymPy")
            checks_passed += 1
        else:
            print(f"[FAIL] Differentiation mismatch: {ours}")
            checks_failed += 1
    except (CalcError, NameError, ValueError, TypeError) as e:
        print(f"[FAIL] Differentiation check failed: {e}")
        checks_failed += 1

    print("-" * 50)
    print(f"Results: {checks_passed} passed, {checks_failed} failed")

    if checks_failed > 0:
        print("\n[WARN] Some health checks failed. Core functionality may be impaired.")
        return 1

    print("\n[OK] All health checks passed!")
    return 0


def print_result_pretty(res: Any, output_format: str = "human", variable: str = "x") -> None:
    """Print a result in the specified format.

    Args:
        res: EvalResult, SolveOutcome or DerivativeResult
        output_format: "json" for JSON output, "human" for human-readable
        variable: Variable name used when rendering solve outcomes
    """
    if output_format == "json":
        print(json.dumps(res.to_dict(), indent=2, ensure_ascii=False))
        return
    if isinstance(res, DerivativeResult):
        if not res.ok:
            print("Error:", res.error)
            return
        shown = res.simplified or res.expression
        try:
            print(f"d/d{variable} = {format_superscript(shown)}")
        except UnicodeEncodeError:
            print(f"d/d{variable} = {shown}")
        return
    if isinstance(res, (Converged, NotConverged)):
        try:
            print(format_solution(res, variable))
        except UnicodeEncodeError:
            print(format_solution(res, variable).replace("≈", "~="))
        return
    print(format_result(res))


def _print_help() -> None:
    help_text = """
Jadugar Calc - expression calculator and equation solver

Enter an expression to evaluate it, e.g.  2+2  sin(pi/2)  log(100, 10)
An equation lhs = rhs evaluates its root form (lhs) - (rhs).

Commands:
  let a=2, b=3                      Bind variables for later expressions
  scope                             Show current bindings
  clear                             Remove all bindings
  solve EXPR for VAR [from GUESS]   Newton-Raphson solve (default guess 1)
  diff EXPR [for VAR]               Symbolic derivative (default VAR x)
  roots EXPR for VAR [in LOW..HIGH] Scan an interval for every root
  formulas                          List formula presets
  history                           Show recent calculations
  help                              Show this help
  quit, exit                        Leave the calculator

Functions: sin cos tan asin acos atan log ln log10 sqrt abs exp factorial
Constants: pi e
"""
    print(help_text)


def _handle_line(
    line: str,
    scope: dict[str, Any],
    history: deque,
    output_format: str,
) -> bool:
    """Handle one REPL line. Returns False when the loop should stop."""
    command = line.strip()
    lowered = command.lower()
    if not command:
        return True
    logger.debug("REPL input: %r", command)
    if lowered in ("quit", "exit"):
        return False
    if lowered == "help":
        _print_help()
        return True
    if lowered == "scope":
        if not scope:
            print("(no bindings)")
        for name, value in scope.items():
            print(f"{name} = {value}")
        return True
    if lowered == "clear":
        scope.clear()
        print("Bindings cleared")
        return True
    if lowered == "history":
        if not history:
            print("(empty)")
        for entry in history:
            print(entry)
        return True
    if lowered == "formulas":
        for name, formula in FORMULA_PRESETS.items():
            print(f"{name}: {formula}")
        return True
    if lowered.startswith("let "):
        try:
            scope.update(parse_scope(command[4:]))
        except CalcError as e:
            print("Error:", e.message)
        return True

    match = SOLVE_RE.match(command)
    if match:
        variable = match.group("var")
        outcome = solve_for(match.group("expr"), variable, match.group("guess"), scope)
        print_result_pretty(outcome, output_format, variable)
        if isinstance(outcome, Converged):
            history.appendleft(
                f"solve({match.group('expr')}) => {variable}={format_number(outcome.value)}"
            )
        return True

    match = ROOTS_RE.match(command)
    if match:
        found = roots(
            match.group("expr"),
            match.group("var"),
            match.group("low"),
            match.group("high"),
            scope,
        )
        print_result_pretty(found, output_format)
        return True

    match = DIFF_RE.match(command)
    if match:
        variable = match.group("var") or "x"
        print_result_pretty(derivative(match.group("expr"), variable), output_format, variable)
        return True

    result = evaluate_batch(command, scope) if ";" in command else evaluate_text(command, scope)
    print_result_pretty(result, output_format)
    history.appendleft(f"{command} = {format_result(result)}")
    return True


def repl_loop(output_format: str = "human") -> None:
    """Interactive REPL loop with graceful interrupt handling."""
    try:
        import readline  # noqa: F401
    except (ImportError, ModuleNotFoundError):
        # readline not available on Windows - that's fine
        pass

    print("Jadugar Calc - type 'help' for commands, 'quit' to exit.")
    scope: dict[str, Any] = {}
    history: deque = deque(maxlen=config.HISTORY_LIMIT)
    while True:
        try:
            line = input(">>> ")
        except (EOFError, KeyboardInterrupt):
            print()
            return
        if not _handle_line(line, scope, history, output_format):
            return


def main_entry(argv: list[str] | None = None) -> int:
    """
    Main entry point for Jadugar Calc CLI.

    Args:
        argv: Optional command-line arguments (defaults to sys.argv)

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    parser = argparse.ArgumentParser(prog="jadugar-calc")
    parser.add_argument(
        "-e",
        "--eval",
        type=str,
        help="Evaluate one expression and exit (non-interactive)",
        dest="eval_expr",
    )
    parser.add_argument(
        "--scope", type=str, help='Variable bindings, e.g. "a=2,b=3,c=1"'
    )
    parser.add_argument("--solve", type=str, metavar="VAR", help="Solve the expression for VAR")
    parser.add_argument("--guess", type=str, help="Initial guess for --solve (default: 1)")
    parser.add_argument("--diff", type=str, metavar="VAR", help="Differentiate with respect to VAR")
    parser.add_argument("--roots", type=str, metavar="VAR", help="Scan an interval for roots in VAR")
    parser.add_argument("--lower", type=float, help="Lower bound for --roots")
    parser.add_argument("--upper", type=float, help="Upper bound for --roots")
    parser.add_argument(
        "--format",
        type=str,
        choices=["json", "human"],
        default="human",
        help="Output format: json (machine-readable) or human (human-readable)",
    )
    parser.add_argument(
        "-p", "--precision", type=int, help="Set output precision (significant digits)"
    )
    parser.add_argument(
        "--max-iterations", type=int, help="Maximum Newton-Raphson iterations (default: 80)"
    )
    parser.add_argument(
        "--zero-derivative",
        type=str,
        choices=["fail", "stall"],
        help="What the solver does when the derivative vanishes (default: fail)",
    )
    parser.add_argument(
        "-v", "--version", action="store_true", help="Show program version"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Set logging level (default: JADUGAR_LOG_LEVEL or WARNING)",
    )
    parser.add_argument("--log-file", type=str, help="Write logs to file")
    parser.add_argument(
        "--health-check",
        action="store_true",
        help="Run health check and verify dependencies",
    )
    args = parser.parse_args(argv)

    from .logging_config import setup_logging

    setup_logging(level=args.log_level, log_file=args.log_file)

    # Apply CLI configuration overrides
    if args.precision and args.precision > 0:
        config.OUTPUT_PRECISION = int(args.precision)
    if args.max_iterations and args.max_iterations > 0:
        config.MAX_NEWTON_ITERATIONS = int(args.max_iterations)
    if args.zero_derivative:
        config.ZERO_DERIVATIVE_POLICY = args.zero_derivative

    if args.version:
        print(VERSION)
        return 0
    if args.health_check:
        return _health_check()

    try:
        scope = parse_scope(args.scope)
    except CalcError as e:
        print("Error:", e.message)
        return 1

    if args.eval_expr is not None:
        expr = args.eval_expr.strip()
        if expr.startswith(">>>"):
            expr = expr[3:].strip()
        if not expr:
            print("Error: Empty input. Please enter a valid expression or equation.")
            return 1
        if args.diff:
            res = derivative(expr, args.diff)
            print_result_pretty(res, args.format, args.diff)
        elif args.solve:
            res = solve_for(expr, args.solve, args.guess, scope)
            print_result_pretty(res, args.format, args.solve)
        elif args.roots:
            res = roots(expr, args.roots, args.lower, args.upper, scope)
            print_result_pretty(res, args.format, args.roots)
        elif ";" in expr:
            res = evaluate_batch(expr, scope)
            print_result_pretty(res, args.format)
        else:
            res = evaluate_text(expr, scope)
            print_result_pretty(res, args.format)
        if isinstance(res, Failure) or (isinstance(res, DerivativeResult) and not res.ok):
            return 1
        return 0 if res.ok or isinstance(res, NotConverged) else 1

    repl_loop(output_format=args.format)
    return 0


if __name__ == "__main__":
    """Allow running the CLI module directly with python -m jadugar_calc.cli"""
    sys.exit(main_entry())
