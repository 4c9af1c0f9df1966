"""Jadugar Calc: expression evaluation, symbolic differentiation and Newton-Raphson solving."""

__all__ = [
    "config",
    "tokenizer",
    "parser",
    "nodes",
    "functions",
    "evaluator",
    "calculus",
    "solver",
    "formatter",
    "symbolic",
    "cli",
    "types",
    "api",
    "logging_config",
]

# Public API exports

__api_exports__ = [
    "calculate",
    "evaluate_text",
    "evaluate_batch",
    "parse_scope",
    "solve_for",
    "derivative",
    "roots",
    "validate_expression",
]
