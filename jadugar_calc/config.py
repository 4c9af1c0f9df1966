"""Centralized configuration for Jadugar Calc.

This module defines:
- Output precision for formatted results
- Newton-Raphson iteration limits and tolerances
- Input validation limits (length, depth, node count)
- Logging level and log file defaults
- Cache sizes for parsed expressions
- Root scanning parameters
- Named formula presets offered by the calculator front end

Configuration can be overridden via:
- CLI flags (see cli.py)
- Environment variables (prefixed with JADUGAR_)
"""

import os
import re

try:
    import importlib.metadata

    VERSION = importlib.metadata.version("jadugar-calc")
except Exception:
    # Fallback if package not installed
    VERSION = "1.0.0"

# Output formatting
OUTPUT_PRECISION = int(
    os.getenv("JADUGAR_OUTPUT_PRECISION", "14")
)  # significant digits

# Newton-Raphson solver configuration
MAX_NEWTON_ITERATIONS = int(os.getenv("JADUGAR_MAX_NEWTON_ITERATIONS", "80"))
RESIDUAL_TOLERANCE = float(
    os.getenv("JADUGAR_RESIDUAL_TOLERANCE", "1e-12")
)  # |f(x)| below this is a root
STEP_TOLERANCE = float(
    os.getenv("JADUGAR_STEP_TOLERANCE", "1e-12")
)  # |x_new - x| below this is convergence
DEFAULT_GUESS = float(os.getenv("JADUGAR_DEFAULT_GUESS", "1.0"))
ZERO_DERIVATIVE_POLICY = os.getenv(
    "JADUGAR_ZERO_DERIVATIVE_POLICY", "fail"
).lower()  # "fail", "stall"

# Numeric tolerances for the function table
FACTORIAL_TOLERANCE = float(os.getenv("JADUGAR_FACTORIAL_TOLERANCE", "1e-9"))

# Input validation limits
MAX_INPUT_LENGTH = int(os.getenv("JADUGAR_MAX_INPUT_LENGTH", "10000"))  # characters
MAX_EXPRESSION_DEPTH = int(
    os.getenv("JADUGAR_MAX_EXPRESSION_DEPTH", "100")
)  # nesting levels
MAX_TREE_DEPTH = int(
    os.getenv("JADUGAR_MAX_TREE_DEPTH", "250")
)  # depth of the parsed tree, operator chains included
MAX_EXPRESSION_NODES = int(
    os.getenv("JADUGAR_MAX_EXPRESSION_NODES", "5000")
)  # total nodes

# Logging defaults, overridden by --log-level / --log-file
LOG_LEVEL = os.getenv("JADUGAR_LOG_LEVEL", "WARNING").upper()
LOG_FILE = os.getenv("JADUGAR_LOG_FILE") or None

# Cache configuration
CACHE_SIZE_PARSE = int(os.getenv("JADUGAR_CACHE_SIZE_PARSE", "1024"))

# Root scanning ("try another guess")
ROOT_SCAN_SAMPLES = int(os.getenv("JADUGAR_ROOT_SCAN_SAMPLES", "41"))
ROOT_SCAN_LOWER = float(os.getenv("JADUGAR_ROOT_SCAN_LOWER", "-10"))
ROOT_SCAN_UPPER = float(os.getenv("JADUGAR_ROOT_SCAN_UPPER", "10"))
ROOT_DEDUP_TOLERANCE = float(os.getenv("JADUGAR_ROOT_DEDUP_TOLERANCE", "1e-6"))

# REPL history (kept in memory only)
HISTORY_LIMIT = int(os.getenv("JADUGAR_HISTORY_LIMIT", "50"))

VAR_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

FORMULA_PRESETS = {
    "Akk CM": "area = length * width",
    "CropYield": "yield = (production / area) * 100",
    "ROI": "roi = (profit / investment) * 100",
}
