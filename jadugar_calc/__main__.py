"""Main entry point for running jadugar_calc as a module.

This allows running Jadugar Calc with:
    python -m jadugar_calc
    python -m jadugar_calc --health-check
    python -m jadugar_calc -e "2+2"
"""

from __future__ import annotations

import sys

from .cli import main_entry

if __name__ == "__main__":
    sys.exit(main_entry())
