#!/usr/bin/env python3
"""Entry point for the car options desk CLI (thin wrapper).

Usage::

    python scripts/run_desk.py cars
    python scripts/run_desk.py buy 1 --type CALL --expiry 3 --target 5
"""

from __future__ import annotations

import sys
from pathlib import Path

# Allow running from a source checkout without installing the package
_SRC_DIR = Path(__file__).resolve().parent.parent / "src"
if _SRC_DIR.is_dir() and str(_SRC_DIR) not in sys.path:
    sys.path.insert(0, str(_SRC_DIR))


def main() -> int:
    from caroptions.cli import main as desk_main

    return desk_main()


if __name__ == "__main__":
    sys.exit(main())
