"""
main.py: command-line launcher.

Run a baseline vs deferred-acceptance comparison on the canonical demo
scenario:

    python main.py

Override any config field, export CSVs, or sweep seeds:

    python main.py --candidate-count 200 --constraint-rate 0.3
    python main.py --export-dir exports
    python main.py --sweep-seeds 1 2 3 4 5 --json

This file does NOT contain application logic. See placement/cli.py.
"""

from __future__ import annotations

from placement.cli import main


if __name__ == "__main__":
    raise SystemExit(main())
