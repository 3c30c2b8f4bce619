#!/usr/bin/env python

"""
wk - Main Entry Point

A command-line time tracker: named tasks, one running task at a time,
and per-task duration reports for the current day, week, month or year.

Usage:
    python main.py <command> [args]

Requirements:
    - Python 3.10+
    - See pyproject.toml for dependencies
"""

import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from wk.cli import main


if __name__ == "__main__":
    sys.exit(main())
