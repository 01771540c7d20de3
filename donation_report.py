#!/usr/bin/env python3
"""Donation Report Generator.

This is the main entry point script for the donation reports tool.
It wraps the package CLI for convenient execution.

Usage:
    python donation_report.py --start-date 2024-01-01 --summary-csv summary.csv

For full documentation and options:
    python donation_report.py --help
"""

import sys
from pathlib import Path

# Add src to path for development installs
src_path = Path(__file__).parent / "src"
if src_path.exists():
    sys.path.insert(0, str(src_path))

from donation_reports.cli import main

if __name__ == "__main__":
    sys.exit(main())
