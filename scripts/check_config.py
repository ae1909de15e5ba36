#!/usr/bin/env python3
"""Lightweight validator for the dashboard's store settings."""

from __future__ import annotations

import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from expense_dashboard.config import missing_settings  # noqa: E402


def main() -> int:
    missing = missing_settings()
    if missing:
        print("Configuration incomplete:")
        for name in missing:
            print(f"  - {name} is not set")
        return 1

    print("Store configuration found.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
