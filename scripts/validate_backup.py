#!/usr/bin/env python3
"""Lightweight validator for budget backup files."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import List

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from envelope_budget.config import BACKUP_DIR
from envelope_budget.storage import describe_backup


def main(paths: List[str]) -> int:
    targets = [Path(p) for p in paths] if paths else sorted(BACKUP_DIR.glob('*.json'))
    if not targets:
        print(f"No backup files found in {BACKUP_DIR}")
        return 1

    issues = []
    for path in targets:
        result = describe_backup(path)
        if 'errors' in result:
            issues.append((result['name'], result['errors']))
        else:
            print(f"  ok {result['name']}: {result['envelopes']} envelopes, {result['transactions']} transactions")

    if issues:
        print("Backup validation failed:")
        for filename, message in issues:
            print(f"  - {filename}: {message}")
        return 1

    print("All backups validated successfully.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
