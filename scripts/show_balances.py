#!/usr/bin/env python3
"""Show envelope balances and this month's transactions for a budget store."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from envelope_budget.balances import envelope_summary, month_transactions, summary_totals
from envelope_budget.ledger import ValidationError, update_settings
from envelope_budget.storage import LedgerStorage


def main(store_path: Optional[Path] = None, month: Optional[str] = None) -> int:
    storage = LedgerStorage(store_path)
    if not storage.exists():
        print(f"Budget store not found: {storage.path}")
        return 1

    store = storage.load()
    if month:
        # report against another month without saving the change
        try:
            update_settings(store, report_period=month)
        except ValidationError as e:
            print(e)
            return 1

    settings = store.settings
    print(f"Reporting month: {settings.report_period} (budget start {settings.budget_start}, rollover {settings.rollover})")

    summary = envelope_summary(store)
    if summary.empty:
        print("No envelopes yet.")
        return 0

    print(f"\nEnvelopes ({settings.currency}):")
    print(summary.drop(columns=['id']).to_string(index=False, float_format=lambda v: f"{v:,.2f}"))

    totals = summary_totals(summary)
    print(f"\nTotal balance: {totals['balance']:,.2f}  Remaining this month: {totals['remaining']:,.2f}")
    if totals['overspent']:
        print(f"Overspent envelopes: {totals['overspent']}")

    txns = month_transactions(store)
    print("\nTransactions this month:")
    if txns.empty:
        print("  (none)")
    else:
        print(txns[['Date', 'Type', 'Title', 'Description', 'Amount']].to_string(index=False))
    return 0


if __name__ == '__main__':
    parser = argparse.ArgumentParser(description='Show envelope balances for a budget store.')
    parser.add_argument('--store', type=Path, default=None, help='Path to the budget store JSON file')
    parser.add_argument('--month', default=None, help='Reporting month to use instead of the saved one (YYYY-MM)')
    args = parser.parse_args()
    raise SystemExit(main(store_path=args.store, month=args.month))
