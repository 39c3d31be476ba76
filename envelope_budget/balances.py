"""Envelope balance calculations.

Two figures are derived for every envelope against the store's reporting
month:

* ``calc_envelope_balance`` – the cumulative balance at the end of the
  reporting month.  Allocations accrue for every month since the budget
  start when rollover is on, or only once when it is off, and every
  transaction up to the end of the reporting month is applied.
* ``calc_remaining_this_month`` – a single month's allocation plus the net
  effect of transactions dated inside the reporting month.  This figure
  never looks at the rollover flag.

Both are recomputed from the full ledger on every call.  Unknown envelope
ids yield ``0.0`` instead of raising.

The DataFrame helpers at the bottom feed the dashboard and scripts.
"""

from __future__ import annotations

from typing import Dict

import numpy as np
import pandas as pd

from .models import EXPENSE, INCOME, LedgerStore
from .periods import is_in_month, month_end, month_start, months_between_inclusive, parse_period

SUMMARY_COLUMNS = ['id', 'Envelope', 'Monthly', 'Balance', 'Remaining']
TRANSACTION_COLUMNS = ['id', 'Date', 'Type', 'Title', 'Description', 'Amount', 'Sign']


def calc_envelope_balance(store: LedgerStore, envelope_id: str) -> float:
    """Balance of ``envelope_id`` as of the end of the reporting month."""
    envelope = store.find_envelope(envelope_id)
    if envelope is None:
        return 0.0

    settings = store.settings
    report_end = month_end(parse_period(settings.report_period)).date()

    balance = envelope.starting_balance
    if settings.rollover_enabled:
        months = months_between_inclusive(settings.budget_start, settings.report_period)
        balance += envelope.monthly_add * months
    else:
        balance += envelope.monthly_add

    for txn in store.transactions:
        if txn.date > report_end:
            continue
        balance += txn.effect_on(envelope_id)
    return balance


def calc_remaining_this_month(store: LedgerStore, envelope_id: str) -> float:
    """This month's allocation left for ``envelope_id`` in the reporting month."""
    envelope = store.find_envelope(envelope_id)
    if envelope is None:
        return 0.0

    report_start = parse_period(store.settings.report_period)
    start = month_start(report_start).date()
    end = month_end(report_start).date()

    remaining = envelope.monthly_add
    for txn in store.transactions:
        if txn.date < start or txn.date > end:
            continue
        remaining += txn.effect_on(envelope_id)
    return remaining


def envelope_summary(store: LedgerStore) -> pd.DataFrame:
    """One row per envelope with its monthly allocation and both balances.

    Rows keep the store's envelope order.
    """
    rows = [
        {
            'id': env.id,
            'Envelope': env.name,
            'Monthly': env.monthly_add,
            'Balance': calc_envelope_balance(store, env.id),
            'Remaining': calc_remaining_this_month(store, env.id),
        }
        for env in store.envelopes
    ]
    return pd.DataFrame(rows, columns=SUMMARY_COLUMNS)


def summary_totals(summary: pd.DataFrame) -> Dict[str, float]:
    """Totals across all envelopes of a summary frame."""
    if summary.empty:
        return {'monthly': 0.0, 'balance': 0.0, 'remaining': 0.0, 'overspent': 0}
    return {
        'monthly': float(summary['Monthly'].sum()),
        'balance': float(summary['Balance'].sum()),
        'remaining': float(summary['Remaining'].sum()),
        'overspent': int((summary['Balance'] < 0).sum()),
    }


def month_transactions(store: LedgerStore) -> pd.DataFrame:
    """Transactions dated in the reporting month, newest first.

    ``Title`` names the envelope(s) involved, falling back to ``Unknown``
    for references that no longer resolve.  ``Sign`` is the display prefix
    for the amount: ``-`` for expenses, ``+`` for income and blank for
    transfers.
    """
    rows = []
    for txn in store.transactions:
        if not is_in_month(txn.date, store.settings.report_period):
            continue
        if txn.is_transfer:
            title = f"{store.envelope_name(txn.from_envelope_id)} → {store.envelope_name(txn.to_envelope_id)}"
        else:
            title = store.envelope_name(txn.envelope_id)
        rows.append({
            'id': txn.id,
            'Date': txn.date,
            'Type': txn.kind,
            'Title': title,
            'Description': txn.description or txn.kind.capitalize(),
            'Amount': txn.amount,
        })

    frame = pd.DataFrame(rows, columns=TRANSACTION_COLUMNS[:-1])
    if frame.empty:
        return pd.DataFrame(columns=TRANSACTION_COLUMNS)

    frame['Sign'] = np.where(
        frame['Type'] == EXPENSE,
        '-',
        np.where(frame['Type'] == INCOME, '+', ''),
    )
    # stable sort keeps entry order for same-day transactions
    frame = frame.sort_values('Date', ascending=False, kind='mergesort').reset_index(drop=True)
    return frame
