"""Shared fixtures for the envelope budget tests."""

from __future__ import annotations

import datetime as dt

import pytest

from envelope_budget.models import Envelope, LedgerStore, Settings, Transaction


def make_store(
    *,
    budget_start: str = '2024-01',
    report_period: str = '2024-03',
    rollover: str = 'on',
    envelopes=None,
    transactions=None,
) -> LedgerStore:
    return LedgerStore(
        settings=Settings(
            budget_start=budget_start,
            report_period=report_period,
            rollover=rollover,
            currency='AUD',
        ),
        envelopes=list(envelopes or []),
        transactions=list(transactions or []),
    )


def expense(txn_id: str, date: str, amount: float, envelope_id: str) -> Transaction:
    return Transaction(
        id=txn_id,
        kind='expense',
        date=dt.date.fromisoformat(date),
        amount=amount,
        envelope_id=envelope_id,
    )


def income(txn_id: str, date: str, amount: float, envelope_id: str) -> Transaction:
    return Transaction(
        id=txn_id,
        kind='income',
        date=dt.date.fromisoformat(date),
        amount=amount,
        envelope_id=envelope_id,
    )


def transfer(txn_id: str, date: str, amount: float, from_id: str, to_id: str) -> Transaction:
    return Transaction(
        id=txn_id,
        kind='transfer',
        date=dt.date.fromisoformat(date),
        amount=amount,
        from_envelope_id=from_id,
        to_envelope_id=to_id,
    )


@pytest.fixture
def groceries() -> Envelope:
    return Envelope(id='groceries', name='Groceries', monthly_add=600.0, starting_balance=0.0)


@pytest.fixture
def budget_store(groceries) -> LedgerStore:
    return make_store(
        envelopes=[
            groceries,
            Envelope(id='rent', name='Rent', monthly_add=1800.0, starting_balance=100.0),
            Envelope(id='fun', name='Fun', monthly_add=50.0, starting_balance=0.0),
        ],
    )
