"""Unit tests for envelope_budget.balances.

These cover the cumulative balance, the month-scoped remaining figure and
the DataFrame summaries built from them.
"""

from __future__ import annotations

import datetime as dt

from envelope_budget.balances import (
    calc_envelope_balance,
    calc_remaining_this_month,
    envelope_summary,
    month_transactions,
    summary_totals,
)
from envelope_budget.models import Envelope

from conftest import expense, income, make_store, transfer


def test_balance_without_transactions_rollover_on(budget_store) -> None:
    # 2024-01 .. 2024-03 is three allocations
    assert calc_envelope_balance(budget_store, 'groceries') == 1800.0
    assert calc_envelope_balance(budget_store, 'rent') == 100.0 + 1800.0 * 3


def test_balance_without_transactions_rollover_off(budget_store) -> None:
    budget_store.settings.rollover = 'off'
    assert calc_envelope_balance(budget_store, 'groceries') == 600.0
    assert calc_envelope_balance(budget_store, 'rent') == 1900.0


def test_any_value_other_than_on_disables_rollover(budget_store) -> None:
    budget_store.settings.rollover = 'yes'
    assert calc_envelope_balance(budget_store, 'groceries') == 600.0


def test_report_before_budget_start_accrues_nothing(budget_store) -> None:
    budget_store.settings.report_period = '2023-12'
    assert calc_envelope_balance(budget_store, 'rent') == 100.0


def test_expense_scenario_with_and_without_rollover(budget_store) -> None:
    budget_store.transactions.append(expense('t1', '2024-02-15', 200.0, 'groceries'))

    assert calc_envelope_balance(budget_store, 'groceries') == 1600.0

    budget_store.settings.rollover = 'off'
    assert calc_envelope_balance(budget_store, 'groceries') == 400.0


def test_income_adds_to_balance(budget_store) -> None:
    budget_store.transactions.append(income('t1', '2024-03-02', 75.5, 'fun'))
    assert calc_envelope_balance(budget_store, 'fun') == 150.0 + 75.5


def test_transfer_moves_value_between_two_envelopes_only(budget_store) -> None:
    before = {env.id: calc_envelope_balance(budget_store, env.id) for env in budget_store.envelopes}
    budget_store.transactions.append(transfer('t1', '2024-03-10', 250.0, 'rent', 'groceries'))

    assert calc_envelope_balance(budget_store, 'rent') == before['rent'] - 250.0
    assert calc_envelope_balance(budget_store, 'groceries') == before['groceries'] + 250.0
    assert calc_envelope_balance(budget_store, 'fun') == before['fun']


def test_future_transactions_are_excluded(budget_store) -> None:
    budget_store.transactions.extend([
        expense('t1', '2024-04-01', 999.0, 'groceries'),
        transfer('t2', '2024-05-20', 10.0, 'groceries', 'fun'),
    ])
    assert calc_envelope_balance(budget_store, 'groceries') == 1800.0
    assert calc_remaining_this_month(budget_store, 'groceries') == 600.0
    assert calc_envelope_balance(budget_store, 'fun') == 150.0


def test_last_day_of_report_month_is_included(budget_store) -> None:
    budget_store.transactions.append(expense('t1', '2024-03-31', 20.0, 'groceries'))
    assert calc_envelope_balance(budget_store, 'groceries') == 1780.0
    assert calc_remaining_this_month(budget_store, 'groceries') == 580.0


def test_remaining_this_month_ignores_rollover(budget_store) -> None:
    budget_store.transactions.extend([
        expense('t1', '2024-03-05', 150.0, 'groceries'),
        expense('t2', '2024-02-10', 80.0, 'groceries'),
    ])
    assert calc_remaining_this_month(budget_store, 'groceries') == 450.0
    rolled = calc_envelope_balance(budget_store, 'groceries')

    budget_store.settings.rollover = 'off'
    assert calc_remaining_this_month(budget_store, 'groceries') == 450.0
    assert calc_envelope_balance(budget_store, 'groceries') != rolled


def test_remaining_this_month_counts_transfers_in_month(budget_store) -> None:
    budget_store.transactions.extend([
        transfer('t1', '2024-03-01', 40.0, 'fun', 'groceries'),
        transfer('t2', '2024-02-28', 5.0, 'fun', 'groceries'),
    ])
    assert calc_remaining_this_month(budget_store, 'fun') == 10.0
    assert calc_remaining_this_month(budget_store, 'groceries') == 640.0


def test_unknown_envelope_yields_zero(budget_store) -> None:
    assert calc_envelope_balance(budget_store, 'missing') == 0.0
    assert calc_remaining_this_month(budget_store, 'missing') == 0.0


def test_dangling_references_contribute_nothing(budget_store) -> None:
    budget_store.transactions.extend([
        expense('t1', '2024-03-03', 30.0, 'deleted-envelope'),
        transfer('t2', '2024-03-04', 25.0, 'deleted-envelope', 'groceries'),
    ])
    assert calc_envelope_balance(budget_store, 'groceries') == 1825.0
    assert calc_envelope_balance(budget_store, 'rent') == 5500.0


def test_envelope_summary_keeps_store_order(budget_store) -> None:
    budget_store.transactions.append(expense('t1', '2024-03-05', 700.0, 'fun'))
    summary = envelope_summary(budget_store)

    assert list(summary['Envelope']) == ['Groceries', 'Rent', 'Fun']
    fun = summary.set_index('id').loc['fun']
    assert fun['Balance'] == 150.0 - 700.0
    assert fun['Remaining'] == 50.0 - 700.0

    totals = summary_totals(summary)
    assert totals['monthly'] == 2450.0
    assert totals['overspent'] == 1


def test_envelope_summary_empty_store() -> None:
    summary = envelope_summary(make_store())
    assert summary.empty
    assert summary_totals(summary)['balance'] == 0.0


def test_month_transactions_sorted_with_unknown_labels(budget_store) -> None:
    budget_store.transactions.extend([
        expense('t1', '2024-03-02', 10.0, 'groceries'),
        income('t2', '2024-03-20', 5.0, 'nowhere'),
        transfer('t3', '2024-03-11', 7.0, 'rent', 'fun'),
        expense('t4', '2024-02-27', 1.0, 'groceries'),
    ])
    frame = month_transactions(budget_store)

    assert list(frame['id']) == ['t2', 't3', 't1']
    assert list(frame['Sign']) == ['+', '', '-']
    assert frame.loc[0, 'Title'] == 'Unknown'
    assert frame.loc[1, 'Title'] == 'Rent → Fun'
    assert frame.loc[2, 'Description'] == 'Expense'
    assert frame.loc[0, 'Date'] == dt.date(2024, 3, 20)


def test_month_transactions_empty_month(budget_store) -> None:
    frame = month_transactions(budget_store)
    assert frame.empty
    assert 'Sign' in frame.columns


def test_starting_balance_is_included_once() -> None:
    store = make_store(envelopes=[Envelope(id='a', name='A', monthly_add=10.0, starting_balance=250.0)])
    assert calc_envelope_balance(store, 'a') == 280.0
    assert calc_remaining_this_month(store, 'a') == 10.0
