"""Unit tests for envelope_budget.periods."""

from __future__ import annotations

import datetime as dt

import pytest

from envelope_budget import periods


def test_period_key_round_trips_through_parse_period() -> None:
    for key in ['2024-01', '2024-12', '1999-06']:
        assert periods.period_key(periods.parse_period(key)) == key


def test_period_key_accepts_dates_and_strings() -> None:
    assert periods.period_key(dt.date(2024, 2, 29)) == '2024-02'
    assert periods.period_key(dt.datetime(2023, 11, 5, 13, 30)) == '2023-11'
    assert periods.period_key('2025-07-01') == '2025-07'


@pytest.mark.parametrize('bad', ['2024-13', '2024-00', '2024/03', '24-03', '', None])
def test_parse_period_rejects_malformed_keys(bad) -> None:
    with pytest.raises(ValueError):
        periods.parse_period(bad)
    assert not periods.is_valid_period(bad)


def test_month_start_and_end() -> None:
    assert periods.month_start(dt.date(2024, 2, 17)) == dt.datetime(2024, 2, 1)
    assert periods.month_end(dt.date(2024, 2, 17)) == dt.datetime(2024, 2, 29, 23, 59, 59, 999999)
    assert periods.month_end('2023-02-01') == dt.datetime(2023, 2, 28, 23, 59, 59, 999999)
    assert periods.month_end(dt.date(2024, 12, 1)).day == 31


def test_months_between_inclusive() -> None:
    assert periods.months_between_inclusive('2024-03', '2024-03') == 1
    assert periods.months_between_inclusive('2024-01', '2024-03') == 3
    assert periods.months_between_inclusive('2023-11', '2024-02') == 4
    assert periods.months_between_inclusive('2024-03', '2024-01') == 0
    assert periods.months_between_inclusive('2025-01', '2024-12') == 0


def test_is_in_month_bounds() -> None:
    assert periods.is_in_month(dt.date(2024, 3, 1), '2024-03')
    assert periods.is_in_month(dt.date(2024, 3, 31), '2024-03')
    assert periods.is_in_month('2024-03-15', '2024-03')
    assert not periods.is_in_month(dt.date(2024, 2, 29), '2024-03')
    assert not periods.is_in_month(dt.date(2024, 4, 1), '2024-03')
    assert not periods.is_in_month('not a date', '2024-03')


def test_as_date_coercion() -> None:
    assert periods.as_date('2024-05-06') == dt.date(2024, 5, 6)
    assert periods.as_date(dt.datetime(2024, 5, 6, 8, 0)) == dt.date(2024, 5, 6)
    assert periods.as_date('') is None
    assert periods.as_date('06/05/2024') is None
    assert periods.as_date(None) is None


def test_current_period_uses_given_day() -> None:
    assert periods.current_period(dt.date(2026, 10, 19)) == '2026-10'
