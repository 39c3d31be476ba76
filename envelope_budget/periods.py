"""Calendar-month helpers used by the balance calculator.

A *period* is a calendar month identified by a ``YYYY-MM`` key.  All
dates are naive local calendar dates; no timezone conversion happens
anywhere in this module.
"""

from __future__ import annotations

import calendar
import datetime as dt
import re
from typing import Any, Optional, Union

import pandas as pd

DateLike = Union[dt.date, dt.datetime, str]

_PERIOD_RE = re.compile(r"^(\d{4})-(\d{2})$")


def as_date(value: Any) -> Optional[dt.date]:
    """Coerce ``value`` to a naive :class:`datetime.date`.

    Accepts dates, datetimes, pandas timestamps and ISO formatted strings
    (``YYYY-MM-DD`` with an optional time part).  Returns ``None`` when the
    value cannot be interpreted as a calendar date.
    """
    if value is None:
        return None
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    text = str(value).strip()
    if not text:
        return None
    try:
        return dt.datetime.fromisoformat(text).date()
    except ValueError:
        return None


def _require_date(value: DateLike) -> dt.date:
    parsed = as_date(value)
    if parsed is None:
        raise ValueError(f"Not a calendar date: {value!r}")
    return parsed


def period_key(value: DateLike) -> str:
    """Return the ``YYYY-MM`` key of the month containing ``value``."""
    d = _require_date(value)
    return f"{d.year:04d}-{d.month:02d}"


def parse_period(key: str) -> dt.datetime:
    """Return the first instant of the month named by ``key``.

    Raises:
        ValueError: If ``key`` is not a ``YYYY-MM`` string with a valid month
    """
    match = _PERIOD_RE.match(str(key or '').strip())
    if not match:
        raise ValueError(f"Invalid period key: {key!r} (expected YYYY-MM)")
    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid month in period key: {key!r}")
    return dt.datetime(year, month, 1)


def is_valid_period(key: Any) -> bool:
    try:
        parse_period(key)
    except ValueError:
        return False
    return True


def month_start(value: DateLike) -> dt.datetime:
    """First instant of the month containing ``value``."""
    d = _require_date(value)
    return dt.datetime(d.year, d.month, 1)


def month_end(value: DateLike) -> dt.datetime:
    """Last instant (end of the last day) of the month containing ``value``."""
    d = _require_date(value)
    last_day = calendar.monthrange(d.year, d.month)[1]
    return dt.datetime(d.year, d.month, last_day, 23, 59, 59, 999999)


def months_between_inclusive(start_period: str, end_period: str) -> int:
    """Count calendar months from ``start_period`` to ``end_period`` inclusive.

    Returns 0 rather than a negative count when the end precedes the start.

    Example:
        >>> months_between_inclusive('2024-01', '2024-03')
        3
        >>> months_between_inclusive('2024-03', '2024-01')
        0
    """
    start = pd.Period(parse_period(start_period), freq='M')
    end = pd.Period(parse_period(end_period), freq='M')
    months = (end - start).n
    return max(0, months + 1)


def is_in_month(value: DateLike, period: str) -> bool:
    """True when ``value`` falls within the month named by ``period``."""
    d = as_date(value)
    if d is None:
        return False
    start = parse_period(period)
    moment = dt.datetime(d.year, d.month, d.day)
    return month_start(start) <= moment <= month_end(start)


def current_period(today: Optional[dt.date] = None) -> str:
    """Period key of today's local date."""
    return period_key(today or dt.date.today())
