"""Formatting utilities for currency and text display."""

from __future__ import annotations

from typing import Union

CURRENCY_SYMBOLS = {
    'AUD': 'A$',
    'CAD': 'CA$',
    'EUR': '€',
    'GBP': '£',
    'JPY': '¥',
    'NZD': 'NZ$',
    'USD': '$',
}

# Currencies displayed without minor units
ZERO_DECIMAL_CURRENCIES = {'JPY'}


def format_money(amount: Union[float, int, None], currency: str = 'AUD', include_sign: bool = True) -> str:
    """Format an amount in ``currency`` for display.

    Unknown currency codes are shown as a ``CODE`` prefix.  ``None`` formats
    as zero.

    Args:
        amount: The amount to format
        currency: ISO currency code
        include_sign: Whether to include the currency symbol

    Returns:
        Formatted string (e.g. "A$1,234.56", "-€12.00" or "1,234.56")

    Example:
        >>> format_money(1234.56, 'AUD')
        'A$1,234.56'
        >>> format_money(-12, 'EUR')
        '-€12.00'
        >>> format_money(1234.56, 'USD', include_sign=False)
        '1,234.56'
    """
    value = float(amount or 0)
    code = (currency or '').upper()
    decimals = 0 if code in ZERO_DECIMAL_CURRENCIES else 2
    formatted = f"{abs(value):,.{decimals}f}"
    if include_sign:
        symbol = CURRENCY_SYMBOLS.get(code, f"{code} " if code else '')
        formatted = f"{symbol}{formatted}"
    # -0.00 after rounding still reads as zero
    if value < 0 and round(abs(value), decimals) > 0:
        formatted = f"-{formatted}"
    return formatted

