"""Mutation operations on a :class:`~envelope_budget.models.LedgerStore`.

Every operation validates its input completely before touching the store,
so a :class:`ValidationError` always leaves the store unchanged.  Callers
are expected to persist the store after a successful mutation.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, Optional

from .models import (
    ROLLOVER_OFF,
    ROLLOVER_ON,
    TRANSACTION_KINDS,
    TRANSFER,
    Envelope,
    LedgerStore,
    Transaction,
    new_id,
    to_amount,
)
from .periods import as_date, is_valid_period

logger = logging.getLogger(__name__)

_CURRENCY_RE = re.compile(r"^[A-Z]{3}$")


class ValidationError(ValueError):
    """Raised when form input cannot be applied to the store."""


def upsert_envelope(
    store: LedgerStore,
    name: str,
    monthly_add: Any = 0,
    starting_balance: Any = 0,
    envelope_id: Optional[str] = None,
) -> Envelope:
    """Create an envelope, or replace the fields of an existing one.

    Args:
        store: Store to mutate
        name: Display name, required after trimming
        monthly_add: Allocation added per month; blank or unparsable means 0
        starting_balance: Opening balance; blank or unparsable means 0
        envelope_id: Id of the envelope to edit.  When it matches nothing a
            new envelope with a fresh id is appended.

    Returns:
        The created or updated envelope

    Raises:
        ValidationError: If the name is empty
    """
    clean_name = (name or '').strip()
    if not clean_name:
        raise ValidationError("Envelope name is required.")

    monthly = to_amount(monthly_add)
    starting = to_amount(starting_balance)

    existing = store.find_envelope(envelope_id)
    if existing is not None:
        existing.name = clean_name
        existing.monthly_add = monthly
        existing.starting_balance = starting
        logger.info("Updated envelope %s (%s)", existing.id, clean_name)
        return existing

    envelope = Envelope(id=new_id(), name=clean_name, monthly_add=monthly, starting_balance=starting)
    store.envelopes.append(envelope)
    logger.info("Created envelope %s (%s)", envelope.id, clean_name)
    return envelope


def upsert_transaction(
    store: LedgerStore,
    kind: str,
    date: Any,
    amount: Any,
    description: str = '',
    refs: Optional[Dict[str, Optional[str]]] = None,
    transaction_id: Optional[str] = None,
) -> Transaction:
    """Create a transaction, or replace an existing one in place.

    Args:
        store: Store to mutate
        kind: ``expense``, ``income`` or ``transfer``
        date: Transaction date (date object or ``YYYY-MM-DD`` string)
        amount: Strictly positive amount
        description: Free text, trimmed
        refs: ``{'envelope_id': ...}`` for expenses and income,
            ``{'from_envelope_id': ..., 'to_envelope_id': ...}`` for transfers
        transaction_id: Id of the transaction to replace.  When it matches
            nothing a new transaction with a fresh id is appended.

    Returns:
        The stored transaction

    Raises:
        ValidationError: If any field fails validation
    """
    refs = refs or {}
    kind = (kind or '').strip().lower()
    if kind not in TRANSACTION_KINDS:
        raise ValidationError(f"Unknown transaction type: {kind or '(blank)'}.")

    if date is None or (isinstance(date, str) and not date.strip()):
        raise ValidationError("Date is required.")
    parsed_date = as_date(date)
    if parsed_date is None:
        raise ValidationError(f"Invalid date: {date}. Use YYYY-MM-DD format.")

    value = to_amount(amount)
    if not value > 0:
        raise ValidationError("Amount must be greater than 0.")

    envelope_id = from_id = to_id = None
    if kind == TRANSFER:
        from_id = refs.get('from_envelope_id') or None
        to_id = refs.get('to_envelope_id') or None
        if not from_id or not to_id:
            raise ValidationError("Choose both From and To envelopes.")
        if from_id == to_id:
            raise ValidationError("From and To cannot be the same.")
    else:
        envelope_id = refs.get('envelope_id') or None
        if not envelope_id:
            raise ValidationError("Choose an envelope.")

    existing = store.find_transaction(transaction_id)
    txn = Transaction(
        id=existing.id if existing is not None else new_id(),
        kind=kind,
        date=parsed_date,
        amount=value,
        description=(description or '').strip(),
        envelope_id=envelope_id,
        from_envelope_id=from_id,
        to_envelope_id=to_id,
    )

    if existing is not None:
        index = store.transactions.index(existing)
        store.transactions[index] = txn
        logger.info("Updated %s transaction %s", kind, txn.id)
    else:
        store.transactions.append(txn)
        logger.info("Recorded %s transaction %s", kind, txn.id)
    return txn


def delete_transaction(store: LedgerStore, transaction_id: Optional[str]) -> bool:
    """Remove the transaction with ``transaction_id``.

    Confirmation is the caller's responsibility.  Returns ``False`` when no
    transaction matched.
    """
    if not transaction_id:
        return False
    before = len(store.transactions)
    store.transactions = [txn for txn in store.transactions if txn.id != transaction_id]
    removed = len(store.transactions) < before
    if removed:
        logger.info("Deleted transaction %s", transaction_id)
    return removed


def update_settings(
    store: LedgerStore,
    *,
    budget_start: Optional[str] = None,
    report_period: Optional[str] = None,
    rollover: Any = None,
    currency: Optional[str] = None,
) -> None:
    """Apply the given settings fields; omitted fields are left alone.

    ``rollover`` accepts ``"on"``/``"off"`` or a boolean.

    Raises:
        ValidationError: If a period key or currency code is malformed
    """
    if budget_start is not None and not is_valid_period(budget_start):
        raise ValidationError(f"Invalid budget start month: {budget_start}. Use YYYY-MM format.")
    if report_period is not None and not is_valid_period(report_period):
        raise ValidationError(f"Invalid reporting month: {report_period}. Use YYYY-MM format.")
    if currency is not None:
        currency = currency.strip().upper()
        if not _CURRENCY_RE.match(currency):
            raise ValidationError(f"Invalid currency code: {currency or '(blank)'}.")

    settings = store.settings
    if budget_start is not None:
        settings.budget_start = budget_start.strip()
    if report_period is not None:
        settings.report_period = report_period.strip()
    if rollover is not None:
        if isinstance(rollover, bool):
            settings.rollover = ROLLOVER_ON if rollover else ROLLOVER_OFF
        else:
            settings.rollover = str(rollover)
    if currency is not None:
        settings.currency = currency
