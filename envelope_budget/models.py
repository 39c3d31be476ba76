"""In-memory ledger store: envelopes, transactions and settings.

The store is a plain value owned by the caller and passed explicitly to
the calculator, the mutation operations and the persistence layer.  The
serialized form uses the camelCase keys of the JSON backup format so that
files round-trip unchanged.
"""

from __future__ import annotations

import datetime as dt
import math
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .periods import as_date

EXPENSE = 'expense'
INCOME = 'income'
TRANSFER = 'transfer'
TRANSACTION_KINDS = (EXPENSE, INCOME, TRANSFER)

ROLLOVER_ON = 'on'
ROLLOVER_OFF = 'off'

UNKNOWN_ENVELOPE = 'Unknown'


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def new_id() -> str:
    return str(uuid.uuid4())


def to_amount(value: Any, default: float = 0.0) -> float:
    """Parse a user or file supplied number, falling back to ``default``.

    Blank, unparsable, NaN and infinite values all yield ``default``.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, str):
        value = value.strip().replace(',', '')
        if not value:
            return default
    try:
        number = float(value)
    except (ValueError, TypeError):
        return default
    if math.isnan(number) or math.isinf(number):
        return default
    return number


def _ref(value: Any) -> Optional[str]:
    """Envelope reference as a string id, matching ``Envelope.id``."""
    if value is None or value == '':
        return None
    return str(value)


def _rollover_flag(value: Any) -> str:
    if isinstance(value, bool):
        return ROLLOVER_ON if value else ROLLOVER_OFF
    return str(value or ROLLOVER_ON)


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass
class Envelope:
    id: str
    name: str
    monthly_add: float = 0.0
    starting_balance: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'monthlyAdd': self.monthly_add,
            'startingBalance': self.starting_balance,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Envelope':
        return cls(
            id=str(data.get('id') or new_id()),
            name=str(data.get('name') or ''),
            monthly_add=to_amount(data.get('monthlyAdd')),
            starting_balance=to_amount(data.get('startingBalance')),
        )


@dataclass
class Transaction:
    """One ledger entry.

    ``kind`` selects which references are meaningful: expense and income
    use ``envelope_id``; transfers use ``from_envelope_id`` and
    ``to_envelope_id``.  ``amount`` is always stored positive.
    """

    id: str
    kind: str
    date: dt.date
    amount: float
    description: str = ''
    envelope_id: Optional[str] = None
    from_envelope_id: Optional[str] = None
    to_envelope_id: Optional[str] = None

    @property
    def is_transfer(self) -> bool:
        return self.kind == TRANSFER

    def effect_on(self, envelope_id: str) -> float:
        """Signed change this transaction applies to ``envelope_id``."""
        if self.kind == EXPENSE:
            return -self.amount if self.envelope_id == envelope_id else 0.0
        if self.kind == INCOME:
            return self.amount if self.envelope_id == envelope_id else 0.0
        if self.kind == TRANSFER:
            delta = 0.0
            if self.from_envelope_id == envelope_id:
                delta -= self.amount
            if self.to_envelope_id == envelope_id:
                delta += self.amount
            return delta
        return 0.0

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            'id': self.id,
            'date': self.date.isoformat(),
            'type': self.kind,
            'amount': self.amount,
            'description': self.description,
        }
        if self.is_transfer:
            payload['fromEnvelopeId'] = self.from_envelope_id
            payload['toEnvelopeId'] = self.to_envelope_id
        else:
            payload['envelopeId'] = self.envelope_id
        return payload

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Transaction':
        parsed_date = as_date(data.get('date'))
        if parsed_date is None:
            raise ValueError(f"Transaction {data.get('id')!r} has an invalid date: {data.get('date')!r}")
        return cls(
            id=str(data.get('id') or new_id()),
            kind=str(data.get('type') or '').strip().lower(),
            date=parsed_date,
            amount=to_amount(data.get('amount')),
            description=str(data.get('description') or ''),
            envelope_id=_ref(data.get('envelopeId')),
            from_envelope_id=_ref(data.get('fromEnvelopeId')),
            to_envelope_id=_ref(data.get('toEnvelopeId')),
        )


@dataclass
class Settings:
    budget_start: str
    report_period: str
    rollover: str = ROLLOVER_ON
    currency: str = 'AUD'

    @property
    def rollover_enabled(self) -> bool:
        return self.rollover == ROLLOVER_ON

    def to_dict(self) -> Dict[str, Any]:
        return {
            'budgetStartYM': self.budget_start,
            'reportYM': self.report_period,
            'rollover': self.rollover,
            'currency': self.currency,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], fallback_period: str, fallback_currency: str) -> 'Settings':
        return cls(
            budget_start=str(data.get('budgetStartYM') or fallback_period),
            report_period=str(data.get('reportYM') or fallback_period),
            rollover=_rollover_flag(data.get('rollover')),
            currency=str(data.get('currency') or fallback_currency),
        )


@dataclass
class LedgerStore:
    settings: Settings
    envelopes: List[Envelope] = field(default_factory=list)
    transactions: List[Transaction] = field(default_factory=list)

    # Lookups ---------------------------------------------------------------

    def find_envelope(self, envelope_id: Optional[str]) -> Optional[Envelope]:
        """Return the envelope with ``envelope_id`` or ``None`` when absent.

        A miss is an expected outcome: transactions may still reference an
        envelope id that no longer resolves.
        """
        if not envelope_id:
            return None
        return next((env for env in self.envelopes if env.id == envelope_id), None)

    def envelope_name(self, envelope_id: Optional[str]) -> str:
        envelope = self.find_envelope(envelope_id)
        return envelope.name if envelope is not None else UNKNOWN_ENVELOPE

    def find_transaction(self, transaction_id: Optional[str]) -> Optional[Transaction]:
        if not transaction_id:
            return None
        return next((txn for txn in self.transactions if txn.id == transaction_id), None)

    # Serialization ---------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        return {
            'settings': self.settings.to_dict(),
            'envelopes': [env.to_dict() for env in self.envelopes],
            'transactions': [txn.to_dict() for txn in self.transactions],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], fallback_period: str, fallback_currency: str) -> 'LedgerStore':
        """Build a store from its serialized form.

        Raises:
            ValueError: If a nested record is not an object or a transaction
                date cannot be parsed
        """
        envelopes = []
        for row in data.get('envelopes') or []:
            if not isinstance(row, dict):
                raise ValueError(f"Envelope entry is not an object: {row!r}")
            envelopes.append(Envelope.from_dict(row))
        transactions = []
        for row in data.get('transactions') or []:
            if not isinstance(row, dict):
                raise ValueError(f"Transaction entry is not an object: {row!r}")
            transactions.append(Transaction.from_dict(row))
        return cls(
            settings=Settings.from_dict(data.get('settings') or {}, fallback_period, fallback_currency),
            envelopes=envelopes,
            transactions=transactions,
        )
