"""Top-level package for the envelope budget.

The primary modules are:

* ``periods`` – calendar-month helpers
* ``models`` – the in-memory ledger store (envelopes, transactions, settings)
* ``balances`` – cumulative and month-scoped envelope balances
* ``ledger`` – validated mutations of the store
* ``storage`` – JSON persistence and backup import/export
* ``dashboard`` – a Streamlit app that ties everything together

To run the dashboard from the command line you can execute:

```bash
streamlit run envelope_budget/dashboard.py
```
"""

from . import balances  # noqa: F401  # re-exported for convenience
from . import ledger  # noqa: F401  # re-exported for convenience
from . import periods  # noqa: F401  # re-exported for convenience
from . import storage  # noqa: F401  # re-exported for convenience
from .balances import calc_envelope_balance, calc_remaining_this_month
from .ledger import ValidationError
from .models import Envelope, LedgerStore, Settings, Transaction
from .storage import BackupImportError, LedgerStorage

# Streamlit may not be installed in all environments (e.g. during unit
# testing), so the dashboard is imported lazily.
try:
    from . import dashboard  # type: ignore  # noqa: F401
except ModuleNotFoundError:
    dashboard = None  # type: ignore


__all__ = [
    'balances',
    'ledger',
    'periods',
    'storage',
    'dashboard',
    'calc_envelope_balance',
    'calc_remaining_this_month',
    'ValidationError',
    'BackupImportError',
    'Envelope',
    'LedgerStore',
    'LedgerStorage',
    'Settings',
    'Transaction',
]
