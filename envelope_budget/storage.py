"""Persistence and backup for the ledger store.

The whole store lives in a single JSON file (the persistence slot).  It is
read once at start-up, seeded with default envelopes when missing, and
rewritten wholesale after every mutation.  Backups use the same JSON
structure, indented for humans.
"""

from __future__ import annotations

import datetime as dt
import json
import logging
import os
import shutil
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

from .config import (
    BACKUP_DIR,
    DEFAULT_CURRENCY,
    STORE_PATH,
    load_defaults,
)
from .models import Envelope, LedgerStore, Settings, new_id, to_amount
from .periods import current_period, is_valid_period

logger = logging.getLogger(__name__)


class BackupImportError(ValueError):
    """Raised when a backup file cannot be imported."""


def seed_store(today: Optional[dt.date] = None) -> LedgerStore:
    """Build the first-run store: starter envelopes, no transactions.

    Both the budget start and the reporting month are set to the current
    month.
    """
    defaults = load_defaults()
    period = current_period(today)
    envelopes = [
        Envelope(
            id=new_id(),
            name=str(row['name']),
            monthly_add=to_amount(row.get('monthlyAdd')),
            starting_balance=to_amount(row.get('startingBalance')),
        )
        for row in defaults.get('envelopes', [])
    ]
    settings = Settings(
        budget_start=period,
        report_period=period,
        rollover=str(defaults.get('rollover', 'on')),
        currency=DEFAULT_CURRENCY,
    )
    return LedgerStore(settings=settings, envelopes=envelopes, transactions=[])


def dumps_store(store: LedgerStore, indent: Optional[int] = None) -> str:
    return json.dumps(store.to_dict(), indent=indent, ensure_ascii=False)


def parse_store(data: Any) -> LedgerStore:
    """Validate a decoded JSON payload and build a store from it.

    Raises:
        BackupImportError: If the payload lacks the settings object, the
            envelope list or the transaction list, or holds malformed records
    """
    if not isinstance(data, dict):
        raise BackupImportError("Invalid backup file: expected a JSON object.")
    if not isinstance(data.get('settings'), dict):
        raise BackupImportError("Invalid backup file: 'settings' must be an object.")
    for key in ('envelopes', 'transactions'):
        if not isinstance(data.get(key), list):
            raise BackupImportError(f"Invalid backup file: '{key}' must be a list.")

    for key in ('budgetStartYM', 'reportYM'):
        value = data['settings'].get(key)
        if value and not is_valid_period(value):
            raise BackupImportError(f"Invalid backup file: settings.{key} is not a YYYY-MM month.")

    try:
        return LedgerStore.from_dict(data, current_period(), DEFAULT_CURRENCY)
    except ValueError as e:
        raise BackupImportError(f"Invalid backup file: {e}") from e


def loads_store(text: Union[str, bytes]) -> LedgerStore:
    """Parse serialized store text.

    Raises:
        BackupImportError: If the text is not valid JSON or fails validation
    """
    if isinstance(text, bytes):
        try:
            text = text.decode('utf-8-sig')
        except UnicodeDecodeError as e:
            raise BackupImportError("Could not read backup file: not UTF-8 text.") from e
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise BackupImportError(f"Could not read backup file: {e}") from e
    return parse_store(data)


def backup_filename(today: Optional[dt.date] = None) -> str:
    day = today or dt.date.today()
    return f"budget-backup-{day.isoformat()}.json"


def export_backup(store: LedgerStore, today: Optional[dt.date] = None) -> Tuple[str, str]:
    """Return ``(filename, text)`` for a downloadable backup of ``store``."""
    return backup_filename(today), dumps_store(store, indent=2)


class LedgerStorage:
    """Handles the persistence slot for a single ledger store."""

    def __init__(self, path: Optional[Path] = None, backup_dir: Optional[Path] = None):
        """Initialize storage.

        Args:
            path: Optional custom slot file.  Defaults to STORE_PATH from config.
            backup_dir: Optional directory for written backups.  Defaults to
                BACKUP_DIR from config.
        """
        self.path = Path(path) if path is not None else STORE_PATH
        self.backup_dir = Path(backup_dir) if backup_dir is not None else BACKUP_DIR
        # Set by load() when the slot could not be read
        self.load_error: Optional[str] = None
        self._corrupt_copy_failed = False

    def exists(self) -> bool:
        return self.path.exists()

    def load(self) -> LedgerStore:
        """Load the saved store, seeding and saving defaults on first run.

        A slot that cannot be read or parsed is copied aside to
        ``<slot>.corrupt-<timestamp>`` and replaced in memory by a freshly
        seeded store.  ``load_error`` then describes what happened.  If the
        copy cannot be made, ``save`` refuses to overwrite the slot.
        """
        self.load_error = None
        self._corrupt_copy_failed = False
        if not self.path.exists():
            store = seed_store()
            self.save(store)
            logger.info("Seeded new budget store at %s", self.path)
            return store

        try:
            with self.path.open('r', encoding='utf-8') as handle:
                data = json.load(handle)
            return parse_store(data)
        except (json.JSONDecodeError, OSError, UnicodeDecodeError, BackupImportError) as e:
            logger.warning("Could not load budget store from %s: %s", self.path, e)
            self.load_error = self._preserve_unreadable_slot(e)
            return seed_store()

    def _preserve_unreadable_slot(self, error: Exception) -> str:
        stamp = dt.datetime.now().strftime('%Y%m%d-%H%M%S')
        target = self.path.with_name(f"{self.path.name}.corrupt-{stamp}")
        try:
            shutil.copy2(self.path, target)
        except OSError as e:
            logger.error("Could not copy unreadable budget store %s aside: %s", self.path, e)
            self._corrupt_copy_failed = True
            return (
                f"The saved budget could not be loaded ({error}) and could not be copied aside. "
                f"Changes will not be saved until {self.path} is fixed or a backup is imported."
            )
        logger.warning("Copied unreadable budget store to %s", target)
        return (
            f"The saved budget could not be loaded ({error}). "
            f"It was copied to {target} and default envelopes are shown instead."
        )

    def save(self, store: LedgerStore) -> None:
        """Overwrite the slot with the whole store.

        The new content is written to a sibling temporary file first and then
        renamed over the slot.

        Raises:
            OSError: If the file cannot be written, or the slot was unreadable
                and could not be copied aside
        """
        if self._corrupt_copy_failed:
            raise OSError(f"Refusing to overwrite unreadable budget store {self.path}")
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(self.path.name + '.tmp')
        try:
            with tmp_path.open('w', encoding='utf-8') as handle:
                handle.write(dumps_store(store))
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise OSError(f"Failed to save budget store to {self.path}: {e}") from e
        logger.debug("Saved budget store to %s", self.path)

    def import_backup(self, source: Union[str, bytes, Path]) -> LedgerStore:
        """Replace the persisted store with a backup.

        Args:
            source: Backup text, raw bytes, or a path to a backup file

        Returns:
            The imported store

        Raises:
            BackupImportError: If the backup is invalid; nothing is written
        """
        if isinstance(source, Path):
            try:
                source = source.read_bytes()
            except OSError as e:
                raise BackupImportError(f"Could not read backup file: {e}") from e
        store = loads_store(source)
        # an explicit import replaces an unreadable slot
        self._corrupt_copy_failed = False
        self.save(store)
        logger.info(
            "Imported backup with %d envelopes and %d transactions",
            len(store.envelopes),
            len(store.transactions),
        )
        return store

    def write_backup(self, store: LedgerStore, today: Optional[dt.date] = None) -> Path:
        """Write a dated backup into the backup directory and return its path."""
        self.backup_dir.mkdir(parents=True, exist_ok=True)
        filename, text = export_backup(store, today)
        target = self.backup_dir / filename
        try:
            with target.open('w', encoding='utf-8') as handle:
                handle.write(text)
        except OSError as e:
            raise OSError(f"Failed to write backup to {target}: {e}") from e
        logger.info("Wrote backup %s", target)
        return target


def describe_backup(path: Path) -> Dict[str, Any]:
    """Summarize a backup file for validation scripts.

    Returns a dictionary with ``name`` and either ``errors`` (a message) or
    the envelope and transaction counts.
    """
    try:
        store = loads_store(path.read_bytes())
    except (BackupImportError, OSError) as e:
        return {'name': path.name, 'errors': str(e)}
    return {
        'name': path.name,
        'envelopes': len(store.envelopes),
        'transactions': len(store.transactions),
    }
