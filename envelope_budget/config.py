"""Configuration management for the envelope budget.

This module centralizes all configuration values including paths,
defaults, and environment variable overrides.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict

# Base project root - assumes this file is in envelope_budget/
_PROJECT_ROOT = Path(__file__).parent.parent.resolve()

# Data directories
DATA_DIR = Path(os.getenv("ENVBUDGET_DATA_DIR", _PROJECT_ROOT / "data"))
BACKUP_DIR = Path(os.getenv("ENVBUDGET_BACKUP_DIR", DATA_DIR / "backups"))

# Persistence slot holding the whole serialized store
STORE_PATH = Path(
    os.getenv("ENVBUDGET_STORE_PATH", DATA_DIR / "budget_store.json")
).resolve()

# Packaged seed data
DEFAULTS_PATH = Path(__file__).with_name("defaults.json")

DEFAULT_CURRENCY = os.getenv("ENVBUDGET_CURRENCY", "AUD").strip().upper() or "AUD"


def ensure_data_directories() -> None:
    """Create all required data directories if they don't exist."""
    for directory in [DATA_DIR, BACKUP_DIR, STORE_PATH.parent]:
        directory.mkdir(parents=True, exist_ok=True)


def load_defaults() -> Dict[str, Any]:
    """Load the packaged seed configuration.

    Returns:
        Dictionary with ``envelopes`` (seed envelope definitions) and
        ``currencies`` (codes offered in the settings selector).

    Raises:
        FileNotFoundError: If the defaults file is missing
        json.JSONDecodeError: If the defaults file is invalid JSON
    """
    if not DEFAULTS_PATH.exists():
        raise FileNotFoundError(f"Defaults file not found: {DEFAULTS_PATH}")

    with open(DEFAULTS_PATH, 'r', encoding='utf-8') as f:
        return json.load(f)


def get_currency_options() -> list:
    """Currency codes offered by the settings form, default currency first."""
    codes = [str(c).upper() for c in load_defaults().get('currencies', [])]
    if DEFAULT_CURRENCY in codes:
        codes.remove(DEFAULT_CURRENCY)
    return [DEFAULT_CURRENCY] + codes
