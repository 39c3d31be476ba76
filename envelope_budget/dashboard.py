"""Streamlit front end for the envelope budget.

Run with::

    streamlit run envelope_budget/dashboard.py

The ledger store is loaded once per session into ``st.session_state`` and
written back through :class:`~envelope_budget.storage.LedgerStorage` after
every successful mutation.
"""

from __future__ import annotations

import datetime as dt
import sys
from pathlib import Path
from typing import Dict, Optional

import pandas as pd
import streamlit as st

# Ensure package imports resolve when run as a Streamlit script
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from envelope_budget.balances import envelope_summary, month_transactions, summary_totals
from envelope_budget.config import ensure_data_directories, get_currency_options
from envelope_budget.formatting import format_money
from envelope_budget.ledger import (
    ValidationError,
    delete_transaction,
    update_settings,
    upsert_envelope,
    upsert_transaction,
)
from envelope_budget.models import (
    EXPENSE,
    ROLLOVER_OFF,
    ROLLOVER_ON,
    TRANSACTION_KINDS,
    TRANSFER,
    LedgerStore,
)
from envelope_budget.periods import as_date
from envelope_budget.storage import BackupImportError, LedgerStorage, export_backup
from envelope_budget.visualization import create_envelope_balance_chart

STORE_STATE_KEY = 'ledger_store'
STORAGE_STATE_KEY = 'ledger_storage'
LOAD_WARNING_KEY = 'store_load_warning'
NEW_ENTRY = ''


def main() -> None:
    st.set_page_config(page_title="Envelope Budget", page_icon="✉️", layout="wide")
    ensure_data_directories()
    store = _ensure_store_state()
    load_warning = st.session_state.get(LOAD_WARNING_KEY)
    if load_warning:
        st.warning(load_warning)

    render_settings_sidebar(store)
    render_backup_controls(store)

    st.header("✉️ Envelope Budget")
    st.caption(
        f"Reporting month {store.settings.report_period} • "
        f"budget started {store.settings.budget_start} • "
        f"rollover {store.settings.rollover}"
    )

    envelopes_tab, transactions_tab = st.tabs(["📨 Envelopes", "🧾 Transactions"])
    with envelopes_tab:
        render_envelope_overview(store)
        st.divider()
        render_envelope_form(store)
    with transactions_tab:
        render_transaction_form(store)
        st.divider()
        render_transaction_list(store)


# ---------------------------------------------------------------------------
# Session state
# ---------------------------------------------------------------------------


def _get_storage() -> LedgerStorage:
    storage = st.session_state.get(STORAGE_STATE_KEY)
    if storage is None:
        storage = LedgerStorage()
        st.session_state[STORAGE_STATE_KEY] = storage
    return storage


def _ensure_store_state() -> LedgerStore:
    store = st.session_state.get(STORE_STATE_KEY)
    if store is None:
        storage = _get_storage()
        store = storage.load()
        st.session_state[STORE_STATE_KEY] = store
        if storage.load_error:
            st.session_state[LOAD_WARNING_KEY] = storage.load_error
    return store


def _commit(store: LedgerStore) -> None:
    """Persist ``store`` and make it the session's current store."""
    _get_storage().save(store)
    st.session_state[STORE_STATE_KEY] = store


def _rerun() -> None:
    rerun_fn = getattr(st, 'rerun', None) or getattr(st, 'experimental_rerun', None)
    if rerun_fn:
        rerun_fn()


def _envelope_labels(store: LedgerStore) -> Dict[str, str]:
    return {env.id: env.name for env in store.envelopes}


# ---------------------------------------------------------------------------
# Sidebar
# ---------------------------------------------------------------------------


def render_settings_sidebar(store: LedgerStore) -> None:
    settings = store.settings
    st.sidebar.header("⚙️ Settings")

    budget_start = st.sidebar.text_input("Budget start (YYYY-MM)", value=settings.budget_start)
    report_period = st.sidebar.text_input("Reporting month (YYYY-MM)", value=settings.report_period)
    rollover_options = [ROLLOVER_ON, ROLLOVER_OFF]
    rollover = st.sidebar.selectbox(
        "Rollover",
        options=rollover_options,
        index=0 if settings.rollover_enabled else 1,
        help="When on, unspent allocations from earlier months carry into the balance.",
    )
    currencies = get_currency_options()
    if settings.currency not in currencies:
        currencies.append(settings.currency)
    currency = st.sidebar.selectbox("Currency", options=currencies, index=currencies.index(settings.currency))

    changes = _settings_changes(store, budget_start, report_period, rollover, currency)
    if not changes:
        return
    try:
        update_settings(store, **changes)
    except ValidationError as e:
        st.sidebar.error(str(e))
        return
    _commit(store)
    _rerun()


def _settings_changes(
    store: LedgerStore,
    budget_start: str,
    report_period: str,
    rollover: str,
    currency: str,
) -> Dict[str, str]:
    """Settings fields whose widget value differs from the stored value."""
    settings = store.settings
    changes: Dict[str, str] = {}
    if budget_start.strip() != settings.budget_start:
        changes['budget_start'] = budget_start
    if report_period.strip() != settings.report_period:
        changes['report_period'] = report_period
    if rollover != settings.rollover:
        changes['rollover'] = rollover
    if currency != settings.currency:
        changes['currency'] = currency
    return changes


def render_backup_controls(store: LedgerStore) -> None:
    st.sidebar.subheader("💾 Backup")
    filename, text = export_backup(store)
    st.sidebar.download_button(
        "Export backup",
        data=text,
        file_name=filename,
        mime="application/json",
        use_container_width=True,
    )
    if st.sidebar.button("Save backup copy to data folder", use_container_width=True):
        target = _get_storage().write_backup(store)
        st.sidebar.success(f"Backup written to {target}")

    uploaded = st.sidebar.file_uploader("Import backup", type=["json"])
    if uploaded is not None and st.sidebar.button("Replace budget with backup", type="primary"):
        imported = _import_uploaded_backup(uploaded.getvalue())
        if imported is not None:
            st.sidebar.success(
                f"Imported {len(imported.envelopes)} envelopes and {len(imported.transactions)} transactions."
            )
            _rerun()


def _import_uploaded_backup(payload: bytes) -> Optional[LedgerStore]:
    """Import ``payload`` into storage; returns ``None`` after reporting an error."""
    try:
        store = _get_storage().import_backup(payload)
    except BackupImportError as e:
        st.sidebar.error(str(e))
        return None
    st.session_state.pop(LOAD_WARNING_KEY, None)
    st.session_state[STORE_STATE_KEY] = store
    return store


# ---------------------------------------------------------------------------
# Envelopes
# ---------------------------------------------------------------------------


def render_envelope_overview(store: LedgerStore) -> None:
    currency = store.settings.currency
    summary = envelope_summary(store)
    if summary.empty:
        st.info("No envelopes yet.")
        return

    totals = summary_totals(summary)
    cols = st.columns(4)
    cols[0].metric("Monthly allocations", format_money(totals['monthly'], currency))
    cols[1].metric("Total balance", format_money(totals['balance'], currency))
    cols[2].metric("Remaining this month", format_money(totals['remaining'], currency))
    cols[3].metric("Overspent envelopes", totals['overspent'])

    st.plotly_chart(create_envelope_balance_chart(summary, currency), use_container_width=True)
    st.dataframe(
        _format_summary(summary, currency),
        use_container_width=True,
        hide_index=True,
    )


def _format_summary(summary: pd.DataFrame, currency: str) -> pd.DataFrame:
    display = summary.drop(columns=['id']).copy()
    for column in ['Monthly', 'Balance', 'Remaining']:
        display[column] = display[column].map(lambda value: format_money(value, currency))
    return display


def render_envelope_form(store: LedgerStore) -> None:
    st.subheader("✏️ Add or edit envelope")
    labels = _envelope_labels(store)
    selected_id = st.selectbox(
        "Envelope",
        options=[NEW_ENTRY] + list(labels.keys()),
        format_func=lambda env_id: labels.get(env_id, "➕ New envelope"),
        key='editing_envelope_id',
    )
    existing = store.find_envelope(selected_id)

    with st.form("envelope_form", clear_on_submit=existing is None):
        name = st.text_input("Name", value=existing.name if existing else '')
        col1, col2 = st.columns(2)
        with col1:
            monthly_add = st.number_input(
                "Monthly allocation",
                value=float(existing.monthly_add) if existing else 0.0,
                step=10.0,
            )
        with col2:
            starting_balance = st.number_input(
                "Starting balance",
                value=float(existing.starting_balance) if existing else 0.0,
                step=10.0,
            )
        submitted = st.form_submit_button("Save envelope")

    if submitted:
        try:
            envelope = upsert_envelope(store, name, monthly_add, starting_balance, envelope_id=selected_id or None)
        except ValidationError as e:
            st.error(str(e))
            return
        _commit(store)
        st.success(f"Saved envelope '{envelope.name}'.")
        _rerun()


# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------


def render_transaction_form(store: LedgerStore) -> None:
    st.subheader("➕ Add or edit transaction")
    if not store.envelopes:
        st.info("Create an envelope before recording transactions.")
        return

    month_df = month_transactions(store)
    txn_labels = {
        row.id: f"{row.Date} • {row.Title} • {row.Description}"
        for row in month_df.itertuples(index=False)
    }
    selected_id = st.selectbox(
        "Transaction",
        options=[NEW_ENTRY] + list(txn_labels.keys()),
        format_func=lambda txn_id: txn_labels.get(txn_id, "➕ New transaction"),
        key='editing_transaction_id',
    )
    existing = store.find_transaction(selected_id)

    kind = st.radio(
        "Type",
        options=list(TRANSACTION_KINDS),
        index=TRANSACTION_KINDS.index(existing.kind) if existing else TRANSACTION_KINDS.index(EXPENSE),
        horizontal=True,
        format_func=str.capitalize,
    )

    labels = _envelope_labels(store)
    env_ids = list(labels.keys())

    def _index_of(envelope_id: Optional[str], fallback: int = 0) -> int:
        return env_ids.index(envelope_id) if envelope_id in env_ids else fallback

    with st.form("transaction_form", clear_on_submit=existing is None):
        col1, col2 = st.columns(2)
        with col1:
            date_value = st.date_input("Date", value=existing.date if existing else dt.date.today())
            amount = st.number_input(
                "Amount",
                min_value=0.0,
                value=float(existing.amount) if existing else 0.0,
                step=0.01,
            )
        with col2:
            description = st.text_input("Description", value=existing.description if existing else '')
            refs: Dict[str, Optional[str]] = {}
            if kind == TRANSFER:
                refs['from_envelope_id'] = st.selectbox(
                    "From",
                    options=env_ids,
                    index=_index_of(existing.from_envelope_id if existing else None),
                    format_func=labels.get,
                )
                refs['to_envelope_id'] = st.selectbox(
                    "To",
                    options=env_ids,
                    index=_index_of(existing.to_envelope_id if existing else None, min(1, len(env_ids) - 1)),
                    format_func=labels.get,
                )
            else:
                refs['envelope_id'] = st.selectbox(
                    "Envelope",
                    options=env_ids,
                    index=_index_of(existing.envelope_id if existing else None),
                    format_func=labels.get,
                )
        submitted = st.form_submit_button("Save transaction")

    if submitted:
        try:
            upsert_transaction(
                store,
                kind,
                as_date(date_value),
                amount,
                description,
                refs=refs,
                transaction_id=selected_id or None,
            )
        except ValidationError as e:
            st.error(str(e))
            return
        _commit(store)
        st.success("Transaction saved.")
        _rerun()

    if existing is not None:
        render_delete_transaction(store, existing.id)


def render_delete_transaction(store: LedgerStore, transaction_id: str) -> None:
    confirm = st.checkbox("Yes, delete this transaction", key=f"confirm_delete_{transaction_id}")
    if st.button("🗑️ Delete transaction", key=f"delete_{transaction_id}"):
        if not confirm:
            st.warning("Tick the confirmation box to delete this transaction.")
            return
        if delete_transaction(store, transaction_id):
            _commit(store)
            st.session_state.pop('editing_transaction_id', None)
            _rerun()


def render_transaction_list(store: LedgerStore) -> None:
    st.subheader(f"🧾 Transactions in {store.settings.report_period}")
    frame = month_transactions(store)
    if frame.empty:
        st.info("No transactions in this month.")
        return
    st.dataframe(
        _format_transactions(frame, store.settings.currency),
        use_container_width=True,
        hide_index=True,
    )


def _format_transactions(frame: pd.DataFrame, currency: str) -> pd.DataFrame:
    display = frame[['Date', 'Type', 'Title', 'Description']].copy()
    display['Type'] = display['Type'].str.capitalize()
    display['Amount'] = [
        f"{sign}{format_money(amount, currency)}"
        for sign, amount in zip(frame['Sign'], frame['Amount'])
    ]
    return display


if __name__ == '__main__':
    main()
