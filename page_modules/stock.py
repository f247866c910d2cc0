"""Stock page: batches per medication and entry/exit registration."""
import logging
from datetime import date

import streamlit as st

from core.api_client import ApiClient, ApiError
from core.formatters import format_date, parse_date
from core.services import (
    get_batches,
    get_medications,
    get_stock_total,
    register_entry,
    register_exit,
    stock_payload,
)
from core.stock import check_exit, nearest_expiry, sort_batches_by_expiry, total_quantity
from core.validators import validate_stock_entry, validate_stock_exit
from ui.components import busy, column, flash, render_sortable_table, show_errors, show_flash

logger = logging.getLogger(__name__)

BATCH_COLUMNS = [
    column("batchId", "Batch"),
    column("quantityRemaining", "Quantity"),
    column("expiryDate", "Expiry", format_date),
]


def _entry_form(client: ApiClient, medication: dict):
    in_flight = st.session_state.get("stock_busy", False)
    with st.form(f"stock_entry_{medication['id']}", clear_on_submit=True):
        quantity = st.number_input("Quantity", min_value=0, step=1, value=0, key="entry_qty")
        expiry = st.date_input("Expiry date", value=None, min_value=date.today(), format="DD/MM/YYYY")
        note = st.text_area("Note", key="entry_note")
        submitted = st.form_submit_button("📥 Register entry", disabled=in_flight)
    if not submitted or show_errors(validate_stock_entry(quantity, expiry)):
        return
    with busy("stock_busy"):
        try:
            response = register_entry(client, stock_payload(medication["id"], quantity, expiry, note))
        except ApiError as e:
            st.toast(f"❌ {e.message}", icon="⚠️")
            return
    flash((response or {}).get("message") or f"Entry of {quantity} units recorded", icon="📦")
    st.rerun()


def _exit_form(client: ApiClient, medication: dict, batches):
    in_flight = st.session_state.get("stock_busy", False)
    suggested = nearest_expiry(batches)
    try:
        default_expiry = parse_date(suggested) if suggested else None
    except ValueError:
        default_expiry = None
    with st.form(f"stock_exit_{medication['id']}", clear_on_submit=True):
        st.caption("Stock leaves the batch closest to expiry first.")
        quantity = st.number_input("Quantity", min_value=0, step=1, value=0, key="exit_qty")
        expiry = st.date_input("Expiry date (optional)", value=default_expiry, format="DD/MM/YYYY")
        note = st.text_area("Note", key="exit_note")
        submitted = st.form_submit_button("📤 Register exit", disabled=in_flight)
    if not submitted or show_errors(validate_stock_exit(quantity)):
        return
    # Client-side validation: do not ask the backend for more than is on hand
    try:
        check_exit(quantity, batches)
    except ValueError as e:
        st.error(str(e))
        return
    with busy("stock_busy"):
        try:
            response = register_exit(client, stock_payload(medication["id"], quantity, expiry, note))
        except ApiError as e:
            st.toast(f"❌ {e.message}", icon="⚠️")
            return
    flash((response or {}).get("message") or f"Exit of {quantity} units recorded", icon="📦")
    st.rerun()


def render(client: ApiClient):
    """Render the stock page."""
    show_flash()
    st.header("📦 Stock")
    try:
        medications = get_medications(client)
    except ApiError as e:
        st.error(f"❌ Error loading medications: {e.message}")
        return
    if not medications:
        st.info("No medications available")
        return

    medications = sorted(medications, key=lambda m: (m.get("name") or "").casefold())
    by_id = {m["id"]: m for m in medications}
    selected_id = st.selectbox(
        "Medication",
        list(by_id),
        format_func=lambda mid: f"{by_id[mid]['name']} - {by_id[mid].get('dosage', '')}",
        key="stock_selected",
    )
    medication = by_id[selected_id]

    try:
        batches = sort_batches_by_expiry(get_batches(client, selected_id))
        total = get_stock_total(client, selected_id) or {}
    except ApiError as e:
        st.error(f"❌ Error loading stock: {e.message}")
        return

    on_hand = total.get("quantityRemaining", total_quantity(batches))
    col1, col2, col3 = st.columns(3)
    col1.metric("On hand", on_hand)
    col2.metric("Batches", len(batches))
    col3.metric("Nearest expiry", format_date(nearest_expiry(batches)) or "-")

    render_sortable_table(batches, BATCH_COLUMNS, f"batches_{selected_id}")

    tab_in, tab_out = st.tabs(["📥 Entry", "📤 Exit"])
    with tab_in:
        _entry_form(client, medication)
    with tab_out:
        if not batches:
            st.info("No stock to remove")
        else:
            _exit_form(client, medication, batches)
