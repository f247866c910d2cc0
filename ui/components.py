"""Reusable UI components."""
from contextlib import contextmanager
from typing import Callable, List, Optional, Sequence, Tuple

import pandas as pd
import streamlit as st

from core.exports import EXCEL_MIME, PDF_MIME, to_excel_bytes, to_pdf_bytes
from core.table_sort import SortState, request_sort, resolve_path, sort_indicator, sort_records

# (field path, header label, optional display formatter)
Column = Tuple[str, str, Optional[Callable]]


def column(path: str, label: str, fmt: Optional[Callable] = None) -> Column:
    return (path, label, fmt)


def get_sort_state(table_key: str, initial_key: Optional[str] = None) -> SortState:
    state_key = f"sort_{table_key}"
    if state_key not in st.session_state:
        st.session_state[state_key] = SortState(key=initial_key)
    return st.session_state[state_key]


def records_to_frame(records: Sequence, columns: Sequence[Column]) -> pd.DataFrame:
    """Project records onto the display columns, applying formatters."""
    rows = []
    for record in records:
        row = {}
        for path, label, fmt in columns:
            value = resolve_path(record, path)
            row[label] = fmt(value) if fmt else ("" if value is None else value)
        rows.append(row)
    return pd.DataFrame(rows, columns=[label for _, label, _ in columns])


def render_sortable_table(records: Sequence, columns: Sequence[Column], table_key: str) -> List:
    """Render header sort buttons and the table; returns the sorted records."""
    state = get_sort_state(table_key)
    header = st.columns(len(columns))
    for col, (path, label, _) in zip(header, columns):
        if col.button(
            f"{label}{sort_indicator(state, path)}",
            key=f"sort_btn_{table_key}_{path}",
            width="stretch",
        ):
            st.session_state[f"sort_{table_key}"] = request_sort(state, path)
            st.rerun()

    ordered = sort_records(records, state)
    if not ordered:
        st.info("No records to show")
        return ordered
    st.dataframe(records_to_frame(ordered, columns), width="stretch", hide_index=True)
    return ordered


def search_box(label: str, key: str) -> str:
    return st.text_input(label, key=key, placeholder="Type to filter")


def show_errors(errors: dict) -> bool:
    """Show validation messages. Returns True when there was anything to show."""
    for message in errors.values():
        st.error(f"❌ {message}")
    return bool(errors)


@contextmanager
def busy(flag: str):
    """Hold ``st.session_state[flag]`` True while the block runs."""
    st.session_state[flag] = True
    try:
        yield
    finally:
        st.session_state[flag] = False


def flash(message: str, icon: str = "✅"):
    """Queue a toast shown after the next rerun."""
    st.session_state["flash_message"] = (message, icon)


def show_flash():
    pending = st.session_state.pop("flash_message", None)
    if pending:
        message, icon = pending
        st.toast(message, icon=icon)


def confirm_button(label: str, key: str, prompt: str = "Are you sure?") -> bool:
    """Two-step button; returns True only on the confirming click."""
    confirm_key = f"confirm_{key}"
    if not st.session_state.get(confirm_key):
        if st.button(label, key=key):
            st.session_state[confirm_key] = True
            st.rerun()
        return False
    st.warning(prompt)
    if st.button("Confirm", key=f"{key}_ok"):
        st.session_state.pop(confirm_key, None)
        return True
    if st.button("Cancel", key=f"{key}_cancel"):
        st.session_state.pop(confirm_key, None)
        st.rerun()
    return False


def export_buttons(df: pd.DataFrame, file_stem: str, table_name: str):
    """Excel and PDF download buttons for a displayed table."""
    if df.empty:
        return
    col1, col2 = st.columns(2)
    with col1:
        st.download_button(
            "Export to Excel",
            data=to_excel_bytes(df, sheet_name=file_stem[:31], table_name=table_name),
            file_name=f"{file_stem}.xlsx",
            mime=EXCEL_MIME,
            key=f"xlsx_{file_stem}",
        )
    with col2:
        st.download_button(
            "Export to PDF",
            data=to_pdf_bytes(df),
            file_name=f"{file_stem}.pdf",
            mime=PDF_MIME,
            key=f"pdf_{file_stem}",
        )
