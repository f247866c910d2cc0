"""Customers page."""
import logging
from datetime import date

import streamlit as st

from core.api_client import ApiClient, ApiError
from core.formatters import calculate_age, format_date, is_of_age, parse_date
from core.services import (
    create_customer,
    customer_payload,
    delete_customer,
    get_customers,
    update_customer,
)
from core.table_sort import filter_records
from core.validators import validate_customer
from ui.components import (
    column,
    confirm_button,
    flash,
    render_sortable_table,
    search_box,
    show_errors,
    show_flash,
)

logger = logging.getLogger(__name__)

COLUMNS = [
    column("id", "ID"),
    column("fullName", "Name"),
    column("taxId", "Tax ID"),
    column("email", "Email"),
    column("birthDate", "Birth Date", format_date),
    column("age", "Age", lambda v: "" if v is None else f"{v} years"),
    column("minor", "Minor", lambda v: "⚠️ Minor" if v else ""),
    column("guardianName", "Guardian", lambda v: v or "-"),
]


def _with_age(customers):
    rows = []
    for customer in customers:
        row = dict(customer)
        try:
            row["age"] = calculate_age(customer["birthDate"])
            row["minor"] = not is_of_age(customer["birthDate"])
        except (KeyError, TypeError, ValueError):
            row["age"] = None
            row["minor"] = None
        rows.append(row)
    return rows


def _customer_form(client: ApiClient, existing=None):
    existing = existing or {}
    form_key = f"customer_form_{existing.get('id', 'new')}"
    try:
        birth_default = parse_date(existing["birthDate"]) if existing.get("birthDate") else None
    except ValueError:
        birth_default = None

    with st.form(form_key, clear_on_submit=not existing):
        full_name = st.text_input("Full name", value=existing.get("fullName", ""))
        tax_id = st.text_input(
            "Tax ID", value=existing.get("taxId", ""), placeholder="000.000.000-00"
        )
        email = st.text_input("Email", value=existing.get("email", ""))
        birth_date = st.date_input(
            "Birth date",
            value=birth_default,
            min_value=date(1900, 1, 1),
            max_value=date.today(),
            format="DD/MM/YYYY",
        )
        guardian_name = st.text_input(
            "Guardian name (required for customers under 18)",
            value=existing.get("guardianName") or "",
        )
        submitted = st.form_submit_button("💾 Save" if existing else "✅ Add customer")

    if not submitted:
        return
    if show_errors(validate_customer(full_name, tax_id, email, birth_date, guardian_name)):
        return
    payload = customer_payload(full_name, tax_id, email, birth_date, guardian_name)
    try:
        if existing:
            update_customer(client, existing["id"], payload)
        else:
            create_customer(client, payload)
    except ApiError as e:
        st.error(f"❌ Failed to save customer: {e.message}")
        return
    if not is_of_age(birth_date):
        flash(
            "Customer saved with a guardian. Customers under 18 cannot make purchases.",
            icon="ℹ️",
        )
    else:
        flash("Customer updated" if existing else "Customer created")
    st.rerun()


def render(client: ApiClient):
    """Render customers page."""
    show_flash()
    st.header("👥 Customers")

    with st.expander("➕ Add customer"):
        _customer_form(client)

    try:
        customers = get_customers(client)
    except ApiError as e:
        st.error(f"❌ Error loading customers: {e.message}")
        return

    search = search_box("Search by name, tax ID or email", key="customer_search")
    rows = filter_records(_with_age(customers), search, ["fullName", "taxId", "email"])
    render_sortable_table(rows, COLUMNS, "customers")

    if not customers:
        return
    st.divider()
    by_label = {f"{c['fullName']} - {c.get('taxId', '')}": c for c in customers}
    selected = st.selectbox("Manage customer", list(by_label), key="customer_manage")
    row = by_label[selected]

    with st.expander("✏️ Edit"):
        _customer_form(client, existing=row)

    if confirm_button("🗑️ Delete", key=f"customer_del_{row['id']}", prompt="Delete this customer?"):
        try:
            delete_customer(client, row["id"])
        except ApiError as e:
            logger.warning("Delete customer %s failed: %s", row["id"], e.message)
            st.error(f"❌ Delete failed: {e.message}")
        else:
            flash("Customer deleted", icon="🗑️")
            st.rerun()
