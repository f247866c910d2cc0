"""Medications catalog page."""
import logging

import streamlit as st

from core.api_client import ApiClient, ApiError
from core.constants import MEDICATION_STATUS_FILTERS
from core.formatters import format_currency, format_datetime
from core.services import (
    create_medication,
    delete_medication,
    get_categories,
    get_medications,
    medication_payload,
    set_medication_active,
    update_medication,
)
from core.table_sort import filter_records
from core.validators import validate_medication
from ui.components import (
    column,
    confirm_button,
    export_buttons,
    flash,
    records_to_frame,
    render_sortable_table,
    search_box,
    show_errors,
    show_flash,
)

logger = logging.getLogger(__name__)

COLUMNS = [
    column("id", "ID"),
    column("name", "Name"),
    column("dosage", "Dosage"),
    column("category.name", "Category"),
    column("price", "Price", format_currency),
    column("minimumStock", "Min. Stock"),
    column("active", "Status", lambda v: "Active" if v else "Inactive"),
    column("createdAt", "Created", format_datetime),
]


def _medication_form(client: ApiClient, categories, existing=None):
    """Create/edit form. ``existing`` switches it to edit mode."""
    existing = existing or {}
    form_key = f"medication_form_{existing.get('id', 'new')}"
    category_ids = [c["id"] for c in categories]
    category_names = {c["id"]: c["name"] for c in categories}
    current_category = (existing.get("category") or {}).get("id")

    with st.form(form_key, clear_on_submit=not existing):
        name = st.text_input("Name", value=existing.get("name", ""))
        dosage = st.text_input("Dosage", value=existing.get("dosage", ""))
        description = st.text_area("Description", value=existing.get("description") or "")
        category_id = st.selectbox(
            "Category",
            category_ids,
            index=category_ids.index(current_category) if current_category in category_ids else None,
            format_func=lambda cid: category_names.get(cid, str(cid)),
            placeholder="Select a category",
        )
        col1, col2 = st.columns(2)
        price = col1.number_input(
            "Price", min_value=0.0, step=0.5, value=float(existing.get("price") or 0.0)
        )
        minimum_stock = col2.number_input(
            "Minimum stock", min_value=0, step=1, value=int(existing.get("minimumStock") or 0)
        )
        active = st.checkbox("Active", value=existing.get("active", True))
        submitted = st.form_submit_button("💾 Save" if existing else "✅ Add medication")

    if not submitted:
        return
    if show_errors(validate_medication(name, dosage, category_id, price, minimum_stock)):
        return
    payload = medication_payload(
        name.strip(), description.strip(), dosage.strip(), price, minimum_stock, active, category_id
    )
    try:
        if existing:
            update_medication(client, existing["id"], payload)
        else:
            create_medication(client, payload)
    except ApiError as e:
        st.error(f"❌ Failed to save medication: {e.message}")
    else:
        flash("Medication updated" if existing else "Medication created")
        st.rerun()


def render(client: ApiClient):
    """Render the medications page."""
    show_flash()
    st.header("💊 Medications")
    try:
        medications = get_medications(client)
        categories = get_categories(client)
    except ApiError as e:
        st.error(f"❌ Error loading data: {e.message}")
        return

    with st.expander("➕ Add medication"):
        if not categories:
            st.info("Create a category first")
        else:
            _medication_form(client, categories)

    col1, col2, col3 = st.columns([3, 2, 1])
    with col1:
        search = search_box("Search by name or dosage", key="medication_search")
    with col2:
        category_filter = st.selectbox(
            "Category",
            [None] + [c["id"] for c in categories],
            format_func=lambda cid: "All" if cid is None else next(
                (c["name"] for c in categories if c["id"] == cid), str(cid)
            ),
            key="medication_category_filter",
        )
    with col3:
        status = st.selectbox("Status", MEDICATION_STATUS_FILTERS, key="medication_status")

    rows = filter_records(medications, search, ["name", "dosage"])
    if category_filter is not None:
        rows = [m for m in rows if (m.get("category") or {}).get("id") == category_filter]
    if status == "Active":
        rows = [m for m in rows if m.get("active")]
    elif status == "Inactive":
        rows = [m for m in rows if not m.get("active")]

    ordered = render_sortable_table(rows, COLUMNS, "medications")
    export_buttons(records_to_frame(ordered, COLUMNS), "medications", "MedicationsExport")

    if not medications:
        return
    st.divider()
    by_label = {f"{m['name']} - {m.get('dosage', '')} (#{m['id']})": m for m in medications}
    selected = st.selectbox("Manage medication", list(by_label), key="medication_manage")
    row = by_label[selected]

    with st.expander("✏️ Edit"):
        _medication_form(client, categories, existing=row)

    col1, col2 = st.columns(2)
    with col1:
        action = "Deactivate" if row.get("active") else "Activate"
        if st.button(f"🔁 {action}", key=f"medication_toggle_{row['id']}"):
            try:
                set_medication_active(client, row["id"], not row.get("active"))
            except ApiError as e:
                st.error(f"❌ {action} failed: {e.message}")
            else:
                flash(f"Medication {action.lower()}d")
                st.rerun()
    with col2:
        if confirm_button("🗑️ Delete", key=f"medication_del_{row['id']}", prompt="Delete this medication?"):
            try:
                response = delete_medication(client, row["id"])
            except ApiError as e:
                logger.warning("Delete medication %s failed: %s", row["id"], e.message)
                st.error(f"❌ Delete failed: {e.message}")
            else:
                flash((response or {}).get("message") or "Medication deleted", icon="🗑️")
                st.rerun()
