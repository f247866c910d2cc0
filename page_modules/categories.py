"""Categories management page."""
import logging

import streamlit as st

from core.api_client import ApiClient, ApiError
from core.services import create_category, delete_category, get_categories, update_category
from core.table_sort import filter_records
from core.validators import validate_category
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

COLUMNS = [column("id", "ID"), column("name", "Name")]


def render(client: ApiClient):
    """Render categories page."""
    show_flash()
    st.header("🏷️ Categories")

    st.subheader("Add category")
    with st.form("add_category_form", clear_on_submit=True):
        new_name = st.text_input("Name")
        submitted = st.form_submit_button("✅ Add category")
        if submitted and not show_errors(validate_category(new_name)):
            try:
                create_category(client, new_name.strip())
            except ApiError as e:
                st.error(f"❌ Failed to add category: {e.message}")
            else:
                flash("Category created")
                st.rerun()

    try:
        categories = get_categories(client)
    except ApiError as e:
        st.error(f"❌ Error loading categories: {e.message}")
        return

    st.subheader("Existing categories")
    search = search_box("Search by name", key="category_search")
    render_sortable_table(filter_records(categories, search, ["name"]), COLUMNS, "categories")

    if not categories:
        return
    st.divider()
    by_label = {f"{c['name']} (#{c['id']})": c for c in categories}
    selected = st.selectbox("Edit category", list(by_label), key="category_edit_select")
    row = by_label[selected]
    col1, col2 = st.columns([4, 1])
    with col1:
        new_label = st.text_input("Rename", value=row["name"], key=f"category_rename_{row['id']}")
        if new_label.strip() and new_label.strip() != row["name"]:
            if st.button("💾 Save", key=f"category_save_{row['id']}"):
                if not show_errors(validate_category(new_label)):
                    try:
                        update_category(client, row["id"], new_label.strip())
                    except ApiError as e:
                        st.error(f"❌ Rename failed: {e.message}")
                    else:
                        flash("Category updated")
                        st.rerun()
    with col2:
        if confirm_button("🗑️ Delete", key=f"category_del_{row['id']}", prompt="Delete this category?"):
            try:
                delete_category(client, row["id"])
            except ApiError as e:
                logger.warning("Delete category %s failed: %s", row["id"], e.message)
                st.error(f"❌ Delete failed: {e.message}")
            else:
                flash("Category deleted", icon="🗑️")
                st.rerun()
