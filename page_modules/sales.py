"""Sales page: sale history, sale details and the new-sale cart."""
import logging

import streamlit as st
from streamlit_free_text_select import st_free_text_select

from core.api_client import ApiClient, ApiError
from core.formatters import format_currency, format_datetime, is_of_age
from core.sale_cart import (
    CatalogItem,
    SaleComposer,
    SaleValidationError,
    customer_label,
    search_catalog,
    search_customers,
)
from core.services import create_sale, get_customers, get_medications, get_sales
from ui.components import (
    column,
    export_buttons,
    flash,
    records_to_frame,
    render_sortable_table,
    show_flash,
)

logger = logging.getLogger(__name__)

SALE_COLUMNS = [
    column("id", "ID"),
    column("customer.fullName", "Customer"),
    column("createdAt", "Date/Time", format_datetime),
    column("itemCount", "Items"),
    column("total", "Total", format_currency),
]

ITEM_COLUMNS = [
    column("medicationName", "Medication"),
    column("quantity", "Quantity"),
    column("unitPrice", "Unit Price", format_currency),
    column("subtotal", "Subtotal", format_currency),
]


def get_composer() -> SaleComposer:
    if "sale_composer" not in st.session_state:
        st.session_state.sale_composer = SaleComposer()
    return st.session_state.sale_composer


def _close_new_sale():
    get_composer().reset()
    st.session_state["sale_open"] = False
    st.session_state.pop("sale_customer_pick", None)
    st.session_state.pop("sale_medication_search", None)


def _render_customer_picker(composer: SaleComposer, customers):
    snapshot = composer.snapshot()
    if snapshot.customer is not None:
        col1, col2 = st.columns([4, 1])
        col1.success(f"Customer: {customer_label(snapshot.customer)}")
        if col2.button("✖ Change", key="sale_clear_customer", disabled=composer.submitting):
            composer.clear_customer()
            st.session_state.pop("sale_customer_pick", None)
            st.rerun()
        return

    labels = [
        customer_label(c) + ("" if _of_age(c) else " (minor)")
        for c in customers
    ]
    picked = st_free_text_select(
        "Customer",
        labels,
        key="sale_customer_pick",
        placeholder="Type a name or tax ID",
    )
    if not picked:
        return
    if picked in labels:
        candidates = [customers[labels.index(picked)]]
    else:
        candidates = search_customers(customers, picked)
    if not candidates:
        st.warning("No customer matches this search")
        return
    if len(candidates) > 1:
        st.warning(f"{len(candidates)} customers match; pick one from the list")
        return
    try:
        composer.select_customer(candidates[0])
    except SaleValidationError as e:
        st.error(f"❌ {e}")
        return
    st.rerun()


def _of_age(customer) -> bool:
    try:
        return is_of_age(customer["birthDate"])
    except (KeyError, TypeError, ValueError):
        return False


def _render_item_picker(composer: SaleComposer, medications):
    term = st.text_input("Search medication", key="sale_medication_search", placeholder="Name or dosage")
    matches = search_catalog(medications, term)
    if term and not matches:
        st.caption("No active medication matches this search")
        return
    if not matches:
        return
    by_id = {m["id"]: m for m in matches}
    col1, col2, col3 = st.columns([4, 1, 1])
    with col1:
        medication_id = st.selectbox(
            "Medication",
            list(by_id),
            format_func=lambda mid: (
                f"{by_id[mid]['name']} - {by_id[mid].get('dosage', '')} "
                f"({format_currency(by_id[mid].get('price'))})"
            ),
            key="sale_medication_pick",
        )
    with col2:
        quantity = st.number_input("Qty", min_value=1, step=1, value=1, key="sale_quantity")
    with col3:
        st.write("")
        add = st.button("➕ Add", key="sale_add_item", disabled=composer.submitting)
    if add:
        try:
            composer.add_to_cart(CatalogItem.from_medication(by_id[medication_id]), int(quantity))
        except SaleValidationError as e:
            st.error(f"❌ {e}")
        else:
            st.toast("Medication added to cart", icon="🛒")
            st.rerun()


def _render_cart(composer: SaleComposer):
    snapshot = composer.snapshot()
    count = len(snapshot.lines)
    st.markdown(f"#### Cart ({count} {'item' if count == 1 else 'items'})")
    if not snapshot.lines:
        st.caption("Cart is empty")
        return
    for line in snapshot.lines:
        item = line.item
        col1, col2, col3, col4 = st.columns([4, 2, 2, 1])
        col1.markdown(f"**{item.name}**  \n{item.dosage} · {format_currency(item.unit_price)} each")
        new_quantity = col2.number_input(
            "Quantity",
            min_value=0,
            step=1,
            value=line.quantity,
            key=f"cart_qty_{item.id}_{line.quantity}",
            label_visibility="collapsed",
            disabled=composer.submitting,
        )
        col3.markdown(f"**{format_currency(line.subtotal)}**")
        if col4.button("✖", key=f"cart_remove_{item.id}", disabled=composer.submitting):
            composer.remove_line(item.id)
            st.rerun()
        if new_quantity != line.quantity:
            composer.set_line_quantity(item.id, int(new_quantity))
            st.rerun()
    st.markdown(f"### Total: {format_currency(snapshot.total)}")


def _render_new_sale(client: ApiClient, customers, medications):
    composer = get_composer()
    st.subheader("🛒 New Sale")
    _render_customer_picker(composer, customers)
    _render_item_picker(composer, medications)
    _render_cart(composer)

    col1, col2 = st.columns(2)
    if col1.button("Cancel", key="sale_cancel", disabled=composer.submitting):
        _close_new_sale()
        st.rerun()
    finish = col2.button(
        "Finishing..." if composer.submitting else "✅ Finish Sale",
        key="sale_finish",
        type="primary",
        disabled=composer.submitting or not composer.lines,
    )
    if not finish:
        return
    try:
        created = composer.submit(lambda payload: create_sale(client, payload))
    except SaleValidationError as e:
        st.error(f"❌ {e}")
    except ApiError as e:
        # Cart and customer are kept so the user can adjust and retry
        st.error(f"❌ {e.message or 'Error completing sale'}")
    else:
        sale_id = (created or {}).get("id")
        flash(f"Sale #{sale_id} completed" if sale_id else "Sale completed", icon="🛒")
        _close_new_sale()
        st.rerun()


def _render_sale_details(sales):
    by_id = {s["id"]: s for s in sales}
    sale_id = st.selectbox(
        "Sale details",
        list(by_id),
        format_func=lambda sid: f"#{sid} - {(by_id[sid].get('customer') or {}).get('fullName', '')}",
        key="sale_details_pick",
    )
    sale = by_id[sale_id]
    customer = sale.get("customer") or {}
    col1, col2 = st.columns(2)
    with col1:
        st.markdown("**Customer**")
        st.write(f"Name: {customer.get('fullName', '-')}")
        st.write(f"Tax ID: {customer.get('taxId', '-')}")
        st.write(f"Email: {customer.get('email', '-')}")
    with col2:
        st.markdown("**Sale**")
        st.write(f"Date/Time: {format_datetime(sale.get('createdAt'))}")
        st.write(f"Total: {format_currency(sale.get('total'))}")
    st.dataframe(records_to_frame(sale.get("items") or [], ITEM_COLUMNS), width="stretch", hide_index=True)


def render(client: ApiClient):
    """Render the sales page."""
    show_flash()
    col1, col2 = st.columns([4, 1])
    col1.header("🛒 Sales")
    if col2.button("+ New Sale", key="sale_new"):
        get_composer().reset()
        st.session_state["sale_open"] = True
        st.rerun()

    try:
        sales = get_sales(client)
        customers = get_customers(client) if st.session_state.get("sale_open") else []
        medications = get_medications(client) if st.session_state.get("sale_open") else []
    except ApiError as e:
        logger.warning("Sales page load failed: %s", e.message)
        st.error(f"❌ Error loading data: {e.message}")
        return

    if st.session_state.get("sale_open"):
        with st.container(border=True):
            _render_new_sale(client, customers, medications)

    rows = [dict(s, itemCount=len(s.get("items") or [])) for s in sales]
    if not rows:
        st.info("No sales recorded.")
        return
    ordered = render_sortable_table(rows, SALE_COLUMNS, "sales")
    export_buttons(records_to_frame(ordered, SALE_COLUMNS), "sales", "SalesExport")
    st.divider()
    _render_sale_details(sales)
