"""Stock alerts page for low inventory and expiring batches."""
import logging

import streamlit as st

from core.api_client import ApiClient, ApiError
from core.constants import ALERT_FILTERS
from core.formatters import format_currency, format_date
from core.services import get_expiry_alerts, get_low_stock_alerts
from core.stock import split_expiry_alerts
from ui.components import column, export_buttons, records_to_frame, render_sortable_table

logger = logging.getLogger(__name__)

LOW_STOCK_COLUMNS = [
    column("medicationName", "Medication"),
    column("currentQuantity", "Stock"),
    column("lowThreshold", "Threshold"),
    column("price", "Price", format_currency),
]

EXPIRY_COLUMNS = [
    column("medicationName", "Medication"),
    column("quantity", "Quantity"),
    column("expiryDate", "Expiry", format_date),
    column("daysToExpiry", "Days Left"),
]


def render(client: ApiClient):
    """Render the stock alerts page."""
    st.header("🚨 Alerts")
    try:
        low_stock = get_low_stock_alerts(client)
        expired, upcoming = split_expiry_alerts(get_expiry_alerts(client))
    except ApiError as e:
        logger.warning("Alerts load failed: %s", e.message)
        st.error(f"❌ Error loading alerts: {e.message}")
        return

    selected = st.radio("Show", ALERT_FILTERS, horizontal=True, key="alert_filter")

    if selected in ("All", "Low stock"):
        st.subheader(f"📉 Low stock ({len(low_stock)})")
        if low_stock:
            ordered = render_sortable_table(low_stock, LOW_STOCK_COLUMNS, "alerts_low_stock")
            export_buttons(records_to_frame(ordered, LOW_STOCK_COLUMNS), "low_stock", "LowStockExport")
        else:
            st.info("No medications at or below their minimum stock")

    if selected in ("All", "Expiry"):
        st.subheader(f"⛔ Expired ({len(expired)})")
        if expired:
            render_sortable_table(expired, EXPIRY_COLUMNS, "alerts_expired")
        else:
            st.info("No expired batches")

        st.subheader(f"⏳ Expiring soon ({len(upcoming)})")
        if upcoming:
            render_sortable_table(upcoming, EXPIRY_COLUMNS, "alerts_upcoming")
        else:
            st.info("No batches close to expiry")
