"""Dashboard page with stock alerts and sales overview."""
import logging

import pandas as pd
import plotly.express as px
import streamlit as st

from core.api_client import ApiClient, ApiError
from core.formatters import format_currency, format_datetime
from core.services import get_expiry_alerts, get_low_stock_alerts, get_medications, get_sales
from core.stock import split_expiry_alerts

logger = logging.getLogger(__name__)


def render(client: ApiClient):
    """Render the dashboard page."""
    st.header("📊 Pharmacy Overview")
    try:
        low_stock = get_low_stock_alerts(client)
        expiry = get_expiry_alerts(client)
        medications = get_medications(client)
        sales = get_sales(client)
    except ApiError as e:
        logger.warning("Dashboard load failed: %s", e.message)
        st.error(f"❌ Error loading dashboard: {e.message}")
        return

    expired, upcoming = split_expiry_alerts(expiry)
    revenue = sum(float(s.get("total") or 0) for s in sales)

    # Row 1: Core metrics
    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Medications", len(medications))
    col2.metric("Active", sum(1 for m in medications if m.get("active")))
    col3.metric("Sales", len(sales))
    col4.metric("Revenue", format_currency(revenue))

    # Row 2: Alerts
    col1, col2, col3 = st.columns(3)
    col1.metric("Low Stock Items", len(low_stock))
    col2.metric("Expiring Soon", len(upcoming))
    col3.metric("Expired Batches", len(expired))

    st.markdown("---")

    st.subheader("⚠️ Low Stock")
    if low_stock:
        chart_df = pd.DataFrame(low_stock)
        fig = px.bar(
            chart_df,
            x="medicationName",
            y=["currentQuantity", "lowThreshold"],
            barmode="group",
            title="Current quantity vs. threshold",
            labels={"medicationName": "Medication", "value": "Units", "variable": ""},
        )
        st.plotly_chart(fig, width="stretch")
    else:
        st.info("No medications below their minimum stock")

    st.subheader("🛒 Recent Sales")
    if sales:
        recent = sorted(sales, key=lambda s: s.get("createdAt") or "", reverse=True)[:5]
        recent_df = pd.DataFrame(
            [
                {
                    "Sale": s.get("id"),
                    "Customer": (s.get("customer") or {}).get("fullName", ""),
                    "Date": format_datetime(s.get("createdAt")),
                    "Items": len(s.get("items") or []),
                    "Total": format_currency(s.get("total")),
                }
                for s in recent
            ]
        )
        st.dataframe(recent_df, width="stretch", hide_index=True)
    else:
        st.info("No recent activity")
