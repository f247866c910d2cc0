"""Pharmacy Desk - Main Application Entry Point."""
import logging

import streamlit as st

from core.auth import get_client, login_form, require_auth
from core.constants import (
    LOG_LEVEL,
    MENU_ALERTS,
    MENU_CATEGORIES,
    MENU_CUSTOMERS,
    MENU_DASHBOARD,
    MENU_MEDICATIONS,
    MENU_SALES,
    MENU_STOCK,
)
from ui.sidebar import render_sidebar_menu

# Import page render functions
from page_modules import alerts, categories, customers, dashboard, medications, sales, stock

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# Page configuration
st.set_page_config(
    page_title="Pharmacy Desk",
    page_icon="💊",
    layout="wide",
)

client = get_client()

# Check authentication
if not require_auth():
    login_form(client)
    st.stop()

# Render sidebar menu
menu = render_sidebar_menu()

# Page routing
pages = {
    MENU_DASHBOARD: lambda: dashboard.render(client),
    MENU_CATEGORIES: lambda: categories.render(client),
    MENU_MEDICATIONS: lambda: medications.render(client),
    MENU_CUSTOMERS: lambda: customers.render(client),
    MENU_STOCK: lambda: stock.render(client),
    MENU_SALES: lambda: sales.render(client),
    MENU_ALERTS: lambda: alerts.render(client),
}

# Render selected page
if menu not in pages:
    menu = MENU_DASHBOARD
pages[menu]()

# A 401 during the page cleared the session; go back to the login form
if not require_auth():
    st.rerun()
