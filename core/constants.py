"""Project-wide constants and configuration helpers."""
import os
from pathlib import Path
from typing import List

# Local development settings may come from a .env file at the repo root
from dotenv import load_dotenv

_env_path = Path(__file__).resolve().parent.parent / ".env"
if _env_path.exists():
    load_dotenv(_env_path)


def _setting(name: str, default: str) -> str:
    """Read a setting from Streamlit secrets, then the environment."""
    try:
        import streamlit as st

        if name in st.secrets:
            return str(st.secrets[name])
    except Exception:
        # No secrets.toml outside a Streamlit deployment.
        pass
    return os.getenv(name, default)


API_BASE_URL: str = _setting("API_BASE_URL", "http://localhost:8080/api").rstrip("/")
API_TIMEOUT_SECONDS: float = float(_setting("API_TIMEOUT_SECONDS", "15"))
LOG_LEVEL: str = _setting("LOG_LEVEL", "INFO").upper()

AGE_OF_MAJORITY: int = 18

MEDICATION_STATUS_FILTERS: List[str] = ["All", "Active", "Inactive"]
ALERT_FILTERS: List[str] = ["All", "Low stock", "Expiry"]

# Sidebar menu labels (keep in sync across app and sidebar)
MENU_DASHBOARD = "\U0001F4C8 Dashboard"
MENU_CATEGORIES = "\U0001F3F7\ufe0f Categories"
MENU_MEDICATIONS = "\U0001F48A Medications"
MENU_CUSTOMERS = "\U0001F465 Customers"
MENU_STOCK = "\U0001F4E6 Stock"
MENU_SALES = "\U0001F6D2 Sales"
MENU_ALERTS = "\U0001F6A8 Alerts"

MENU: List[str] = [
    MENU_DASHBOARD,
    MENU_CATEGORIES,
    MENU_MEDICATIONS,
    MENU_CUSTOMERS,
    MENU_STOCK,
    MENU_SALES,
    MENU_ALERTS,
]
