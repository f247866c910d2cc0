"""REST calls used by the Streamlit pages, one function per backend operation."""
from __future__ import annotations

import logging
from datetime import date
from typing import List, Optional

from core.api_client import ApiClient

logger = logging.getLogger(__name__)


def _iso(value) -> Optional[str]:
    if value in (None, ""):
        return None
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def _clean(payload: dict) -> dict:
    """Drop optional keys left empty by the forms."""
    return {k: v for k, v in payload.items() if v is not None}


# ============================================================================
# Auth
# ============================================================================

def login(client: ApiClient, username: str, password: str) -> dict:
    """Exchange credentials for ``{token, type, username}``."""
    return client.post("/auth/login", {"username": username, "password": password})


def register(client: ApiClient, username: str, password: str):
    """Create a new user account."""
    return client.post("/auth/register", {"username": username, "password": password})


# ============================================================================
# Categories
# ============================================================================

def get_categories(client: ApiClient) -> List[dict]:
    return client.get("/categories") or []


def get_category(client: ApiClient, category_id: int) -> dict:
    return client.get(f"/categories/{category_id}")


def create_category(client: ApiClient, name: str) -> dict:
    return client.post("/categories", {"name": name})


def update_category(client: ApiClient, category_id: int, name: str) -> dict:
    return client.put(f"/categories/{category_id}", {"name": name})


def delete_category(client: ApiClient, category_id: int) -> dict:
    return client.delete(f"/categories/{category_id}")


# ============================================================================
# Medications
# ============================================================================

def get_medications(client: ApiClient, include_deleted: bool = False) -> List[dict]:
    """Return medications; soft-deleted ones are hidden unless asked for."""
    medications = client.get("/medications") or []
    if include_deleted:
        return medications
    return [m for m in medications if not m.get("deleted")]


def get_medication(client: ApiClient, medication_id: int) -> dict:
    return client.get(f"/medications/{medication_id}")


def get_medications_by_category(client: ApiClient, category_id: int) -> List[dict]:
    return client.get(f"/medications/category/{category_id}") or []


def medication_payload(
    name: str,
    description: str,
    dosage: str,
    price: float,
    minimum_stock: int,
    active: bool = True,
    category_id: Optional[int] = None,
) -> dict:
    return _clean(
        {
            "name": name,
            "description": description,
            "dosage": dosage,
            "price": float(price),
            "minimumStock": int(minimum_stock),
            "active": bool(active),
            "categoryId": category_id,
        }
    )


def create_medication(client: ApiClient, payload: dict) -> dict:
    return client.post("/medications", payload)


def update_medication(client: ApiClient, medication_id: int, payload: dict) -> dict:
    return client.put(f"/medications/{medication_id}", payload)


def set_medication_active(client: ApiClient, medication_id: int, active: bool) -> dict:
    """Activate or deactivate a medication without editing it."""
    return client.patch(f"/medications/{medication_id}/status", {"active": bool(active)})


def delete_medication(client: ApiClient, medication_id: int) -> dict:
    return client.delete(f"/medications/{medication_id}")


# ============================================================================
# Customers
# ============================================================================

def get_customers(client: ApiClient) -> List[dict]:
    return client.get("/customers") or []


def get_customer(client: ApiClient, customer_id: int) -> dict:
    return client.get(f"/customers/{customer_id}")


def customer_payload(
    full_name: str,
    tax_id: str,
    email: str,
    birth_date,
    guardian_name: Optional[str] = None,
) -> dict:
    return {
        "fullName": full_name.strip(),
        "taxId": tax_id.strip(),
        "email": email.strip(),
        "birthDate": _iso(birth_date),
        # The backend expects null, not an empty string
        "guardianName": (guardian_name or "").strip() or None,
    }


def create_customer(client: ApiClient, payload: dict) -> dict:
    return client.post("/customers", payload)


def update_customer(client: ApiClient, customer_id: int, payload: dict) -> dict:
    return client.put(f"/customers/{customer_id}", payload)


def delete_customer(client: ApiClient, customer_id: int) -> dict:
    return client.delete(f"/customers/{customer_id}")


# ============================================================================
# Stock
# ============================================================================

def get_stock_total(client: ApiClient, medication_id: int) -> dict:
    """Total quantity on hand for a medication across all batches."""
    return client.get(f"/stock/{medication_id}")


def get_batches(client: ApiClient, medication_id: int) -> List[dict]:
    """Batches of a medication, one per expiry date."""
    return client.get(f"/stock/medication/{medication_id}") or []


def stock_payload(medication_id: int, quantity: int, expiry_date=None, note: str = "") -> dict:
    return _clean(
        {
            "itemId": medication_id,
            "quantity": int(quantity),
            "expiryDate": _iso(expiry_date),
            "note": (note or "").strip() or None,
        }
    )


def register_entry(client: ApiClient, payload: dict) -> dict:
    """Receive stock into a batch. Returns ``{message}``."""
    return client.post("/stock/entry", payload)


def register_exit(client: ApiClient, payload: dict) -> dict:
    """Remove stock; the backend allocates against the nearest expiry first."""
    return client.post("/stock/exit", payload)


# ============================================================================
# Sales
# ============================================================================

def get_sales(client: ApiClient) -> List[dict]:
    return client.get("/sales") or []


def get_sale(client: ApiClient, sale_id: int) -> dict:
    return client.get(f"/sales/{sale_id}")


def get_sales_by_customer(client: ApiClient, customer_id: int) -> List[dict]:
    return client.get(f"/sales/customer/{customer_id}") or []


def create_sale(client: ApiClient, payload: dict) -> dict:
    """Submit ``{customerId, lines: [{itemId, quantity}]}``."""
    logger.info(
        "Submitting sale for customer %s with %d line(s)",
        payload.get("customerId"),
        len(payload.get("lines", [])),
    )
    return client.post("/sales", payload)


# ============================================================================
# Alerts
# ============================================================================

def get_low_stock_alerts(client: ApiClient) -> List[dict]:
    return client.get("/alerts/low-stock") or []


def get_expiry_alerts(client: ApiClient) -> List[dict]:
    """Batches expiring soon or already expired (negative ``daysToExpiry``)."""
    return client.get("/alerts/expiring") or []
