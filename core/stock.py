"""Batch display helpers for the stock and alerts pages.

Allocation of exits to batches happens on the backend (nearest expiry
first); these helpers only order batches for display and pre-fill forms.
"""
from __future__ import annotations

from datetime import date
from typing import Iterable, List, Optional, Tuple

from core.formatters import parse_date


def _expiry(batch: dict) -> Optional[date]:
    value = batch.get("expiryDate")
    if not value:
        return None
    try:
        return parse_date(value)
    except ValueError:
        return None


def sort_batches_by_expiry(batches: Iterable[dict]) -> List[dict]:
    """Nearest expiry first; batches without a readable date go last."""
    return sorted(batches, key=lambda b: (_expiry(b) is None, _expiry(b) or date.max))


def nearest_expiry(batches: Iterable[dict]) -> Optional[str]:
    """Expiry date suggested by default when registering an exit."""
    for batch in sort_batches_by_expiry(batches):
        if batch.get("expiryDate"):
            return batch["expiryDate"]
    return None


def total_quantity(batches: Iterable[dict]) -> int:
    return sum(int(b.get("quantityRemaining") or 0) for b in batches)


def check_exit(quantity: int, batches: Iterable[dict]) -> None:
    """Raise ValueError when an exit asks for more than is on hand."""
    available = total_quantity(batches)
    if int(quantity) > available:
        raise ValueError(f"Insufficient stock. Available: {available}")


def split_expiry_alerts(alerts: Iterable[dict]) -> Tuple[List[dict], List[dict]]:
    """Split expiry alerts into (already expired, expiring soon)."""
    expired, upcoming = [], []
    for alert in alerts:
        if (alert.get("daysToExpiry") or 0) < 0:
            expired.append(alert)
        else:
            upcoming.append(alert)
    return expired, upcoming
