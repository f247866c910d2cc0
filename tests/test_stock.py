import pytest

from core.stock import (
    check_exit,
    nearest_expiry,
    sort_batches_by_expiry,
    split_expiry_alerts,
    total_quantity,
)

BATCHES = [
    {"id": 1, "expiryDate": "2027-05-01", "quantityRemaining": 10},
    {"id": 2, "expiryDate": None, "quantityRemaining": 3},
    {"id": 3, "expiryDate": "2026-12-01", "quantityRemaining": 4},
    {"id": 4, "expiryDate": "2027-01-15", "quantityRemaining": 0},
]


def test_batches_sorted_by_nearest_expiry_with_undated_last():
    assert [b["id"] for b in sort_batches_by_expiry(BATCHES)] == [3, 4, 1, 2]


def test_nearest_expiry():
    assert nearest_expiry(BATCHES) == "2026-12-01"
    assert nearest_expiry([]) is None
    assert nearest_expiry([{"expiryDate": None}]) is None


def test_total_quantity():
    assert total_quantity(BATCHES) == 17
    assert total_quantity([]) == 0


def test_check_exit():
    check_exit(17, BATCHES)
    with pytest.raises(ValueError, match="Available: 17"):
        check_exit(18, BATCHES)


def test_split_expiry_alerts():
    alerts = [
        {"id": 1, "daysToExpiry": -3},
        {"id": 2, "daysToExpiry": 0},
        {"id": 3, "daysToExpiry": 25},
        {"id": 4, "daysToExpiry": -1},
    ]
    expired, upcoming = split_expiry_alerts(alerts)
    assert [a["id"] for a in expired] == [1, 4]
    assert [a["id"] for a in upcoming] == [2, 3]
