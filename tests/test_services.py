from datetime import date

import pytest

from core import services


class FakeClient:
    """Stands in for ApiClient; records (method, path, payload) calls."""

    def __init__(self, response=None):
        self.response = response
        self.calls = []

    def _record(self, method, path, json=None):
        self.calls.append((method, path, json))
        return self.response

    def get(self, path):
        return self._record("GET", path)

    def post(self, path, json=None):
        return self._record("POST", path, json)

    def put(self, path, json=None):
        return self._record("PUT", path, json)

    def patch(self, path, json=None):
        return self._record("PATCH", path, json)

    def delete(self, path):
        return self._record("DELETE", path)


def test_login_posts_credentials():
    client = FakeClient({"token": "t", "username": "admin"})
    assert services.login(client, "admin", "secret1")["token"] == "t"
    assert client.calls == [("POST", "/auth/login", {"username": "admin", "password": "secret1"})]


def test_list_endpoints_default_to_empty():
    client = FakeClient(None)
    assert services.get_categories(client) == []
    assert services.get_customers(client) == []
    assert services.get_sales(client) == []
    assert services.get_low_stock_alerts(client) == []
    assert services.get_expiry_alerts(client) == []
    assert [path for _, path, _ in client.calls] == [
        "/categories",
        "/customers",
        "/sales",
        "/alerts/low-stock",
        "/alerts/expiring",
    ]


def test_get_medications_hides_soft_deleted():
    client = FakeClient([{"id": 1}, {"id": 2, "deleted": True}])
    assert services.get_medications(client) == [{"id": 1}]
    assert len(services.get_medications(client, include_deleted=True)) == 2


def test_medication_payload_uses_wire_names():
    payload = services.medication_payload("Paracetamol", "", "500mg", "12.5", "10", category_id=3)
    assert payload == {
        "name": "Paracetamol",
        "description": "",
        "dosage": "500mg",
        "price": 12.5,
        "minimumStock": 10,
        "active": True,
        "categoryId": 3,
    }
    assert "categoryId" not in services.medication_payload("A", "", "1mg", 1, 0)


def test_set_medication_active():
    client = FakeClient({})
    services.set_medication_active(client, 4, False)
    assert client.calls == [("PATCH", "/medications/4/status", {"active": False})]


def test_customer_payload():
    payload = services.customer_payload(
        " Maria Souza ", "123.456.789-00", "maria@example.com", date(1990, 5, 20), "  "
    )
    assert payload == {
        "fullName": "Maria Souza",
        "taxId": "123.456.789-00",
        "email": "maria@example.com",
        "birthDate": "1990-05-20",
        "guardianName": None,
    }


def test_stock_payload_drops_empty_optionals():
    assert services.stock_payload(7, "5") == {"itemId": 7, "quantity": 5}
    assert services.stock_payload(7, 5, date(2027, 1, 31), " lot 9 ") == {
        "itemId": 7,
        "quantity": 5,
        "expiryDate": "2027-01-31",
        "note": "lot 9",
    }


@pytest.mark.parametrize(
    "call, expected",
    [
        (lambda c: services.register_entry(c, {"itemId": 1}), ("POST", "/stock/entry")),
        (lambda c: services.register_exit(c, {"itemId": 1}), ("POST", "/stock/exit")),
        (lambda c: services.get_batches(c, 1), ("GET", "/stock/medication/1")),
        (lambda c: services.get_stock_total(c, 1), ("GET", "/stock/1")),
        (lambda c: services.get_sales_by_customer(c, 2), ("GET", "/sales/customer/2")),
        (lambda c: services.update_category(c, 3, "Vitamins"), ("PUT", "/categories/3")),
        (lambda c: services.delete_customer(c, 5), ("DELETE", "/customers/5")),
    ],
)
def test_endpoints(call, expected):
    client = FakeClient({})
    call(client)
    assert client.calls[0][:2] == expected


def test_create_sale():
    client = FakeClient({"id": 1})
    payload = {"customerId": 10, "lines": [{"itemId": 1, "quantity": 2}]}
    assert services.create_sale(client, payload) == {"id": 1}
    assert client.calls == [("POST", "/sales", payload)]
