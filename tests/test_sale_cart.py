"""Tests for the new-sale cart workflow."""

from datetime import date

import pytest

from core.api_client import ApiError
from core.sale_cart import (
    CartLine,
    CatalogItem,
    SaleComposer,
    SaleState,
    SaleValidationError,
    compute_total,
    customer_label,
    search_catalog,
    search_customers,
)

TODAY = date(2026, 10, 17)

PARACETAMOL = CatalogItem(id=1, name="Paracetamol", unit_price=12.50, dosage="500mg")
IBUPROFEN = CatalogItem(id=2, name="Ibuprofen", unit_price=8.90, dosage="400mg")

ADULT = {"id": 10, "fullName": "Maria Souza", "taxId": "123.456.789-00", "birthDate": "1990-05-20"}
MINOR = {"id": 11, "fullName": "Pedro Lima", "taxId": "987.654.321-00", "birthDate": "2012-01-01"}


@pytest.fixture
def composer():
    return SaleComposer(today=lambda: TODAY)


class FakeBackend:
    """Records submitted payloads; optionally rejects them."""

    def __init__(self, error=None):
        self.error = error
        self.calls = []

    def __call__(self, payload):
        self.calls.append(payload)
        if self.error:
            raise self.error
        return {"id": 99, "total": 0}


class TestCustomerSelection:
    def test_adult_is_selected(self, composer):
        composer.select_customer(ADULT)
        assert composer.customer == ADULT
        assert composer.state is SaleState.CUSTOMER_SELECTED

    def test_minor_is_rejected_without_state_change(self, composer):
        with pytest.raises(SaleValidationError):
            composer.select_customer(MINOR)
        assert composer.customer is None
        assert composer.state is SaleState.EMPTY

    def test_rejection_keeps_previous_selection(self, composer):
        composer.select_customer(ADULT)
        with pytest.raises(SaleValidationError):
            composer.select_customer(MINOR)
        assert composer.customer == ADULT

    def test_one_day_before_eighteenth_birthday_is_rejected(self, composer):
        customer = dict(ADULT, birthDate="2008-10-18")
        with pytest.raises(SaleValidationError):
            composer.select_customer(customer)

    def test_eighteenth_birthday_is_accepted(self, composer):
        customer = dict(ADULT, birthDate="2008-10-17")
        composer.select_customer(customer)
        assert composer.customer == customer

    def test_missing_birth_date_is_rejected(self, composer):
        with pytest.raises(SaleValidationError):
            composer.select_customer(dict(ADULT, birthDate=None))

    @pytest.mark.parametrize("birth_date", ["20/05/1990", "unknown"])
    def test_unreadable_birth_date_is_a_validation_error(self, composer, birth_date):
        with pytest.raises(SaleValidationError, match="birth date is invalid"):
            composer.select_customer(dict(ADULT, birthDate=birth_date))
        assert composer.customer is None

    def test_clear_customer(self, composer):
        composer.select_customer(ADULT)
        composer.clear_customer()
        assert composer.state is SaleState.EMPTY


class TestCart:
    def test_add_creates_line(self, composer):
        composer.add_to_cart(PARACETAMOL, 3)
        assert composer.lines == [CartLine(PARACETAMOL, 3)]
        assert composer.state is SaleState.COMPOSING_CART

    def test_same_item_merges_quantities(self, composer):
        composer.add_to_cart(PARACETAMOL, 2)
        composer.add_to_cart(PARACETAMOL, 3)
        assert len(composer.lines) == 1
        assert composer.lines[0].quantity == 5

    def test_distinct_items_get_distinct_lines(self, composer):
        composer.add_to_cart(PARACETAMOL, 1)
        composer.add_to_cart(IBUPROFEN, 1)
        assert [line.item.id for line in composer.lines] == [1, 2]

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_non_positive_quantity_is_rejected(self, composer, quantity):
        with pytest.raises(SaleValidationError):
            composer.add_to_cart(PARACETAMOL, quantity)
        assert composer.lines == []

    @pytest.mark.parametrize("quantity", [1.9, 0.5, "2", True])
    def test_fractional_or_non_numeric_quantity_is_rejected(self, composer, quantity):
        with pytest.raises(SaleValidationError, match="whole number"):
            composer.add_to_cart(PARACETAMOL, quantity)
        assert composer.lines == []

    def test_whole_float_quantity_is_accepted(self, composer):
        composer.add_to_cart(PARACETAMOL, 2.0)
        assert composer.lines[0].quantity == 2
        assert isinstance(composer.lines[0].quantity, int)

    def test_set_fractional_quantity_keeps_line(self, composer):
        composer.add_to_cart(PARACETAMOL, 3)
        with pytest.raises(SaleValidationError):
            composer.set_line_quantity(1, 1.9)
        assert composer.lines[0].quantity == 3

    def test_set_quantity(self, composer):
        composer.add_to_cart(PARACETAMOL, 1)
        composer.set_line_quantity(1, 4)
        assert composer.lines[0].quantity == 4

    @pytest.mark.parametrize("quantity", [0, -2])
    def test_set_quantity_to_zero_or_less_removes_line(self, composer, quantity):
        composer.add_to_cart(PARACETAMOL, 1)
        composer.set_line_quantity(1, quantity)
        assert composer.lines == []

    def test_remove_absent_line_is_noop(self, composer):
        composer.add_to_cart(PARACETAMOL, 1)
        composer.set_line_quantity(1, 0)
        composer.remove_line(1)
        composer.remove_line(42)
        assert composer.lines == []

    def test_paracetamol_walkthrough(self, composer):
        composer.add_to_cart(PARACETAMOL, 3)
        assert composer.total == pytest.approx(37.50)
        composer.add_to_cart(PARACETAMOL, 2)
        assert len(composer.lines) == 1
        assert composer.lines[0].quantity == 5
        assert composer.total == pytest.approx(62.50)
        composer.set_line_quantity(1, 0)
        assert composer.lines == []
        assert composer.total == 0

    def test_snapshot_is_a_copy(self, composer):
        composer.select_customer(ADULT)
        composer.add_to_cart(PARACETAMOL, 2)
        snapshot = composer.snapshot()
        composer.add_to_cart(PARACETAMOL, 1)
        assert snapshot.lines[0].quantity == 2
        assert snapshot.total == pytest.approx(25.0)
        assert snapshot.customer == ADULT
        assert snapshot.state is SaleState.COMPOSING_CART


class TestComputeTotal:
    def test_empty_cart(self):
        assert compute_total([]) == 0

    def test_total_is_additive(self):
        cart = [CartLine(PARACETAMOL, 2)]
        extra = CartLine(IBUPROFEN, 3)
        assert compute_total(cart + [extra]) == pytest.approx(
            compute_total(cart) + extra.item.unit_price * extra.quantity
        )

    def test_no_rounding(self):
        item = CatalogItem(id=7, name="Syrup", unit_price=0.333)
        assert compute_total([CartLine(item, 3)]) == pytest.approx(0.999)


class TestSubmit:
    def test_requires_customer(self, composer):
        backend = FakeBackend()
        composer.add_to_cart(PARACETAMOL, 1)
        with pytest.raises(SaleValidationError, match="customer"):
            composer.submit(backend)
        assert backend.calls == []

    def test_requires_items(self, composer):
        backend = FakeBackend()
        composer.select_customer(ADULT)
        with pytest.raises(SaleValidationError, match="at least one"):
            composer.submit(backend)
        assert backend.calls == []

    def test_rechecks_age_at_submit(self, composer):
        backend = FakeBackend()
        composer.customer = MINOR
        composer.add_to_cart(PARACETAMOL, 1)
        with pytest.raises(SaleValidationError):
            composer.submit(backend)
        assert backend.calls == []

    def test_success_sends_payload_and_clears(self, composer):
        backend = FakeBackend()
        composer.select_customer(ADULT)
        composer.add_to_cart(PARACETAMOL, 3)
        composer.add_to_cart(IBUPROFEN, 1)

        created = composer.submit(backend)

        assert backend.calls == [
            {
                "customerId": 10,
                "lines": [{"itemId": 1, "quantity": 3}, {"itemId": 2, "quantity": 1}],
            }
        ]
        assert created == {"id": 99, "total": 0}
        assert composer.last_sale == created
        assert composer.customer is None
        assert composer.lines == []
        assert composer.state is SaleState.SUBMITTED

    def test_new_transition_after_success_leaves_submitted(self, composer):
        composer.select_customer(ADULT)
        composer.add_to_cart(PARACETAMOL, 1)
        composer.submit(FakeBackend())
        composer.reset()
        assert composer.state is SaleState.EMPTY

    def test_remote_failure_keeps_cart_and_customer(self, composer):
        backend = FakeBackend(error=ApiError("Insufficient stock", status=400))
        composer.select_customer(ADULT)
        composer.add_to_cart(PARACETAMOL, 3)

        with pytest.raises(ApiError, match="Insufficient stock"):
            composer.submit(backend)

        assert composer.customer == ADULT
        assert composer.lines == [CartLine(PARACETAMOL, 3)]
        assert composer.state is SaleState.COMPOSING_CART
        assert not composer.submitting

    def test_state_is_submitting_during_call(self, composer):
        seen = []

        def backend(payload):
            seen.append(composer.state)
            return {"id": 1}

        composer.select_customer(ADULT)
        composer.add_to_cart(PARACETAMOL, 1)
        composer.submit(backend)
        assert seen == [SaleState.SUBMITTING]

    def test_second_submit_while_in_flight_is_refused(self, composer):
        errors = []

        def backend(payload):
            try:
                composer.submit(backend)
            except SaleValidationError as e:
                errors.append(e)
            return {"id": 1}

        composer.select_customer(ADULT)
        composer.add_to_cart(PARACETAMOL, 1)
        composer.submit(backend)
        assert len(errors) == 1


class TestSearch:
    CUSTOMERS = [ADULT, MINOR]
    MEDICATIONS = [
        {"id": 1, "name": "Paracetamol", "dosage": "500mg", "price": 12.5, "active": True},
        {"id": 2, "name": "Paracetamol Kids", "dosage": "200mg/ml", "price": 9.0, "active": False},
        {"id": 3, "name": "Ibuprofen", "dosage": "400mg", "price": 8.9, "active": True, "deleted": True},
        {"id": 4, "name": "Amoxicillin", "dosage": "500mg", "price": 20.0, "active": True},
    ]

    def test_blank_customer_search_matches_nothing(self):
        assert search_customers(self.CUSTOMERS, "") == []

    def test_customer_search_by_name(self):
        assert search_customers(self.CUSTOMERS, "souza") == [ADULT]

    def test_customer_search_by_tax_id_digits(self):
        assert search_customers(self.CUSTOMERS, "456789") == [ADULT]
        assert search_customers(self.CUSTOMERS, "987.654") == [MINOR]

    def test_catalog_search_skips_inactive_and_deleted(self):
        ids = [m["id"] for m in search_catalog(self.MEDICATIONS, "500MG")]
        assert ids == [1, 4]
        assert search_catalog(self.MEDICATIONS, "paracetamol") == [self.MEDICATIONS[0]]
        assert search_catalog(self.MEDICATIONS, " ") == []

    def test_catalog_item_from_medication(self):
        item = CatalogItem.from_medication(self.MEDICATIONS[0])
        assert item == CatalogItem(id=1, name="Paracetamol", unit_price=12.5, dosage="500mg")
        assert item.label == "Paracetamol - 500mg"

    def test_customer_label(self):
        assert customer_label(ADULT) == "Maria Souza - 123.456.789-00"
