"""Cart assembly for a new sale.

A :class:`SaleComposer` lives in the sales page's session state while the
"New sale" panel is open. It keeps the selected customer and the cart lines,
refuses customers under the age of majority, and submits the sale through
an injected callable so it can be exercised without a backend.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Callable, Iterable, List, Optional, Tuple

from core.api_client import ApiError
from core.constants import AGE_OF_MAJORITY
from core.formatters import calculate_age

logger = logging.getLogger(__name__)


class SaleValidationError(ValueError):
    """A sale rule was broken before anything was sent to the backend."""


class SaleState(str, Enum):
    EMPTY = "empty"
    CUSTOMER_SELECTED = "customer_selected"
    COMPOSING_CART = "composing_cart"
    SUBMITTING = "submitting"
    SUBMITTED = "submitted"


@dataclass(frozen=True)
class CatalogItem:
    id: int
    name: str
    unit_price: float
    dosage: str = ""

    @classmethod
    def from_medication(cls, medication: dict) -> "CatalogItem":
        return cls(
            id=medication["id"],
            name=medication.get("name") or "",
            unit_price=float(medication.get("price") or 0),
            dosage=medication.get("dosage") or "",
        )

    @property
    def label(self) -> str:
        return f"{self.name} - {self.dosage}" if self.dosage else self.name


@dataclass
class CartLine:
    item: CatalogItem
    quantity: int

    @property
    def subtotal(self) -> float:
        return self.item.unit_price * self.quantity


@dataclass(frozen=True)
class SaleSnapshot:
    """Read-only view of the composer for rendering."""

    customer: Optional[dict]
    lines: Tuple[CartLine, ...]
    total: float
    state: SaleState


def _whole_quantity(quantity) -> int:
    """Quantities are whole units; 2.0 is accepted, 1.9 is not."""
    if isinstance(quantity, bool):
        raise SaleValidationError("Quantity must be a whole number")
    if isinstance(quantity, int):
        return quantity
    if isinstance(quantity, float) and quantity.is_integer():
        return int(quantity)
    raise SaleValidationError("Quantity must be a whole number")


def compute_total(lines: Iterable[CartLine]) -> float:
    """Sum of unit price times quantity. Rounding is left to display."""
    return sum((line.item.unit_price * line.quantity for line in lines), 0.0)


class SaleComposer:
    def __init__(self, today: Callable[[], date] = date.today):
        self._today = today
        self.customer: Optional[dict] = None
        self.lines: List[CartLine] = []
        self.last_sale: Optional[Any] = None
        self._submitting = False
        self._submitted = False

    @property
    def state(self) -> SaleState:
        if self._submitting:
            return SaleState.SUBMITTING
        if self._submitted:
            return SaleState.SUBMITTED
        if self.lines:
            return SaleState.COMPOSING_CART
        if self.customer is not None:
            return SaleState.CUSTOMER_SELECTED
        return SaleState.EMPTY

    @property
    def submitting(self) -> bool:
        return self._submitting

    @property
    def total(self) -> float:
        return compute_total(self.lines)

    def snapshot(self) -> SaleSnapshot:
        return SaleSnapshot(
            customer=self.customer,
            lines=tuple(CartLine(line.item, line.quantity) for line in self.lines),
            total=self.total,
            state=self.state,
        )

    def _check_age(self, customer: dict, message: str) -> None:
        birth_date = customer.get("birthDate")
        if not birth_date:
            raise SaleValidationError("Customer has no birth date on file")
        try:
            age = calculate_age(birth_date, self._today())
        except ValueError:
            raise SaleValidationError("Customer birth date is invalid") from None
        if age < AGE_OF_MAJORITY:
            raise SaleValidationError(message)

    def select_customer(self, customer: dict) -> None:
        """Pick the buyer. Minors are refused and the current selection kept."""
        self._check_age(customer, "Sales to minors are not allowed.")
        self._submitted = False
        self.customer = customer

    def clear_customer(self) -> None:
        self.customer = None

    def _find(self, item_id) -> Optional[CartLine]:
        for line in self.lines:
            if line.item.id == item_id:
                return line
        return None

    def add_to_cart(self, item: CatalogItem, quantity: int = 1) -> CartLine:
        """Add ``quantity`` of ``item``, merging with an existing line."""
        if item is None:
            raise SaleValidationError("Select a medication")
        quantity = _whole_quantity(quantity)
        if quantity < 1:
            raise SaleValidationError("Quantity must be greater than zero")
        self._submitted = False
        existing = self._find(item.id)
        if existing is not None:
            existing.quantity += quantity
            return existing
        line = CartLine(item, quantity)
        self.lines.append(line)
        return line

    def set_line_quantity(self, item_id, quantity: int) -> None:
        """Change a line's quantity; zero or less removes the line."""
        if quantity is None:
            quantity = 0
        quantity = _whole_quantity(quantity)
        if quantity <= 0:
            self.remove_line(item_id)
            return
        line = self._find(item_id)
        if line is not None:
            line.quantity = quantity

    def remove_line(self, item_id) -> None:
        self.lines = [line for line in self.lines if line.item.id != item_id]

    def reset(self) -> None:
        self.customer = None
        self.lines = []
        self._submitted = False

    def validate(self) -> None:
        if self.customer is None:
            raise SaleValidationError("Select a customer")
        self._check_age(self.customer, "Underage customers cannot make purchases")
        if not self.lines:
            raise SaleValidationError("Add at least one medication to the cart")

    def payload(self) -> dict:
        return {
            "customerId": self.customer["id"],
            "lines": [{"itemId": line.item.id, "quantity": line.quantity} for line in self.lines],
        }

    def submit(self, submit_sale: Callable[[dict], Any]) -> Any:
        """Validate and send the sale.

        On success the cart and customer are cleared and the created sale is
        returned. On an :class:`ApiError` everything is kept so the user can
        adjust and retry; the error propagates to the caller.
        """
        if self._submitting:
            raise SaleValidationError("A sale is already being submitted")
        self.validate()
        payload = self.payload()
        self._submitting = True
        try:
            created = submit_sale(payload)
        except ApiError:
            logger.warning("Sale submission rejected for customer %s", payload["customerId"])
            raise
        finally:
            self._submitting = False
        self.last_sale = created
        self.reset()
        self._submitted = True
        return created


def search_customers(customers: Iterable[dict], term: str) -> List[dict]:
    """Customers whose name contains ``term`` or whose tax ID contains its digits."""
    needle = (term or "").strip().casefold()
    if not needle:
        return []
    digits = "".join(ch for ch in needle if ch.isdigit())
    matches = []
    for customer in customers:
        name = (customer.get("fullName") or "").casefold()
        tax_digits = "".join(ch for ch in (customer.get("taxId") or "") if ch.isdigit())
        if needle in name or (digits and digits in tax_digits):
            matches.append(customer)
    return matches


def search_catalog(medications: Iterable[dict], term: str) -> List[dict]:
    """Sellable medications whose name or dosage contains ``term``."""
    needle = (term or "").strip().casefold()
    if not needle:
        return []
    matches = []
    for medication in medications:
        if medication.get("deleted") or not medication.get("active", True):
            continue
        name = (medication.get("name") or "").casefold()
        dosage = (medication.get("dosage") or "").casefold()
        if needle in name or needle in dosage:
            matches.append(medication)
    return matches


def customer_label(customer: dict) -> str:
    return f"{customer.get('fullName', '')} - {customer.get('taxId', '')}"
