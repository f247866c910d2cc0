"""Form validation run before anything is sent to the backend.

Every function returns ``{field: message}``; an empty dict means the form is
valid.
"""
from __future__ import annotations

import re
from datetime import date
from typing import Dict, Optional

from core.formatters import parse_date, is_of_age

TAX_ID_PATTERN = re.compile(r"^\d{3}\.\d{3}\.\d{3}-\d{2}$")
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

Errors = Dict[str, str]


def _text(value) -> str:
    return (value or "").strip()


def validate_category(name: str) -> Errors:
    errors: Errors = {}
    name = _text(name)
    if not name:
        errors["name"] = "Name is required"
    elif len(name) < 3:
        errors["name"] = "Name must be at least 3 characters"
    elif len(name) > 100:
        errors["name"] = "Name must be at most 100 characters"
    return errors


def validate_customer(
    full_name: str,
    tax_id: str,
    email: str,
    birth_date,
    guardian_name: Optional[str] = None,
    today: Optional[date] = None,
) -> Errors:
    errors: Errors = {}
    full_name = _text(full_name)
    if not full_name:
        errors["full_name"] = "Full name is required"
    elif len(full_name) < 3:
        errors["full_name"] = "Name must be at least 3 characters"

    tax_id = _text(tax_id)
    if not tax_id:
        errors["tax_id"] = "Tax ID is required"
    elif not TAX_ID_PATTERN.match(tax_id):
        errors["tax_id"] = "Invalid tax ID (expected 000.000.000-00)"

    email = _text(email)
    if not email:
        errors["email"] = "Email is required"
    elif not EMAIL_PATTERN.match(email):
        errors["email"] = "Invalid email"

    if not birth_date:
        errors["birth_date"] = "Birth date is required"
    else:
        try:
            born = parse_date(birth_date)
        except ValueError:
            errors["birth_date"] = "Invalid birth date"
        else:
            if born > (today or date.today()):
                errors["birth_date"] = "Birth date cannot be in the future"
            elif not is_of_age(born, today) and not _text(guardian_name):
                errors["guardian_name"] = "Guardian name is required for customers under 18"
    return errors


def validate_medication(
    name: str,
    dosage: str,
    category_id,
    price,
    minimum_stock,
) -> Errors:
    errors: Errors = {}
    name = _text(name)
    if not name:
        errors["name"] = "Name is required"
    elif len(name) < 3:
        errors["name"] = "Name must be at least 3 characters"
    if not _text(dosage):
        errors["dosage"] = "Dosage is required"
    if not category_id:
        errors["category_id"] = "Category is required"
    if price is None or float(price) < 0.01:
        errors["price"] = "Price must be greater than zero"
    if minimum_stock is None or int(minimum_stock) < 0:
        errors["minimum_stock"] = "Minimum stock must be zero or more"
    return errors


def validate_login(username: str, password: str) -> Errors:
    errors: Errors = {}
    username = _text(username)
    if not username:
        errors["username"] = "Username is required"
    elif len(username) < 3:
        errors["username"] = "Username must be at least 3 characters"
    if not password:
        errors["password"] = "Password is required"
    elif len(password) < 6:
        errors["password"] = "Password must be at least 6 characters"
    return errors


def validate_registration(username: str, password: str, confirm_password: str) -> Errors:
    errors = validate_login(username, password)
    if "username" not in errors and len(_text(username)) > 50:
        errors["username"] = "Username must be at most 50 characters"
    if not confirm_password:
        errors["confirm_password"] = "Password confirmation is required"
    elif password != confirm_password:
        errors["confirm_password"] = "Passwords don't match"
    return errors


def validate_stock_entry(quantity, expiry_date) -> Errors:
    errors: Errors = {}
    if quantity is None or int(quantity) < 1:
        errors["quantity"] = "Quantity must be greater than zero"
    if not expiry_date:
        errors["expiry_date"] = "Expiry date is required"
    return errors


def validate_stock_exit(quantity) -> Errors:
    errors: Errors = {}
    if quantity is None or int(quantity) < 1:
        errors["quantity"] = "Quantity must be greater than zero"
    return errors
