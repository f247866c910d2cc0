"""Display formatting and age helpers shared by pages and the sale workflow."""
from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Union

from core.constants import AGE_OF_MAJORITY

DateLike = Union[date, datetime, str]


def parse_date(value: DateLike) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    # Accept full ISO timestamps as well as plain dates
    return datetime.fromisoformat(text[:10]).date()


def calculate_age(birth_date: DateLike, today: Optional[date] = None) -> int:
    """Whole years elapsed since ``birth_date``.

    Birthday-aware: the year only counts once the birthday has been reached
    in the current year.
    """
    born = parse_date(birth_date)
    today = today or date.today()
    before_birthday = (today.month, today.day) < (born.month, born.day)
    return today.year - born.year - int(before_birthday)


def is_of_age(birth_date: DateLike, today: Optional[date] = None) -> bool:
    return calculate_age(birth_date, today) >= AGE_OF_MAJORITY


def format_currency(value) -> str:
    if value is None or value == "":
        return "-"
    try:
        return f"${float(value):,.2f}"
    except (TypeError, ValueError):
        return str(value)


def format_date(value) -> str:
    """Format as dd/mm/YYYY; unparseable values are returned as given."""
    if value in (None, ""):
        return ""
    try:
        return parse_date(value).strftime("%d/%m/%Y")
    except ValueError:
        return str(value)


def format_datetime(value) -> str:
    if value in (None, ""):
        return ""
    if isinstance(value, datetime):
        return value.strftime("%d/%m/%Y %H:%M")
    try:
        return datetime.fromisoformat(str(value)).strftime("%d/%m/%Y %H:%M")
    except ValueError:
        return format_date(value)
