"""Sorting and filtering of table records for every list page.

Records are plain dicts as returned by the API (or any object with
attributes). A column is addressed by a dot-separated path such as
``"category.name"``. Sorting is driven by a :class:`SortState` that cycles
ascending -> descending -> unsorted each time the same column is requested.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from functools import cmp_to_key
from numbers import Real
from typing import Any, Iterable, List, Mapping, Optional, Sequence


class SortDirection(str, Enum):
    ASCENDING = "asc"
    DESCENDING = "desc"
    NONE = "none"


@dataclass(frozen=True)
class SortState:
    """Selected sort column and direction for one table."""

    key: Optional[str] = None
    direction: SortDirection = SortDirection.NONE

    @property
    def active(self) -> bool:
        return self.key is not None and self.direction is not SortDirection.NONE


ASCENDING_GLYPH = " ▲"
DESCENDING_GLYPH = " ▼"

_MISSING = object()


def resolve_path(record: Any, path: str) -> Any:
    """Follow ``path`` through nested mappings/attributes; None when absent."""
    current = record
    for part in path.split("."):
        if current is None:
            return None
        if isinstance(current, Mapping):
            current = current.get(part, _MISSING)
        else:
            current = getattr(current, part, _MISSING)
        if current is _MISSING:
            return None
    return current


def _is_absent(value: Any) -> bool:
    if value is None:
        return True
    # pandas uses NaN for missing cells
    return isinstance(value, float) and math.isnan(value)


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def _compare_present(a: Any, b: Any) -> int:
    if _is_number(a) and _is_number(b):
        return (a > b) - (a < b)
    a_text = str(a).casefold()
    b_text = str(b).casefold()
    return (a_text > b_text) - (a_text < b_text)


def sort_records(records: Iterable[Any], state: SortState) -> List[Any]:
    """Return a new, stably sorted list; the input is left untouched.

    Absent values go last whatever the direction. Two numbers compare
    numerically, anything else compares as case-insensitive text.
    """
    items = list(records)
    if not state.active:
        return items

    descending = state.direction is SortDirection.DESCENDING
    key = state.key

    def compare(a: Any, b: Any) -> int:
        a_value = resolve_path(a, key)
        b_value = resolve_path(b, key)
        a_absent = _is_absent(a_value)
        b_absent = _is_absent(b_value)
        if a_absent or b_absent:
            return int(a_absent) - int(b_absent)
        result = _compare_present(a_value, b_value)
        return -result if descending else result

    return sorted(items, key=cmp_to_key(compare))


def request_sort(state: SortState, key: str) -> SortState:
    """Next state after the user clicks the header of column ``key``."""
    if state.key != key:
        return SortState(key, SortDirection.ASCENDING)
    if state.direction is SortDirection.ASCENDING:
        return SortState(key, SortDirection.DESCENDING)
    if state.direction is SortDirection.DESCENDING:
        return SortState()
    return SortState(key, SortDirection.ASCENDING)


def sort_indicator(state: SortState, key: str) -> str:
    if state.key != key:
        return ""
    if state.direction is SortDirection.ASCENDING:
        return ASCENDING_GLYPH
    if state.direction is SortDirection.DESCENDING:
        return DESCENDING_GLYPH
    return ""


def filter_records(
    records: Iterable[Any], query: Optional[str], fields: Sequence[str]
) -> List[Any]:
    """Keep records where any of ``fields`` contains ``query`` (case-insensitive)."""
    items = list(records)
    needle = (query or "").strip().casefold()
    if not needle:
        return items
    matched = []
    for record in items:
        for field in fields:
            value = resolve_path(record, field)
            if not _is_absent(value) and needle in str(value).casefold():
                matched.append(record)
                break
    return matched


def apply_view(
    records: Iterable[Any],
    query: Optional[str],
    fields: Sequence[str],
    state: SortState,
) -> List[Any]:
    """Filter then sort, the projection shown by a list page."""
    return sort_records(filter_records(records, query, fields), state)
