"""Comparison sorts over reservation records.

Both sorts work on a copy and return a new list; the input sequence is never
reordered. Ties keep their encounter order, so the two algorithms always agree.
"""
from __future__ import annotations

from decimal import Decimal
from typing import Any, Callable, List, Sequence

from .models import ReservationRecord

SortKey = Callable[[ReservationRecord], Any]


def price_key(record: ReservationRecord) -> Decimal:
    return record.total_price


def reference_key(record: ReservationRecord) -> str:
    return record.reference_number


def bubble_sort_by_price(
    records: Sequence[ReservationRecord], key: SortKey = price_key
) -> List[ReservationRecord]:
    items = list(records)
    n = len(items)
    for i in range(n - 1):
        swapped = False
        for j in range(n - i - 1):
            if key(items[j]) > key(items[j + 1]):
                items[j], items[j + 1] = items[j + 1], items[j]
                swapped = True
        if not swapped:
            break
    return items


def _merge(items: List[ReservationRecord], left: int, mid: int, right: int, key: SortKey) -> None:
    left_half = items[left : mid + 1]
    right_half = items[mid + 1 : right + 1]
    i = j = 0
    k = left
    while i < len(left_half) and j < len(right_half):
        if key(left_half[i]) <= key(right_half[j]):
            items[k] = left_half[i]
            i += 1
        else:
            items[k] = right_half[j]
            j += 1
        k += 1
    while i < len(left_half):
        items[k] = left_half[i]
        i += 1
        k += 1
    while j < len(right_half):
        items[k] = right_half[j]
        j += 1
        k += 1


def _merge_sort(items: List[ReservationRecord], left: int, right: int, key: SortKey) -> None:
    if left < right:
        mid = left + (right - left) // 2
        _merge_sort(items, left, mid, key)
        _merge_sort(items, mid + 1, right, key)
        _merge(items, left, mid, right, key)


def merge_sort_by_price(
    records: Sequence[ReservationRecord], key: SortKey = price_key
) -> List[ReservationRecord]:
    items = list(records)
    if items:
        _merge_sort(items, 0, len(items) - 1, key)
    return items


def sort_by_reference(records: Sequence[ReservationRecord]) -> List[ReservationRecord]:
    """Return a copy ordered by reference number, as :func:`binary_search` expects."""

    return merge_sort_by_price(records, key=reference_key)
