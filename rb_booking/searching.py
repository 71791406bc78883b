"""Lookup of reservations by reference number."""
from __future__ import annotations

import time
from typing import Any, Callable, Optional, Sequence, Tuple, TypeVar

from .models import ReservationRecord

T = TypeVar("T")


def linear_search(records: Sequence[ReservationRecord], reference_number: str) -> Optional[int]:
    """Return the index of the first record with ``reference_number``, or ``None``."""

    for index, record in enumerate(records):
        if record.reference_number == reference_number:
            return index
    return None


def binary_search(sorted_records: Sequence[ReservationRecord], reference_number: str) -> Optional[int]:
    """Half-interval search over records sorted ascending by reference number.

    The caller sorts (see :func:`rb_booking.sorting.sort_by_reference`); an
    unsorted input gives undefined results.
    """

    low, high = 0, len(sorted_records) - 1
    while low <= high:
        mid = low + (high - low) // 2
        current = sorted_records[mid].reference_number
        if current == reference_number:
            return mid
        if current < reference_number:
            low = mid + 1
        else:
            high = mid - 1
    return None


def timed(fn: Callable[..., T], *args: Any, **kwargs: Any) -> Tuple[T, float]:
    """Run ``fn`` and return its result with the elapsed wall time in seconds."""

    start = time.perf_counter()
    result = fn(*args, **kwargs)
    return result, time.perf_counter() - start
