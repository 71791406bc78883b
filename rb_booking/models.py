"""Reservation record model."""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Tuple

from .catalog import DepartureSlot, Destination
from .errors import InvalidRecordError

MIN_SEAT = 1
MAX_SEAT = 81
LAST_BUSINESS_SEAT = 15
ADULT_AGE = 18
MAX_PASSENGERS = 4

REFERENCE_PATTERN = re.compile(r"^RB[0-9A-Z]{6}$")
CENTS = Decimal("0.01")


def is_single_line(text: str) -> bool:
    """True when ``text`` holds no character that `str.splitlines` treats as a line break."""

    return text.splitlines() == [text]


def to_money(value: Decimal | int | str) -> Decimal:
    """Quantize ``value`` to two decimal places."""

    return Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


class TravelClass(str, Enum):
    BUSINESS = "Business"
    ECONOMY = "Economy"

    @property
    def label(self) -> str:
        return f"{self.value} Class"

    @classmethod
    def for_seat(cls, seat_number: int) -> "TravelClass":
        return cls.BUSINESS if seat_number <= LAST_BUSINESS_SEAT else cls.ECONOMY

    @classmethod
    def from_label(cls, label: str) -> "TravelClass":
        text = label.strip()
        for member in cls:
            if text in (member.value, member.label):
                return member
        raise ValueError(f"unknown travel class '{label}'")


@dataclass(frozen=True)
class Passenger:
    name: str
    age: int
    seat_number: int

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise InvalidRecordError("passenger name must not be empty")
        if not is_single_line(self.name):
            raise InvalidRecordError("passenger name must fit on one line")
        if self.age < 0:
            raise InvalidRecordError("passenger age must not be negative")
        if not MIN_SEAT <= self.seat_number <= MAX_SEAT:
            raise InvalidRecordError(f"seat must be between {MIN_SEAT} and {MAX_SEAT}")

    @property
    def travel_class(self) -> TravelClass:
        return TravelClass.for_seat(self.seat_number)

    @property
    def is_adult(self) -> bool:
        return self.age >= ADULT_AGE


@dataclass(frozen=True)
class ReservationRecord:
    """A completed booking for 1-4 passengers on one flight."""

    reference_number: str
    destination: Destination
    departure_time: DepartureSlot
    total_price: Decimal
    discount_applied: Decimal
    passengers: Tuple[Passenger, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "passengers", tuple(self.passengers))
        object.__setattr__(self, "total_price", to_money(self.total_price))
        object.__setattr__(self, "discount_applied", to_money(self.discount_applied))
        if not REFERENCE_PATTERN.match(self.reference_number):
            raise InvalidRecordError(f"malformed reference number '{self.reference_number}'")
        if not 1 <= len(self.passengers) <= MAX_PASSENGERS:
            raise InvalidRecordError(f"a reservation holds 1 to {MAX_PASSENGERS} passengers")
        seats = [p.seat_number for p in self.passengers]
        if len(set(seats)) != len(seats):
            raise InvalidRecordError("seat numbers must be unique within a reservation")
        if self.total_price < 0 or self.discount_applied < 0:
            raise InvalidRecordError("prices must not be negative")

    @property
    def num_adults(self) -> int:
        return sum(1 for p in self.passengers if p.is_adult)

    @property
    def num_kids(self) -> int:
        return len(self.passengers) - self.num_adults

    @property
    def pre_discount_price(self) -> Decimal:
        return self.total_price + self.discount_applied
