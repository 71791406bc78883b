"""Static fare, departure, coupon and package tables."""
from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Dict, List, Optional, Tuple

from .errors import InvalidDepartureError, InvalidDestinationError, InvalidPackageError

ORIGIN = "KUALA LUMPUR"
AIRLINE_NAME = "RAUB AIRLINE"
FLIGHT_NUMBER = "RB370"


class Destination(str, Enum):
    JAKARTA = "JAKARTA"
    BANGKOK = "BANGKOK"
    MAKKAH = "MAKKAH"
    TOKYO = "TOKYO"
    PARIS = "PARIS"
    LONDON = "LONDON"
    CHICAGO = "CHICAGO"

    @classmethod
    def from_label(cls, label: str) -> "Destination":
        try:
            return cls(label)
        except ValueError:
            raise InvalidDestinationError(f"unknown destination '{label}'") from None


class DepartureSlot(str, Enum):
    MORNING = "8.00AM"
    AFTERNOON = "1.30PM"
    EVENING = "5.00PM"
    NIGHT = "10.30PM"

    @property
    def letter(self) -> str:
        return _SLOT_LETTERS[self]

    @classmethod
    def from_letter(cls, letter: str) -> "DepartureSlot":
        choice = (letter or "").strip().upper()
        for slot, slot_letter in _SLOT_LETTERS.items():
            if slot_letter == choice:
                return slot
        raise InvalidDepartureError("choose departure time A, B, C or D")

    @classmethod
    def from_label(cls, label: str) -> "DepartureSlot":
        try:
            return cls(label)
        except ValueError:
            raise InvalidDepartureError(f"unknown departure time '{label}'") from None


_SLOT_LETTERS: Dict[DepartureSlot, str] = {
    DepartureSlot.MORNING: "A",
    DepartureSlot.AFTERNOON: "B",
    DepartureSlot.EVENING: "C",
    DepartureSlot.NIGHT: "D",
}


@dataclass(frozen=True)
class Fare:
    adult_base: Decimal
    kid_base: Decimal
    business_surcharge: Decimal


class PricingCatalog:
    """Per-destination fares, keyed by the menu id (1-7)."""

    _fares: Dict[int, Tuple[Destination, Fare]] = {
        1: (Destination.JAKARTA, Fare(Decimal("1000"), Decimal("500"), Decimal("500"))),
        2: (Destination.BANGKOK, Fare(Decimal("1100"), Decimal("550"), Decimal("600"))),
        3: (Destination.MAKKAH, Fare(Decimal("1200"), Decimal("600"), Decimal("700"))),
        4: (Destination.TOKYO, Fare(Decimal("1300"), Decimal("650"), Decimal("800"))),
        5: (Destination.PARIS, Fare(Decimal("1400"), Decimal("700"), Decimal("900"))),
        6: (Destination.LONDON, Fare(Decimal("1500"), Decimal("750"), Decimal("1000"))),
        7: (Destination.CHICAGO, Fare(Decimal("1600"), Decimal("800"), Decimal("1100"))),
    }

    @classmethod
    def destination_for(cls, destination_id: int) -> Destination:
        return cls._entry(destination_id)[0]

    @classmethod
    def fare_for(cls, destination_id: int) -> Fare:
        return cls._entry(destination_id)[1]

    @classmethod
    def destinations(cls) -> List[Tuple[int, Destination, Fare]]:
        return [(key, dest, fare) for key, (dest, fare) in sorted(cls._fares.items())]

    @classmethod
    def _entry(cls, destination_id: int) -> Tuple[Destination, Fare]:
        valid = isinstance(destination_id, int) and not isinstance(destination_id, bool)
        if not valid or destination_id not in cls._fares:
            raise InvalidDestinationError("destination must be between 1 and 7")
        return cls._fares[destination_id]


class CouponTable:
    """Coupon codes accepted by manual reservations (exact, case-sensitive)."""

    _coupons: Dict[str, Decimal] = {
        "CAPTAINAFIQ": Decimal("0.05"),
        "COPILOTAMIR": Decimal("0.10"),
        "AEROAMEEN": Decimal("0.15"),
        "STEWARDFARIS": Decimal("0.10"),
    }

    @classmethod
    def lookup(cls, code: str) -> Optional[Decimal]:
        return cls._coupons.get(code)

    @classmethod
    def codes(cls) -> List[Tuple[str, Decimal]]:
        return list(cls._coupons.items())


PACKAGE_ADULT_BASE = Decimal("1000")
PACKAGE_KID_BASE = Decimal("500")


@dataclass(frozen=True)
class Package:
    code: str
    destination: Destination
    class_add: Decimal
    discount_percent: Decimal

    @property
    def pre_discount_price(self) -> Decimal:
        adult = PACKAGE_ADULT_BASE + self.class_add
        kid = PACKAGE_KID_BASE + self.class_add / 2
        return 2 * adult + 2 * kid

    @property
    def discount_amount(self) -> Decimal:
        return (self.pre_discount_price * self.discount_percent).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)

    @property
    def discounted_price(self) -> Decimal:
        return self.pre_discount_price - self.discount_amount


PACKAGES: Dict[str, Package] = {
    "A": Package("A", Destination.LONDON, Decimal("500"), Decimal("0.30")),
    "B": Package("B", Destination.TOKYO, Decimal("300"), Decimal("0.20")),
    "C": Package("C", Destination.MAKKAH, Decimal("200"), Decimal("0.35")),
}


def package_for(choice: str) -> Package:
    package = PACKAGES.get((choice or "").strip().upper())
    if package is None:
        raise InvalidPackageError("choose package A, B or C")
    return package
