"""Business logic for building reservations."""
from __future__ import annotations

import logging
import random
import string
from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, Container, List, Optional, Sequence

from .catalog import (
    CouponTable,
    DepartureSlot,
    Destination,
    Package,
    PricingCatalog,
    package_for,
)
from .errors import (
    CouponAlreadyAppliedError,
    IncompleteReservationError,
    InvalidPassengerError,
    InvalidTicketCountError,
    PackageMixError,
    PaymentDeclinedError,
    ReservationInputError,
    SeatTakenError,
    UnknownCouponError,
)
from .models import (
    MAX_PASSENGERS,
    MAX_SEAT,
    MIN_SEAT,
    Passenger,
    ReservationRecord,
    TravelClass,
    is_single_line,
    to_money,
)

logger = logging.getLogger(__name__)

REFERENCE_PREFIX = "RB"
REFERENCE_ALPHABET = string.digits + string.ascii_uppercase
REFERENCE_LENGTH = 6
PACKAGE_SIZE = 4
PACKAGE_ADULTS = 2
PACKAGE_KIDS = 2


@dataclass
class PaymentResult:
    success: bool
    transaction_ref: str
    message: str = ""


def mock_payment_gateway(amount: Decimal, reference_number: str) -> PaymentResult:
    """Naive mock payment integration that always succeeds."""

    return PaymentResult(success=True, transaction_ref=f"TXN-{reference_number}-{int(amount * 100)}")


def confirm_payment(
    record: ReservationRecord,
    payment_fn: Callable[[Decimal, str], PaymentResult] = mock_payment_gateway,
) -> PaymentResult:
    result = payment_fn(record.total_price, record.reference_number)
    if not result.success:
        raise PaymentDeclinedError(result.message or "payment declined")
    logger.info("Payment %s confirmed for %s", result.transaction_ref, record.reference_number)
    return result


def generate_reference_number(rng: Optional[random.Random] = None) -> str:
    rng = rng or random
    suffix = "".join(rng.choice(REFERENCE_ALPHABET) for _ in range(REFERENCE_LENGTH))
    return REFERENCE_PREFIX + suffix


def new_reference_number(taken: Container[str] = (), rng: Optional[random.Random] = None) -> str:
    """Return a reference number not present in ``taken``."""

    while True:
        reference = generate_reference_number(rng)
        if reference not in taken:
            return reference
        logger.debug("Reference %s already in use, drawing again", reference)


# --- validation -----------------------------------------------------------


def validate_destination_id(destination_id: int) -> Destination:
    return PricingCatalog.destination_for(destination_id)


def validate_ticket_count(count: int) -> int:
    if isinstance(count, bool) or not isinstance(count, int) or not 1 <= count <= MAX_PASSENGERS:
        raise InvalidTicketCountError(f"tickets per reservation must be between 1 and {MAX_PASSENGERS}")
    return count


def validate_name(name: str) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise InvalidPassengerError("passenger name must not be empty")
    if not is_single_line(cleaned):
        raise InvalidPassengerError("passenger name must fit on one line")
    return cleaned


def validate_age(age: int) -> int:
    if isinstance(age, bool) or not isinstance(age, int) or age < 0:
        raise InvalidPassengerError("invalid age, enter a non-negative number")
    return age


def validate_seat(seat_number: int, taken: Container[int] = ()) -> int:
    if isinstance(seat_number, bool) or not isinstance(seat_number, int) or not MIN_SEAT <= seat_number <= MAX_SEAT:
        raise InvalidPassengerError(f"available seats for this flight are {MIN_SEAT}-{MAX_SEAT} only")
    if seat_number in taken:
        raise SeatTakenError(seat_number)
    return seat_number


def validate_departure_choice(letter: str) -> DepartureSlot:
    return DepartureSlot.from_letter(letter)


def validate_package_choice(choice: str) -> Package:
    return package_for(choice)


class SeatAllocator:
    """Pick free seats within a single reservation."""

    @staticmethod
    def next_available_seat(
        taken: Container[int],
        travel_class: Optional[TravelClass] = None,
        rng: Optional[random.Random] = None,
    ) -> int:
        seats: Sequence[int] = range(MIN_SEAT, MAX_SEAT + 1)
        if travel_class is not None:
            seats = [seat for seat in seats if TravelClass.for_seat(seat) is travel_class]
        free = [seat for seat in seats if seat not in taken]
        if not free:
            raise ValueError("no seats available")
        return rng.choice(free) if rng else free[0]


# --- builders -------------------------------------------------------------


class _ReservationBuilder:
    capacity: int = MAX_PASSENGERS

    def __init__(self, destination: Destination) -> None:
        self.destination = destination
        self.departure: Optional[DepartureSlot] = None
        self._passengers: List[Passenger] = []

    @property
    def passengers(self) -> List[Passenger]:
        return list(self._passengers)

    @property
    def taken_seats(self) -> List[int]:
        return [p.seat_number for p in self._passengers]

    @property
    def is_full(self) -> bool:
        return len(self._passengers) >= self.capacity

    def add_passenger(self, name: str, age: int, seat_number: int) -> Passenger:
        if self.is_full:
            raise ReservationInputError(f"this reservation already has {self.capacity} passengers")
        passenger = Passenger(
            name=validate_name(name),
            age=validate_age(age),
            seat_number=validate_seat(seat_number, self.taken_seats),
        )
        self._check_passenger(passenger)
        self._passengers.append(passenger)
        return passenger

    def _check_passenger(self, passenger: Passenger) -> None:
        pass

    def choose_departure(self, letter: str) -> DepartureSlot:
        self.departure = validate_departure_choice(letter)
        return self.departure

    @property
    def pre_discount_total(self) -> Decimal:
        raise NotImplementedError

    @property
    def discount(self) -> Decimal:
        raise NotImplementedError

    def build(
        self,
        reference_number: Optional[str] = None,
        *,
        taken: Container[str] = (),
        rng: Optional[random.Random] = None,
    ) -> ReservationRecord:
        if not self.is_full:
            raise IncompleteReservationError(
                f"{self.capacity - len(self._passengers)} passenger(s) still missing"
            )
        if self.departure is None:
            raise IncompleteReservationError("departure time has not been chosen")
        discount = self.discount
        record = ReservationRecord(
            reference_number=reference_number or new_reference_number(taken, rng),
            destination=self.destination,
            departure_time=self.departure,
            total_price=self.pre_discount_total - discount,
            discount_applied=discount,
            passengers=tuple(self._passengers),
        )
        logger.info(
            "Built reservation %s to %s for %d passenger(s), total %s",
            record.reference_number,
            record.destination.value,
            len(record.passengers),
            record.total_price,
        )
        return record


class ManualReservationBuilder(_ReservationBuilder):
    """Collects 1-4 individually priced passengers and an optional coupon."""

    def __init__(self, destination_id: int, ticket_count: int) -> None:
        super().__init__(validate_destination_id(destination_id))
        self.fare = PricingCatalog.fare_for(destination_id)
        self.capacity = validate_ticket_count(ticket_count)
        self.coupon_code: Optional[str] = None
        self._coupon_percent = Decimal("0")

    def price_for(self, passenger: Passenger) -> Decimal:
        price = self.fare.adult_base if passenger.is_adult else self.fare.kid_base
        if passenger.travel_class is TravelClass.BUSINESS:
            price += self.fare.business_surcharge
        return price

    @property
    def pre_discount_total(self) -> Decimal:
        return to_money(sum((self.price_for(p) for p in self._passengers), Decimal("0")))

    @property
    def discount(self) -> Decimal:
        return to_money(self.pre_discount_total * self._coupon_percent)

    def apply_coupon(self, code: str) -> Decimal:
        """Apply ``code`` once and return the discount it grants."""

        if self.coupon_code is not None:
            raise CouponAlreadyAppliedError("a coupon has already been applied to this reservation")
        if not self.is_full:
            raise IncompleteReservationError("enter every passenger before applying a coupon")
        percent = CouponTable.lookup(code)
        if percent is None:
            raise UnknownCouponError(code)
        self.coupon_code = code
        self._coupon_percent = percent
        return self.discount


class PackageReservationBuilder(_ReservationBuilder):
    """Collects the fixed 2 adults + 2 kids of a package."""

    capacity = PACKAGE_SIZE

    def __init__(self, package_choice: str) -> None:
        self.package = validate_package_choice(package_choice)
        super().__init__(self.package.destination)

    @property
    def adult_count(self) -> int:
        return sum(1 for p in self._passengers if p.is_adult)

    @property
    def kid_count(self) -> int:
        return len(self._passengers) - self.adult_count

    def _check_passenger(self, passenger: Passenger) -> None:
        adults = self.adult_count + (1 if passenger.is_adult else 0)
        kids = self.kid_count + (0 if passenger.is_adult else 1)
        if adults > PACKAGE_ADULTS or kids > PACKAGE_KIDS:
            raise PackageMixError(
                f"this package is for {PACKAGE_ADULTS} adults and {PACKAGE_KIDS} kids only "
                f"(current adults: {self.adult_count}, kids: {self.kid_count})"
            )

    @property
    def pre_discount_total(self) -> Decimal:
        return to_money(self.package.pre_discount_price)

    @property
    def discount(self) -> Decimal:
        return self.package.discount_amount

