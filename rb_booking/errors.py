"""Exception types raised by the reservation core."""
from __future__ import annotations


class ReservationError(Exception):
    """Base class for every error raised by :mod:`rb_booking`."""


class ReservationInputError(ReservationError, ValueError):
    """Raised when collaborator input is rejected.

    These are recoverable: the builder that raised is left unchanged and the
    caller may ask for the value again.
    """


class InvalidDestinationError(ReservationInputError):
    pass


class InvalidTicketCountError(ReservationInputError):
    pass


class InvalidPassengerError(ReservationInputError):
    pass


class SeatTakenError(ReservationInputError):
    def __init__(self, seat_number: int):
        super().__init__(f"seat {seat_number} has been taken")
        self.seat_number = seat_number


class InvalidDepartureError(ReservationInputError):
    pass


class InvalidPackageError(ReservationInputError):
    pass


class UnknownCouponError(ReservationInputError):
    def __init__(self, code: str):
        super().__init__(f"invalid coupon '{code}'")
        self.code = code


class CouponAlreadyAppliedError(ReservationInputError):
    pass


class PackageMixError(ReservationInputError):
    """Raised when a passenger would break the 2 adults + 2 kids package rule."""


class IncompleteReservationError(ReservationError):
    pass


class InvalidRecordError(ReservationError, ValueError):
    """Raised when a reservation record violates one of its invariants."""


class DuplicateReferenceError(ReservationError):
    pass


class MalformedRecordError(ReservationError, ValueError):
    """Raised when a persisted reservation block cannot be decoded."""


class PaymentDeclinedError(ReservationError, RuntimeError):
    """Raised when the mock payment gateway declines a charge."""
