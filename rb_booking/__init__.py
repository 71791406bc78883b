"""RAUB AIRLINE reservation core."""
from .catalog import CouponTable, DepartureSlot, Destination, PricingCatalog
from .models import Passenger, ReservationRecord, TravelClass
from .report import ReservationReport, build_report
from .searching import binary_search, linear_search
from .services import ManualReservationBuilder, PackageReservationBuilder
from .sorting import bubble_sort_by_price, merge_sort_by_price, sort_by_reference
from .store import ReservationStore, decode, encode, open_store

__all__ = [
    "CouponTable",
    "DepartureSlot",
    "Destination",
    "PricingCatalog",
    "Passenger",
    "ReservationRecord",
    "TravelClass",
    "ReservationReport",
    "build_report",
    "binary_search",
    "linear_search",
    "ManualReservationBuilder",
    "PackageReservationBuilder",
    "bubble_sort_by_price",
    "merge_sort_by_price",
    "sort_by_reference",
    "ReservationStore",
    "decode",
    "encode",
    "open_store",
]
