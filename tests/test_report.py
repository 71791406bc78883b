from decimal import Decimal

from rb_booking.dataset import generate_sample_data
from rb_booking.report import build_report
from rb_booking.services import ManualReservationBuilder, PackageReservationBuilder
from rb_booking.store import ReservationStore


def test_empty_store_reports_zeros():
    report = build_report(ReservationStore().all())
    assert report.total_reservations == 0
    assert report.total_tickets == 0
    assert report.total_adults == 0
    assert report.total_kids == 0
    assert report.total_revenue == Decimal("0")
    assert report.total_discount == Decimal("0")
    assert report.gross_before_discount == Decimal("0")
    assert report.reservations_by_destination == {}


def test_report_totals_for_known_reservations():
    store = ReservationStore()

    manual = ManualReservationBuilder(1, 2)
    manual.add_passenger("Ali", 30, 20)
    manual.add_passenger("Siti", 8, 21)
    manual.choose_departure("A")
    manual.apply_coupon("AEROAMEEN")
    store.add(manual.build())

    package = PackageReservationBuilder("C")
    for name, age, seat in (("Dad", 40, 1), ("Mum", 38, 2), ("Kid1", 10, 30), ("Kid2", 6, 31)):
        package.add_passenger(name, age, seat)
    package.choose_departure("D")
    store.add(package.build())

    report = build_report(store.all())
    assert report.total_reservations == 2
    assert report.total_tickets == 6
    assert report.total_adults == 3
    assert report.total_kids == 3
    # (1000 + 500) * 0.85 + 2340
    assert report.total_revenue == Decimal("3615.00")
    assert report.total_discount == Decimal("1485.00")
    assert report.gross_before_discount == Decimal("5100.00")
    assert list(report.reservations_by_destination.items()) == [("JAKARTA", 1), ("MAKKAH", 1)]


def test_report_matches_sum_over_sample_data():
    store = ReservationStore()
    generate_sample_data(store, reservations=40, seed=9)
    records = store.all()
    report = build_report(records)
    assert report.total_revenue == sum((r.total_price for r in records), Decimal("0"))
    assert report.total_revenue + report.total_discount == report.gross_before_discount
    assert report.total_adults + report.total_kids == report.total_tickets
    assert sum(report.reservations_by_destination.values()) == len(records)
    assert list(report.reservations_by_destination) == sorted(report.reservations_by_destination)
