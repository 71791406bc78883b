"""Command line front end for the reservation system."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Iterable, Optional, Sequence, Tuple

from tabulate import tabulate

from . import sorting
from .catalog import AIRLINE_NAME, FLIGHT_NUMBER, ORIGIN, PACKAGES, CouponTable, PricingCatalog
from .dataset import generate_sample_data
from .errors import ReservationError
from .models import ReservationRecord
from .report import build_report
from .searching import binary_search, linear_search, timed
from .services import ManualReservationBuilder, PackageReservationBuilder, confirm_payment
from .store import ReservationStore, open_store

RULE = "_" * 90


def _passenger_arg(value: str) -> Tuple[str, int, int]:
    parts = value.rsplit(":", 2)
    if len(parts) != 3:
        raise argparse.ArgumentTypeError("passenger must look like NAME:AGE:SEAT")
    name, age, seat = parts
    try:
        return name, int(age), int(seat)
    except ValueError:
        raise argparse.ArgumentTypeError("passenger AGE and SEAT must be whole numbers") from None


def render_boarding_pass(record: ReservationRecord) -> str:
    lines = [
        RULE,
        f"  {AIRLINE_NAME}    e-Boarding Pass    [Reference Number : {record.reference_number}]",
        RULE,
        "  PASSENGER & FLIGHT DETAILS",
    ]
    for p in record.passengers:
        lines.extend(
            [
                "",
                f"  {p.name}",
                f"  Age {p.age}    Flight {FLIGHT_NUMBER}    {p.travel_class.label}",
                f"  Seat {p.seat_number}",
                f"  {ORIGIN} to {record.destination.value}    {record.departure_time.value}",
            ]
        )
    lines.extend(["", f"  TOTAL AMOUNT : RM{record.total_price:.2f}", RULE])
    return "\n".join(lines)


def _render_records(records: Iterable[ReservationRecord]) -> str:
    rows = [
        [
            record.reference_number,
            record.destination.value,
            record.departure_time.value,
            len(record.passengers),
            f"{record.total_price:.2f}",
            f"{record.discount_applied:.2f}",
        ]
        for record in records
    ]
    headers = ["Reference", "Destination", "Departure", "Passengers", "Price (RM)", "Discount (RM)"]
    return tabulate(rows, headers=headers, tablefmt="github")


def _print_booking(record: ReservationRecord) -> None:
    payment = confirm_payment(record)
    print(f"Payment successful ({payment.transaction_ref})")
    print(render_boarding_pass(record))


def _cmd_book(args: argparse.Namespace) -> int:
    builder = ManualReservationBuilder(args.destination, len(args.passenger))
    for name, age, seat in args.passenger:
        builder.add_passenger(name, age, seat)
    builder.choose_departure(args.departure)
    if args.coupon:
        discount = builder.apply_coupon(args.coupon)
        print(f"Coupon {args.coupon} applied, discount RM{discount:.2f}")
    with open_store(args.file) as store:
        record = builder.build(taken=store)
        store.add(record)
    _print_booking(record)
    return 0


def _cmd_package(args: argparse.Namespace) -> int:
    builder = PackageReservationBuilder(args.package)
    for name, age, seat in args.passenger:
        builder.add_passenger(name, age, seat)
    builder.choose_departure(args.departure)
    with open_store(args.file) as store:
        record = builder.build(taken=store)
        store.add(record)
    _print_booking(record)
    return 0


def _cmd_list(args: argparse.Namespace) -> int:
    store = ReservationStore.load(args.file)
    if not len(store):
        print("No reservations to display.")
        return 0
    print(_render_records(store.all()))
    return 0


def _cmd_show(args: argparse.Namespace) -> int:
    records = ReservationStore.load(args.file).all()
    index = linear_search(records, args.reference)
    if index is None:
        print(f"Reservation with Reference Number '{args.reference}' not found.")
        return 1
    print(render_boarding_pass(records[index]))
    return 0


def _cmd_report(args: argparse.Namespace) -> int:
    report = build_report(ReservationStore.load(args.file).all())
    print(f"{AIRLINE_NAME} REPORT")
    print(tabulate(report.as_rows(), tablefmt="github"))
    print("\nTotal reservations by destination:")
    if not report.reservations_by_destination:
        print("- No tickets sold yet to any destination.")
    for destination, count in report.reservations_by_destination.items():
        print(f"- {destination} : {count} reservations")
    return 0


def _cmd_sort(args: argparse.Namespace) -> int:
    records = ReservationStore.load(args.file).all()
    if not records:
        print("No reservations to sort.")
        return 0
    algorithm = sorting.bubble_sort_by_price if args.algorithm == "bubble" else sorting.merge_sort_by_price
    ordered, elapsed = timed(algorithm, records)
    print(f"{args.algorithm.capitalize()} sort completed in: {elapsed:.6f} seconds.")
    print(_render_records(ordered))
    return 0


def _cmd_search(args: argparse.Namespace) -> int:
    records: Sequence[ReservationRecord] = ReservationStore.load(args.file).all()
    if not records:
        print("No reservations to search.")
        return 1
    if args.method == "binary":
        records = sorting.sort_by_reference(records)
        index, elapsed = timed(binary_search, records, args.reference)
    else:
        index, elapsed = timed(linear_search, records, args.reference)
    print(f"{args.method.capitalize()} search completed in: {elapsed:.6f} seconds.")
    if index is None:
        print(f"Reservation with Reference Number '{args.reference}' not found.")
        return 1
    print(render_boarding_pass(records[index]))
    return 0


def _cmd_destinations(args: argparse.Namespace) -> int:
    rows = [
        [key, dest.value, f"{fare.adult_base}", f"{fare.kid_base}", f"{fare.business_surcharge}"]
        for key, dest, fare in PricingCatalog.destinations()
    ]
    print(f"You will depart at {ORIGIN}")
    print(tabulate(rows, headers=["#", "Destination", "Adult (RM)", "Kid (RM)", "Business add (RM)"], tablefmt="github"))
    return 0


def _cmd_packages(args: argparse.Namespace) -> int:
    rows = []
    for code, package in sorted(PACKAGES.items()):
        rows.append(
            [
                code,
                f"{ORIGIN} to {package.destination.value}",
                f"{package.discount_percent:.0%}",
                f"{package.pre_discount_price:.2f}",
                f"{package.discounted_price:.2f}",
            ]
        )
    print("All packages are for 2 adults and 2 kids.")
    print(tabulate(rows, headers=["Package", "Route", "Discount", "Original (RM)", "After discount (RM)"], tablefmt="github"))
    return 0


def _cmd_coupons(args: argparse.Namespace) -> int:
    rows = [[code, f"{percent:.0%} OFF"] for code, percent in CouponTable.codes()]
    print("Apply one of these coupons in manual reservations only.")
    print(tabulate(rows, headers=["Coupon", "Discount"], tablefmt="github"))
    return 0


def _cmd_seed(args: argparse.Namespace) -> int:
    with open_store(args.file) as store:
        counts = generate_sample_data(store, reservations=args.count, seed=args.seed)
    print(f"Added {counts['manual']} manual and {counts['package']} package reservation(s).")
    return 0


def parse_args(argv: Iterable[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=f"{AIRLINE_NAME} reservation system.")
    parser.add_argument(
        "--file",
        type=Path,
        default=None,
        help="Reservation file to use (default: $RB_BOOKING_FILE or ./reservations.txt).",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    commands = parser.add_subparsers(dest="command", required=True)

    book = commands.add_parser("book", help="Create a manual reservation for 1-4 passengers.")
    book.add_argument("--destination", type=int, required=True, help="Destination number (1-7).")
    book.add_argument("--departure", required=True, help="Departure time A, B, C or D.")
    book.add_argument(
        "--passenger",
        type=_passenger_arg,
        action="append",
        required=True,
        help="Passenger as NAME:AGE:SEAT; repeat once per passenger.",
    )
    book.add_argument("--coupon", help="Coupon code to apply once.")
    book.set_defaults(handler=_cmd_book)

    package = commands.add_parser("package", help="Book a 2 adults + 2 kids package.")
    package.add_argument("package", type=str.upper, choices=sorted(PACKAGES), help="Package letter.")
    package.add_argument("--departure", required=True, help="Departure time A, B, C or D.")
    package.add_argument("--passenger", type=_passenger_arg, action="append", required=True, help="NAME:AGE:SEAT (x4).")
    package.set_defaults(handler=_cmd_package)

    commands.add_parser("list", help="List every reservation.").set_defaults(handler=_cmd_list)
    show = commands.add_parser("show", help="Print the boarding pass for a reservation.")
    show.add_argument("reference")
    show.set_defaults(handler=_cmd_show)
    commands.add_parser("report", help="Show totals over all reservations.").set_defaults(handler=_cmd_report)

    sort = commands.add_parser("sort", help="Sort reservations by total price.")
    sort.add_argument("algorithm", choices=["bubble", "merge"])
    sort.set_defaults(handler=_cmd_sort)

    search = commands.add_parser("search", help="Find a reservation by reference number.")
    search.add_argument("method", choices=["linear", "binary"])
    search.add_argument("reference")
    search.set_defaults(handler=_cmd_search)

    commands.add_parser("destinations", help="List destinations and fares.").set_defaults(handler=_cmd_destinations)
    commands.add_parser("packages", help="List holiday packages.").set_defaults(handler=_cmd_packages)
    commands.add_parser("coupons", help="List coupon codes.").set_defaults(handler=_cmd_coupons)

    seed = commands.add_parser("seed", help="Append sample reservations.")
    seed.add_argument("--count", type=int, default=50)
    seed.add_argument("--seed", type=int, default=None, help="Random seed for repeatable data.")
    seed.set_defaults(handler=_cmd_seed)

    return parser.parse_args(list(argv))


def main(argv: Optional[Iterable[str]] = None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        return args.handler(args)
    except ReservationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
