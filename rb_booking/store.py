"""Reservation storage and its line-oriented file format."""
from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from .catalog import DepartureSlot, Destination
from .errors import DuplicateReferenceError, MalformedRecordError, ReservationError
from .models import Passenger, ReservationRecord, TravelClass

logger = logging.getLogger(__name__)

DEFAULT_PATH = Path(os.environ.get("RB_BOOKING_FILE", "./reservations.txt"))

END_MARKER = "END_RESERVATION"
_FIELDS = ("REF", "DEST", "TIME", "PRICE", "DISCOUNT", "NUM_ADULTS", "NUM_KIDS", "NUM_PASSENGERS")


def _encode_record(record: ReservationRecord) -> List[str]:
    lines = [
        f"REF:{record.reference_number}",
        f"DEST:{record.destination.value}",
        f"TIME:{record.departure_time.value}",
        f"PRICE:{record.total_price:.2f}",
        f"DISCOUNT:{record.discount_applied:.2f}",
        f"NUM_ADULTS:{record.num_adults}",
        f"NUM_KIDS:{record.num_kids}",
        f"NUM_PASSENGERS:{len(record.passengers)}",
    ]
    for p in record.passengers:
        lines.append(f"PASSENGER:{p.name},{p.age},{p.seat_number},{p.travel_class.label}")
    lines.append(END_MARKER)
    return lines


def encode(records: Iterable[ReservationRecord]) -> str:
    """Serialize ``records`` to the persisted text format."""

    lines: List[str] = []
    for record in records:
        lines.extend(_encode_record(record))
    return "".join(f"{line}\n" for line in lines)


def _parse_int(field: str, value: str) -> int:
    try:
        return int(value)
    except ValueError:
        raise MalformedRecordError(f"{field} is not a number: {value!r}") from None


def _parse_money(field: str, value: str) -> Decimal:
    try:
        amount = Decimal(value)
    except InvalidOperation:
        amount = None
    if amount is None or not amount.is_finite():
        raise MalformedRecordError(f"{field} is not an amount: {value!r}")
    return amount


def _parse_passenger(value: str) -> Passenger:
    # Names may contain commas, the three trailing fields never do.
    parts = value.rsplit(",", 3)
    if len(parts) != 4:
        raise MalformedRecordError(f"passenger line has too few fields: {value!r}")
    name, age, seat, travel_class = parts
    try:
        passenger = Passenger(name=name, age=_parse_int("age", age), seat_number=_parse_int("seat", seat))
        stored_class = TravelClass.from_label(travel_class)
    except ValueError as exc:
        raise MalformedRecordError(str(exc)) from exc
    if stored_class is not passenger.travel_class:
        raise MalformedRecordError(f"seat {passenger.seat_number} is not {stored_class.label}")
    return passenger


def _build_record(fields: Dict[str, str], passengers: List[Passenger]) -> ReservationRecord:
    missing = [name for name in _FIELDS[:5] if name not in fields]
    if missing:
        raise MalformedRecordError(f"missing field(s): {', '.join(missing)}")
    try:
        record = ReservationRecord(
            reference_number=fields["REF"],
            destination=Destination.from_label(fields["DEST"]),
            departure_time=DepartureSlot.from_label(fields["TIME"]),
            total_price=_parse_money("PRICE", fields["PRICE"]),
            discount_applied=_parse_money("DISCOUNT", fields["DISCOUNT"]),
            passengers=tuple(passengers),
        )
    except MalformedRecordError:
        raise
    except ReservationError as exc:
        raise MalformedRecordError(str(exc)) from exc
    expected = (
        ("NUM_ADULTS", record.num_adults),
        ("NUM_KIDS", record.num_kids),
        ("NUM_PASSENGERS", len(record.passengers)),
    )
    for name, actual in expected:
        if name in fields and _parse_int(name, fields[name]) != actual:
            raise MalformedRecordError(f"{name} does not match the passenger list")
    return record


def _blocks(text: str) -> Iterator[Tuple[int, Optional[List[str]]]]:
    """Yield ``(start line, lines)`` per reservation; ``lines`` is ``None`` for unusable text."""

    block: Optional[List[str]] = None
    start = 0
    for number, line in enumerate(text.splitlines(), start=1):
        if line.startswith("REF:"):
            if block is not None:
                yield start, None
            block, start = [line], number
        elif block is None:
            if line.strip():
                yield number, None
        elif line == END_MARKER:
            yield start, block
            block = None
        else:
            block.append(line)
    if block is not None:
        yield start, None


def _decode(text: str) -> Tuple[List[ReservationRecord], int]:
    records: List[ReservationRecord] = []
    skipped = 0
    for start, block in _blocks(text):
        fields: Dict[str, str] = {}
        passengers: List[Passenger] = []
        try:
            if block is None:
                raise MalformedRecordError(f"text outside a complete {END_MARKER} block")
            for line in block:
                key, sep, value = line.partition(":")
                if not sep:
                    raise MalformedRecordError(f"unrecognised line {line!r}")
                if key == "PASSENGER":
                    passengers.append(_parse_passenger(value))
                elif key in _FIELDS:
                    fields[key] = value
                else:
                    raise MalformedRecordError(f"unknown field {key!r}")
            records.append(_build_record(fields, passengers))
        except MalformedRecordError as exc:
            skipped += 1
            logger.warning("Skipping reservation starting on line %d: %s", start, exc)
    return records, skipped


def decode(text: str) -> List[ReservationRecord]:
    """Parse persisted text back into records.

    A malformed reservation block is skipped with a warning; the remaining
    blocks still load.
    """

    return _decode(text)[0]


def _backup_path(target: Path) -> Path:
    candidate = target.with_name(target.name + ".bak")
    counter = 1
    while candidate.exists():
        candidate = target.with_name(f"{target.name}.bak{counter}")
        counter += 1
    return candidate


class ReservationStore:
    """Append-only, insertion-ordered collection of reservations.

    A store loaded from a file it could not fully read is marked lossy; the
    first save moves that file aside to a ``.bak`` copy before writing.
    """

    def __init__(self, records: Iterable[ReservationRecord] = (), *, path: Optional[Path] = None) -> None:
        self.path = Path(path) if path is not None else DEFAULT_PATH
        self.lossy = False
        self._records: List[ReservationRecord] = []
        self._references: set[str] = set()
        for record in records:
            self.add(record)

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "ReservationStore":
        """Load the store from ``path``; a missing or unreadable file yields an empty store."""

        target = Path(path) if path is not None else DEFAULT_PATH
        store = cls(path=target)
        if not target.exists():
            logger.info("No reservation file at %s, starting empty", target)
            return store
        try:
            text = target.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Could not read %s (%s), starting empty", target, exc)
            store.lossy = True
            return store
        records, skipped = _decode(text)
        store.lossy = skipped > 0
        for record in records:
            try:
                store.add(record)
            except DuplicateReferenceError:
                logger.warning("Skipping duplicate reservation %s in %s", record.reference_number, target)
                store.lossy = True
        logger.info("Loaded %d reservation(s) from %s", len(store), target)
        return store

    def add(self, record: ReservationRecord) -> None:
        if record.reference_number in self._references:
            raise DuplicateReferenceError(f"reservation {record.reference_number} already exists")
        self._records.append(record)
        self._references.add(record.reference_number)

    def all(self) -> Tuple[ReservationRecord, ...]:
        return tuple(self._records)

    def references(self) -> frozenset[str]:
        return frozenset(self._references)

    def encode(self) -> str:
        return encode(self._records)

    def save(self, path: Optional[Path] = None) -> bool:
        """Write every reservation to ``path``; returns ``False`` when the file cannot be written."""

        target = Path(path) if path is not None else self.path
        try:
            if self.lossy and target == self.path and target.exists():
                backup = _backup_path(target)
                os.replace(target, backup)
                logger.warning("Kept unreadable reservations from %s in %s", target, backup)
            target.write_text(self.encode(), encoding="utf-8")
        except OSError as exc:
            logger.error("Could not write reservations to %s: %s", target, exc)
            return False
        if target == self.path:
            self.lossy = False
        logger.info("Saved %d reservation(s) to %s", len(self), target)
        return True

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[ReservationRecord]:
        return iter(tuple(self._records))

    def __contains__(self, reference_number: object) -> bool:
        return reference_number in self._references


@contextmanager
def open_store(path: Optional[Path] = None) -> Iterator[ReservationStore]:
    """Load the store on entry and persist it on exit."""

    store = ReservationStore.load(path)
    try:
        yield store
    finally:
        store.save()
