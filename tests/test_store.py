from __future__ import annotations

import importlib
from decimal import Decimal

import pytest

from rb_booking.catalog import DepartureSlot, Destination
from rb_booking.dataset import generate_sample_data
from rb_booking.errors import DuplicateReferenceError, InvalidRecordError
from rb_booking.models import Passenger, ReservationRecord, TravelClass
from rb_booking.store import ReservationStore, decode, encode, open_store


def make_record(reference: str = "RB000001", price: str = "850.00", discount: str = "150.00", passengers=None):
    return ReservationRecord(
        reference_number=reference,
        destination=Destination.JAKARTA,
        departure_time=DepartureSlot.EVENING,
        total_price=Decimal(price),
        discount_applied=Decimal(discount),
        passengers=passengers or (Passenger("Ali", 30, 20),),
    )


SAMPLE = """REF:RB000001
DEST:JAKARTA
TIME:5.00PM
PRICE:850.00
DISCOUNT:150.00
NUM_ADULTS:1
NUM_KIDS:0
NUM_PASSENGERS:1
PASSENGER:Ali,30,20,Economy Class
END_RESERVATION
"""


def test_encode_matches_line_format():
    assert encode([make_record()]) == SAMPLE


def test_round_trip_preserves_records_and_order():
    records = [
        make_record("RB000003", "4000.00", "0.00", (Passenger("Dad", 40, 1), Passenger("Kid", 9, 2))),
        make_record("RB000001"),
        make_record(
            "RB000002",
            "2340.00",
            "1260.00",
            (
                Passenger("Lim, Wei Ming", 41, 15),
                Passenger("Tan", 39, 16),
                Passenger("Kid, Jr.", 3, 17),
                Passenger("Baby", 0, 81),
            ),
        ),
    ]
    assert decode(encode(records)) == records


def test_decode_accepts_bare_class_names():
    text = SAMPLE.replace("Economy Class", "Economy")
    assert decode(text) == [make_record()]


def test_decode_skips_malformed_records_and_keeps_the_rest(caplog):
    bad_price = SAMPLE.replace("RB000001", "RB000009").replace("PRICE:850.00", "PRICE:abc")
    wrong_class = SAMPLE.replace("RB000001", "RB000008").replace("Economy Class", "Business Class")
    wrong_count = SAMPLE.replace("RB000001", "RB000007").replace("NUM_KIDS:0", "NUM_KIDS:3")
    unterminated = SAMPLE.replace("RB000001", "RB000006").replace("END_RESERVATION\n", "")
    text = bad_price + wrong_class + wrong_count + unterminated + SAMPLE
    with caplog.at_level("WARNING"):
        records = decode(text)
    assert [r.reference_number for r in records] == ["RB000001"]
    assert "Skipping reservation" in caplog.text


def test_decode_empty_text():
    assert decode("") == []


def test_store_is_append_only_and_rejects_duplicate_references():
    store = ReservationStore()
    store.add(make_record("RB000002", "200.00", "0.00"))
    store.add(make_record("RB000001", "100.00", "0.00"))
    assert [r.reference_number for r in store.all()] == ["RB000002", "RB000001"]
    assert "RB000001" in store
    assert len(store) == 2
    with pytest.raises(DuplicateReferenceError):
        store.add(make_record("RB000001"))
    assert len(store) == 2


def test_missing_file_loads_empty(tmp_path):
    store = ReservationStore.load(tmp_path / "absent.txt")
    assert len(store) == 0
    assert store.all() == ()


def test_unreadable_file_loads_empty(tmp_path):
    path = tmp_path / "garbage.txt"
    path.write_bytes(b"\xff\xfe\xfa")
    assert len(ReservationStore.load(path)) == 0


def test_clean_load_then_save_leaves_no_backup(tmp_path):
    path = tmp_path / "reservations.txt"
    path.write_text(SAMPLE, encoding="utf-8")
    with open_store(path) as store:
        assert store.lossy is False
    assert path.read_text(encoding="utf-8") == SAMPLE
    assert list(tmp_path.iterdir()) == [path]


def test_undecodable_file_survives_open_store(tmp_path, caplog):
    path = tmp_path / "reservations.txt"
    original = SAMPLE.encode("utf-8") + b"REF:RB000002\nDEST:JAKARTA\xff\n"
    path.write_bytes(original)
    with caplog.at_level("WARNING"):
        with open_store(path) as store:
            assert len(store) == 0
            assert store.lossy is True
    assert path.with_name("reservations.txt.bak").read_bytes() == original
    assert path.read_text(encoding="utf-8") == ""
    assert "Kept unreadable reservations" in caplog.text


def test_malformed_block_survives_open_store(tmp_path):
    path = tmp_path / "reservations.txt"
    broken = SAMPLE.replace("RB000001", "RB000009").replace("PRICE:850.00", "PRICE:85O.00")
    path.write_text(SAMPLE + broken, encoding="utf-8")
    with open_store(path) as store:
        assert [r.reference_number for r in store] == ["RB000001"]
        store.add(make_record("RB000002"))
    backup = path.with_name("reservations.txt.bak")
    assert "RB000009" in backup.read_text(encoding="utf-8")
    assert "PRICE:85O.00" in backup.read_text(encoding="utf-8")
    assert [r.reference_number for r in ReservationStore.load(path)] == ["RB000001", "RB000002"]


def test_existing_backup_is_not_overwritten(tmp_path):
    path = tmp_path / "reservations.txt"
    earlier = path.with_name("reservations.txt.bak")
    earlier.write_text("older backup\n", encoding="utf-8")
    path.write_text("not a reservation\n", encoding="utf-8")
    with open_store(path):
        pass
    assert earlier.read_text(encoding="utf-8") == "older backup\n"
    assert path.with_name("reservations.txt.bak1").read_text(encoding="utf-8") == "not a reservation\n"


@pytest.mark.parametrize(
    "name",
    ["Lim, Wei Ming", "Zoë Ng", "李小龙", "Ali\tbin Abu", "Ali\u00a0bin Abu", "O'Neil, Jr., 3rd"],
)
def test_passenger_names_round_trip(name):
    record = make_record(passengers=(Passenger(name, 30, 20),))
    assert decode(encode([record])) == [record]


@pytest.mark.parametrize("separator", ["\u2028", "\u2029", "\x85", "\x0b", "\x0c", "\x1c", "\x1d", "\x1e", "\r"])
def test_names_with_line_breaks_cannot_reach_the_file(separator):
    with pytest.raises(InvalidRecordError):
        Passenger(f"Ali{separator}bin Abu", 30, 20)


def test_save_and_load(tmp_path):
    path = tmp_path / "reservations.txt"
    store = ReservationStore(path=path)
    store.add(make_record())
    assert store.save() is True
    assert path.read_text(encoding="utf-8") == SAMPLE
    assert ReservationStore.load(path).all() == store.all()


def test_save_failure_is_reported_not_raised(tmp_path, caplog):
    store = ReservationStore([make_record()], path=tmp_path / "missing-dir" / "reservations.txt")
    with caplog.at_level("ERROR"):
        assert store.save() is False
    assert "Could not write" in caplog.text


def test_open_store_persists_on_exit(tmp_path):
    path = tmp_path / "reservations.txt"
    with open_store(path) as store:
        store.add(make_record())
    with open_store(path) as store:
        assert [r.reference_number for r in store] == ["RB000001"]


def test_default_path_comes_from_environment(tmp_path, monkeypatch):
    target = tmp_path / "env.txt"
    monkeypatch.setenv("RB_BOOKING_FILE", str(target))

    module = importlib.import_module("rb_booking.store")
    module = importlib.reload(module)

    store = module.ReservationStore.load()
    assert store.path == target
    assert store.save() is True
    assert target.exists()

    monkeypatch.delenv("RB_BOOKING_FILE")
    importlib.reload(module)


def test_dataset_generator_round_trips(tmp_path):
    store = ReservationStore(path=tmp_path / "sample.txt")
    counts = generate_sample_data(store, reservations=30, seed=5)
    assert counts["manual"] + counts["package"] == 30
    assert len(store) == 30
    for record in store:
        assert record.num_adults + record.num_kids == len(record.passengers)
        assert record.total_price >= 0 and record.discount_applied >= 0
    store.save()
    assert ReservationStore.load(store.path).all() == store.all()

    again = ReservationStore()
    generate_sample_data(again, reservations=30, seed=5)
    assert again.all() == store.all()


def test_dataset_generator_fills_both_cabins():
    store = ReservationStore()
    generate_sample_data(store, reservations=60, seed=11)
    cabins = {p.travel_class for record in store for p in record.passengers}
    assert cabins == {TravelClass.BUSINESS, TravelClass.ECONOMY}
