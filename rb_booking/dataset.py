"""Utilities to populate a store with sample reservations for tests and demos."""
from __future__ import annotations

import random
from typing import Dict, Optional

from .catalog import PACKAGES, DepartureSlot, PricingCatalog
from .errors import ReservationInputError
from .models import ADULT_AGE, MAX_PASSENGERS, TravelClass
from .services import ManualReservationBuilder, PackageReservationBuilder, SeatAllocator
from .store import ReservationStore

FIRST_NAMES = ("Afiq", "Faris", "Amir", "Ameen", "Aisyah", "Nurul", "Hana", "Daniel")
LAST_NAMES = ("Mustapha", "Ismail", "Tarmidzi", "Hassan", "Rahman", "Lim")


def _random_name(rng: random.Random) -> str:
    return f"{rng.choice(FIRST_NAMES)} {rng.choice(LAST_NAMES)}"


def _random_age(rng: random.Random, adult: bool) -> int:
    return rng.randint(ADULT_AGE, 70) if adult else rng.randint(1, ADULT_AGE - 1)


def _fill(builder, rng: random.Random, ages, business_share: float = 0.2) -> None:
    for age in ages:
        travel_class = TravelClass.BUSINESS if rng.random() < business_share else TravelClass.ECONOMY
        seat = SeatAllocator.next_available_seat(builder.taken_seats, travel_class, rng=rng)
        builder.add_passenger(_random_name(rng), age, seat)
    builder.choose_departure(rng.choice(list(DepartureSlot)).letter)


def generate_sample_data(
    store: ReservationStore,
    *,
    reservations: int = 50,
    package_share: float = 0.2,
    seed: Optional[int] = 42,
) -> Dict[str, int]:
    """Append deterministic pseudo-random reservations to ``store``."""

    rng = random.Random(seed)
    coupons = ("AEROAMEEN", "CAPTAINAFIQ", "COPILOTAMIR", "STEWARDFARIS", "BOGUS")
    counts = {"manual": 0, "package": 0, "coupons": 0}
    for _ in range(reservations):
        if rng.random() < package_share:
            builder = PackageReservationBuilder(rng.choice(sorted(PACKAGES)))
            ages = [_random_age(rng, adult) for adult in (True, True, False, False)]
            rng.shuffle(ages)
            _fill(builder, rng, ages)
            counts["package"] += 1
        else:
            destination_id = rng.choice(PricingCatalog.destinations())[0]
            count = rng.randint(1, MAX_PASSENGERS)
            builder = ManualReservationBuilder(destination_id, count)
            _fill(builder, rng, [_random_age(rng, rng.random() < 0.7) for _ in range(count)])
            if rng.random() < 0.3:
                try:
                    builder.apply_coupon(rng.choice(coupons))
                    counts["coupons"] += 1
                except ReservationInputError:
                    pass
            counts["manual"] += 1
        store.add(builder.build(taken=store, rng=rng))
    return counts
