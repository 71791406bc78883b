"""Read-only totals over stored reservations."""
from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Iterable, List

from .models import ReservationRecord, to_money


@dataclass(frozen=True)
class ReservationReport:
    total_reservations: int = 0
    total_tickets: int = 0
    total_adults: int = 0
    total_kids: int = 0
    total_revenue: Decimal = Decimal("0.00")
    total_discount: Decimal = Decimal("0.00")
    reservations_by_destination: Dict[str, int] = field(default_factory=dict)

    @property
    def gross_before_discount(self) -> Decimal:
        return self.total_revenue + self.total_discount

    def as_rows(self) -> List[List[str]]:
        return [
            ["Total tickets sold", str(self.total_tickets)],
            ["Total adults", str(self.total_adults)],
            ["Total kids", str(self.total_kids)],
            ["Total discount allowed", f"RM{self.total_discount:.2f}"],
            ["Total income", f"RM{self.total_revenue:.2f}"],
            ["Gross before discount", f"RM{self.gross_before_discount:.2f}"],
        ]


def build_report(records: Iterable[ReservationRecord]) -> ReservationReport:
    reservations = tickets = adults = kids = 0
    revenue = Decimal("0")
    discount = Decimal("0")
    by_destination: Counter[str] = Counter()
    for record in records:
        reservations += 1
        tickets += len(record.passengers)
        adults += record.num_adults
        kids += record.num_kids
        revenue += record.total_price
        discount += record.discount_applied
        by_destination[record.destination.value] += 1
    return ReservationReport(
        total_reservations=reservations,
        total_tickets=tickets,
        total_adults=adults,
        total_kids=kids,
        total_revenue=to_money(revenue),
        total_discount=to_money(discount),
        reservations_by_destination=dict(sorted(by_destination.items())),
    )
