"""Seat selection over a fetched hall plan.

Pure and synchronous. The purchase total is the number of selected seats
times a flat unit price; seat category prices are shown in the legend but
are not applied to the total.
"""

from collections import defaultdict

from cinema.conf import cinema_setting
from cinema.domain import HallPlan, Money, Seat, SeatCategory, SeatKey

DEFAULT_CATEGORY = SeatCategory(id="", name="Standard", price=Money(0))


class SeatSelection:
    """Set of selected seat keys for one hall plan."""

    def __init__(self, plan: HallPlan, unit_price: Money | None = None) -> None:
        if unit_price is None:
            unit_price = Money(cinema_setting("TICKET_UNIT_PRICE_CENTS"))
        self.unit_price = unit_price
        self.load_plan(plan)

    def load_plan(self, plan: HallPlan) -> None:
        """Switch to a new plan. The selection always starts empty."""
        self.plan = plan
        self._seats: dict[SeatKey, Seat] = {seat.key: seat for seat in plan.seats}
        self._categories = {category.id: category for category in plan.categories}
        self._selected: set[SeatKey] = set()

    def toggle(self, key: SeatKey | str) -> bool:
        """Flip an available seat in or out of the selection.

        Unknown and unavailable seats are left alone. Returns whether the
        seat is selected afterwards.
        """
        key = _coerce(key)
        seat = self._seats.get(key)
        if seat is None or not seat.is_available:
            return key in self._selected
        if key in self._selected:
            self._selected.remove(key)
            return False
        self._selected.add(key)
        return True

    def reset(self) -> None:
        self._selected.clear()

    def is_selected(self, key: SeatKey | str) -> bool:
        return _coerce(key) in self._selected

    def is_selectable(self, seat: Seat) -> bool:
        return seat.is_available

    @property
    def count(self) -> int:
        return len(self._selected)

    @property
    def total(self) -> Money:
        return self.unit_price * self.count

    def selected_keys(self) -> list[str]:
        """Selected keys ordered by row, then seat number."""
        return [str(key) for key in sorted(self._selected)]

    def category_for(self, seat: Seat) -> SeatCategory:
        return self._categories.get(seat.category_id, DEFAULT_CATEGORY)

    def seats_by_row(self) -> dict[int, list[Seat]]:
        rows: dict[int, list[Seat]] = defaultdict(list)
        for seat in self.plan.seats:
            rows[seat.row].append(seat)
        return {
            row: sorted(rows[row], key=lambda seat: seat.number)
            for row in sorted(rows)
        }


def _coerce(key: SeatKey | str) -> SeatKey | None:
    if isinstance(key, SeatKey):
        return key
    try:
        return SeatKey.from_string(key)
    except ValueError:
        return None
