"""
In-memory booking store.

Bookings only live as long as the process; nothing is written to disk.
"""

from datetime import date
from typing import FrozenSet, List

from ..domain.models import Booking, Slot


class InMemoryBookingStore:
    """Append-only, insertion-ordered list of bookings."""

    def __init__(self) -> None:
        self._bookings: List[Booking] = []

    def add(self, booking: Booking) -> None:
        self._bookings.append(booking)

    def booked_slots(self, day: date) -> FrozenSet[Slot]:
        """Return the times already taken on exactly this day."""
        return frozenset(
            booking.time for booking in self._bookings
            if booking.date == day
        )

    def all(self) -> List[Booking]:
        return list(self._bookings)

    def __len__(self) -> int:
        return len(self._bookings)
