"""
Filtering of generated slots against existing bookings.
"""

from typing import AbstractSet, Iterable, List, Set, Union

from .models import Slot

BookedValue = Union[Slot, str]


class AvailabilityFilter:
    """
    Removes already-booked slots from a slot list.

    The caller supplies the booked times of exactly one calendar day;
    bookings of other days must not be passed in.
    """

    def available(
        self,
        all_slots: Iterable[Slot],
        booked_slots: AbstractSet[BookedValue]
    ) -> List[Slot]:
        """
        Return the slots that are still free, in their original order.

        Booked values may be ``Slot`` instances or "HH:MM" strings. Values
        that do not appear in ``all_slots`` or do not parse are ignored.
        """
        booked = self._normalize(booked_slots)

        available: List[Slot] = []
        seen: Set[Slot] = set()
        for slot in all_slots:
            if slot in booked or slot in seen:
                continue
            seen.add(slot)
            available.append(slot)

        return available

    @staticmethod
    def _normalize(booked_slots: AbstractSet[BookedValue]) -> Set[Slot]:
        booked: Set[Slot] = set()
        for value in booked_slots:
            if not isinstance(value, str):
                booked.add(value)
                continue
            try:
                booked.add(Slot.parse(value))
            except ValueError:
                # A time that does not parse cannot block any generated slot
                continue
        return booked
