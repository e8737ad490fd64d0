"""
Core business logic for generating bookable time slots.

Pure domain logic without any external dependencies (no API calls, no
storage, no I/O).
"""

from typing import List

from .exceptions import InvalidConfigError
from .models import Slot, TimeWindow, TimeWindowConfig

DEFAULT_GRANULARITY_MINUTES = 30


class SlotGenerator:
    """
    Generates the ordered list of bookable slots for a day.

    Algorithm:
    1. Convert each window boundary to minutes since midnight
    2. For each window, step from start by the granularity while strictly
       below the window end
    3. Concatenate morning slots followed by afternoon slots

    The end boundary is exclusive: a window ending at 12:00 never offers
    a 12:00 slot.
    """

    def generate(
        self,
        config: TimeWindowConfig,
        granularity_minutes: int = DEFAULT_GRANULARITY_MINUTES
    ) -> List[Slot]:
        """
        Generate all slots for the given opening hours.

        Args:
            config: Morning and afternoon windows
            granularity_minutes: Spacing between consecutive slots

        Returns:
            Slots in chronological order

        Raises:
            InvalidConfigError: If the granularity is not a positive divisor of 60
        """
        validate_granularity(granularity_minutes)

        slots: List[Slot] = []
        for window in config.windows():
            slots.extend(self._slots_for_window(window, granularity_minutes))

        return slots

    def _slots_for_window(self, window: TimeWindow, granularity_minutes: int) -> List[Slot]:
        """
        Enumerate the slots of a single window.

        Example:
        Window: 13:30 - 18:00, granularity 60
        Result: [13:30, 14:30, 15:30, 16:30, 17:30]
        """
        return [
            Slot(minutes=minutes)
            for minutes in range(window.start_minutes, window.end_minutes, granularity_minutes)
        ]


def validate_granularity(granularity_minutes: int) -> int:
    """Ensure the granularity is a positive divisor of 60."""
    if isinstance(granularity_minutes, bool) or not isinstance(granularity_minutes, int):
        raise InvalidConfigError(f"Granularity must be an integer, got {granularity_minutes!r}")
    if granularity_minutes <= 0 or 60 % granularity_minutes != 0:
        raise InvalidConfigError(
            f"Granularity must be a positive divisor of 60, got {granularity_minutes}"
        )
    return granularity_minutes
