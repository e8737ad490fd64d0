"""
Domain models for time windows, slots and bookings.
"""

import re
from dataclasses import dataclass
from datetime import date, time
from typing import Optional, Tuple

import pendulum

from .exceptions import InvalidConfigError

MINUTES_PER_DAY = 24 * 60

_TIME_OF_DAY_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})$")


def parse_time_of_day(value: str) -> time:
    """
    Parse a wall-clock "HH:MM" string.

    Args:
        value: Time of day, e.g. "08:00" or "8:00"

    Returns:
        time object

    Raises:
        InvalidConfigError: If the value is not a valid hour/minute pair
    """
    match = _TIME_OF_DAY_PATTERN.match(value.strip()) if isinstance(value, str) else None
    if not match:
        raise InvalidConfigError(f"Invalid time of day '{value}', expected HH:MM")

    hour, minute = int(match.group(1)), int(match.group(2))
    if not 0 <= hour <= 23:
        raise InvalidConfigError(f"Hour must be between 0 and 23, got {hour} in '{value}'")
    if not 0 <= minute <= 59:
        raise InvalidConfigError(f"Minute must be between 0 and 59, got {minute} in '{value}'")

    return time(hour=hour, minute=minute)


def minutes_since_midnight(value: time) -> int:
    return value.hour * 60 + value.minute


@dataclass(frozen=True, order=True)
class Slot:
    """
    A bookable time of day, stored as minutes since midnight.

    Ordering follows the clock, rendering is zero-padded "HH:MM".
    """
    minutes: int

    def __post_init__(self):
        if not 0 <= self.minutes < MINUTES_PER_DAY:
            raise ValueError(f"Slot must lie within one day, got {self.minutes} minutes")

    @classmethod
    def parse(cls, value: str) -> "Slot":
        """Build a slot from an "HH:MM" string."""
        return cls.from_time(parse_time_of_day(value))

    @classmethod
    def from_time(cls, value: time) -> "Slot":
        return cls(minutes=minutes_since_midnight(value))

    @property
    def hour(self) -> int:
        return self.minutes // 60

    @property
    def minute(self) -> int:
        return self.minutes % 60

    def to_time(self) -> time:
        return time(hour=self.hour, minute=self.minute)

    def __str__(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}"


@dataclass(frozen=True)
class TimeWindow:
    """
    A contiguous span of the day from which slots are generated.

    The end boundary is exclusive.
    """
    name: str
    start: time
    end: time

    @property
    def start_minutes(self) -> int:
        return minutes_since_midnight(self.start)

    @property
    def end_minutes(self) -> int:
        return minutes_since_midnight(self.end)

    def duration_minutes(self) -> int:
        return self.end_minutes - self.start_minutes

    def __str__(self) -> str:
        return f"{self.start.strftime('%H:%M')} - {self.end.strftime('%H:%M')}"


@dataclass(frozen=True)
class TimeWindowConfig:
    """
    Morning and afternoon opening hours.

    Invariant: morning_start <= morning_end <= afternoon_start <= afternoon_end.
    A window whose start equals its end is allowed and simply offers no slots.
    """
    morning_start: time = time(8, 0)
    morning_end: time = time(12, 0)
    afternoon_start: time = time(13, 30)
    afternoon_end: time = time(18, 0)

    def __post_init__(self):
        if self.morning_end < self.morning_start:
            raise InvalidConfigError(
                f"Morning window is inverted: {self.morning_start} - {self.morning_end}"
            )
        if self.afternoon_end < self.afternoon_start:
            raise InvalidConfigError(
                f"Afternoon window is inverted: {self.afternoon_start} - {self.afternoon_end}"
            )
        if self.afternoon_start < self.morning_end:
            raise InvalidConfigError(
                f"Afternoon window starts at {self.afternoon_start}, "
                f"before the morning window ends at {self.morning_end}"
            )

    @classmethod
    def from_strings(
        cls,
        morning_start: str,
        morning_end: str,
        afternoon_start: str,
        afternoon_end: str
    ) -> "TimeWindowConfig":
        """
        Build a config from "HH:MM" strings.

        Raises:
            InvalidConfigError: If a boundary does not parse or a window is inverted
        """
        return cls(
            morning_start=parse_time_of_day(morning_start),
            morning_end=parse_time_of_day(morning_end),
            afternoon_start=parse_time_of_day(afternoon_start),
            afternoon_end=parse_time_of_day(afternoon_end),
        )

    def windows(self) -> Tuple[TimeWindow, TimeWindow]:
        """Return the morning and afternoon windows in chronological order."""
        return (
            TimeWindow(name="morning", start=self.morning_start, end=self.morning_end),
            TimeWindow(name="afternoon", start=self.afternoon_start, end=self.afternoon_end),
        )


@dataclass(frozen=True)
class Booking:
    """
    A confirmed (date, time, name) appointment.
    """
    date: date
    time: Slot
    name: str

    def __post_init__(self):
        if not self.name or not self.name.strip():
            raise ValueError("Booking name must not be empty")

    def format_display(self) -> str:
        """
        Format the booking for display.
        Format: Wochentag, DD.MM.YYYY | HH:MM Uhr | Name
        """
        day = pendulum.date(self.date.year, self.date.month, self.date.day)

        weekday_names = {
            0: "Montag",
            1: "Dienstag",
            2: "Mittwoch",
            3: "Donnerstag",
            4: "Freitag",
            5: "Samstag",
            6: "Sonntag"
        }

        weekday = weekday_names[day.weekday()]
        return f"{weekday}, {day.format('DD.MM.YYYY')} | {self.time} Uhr | {self.name}"


@dataclass(frozen=True)
class DeliveryResult:
    """
    Outcome of a single webhook dispatch.

    ``delivered`` is only True when the endpoint answered with a non-error
    status. There is no retry behind it.
    """
    delivered: bool
    status_code: Optional[int] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class BookingOutcome:
    """A booking together with the result of notifying the webhook."""
    booking: Booking
    delivery: DeliveryResult

    @property
    def confirmed(self) -> bool:
        return self.delivery.delivered
