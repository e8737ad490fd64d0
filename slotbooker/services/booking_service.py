"""
Application services for the three-step booking flow.

The service coordinates slot generation, availability filtering, the
in-memory booking store and the webhook notifier. Collaborators are typed
against small protocols so tests and the CLI's mock mode can plug in
stand-ins.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import AbstractSet, Any, Dict, List, Optional, Protocol, Union

import pendulum

from ..domain.availability import AvailabilityFilter
from ..domain.exceptions import InvalidBookingError, SlotUnavailableError, WebhookNotConfiguredError
from ..domain.models import Booking, BookingOutcome, DeliveryResult, Slot, TimeWindowConfig
from ..domain.slot_generator import DEFAULT_GRANULARITY_MINUTES, SlotGenerator
from ..adapters.webhook_client import build_booking_payload, build_test_payload

logger = logging.getLogger(__name__)


class NotifierProtocol(Protocol):
    """Protocol describing the webhook transport needed by the service."""

    def send(self, payload: Dict[str, Any]) -> DeliveryResult:
        """Send a payload once and report the outcome."""


class BookingStoreProtocol(Protocol):
    """Protocol describing the booking store needed by the service."""

    def add(self, booking: Booking) -> None:
        """Append a booking."""

    def booked_slots(self, day: date) -> AbstractSet[Slot]:
        """Return the times taken on the given day."""


class SettingsRepositoryProtocol(Protocol):
    """Protocol describing persisted user preferences."""

    def get_webhook_url(self) -> Optional[str]:
        """Return the stored webhook URL, if any."""

    def set_webhook_url(self, url: str) -> None:
        """Persist a webhook URL."""

    def clear(self) -> None:
        """Forget all stored preferences."""


def resolve_webhook_url(
    settings: SettingsRepositoryProtocol,
    default_url: Optional[str] = None
) -> str:
    """
    Determine the webhook URL to post to.

    A URL saved by the user wins over the configured default.

    Raises:
        WebhookNotConfiguredError: If neither is available
    """
    url = settings.get_webhook_url() or default_url
    if not url:
        raise WebhookNotConfiguredError(
            "No webhook URL configured. Use 'slotbooker webhook set <URL>' "
            "or set webhook.url in config.yaml."
        )
    return url


class BookingService:
    """
    Orchestrates slot listing and booking submission.
    """

    def __init__(
        self,
        *,
        time_windows: TimeWindowConfig,
        booking_store: BookingStoreProtocol,
        notifier: NotifierProtocol,
        granularity_minutes: int = DEFAULT_GRANULARITY_MINUTES,
        timezone: str = "Europe/Berlin",
        slot_generator: Optional[SlotGenerator] = None,
        availability_filter: Optional[AvailabilityFilter] = None,
    ) -> None:
        self._time_windows = time_windows
        self._booking_store = booking_store
        self._notifier = notifier
        self._granularity_minutes = granularity_minutes
        self._timezone = timezone
        self._slot_generator = slot_generator or SlotGenerator()
        self._availability_filter = availability_filter or AvailabilityFilter()

    def all_slots(self) -> List[Slot]:
        """Generate every slot of a day from the configured windows."""
        return self._slot_generator.generate(self._time_windows, self._granularity_minutes)

    def available_slots(self, day: date) -> List[Slot]:
        """Return the slots of ``day`` that nobody has booked yet."""
        return self._availability_filter.available(
            self.all_slots(),
            self._booking_store.booked_slots(day),
        )

    def today(self) -> date:
        return pendulum.now(self._timezone).date()

    def book(
        self,
        *,
        day: date,
        time: Union[Slot, str],
        name: str,
        today: Optional[date] = None,
    ) -> BookingOutcome:
        """
        Validate a booking, notify the webhook and record it.

        The booking is only added to the store when the webhook accepted
        it. A failed delivery is reported in the returned outcome.

        Raises:
            InvalidBookingError: If the name is blank, the time malformed or the day in the past
            SlotUnavailableError: If the time is not offered or already booked
        """
        clean_name = (name or "").strip()
        if not clean_name:
            raise InvalidBookingError("Please enter a name for the booking.")

        reference_day = today or self.today()
        if day < reference_day:
            raise InvalidBookingError(
                f"Cannot book {day.isoformat()}: the date lies in the past."
            )

        slot = self._coerce_slot(time)
        if slot not in self.available_slots(day):
            raise SlotUnavailableError(
                f"The time {slot} is not available on {day.isoformat()}."
            )

        booking = Booking(date=day, time=slot, name=clean_name)
        delivery = self._notifier.send(build_booking_payload(booking))

        if delivery.delivered:
            self._booking_store.add(booking)
            logger.info("Booked %s %s for %s", day.isoformat(), slot, clean_name)
        else:
            logger.error(
                "Booking %s %s for %s was not delivered: %s",
                day.isoformat(), slot, clean_name, delivery.error or delivery.status_code,
            )

        return BookingOutcome(booking=booking, delivery=delivery)

    def send_test_notification(self) -> DeliveryResult:
        """Send the test payload to check that the webhook is reachable."""
        return self._notifier.send(build_test_payload())

    @staticmethod
    def _coerce_slot(value: Union[Slot, str]) -> Slot:
        if isinstance(value, Slot):
            return value
        try:
            return Slot.parse(value)
        except ValueError as exc:
            raise InvalidBookingError(str(exc)) from exc
