"""
Tests for the BookingService orchestration layer.
"""

from datetime import date
from typing import Any, Dict, List

import pytest

from slotbooker.adapters.booking_store import InMemoryBookingStore
from slotbooker.adapters.settings_store import InMemorySettingsRepository
from slotbooker.domain.exceptions import InvalidBookingError, SlotUnavailableError, WebhookNotConfiguredError
from slotbooker.domain.models import DeliveryResult, Slot, TimeWindowConfig
from slotbooker.services.booking_service import BookingService, resolve_webhook_url

TODAY = date(2024, 11, 20)
MONDAY = date(2024, 11, 25)
TUESDAY = date(2024, 11, 26)


class StubNotifier:
    """Minimal stub matching NotifierProtocol."""

    def __init__(self, result: DeliveryResult):
        self._result = result
        self.payloads: List[Dict[str, Any]] = []

    def send(self, payload):
        self.payloads.append(payload)
        return self._result


def _build_service(delivered: bool = True, store: InMemoryBookingStore = None):
    result = (
        DeliveryResult(delivered=True, status_code=200)
        if delivered
        else DeliveryResult(delivered=False, error="Connection refused")
    )
    notifier = StubNotifier(result)
    service = BookingService(
        time_windows=TimeWindowConfig(),
        booking_store=store if store is not None else InMemoryBookingStore(),
        notifier=notifier,
        granularity_minutes=30,
    )
    return service, notifier


class TestAvailableSlots:
    """Tests for slot listing."""

    def test_all_slots_follow_configuration(self):
        """Configured windows and granularity drive the slot list."""
        service, _ = _build_service()

        assert len(service.all_slots()) == 17

    def test_only_bookings_of_the_same_day_are_removed(self):
        """Bookings on other days must not reduce availability."""
        service, _ = _build_service()
        service.book(day=MONDAY, time="14:00", name="Maria", today=TODAY)

        monday = service.available_slots(MONDAY)
        tuesday = service.available_slots(TUESDAY)

        assert Slot.parse("14:00") not in monday
        assert len(monday) == 16
        assert len(tuesday) == 17


class TestBook:
    """Tests for booking submission."""

    def test_successful_booking_is_stored_and_sent(self):
        """A delivered booking lands in the store with the canonical payload."""
        store = InMemoryBookingStore()
        service, notifier = _build_service(store=store)

        outcome = service.book(day=MONDAY, time="16:30", name="  Maria Silva ", today=TODAY)

        assert outcome.confirmed
        assert outcome.booking.name == "Maria Silva"
        assert store.all() == [outcome.booking]

        payload = notifier.payloads[0]
        assert set(payload) == {"name", "date", "time", "submitted_at"}
        assert payload["name"] == "Maria Silva"
        assert payload["date"] == "2024-11-25"
        assert payload["time"] == "16:30"

    def test_failed_delivery_is_reported_and_not_stored(self):
        """A failed webhook call returns an unconfirmed outcome and keeps the slot free."""
        store = InMemoryBookingStore()
        service, notifier = _build_service(delivered=False, store=store)

        outcome = service.book(day=MONDAY, time="16:30", name="Maria", today=TODAY)

        assert not outcome.confirmed
        assert outcome.delivery.error == "Connection refused"
        assert len(notifier.payloads) == 1
        assert len(store) == 0
        assert Slot.parse("16:30") in service.available_slots(MONDAY)

    def test_double_booking_raises_error(self):
        """The same slot cannot be booked twice on one day."""
        service, notifier = _build_service()
        service.book(day=MONDAY, time="09:00", name="Maria", today=TODAY)

        with pytest.raises(SlotUnavailableError, match="09:00"):
            service.book(day=MONDAY, time="09:00", name="João", today=TODAY)

        assert len(notifier.payloads) == 1

    def test_time_outside_windows_raises_error(self):
        """Times that are never offered are rejected."""
        service, _ = _build_service()

        with pytest.raises(SlotUnavailableError):
            service.book(day=MONDAY, time="12:30", name="Maria", today=TODAY)

    def test_malformed_time_raises_error(self):
        """Malformed times are reported as invalid bookings."""
        service, _ = _build_service()

        with pytest.raises(InvalidBookingError):
            service.book(day=MONDAY, time="half past two", name="Maria", today=TODAY)

    def test_blank_name_raises_error(self):
        """A name is required."""
        service, notifier = _build_service()

        with pytest.raises(InvalidBookingError, match="name"):
            service.book(day=MONDAY, time="09:00", name="  ", today=TODAY)

        assert notifier.payloads == []

    def test_past_date_raises_error(self):
        """Days before today cannot be booked, today can."""
        service, _ = _build_service()

        with pytest.raises(InvalidBookingError, match="past"):
            service.book(day=date(2024, 11, 19), time="09:00", name="Maria", today=TODAY)

        assert service.book(day=TODAY, time="09:00", name="Maria", today=TODAY).confirmed

    def test_send_test_notification(self):
        """The test payload is sent as-is."""
        service, notifier = _build_service()

        result = service.send_test_notification()

        assert result.delivered
        assert notifier.payloads[0]["test"] is True


class TestResolveWebhookUrl:
    """Tests for webhook URL resolution."""

    def test_stored_url_wins(self):
        settings = InMemorySettingsRepository("https://hooks.zapier.com/hooks/catch/1/stored/")

        assert resolve_webhook_url(settings, "https://hooks.zapier.com/hooks/catch/1/config/").endswith("stored/")

    def test_falls_back_to_default(self):
        settings = InMemorySettingsRepository()

        assert resolve_webhook_url(settings, "https://hooks.zapier.com/hooks/catch/1/config/").endswith("config/")

    def test_missing_url_raises_error(self):
        with pytest.raises(WebhookNotConfiguredError):
            resolve_webhook_url(InMemorySettingsRepository(), None)
