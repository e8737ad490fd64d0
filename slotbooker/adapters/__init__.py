"""
Adapters layer - Webhook transport, in-memory bookings and persisted settings.
"""

from .booking_store import InMemoryBookingStore
from .mock_webhook_client import MockWebhookClient
from .settings_store import InMemorySettingsRepository, YamlSettingsRepository
from .webhook_client import WebhookClient, build_booking_payload, build_test_payload

__all__ = [
    "InMemoryBookingStore",
    "InMemorySettingsRepository",
    "MockWebhookClient",
    "WebhookClient",
    "YamlSettingsRepository",
    "build_booking_payload",
    "build_test_payload",
]
