"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .booking_service import BookingService, NotifierProtocol, resolve_webhook_url

__all__ = ["BookingService", "NotifierProtocol", "resolve_webhook_url"]
