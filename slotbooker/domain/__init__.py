"""
Domain layer - Pure business logic without external dependencies.
"""

from .availability import AvailabilityFilter
from .models import Booking, BookingOutcome, DeliveryResult, Slot, TimeWindow, TimeWindowConfig
from .slot_generator import SlotGenerator

__all__ = [
    "AvailabilityFilter",
    "Booking",
    "BookingOutcome",
    "DeliveryResult",
    "Slot",
    "SlotGenerator",
    "TimeWindow",
    "TimeWindowConfig",
]
