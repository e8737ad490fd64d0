"""
Domain-specific exception hierarchy for the slot booking application.
"""


class BookingError(Exception):
    """Base class for all application-level errors."""


class InvalidConfigError(BookingError, ValueError):
    """Raised when the time windows, granularity or webhook URL are malformed."""


class InvalidBookingError(BookingError, ValueError):
    """Raised when a booking request is incomplete or points to the past."""


class SlotUnavailableError(BookingError):
    """Raised when the requested time is not offered or already taken."""


class WebhookNotConfiguredError(BookingError):
    """Raised when no webhook URL is stored or configured."""


class SettingsStorageError(BookingError):
    """Raised when the settings file cannot be written or removed."""
