"""
slotbooker - Appointment slot booking with webhook notifications.
"""

__version__ = "0.1.0"
