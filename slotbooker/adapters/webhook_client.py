"""
Webhook client for forwarding bookings to an automation service (e.g. Zapier).
"""

import logging
from typing import Any, Dict, Optional

import pendulum
import requests
from pendulum import DateTime

from ..domain.models import Booking, DeliveryResult

logger = logging.getLogger(__name__)

TEST_MESSAGE = "Test webhook triggered from slotbooker"


def build_booking_payload(booking: Booking, submitted_at: Optional[DateTime] = None) -> Dict[str, Any]:
    """
    Build the JSON record sent for a booking.

    Format:
    {
        "name": "Maria Silva",
        "date": "2024-11-25",
        "time": "14:00",
        "submitted_at": "2024-11-20T10:15:00Z"
    }
    """
    submitted_at = submitted_at or pendulum.now("UTC")
    return {
        "name": booking.name.strip(),
        "date": booking.date.isoformat(),
        "time": str(booking.time),
        "submitted_at": submitted_at.to_iso8601_string(),
    }


def build_test_payload(timestamp: Optional[DateTime] = None) -> Dict[str, Any]:
    """Build the payload used to check that a webhook is reachable."""
    timestamp = timestamp or pendulum.now("UTC")
    return {
        "test": True,
        "timestamp": timestamp.to_iso8601_string(),
        "message": TEST_MESSAGE,
    }


class WebhookClient:
    """
    Posts JSON payloads to a webhook URL.

    Each call is a single attempt: there are no retries and the response
    body is not interpreted. Only the status code decides whether the
    delivery counts as successful.
    """

    def __init__(self, url: str, timeout_seconds: float = 10.0):
        """
        Initialize the webhook client.

        Args:
            url: Webhook endpoint
            timeout_seconds: Timeout for the HTTP request
        """
        self.url = url
        self.timeout_seconds = timeout_seconds
        self.headers = {
            "Content-Type": "application/json"
        }

    def send(self, payload: Dict[str, Any]) -> DeliveryResult:
        """
        Send a payload to the webhook.

        Args:
            payload: JSON-serializable record

        Returns:
            DeliveryResult describing whether the webhook accepted the call
        """
        logger.debug("POST %s payload=%s", self.url, payload)

        try:
            response = requests.post(
                self.url,
                headers=self.headers,
                json=payload,
                timeout=self.timeout_seconds
            )
            response.raise_for_status()

        except requests.exceptions.HTTPError as e:
            status_code = e.response.status_code if e.response is not None else None
            logger.warning("Webhook rejected the request (status %s): %s", status_code, e)
            return DeliveryResult(delivered=False, status_code=status_code, error=str(e))

        except requests.exceptions.RequestException as e:
            logger.warning("Webhook unreachable: %s", e)
            return DeliveryResult(delivered=False, error=str(e))

        logger.info("Webhook accepted the request (status %s)", response.status_code)
        return DeliveryResult(delivered=True, status_code=response.status_code)
