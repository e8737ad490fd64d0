"""
Mock webhook client for trying the booking flow without a real endpoint.
"""

from typing import Any, Dict, List

from ..domain.models import DeliveryResult


class MockWebhookClient:
    """
    Mock client that records payloads instead of posting them.

    Every call reports a successful delivery unless ``fail`` is set, which
    simulates an unreachable endpoint.
    """

    def __init__(self, url: str = "mock://webhook", fail: bool = False):
        self.url = url
        self.fail = fail
        self.sent: List[Dict[str, Any]] = []

    def send(self, payload: Dict[str, Any]) -> DeliveryResult:
        self.sent.append(payload)

        if self.fail:
            return DeliveryResult(delivered=False, error="Simulated webhook failure")

        return DeliveryResult(delivered=True, status_code=200)
