"""
Tests for the webhook client and payload construction.
"""

from datetime import date

import pendulum
import pytest
import requests

from slotbooker.adapters import webhook_client
from slotbooker.adapters.mock_webhook_client import MockWebhookClient
from slotbooker.adapters.webhook_client import WebhookClient, build_booking_payload, build_test_payload
from slotbooker.domain.models import Booking, Slot

URL = "https://hooks.zapier.com/hooks/catch/1/abc/"


class FakeResponse:
    def __init__(self, status_code: int):
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Error", response=self)


@pytest.fixture
def calls(monkeypatch):
    """Record calls to requests.post and answer with a configurable status."""
    recorded = {"status": 200, "calls": []}

    def fake_post(url, headers=None, json=None, timeout=None):
        recorded["calls"].append({"url": url, "headers": headers, "json": json, "timeout": timeout})
        return FakeResponse(recorded["status"])

    monkeypatch.setattr(webhook_client.requests, "post", fake_post)
    return recorded


class TestPayloads:
    """Tests for payload construction."""

    def test_booking_payload(self):
        booking = Booking(date=date(2024, 11, 25), time=Slot.parse("9:00"), name="Maria Silva")
        submitted_at = pendulum.datetime(2024, 11, 20, 10, 15, tz="UTC")

        payload = build_booking_payload(booking, submitted_at=submitted_at)

        assert payload == {
            "name": "Maria Silva",
            "date": "2024-11-25",
            "time": "09:00",
            "submitted_at": "2024-11-20T10:15:00Z",
        }

    def test_test_payload(self):
        payload = build_test_payload(pendulum.datetime(2024, 11, 20, tz="UTC"))

        assert payload["test"] is True
        assert payload["timestamp"] == "2024-11-20T00:00:00Z"
        assert payload["message"]


class TestWebhookClient:
    """Tests for WebhookClient."""

    def test_successful_post(self, calls):
        result = WebhookClient(url=URL, timeout_seconds=5).send({"name": "Maria"})

        assert result.delivered
        assert result.status_code == 200
        assert calls["calls"] == [{
            "url": URL,
            "headers": {"Content-Type": "application/json"},
            "json": {"name": "Maria"},
            "timeout": 5,
        }]

    def test_http_error_is_reported(self, calls):
        calls["status"] = 500

        result = WebhookClient(url=URL).send({"name": "Maria"})

        assert not result.delivered
        assert result.status_code == 500
        assert "500" in result.error

    def test_network_error_is_reported(self, monkeypatch):
        def failing_post(*args, **kwargs):
            raise requests.exceptions.ConnectionError("Connection refused")

        monkeypatch.setattr(webhook_client.requests, "post", failing_post)

        result = WebhookClient(url=URL).send({"name": "Maria"})

        assert not result.delivered
        assert result.status_code is None
        assert "Connection refused" in result.error

    def test_single_attempt_only(self, calls):
        calls["status"] = 503

        WebhookClient(url=URL).send({"name": "Maria"})

        assert len(calls["calls"]) == 1


class TestMockWebhookClient:
    """Tests for MockWebhookClient."""

    def test_records_payloads(self):
        client = MockWebhookClient()

        result = client.send({"name": "Maria"})

        assert result.delivered
        assert client.sent == [{"name": "Maria"}]

    def test_simulated_failure(self):
        result = MockWebhookClient(fail=True).send({"name": "Maria"})

        assert not result.delivered
        assert result.error
