import logging

from app.core.config import Settings
from app.core.email_client import EmailClient
from app.services.notification_service import NotificationService, OrderLine


class BrokenEmailClient:
    is_configured = True

    def send(self, **kwargs):
        raise OSError("smtp down")


class RecordingEmailClient:
    is_configured = True

    def __init__(self):
        self.sent = []

    def send(self, **kwargs):
        self.sent.append(kwargs)


LINES = [OrderLine(name="Widget", quantity=3, price_at_time=100.0)]


def test_unconfigured_smtp_only_logs(caplog):
    client = EmailClient(Settings(SMTP_HOST=None))
    assert client.is_configured is False

    with caplog.at_level(logging.INFO):
        ok = NotificationService(client).send_order_confirmation(
            "alice@example.com", "alice", "ORD-1-1", "324.00", LINES
        )
    assert ok is True
    assert "Mock email to alice@example.com" in caplog.text


def test_confirmation_body():
    email_client = RecordingEmailClient()
    NotificationService(email_client).send_order_confirmation(
        "alice@example.com", "alice", "ORD-1-1", "324.00", LINES
    )
    sent = email_client.sent[0]
    assert sent["to_email"] == "alice@example.com"
    assert sent["subject"] == "Order Confirmation - ORD-1-1"
    assert "Widget x3 @ 100.00" in sent["text_body"]
    assert "Total: 324.00" in sent["text_body"]


def test_delivery_failure_is_logged_not_raised(caplog):
    with caplog.at_level(logging.ERROR):
        ok = NotificationService(BrokenEmailClient()).send_order_status_update(
            "alice@example.com", "ORD-1-1", "shipped"
        )
    assert ok is False
    assert "Failed to send" in caplog.text
