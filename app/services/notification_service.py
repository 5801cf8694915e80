import logging
from dataclasses import dataclass

from fastapi import Depends

from app.core.config import Settings, get_settings
from app.core.email_client import EmailClient

logger = logging.getLogger(__name__)


@dataclass
class OrderLine:
    """Plain snapshot of an order line, safe to use after the session closes."""

    name: str
    quantity: int
    price_at_time: float


class NotificationService:
    """
    Customer notifications for the order lifecycle.

    Runs after the response as a background task, so every method is
    best-effort: delivery failures are logged and never raised.
    Without SMTP configuration messages are only logged.
    """

    def __init__(self, email_client: EmailClient):
        self.email_client = email_client

    def _deliver(self, to_email: str, subject: str, text_body: str) -> bool:
        if not self.email_client.is_configured:
            logger.info("Mock email to %s: %s", to_email, subject)
            return True
        try:
            self.email_client.send(to_email=to_email, subject=subject, text_body=text_body)
        except Exception:
            logger.exception("Failed to send '%s' to %s", subject, to_email)
            return False
        logger.info("Email sent to %s: %s", to_email, subject)
        return True

    def send_order_confirmation(
        self,
        email: str,
        username: str,
        order_number: str,
        total: str,
        items: list[OrderLine],
    ) -> bool:
        lines = "\n".join(
            f"  - {it.name} x{it.quantity} @ {it.price_at_time:.2f}" for it in items
        )
        text_body = (
            f"Hi {username},\n\n"
            f"Thanks for your order {order_number}.\n\n"
            f"{lines}\n\n"
            f"Total: {total}\n"
        )
        return self._deliver(email, f"Order Confirmation - {order_number}", text_body)

    def send_order_status_update(
        self,
        email: str,
        order_number: str,
        new_status: str,
    ) -> bool:
        text_body = f"Your order {order_number} is now {new_status}.\n"
        return self._deliver(email, f"Order {order_number}: {new_status}", text_body)


def get_notification_service(
    settings: Settings = Depends(get_settings),
) -> NotificationService:
    """
    FastAPI dependency building the notifier for one request.

    Tests replace it through app.dependency_overrides.
    """
    return NotificationService(EmailClient(settings))
