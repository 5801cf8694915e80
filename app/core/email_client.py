"""
SMTP email client.

Responsibilities:
  - Read SMTP configuration from Settings (SMTP_* env vars).
  - Provide a single send(...) method for the notification service.
  - Support both TLS (STARTTLS) and SSL connections.

Typical .env configuration (Gmail example with App Password):

    SMTP_HOST=smtp.gmail.com
    SMTP_PORT=465
    SMTP_USERNAME=orders@shopease.com
    SMTP_PASSWORD=<app password>
    SMTP_FROM_EMAIL=orders@shopease.com
    SMTP_FROM_NAME=ShopEase
    SMTP_USE_TLS=false
    SMTP_USE_SSL=true
"""

import smtplib
from email.message import EmailMessage

from app.core.config import Settings


class EmailClient:
    """
    Thin wrapper around smtplib bound to one Settings instance.
    """

    def __init__(self, settings: Settings):
        self.settings = settings

    @property
    def is_configured(self) -> bool:
        s = self.settings
        return bool(s.SMTP_HOST and s.SMTP_USERNAME and s.SMTP_PASSWORD)

    def _create_smtp_client(self) -> smtplib.SMTP:
        """
        Create and return an SMTP client configured for TLS or SSL.

        Priority:
          - If SMTP_USE_SSL is True → use smtplib.SMTP_SSL (e.g., Gmail on 465).
          - Else → use smtplib.SMTP + optional STARTTLS if SMTP_USE_TLS is True.
        """
        s = self.settings
        if not s.SMTP_HOST:
            raise RuntimeError("SMTP_HOST is not configured. Please set it in .env.")

        if s.SMTP_USE_SSL:
            server: smtplib.SMTP = smtplib.SMTP_SSL(s.SMTP_HOST, s.SMTP_PORT, timeout=30)
        else:
            server = smtplib.SMTP(s.SMTP_HOST, s.SMTP_PORT, timeout=30)
            if s.SMTP_USE_TLS:
                server.starttls()

        return server

    def send(
        self,
        to_email: str,
        subject: str,
        text_body: str,
        html_body: str | None = None,
    ) -> None:
        """
        Send an email to a single recipient.

        Raises
        ------
        RuntimeError:
            If required SMTP configuration is missing.
        smtplib.SMTPException:
            If the underlying SMTP connection or send fails.
        """
        s = self.settings
        if not self.is_configured:
            raise RuntimeError(
                "SMTP is not configured correctly. "
                "Please set SMTP_HOST, SMTP_USERNAME, and SMTP_PASSWORD in .env."
            )

        msg = EmailMessage()

        from_email = s.SMTP_FROM_EMAIL or s.SMTP_USERNAME
        msg["From"] = f"{s.SMTP_FROM_NAME} <{from_email}>"
        msg["To"] = to_email
        msg["Subject"] = subject

        # Always add a plain-text part
        msg.set_content(text_body)

        if html_body:
            msg.add_alternative(html_body, subtype="html")

        server = self._create_smtp_client()
        try:
            server.login(s.SMTP_USERNAME, s.SMTP_PASSWORD)  # type: ignore[arg-type]
            server.send_message(msg)
        finally:
            try:
                server.quit()
            except smtplib.SMTPException:
                # Connection is being torn down anyway.
                pass
