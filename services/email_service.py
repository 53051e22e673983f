"""Minimal Email Service for OTP delivery.

If SMTP settings are not configured, falls back to dev mode and logs the
code instead of sending an email.
"""
import logging
import smtplib
from email.mime.text import MIMEText
from typing import Optional

from utils.config import Settings
from utils.exceptions import DeliveryUnavailable

logger = logging.getLogger(__name__)


class EmailService:
    def __init__(self, settings: Settings):
        self.host = settings.smtp_host
        self.port = settings.smtp_port
        self.user = settings.smtp_user
        self.password = settings.smtp_password
        self.sender = settings.smtp_from
        self.ttl_minutes = settings.otp_ttl_minutes

    @property
    def enabled(self) -> bool:
        return all([self.host, self.port, self.user, self.password, self.sender]) and self.port > 0

    def send_otp_email(self, to_email: str, otp: str) -> bool:
        """Synchronous send (run as a background task). Returns True if a real email was sent."""
        if not self.enabled:
            logger.warning(f"Dev mode (no SMTP configured). OTP for {to_email}: {otp}")
            return False
        body = (
            f"Your Taskboard verification code is: {otp}\n\n"
            f"It expires in {self.ttl_minutes} minutes. If you did not request this, ignore this email."
        )
        try:
            self.deliver(to_email, "Your Taskboard verification code", body)
        except DeliveryUnavailable as e:
            # best effort: the issuing request has already returned
            logger.error(str(e))
            return False
        logger.info(f"Sent OTP email to {to_email}")
        return True

    def deliver(self, to_email: str, subject: str, body: str):
        msg = MIMEText(body)
        msg["Subject"] = subject
        msg["From"] = self.sender
        msg["To"] = to_email
        try:
            with smtplib.SMTP(self.host, self.port, timeout=15) as server:
                server.starttls()
                server.login(self.user, self.password)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            raise DeliveryUnavailable(f"Failed sending email to {to_email}: {e}") from e

    def test_connection(self) -> Optional[str]:
        """Attempt a lightweight SMTP connection to verify credentials."""
        if not self.enabled:
            return "SMTP not fully configured"
        try:
            with smtplib.SMTP(self.host, self.port, timeout=10) as server:
                server.starttls()
                server.login(self.user, self.password)
            return "ok"
        except (smtplib.SMTPException, OSError) as e:
            return f"failed: {e}"
