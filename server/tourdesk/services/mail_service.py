"""SMTP delivery of OTP emails."""

import logging
from dataclasses import dataclass
from email.message import EmailMessage
from typing import Optional, Protocol

import aiosmtplib

from ..core.config import Settings

logger = logging.getLogger(__name__)

OTP_SUBJECT = "Your OTP for Verification"


class Mailer(Protocol):
    """Anything that can deliver an OTP email."""

    async def send_otp(self, recipient: str, code: str) -> None:
        ...


@dataclass
class SMTPMailer:
    """Sends OTP codes through an authenticated STARTTLS SMTP server."""

    hostname: str
    port: int
    username: Optional[str] = None
    password: Optional[str] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "SMTPMailer":
        return cls(
            hostname=settings.smtp_host,
            port=settings.smtp_port,
            username=settings.email_user,
            password=settings.email_pass,
        )

    def build_otp_message(self, recipient: str, code: str) -> EmailMessage:
        msg = EmailMessage()
        msg["Subject"] = OTP_SUBJECT
        msg["From"] = self.username or ""
        msg["To"] = recipient
        msg.set_content(f"Your OTP is {code}. Use this code to verify your email.")
        return msg

    async def send_otp(self, recipient: str, code: str) -> None:
        """
        Deliver ``code`` to ``recipient``.

        Raises:
            aiosmtplib.SMTPException: On connection, authentication or delivery failure.
        """
        await aiosmtplib.send(
            self.build_otp_message(recipient, code),
            hostname=self.hostname,
            port=self.port,
            start_tls=True,
            username=self.username,
            password=self.password,
        )
        logger.info("OTP email sent", extra={"recipient": recipient})
