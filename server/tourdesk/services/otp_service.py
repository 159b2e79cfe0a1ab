"""OTP issuance: mail a code, then hand back a signed assertion."""

import logging
import secrets

from ..core.observability import metrics_collector
from .mail_service import Mailer
from .token_service import TokenSigner

logger = logging.getLogger(__name__)

OTP_MIN = 100000
OTP_MAX = 999999


def generate_otp() -> str:
    """Return a uniformly drawn 6-digit code."""
    return str(OTP_MIN + secrets.randbelow(OTP_MAX - OTP_MIN + 1))


class OTPService:
    """
    Sends OTP codes and issues the matching signed assertion.

    The code itself is not stored anywhere; the returned token only proves
    that mail was accepted for the address.
    """

    def __init__(self, mailer: Mailer, signer: TokenSigner):
        self.mailer = mailer
        self.signer = signer

    async def request_otp(self, email: str) -> str:
        """
        Mail a fresh code to ``email`` and return a signed assertion for it.

        Raises:
            Exception: Whatever the mailer or signer raised. No token is
                issued when sending fails.
        """
        code = generate_otp()
        try:
            await self.mailer.send_otp(email, code)
        except Exception:
            metrics_collector.record_otp_email("failed")
            raise
        metrics_collector.record_otp_email("sent")
        token = self.signer.issue(email)
        logger.info("OTP assertion issued", extra={"recipient": email})
        return token
