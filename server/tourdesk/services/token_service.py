"""Signed, time-limited assertions binding an email address."""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from ..core.config import Settings


@dataclass
class TokenSigner:
    """Issues and verifies HS256 JWTs of the form ``{email, iat, exp}``."""

    secret: str
    algorithm: str = "HS256"
    ttl_seconds: int = 3600

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenSigner":
        return cls(
            secret=settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
            ttl_seconds=settings.otp_token_ttl_seconds,
        )

    def issue(self, email: str, now: Optional[datetime] = None) -> str:
        """Sign an assertion for ``email`` valid for ``ttl_seconds``."""
        issued_at = now or datetime.now(timezone.utc)
        payload = {
            "email": email,
            "iat": issued_at,
            "exp": issued_at + timedelta(seconds=self.ttl_seconds),
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> str:
        """
        Check signature and expiry and return the bound email.

        Raises:
            jwt.PyJWTError: If the token is malformed, tampered with, expired,
                or carries no email.
        """
        payload = jwt.decode(
            token,
            self.secret,
            algorithms=[self.algorithm],
            options={"require": ["exp", "email"]},
        )
        return payload["email"]
