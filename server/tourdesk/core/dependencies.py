"""FastAPI dependencies for service handles and token verification."""

import logging
from typing import Optional

from fastapi import Depends, Header, Request
import jwt
from jwt import PyJWTError

from .config import settings
from .exceptions import MissingTokenError, TokenVerificationError
from ..services.mail_service import Mailer
from ..services.otp_service import OTPService
from ..services.storage_service import ObjectStorage
from ..services.token_service import TokenSigner

logger = logging.getLogger(__name__)


def get_object_storage(request: Request) -> ObjectStorage:
    """Object storage handle built at startup."""
    return request.app.state.object_storage


def get_mailer(request: Request) -> Mailer:
    """Mail transport handle built at startup."""
    return request.app.state.mailer


def get_token_signer(request: Request) -> TokenSigner:
    """Token signer built at startup."""
    return request.app.state.token_signer


def get_otp_service(
    mailer: Mailer = Depends(get_mailer),
    signer: TokenSigner = Depends(get_token_signer),
) -> OTPService:
    return OTPService(mailer, signer)


def _strip_scheme(value: str) -> str:
    scheme, _, rest = value.partition(" ")
    if scheme.lower() == "bearer" and rest:
        return rest.strip()
    return value.strip()


async def require_verified_email(
    request: Request,
    authorization: Optional[str] = Header(None),
    signer: TokenSigner = Depends(get_token_signer),
) -> str:
    """
    Verify the signed assertion in the ``authorization`` header.

    The header may hold the bare token or ``Bearer <token>``.

    Returns:
        str: Email bound by the assertion, also stored on
        ``request.state.verified_email``

    Raises:
        MissingTokenError: If the header is absent (403)
        TokenVerificationError: If the signature or expiry check fails (500)
    """
    if not authorization or not authorization.strip():
        raise MissingTokenError()

    try:
        email = signer.verify(_strip_scheme(authorization))
    except PyJWTError as e:
        logger.warning(
            "Token verification failed",
            extra={"error": str(e), "expired": isinstance(e, jwt.ExpiredSignatureError)}
        )
        raise TokenVerificationError()

    request.state.verified_email = email
    return email


async def write_guard(
    request: Request,
    authorization: Optional[str] = Header(None),
    signer: TokenSigner = Depends(get_token_signer),
) -> Optional[str]:
    """
    Token check for routes that modify content.

    Enforced only when ``require_token_for_writes`` is enabled; otherwise the
    routes stay open and this returns None.
    """
    if not settings.require_token_for_writes:
        return None
    return await require_verified_email(request, authorization, signer)


WriteGuard = Depends(write_guard)
