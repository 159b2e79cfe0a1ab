"""OTP router: email a code and return a signed assertion."""

import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse

from ..core.dependencies import get_otp_service
from ..core.exceptions import ServiceError, ValidationError
from ..schemas.common import OTPRequest, OTPResponse
from ..services.otp_service import OTPService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["otp"])


@router.post("/sendOTP", response_model=OTPResponse)
async def send_otp(
    payload: Optional[OTPRequest] = Body(None),
    otp_service: OTPService = Depends(get_otp_service),
) -> JSONResponse:
    """
    Email a 6-digit code and return an assertion of the email valid for one hour.

    The code is not kept server-side, so there is nothing to submit it to.
    """
    email = payload.email.strip() if payload and payload.email else ""
    if not email:
        raise ValidationError("Email address is required")

    try:
        token = await otp_service.request_otp(email)
    except Exception as e:
        logger.error(
            "Error sending OTP",
            extra={"recipient": email, "error": str(e)},
            exc_info=True
        )
        raise ServiceError("Failed to send OTP")

    return JSONResponse(
        status_code=200,
        content=OTPResponse(message="OTP sent successfully", token=token).model_dump()
    )
