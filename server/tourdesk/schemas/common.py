"""Common Pydantic schemas."""

from typing import List, Optional

from pydantic import BaseModel, Field


class MessageResponse(BaseModel):
    """Plain confirmation message."""

    message: str = Field(..., description="Human-readable confirmation")


class ErrorResponse(BaseModel):
    """Error body returned for every failed request."""

    error: str = Field(..., description="Human-readable error message")


class UploadResponse(BaseModel):
    """Public URLs of uploaded objects, in upload order."""

    urls: List[str] = Field(default_factory=list, description="Public object URLs")


class OTPRequest(BaseModel):
    """Request body for OTP issuance."""

    email: Optional[str] = Field(None, description="Recipient email address")


class OTPResponse(BaseModel):
    """Response for OTP issuance."""

    message: str = Field(..., description="Confirmation message")
    token: str = Field(..., description="Signed assertion binding the email, valid for one hour")
