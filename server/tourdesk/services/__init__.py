"""Service layer package."""

from .mail_service import Mailer, SMTPMailer
from .otp_service import OTPService
from .storage_service import ObjectStorage, S3ObjectStorage
from .token_service import TokenSigner
from .tour_service import TourService

__all__ = [
    "Mailer",
    "OTPService",
    "ObjectStorage",
    "S3ObjectStorage",
    "SMTPMailer",
    "TokenSigner",
    "TourService",
]
