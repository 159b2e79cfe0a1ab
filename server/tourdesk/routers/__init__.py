"""FastAPI routers package."""

from .metrics import router as metrics_router
from .otp import router as otp_router
from .tour import router as tour_router
from .upload import router as upload_router

__all__ = [
    "metrics_router",
    "otp_router",
    "tour_router",
    "upload_router",
]
