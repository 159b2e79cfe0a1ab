"""Upload router for storing images in the public bucket."""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from starlette.datastructures import UploadFile

from ..core.config import settings
from ..core.dependencies import WriteGuard, get_object_storage
from ..core.exceptions import ServiceError
from ..schemas.common import UploadResponse
from ..services.storage_service import ObjectStorage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["upload"])


@router.post("/upload", response_model=UploadResponse, dependencies=[WriteGuard])
async def upload_files(
    request: Request,
    storage: ObjectStorage = Depends(get_object_storage),
) -> JSONResponse:
    """
    Upload files under any field names and return their public URLs.

    URLs come back in upload order. A failed upload aborts the request with
    500; files stored before the failure are not removed.
    """
    form = await request.form(max_files=settings.upload_max_files)
    files = [(name, value) for name, value in form.multi_items() if isinstance(value, UploadFile)]

    urls = []
    try:
        for field_name, file in files:
            urls.append(await storage.upload(file, field_name))
    except Exception as e:
        logger.error(
            "Error uploading files",
            extra={"uploaded": len(urls), "requested": len(files), "error": str(e)},
            exc_info=True
        )
        raise ServiceError("Failed to upload files")

    logger.info("Files uploaded", extra={"count": len(urls)})
    return JSONResponse(
        status_code=200,
        content=UploadResponse(urls=urls).model_dump()
    )
