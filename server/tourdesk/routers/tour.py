"""Tour router for tour content operations."""

import logging
from typing import List, Tuple

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.exceptions import HTTPException

from ..core.config import settings
from ..core.database import get_db
from ..core.dependencies import WriteGuard, get_object_storage
from ..core.exceptions import ApiError, ServiceError
from ..models.tour import Tour as TourModel
from ..schemas.common import MessageResponse
from ..schemas.tour import TeamMember, Tour, TourFields, TourTitle, UpdateTourResponse
from ..services.storage_service import ObjectStorage
from ..services.tour_form import (
    GALLERY_FIELD,
    MEMBER_PHOTO_PREFIX,
    TEAM_MEMBERS_FIELD,
    UploadPartition,
    assign_member_photos,
    classify_uploads,
    parse_team_members,
    parse_tour_fields,
)
from ..services.tour_service import TourService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["tour"])


def _serialize(tour: TourModel) -> dict:
    return Tour.model_validate(tour).model_dump(mode="json", by_alias=True)


async def _read_submission(request: Request) -> Tuple[TourFields, List[dict], UploadPartition]:
    """Parse a multipart tour submission; raises ValidationError before any upload."""
    form = await request.form(max_files=settings.tour_max_files)
    raw_members = form.get(TEAM_MEMBERS_FIELD)
    members = parse_team_members(raw_members if isinstance(raw_members, str) else None)
    fields = parse_tour_fields(form)
    partition = classify_uploads(form.multi_items())
    return fields, members, partition


async def _store_media(
    storage: ObjectStorage,
    partition: UploadPartition,
    members: List[dict],
) -> Tuple[List[str], List[TeamMember]]:
    """Upload gallery images and member photos, then pair photos with members."""
    images = await storage.upload_many(partition.gallery, GALLERY_FIELD)
    photo_urls = await storage.upload_many(partition.member_photos, MEMBER_PHOTO_PREFIX)
    return images, assign_member_photos(members, photo_urls)


@router.post("/saveTour", response_model=MessageResponse, dependencies=[WriteGuard])
async def save_tour(
    request: Request,
    db: AsyncSession = Depends(get_db),
    storage: ObjectStorage = Depends(get_object_storage),
) -> JSONResponse:
    """
    Create a tour from a multipart submission.

    Gallery files go under ``swiperImages``; member photos under
    ``teamMemberPhoto<n>`` in the same order as the ``teamMembers`` array.
    """
    tour_service = TourService(db)

    try:
        fields, members, partition = await _read_submission(request)
        images, team_members = await _store_media(storage, partition, members)
        await tour_service.create_tour(fields, images, team_members)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(
            "Error saving tour",
            extra={"error": str(e)},
            exc_info=True
        )
        raise ServiceError("Internal server error")

    return JSONResponse(
        status_code=200,
        content=MessageResponse(message="Tour saved successfully").model_dump()
    )


@router.get("/getRatings", response_model=List[Tour])
async def get_ratings(db: AsyncSession = Depends(get_db)) -> JSONResponse:
    """Return every tour as a full document."""
    try:
        tours = await TourService(db).list_tours()
    except Exception as e:
        logger.error("Error listing tours", extra={"error": str(e)}, exc_info=True)
        raise ApiError(status_code=400, message=str(e))

    return JSONResponse(status_code=200, content=[_serialize(tour) for tour in tours])


@router.get("/getTourTitles", response_model=List[TourTitle])
async def get_tour_titles(db: AsyncSession = Depends(get_db)) -> JSONResponse:
    """Return only the title of every tour."""
    try:
        titles = await TourService(db).list_titles()
    except Exception as e:
        logger.error("Error fetching tour titles", extra={"error": str(e)}, exc_info=True)
        raise ServiceError("Failed to fetch tour titles")

    return JSONResponse(
        status_code=200,
        content=[TourTitle(title=title).model_dump() for title in titles]
    )


@router.get("/getTourDetails/{tourId}", response_model=Tour)
async def get_tour_details(tourId: int, db: AsyncSession = Depends(get_db)) -> JSONResponse:
    """Return one tour by its sequential id."""
    try:
        tour = await TourService(db).get_tour_by_id_or_raise(tourId)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(
            "Error fetching tour details",
            extra={"tour_id": tourId, "error": str(e)},
            exc_info=True
        )
        raise ServiceError("Failed to fetch tour details")

    return JSONResponse(status_code=200, content=_serialize(tour))


@router.post("/updateTour/{tourId}", response_model=UpdateTourResponse, dependencies=[WriteGuard])
async def update_tour(
    tourId: int,
    request: Request,
    db: AsyncSession = Depends(get_db),
    storage: ObjectStorage = Depends(get_object_storage),
) -> JSONResponse:
    """
    Replace a tour with a new multipart submission.

    This is a full replacement: fields left out of the form are cleared and
    the image and team lists are rebuilt from the uploaded files.
    """
    tour_service = TourService(db)

    try:
        fields, members, partition = await _read_submission(request)
        # 404 before touching object storage
        tour = await tour_service.get_tour_by_id_or_raise(tourId)
        images, team_members = await _store_media(storage, partition, members)
        tour = await tour_service.replace_loaded_tour(tour, fields, images, team_members)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(
            "Error updating tour",
            extra={"tour_id": tourId, "error": str(e)},
            exc_info=True
        )
        raise ServiceError("Internal server error")

    response_data = UpdateTourResponse(
        message="Tour updated successfully",
        updated_tour=Tour.model_validate(tour),
    )
    return JSONResponse(
        status_code=200,
        content=response_data.model_dump(mode="json", by_alias=True)
    )
