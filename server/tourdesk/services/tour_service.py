"""Tour service for persistence operations."""

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import NotFoundError
from ..core.observability import metrics_collector
from ..models.tour import Tour
from ..schemas.tour import TeamMember, TourFields

logger = logging.getLogger(__name__)


def _document_values(fields: TourFields, images: List[str], team_members: List[TeamMember]) -> dict:
    """Column values for a complete tour document."""
    return {
        "title": fields.title,
        "description": fields.description,
        "price": fields.price,
        "language": fields.language,
        "city": fields.city,
        "category": fields.category,
        "date": fields.date,
        "time_slot": fields.time_slot,
        "meeting_point": fields.meeting_point,
        "images": list(images),
        "team_members": [member.model_dump(by_alias=True) for member in team_members],
    }


class TourService:
    """Service for tour-related operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_tour(
        self,
        fields: TourFields,
        images: List[str],
        team_members: List[TeamMember],
    ) -> Tour:
        """
        Create a new tour.

        Args:
            fields: Scalar tour fields
            images: Gallery image URLs in display order
            team_members: Team members with photos already assigned

        Returns:
            Created tour entity with its database-assigned ``tour_id``
        """
        tour = Tour(**_document_values(fields, images, team_members))

        try:
            self.db.add(tour)
            await self.db.commit()
            await self.db.refresh(tour)
        except Exception:
            await self.db.rollback()
            raise

        metrics_collector.record_tour_saved()
        logger.info(
            "Tour created successfully",
            extra={
                "tour_id": tour.tour_id,
                "title": tour.title,
                "images": len(tour.images),
                "team_members": len(tour.team_members),
            }
        )
        return tour

    async def list_tours(self) -> List[Tour]:
        """Return every tour in ``tour_id`` order."""
        result = await self.db.execute(select(Tour).order_by(Tour.tour_id))
        return list(result.scalars().all())

    async def list_titles(self) -> List[Optional[str]]:
        """Return the title of every tour in ``tour_id`` order."""
        result = await self.db.execute(select(Tour.title).order_by(Tour.tour_id))
        return list(result.scalars().all())

    async def get_tour_by_id(self, tour_id: int) -> Optional[Tour]:
        """
        Get tour by ID.

        Args:
            tour_id: Tour ID to search for

        Returns:
            Tour if found, None otherwise
        """
        stmt = select(Tour).where(Tour.tour_id == tour_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_tour_by_id_or_raise(self, tour_id: int) -> Tour:
        """
        Get tour by ID or raise NotFoundError.

        Raises:
            NotFoundError: If tour not found
        """
        tour = await self.get_tour_by_id(tour_id)
        if not tour:
            logger.warning(
                "Tour not found",
                extra={"tour_id": tour_id}
            )
            raise NotFoundError(resource_type="Tour")
        return tour

    async def replace_tour(
        self,
        tour_id: int,
        fields: TourFields,
        images: List[str],
        team_members: List[TeamMember],
    ) -> Tour:
        """
        Overwrite every mutable field of the tour with ``tour_id``.

        Raises:
            NotFoundError: If tour not found
        """
        tour = await self.get_tour_by_id_or_raise(tour_id)
        return await self.replace_loaded_tour(tour, fields, images, team_members)

    async def replace_loaded_tour(
        self,
        tour: Tour,
        fields: TourFields,
        images: List[str],
        team_members: List[TeamMember],
    ) -> Tour:
        """
        Overwrite every mutable field of a tour already loaded in this session.

        Fields missing from ``fields`` are cleared, not kept.
        """
        for column, value in _document_values(fields, images, team_members).items():
            setattr(tour, column, value)

        try:
            await self.db.commit()
            await self.db.refresh(tour)
        except Exception:
            await self.db.rollback()
            raise

        metrics_collector.record_tour_updated()
        logger.info(
            "Tour updated successfully",
            extra={"tour_id": tour.tour_id, "title": tour.title}
        )
        return tour
