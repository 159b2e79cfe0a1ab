#!/usr/bin/env python3
"""Create the tours table and optionally seed a sample tour."""

import asyncio
import logging
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

# Add the server directory to the Python path
server_dir = Path(__file__).parent.parent / "server"
sys.path.insert(0, str(server_dir))

from tourdesk.core.database import async_session_factory, close_db, init_db
from tourdesk.schemas.tour import TeamMember, TourFields
from tourdesk.services.tour_service import TourService

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


async def create_sample_data():
    """Insert one sample tour unless the table already has rows."""
    logger.info("Creating sample data...")

    async with async_session_factory() as db:
        service = TourService(db)
        if await service.list_titles():
            logger.info("Sample data already exists, skipping...")
            return

        tour = await service.create_tour(
            TourFields(
                title="Old Town Walking Tour",
                description="Two hours through the historic centre with a local guide",
                price=25.0,
                language="English",
                city="Prague",
                category="Walking",
                date=datetime.now(timezone.utc) + timedelta(days=30),
                time_slot="10:00-12:00",
                meeting_point="Astronomical Clock",
            ),
            images=[],
            team_members=[TeamMember(name="Jana", description="Historian", is_leader=True)],
        )
        logger.info(f"Sample tour created with tourId {tour.tour_id}")


async def main(seed: bool):
    logger.info("Initializing tour database...")
    try:
        await init_db()
        logger.info("Tables created")
        if seed:
            await create_sample_data()
    finally:
        await close_db()
    logger.info("Done. Start the API with: cd server && uvicorn tourdesk.main:app --reload")


if __name__ == "__main__":
    asyncio.run(main(seed="--seed" in sys.argv[1:]))
