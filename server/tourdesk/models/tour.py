"""Tour model definition."""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Float, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from ..core.database import Base


class Tour(Base):
    """Tour entity representing a bookable guided tour and its media."""

    __tablename__ = "tours"
    # Never reuse ids of deleted rows on SQLite
    __table_args__ = {"sqlite_autoincrement": True}

    # Server-assigned sequential id
    tour_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Tour information
    title: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    price: Mapped[float | None] = mapped_column(Float, nullable=True)
    language: Mapped[str | None] = mapped_column(String(100), nullable=True)
    city: Mapped[str | None] = mapped_column(String(255), nullable=True)
    category: Mapped[str | None] = mapped_column(String(255), nullable=True)
    date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    time_slot: Mapped[str | None] = mapped_column(String(100), nullable=True)
    meeting_point: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Media, stored in caller order
    images: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    team_members: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now()
    )

    def __repr__(self) -> str:
        return f"<Tour(tour_id={self.tour_id}, title='{self.title}')>"
