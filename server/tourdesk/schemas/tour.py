"""Tour-related Pydantic schemas."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base schema exposing camelCase field names on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class TeamMember(CamelModel):
    """A guide or staff member presented on a tour page."""

    name: Optional[str] = Field(None, description="Member name")
    description: Optional[str] = Field(None, description="Short biography")
    photo: Optional[str] = Field(None, description="Public photo URL")
    is_leader: bool = Field(False, description="Whether the member leads the tour")


class TourFields(CamelModel):
    """Scalar tour fields submitted as multipart form values."""

    title: Optional[str] = Field(None, description="Tour title")
    description: Optional[str] = Field(None, description="Tour description")
    price: Optional[float] = Field(None, description="Tour price")
    language: Optional[str] = Field(None, description="Language the tour is held in")
    city: Optional[str] = Field(None, description="City")
    category: Optional[str] = Field(None, description="Tour category")
    date: Optional[datetime] = Field(None, description="Tour date (ISO 8601)")
    time_slot: Optional[str] = Field(None, description="Time slot label")
    meeting_point: Optional[str] = Field(None, description="Meeting point")

    @field_validator("price", "date", mode="before")
    @classmethod
    def blank_as_missing(cls, v):
        """Treat empty form values as absent."""
        if isinstance(v, str) and not v.strip():
            return None
        return v


class Tour(CamelModel):
    """Tour response schema."""

    tour_id: int = Field(..., description="Server-assigned sequential tour ID")
    title: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = None
    language: Optional[str] = None
    city: Optional[str] = None
    category: Optional[str] = None
    date: Optional[datetime] = None
    time_slot: Optional[str] = None
    meeting_point: Optional[str] = None
    images: List[str] = Field(default_factory=list, description="Gallery image URLs in display order")
    team_members: List[TeamMember] = Field(default_factory=list, description="Team members in display order")
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class TourTitle(BaseModel):
    """Title-only projection of a tour."""

    title: Optional[str] = None


class UpdateTourResponse(CamelModel):
    """Response for a successful full replacement of a tour."""

    message: str
    updated_tour: Tour
