"""Normalisation of multipart tour submissions.

Save and update receive the same form: scalar fields, a JSON-encoded
``teamMembers`` field, gallery files under ``swiperImages`` and member photos
under ``teamMemberPhoto<n>``. Files are classified once into an
``UploadPartition``; member photos are matched to members by position only.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional, Tuple

from pydantic import ValidationError as PydanticValidationError
from starlette.datastructures import UploadFile

from ..core.exceptions import ValidationError
from ..schemas.tour import TeamMember, TourFields

logger = logging.getLogger(__name__)

GALLERY_FIELD = "swiperImages"
MEMBER_PHOTO_PREFIX = "teamMemberPhoto"
TEAM_MEMBERS_FIELD = "teamMembers"
MEMBER_TEXT_FIELDS = ("name", "description")

TOUR_TEXT_FIELDS = (
    "title",
    "description",
    "price",
    "language",
    "city",
    "category",
    "date",
    "timeSlot",
    "meetingPoint",
)


@dataclass
class UploadPartition:
    """File parts of a tour submission, split by role, each in upload order."""

    gallery: List[UploadFile] = field(default_factory=list)
    member_photos: List[UploadFile] = field(default_factory=list)


def classify_uploads(items: Iterable[Tuple[str, Any]]) -> UploadPartition:
    """
    Split multipart items into gallery images and team member photos.

    Args:
        items: ``(field_name, value)`` pairs in the order they were received

    Returns:
        UploadPartition with both lists in upload order. Text values and
        files under any other field name are left out.
    """
    partition = UploadPartition()
    for name, value in items:
        if not isinstance(value, UploadFile):
            continue
        if name == GALLERY_FIELD:
            partition.gallery.append(value)
        elif name.startswith(MEMBER_PHOTO_PREFIX):
            partition.member_photos.append(value)
        else:
            logger.debug("Ignoring file under unknown field", extra={"field": name})
    return partition


def parse_team_members(raw: Optional[str]) -> List[dict]:
    """
    Decode the JSON-encoded ``teamMembers`` form value.

    Scalar ``name`` and ``description`` values are cast to strings; nested
    arrays or objects there are rejected.

    Raises:
        ValidationError: If the value is missing, not JSON, not an array, or
            holds anything other than objects.
    """
    if raw is None:
        raise ValidationError("Invalid teamMembers format")
    try:
        members = json.loads(raw)
    except (TypeError, ValueError) as e:
        logger.warning("Error parsing teamMembers", extra={"error": str(e)})
        raise ValidationError("Invalid teamMembers format")
    if not isinstance(members, list) or not all(isinstance(m, dict) for m in members):
        logger.warning("teamMembers is not an array of objects")
        raise ValidationError("Invalid teamMembers format")
    return [_normalise_member(member) for member in members]


def _normalise_member(member: dict) -> dict:
    normalised = dict(member)
    for key in MEMBER_TEXT_FIELDS:
        value = member.get(key)
        if value is None or isinstance(value, str):
            continue
        if isinstance(value, (dict, list)):
            logger.warning("teamMembers entry has a nested value", extra={"field": key})
            raise ValidationError("Invalid teamMembers format")
        # JSON spelling for booleans, so true stays "true"
        normalised[key] = json.dumps(value) if isinstance(value, bool) else str(value)
    return normalised


def _is_leader(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return isinstance(value, str) and value.strip().lower() == "true"


def assign_member_photos(members: List[dict], photo_urls: List[str]) -> List[TeamMember]:
    """
    Pair each member with the photo URL at the same position.

    Members past the end of ``photo_urls`` get no photo; surplus URLs are
    dropped.
    """
    return [
        TeamMember(
            name=member.get("name"),
            description=member.get("description"),
            photo=photo_urls[index] if index < len(photo_urls) else None,
            is_leader=_is_leader(member.get("isLeader")),
        )
        for index, member in enumerate(members)
    ]


def parse_tour_fields(form: Any) -> TourFields:
    """
    Validate the scalar tour fields of a multipart form.

    Absent fields come back as ``None`` so a full replacement clears them.

    Raises:
        ValidationError: If ``price`` or ``date`` cannot be parsed.
    """
    values = {}
    for name in TOUR_TEXT_FIELDS:
        value = form.get(name)
        if isinstance(value, str):
            values[name] = value
    try:
        return TourFields.model_validate(values)
    except PydanticValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first.get("loc", ()))
        raise ValidationError(f"Invalid {location}: {first.get('msg', 'invalid value')}")
