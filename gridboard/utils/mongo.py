"""
Helpers shared by the MongoDB-backed services
"""
from datetime import datetime, timezone
from typing import Optional

from bson import ObjectId
from bson.errors import InvalidId

from gridboard.core.exceptions import BadRequestException


def validate_object_id(value: str, resource: str = "resource") -> ObjectId:
    """
    Validate and convert string ID to ObjectId

    Raises:
        BadRequestException: If ID is invalid
    """
    # ObjectId(None) would mint a fresh id
    if not isinstance(value, (str, ObjectId)):
        raise BadRequestException(f"Invalid {resource} ID format: {value}")
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise BadRequestException(f"Invalid {resource} ID format: {value}")


def serialize(doc: Optional[dict]) -> Optional[dict]:
    """Turn a MongoDB document into its API shape (``_id`` becomes ``id``)"""
    if doc and "_id" in doc:
        doc["id"] = str(doc.pop("_id"))
    return doc


def utcnow() -> datetime:
    """Naive UTC timestamp, the form MongoDB hands back"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def as_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
