"""
Base schema classes.

Response schemas read from ORM models and must inherit BaseResponseSchema so
UUIDs and datetimes serialize consistently.
"""

from datetime import datetime
from uuid import UUID
from pydantic import BaseModel, ConfigDict


class BaseResponseSchema(BaseModel):
    """Base class for response schemas built from ORM objects."""
    model_config = ConfigDict(
        from_attributes=True,
        json_encoders={
            UUID: str,
            datetime: lambda v: v.isoformat() if v else None,
        },
        populate_by_name=True,
    )


class BaseCreateSchema(BaseModel):
    """Base class for request bodies; unknown fields are ignored."""
    model_config = ConfigDict(
        extra='ignore',
    )


class PaginatedResponse(BaseModel):
    """Common pagination envelope fields."""
    total: int
    page: int = 1
    size: int = 20
    pages: int = 1
