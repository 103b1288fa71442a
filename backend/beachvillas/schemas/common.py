"""Shared Pydantic v2 building blocks used across endpoint schemas."""

import uuid
from datetime import date
from typing import Annotated, Any

from pydantic import AliasChoices, BaseModel, BeforeValidator, ConfigDict, Field


def parse_compact_date(value: Any) -> Any:
    """Accept ``YYYYMMDD`` strings alongside ISO dates.

    Anything that is not an 8-digit string is passed through to Pydantic's
    regular date parsing.
    """
    if isinstance(value, str) and len(value) == 8 and value.isdigit():
        return date(int(value[:4]), int(value[4:6]), int(value[6:]))
    return value


FlexibleDate = Annotated[date, BeforeValidator(parse_compact_date)]


def id_field(name: str) -> Any:
    """Expose an ORM ``id`` column under a resource-specific key such as ``villa_id``."""
    return Field(validation_alias=AliasChoices(name, "id"))


class ORMModel(BaseModel):
    """Base for response schemas read straight from ORM objects."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class MessageResponse(BaseModel):
    """Generic message response."""

    message: str


class UserSummary(ORMModel):
    """Compact user card embedded in bookings, threads and reviews."""

    user_id: uuid.UUID = id_field("user_id")
    name: str
    profile_photo_url: str | None = None
    role: str
