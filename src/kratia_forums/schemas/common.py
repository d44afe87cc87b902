"""Shared Pydantic schemas for common API elements."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serializing with the camelCase field names of stored documents."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Cursor(CamelModel):
    """Opaque pagination cursor returned by list endpoints."""

    before: str | None = Field(None, description="Pass back to fetch the next page.")
