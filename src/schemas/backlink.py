"""Pydantic schemas for backlink endpoints."""
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from schemas.entity_link import EntityRef


class BacklinkResponse(BaseModel):
    """A note that references the requested entity."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    note_id: UUID
    target_type: str
    target_id: UUID
    display_text: str
    snippet: str
    created_at: datetime


class BacklinkWithNoteResponse(BacklinkResponse):
    """Backlink plus the referencing note's title."""

    note_title: str | None = None


class BacklinkCountResponse(BaseModel):
    """Number of notes referencing an entity."""

    count: int


class BacklinkCountsRequest(BaseModel):
    """Batched count request for list badges."""

    targets: list[EntityRef] = Field(max_length=500)


class BacklinkCountsResponse(BaseModel):
    """Counts keyed by 'type:id'. Every requested target has a key."""

    counts: dict[str, int]
