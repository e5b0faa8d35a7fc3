"""Pydantic schemas for entity link endpoints."""
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_validator

from core.config import get_settings
from models.entity_type import EntityType, RelationshipType


def validate_link_note(value: str | None) -> str | None:
    """Validate a link note against the configured maximum length."""
    limit = get_settings().max_link_note_length
    if value is not None and len(value) > limit:
        raise ValueError(f"Link note exceeds maximum length of {limit} characters")
    return value


class EntityRef(BaseModel):
    """Composite (type, id) key of any study entity."""

    type: EntityType
    id: UUID


class EntityLinkCreate(BaseModel):
    """Schema for creating a directed link between two entities."""

    source_type: EntityType
    source_id: UUID
    target_type: EntityType
    target_id: UUID
    relationship_type: RelationshipType = RelationshipType.RELATED
    note: str | None = None

    @field_validator("note")
    @classmethod
    def validate_note_length(cls, v: str | None) -> str | None:
        """Validate note length."""
        return validate_link_note(v)


class EntityLinkUpdate(BaseModel):
    """Schema for patching a link. Omitted fields are left unchanged."""

    relationship_type: RelationshipType | None = None
    note: str | None = None

    @field_validator("note")
    @classmethod
    def validate_note_length(cls, v: str | None) -> str | None:
        """Validate note length."""
        return validate_link_note(v)


class EntityLinkResponse(BaseModel):
    """Schema for a single link."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    source_type: str
    source_id: UUID
    target_type: str
    target_id: UUID
    relationship_type: str
    note: str | None
    created_at: datetime
    updated_at: datetime


class EntitySummary(BaseModel):
    """Current display data of a linked entity."""

    type: EntityType
    id: UUID
    display_text: str
    subtitle: str | None = None


class HydratedLinkResponse(EntityLinkResponse):
    """
    A link plus the entity at its far end.

    entity is None when the linked entity no longer exists; the link is still returned.
    """

    entity: EntitySummary | None = None


class EntityLinksResponse(BaseModel):
    """Both directions of an entity's links."""

    outgoing: list[HydratedLinkResponse]
    incoming: list[HydratedLinkResponse]
