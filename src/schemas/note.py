"""Pydantic schemas for study note endpoints."""
from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from core.config import get_settings
from models.entity_type import entity_key


class ExtractedReference(BaseModel):
    """An entity reference found in a note's rich-text content."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    target_type: str = Field(alias="targetType")
    target_id: str = Field(alias="targetId")
    display_text: str = Field(default="", alias="displayText")

    @property
    def key(self) -> str:
        """De-duplication key 'type:id'."""
        return entity_key(self.target_type, self.target_id)


def _check_content_length(value: str | None) -> str | None:
    limit = get_settings().max_note_content_length
    if value is not None and len(value) > limit:
        raise ValueError(f"Content exceeds maximum length of {limit:,} characters")
    return value


def _check_title_length(value: str | None) -> str | None:
    limit = get_settings().max_title_length
    if value is not None and len(value) > limit:
        raise ValueError(f"Title exceeds maximum length of {limit} characters")
    return value


class NoteCreate(BaseModel):
    """
    Schema for creating a study note.

    content_json is the editor document tree. When only content_json is sent, the
    plain-text content is derived from it.
    """

    title: str | None = None
    content: str | None = None
    content_json: dict[str, Any] | None = None

    @field_validator("title")
    @classmethod
    def validate_title_length(cls, v: str | None) -> str | None:
        """Validate title length."""
        return _check_title_length(v)

    @field_validator("content")
    @classmethod
    def validate_content_length(cls, v: str | None) -> str | None:
        """Validate content length."""
        return _check_content_length(v)

    @model_validator(mode="after")
    def check_not_empty(self) -> "NoteCreate":
        """A note needs a title, plain content or a document."""
        if not (self.title and self.title.strip()) and not self.content and not self.content_json:
            raise ValueError("Note must have a title or content")
        return self


class NoteUpdate(BaseModel):
    """Schema for updating a study note. Omitted fields are left unchanged."""

    title: str | None = None
    content: str | None = None
    content_json: dict[str, Any] | None = None

    @field_validator("title")
    @classmethod
    def validate_title_length(cls, v: str | None) -> str | None:
        """Validate title length."""
        return _check_title_length(v)

    @field_validator("content")
    @classmethod
    def validate_content_length(cls, v: str | None) -> str | None:
        """Validate content length."""
        return _check_content_length(v)


class NoteResponse(BaseModel):
    """Schema for study note responses."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str | None
    content: str
    content_json: dict[str, Any] | None
    extracted_references: list[ExtractedReference]
    created_at: datetime
    updated_at: datetime
