"""Pydantic schemas for verse capture endpoints."""
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from shared.quran import SURAH_COUNT


class VerseCreate(BaseModel):
    """Schema for saving a verse capture."""

    surah_number: int = Field(ge=1, le=SURAH_COUNT)
    ayah_start: int = Field(ge=1)
    ayah_end: int | None = Field(default=None, ge=1)
    surah_name_arabic: str | None = None
    surah_name_english: str | None = None
    arabic_text: str = ""
    translation: str | None = None
    topic: str | None = None

    @model_validator(mode="after")
    def check_ayah_order(self) -> "VerseCreate":
        """Reject ranges that end before they start."""
        if self.ayah_end is not None and self.ayah_end < self.ayah_start:
            raise ValueError("ayah_end must be greater than or equal to ayah_start")
        return self


class VerseUpdate(BaseModel):
    """
    Schema for updating a verse capture.

    The merged range is validated by the service, since either end may be omitted here.
    """

    surah_number: int | None = Field(default=None, ge=1, le=SURAH_COUNT)
    ayah_start: int | None = Field(default=None, ge=1)
    ayah_end: int | None = Field(default=None, ge=1)
    surah_name_arabic: str | None = None
    surah_name_english: str | None = None
    arabic_text: str | None = None
    translation: str | None = None
    topic: str | None = None


class VerseResponse(BaseModel):
    """Schema for verse capture responses."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    surah_number: int
    ayah_start: int
    ayah_end: int | None
    reference: str
    surah_name_arabic: str | None
    surah_name_english: str | None
    arabic_text: str
    diacritic_stripped_text: str
    translation: str | None
    topic: str | None
    created_at: datetime
    updated_at: datetime
