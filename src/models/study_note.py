"""StudyNote model - rich-text notes whose embedded references feed the backlink graph."""
from typing import Any
from uuid import UUID

from sqlalchemy import JSON, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base, TimestampMixin, UUIDv7Mixin


class StudyNote(Base, UUIDv7Mixin, TimestampMixin):
    """
    Study note.

    content_json holds the editor document tree; content is its plain-text rendering
    (used for search and backlink snippets). extracted_references is the
    de-duplicated reference list from the most recent save.
    """

    __tablename__ = "study_notes"

    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
    )
    title: Mapped[str | None] = mapped_column(String(500), nullable=True)
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    content_json: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    extracted_references: Mapped[list[dict[str, str]]] = mapped_column(
        JSON, nullable=False, default=list,
    )
