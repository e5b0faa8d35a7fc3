"""Word model - vocabulary entries with meanings and derived Arabic search fields."""
from typing import Any
from uuid import UUID

from sqlalchemy import JSON, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, validates

from models.base import Base, SearchableTextMixin, TimestampMixin, UUIDv7Mixin


class Word(Base, UUIDv7Mixin, TimestampMixin, SearchableTextMixin):
    """
    Vocabulary word.

    `meanings` is a list of {"definition", "usage_context", "examples"} objects.
    Assigning `text` re-derives the search columns.
    """

    __tablename__ = "words"

    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
    )
    text: Mapped[str] = mapped_column(Text, nullable=False)
    language: Mapped[str] = mapped_column(String(10), nullable=False, default="arabic")
    root_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("roots.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    part_of_speech: Mapped[str | None] = mapped_column(String(10), nullable=True)
    transliteration: Mapped[str | None] = mapped_column(String(200), nullable=True)
    meanings: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    aliases: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    @validates("text")
    def _index_text(self, _key: str, value: str) -> str:
        self.index_searchable_text(value)
        return value
