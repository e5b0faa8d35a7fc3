"""Hadith model."""
from uuid import UUID

from sqlalchemy import ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, validates

from models.base import Base, SearchableTextMixin, TimestampMixin, UUIDv7Mixin


class Hadith(Base, UUIDv7Mixin, TimestampMixin, SearchableTextMixin):
    """Hadith referenced as '{collection} #{hadith_number}'."""

    __tablename__ = "hadiths"

    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
    )
    collection: Mapped[str] = mapped_column(String(100), nullable=False)
    book_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    hadith_number: Mapped[str] = mapped_column(String(50), nullable=False)
    grading: Mapped[str | None] = mapped_column(String(10), nullable=True)
    arabic_text: Mapped[str] = mapped_column(Text, nullable=False, default="")
    translation: Mapped[str | None] = mapped_column(Text, nullable=True)
    topic: Mapped[str | None] = mapped_column(String(200), nullable=True)
    narrator_chain: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        Index("ix_hadiths_user_collection", "user_id", "collection"),
    )

    @validates("arabic_text")
    def _index_arabic_text(self, _key: str, value: str) -> str:
        self.index_searchable_text(value)
        return value
