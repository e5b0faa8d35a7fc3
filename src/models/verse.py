"""Verse model - a saved Quran capture covering one ayah or a range within a surah."""
from uuid import UUID

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, validates

from models.base import Base, SearchableTextMixin, TimestampMixin, UUIDv7Mixin
from shared.quran import VerseRange, format_verse_ref


class Verse(Base, UUIDv7Mixin, TimestampMixin, SearchableTextMixin):
    """
    Verse capture: surah_number in [1, 114], ayah_start >= 1 and an optional
    ayah_end >= ayah_start. A capture without ayah_end covers a single ayah.
    """

    __tablename__ = "verses"

    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
    )
    surah_number: Mapped[int] = mapped_column(Integer, nullable=False)
    surah_name_arabic: Mapped[str | None] = mapped_column(String(100), nullable=True)
    surah_name_english: Mapped[str | None] = mapped_column(String(100), nullable=True)
    ayah_start: Mapped[int] = mapped_column(Integer, nullable=False)
    ayah_end: Mapped[int | None] = mapped_column(Integer, nullable=True)
    arabic_text: Mapped[str] = mapped_column(Text, nullable=False, default="")
    translation: Mapped[str | None] = mapped_column(Text, nullable=True)
    topic: Mapped[str | None] = mapped_column(String(200), nullable=True)

    __table_args__ = (
        CheckConstraint("surah_number BETWEEN 1 AND 114", name="ck_verse_surah_range"),
        CheckConstraint("ayah_start >= 1", name="ck_verse_ayah_start"),
        CheckConstraint(
            "ayah_end IS NULL OR ayah_end >= ayah_start",
            name="ck_verse_ayah_order",
        ),
        Index("ix_verses_user_surah", "user_id", "surah_number"),
    )

    @property
    def verse_range(self) -> VerseRange:
        return VerseRange(self.surah_number, self.ayah_start, self.ayah_end)

    @property
    def effective_end(self) -> int:
        """Last ayah covered by the capture."""
        return self.verse_range.effective_end

    @property
    def reference(self) -> str:
        return format_verse_ref(self.surah_number, self.ayah_start, self.ayah_end)

    @validates("arabic_text")
    def _index_arabic_text(self, _key: str, value: str) -> str:
        self.index_searchable_text(value)
        return value
