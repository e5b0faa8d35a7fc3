"""Backlink model - materialized inverse of the references embedded in a note."""
from uuid import UUID

from sqlalchemy import ForeignKey, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base, TimestampMixin, UUIDv7Mixin


class Backlink(Base, UUIDv7Mixin, TimestampMixin):
    """
    One row per unique (note, target) reference.

    The set of rows for a note is replaced in full on every save of that note.
    """

    __tablename__ = "backlinks"

    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
    )
    note_id: Mapped[UUID] = mapped_column(
        ForeignKey("study_notes.id", ondelete="CASCADE"),
        nullable=False,
    )
    target_type: Mapped[str] = mapped_column(String(20), nullable=False)
    target_id: Mapped[UUID] = mapped_column(nullable=False)
    display_text: Mapped[str] = mapped_column(Text, nullable=False, default="")
    snippet: Mapped[str] = mapped_column(Text, nullable=False, default="")

    __table_args__ = (
        UniqueConstraint("note_id", "target_type", "target_id", name="uq_backlink"),
        Index("ix_backlinks_note", "user_id", "note_id"),
        Index("ix_backlinks_target", "user_id", "target_type", "target_id"),
    )
