"""Root model - the three or four letter stem Arabic words derive from."""
from uuid import UUID

from sqlalchemy import ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base, TimestampMixin, UUIDv7Mixin


class Root(Base, UUIDv7Mixin, TimestampMixin):
    """Arabic root, e.g. letters 'ك-ت-ب' latinized as 'k-t-b'."""

    __tablename__ = "roots"

    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
    )
    letters: Mapped[str] = mapped_column(String(20), nullable=False)
    latinized: Mapped[str] = mapped_column(String(20), nullable=False)
    core_meaning: Mapped[str] = mapped_column(Text, nullable=False, default="")
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        Index("ix_roots_user_latinized", "user_id", "latinized"),
    )
