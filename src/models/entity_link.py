"""EntityLink model for user-authored directed edges between study entities."""
from uuid import UUID

from sqlalchemy import CheckConstraint, ForeignKey, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base, TimestampMixin, UUIDv7Mixin


class EntityLink(Base, UUIDv7Mixin, TimestampMixin):
    """
    Directed, typed edge between any two entities.

    Edges are queryable from both ends: outgoing through the source index, incoming
    through the target index.
    """

    __tablename__ = "entity_links"

    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
    )

    # Polymorphic endpoints - no FK to entity tables
    source_type: Mapped[str] = mapped_column(String(20), nullable=False)
    source_id: Mapped[UUID] = mapped_column(nullable=False)
    target_type: Mapped[str] = mapped_column(String(20), nullable=False)
    target_id: Mapped[UUID] = mapped_column(nullable=False)

    relationship_type: Mapped[str] = mapped_column(String(30), nullable=False)
    note: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        # One edge per ordered (source, target) pair, regardless of relationship type
        UniqueConstraint(
            "user_id", "source_type", "source_id", "target_type", "target_id",
            name="uq_entity_link",
        ),
        CheckConstraint(
            "NOT (source_type = target_type AND source_id = target_id)",
            name="ck_entity_link_no_self",
        ),
        Index("ix_entity_links_source", "user_id", "source_type", "source_id"),
        Index("ix_entity_links_target", "user_id", "target_type", "target_id"),
    )
