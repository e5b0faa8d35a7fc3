"""SQLAlchemy declarative base with common mixins."""
from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy import JSON, DateTime, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from uuid6 import uuid7

from shared.arabic import build_searchable_text


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(UTC)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class UUIDv7Mixin:
    """
    Mixin that adds a time-ordered UUIDv7 primary key.

    The id is generated client-side so it is available before flush, which lets
    services build graph edges to a new entity within the same unit of work.
    """

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid7)


class TimestampMixin:
    """
    Mixin that adds created_at and updated_at columns.

    Timestamps are generated in Python (UTC) rather than by the server so they are
    populated on the instance after flush without a refresh round trip. Services set
    updated_at explicitly when they patch a row.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
        index=True,
    )


class SearchableTextMixin:
    """
    Derived Arabic search columns.

    Models call index_searchable_text() from an attribute validator on their Arabic
    source column, so diacritic_stripped_text is always a function of the raw text.
    """

    normalized_text: Mapped[str] = mapped_column(Text, nullable=False, default="")
    diacritic_stripped_text: Mapped[str] = mapped_column(Text, nullable=False, default="")
    search_tokens: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    def index_searchable_text(self, raw_text: str | None) -> None:
        """Recompute the derived search columns from raw_text."""
        searchable = build_searchable_text(raw_text)
        self.normalized_text = searchable.normalized_text
        self.diacritic_stripped_text = searchable.diacritic_stripped_text
        self.search_tokens = searchable.search_tokens
