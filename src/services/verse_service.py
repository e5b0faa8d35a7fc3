"""Service layer for verse captures and ayah range overlap lookup."""
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models.base import utcnow
from models.verse import Verse
from schemas.verse import VerseCreate, VerseUpdate
from services.exceptions import InvalidVerseRangeError, NotFoundError
from services.utils import require_user
from shared.quran import SURAH_COUNT, VerseRange


def validate_verse_range(
    surah_number: int,
    ayah_start: int,
    ayah_end: int | None = None,
) -> VerseRange:
    """
    Validate and build a range.

    Raises:
        InvalidVerseRangeError: If the surah is outside 1-114, ayah_start < 1 or
            ayah_end < ayah_start.
    """
    if not 1 <= surah_number <= SURAH_COUNT:
        raise InvalidVerseRangeError(
            f"Surah number must be between 1 and {SURAH_COUNT}, got {surah_number}",
        )
    if ayah_start < 1:
        raise InvalidVerseRangeError(f"Ayah start must be at least 1, got {ayah_start}")
    if ayah_end is not None and ayah_end < ayah_start:
        raise InvalidVerseRangeError(
            f"Ayah end ({ayah_end}) must not be before ayah start ({ayah_start})",
        )
    return VerseRange(surah_number, ayah_start, ayah_end)


async def get_verse(db: AsyncSession, user_id: UUID | None, verse_id: UUID) -> Verse | None:
    """Get a verse capture by ID, scoped to user."""
    if user_id is None:
        return None
    result = await db.execute(
        select(Verse).where(Verse.id == verse_id, Verse.user_id == user_id),
    )
    return result.scalar_one_or_none()


async def create_verse(db: AsyncSession, user_id: UUID | None, data: VerseCreate) -> Verse:
    """Save a verse capture. Search columns are derived from arabic_text on assignment."""
    user_id = require_user(user_id)
    validate_verse_range(data.surah_number, data.ayah_start, data.ayah_end)
    verse = Verse(user_id=user_id, **data.model_dump())
    db.add(verse)
    await db.flush()
    return verse


async def update_verse(
    db: AsyncSession,
    user_id: UUID | None,
    verse_id: UUID,
    data: VerseUpdate,
) -> Verse:
    """
    Patch a verse capture. The merged range is validated before anything is written.

    Sending ayah_end as null turns a range back into a single-ayah capture.
    """
    user_id = require_user(user_id)
    verse = await get_verse(db, user_id, verse_id)
    if verse is None:
        raise NotFoundError("verse", verse_id)

    updates = data.model_dump(exclude_unset=True)
    validate_verse_range(
        updates.get("surah_number") or verse.surah_number,
        updates.get("ayah_start") or verse.ayah_start,
        updates["ayah_end"] if "ayah_end" in updates else verse.ayah_end,
    )
    for field, value in updates.items():
        if field in ("surah_number", "ayah_start", "arabic_text") and value is None:
            continue
        setattr(verse, field, value)
    verse.updated_at = utcnow()

    await db.flush()
    return verse


async def find_overlapping(
    db: AsyncSession,
    user_id: UUID | None,
    surah_number: int,
    ayah_start: int,
    ayah_end: int | None = None,
    exclude_id: UUID | None = None,
) -> list[Verse]:
    """
    All of the user's captures in the surah that share at least one ayah with the range.

    Candidates come from the (user_id, surah_number) index and are filtered in memory.
    Every match is returned, ordered by ayah_start. exclude_id drops the capture being
    viewed from its own results.
    """
    query_range = validate_verse_range(surah_number, ayah_start, ayah_end)
    if user_id is None:
        return []

    stmt = (
        select(Verse)
        .where(Verse.user_id == user_id, Verse.surah_number == surah_number)
        .order_by(Verse.ayah_start, Verse.created_at)
    )
    result = await db.execute(stmt)
    return [
        verse for verse in result.scalars()
        if verse.id != exclude_id and verse.verse_range.overlaps(query_range)
    ]
