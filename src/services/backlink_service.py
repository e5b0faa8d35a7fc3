"""
Backlinks: the materialized inverse of entity references embedded in notes.

A note's backlink rows are always exactly the references extracted from its latest
save. They are replaced wholesale on every save, never patched.
"""
import logging
from collections.abc import Iterable
from uuid import UUID

from sqlalchemy import and_, delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from models.backlink import Backlink
from models.entity_type import EntityType, entity_key
from models.study_note import StudyNote
from schemas.backlink import BacklinkWithNoteResponse
from schemas.note import ExtractedReference
from services.utils import parse_uuid
from shared.arabic import extract_snippet

logger = logging.getLogger(__name__)

SNIPPET_CONTEXT = 50
VALID_TARGET_TYPES = frozenset(EntityType)


def snippet_for(content: str, display_text: str) -> str:
    """Context around the first occurrence of display_text, or the start of content."""
    if not content:
        return ""
    start = content.find(display_text) if display_text else -1
    if start < 0:
        return extract_snippet(content, 0, 0, SNIPPET_CONTEXT)
    return extract_snippet(content, start, start + len(display_text), SNIPPET_CONTEXT)


def _parse_target(reference: ExtractedReference) -> tuple[EntityType, UUID] | None:
    if reference.target_type not in VALID_TARGET_TYPES:
        return None
    target_id = parse_uuid(reference.target_id)
    if target_id is None:
        return None
    return EntityType(reference.target_type), target_id


async def replace_backlinks(
    db: AsyncSession,
    user_id: UUID,
    note_id: UUID,
    references: Iterable[ExtractedReference],
    content: str = "",
) -> list[Backlink]:
    """
    Replace the complete backlink set of a note with rows for references.

    References with an unknown type or malformed id are skipped, as is a reference from
    the note to itself. Runs inside the caller's transaction, so the delete and inserts
    commit or roll back together.
    """
    await db.execute(
        delete(Backlink).where(Backlink.user_id == user_id, Backlink.note_id == note_id),
    )

    rows: list[Backlink] = []
    seen: set[str] = set()
    for reference in references:
        target = _parse_target(reference)
        if target is None:
            logger.warning(
                "Skipping malformed reference %s in note %s", reference.key, note_id,
            )
            continue
        target_type, target_id = target
        key = entity_key(target_type, target_id)
        if key in seen or (target_type == EntityType.NOTE and target_id == note_id):
            continue
        seen.add(key)
        rows.append(Backlink(
            user_id=user_id,
            note_id=note_id,
            target_type=str(target_type),
            target_id=target_id,
            display_text=reference.display_text,
            snippet=snippet_for(content, reference.display_text),
        ))

    db.add_all(rows)
    await db.flush()
    logger.info("Replaced backlinks for note %s: %d references", note_id, len(rows))
    return rows


async def get_backlinks_for(
    db: AsyncSession,
    user_id: UUID | None,
    target_type: str,
    target_id: UUID,
) -> list[BacklinkWithNoteResponse]:
    """Notes referencing an entity, newest first, with each note's title."""
    if user_id is None:
        return []
    stmt = (
        select(Backlink, StudyNote.title)
        .outerjoin(StudyNote, StudyNote.id == Backlink.note_id)
        .where(
            Backlink.user_id == user_id,
            Backlink.target_type == target_type,
            Backlink.target_id == target_id,
        )
        .order_by(Backlink.created_at.desc(), Backlink.id.desc())
    )
    result = await db.execute(stmt)
    backlinks = []
    for backlink, note_title in result.all():
        item = BacklinkWithNoteResponse.model_validate(backlink)
        item.note_title = note_title
        backlinks.append(item)
    return backlinks


async def get_backlinks_count(
    db: AsyncSession,
    user_id: UUID | None,
    target_type: str,
    target_id: UUID,
) -> int:
    """Number of notes referencing an entity."""
    if user_id is None:
        return 0
    stmt = select(func.count()).select_from(Backlink).where(
        Backlink.user_id == user_id,
        Backlink.target_type == target_type,
        Backlink.target_id == target_id,
    )
    return await db.scalar(stmt) or 0


async def get_backlinks_for_many(
    db: AsyncSession,
    user_id: UUID | None,
    targets: Iterable[tuple[str, UUID]],
) -> dict[str, int]:
    """
    Backlink counts for many targets in one grouped query.

    Returns a map keyed by 'type:id' with an entry (possibly 0) for every target.
    """
    unique_targets = list(dict.fromkeys((str(t), i) for t, i in targets))
    counts = {entity_key(t, i): 0 for t, i in unique_targets}
    if user_id is None or not unique_targets:
        return counts

    conditions = [
        and_(Backlink.target_type == t, Backlink.target_id == i) for t, i in unique_targets
    ]
    stmt = (
        select(Backlink.target_type, Backlink.target_id, func.count())
        .where(Backlink.user_id == user_id, or_(*conditions))
        .group_by(Backlink.target_type, Backlink.target_id)
    )
    result = await db.execute(stmt)
    for target_type, target_id, count in result.all():
        counts[entity_key(target_type, target_id)] = count
    return counts


async def get_outgoing_from_note(
    db: AsyncSession,
    user_id: UUID | None,
    note_id: UUID,
) -> list[Backlink]:
    """Backlink rows owned by a note, i.e. what the note references."""
    if user_id is None:
        return []
    stmt = (
        select(Backlink)
        .where(Backlink.user_id == user_id, Backlink.note_id == note_id)
        .order_by(Backlink.created_at, Backlink.id)
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def delete_backlinks_for_note(db: AsyncSession, user_id: UUID, note_id: UUID) -> int:
    """Delete every backlink a note owns."""
    result = await db.execute(
        delete(Backlink).where(Backlink.user_id == user_id, Backlink.note_id == note_id),
    )
    return result.rowcount


async def delete_backlinks_to(
    db: AsyncSession,
    user_id: UUID,
    target_type: str,
    target_id: UUID,
) -> int:
    """Delete every backlink pointing at an entity."""
    result = await db.execute(
        delete(Backlink).where(
            Backlink.user_id == user_id,
            Backlink.target_type == target_type,
            Backlink.target_id == target_id,
        ),
    )
    return result.rowcount
