"""Service layer for study notes; every save re-extracts references and replaces backlinks."""
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import get_settings
from models.base import utcnow
from models.study_note import StudyNote
from schemas.note import NoteCreate, NoteUpdate
from services import backlink_service
from services.exceptions import FieldLimitExceededError, NotFoundError
from services.reference_extractor import extract_references, plain_text
from services.utils import require_user


def _check_content_length(content: str) -> None:
    limit = get_settings().max_note_content_length
    if len(content) > limit:
        raise FieldLimitExceededError("content", len(content), limit)


async def _sync_references(db: AsyncSession, note: StudyNote) -> None:
    references = extract_references(note.content_json)
    note.extracted_references = [reference.model_dump() for reference in references]
    await backlink_service.replace_backlinks(
        db, note.user_id, note.id, references, note.content,
    )


async def create_note(db: AsyncSession, user_id: UUID | None, data: NoteCreate) -> StudyNote:
    """
    Create a note and its backlinks.

    Raises:
        UnauthorizedError: If there is no user.
        FieldLimitExceededError: If the content derived from content_json is too long.
    """
    user_id = require_user(user_id)
    content = data.content if data.content is not None else plain_text(data.content_json)
    _check_content_length(content)
    note = StudyNote(
        user_id=user_id,
        title=data.title,
        content=content,
        content_json=data.content_json,
    )
    db.add(note)
    await db.flush()
    await _sync_references(db, note)
    await db.flush()
    return note


async def get_note(db: AsyncSession, user_id: UUID | None, note_id: UUID) -> StudyNote | None:
    """Get a note by ID, scoped to user."""
    if user_id is None:
        return None
    result = await db.execute(
        select(StudyNote).where(StudyNote.id == note_id, StudyNote.user_id == user_id),
    )
    return result.scalar_one_or_none()


async def list_notes(db: AsyncSession, user_id: UUID | None) -> list[StudyNote]:
    """All of the user's notes, most recently updated first."""
    if user_id is None:
        return []
    result = await db.execute(
        select(StudyNote)
        .where(StudyNote.user_id == user_id)
        .order_by(StudyNote.updated_at.desc(), StudyNote.id.desc()),
    )
    return list(result.scalars().all())


async def update_note(
    db: AsyncSession,
    user_id: UUID | None,
    note_id: UUID,
    data: NoteUpdate,
) -> StudyNote:
    """
    Patch a note, then replace its backlinks from the saved document.

    When content_json changes without an explicit content, content is re-derived from it.

    Raises:
        UnauthorizedError: If there is no user.
        NotFoundError: If the note does not exist or belongs to another user.
        FieldLimitExceededError: If the content derived from content_json is too long.
    """
    user_id = require_user(user_id)
    note = await get_note(db, user_id, note_id)
    if note is None:
        raise NotFoundError("note", note_id)

    updates = data.model_dump(exclude_unset=True)
    if "content_json" in updates and "content" not in updates:
        updates["content"] = plain_text(updates["content_json"])
        _check_content_length(updates["content"])

    if "title" in updates:
        note.title = updates["title"]
    if "content_json" in updates:
        note.content_json = updates["content_json"]
    if "content" in updates:
        note.content = updates["content"] or ""
    note.updated_at = utcnow()

    await _sync_references(db, note)
    await db.flush()
    return note
