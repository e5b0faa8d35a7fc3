"""Study note CRUD endpoints."""
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session, get_current_user, get_current_user_optional
from models.entity_type import EntityType
from models.user import User
from schemas.note import NoteCreate, NoteResponse, NoteUpdate
from services import graph_service, note_service
from services.exceptions import FieldLimitExceededError, NotFoundError

router = APIRouter(prefix="/notes", tags=["notes"])


@router.post("/", response_model=NoteResponse, status_code=201)
async def create_note(
    data: NoteCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> NoteResponse:
    """Create a note; its references become backlinks."""
    try:
        note = await note_service.create_note(db, current_user.id, data)
    except FieldLimitExceededError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return NoteResponse.model_validate(note)


@router.get("/", response_model=list[NoteResponse])
async def list_notes(
    current_user: User | None = Depends(get_current_user_optional),
    db: AsyncSession = Depends(get_async_session),
) -> list[NoteResponse]:
    """List the caller's notes."""
    user_id = current_user.id if current_user else None
    notes = await note_service.list_notes(db, user_id)
    return [NoteResponse.model_validate(note) for note in notes]


@router.get("/{note_id}", response_model=NoteResponse)
async def get_note(
    note_id: UUID,
    current_user: User | None = Depends(get_current_user_optional),
    db: AsyncSession = Depends(get_async_session),
) -> NoteResponse:
    """Get a note by ID."""
    user_id = current_user.id if current_user else None
    note = await note_service.get_note(db, user_id, note_id)
    if note is None:
        raise HTTPException(status_code=404, detail="Note not found")
    return NoteResponse.model_validate(note)


@router.patch("/{note_id}", response_model=NoteResponse)
async def update_note(
    note_id: UUID,
    data: NoteUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> NoteResponse:
    """Update a note; its backlinks are replaced from the saved content."""
    try:
        note = await note_service.update_note(db, current_user.id, note_id, data)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Note not found")
    except FieldLimitExceededError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return NoteResponse.model_validate(note)


@router.delete("/{note_id}", status_code=204)
async def delete_note(
    note_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> None:
    """Delete a note with its links and backlinks."""
    try:
        await graph_service.cascade_delete_entity(db, current_user.id, EntityType.NOTE, note_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Note not found")
