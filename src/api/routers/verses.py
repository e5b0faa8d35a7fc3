"""Verse capture endpoints."""
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session, get_current_user, get_current_user_optional
from models.entity_type import EntityType
from models.user import User
from schemas.verse import VerseCreate, VerseResponse, VerseUpdate
from services import graph_service, verse_service
from services.exceptions import InvalidVerseRangeError, NotFoundError
from shared.quran import SURAH_COUNT

router = APIRouter(prefix="/verses", tags=["verses"])


@router.post("/", response_model=VerseResponse, status_code=201)
async def create_verse(
    data: VerseCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> VerseResponse:
    """Save a verse capture."""
    try:
        verse = await verse_service.create_verse(db, current_user.id, data)
    except InvalidVerseRangeError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return VerseResponse.model_validate(verse)


# Fixed-path route declared before wildcard /{verse_id} routes.
@router.get("/overlapping", response_model=list[VerseResponse])
async def find_overlapping(
    surah_number: int = Query(ge=1, le=SURAH_COUNT),
    ayah_start: int = Query(ge=1),
    ayah_end: int | None = Query(default=None, ge=1),
    exclude_id: UUID | None = Query(default=None, description="Capture to leave out"),
    current_user: User | None = Depends(get_current_user_optional),
    db: AsyncSession = Depends(get_async_session),
) -> list[VerseResponse]:
    """Every saved capture sharing at least one ayah with the given range."""
    user_id = current_user.id if current_user else None
    try:
        verses = await verse_service.find_overlapping(
            db, user_id, surah_number, ayah_start, ayah_end, exclude_id,
        )
    except InvalidVerseRangeError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return [VerseResponse.model_validate(verse) for verse in verses]


@router.get("/{verse_id}", response_model=VerseResponse)
async def get_verse(
    verse_id: UUID,
    current_user: User | None = Depends(get_current_user_optional),
    db: AsyncSession = Depends(get_async_session),
) -> VerseResponse:
    """Get a verse capture by ID."""
    user_id = current_user.id if current_user else None
    verse = await verse_service.get_verse(db, user_id, verse_id)
    if verse is None:
        raise HTTPException(status_code=404, detail="Verse not found")
    return VerseResponse.model_validate(verse)


@router.patch("/{verse_id}", response_model=VerseResponse)
async def update_verse(
    verse_id: UUID,
    data: VerseUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> VerseResponse:
    """Update a verse capture."""
    try:
        verse = await verse_service.update_verse(db, current_user.id, verse_id, data)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Verse not found")
    except InvalidVerseRangeError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return VerseResponse.model_validate(verse)


@router.delete("/{verse_id}", status_code=204)
async def delete_verse(
    verse_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> None:
    """Delete a verse capture with its links and backlinks."""
    try:
        await graph_service.cascade_delete_entity(db, current_user.id, EntityType.VERSE, verse_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Verse not found")
