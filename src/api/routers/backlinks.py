"""Backlink query endpoints."""
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session, get_current_user_optional
from models.entity_type import EntityType
from models.user import User
from schemas.backlink import (
    BacklinkCountResponse,
    BacklinkCountsRequest,
    BacklinkCountsResponse,
    BacklinkResponse,
    BacklinkWithNoteResponse,
)
from services import backlink_service

router = APIRouter(prefix="/backlinks", tags=["backlinks"])


@router.post("/counts", response_model=BacklinkCountsResponse)
async def get_backlink_counts(
    data: BacklinkCountsRequest,
    current_user: User | None = Depends(get_current_user_optional),
    db: AsyncSession = Depends(get_async_session),
) -> BacklinkCountsResponse:
    """Backlink counts for many entities in one call, keyed by 'type:id'."""
    user_id = current_user.id if current_user else None
    counts = await backlink_service.get_backlinks_for_many(
        db, user_id, [(target.type, target.id) for target in data.targets],
    )
    return BacklinkCountsResponse(counts=counts)


@router.get("/from-note/{note_id}", response_model=list[BacklinkResponse])
async def get_note_references(
    note_id: UUID,
    current_user: User | None = Depends(get_current_user_optional),
    db: AsyncSession = Depends(get_async_session),
) -> list[BacklinkResponse]:
    """Entities referenced by a note."""
    user_id = current_user.id if current_user else None
    rows = await backlink_service.get_outgoing_from_note(db, user_id, note_id)
    return [BacklinkResponse.model_validate(row) for row in rows]


@router.get("/{entity_type}/{entity_id}", response_model=list[BacklinkWithNoteResponse])
async def get_backlinks(
    entity_type: EntityType,
    entity_id: UUID,
    current_user: User | None = Depends(get_current_user_optional),
    db: AsyncSession = Depends(get_async_session),
) -> list[BacklinkWithNoteResponse]:
    """Notes that reference an entity."""
    user_id = current_user.id if current_user else None
    return await backlink_service.get_backlinks_for(db, user_id, entity_type, entity_id)


@router.get("/{entity_type}/{entity_id}/count", response_model=BacklinkCountResponse)
async def get_backlink_count(
    entity_type: EntityType,
    entity_id: UUID,
    current_user: User | None = Depends(get_current_user_optional),
    db: AsyncSession = Depends(get_async_session),
) -> BacklinkCountResponse:
    """Number of notes that reference an entity."""
    user_id = current_user.id if current_user else None
    count = await backlink_service.get_backlinks_count(db, user_id, entity_type, entity_id)
    return BacklinkCountResponse(count=count)
