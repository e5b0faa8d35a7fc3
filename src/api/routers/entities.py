"""Generic entity deletion endpoint."""
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session, get_current_user
from models.entity_type import EntityType
from models.user import User
from services import graph_service
from services.exceptions import NotFoundError

router = APIRouter(prefix="/entities", tags=["entities"])


@router.delete("/{entity_type}/{entity_id}", status_code=204)
async def delete_entity(
    entity_type: EntityType,
    entity_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> None:
    """Delete any study entity together with its links, backlinks and tag assignments."""
    try:
        await graph_service.cascade_delete_entity(db, current_user.id, entity_type, entity_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
