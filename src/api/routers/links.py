"""Entity link CRUD and graph query endpoints."""
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session, get_current_user, get_current_user_optional
from models.entity_type import EntityType, RelationshipType
from models.user import User
from schemas.entity_link import (
    EntityLinkCreate,
    EntityLinkResponse,
    EntityLinksResponse,
    EntityLinkUpdate,
    HydratedLinkResponse,
)
from services import entity_link_service
from services.exceptions import ConflictError, InvalidLinkError, NotFoundError

router = APIRouter(prefix="/links", tags=["links"])


@router.post("/", response_model=EntityLinkResponse, status_code=201)
async def create_link(
    data: EntityLinkCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> EntityLinkResponse:
    """Create a directed link between two entities."""
    try:
        link = await entity_link_service.create_link(
            db,
            current_user.id,
            data.source_type,
            data.source_id,
            data.target_type,
            data.target_id,
            data.relationship_type,
            data.note,
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ConflictError as e:
        raise HTTPException(
            status_code=409,
            detail={"message": str(e), "error_code": e.error_code},
        )
    except InvalidLinkError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return EntityLinkResponse.model_validate(link)


@router.get("/", response_model=list[EntityLinkResponse])
async def list_links(
    relationship_type: RelationshipType | None = Query(
        default=None, description="Filter by relationship type",
    ),
    current_user: User | None = Depends(get_current_user_optional),
    db: AsyncSession = Depends(get_async_session),
) -> list[EntityLinkResponse]:
    """List all of the caller's links."""
    user_id = current_user.id if current_user else None
    links = await entity_link_service.list_links(db, user_id, relationship_type)
    return [EntityLinkResponse.model_validate(link) for link in links]


# Fixed-prefix routes declared before wildcard /{link_id} routes
# to prevent path parameter matching conflicts.
@router.get("/from/{entity_type}/{entity_id}", response_model=list[HydratedLinkResponse])
async def get_links_from(
    entity_type: EntityType,
    entity_id: UUID,
    current_user: User | None = Depends(get_current_user_optional),
    db: AsyncSession = Depends(get_async_session),
) -> list[HydratedLinkResponse]:
    """Outgoing links of an entity with their targets."""
    user_id = current_user.id if current_user else None
    return await entity_link_service.get_links_from(db, user_id, entity_type, entity_id)


@router.get("/to/{entity_type}/{entity_id}", response_model=list[HydratedLinkResponse])
async def get_links_to(
    entity_type: EntityType,
    entity_id: UUID,
    current_user: User | None = Depends(get_current_user_optional),
    db: AsyncSession = Depends(get_async_session),
) -> list[HydratedLinkResponse]:
    """Incoming links of an entity with their sources."""
    user_id = current_user.id if current_user else None
    return await entity_link_service.get_links_to(db, user_id, entity_type, entity_id)


@router.get("/entity/{entity_type}/{entity_id}", response_model=EntityLinksResponse)
async def get_all_links(
    entity_type: EntityType,
    entity_id: UUID,
    current_user: User | None = Depends(get_current_user_optional),
    db: AsyncSession = Depends(get_async_session),
) -> EntityLinksResponse:
    """Both directions of an entity's links."""
    user_id = current_user.id if current_user else None
    return await entity_link_service.get_all_links_for(db, user_id, entity_type, entity_id)


@router.get("/{link_id}", response_model=EntityLinkResponse)
async def get_link(
    link_id: UUID,
    current_user: User | None = Depends(get_current_user_optional),
    db: AsyncSession = Depends(get_async_session),
) -> EntityLinkResponse:
    """Get a link by ID."""
    user_id = current_user.id if current_user else None
    link = await entity_link_service.get_link(db, user_id, link_id)
    if link is None:
        raise HTTPException(status_code=404, detail="Link not found")
    return EntityLinkResponse.model_validate(link)


@router.patch("/{link_id}", response_model=EntityLinkResponse)
async def update_link(
    link_id: UUID,
    data: EntityLinkUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> EntityLinkResponse:
    """Update a link's relationship type or note."""
    # Use exclude_unset to distinguish "not provided" from "set to null"
    updates = data.model_dump(exclude_unset=True)
    try:
        link = await entity_link_service.update_link(db, current_user.id, link_id, **updates)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Link not found")
    except InvalidLinkError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return EntityLinkResponse.model_validate(link)


@router.delete("/{link_id}", status_code=204)
async def delete_link(
    link_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> None:
    """Delete a link."""
    try:
        await entity_link_service.delete_link(db, current_user.id, link_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Link not found")
