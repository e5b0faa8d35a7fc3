"""Service layer for user-authored links between study entities."""
from typing import Literal
from uuid import UUID

from sqlalchemy import and_, delete, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from models.base import utcnow
from models.entity_link import EntityLink
from models.entity_type import EntityType, RelationshipType, entity_key
from schemas.entity_link import EntityLinksResponse, HydratedLinkResponse
from services import entity_service
from services.exceptions import (
    DuplicateLinkError,
    InvalidLinkError,
    NotFoundError,
    SelfLinkError,
)
from services.utils import require_user

VALID_ENTITY_TYPES = frozenset(EntityType)
VALID_RELATIONSHIP_TYPES = frozenset(RelationshipType)


def _is_duplicate_violation(error: IntegrityError) -> bool:
    message = str(error.orig)
    # PostgreSQL names the constraint, SQLite lists the columns.
    return "uq_entity_link" in message or "entity_links.source_id" in message


async def find_link(
    db: AsyncSession,
    user_id: UUID,
    source_type: str,
    source_id: UUID,
    target_type: str,
    target_id: UUID,
) -> EntityLink | None:
    """Find the edge for an ordered (source, target) pair via the source index."""
    stmt = select(EntityLink).where(
        EntityLink.user_id == user_id,
        EntityLink.source_type == source_type,
        EntityLink.source_id == source_id,
        EntityLink.target_type == target_type,
        EntityLink.target_id == target_id,
    )
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def create_link(
    db: AsyncSession,
    user_id: UUID | None,
    source_type: str,
    source_id: UUID,
    target_type: str,
    target_id: UUID,
    relationship_type: str = RelationshipType.RELATED,
    note: str | None = None,
) -> EntityLink:
    """
    Create a directed link. Validates both endpoints exist and belong to the user.

    Raises:
        UnauthorizedError: If there is no user.
        InvalidLinkError: If an entity type or the relationship type is unknown.
        SelfLinkError: If source and target are the same entity.
        DuplicateLinkError: If the (source, target) edge already exists.
        NotFoundError: If source or target does not exist.
    """
    user_id = require_user(user_id)

    if source_type not in VALID_ENTITY_TYPES:
        raise InvalidLinkError(f"Invalid source type: {source_type}")
    if target_type not in VALID_ENTITY_TYPES:
        raise InvalidLinkError(f"Invalid target type: {target_type}")
    if relationship_type not in VALID_RELATIONSHIP_TYPES:
        raise InvalidLinkError(f"Invalid relationship type: {relationship_type}")

    if source_type == target_type and source_id == target_id:
        raise SelfLinkError(source_type, source_id)

    if await find_link(db, user_id, source_type, source_id, target_type, target_id):
        raise DuplicateLinkError

    if not await entity_service.entity_exists(db, user_id, source_type, source_id):
        raise NotFoundError(source_type, source_id)
    if not await entity_service.entity_exists(db, user_id, target_type, target_id):
        raise NotFoundError(target_type, target_id)

    link = EntityLink(
        user_id=user_id,
        source_type=str(source_type),
        source_id=source_id,
        target_type=str(target_type),
        target_id=target_id,
        relationship_type=str(relationship_type),
        note=note,
    )
    db.add(link)
    try:
        await db.flush()
    except IntegrityError as e:
        # Concurrent create of the same edge
        await db.rollback()
        if _is_duplicate_violation(e):
            raise DuplicateLinkError from e
        raise
    return link


async def get_link(
    db: AsyncSession,
    user_id: UUID | None,
    link_id: UUID,
) -> EntityLink | None:
    """Get a single link by ID, scoped to user."""
    if user_id is None:
        return None
    stmt = select(EntityLink).where(
        EntityLink.id == link_id,
        EntityLink.user_id == user_id,
    )
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def update_link(
    db: AsyncSession,
    user_id: UUID | None,
    link_id: UUID,
    *,
    relationship_type: str | None = None,
    note: str | None = ...,  # type: ignore[assignment]
) -> EntityLink:
    """
    Patch a link's relationship type and/or note.

    note uses a sentinel default (...) to distinguish "not provided" from "clear it".

    Raises:
        NotFoundError: If the link does not exist or belongs to another user.
        InvalidLinkError: If the relationship type is unknown.
    """
    user_id = require_user(user_id)
    link = await get_link(db, user_id, link_id)
    if link is None:
        raise NotFoundError("link", link_id)

    if relationship_type is not None:
        if relationship_type not in VALID_RELATIONSHIP_TYPES:
            raise InvalidLinkError(f"Invalid relationship type: {relationship_type}")
        link.relationship_type = str(relationship_type)
    if note is not ...:
        link.note = note
    link.updated_at = utcnow()

    await db.flush()
    return link


async def delete_link(
    db: AsyncSession,
    user_id: UUID | None,
    link_id: UUID,
) -> None:
    """Delete a single link. Raises NotFoundError if it is missing or not owned."""
    user_id = require_user(user_id)
    link = await get_link(db, user_id, link_id)
    if link is None:
        raise NotFoundError("link", link_id)
    await db.delete(link)
    await db.flush()


async def delete_all_links_for_entity(
    db: AsyncSession,
    user_id: UUID,
    entity_type: str,
    entity_id: UUID,
) -> int:
    """
    Delete all links where this entity is source OR target.

    Called when an entity is deleted. Returns the count of deleted links.
    """
    is_source = and_(
        EntityLink.source_type == entity_type,
        EntityLink.source_id == entity_id,
    )
    is_target = and_(
        EntityLink.target_type == entity_type,
        EntityLink.target_id == entity_id,
    )
    stmt = delete(EntityLink).where(
        EntityLink.user_id == user_id,
        or_(is_source, is_target),
    )
    result = await db.execute(stmt)
    return result.rowcount


async def list_links(
    db: AsyncSession,
    user_id: UUID | None,
    relationship_type: str | None = None,
) -> list[EntityLink]:
    """All of the user's links, newest first."""
    if user_id is None:
        return []
    stmt = (
        select(EntityLink)
        .where(EntityLink.user_id == user_id)
        .order_by(EntityLink.created_at.desc(), EntityLink.id.desc())
    )
    if relationship_type is not None:
        stmt = stmt.where(EntityLink.relationship_type == relationship_type)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def hydrate_links(
    db: AsyncSession,
    user_id: UUID,
    links: list[EntityLink],
    far_end: Literal["source", "target"],
) -> list[HydratedLinkResponse]:
    """
    Attach the current data of each link's far end.

    A link whose far end no longer exists is returned with entity=None.
    """
    if not links:
        return []
    ends = [(getattr(link, f"{far_end}_type"), getattr(link, f"{far_end}_id")) for link in links]
    summaries = await entity_service.summarize_entities(db, user_id, ends)
    hydrated = []
    for link, (end_type, end_id) in zip(links, ends, strict=True):
        item = HydratedLinkResponse.model_validate(link)
        item.entity = summaries.get(entity_key(end_type, end_id))
        hydrated.append(item)
    return hydrated


async def _query_links(
    db: AsyncSession,
    user_id: UUID,
    side: Literal["source", "target"],
    entity_type: str,
    entity_id: UUID,
) -> list[EntityLink]:
    type_column = EntityLink.source_type if side == "source" else EntityLink.target_type
    id_column = EntityLink.source_id if side == "source" else EntityLink.target_id
    stmt = (
        select(EntityLink)
        .where(
            EntityLink.user_id == user_id,
            type_column == entity_type,
            id_column == entity_id,
        )
        .order_by(EntityLink.created_at.desc(), EntityLink.id.desc())
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def get_links_from(
    db: AsyncSession,
    user_id: UUID | None,
    entity_type: str,
    entity_id: UUID,
) -> list[HydratedLinkResponse]:
    """Outgoing links of an entity, each hydrated with its target."""
    if user_id is None:
        return []
    links = await _query_links(db, user_id, "source", entity_type, entity_id)
    return await hydrate_links(db, user_id, links, "target")


async def get_links_to(
    db: AsyncSession,
    user_id: UUID | None,
    entity_type: str,
    entity_id: UUID,
) -> list[HydratedLinkResponse]:
    """Incoming links of an entity, each hydrated with its source."""
    if user_id is None:
        return []
    links = await _query_links(db, user_id, "target", entity_type, entity_id)
    return await hydrate_links(db, user_id, links, "source")


async def get_all_links_for(
    db: AsyncSession,
    user_id: UUID | None,
    entity_type: str,
    entity_id: UUID,
) -> EntityLinksResponse:
    """Outgoing and incoming links as two separate lists."""
    return EntityLinksResponse(
        outgoing=await get_links_from(db, user_id, entity_type, entity_id),
        incoming=await get_links_to(db, user_id, entity_type, entity_id),
    )
