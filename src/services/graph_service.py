"""Entity deletion with cleanup of every graph edge that touches the entity."""
import logging
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy import and_, delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from models.book import Chapter
from models.course import Lesson
from models.entity_type import EntityType
from models.tag import EntityTag
from services import backlink_service, entity_link_service, entity_service
from services.exceptions import InvalidLinkError, NotFoundError
from services.utils import require_user

logger = logging.getLogger(__name__)

# Entities whose children are deleted with them, as (child type, parent key column).
CHILD_ENTITIES = {
    EntityType.COURSE: (EntityType.LESSON, Lesson.course_id),
    EntityType.BOOK: (EntityType.CHAPTER, Chapter.book_id),
}


@dataclass
class CascadeDeleteResult:
    """Row counts removed alongside the entity."""

    links: int = 0
    backlinks: int = 0
    entity_tags: int = 0
    children: int = 0

    def add(self, other: "CascadeDeleteResult") -> None:
        """Fold a child deletion into this result."""
        self.links += other.links
        self.backlinks += other.backlinks
        self.entity_tags += other.entity_tags
        self.children += other.children + 1


async def cascade_delete_entity(
    db: AsyncSession,
    user_id: UUID | None,
    entity_type: EntityType | str,
    entity_id: UUID,
) -> CascadeDeleteResult:
    """
    Delete an entity and every edge that references it.

    Removes links in both directions, backlinks targeting the entity, backlinks owned by
    it when it is a note, and its tag assignments (or, for a tag, every assignment of
    the tag). Lessons of a course and chapters of a book go through the same cascade
    first. Every entity-specific delete goes through here.

    Raises:
        UnauthorizedError: If there is no user.
        InvalidLinkError: If entity_type is unknown.
        NotFoundError: If the entity does not exist or belongs to another user.
    """
    user_id = require_user(user_id)
    if entity_type not in entity_service.MODEL_MAP:
        raise InvalidLinkError(f"Invalid entity type: {entity_type}")
    entity_type = EntityType(entity_type)

    entity = await entity_service.get_entity(db, user_id, entity_type, entity_id)
    if entity is None:
        raise NotFoundError(entity_type, entity_id)

    result = CascadeDeleteResult()
    if entity_type in CHILD_ENTITIES:
        child_type, parent_column = CHILD_ENTITIES[entity_type]
        child_model = entity_service.MODEL_MAP[child_type]
        child_ids = (await db.execute(
            select(child_model.id).where(child_model.user_id == user_id, parent_column == entity_id),
        )).scalars().all()
        for child_id in child_ids:
            result.add(await cascade_delete_entity(db, user_id, child_type, child_id))

    result.links += await entity_link_service.delete_all_links_for_entity(
        db, user_id, entity_type, entity_id,
    )
    result.backlinks += await backlink_service.delete_backlinks_to(
        db, user_id, entity_type, entity_id,
    )
    if entity_type == EntityType.NOTE:
        result.backlinks += await backlink_service.delete_backlinks_for_note(
            db, user_id, entity_id,
        )

    tag_condition = and_(EntityTag.entity_type == entity_type, EntityTag.entity_id == entity_id)
    if entity_type == EntityType.TAG:
        tag_condition = or_(tag_condition, EntityTag.tag_id == entity_id)
    tag_result = await db.execute(
        delete(EntityTag).where(EntityTag.user_id == user_id, tag_condition),
    )
    result.entity_tags += tag_result.rowcount

    await db.delete(entity)
    await db.flush()

    logger.info(
        "Deleted %s %s with %d children, %d links, %d backlinks, %d tag assignments",
        entity_type, entity_id, result.children, result.links, result.backlinks,
        result.entity_tags,
    )
    return result
