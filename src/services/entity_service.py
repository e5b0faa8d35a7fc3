"""
Generic access to study entities by (type, id).

Graph services use these helpers to check link endpoints, hydrate link ends and load
the search snapshot without knowing about individual entity tables.
"""
from collections import defaultdict
from collections.abc import Iterable
from typing import Any
from uuid import UUID

from sqlalchemy import exists, select
from sqlalchemy.ext.asyncio import AsyncSession

from models.book import Book, Chapter
from models.course import Course, Lesson
from models.entity_type import EntityType, entity_key
from models.hadith import Hadith
from models.root import Root
from models.study_note import StudyNote
from models.tag import Tag
from models.verse import Verse
from models.word import Word
from schemas.entity_link import EntitySummary
from schemas.search import SearchCollections
from services.search_service import RANKERS, describe_entity

# Map EntityType values to model classes. Every model has id and user_id columns.
MODEL_MAP: dict[EntityType, type[Any]] = {
    EntityType.WORD: Word,
    EntityType.VERSE: Verse,
    EntityType.HADITH: Hadith,
    EntityType.ROOT: Root,
    EntityType.NOTE: StudyNote,
    EntityType.COURSE: Course,
    EntityType.LESSON: Lesson,
    EntityType.BOOK: Book,
    EntityType.CHAPTER: Chapter,
    EntityType.TAG: Tag,
}


async def get_entity(
    db: AsyncSession,
    user_id: UUID | None,
    entity_type: EntityType | str,
    entity_id: UUID,
) -> Any | None:
    """Get an entity owned by the user; None if missing, foreign or the type is unknown."""
    if user_id is None:
        return None
    model = MODEL_MAP.get(entity_type)
    if model is None:
        return None
    result = await db.execute(
        select(model).where(model.id == entity_id, model.user_id == user_id),
    )
    return result.scalar_one_or_none()


async def entity_exists(
    db: AsyncSession,
    user_id: UUID,
    entity_type: EntityType | str,
    entity_id: UUID,
) -> bool:
    """Check if an entity exists and belongs to the user."""
    model = MODEL_MAP.get(entity_type)
    if model is None:
        return False
    stmt = select(exists().where(model.id == entity_id, model.user_id == user_id))
    return bool(await db.scalar(stmt))


async def summarize_entities(
    db: AsyncSession,
    user_id: UUID,
    refs: Iterable[tuple[str, UUID]],
) -> dict[str, EntitySummary]:
    """
    Load display data for many entities, keyed by 'type:id'.

    Issues one query per entity type present in refs. Missing or foreign entities are
    absent from the result.
    """
    ids_by_type: dict[EntityType, set[UUID]] = defaultdict(set)
    for entity_type, entity_id in refs:
        if entity_type in MODEL_MAP:
            ids_by_type[EntityType(entity_type)].add(entity_id)

    summaries: dict[str, EntitySummary] = {}
    for entity_type, ids in ids_by_type.items():
        model = MODEL_MAP[entity_type]
        result = await db.execute(
            select(model).where(model.user_id == user_id, model.id.in_(ids)),
        )
        for entity in result.scalars():
            display_text, subtitle = describe_entity(entity_type, entity)
            summaries[entity_key(entity_type, entity.id)] = EntitySummary(
                type=entity_type,
                id=entity.id,
                display_text=display_text,
                subtitle=subtitle,
            )
    return summaries


async def load_search_collections(
    db: AsyncSession,
    user_id: UUID | None,
    types: Iterable[EntityType] | None = None,
) -> SearchCollections:
    """Snapshot the user's entities for the search ranker; empty without a user."""
    if user_id is None:
        return SearchCollections()

    wanted = set(types) if types else set(EntityType)
    collections: dict[str, list[Any]] = {}
    for entity_type, ranker in RANKERS.items():
        if entity_type not in wanted:
            continue
        model = MODEL_MAP[entity_type]
        result = await db.execute(
            select(model).where(model.user_id == user_id).order_by(model.created_at),
        )
        collections[ranker.collection] = [
            ranker.entry_model.model_validate(row, from_attributes=True)
            for row in result.scalars()
        ]
    return SearchCollections(**collections)
