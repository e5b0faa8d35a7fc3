"""Entity and relationship type enums shared by the cross-reference graph."""
from enum import StrEnum


class EntityType(StrEnum):
    """Kind of study entity. (type, id) is the composite key used by graph edges."""

    WORD = "word"
    VERSE = "verse"
    HADITH = "hadith"
    ROOT = "root"
    NOTE = "note"
    COURSE = "course"
    LESSON = "lesson"
    BOOK = "book"
    CHAPTER = "chapter"
    TAG = "tag"


class RelationshipType(StrEnum):
    """Closed set of user-authored link types."""

    RELATED = "related"
    SYNONYM = "synonym"
    ANTONYM = "antonym"
    EXPLAINS = "explains"
    DERIVED_FROM = "derived_from"
    CONTRASTS = "contrasts"
    SUPPORTS = "supports"
    EXAMPLE_OF = "example_of"


def entity_key(entity_type: str, entity_id: object) -> str:
    """Build the 'type:id' key used for de-duplication and batched counts."""
    return f"{entity_type}:{entity_id}"
