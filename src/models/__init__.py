"""SQLAlchemy models."""
from models.backlink import Backlink
from models.base import Base, TimestampMixin, UUIDv7Mixin
from models.book import Book, Chapter
from models.course import Course, Lesson
from models.entity_link import EntityLink
from models.entity_type import EntityType, RelationshipType
from models.hadith import Hadith
from models.root import Root
from models.study_note import StudyNote
from models.tag import EntityTag, Tag
from models.user import User
from models.verse import Verse
from models.word import Word

__all__ = [
    "Backlink",
    "Base",
    "Book",
    "Chapter",
    "Course",
    "EntityLink",
    "EntityTag",
    "EntityType",
    "Hadith",
    "Lesson",
    "RelationshipType",
    "Root",
    "StudyNote",
    "Tag",
    "TimestampMixin",
    "UUIDv7Mixin",
    "User",
    "Verse",
    "Word",
]
