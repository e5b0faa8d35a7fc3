"""
Pydantic schemas for cross-entity search.

Each searchable kind has its own entry model tagged by `kind`, so the ranker dispatches
on a known shape instead of inspecting loosely-typed records. Entries are built from
ORM rows (from_attributes) or constructed directly by callers that already hold the
data in memory.
"""
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from models.entity_type import EntityType

MatchType = Literal["exact", "prefix", "contains", "fuzzy"]


class SearchEntry(BaseModel):
    """Minimal shape shared by every searchable entity."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID | None = None


class MeaningEntry(BaseModel):
    """One sense of a word."""

    model_config = ConfigDict(from_attributes=True)

    definition: str = ""
    usage_context: str | None = None
    examples: list[str] = Field(default_factory=list)


class WordEntry(SearchEntry):
    kind: Literal["word"] = "word"
    text: str
    diacritic_stripped_text: str | None = None
    transliteration: str | None = None
    meanings: list[MeaningEntry] = Field(default_factory=list)
    aliases: list[str] = Field(default_factory=list)


class RootEntry(SearchEntry):
    kind: Literal["root"] = "root"
    letters: str
    latinized: str = ""
    core_meaning: str = ""


class VerseEntry(SearchEntry):
    kind: Literal["verse"] = "verse"
    surah_number: int
    ayah_start: int
    ayah_end: int | None = None
    arabic_text: str = ""
    diacritic_stripped_text: str | None = None
    translation: str | None = None
    topic: str | None = None
    surah_name_english: str | None = None


class HadithEntry(SearchEntry):
    kind: Literal["hadith"] = "hadith"
    collection: str
    hadith_number: str
    arabic_text: str = ""
    diacritic_stripped_text: str | None = None
    translation: str | None = None
    topic: str | None = None


class NoteEntry(SearchEntry):
    kind: Literal["note"] = "note"
    title: str | None = None
    content: str = ""


class CourseEntry(SearchEntry):
    kind: Literal["course"] = "course"
    title: str
    description: str | None = None


class LessonEntry(SearchEntry):
    kind: Literal["lesson"] = "lesson"
    title: str


class BookEntry(SearchEntry):
    kind: Literal["book"] = "book"
    title: str
    author: str | None = None


class ChapterEntry(SearchEntry):
    kind: Literal["chapter"] = "chapter"
    title: str


class TagEntry(SearchEntry):
    kind: Literal["tag"] = "tag"
    name: str


class SearchCollections(BaseModel):
    """Snapshot of the caller's entities. Any collection left out is searched as empty."""

    words: list[WordEntry] = Field(default_factory=list)
    roots: list[RootEntry] = Field(default_factory=list)
    verses: list[VerseEntry] = Field(default_factory=list)
    hadiths: list[HadithEntry] = Field(default_factory=list)
    notes: list[NoteEntry] = Field(default_factory=list)
    courses: list[CourseEntry] = Field(default_factory=list)
    lessons: list[LessonEntry] = Field(default_factory=list)
    books: list[BookEntry] = Field(default_factory=list)
    chapters: list[ChapterEntry] = Field(default_factory=list)
    tags: list[TagEntry] = Field(default_factory=list)


class SearchFilters(BaseModel):
    """Optional restrictions applied after ranking."""

    types: list[EntityType] | None = None
    exact_match: bool = False
    limit: int | None = Field(default=None, ge=1)


class SearchResult(BaseModel):
    """One ranked hit. Scores are comparable only within a type."""

    type: EntityType
    id: UUID
    display_text: str
    subtitle: str | None = None
    score: float
    match_type: MatchType


class SearchResponse(BaseModel):
    """Schema for the search endpoint."""

    query: str
    results: list[SearchResult]
    total: int
