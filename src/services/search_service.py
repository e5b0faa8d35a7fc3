"""
Cross-entity search ranking.

The query script decides the strategy:

- Arabic queries compare diacritic-stripped text (exact, prefix, contains), with a
  diacritics-intact hit inside the raw text scored just below a stripped exact hit
  (tagged prefix or contains, since full equality is already a stripped exact hit).
- Latin queries that look like a root pattern ("k-t-b", "ktb") compare root
  latinizations with dashes removed.
- Other Latin queries score fields by equality, prefix, containment and finally the
  fuzzy matcher, taking the best field per entity.

Every type is scored independently in [0, 1]; results above the noise floor from all
types are concatenated and sorted once by score (stable, so ties keep type order).
Ranking is pure: callers pass the collections snapshot in.
"""
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any, NamedTuple

from models.entity_type import EntityType
from schemas.search import (
    BookEntry,
    ChapterEntry,
    CourseEntry,
    HadithEntry,
    LessonEntry,
    MatchType,
    NoteEntry,
    RootEntry,
    SearchCollections,
    SearchFilters,
    SearchResult,
    TagEntry,
    VerseEntry,
    WordEntry,
)
from shared.arabic import contains_arabic, normalize_arabic, strip_diacritics
from shared.fuzzy import fuzzy_score
from shared.quran import format_verse_ref

MIN_QUERY_LENGTH = 2

# Scoring constants. Tunable, kept for compatibility with existing rankings.
EXACT_SCORE = 1.0
DIACRITICS_EXACT_SCORE = 0.95
PREFIX_SCORE = 0.9
CONTAINS_SCORE = 0.7
REFERENCE_SCORE = 0.9
NOTE_CONTENT_SCORE = 0.6
AUTHOR_WEIGHT = 0.8
NOISE_FLOOR = 0.3

PREVIEW_LENGTH = 60

ROOT_PATTERN_DASHED = re.compile(r"^[a-z]-[a-z]-[a-z](-[a-z])?$", re.IGNORECASE)
ROOT_PATTERN_COMPACT = re.compile(r"^[a-z]{2,4}$", re.IGNORECASE)
VOWEL_PAIR = re.compile(r"[aeiou]{2}", re.IGNORECASE)


class Match(NamedTuple):
    """Score and match category for one entity."""

    score: float
    match_type: MatchType


NO_MATCH = Match(0.0, "fuzzy")


@dataclass(frozen=True)
class PreparedQuery:
    """A query trimmed and pre-normalized once per search call."""

    text: str
    lowered: str
    normalized: str
    stripped: str
    is_arabic: bool
    is_root: bool

    @property
    def has_diacritics(self) -> bool:
        return self.normalized != self.stripped


def is_root_pattern(query: str) -> bool:
    """True for 'k-t-b' / 'k-t-b-r' or two to four letters without a vowel pair."""
    q = query.strip()
    if ROOT_PATTERN_DASHED.match(q):
        return True
    return bool(ROOT_PATTERN_COMPACT.match(q)) and not VOWEL_PAIR.search(q)


def prepare_query(query: str | None) -> PreparedQuery | None:
    """Return None for queries too short to search."""
    text = (query or "").strip()
    if len(text) < MIN_QUERY_LENGTH:
        return None
    is_arabic = contains_arabic(text)
    return PreparedQuery(
        text=text,
        lowered=text.lower(),
        normalized=normalize_arabic(text),
        stripped=strip_diacritics(text),
        is_arabic=is_arabic,
        is_root=not is_arabic and is_root_pattern(text),
    )


def classify_score(score: float) -> MatchType:
    """Map a score to its match band."""
    if score >= EXACT_SCORE:
        return "exact"
    if score >= PREFIX_SCORE:
        return "prefix"
    if score >= CONTAINS_SCORE:
        return "contains"
    return "fuzzy"


def _banded(score: float) -> Match:
    return Match(score, classify_score(score))


def _best(matches: Iterable[Match]) -> Match:
    return max(matches, key=lambda m: m.score, default=NO_MATCH)


def arabic_match(q: PreparedQuery, raw_text: str | None, stripped_text: str | None = None) -> Match:
    """
    Score Arabic text against an Arabic query.

    stripped_text is the precomputed search column; it is derived on the fly when absent.
    """
    if not raw_text:
        return NO_MATCH
    stripped = stripped_text or strip_diacritics(raw_text)
    if stripped == q.stripped:
        return Match(EXACT_SCORE, "exact")
    if q.has_diacritics:
        normalized = normalize_arabic(raw_text)
        # Full equality was already caught by the stripped comparison above.
        if normalized.startswith(q.normalized):
            return Match(DIACRITICS_EXACT_SCORE, "prefix")
        if q.normalized in normalized:
            return Match(DIACRITICS_EXACT_SCORE, "contains")
    if stripped.startswith(q.stripped):
        return Match(PREFIX_SCORE, "prefix")
    if q.stripped in stripped:
        return Match(CONTAINS_SCORE, "contains")
    return NO_MATCH


def literal_match(q: PreparedQuery, text: str | None) -> Match:
    """Case-insensitive equality, prefix or containment only."""
    if not text:
        return NO_MATCH
    t = text.strip().lower()
    if t == q.lowered:
        return Match(EXACT_SCORE, "exact")
    if t.startswith(q.lowered):
        return Match(PREFIX_SCORE, "prefix")
    if q.lowered in t:
        return Match(CONTAINS_SCORE, "contains")
    return NO_MATCH


def latin_match(q: PreparedQuery, text: str | None) -> Match:
    """Literal bands first, then the fuzzy matcher for scattered hits."""
    match = literal_match(q, text)
    if match.score > 0 or not text:
        return match
    return _banded(fuzzy_score(q.lowered, text))


def text_match(q: PreparedQuery, text: str | None) -> Match:
    """Score a free-text field (titles, names) with the strategy for the query script."""
    if q.is_arabic:
        return arabic_match(q, text)
    return latin_match(q, text)


def _contains_match(q: PreparedQuery, text: str | None, score: float) -> Match:
    if not text:
        return NO_MATCH
    if q.is_arabic:
        found = q.stripped in strip_diacritics(text)
    else:
        found = q.lowered in text.lower()
    return Match(score, "contains") if found else NO_MATCH


def _compact_root(value: str) -> str:
    return strip_diacritics(value).replace("-", "").replace(" ", "").lower()


def _preview(text: str | None) -> str | None:
    if not text:
        return None
    if len(text) <= PREVIEW_LENGTH:
        return text
    return text[:PREVIEW_LENGTH] + "..."


def _score_word(entry: WordEntry, q: PreparedQuery) -> Match:
    if q.is_arabic:
        return _best([
            arabic_match(q, entry.text, entry.diacritic_stripped_text),
            *(arabic_match(q, alias) for alias in entry.aliases),
        ])
    return _best([
        latin_match(q, entry.transliteration),
        *(latin_match(q, meaning.definition) for meaning in entry.meanings),
        *(latin_match(q, alias) for alias in entry.aliases),
    ])


def _score_root(entry: RootEntry, q: PreparedQuery) -> Match:
    if q.is_arabic:
        letters = _compact_root(entry.letters)
        query = _compact_root(q.text)
        if letters == query:
            return Match(EXACT_SCORE, "exact")
        if query in letters:
            return Match(CONTAINS_SCORE, "contains")
        return NO_MATCH
    if q.is_root:
        latinized = entry.latinized.lower().replace("-", "")
        query = q.lowered.replace("-", "")
        if latinized == query:
            return Match(EXACT_SCORE, "exact")
        if query in latinized:
            return Match(CONTAINS_SCORE, "contains")
        return NO_MATCH
    return latin_match(q, entry.core_meaning)


def _score_verse(entry: VerseEntry, q: PreparedQuery) -> Match:
    if q.is_arabic:
        return arabic_match(q, entry.arabic_text, entry.diacritic_stripped_text)
    ref = format_verse_ref(entry.surah_number, entry.ayah_start, entry.ayah_end)
    if ref == q.lowered:
        return Match(EXACT_SCORE, "exact")
    if q.lowered in ref:
        return Match(REFERENCE_SCORE, "prefix")
    return _best([
        latin_match(q, entry.topic),
        latin_match(q, entry.translation),
        latin_match(q, entry.surah_name_english),
    ])


def _score_hadith(entry: HadithEntry, q: PreparedQuery) -> Match:
    if q.is_arabic:
        return arabic_match(q, entry.arabic_text, entry.diacritic_stripped_text)
    ref = f"{entry.collection} #{entry.hadith_number}".lower()
    if ref == q.lowered:
        return Match(EXACT_SCORE, "exact")
    if q.lowered in ref:
        return Match(REFERENCE_SCORE, "prefix")
    return _best([
        latin_match(q, entry.topic),
        latin_match(q, entry.translation),
        latin_match(q, entry.collection),
    ])


def _score_note(entry: NoteEntry, q: PreparedQuery) -> Match:
    return _best([
        text_match(q, entry.title),
        _contains_match(q, entry.content, NOTE_CONTENT_SCORE),
    ])


def _score_title(entry: CourseEntry | LessonEntry | ChapterEntry, q: PreparedQuery) -> Match:
    return text_match(q, entry.title)


def _score_book(entry: BookEntry, q: PreparedQuery) -> Match:
    author = text_match(q, entry.author)
    return _best([text_match(q, entry.title), _banded(author.score * AUTHOR_WEIGHT)])


def _score_tag(entry: TagEntry, q: PreparedQuery) -> Match:
    if q.is_arabic:
        return arabic_match(q, entry.name)
    return literal_match(q, entry.name)


def _describe_word(entry: WordEntry) -> tuple[str, str | None]:
    return entry.text, entry.meanings[0].definition if entry.meanings else None


def _describe_root(entry: RootEntry) -> tuple[str, str | None]:
    return entry.letters, f"{entry.latinized} - {entry.core_meaning}"


def _describe_verse(entry: VerseEntry) -> tuple[str, str | None]:
    ref = format_verse_ref(entry.surah_number, entry.ayah_start, entry.ayah_end)
    return ref, _preview(entry.arabic_text)


def _describe_hadith(entry: HadithEntry) -> tuple[str, str | None]:
    return f"{entry.collection} #{entry.hadith_number}", _preview(entry.arabic_text)


def _describe_note(entry: NoteEntry) -> tuple[str, str | None]:
    return entry.title or "Untitled Note", _preview(entry.content)


def _describe_course(entry: CourseEntry) -> tuple[str, str | None]:
    return entry.title, entry.description


def _describe_book(entry: BookEntry) -> tuple[str, str | None]:
    return entry.title, entry.author


def _describe_title(entry: LessonEntry | ChapterEntry) -> tuple[str, str | None]:
    return entry.title, None


def _describe_tag(entry: TagEntry) -> tuple[str, str | None]:
    return entry.name, None


class Ranker(NamedTuple):
    """Per-type scoring and display functions plus the collection they read."""

    collection: str
    entry_model: type[Any]
    score: Callable[[Any, PreparedQuery], Match]
    describe: Callable[[Any], tuple[str, str | None]]


# Insertion order is the concatenation order of results before sorting.
RANKERS: dict[EntityType, Ranker] = {
    EntityType.WORD: Ranker("words", WordEntry, _score_word, _describe_word),
    EntityType.ROOT: Ranker("roots", RootEntry, _score_root, _describe_root),
    EntityType.VERSE: Ranker("verses", VerseEntry, _score_verse, _describe_verse),
    EntityType.HADITH: Ranker("hadiths", HadithEntry, _score_hadith, _describe_hadith),
    EntityType.NOTE: Ranker("notes", NoteEntry, _score_note, _describe_note),
    EntityType.COURSE: Ranker("courses", CourseEntry, _score_title, _describe_course),
    EntityType.LESSON: Ranker("lessons", LessonEntry, _score_title, _describe_title),
    EntityType.BOOK: Ranker("books", BookEntry, _score_book, _describe_book),
    EntityType.CHAPTER: Ranker("chapters", ChapterEntry, _score_title, _describe_title),
    EntityType.TAG: Ranker("tags", TagEntry, _score_tag, _describe_tag),
}


def describe_entity(entity_type: EntityType | str, entity: object) -> tuple[str, str | None]:
    """Display text and subtitle for an ORM row or search entry of the given type."""
    ranker = RANKERS[EntityType(entity_type)]
    entry = ranker.entry_model.model_validate(entity, from_attributes=True)
    return ranker.describe(entry)


def search(
    query: str | None,
    collections: SearchCollections | None = None,
    filters: SearchFilters | None = None,
) -> list[SearchResult]:
    """
    Rank every entity in collections against query.

    Queries shorter than two characters after trimming return no results. With
    filters.exact_match only 'exact' hits are kept; filters.limit truncates after
    sorting.
    """
    q = prepare_query(query)
    if q is None:
        return []
    collections = collections or SearchCollections()
    filters = filters or SearchFilters()
    allowed = set(filters.types) if filters.types else set(EntityType)

    results: list[SearchResult] = []
    for entity_type, ranker in RANKERS.items():
        if entity_type not in allowed:
            continue
        for entry in getattr(collections, ranker.collection):
            match = ranker.score(entry, q)
            if match.score <= NOISE_FLOOR:
                continue
            if filters.exact_match and match.match_type != "exact":
                continue
            display_text, subtitle = ranker.describe(entry)
            results.append(SearchResult(
                type=entity_type,
                id=entry.id,
                display_text=display_text,
                subtitle=subtitle,
                score=match.score,
                match_type=match.match_type,
            ))

    results.sort(key=lambda r: r.score, reverse=True)
    if filters.limit is not None:
        results = results[:filters.limit]
    return results


def group_results_by_type(results: Iterable[SearchResult]) -> dict[EntityType, list[SearchResult]]:
    """Bucket results by entity type, keeping rank order. Every type has a key."""
    grouped: dict[EntityType, list[SearchResult]] = {entity_type: [] for entity_type in EntityType}
    for result in results:
        grouped[result.type].append(result)
    return grouped
