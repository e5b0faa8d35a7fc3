"""Seed script to create the schema and populate the local dev database with study data.

Usage:
    PYTHONPATH=src python scripts/seed_data.py init
    PYTHONPATH=src python scripts/seed_data.py populate
    PYTHONPATH=src python scripts/seed_data.py populate --force
    PYTHONPATH=src python scripts/seed_data.py clear
"""

import argparse
import asyncio
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from core.auth import DEV_AUTH0_ID, get_or_create_dev_user
from core.config import get_settings
from db.session import engine_options
from models import (
    Backlink,
    Base,
    Book,
    Chapter,
    Course,
    EntityLink,
    EntityTag,
    Hadith,
    Lesson,
    Root,
    StudyNote,
    Tag,
    User,
    Verse,
    Word,
)
from models.entity_type import EntityType, RelationshipType
from schemas.note import NoteCreate
from schemas.verse import VerseCreate
from services import entity_link_service, note_service, verse_service

# Deleted in this order; edge tables first.
USER_TABLES = [
    Backlink, EntityLink, EntityTag, StudyNote, Word, Root, Verse, Hadith,
    Lesson, Course, Chapter, Book, Tag,
]

TAG_NAMES = ['vocabulary', 'tafsir', 'aqeedah', 'memorization', 'grammar']

# ---------------------------------------------------------------------------
# Study data
# ---------------------------------------------------------------------------

ROOTS = [
    {'letters': 'ك ت ب', 'latinized': 'k-t-b', 'core_meaning': 'writing, prescribing'},
    {'letters': 'ر ح م', 'latinized': 'r-h-m', 'core_meaning': 'mercy, womb'},
    {'letters': 'ع ل م', 'latinized': 'ayn-l-m', 'core_meaning': 'knowing, a sign'},
    {'letters': 'ص ب ر', 'latinized': 's-b-r', 'core_meaning': 'patience, restraint'},
]

WORDS = [
    {
        'text': 'كِتَاب', 'root': 'k-t-b', 'part_of_speech': 'noun', 'transliteration': 'kitab',
        'meanings': [{'definition': 'book', 'usage_context': 'the revealed Book', 'examples': []}],
    },
    {
        'text': 'كَاتِب', 'root': 'k-t-b', 'part_of_speech': 'noun', 'transliteration': 'katib',
        'meanings': [{'definition': 'scribe, writer', 'usage_context': None, 'examples': []}],
    },
    {
        'text': 'رَحْمَة', 'root': 'r-h-m', 'part_of_speech': 'noun', 'transliteration': 'rahma',
        'meanings': [{'definition': 'mercy', 'usage_context': None, 'examples': []}],
        'aliases': ['رحمه'],
    },
    {
        'text': 'ٱلرَّحِيم', 'root': 'r-h-m', 'part_of_speech': 'adj', 'transliteration': 'ar-rahim',
        'meanings': [{'definition': 'the Especially Merciful', 'usage_context': None, 'examples': []}],
    },
    {
        'text': 'عِلْم', 'root': 'ayn-l-m', 'part_of_speech': 'noun', 'transliteration': 'ilm',
        'meanings': [{'definition': 'knowledge', 'usage_context': None, 'examples': []}],
    },
    {
        'text': 'صَبْر', 'root': 's-b-r', 'part_of_speech': 'noun', 'transliteration': 'sabr',
        'meanings': [{'definition': 'patience, steadfastness', 'usage_context': None, 'examples': []}],
    },
]

VERSES = [
    VerseCreate(
        surah_number=1, ayah_start=1, surah_name_english='Al-Fatihah',
        arabic_text='بِسْمِ ٱللَّهِ ٱلرَّحْمَٰنِ ٱلرَّحِيمِ',
        translation='In the name of Allah, the Entirely Merciful, the Especially Merciful.',
    ),
    VerseCreate(
        surah_number=2, ayah_start=2, surah_name_english='Al-Baqarah',
        arabic_text='ذَٰلِكَ ٱلْكِتَٰبُ لَا رَيْبَ ۛ فِيهِ ۛ هُدًى لِّلْمُتَّقِينَ',
        translation='This is the Book about which there is no doubt, a guidance for those conscious of Allah.',
        topic='guidance',
    ),
    VerseCreate(
        surah_number=2, ayah_start=255, ayah_end=257, surah_name_english='Al-Baqarah',
        arabic_text='ٱللَّهُ لَآ إِلَٰهَ إِلَّا هُوَ ٱلْحَىُّ ٱلْقَيُّومُ',
        translation='Allah - there is no deity except Him, the Ever-Living, the Sustainer of existence.',
        topic='Ayat al-Kursi',
    ),
    VerseCreate(
        surah_number=2, ayah_start=255, surah_name_english='Al-Baqarah',
        arabic_text='ٱللَّهُ لَآ إِلَٰهَ إِلَّا هُوَ',
        topic='tawhid',
    ),
    VerseCreate(
        surah_number=103, ayah_start=1, ayah_end=3, surah_name_english='Al-Asr',
        arabic_text='وَٱلْعَصْرِ إِنَّ ٱلْإِنسَٰنَ لَفِى خُسْرٍ',
        topic='patience',
    ),
]

HADITHS = [
    {
        'collection': 'Bukhari', 'hadith_number': '1', 'grading': 'sahih',
        'arabic_text': 'إِنَّمَا الأَعْمَالُ بِالنِّيَّاتِ',
        'translation': 'Actions are only by intentions.', 'topic': 'intention',
    },
    {
        'collection': 'Muslim', 'hadith_number': '2699', 'grading': 'sahih',
        'arabic_text': 'مَنْ سَلَكَ طَرِيقًا يَلْتَمِسُ فِيهِ عِلْمًا',
        'translation': 'Whoever travels a path seeking knowledge...', 'topic': 'knowledge',
    },
]

COURSES = [
    {'title': 'Quranic Arabic 101', 'description': 'Roots and patterns', 'lessons': ['Trilateral roots', 'Noun patterns']},
]

BOOKS = [
    {'title': 'Riyad as-Salihin', 'author': 'Imam an-Nawawi', 'chapters': ['Sincerity', 'Patience']},
]


def reference(target_type: EntityType, target_id: UUID, display_text: str) -> dict:
    """A text node carrying an entityReference mark."""
    return {
        'type': 'text',
        'text': display_text,
        'marks': [{
            'type': 'entityReference',
            'attrs': {'targetType': target_type, 'targetId': str(target_id), 'displayText': display_text},
        }],
    }


def paragraph(*nodes: dict | str) -> dict:
    return {
        'type': 'paragraph',
        'content': [{'type': 'text', 'text': n} if isinstance(n, str) else n for n in nodes],
    }


async def create_tags(session: AsyncSession, user: User) -> dict[str, Tag]:
    """Create tags and return a name->Tag mapping."""
    tag_map: dict[str, Tag] = {}
    for name in TAG_NAMES:
        tag = Tag(user_id=user.id, name=name)
        session.add(tag)
        tag_map[name] = tag
    await session.flush()
    print(f'  Created {len(tag_map)} tags')
    return tag_map


async def create_vocabulary(session: AsyncSession, user: User) -> dict[str, Word]:
    """Create roots and the words derived from them; returns words by transliteration."""
    roots: dict[str, Root] = {}
    for data in ROOTS:
        root = Root(user_id=user.id, **data)
        session.add(root)
        roots[data['latinized']] = root
    await session.flush()

    words: dict[str, Word] = {}
    for data in WORDS:
        fields = {k: v for k, v in data.items() if k != 'root'}
        word = Word(user_id=user.id, root_id=roots[data['root']].id, **fields)
        session.add(word)
        words[data['transliteration']] = word
    await session.flush()

    for data in WORDS:
        await entity_link_service.create_link(
            session, user.id,
            EntityType.WORD, words[data['transliteration']].id,
            EntityType.ROOT, roots[data['root']].id,
            RelationshipType.DERIVED_FROM,
        )
    print(f'  Created {len(roots)} roots, {len(words)} words and their root links')
    return words


async def create_sources(session: AsyncSession, user: User) -> tuple[list[Verse], list[Hadith]]:
    """Create verse captures (overlapping on purpose) and hadiths."""
    verses = [await verse_service.create_verse(session, user.id, data) for data in VERSES]
    hadiths = []
    for data in HADITHS:
        hadith = Hadith(user_id=user.id, **data)
        session.add(hadith)
        hadiths.append(hadith)
    await session.flush()
    print(f'  Created {len(verses)} verses and {len(hadiths)} hadiths')
    return verses, hadiths


async def create_library(session: AsyncSession, user: User) -> None:
    """Create courses with lessons and books with chapters."""
    for data in COURSES:
        course = Course(user_id=user.id, title=data['title'], description=data['description'])
        session.add(course)
        await session.flush()
        for position, title in enumerate(data['lessons']):
            session.add(Lesson(user_id=user.id, course_id=course.id, title=title, position=position))
    for data in BOOKS:
        book = Book(user_id=user.id, title=data['title'], author=data['author'])
        session.add(book)
        await session.flush()
        for position, title in enumerate(data['chapters']):
            session.add(Chapter(user_id=user.id, book_id=book.id, title=title, position=position))
    await session.flush()
    print(f'  Created {len(COURSES)} courses and {len(BOOKS)} books')


async def create_notes(
    session: AsyncSession,
    user: User,
    words: dict[str, Word],
    verses: list[Verse],
    hadiths: list[Hadith],
    tag_map: dict[str, Tag],
) -> None:
    """Create notes whose references become backlinks."""
    kitab, rahma, sabr = words['kitab'], words['rahma'], words['sabr']
    notes = [
        NoteCreate(title='The Book', content_json={'type': 'doc', 'content': [
            paragraph('Al-Baqarah opens by calling the Quran ', reference(EntityType.WORD, kitab.id, 'ٱلْكِتَٰبُ'), '.'),
            paragraph('See ', reference(EntityType.VERSE, verses[1].id, '2:2'), ' and the scribe ', reference(
                EntityType.WORD, words['katib'].id, 'كَاتِب'), '.'),
        ]}),
        NoteCreate(title='Mercy in the Basmalah', content_json={'type': 'doc', 'content': [
            paragraph(reference(EntityType.VERSE, verses[0].id, '1:1'), ' pairs two names from ', reference(
                EntityType.WORD, rahma.id, 'رَحْمَة'), '.'),
        ]}),
        NoteCreate(title='Patience and intention', content_json={'type': 'doc', 'content': [
            paragraph('Surah al-Asr ties loss to the absence of ', reference(EntityType.WORD, sabr.id, 'صَبْر'), '.'),
            paragraph('Compare ', reference(EntityType.HADITH, hadiths[0].id, 'Bukhari #1'), '.'),
        ]}),
    ]
    for data in notes:
        note = await note_service.create_note(session, user.id, data)
        session.add(EntityTag(
            user_id=user.id, tag_id=tag_map['tafsir'].id, entity_type=EntityType.NOTE, entity_id=note.id,
        ))
    for word in words.values():
        session.add(EntityTag(
            user_id=user.id, tag_id=tag_map['vocabulary'].id, entity_type=EntityType.WORD, entity_id=word.id,
        ))
    await session.flush()
    print(f'  Created {len(notes)} notes with backlinks')


async def clear_data(session: AsyncSession) -> None:
    """Clear all data for the dev user."""
    result = await session.execute(
        select(User).where(User.auth0_id == DEV_AUTH0_ID)
    )
    user = result.scalar_one_or_none()
    if user is None:
        print('No dev user found, nothing to clear.')
        return

    print(f'Clearing data for dev user {user.id}...')
    for model in USER_TABLES:
        deleted = await session.execute(delete(model).where(model.user_id == user.id))
        print(f'  Deleted {deleted.rowcount} rows from {model.__tablename__}')
    await session.flush()
    print('Clear complete.')


async def init_schema() -> None:
    """Create every table that does not exist yet."""
    settings = get_settings()
    engine = create_async_engine(settings.database_url, **engine_options(settings))
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        print('Schema created.')
    finally:
        await engine.dispose()


async def populate(force: bool = False) -> None:
    """Populate the database with seed data."""
    settings = get_settings()
    engine = create_async_engine(settings.database_url, **engine_options(settings))
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with session_factory() as session:
        try:
            user = await get_or_create_dev_user(session)

            # Tags are created first, so they detect both complete and partial previous runs.
            tag_count = (await session.execute(
                select(func.count()).select_from(Tag).where(Tag.user_id == user.id)
            )).scalar()

            if tag_count and tag_count > 0:
                if force:
                    print('Existing data found, clearing first (--force)...')
                    await clear_data(session)
                else:
                    print(
                        f'Data already exists ({tag_count} tags). '
                        f'Use --force to clear and re-seed.'
                    )
                    return

            print('Populating seed data...')
            tag_map = await create_tags(session, user)
            words = await create_vocabulary(session, user)
            verses, hadiths = await create_sources(session, user)
            await create_library(session, user)
            await create_notes(session, user, words, verses, hadiths, tag_map)
            await session.commit()
            print('Seed data created successfully.')
        except Exception:
            await session.rollback()
            raise
        finally:
            await engine.dispose()


async def clear() -> None:
    """Clear all dev user data."""
    settings = get_settings()
    engine = create_async_engine(settings.database_url, **engine_options(settings))
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with session_factory() as session:
        try:
            await clear_data(session)
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await engine.dispose()


def main() -> None:
    """CLI entry point."""
    settings = get_settings()
    if not settings.dev_mode:
        print(
            "ERROR: Seed script requires VITE_DEV_MODE=true.\n"
            "This script modifies data directly and must only run against a local dev database."
        )
        raise SystemExit(1)

    parser = argparse.ArgumentParser(description='Create the schema and seed the dev database.')
    subparsers = parser.add_subparsers(dest='command', required=True)

    subparsers.add_parser('init', help='Create missing tables')

    populate_parser = subparsers.add_parser('populate', help='Populate database with study data')
    populate_parser.add_argument(
        '--force', action='store_true',
        help='Clear existing data before populating',
    )

    subparsers.add_parser('clear', help='Remove all dev user data')

    args = parser.parse_args()

    if args.command == 'init':
        asyncio.run(init_schema())
    elif args.command == 'populate':
        asyncio.run(populate(force=args.force))
    elif args.command == 'clear':
        asyncio.run(clear())


if __name__ == '__main__':
    main()
