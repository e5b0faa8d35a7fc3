"""Tests for verse captures and overlap lookup."""
from uuid import uuid4

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from models.user import User
from schemas.verse import VerseCreate, VerseUpdate
from services.exceptions import InvalidVerseRangeError, NotFoundError, UnauthorizedError
from services.verse_service import (
    create_verse,
    find_overlapping,
    get_verse,
    update_verse,
    validate_verse_range,
)
from shared.quran import VerseRange
from tests.factories import make_verse


class TestValidateVerseRange:
    """Tests for validate_verse_range."""

    def test__validate_verse_range__valid(self) -> None:
        assert validate_verse_range(2, 255, 257) == VerseRange(2, 255, 257)
        assert validate_verse_range(114, 1) == VerseRange(114, 1, None)

    @pytest.mark.parametrize(('surah', 'start', 'end'), [
        (0, 1, None),
        (115, 1, None),
        (2, 0, None),
        (2, 10, 9),
    ])
    def test__validate_verse_range__invalid(self, surah: int, start: int, end: int | None) -> None:
        with pytest.raises(InvalidVerseRangeError):
            validate_verse_range(surah, start, end)


class TestCreateVerse:
    """Tests for create_verse and update_verse."""

    async def test__create_verse__derives_search_fields(
        self, db_session: AsyncSession, test_user: User,
    ) -> None:
        verse = await create_verse(db_session, test_user.id, VerseCreate(
            surah_number=1, ayah_start=2, arabic_text='ٱلْحَمْدُ لِلَّهِ رَبِّ ٱلْعَٰلَمِينَ',
        ))

        assert verse.reference == '1:2'
        assert verse.diacritic_stripped_text == 'ٱلحمد لله رب ٱلعلمين'
        assert verse.search_tokens == ['ٱلحمد', 'لله', 'رب', 'ٱلعلمين']

    async def test__create_verse__requires_user(self, db_session: AsyncSession) -> None:
        with pytest.raises(UnauthorizedError):
            await create_verse(db_session, None, VerseCreate(surah_number=1, ayah_start=1))

    async def test__update_verse__rederives_search_fields(
        self, db_session: AsyncSession, test_user: User,
    ) -> None:
        verse = await make_verse(db_session, test_user.id, 112, 1, arabic_text='قُلْ')
        updated = await update_verse(
            db_session, test_user.id, verse.id, VerseUpdate(arabic_text='قُلْ هُوَ ٱللَّهُ أَحَدٌ'),
        )
        assert updated.diacritic_stripped_text == 'قل هو ٱلله أحد'

    async def test__update_verse__validates_merged_range(
        self, db_session: AsyncSession, test_user: User,
    ) -> None:
        verse = await make_verse(db_session, test_user.id, 2, 255, 257)
        with pytest.raises(InvalidVerseRangeError):
            await update_verse(db_session, test_user.id, verse.id, VerseUpdate(ayah_start=260))
        assert verse.ayah_start == 255

    async def test__update_verse__null_end_makes_single_ayah(
        self, db_session: AsyncSession, test_user: User,
    ) -> None:
        verse = await make_verse(db_session, test_user.id, 2, 255, 257)
        updated = await update_verse(db_session, test_user.id, verse.id, VerseUpdate(ayah_end=None))
        assert updated.ayah_end is None
        assert updated.reference == '2:255'

    async def test__update_verse__other_user(
        self, db_session: AsyncSession, test_user: User, other_user: User,
    ) -> None:
        verse = await make_verse(db_session, test_user.id, 2, 255)
        with pytest.raises(NotFoundError):
            await update_verse(db_session, other_user.id, verse.id, VerseUpdate(topic='x'))
        assert await get_verse(db_session, other_user.id, verse.id) is None


class TestFindOverlapping:
    """Tests for find_overlapping."""

    async def test__find_overlapping__single_ayah_inside_range(
        self, db_session: AsyncSession, test_user: User,
    ) -> None:
        kursi = await make_verse(db_session, test_user.id, 2, 255, 257)
        await make_verse(db_session, test_user.id, 2, 258)

        results = await find_overlapping(db_session, test_user.id, 2, 255)
        assert [v.id for v in results] == [kursi.id]

    async def test__find_overlapping__returns_every_match_ordered(
        self, db_session: AsyncSession, test_user: User,
    ) -> None:
        late = await make_verse(db_session, test_user.id, 18, 9, 26)
        early = await make_verse(db_session, test_user.id, 18, 1, 10)
        single = await make_verse(db_session, test_user.id, 18, 10)
        await make_verse(db_session, test_user.id, 18, 60, 82)
        await make_verse(db_session, test_user.id, 19, 10)

        results = await find_overlapping(db_session, test_user.id, 18, 5, 12)
        assert [v.id for v in results] == [early.id, late.id, single.id]

    async def test__find_overlapping__touching_boundaries(
        self, db_session: AsyncSession, test_user: User,
    ) -> None:
        verse = await make_verse(db_session, test_user.id, 2, 250, 255)

        assert [v.id for v in await find_overlapping(db_session, test_user.id, 2, 255, 260)] == [verse.id]
        assert await find_overlapping(db_session, test_user.id, 2, 256, 260) == []

    async def test__find_overlapping__excludes_self(
        self, db_session: AsyncSession, test_user: User,
    ) -> None:
        verse = await make_verse(db_session, test_user.id, 2, 255, 257)
        other = await make_verse(db_session, test_user.id, 2, 256)

        results = await find_overlapping(
            db_session, test_user.id, 2, 255, 257, exclude_id=verse.id,
        )
        assert [v.id for v in results] == [other.id]

    async def test__find_overlapping__scoped_to_user(
        self, db_session: AsyncSession, test_user: User, other_user: User,
    ) -> None:
        await make_verse(db_session, test_user.id, 2, 255)

        assert await find_overlapping(db_session, other_user.id, 2, 255) == []
        assert await find_overlapping(db_session, None, 2, 255) == []

    async def test__find_overlapping__invalid_range(
        self, db_session: AsyncSession, test_user: User,
    ) -> None:
        with pytest.raises(InvalidVerseRangeError):
            await find_overlapping(db_session, test_user.id, 2, 10, 5)
        with pytest.raises(InvalidVerseRangeError):
            await find_overlapping(db_session, test_user.id, 115, 1)

    async def test__find_overlapping__unknown_id_excluded_is_harmless(
        self, db_session: AsyncSession, test_user: User,
    ) -> None:
        verse = await make_verse(db_session, test_user.id, 2, 255)
        results = await find_overlapping(db_session, test_user.id, 2, 255, exclude_id=uuid4())
        assert [v.id for v in results] == [verse.id]
