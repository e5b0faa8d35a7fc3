"""Tests for the entity link service layer."""
from uuid import uuid4

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from models.entity_link import EntityLink
from models.entity_type import EntityType, RelationshipType
from models.root import Root
from models.user import User
from models.verse import Verse
from models.word import Word
from services.entity_link_service import (
    create_link,
    delete_all_links_for_entity,
    delete_link,
    get_all_links_for,
    get_link,
    get_links_from,
    get_links_to,
    list_links,
    update_link,
)
from services.exceptions import (
    DuplicateLinkError,
    InvalidLinkError,
    NotFoundError,
    SelfLinkError,
    UnauthorizedError,
)
from tests.factories import make_root, make_verse, make_word


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
async def kitab(db_session: AsyncSession, test_user: User) -> Word:
    return await make_word(db_session, test_user.id, 'كِتَاب', 'book')


@pytest.fixture
async def qalam(db_session: AsyncSession, test_user: User) -> Word:
    return await make_word(db_session, test_user.id, 'قَلَم', 'pen')


@pytest.fixture
async def root_ktb(db_session: AsyncSession, test_user: User) -> Root:
    return await make_root(db_session, test_user.id, 'ك ت ب', 'k-t-b', 'writing')


@pytest.fixture
async def ayat_kursi(db_session: AsyncSession, test_user: User) -> Verse:
    return await make_verse(db_session, test_user.id, 2, 255, arabic_text='ٱللَّهُ لَآ إِلَٰهَ إِلَّا هُوَ')


async def count_links(db: AsyncSession) -> int:
    return await db.scalar(select(func.count()).select_from(EntityLink))


# ---------------------------------------------------------------------------
# create_link
# ---------------------------------------------------------------------------


class TestCreateLink:
    """Tests for create_link."""

    async def test__create_link__success(
        self, db_session: AsyncSession, test_user: User, kitab: Word, root_ktb: Root,
    ) -> None:
        link = await create_link(
            db_session, test_user.id, 'word', kitab.id, 'root', root_ktb.id,
            RelationshipType.DERIVED_FROM, 'from the root k-t-b',
        )

        assert link.id is not None
        assert link.user_id == test_user.id
        assert link.source_type == 'word'
        assert link.target_id == root_ktb.id
        assert link.relationship_type == 'derived_from'
        assert link.note == 'from the root k-t-b'

    async def test__create_link__defaults_to_related(
        self, db_session: AsyncSession, test_user: User, kitab: Word, qalam: Word,
    ) -> None:
        link = await create_link(db_session, test_user.id, 'word', kitab.id, 'word', qalam.id)
        assert link.relationship_type == RelationshipType.RELATED

    async def test__create_link__reverse_direction_is_a_separate_edge(
        self, db_session: AsyncSession, test_user: User, kitab: Word, qalam: Word,
    ) -> None:
        await create_link(db_session, test_user.id, 'word', kitab.id, 'word', qalam.id)
        await create_link(db_session, test_user.id, 'word', qalam.id, 'word', kitab.id)
        assert await count_links(db_session) == 2

    async def test__create_link__self_link_rejected(
        self, db_session: AsyncSession, test_user: User, kitab: Word,
    ) -> None:
        with pytest.raises(SelfLinkError) as exc_info:
            await create_link(db_session, test_user.id, 'word', kitab.id, 'word', kitab.id)
        assert exc_info.value.error_code == 'SELF_LINK'
        assert await count_links(db_session) == 0

    async def test__create_link__duplicate_rejected(
        self, db_session: AsyncSession, test_user: User, kitab: Word, root_ktb: Root,
    ) -> None:
        await create_link(db_session, test_user.id, 'word', kitab.id, 'root', root_ktb.id)
        with pytest.raises(DuplicateLinkError) as exc_info:
            await create_link(
                db_session, test_user.id, 'word', kitab.id, 'root', root_ktb.id,
                RelationshipType.EXPLAINS,
            )
        assert exc_info.value.error_code == 'DUPLICATE_LINK'
        assert await count_links(db_session) == 1

    async def test__create_link__missing_target(
        self, db_session: AsyncSession, test_user: User, kitab: Word,
    ) -> None:
        with pytest.raises(NotFoundError):
            await create_link(db_session, test_user.id, 'word', kitab.id, 'verse', uuid4())

    async def test__create_link__missing_source(
        self, db_session: AsyncSession, test_user: User, kitab: Word,
    ) -> None:
        with pytest.raises(NotFoundError):
            await create_link(db_session, test_user.id, 'note', uuid4(), 'word', kitab.id)

    async def test__create_link__other_users_entity_is_not_found(
        self, db_session: AsyncSession, test_user: User, other_user: User, kitab: Word,
    ) -> None:
        foreign = await make_word(db_session, other_user.id, 'قلم')
        with pytest.raises(NotFoundError):
            await create_link(db_session, test_user.id, 'word', kitab.id, 'word', foreign.id)

    async def test__create_link__invalid_types(
        self, db_session: AsyncSession, test_user: User, kitab: Word, qalam: Word,
    ) -> None:
        with pytest.raises(InvalidLinkError):
            await create_link(db_session, test_user.id, 'bookmark', kitab.id, 'word', qalam.id)
        with pytest.raises(InvalidLinkError):
            await create_link(db_session, test_user.id, 'word', kitab.id, 'word', qalam.id, 'cousin')

    async def test__create_link__requires_user(self, db_session: AsyncSession, kitab: Word) -> None:
        with pytest.raises(UnauthorizedError):
            await create_link(db_session, None, 'word', kitab.id, 'word', uuid4())


# ---------------------------------------------------------------------------
# update / delete
# ---------------------------------------------------------------------------


class TestUpdateLink:
    """Tests for update_link."""

    async def test__update_link__relationship_and_note(
        self, db_session: AsyncSession, test_user: User, kitab: Word, qalam: Word,
    ) -> None:
        link = await create_link(db_session, test_user.id, 'word', kitab.id, 'word', qalam.id)
        updated = await update_link(
            db_session, test_user.id, link.id,
            relationship_type=RelationshipType.CONTRASTS, note='tools of writing',
        )
        assert updated.relationship_type == 'contrasts'
        assert updated.note == 'tools of writing'

    async def test__update_link__omitted_note_is_kept(
        self, db_session: AsyncSession, test_user: User, kitab: Word, qalam: Word,
    ) -> None:
        link = await create_link(
            db_session, test_user.id, 'word', kitab.id, 'word', qalam.id, note='keep me',
        )
        updated = await update_link(
            db_session, test_user.id, link.id, relationship_type=RelationshipType.SYNONYM,
        )
        assert updated.note == 'keep me'

    async def test__update_link__none_clears_note(
        self, db_session: AsyncSession, test_user: User, kitab: Word, qalam: Word,
    ) -> None:
        link = await create_link(
            db_session, test_user.id, 'word', kitab.id, 'word', qalam.id, note='clear me',
        )
        updated = await update_link(db_session, test_user.id, link.id, note=None)
        assert updated.note is None

    async def test__update_link__invalid_relationship(
        self, db_session: AsyncSession, test_user: User, kitab: Word, qalam: Word,
    ) -> None:
        link = await create_link(db_session, test_user.id, 'word', kitab.id, 'word', qalam.id)
        with pytest.raises(InvalidLinkError):
            await update_link(db_session, test_user.id, link.id, relationship_type='cousin')

    async def test__update_link__other_user(
        self, db_session: AsyncSession, test_user: User, other_user: User, kitab: Word, qalam: Word,
    ) -> None:
        link = await create_link(db_session, test_user.id, 'word', kitab.id, 'word', qalam.id)
        with pytest.raises(NotFoundError):
            await update_link(db_session, other_user.id, link.id, note='hijack')


class TestDeleteLink:
    """Tests for delete_link and delete_all_links_for_entity."""

    async def test__delete_link__removes_edge(
        self, db_session: AsyncSession, test_user: User, kitab: Word, qalam: Word,
    ) -> None:
        link = await create_link(db_session, test_user.id, 'word', kitab.id, 'word', qalam.id)
        await delete_link(db_session, test_user.id, link.id)
        assert await get_link(db_session, test_user.id, link.id) is None

    async def test__delete_link__missing(self, db_session: AsyncSession, test_user: User) -> None:
        with pytest.raises(NotFoundError):
            await delete_link(db_session, test_user.id, uuid4())

    async def test__delete_link__other_user_cannot_delete(
        self, db_session: AsyncSession, test_user: User, other_user: User, kitab: Word, qalam: Word,
    ) -> None:
        link = await create_link(db_session, test_user.id, 'word', kitab.id, 'word', qalam.id)
        with pytest.raises(NotFoundError):
            await delete_link(db_session, other_user.id, link.id)
        assert await get_link(db_session, test_user.id, link.id) is not None

    async def test__delete_all_links_for_entity__both_directions(
        self, db_session: AsyncSession, test_user: User,
        kitab: Word, qalam: Word, root_ktb: Root, ayat_kursi: Verse,
    ) -> None:
        await create_link(db_session, test_user.id, 'word', kitab.id, 'root', root_ktb.id)
        await create_link(db_session, test_user.id, 'verse', ayat_kursi.id, 'word', kitab.id)
        await create_link(db_session, test_user.id, 'word', qalam.id, 'root', root_ktb.id)

        deleted = await delete_all_links_for_entity(db_session, test_user.id, 'word', kitab.id)

        assert deleted == 2
        assert await count_links(db_session) == 1


# ---------------------------------------------------------------------------
# Queries and hydration
# ---------------------------------------------------------------------------


class TestLinkQueries:
    """Tests for outgoing/incoming queries and hydration."""

    async def test__get_links_from__hydrates_target(
        self, db_session: AsyncSession, test_user: User, kitab: Word, root_ktb: Root,
    ) -> None:
        await create_link(db_session, test_user.id, 'word', kitab.id, 'root', root_ktb.id)
        links = await get_links_from(db_session, test_user.id, 'word', kitab.id)

        assert len(links) == 1
        assert links[0].entity is not None
        assert links[0].entity.type == EntityType.ROOT
        assert links[0].entity.display_text == 'ك ت ب'
        assert links[0].entity.subtitle == 'k-t-b - writing'

    async def test__get_links_to__hydrates_source(
        self, db_session: AsyncSession, test_user: User, kitab: Word, ayat_kursi: Verse,
    ) -> None:
        await create_link(
            db_session, test_user.id, 'verse', ayat_kursi.id, 'word', kitab.id,
            RelationshipType.EXAMPLE_OF,
        )
        links = await get_links_to(db_session, test_user.id, 'word', kitab.id)

        assert len(links) == 1
        assert links[0].source_id == ayat_kursi.id
        assert links[0].entity is not None
        assert links[0].entity.display_text == '2:255'

    async def test__hydration__deleted_far_end_is_none(
        self, db_session: AsyncSession, test_user: User, kitab: Word, qalam: Word,
    ) -> None:
        await create_link(db_session, test_user.id, 'word', kitab.id, 'word', qalam.id)
        # Bypass the cascade to simulate a dangling edge
        await db_session.delete(qalam)
        await db_session.flush()

        links = await get_links_from(db_session, test_user.id, 'word', kitab.id)
        assert len(links) == 1
        assert links[0].entity is None

    async def test__get_all_links_for__splits_directions(
        self, db_session: AsyncSession, test_user: User,
        kitab: Word, qalam: Word, root_ktb: Root,
    ) -> None:
        await create_link(db_session, test_user.id, 'word', kitab.id, 'root', root_ktb.id)
        await create_link(db_session, test_user.id, 'word', qalam.id, 'word', kitab.id)

        links = await get_all_links_for(db_session, test_user.id, 'word', kitab.id)

        assert [link.target_id for link in links.outgoing] == [root_ktb.id]
        assert [link.source_id for link in links.incoming] == [qalam.id]

    async def test__queries__scoped_to_user(
        self, db_session: AsyncSession, test_user: User, other_user: User, kitab: Word, qalam: Word,
    ) -> None:
        await create_link(db_session, test_user.id, 'word', kitab.id, 'word', qalam.id)

        assert await get_links_from(db_session, other_user.id, 'word', kitab.id) == []
        assert await get_links_from(db_session, None, 'word', kitab.id) == []
        assert await list_links(db_session, other_user.id) == []

    async def test__list_links__filters_by_relationship(
        self, db_session: AsyncSession, test_user: User,
        kitab: Word, qalam: Word, root_ktb: Root,
    ) -> None:
        await create_link(db_session, test_user.id, 'word', kitab.id, 'word', qalam.id)
        await create_link(
            db_session, test_user.id, 'word', kitab.id, 'root', root_ktb.id,
            RelationshipType.DERIVED_FROM,
        )

        assert len(await list_links(db_session, test_user.id)) == 2
        derived = await list_links(db_session, test_user.id, RelationshipType.DERIVED_FROM)
        assert [link.target_id for link in derived] == [root_ktb.id]
