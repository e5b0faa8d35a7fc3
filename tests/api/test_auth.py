"""Tests for authentication when DEV_MODE is disabled."""
from collections.abc import AsyncGenerator
from uuid import uuid4

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import Settings


@pytest.fixture
def non_dev_settings(database_url: str) -> Settings:
    """Create settings with DEV_MODE=False for auth testing."""
    return Settings(
        database_url=database_url,
        dev_mode=False,
        auth0_domain='test.auth0.com',
        auth0_audience='https://test-api',
        auth0_client_id='test-client-id',
    )


@pytest.fixture
async def auth_required_client(
    db_session: AsyncSession,
    non_dev_settings: Settings,
) -> AsyncGenerator[AsyncClient]:
    """Create a test client with auth required (DEV_MODE=False)."""
    from api.main import app
    from core.config import get_settings
    from db.session import get_async_session

    async def override_get_async_session() -> AsyncGenerator[AsyncSession]:
        yield db_session

    def override_get_settings() -> Settings:
        return non_dev_settings

    app.dependency_overrides[get_async_session] = override_get_async_session
    app.dependency_overrides[get_settings] = override_get_settings

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url='http://test',
    ) as test_client:
        yield test_client

    app.dependency_overrides.clear()


async def test__write_without_token_returns_401(auth_required_client: AsyncClient) -> None:
    response = await auth_required_client.post('/notes/', json={'title': 'Anonymous'})

    assert response.status_code == 401
    assert response.json()['detail'] == 'Not authenticated'


async def test__delete_without_token_returns_401(auth_required_client: AsyncClient) -> None:
    response = await auth_required_client.delete(f'/entities/word/{uuid4()}')
    assert response.status_code == 401


async def test__reads_without_token_are_empty(auth_required_client: AsyncClient) -> None:
    search = await auth_required_client.get('/search/', params={'q': 'كتاب'})
    assert search.status_code == 200
    assert search.json()['results'] == []

    backlinks = await auth_required_client.get(f'/backlinks/word/{uuid4()}')
    assert backlinks.json() == []

    links = await auth_required_client.get(f'/links/entity/word/{uuid4()}')
    assert links.json() == {'outgoing': [], 'incoming': []}

    overlapping = await auth_required_client.get(
        '/verses/overlapping', params={'surah_number': 2, 'ayah_start': 255},
    )
    assert overlapping.json() == []


async def test__single_get_without_token_is_not_found(auth_required_client: AsyncClient) -> None:
    response = await auth_required_client.get(f'/notes/{uuid4()}')
    assert response.status_code == 404


async def test__invalid_token_returns_401(auth_required_client: AsyncClient) -> None:
    response = await auth_required_client.get(
        '/notes/',
        headers={'Authorization': 'Bearer invalid-token'},
    )
    assert response.status_code == 401
    assert response.json()['detail'] == 'Invalid token'
