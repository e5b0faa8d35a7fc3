"""Cross-entity search endpoint."""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session, get_current_user_optional
from models.entity_type import EntityType
from models.user import User
from schemas.search import SearchFilters, SearchResponse
from services import entity_service, search_service

router = APIRouter(prefix="/search", tags=["search"])


@router.get("/", response_model=SearchResponse)
async def search(
    q: str = Query(default="", description="Arabic or Latin search text"),
    types: list[EntityType] | None = Query(default=None, description="Restrict to these types"),
    exact_match: bool = Query(default=False, description="Only return exact matches"),
    limit: int | None = Query(default=None, ge=1, le=200),
    current_user: User | None = Depends(get_current_user_optional),
    db: AsyncSession = Depends(get_async_session),
) -> SearchResponse:
    """
    Rank the caller's entities against q.

    Queries shorter than two characters and unauthenticated callers get no results.
    """
    filters = SearchFilters(types=types, exact_match=exact_match, limit=limit)
    results = []
    if search_service.prepare_query(q) is not None:
        user_id = current_user.id if current_user else None
        collections = await entity_service.load_search_collections(db, user_id, types)
        results = search_service.search(q, collections, filters)
    return SearchResponse(query=q, results=results, total=len(results))
