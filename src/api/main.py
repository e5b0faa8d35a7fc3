"""FastAPI application entry point."""
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from api.routers import backlinks, entities, health, links, notes, search, verses
from core.config import get_settings
from services.exceptions import UnauthorizedError


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint,
    ) -> Response:
        """Process request and add security headers to response."""
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        return response


app_settings = get_settings()

app = FastAPI(
    title="Study Center API",
    description="Arabic-aware search and cross-reference graph for Quran and Arabic study notes.",
    version="0.1.0",
)


@app.exception_handler(UnauthorizedError)
async def unauthorized_exception_handler(
    _request: Request, exc: UnauthorizedError,
) -> JSONResponse:
    """Writes without an identity are rejected with 401."""
    return JSONResponse(
        status_code=401,
        content={"detail": str(exc)},
        headers={"WWW-Authenticate": "Bearer"},
    )


# Security headers middleware (runs after CORS, adds headers to responses)
app.add_middleware(SecurityHeadersMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=app_settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(search.router)
app.include_router(links.router)
app.include_router(backlinks.router)
app.include_router(notes.router)
app.include_router(verses.router)
app.include_router(entities.router)
