"""Shared utility functions for service layer."""
from uuid import UUID

from services.exceptions import UnauthorizedError


def require_user(user_id: UUID | None) -> UUID:
    """Return user_id, or raise UnauthorizedError for writes without an identity."""
    if user_id is None:
        raise UnauthorizedError
    return user_id


def parse_uuid(value: object) -> UUID | None:
    """Parse a UUID from a string or UUID; None when malformed."""
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        return None
