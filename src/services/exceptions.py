"""Shared exceptions for service layer operations."""
from uuid import UUID


class UnauthorizedError(Exception):
    """Raised when a write is attempted without an authenticated user."""

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(message)


class NotFoundError(Exception):
    """
    Raised when an entity or link does not exist or belongs to another user.

    Both cases produce the same error so callers cannot tell whether another user's
    entity exists.
    """

    def __init__(self, entity_type: str, entity_id: UUID | str) -> None:
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} not found: {entity_id}")


class ConflictError(Exception):
    """Base exception for writes rejected because of existing graph state."""

    error_code = "CONFLICT"

    def __init__(self, message: str) -> None:
        super().__init__(message)


class SelfLinkError(ConflictError):
    """Raised when a link would connect an entity to itself."""

    error_code = "SELF_LINK"

    def __init__(self, entity_type: str, entity_id: UUID | str) -> None:
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"Cannot link {entity_type} {entity_id} to itself")


class DuplicateLinkError(ConflictError):
    """Raised when a link already exists for the same ordered (source, target) pair."""

    error_code = "DUPLICATE_LINK"

    def __init__(self) -> None:
        super().__init__("A link between these entities already exists")


class InvalidLinkError(Exception):
    """Raised for an unknown entity type or relationship type."""

    def __init__(self, message: str) -> None:
        super().__init__(message)


class InvalidVerseRangeError(Exception):
    """Raised when a surah number or ayah range is out of bounds."""

    def __init__(self, message: str) -> None:
        super().__init__(message)


class FieldLimitExceededError(Exception):
    """Raised when a field value exceeds its configured length limit."""

    def __init__(self, field: str, current: int, limit: int) -> None:
        self.field = field
        self.current = current
        self.limit = limit
        super().__init__(f"{field.capitalize()} exceeds maximum length of {limit:,} characters")
