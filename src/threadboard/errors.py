from abc import ABC
from uuid import UUID


class UserError(ABC, Exception):
    """Base class for user-related errors.

    All errors that inherit from UserError will have their messages
    displayed to the user. These errors should not contain any
    sensitive information.
    """


class NotFoundError(UserError):
    """Raised when a requested resource is not found."""

    def __init__(self, message: str = "Document not found") -> None:
        super().__init__(message)


class AuthenticationError(UserError):
    """Raised when authentication fails or a mutation is attempted anonymously."""

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(message)


class AccessDeniedError(UserError):
    """Raised when a user tries to modify a resource they do not own."""


class ValidationError(UserError):
    """Raised when user input fails validation or the store rejects a write."""


class UnknownParentError(UserError):
    """Raised when a reply targets a comment that is not in the loaded discussion."""

    def __init__(self, parent_id: UUID) -> None:
        super().__init__(f"Comment '{parent_id}' no longer exists, reload the discussion")
        self.parent_id = parent_id


class StoreUnavailableError(UserError):
    """Raised when the comment store cannot be reached or times out."""

    def __init__(self, message: str = "Comment store is unavailable, try again later") -> None:
        super().__init__(message)


class DataIntegrityError(UserError):
    """Raised when stored comments do not form a forest (cycles, duplicates)."""

    def __init__(self, message: str, comment_ids: list[UUID] | None = None) -> None:
        super().__init__(message)
        self.comment_ids = comment_ids or []
