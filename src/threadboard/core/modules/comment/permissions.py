"""Ownership rules for comment mutations."""

from uuid import UUID

from threadboard.errors import AuthenticationError, ValidationError


def can_delete(acting_user_id: UUID | None, comment_owner_id: UUID, post_owner_id: UUID) -> bool:
    """A comment may be removed by its author or by the author of its post, by nobody else."""
    if acting_user_id is None:
        return False
    return acting_user_id in (comment_owner_id, post_owner_id)


def can_edit(acting_user_id: UUID | None, owner_id: UUID) -> bool:
    """Only the author may change what they wrote."""
    return acting_user_id is not None and acting_user_id == owner_id


def ensure_can_create(acting_user_id: UUID | None, content: str) -> None:
    """Check an anonymous viewer or blank text before anything reaches the store.

    Raises:
        AuthenticationError: If there is no logged in user
        ValidationError: If the content is empty or whitespace only
    """
    if acting_user_id is None:
        raise AuthenticationError("You must be logged in to comment")
    if not content or not content.strip():
        raise ValidationError("Please enter a comment")
