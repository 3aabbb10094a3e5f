from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from threadboard.core.db import MongoModel
from threadboard.utils import now


class Comment(MongoModel):
    """Comment on a post; parent_id links a reply to the comment it answers."""

    content: str
    post_id: UUID
    user_id: UUID
    parent_id: UUID | None = None  # None for root comments
    created_at: datetime = Field(default_factory=now)
    edited_at: datetime | None = None


class CommentThread(BaseModel):
    """Comment with its replies nested (API representation)."""

    id: UUID = Field(..., description="Comment ID")
    content: str = Field(..., description="Comment text")
    user_id: UUID = Field(..., description="Author ID")
    parent_id: UUID | None = Field(None, description="ID of the comment this one replies to")
    created_at: datetime = Field(..., description="Creation timestamp")
    edited_at: datetime | None = Field(None, description="Last edit timestamp")
    replies: list["CommentThread"] = Field(default_factory=list, description="Direct replies, oldest first")

    @classmethod
    def from_domain(cls, comment: Comment) -> "CommentThread":
        """Create a thread node without replies."""
        return cls(
            id=comment.id,
            content=comment.content,
            user_id=comment.user_id,
            parent_id=comment.parent_id,
            created_at=comment.created_at,
            edited_at=comment.edited_at,
        )
