from dataclasses import dataclass
from enum import StrEnum
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field

from threadboard.core.modules.comment.models import CommentThread
from threadboard.core.modules.comment.tree import CommentTree
from threadboard.core.modules.discussion.rendering import EMPTY_DISCUSSION
from threadboard.errors import UserError


class DiscussionStatus(StrEnum):
    """Lifecycle of a discussion opened for one post view."""

    LOADING = "loading"
    READY = "ready"
    MUTATING = "mutating"
    FAILED = "failed"


class DiscussionState(BaseModel):
    """Snapshot handed to the presentation layer."""

    status: DiscussionStatus
    tree: CommentTree | None = None
    error: str | None = None  # Message of the last failed command, if any


@dataclass(frozen=True)
class CommandResult:
    """Outcome of a discussion command. Failures carry the error instead of raising it."""

    error: UserError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def message(self) -> str | None:
        return None if self.error is None else str(self.error)

    def raise_for_error(self) -> None:
        """Re-raise the carried error, for callers that report failures as exceptions."""
        if self.error is not None:
            raise self.error


class Viewing(BaseModel):
    kind: Literal["viewing"] = "viewing"


class Replying(BaseModel):
    kind: Literal["replying"] = "replying"
    target_id: UUID


class Editing(BaseModel):
    kind: Literal["editing"] = "editing"
    target_id: UUID
    draft: str


NodeMode = Viewing | Replying | Editing


class DiscussionView(BaseModel):
    """Threaded comments of a post (API representation)."""

    post_id: UUID = Field(..., description="Post the comments belong to")
    comment_count: int = Field(..., description="Number of comments at any depth", ge=0)
    threads: list[CommentThread] = Field(..., description="Root comments with nested replies, oldest first")
    notice: str | None = Field(None, description="Message to show instead of an empty list")

    @classmethod
    def from_tree(cls, post_id: UUID, tree: CommentTree) -> "DiscussionView":
        return cls(
            post_id=post_id,
            comment_count=len(tree),
            threads=tree.to_threads(),
            notice=EMPTY_DISCUSSION if tree.is_empty else None,
        )
