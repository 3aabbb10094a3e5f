"""Shared pytest fixtures."""

import asyncio
from datetime import UTC, datetime, timedelta
from uuid import UUID

import pytest

from threadboard.core.modules.comment.models import Comment
from threadboard.core.modules.comment.store import CommentStore
from threadboard.core.modules.post.models import Post
from threadboard.errors import NotFoundError

POST_ID = UUID("11111111-1111-1111-1111-111111111111")
POST_OWNER_ID = UUID("22222222-2222-2222-2222-222222222222")
AUTHOR_ID = UUID("33333333-3333-3333-3333-333333333333")
STRANGER_ID = UUID("44444444-4444-4444-4444-444444444444")

BASE_TIME = datetime(2025, 1, 1, 12, 0, tzinfo=UTC)


def cid(number: int) -> UUID:
    """Readable comment ID: cid(1) == UUID(int=1)."""
    return UUID(int=number)


def make_comment(number: int, parent: int | None = None, user_id: UUID = AUTHOR_ID, content: str | None = None) -> Comment:
    """Comment whose created_at grows with its number."""
    return Comment(
        id=cid(number),
        content=content or f"comment {number}",
        post_id=POST_ID,
        user_id=user_id,
        parent_id=cid(parent) if parent is not None else None,
        created_at=BASE_TIME + timedelta(minutes=number),
    )


class InMemoryCommentStore(CommentStore):
    """CommentStore keeping comments in a list and recording every call."""

    def __init__(self, post_owners: dict[UUID, UUID], comments: list[Comment] | None = None) -> None:
        self.post_owners = post_owners
        self.comments: list[Comment] = list(comments or [])
        self.calls: list[str] = []
        self.fail_with: Exception | None = None
        self.fail_on: set[str] = set()  # calls failing with fail_with, all of them when empty
        self.blocked: dict[str, asyncio.Event] = {}
        self.hang = False
        self._clock = BASE_TIME + timedelta(days=1)

    async def _enter(self, name: str) -> None:
        self.calls.append(name)
        if name in self.blocked:
            await self.blocked[name].wait()
        if self.hang:
            await asyncio.Event().wait()
        if self.fail_with is not None and (not self.fail_on or name in self.fail_on):
            raise self.fail_with

    async def list_by_post(self, post_id: UUID) -> list[Comment]:
        await self._enter("list_by_post")
        return sorted((c for c in self.comments if c.post_id == post_id), key=lambda c: c.created_at)

    async def insert(self, content: str, post_id: UUID, user_id: UUID, parent_id: UUID | None) -> Comment:
        await self._enter("insert")
        self._clock += timedelta(seconds=1)
        comment = Comment(content=content, post_id=post_id, user_id=user_id, parent_id=parent_id, created_at=self._clock)
        self.comments.append(comment)
        return comment

    async def delete(self, comment_id: UUID, acting_user_id: UUID) -> list[UUID]:
        await self._enter("delete")
        target = next((c for c in self.comments if c.id == comment_id), None)
        if target is None or acting_user_id not in (target.user_id, self.post_owners.get(target.post_id)):
            return []
        removed = [comment_id]
        frontier = [comment_id]
        while frontier:
            frontier = [c.id for c in self.comments if c.parent_id in frontier and c.id not in removed]
            removed.extend(frontier)
        self.comments = [c for c in self.comments if c.id not in removed]
        return removed

    async def update_content(self, comment_id: UUID, acting_user_id: UUID, content: str) -> Comment | None:
        await self._enter("update_content")
        for index, comment in enumerate(self.comments):
            if comment.id == comment_id and comment.user_id == acting_user_id:
                updated = comment.model_copy(update={"content": content, "edited_at": self._clock})
                self.comments[index] = updated
                return updated
        return None

    async def delete_by_post(self, post_id: UUID) -> int:
        await self._enter("delete_by_post")
        before = len(self.comments)
        self.comments = [c for c in self.comments if c.post_id != post_id]
        return before - len(self.comments)


@pytest.fixture
def post():
    """Post authored by POST_OWNER_ID."""
    return Post(id=POST_ID, title="Hello world", content="First post", slug="hello-world", user_id=POST_OWNER_ID)


@pytest.fixture
def load_post(post):
    """Post collaborator returning the fixture post."""

    async def _load_post(post_id: UUID) -> Post:
        if post_id != post.id:
            raise NotFoundError(f"Post '{post_id}' not found")
        return post

    return _load_post


@pytest.fixture
def store():
    """Empty in-memory comment store knowing the fixture post's owner."""
    return InMemoryCommentStore({POST_ID: POST_OWNER_ID})
