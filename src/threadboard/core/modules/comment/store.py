"""Persistence of comments in the relational store."""

from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any
from uuid import UUID

import structlog
from pymongo import ReturnDocument
from pymongo.asynchronous.collection import AsyncCollection
from pymongo.errors import PyMongoError, WriteError

from threadboard.core.modules.comment.models import Comment
from threadboard.errors import StoreUnavailableError, ValidationError
from threadboard.utils import now

logger = structlog.get_logger(__name__)


class CommentStore(ABC):
    """Operations the discussion needs from comment storage.

    Implementations never return partial results: every method either
    completes or raises StoreUnavailableError / ValidationError.
    """

    @abstractmethod
    async def list_by_post(self, post_id: UUID) -> list[Comment]:
        """All comments of a post ordered by created_at ascending."""

    @abstractmethod
    async def insert(self, content: str, post_id: UUID, user_id: UUID, parent_id: UUID | None) -> Comment:
        """Persist a new comment and return it with its assigned ID and timestamp."""

    @abstractmethod
    async def delete(self, comment_id: UUID, acting_user_id: UUID) -> list[UUID]:
        """Delete a comment with all its replies.

        Only the comment author or the post author may delete. Returns the
        removed IDs, empty when nothing matched the comment and the acting user.
        """

    @abstractmethod
    async def update_content(self, comment_id: UUID, acting_user_id: UUID, content: str) -> Comment | None:
        """Replace the text of a comment owned by acting_user_id, None when nothing matched."""

    @abstractmethod
    async def delete_by_post(self, post_id: UUID) -> int:
        """Delete every comment of a post and return how many were removed."""


@contextmanager
def _translate_errors(operation: str) -> Iterator[None]:
    try:
        yield
    except WriteError as e:
        logger.warning("comment_write_rejected", operation=operation, code=e.code)
        raise ValidationError(f"Comment {operation} was rejected by the store") from e
    except PyMongoError as e:
        logger.warning("comment_store_unavailable", operation=operation, error=str(e))
        raise StoreUnavailableError from e


class MongoCommentStore(CommentStore):
    """CommentStore backed by the `comments` collection.

    The `posts` collection is consulted only to grant post authors the right
    to delete comments under their posts.
    """

    def __init__(self, comments: AsyncCollection[dict[str, Any]], posts: AsyncCollection[dict[str, Any]]) -> None:
        self._comments = comments
        self._posts = posts

    async def create_indexes(self) -> None:
        await self._comments.create_index([("post_id", 1), ("created_at", 1)])
        await self._comments.create_index([("parent_id", 1)])

    async def list_by_post(self, post_id: UUID) -> list[Comment]:
        with _translate_errors("listing"):
            cursor = self._comments.find({"post_id": post_id}).sort([("created_at", 1), ("_id", 1)])
            return await Comment.list_cursor(cursor)

    async def insert(self, content: str, post_id: UUID, user_id: UUID, parent_id: UUID | None) -> Comment:
        with _translate_errors("insert"):
            if parent_id is not None:
                parent = await self._comments.find_one({"_id": parent_id, "post_id": post_id}, projection={"_id": 1})
                if parent is None:
                    raise ValidationError(f"Comment '{parent_id}' does not belong to post '{post_id}'")

            comment = Comment(content=content, post_id=post_id, user_id=user_id, parent_id=parent_id)
            await self._comments.insert_one(comment.to_mongo())
            return comment

    async def delete(self, comment_id: UUID, acting_user_id: UUID) -> list[UUID]:
        with _translate_errors("delete"):
            doc = await self._comments.find_one({"_id": comment_id}, projection={"post_id": 1})
            if doc is None:
                return []
            post_id = doc["post_id"]

            predicate: dict[str, Any] = {"_id": comment_id, "user_id": acting_user_id}
            if await self._posts.count_documents({"_id": post_id, "user_id": acting_user_id}, limit=1):
                predicate = {"_id": comment_id, "post_id": post_id}

            if not await self._comments.count_documents(predicate, limit=1):
                return []

            # Deepest level first and the comment itself last, so no stored reply loses its parent
            levels = await self._find_reply_levels(post_id, comment_id)
            for level in reversed(levels):
                await self._comments.delete_many({"_id": {"$in": level}, "post_id": post_id})
            await self._comments.delete_one(predicate)

        descendants = [reply_id for level in levels for reply_id in level]
        logger.info("comment_deleted", comment_id=comment_id, user_id=acting_user_id, replies_removed=len(descendants))
        return [comment_id, *descendants]

    async def update_content(self, comment_id: UUID, acting_user_id: UUID, content: str) -> Comment | None:
        with _translate_errors("update"):
            doc = await self._comments.find_one_and_update(
                {"_id": comment_id, "user_id": acting_user_id},
                {"$set": {"content": content, "edited_at": now()}},
                return_document=ReturnDocument.AFTER,
            )
        return None if doc is None else Comment.model_validate(doc)

    async def delete_by_post(self, post_id: UUID) -> int:
        with _translate_errors("delete"):
            result = await self._comments.delete_many({"post_id": post_id})
        return result.deleted_count

    async def _find_reply_levels(self, post_id: UUID, comment_id: UUID) -> list[list[UUID]]:
        """Reply IDs grouped by depth below comment_id, stopping at IDs already seen."""
        seen = {comment_id}
        levels: list[list[UUID]] = []
        frontier = [comment_id]
        while frontier:
            cursor = self._comments.find({"post_id": post_id, "parent_id": {"$in": frontier}}, projection={"_id": 1})
            frontier = [doc["_id"] async for doc in cursor if doc["_id"] not in seen]
            seen.update(frontier)
            if frontier:
                levels.append(frontier)
        return levels
