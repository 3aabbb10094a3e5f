import re
from typing import Any
from uuid import UUID

import structlog
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import PyMongoError

from threadboard.core.core import Service
from threadboard.core.modules.post.models import Post
from threadboard.core.pagination import PaginationResult
from threadboard.errors import NotFoundError, StoreUnavailableError, ValidationError
from threadboard.utils import now, slugify

logger = structlog.get_logger(__name__)


def build_title_query(query: str | None) -> dict[str, Any]:
    """Case-insensitive substring match on title; empty query matches everything."""
    if query is None or not query.strip():
        return {}
    return {"title": {"$regex": re.escape(query.strip()), "$options": "i"}}


class PostService(Service):
    """Manages posts; the comment core only reads a post's author from here."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._collection = database.get_collection("posts")

    async def on_start(self) -> None:
        """Create indexes for listing newest first and author lookup."""
        await self._collection.create_index([("created_at", -1)])
        await self._collection.create_index([("user_id", 1)])

    async def create_post(self, user_id: UUID, title: str, content: str, image_url: str | None = None) -> Post:
        """Create a post, title and content are required."""
        title = title.strip()
        if not title or not content.strip():
            raise ValidationError("Please fill in both title and content")

        post = Post(title=title, content=content, slug=slugify(title), image_url=image_url or None, user_id=user_id)
        await self._collection.insert_one(post.to_mongo())
        logger.info("post_created", post_id=post.id, user_id=user_id)
        return post

    async def get_post(self, post_id: UUID) -> Post:
        """Get a post by ID."""
        try:
            doc = await self._collection.find_one({"_id": post_id})
        except PyMongoError as e:
            logger.warning("post_lookup_failed", post_id=post_id, error=str(e))
            raise StoreUnavailableError from e
        if doc is None:
            raise NotFoundError(f"Post '{post_id}' not found")
        return Post.model_validate(doc)

    async def list_posts(self, query: str | None = None, limit: int = 50, offset: int = 0) -> PaginationResult[Post]:
        """Get paginated posts newest first, optionally filtered by title substring."""
        mongo_query = build_title_query(query)
        try:
            total = await self._collection.count_documents(mongo_query)
            cursor = self._collection.find(mongo_query).sort("created_at", -1).skip(offset).limit(limit)
            items = await Post.list_cursor(cursor)
        except PyMongoError as e:
            logger.warning("post_listing_failed", query=query, error=str(e))
            raise StoreUnavailableError from e
        return PaginationResult(items=items, total=total, limit=limit, offset=offset)

    async def update_post(
        self, post_id: UUID, title: str | None = None, content: str | None = None, image_url: str | None = None
    ) -> Post:
        """Partially update a post. Parameters left as None are not changed."""
        updates: dict[str, Any] = {}
        if title is not None:
            if not title.strip():
                raise ValidationError("Title cannot be empty")
            updates["title"] = title.strip()
            updates["slug"] = slugify(title)
        if content is not None:
            if not content.strip():
                raise ValidationError("Content cannot be empty")
            updates["content"] = content
        if image_url is not None:
            updates["image_url"] = image_url or None

        if updates:
            updates["edited_at"] = now()
            await self._collection.update_one({"_id": post_id}, {"$set": updates})
        return await self.get_post(post_id)

    async def delete_post(self, post_id: UUID) -> None:
        """Delete a post together with its whole discussion."""
        removed = await self.core.services.comment.delete_comments_by_post(post_id)
        await self._collection.delete_one({"_id": post_id})
        logger.info("post_deleted", post_id=post_id, comments_removed=removed)
