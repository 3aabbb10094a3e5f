from typing import Any
from uuid import UUID

import structlog
from pymongo.asynchronous.database import AsyncDatabase

from threadboard.core.core import Service
from threadboard.core.modules.comment.store import MongoCommentStore
from threadboard.core.modules.discussion.controller import DiscussionController
from threadboard.core.modules.session.models import Viewer

logger = structlog.get_logger(__name__)


class CommentService(Service):
    """Owns the comment store and opens discussions on posts."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self.store = MongoCommentStore(database.get_collection("comments"), database.get_collection("posts"))

    async def on_start(self) -> None:
        """Create indexes for per-post listing and reply lookup."""
        await self.store.create_indexes()

    def open_discussion(self, post_id: UUID, viewer: Viewer) -> DiscussionController:
        """Start a discussion view for a post; call `load()` before any other command."""
        return DiscussionController(
            post_id=post_id,
            viewer=viewer,
            store=self.store,
            load_post=self.core.services.post.get_post,
            timeout=self.core.config.store_timeout,
        )

    async def delete_comments_by_post(self, post_id: UUID) -> int:
        """Delete all comments of a post and return how many were removed."""
        count = await self.store.delete_by_post(post_id)
        logger.debug("post_comments_deleted", post_id=post_id, count=count)
        return count
