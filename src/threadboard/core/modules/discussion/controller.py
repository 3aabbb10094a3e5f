import asyncio
from collections.abc import AsyncGenerator, Awaitable, Callable, Coroutine
from contextlib import asynccontextmanager
from typing import Any
from uuid import UUID

import structlog

from threadboard.core.modules.comment.models import Comment
from threadboard.core.modules.comment.permissions import can_delete, can_edit, ensure_can_create
from threadboard.core.modules.comment.store import CommentStore
from threadboard.core.modules.comment.tree import CommentTree, build_comment_tree
from threadboard.core.modules.discussion.models import (
    CommandResult,
    DiscussionState,
    DiscussionStatus,
    Editing,
    NodeMode,
    Replying,
    Viewing,
)
from threadboard.core.modules.post.models import Post
from threadboard.core.modules.session.models import Viewer
from threadboard.errors import (
    AccessDeniedError,
    AuthenticationError,
    NotFoundError,
    StoreUnavailableError,
    UnknownParentError,
    UserError,
    ValidationError,
)

logger = structlog.get_logger(__name__)

PostLoader = Callable[[UUID], Awaitable[Post]]


class DiscussionController:
    """Comment thread of one post as seen by one viewer.

    Holds the flat comment list together with the tree built from it. Commands
    run one at a time, each store call is bounded by `timeout` seconds, and
    every command reports failure through its CommandResult instead of raising.
    """

    def __init__(
        self,
        post_id: UUID,
        viewer: Viewer,
        store: CommentStore,
        load_post: PostLoader,
        timeout: float | None = 10.0,
    ) -> None:
        self.post_id = post_id
        self.viewer = viewer
        self._store = store
        self._load_post = load_post
        self._timeout = timeout
        self._lock = asyncio.Lock()

        self._status = DiscussionStatus.LOADING
        self._comments: list[Comment] = []
        self._tree: CommentTree | None = None
        self._post_owner_id: UUID | None = None
        self._error: str | None = None
        self._mode: NodeMode = Viewing()

    @property
    def state(self) -> DiscussionState:
        return DiscussionState(status=self._status, tree=self._tree, error=self._error)

    @property
    def tree(self) -> CommentTree | None:
        return self._tree

    @property
    def comments(self) -> tuple[Comment, ...]:
        return tuple(self._comments)

    @property
    def post_owner_id(self) -> UUID | None:
        return self._post_owner_id

    @property
    def mode(self) -> NodeMode:
        return self._mode

    # === Commands ===
    async def load(self) -> CommandResult:
        """Fetch the post's comments and rebuild the tree."""
        async with self._lock:
            return await self._run("load", self._load())

    async def add_comment(self, content: str) -> CommandResult:
        """Add a root comment, then reload so server-assigned fields are authoritative."""
        async with self._lock:
            return await self._run("add_comment", self._add(content, None))

    async def add_reply(self, parent_id: UUID, content: str) -> CommandResult:
        """Reply to a comment present in the loaded tree."""
        async with self._lock:
            return await self._run("add_reply", self._add(content, parent_id))

    async def delete_comment(self, comment_id: UUID) -> CommandResult:
        """Delete a comment with its replies (author or post author only)."""
        async with self._lock:
            return await self._run("delete_comment", self._delete(comment_id))

    async def edit_comment(self, comment_id: UUID, content: str) -> CommandResult:
        """Replace the text of the viewer's own comment."""
        async with self._lock:
            return await self._run("edit_comment", self._edit(comment_id, content))

    # === Form state ===
    def begin_reply(self, target_id: UUID) -> CommandResult:
        """Open the reply form under a comment."""
        try:
            tree = self._require_ready()
            if self.viewer.user_id is None:
                raise AuthenticationError("You must be logged in to comment")
            if target_id not in tree:
                raise UnknownParentError(target_id)
        except UserError as e:
            return CommandResult(e)
        self._mode = Replying(target_id=target_id)
        return CommandResult()

    def begin_edit(self, target_id: UUID) -> CommandResult:
        """Open the edit form of a comment, prefilled with its current text."""
        try:
            comment = self._require_comment(target_id)
            if not can_edit(self.viewer.user_id, comment.user_id):
                raise AccessDeniedError("Only the author can edit this comment")
        except UserError as e:
            return CommandResult(e)
        self._mode = Editing(target_id=target_id, draft=comment.content)
        return CommandResult()

    def update_draft(self, draft: str) -> CommandResult:
        if not isinstance(self._mode, Editing):
            return CommandResult(ValidationError("No comment is being edited"))
        self._mode = Editing(target_id=self._mode.target_id, draft=draft)
        return CommandResult()

    def cancel(self) -> None:
        self._mode = Viewing()

    # === Internals ===
    async def _run(self, command: str, operation: Coroutine[Any, Any, None]) -> CommandResult:
        self._error = None
        try:
            await operation
        except UserError as e:
            logger.warning(
                "discussion_command_failed",
                command=command,
                post_id=self.post_id,
                user_id=self.viewer.user_id,
                error_type=type(e).__name__,
                error=str(e),
            )
            self._error = str(e)
            return CommandResult(e)
        return CommandResult()

    async def _call[T](self, awaitable: Awaitable[T]) -> T:
        """Await a collaborator call, turning a timeout into StoreUnavailableError."""
        try:
            async with asyncio.timeout(self._timeout):
                return await awaitable
        except TimeoutError as e:
            raise StoreUnavailableError(f"Comment store did not answer within {self._timeout:g} seconds") from e

    async def _load(self) -> None:
        self._status = DiscussionStatus.LOADING
        try:
            if self._post_owner_id is None:
                post = await self._call(self._load_post(self.post_id))
                self._post_owner_id = post.user_id
            comments = await self._call(self._store.list_by_post(self.post_id))
            tree = build_comment_tree(comments)
        except UserError:
            self._status = DiscussionStatus.FAILED
            raise
        self._comments = list(comments)
        self._tree = tree
        self._status = DiscussionStatus.READY
        logger.debug("discussion_loaded", post_id=self.post_id, comment_count=len(comments))

    async def _add(self, content: str, parent_id: UUID | None) -> None:
        tree = self._require_ready()
        ensure_can_create(self.viewer.user_id, content)
        if parent_id is not None and parent_id not in tree:
            raise UnknownParentError(parent_id)
        user_id = self._require_user()

        async with self._mutating():
            comment = await self._call(self._store.insert(content, self.post_id, user_id, parent_id))
        logger.info("comment_added", post_id=self.post_id, comment_id=comment.id, parent_id=parent_id)
        self._mode = Viewing()
        try:
            await self._load()
        except UserError as e:
            # The comment is stored, only the refresh failed
            logger.warning("discussion_refresh_failed", post_id=self.post_id, comment_id=comment.id, error=str(e))
            self._apply([*self._comments, comment])
            self._status = DiscussionStatus.READY
            self._error = f"Your comment was saved, but the discussion could not be refreshed: {e}"

    async def _delete(self, comment_id: UUID) -> None:
        comment = self._require_comment(comment_id)
        user_id = self._require_user()
        if self._post_owner_id is None or not can_delete(user_id, comment.user_id, self._post_owner_id):
            raise AccessDeniedError("Only the comment author or the post author can delete this comment")

        async with self._mutating():
            removed_ids = await self._call(self._store.delete(comment_id, user_id))
        if not removed_ids:
            raise AccessDeniedError("Comment was not deleted: it no longer exists or you do not own it")

        tree = self._require_ready()
        removed = {comment_id, *removed_ids, *tree.descendants(comment_id)}
        self._apply([c for c in self._comments if c.id not in removed])
        if isinstance(self._mode, Replying | Editing) and self._mode.target_id in removed:
            self._mode = Viewing()

    async def _edit(self, comment_id: UUID, content: str) -> None:
        comment = self._require_comment(comment_id)
        user_id = self._require_user()
        if not content or not content.strip():
            raise ValidationError("Please enter updated content")
        if not can_edit(user_id, comment.user_id):
            raise AccessDeniedError("Only the author can edit this comment")

        async with self._mutating():
            updated = await self._call(self._store.update_content(comment_id, user_id, content))
        if updated is None:
            raise AccessDeniedError("Comment was not updated: it no longer exists or you do not own it")

        self._apply([updated if c.id == comment_id else c for c in self._comments])
        self._mode = Viewing()

    def _apply(self, comments: list[Comment]) -> None:
        """Replace the local list after a mutation that keeps sibling order."""
        self._tree = build_comment_tree(comments)
        self._comments = comments

    @asynccontextmanager
    async def _mutating(self) -> AsyncGenerator[None]:
        self._status = DiscussionStatus.MUTATING
        try:
            yield
        finally:
            self._status = DiscussionStatus.READY

    def _require_ready(self) -> CommentTree:
        if self._status is not DiscussionStatus.READY or self._tree is None:
            raise ValidationError("Discussion is not loaded, reload and try again")
        return self._tree

    def _require_user(self) -> UUID:
        if self.viewer.user_id is None:
            raise AuthenticationError("You must be logged in to change comments")
        return self.viewer.user_id

    def _require_comment(self, comment_id: UUID) -> Comment:
        comment = self._require_ready().get(comment_id)
        if comment is None:
            raise NotFoundError(f"Comment '{comment_id}' not found")
        return comment

