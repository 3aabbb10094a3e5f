from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from uuid import UUID

from threadboard.config import Config
from threadboard.core.core import Core
from threadboard.core.modules.discussion.controller import DiscussionController
from threadboard.core.modules.discussion.models import DiscussionView
from threadboard.core.modules.post.models import Post
from threadboard.core.modules.session.models import AuthToken
from threadboard.core.modules.user.models import UserView
from threadboard.core.pagination import PaginationResult
from threadboard.errors import AuthenticationError


class App:
    """Facade for all application operations, resolves identity and permissions before delegating to Core."""

    def __init__(self, config: Config) -> None:
        self._core = Core(config)

    @asynccontextmanager
    async def lifespan(self) -> AsyncGenerator[None]:
        """Application lifespan management - delegates to Core."""
        async with self._core.lifespan():
            yield

    # === Identity ===
    async def is_auth_token_valid(self, auth_token: AuthToken) -> bool:
        """Check if authentication token is valid."""
        return await self._core.services.session.is_auth_token_valid(auth_token)

    async def signup(self, email: str, password: str) -> AuthToken:
        """Register a new account and log it in."""
        user = await self._core.services.user.create_user(email, password)
        return await self._core.services.session.create_session(user.id)

    async def login(self, email: str, password: str) -> AuthToken:
        """Authenticate user and create session."""
        user = self._core.services.user.verify_password(email, password)
        if user is None:
            raise AuthenticationError("Invalid email or password")
        return await self._core.services.session.create_session(user.id)

    async def logout(self, auth_token: AuthToken) -> None:
        """Invalidate user session."""
        await self._core.services.access.ensure_authenticated(auth_token)
        await self._core.services.session.invalidate_session(auth_token)

    async def get_current_user(self, auth_token: AuthToken) -> UserView:
        """Get current authenticated user profile."""
        current_user = await self._core.services.access.ensure_authenticated(auth_token)
        return UserView.from_domain(current_user)

    # === Posts ===
    async def list_posts(self, query: str | None = None, limit: int = 50, offset: int = 0) -> PaginationResult[Post]:
        """List posts newest first, optionally searching titles (public)."""
        return await self._core.services.post.list_posts(query, limit, offset)

    async def get_post(self, post_id: UUID) -> Post:
        """Get a single post (public)."""
        return await self._core.services.post.get_post(post_id)

    async def create_post(self, auth_token: AuthToken, title: str, content: str, image_url: str | None = None) -> Post:
        """Create a post authored by the current user."""
        current_user = await self._core.services.access.ensure_authenticated(auth_token)
        return await self._core.services.post.create_post(current_user.id, title, content, image_url)

    async def update_post(
        self,
        auth_token: AuthToken,
        post_id: UUID,
        title: str | None = None,
        content: str | None = None,
        image_url: str | None = None,
    ) -> Post:
        """Update a post (author only)."""
        post = await self._core.services.post.get_post(post_id)
        await self._core.services.access.ensure_post_author(auth_token, post)
        return await self._core.services.post.update_post(post.id, title, content, image_url)

    async def delete_post(self, auth_token: AuthToken, post_id: UUID) -> None:
        """Delete a post and its comments (author only)."""
        post = await self._core.services.post.get_post(post_id)
        await self._core.services.access.ensure_post_author(auth_token, post)
        await self._core.services.post.delete_post(post.id)

    # === Discussion ===
    async def get_discussion(self, auth_token: AuthToken | None, post_id: UUID) -> DiscussionView:
        """Get threaded comments of a post (anonymous viewers allowed)."""
        discussion = await self._open_discussion(auth_token, post_id)
        return self._discussion_view(discussion)

    async def create_comment(
        self, auth_token: AuthToken | None, post_id: UUID, content: str, parent_id: UUID | None = None
    ) -> DiscussionView:
        """Add a root comment, or a reply when parent_id is given (logged in users only)."""
        discussion = await self._open_discussion(auth_token, post_id)
        if parent_id is None:
            result = await discussion.add_comment(content)
        else:
            result = await discussion.add_reply(parent_id, content)
        result.raise_for_error()
        return self._discussion_view(discussion)

    async def edit_comment(
        self, auth_token: AuthToken | None, post_id: UUID, comment_id: UUID, content: str
    ) -> DiscussionView:
        """Change the text of a comment (its author only)."""
        discussion = await self._open_discussion(auth_token, post_id)
        (await discussion.edit_comment(comment_id, content)).raise_for_error()
        return self._discussion_view(discussion)

    async def delete_comment(self, auth_token: AuthToken | None, post_id: UUID, comment_id: UUID) -> DiscussionView:
        """Delete a comment and its replies (comment author or post author)."""
        discussion = await self._open_discussion(auth_token, post_id)
        (await discussion.delete_comment(comment_id)).raise_for_error()
        return self._discussion_view(discussion)

    # === Private helpers ===
    async def _open_discussion(self, auth_token: AuthToken | None, post_id: UUID) -> DiscussionController:
        """Resolve the viewer once and load the discussion, raising if the load fails."""
        viewer = await self._core.services.session.get_viewer(auth_token)
        discussion = self._core.services.comment.open_discussion(post_id, viewer)
        (await discussion.load()).raise_for_error()
        return discussion

    @staticmethod
    def _discussion_view(discussion: DiscussionController) -> DiscussionView:
        tree = discussion.tree
        if tree is None:
            raise RuntimeError("Discussion has no tree after a successful command")
        return DiscussionView.from_tree(discussion.post_id, tree)
