from threadboard.core.core import Service
from threadboard.core.modules.comment.permissions import can_edit
from threadboard.core.modules.post.models import Post
from threadboard.core.modules.session.models import AuthToken
from threadboard.core.modules.user.models import User
from threadboard.errors import AccessDeniedError


class AccessService(Service):
    async def ensure_authenticated(self, auth_token: AuthToken) -> User:
        """Ensure the user is authenticated."""
        return await self.core.services.session.get_authenticated_user(auth_token)

    async def ensure_post_author(self, auth_token: AuthToken, post: Post) -> User:
        """Ensure the authenticated user wrote the post, raise AccessDeniedError if not."""
        user = await self.core.services.session.get_authenticated_user(auth_token)
        if not can_edit(user.id, post.user_id):
            raise AccessDeniedError(f"Access denied: user '{user.id}' is not the author of post '{post.id}'")
        return user
