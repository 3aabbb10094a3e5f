from threadboard.web.routers.auth import router as auth_router
from threadboard.web.routers.comments import router as comments_router
from threadboard.web.routers.posts import router as posts_router
from threadboard.web.routers.profile import router as profile_router

__all__ = [
    "auth_router",
    "comments_router",
    "posts_router",
    "profile_router",
]
