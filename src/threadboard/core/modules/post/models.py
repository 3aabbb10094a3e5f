from datetime import datetime
from uuid import UUID

from pydantic import Field

from threadboard.core.db import MongoModel
from threadboard.utils import now


class Post(MongoModel):
    """Post that owns a threaded discussion."""

    title: str
    content: str
    slug: str  # Derived from title, not unique
    image_url: str | None = None
    user_id: UUID  # Author, moderates the post's comments
    created_at: datetime = Field(default_factory=now)
    edited_at: datetime | None = None
