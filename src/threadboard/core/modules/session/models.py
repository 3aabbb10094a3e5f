"""Session management models."""

from datetime import datetime
from typing import NewType
from uuid import UUID

from pydantic import BaseModel, Field

from threadboard.core.db import MongoModel
from threadboard.utils import now

AuthToken = NewType("AuthToken", str)


class Session(MongoModel):
    """User authentication session.

    Indexed on auth_token - unique, user_id, created_at (TTL 30 days).
    """

    user_id: UUID
    auth_token: str
    created_at: datetime = Field(default_factory=now)


class Viewer(BaseModel):
    """Identity of whoever is looking at a discussion; user_id is None for anonymous viewers."""

    user_id: UUID | None = None
