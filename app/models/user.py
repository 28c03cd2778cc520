"""Chat user record."""

from pydantic import Field

from app.models.base import CamelModel, Timestamp, utcnow


class User(CamelModel):
    """Identity of a chat participant, created on first join."""

    id: str
    username: str
    avatar: str = ""
    is_online: bool = False
    last_seen: Timestamp = Field(default_factory=utcnow)
    created_at: Timestamp = Field(default_factory=utcnow)


# Fields that never change after creation.
IMMUTABLE_USER_FIELDS = frozenset({"id", "username", "created_at"})
