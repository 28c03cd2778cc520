"""Chat message record."""

from typing import Literal

from app.models.base import CamelModel, Timestamp
from app.models.user import User

MessageType = Literal["text", "file", "image"]
MESSAGE_TYPES: tuple[str, ...] = ("text", "file", "image")


class Message(CamelModel):
    """A chat event as stored in history.

    ``user`` is a snapshot of the sender taken when the message was created
    and is not refreshed when the user later changes.
    """

    id: str
    content: str
    type: MessageType = "text"
    user_id: str
    user: User
    file_url: str | None = None
    file_name: str | None = None
    file_size: int | None = None
    file_mime_type: str | None = None
    created_at: Timestamp
