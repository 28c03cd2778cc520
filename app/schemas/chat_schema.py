"""Chat socket event schemas."""

from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, ValidationError

from app.core.exceptions import InvalidMessageError
from app.models.base import CamelModel
from app.models.message import MESSAGE_TYPES, Message, MessageType
from app.models.session import Session
from app.schemas.upload_schema import FileInfo


class ClientFrame(BaseModel):
    """Envelope of every frame a client sends over the socket."""

    event: str = Field(min_length=1)
    data: Any = None


# --- Inbound payloads ---


class JoinRequest(BaseModel):
    """Presence announcement sent once per connection."""

    model_config = ConfigDict(frozen=True)

    username: str = Field(min_length=1, max_length=100)
    avatar: str = Field(default="", max_length=2048)


class TypingRequest(BaseModel):
    """Typing indicator toggle."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    is_typing: bool = Field(default=False, alias="isTyping")


def _as_text(value: Any) -> Any:
    # Scalars become text the way JSON spells them; containers are left for
    # validation to reject.
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, int | float):
        return str(value)
    return value


def _as_message_type(value: Any) -> str:
    return value if value in MESSAGE_TYPES else "text"


MessageText = Annotated[str, BeforeValidator(_as_text)]
LenientMessageType = Annotated[MessageType, BeforeValidator(_as_message_type)]


class ContentMessagePayload(BaseModel):
    """``{content, type, file}`` shaped send request."""

    content: MessageText
    type: LenientMessageType = "text"
    file: FileInfo | None = None


class TextMessagePayload(BaseModel):
    """Legacy ``{text, type, file}`` shaped send request."""

    text: MessageText
    type: LenientMessageType = "text"
    file: FileInfo | None = None


class MessageIntent(BaseModel):
    """Canonical message a connection asked to send."""

    model_config = ConfigDict(frozen=True)

    content: str
    type: MessageType
    file: FileInfo | None = None


def parse_send_message(raw: Any) -> MessageIntent:
    """Normalize a send request into a ``MessageIntent``.

    A non-empty ``text`` field wins over ``content``. A file or image
    message may omit both when it carries a file descriptor. Anything else
    raises ``InvalidMessageError``.
    """
    if not isinstance(raw, dict):
        raise InvalidMessageError()

    try:
        if raw.get("text"):
            legacy = TextMessagePayload.model_validate(raw)
            return MessageIntent(content=legacy.text, type=legacy.type, file=legacy.file)
        if raw.get("content"):
            shaped = ContentMessagePayload.model_validate(raw)
        elif raw.get("file") and raw.get("type") in ("file", "image"):
            shaped = ContentMessagePayload.model_validate({**raw, "content": ""})
        else:
            raise InvalidMessageError()
    except ValidationError as exc:
        raise InvalidMessageError() from exc

    return MessageIntent(content=shaped.content, type=shaped.type, file=shaped.file)


# --- Outbound payloads ---


class JoinSuccessPayload(CamelModel):
    """Personal confirmation sent to a connection that joined."""

    user: Session
    online_users: list[Session]
    recent_messages: list[Message]


class PresencePayload(CamelModel):
    """``userJoined`` / ``userLeft`` notice with the fresh online list."""

    user: Session
    online_users: list[Session]


class UserTypingPayload(CamelModel):
    """Typing state of another participant."""

    user: Session
    is_typing: bool
