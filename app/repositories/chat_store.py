"""Durable store for users, messages and rooms."""

import os
import uuid
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Any

import structlog

from app.core.exceptions import StorageError
from app.core.settings import ChatConfig, StorageConfig
from app.models.base import utcnow
from app.models.message import Message, MessageType
from app.models.room import Room
from app.models.user import IMMUTABLE_USER_FIELDS, User
from app.repositories.json_collection import JsonCollection

logger = structlog.get_logger()

DEFAULT_HISTORY_LIMIT = 1000
DEFAULT_RETENTION = timedelta(days=7)


class ChatStore:
    """Owns the persisted users, messages and rooms.

    State lives in memory and each mutation rewrites the affected
    collection on disk before returning. Callers serialize access; the
    store itself takes no lock.
    """

    def __init__(
        self,
        users: JsonCollection[User],
        messages: JsonCollection[Message],
        rooms: JsonCollection[Room],
        history_limit: int = DEFAULT_HISTORY_LIMIT,
        retention: timedelta = DEFAULT_RETENTION,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._users_file = users
        self._messages_file = messages
        self._rooms_file = rooms
        self._history_limit = history_limit
        self._retention = retention
        self._clock = clock

        self._users: dict[str, User] = {}
        self._messages: list[Message] = []
        self._rooms: dict[str, Room] = {}

    def load(self) -> None:
        """Read every collection from disk.

        Online flags are never trusted across a restart: the session
        registry starts empty, so every loaded user is marked offline.
        """
        self._users = {
            user.id: user.model_copy(update={"is_online": False})
            for user in self._users_file.load()
        }
        self._messages = self._messages_file.load()[-self._history_limit :]
        self._rooms = {room.id: room for room in self._rooms_file.load()}
        logger.info(
            "Chat data loaded",
            users=len(self._users),
            messages=len(self._messages),
            rooms=len(self._rooms),
        )

    # --- Users ---

    def find_user_by_username(self, username: str) -> User | None:
        """Return the first user whose username matches exactly."""
        for user in self._users.values():
            if user.username == username:
                return user
        return None

    def find_user_by_id(self, user_id: str) -> User | None:
        return self._users.get(user_id)

    def create_user(self, username: str, avatar: str) -> User:
        """Create and persist a new online user."""
        now = self._clock()
        user = User(
            id=str(uuid.uuid4()),
            username=username,
            avatar=avatar,
            is_online=True,
            last_seen=now,
            created_at=now,
        )
        self._users[user.id] = user
        self._save_users()
        return user

    def update_user(self, user_id: str, **changes: Any) -> User | None:
        """Merge ``changes`` into an existing user.

        Returns ``None`` when the id is unknown. Raises ``ValueError`` for
        unknown or immutable fields.
        """
        invalid = set(changes) - (set(User.model_fields) - IMMUTABLE_USER_FIELDS)
        if invalid:
            raise ValueError(f"Cannot update user fields: {sorted(invalid)}")

        user = self._users.get(user_id)
        if user is None:
            return None

        updated = User.model_validate({**user.model_dump(), **changes})
        self._users[user_id] = updated
        self._save_users()
        return updated

    def count_users(self) -> int:
        return len(self._users)

    # --- Messages ---

    def create_message(
        self,
        content: str,
        message_type: MessageType,
        user_id: str,
        file_url: str | None = None,
        file_name: str | None = None,
        file_size: int | None = None,
        file_mime_type: str | None = None,
    ) -> Message | None:
        """Append a message to history.

        Returns ``None`` when a text message is blank or the sender does
        not resolve to a known user.
        """
        if not isinstance(content, str):
            return None
        content = content.strip()
        if message_type == "text" and not content:
            return None

        user = self._users.get(user_id)
        if user is None:
            return None

        message = Message(
            id=str(uuid.uuid4()),
            content=content,
            type=message_type,
            user_id=user_id,
            user=user,
            file_url=file_url,
            file_name=file_name,
            file_size=file_size,
            file_mime_type=file_mime_type,
            created_at=self._clock(),
        )
        self._messages.append(message)
        if len(self._messages) > self._history_limit:
            self._messages = self._messages[-self._history_limit :]

        self._save_messages()
        return message

    def get_recent_messages(self, limit: int = 50) -> list[Message]:
        """Return up to ``limit`` newest messages, oldest first."""
        if limit <= 0:
            return []
        return self._messages[-limit:]

    def count_messages(self) -> int:
        return len(self._messages)

    def cleanup(self) -> int:
        """Drop messages older than the retention window.

        Returns the number of messages removed. Users are left untouched.
        """
        cutoff = self._clock() - self._retention
        kept = [message for message in self._messages if message.created_at > cutoff]
        removed = len(self._messages) - len(kept)
        if removed:
            self._messages = kept
            self._save_messages()
        return removed

    # --- Rooms ---

    def create_room(
        self,
        name: str,
        description: str | None = None,
        is_private: bool = False,
    ) -> Room:
        room = Room(
            id=str(uuid.uuid4()),
            name=name,
            description=description,
            is_private=is_private,
            created_at=self._clock(),
        )
        self._rooms[room.id] = room
        self._rooms_file.save(list(self._rooms.values()))
        return room

    def list_rooms(self) -> list[Room]:
        return list(self._rooms.values())

    # --- Persistence ---

    def _save_users(self) -> None:
        self._users_file.save(list(self._users.values()))

    def _save_messages(self) -> None:
        self._messages_file.save(self._messages)


def open_chat_store(
    storage: StorageConfig,
    chat: ChatConfig,
    clock: Callable[[], datetime] = utcnow,
) -> ChatStore:
    """Create the data directory if needed and load a store from it.

    Failure here is fatal for the process: there is nowhere to persist to.
    """
    data_dir = storage.data_dir
    try:
        data_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise StorageError(f"Cannot create data directory {data_dir}") from exc
    if not os.access(data_dir, os.W_OK):
        raise StorageError(f"Data directory {data_dir} is not writable")

    store = ChatStore(
        users=JsonCollection(storage.users_file, User),
        messages=JsonCollection(storage.messages_file, Message),
        rooms=JsonCollection(storage.rooms_file, Room),
        history_limit=chat.history_limit,
        retention=chat.retention,
        clock=clock,
    )
    store.load()
    return store
