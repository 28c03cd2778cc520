"""Presence and message orchestration for the shared chat room."""

import asyncio
from collections.abc import Callable
from datetime import datetime
from typing import Any

import structlog
from pydantic import ValidationError

from app.core.exceptions import (
    AppException,
    EmptyMessageError,
    JoinFailedError,
    MessageRejectedError,
)
from app.models.base import utcnow
from app.models.message import Message
from app.models.session import Session
from app.models.user import User
from app.repositories.chat_store import ChatStore
from app.schemas.chat_schema import (
    JoinRequest,
    JoinSuccessPayload,
    MessageIntent,
    PresencePayload,
    TypingRequest,
    UserTypingPayload,
    parse_send_message,
)
from app.services.broadcast_gateway import BroadcastGateway
from app.services.session_registry import SessionRegistry

logger = structlog.get_logger()

# Server event names
RECENT_MESSAGES = "recentMessages"
ONLINE_USERS = "onlineUsers"
JOIN_SUCCESS = "joinSuccess"
USER_JOINED = "userJoined"
USER_LEFT = "userLeft"
USER_TYPING = "userTyping"
NEW_MESSAGE = "newMessage"
ERROR = "error"


class ChatCoordinator:
    """Runs the join, send, typing and disconnect protocols.

    A single lock covers the store and the session registry. Each protocol
    holds it from its first read to its last send, so no other protocol
    can interleave with it. Sends only enqueue on the gateway and never
    wait on a connection.
    """

    def __init__(
        self,
        store: ChatStore,
        registry: SessionRegistry,
        gateway: BroadcastGateway,
        recent_history_size: int = 50,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._store = store
        self._registry = registry
        self._gateway = gateway
        self._recent_history_size = recent_history_size
        self._clock = clock
        self._lock = asyncio.Lock()

    def online_users(self) -> list[Session]:
        return self._registry.list_all()

    async def join(self, connection_id: str, payload: Any) -> Session | None:
        """Bind a user to the connection and announce it.

        The joining connection receives recent history, the online list and
        a confirmation, in that order, before anyone else hears about it.
        Any failure leaves the connection unjoined and is reported to it
        alone.
        """
        async with self._lock:
            registered = False
            try:
                request = JoinRequest.model_validate(payload)
                user = self._resolve_user(request)
                session = Session.from_user(user, connection_id)
                self._registry.put(connection_id, session)
                self._gateway.join_room(connection_id)
                registered = True

                online_users = self._registry.list_all()
                recent_messages = self._store.get_recent_messages(
                    self._recent_history_size
                )

                self._gateway.send_to_one(connection_id, RECENT_MESSAGES, recent_messages)
                self._gateway.send_to_one(connection_id, ONLINE_USERS, online_users)
                self._gateway.send_to_one(
                    connection_id,
                    JOIN_SUCCESS,
                    JoinSuccessPayload(
                        user=session,
                        online_users=online_users,
                        recent_messages=recent_messages,
                    ),
                )
                self._gateway.send_to_room_except(
                    connection_id,
                    USER_JOINED,
                    PresencePayload(user=session, online_users=online_users),
                )
            except ValidationError as exc:
                logger.warning(
                    "Invalid join request",
                    connection_id=connection_id,
                    errors=exc.error_count(),
                )
                self._gateway.send_to_one(connection_id, ERROR, JoinFailedError().to_event())
                return None
            except Exception:
                logger.exception("Failed to join chat", connection_id=connection_id)
                if registered:
                    self._registry.remove(connection_id)
                    self._gateway.leave_room(connection_id)
                self._gateway.send_to_one(connection_id, ERROR, JoinFailedError().to_event())
                return None

        logger.info(
            "User joined chat",
            username=session.username,
            user_id=session.id,
            connection_id=connection_id,
            online=len(online_users),
        )
        return session

    async def send_message(self, connection_id: str, payload: Any) -> Message | None:
        """Store a message and broadcast it to the whole room, sender included."""
        async with self._lock:
            session = self._registry.get(connection_id)
            if session is None:
                logger.debug("Dropping message before join", connection_id=connection_id)
                return None

            try:
                intent = self._validate_intent(payload)
            except AppException as exc:
                logger.info(
                    "Message rejected",
                    connection_id=connection_id,
                    code=exc.code,
                )
                self._gateway.send_to_one(connection_id, ERROR, exc.to_event())
                return None

            try:
                message = self._store.create_message(
                    content=intent.content,
                    message_type=intent.type,
                    user_id=session.id,
                    file_url=intent.file.url if intent.file else None,
                    file_name=intent.file.originalname if intent.file else None,
                    file_size=intent.file.size if intent.file else None,
                    file_mime_type=intent.file.mimetype if intent.file else None,
                )
            except Exception:
                logger.exception("Failed to store message", connection_id=connection_id)
                message = None

            if message is None:
                self._gateway.send_to_one(
                    connection_id, ERROR, MessageRejectedError().to_event()
                )
                return None

            self._gateway.send_to_room(NEW_MESSAGE, message)

        logger.info(
            "Message sent",
            username=session.username,
            message_type=message.type,
            preview=message.content[:50],
        )
        return message

    async def typing(self, connection_id: str, payload: Any) -> None:
        """Tell everyone else in the room that this user is (not) typing."""
        async with self._lock:
            session = self._registry.get(connection_id)
            if session is None:
                return
            try:
                request = TypingRequest.model_validate(payload or {})
            except ValidationError:
                logger.debug("Ignoring invalid typing event", connection_id=connection_id)
                return
            self._gateway.send_to_room_except(
                connection_id,
                USER_TYPING,
                UserTypingPayload(user=session, is_typing=request.is_typing),
            )

    async def disconnect(self, connection_id: str) -> Session | None:
        """Drop the connection's session and tell the remaining room.

        Calling it again for the same connection does nothing.
        """
        async with self._lock:
            session = self._registry.remove(connection_id)
            self._gateway.leave_room(connection_id)
            if session is None:
                return None

            try:
                self._store.update_user(
                    session.id, is_online=False, last_seen=self._clock()
                )
            except Exception:
                logger.exception("Failed to mark user offline", user_id=session.id)

            self._gateway.send_to_room(
                USER_LEFT,
                PresencePayload(user=session, online_users=self._registry.list_all()),
            )

        logger.info(
            "User left chat",
            username=session.username,
            user_id=session.id,
            connection_id=connection_id,
        )
        return session

    async def run_cleanup(self) -> int:
        """Apply the retention sweep under the same lock as the protocols."""
        async with self._lock:
            return self._store.cleanup()

    def _resolve_user(self, request: JoinRequest) -> User:
        existing = self._store.find_user_by_username(request.username)
        if existing is None:
            return self._store.create_user(request.username, request.avatar)

        updated = self._store.update_user(
            existing.id,
            is_online=True,
            avatar=request.avatar,
            last_seen=self._clock(),
        )
        if updated is None:
            raise LookupError(f"User {existing.id} vanished during join")
        return updated

    @staticmethod
    def _validate_intent(payload: Any) -> MessageIntent:
        intent = parse_send_message(payload)
        if intent.type == "text" and not intent.content.strip():
            raise EmptyMessageError()
        return intent
