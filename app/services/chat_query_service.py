"""Read-only projections of chat state for the HTTP API."""

from app.models.base import utcnow
from app.models.message import Message
from app.models.room import Room
from app.models.session import Session
from app.repositories.chat_store import ChatStore
from app.schemas.stats_schema import HealthResponse, StatsResponse
from app.services.session_registry import SessionRegistry


class ChatQueryService:
    """Answers history, presence and statistics queries without side effects."""

    def __init__(
        self,
        store: ChatStore,
        registry: SessionRegistry,
        uptime_seconds: float,
    ) -> None:
        self._store = store
        self._registry = registry
        self._uptime_seconds = uptime_seconds

    def recent_messages(self, limit: int) -> list[Message]:
        return self._store.get_recent_messages(limit)

    def online_users(self) -> list[Session]:
        return self._registry.list_all()

    def rooms(self) -> list[Room]:
        return self._store.list_rooms()

    def health(self) -> HealthResponse:
        return HealthResponse(
            status="healthy",
            timestamp=utcnow(),
            uptime=round(self._uptime_seconds, 3),
        )

    def stats(self) -> StatsResponse:
        return StatsResponse(
            online_users=len(self._registry),
            total_users=self._store.count_users(),
            total_messages=self._store.count_messages(),
            uptime=round(self._uptime_seconds, 3),
        )
