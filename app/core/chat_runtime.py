"""Chat runtime lifecycle management."""

from dataclasses import dataclass, field
from datetime import datetime

import structlog

from app.core.config import settings
from app.core.settings import ChatConfig, StorageConfig
from app.models.base import utcnow
from app.repositories.chat_store import ChatStore, open_chat_store
from app.services.broadcast_gateway import BroadcastGateway
from app.services.chat_coordinator import ChatCoordinator
from app.services.cleanup_task import RetentionScheduler
from app.services.session_registry import SessionRegistry

logger = structlog.get_logger()


@dataclass
class ChatRuntime:
    """Process-wide chat components wired together."""

    store: ChatStore
    registry: SessionRegistry
    gateway: BroadcastGateway
    coordinator: ChatCoordinator
    scheduler: RetentionScheduler
    started_at: datetime = field(default_factory=utcnow)

    @property
    def uptime_seconds(self) -> float:
        return (utcnow() - self.started_at).total_seconds()


chat_runtime: ChatRuntime | None = None


def build_chat_runtime(storage: StorageConfig, chat: ChatConfig) -> ChatRuntime:
    """Load the store and wire registry, gateway, coordinator and scheduler."""
    store = open_chat_store(storage, chat)
    registry = SessionRegistry()
    gateway = BroadcastGateway()
    coordinator = ChatCoordinator(
        store=store,
        registry=registry,
        gateway=gateway,
        recent_history_size=chat.recent_history_size,
    )
    scheduler = RetentionScheduler(coordinator, chat.cleanup_interval_seconds)
    return ChatRuntime(
        store=store,
        registry=registry,
        gateway=gateway,
        coordinator=coordinator,
        scheduler=scheduler,
    )


async def init_chat_runtime() -> ChatRuntime:
    """Initialize the chat runtime and start the retention sweep."""
    global chat_runtime  # noqa: PLW0603
    chat_runtime = build_chat_runtime(settings.storage, settings.chat)
    chat_runtime.scheduler.start()
    logger.info("Chat runtime started", data_dir=str(settings.storage.data_dir))
    return chat_runtime


async def close_chat_runtime() -> None:
    """Stop the retention sweep and release the runtime."""
    global chat_runtime  # noqa: PLW0603
    if chat_runtime:
        await chat_runtime.scheduler.stop()
        chat_runtime = None


def get_chat_runtime() -> ChatRuntime:
    """Get the active chat runtime."""
    if chat_runtime is None:
        raise RuntimeError("Chat runtime not initialized")
    return chat_runtime
