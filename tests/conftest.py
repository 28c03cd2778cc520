"""Pytest configuration and fixtures."""

import os
import tempfile

# Point the global settings at a scratch area before the app is imported.
_TEST_ROOT = tempfile.mkdtemp(prefix="group-chat-tests-")
os.environ.setdefault("DATA_DIR", os.path.join(_TEST_ROOT, "data"))
os.environ.setdefault("UPLOAD_DIR", os.path.join(_TEST_ROOT, "uploads"))

from collections.abc import AsyncGenerator, Generator  # noqa: E402
from datetime import UTC, datetime  # noqa: E402
from pathlib import Path  # noqa: E402
from typing import Any  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from app.core.chat_runtime import ChatRuntime  # noqa: E402
from app.core.settings import ChatConfig, FileUploadConfig, StorageConfig  # noqa: E402
from app.repositories.chat_store import ChatStore, open_chat_store  # noqa: E402
from app.services.broadcast_gateway import BroadcastGateway, OutboundEvent  # noqa: E402
from app.services.chat_coordinator import ChatCoordinator  # noqa: E402
from app.services.cleanup_task import RetentionScheduler  # noqa: E402
from app.services.session_registry import SessionRegistry  # noqa: E402


class FakeClock:
    """Controllable replacement for ``utcnow``."""

    def __init__(self, now: datetime | None = None) -> None:
        self.now = now or datetime(2026, 3, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now


class RecordingGateway(BroadcastGateway):
    """Gateway that also keeps one global log of every enqueued event."""

    def __init__(self) -> None:
        super().__init__()
        self.log: list[tuple[str, str, Any]] = []

    def _deliver(self, targets: list[str], outbound: OutboundEvent) -> None:
        for target in targets:
            if target in self._outboxes:
                self.log.append((target, outbound.event, outbound.data))
        super()._deliver(targets, outbound)

    def events_for(self, connection_id: str) -> list[str]:
        return [event for target, event, _ in self.log if target == connection_id]

    def payloads_for(self, connection_id: str, event: str) -> list[Any]:
        return [
            data
            for target, name, data in self.log
            if target == connection_id and name == event
        ]


# --- Configuration ---


@pytest.fixture
def chat_config() -> ChatConfig:
    return ChatConfig(
        history_limit=1000,
        recent_history_size=50,
        api_history_size=100,
        retention_days=7,
        cleanup_interval_seconds=3600,
    )


@pytest.fixture
def storage_config(tmp_path: Path) -> StorageConfig:
    return StorageConfig(data_dir=tmp_path / "data")


@pytest.fixture
def upload_config(tmp_path: Path) -> FileUploadConfig:
    return FileUploadConfig(
        upload_dir=tmp_path / "uploads",
        max_file_size_mb=1,
        url_prefix="/uploads",
    )


# --- Chat components ---


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(
    storage_config: StorageConfig, chat_config: ChatConfig, clock: FakeClock
) -> ChatStore:
    """A store backed by a fresh temporary data directory."""
    return open_chat_store(storage_config, chat_config, clock=clock)


@pytest.fixture
def registry() -> SessionRegistry:
    return SessionRegistry()


@pytest.fixture
def gateway() -> RecordingGateway:
    return RecordingGateway()


@pytest.fixture
def coordinator(
    store: ChatStore,
    registry: SessionRegistry,
    gateway: RecordingGateway,
    clock: FakeClock,
) -> ChatCoordinator:
    return ChatCoordinator(
        store=store,
        registry=registry,
        gateway=gateway,
        recent_history_size=50,
        clock=clock,
    )


@pytest.fixture
def runtime(
    store: ChatStore,
    registry: SessionRegistry,
    gateway: RecordingGateway,
    coordinator: ChatCoordinator,
) -> ChatRuntime:
    return ChatRuntime(
        store=store,
        registry=registry,
        gateway=gateway,
        coordinator=coordinator,
        scheduler=RetentionScheduler(coordinator, interval_seconds=3600),
    )


# --- App override & client fixtures ---


def _get_app(runtime: ChatRuntime, upload_config: FileUploadConfig):  # type: ignore[no-untyped-def]
    """Import app lazily and point its dependencies at the test runtime."""
    from app.dependencies import get_file_upload_config, get_runtime
    from app.main import app

    app.dependency_overrides[get_runtime] = lambda: runtime
    app.dependency_overrides[get_file_upload_config] = lambda: upload_config
    return app


@pytest.fixture
async def async_client(
    runtime: ChatRuntime, upload_config: FileUploadConfig
) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client for the HTTP API."""
    application = _get_app(runtime, upload_config)
    transport = ASGITransport(app=application)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    application.dependency_overrides.clear()


@pytest.fixture
def socket_client(
    runtime: ChatRuntime, upload_config: FileUploadConfig
) -> Generator[TestClient, None, None]:
    """Synchronous client sharing one event loop across all its sockets."""
    application = _get_app(runtime, upload_config)
    with TestClient(application) as client:
        yield client
    application.dependency_overrides.clear()
