"""Tests for ChatStore."""

import json
from datetime import timedelta

import pytest

from app.core.exceptions import StorageError
from app.core.settings import ChatConfig, StorageConfig
from app.repositories.chat_store import ChatStore, open_chat_store
from tests.conftest import FakeClock


def _reopen(
    storage_config: StorageConfig, chat_config: ChatConfig, clock: FakeClock
) -> ChatStore:
    return open_chat_store(storage_config, chat_config, clock=clock)


class TestUsers:
    """User creation, lookup and updates."""

    def test_create_user(self, store: ChatStore, clock: FakeClock) -> None:
        user = store.create_user("alice", "a.png")
        assert user.id
        assert user.username == "alice"
        assert user.avatar == "a.png"
        assert user.is_online is True
        assert user.created_at == clock.now
        assert user.last_seen == clock.now

    def test_find_by_username_is_exact(self, store: ChatStore) -> None:
        user = store.create_user("Alice", "")
        assert store.find_user_by_username("Alice") == user
        assert store.find_user_by_username("alice") is None

    def test_find_by_id(self, store: ChatStore) -> None:
        user = store.create_user("bob", "")
        assert store.find_user_by_id(user.id) == user
        assert store.find_user_by_id("missing") is None

    def test_update_merges_fields(self, store: ChatStore, clock: FakeClock) -> None:
        user = store.create_user("carol", "old.png")
        later = clock.now + timedelta(minutes=5)

        updated = store.update_user(
            user.id, avatar="new.png", is_online=False, last_seen=later
        )

        assert updated is not None
        assert updated.id == user.id
        assert updated.username == "carol"
        assert updated.avatar == "new.png"
        assert updated.is_online is False
        assert updated.last_seen == later
        assert updated.created_at == user.created_at
        assert store.find_user_by_id(user.id) == updated

    def test_update_unknown_user_returns_none(self, store: ChatStore) -> None:
        assert store.update_user("missing", avatar="x") is None
        assert store.count_users() == 0

    def test_update_rejects_immutable_fields(self, store: ChatStore) -> None:
        user = store.create_user("dave", "")
        with pytest.raises(ValueError):
            store.update_user(user.id, username="eve")

    def test_users_persisted_with_camel_case(
        self, store: ChatStore, storage_config: StorageConfig
    ) -> None:
        store.create_user("frank", "f.png")
        data = json.loads(storage_config.users_file.read_text())
        assert len(data) == 1
        assert data[0]["username"] == "frank"
        assert data[0]["isOnline"] is True
        assert "lastSeen" in data[0]
        assert "createdAt" in data[0]


class TestMessages:
    """Message creation, history and retention."""

    def test_create_message_snapshots_user(
        self, store: ChatStore, clock: FakeClock
    ) -> None:
        user = store.create_user("alice", "a.png")
        message = store.create_message("  hello  ", "text", user.id)

        assert message is not None
        assert message.content == "hello"
        assert message.type == "text"
        assert message.user_id == user.id
        assert message.user == user
        assert message.created_at == clock.now

    def test_snapshot_not_updated_retroactively(self, store: ChatStore) -> None:
        user = store.create_user("alice", "a.png")
        message = store.create_message("hi", "text", user.id)
        store.update_user(user.id, avatar="b.png")

        stored = store.get_recent_messages(1)[0]
        assert message is not None
        assert stored.id == message.id
        assert stored.user.avatar == "a.png"

    def test_blank_text_rejected(self, store: ChatStore) -> None:
        user = store.create_user("alice", "")
        assert store.create_message("   ", "text", user.id) is None
        assert store.count_messages() == 0

    def test_file_message_may_have_empty_content(self, store: ChatStore) -> None:
        user = store.create_user("alice", "")
        message = store.create_message(
            "",
            "image",
            user.id,
            file_url="/uploads/1-2.png",
            file_name="cat.png",
            file_size=42,
            file_mime_type="image/png",
        )
        assert message is not None
        assert message.content == ""
        assert message.file_url == "/uploads/1-2.png"
        assert message.file_size == 42

    def test_unknown_user_rejected(self, store: ChatStore) -> None:
        assert store.create_message("hi", "text", "nobody") is None
        assert store.count_messages() == 0

    def test_recent_messages_oldest_first(self, store: ChatStore) -> None:
        user = store.create_user("alice", "")
        for i in range(5):
            store.create_message(f"m{i}", "text", user.id)

        recent = store.get_recent_messages(3)
        assert [m.content for m in recent] == ["m2", "m3", "m4"]
        assert [m.content for m in store.get_recent_messages(50)] == [
            "m0",
            "m1",
            "m2",
            "m3",
            "m4",
        ]
        assert store.get_recent_messages(0) == []
        assert store.count_messages() == 5

    def test_history_cap(
        self,
        store: ChatStore,
        storage_config: StorageConfig,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setattr(
            "app.repositories.json_collection.os.fsync", lambda fd: None
        )
        user = store.create_user("alice", "")
        for i in range(1001):
            store.create_message(f"m{i}", "text", user.id)

        assert store.count_messages() == 1000
        assert store.get_recent_messages(1000)[0].content == "m1"
        persisted = json.loads(storage_config.messages_file.read_text())
        assert len(persisted) == 1000
        assert persisted[0]["content"] == "m1"
        assert persisted[-1]["content"] == "m1000"

    def test_cleanup_removes_only_expired(
        self,
        store: ChatStore,
        clock: FakeClock,
        storage_config: StorageConfig,
    ) -> None:
        user = store.create_user("alice", "")
        store.create_message("old", "text", user.id)
        clock.now += timedelta(days=6)
        store.create_message("recent", "text", user.id)
        clock.now += timedelta(days=1, seconds=1)

        removed = store.cleanup()

        assert removed == 1
        assert [m.content for m in store.get_recent_messages(10)] == ["recent"]
        persisted = json.loads(storage_config.messages_file.read_text())
        assert [m["content"] for m in persisted] == ["recent"]
        assert store.count_users() == 1

    def test_cleanup_with_nothing_expired(self, store: ChatStore) -> None:
        user = store.create_user("alice", "")
        store.create_message("fresh", "text", user.id)
        assert store.cleanup() == 0
        assert store.count_messages() == 1


class TestRooms:
    """Room records."""

    def test_create_and_list(
        self, store: ChatStore, storage_config: StorageConfig
    ) -> None:
        room = store.create_room("general", description="Everyone")
        assert room.is_private is False
        assert store.list_rooms() == [room]
        persisted = json.loads(storage_config.rooms_file.read_text())
        assert persisted[0]["name"] == "general"
        assert persisted[0]["isPrivate"] is False


class TestReload:
    """Loading persisted state."""

    def test_restart_resets_presence(
        self,
        store: ChatStore,
        storage_config: StorageConfig,
        chat_config: ChatConfig,
        clock: FakeClock,
    ) -> None:
        alice = store.create_user("alice", "")
        bob = store.create_user("bob", "")
        store.update_user(bob.id, is_online=False)
        store.create_message("hi", "text", alice.id)
        store.create_room("general")

        reloaded = _reopen(storage_config, chat_config, clock)

        reloaded_alice = reloaded.find_user_by_id(alice.id)
        reloaded_bob = reloaded.find_user_by_id(bob.id)
        assert reloaded_alice is not None
        assert reloaded_bob is not None
        assert reloaded_alice.is_online is False
        assert reloaded_bob.is_online is False
        assert reloaded_alice.created_at == alice.created_at
        assert [m.content for m in reloaded.get_recent_messages(10)] == ["hi"]
        assert reloaded.get_recent_messages(1)[0].user.username == "alice"
        assert len(reloaded.list_rooms()) == 1

    def test_loads_original_file_layout(
        self,
        storage_config: StorageConfig,
        chat_config: ChatConfig,
        clock: FakeClock,
    ) -> None:
        storage_config.data_dir.mkdir(parents=True)
        storage_config.users_file.write_text(
            json.dumps(
                [
                    {
                        "id": "u1",
                        "username": "legacy",
                        "avatar": "",
                        "isOnline": True,
                        "lastSeen": "2026-01-01T10:00:00.000Z",
                        "createdAt": "2026-01-01T09:00:00.000Z",
                    }
                ]
            )
        )

        reloaded = _reopen(storage_config, chat_config, clock)

        user = reloaded.find_user_by_username("legacy")
        assert user is not None
        assert user.is_online is False
        assert user.created_at.tzinfo is not None

    def test_corrupt_collection_is_fatal(
        self,
        storage_config: StorageConfig,
        chat_config: ChatConfig,
        clock: FakeClock,
    ) -> None:
        storage_config.data_dir.mkdir(parents=True)
        storage_config.messages_file.write_text("{not json")

        with pytest.raises(StorageError):
            _reopen(storage_config, chat_config, clock)
