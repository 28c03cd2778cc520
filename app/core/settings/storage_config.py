"""Durable store configuration."""

from pathlib import Path

from pydantic import BaseModel


class StorageConfig(BaseModel, frozen=True):
    """On-disk layout of the chat collections."""

    data_dir: Path

    @property
    def users_file(self) -> Path:
        return self.data_dir / "users.json"

    @property
    def messages_file(self) -> Path:
        return self.data_dir / "messages.json"

    @property
    def rooms_file(self) -> Path:
        return self.data_dir / "rooms.json"
