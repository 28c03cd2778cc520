"""Chat history and retention configuration."""

from datetime import timedelta

from pydantic import BaseModel


class ChatConfig(BaseModel, frozen=True):
    """History sizes, retention window and cleanup cadence."""

    history_limit: int
    recent_history_size: int
    api_history_size: int
    retention_days: int
    cleanup_interval_seconds: int

    @property
    def retention(self) -> timedelta:
        """Maximum age of a message before the retention sweep drops it."""
        return timedelta(days=self.retention_days)
