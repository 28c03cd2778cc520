"""Chat room record."""

from app.models.base import CamelModel, Timestamp


class Room(CamelModel):
    """Persisted room metadata. Delivery always uses the single shared room."""

    id: str
    name: str
    description: str | None = None
    is_private: bool = False
    created_at: Timestamp
