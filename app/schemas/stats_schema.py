"""Health and statistics schemas."""

from datetime import datetime

from app.models.base import CamelModel


class HealthResponse(CamelModel):
    """Liveness probe result."""

    status: str
    timestamp: datetime
    uptime: float


class StatsResponse(CamelModel):
    """Counters projected from the store and the session registry."""

    online_users: int
    total_users: int
    total_messages: int
    uptime: float
