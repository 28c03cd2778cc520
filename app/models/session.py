"""Live connection session."""

from typing import Any

from app.models.user import User


class Session(User):
    """A user bound to one live connection.

    Holds a snapshot of the user taken at join time. Presence in the
    session registry is what makes the user online.
    """

    connection_id: str
    is_online: bool = True

    @classmethod
    def from_user(cls, user: User, connection_id: str) -> "Session":
        data: dict[str, Any] = user.model_dump()
        data.update(is_online=True, connection_id=connection_id)
        return cls.model_validate(data)
