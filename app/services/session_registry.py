"""In-memory registry of live sessions."""

from app.models.session import Session


class SessionRegistry:
    """Maps connection ids to the session joined on that connection.

    Never persisted and holds no lock. The coordinator serializes access.
    """

    def __init__(self) -> None:
        self._sessions: dict[str, Session] = {}

    def put(self, connection_id: str, session: Session) -> None:
        self._sessions[connection_id] = session

    def get(self, connection_id: str) -> Session | None:
        return self._sessions.get(connection_id)

    def remove(self, connection_id: str) -> Session | None:
        """Remove and return the session, or ``None`` if there was none."""
        return self._sessions.pop(connection_id, None)

    def list_all(self) -> list[Session]:
        """Snapshot of every online session. Order carries no meaning."""
        return list(self._sessions.values())

    def __len__(self) -> int:
        return len(self._sessions)
