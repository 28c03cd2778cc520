"""Event delivery to live chat connections."""

import asyncio
from dataclasses import dataclass
from typing import Any

import structlog
from fastapi.encoders import jsonable_encoder

logger = structlog.get_logger()


@dataclass(frozen=True)
class OutboundEvent:
    """A server event ready to be written to one connection."""

    event: str
    data: Any

    def as_frame(self) -> dict[str, Any]:
        return {"event": self.event, "data": self.data}


class BroadcastGateway:
    """Fire-and-forget delivery to one connection, the room, or all but one.

    Each attached connection owns an unbounded outbox queue drained by its
    own writer task, so sending never waits on the network and events reach
    a connection in the order they were sent. Payloads are encoded when
    sent, which freezes their content at that moment. Connections that are
    not attached are skipped.
    """

    def __init__(self) -> None:
        self._outboxes: dict[str, asyncio.Queue[OutboundEvent]] = {}
        self._room: set[str] = set()

    # --- Connection lifecycle ---

    def attach(self, connection_id: str) -> asyncio.Queue[OutboundEvent]:
        """Register a connection and return the outbox its writer drains."""
        outbox: asyncio.Queue[OutboundEvent] = asyncio.Queue()
        self._outboxes[connection_id] = outbox
        return outbox

    def detach(self, connection_id: str) -> None:
        self._room.discard(connection_id)
        self._outboxes.pop(connection_id, None)

    def join_room(self, connection_id: str) -> None:
        if connection_id in self._outboxes:
            self._room.add(connection_id)

    def leave_room(self, connection_id: str) -> None:
        self._room.discard(connection_id)

    def in_room(self, connection_id: str) -> bool:
        return connection_id in self._room

    @property
    def connection_count(self) -> int:
        return len(self._outboxes)

    # --- Delivery ---

    def send_to_one(self, connection_id: str, event: str, payload: Any) -> None:
        self._deliver([connection_id], OutboundEvent(event, jsonable_encoder(payload)))

    def send_to_room(self, event: str, payload: Any) -> None:
        self._deliver(list(self._room), OutboundEvent(event, jsonable_encoder(payload)))

    def send_to_room_except(self, connection_id: str, event: str, payload: Any) -> None:
        targets = [target for target in self._room if target != connection_id]
        self._deliver(targets, OutboundEvent(event, jsonable_encoder(payload)))

    def _deliver(self, targets: list[str], outbound: OutboundEvent) -> None:
        for target in targets:
            outbox = self._outboxes.get(target)
            if outbox is None:
                logger.debug("Skipping detached connection", connection_id=target)
                continue
            outbox.put_nowait(outbound)
