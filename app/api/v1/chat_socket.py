"""WebSocket endpoint carrying the chat event protocol."""

import asyncio
import uuid

import structlog
from fastapi import APIRouter, Depends, WebSocket
from pydantic import ValidationError

from app.core.chat_runtime import ChatRuntime
from app.core.exceptions import EventFailedError, InvalidFrameError
from app.dependencies import get_runtime
from app.schemas.chat_schema import ClientFrame
from app.services.broadcast_gateway import BroadcastGateway, OutboundEvent
from app.services.chat_coordinator import ERROR, ChatCoordinator

logger = structlog.get_logger()

router = APIRouter(tags=["chat-socket"])


async def dispatch_frame(
    coordinator: ChatCoordinator,
    gateway: BroadcastGateway,
    connection_id: str,
    raw: str,
) -> None:
    """Route one client frame to the matching coordinator protocol."""
    try:
        frame = ClientFrame.model_validate_json(raw)
    except ValidationError:
        gateway.send_to_one(connection_id, ERROR, InvalidFrameError().to_event())
        return

    match frame.event:
        case "join":
            await coordinator.join(connection_id, frame.data)
        case "sendMessage":
            await coordinator.send_message(connection_id, frame.data)
        case "typing":
            await coordinator.typing(connection_id, frame.data)
        case _:
            logger.debug(
                "Ignoring unknown event",
                connection_id=connection_id,
                event_name=frame.event,
            )


async def pump_outbox(
    websocket: WebSocket,
    outbox: asyncio.Queue[OutboundEvent],
    gateway: BroadcastGateway,
    connection_id: str,
) -> None:
    """Write queued events to the socket in order until it goes away.

    A failed write detaches the connection so later sends skip it.
    """
    while True:
        outbound = await outbox.get()
        try:
            await websocket.send_json(outbound.as_frame())
        except Exception as exc:
            logger.info(
                "Stopped writing to closed connection",
                connection_id=connection_id,
                reason=repr(exc),
            )
            gateway.detach(connection_id)
            return


@router.websocket("/ws")
async def chat_socket(
    websocket: WebSocket,
    runtime: ChatRuntime = Depends(get_runtime),
) -> None:
    """One chat connection: read frames, dispatch them, clean up on close."""
    await websocket.accept()
    connection_id = uuid.uuid4().hex
    gateway = runtime.gateway
    coordinator = runtime.coordinator

    outbox = gateway.attach(connection_id)
    writer = asyncio.create_task(pump_outbox(websocket, outbox, gateway, connection_id))
    logger.info("Connection opened", connection_id=connection_id)

    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
            raw = message.get("text")
            if raw is None:
                raw = (message.get("bytes") or b"").decode("utf-8", errors="replace")
            try:
                await dispatch_frame(coordinator, gateway, connection_id, raw)
            except Exception:
                logger.exception("Failed to handle event", connection_id=connection_id)
                gateway.send_to_one(connection_id, ERROR, EventFailedError().to_event())
    finally:
        await coordinator.disconnect(connection_id)
        gateway.detach(connection_id)
        writer.cancel()
        try:
            await writer
        except asyncio.CancelledError:
            pass
        logger.info("Connection closed", connection_id=connection_id)
