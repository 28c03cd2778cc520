"""Read-only chat API router."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from app.core.config import settings
from app.dependencies import get_chat_query_service
from app.models.message import Message
from app.models.room import Room
from app.models.session import Session
from app.schemas.response_schema import ApiResponse, success_response
from app.schemas.stats_schema import StatsResponse
from app.services.chat_query_service import ChatQueryService

router = APIRouter(prefix="/api/v1", tags=["chat"])

ChatQueryServiceDep = Annotated[ChatQueryService, Depends(get_chat_query_service)]


@router.get("/messages", response_model=ApiResponse[list[Message]])
async def list_messages(
    service: ChatQueryServiceDep,
    limit: int = Query(
        default=settings.chat.api_history_size,
        ge=1,
        le=settings.chat.history_limit,
    ),
) -> dict:
    """List the most recent messages, oldest first."""
    return success_response(service.recent_messages(limit))


@router.get("/users/online", response_model=ApiResponse[list[Session]])
async def list_online_users(service: ChatQueryServiceDep) -> dict:
    """List the users with a live session."""
    return success_response(service.online_users())


@router.get("/rooms", response_model=ApiResponse[list[Room]])
async def list_rooms(service: ChatQueryServiceDep) -> dict:
    """List persisted rooms."""
    return success_response(service.rooms())


@router.get("/stats", response_model=ApiResponse[StatsResponse])
async def get_stats(service: ChatQueryServiceDep) -> dict:
    """Presence and history counters."""
    return success_response(service.stats())
