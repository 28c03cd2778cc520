"""Global dependencies for the application."""

from fastapi import Depends

from app.core.chat_runtime import ChatRuntime, get_chat_runtime
from app.core.config import settings
from app.core.settings import FileUploadConfig
from app.services.chat_query_service import ChatQueryService
from app.services.upload_service import UploadService


def get_runtime() -> ChatRuntime:
    """Get the process-wide chat runtime."""
    return get_chat_runtime()


def get_file_upload_config() -> FileUploadConfig:
    """Get the file upload configuration."""
    return settings.file_upload


def get_chat_query_service(
    runtime: ChatRuntime = Depends(get_runtime),
) -> ChatQueryService:
    """Get ChatQueryService bound to the live store and registry."""
    return ChatQueryService(
        store=runtime.store,
        registry=runtime.registry,
        uptime_seconds=runtime.uptime_seconds,
    )


def get_upload_service(
    config: FileUploadConfig = Depends(get_file_upload_config),
) -> UploadService:
    """Get UploadService writing into the configured upload directory."""
    return UploadService(config)
