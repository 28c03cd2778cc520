"""Domain-specific configuration models."""

from app.core.settings.app_config import AppConfig
from app.core.settings.chat_config import ChatConfig
from app.core.settings.file_upload_config import FileUploadConfig
from app.core.settings.server_config import ServerConfig
from app.core.settings.storage_config import StorageConfig

__all__ = [
    "AppConfig",
    "ChatConfig",
    "FileUploadConfig",
    "ServerConfig",
    "StorageConfig",
]
