"""Application configuration using Pydantic Settings V2."""

from functools import cached_property
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.core.settings import (
    AppConfig,
    ChatConfig,
    FileUploadConfig,
    ServerConfig,
    StorageConfig,
)
from app.core.settings.app_config import Environment

APP_VERSION = "0.1.0"


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Flat fields are loaded directly from environment variables.
    Domain properties provide grouped access (e.g. settings.chat.retention_days).
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # App
    app_name: str = Field(
        default="group-chat",
        description="Application name",
    )
    app_env: Environment = Field(
        default="development",
        description="Application environment",
    )
    debug: bool = Field(
        default=True,
        description="Debug mode",
    )

    # Server
    host: str = Field(
        default="0.0.0.0",
        description="Server host",
    )
    port: int = Field(
        default=5000,
        ge=1,
        le=65535,
        description="Server port",
    )
    cors_origins: str = Field(
        default="*",
        description="Comma-separated list of allowed CORS origins",
    )
    rate_limit: str = Field(
        default="300/minute",
        description="Default per-client rate limit for HTTP endpoints",
    )

    # Storage
    data_dir: Path = Field(
        default=Path("./data"),
        description="Directory holding users.json, messages.json and rooms.json",
    )

    # Chat
    history_limit: int = Field(
        default=1000,
        ge=1,
        description="Maximum number of messages kept in memory and on disk",
    )
    recent_history_size: int = Field(
        default=50,
        ge=0,
        description="Messages sent to a connection when it joins",
    )
    api_history_size: int = Field(
        default=100,
        ge=0,
        description="Messages returned by the HTTP history endpoint",
    )
    retention_days: int = Field(
        default=7,
        ge=1,
        description="Messages older than this are removed by the cleanup sweep",
    )
    cleanup_interval_seconds: int = Field(
        default=3600,
        ge=1,
        description="Interval between retention sweeps",
    )

    # File Upload
    upload_dir: Path = Field(
        default=Path("./uploads"),
        description="Directory where uploaded files are stored",
    )
    max_file_size_mb: int = Field(
        default=50,
        ge=1,
        le=500,
        description="Maximum file size in MB",
    )
    upload_url_prefix: str = Field(
        default="/uploads",
        description="Public URL prefix for uploaded files",
    )

    # --- Domain properties ---

    @cached_property
    def app(self) -> AppConfig:
        """Application environment configuration."""
        return AppConfig(
            name=self.app_name,
            version=APP_VERSION,
            env=self.app_env,
            debug=self.debug,
        )

    @cached_property
    def server(self) -> ServerConfig:
        """Server configuration."""
        return ServerConfig(
            host=self.host,
            port=self.port,
            cors_origins=self.cors_origins,
            rate_limit=self.rate_limit,
        )

    @cached_property
    def storage(self) -> StorageConfig:
        """Durable store configuration."""
        return StorageConfig(data_dir=self.data_dir)

    @cached_property
    def chat(self) -> ChatConfig:
        """History and retention configuration."""
        return ChatConfig(
            history_limit=self.history_limit,
            recent_history_size=self.recent_history_size,
            api_history_size=self.api_history_size,
            retention_days=self.retention_days,
            cleanup_interval_seconds=self.cleanup_interval_seconds,
        )

    @cached_property
    def file_upload(self) -> FileUploadConfig:
        """File upload configuration."""
        return FileUploadConfig(
            upload_dir=self.upload_dir,
            max_file_size_mb=self.max_file_size_mb,
            url_prefix=self.upload_url_prefix.rstrip("/"),
        )

    # --- Convenience properties (delegate to domain configs) ---

    @property
    def max_file_size_bytes(self) -> int:
        """Get maximum file size in bytes."""
        return self.file_upload.max_file_size_bytes

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app.is_development


# Global settings instance
settings = Settings()
