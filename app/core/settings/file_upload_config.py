"""File upload configuration."""

from pathlib import Path

from pydantic import BaseModel


class FileUploadConfig(BaseModel, frozen=True):
    """File upload settings."""

    upload_dir: Path
    max_file_size_mb: int
    url_prefix: str

    @property
    def max_file_size_bytes(self) -> int:
        """Get maximum file size in bytes."""
        return self.max_file_size_mb * 1024 * 1024
