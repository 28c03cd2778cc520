"""Storage of files uploaded for file and image messages."""

import mimetypes
import secrets
import time
from pathlib import Path

import structlog
from fastapi import UploadFile

from app.core.exceptions import EmptyUploadError, FileTooLargeError
from app.core.settings import FileUploadConfig
from app.schemas.upload_schema import FileInfo

logger = structlog.get_logger()

CHUNK_SIZE = 1024 * 1024


def build_stored_name(original_name: str) -> str:
    """Unique ``<millis>-<random><ext>`` name keeping the original extension."""
    suffix = Path(original_name).suffix.lower()
    return f"{int(time.time() * 1000)}-{secrets.randbelow(10**9)}{suffix}"


class UploadService:
    """Writes uploads to the upload directory and describes the result."""

    def __init__(self, config: FileUploadConfig) -> None:
        self._config = config

    async def save(self, upload: UploadFile) -> FileInfo:
        """Stream ``upload`` to disk, enforcing the size limit."""
        original_name = Path(upload.filename or "").name
        if not original_name:
            raise EmptyUploadError()

        self._config.upload_dir.mkdir(parents=True, exist_ok=True)
        stored_name = build_stored_name(original_name)
        target = self._config.upload_dir / stored_name

        size = 0
        try:
            with target.open("wb") as out:
                while chunk := await upload.read(CHUNK_SIZE):
                    size += len(chunk)
                    if size > self._config.max_file_size_bytes:
                        raise FileTooLargeError(self._config.max_file_size_mb)
                    out.write(chunk)
        except Exception:
            target.unlink(missing_ok=True)
            raise

        if size == 0:
            target.unlink(missing_ok=True)
            raise EmptyUploadError()

        mimetype = (
            upload.content_type
            or mimetypes.guess_type(original_name)[0]
            or "application/octet-stream"
        )
        logger.info(
            "File uploaded",
            filename=stored_name,
            originalname=original_name,
            size=size,
            mimetype=mimetype,
        )
        return FileInfo(
            filename=stored_name,
            originalname=original_name,
            size=size,
            mimetype=mimetype,
            url=f"{self._config.url_prefix}/{stored_name}",
        )
