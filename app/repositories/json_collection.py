"""Whole-file JSON snapshot of one record collection."""

import os
import tempfile
from collections.abc import Sequence
from pathlib import Path
from typing import Generic, TypeVar

import structlog
from pydantic import BaseModel, TypeAdapter, ValidationError

from app.core.exceptions import StorageError

logger = structlog.get_logger()

RecordT = TypeVar("RecordT", bound=BaseModel)


class JsonCollection(Generic[RecordT]):
    """A flat list of records persisted as one JSON array.

    Every ``save`` rewrites the full file. The new content is written to a
    temporary file in the same directory and renamed over the target, so a
    reader never sees a partially written snapshot.
    """

    def __init__(self, path: Path, record_type: type[RecordT]) -> None:
        self.path = path
        self._adapter = TypeAdapter(list[record_type])  # type: ignore[valid-type]

    def load(self) -> list[RecordT]:
        """Read all records. A missing file is an empty collection."""
        if not self.path.exists():
            return []
        try:
            return self._adapter.validate_json(self.path.read_bytes())
        except (OSError, ValidationError) as exc:
            logger.exception("Failed to load collection", path=str(self.path))
            raise StorageError(f"Cannot load {self.path.name}") from exc

    def save(self, records: Sequence[RecordT]) -> None:
        """Replace the persisted collection with ``records``."""
        payload = self._adapter.dump_json(list(records), by_alias=True, indent=2)
        tmp_name: str | None = None
        try:
            with tempfile.NamedTemporaryFile(
                mode="wb",
                dir=self.path.parent,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
                delete=False,
            ) as tmp:
                tmp_name = tmp.name
                tmp.write(payload)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_name, self.path)
        except OSError as exc:
            logger.exception("Failed to save collection", path=str(self.path))
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StorageError(f"Cannot save {self.path.name}") from exc
