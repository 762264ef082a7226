"""File-backed storage backend.

Each key is stored as ``<directory>/<key>.json``. Writes go to a temporary
file in the same directory which then replaces the target, so the document
is swapped in one step.
"""

import logging
import os
import re
import tempfile
from pathlib import Path

from .base import KeyValueStorage

logger = logging.getLogger(__name__)

_KEY_SAFE_RE = re.compile(r"[^A-Za-z0-9._-]+")


class FileStorage(KeyValueStorage):
    """Directory of JSON documents, one per key."""

    def __init__(self, directory: str | Path):
        self._directory = Path(directory).expanduser()

    def path_for(self, key: str) -> Path:
        """Return the file path backing ``key``."""
        safe = _KEY_SAFE_RE.sub("_", key.strip()) or "default"
        return self._directory / f"{safe}.json"

    def get(self, key: str) -> str | None:
        path = self.path_for(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        self._directory.mkdir(parents=True, exist_ok=True)
        target = self.path_for(key)
        fd, tmp_name = tempfile.mkstemp(dir=self._directory, prefix=f".{target.stem}-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
            os.replace(tmp_name, target)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug("Wrote %d bytes to %s", len(value), target)

    def remove(self, key: str) -> None:
        self.path_for(key).unlink(missing_ok=True)

    @property
    def backend_type(self) -> str:
        return "file"
