"""
Object storage for uploaded source files.

Storage layout:
    <upload_dir>/<subject_id>/<stem>_<YYYYMMDD_HHmmss>.<ext>
"""
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol
from urllib.parse import unquote, urlparse

from loguru import logger


class ObjectStorage(Protocol):
    def upload(self, data: bytes, filename: str, subject_id: str) -> str:
        """Store bytes and return a public URL for them."""
        ...

    def delete(self, url: str) -> bool:
        """Remove a stored object. False if it did not exist."""
        ...


def _datetime_stamp() -> str:
    """UTC datetime stamp suitable for filenames: YYYYMMDD_HHmmss."""
    return datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")


def _sanitise(name: str, max_len: int = 80) -> str:
    """Replace non-word characters with underscores and truncate."""
    return re.sub(r"[^\w\-]", "_", name)[:max_len].strip("_") or "unnamed"


class LocalObjectStorage:
    """Stores uploads on the local filesystem and returns ``file://`` URLs."""

    def __init__(self, upload_dir: Path):
        self._upload_dir = Path(upload_dir)

    def upload(self, data: bytes, filename: str, subject_id: str) -> str:
        subject_dir = self._upload_dir / _sanitise(subject_id)
        subject_dir.mkdir(parents=True, exist_ok=True)

        stem = Path(filename).stem
        suffix = Path(filename).suffix or ".pdf"
        dest_path = subject_dir / f"{_sanitise(stem)}_{_datetime_stamp()}{suffix}"
        dest_path.write_bytes(data)

        logger.info(f"Stored upload: {dest_path} ({len(data)} bytes)")
        return dest_path.resolve().as_uri()

    def delete(self, url: str) -> bool:
        file_path = Path(unquote(urlparse(url).path))
        if not file_path.exists():
            return False

        file_path.unlink(missing_ok=True)
        logger.info(f"Deleted upload: {file_path}")
        return True
