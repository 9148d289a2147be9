"""
Local file credential store.

Each key is kept as ``<key>.json`` inside the storage directory.
"""

import logging
import os
import threading
from pathlib import Path
from typing import Optional, Union

from .interfaces import FILE_DRIVER

logger = logging.getLogger(__name__)


class FileCredentialStore:
    """Credential store backed by files on the local disk."""

    driver = FILE_DRIVER

    def __init__(self, base_dir: Union[str, Path]):
        """
        Initialize file store.

        Args:
            base_dir: Directory holding the stored documents (created on demand)
        """
        self.base_dir = Path(base_dir).expanduser()
        self._lock = threading.RLock()

    def _path(self, key: str) -> Path:
        return self.base_dir / f"{key}.json"

    def exists(self, key: str) -> bool:
        return self._path(key).is_file()

    def get(self, key: str) -> Optional[bytes]:
        path = self._path(key)
        with self._lock:
            try:
                return path.read_bytes()
            except FileNotFoundError:
                return None

    def put(self, key: str, value: bytes) -> None:
        path = self._path(key)
        with self._lock:
            self.base_dir.mkdir(parents=True, exist_ok=True)
            # Write then rename so readers never observe a half-written document
            tmp_path = path.with_suffix(".json.tmp")
            tmp_path.write_bytes(value)
            os.replace(tmp_path, path)
        logger.debug(f"Stored session document at {path}")

    def delete(self, key: str) -> None:
        with self._lock:
            self._path(key).unlink(missing_ok=True)

    def record_login(self) -> None:
        pass
