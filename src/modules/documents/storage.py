import logging
import os
from typing import Protocol

from modules.documents.exceptions import FileIOError

logger = logging.getLogger(__name__)


class FileStorage(Protocol):
    """What the workflow needs from a file store: bytes in and out by key."""

    def save(self, key: str, data: bytes) -> str: ...

    def read(self, key: str) -> bytes: ...

    def delete(self, key: str) -> None: ...

    def exists(self, key: str) -> bool: ...


class LocalFileStorage:
    """Stores files in a directory on local disk."""

    def __init__(self, base_dir: str, url_prefix: str = "/uploads"):
        self.base_dir = base_dir
        self.url_prefix = url_prefix.rstrip("/")
        os.makedirs(self.base_dir, exist_ok=True)

    def _path(self, key: str) -> str:
        name = os.path.basename(key)
        if not name or name != key:
            raise FileIOError(f"Invalid storage key: {key!r}")
        return os.path.join(self.base_dir, name)

    def location(self, key: str) -> str:
        return f"{self.url_prefix}/{key}"

    def save(self, key: str, data: bytes) -> str:
        path = self._path(key)
        tmp_path = path + ".tmp"
        try:
            with open(tmp_path, "wb") as f:
                f.write(data)
            # readers never see a half written file
            os.replace(tmp_path, path)
        except OSError as e:
            raise FileIOError(f"Could not write {key}: {e}") from e
        return self.location(key)

    def read(self, key: str) -> bytes:
        path = self._path(key)
        try:
            with open(path, "rb") as f:
                return f.read()
        except OSError as e:
            raise FileIOError(f"Could not read {key}: {e}") from e

    def delete(self, key: str) -> None:
        path = self._path(key)
        try:
            os.remove(path)
        except FileNotFoundError:
            logger.warning("File %s was already gone", key)
        except OSError as e:
            raise FileIOError(f"Could not delete {key}: {e}") from e

    def exists(self, key: str) -> bool:
        return os.path.exists(self._path(key))
