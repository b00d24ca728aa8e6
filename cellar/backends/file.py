"""File-per-key persistence backend."""

import logging
import shutil
from pathlib import Path
from typing import Any, Iterator, Optional, Union

from ..config import EXTENSION
from ..exceptions import SerializationError
from ..serialization import Serializer
from .base import Record, StorageBackend


logger = logging.getLogger(__name__)


class FileBackend(StorageBackend):
    """Stores each record in its own file under a root directory.

    The value for ``key`` lives at ``<root>/<key>.storage`` and holds the
    serialized value only. The directory listing is the only index.

    An empty file, a missing file and a file that fails to decode all read
    as "no record". Write errors (directory creation, file write) are
    raised to the caller as the original OSError. Delete and clear never
    raise for files that are already gone.

    Example:
        backend = FileBackend("tmp/persisted")
        backend.put("network_name", "october17")
        backend.path_for("network_name")  # tmp/persisted/network_name.storage
    """

    def __init__(
        self,
        root: Union[str, Path],
        serializer: Optional[Serializer] = None,
        extension: str = EXTENSION,
    ):
        self.root = Path(root)
        self.extension = extension
        self._serializer = serializer or Serializer()

    def path_for(self, key: str) -> Path:
        """File path holding the value for key."""
        return self.root / f"{key}{self.extension}"

    def get(self, key: str) -> Optional[Record]:
        """Read and decode the file for key."""
        try:
            data = self.path_for(key).read_bytes()
        except (OSError, ValueError):
            return None

        if not data:
            return None

        try:
            value = self._serializer.loads(data)
        except SerializationError as e:
            logger.warning(f"Ignoring undecodable file for key {key!r}: {e}")
            return None
        return Record(key, value)

    def encode(self, value: Any) -> bytes:
        """Serialize a value the way put() writes it."""
        return self._serializer.dumps(value)

    def put(self, key: str, value: Any) -> None:
        """Write the serialized value, creating the root if missing."""
        self.write_encoded(key, self.encode(value))

    def write_encoded(self, key: str, data: bytes) -> None:
        """Write already-serialized bytes for key."""
        self.root.mkdir(parents=True, exist_ok=True)
        self.path_for(key).write_bytes(data)

    def delete(self, key: str) -> bool:
        """Remove the file for key."""
        try:
            self.path_for(key).unlink()
        except FileNotFoundError:
            return False
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to remove file for key {key!r}: {e}")
            return False
        return True

    def clear(self) -> None:
        """Remove the whole root directory tree."""
        shutil.rmtree(self.root, ignore_errors=True)

    def keys(self, pattern: str = "") -> Iterator[str]:
        """Iterate over keys of files whose key contains pattern."""
        try:
            entries = sorted(self.root.iterdir())
        except OSError:
            return

        for entry in entries:
            name = entry.name
            if not name.endswith(self.extension) or len(name) == len(self.extension):
                continue
            key = name[: -len(self.extension)]
            if pattern in key:
                yield key
