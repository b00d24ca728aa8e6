"""In-memory table backend."""

from typing import Any, Dict, Iterator, List, Optional

from .base import Record, StorageBackend


class MemoryBackend(StorageBackend):
    """In-memory table of records.

    Every store owns exactly one, created empty when its worker starts and
    discarded with it. Also serves as the warm cache in front of a
    FileBackend.

    Example:
        table = MemoryBackend("settings")
        table.put("network_name", "october17")
        table.get("network_name").value  # 'october17'
    """

    def __init__(self, table_name: str = "cellar"):
        self.table_name = table_name
        self._data: Dict[str, Any] = {}

    def __repr__(self) -> str:
        return f"MemoryBackend(table_name={self.table_name!r}, records={len(self._data)})"

    def __len__(self) -> int:
        return len(self._data)

    def get(self, key: str) -> Optional[Record]:
        """Retrieve record by key."""
        if key in self._data:
            return Record(key, self._data[key])
        return None

    def put(self, key: str, value: Any) -> None:
        """Store or overwrite record."""
        self._data[key] = value

    def delete(self, key: str) -> bool:
        """Delete record by key."""
        if key in self._data:
            del self._data[key]
            return True
        return False

    def clear(self) -> None:
        """Drop every record."""
        self._data.clear()

    def keys(self, pattern: str = "") -> Iterator[str]:
        """Iterate over keys containing pattern."""
        for key in list(self._data):
            if pattern in key:
                yield key

    def match(self, pattern: str) -> List[Record]:
        """Records whose key contains pattern."""
        return [Record(key, self._data[key]) for key in self.keys(pattern)]
