"""Abstract base class for storage backends."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Iterator, Optional


@dataclass
class Record:
    """A live (key, value) pair."""

    key: str
    value: Any

    def as_tuple(self):
        return (self.key, self.value)


class StorageBackend(ABC):
    """Abstract base class for storage backends.

    Backends hold records for a single store instance. They are not
    thread-safe: the store's worker is their only caller.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[Record]:
        """Retrieve record by key.

        Args:
            key: Normalized record key

        Returns:
            Record if found, None otherwise
        """
        pass

    @abstractmethod
    def put(self, key: str, value: Any) -> None:
        """Store or overwrite the record for key.

        Args:
            key: Normalized record key
            value: Value to store
        """
        pass

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Delete the record for key.

        Args:
            key: Normalized record key

        Returns:
            True if a record existed and was deleted, False if not found
        """
        pass

    @abstractmethod
    def clear(self) -> None:
        """Delete every record."""
        pass

    @abstractmethod
    def keys(self, pattern: str = "") -> Iterator[str]:
        """Iterate over keys containing pattern as a literal substring.

        Args:
            pattern: Case-sensitive substring; "" matches every key

        Yields:
            Matching keys
        """
        pass
