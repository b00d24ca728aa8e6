"""Store configuration and key normalization."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from .exceptions import InvalidKeyError


DEFAULT_TABLE_NAME = "cellar"
EXTENSION = ".storage"
# Path separator and the NUL byte cannot appear in a file name
RESERVED_CHARACTERS = ("/", "\x00")


class _Unsupported:
    """Result of a configuration query for an unknown option."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNSUPPORTED"


UNSUPPORTED = _Unsupported()


@dataclass(frozen=True)
class StoreConfig:
    """Immutable configuration of one store instance.

    Args:
        table_name: Name of the in-memory table
        path: Persistence root directory, or None for a memory-only store
    """

    table_name: str = DEFAULT_TABLE_NAME
    path: Optional[str] = None

    @property
    def persisted(self) -> bool:
        """Whether writes go through to files under ``path``."""
        return self.path is not None

    def option(self, name: str) -> Any:
        """Return the configured ``path`` or ``table_name``.

        Any other option name returns ``UNSUPPORTED``.
        """
        if name == "path":
            return self.path
        if name == "table_name":
            return self.table_name
        return UNSUPPORTED


def normalize_key(key: Any) -> str:
    """Normalize a caller-supplied key to its canonical string form.

    Strings pass through. Enum members stand in for symbolic identifiers:
    a member with a string value normalizes to that value, any other
    member to its name.

    Raises:
        InvalidKeyError: If the key is empty or of any other type
    """
    if isinstance(key, Enum):
        key = key.value if isinstance(key.value, str) else key.name
    elif not isinstance(key, str):
        raise InvalidKeyError(key)

    if not key:
        raise InvalidKeyError(key)
    return str(key)


def is_reserved(key: str) -> bool:
    """True if the key cannot be mapped to a file in the persistence directory."""
    return any(char in key for char in RESERVED_CHARACTERS)
