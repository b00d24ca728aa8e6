"""Storage backends for cellar."""

from .base import Record, StorageBackend
from .file import FileBackend
from .memory import MemoryBackend

__all__ = [
    "Record",
    "StorageBackend",
    "MemoryBackend",
    "FileBackend",
]
