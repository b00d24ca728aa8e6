"""Process-local key-value store with optional file persistence.

Each store is served by a single worker thread that runs every operation
in arrival order against an in-memory table it alone owns. Give a store a
directory and every write also goes to ``<path>/<key>.storage``; records
missing from memory are loaded from disk on demand, so state survives
restarts.

Quick Start:
    from cellar import create_store

    db = create_store("in_memory")
    db.write("key", "value")      # 'value'
    db.read("key")                # 'value'
    db.match("ke")                # [('key', 'value')]
    db.delete("key")
    db.read("key")                # raises NotFoundError
    db.reset()

    persisted = create_store("persisted", path="tmp/persisted")

Key Classes:
    - Store: Caller-facing handle (write, read, delete, reset, match, config)
    - create_store() / connect(): Start a store from arguments or a URL
    - StoreRegistry: Caller-owned collection of named stores

Backends:
    - MemoryBackend: The in-memory table
    - FileBackend: One file per key under a root directory

Semantics:
    - write, read, match and flush block until the worker has run them
    - delete and reset are fire-and-forget; call flush() to wait for them
"""

from .core import Store, StoreRegistry, connect, create_store, parse_url
from .config import DEFAULT_TABLE_NAME, EXTENSION, UNSUPPORTED, StoreConfig, normalize_key
from .backends import FileBackend, MemoryBackend, Record, StorageBackend
from .serialization import Serializer
from .worker import Operation, StoreWorker
from .exceptions import (
    StoreError,
    InvalidKeyError,
    NotFoundError,
    InvalidArgumentError,
    SerializationError,
    StoreClosedError,
)

__all__ = [
    # Main API
    "Store",
    "StoreRegistry",
    "connect",
    "create_store",
    "parse_url",
    # Configuration
    "StoreConfig",
    "UNSUPPORTED",
    "DEFAULT_TABLE_NAME",
    "EXTENSION",
    "normalize_key",
    # Worker
    "StoreWorker",
    "Operation",
    # Backends
    "StorageBackend",
    "Record",
    "MemoryBackend",
    "FileBackend",
    # Serialization
    "Serializer",
    # Exceptions
    "StoreError",
    "InvalidKeyError",
    "NotFoundError",
    "InvalidArgumentError",
    "SerializationError",
    "StoreClosedError",
]

__version__ = "0.1.0"
