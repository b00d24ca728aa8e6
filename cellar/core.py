"""Core Store class: the caller-facing handle for one store instance."""

import logging
from typing import Any, Dict, Iterator, List, Optional, Tuple
from urllib.parse import parse_qs, urlparse

from .config import DEFAULT_TABLE_NAME, StoreConfig, normalize_key
from .exceptions import InvalidArgumentError, NotFoundError, StoreError
from .serialization import Serializer
from .worker import Operation, StoreWorker


logger = logging.getLogger(__name__)


class Store:
    """Key-value store with optional write-through file persistence.

    Keys are strings (or enum members standing in for symbolic names).
    Values are any serializable payload; the store never looks inside.

    write, read and match block until the store's worker has run them.
    delete and reset return immediately; a later synchronous call on the
    same store (flush() is the cheapest) is guaranteed to see their effect.

    Example:
        from cellar import create_store

        db = create_store("settings")
        db.write("network_name", "october17")   # 'october17'
        db.read("network_name")                 # 'october17'
        db.delete("network_name")
        db.get("network_name")                  # None

        # Persisted: one file per key under the given directory
        disk = create_store("persisted", path="tmp/persisted")
        disk["network_name"] = "october17"      # tmp/persisted/network_name.storage
    """

    def __init__(self, config: StoreConfig, serializer: Optional[Serializer] = None):
        """Create and start a store for the given configuration.

        Use create_store() or connect() for convenience.

        Args:
            config: Store configuration
            serializer: Encoder for persisted values
        """
        self._config = config
        self._worker = StoreWorker(config, serializer).start()

    def __repr__(self) -> str:
        return f"Store(table_name={self._config.table_name!r}, path={self._config.path!r})"

    # Configuration

    @property
    def table_name(self) -> str:
        return self._config.table_name

    @property
    def path(self) -> Optional[str]:
        return self._config.path

    def config(self, option: str) -> Any:
        """Return the configured ``path`` or ``table_name``.

        Returns:
            The option value, or UNSUPPORTED for any other option name
        """
        return self._config.option(option)

    # Operations

    def write(self, key: Any, value: Any, timeout: Optional[float] = None) -> Any:
        """Write a record, replacing any existing value for key.

        Args:
            key: Record key; must not contain "/" or a NUL byte
            value: Value to store
            timeout: Seconds to wait for the worker

        Returns:
            The written value

        Raises:
            InvalidKeyError: If the key is of an unsupported type or contains "/" or NUL
            OSError: If the persistence directory or file could not be written.
                The in-memory table already holds the new value.
            SerializationError: If a persisted store cannot encode the value
        """
        return self._worker.call(Operation.WRITE, normalize_key(key), value, timeout=timeout)

    def read(self, key: Any, timeout: Optional[float] = None) -> Any:
        """Read the value for key.

        Raises:
            NotFoundError: If no record exists for key
            InvalidKeyError: If the key is of an unsupported type
        """
        return self._worker.call(Operation.READ, normalize_key(key), timeout=timeout)

    def delete(self, key: Any) -> None:
        """Delete the record for key without waiting. Missing keys are fine."""
        self._worker.cast(Operation.DELETE, normalize_key(key))

    def reset(self) -> None:
        """Delete every record without waiting.

        Persisted stores also remove their whole directory tree.
        """
        self._worker.cast(Operation.RESET)

    def match(self, pattern: str, timeout: Optional[float] = None) -> List[Tuple[str, Any]]:
        """Find records whose key contains pattern.

        Matching is literal, case-sensitive substring containment. In a
        persisted store the directory listing is searched, so only records
        written to disk are found.

        Args:
            pattern: Substring to look for in keys

        Returns:
            List of (key, value) pairs, in no particular order

        Raises:
            InvalidArgumentError: If pattern is not a string
        """
        if not isinstance(pattern, str):
            raise InvalidArgumentError(
                f"Match pattern must be a string, got {type(pattern).__name__}"
            )
        return self._worker.call(Operation.MATCH, pattern, timeout=timeout)

    def flush(self, timeout: Optional[float] = None) -> None:
        """Block until every operation submitted so far has run."""
        self._worker.call(Operation.FLUSH, timeout=timeout)

    def clear_cache(self) -> int:
        """Drop the in-memory table without touching persisted files.

        Persisted records are reloaded from disk on their next read. On a
        memory-only store this loses every record.

        Returns:
            Number of records dropped from memory
        """
        return self._worker.call(Operation.CLEAR_CACHE)

    def get(self, key: Any, default: Any = None) -> Any:
        """Get value for key, or default if not found."""
        try:
            return self.read(key)
        except NotFoundError:
            return default

    # Dict-like interface

    def __getitem__(self, key: Any) -> Any:
        return self.read(key)

    def __setitem__(self, key: Any, value: Any) -> None:
        self.write(key, value)

    def __delitem__(self, key: Any) -> None:
        self.delete(key)

    def __contains__(self, key: Any) -> bool:
        try:
            self.read(key)
        except NotFoundError:
            return False
        return True

    # Lifecycle

    @property
    def closed(self) -> bool:
        return not self._worker.running

    def close(self, timeout: Optional[float] = None) -> None:
        """Stop the worker once pending operations have run.

        Persisted files stay on disk; the in-memory table is discarded.
        """
        self._worker.stop(timeout)

    def __enter__(self) -> "Store":
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.close()


def create_store(
    table_name: str = DEFAULT_TABLE_NAME,
    path: Optional[str] = None,
    serializer: Optional[Serializer] = None,
) -> Store:
    """Create and start a new store.

    Each call starts an independent store with its own worker and table.

    Args:
        table_name: Name of the store's table
        path: Persistence root directory; None keeps records in memory only
        serializer: Encoder for persisted values

    Example:
        in_memory = create_store("in_memory")
        persisted = create_store("persisted", path="tmp/persisted")
    """
    return Store(StoreConfig(table_name=table_name, path=path), serializer)


def parse_url(url: str) -> StoreConfig:
    """Parse a store URL into a StoreConfig.

    Supported URL schemes:
        - memory://<table_name>
        - file:///<relative/path>?table=<table_name>
        - file:////<absolute/path>?table=<table_name>

    Raises:
        ValueError: For unknown schemes or a file URL without a path
    """
    parsed = urlparse(url)
    scheme = parsed.scheme

    if scheme == "memory":
        table_name = parsed.netloc or parsed.path.lstrip("/") or DEFAULT_TABLE_NAME
        return StoreConfig(table_name=table_name)

    elif scheme == "file":
        # Handle file:///relative and file:////absolute
        path = parsed.netloc + parsed.path
        if path.startswith("/"):
            path = path[1:]  # Remove leading slash from file path
        if not path:
            raise ValueError(f"File store URL has no path: {url}")

        query = parse_qs(parsed.query)
        table_name = query.get("table", [DEFAULT_TABLE_NAME])[0]
        return StoreConfig(table_name=table_name, path=path)

    else:
        raise ValueError(f"Unknown storage scheme: {scheme}")


def connect(url: str) -> Store:
    """Create a store from a URL.

    Args:
        url: Store URL, see parse_url()

    Returns:
        Running Store instance

    Example:
        db = connect("memory://in_memory")
        db = connect("file:///tmp/persisted?table=persisted")
    """
    return Store(parse_url(url))


class StoreRegistry:
    """Caller-owned collection of named stores.

    Example:
        registry = StoreRegistry()
        registry.open(StoreConfig("persisted", path="tmp/persisted"))
        registry["persisted"].write("network_name", "october17")
        registry.close_all()
    """

    def __init__(self):
        self._stores: Dict[str, Store] = {}

    def open(self, config: StoreConfig, serializer: Optional[Serializer] = None) -> Store:
        """Start a store and register it under its table name.

        Raises:
            StoreError: If a store with the same table name is registered
        """
        if config.table_name in self._stores:
            raise StoreError(f"Store already registered: {config.table_name}")
        store = Store(config, serializer)
        self._stores[config.table_name] = store
        return store

    def get(self, table_name: str) -> Optional[Store]:
        return self._stores.get(table_name)

    def __getitem__(self, table_name: str) -> Store:
        return self._stores[table_name]

    def __contains__(self, table_name: str) -> bool:
        return table_name in self._stores

    def __iter__(self) -> Iterator[str]:
        return iter(self._stores)

    def __len__(self) -> int:
        return len(self._stores)

    def close(self, table_name: str) -> None:
        """Close and unregister one store. Unknown names are ignored."""
        store = self._stores.pop(table_name, None)
        if store is not None:
            store.close()

    def close_all(self) -> None:
        """Close and unregister every store."""
        for table_name in list(self._stores):
            self.close(table_name)
        logger.debug("Closed all registered stores")
