"""Serialized worker that owns a store's table and persistence directory.

Every operation on a store goes through one worker thread, which drains a
FIFO mailbox and runs each operation to completion before taking the next.
That ordering is the store's only concurrency control: the table and the
persistence directory are touched by nobody else, so no locks are needed.

Synchronous operations (write, read, match, flush, clear_cache) carry a
Future the caller blocks on. Asynchronous ones (delete, reset) carry none;
because they share the mailbox, any synchronous call issued after them
observes their effects.
"""

import logging
import queue
import threading
from concurrent.futures import Future
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Callable, Dict, List, Optional, Tuple

from .backends.file import FileBackend
from .backends.memory import MemoryBackend
from .config import StoreConfig, is_reserved
from .exceptions import InvalidArgumentError, InvalidKeyError, NotFoundError, StoreClosedError
from .serialization import Serializer


logger = logging.getLogger(__name__)


class Operation(Enum):
    """Operations understood by the worker."""

    WRITE = auto()
    READ = auto()
    DELETE = auto()
    RESET = auto()
    MATCH = auto()
    FLUSH = auto()
    CLEAR_CACHE = auto()


@dataclass
class Request:
    """One mailbox entry. ``future`` is None for fire-and-forget operations."""

    op: Operation
    args: Tuple[Any, ...] = ()
    future: Optional[Future] = None


_STOP = None


class StoreWorker:
    """Processes all operations for one store instance in arrival order.

    Args:
        config: Store configuration; persistence is active when it has a path
        serializer: Encoder for persisted values
    """

    def __init__(self, config: StoreConfig, serializer: Optional[Serializer] = None):
        self.config = config
        self._table = MemoryBackend(config.table_name)
        self._files: Optional[FileBackend] = None
        if config.persisted:
            self._files = FileBackend(config.path, serializer or Serializer())

        self._mailbox: "queue.Queue[Optional[Request]]" = queue.Queue()
        self._thread: Optional[threading.Thread] = None
        self._state_lock = threading.Lock()
        self._stopped = False

        self._handlers: Dict[Operation, Callable[..., Any]] = {
            Operation.WRITE: self.handle_write,
            Operation.READ: self.handle_read,
            Operation.DELETE: self.handle_delete,
            Operation.RESET: self.handle_reset,
            Operation.MATCH: self.handle_match,
            Operation.FLUSH: self.handle_flush,
            Operation.CLEAR_CACHE: self.handle_clear_cache,
        }

    # Lifecycle

    def start(self) -> "StoreWorker":
        """Start the worker thread."""
        with self._state_lock:
            if self._thread is not None:
                return self
            self._thread = threading.Thread(
                target=self._run,
                name=f"cellar-{self.config.table_name}",
                daemon=True,
            )
            self._thread.start()
        logger.info(
            f"Store worker started: table={self.config.table_name}, "
            f"path={self.config.path}"
        )
        return self

    def stop(self, timeout: Optional[float] = None) -> None:
        """Stop after all operations already queued have run."""
        with self._state_lock:
            if self._stopped:
                return
            self._stopped = True
            self._mailbox.put(_STOP)
            thread = self._thread

        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
        logger.info(f"Store worker stopped: table={self.config.table_name}")

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive() and not self._stopped

    # Submission

    def call(self, op: Operation, *args: Any, timeout: Optional[float] = None) -> Any:
        """Enqueue a synchronous operation and wait for its result.

        Args:
            op: Operation to run
            *args: Operation arguments
            timeout: Seconds to wait before giving up; the operation still
                runs in the worker and its result is discarded

        Returns:
            The operation's result

        Raises:
            Whatever the operation raised inside the worker
            TimeoutError: If timeout elapsed first
            StoreClosedError: If the worker was stopped
        """
        future: Future = Future()
        self._submit(Request(op, args, future))
        return future.result(timeout)

    def cast(self, op: Operation, *args: Any) -> None:
        """Enqueue an operation without waiting for it."""
        self._submit(Request(op, args))

    def _submit(self, request: Request) -> None:
        with self._state_lock:
            if self._stopped or self._thread is None:
                raise StoreClosedError(
                    f"Store {self.config.table_name!r} is not running"
                )
            self._mailbox.put(request)

    # Loop

    def _run(self) -> None:
        while True:
            request = self._mailbox.get()
            if request is _STOP:
                break
            self._process(request)

    def _process(self, request: Request) -> None:
        future = request.future
        if future is not None and not future.set_running_or_notify_cancel():
            return

        try:
            result = self._handlers[request.op](*request.args)
        except Exception as e:
            if future is not None:
                future.set_exception(e)
            else:
                logger.exception(
                    f"{request.op.name} failed on table {self.config.table_name}"
                )
            return

        if future is not None:
            future.set_result(result)

    # Handlers

    def handle_write(self, key: str, value: Any) -> Any:
        """Insert or overwrite a record, writing through to disk if persisted."""
        if is_reserved(key):
            raise InvalidKeyError(key)

        if self._files is None:
            self._table.put(key, value)
            return value

        data = self._files.encode(value)
        self._table.put(key, value)
        # Table is already updated if this raises
        self._files.write_encoded(key, data)
        logger.debug(f"Wrote {self._files.path_for(key)}")
        return value

    def handle_read(self, key: str) -> Any:
        """Return the value for key, demand-loading it from disk on a miss."""
        return self._lookup(key).value

    def handle_delete(self, key: str) -> None:
        """Remove key from the table and its file. Missing keys are a no-op."""
        self._table.delete(key)
        if self._files is not None and not is_reserved(key):
            self._files.delete(key)

    def handle_reset(self) -> None:
        """Empty the table and remove the persistence directory."""
        self._table.clear()
        if self._files is not None:
            self._files.clear()
            logger.debug(f"Removed {self._files.root}")

    def handle_match(self, pattern: str) -> List[Tuple[str, Any]]:
        """Records whose key contains pattern.

        Persisted stores scan the directory listing rather than the table,
        demand-loading each match. Files that fail to decode are skipped.
        """
        if not isinstance(pattern, str):
            raise InvalidArgumentError(f"Match pattern must be a string, got {type(pattern).__name__}")

        if self._files is None:
            return [record.as_tuple() for record in self._table.match(pattern)]

        results = []
        for key in self._files.keys(pattern):
            try:
                record = self._lookup(key)
            except NotFoundError:
                continue
            results.append(record.as_tuple())
        return results

    def handle_flush(self) -> None:
        """No-op; returning proves every earlier operation has run."""
        return None

    def handle_clear_cache(self) -> int:
        """Drop the in-memory table, leaving persisted files in place."""
        count = len(self._table)
        self._table.clear()
        return count

    def _lookup(self, key: str):
        record = self._table.get(key)
        if record is not None:
            return record

        if self._files is None or is_reserved(key):
            raise NotFoundError(key)

        record = self._files.get(key)
        if record is None:
            raise NotFoundError(key)

        self._table.put(key, record.value)
        logger.debug(f"Loaded {key!r} from {self._files.root}")
        return record
