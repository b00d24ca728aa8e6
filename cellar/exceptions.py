"""Exceptions for the cellar package."""


class StoreError(Exception):
    """Base exception for all store errors."""

    pass


class InvalidKeyError(StoreError, ValueError):
    """Key has an unsupported type or contains a reserved character."""

    def __init__(self, key):
        self.key = key
        super().__init__(f"Invalid key: {key!r}")


class NotFoundError(StoreError, KeyError):
    """No live record for the given key."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"No record for key: {key}")


class InvalidArgumentError(StoreError, TypeError):
    """Argument of the wrong type (e.g. a non-string match pattern)."""

    pass


class SerializationError(StoreError):
    """Failed to serialize or deserialize a value."""

    pass


class StoreClosedError(StoreError):
    """Operation attempted on a closed store."""

    pass
