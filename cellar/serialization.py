"""Value serialization for persisted records."""

import base64
import json
from datetime import date, datetime
from typing import Any

from .exceptions import SerializationError


class Serializer:
    """Serialize and deserialize stored values.

    Values are converted to a JSON-compatible form and written as UTF-8
    JSON. Types JSON cannot represent exactly are wrapped in a single-key
    marker dict so they come back as the same type:

    - tuple           -> {"__tuple__": [...]}
    - set / frozenset -> {"__set__": [...]} / {"__frozenset__": [...]}
    - bytes           -> {"__bytes__": "<base64>"}
    - datetime / date -> {"__datetime__": "<iso>"} / {"__date__": "<iso>"}
    - dict with non-string keys (or a key that looks like a marker)
                      -> {"__dict__": [[key, value], ...]}

    Example:
        serializer = Serializer()

        data = serializer.dumps(("october", 17))
        serializer.loads(data)  # ('october', 17)
    """

    _MARKERS = (
        "__tuple__",
        "__set__",
        "__frozenset__",
        "__bytes__",
        "__datetime__",
        "__date__",
        "__dict__",
    )

    def dumps(self, value: Any) -> bytes:
        """Serialize a value to bytes.

        Raises:
            SerializationError: If the value contains an unsupported type
        """
        try:
            return json.dumps(self._to_json_compatible(value)).encode("utf-8")
        except SerializationError:
            raise
        except (TypeError, ValueError) as e:
            raise SerializationError(f"Failed to serialize {type(value).__name__}: {e}")

    def loads(self, data: bytes) -> Any:
        """Deserialize bytes produced by dumps().

        Raises:
            SerializationError: If the data is not a valid encoding
        """
        try:
            return self._from_json_compatible(json.loads(data.decode("utf-8")))
        except SerializationError:
            raise
        except (
            UnicodeDecodeError,
            ValueError,
            TypeError,
            KeyError,
            AttributeError,
            RecursionError,
        ) as e:
            raise SerializationError(f"Failed to deserialize value: {e}")

    def _to_json_compatible(self, value: Any) -> Any:
        """Convert a value to JSON-compatible format."""
        if value is None:
            return None
        if isinstance(value, (str, int, float, bool)):
            return value
        # datetime is a subclass of date
        if isinstance(value, datetime):
            return {"__datetime__": value.isoformat()}
        if isinstance(value, date):
            return {"__date__": value.isoformat()}
        if isinstance(value, (bytes, bytearray)):
            return {"__bytes__": base64.b64encode(bytes(value)).decode("ascii")}
        if isinstance(value, tuple):
            return {"__tuple__": [self._to_json_compatible(v) for v in value]}
        if isinstance(value, list):
            return [self._to_json_compatible(v) for v in value]
        if isinstance(value, frozenset):
            return {"__frozenset__": [self._to_json_compatible(v) for v in value]}
        if isinstance(value, set):
            return {"__set__": [self._to_json_compatible(v) for v in value]}
        if isinstance(value, dict):
            if all(isinstance(k, str) and k not in self._MARKERS for k in value):
                return {k: self._to_json_compatible(v) for k, v in value.items()}
            return {
                "__dict__": [
                    [self._to_json_compatible(k), self._to_json_compatible(v)]
                    for k, v in value.items()
                ]
            }
        raise SerializationError(f"Cannot serialize type: {type(value)}")

    def _from_json_compatible(self, value: Any) -> Any:
        """Convert a value from JSON-compatible format."""
        if value is None:
            return None
        if isinstance(value, (str, int, float, bool)):
            return value
        if isinstance(value, list):
            return [self._from_json_compatible(v) for v in value]
        if isinstance(value, dict):
            # Check for special markers
            if len(value) == 1:
                (marker, inner), = value.items()
                if marker == "__tuple__":
                    return tuple(self._from_json_compatible(v) for v in inner)
                if marker == "__set__":
                    return {self._from_json_compatible(v) for v in inner}
                if marker == "__frozenset__":
                    return frozenset(self._from_json_compatible(v) for v in inner)
                if marker == "__bytes__":
                    return base64.b64decode(inner.encode("ascii"), validate=True)
                if marker == "__datetime__":
                    return datetime.fromisoformat(inner)
                if marker == "__date__":
                    return date.fromisoformat(inner)
                if marker == "__dict__":
                    return {
                        self._from_json_compatible(k): self._from_json_compatible(v)
                        for k, v in inner
                    }
            return {k: self._from_json_compatible(v) for k, v in value.items()}
        return value
