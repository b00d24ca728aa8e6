"""Tests for backends, serialization and key normalization."""

from datetime import date, datetime
from enum import Enum

import pytest

from cellar import (
    UNSUPPORTED,
    FileBackend,
    InvalidKeyError,
    MemoryBackend,
    Record,
    SerializationError,
    Serializer,
    StoreConfig,
    normalize_key,
)


class Color(Enum):
    red = "crimson"
    blue = 2


class TestNormalizeKey:
    """Tests for normalize_key()."""

    def test_string(self):
        """Strings pass through."""
        assert normalize_key("network_name") == "network_name"

    def test_enum(self):
        """Enum members use a string value, else their name."""
        assert normalize_key(Color.red) == "crimson"
        assert normalize_key(Color.blue) == "blue"

    def test_rejects_other_types(self):
        """Non-string keys are invalid."""
        for key in (123, 1.5, None, b"bytes", ("a",)):
            with pytest.raises(InvalidKeyError):
                normalize_key(key)

    def test_rejects_empty(self):
        """The empty string is not a key."""
        with pytest.raises(InvalidKeyError):
            normalize_key("")


class TestStoreConfig:
    """Tests for StoreConfig."""

    def test_defaults(self):
        """Stores default to memory-only."""
        config = StoreConfig()
        assert config.table_name == "cellar"
        assert config.path is None
        assert not config.persisted

    def test_option(self):
        """Only path and table_name are supported options."""
        config = StoreConfig("persisted", path="tmp/persisted")
        assert config.option("path") == "tmp/persisted"
        assert config.option("table_name") == "persisted"
        assert config.option("extension") is UNSUPPORTED
        assert repr(UNSUPPORTED) == "UNSUPPORTED"


class TestSerializer:
    """Tests for Serializer."""

    @pytest.mark.parametrize(
        "value",
        [
            "october17",
            None,
            42,
            [1, "two", None],
            {"nested": {"list": [1.5, True]}},
            (1, (2, 3)),
            {1, 2},
            frozenset({"a"}),
            b"\x00\xffraw",
            datetime(2024, 10, 17, 8, 30),
            date(2024, 10, 17),
            {1: "one", (2, 3): "pair"},
            {"__tuple__": "looks like a marker"},
        ],
    )
    def test_values_keep_their_type(self, value):
        """Values come back equal and with the same type."""
        serializer = Serializer()
        loaded = serializer.loads(serializer.dumps(value))
        assert loaded == value
        assert type(loaded) is type(value)

    def test_unsupported_type(self):
        """Arbitrary objects cannot be serialized."""
        with pytest.raises(SerializationError):
            Serializer().dumps(object())

    def test_corrupt_input(self):
        """Garbage bytes raise SerializationError."""
        serializer = Serializer()
        for data in (b"\xff\x00", b"{not json", b'{"__bytes__": "%%%"}'):
            with pytest.raises(SerializationError):
                serializer.loads(data)

    @pytest.mark.parametrize(
        "data",
        [
            b'{"__bytes__": null}',
            b'{"__bytes__": 5}',
            b'{"__tuple__": 5}',
            b'{"__datetime__": 17}',
            b'{"__dict__": [[[1], 2]]}',
            b"[" * 100000 + b"]" * 100000,
        ],
    )
    def test_malformed_markers(self, data):
        """Valid JSON with a malformed marker payload raises SerializationError."""
        with pytest.raises(SerializationError):
            Serializer().loads(data)


class TestMemoryBackend:
    """Tests for MemoryBackend."""

    def test_crud_operations(self):
        """Basic CRUD operations work."""
        table = MemoryBackend("test")

        table.put("key", None)
        assert table.get("key") == Record("key", None)
        assert table.get("missing") is None
        assert len(table) == 1

        assert table.delete("key") is True
        assert table.delete("key") is False

    def test_match(self):
        """Keys are matched by substring."""
        table = MemoryBackend()
        table.put("network_name", 1)
        table.put("other", 2)

        assert list(table.keys("et")) == ["network_name"]
        assert table.match("ther") == [Record("other", 2)]

    def test_clear(self):
        """clear() drops every record."""
        table = MemoryBackend()
        table.put("a", 1)
        table.clear()
        assert len(table) == 0

    def test_repr(self):
        """repr() names the table."""
        table = MemoryBackend("settings")
        table.put("a", 1)
        assert repr(table) == "MemoryBackend(table_name='settings', records=1)"


class TestFileBackend:
    """Tests for FileBackend."""

    def test_path_for(self, tmp_path):
        """Each key maps to <root>/<key>.storage."""
        backend = FileBackend(tmp_path / "root")
        assert backend.path_for("k") == tmp_path / "root" / "k.storage"

    def test_crud_operations(self, tmp_path):
        """Files are created, read and removed."""
        backend = FileBackend(tmp_path / "root")

        backend.put("k", {"v": (1, 2)})
        assert backend.get("k") == Record("k", {"v": (1, 2)})

        assert backend.delete("k") is True
        assert backend.get("k") is None
        assert backend.delete("k") is False

    def test_missing_empty_and_corrupt(self, tmp_path):
        """Missing, empty and corrupt files all read as None."""
        root = tmp_path / "root"
        root.mkdir()
        (root / "empty.storage").write_bytes(b"")
        (root / "corrupt.storage").write_bytes(b"\x83garbage")
        backend = FileBackend(root)

        assert backend.get("missing") is None
        assert backend.get("empty") is None
        assert backend.get("corrupt") is None
        assert backend.get("a\x00b") is None
        assert backend.delete("a\x00b") is False

    def test_keys(self, tmp_path):
        """keys() lists *.storage files by literal substring."""
        backend = FileBackend(tmp_path / "root")
        assert list(backend.keys()) == []

        backend.put("network_name", 1)
        backend.put("other", 2)
        backend.put("a[et]", 3)
        (tmp_path / "root" / "netfile.txt").write_text("ignored")
        (tmp_path / "root" / ".storage").write_text("no key")

        assert list(backend.keys("et")) == ["a[et]", "network_name"]
        assert list(backend.keys("[et]")) == ["a[et]"]
        assert sorted(backend.keys()) == ["a[et]", "network_name", "other"]

    def test_clear(self, tmp_path):
        """clear() removes the whole tree and tolerates a missing root."""
        root = tmp_path / "root"
        backend = FileBackend(root)
        backend.put("k", 1)
        (root / "nested").mkdir()

        backend.clear()
        assert not root.exists()
        backend.clear()

    def test_custom_extension(self, tmp_path):
        """The file extension is configurable."""
        backend = FileBackend(tmp_path, extension=".kv")
        backend.put("k", 1)
        assert (tmp_path / "k.kv").exists()
        assert list(backend.keys()) == ["k"]
