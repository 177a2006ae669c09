"""Shared key/value namespace written by configuration plugins."""

import copy
from typing import Any


_MISSING = object()


class PluginStore:
    """Mutable mapping plugins write into during enrichment.

    Last write wins. No locking and no ordering guarantee between
    concurrent writers.

    A store created with ``staged()`` buffers writes and reads through to
    its parent; ``commit()`` publishes the buffered writes. The loader
    hands each plugin a staged store so a plugin that fails leaves no
    values behind.
    """

    def __init__(self, parent: "PluginStore | None" = None) -> None:
        self._values: dict[str, Any] = {}
        self._parent = parent

    def set(self, key: str, value: Any) -> None:
        """Store a value under a plugin-chosen key.

        Args:
            key: Key to write.
            value: Arbitrary value.
        """
        self._values[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        """Get a value, or default when the key was never written."""
        value = self._values.get(key, _MISSING)
        if value is not _MISSING:
            return value
        if self._parent is not None:
            return self._parent.get(key, default)
        return default

    def has(self, key: str) -> bool:
        if key in self._values:
            return True
        return self._parent is not None and self._parent.has(key)

    def keys(self) -> list[str]:
        keys = self._parent.keys() if self._parent is not None else []
        return keys + [key for key in self._values if key not in keys]

    def as_dict(self) -> dict[str, Any]:
        """Deep copy of the stored values."""
        return {key: copy.deepcopy(self.get(key)) for key in self.keys()}

    def staged(self) -> "PluginStore":
        """Create a child store whose writes are held until ``commit``."""
        return PluginStore(parent=self)

    def commit(self) -> None:
        """Publish buffered writes to the parent store."""
        if self._parent is None:
            return
        for key, value in self._values.items():
            self._parent.set(key, value)
        self._values.clear()

    def __len__(self) -> int:
        return len(self.keys())

    def __repr__(self) -> str:
        return f"PluginStore(keys={self.keys()!r})"
