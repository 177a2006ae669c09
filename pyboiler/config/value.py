"""Assembled configuration value with a plugin namespace on top."""

import copy
import json
import re
from pathlib import Path
from typing import Any

import structlog

from pyboiler.plugins.store import PluginStore


logger = structlog.get_logger()

KEY_SEPARATOR = re.compile(r"[:.]")

_MISSING = object()


def split_key(key: str) -> list[str]:
    """Split a key path such as ``database:host`` into its parts."""
    return [part for part in KEY_SEPARATOR.split(key) if part]


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge ``override`` into ``base`` in place.

    Nested mappings are merged key by key; any other value in
    ``override`` replaces the one in ``base``.

    Args:
        base: Mapping to update.
        override: Mapping with higher precedence.

    Returns:
        The updated ``base``.
    """
    for key, value in override.items():
        current = base.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            deep_merge(current, value)
        else:
            base[key] = copy.deepcopy(value)
    return base


def nest_under_scope(data: dict[str, Any], scope: str | None) -> dict[str, Any]:
    """Wrap ``data`` under the key path ``scope`` (no-op without scope)."""
    if not scope:
        return data
    nested: dict[str, Any] = data
    for part in reversed(split_key(scope)):
        nested = {part: nested}
    return nested


class ConfigValue:
    """Merged configuration for the running process.

    Base values come from files, extra sources, remote documents and the
    environment. Plugin writes stay in their own ``PluginStore`` and are
    consulted first on lookup without ever overwriting base keys.
    """

    def __init__(
        self,
        data: dict[str, Any] | None = None,
        plugins: PluginStore | None = None,
        learn_file: Path | None = None,
    ) -> None:
        """Initialize the value.

        Args:
            data: Base configuration mapping.
            plugins: Plugin store layered on top of the base mapping.
            learn_file: When set, accessed keys are appended to this file.
        """
        self._data: dict[str, Any] = data if data is not None else {}
        self._plugins = plugins if plugins is not None else PluginStore()
        self._learn_file = learn_file
        self._learned: set[str] = set()
        self.sources: list[str] = []
        self.loaded_plugins: list[str] = []

    @property
    def plugins(self) -> PluginStore:
        """Get the plugin store attached to this configuration."""
        return self._plugins

    def get(self, key: str, default: Any = None) -> Any:
        """Look up a key.

        The plugin store is checked first for the literal key, then the
        base mapping is walked along the ``:`` or ``.`` separated path.

        Args:
            key: Key or key path.
            default: Value returned when the key is absent.

        Returns:
            The stored value or ``default``.
        """
        value = self._lookup(key)
        self._learn(key, found=value is not _MISSING)
        return default if value is _MISSING else value

    def has(self, key: str) -> bool:
        return self._lookup(key) is not _MISSING

    def set(self, key: str, value: Any) -> None:
        """Set a value in the base mapping, creating parents as needed."""
        parts = split_key(key)
        if not parts:
            msg = "Configuration key must not be empty"
            raise ValueError(msg)
        node = self._data
        for part in parts[:-1]:
            child = node.get(part)
            if not isinstance(child, dict):
                child = {}
                node[part] = child
            node = child
        node[parts[-1]] = value

    def merge(self, data: dict[str, Any], source: str) -> None:
        """Merge a mapping on top of the base values.

        Args:
            data: Mapping with higher precedence than current values.
            source: Label of the contributing source.
        """
        deep_merge(self._data, data)
        self.sources.append(source)

    def as_dict(self) -> dict[str, Any]:
        """Deep copy of the base mapping, without plugin values."""
        return copy.deepcopy(self._data)

    def _lookup(self, key: str) -> Any:
        if self._plugins.has(key):
            return self._plugins.get(key)
        node: Any = self._data
        for part in split_key(key):
            if not isinstance(node, dict) or part not in node:
                return _MISSING
            node = node[part]
        return node

    def _learn(self, key: str, *, found: bool) -> None:
        if self._learn_file is None or key in self._learned:
            return
        self._learned.add(key)
        record = json.dumps({"key": key, "found": found}, sort_keys=True)
        try:
            with self._learn_file.open("a", encoding="utf-8") as f:
                f.write(record + "\n")
        except OSError as e:
            logger.warning(
                "config_learn_write_failed",
                learn_file=str(self._learn_file),
                error=str(e),
            )

    def __repr__(self) -> str:
        return (
            f"ConfigValue(keys={sorted(self._data)!r}, "
            f"plugins={self._plugins.keys()!r})"
        )
