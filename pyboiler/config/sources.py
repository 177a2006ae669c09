"""Readers for synchronous configuration sources."""

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from pyboiler.errors import SyncAssemblyError
from pyboiler.settings import ENV_OVERRIDE_PREFIX, ENV_OVERRIDE_SEPARATOR


CONFIG_EXTENSIONS = (".yml", ".yaml", ".json")
DEFAULT_CONFIG_STEM = "default-config"


def load_config_file(file_path: Path) -> dict[str, Any]:
    """Load a YAML or JSON configuration file.

    Args:
        file_path: Path to the file.

    Returns:
        Parsed mapping (empty for an empty file).

    Raises:
        SyncAssemblyError: If the file is missing, unparsable, or its top
            level is not a mapping.
    """
    source = f"file:{file_path}"
    try:
        content = file_path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        msg = f"Configuration file not found: {file_path}"
        raise SyncAssemblyError(msg, source=source) from e
    except (OSError, UnicodeDecodeError) as e:
        msg = f"Cannot read configuration file {file_path}: {e}"
        raise SyncAssemblyError(msg, source=source) from e

    try:
        parsed = yaml.safe_load(content)
    except yaml.YAMLError as e:
        msg = f"Invalid YAML/JSON in {file_path}: {e}"
        raise SyncAssemblyError(msg, source=source) from e

    if parsed is None:
        return {}
    if not isinstance(parsed, dict):
        msg = f"Top level of {file_path} must be a mapping, got {type(parsed).__name__}"
        raise SyncAssemblyError(msg, source=source)
    return parsed


def find_config_file(directory: Path, stem: str) -> Path | None:
    """Find ``<stem>.yml``, ``<stem>.yaml`` or ``<stem>.json`` in a directory."""
    for extension in CONFIG_EXTENSIONS:
        candidate = directory / f"{stem}{extension}"
        if candidate.is_file():
            return candidate
    return None


def parse_env_value(raw: str) -> Any:
    """Parse an environment value as a YAML scalar.

    ``"true"`` becomes ``True``, ``"8080"`` becomes ``8080``. Values that
    do not parse, or parse to a collection, are kept as strings.
    """
    try:
        value = yaml.safe_load(raw)
    except yaml.YAMLError:
        return raw
    if isinstance(value, (dict, list)):
        return raw
    return value


def env_overrides(environ: Mapping[str, str] | None = None) -> dict[str, Any]:
    """Collect configuration overrides from the environment.

    ``PYBOILER__DATABASE__HOST=db`` yields ``{"database": {"host": "db"}}``.

    Args:
        environ: Environment mapping, defaults to ``os.environ``.

    Returns:
        Nested override mapping.
    """
    environ = os.environ if environ is None else environ
    overrides: dict[str, Any] = {}
    for name in sorted(environ):
        if not name.upper().startswith(ENV_OVERRIDE_PREFIX):
            continue
        path = name[len(ENV_OVERRIDE_PREFIX) :]
        parts = [p.lower() for p in path.split(ENV_OVERRIDE_SEPARATOR) if p]
        if not parts:
            continue
        node = overrides
        for part in parts[:-1]:
            child = node.get(part)
            if not isinstance(child, dict):
                child = {}
                node[part] = child
            node = child
        node[parts[-1]] = parse_env_value(environ[name])
    return overrides
