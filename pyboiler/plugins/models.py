"""Plugin interface and extra configuration descriptors."""

from collections.abc import Awaitable
from pathlib import Path
from typing import Annotated, Any, Literal, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator

from pyboiler.plugins.store import PluginStore


@runtime_checkable
class ConfigPlugin(Protocol):
    """Protocol for configuration plugins.

    A plugin writes zero or more values into the store it is handed and
    returns the name it identifies itself with. ``enrich`` may be a plain
    function or a coroutine function.
    """

    def enrich(self, store: PluginStore) -> str | Awaitable[str]:
        """Write plugin values into the store.

        Args:
            store: Shared plugin store.

        Returns:
            The plugin's own name.

        Raises:
            PluginError: If the plugin cannot complete.
        """
        ...


class _Descriptor(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    @property
    def label(self) -> str:
        """Short description used in logs and error records."""
        raise NotImplementedError

    @property
    def is_async(self) -> bool:
        """Whether the descriptor is processed during enrichment."""
        return True


class FileDescriptor(_Descriptor):
    """Extra configuration file merged during the synchronous pass.

    Attributes:
        path: Path to a YAML or JSON file.
        scope: Optional key the file content is nested under.
    """

    kind: Literal["file"] = "file"
    path: Path
    scope: str | None = None

    @property
    def label(self) -> str:
        return f"file:{self.path}"

    @property
    def is_async(self) -> bool:
        return False


class DataDescriptor(_Descriptor):
    """Inline configuration data merged during the synchronous pass."""

    kind: Literal["data"] = "data"
    data: dict[str, Any]
    scope: str | None = None

    @property
    def label(self) -> str:
        return f"data:{self.scope or '<root>'}"

    @property
    def is_async(self) -> bool:
        return False


class RemoteURLDescriptor(_Descriptor):
    """Remote configuration document fetched during enrichment."""

    kind: Literal["url"] = "url"
    url: Annotated[str, Field(min_length=1)]
    scope: str | None = None

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Validate URL starts with http:// or https://."""
        if not v.startswith(("http://", "https://")):
            msg = "URL must start with http:// or https://"
            raise ValueError(msg)
        return v

    @property
    def label(self) -> str:
        return f"url:{self.url}"


class RemoteURLFromKeyDescriptor(_Descriptor):
    """Remote configuration document whose URL is read from the config.

    Attributes:
        key: Configuration key holding the URL, resolved against the
            synchronously assembled configuration.
        scope: Optional key the fetched content is nested under.
    """

    kind: Literal["url_from_key"] = "url_from_key"
    key: Annotated[str, Field(min_length=1)]
    scope: str | None = None

    @property
    def label(self) -> str:
        return f"url_from_key:{self.key}"


class InlinePluginDescriptor(_Descriptor):
    """Plugin object supplied directly by the caller.

    The object either implements ``ConfigPlugin`` or exposes a
    ``load(store)`` entry point.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", arbitrary_types_allowed=True)

    kind: Literal["inline"] = "inline"
    plugin: Any

    @property
    def label(self) -> str:
        name = getattr(self.plugin, "__name__", None) or type(self.plugin).__name__
        return f"inline:{name}"


class FilePluginDescriptor(_Descriptor):
    """Python source file exposing a ``load(store)`` entry point."""

    kind: Literal["plugin_file"] = "plugin_file"
    path: Path

    @property
    def label(self) -> str:
        return f"plugin_file:{self.path}"


PluginDescriptor = Annotated[
    FileDescriptor
    | DataDescriptor
    | RemoteURLDescriptor
    | RemoteURLFromKeyDescriptor
    | InlinePluginDescriptor
    | FilePluginDescriptor,
    Field(discriminator="kind"),
]

_DESCRIPTOR_ADAPTER: TypeAdapter[PluginDescriptor] = TypeAdapter(PluginDescriptor)

# Shorthand keys accepted in plain dict entries, mapped to their kind
_SHORTHAND_KEYS: dict[str, tuple[str, str]] = {
    "file": ("file", "path"),
    "data": ("data", "data"),
    "url": ("url", "url"),
    "url_from_key": ("url_from_key", "key"),
    "plugin": ("inline", "plugin"),
    "plugin_file": ("plugin_file", "path"),
}


def parse_descriptor(entry: Any) -> PluginDescriptor:
    """Coerce an extra configuration entry into a descriptor.

    Accepts descriptor instances, dicts carrying an explicit ``kind`` and
    shorthand dicts such as ``{"plugin": module}`` or
    ``{"url": "https://...", "scope": "remote"}``.

    Args:
        entry: The entry to parse.

    Returns:
        The matching descriptor.

    Raises:
        pydantic.ValidationError: If the entry does not describe a source.
        ValueError: If a shorthand dict names no known source.
    """
    if isinstance(entry, _Descriptor):
        return entry  # type: ignore[return-value]
    if isinstance(entry, dict) and "kind" not in entry:
        for shorthand, (kind, field_name) in _SHORTHAND_KEYS.items():
            if shorthand in entry:
                rest = {k: v for k, v in entry.items() if k != shorthand}
                entry = {"kind": kind, field_name: entry[shorthand], **rest}
                break
        else:
            msg = f"Unrecognized extra config entry with keys {sorted(entry)}"
            raise ValueError(msg)
    return _DESCRIPTOR_ADAPTER.validate_python(entry)
