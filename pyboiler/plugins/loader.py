"""Resolve plugin descriptors and run plugins against the shared store."""

import asyncio
import importlib.util
import inspect
import uuid
from pathlib import Path
from types import ModuleType
from typing import Any

import structlog

from pyboiler.errors import PluginError
from pyboiler.plugins.models import (
    ConfigPlugin,
    FilePluginDescriptor,
    InlinePluginDescriptor,
)
from pyboiler.plugins.store import PluginStore


logger = structlog.get_logger()

PLUGIN_ENTRY_POINT = "load"


class ModulePlugin:
    """Adapts an object exposing ``load(store)`` to ``ConfigPlugin``."""

    def __init__(self, target: Any, label: str) -> None:
        """Initialize the adapter.

        Args:
            target: Module or object exposing the ``load`` entry point.
            label: Descriptor label, used in error messages.

        Raises:
            PluginError: If the target has no callable ``load``.
        """
        entry = getattr(target, PLUGIN_ENTRY_POINT, None)
        if not callable(entry):
            msg = f"Plugin {label} does not expose a callable '{PLUGIN_ENTRY_POINT}(store)'"
            raise PluginError(msg, source=label)
        self._entry = entry
        self.label = label

    def enrich(self, store: PluginStore) -> Any:
        return self._entry(store)


class PluginLoader:
    """Loads configuration plugins and invokes them.

    Nothing is cached: every call resolves the descriptor again, and
    plugin files are executed as fresh modules that are never registered
    in ``sys.modules``.
    """

    def resolve(
        self, descriptor: InlinePluginDescriptor | FilePluginDescriptor
    ) -> ConfigPlugin:
        """Resolve a descriptor into a runnable plugin.

        Args:
            descriptor: Inline or file plugin descriptor.

        Returns:
            Plugin implementing ``enrich(store)``.

        Raises:
            PluginError: If the plugin cannot be resolved.
        """
        if isinstance(descriptor, FilePluginDescriptor):
            module = self._import_file(descriptor.path, descriptor.label)
            return ModulePlugin(module, descriptor.label)

        target = descriptor.plugin
        if isinstance(target, ConfigPlugin):
            return target
        return ModulePlugin(target, descriptor.label)

    async def load(
        self,
        descriptor: InlinePluginDescriptor | FilePluginDescriptor,
        store: PluginStore,
    ) -> str:
        """Run a plugin against the store.

        The plugin writes into a staged view of the store; its writes are
        committed only when it returns a valid name.

        Args:
            descriptor: Plugin descriptor.
            store: Shared plugin store.

        Returns:
            The name the plugin reported about itself.

        Raises:
            PluginError: If resolution or execution fails, or the plugin
                does not report a name.
        """
        label = descriptor.label
        plugin = self.resolve(descriptor)
        staged = store.staged()

        try:
            result = plugin.enrich(staged)
            if inspect.isawaitable(result):
                result = await result
        except PluginError:
            raise
        except asyncio.CancelledError as e:
            task = asyncio.current_task()
            if task is not None and task.cancelling():
                raise
            msg = f"Plugin {label} raised CancelledError"
            raise PluginError(msg, source=label) from e
        except Exception as e:
            msg = f"Plugin {label} failed: {e}"
            raise PluginError(msg, source=label) from e

        if not isinstance(result, str) or not result:
            msg = f"Plugin {label} did not return its name (got {result!r})"
            raise PluginError(msg, source=label)

        staged.commit()
        logger.debug("plugin_loaded", plugin=result, source=label)
        return result

    def _import_file(self, path: Path, label: str) -> ModuleType:
        """Execute a plugin source file as a new module.

        Args:
            path: Plugin file path.
            label: Descriptor label.

        Returns:
            The executed module.

        Raises:
            PluginError: If the file is missing or raises on import.
        """
        if not path.is_file():
            msg = f"Plugin file not found: {path}"
            raise PluginError(msg, source=label)

        module_name = f"pyboiler_plugin_{path.stem.replace('-', '_')}_{uuid.uuid4().hex}"
        spec = importlib.util.spec_from_file_location(module_name, path)
        if spec is None or spec.loader is None:
            msg = f"Failed to load plugin module {path}"
            raise PluginError(msg, source=label)

        module = importlib.util.module_from_spec(spec)
        try:
            spec.loader.exec_module(module)
        except Exception as e:
            msg = f"Failed to import plugin module {path}: {e}"
            raise PluginError(msg, source=label) from e
        return module
