"""Process configuration bootstrapper.

Typical use at process entry::

    boiler = Boiler().init({"app_name": "my-service"})
    config = await boiler.get_config()
"""

from pyboiler.boiler import Boiler, BootOptions
from pyboiler.config import BootPhase, BootStateError, ConfigValue
from pyboiler.errors import (
    BoilerError,
    EnrichmentSourceError,
    PluginError,
    PrematureAccessError,
    RemoteFetchError,
    SyncAssemblyError,
    UninitializedError,
)
from pyboiler.observability.logging import get_logger
from pyboiler.plugins import ConfigPlugin, PluginStore


__all__ = [
    "Boiler",
    "BoilerError",
    "BootOptions",
    "BootPhase",
    "BootStateError",
    "ConfigPlugin",
    "ConfigValue",
    "EnrichmentSourceError",
    "PluginError",
    "PluginStore",
    "PrematureAccessError",
    "RemoteFetchError",
    "SyncAssemblyError",
    "UninitializedError",
    "get_logger",
]
