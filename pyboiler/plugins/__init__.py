"""Configuration plugin contract, descriptors and loader."""

from pyboiler.plugins.loader import ModulePlugin, PluginLoader
from pyboiler.plugins.models import (
    ConfigPlugin,
    DataDescriptor,
    FileDescriptor,
    FilePluginDescriptor,
    InlinePluginDescriptor,
    PluginDescriptor,
    RemoteURLDescriptor,
    RemoteURLFromKeyDescriptor,
    parse_descriptor,
)
from pyboiler.plugins.store import PluginStore


__all__ = [
    "ConfigPlugin",
    "DataDescriptor",
    "FileDescriptor",
    "FilePluginDescriptor",
    "InlinePluginDescriptor",
    "ModulePlugin",
    "PluginDescriptor",
    "PluginLoader",
    "PluginStore",
    "RemoteURLDescriptor",
    "RemoteURLFromKeyDescriptor",
    "parse_descriptor",
]
