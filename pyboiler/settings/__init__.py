"""Bootstrapper environment settings."""

from .app import ENV_OVERRIDE_PREFIX, ENV_OVERRIDE_SEPARATOR, BootSettings, get_settings


__all__ = ["ENV_OVERRIDE_PREFIX", "ENV_OVERRIDE_SEPARATOR", "BootSettings", "get_settings"]
