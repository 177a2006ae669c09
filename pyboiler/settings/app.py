"""Bootstrapper settings powered by Pydantic BaseSettings."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


ENV_OVERRIDE_PREFIX = "PYBOILER__"
ENV_OVERRIDE_SEPARATOR = "__"


class BootSettings(BaseSettings):
    """Environment inputs read once per ``init`` call."""

    model_config = SettingsConfigDict(
        env_prefix="",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    app_name_suffix: str = Field(default="", validation_alias="PYBOILER_SUFFIX")
    learn_directory: Path | None = Field(
        default=None, validation_alias="CONFIG_LEARN_DIR"
    )
    environment: str = Field(default="development", validation_alias="PYBOILER_ENV")
    log_level: str | None = Field(default=None, validation_alias="PYBOILER_LOG_LEVEL")
    log_json: bool | None = Field(default=None, validation_alias="PYBOILER_LOG_JSON")


def get_settings() -> BootSettings:
    """Get a settings instance."""
    return BootSettings()
