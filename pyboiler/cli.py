"""Command line tools for inspecting an application's configuration."""

import asyncio
import json
import sys
from pathlib import Path
from typing import Any

import click

from pyboiler.boiler import Boiler
from pyboiler.config.value import ConfigValue
from pyboiler.errors import SyncAssemblyError
from pyboiler.observability.logging import configure_logging, parse_level


def _boot_options(
    app_name: str,
    config_dir: Path | None,
    extras: tuple[Path, ...] = (),
    plugins: tuple[Path, ...] = (),
    urls: tuple[str, ...] = (),
) -> dict[str, Any]:
    extra_configs: list[dict[str, Any]] = [{"file": path.resolve()} for path in extras]
    extra_configs += [{"plugin_file": path.resolve()} for path in plugins]
    extra_configs += [{"url": url} for url in urls]
    return {
        "app_name": app_name,
        "base_config_dir": config_dir,
        "extra_configs": extra_configs,
    }


def _init_or_exit(boiler: Boiler, options: dict[str, Any]) -> None:
    try:
        boiler.init(options)
    except SyncAssemblyError as e:
        click.echo("Configuration validation failed:", err=True)
        location = f" ({e.source})" if e.source else ""
        click.echo(f"  - {e.message}{location}", err=True)
        sys.exit(1)


def _dump(value: ConfigValue) -> dict[str, Any]:
    return {
        "config": value.as_dict(),
        "plugins": value.plugins.as_dict(),
        "loaded_plugins": list(value.loaded_plugins),
        "sources": list(value.sources),
    }


app_name_option = click.option(
    "--app-name",
    required=True,
    help="Application name used to find <app-name>-config files.",
)
config_dir_option = click.option(
    "--config-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory holding default-config.yml (default: ./config).",
)
extra_option = click.option(
    "--extra",
    "extras",
    multiple=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Extra config file merged after the base files. Repeatable.",
)
log_level_option = click.option(
    "--log-level",
    default="warning",
    show_default=True,
    help="Log level for messages written to stderr.",
)


@click.group()
@click.version_option(version="0.1.0")
def cli() -> None:
    """pyboiler configuration tools."""


@cli.command()
@app_name_option
@config_dir_option
@extra_option
@log_level_option
def validate(
    app_name: str,
    config_dir: Path | None,
    extras: tuple[Path, ...],
    log_level: str,
) -> None:
    """Run the synchronous pass and report the sources it merged."""
    configure_logging(level=parse_level(log_level), json_format=False)
    boiler = Boiler(configure_logs=False)
    _init_or_exit(boiler, _boot_options(app_name, config_dir, extras))

    value = boiler.get_config_unsafe(warn_only=True)
    click.echo("Configuration is valid!")
    click.echo(f"  Application: {boiler.app_name}")
    click.echo(f"  Sources: {len(value.sources)}")
    for source in value.sources:
        click.echo(f"    - {source}")


@cli.command()
@app_name_option
@config_dir_option
@extra_option
@click.option(
    "--plugin",
    "plugins",
    multiple=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Plugin file exposing load(store). Repeatable.",
)
@click.option("--url", "urls", multiple=True, help="Remote config URL. Repeatable.")
@click.option("--key", default=None, help="Print only this key (e.g. database:host).")
@log_level_option
def show(  # noqa: PLR0913
    app_name: str,
    config_dir: Path | None,
    extras: tuple[Path, ...],
    plugins: tuple[Path, ...],
    urls: tuple[str, ...],
    key: str | None,
    log_level: str,
) -> None:
    """Boot fully and print the final configuration as JSON."""
    configure_logging(level=parse_level(log_level), json_format=False)
    boiler = Boiler(configure_logs=False)
    _init_or_exit(boiler, _boot_options(app_name, config_dir, extras, plugins, urls))

    value = asyncio.run(boiler.get_config())
    output = value.get(key) if key else _dump(value)
    click.echo(json.dumps(output, indent=2, sort_keys=True, default=str))


if __name__ == "__main__":
    cli()
