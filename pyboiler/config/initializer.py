"""Two-pass configuration assembly: synchronous files, asynchronous enrichment."""

import asyncio
import time
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog

from pyboiler.config.sources import (
    DEFAULT_CONFIG_STEM,
    env_overrides,
    find_config_file,
    load_config_file,
)
from pyboiler.config.value import ConfigValue, nest_under_scope
from pyboiler.errors import EnrichmentSourceError, RemoteFetchError, SyncAssemblyError
from pyboiler.fetch.client import RemoteConfigFetcher
from pyboiler.observability.metrics import BootMetrics
from pyboiler.plugins.loader import PluginLoader
from pyboiler.plugins.models import (
    DataDescriptor,
    FileDescriptor,
    FilePluginDescriptor,
    InlinePluginDescriptor,
    PluginDescriptor,
    RemoteURLDescriptor,
    RemoteURLFromKeyDescriptor,
)


logger = structlog.get_logger()

DEFAULT_CONFIG_DIR_NAME = "config"
LEARN_FILE_SUFFIX = "-config-learn.jsonl"


@dataclass(frozen=True)
class AssemblyRequest:
    """Inputs of the synchronous pass.

    Attributes:
        app_name: Application identity including any environment suffix.
        app_name_without_postfix: Application name as passed to ``init``,
            used to locate the application config file.
        base_config_dir: Directory holding the base configuration files.
        base_files_dir: Directory for application data files.
        extras: Extra sources in precedence order.
        learn_directory: Directory where accessed keys are recorded.
        environment: Environment name selecting ``<env>-config.yml``.
    """

    app_name: str
    app_name_without_postfix: str
    base_config_dir: Path | None = None
    base_files_dir: Path | None = None
    extras: Sequence[PluginDescriptor] = field(default_factory=tuple)
    learn_directory: Path | None = None
    environment: str = "development"


class Initializer:
    """Builds the configuration value for one ``init`` call.

    The synchronous pass only reads local files and the environment. The
    enrichment pass runs plugins and remote fetches; a failing source is
    logged and skipped so the rest of the configuration still loads.
    """

    def __init__(
        self,
        loader: PluginLoader | None = None,
        fetcher: RemoteConfigFetcher | None = None,
        metrics: BootMetrics | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        """Initialize the initializer.

        Args:
            loader: Plugin loader.
            fetcher: Remote configuration fetcher.
            metrics: Metrics sink.
            environ: Environment mapping, defaults to ``os.environ``.
        """
        self._loader = loader or PluginLoader()
        self._fetcher = fetcher or RemoteConfigFetcher()
        self._metrics = metrics or BootMetrics()
        self._environ = environ
        self._env_overrides: dict[str, Any] = {}
        self._log = logger.bind(component="initializer")

    def assemble_sync(self, request: AssemblyRequest) -> ConfigValue:
        """Assemble the configuration from local sources.

        Precedence, lowest first: ``default-config``, ``<env>-config``,
        ``<app>-config``, sync extras in order, environment overrides.

        Args:
            request: Assembly inputs.

        Returns:
            The synchronously assembled configuration.

        Raises:
            SyncAssemblyError: If the base directory or default config is
                missing, or any local source is malformed.
        """
        start_time = time.perf_counter()
        base_dir = request.base_config_dir or Path.cwd() / DEFAULT_CONFIG_DIR_NAME
        log = self._log.bind(app=request.app_name, base_config_dir=str(base_dir))

        if not base_dir.is_dir():
            msg = f"Base configuration directory not found: {base_dir}"
            raise SyncAssemblyError(msg, source=f"dir:{base_dir}")

        value = ConfigValue(learn_file=self._learn_file(request))

        default_file = find_config_file(base_dir, DEFAULT_CONFIG_STEM)
        if default_file is None:
            msg = f"No {DEFAULT_CONFIG_STEM}.yml found in {base_dir}"
            raise SyncAssemblyError(msg, source=f"dir:{base_dir}")
        self._merge_file(value, default_file)

        for stem in (
            f"{request.environment}-config",
            f"{request.app_name_without_postfix}-config",
        ):
            optional_file = find_config_file(base_dir, stem)
            if optional_file is not None:
                self._merge_file(value, optional_file)

        for descriptor in request.extras:
            if isinstance(descriptor, FileDescriptor):
                path = descriptor.path
                if not path.is_absolute():
                    path = base_dir / path
                data = load_config_file(path)
                value.merge(nest_under_scope(data, descriptor.scope), descriptor.label)
                self._metrics.record_source_loaded()
            elif isinstance(descriptor, DataDescriptor):
                data = dict(descriptor.data)
                value.merge(nest_under_scope(data, descriptor.scope), descriptor.label)
                self._metrics.record_source_loaded()

        self._env_overrides = env_overrides(self._environ)
        if self._env_overrides:
            value.merge(self._env_overrides, "env")

        value.set("app:name", request.app_name)
        value.set("app:name_without_postfix", request.app_name_without_postfix)
        value.set("app:base_files_dir", str(request.base_files_dir or base_dir))

        duration_ms = (time.perf_counter() - start_time) * 1000
        self._metrics.record_sync_duration(duration_ms)
        log.info(
            "sync_assembly_complete",
            sources=value.sources,
            duration_ms=round(duration_ms, 2),
        )
        return value

    async def enrich(
        self, value: ConfigValue, descriptors: Sequence[PluginDescriptor]
    ) -> ConfigValue:
        """Run plugin and remote sources against the assembled value.

        All sources run concurrently. Remote documents are merged in
        descriptor order once every source has finished, then environment
        overrides are applied again so they keep precedence.

        Args:
            value: Value returned by ``assemble_sync``.
            descriptors: All extra sources; sync-only ones are ignored.

        Returns:
            The same value, enriched.
        """
        start_time = time.perf_counter()
        pending = [d for d in descriptors if d.is_async]
        results = await asyncio.gather(
            *(self._run_source(value, descriptor) for descriptor in pending)
        )

        remote_merged = False
        for descriptor, result in zip(pending, results, strict=True):
            if result is None:
                continue
            if isinstance(descriptor, (InlinePluginDescriptor, FilePluginDescriptor)):
                value.loaded_plugins.append(result)
                value.sources.append(descriptor.label)
                self._metrics.record_plugin_loaded()
            else:
                value.merge(nest_under_scope(result, descriptor.scope), descriptor.label)
                self._metrics.record_source_loaded()
                remote_merged = True

        if remote_merged and self._env_overrides:
            value.merge(self._env_overrides, "env")

        duration_ms = (time.perf_counter() - start_time) * 1000
        self._metrics.record_enrichment_duration(duration_ms)
        self._log.info(
            "enrichment_complete",
            plugins=value.loaded_plugins,
            plugin_keys=value.plugins.keys(),
            failures=self._metrics.enrichment_failures_total,
            duration_ms=round(duration_ms, 2),
        )
        return value

    async def _run_source(self, value: ConfigValue, descriptor: PluginDescriptor) -> Any:
        """Run one enrichment source, returning None when it fails."""
        try:
            if isinstance(descriptor, (InlinePluginDescriptor, FilePluginDescriptor)):
                return await self._loader.load(descriptor, value.plugins)
            if isinstance(descriptor, RemoteURLDescriptor):
                return await self._fetcher.fetch(descriptor.url, source=descriptor.label)
            if isinstance(descriptor, RemoteURLFromKeyDescriptor):
                url = value.get(descriptor.key)
                if not isinstance(url, str) or not url:
                    msg = f"Configuration key '{descriptor.key}' does not hold a URL"
                    raise RemoteFetchError(msg, source=descriptor.label)
                return await self._fetcher.fetch(url, source=descriptor.label)
        except EnrichmentSourceError as e:
            self._record_failure(descriptor, e.to_dict())
        except Exception as e:  # noqa: BLE001
            self._record_failure(
                descriptor,
                {"error_class": type(e).__name__, "message": str(e)},
            )
        return None

    def _record_failure(
        self, descriptor: PluginDescriptor, error: dict[str, str | None]
    ) -> None:
        self._metrics.record_enrichment_failure()
        self._log.error(
            "enrichment_source_failed",
            source=descriptor.label,
            error=error,
        )

    def _merge_file(self, value: ConfigValue, file_path: Path) -> None:
        value.merge(load_config_file(file_path), f"file:{file_path}")
        self._metrics.record_source_loaded()

    def _learn_file(self, request: AssemblyRequest) -> Path | None:
        if request.learn_directory is None:
            return None
        try:
            request.learn_directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            msg = f"Cannot create learn directory {request.learn_directory}: {e}"
            raise SyncAssemblyError(msg, source="learn_directory") from e
        return request.learn_directory / f"{request.app_name}{LEARN_FILE_SUFFIX}"
