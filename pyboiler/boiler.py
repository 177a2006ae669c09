"""Public entry point: initialize once, then hand out the configuration."""

import asyncio
import functools
import inspect
from collections.abc import Callable, Coroutine, Mapping, Sequence
from pathlib import Path
from typing import Annotated, Any

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from pyboiler.config.initializer import AssemblyRequest, Initializer
from pyboiler.config.state_machine import BootPhase, BootStateMachine
from pyboiler.config.value import ConfigValue
from pyboiler.errors import PrematureAccessError, SyncAssemblyError, UninitializedError
from pyboiler.fetch.client import RemoteConfigFetcher
from pyboiler.observability.logging import (
    configure_logging,
    get_logger,
    parse_level,
    set_global_name,
)
from pyboiler.observability.metrics import BootMetrics
from pyboiler.plugins.loader import PluginLoader
from pyboiler.plugins.models import PluginDescriptor, parse_descriptor
from pyboiler.settings import BootSettings, get_settings


OnFullyLoaded = Callable[[ConfigValue], Any]


class BootOptions(BaseModel):
    """Options accepted by ``Boiler.init``.

    Attributes:
        app_name: Application name used for logging and config lookup.
        base_config_dir: Directory holding ``default-config.yml``.
        base_files_dir: Directory for application data files.
        extra_configs: Extra sources in precedence order.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", arbitrary_types_allowed=True)

    app_name: Annotated[str, Field(min_length=1)]
    base_config_dir: Path | None = None
    base_files_dir: Path | None = None
    extra_configs: list[PluginDescriptor] = Field(default_factory=list)

    @field_validator("extra_configs", mode="before")
    @classmethod
    def parse_extra_configs(cls, v: Sequence[Any] | None) -> list[PluginDescriptor]:
        """Accept descriptors as well as shorthand dicts."""
        return [parse_descriptor(entry) for entry in v or []]


class Boiler:
    """Configuration bootstrapper for one process.

    Construct one instance at process entry and pass it to consumers.
    ``init`` runs the synchronous pass immediately and schedules the
    enrichment pass; ``get_config`` waits for the enrichment pass,
    ``get_config_unsafe`` does not.

    Enrichment starts on the running event loop when ``init`` is called
    from async code. Otherwise it starts with the first awaited
    ``get_config`` or ``wait_fully_loaded``, so ``on_fully_loaded`` is
    only called once something awaits. If the loop running enrichment
    closes before it finishes, the next awaiter starts it again.
    """

    def __init__(
        self,
        settings: BootSettings | None = None,
        loader: PluginLoader | None = None,
        fetcher: RemoteConfigFetcher | None = None,
        environ: Mapping[str, str] | None = None,
        *,
        configure_logs: bool = True,
    ) -> None:
        """Initialize the bootstrapper.

        Args:
            settings: Environment settings, read from the process
                environment on ``init`` when omitted.
            loader: Plugin loader.
            fetcher: Remote configuration fetcher.
            environ: Environment used for configuration overrides.
            configure_logs: Whether ``init`` configures structlog.
        """
        self._settings = settings
        self._loader = loader
        self._fetcher = fetcher
        self._environ = environ
        self._configure_logs = configure_logs
        self._state = BootStateMachine()
        self._initialized_identity: str | None = None
        self._value: ConfigValue | None = None
        self._ready = asyncio.Event()
        self._enrichment_task: asyncio.Task[None] | None = None
        self._enrichment: Callable[[], Coroutine[Any, Any, None]] | None = None
        self.metrics = BootMetrics()

    @property
    def _log(self) -> structlog.stdlib.BoundLogger:
        # Resolved per use so that init's logging configuration applies.
        return get_logger("boiler")

    @property
    def phase(self) -> BootPhase:
        """Get the current boot phase."""
        return self._state.phase

    @property
    def app_name(self) -> str | None:
        """Application identity recorded by ``init``, suffix included."""
        return self._initialized_identity

    @property
    def is_initialized(self) -> bool:
        return self._state.is_initialized()

    @property
    def is_fully_ready(self) -> bool:
        return self._state.is_fully_ready()

    def init(
        self,
        options: BootOptions | Mapping[str, Any],
        on_fully_loaded: OnFullyLoaded | None = None,
    ) -> "Boiler":
        """Initialize the configuration, once per process.

        A second call is a no-op that logs a warning.

        Args:
            options: Boot options or a dict with the same keys.
            on_fully_loaded: Called once with the final configuration when
                the enrichment pass completes; may be a coroutine function.

        Returns:
            This instance, whether or not initialization ran.

        Raises:
            SyncAssemblyError: If options or any local source are invalid.
                Nothing is recorded, so ``init`` may be called again.
        """
        if self._state.is_initialized():
            self._log.warning(
                "boiler_already_initialized",
                app_name=self._initialized_identity,
            )
            return self

        boot_options = self._parse_options(options)
        settings = self._settings or get_settings()

        app_name_without_postfix = boot_options.app_name
        app_name = app_name_without_postfix + settings.app_name_suffix

        initializer = Initializer(
            loader=self._loader,
            fetcher=self._fetcher,
            metrics=self.metrics,
            environ=self._environ,
        )
        value = initializer.assemble_sync(
            AssemblyRequest(
                app_name=app_name,
                app_name_without_postfix=app_name_without_postfix,
                base_config_dir=boot_options.base_config_dir,
                base_files_dir=boot_options.base_files_dir,
                extras=tuple(boot_options.extra_configs),
                learn_directory=settings.learn_directory,
                environment=settings.environment,
            )
        )

        if self._configure_logs:
            self._apply_log_settings(value, settings)

        set_global_name(app_name)
        self._initialized_identity = app_name
        self._value = value
        self._state.transition(BootPhase.SYNC_READY)
        self._log.info("sync_ready", app_name=app_name, sources=value.sources)

        self._enrichment = functools.partial(
            self._run_enrichment,
            initializer,
            value,
            tuple(boot_options.extra_configs),
            on_fully_loaded,
        )
        self._schedule()
        return self

    async def get_config(self) -> ConfigValue:
        """Get the configuration once it is fully loaded.

        Returns:
            The final configuration; every caller gets the same object.

        Raises:
            UninitializedError: If ``init`` was never called.
        """
        value = self._require_value("get_config")
        await self.wait_fully_loaded()
        return value

    def get_config_unsafe(self, warn_only: bool = False) -> ConfigValue:
        """Get the configuration without waiting for enrichment.

        Args:
            warn_only: Return the partially loaded configuration with a
                warning instead of raising.

        Returns:
            The configuration, possibly lacking remote and plugin values.

        Raises:
            UninitializedError: If ``init`` was never called.
            PrematureAccessError: If enrichment has not completed and
                ``warn_only`` is False.
        """
        value = self._require_value("get_config_unsafe")
        if not self._state.is_fully_ready():
            if not warn_only:
                msg = "Config loaded before being fully initialized"
                raise PrematureAccessError(msg)
            self._log.warning(
                "config_accessed_before_ready",
                phase=self._state.phase.name,
            )
        return value

    async def wait_fully_loaded(self) -> None:
        """Wait until the enrichment pass has completed.

        Raises:
            UninitializedError: If ``init`` was never called.
        """
        self._require_value("wait_fully_loaded")
        if self._state.is_fully_ready():
            return
        self._start_enrichment()
        await self._ready.wait()

    def get_logger(self, name: str) -> structlog.stdlib.BoundLogger:
        """Get a named logger carrying the application identity."""
        return get_logger(name)

    def _require_value(self, caller: str) -> ConfigValue:
        if self._value is None:
            msg = f"boiler must be initialized with init() before using {caller}()"
            raise UninitializedError(msg)
        return self._value

    def _parse_options(self, options: BootOptions | Mapping[str, Any]) -> BootOptions:
        if isinstance(options, BootOptions):
            return options
        try:
            return BootOptions.model_validate(dict(options))
        except (ValidationError, ValueError) as e:
            msg = f"Invalid boot options: {e}"
            raise SyncAssemblyError(msg, source="options") from e

    def _apply_log_settings(self, value: ConfigValue, settings: BootSettings) -> None:
        level = parse_level(settings.log_level or value.get("logs:level"))
        json_format = settings.log_json
        if json_format is None:
            json_format = bool(value.get("logs:json", True))
        configure_logging(level=level, json_format=json_format)

    def _schedule(self) -> None:
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            self._log.debug("enrichment_deferred")
            return
        self._start_enrichment()

    def _start_enrichment(self) -> None:
        task = self._enrichment_task
        if task is not None and not task.done() and not task.get_loop().is_closed():
            return
        if self._enrichment is None or self._state.is_fully_ready():
            return
        if task is not None:
            # The loop that ran the previous attempt closed before it finished.
            self._log.warning("enrichment_restarted")
            self._ready = asyncio.Event()
        self._enrichment_task = asyncio.get_running_loop().create_task(
            self._enrichment()
        )

    async def _run_enrichment(
        self,
        initializer: Initializer,
        value: ConfigValue,
        descriptors: Sequence[PluginDescriptor],
        on_fully_loaded: OnFullyLoaded | None,
    ) -> None:
        try:
            await initializer.enrich(value, descriptors)
        except Exception as e:  # noqa: BLE001
            self._log.error(
                "enrichment_failed",
                error={"error_class": type(e).__name__, "message": str(e)},
            )
        self._state.transition(BootPhase.FULLY_READY)
        self._ready.set()
        self._log.info(
            "fully_ready",
            app_name=self._initialized_identity,
            plugins=value.loaded_plugins,
            metrics=self.metrics.to_dict(),
        )

        if on_fully_loaded is None:
            return
        try:
            result = on_fully_loaded(value)
            if inspect.isawaitable(result):
                await result
        except Exception as e:  # noqa: BLE001
            self._log.error("fully_loaded_callback_failed", error=str(e))
