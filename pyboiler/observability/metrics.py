"""Metrics collection for the boot sequence."""

from dataclasses import dataclass


@dataclass
class BootMetrics:
    """Metrics for configuration assembly and enrichment.

    Attributes:
        sync_assembly_duration_ms: Time taken by the synchronous pass.
        enrichment_duration_ms: Time taken by the enrichment pass.
        sources_loaded: Number of configuration sources merged.
        plugins_loaded: Number of plugins that reported a name.
        enrichment_failures_total: Enrichment sources skipped after failing.
    """

    sync_assembly_duration_ms: float = 0.0
    enrichment_duration_ms: float = 0.0
    sources_loaded: int = 0
    plugins_loaded: int = 0
    enrichment_failures_total: int = 0

    def record_sync_duration(self, duration_ms: float) -> None:
        self.sync_assembly_duration_ms = duration_ms

    def record_enrichment_duration(self, duration_ms: float) -> None:
        self.enrichment_duration_ms = duration_ms

    def record_source_loaded(self) -> None:
        self.sources_loaded += 1

    def record_plugin_loaded(self) -> None:
        self.plugins_loaded += 1

    def record_enrichment_failure(self) -> None:
        self.enrichment_failures_total += 1

    def to_dict(self) -> dict[str, float | int]:
        """Convert metrics to dictionary.

        Returns:
            Dictionary of metric name to value.
        """
        return {
            "sync_assembly_duration_ms": self.sync_assembly_duration_ms,
            "enrichment_duration_ms": self.enrichment_duration_ms,
            "sources_loaded": self.sources_loaded,
            "plugins_loaded": self.plugins_loaded,
            "enrichment_failures_total": self.enrichment_failures_total,
        }
