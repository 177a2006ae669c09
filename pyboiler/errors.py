"""Error types for the boot sequence."""


class BoilerError(Exception):
    """Base exception for all bootstrapper errors."""

    def __init__(self, message: str, source: str | None = None) -> None:
        """Initialize the error.

        Args:
            message: Human-readable error message.
            source: Label of the configuration source involved, if any.
        """
        super().__init__(message)
        self.message = message
        self.source = source

    def to_dict(self) -> dict[str, str | None]:
        """Convert error to dictionary for logging.

        Returns:
            Dictionary representation of the error.
        """
        return {
            "error_class": type(self).__name__,
            "message": self.message,
            "source": self.source,
        }


class UninitializedError(BoilerError):
    """Raised when the configuration is accessed before init() was called."""


class PrematureAccessError(BoilerError):
    """Raised when the configuration is accessed before it is fully loaded."""


class SyncAssemblyError(BoilerError):
    """Raised when a synchronous configuration source is missing or malformed."""


class EnrichmentSourceError(BoilerError):
    """Raised when a remote or plugin source fails during enrichment."""


class PluginError(EnrichmentSourceError):
    """Plugin resolution or execution failure."""


class RemoteFetchError(EnrichmentSourceError):
    """Remote configuration fetch failure.

    Attributes:
        status_code: HTTP status code, 0 when no response was received.
    """

    def __init__(
        self, message: str, source: str | None = None, status_code: int = 0
    ) -> None:
        super().__init__(message, source=source)
        self.status_code = status_code