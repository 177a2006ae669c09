"""Remote configuration fetch layer."""

from pyboiler.fetch.client import RemoteConfigFetcher
from pyboiler.fetch.config import FetchConfig
from pyboiler.fetch.redact import redact_url_credentials


__all__ = ["FetchConfig", "RemoteConfigFetcher", "redact_url_credentials"]
