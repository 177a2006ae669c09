"""Async HTTP client for remote configuration documents."""

import time
from typing import Any

import httpx
import structlog
import yaml

from pyboiler.errors import RemoteFetchError
from pyboiler.fetch.config import FetchConfig
from pyboiler.fetch.redact import redact_url_credentials


logger = structlog.get_logger()

HTTP_STATUS_OK_MIN = 200
HTTP_STATUS_OK_MAX = 300


class RemoteConfigFetcher:
    """Fetches and parses remote configuration documents.

    Documents may be JSON or YAML; the top level must be a mapping.
    Failures are raised as ``RemoteFetchError`` so the enrichment pass
    can log and skip the source.
    """

    def __init__(
        self,
        config: FetchConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the fetcher.

        Args:
            config: Fetch configuration.
            transport: Optional transport, used to plug in a mock in tests.
        """
        self._config = config or FetchConfig()
        self._transport = transport

    async def fetch(self, url: str, source: str | None = None) -> dict[str, Any]:
        """Fetch a remote document.

        Args:
            url: The URL to fetch.
            source: Label of the source for error records.

        Returns:
            Parsed document.

        Raises:
            RemoteFetchError: On network error, non-2xx status, oversized
                body, or a body that is not a mapping.
        """
        source = source or f"url:{url}"
        safe_url = redact_url_credentials(url)
        log = logger.bind(component="fetch", url=safe_url)
        start_time = time.perf_counter()

        headers = {
            "User-Agent": self._config.user_agent,
            "Accept": "application/json, application/yaml, */*",
        }
        headers.update(self._config.headers)

        try:
            async with httpx.AsyncClient(
                timeout=self._config.timeout_seconds,
                follow_redirects=True,
                transport=self._transport,
            ) as client, client.stream("GET", url, headers=headers) as response:
                status_code = response.status_code
                if not HTTP_STATUS_OK_MIN <= status_code < HTTP_STATUS_OK_MAX:
                    msg = f"Request to {safe_url} returned HTTP {status_code}"
                    raise RemoteFetchError(msg, source=source, status_code=status_code)
                body = await self._read_body_with_limit(response, source)
        except httpx.HTTPError as e:
            msg = f"Request to {safe_url} failed: {type(e).__name__}: {e}"
            raise RemoteFetchError(msg, source=source) from e

        try:
            parsed = yaml.safe_load(body.decode("utf-8")) or {}
        except (UnicodeDecodeError, yaml.YAMLError) as e:
            msg = f"Response from {safe_url} is not valid JSON or YAML: {e}"
            raise RemoteFetchError(msg, source=source, status_code=status_code) from e

        if not isinstance(parsed, dict):
            msg = f"Response from {safe_url} is not a mapping"
            raise RemoteFetchError(msg, source=source, status_code=status_code)

        log.info(
            "remote_config_fetched",
            status_code=status_code,
            bytes=len(body),
            duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
        )
        return parsed

    async def _read_body_with_limit(self, response: httpx.Response, source: str) -> bytes:
        """Read the response body, stopping once it exceeds the size limit.

        Args:
            response: Streaming response.
            source: Label of the source for error records.

        Returns:
            The body bytes.

        Raises:
            RemoteFetchError: If the declared or received size exceeds the limit.
        """
        limit = self._config.max_response_size_bytes
        content_length = response.headers.get("content-length")
        if content_length and content_length.isdigit() and int(content_length) > limit:
            msg = f"Response size {content_length} exceeds limit {limit}"
            raise RemoteFetchError(msg, source=source, status_code=response.status_code)

        chunks: list[bytes] = []
        received = 0
        async for chunk in response.aiter_bytes():
            received += len(chunk)
            if received > limit:
                msg = f"Response size exceeds limit {limit} (read {received} bytes)"
                raise RemoteFetchError(msg, source=source, status_code=response.status_code)
            chunks.append(chunk)
        return b"".join(chunks)
