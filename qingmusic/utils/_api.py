import logging
import re
from typing import Any, Dict, Optional, Sequence

import httpx

from qingmusic import config
from ._errors import (
    AllMirrorsFailedError,
    TransportError,
    UpstreamError,
    UpstreamShapeError,
    UpstreamStatusError,
)
from ._relay import RelayTransport

HEADER_ACCEPT = "Accept"
MIME_APPLICATION = "application/json"

ORIGIN_PATTERN = re.compile(r"^https?://[^/?#]+", re.IGNORECASE)

logger = logging.getLogger(__name__)

_client: Optional[httpx.AsyncClient] = None
class HttpClient:
    """Singleton Async HTTP client."""
    @staticmethod
    async def get_client() -> httpx.AsyncClient:
        global _client
        if _client is None or _client.is_closed:
            transport = RelayTransport(config.RELAY_URL) if config.RELAY_URL else None
            _client = httpx.AsyncClient(
                timeout=httpx.Timeout(
                    config.READ_TIMEOUT,
                    connect=config.CONNECT_TIMEOUT,
                ),
                headers={HEADER_ACCEPT: MIME_APPLICATION},
                follow_redirects=True,
                trust_env=True,
                transport=transport,
            )
        return _client

    @staticmethod
    async def close_client():
        global _client
        if _client:
            await _client.aclose()
            _client = None


def rewrite_origin(url: str, host: str) -> str:
    """Swap the scheme and authority of ``url`` for ``host``, keeping path and query."""
    host = host.rstrip("/")
    if ORIGIN_PATTERN.match(url):
        return ORIGIN_PATTERN.sub(lambda _: host, url, count=1)
    return f"{host}/{url.lstrip('/')}"


class FailoverFetcher:
    """
    GET + JSON decode against an ordered mirror list.

    With no hosts a single request is made and its error raised as is.
    Otherwise hosts are tried in order with no delay, and AllMirrorsFailedError
    (chained to the last failure) is raised once every host has failed.
    """

    def __init__(self, hosts: Sequence[str] = (), client: Optional[httpx.AsyncClient] = None):
        self.hosts = tuple(host.rstrip("/") for host in hosts)
        self._client = client

    @property
    def primary(self) -> str:
        return self.hosts[0]

    async def fetch_json(self, url: str, headers: Optional[Dict[str, str]] = None) -> Any:
        if not self.hosts:
            return await self._request_json(url, headers)

        last_error: Optional[Exception] = None
        for host in self.hosts:
            target = rewrite_origin(url, host)
            try:
                return await self._request_json(target, headers)
            except (UpstreamError, UpstreamShapeError) as e:
                logger.warning(f"Instance {host} failed: {e}")
                last_error = e

        raise AllMirrorsFailedError(url, self.hosts, last_error) from last_error

    async def _request_json(self, url: str, headers: Optional[Dict[str, str]]) -> Any:
        client = self._client or await HttpClient.get_client()
        try:
            response = await client.get(url, headers=headers)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise UpstreamStatusError(e.response.status_code, url=url) from e
        except httpx.RequestError as e:
            raise TransportError(f"HTTP error: {e!r}", url=url) from e

        try:
            return response.json()
        except ValueError as e:
            raise UpstreamShapeError(f"Invalid JSON from {url}: {e}") from e
