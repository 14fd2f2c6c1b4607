"""HTTP transport used by the issue client."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from .exceptions import TransportError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransportResponse:
    """Status and raw body of a completed HTTP exchange."""

    status_code: int
    body: bytes = b""
    reason: str = ""
    http_version: str = "HTTP/1.1"

    @property
    def status_line(self) -> str:
        return f"{self.http_version} {self.status_code} {self.reason}".rstrip()

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")


class HttpTransport:
    """Sends form-encoded POSTs and plain GETs through an ``httpx.Client``.

    Proxies are configured explicitly, keyed by httpx URL pattern
    (e.g. ``{"https://github.com": "http://proxy:3128"}``), so each
    destination host can be routed through its own proxy.
    """

    def __init__(
        self,
        timeout: float = 30.0,
        proxies: dict[str, str] | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        if client is None:
            mounts = {
                pattern: httpx.HTTPTransport(proxy=proxy_url)
                for pattern, proxy_url in (proxies or {}).items()
            }
            client = httpx.Client(timeout=timeout, mounts=mounts or None)
        self._client = client

    def send_form(self, url: str, fields: list[tuple[str, str]]) -> TransportResponse:
        """POST ``fields`` as application/x-www-form-urlencoded, in order."""
        logger.debug("POST %s", url)
        return self._send("POST", url, data=dict(fields))

    def send_get(self, url: str) -> TransportResponse:
        logger.debug("GET %s", url)
        return self._send("GET", url)

    def _send(self, method: str, url: str, data: dict | None = None) -> TransportResponse:
        try:
            resp = self._client.request(method, url, data=data)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise TransportError(f"{method} {url} failed: {e}") from e
        return TransportResponse(
            status_code=resp.status_code,
            body=resp.content,
            reason=resp.reason_phrase,
            http_version=resp.http_version,
        )

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self) -> HttpTransport:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
