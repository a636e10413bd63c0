"""HTTP transports handed to the Alertmanager client by the connection strategies."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Union

import httpx

logger = logging.getLogger("alertmanager_mcp.connection")

TokenSource = Union[str, Callable[[], Optional[str]]]


@dataclass(frozen=True)
class Connection:
    """A resolved way to reach Alertmanager. Held unchanged for the server's lifetime."""

    base_url: str
    method: str
    transport: httpx.AsyncBaseTransport | None = None


class BearerTokenTransport(httpx.AsyncBaseTransport):
    """Wraps another transport and adds an Authorization header to every request.

    ``token`` is either a fixed string or a callable asked for the current token
    on each request, so rotated service-account tokens and refreshed exec-plugin
    credentials are picked up. If the callable fails with OSError the last token
    it returned is reused.
    """

    def __init__(self, token: TokenSource, wrapped: httpx.AsyncBaseTransport) -> None:
        self._source = token
        self._last: str | None = token if isinstance(token, str) else None
        self._wrapped = wrapped

    def current_token(self) -> str | None:
        if isinstance(self._source, str):
            return self._source
        try:
            token = self._source()
        except OSError as exc:
            if self._last is None:
                raise
            logger.warning("Could not refresh bearer token, reusing the previous one: %s", exc)
            return self._last
        if token:
            self._last = token
        return token or self._last

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        try:
            token = self.current_token()
        except OSError as exc:
            raise httpx.TransportError(f"reading bearer token: {exc}", request=request) from exc

        headers = request.headers.copy()
        if token:
            headers["Authorization"] = f"Bearer {token}"
        authorized = httpx.Request(
            request.method,
            request.url,
            headers=headers,
            stream=request.stream,
            extensions=request.extensions,
        )
        return await self._wrapped.handle_async_request(authorized)

    async def aclose(self) -> None:
        await self._wrapped.aclose()


def insecure_bearer_transport(token: TokenSource) -> BearerTokenTransport:
    """Bearer-token transport for cluster-internal endpoints signed by a private CA."""
    return BearerTokenTransport(token, httpx.AsyncHTTPTransport(verify=False))
