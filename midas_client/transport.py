"""Thin httpx wrapper shared by the endpoint clients.

One AsyncClient is opened per call so concurrent calls share no state. Every
httpx failure surfaces as TransportError; the HTTP status is left to callers,
since the backend answers with a decodable envelope even on non-200 status.
"""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

import httpx

from midas_client.errors import TransportError

logger = logging.getLogger(__name__)

# Bulk transfers can run for a long time. httpx applies this to each connect,
# read and write step; ServiceClient also enforces it as a whole-call deadline.
DEFAULT_TIMEOUT_SECONDS = 20000.0


class Transport:
    """Issues requests against ``base_url`` + ``prefix``.

    Parameters
    ----------
    base_url:
        Service root, e.g. "http://localhost:8080".
    prefix:
        Route prefix for one service area, e.g. "/historical/".
    timeout_seconds:
        Per-operation httpx timeout (connect, read, write, pool).
    transport:
        Optional httpx transport, e.g. ``httpx.MockTransport`` in tests.
    """

    def __init__(
        self,
        base_url: str,
        prefix: str,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._prefix = "/" + prefix.strip("/") + "/"
        self._timeout_seconds = timeout_seconds
        self._transport = transport

    @property
    def timeout_seconds(self) -> float:
        return self._timeout_seconds

    def url(self, endpoint: str) -> str:
        return f"{self._base_url}{self._prefix}{endpoint.lstrip('/')}"

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout_seconds, transport=self._transport)

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        json: Any = None,
        content: bytes | None = None,
        params: dict | None = None,
    ) -> httpx.Response:
        """Send a request and buffer the full response body.

        Raises
        ------
        TransportError
            On connection failure, timeout or an unreadable response.
        """
        url = self.url(endpoint)
        started = time.monotonic()
        try:
            async with self._client() as client:
                response = await client.request(
                    method, url, json=json, content=content, params=params
                )
        except httpx.HTTPError as exc:
            logger.error(
                "%s %s failed: %s",
                method,
                url,
                exc,
                extra={"method": method, "url": url},
            )
            raise TransportError(f"{method} {url} failed: {exc}") from exc

        logger.info(
            "%s %s -> %d",
            method,
            url,
            response.status_code,
            extra={
                "method": method,
                "url": url,
                "status_code": response.status_code,
                "duration_ms": round((time.monotonic() - started) * 1000, 1),
            },
        )
        return response

    @asynccontextmanager
    async def stream(
        self,
        method: str,
        endpoint: str,
        *,
        json: Any = None,
        content: bytes | None = None,
        params: dict | None = None,
    ) -> AsyncIterator[httpx.Response]:
        """Send a request and yield the response with its body still unread.

        Leaving the context closes the connection, which stops any further
        chunks from being received.

        Raises
        ------
        TransportError
            If the request cannot be sent or the response headers never arrive.
        """
        url = self.url(endpoint)
        started = time.monotonic()
        async with self._client() as client:
            try:
                request = client.build_request(
                    method, url, json=json, content=content, params=params
                )
                response = await client.send(request, stream=True)
            except httpx.HTTPError as exc:
                logger.error(
                    "%s %s failed: %s",
                    method,
                    url,
                    exc,
                    extra={"method": method, "url": url},
                )
                raise TransportError(f"{method} {url} failed: {exc}") from exc

            logger.info(
                "%s %s -> %d (streaming)",
                method,
                url,
                response.status_code,
                extra={"method": method, "url": url, "status_code": response.status_code},
            )
            try:
                yield response
            finally:
                await response.aclose()
                logger.debug(
                    "Closed stream %s %s",
                    method,
                    url,
                    extra={"duration_ms": round((time.monotonic() - started) * 1000, 1)},
                )
