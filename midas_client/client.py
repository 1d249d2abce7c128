"""Shared request plumbing for the endpoint clients."""

from __future__ import annotations

import asyncio
import logging
from http import HTTPStatus
from typing import TYPE_CHECKING, Any, Awaitable, TypeVar

import httpx

from midas_client.decoder import read_envelope
from midas_client.errors import StreamTransportError, TransportError
from midas_client.models.envelope import ApiResponse
from midas_client.streaming import accumulate_bytes, accumulate_envelopes
from midas_client.transport import DEFAULT_TIMEOUT_SECONDS, Transport

if TYPE_CHECKING:
    from midas_client.config.settings import MidasSettings

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=ApiResponse)
R = TypeVar("R")
C = TypeVar("C", bound="ServiceClient")


class ServiceClient:
    """Base for one service area of the backend.

    Subclasses set ``prefix`` (route prefix) and ``settings_url_field`` (the
    MidasSettings attribute holding their base URL).
    """

    prefix: str = "/"
    settings_url_field: str = ""

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._transport = Transport(base_url, self.prefix, timeout_seconds, transport)

    @classmethod
    def from_settings(
        cls: type[C],
        settings: MidasSettings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> C:
        return cls(
            getattr(settings, cls.settings_url_field),
            timeout_seconds=settings.request_timeout_seconds,
            transport=transport,
        )

    def url(self, endpoint: str) -> str:
        return self._transport.url(endpoint)

    def _log_non_200(self, method: str, endpoint: str, response: httpx.Response) -> None:
        if response.status_code != HTTPStatus.OK:
            logger.warning(
                "%s %s returned HTTP %d, decoding body as envelope",
                method,
                endpoint,
                response.status_code,
                extra={"method": method, "status_code": response.status_code},
            )

    async def _within_deadline(
        self,
        method: str,
        endpoint: str,
        call: Awaitable[R],
        opened: list[httpx.Response] | None = None,
    ) -> R:
        """Await ``call`` with the request timeout as a deadline on the whole exchange.

        ``opened`` is filled by streamed calls once response headers arrive; a
        deadline hit after that point raises StreamTransportError.
        """
        timeout = self._transport.timeout_seconds
        try:
            return await asyncio.wait_for(call, timeout=timeout)
        except asyncio.TimeoutError as exc:
            error_cls = StreamTransportError if opened else TransportError
            logger.error(
                "%s %s did not complete within %ss",
                method,
                endpoint,
                timeout,
                extra={"method": method, "url": self.url(endpoint)},
            )
            raise error_cls(
                f"{method} {self.url(endpoint)} did not complete within {timeout}s",
                timeout_seconds=timeout,
            ) from exc

    async def _call(
        self,
        method: str,
        endpoint: str,
        envelope_type: type[E],
        *,
        json: Any = None,
        params: dict | None = None,
    ) -> E:
        """Single-shot call decoded through the two-tier decoder."""

        async def call() -> E:
            response = await self._transport.request(method, endpoint, json=json, params=params)
            self._log_non_200(method, endpoint, response)
            return await read_envelope(response, envelope_type)

        return await self._within_deadline(method, endpoint, call())

    async def _call_streamed(
        self,
        method: str,
        endpoint: str,
        *,
        json: Any = None,
    ) -> ApiResponse[str]:
        """Call whose response is a chunked sequence of envelope fragments."""
        opened: list[httpx.Response] = []

        async def call() -> ApiResponse[str]:
            async with self._transport.stream(method, endpoint, json=json) as response:
                opened.append(response)
                self._log_non_200(method, endpoint, response)
                return await accumulate_envelopes(response.aiter_bytes(), ApiResponse[str])

        return await self._within_deadline(method, endpoint, call(), opened)

    async def _download(
        self,
        method: str,
        endpoint: str,
        *,
        json: Any = None,
    ) -> ApiResponse[bytes]:
        """Call whose successful response is a raw binary body.

        A non-200 answer carries an envelope instead of record bytes and is
        decoded as one.
        """
        opened: list[httpx.Response] = []

        async def call() -> ApiResponse[bytes]:
            async with self._transport.stream(method, endpoint, json=json) as response:
                opened.append(response)
                if response.status_code != HTTPStatus.OK:
                    self._log_non_200(method, endpoint, response)
                    return await read_envelope(response, ApiResponse[bytes])
                return await accumulate_bytes(response.aiter_bytes())

        return await self._within_deadline(method, endpoint, call(), opened)
