"""Shared test fixtures and wire helpers for the client test suite."""

from __future__ import annotations

import json
from typing import AsyncIterator, Callable

import httpx
import pytest

from midas_client.config.settings import MidasSettings


# ---------------------------------------------------------------------------
# Keep the host environment out of settings tests
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    """Drop connection env vars and run from an empty dir so no .env is picked up."""
    for key in (
        "HISTORICAL_URL",
        "TRADING_URL",
        "MIDAS_HISTORICAL_URL",
        "MIDAS_TRADING_URL",
        "MIDAS_REQUEST_TIMEOUT_SECONDS",
        "MIDAS_LOG_LEVEL",
    ):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def settings() -> MidasSettings:
    return MidasSettings(
        historical_url="http://historical.test",
        trading_url="http://trading.test",
        request_timeout_seconds=30,
    )


# ---------------------------------------------------------------------------
# Wire helpers
# ---------------------------------------------------------------------------

def envelope(status: str = "success", message: str = "", code: int = 200, **payload) -> dict:
    """Build an envelope dict; pass ``data=...`` to include a payload."""
    body = {"status": status, "message": message, "code": code}
    body.update(payload)
    return body


def fragment(status: str = "success", message: str = "", code: int = 200, data: str = "") -> bytes:
    return json.dumps(envelope(status, message, code, data=data)).encode("utf-8")


async def chunks_of(*parts: bytes, error: Exception | None = None) -> AsyncIterator[bytes]:
    for part in parts:
        yield part
    if error is not None:
        raise error


@pytest.fixture
def make_envelope() -> Callable[..., dict]:
    return envelope


@pytest.fixture
def make_fragment() -> Callable[..., bytes]:
    return fragment


@pytest.fixture
def chunked() -> Callable[..., AsyncIterator[bytes]]:
    """Factory for an async chunk iterator, optionally failing after the last chunk."""
    return chunks_of


class RecordingBackend:
    """httpx.MockTransport handler that records requests and replays canned responses."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._routes: dict[tuple[str, str], Callable[[httpx.Request], httpx.Response]] = {}

    def on(self, method: str, path: str, responder: Callable[[httpx.Request], httpx.Response]) -> None:
        self._routes[(method, path)] = responder

    def reply(self, method: str, path: str, status_code: int = 200, **kwargs) -> None:
        self.on(method, path, lambda request: httpx.Response(status_code, **kwargs))

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        responder = self._routes.get((request.method, request.url.path))
        if responder is None:
            return httpx.Response(404, json=envelope("failed", "no route", 404))
        return responder(request)

    @property
    def last_json(self):
        return json.loads(self.requests[-1].content)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture
def backend() -> RecordingBackend:
    return RecordingBackend()

