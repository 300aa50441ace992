"""Shared fixtures for the generator tests."""

from __future__ import annotations

import io
from typing import Callable

import httpx
import pytest
from PIL import Image

from history_store import HistoryStore, MemoryStorage
from linkqr.qr_generator import bytes_to_data_url


def make_png(size: tuple[int, int] = (64, 64), color=(220, 38, 38, 255)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGBA", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


def make_png_data_url(size: tuple[int, int] = (64, 64), color=(220, 38, 38, 255)) -> str:
    return bytes_to_data_url(make_png(size, color), "image/png")


class FakeClock:
    """Millisecond clock that advances by one second per call."""

    def __init__(self, start: int = 1_700_000_000_000) -> None:
        self.now = start

    def __call__(self) -> int:
        self.now += 1000
        return self.now


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def memory_storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def history(memory_storage, fake_clock) -> HistoryStore:
    return HistoryStore(memory_storage, clock=fake_clock)


@pytest.fixture
def mock_client() -> Callable[[Callable[[httpx.Request], httpx.Response]], httpx.Client]:
    """Build an httpx.Client whose requests are answered by *handler*."""
    clients = []

    def _build(handler):
        client = httpx.Client(transport=httpx.MockTransport(handler), follow_redirects=True)
        clients.append(client)
        return client

    yield _build
    for client in clients:
        client.close()


@pytest.fixture
def failing_handler():
    """Handler that records every request and answers 404."""
    requested: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requested.append(str(request.url))
        return httpx.Response(404)

    handler.requested = requested
    return handler
