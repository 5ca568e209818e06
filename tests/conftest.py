"""Pytest configuration and shared fixtures for the folder watch tests."""

import asyncio
from collections.abc import AsyncGenerator
from pathlib import Path
from typing import Any, Generator

import pytest

from common.media import MediaClassifier
from common.models import ImageFoundEvent
from folder_monitor.transport import BaseMonitorTransport, EventSubscription
from watch_server.subscriber_registry import SubscriberRegistry

END_OF_STREAM = object()


class FakeSubscription(EventSubscription):
    """In-memory push channel driven by the test."""

    def __init__(self) -> None:
        self._items: asyncio.Queue[Any] = asyncio.Queue()
        self._closed = False
        self.close_calls = 0
        self.iterator_finished = False

    @property
    def closed(self) -> bool:
        return self._closed

    def push(self, image_url: str) -> None:
        self._items.put_nowait(ImageFoundEvent(image_url=image_url))

    def fail(self, error: Exception) -> None:
        self._items.put_nowait(error)

    def end(self) -> None:
        self._items.put_nowait(END_OF_STREAM)

    async def __aiter__(self) -> AsyncGenerator[ImageFoundEvent, None]:
        try:
            while not self._closed:
                item = await self._items.get()
                if item is END_OF_STREAM:
                    return
                if isinstance(item, Exception):
                    raise item
                yield item
        finally:
            self.iterator_finished = True

    async def aclose(self) -> None:
        self.close_calls += 1
        self._closed = True


class FakeTransport(BaseMonitorTransport):
    def __init__(
        self,
        snapshot: list[str] | None = None,
        snapshot_error: Exception | None = None,
        open_error: Exception | None = None,
    ) -> None:
        self.snapshot = snapshot or []
        self.snapshot_error = snapshot_error
        self.open_error = open_error
        self.snapshot_calls = 0
        self.open_calls = 0
        self.subscriptions: list[FakeSubscription] = []

    async def fetch_snapshot(self, folder: str) -> list[str]:
        self.snapshot_calls += 1
        if self.snapshot_error is not None:
            raise self.snapshot_error
        return list(self.snapshot)

    async def open_subscription(self) -> EventSubscription:
        self.open_calls += 1
        if self.open_error is not None:
            raise self.open_error
        subscription = FakeSubscription()
        self.subscriptions.append(subscription)
        return subscription


async def settle(rounds: int = 10) -> None:
    """Let pending callbacks and tasks on the running loop make progress."""
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture
def classifier() -> MediaClassifier:
    return MediaClassifier()


@pytest.fixture
def registry() -> SubscriberRegistry:
    return SubscriberRegistry()


@pytest.fixture
def files_dir(tmp_path: Path) -> Generator[Path, None, None]:
    """Base directory served under /files, with an empty Mock folder."""
    base = tmp_path / "files"
    (base / "Mock").mkdir(parents=True)
    yield base


@pytest.fixture
def fake_transport() -> FakeTransport:
    return FakeTransport()
