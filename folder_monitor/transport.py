"""Transport used by the folder monitor to talk to the watch server."""

import json
from abc import ABC, abstractmethod
from collections.abc import AsyncGenerator
from contextlib import aclosing
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from common.errors import (
    SnapshotQueryError,
    SubscriptionOpenError,
    SubscriptionTransportError,
)
from common.models import ImageFoundEvent, ImageListing
from common.utils import logger


class EventSubscription(ABC):
    """An open push channel yielding :class:`ImageFoundEvent` objects.

    Iteration raises :class:`SubscriptionTransportError` if the channel
    fails. :meth:`aclose` must be idempotent.
    """

    @abstractmethod
    def __aiter__(self) -> AsyncGenerator[ImageFoundEvent, None]:
        pass

    @abstractmethod
    async def aclose(self) -> None:
        pass

    @property
    @abstractmethod
    def closed(self) -> bool:
        pass


class BaseMonitorTransport(ABC):
    @abstractmethod
    async def fetch_snapshot(self, folder: str) -> list[str]:
        """Return URLs of media files already present in ``folder``.

        Raises:
            SnapshotQueryError: If the listing could not be obtained.
        """
        pass

    @abstractmethod
    async def open_subscription(self) -> EventSubscription:
        """Open the push channel.

        Raises:
            SubscriptionOpenError: If the channel could not be established.
        """
        pass


def parse_sse_lines(lines: list[str]) -> str | None:
    """Return the ``data`` payload of one SSE frame, or None for comment/ping frames.

    Frames with an explicit ``event:`` name other than ``message`` are ignored,
    matching what an EventSource ``onmessage`` handler would see.
    """
    data_lines: list[str] = []
    event_name = "message"
    for line in lines:
        if not line or line.startswith(":"):
            continue
        field, _, value = line.partition(":")
        if value.startswith(" "):
            value = value[1:]
        if field == "data":
            data_lines.append(value)
        elif field == "event":
            event_name = value
    if not data_lines or event_name != "message":
        return None
    return "\n".join(data_lines)


class SseSubscription(EventSubscription):
    """Server-Sent Events stream read through an httpx streaming response."""

    def __init__(self, client: httpx.AsyncClient, response: httpx.Response) -> None:
        self._client = client
        self._response = response
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def __aiter__(self) -> AsyncGenerator[ImageFoundEvent, None]:
        frame: list[str] = []
        try:
            async with aclosing(self._response.aiter_lines()) as lines:
                async for line in lines:
                    line = line.rstrip("\r")
                    if line:
                        frame.append(line)
                        continue
                    payload = parse_sse_lines(frame)
                    frame = []
                    if payload is None:
                        continue
                    event = self._decode(payload)
                    if event is not None:
                        yield event
        except httpx.HTTPError as e:
            raise SubscriptionTransportError(f"Event stream failed: {e}") from e

    def _decode(self, payload: str) -> ImageFoundEvent | None:
        try:
            return ImageFoundEvent.model_validate(json.loads(payload))
        except (json.JSONDecodeError, ValidationError) as e:
            logger.error(f"Error processing event {payload!r}: {e}")
            return None

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            await self._response.aclose()
        finally:
            await self._client.aclose()


class HttpMonitorTransport(BaseMonitorTransport):
    """Talks to the watch server over HTTP using httpx."""

    def __init__(
        self,
        server_url: str,
        timeout: float = 10.0,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.server_url = server_url.rstrip("/")
        self.timeout = timeout
        self._http_transport = http_transport

    def _client(self, read_timeout: float | None) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.server_url,
            timeout=httpx.Timeout(self.timeout, read=read_timeout),
            transport=self._http_transport,
        )

    async def fetch_snapshot(self, folder: str) -> list[str]:
        try:
            async with self._client(read_timeout=self.timeout) as client:
                response = await client.get(f"/api/images/{quote(folder, safe='')}")
                response.raise_for_status()
                listing = ImageListing.model_validate(response.json())
        except httpx.HTTPStatusError as e:
            raise SnapshotQueryError(
                f"Server returned {e.response.status_code} for {e.request.url}"
            ) from e
        except httpx.HTTPError as e:
            raise SnapshotQueryError(f"Snapshot request failed: {e}") from e
        except (ValueError, ValidationError) as e:
            raise SnapshotQueryError(f"Malformed snapshot response: {e}") from e
        return listing.images

    async def open_subscription(self) -> EventSubscription:
        # The event stream idles between events, so reads never time out.
        client = self._client(read_timeout=None)
        try:
            request = client.build_request(
                "GET", "/api/events", headers={"Accept": "text/event-stream"}
            )
            response = await client.send(request, stream=True)
        except httpx.HTTPError as e:
            await client.aclose()
            raise SubscriptionOpenError(f"Could not connect to event stream: {e}") from e
        except BaseException:
            # Cancelled while connecting; the client must not outlive the session.
            await client.aclose()
            raise

        if response.status_code != 200:
            await response.aclose()
            await client.aclose()
            raise SubscriptionOpenError(
                f"Event stream returned status {response.status_code}"
            )
        return SseSubscription(client, response)
