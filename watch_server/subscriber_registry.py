import asyncio
import uuid
from collections.abc import AsyncIterator

from common.errors import SubscriberClosedError
from common.models import ImageFoundEvent
from common.utils import logger


class Subscriber:
    """One connected push consumer, backed by a bounded in-memory channel."""

    def __init__(self, subscriber_id: str, max_queue_size: int = 100) -> None:
        self.subscriber_id = subscriber_id
        self._queue: asyncio.Queue[ImageFoundEvent | None] = asyncio.Queue(
            maxsize=max_queue_size
        )
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, event: ImageFoundEvent) -> None:
        """Queue ``event`` for delivery.

        Raises:
            SubscriberClosedError: If the channel was already closed.
            asyncio.QueueFull: If the consumer has fallen too far behind.
        """
        if self._closed:
            raise SubscriberClosedError(f"Subscriber {self.subscriber_id} is closed")
        self._queue.put_nowait(event)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        # Wake up a pending reader; a full queue is drained before it sees the
        # closed flag anyway.
        try:
            self._queue.put_nowait(None)
        except asyncio.QueueFull:
            pass

    async def events(self) -> AsyncIterator[ImageFoundEvent]:
        """Yield queued events in FIFO order until the channel is closed."""
        while True:
            if self._closed and self._queue.empty():
                return
            event = await self._queue.get()
            if event is None:
                return
            yield event


class SubscriberRegistry:
    """Registry of connected push subscribers, owned by the server lifecycle.

    All mutation happens on the event loop. Insertion-ordered dict storage
    gives O(1) removal; :meth:`broadcast` walks a copy of the current entries
    so a disconnect racing with a broadcast neither skips nor double-visits
    anyone.
    """

    def __init__(self, max_queue_size: int = 100) -> None:
        self._subscribers: dict[str, Subscriber] = {}
        self._max_queue_size = max_queue_size

    def __len__(self) -> int:
        return len(self._subscribers)

    def __contains__(self, subscriber_id: object) -> bool:
        return subscriber_id in self._subscribers

    def subscribe(self) -> Subscriber:
        subscriber = Subscriber(uuid.uuid4().hex, max_queue_size=self._max_queue_size)
        self._subscribers[subscriber.subscriber_id] = subscriber
        logger.info(
            f"Client {subscriber.subscriber_id} connected ({len(self._subscribers)} total)"
        )
        return subscriber

    def remove(self, subscriber_id: str) -> bool:
        """Deregister and close a subscriber. Returns False if it was already gone."""
        subscriber = self._subscribers.pop(subscriber_id, None)
        if subscriber is None:
            return False
        subscriber.close()
        logger.info(f"Client {subscriber_id} disconnected")
        return True

    def broadcast(self, event: ImageFoundEvent) -> int:
        """Push ``event`` to every registered subscriber.

        Returns:
            int: Number of subscribers the event was queued for.
        """
        delivered = 0
        for subscriber_id, subscriber in list(self._subscribers.items()):
            if subscriber_id not in self._subscribers:
                continue
            try:
                subscriber.send(event)
                delivered += 1
            except (asyncio.QueueFull, SubscriberClosedError) as e:
                logger.warning(f"Dropping event for client {subscriber_id}: {e!r}")
        logger.debug(f"Broadcast {event.image_url} to {delivered} client(s)")
        return delivered

    def close_all(self) -> int:
        """Close every subscriber; used on server shutdown."""
        subscriber_ids = list(self._subscribers)
        for subscriber_id in subscriber_ids:
            self.remove(subscriber_id)
        return len(subscriber_ids)
