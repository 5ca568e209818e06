import asyncio
import uuid
from enum import Enum
from typing import Callable

from common.utils import logger
from folder_monitor.transport import EventSubscription

ImageFoundCallback = Callable[[str], None]


class SessionState(str, Enum):
    IDLE = "idle"
    CHECKING_SNAPSHOT = "checking_snapshot"
    SUBSCRIBING = "subscribing"
    WAITING = "waiting"
    FALLBACK = "fallback"
    NOTIFYING = "notifying"
    STOPPED = "stopped"


class MonitoringSession:
    """One in-flight "wait for an artifact" request.

    The callback fires at most once. Whichever of :meth:`notify` or
    :meth:`stop` runs first wins, and both release the runner task and any
    pending fallback timer. The runner task closes the subscription on its
    way out.
    """

    def __init__(self, callback: ImageFoundCallback) -> None:
        self.session_id = uuid.uuid4().hex[:8]
        self.state = SessionState.IDLE
        self.notified = False
        self.subscription: EventSubscription | None = None
        self.task: asyncio.Task[None] | None = None
        self.fallback_handle: asyncio.TimerHandle | None = None
        self._callback = callback

    @property
    def is_stopped(self) -> bool:
        return self.state is SessionState.STOPPED

    def notify(self, url: str) -> bool:
        """Invoke the callback with ``url`` unless the session already resolved or stopped.

        Returns:
            bool: True if this call fired the callback.
        """
        if self.notified or self.is_stopped:
            logger.debug(f"Session {self.session_id} ignoring duplicate result {url}")
            return False

        self.notified = True
        self.state = SessionState.NOTIFYING
        logger.info(f"Image found in monitored folder: {url}")
        try:
            self._callback(url)
        except Exception:
            logger.exception(f"Image found callback of session {self.session_id} failed")
        finally:
            self.stop()
        return True

    def schedule_fallback(self, delay: float, placeholder_url: str) -> None:
        if self.is_stopped or self.notified:
            return
        self.state = SessionState.FALLBACK
        loop = asyncio.get_running_loop()
        self.fallback_handle = loop.call_later(delay, self.notify, placeholder_url)

    def stop(self) -> None:
        """Release the timer and runner task. Idempotent and safe from inside the callback."""
        if self.is_stopped:
            return
        self.state = SessionState.STOPPED

        if self.fallback_handle is not None:
            self.fallback_handle.cancel()
            self.fallback_handle = None

        task = self.task
        if task is not None and not task.done():
            try:
                current = asyncio.current_task()
            except RuntimeError:
                current = None
            # The runner notifying from inside itself finishes on its own.
            if task is not current:
                task.cancel()

    async def wait_closed(self) -> None:
        """Wait until the runner task has finished releasing the subscription."""
        if self.task is None:
            return
        try:
            await self.task
        except asyncio.CancelledError:
            pass
