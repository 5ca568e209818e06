"""Folder monitor backed by the local watch server, with a timed fallback."""

import asyncio
from contextlib import aclosing

from common.errors import (
    SnapshotQueryError,
    SubscriptionOpenError,
    SubscriptionTransportError,
)
from common.utils import logger
from folder_monitor.base_folder_monitor import BaseFolderMonitor
from folder_monitor.session import ImageFoundCallback, MonitoringSession, SessionState
from folder_monitor.transport import BaseMonitorTransport

DEFAULT_FALLBACK_DELAY = 5.0
DEFAULT_PLACEHOLDER_URL = (
    "https://images.unsplash.com/photo-1618005182384-a83a8bd57fbe"
    "?q=80&w=1064&auto=format&fit=crop"
)


class ServerFolderMonitor(BaseFolderMonitor):
    """Resolves a callback exactly once with the URL of a media file.

    An already present file (snapshot) wins over waiting for a new one. If
    the push channel cannot be opened or breaks, a placeholder URL is
    delivered after ``fallback_delay`` seconds so callers are never left
    waiting forever.
    """

    def __init__(
        self,
        transport: BaseMonitorTransport,
        folder: str = "Mock",
        fallback_delay: float = DEFAULT_FALLBACK_DELAY,
        placeholder_url: str = DEFAULT_PLACEHOLDER_URL,
    ) -> None:
        self.transport = transport
        self.folder = folder
        self.fallback_delay = fallback_delay
        self.placeholder_url = placeholder_url
        self._session: MonitoringSession | None = None

    @property
    def current_session(self) -> MonitoringSession | None:
        return self._session

    @property
    def is_monitoring(self) -> bool:
        return self._session is not None and not self._session.is_stopped

    def start_monitoring(self, on_image_found: ImageFoundCallback) -> MonitoringSession:
        """Start a new session; any session still pending is stopped first.

        Must be called while an asyncio event loop is running.
        """
        loop = asyncio.get_running_loop()
        self.stop_monitoring()

        session = MonitoringSession(on_image_found)
        self._session = session
        logger.info(f"Starting to monitor folder {self.folder} (session {session.session_id})")
        session.task = loop.create_task(self._run(session))
        return session

    def stop_monitoring(self) -> None:
        session = self._session
        if session is None or session.is_stopped:
            return
        session.stop()
        logger.info(f"Stopped monitoring folder (session {session.session_id})")

    async def _run(self, session: MonitoringSession) -> None:
        session.state = SessionState.CHECKING_SNAPSHOT
        try:
            images = await self.transport.fetch_snapshot(self.folder)
        except SnapshotQueryError as e:
            logger.warning(f"Error checking existing images: {e}")
            images = []

        if session.is_stopped:
            return
        if images:
            logger.info(f"Found {len(images)} existing image(s) in {self.folder}")
            session.notify(images[-1])
            return
        logger.info(f"No existing images found in {self.folder}")

        session.state = SessionState.SUBSCRIBING
        try:
            subscription = await self.transport.open_subscription()
        except SubscriptionOpenError as e:
            logger.error(f"Error connecting to server events: {e}")
            self._fall_back(session)
            return

        session.subscription = subscription
        channel_failed = False
        try:
            if session.is_stopped:
                return
            session.state = SessionState.WAITING
            logger.info("Connected to server events")
            async with aclosing(aiter(subscription)) as events:
                async for event in events:
                    logger.info(f"New image detected via server: {event.image_url}")
                    session.notify(event.image_url)
                    if session.is_stopped:
                        return
            logger.warning("Event stream ended before an image was found")
            channel_failed = True
        except SubscriptionTransportError as e:
            logger.error(f"Event stream error: {e}")
            channel_failed = True
        finally:
            await subscription.aclose()
            session.subscription = None

        if channel_failed:
            self._fall_back(session)

    def _fall_back(self, session: MonitoringSession) -> None:
        if session.is_stopped:
            return
        logger.warning(
            f"Falling back to placeholder image in {self.fallback_delay}s "
            "due to server connection issues"
        )
        session.schedule_fallback(self.fallback_delay, self.placeholder_url)
