"""FastAPI application for the local folder watch server.

Routes:
    GET /api/images/{folder}  snapshot of media files already in ``folder``
    GET /api/events           Server-Sent Events stream of newly added files
    GET /files/...            static files from the base directory
    GET /api/health           liveness and subscriber count
"""

import asyncio
from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sse_starlette.sse import EventSourceResponse, ServerSentEvent

from common.errors import DirectoryAccessError, InvalidFolderError
from common.file_watcher import BaseFileWatcherManager, WatcherMetadata
from common.media import MediaClassifier
from common.models import (
    ErrorResponse,
    FileEvent,
    HealthStatus,
    ImageFoundEvent,
    ImageListing,
)
from common.utils import ensure_directory, logger, public_file_url
from watch_server.snapshot import list_qualifying_files
from watch_server.subscriber_registry import Subscriber, SubscriberRegistry


async def subscriber_event_stream(
    registry: SubscriberRegistry, subscriber: Subscriber
) -> AsyncIterator[ServerSentEvent]:
    """SSE frames for one subscriber; deregisters it when the stream ends."""
    try:
        # Comment frame so the client sees the channel open before any event.
        yield ServerSentEvent(comment="connected")
        async for event in subscriber.events():
            yield ServerSentEvent(data=event.to_json())
    finally:
        registry.remove(subscriber.subscriber_id)


def create_app(
    base_dir: str | Path,
    watch_folder: str,
    public_url: str,
    classifier: MediaClassifier,
    registry: SubscriberRegistry,
    watcher_manager: BaseFileWatcherManager,
    ping_interval: int = 15,
) -> FastAPI:
    """Build the watch server app.

    The base directory and the watched folder are created up front; a
    :class:`DirectoryAccessError` here means the server must not start.
    """
    files_dir = ensure_directory(base_dir)
    watch_dir = ensure_directory(files_dir / watch_folder)

    def publish(file_event: FileEvent) -> None:
        registry.broadcast(
            ImageFoundEvent(image_url=file_event.url, media_kind=file_event.kind)
        )

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
        loop = asyncio.get_running_loop()

        def on_file_event(metadata: WatcherMetadata, file_event: FileEvent) -> None:
            # Called on the observer thread; hop onto the loop that owns the registry.
            loop.call_soon_threadsafe(publish, file_event)

        watcher_id = watcher_manager.start_watcher(
            path=str(watch_dir),
            url_prefix=public_file_url(public_url, watch_folder),
            callback=on_file_event,
            description=f"Watching {watch_folder} for new media",
        )
        logger.info(f"Monitoring folder: {watch_dir}")
        try:
            yield
        finally:
            watcher_manager.stop_watcher(watcher_id)
            closed = registry.close_all()
            logger.info(f"Watch server stopped, closed {closed} client(s)")

    app = FastAPI(title="Folder Watch Server", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/api/events")
    async def events() -> EventSourceResponse:
        subscriber = registry.subscribe()
        return EventSourceResponse(
            subscriber_event_stream(registry, subscriber),
            ping=ping_interval,
            headers={"Cache-Control": "no-cache"},
        )

    @app.get("/api/images/{folder}", response_model=ImageListing)
    async def list_images(folder: str) -> ImageListing | JSONResponse:
        try:
            images = list_qualifying_files(files_dir, folder, classifier, public_url)
        except InvalidFolderError as e:
            return JSONResponse(
                status_code=400, content=ErrorResponse(error=str(e)).model_dump()
            )
        except DirectoryAccessError as e:
            logger.error(f"Error reading directory: {e}")
            return JSONResponse(
                status_code=500,
                content=ErrorResponse(error="Failed to read directory").model_dump(),
            )
        return ImageListing(images=images)

    @app.get("/api/health", response_model=HealthStatus)
    async def health() -> HealthStatus:
        return HealthStatus(subscribers=len(registry), watching=str(watch_dir))

    app.mount("/files", StaticFiles(directory=files_dir), name="files")
    return app
