"""Concrete implementation of FileWatcherManager using watchdog."""

import os
import uuid
from pathlib import Path
from threading import RLock
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from common.errors import ClassificationSkip
from common.media import MediaClassifier, MediaKind
from common.models import FileEvent
from common.utils import logger

from .base import BaseFileWatcherManager, FileEventCallback
from .metadata import WatcherMetadata


def _decode_path(path: str | bytes) -> str:
    if isinstance(path, bytes):
        return path.decode("utf-8", errors="replace")
    return path


class MediaFileEventHandler(FileSystemEventHandler):
    """Turns file creation events into :class:`FileEvent` callbacks."""

    def __init__(
        self,
        metadata: WatcherMetadata,
        callback: FileEventCallback,
        classifier: MediaClassifier,
    ) -> None:
        super().__init__()
        self.metadata = metadata
        self.callback = callback
        self.classifier = classifier

    def build_file_event(self, file_path: str) -> FileEvent:
        """Classify ``file_path`` and derive its public URL.

        Raises:
            ClassificationSkip: For hidden or non-media files.
        """
        relative_path = Path(os.path.relpath(file_path, self.metadata.path))
        if any(part.startswith(".") for part in relative_path.parts):
            raise ClassificationSkip(f"Hidden file: {file_path}")

        kind = self.classifier.classify(relative_path.name)
        if kind is MediaKind.IGNORED:
            raise ClassificationSkip(f"Not a recognized media file: {file_path}")

        url_path = "/".join(quote(part) for part in relative_path.parts)
        return FileEvent(
            path=file_path,
            kind=kind,
            url=f"{self.metadata.url_prefix.rstrip('/')}/{url_path}",
        )

    def _handle_path(self, raw_path: str | bytes) -> None:
        file_path = _decode_path(raw_path)
        try:
            file_event = self.build_file_event(file_path)
        except ClassificationSkip as skip:
            logger.debug(f"Skipping file event: {skip}")
            return
        except Exception as e:
            logger.error(f"Error classifying file event {file_path}: {e}")
            return

        logger.info(f"File {file_path} has been added ({file_event.kind.value})")
        try:
            self.callback(self.metadata, file_event)
            self.metadata.events_emitted += 1
        except Exception as e:
            logger.error(f"Error handling file event {file_path}: {e}")

    def on_created(self, event: FileSystemEvent) -> None:
        """Handle file creation events."""
        if event.is_directory:
            return
        self._handle_path(event.src_path)

    def on_moved(self, event: FileSystemEvent) -> None:
        """Handle files renamed into the watched directory."""
        if event.is_directory:
            return
        self._handle_path(event.dest_path)


class WatcherInstance:
    """Internal representation of a watcher instance."""

    def __init__(
        self,
        metadata: WatcherMetadata,
        observer: Any,
        event_handler: MediaFileEventHandler,
    ) -> None:
        self.metadata = metadata
        self.observer = observer
        self.event_handler = event_handler
        self._is_running = False

    def start(self) -> None:
        if not self._is_running:
            self.observer.start()
            self._is_running = True
            self.metadata.is_active = True
            logger.info(
                f"Started watcher {self.metadata.watcher_id} for path {self.metadata.path}"
            )

    def stop(self) -> None:
        if self._is_running:
            self.observer.stop()
            self.observer.join(timeout=5.0)
            self._is_running = False
            self.metadata.is_active = False
            logger.info(f"Stopped watcher {self.metadata.watcher_id}")

    @property
    def is_running(self) -> bool:
        return self._is_running and self.observer.is_alive()


class WatchdogFileWatcherManager(BaseFileWatcherManager):
    """Concrete implementation using watchdog library."""

    def __init__(self, classifier: MediaClassifier | None = None) -> None:
        super().__init__()
        self.classifier = classifier or MediaClassifier()
        self._watchers: Dict[str, WatcherInstance] = {}
        self._lock = RLock()

    def _cleanup_stopped_watchers(self) -> None:
        """Remove stopped watchers from internal tracking."""
        with self._lock:
            stopped_watchers = [
                watcher_id
                for watcher_id, instance in self._watchers.items()
                if not instance.is_running
            ]
            for watcher_id in stopped_watchers:
                del self._watchers[watcher_id]

    def start_watcher(
        self,
        path: str,
        url_prefix: str,
        callback: FileEventCallback,
        recursive: bool = False,
        description: str = "Media folder watcher",
    ) -> str:
        watch_path = Path(path).resolve()
        if not watch_path.exists():
            raise ValueError(f"Path does not exist: {path}")

        if not watch_path.is_dir():
            raise ValueError(f"Path is not a directory: {path}")

        watcher_id = str(uuid.uuid4())[:8]
        metadata = WatcherMetadata(
            watcher_id=watcher_id,
            path=str(watch_path),
            url_prefix=url_prefix,
            recursive=recursive,
            description=description,
        )

        observer: Any = Observer()
        event_handler = MediaFileEventHandler(
            metadata=metadata,
            callback=callback,
            classifier=self.classifier,
        )
        observer.schedule(event_handler, str(watch_path), recursive=recursive)

        watcher_instance = WatcherInstance(
            metadata=metadata, observer=observer, event_handler=event_handler
        )

        with self._lock:
            self._watchers[watcher_id] = watcher_instance
            watcher_instance.start()

        return watcher_id

    def stop_watcher(self, watcher_id: str) -> bool:
        with self._lock:
            if watcher_id not in self._watchers:
                return False

            watcher_instance = self._watchers[watcher_id]
            watcher_instance.stop()
            del self._watchers[watcher_id]

        return True

    def list_watchers(self) -> List[WatcherMetadata]:
        self._cleanup_stopped_watchers()

        with self._lock:
            return [instance.metadata for instance in self._watchers.values()]

    def get_watcher(self, watcher_id: str) -> Optional[WatcherMetadata]:
        with self._lock:
            instance = self._watchers.get(watcher_id)
            return instance.metadata if instance else None

    def stop_all_watchers(self) -> int:
        """Stop all active watchers and return how many were stopped."""
        with self._lock:
            count = len(self._watchers)

            for watcher_instance in self._watchers.values():
                watcher_instance.stop()

            self._watchers.clear()

        return count
