"""File watcher system components."""

from .base import BaseFileWatcherManager, FileEventCallback
from .metadata import WatcherMetadata
from .manager import MediaFileEventHandler, WatchdogFileWatcherManager

__all__ = [
    "BaseFileWatcherManager",
    "FileEventCallback",
    "MediaFileEventHandler",
    "WatcherMetadata",
    "WatchdogFileWatcherManager",
]
