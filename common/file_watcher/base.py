"""Base file watcher manager interface."""

from abc import ABC, abstractmethod
from typing import Callable, List, Optional

from common.models import FileEvent

from .metadata import WatcherMetadata

FileEventCallback = Callable[[WatcherMetadata, FileEvent], None]


class BaseFileWatcherManager(ABC):
    """Abstract base class for file watcher managers."""

    @abstractmethod
    def start_watcher(
        self,
        path: str,
        url_prefix: str,
        callback: FileEventCallback,
        recursive: bool = False,
        description: str = "Media folder watcher",
    ) -> str:
        """Start a new file watcher and return its unique ID.

        Args:
            path: Directory path to watch
            url_prefix: Public URL prefix under which files of ``path`` are served
            callback: Function to call when a qualifying file appears
            recursive: Whether to watch subdirectories recursively
            description: Human-readable description of the watcher

        Returns:
            Unique watcher ID string

        Raises:
            ValueError: If path doesn't exist or is not a directory
        """
        pass

    @abstractmethod
    def stop_watcher(self, watcher_id: str) -> bool:
        """Stop a running file watcher.

        Args:
            watcher_id: ID of the watcher to stop

        Returns:
            True if watcher was stopped, False if not found or already stopped
        """
        pass

    @abstractmethod
    def list_watchers(self) -> List[WatcherMetadata]:
        """Get list of all registered watchers."""
        pass

    @abstractmethod
    def get_watcher(self, watcher_id: str) -> Optional[WatcherMetadata]:
        """Get specific watcher by ID, or None if unknown."""
        pass
