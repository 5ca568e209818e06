"""Metadata models for file watcher system."""

from datetime import datetime, timezone
from dataclasses import dataclass, field


@dataclass
class WatcherMetadata:
    """Metadata for a file watcher instance."""

    watcher_id: str
    path: str
    url_prefix: str
    description: str = "Media folder watcher"
    is_active: bool = False
    recursive: bool = False
    events_emitted: int = 0
    created_at: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )
