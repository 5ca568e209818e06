from dependency_injector import containers, providers

from common.file_watcher.manager import WatchdogFileWatcherManager
from common.media import (
    DEFAULT_IMAGE_EXTENSIONS,
    DEFAULT_VIDEO_EXTENSIONS,
    MediaClassifier,
)
from common.utils import ROOT
from comic.collaborators import DataUrlObjectStore, MockDocumentSummarizer
from comic.comic_service import ComicService
from folder_monitor.server_folder_monitor import (
    DEFAULT_FALLBACK_DELAY,
    DEFAULT_PLACEHOLDER_URL,
    ServerFolderMonitor,
)
from folder_monitor.transport import HttpMonitorTransport
from watch_server.app import create_app
from watch_server.subscriber_registry import SubscriberRegistry

DEFAULT_CONFIG = {
    "host": "localhost",
    "port": 3001,
    "base_dir": str(ROOT / "files"),
    "watch_folder": "Mock",
    "public_url": "http://localhost:3001",
    "server_url": "http://localhost:3001",
    "image_extensions": DEFAULT_IMAGE_EXTENSIONS,
    "video_extensions": DEFAULT_VIDEO_EXTENSIONS,
    "fallback_delay": DEFAULT_FALLBACK_DELAY,
    "placeholder_url": DEFAULT_PLACEHOLDER_URL,
    "request_timeout": 10.0,
    "subscriber_queue_size": 100,
    "ping_interval": 15,
}


class FolderWatchContainer(containers.DeclarativeContainer):
    config = providers.Configuration()

    media_classifier = providers.Singleton(
        MediaClassifier,
        image_extensions=config.image_extensions,
        video_extensions=config.video_extensions,
    )

    subscriber_registry = providers.Singleton(
        SubscriberRegistry,
        max_queue_size=config.subscriber_queue_size,
    )

    file_watcher_manager = providers.Singleton(
        WatchdogFileWatcherManager,
        classifier=media_classifier,
    )

    watch_server_app = providers.Singleton(
        create_app,
        base_dir=config.base_dir,
        watch_folder=config.watch_folder,
        public_url=config.public_url,
        classifier=media_classifier,
        registry=subscriber_registry,
        watcher_manager=file_watcher_manager,
        ping_interval=config.ping_interval,
    )

    monitor_transport = providers.Factory(
        HttpMonitorTransport,
        server_url=config.server_url,
        timeout=config.request_timeout,
    )

    folder_monitor = providers.Factory(
        ServerFolderMonitor,
        transport=monitor_transport,
        folder=config.watch_folder,
        fallback_delay=config.fallback_delay,
        placeholder_url=config.placeholder_url,
    )

    comic_service = providers.Factory(
        ComicService,
        summarizer=providers.Singleton(MockDocumentSummarizer),
        object_store=providers.Singleton(DataUrlObjectStore),
        monitor_factory=folder_monitor.provider,
    )


def configure(container: FolderWatchContainer) -> None:
    """Seed ``container.config`` with defaults, then apply environment overrides."""
    config = container.config
    config.from_dict(DEFAULT_CONFIG)
    config.host.from_env("FOLDER_WATCH_HOST", default=DEFAULT_CONFIG["host"])
    config.port.from_env("FOLDER_WATCH_PORT", default=DEFAULT_CONFIG["port"], as_=int)
    config.base_dir.from_env("FOLDER_WATCH_BASE_DIR", default=DEFAULT_CONFIG["base_dir"])
    config.watch_folder.from_env("FOLDER_WATCH_FOLDER", default=DEFAULT_CONFIG["watch_folder"])
    config.public_url.from_env("FOLDER_WATCH_PUBLIC_URL", default=DEFAULT_CONFIG["public_url"])
    config.server_url.from_env("FOLDER_WATCH_SERVER_URL", default=DEFAULT_CONFIG["server_url"])
    config.fallback_delay.from_env(
        "FOLDER_WATCH_FALLBACK_DELAY",
        default=DEFAULT_CONFIG["fallback_delay"],
        as_=float,
    )


container = FolderWatchContainer()
configure(container)
