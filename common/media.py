"""Extension based media classification."""

from enum import Enum
from pathlib import PurePath
from typing import Iterable

DEFAULT_IMAGE_EXTENSIONS = ["jpg", "jpeg", "png", "gif", "bmp", "webp"]
DEFAULT_VIDEO_EXTENSIONS = ["mp4", "webm", "mov"]


class MediaKind(str, Enum):
    """Kind of media a file name refers to."""

    IMAGE = "image"
    VIDEO = "video"
    IGNORED = "ignored"


def _normalize(extensions: Iterable[str]) -> frozenset[str]:
    return frozenset(ext.lower().lstrip(".") for ext in extensions if ext.strip("."))


class MediaClassifier:
    """Maps file names onto a :class:`MediaKind` using extension allow-lists.

    Matching is case-insensitive. Hidden files (leading dot) and names without
    an extension are always ``IGNORED``.
    """

    def __init__(
        self,
        image_extensions: Iterable[str] | None = None,
        video_extensions: Iterable[str] | None = None,
    ) -> None:
        self.image_extensions = _normalize(
            DEFAULT_IMAGE_EXTENSIONS if image_extensions is None else image_extensions
        )
        self.video_extensions = _normalize(
            DEFAULT_VIDEO_EXTENSIONS if video_extensions is None else video_extensions
        )

    def classify(self, name: str) -> MediaKind:
        file_name = PurePath(name).name
        if not file_name or file_name.startswith("."):
            return MediaKind.IGNORED

        suffix = PurePath(file_name).suffix.lower().lstrip(".")
        if not suffix:
            return MediaKind.IGNORED
        if suffix in self.image_extensions:
            return MediaKind.IMAGE
        if suffix in self.video_extensions:
            return MediaKind.VIDEO
        return MediaKind.IGNORED

    def is_qualifying(self, name: str) -> bool:
        return self.classify(name) is not MediaKind.IGNORED
