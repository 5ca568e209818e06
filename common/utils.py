import os
import sys
from pathlib import Path
from urllib.parse import quote

from rich.console import Console
from loguru import logger

from common.errors import DirectoryAccessError

__all__ = [
    "ROOT",
    "console",
    "logger",
    "ensure_directory",
    "public_file_url",
]

# Get the project root directory relative to this file
ROOT = Path(__file__).parent.parent.resolve()
console = Console()

LOG_DIR = Path(os.getenv("FOLDER_WATCH_LOG_DIR", ".folder_watch"))

# Remove Loguru's default stdout sink so we control every destination
logger.remove()

log_format = "<green>{time:YYYY-MM-DD HH:mm:ss.SSS zz}</green> | <level>{level: <8}</level> | <yellow>Line {line: >4} ({file}):</yellow> <b>{message}</b>"
logger.add(
    sys.stderr,
    level=os.getenv("FOLDER_WATCH_LOG_LEVEL", "INFO"),
    format=log_format,
    colorize=True,
    backtrace=True,
    diagnose=False,
)
logger.add(
    LOG_DIR / "debug.log",
    level="DEBUG",
    format=log_format,
    colorize=False,
    backtrace=True,
    diagnose=True,
)


def ensure_directory(path: str | Path) -> Path:
    """Create ``path`` (and any missing parents) if it does not exist yet.

    Calling this on an existing directory is a no-op.

    Args:
        path: Directory to create.

    Returns:
        Path: The resolved directory path.

    Raises:
        DirectoryAccessError: If the directory cannot be created, e.g. on a
            permission error or when the path exists and is a regular file.
    """
    directory = Path(path).resolve()
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise DirectoryAccessError(f"Failed to create directory {directory}: {e}") from e
    return directory


def public_file_url(public_url: str, *parts: str) -> str:
    """Build the URL under the ``/files`` static mount for a watched file."""
    base = public_url.rstrip("/")
    return "/".join([f"{base}/files", *(quote(part.strip("/")) for part in parts if part)])
