"""Point-in-time listing of media files already present in a served folder."""

import os
from collections.abc import Iterator
from pathlib import Path

from common.errors import DirectoryAccessError, InvalidFolderError
from common.media import MediaClassifier
from common.utils import ensure_directory, logger, public_file_url


def resolve_folder(base_dir: str | Path, folder_name: str) -> Path:
    """Return the path of ``folder_name`` directly under ``base_dir``.

    Raises:
        InvalidFolderError: If the name is empty, ``.``/``..`` or contains a
            path separator.
    """
    separators = {"/", "\\", os.sep}
    if os.altsep:
        separators.add(os.altsep)
    if folder_name in {"", ".", ".."} or any(sep in folder_name for sep in separators):
        raise InvalidFolderError(f"Invalid folder name: {folder_name!r}")
    return Path(base_dir) / folder_name


def iter_qualifying_files(
    base_dir: str | Path,
    folder_name: str,
    classifier: MediaClassifier,
    public_url: str,
) -> Iterator[str]:
    """Lazily yield URLs of media files directly inside ``folder_name``.

    Entries come back in directory listing order. A missing folder is created
    and yields nothing.

    Raises:
        InvalidFolderError: For names that would escape ``base_dir``.
        DirectoryAccessError: If the folder cannot be created or read.
    """
    folder_path = resolve_folder(base_dir, folder_name)
    try:
        exists = folder_path.exists()
    except OSError as e:
        raise DirectoryAccessError(f"Failed to access directory {folder_path}: {e}") from e
    if not exists:
        ensure_directory(folder_path)
        logger.info(f"Created folder: {folder_path}")
        return

    try:
        with os.scandir(folder_path) as entries:
            for entry in entries:
                if not entry.is_file():
                    continue
                if not classifier.is_qualifying(entry.name):
                    continue
                yield public_file_url(public_url, folder_name, entry.name)
    except FileNotFoundError:
        logger.warning(f"Folder {folder_path} disappeared while listing it")
        return
    except OSError as e:
        raise DirectoryAccessError(f"Failed to read directory {folder_path}: {e}") from e


def list_qualifying_files(
    base_dir: str | Path,
    folder_name: str,
    classifier: MediaClassifier,
    public_url: str,
) -> list[str]:
    return list(iter_qualifying_files(base_dir, folder_name, classifier, public_url))
