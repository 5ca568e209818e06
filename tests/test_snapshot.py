import os
from pathlib import Path
from unittest.mock import patch

import pytest

from common.errors import DirectoryAccessError, InvalidFolderError
from common.media import MediaClassifier
from common.utils import ensure_directory, public_file_url
from watch_server.snapshot import (
    iter_qualifying_files,
    list_qualifying_files,
    resolve_folder,
)

PUBLIC_URL = "http://localhost:3001"


class TestListQualifyingFiles:
    """Test cases for the snapshot listing of a served folder."""

    def test_missing_folder_is_created_and_empty(
        self, files_dir: Path, classifier: MediaClassifier
    ) -> None:
        result = list_qualifying_files(files_dir, "Output", classifier, PUBLIC_URL)

        assert result == []
        assert (files_dir / "Output").is_dir()

    def test_filters_by_extension_in_listing_order(
        self, files_dir: Path, classifier: MediaClassifier
    ) -> None:
        # Given:
        folder = files_dir / "Mock"
        for name in ["a.txt", "b.png", "c.JPG"]:
            (folder / name).write_bytes(b"x")

        # When:
        result = list_qualifying_files(files_dir, "Mock", classifier, PUBLIC_URL)

        # Then: same order as the directory listing, non-media dropped
        listing_order = [name for name in os.listdir(folder) if name != "a.txt"]
        assert result == [public_file_url(PUBLIC_URL, "Mock", name) for name in listing_order]
        assert sorted(result) == [
            "http://localhost:3001/files/Mock/b.png",
            "http://localhost:3001/files/Mock/c.JPG",
        ]

    def test_skips_directories_and_hidden_files(
        self, files_dir: Path, classifier: MediaClassifier
    ) -> None:
        folder = files_dir / "Mock"
        (folder / "nested.png").mkdir()
        (folder / ".draft.png").write_bytes(b"x")
        (folder / "final.webp").write_bytes(b"x")

        result = list_qualifying_files(files_dir, "Mock", classifier, PUBLIC_URL)

        assert result == ["http://localhost:3001/files/Mock/final.webp"]

    def test_file_names_are_url_encoded(
        self, files_dir: Path, classifier: MediaClassifier
    ) -> None:
        (files_dir / "Mock" / "my comic.png").write_bytes(b"x")

        result = list_qualifying_files(files_dir, "Mock", classifier, PUBLIC_URL)

        assert result == ["http://localhost:3001/files/Mock/my%20comic.png"]

    def test_listing_is_lazy(self, files_dir: Path, classifier: MediaClassifier) -> None:
        # Given: a generator over a folder that does not exist yet
        listing = iter_qualifying_files(files_dir, "Later", classifier, PUBLIC_URL)

        # Then: nothing touches the filesystem until iteration
        assert not (files_dir / "Later").exists()
        assert list(listing) == []
        assert (files_dir / "Later").is_dir()

    def test_read_failure_maps_to_directory_access_error(
        self, files_dir: Path, classifier: MediaClassifier
    ) -> None:
        with patch("watch_server.snapshot.os.scandir", side_effect=PermissionError("denied")):
            with pytest.raises(DirectoryAccessError):
                list_qualifying_files(files_dir, "Mock", classifier, PUBLIC_URL)

    def test_unsearchable_base_maps_to_directory_access_error(
        self, files_dir: Path, classifier: MediaClassifier
    ) -> None:
        # Given: the existence check itself is refused by the OS
        denied = PermissionError(13, "Permission denied")

        # When / Then:
        with patch.object(Path, "exists", side_effect=denied):
            with pytest.raises(DirectoryAccessError):
                list_qualifying_files(files_dir, "Locked", classifier, PUBLIC_URL)

    def test_folder_vanishing_is_not_an_error(
        self, files_dir: Path, classifier: MediaClassifier
    ) -> None:
        with patch("watch_server.snapshot.os.scandir", side_effect=FileNotFoundError("gone")):
            assert list_qualifying_files(files_dir, "Mock", classifier, PUBLIC_URL) == []

    @pytest.mark.parametrize("folder_name", ["", ".", "..", "a/b", "..\\up"])
    def test_rejects_folder_names_escaping_base(self, files_dir: Path, folder_name: str) -> None:
        with pytest.raises(InvalidFolderError):
            resolve_folder(files_dir, folder_name)


class TestEnsureDirectory:
    """Test cases for directory creation at startup."""

    def test_creates_missing_parents(self, tmp_path: Path) -> None:
        target = tmp_path / "a" / "b" / "c"

        assert ensure_directory(target) == target.resolve()
        assert target.is_dir()

    def test_existing_directory_is_a_no_op(self, tmp_path: Path) -> None:
        (tmp_path / "existing").mkdir()

        ensure_directory(tmp_path / "existing")
        ensure_directory(tmp_path / "existing")

        assert (tmp_path / "existing").is_dir()

    def test_path_that_is_a_file_fails(self, tmp_path: Path) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")

        with pytest.raises(DirectoryAccessError):
            ensure_directory(blocker)
