"""Tests for the local library scanner."""

from pathlib import Path

import pytest

from playdeck.core.config import CatalogConfig
from playdeck.domain.catalog import load_catalog
from playdeck.domain.catalog.exceptions import CatalogUnavailable, EmptyCatalog
from playdeck.domain.catalog.local import UNKNOWN_AUTHOR, scan_library, track_from_path

FORMATS = [".mp3", ".flac"]


@pytest.fixture
def library(tmp_path: Path) -> Path:
    (tmp_path / "Album").mkdir()
    (tmp_path / "Artist One - First.mp3").write_bytes(b"")
    (tmp_path / "Album" / "Second.flac").write_bytes(b"")
    (tmp_path / "notes.txt").write_text("not music", encoding="utf-8")
    return tmp_path


class TestTrackFromPath:
    """Tests for track_from_path."""

    def test_author_and_title_from_name(self, library: Path) -> None:
        track = track_from_path(library / "Artist One - First.mp3", library)
        assert track.id == "Artist One - First"
        assert track.author == "Artist One"
        assert track.title == "First"
        assert track.album is None
        assert track.type == "audio/mpeg"

    def test_nested_file_uses_folder_as_album(self, library: Path) -> None:
        track = track_from_path(library / "Album" / "Second.flac", library)
        assert track.id == "Album/Second"
        assert track.album == "Album"
        assert track.author == UNKNOWN_AUTHOR
        assert track.src == str(library / "Album" / "Second.flac")


class TestScanLibrary:
    """Tests for scan_library."""

    def test_finds_supported_files_sorted(self, library: Path) -> None:
        tracks = scan_library(str(library), FORMATS)
        assert [t.id for t in tracks] == ["Album/Second", "Artist One - First"]

    def test_filters_by_id(self, library: Path) -> None:
        tracks = scan_library(str(library), FORMATS, ["Album/Second"])
        assert [t.id for t in tracks] == ["Album/Second"]

    def test_missing_directory(self, tmp_path: Path) -> None:
        with pytest.raises(CatalogUnavailable):
            scan_library(str(tmp_path / "missing"), FORMATS)

    def test_no_matching_files(self, tmp_path: Path) -> None:
        (tmp_path / "readme.txt").write_text("x", encoding="utf-8")
        with pytest.raises(EmptyCatalog):
            scan_library(str(tmp_path), FORMATS)


class TestLoadCatalog:
    def test_local_source(self, library: Path) -> None:
        config = CatalogConfig(source="local", library_path=str(library), supported_formats=FORMATS)
        assert len(load_catalog(config)) == 2


class TestEmptyCatalog:
    """Tests for the EmptyCatalog message."""

    def test_default_message(self) -> None:
        assert "No tracks found" in str(EmptyCatalog())

    def test_custom_message(self) -> None:
        assert str(EmptyCatalog("Library folder is empty")) == "Library folder is empty"
