"""
Local filesystem catalog.

Scans a music directory and builds tracks from file names. Tag reading is
deliberately not done here; titles and authors come from "Author - Title"
style file names.
"""

import mimetypes
from pathlib import Path
from typing import Iterable, List, Optional

from loguru import logger

from playdeck.domain.library.models import Track

from .exceptions import CatalogUnavailable, EmptyCatalog

UNKNOWN_AUTHOR = "Unknown Artist"


def is_supported_format(local_path: Path, supported_formats: list[str]) -> bool:
    """Check if file format is supported."""
    return local_path.suffix.lower() in supported_formats


def track_from_path(local_path: Path, root: Path) -> Track:
    """Build a track for a file below `root`.

    The id is the path relative to the library root without its suffix, so
    it stays stable across rescans.
    """
    relative = local_path.relative_to(root).with_suffix("")
    stem = local_path.stem

    if " - " in stem:
        author, title = (part.strip() for part in stem.split(" - ", 1))
    else:
        author, title = UNKNOWN_AUTHOR, stem

    album = local_path.parent.name if local_path.parent != root else None
    mime_type, _ = mimetypes.guess_type(local_path.name)

    return Track(
        id=relative.as_posix(),
        title=title or stem,
        author=author or UNKNOWN_AUTHOR,
        src=str(local_path),
        album=album,
        type=mime_type,
    )


def scan_library(
    library_path: str,
    supported_formats: list[str],
    track_ids: Optional[Iterable[str]] = None,
) -> List[Track]:
    """Scan a library directory for playable files.

    Args:
        library_path: Directory to scan recursively
        supported_formats: File suffixes to include (lowercase, with dot)
        track_ids: Optional ids to restrict the result to

    Returns:
        Tracks sorted by id

    Raises:
        CatalogUnavailable: Directory missing or unreadable
        EmptyCatalog: No matching files
    """
    root = Path(library_path).expanduser()
    if not root.is_dir():
        raise CatalogUnavailable(f"Library directory not found: {root}")

    formats = [fmt.lower() for fmt in supported_formats]
    try:
        files = [
            path
            for path in root.rglob("*")
            if path.is_file() and is_supported_format(path, formats)
        ]
    except OSError as e:
        logger.error(f"Error scanning library {root}: {e}")
        raise CatalogUnavailable(f"Could not scan {root}: {e}") from e

    tracks = sorted((track_from_path(path, root) for path in files), key=lambda t: t.id)

    if track_ids:
        wanted = set(track_ids)
        tracks = [track for track in tracks if track.id in wanted]

    if not tracks:
        raise EmptyCatalog()

    logger.info(f"Scanned {len(tracks)} tracks from {root}")
    return tracks
