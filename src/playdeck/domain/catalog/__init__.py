"""Catalog domain - where playable tracks come from.

Two sources:
- HTTP catalog service (`GET /api/tracks`)
- Local library directory scan
"""

from typing import Iterable, List, Optional

from playdeck.core.config import CatalogConfig
from playdeck.domain.library.models import Track

from .client import build_tracks_url, fetch_tracks
from .exceptions import CatalogError, CatalogUnavailable, EmptyCatalog
from .local import scan_library, track_from_path


def load_catalog(
    config: CatalogConfig, track_ids: Optional[Iterable[str]] = None
) -> List[Track]:
    """Load tracks from the configured catalog source.

    Raises:
        CatalogUnavailable: Source could not be read
        EmptyCatalog: Source has nothing to play
    """
    if config.source == "http":
        return fetch_tracks(config.base_url, track_ids, timeout=config.timeout)
    return scan_library(config.library_path, config.supported_formats, track_ids)


__all__ = [
    "load_catalog",
    "fetch_tracks",
    "build_tracks_url",
    "scan_library",
    "track_from_path",
    "CatalogError",
    "CatalogUnavailable",
    "EmptyCatalog",
]
