"""
HTTP catalog client.

Fetches track records from a catalog service exposing `GET /api/tracks`,
optionally filtered by repeated `tracks=<id>` query parameters.
"""

from typing import Iterable, List, Optional

import requests
from loguru import logger

from playdeck.domain.library.models import Track, track_from_dict

from .exceptions import CatalogUnavailable, EmptyCatalog

TRACKS_ENDPOINT = "/api/tracks"


def build_tracks_url(base_url: str) -> str:
    """Join the catalog base URL and the tracks endpoint."""
    return base_url.rstrip("/") + TRACKS_ENDPOINT


def fetch_tracks(
    base_url: str,
    track_ids: Optional[Iterable[str]] = None,
    timeout: float = 10.0,
    session: Optional[requests.Session] = None,
) -> List[Track]:
    """Fetch tracks from the catalog service.

    Args:
        base_url: Catalog service root, e.g. "http://localhost:3000"
        track_ids: Optional ids to restrict the response to; empty/None means the full catalog
        timeout: Request timeout in seconds
        session: Optional requests session (connection reuse, tests)

    Returns:
        List of tracks in catalog order

    Raises:
        CatalogUnavailable: Transport failure, non-2xx status or malformed body
        EmptyCatalog: The catalog answered with no tracks
    """
    url = build_tracks_url(base_url)
    params = {"tracks": list(track_ids)} if track_ids else None
    http = session or requests

    try:
        response = http.get(url, params=params, timeout=timeout)
        response.raise_for_status()
        payload = response.json()
    except requests.HTTPError as e:
        status = e.response.status_code if e.response is not None else "?"
        logger.error(f"Catalog request failed with status {status}: {url}")
        raise CatalogUnavailable(f"Failed to fetch tracks: HTTP {status}") from e
    except requests.RequestException as e:
        logger.error(f"Catalog unreachable at {url}: {e}")
        raise CatalogUnavailable(f"Failed to fetch tracks: {e}") from e
    except ValueError as e:
        logger.error(f"Catalog returned invalid JSON from {url}")
        raise CatalogUnavailable("Catalog returned an invalid response") from e

    if not isinstance(payload, list):
        raise CatalogUnavailable(
            f"Catalog returned {type(payload).__name__}, expected a list of tracks"
        )

    tracks = []
    for record in payload:
        try:
            tracks.append(track_from_dict(record))
        except ValueError as e:
            logger.warning(f"Skipping malformed catalog record: {e}")

    if not tracks:
        raise EmptyCatalog()

    logger.info(f"Fetched {len(tracks)} tracks from {url}")
    return tracks
