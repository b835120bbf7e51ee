"""
Music library domain models.

Contains data structures for representing playable tracks.
"""

from typing import Any, Dict, NamedTuple, Optional, Tuple


class Track(NamedTuple):
    """Represents a playable track.

    Identity is the `id` field: two Track values with the same id are the
    same track even if other metadata differs. `src` is whatever locator the
    media source understands (file path or URL).
    """

    id: str
    title: str
    author: str
    src: str
    album: Optional[str] = None
    cover: Optional[str] = None
    type: Optional[str] = None  # format hint, e.g. "audio/mpeg"


def track_key(track: Optional[Track]) -> Optional[Tuple[str, str]]:
    """Return the (id, src) pair used to decide whether two tracks are the same source."""
    if track is None:
        return None
    return (track.id, track.src)


def track_to_dict(track: Track) -> Dict[str, Any]:
    """Serialize a track, dropping unset optional fields."""
    return {key: value for key, value in track._asdict().items() if value is not None}


def track_from_dict(data: Dict[str, Any]) -> Track:
    """Build a track from a catalog/snapshot record.

    Raises:
        ValueError: If a required field is missing or not a string
    """
    if not isinstance(data, dict):
        raise ValueError(f"Track record must be an object, got {type(data).__name__}")

    for required in ("id", "src"):
        if not isinstance(data.get(required), (str, int)) or data.get(required) == "":
            raise ValueError(f"Track record missing required field '{required}'")

    return Track(
        id=str(data["id"]),
        title=str(data.get("title") or data["id"]),
        author=str(data.get("author") or "Unknown Artist"),
        src=str(data["src"]),
        album=data.get("album"),
        cover=data.get("cover"),
        type=data.get("type"),
    )
