"""
Session snapshot persistence.

A snapshot is stored under a single key (one JSON file). Loading either
yields a complete, valid Snapshot or None; it never raises for bad data.
Write failures are logged and reported through the return value only.
"""

import json
import os
from numbers import Real
from pathlib import Path
from typing import Any, Dict, Optional, Protocol

from loguru import logger

from playdeck.domain.library.models import track_from_dict, track_to_dict

from .exceptions import PersistenceCorrupt
from .state import Snapshot, clamp

SNAPSHOT_VERSION = 1


class PersistenceAdapter(Protocol):
    def load(self) -> Optional[Snapshot]: ...

    def save(self, snapshot: Snapshot) -> bool: ...


def snapshot_to_dict(snapshot: Snapshot) -> Dict[str, Any]:
    """Serialize a snapshot to JSON-compatible data."""
    return {
        "version": SNAPSHOT_VERSION,
        "tracks": [track_to_dict(track) for track in snapshot.tracks],
        "current_index": snapshot.current_index,
        "volume": snapshot.volume,
        "current_time": snapshot.current_time,
        "shuffle_mode": snapshot.shuffle_mode,
        "repeat_mode": snapshot.repeat_mode,
    }


def _require(data: Dict[str, Any], key: str, kind: type) -> Any:
    value = data.get(key)
    # bool is an int subclass; only accept it where a bool is asked for
    if isinstance(value, bool) and kind is not bool:
        raise PersistenceCorrupt(f"Snapshot field '{key}' has invalid type bool")
    if not isinstance(value, kind):
        raise PersistenceCorrupt(
            f"Snapshot field '{key}' missing or not {kind.__name__}: {value!r}"
        )
    return value


def snapshot_from_dict(data: Any) -> Snapshot:
    """Validate and decode stored snapshot data.

    The stored index is clamped into the stored track list; an out-of-range
    index is stale, not corrupt.

    Raises:
        PersistenceCorrupt: If any field is missing or has the wrong shape
    """
    if not isinstance(data, dict):
        raise PersistenceCorrupt(f"Snapshot must be an object, got {type(data).__name__}")

    version = data.get("version", SNAPSHOT_VERSION)
    if version != SNAPSHOT_VERSION:
        raise PersistenceCorrupt(f"Unsupported snapshot version: {version!r}")

    raw_tracks = _require(data, "tracks", list)
    try:
        tracks = tuple(track_from_dict(record) for record in raw_tracks)
    except ValueError as e:
        raise PersistenceCorrupt(f"Invalid track in snapshot: {e}") from e

    if len({track.id for track in tracks}) != len(tracks):
        raise PersistenceCorrupt("Snapshot contains duplicate track ids")

    current_index = _require(data, "current_index", int)
    volume = _require(data, "volume", Real)
    current_time = _require(data, "current_time", Real)

    return Snapshot(
        tracks=tracks,
        current_index=max(0, min(len(tracks) - 1, current_index)) if tracks else 0,
        volume=clamp(float(volume), 0.0, 1.0),
        current_time=max(0.0, float(current_time)),
        shuffle_mode=_require(data, "shuffle_mode", bool),
        repeat_mode=_require(data, "repeat_mode", bool),
    )


class JsonFilePersistence:
    """Snapshot stored as a JSON file, replaced atomically on every save."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def load(self) -> Optional[Snapshot]:
        if not self.path.exists():
            logger.info("No saved session found")
            return None

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            snapshot = snapshot_from_dict(data)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Could not read session snapshot {self.path}: {e}")
            return None
        except PersistenceCorrupt as e:
            logger.warning(f"Ignoring corrupt session snapshot {self.path}: {e}")
            return None

        logger.info(
            f"Loaded session snapshot: {len(snapshot.tracks)} tracks, index={snapshot.current_index}"
        )
        return snapshot

    def save(self, snapshot: Snapshot) -> bool:
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(snapshot_to_dict(snapshot), f, indent=2)
            os.replace(tmp_path, self.path)
        except (OSError, TypeError, ValueError):
            logger.exception(f"Failed to save session snapshot to {self.path}")
            return False
        return True

    def clear(self) -> bool:
        """Delete the stored session. Returns False if nothing was stored."""
        try:
            self.path.unlink()
        except FileNotFoundError:
            return False
        return True


class MemoryPersistence:
    """In-process snapshot store (ephemeral sessions, tests).

    Stores the serialized form so loads go through the same validation as
    the file adapter.
    """

    def __init__(self, data: Optional[Dict[str, Any]] = None) -> None:
        self.data = data
        self.save_count = 0

    def load(self) -> Optional[Snapshot]:
        if self.data is None:
            return None
        try:
            return snapshot_from_dict(self.data)
        except PersistenceCorrupt as e:
            logger.warning(f"Ignoring corrupt session snapshot: {e}")
            return None

    def save(self, snapshot: Snapshot) -> bool:
        self.data = snapshot_to_dict(snapshot)
        self.save_count += 1
        return True

    def clear(self) -> bool:
        had_data = self.data is not None
        self.data = None
        return had_data
