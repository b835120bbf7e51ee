"""Playback domain - queue, shuffle/repeat policy and media source control.

This domain handles:
- Queue order and selection (queue.py)
- Shuffle with a pinned current track (shuffle.py)
- Repeat decisions for next/prev and end of track (repeat.py)
- The authoritative playback state machine (machine.py)
- The media source binding (media.py) and its mpv implementation (mpv.py)
- Session snapshot persistence (persistence.py)
- The per-session controller wiring them together (controller.py)
"""

from .controller import PlaybackController
from .exceptions import (
    InvalidQueue,
    PersistenceCorrupt,
    PlaybackError,
    PlaybackRejected,
)
from .machine import PlaybackStateMachine
from .media import MediaEvent, MediaSource, MediaSourceBase, MediaSync
from .persistence import (
    JsonFilePersistence,
    MemoryPersistence,
    PersistenceAdapter,
    snapshot_from_dict,
    snapshot_to_dict,
)
from .repeat import AdvanceTo, Direction, NoOp, StayAndRestart
from .shuffle import restore_order, shuffle_tracks, toggle_shuffle
from .state import (
    MediaView,
    PlaybackState,
    PlayerStatus,
    QueueState,
    Snapshot,
)

__all__ = [
    # Controller
    "PlaybackController",
    "PlaybackStateMachine",
    # Media
    "MediaEvent",
    "MediaSource",
    "MediaSourceBase",
    "MediaSync",
    # Persistence
    "PersistenceAdapter",
    "JsonFilePersistence",
    "MemoryPersistence",
    "snapshot_to_dict",
    "snapshot_from_dict",
    # Ordering
    "AdvanceTo",
    "StayAndRestart",
    "NoOp",
    "Direction",
    "shuffle_tracks",
    "restore_order",
    "toggle_shuffle",
    # State
    "MediaView",
    "PlaybackState",
    "PlayerStatus",
    "QueueState",
    "Snapshot",
    # Errors
    "PlaybackError",
    "InvalidQueue",
    "PlaybackRejected",
    "PersistenceCorrupt",
]
