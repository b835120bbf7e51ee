"""
Playback state values.

All state objects are frozen; transitions return new values through
dataclasses.replace() and only the state machine keeps the live ones.
"""

from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple, Optional, Tuple

from playdeck.domain.library.models import Track


class PlayerStatus(Enum):
    """Lifecycle of the currently selected track."""

    IDLE = "idle"  # nothing loaded, queue empty
    LOADING = "loading"  # track selected, metadata not known yet
    PLAYING = "playing"
    PAUSED = "paused"
    ENDED = "ended"  # reached the end with nothing further to play


@dataclass(frozen=True)
class QueueState:
    """Play order, selection and ordering modes."""

    ordered_tracks: Tuple[Track, ...] = ()
    original_order: Tuple[Track, ...] = ()  # pre-shuffle order, empty when not captured
    current_index: int = 0
    shuffle_mode: bool = False
    repeat_mode: bool = False

    @property
    def is_empty(self) -> bool:
        return not self.ordered_tracks

    def __len__(self) -> int:
        return len(self.ordered_tracks)


@dataclass(frozen=True)
class PlaybackState:
    """Transport state of the current track."""

    is_playing: bool = False
    current_time: float = 0.0  # seconds
    duration: float = 0.0  # seconds, 0 until metadata is known
    volume: float = 1.0  # 0.0 - 1.0

    @property
    def progress_percent(self) -> float:
        if self.duration <= 0:
            return 0.0
        return min(100.0, (self.current_time / self.duration) * 100)


@dataclass(frozen=True)
class Snapshot:
    """Persisted projection of a session.

    `tracks` holds the unshuffled order when one was captured, and
    `current_index` points into `tracks`.
    """

    tracks: Tuple[Track, ...]
    current_index: int
    volume: float
    current_time: float
    shuffle_mode: bool
    repeat_mode: bool


class MediaView(NamedTuple):
    """What the media source should be doing, as decided by the state machine.

    `load_epoch` increases every time the machine (re-)enters LOADING;
    `seek_epoch` increases every time the machine wants the source position
    set to `current_time`.
    """

    track: Optional[Track]
    status: PlayerStatus
    is_playing: bool
    current_time: float
    volume: float
    load_epoch: int
    seek_epoch: int


def clamp(value: float, low: float, high: float) -> float:
    """Clamp value into [low, high]."""
    return max(low, min(high, value))
