"""
Playback controller - one explicit object per session.

All user intents and media-source events become events in a single FIFO
queue. Each event is handled to completion (state machine transition,
MediaSync pass, snapshot write) before the next one starts, so a source
event can never interleave with a half-applied user action.
"""

import random
import threading
from collections import deque
from dataclasses import dataclass, replace
from typing import Any, Callable, Deque, Dict, Optional, Sequence, Tuple

from loguru import logger

from playdeck.domain.library.models import Track

from . import queue as queue_model
from .exceptions import InvalidQueue
from .machine import PlaybackStateMachine
from .media import (
    MediaSource,
    MediaSync,
    MetadataReady,
    PlayResolved,
    TimeUpdated,
    TrackEnded,
)
from .persistence import MemoryPersistence, PersistenceAdapter
from .repeat import Direction, RepeatDecision
from .state import PlaybackState, PlayerStatus, QueueState, Snapshot

# seconds of playback progress between snapshot writes driven by time updates alone
SAVE_TIME_STEP = 5.0


# User intents


@dataclass(frozen=True)
class SelectTrack:
    track: Track
    queue: Optional[Tuple[Track, ...]] = None


@dataclass(frozen=True)
class SelectIndex:
    index: int


@dataclass(frozen=True)
class LoadQueue:
    tracks: Tuple[Track, ...]
    start_index: int = 0


@dataclass(frozen=True)
class RestoreSession:
    snapshot: Snapshot
    tracks: Optional[Tuple[Track, ...]] = None


@dataclass(frozen=True)
class TogglePlayPause:
    pass


@dataclass(frozen=True)
class Step:
    direction: Direction


@dataclass(frozen=True)
class ToggleShuffle:
    pass


@dataclass(frozen=True)
class ToggleRepeat:
    pass


@dataclass(frozen=True)
class Seek:
    position: float


@dataclass(frozen=True)
class SetVolume:
    volume: float


@dataclass(frozen=True)
class ReplaceTracks:
    tracks: Tuple[Track, ...]


class PlaybackController:
    """Owns the state machine, the media binding and the session snapshot."""

    def __init__(
        self,
        source: MediaSource,
        persistence: Optional[PersistenceAdapter] = None,
        rng: Optional[random.Random] = None,
        volume: float = 1.0,
        shuffle_mode: bool = False,
        repeat_mode: bool = False,
    ) -> None:
        self._machine = PlaybackStateMachine(
            rng=rng, volume=volume, shuffle_mode=shuffle_mode, repeat_mode=repeat_mode
        )
        self._persistence = persistence if persistence is not None else MemoryPersistence()
        self._pending: Deque[Any] = deque()
        self._lock = threading.RLock()
        self._dispatching = False
        self._closed = False
        self._last_saved: Optional[Snapshot] = None
        self._media = MediaSync(source, self.post)

        m = self._machine
        self._handlers: Dict[type, Callable[[Any], Any]] = {
            SelectTrack: lambda e: m.select_track(e.track, e.queue),
            SelectIndex: lambda e: m.select_index(e.index),
            LoadQueue: lambda e: m.load_queue(e.tracks, e.start_index),
            RestoreSession: lambda e: m.restore(e.snapshot, e.tracks),
            TogglePlayPause: lambda e: m.toggle_play_pause(),
            Step: lambda e: m.step(e.direction),
            ToggleShuffle: lambda e: m.toggle_shuffle(),
            ToggleRepeat: lambda e: m.toggle_repeat(),
            Seek: lambda e: m.seek(e.position),
            SetVolume: lambda e: m.set_volume(e.volume),
            ReplaceTracks: lambda e: m.replace_tracks(e.tracks),
            MetadataReady: lambda e: m.metadata_ready(e.duration),
            TimeUpdated: lambda e: m.time_updated(e.current_time),
            TrackEnded: lambda e: m.ended(),
            PlayResolved: self._on_play_resolved,
        }

    # -- event loop ----------------------------------------------------------

    def post(self, event: Any) -> Any:
        """Queue an event and process the queue if nobody else is.

        Returns:
            The handler result when the event was processed by this call;
            None when it was queued behind an event already being handled.
        """
        with self._lock:
            if self._closed:
                logger.debug(f"Controller closed, dropping {type(event).__name__}")
                return None

            self._pending.append(event)
            if self._dispatching:
                return None

            self._dispatching = True
            result = None
            try:
                while self._pending:
                    current = self._pending.popleft()
                    outcome = self._process(current)
                    if current is event:
                        result = outcome
            finally:
                self._dispatching = False
            return result

    def _process(self, event: Any) -> Any:
        if not self._media.accept(event):
            return None

        handler = self._handlers.get(type(event))
        if handler is None:
            logger.warning(f"No handler for event {event!r}")
            return None

        try:
            outcome = handler(event)
        except InvalidQueue as e:
            # validated before queuing; the queue changed in between
            logger.warning(f"Rejected {type(event).__name__}: {e}")
            return None

        self._media.apply(self._machine.view())
        self._persist(progress=isinstance(event, TimeUpdated))
        return outcome

    def _on_play_resolved(self, event: PlayResolved) -> None:
        if event.error is not None:
            self._machine.playback_rejected(event.error)

    def _persist(self, progress: bool = False) -> None:
        snapshot = self._machine.snapshot()
        if snapshot is None or snapshot == self._last_saved:
            return
        if progress and self._progress_only(snapshot):
            return
        if self._persistence.save(snapshot):
            self._last_saved = snapshot
        else:
            logger.warning("Session snapshot not saved")

    def _progress_only(self, snapshot: Snapshot) -> bool:
        """True when `snapshot` only moved current_time by less than SAVE_TIME_STEP."""
        last = self._last_saved
        if last is None:
            return False
        if replace(snapshot, current_time=last.current_time) != last:
            return False
        return abs(snapshot.current_time - last.current_time) < SAVE_TIME_STEP

    # -- lifecycle -----------------------------------------------------------

    def start(self, tracks: Optional[Sequence[Track]] = None) -> bool:
        """Load the previous session (once) or cue the given tracks.

        Args:
            tracks: Freshly fetched catalog; when a session is restored its
                saved index is applied to this queue

        Returns:
            True if a previous session was restored
        """
        snapshot = self._persistence.load()
        if snapshot is not None:
            restored = self.post(
                RestoreSession(snapshot, tuple(tracks) if tracks else None)
            )
            if restored:
                return True

        if tracks:
            self.post(LoadQueue(tuple(tracks)))
        return False

    def close(self) -> None:
        """Write the final snapshot and release the media source."""
        with self._lock:
            if self._closed:
                return
            self._persist()
            self._media.close()
            self._closed = True
            self._pending.clear()

    # -- intents ---------------------------------------------------------------

    def select_track(self, track: Track, queue: Optional[Sequence[Track]] = None) -> None:
        """Play `track`, optionally replacing the queue first.

        Raises:
            InvalidQueue: Empty queue or unknown track; nothing changes
        """
        with self._lock:
            candidates = queue if queue is not None else self._machine.queue.ordered_tracks
            if not candidates:
                raise InvalidQueue("Cannot select from an empty queue")
            if queue_model.index_of(candidates, track.id) is None:
                raise InvalidQueue(f"Track {track.id} is not in the queue")
        self.post(SelectTrack(track, tuple(queue) if queue is not None else None))

    def play_track_at_index(self, index: int) -> None:
        """Play the track at a queue position; stale indexes are clamped.

        Raises:
            InvalidQueue: If the queue is empty
        """
        with self._lock:
            if self._machine.queue.is_empty:
                raise InvalidQueue("Cannot select from an empty queue")
        self.post(SelectIndex(index))

    def toggle_play_pause(self) -> Optional[bool]:
        return self.post(TogglePlayPause())

    def next(self) -> Optional[RepeatDecision]:
        return self.post(Step(Direction.NEXT))

    def prev(self) -> Optional[RepeatDecision]:
        return self.post(Step(Direction.PREV))

    def toggle_shuffle(self) -> Optional[bool]:
        return self.post(ToggleShuffle())

    def toggle_repeat(self) -> Optional[bool]:
        return self.post(ToggleRepeat())

    def seek(self, position: float) -> Optional[bool]:
        """Seek in seconds. False means metadata is not known yet and nothing changed."""
        return self.post(Seek(float(position)))

    def set_volume(self, volume: float) -> Optional[float]:
        return self.post(SetVolume(float(volume)))

    def replace_tracks(self, tracks: Sequence[Track]) -> None:
        """Apply an external change to the queue contents."""
        self.post(ReplaceTracks(tuple(tracks)))

    # -- read access -----------------------------------------------------------

    @property
    def queue(self) -> QueueState:
        return self._machine.queue

    @property
    def playback(self) -> PlaybackState:
        return self._machine.playback

    @property
    def status(self) -> PlayerStatus:
        return self._machine.status

    @property
    def current_track(self) -> Optional[Track]:
        return self._machine.current_track

    @property
    def has_next_track(self) -> bool:
        """Whether next() would move (including a repeat wrap)."""
        state = self._machine.queue
        return queue_model.has_next(state) or (state.repeat_mode and not state.is_empty)

    @property
    def has_prev_track(self) -> bool:
        state = self._machine.queue
        return queue_model.has_prev(state) or (state.repeat_mode and not state.is_empty)

    @property
    def bound_locator(self) -> Optional[str]:
        return self._media.bound_locator

    def snapshot(self) -> Optional[Snapshot]:
        return self._machine.snapshot()
