"""
Playback state machine.

The single owner of QueueState and PlaybackState. Every user intent and
every media-source event goes through one of the transition methods below;
ordering decisions are delegated to queue.py, shuffle.py and repeat.py. The
machine never talks to the media source itself - MediaSync reads view().
"""

import math
import random
from dataclasses import replace
from typing import Optional, Sequence, Tuple

from loguru import logger

from playdeck.domain.library.models import Track, track_key

from . import queue as queue_model
from .exceptions import InvalidQueue
from .repeat import (
    AdvanceTo,
    Direction,
    NoOp,
    RepeatDecision,
    StayAndRestart,
    decide,
    decide_on_ended,
)
from .shuffle import pin_selection, toggle_shuffle
from .state import (
    MediaView,
    PlaybackState,
    PlayerStatus,
    QueueState,
    Snapshot,
    clamp,
)

# States in which the source has reported metadata for the bound track
_METADATA_KNOWN = (PlayerStatus.PLAYING, PlayerStatus.PAUSED, PlayerStatus.ENDED)


class PlaybackStateMachine:
    """Authoritative playback state with idle/loading/playing/paused/ended states."""

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        volume: float = 1.0,
        shuffle_mode: bool = False,
        repeat_mode: bool = False,
    ) -> None:
        self._rng = rng or random.Random()
        self._queue = QueueState(shuffle_mode=shuffle_mode, repeat_mode=repeat_mode)
        self._playback = PlaybackState(volume=clamp(volume, 0.0, 1.0))
        self._status = PlayerStatus.IDLE
        self._load_epoch = 0
        self._seek_epoch = 0
        self._resume_time = 0.0

    # -- read access ---------------------------------------------------------

    @property
    def queue(self) -> QueueState:
        return self._queue

    @property
    def playback(self) -> PlaybackState:
        return self._playback

    @property
    def status(self) -> PlayerStatus:
        return self._status

    @property
    def current_track(self) -> Optional[Track]:
        return queue_model.current_track(self._queue)

    def view(self) -> MediaView:
        """What the media source should reflect right now."""
        return MediaView(
            track=self.current_track,
            status=self._status,
            is_playing=self._playback.is_playing,
            current_time=self._playback.current_time,
            volume=self._playback.volume,
            load_epoch=self._load_epoch,
            seek_epoch=self._seek_epoch,
        )

    def snapshot(self) -> Optional[Snapshot]:
        """Persistable projection, or None when there is nothing to save."""
        track = self.current_track
        if track is None:
            return None

        tracks = self._queue.original_order or self._queue.ordered_tracks
        index = queue_model.index_of(tracks, track.id)
        return Snapshot(
            tracks=tracks,
            current_index=index if index is not None else 0,
            volume=self._playback.volume,
            current_time=self._playback.current_time,
            shuffle_mode=self._queue.shuffle_mode,
            repeat_mode=self._queue.repeat_mode,
        )

    # -- internal helpers ----------------------------------------------------

    def _load_current(self, previous_key: Optional[Tuple[str, str]], keep_position: bool) -> None:
        """Enter LOADING for the current track (IDLE if the queue is empty).

        When keep_position is set and the track is the same source as before,
        the current time is carried over and re-applied once metadata arrives.
        """
        track = self.current_track
        if track is None:
            self._status = PlayerStatus.IDLE
            self._playback = replace(
                self._playback, is_playing=False, current_time=0.0, duration=0.0
            )
            return

        same_source = keep_position and track_key(track) == previous_key
        self._resume_time = self._playback.current_time if same_source else 0.0
        self._playback = replace(
            self._playback, current_time=self._resume_time, duration=0.0
        )
        self._status = PlayerStatus.LOADING
        self._load_epoch += 1
        logger.debug(
            f"Loading track {track.id} (index={self._queue.current_index}, "
            f"resume_at={self._resume_time:.2f}s)"
        )

    def _previous_key(self) -> Optional[Tuple[str, str]]:
        return track_key(self.current_track)

    def _apply_decision(self, decision: RepeatDecision) -> None:
        previous_key = self._previous_key()
        if isinstance(decision, AdvanceTo):
            self._queue = queue_model.select_index(self._queue, decision.index)
            self._load_current(previous_key, keep_position=False)
        elif isinstance(decision, StayAndRestart):
            self._load_current(previous_key, keep_position=False)

    # -- user intents --------------------------------------------------------

    def select_track(self, track: Track, new_queue: Optional[Sequence[Track]] = None) -> None:
        """Select a track (optionally replacing the queue) and start playing it.

        Raises:
            InvalidQueue: Empty queue, or the track is not part of it. State is unchanged.
        """
        previous_key = self._previous_key()

        if new_queue is not None:
            if not new_queue:
                raise InvalidQueue("Cannot select from an empty queue")
            index = queue_model.index_of(new_queue, track.id)
            if index is None:
                raise InvalidQueue(f"Track {track.id} is not in the supplied queue")
            if self._queue.shuffle_mode:
                queue = pin_selection(self._queue, new_queue, track.id, self._rng)
            else:
                queue = queue_model.set_queue(self._queue, new_queue, index)
        else:
            if self._queue.is_empty:
                raise InvalidQueue("Cannot select from an empty queue")
            index = queue_model.index_of(self._queue.ordered_tracks, track.id)
            if index is None:
                raise InvalidQueue(f"Track {track.id} is not in the current queue")
            queue = queue_model.select_index(self._queue, index)

        self._queue = queue
        self._playback = replace(self._playback, is_playing=True)
        self._load_current(previous_key, keep_position=True)

    def select_index(self, index: int) -> None:
        """Select a queue position and start playing it; stale indexes are clamped.

        Raises:
            InvalidQueue: If the queue is empty
        """
        if self._queue.is_empty:
            raise InvalidQueue("Cannot select from an empty queue")
        previous_key = self._previous_key()
        self._queue = queue_model.select_index(self._queue, index)
        self._playback = replace(self._playback, is_playing=True)
        self._load_current(previous_key, keep_position=True)

    def load_queue(self, tracks: Sequence[Track], start_index: int = 0) -> None:
        """Replace the queue and cue the start track without playing it.

        Raises:
            InvalidQueue: If tracks is empty
        """
        previous_key = self._previous_key()
        if self._queue.shuffle_mode:
            selected = tracks[queue_model.clamp_index(start_index, len(tracks))] if tracks else None
            if selected is None:
                raise InvalidQueue("Cannot select from an empty queue")
            self._queue = pin_selection(self._queue, tracks, selected.id, self._rng)
        else:
            self._queue = queue_model.set_queue(self._queue, tracks, start_index)
        self._playback = replace(self._playback, is_playing=False)
        self._load_current(previous_key, keep_position=True)

    def toggle_play_pause(self) -> bool:
        """Flip is_playing. Returns False (no effect) when the queue is empty."""
        if self._queue.is_empty:
            return False

        is_playing = not self._playback.is_playing
        self._playback = replace(self._playback, is_playing=is_playing)

        if self._status is PlayerStatus.ENDED and is_playing:
            # play after the end replays the track from the start
            self._playback = replace(self._playback, current_time=0.0)
            self._seek_epoch += 1
            self._status = PlayerStatus.PLAYING
        elif self._status in (PlayerStatus.PLAYING, PlayerStatus.PAUSED):
            self._status = PlayerStatus.PLAYING if is_playing else PlayerStatus.PAUSED
        return True

    def step(self, direction: Direction) -> RepeatDecision:
        """Handle an explicit next/prev intent.

        NoOp leaves index, time and is_playing untouched.
        """
        if self._queue.is_empty:
            return NoOp()

        decision = decide(
            direction,
            self._queue.current_index,
            queue_model.has_next(self._queue),
            queue_model.has_prev(self._queue),
            self._queue.repeat_mode,
            len(self._queue),
        )
        self._apply_decision(decision)
        return decision

    def next(self) -> RepeatDecision:
        return self.step(Direction.NEXT)

    def prev(self) -> RepeatDecision:
        return self.step(Direction.PREV)

    def toggle_shuffle(self) -> bool:
        """Toggle shuffle; the current track (and its position) stay selected."""
        self._queue = toggle_shuffle(self._queue, self._rng)
        logger.info(f"Shuffle {'enabled' if self._queue.shuffle_mode else 'disabled'}")
        return self._queue.shuffle_mode

    def toggle_repeat(self) -> bool:
        self._queue = replace(self._queue, repeat_mode=not self._queue.repeat_mode)
        logger.info(f"Repeat {'enabled' if self._queue.repeat_mode else 'disabled'}")
        return self._queue.repeat_mode

    def set_volume(self, volume: float) -> float:
        """Set volume clamped to [0, 1]; applies in every state."""
        if math.isnan(volume):
            return self._playback.volume
        self._playback = replace(self._playback, volume=clamp(volume, 0.0, 1.0))
        return self._playback.volume

    def seek(self, position: float) -> bool:
        """Seek within the current track.

        Returns:
            False when metadata is not known yet (nothing changed), True otherwise
        """
        if self._status not in _METADATA_KNOWN or self._playback.duration <= 0:
            logger.debug(f"Seek to {position} ignored: duration unknown")
            return False

        target = clamp(position, 0.0, self._playback.duration)
        self._playback = replace(self._playback, current_time=target)
        self._seek_epoch += 1
        if self._status is PlayerStatus.ENDED:
            self._status = PlayerStatus.PAUSED
        return True

    def replace_tracks(self, tracks: Sequence[Track]) -> None:
        """Apply an external change to the queue contents, keeping the selection when possible."""
        previous_key = self._previous_key()
        self._queue = queue_model.replace_tracks(self._queue, tracks)
        if self._queue.is_empty or self._previous_key() != previous_key:
            self._load_current(previous_key, keep_position=True)

    def restore(self, snapshot: Snapshot, tracks: Optional[Sequence[Track]] = None) -> bool:
        """Apply a complete saved session, paused.

        Args:
            snapshot: Saved session
            tracks: Freshly fetched queue to use instead of the saved tracks

        Returns:
            False when there is nothing to restore (no tracks at all)
        """
        queue_tracks = tuple(tracks) if tracks else tuple(snapshot.tracks)
        if not queue_tracks:
            return False

        saved_index = queue_model.clamp_index(snapshot.current_index, len(snapshot.tracks))
        saved_track = snapshot.tracks[saved_index] if snapshot.tracks else None

        index = None
        if saved_track is not None:
            index = queue_model.index_of(queue_tracks, saved_track.id)
        if index is None:
            index = queue_model.clamp_index(snapshot.current_index, len(queue_tracks))

        queue = QueueState(
            ordered_tracks=queue_tracks,
            current_index=index,
            shuffle_mode=snapshot.shuffle_mode,
            repeat_mode=snapshot.repeat_mode,
        )
        if snapshot.shuffle_mode:
            queue = pin_selection(queue, queue_tracks, queue_tracks[index].id, self._rng)

        self._queue = queue
        resumes_saved_track = saved_track is not None and track_key(self.current_track) == track_key(saved_track)
        self._playback = PlaybackState(
            is_playing=False,
            current_time=max(0.0, snapshot.current_time) if resumes_saved_track else 0.0,
            duration=0.0,
            volume=clamp(snapshot.volume, 0.0, 1.0),
        )
        self._load_current(track_key(self.current_track), keep_position=resumes_saved_track)
        logger.info(
            f"Restored session: {len(queue_tracks)} tracks, index={self._queue.current_index}, "
            f"shuffle={snapshot.shuffle_mode}, repeat={snapshot.repeat_mode}"
        )
        return True

    # -- media source events -------------------------------------------------

    def metadata_ready(self, duration: float) -> None:
        """Record the duration; LOADING moves to PLAYING or PAUSED."""
        if self._status is PlayerStatus.IDLE:
            logger.debug("Metadata ignored: no track selected")
            return

        duration = max(0.0, float(duration))
        if self._status is PlayerStatus.LOADING:
            start_at = clamp(self._resume_time, 0.0, duration) if duration > 0 else 0.0
            self._playback = replace(self._playback, duration=duration, current_time=start_at)
            self._status = (
                PlayerStatus.PLAYING if self._playback.is_playing else PlayerStatus.PAUSED
            )
            self._seek_epoch += 1
            logger.debug(f"Metadata ready: duration={duration:.2f}s, start_at={start_at:.2f}s")
            return

        self._playback = replace(
            self._playback,
            duration=duration,
            current_time=clamp(self._playback.current_time, 0.0, duration),
        )

    def time_updated(self, current_time: float) -> None:
        """Record playback progress reported by the source."""
        if self._status not in _METADATA_KNOWN:
            return
        upper = self._playback.duration if self._playback.duration > 0 else max(0.0, current_time)
        self._playback = replace(self._playback, current_time=clamp(current_time, 0.0, upper))

    def ended(self) -> RepeatDecision:
        """Handle the current track playing to its end.

        Repeat replays the same track, otherwise the queue advances, otherwise
        playback stops on the current track.
        """
        if self._status not in (PlayerStatus.PLAYING, PlayerStatus.PAUSED):
            logger.debug(f"Ended ignored in state {self._status.value}")
            return NoOp()

        decision = decide_on_ended(
            self._queue.current_index,
            queue_model.has_next(self._queue),
            self._queue.repeat_mode,
            len(self._queue),
        )

        if isinstance(decision, NoOp):
            self._playback = replace(
                self._playback, is_playing=False, current_time=self._playback.duration
            )
            self._status = PlayerStatus.ENDED
            logger.info("Reached end of queue")
        else:
            self._playback = replace(self._playback, is_playing=True)
            self._apply_decision(decision)
        return decision

    def playback_rejected(self, error: Optional[BaseException] = None) -> None:
        """The source refused to start; fall back to paused, queue unchanged."""
        logger.warning(f"Playback rejected by media source: {error}")
        self._playback = replace(self._playback, is_playing=False)
        if self._status is PlayerStatus.PLAYING:
            self._status = PlayerStatus.PAUSED
