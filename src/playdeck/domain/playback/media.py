"""
Media source binding.

MediaSync is the only code that issues commands to the media source. It
reconciles the source with the state machine's MediaView and turns source
callbacks into events for the controller.
"""

from concurrent.futures import CancelledError, Future
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Protocol

from loguru import logger

from .exceptions import PlaybackRejected
from .state import MediaView, PlayerStatus


class MediaEvent(Enum):
    """Notifications a media source can deliver.

    Callbacks also receive `locator=`: the locator the source read the value
    for, or None when the source does not track it.
    """

    METADATA_READY = "metadata_ready"  # callback(duration)
    TIME_UPDATED = "time_updated"  # callback(current_time)
    ENDED = "ended"  # callback()


class MediaSource(Protocol):
    """Capability consumed by MediaSync; implemented by mpv or test doubles."""

    current_time: float
    volume: float

    @property
    def duration(self) -> float: ...

    def load(self, locator: str) -> None: ...

    def play(self) -> "Future[Any]": ...

    def pause(self) -> None: ...

    def add_listener(self, event: MediaEvent, callback: Callable[..., None]) -> None: ...

    def remove_listener(self, event: MediaEvent, callback: Callable[..., None]) -> None: ...


class MediaSourceBase:
    """Listener registry shared by media source implementations."""

    def __init__(self) -> None:
        self._listeners: Dict[MediaEvent, List[Callable[..., None]]] = {
            event: [] for event in MediaEvent
        }

    def add_listener(self, event: MediaEvent, callback: Callable[..., None]) -> None:
        self._listeners[event].append(callback)

    def remove_listener(self, event: MediaEvent, callback: Callable[..., None]) -> None:
        try:
            self._listeners[event].remove(callback)
        except ValueError:
            pass

    def listener_count(self, event: Optional[MediaEvent] = None) -> int:
        if event is not None:
            return len(self._listeners[event])
        return sum(len(callbacks) for callbacks in self._listeners.values())

    def _emit(self, event: MediaEvent, *args: Any, locator: Optional[str] = None) -> None:
        for callback in list(self._listeners[event]):
            callback(*args, locator=locator)


# Events lifted from the source into the controller queue


@dataclass(frozen=True)
class MetadataReady:
    duration: float
    locator: Optional[str] = None  # binding at the time the source reported it
    lifted: bool = False  # re-announced for an already loaded source


@dataclass(frozen=True)
class TimeUpdated:
    current_time: float
    locator: Optional[str] = None


@dataclass(frozen=True)
class TrackEnded:
    locator: Optional[str] = None


@dataclass(frozen=True)
class PlayResolved:
    """Outcome of an asynchronous play() for the locator it was issued against."""

    locator: str
    error: Optional[BaseException] = None


class MediaSync:
    """Exclusive owner of the media source binding."""

    def __init__(self, source: MediaSource, emit: Callable[[Any], Any]) -> None:
        self._source = source
        self._emit = emit
        self._bound_locator: Optional[str] = None
        self._metadata_known = False
        self._duration = 0.0
        self._load_epoch = 0
        self._seek_epoch = 0
        self._source_playing = False
        self._volume: Optional[float] = None
        self._subscriptions = {
            MediaEvent.METADATA_READY: self._on_source_metadata,
            MediaEvent.TIME_UPDATED: self._on_source_time,
            MediaEvent.ENDED: self._on_source_ended,
        }
        for event, callback in self._subscriptions.items():
            source.add_listener(event, callback)
        self._attached = True

    @property
    def bound_locator(self) -> Optional[str]:
        return self._bound_locator

    @property
    def metadata_known(self) -> bool:
        return self._metadata_known

    @property
    def source_playing(self) -> bool:
        return self._source_playing

    # -- source callbacks (may run on a poller thread) -------------------------

    def _stamp(self, locator: Optional[str]) -> Optional[str]:
        return locator if locator is not None else self._bound_locator

    def _on_source_metadata(self, duration: float, locator: Optional[str] = None) -> None:
        self._emit(MetadataReady(duration=float(duration), locator=self._stamp(locator)))

    def _on_source_time(self, current_time: float, locator: Optional[str] = None) -> None:
        self._emit(TimeUpdated(current_time=float(current_time), locator=self._stamp(locator)))

    def _on_source_ended(self, locator: Optional[str] = None) -> None:
        self._emit(TrackEnded(locator=self._stamp(locator)))

    # -- event filtering (runs inside the controller's ordered loop) ----------

    def accept(self, event: Any) -> bool:
        """Update binding bookkeeping for a lifted event and decide whether it is current.

        Progress and end events that arrive before metadata for the bound
        locator belong to a previous source and are dropped. Play outcomes for
        a locator that is no longer bound are dropped.
        """
        stamped = getattr(event, "locator", None)

        if isinstance(event, MetadataReady):
            if self._bound_locator is None or (
                stamped is not None and stamped != self._bound_locator
            ):
                logger.debug(f"Dropping metadata for unbound source {stamped}")
                return False
            self._metadata_known = True
            self._duration = event.duration
            return True

        if isinstance(event, (TimeUpdated, TrackEnded)):
            if stamped is not None and stamped != self._bound_locator:
                return False
            if not self._metadata_known:
                logger.debug(f"Dropping stale {type(event).__name__} before metadata")
                return False
            if isinstance(event, TrackEnded):
                self._source_playing = False
            return True

        if isinstance(event, PlayResolved):
            if event.locator != self._bound_locator:
                logger.debug(f"Ignoring play result for stale locator {event.locator}")
                return False
            if event.error is not None:
                self._source_playing = False
            return True

        return True

    # -- reconciliation ---------------------------------------------------------

    def apply(self, view: MediaView) -> None:
        """Bring the source in line with the machine's view."""
        if view.volume != self._volume:
            self._source.volume = view.volume
            self._volume = view.volume

        if view.track is None:
            if self._source_playing:
                self._source.pause()
                self._source_playing = False
            return

        locator = view.track.src
        if view.load_epoch != self._load_epoch:
            self._load_epoch = view.load_epoch
            if locator != self._bound_locator:
                logger.info(f"Loading source: {locator}")
                self._source.load(locator)
                self._bound_locator = locator
                self._metadata_known = False
                self._duration = 0.0
                self._source_playing = False
            elif self._metadata_known:
                # same source: no reset, re-announce what is already known
                self._emit(
                    MetadataReady(
                        duration=self._duration, locator=locator, lifted=True
                    )
                )

        if not self._metadata_known or view.status is PlayerStatus.LOADING:
            if self._source_playing:
                self._source.pause()
                self._source_playing = False
            return

        if view.seek_epoch != self._seek_epoch:
            self._seek_epoch = view.seek_epoch
            if view.status in (PlayerStatus.PLAYING, PlayerStatus.PAUSED):
                self._source.current_time = view.current_time

        should_play = view.is_playing and view.status is PlayerStatus.PLAYING
        if should_play and not self._source_playing:
            self._start_playback(locator)
        elif not should_play and self._source_playing:
            self._source.pause()
            self._source_playing = False

    def _start_playback(self, locator: str) -> None:
        self._source_playing = True
        try:
            future = self._source.play()
        except Exception as e:
            logger.exception(f"Media source play() failed for {locator}")
            self._emit(PlayResolved(locator=locator, error=e))
            return
        future.add_done_callback(lambda done: self._on_play_done(locator, done))

    def _on_play_done(self, locator: str, future: "Future[Any]") -> None:
        try:
            error = future.exception()
        except CancelledError as e:
            error = PlaybackRejected(f"Play request cancelled: {e}")
        self._emit(PlayResolved(locator=locator, error=error))

    def close(self) -> None:
        """Unsubscribe from the source and stop driving it."""
        if not self._attached:
            return
        for event, callback in self._subscriptions.items():
            self._source.remove_listener(event, callback)
        self._attached = False
        if self._source_playing:
            self._source.pause()
            self._source_playing = False
        logger.debug("Media source listeners removed")
