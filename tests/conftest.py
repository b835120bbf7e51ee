"""Shared fixtures for playdeck tests."""

from concurrent.futures import Future
from typing import List, Optional

import pytest

from playdeck.domain.library.models import Track
from playdeck.domain.playback.media import MediaEvent, MediaSourceBase


class FakeMediaSource(MediaSourceBase):
    """Media source double that records commands and fires events on demand.

    With auto_resolve=True play() returns an already resolved future;
    otherwise the futures are kept in `pending_plays` for the test to settle.
    """

    def __init__(self, auto_resolve: bool = True) -> None:
        super().__init__()
        self.auto_resolve = auto_resolve
        self.loaded: List[str] = []
        self.seeks: List[float] = []
        self.volumes: List[float] = []
        self.play_calls = 0
        self.pause_calls = 0
        self.pending_plays: List[Future] = []
        self.raise_on_play: Optional[Exception] = None
        self._time = 0.0
        self._volume = 1.0
        self._duration = 0.0

    def load(self, locator: str) -> None:
        self.loaded.append(locator)
        self._time = 0.0
        self._duration = 0.0

    def play(self) -> Future:
        self.play_calls += 1
        if self.raise_on_play is not None:
            raise self.raise_on_play
        future: Future = Future()
        if self.auto_resolve:
            future.set_result(True)
        else:
            self.pending_plays.append(future)
        return future

    def pause(self) -> None:
        self.pause_calls += 1

    @property
    def current_time(self) -> float:
        return self._time

    @current_time.setter
    def current_time(self, value: float) -> None:
        self._time = value
        self.seeks.append(value)

    @property
    def volume(self) -> float:
        return self._volume

    @volume.setter
    def volume(self, value: float) -> None:
        self._volume = value
        self.volumes.append(value)

    @property
    def duration(self) -> float:
        return self._duration

    # -- test controls -------------------------------------------------------

    def fire_metadata(self, duration: float, locator: Optional[str] = None) -> None:
        self._duration = duration
        self._emit(MediaEvent.METADATA_READY, duration, locator=locator)

    def fire_time(self, current_time: float, locator: Optional[str] = None) -> None:
        self._time = current_time
        self._emit(MediaEvent.TIME_UPDATED, current_time, locator=locator)

    def fire_ended(self, locator: Optional[str] = None) -> None:
        self._emit(MediaEvent.ENDED, locator=locator)


@pytest.fixture
def track_a() -> Track:
    return Track(id="a", title="Alpha", author="Artist One", src="/music/a.mp3")


@pytest.fixture
def track_b() -> Track:
    return Track(id="b", title="Bravo", author="Artist Two", src="/music/b.mp3")


@pytest.fixture
def track_c() -> Track:
    return Track(id="c", title="Charlie", author="Artist Three", src="/music/c.mp3")


@pytest.fixture
def tracks(track_a: Track, track_b: Track, track_c: Track) -> List[Track]:
    """Three-track queue [A, B, C]."""
    return [track_a, track_b, track_c]


@pytest.fixture
def fake_source() -> FakeMediaSource:
    return FakeMediaSource()


@pytest.fixture
def pending_source() -> FakeMediaSource:
    """Source whose play() futures stay unresolved until the test settles them."""
    return FakeMediaSource(auto_resolve=False)
