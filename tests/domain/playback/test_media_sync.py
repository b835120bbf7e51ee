"""Tests for MediaSync source binding and event filtering."""

import pytest

from playdeck.domain.library.models import Track
from playdeck.domain.playback.media import (
    MediaEvent,
    MediaSync,
    MetadataReady,
    PlayResolved,
    TimeUpdated,
    TrackEnded,
)
from playdeck.domain.playback.state import MediaView, PlayerStatus


def _view(
    track: Track,
    status: PlayerStatus = PlayerStatus.PLAYING,
    is_playing: bool = True,
    current_time: float = 0.0,
    volume: float = 1.0,
    load_epoch: int = 1,
    seek_epoch: int = 0,
) -> MediaView:
    return MediaView(track, status, is_playing, current_time, volume, load_epoch, seek_epoch)


@pytest.fixture
def emitted() -> list:
    return []


@pytest.fixture
def sync(fake_source, emitted) -> MediaSync:
    return MediaSync(fake_source, emitted.append)


class TestBinding:
    """Tests for loading and rebinding the source."""

    def test_subscribes_to_all_events(self, fake_source, sync) -> None:
        for event in MediaEvent:
            assert fake_source.listener_count(event) == 1

    def test_loading_view_loads_and_waits(self, fake_source, sync, track_a) -> None:
        sync.apply(_view(track_a, status=PlayerStatus.LOADING))
        assert fake_source.loaded == [track_a.src]
        assert sync.bound_locator == track_a.src
        assert fake_source.play_calls == 0

    def test_same_epoch_does_not_reload(self, fake_source, sync, track_a) -> None:
        view = _view(track_a, status=PlayerStatus.LOADING)
        sync.apply(view)
        sync.apply(view)
        assert fake_source.loaded == [track_a.src]

    def test_same_locator_new_epoch_lifts_metadata(self, fake_source, sync, emitted, track_a) -> None:
        sync.apply(_view(track_a, status=PlayerStatus.LOADING, load_epoch=1))
        assert sync.accept(MetadataReady(180.0, locator=track_a.src))

        sync.apply(_view(track_a, status=PlayerStatus.LOADING, load_epoch=2))

        assert fake_source.loaded == [track_a.src]
        assert emitted == [MetadataReady(180.0, locator=track_a.src, lifted=True)]

    def test_plays_once_metadata_known(self, fake_source, sync, track_a) -> None:
        sync.apply(_view(track_a, status=PlayerStatus.LOADING))
        sync.accept(MetadataReady(180.0, locator=track_a.src))
        sync.apply(_view(track_a, seek_epoch=1, current_time=12.0))

        assert fake_source.seeks == [12.0]
        assert fake_source.play_calls == 1
        assert sync.source_playing is True

    def test_pause_when_view_paused(self, fake_source, sync, track_a) -> None:
        sync.apply(_view(track_a, status=PlayerStatus.LOADING))
        sync.accept(MetadataReady(180.0, locator=track_a.src))
        sync.apply(_view(track_a))
        sync.apply(_view(track_a, status=PlayerStatus.PAUSED, is_playing=False))

        assert fake_source.pause_calls == 1
        assert sync.source_playing is False

    def test_volume_applied_on_change_only(self, fake_source, sync, track_a) -> None:
        sync.apply(_view(track_a, volume=0.5, status=PlayerStatus.LOADING))
        sync.apply(_view(track_a, volume=0.5, status=PlayerStatus.LOADING))
        assert fake_source.volumes == [0.5]


class TestAccept:
    """Tests for filtering lifted events."""

    def test_metadata_without_binding_dropped(self, sync) -> None:
        assert sync.accept(MetadataReady(100.0)) is False

    def test_metadata_for_previous_locator_dropped(self, sync, track_a, track_b) -> None:
        sync.apply(_view(track_a, status=PlayerStatus.LOADING, load_epoch=1))
        sync.apply(_view(track_b, status=PlayerStatus.LOADING, load_epoch=2))
        assert sync.accept(MetadataReady(100.0, locator=track_a.src)) is False
        assert sync.metadata_known is False

    def test_time_before_metadata_dropped(self, sync, track_a) -> None:
        sync.apply(_view(track_a, status=PlayerStatus.LOADING))
        assert sync.accept(TimeUpdated(5.0, locator=track_a.src)) is False
        assert sync.accept(TrackEnded(locator=track_a.src)) is False

    def test_time_after_metadata_accepted(self, sync, track_a) -> None:
        sync.apply(_view(track_a, status=PlayerStatus.LOADING))
        sync.accept(MetadataReady(100.0, locator=track_a.src))
        assert sync.accept(TimeUpdated(5.0, locator=track_a.src)) is True

    def test_stale_play_result_dropped(self, sync, track_a, track_b) -> None:
        sync.apply(_view(track_a, status=PlayerStatus.LOADING, load_epoch=1))
        sync.apply(_view(track_b, status=PlayerStatus.LOADING, load_epoch=2))
        assert sync.accept(PlayResolved(track_a.src, RuntimeError("late"))) is False

    def test_source_locator_wins_over_binding(self, fake_source, sync, emitted, track_a, track_b) -> None:
        sync.apply(_view(track_a, status=PlayerStatus.LOADING, load_epoch=1))
        sync.apply(_view(track_b, status=PlayerStatus.LOADING, load_epoch=2))

        fake_source.fire_metadata(300.0, locator=track_a.src)

        assert emitted == [MetadataReady(300.0, locator=track_a.src)]
        assert sync.accept(emitted[0]) is False
        assert sync.metadata_known is False

    def test_source_callbacks_are_stamped(self, fake_source, sync, emitted, track_a) -> None:
        sync.apply(_view(track_a, status=PlayerStatus.LOADING))
        fake_source.fire_metadata(90.0)
        fake_source.fire_time(1.5)
        fake_source.fire_ended()

        assert emitted == [
            MetadataReady(90.0, locator=track_a.src),
            TimeUpdated(1.5, locator=track_a.src),
            TrackEnded(locator=track_a.src),
        ]


class TestPlayOutcome:
    """Tests for asynchronous play() results."""

    def _bind_and_play(self, source, sync, track) -> None:
        sync.apply(_view(track, status=PlayerStatus.LOADING))
        sync.accept(MetadataReady(180.0, locator=track.src))
        sync.apply(_view(track))

    def test_rejection_emitted_with_locator(self, pending_source, emitted, track_a) -> None:
        sync = MediaSync(pending_source, emitted.append)
        self._bind_and_play(pending_source, sync, track_a)

        error = RuntimeError("blocked")
        pending_source.pending_plays[0].set_exception(error)

        assert emitted == [PlayResolved(track_a.src, error)]

    def test_success_emitted_without_error(self, pending_source, emitted, track_a) -> None:
        sync = MediaSync(pending_source, emitted.append)
        self._bind_and_play(pending_source, sync, track_a)

        pending_source.pending_plays[0].set_result(True)

        assert emitted == [PlayResolved(track_a.src, None)]

    def test_play_raising_synchronously(self, fake_source, emitted, track_a) -> None:
        fake_source.raise_on_play = RuntimeError("no device")
        sync = MediaSync(fake_source, emitted.append)
        self._bind_and_play(fake_source, sync, track_a)

        assert len(emitted) == 1
        assert emitted[0].locator == track_a.src
        assert isinstance(emitted[0].error, RuntimeError)


class TestClose:
    """Tests for releasing the source."""

    def test_close_removes_listeners(self, fake_source, sync) -> None:
        sync.close()
        assert fake_source.listener_count() == 0

    def test_close_twice_is_safe(self, fake_source, sync) -> None:
        sync.close()
        sync.close()
        assert fake_source.listener_count() == 0

    def test_close_pauses_playing_source(self, fake_source, sync, track_a) -> None:
        sync.apply(_view(track_a, status=PlayerStatus.LOADING))
        sync.accept(MetadataReady(180.0, locator=track_a.src))
        sync.apply(_view(track_a))

        sync.close()
        assert fake_source.pause_calls == 1
