"""Tests for shuffle ordering."""

import random

from playdeck.domain.library.models import Track
from playdeck.domain.playback.shuffle import (
    pin_selection,
    restore_order,
    shuffle_tracks,
    toggle_shuffle,
)
from playdeck.domain.playback.state import QueueState


def _many_tracks(count: int) -> list[Track]:
    return [
        Track(id=f"t{i}", title=f"Track {i}", author="Artist", src=f"/music/t{i}.mp3")
        for i in range(count)
    ]


class TestShuffleTracks:
    """Tests for shuffle_tracks."""

    def test_pinned_track_first(self) -> None:
        tracks = _many_tracks(20)
        for seed in range(10):
            result = shuffle_tracks(tracks, "t7", random.Random(seed))
            assert result[0].id == "t7"

    def test_is_permutation(self) -> None:
        tracks = _many_tracks(20)
        result = shuffle_tracks(tracks, "t3", random.Random(1))
        assert sorted(t.id for t in result) == sorted(t.id for t in tracks)
        assert len(result) == len(tracks)

    def test_unknown_pin_still_shuffles_everything(self) -> None:
        tracks = _many_tracks(5)
        result = shuffle_tracks(tracks, "missing", random.Random(2))
        assert {t.id for t in result} == {t.id for t in tracks}

    def test_same_seed_same_order(self) -> None:
        tracks = _many_tracks(10)
        first = shuffle_tracks(tracks, None, random.Random(42))
        second = shuffle_tracks(tracks, None, random.Random(42))
        assert first == second


class TestRestoreOrder:
    """Tests for restore_order."""

    def test_finds_current(self, tracks: list[Track]) -> None:
        restored, index = restore_order(tracks, "c")
        assert restored == tuple(tracks)
        assert index == 2

    def test_missing_current_falls_back_to_zero(self, tracks: list[Track]) -> None:
        _, index = restore_order(tracks, "gone")
        assert index == 0


class TestToggleShuffle:
    """Tests for toggle_shuffle."""

    def test_on_then_off_restores_order_and_selection(self, tracks: list[Track]) -> None:
        state = QueueState(ordered_tracks=tuple(tracks), current_index=1)
        rng = random.Random(0)

        shuffled = toggle_shuffle(state, rng)
        assert shuffled.shuffle_mode is True
        assert shuffled.current_index == 0
        assert shuffled.ordered_tracks[0].id == "b"
        assert shuffled.original_order == tuple(tracks)

        restored = toggle_shuffle(shuffled, rng)
        assert restored.shuffle_mode is False
        assert restored.ordered_tracks == tuple(tracks)
        assert restored.current_index == 1
        assert restored.original_order == ()

    def test_off_after_moving_keeps_new_selection(self, tracks: list[Track]) -> None:
        state = QueueState(ordered_tracks=tuple(tracks), current_index=0)
        shuffled = toggle_shuffle(state, random.Random(3))
        # pretend playback moved to the last shuffled track
        moved = QueueState(
            ordered_tracks=shuffled.ordered_tracks,
            original_order=shuffled.original_order,
            current_index=2,
            shuffle_mode=True,
        )
        expected_id = moved.ordered_tracks[2].id

        restored = toggle_shuffle(moved, random.Random(3))
        assert restored.ordered_tracks[restored.current_index].id == expected_id

    def test_off_without_captured_order_only_clears_flag(self, tracks: list[Track]) -> None:
        state = QueueState(ordered_tracks=tuple(tracks), current_index=2, shuffle_mode=True)
        result = toggle_shuffle(state, random.Random(0))
        assert result.shuffle_mode is False
        assert result.ordered_tracks == tuple(tracks)
        assert result.current_index == 2


class TestPinSelection:
    """Tests for pin_selection."""

    def test_new_queue_becomes_original_order(self, tracks: list[Track]) -> None:
        state = QueueState(shuffle_mode=True)
        result = pin_selection(state, tracks, "c", random.Random(5))
        assert result.original_order == tuple(tracks)
        assert result.ordered_tracks[0].id == "c"
        assert result.current_index == 0
