"""Tests for repeat decisions."""

from playdeck.domain.playback.repeat import (
    AdvanceTo,
    Direction,
    NoOp,
    StayAndRestart,
    decide,
    decide_on_ended,
)


class TestDecide:
    """Tests for explicit next/prev decisions."""

    def test_next_advances(self) -> None:
        assert decide(Direction.NEXT, 0, True, False, False, 3) == AdvanceTo(1)

    def test_next_at_end_without_repeat(self) -> None:
        assert decide(Direction.NEXT, 2, False, True, False, 3) == NoOp()

    def test_next_at_end_with_repeat_wraps(self) -> None:
        assert decide(Direction.NEXT, 2, False, True, True, 3) == AdvanceTo(0)

    def test_prev_retreats(self) -> None:
        assert decide(Direction.PREV, 2, False, True, False, 3) == AdvanceTo(1)

    def test_prev_at_start_without_repeat(self) -> None:
        assert decide(Direction.PREV, 0, True, False, False, 3) == NoOp()

    def test_prev_at_start_with_repeat_wraps(self) -> None:
        assert decide(Direction.PREV, 0, True, False, True, 3) == AdvanceTo(2)

    def test_empty_queue_never_moves(self) -> None:
        assert decide(Direction.NEXT, 0, False, False, True, 0) == NoOp()


class TestDecideOnEnded:
    """Tests for end-of-track decisions."""

    def test_repeat_restarts_current(self) -> None:
        assert decide_on_ended(1, True, True, 3) == StayAndRestart()

    def test_repeat_single_track_restarts(self) -> None:
        assert decide_on_ended(0, False, True, 1) == StayAndRestart()

    def test_advances_without_repeat(self) -> None:
        assert decide_on_ended(1, True, False, 3) == AdvanceTo(2)

    def test_last_track_without_repeat_stops(self) -> None:
        assert decide_on_ended(2, False, False, 3) == NoOp()

    def test_decisions_are_distinct(self) -> None:
        assert StayAndRestart() != NoOp()
