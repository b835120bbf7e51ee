"""Pure functional queue model: play order and selection index.

Every function takes a QueueState and returns a new one; nothing here
touches the media source or persistence. Wrapping at the queue boundaries is
decided by repeat.py, not here.
"""

from dataclasses import replace
from typing import Optional, Sequence

from playdeck.domain.library.models import Track

from .exceptions import InvalidQueue
from .state import QueueState


def clamp_index(index: int, length: int) -> int:
    """Clamp an index into [0, length - 1]; 0 for empty sequences."""
    if length <= 0:
        return 0
    return max(0, min(length - 1, index))


def index_of(tracks: Sequence[Track], track_id: str) -> Optional[int]:
    """Get the position (0-based) of a track by id.

    Returns:
        0-based position of track, or None if not found
    """
    for i, track in enumerate(tracks):
        if track.id == track_id:
            return i
    return None


def set_queue(state: QueueState, tracks: Sequence[Track], start_index: int = 0) -> QueueState:
    """Replace the play order and select `start_index` (clamped).

    Shuffle/repeat modes are kept; any captured pre-shuffle order is dropped
    because it belonged to the old queue.

    Raises:
        InvalidQueue: If tracks is empty
    """
    if not tracks:
        raise InvalidQueue("Cannot select from an empty queue")

    ordered = tuple(tracks)
    return replace(
        state,
        ordered_tracks=ordered,
        original_order=(),
        current_index=clamp_index(start_index, len(ordered)),
    )


def current_track(state: QueueState) -> Optional[Track]:
    """Track at the current index, or None for an empty queue."""
    if state.is_empty:
        return None
    return state.ordered_tracks[clamp_index(state.current_index, len(state))]


def has_next(state: QueueState) -> bool:
    return len(state) > 1 and state.current_index < len(state) - 1


def has_prev(state: QueueState) -> bool:
    return len(state) > 1 and state.current_index > 0


def advance(state: QueueState) -> QueueState:
    """Move selection forward by one; no-op at the last index."""
    if not has_next(state):
        return state
    return replace(state, current_index=state.current_index + 1)


def retreat(state: QueueState) -> QueueState:
    """Move selection back by one; no-op at the first index."""
    if not has_prev(state):
        return state
    return replace(state, current_index=state.current_index - 1)


def select_index(state: QueueState, index: int) -> QueueState:
    """Select a position, clamping stale indexes to the nearest valid bound."""
    return replace(state, current_index=clamp_index(index, len(state)))


def replace_tracks(state: QueueState, tracks: Sequence[Track]) -> QueueState:
    """Apply an external change to the queue contents.

    The current track stays selected when it is still present; otherwise the
    old index is clamped into the new queue. The captured pre-shuffle order is
    filtered to the surviving tracks so shuffle-off still restores a
    permutation of the queue.
    """
    new_tracks = tuple(tracks)
    selected = current_track(state)

    index = index_of(new_tracks, selected.id) if selected is not None else None
    if index is None:
        index = clamp_index(state.current_index, len(new_tracks))

    surviving_ids = {track.id for track in new_tracks}
    original = tuple(track for track in state.original_order if track.id in surviving_ids)
    captured_ids = {track.id for track in original}
    if original:
        # tracks added while shuffled go to the end of the restored order
        original += tuple(track for track in new_tracks if track.id not in captured_ids)

    return replace(
        state,
        ordered_tracks=new_tracks,
        original_order=original,
        current_index=index,
    )
