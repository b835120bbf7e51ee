"""Shuffle ordering with a pinned current track.

The random source is always injected so orderings are reproducible.
"""

import random
from dataclasses import replace
from typing import Optional, Sequence, Tuple

from loguru import logger

from playdeck.domain.library.models import Track

from .queue import current_track, index_of
from .state import QueueState


def shuffle_tracks(
    tracks: Sequence[Track], pinned_track_id: Optional[str], rng: random.Random
) -> Tuple[Track, ...]:
    """Uniformly shuffle tracks, keeping the pinned track at index 0.

    Args:
        tracks: Tracks to reorder
        pinned_track_id: Id of the track that must come first (None: no pin)
        rng: Random source

    Returns:
        New ordering; a permutation of `tracks`
    """
    pinned = [track for track in tracks if track.id == pinned_track_id][:1]
    rest = [track for track in tracks if not pinned or track is not pinned[0]]
    rng.shuffle(rest)
    return tuple(pinned + rest)


def restore_order(
    original_order: Sequence[Track], current_track_id: Optional[str]
) -> Tuple[Tuple[Track, ...], int]:
    """Return the pre-shuffle order and where the current track sits in it.

    Falls back to index 0 when the current track is no longer part of the
    original order.
    """
    restored = tuple(original_order)
    index = index_of(restored, current_track_id) if current_track_id is not None else None
    if index is None:
        logger.info(f"Track {current_track_id} not in restored order, falling back to index 0")
        index = 0
    return restored, index


def toggle_shuffle(state: QueueState, rng: random.Random) -> QueueState:
    """Enable or disable shuffle, keeping the current track selected.

    Enabling pins the current track at index 0 and shuffles the rest.
    Disabling restores the captured original order.
    """
    selected = current_track(state)
    selected_id = selected.id if selected is not None else None

    if not state.shuffle_mode:
        original = state.original_order or state.ordered_tracks
        return replace(
            state,
            shuffle_mode=True,
            original_order=original,
            ordered_tracks=shuffle_tracks(state.ordered_tracks, selected_id, rng),
            current_index=0,
        )

    if not state.original_order:
        # Nothing captured (e.g. restored session with shuffle already on)
        return replace(state, shuffle_mode=False)

    restored, index = restore_order(state.original_order, selected_id)
    return replace(
        state,
        shuffle_mode=False,
        ordered_tracks=restored,
        original_order=(),
        current_index=index,
    )


def pin_selection(
    state: QueueState, tracks: Sequence[Track], selected_id: str, rng: random.Random
) -> QueueState:
    """Replace the queue while shuffle is active.

    `tracks` becomes the original order and the play order is reshuffled with
    the selected track pinned first.
    """
    original = tuple(tracks)
    return replace(
        state,
        original_order=original,
        ordered_tracks=shuffle_tracks(original, selected_id, rng),
        current_index=0,
    )
