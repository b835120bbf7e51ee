"""Repeat policy: what to play after next/prev or at the end of a track."""

from dataclasses import dataclass
from enum import Enum
from typing import Union


class Direction(Enum):
    NEXT = "next"
    PREV = "prev"


@dataclass(frozen=True)
class AdvanceTo:
    """Select the track at `index`."""

    index: int


@dataclass(frozen=True)
class StayAndRestart:
    """Replay the current track from the start."""


@dataclass(frozen=True)
class NoOp:
    """Nothing further to play in that direction."""


RepeatDecision = Union[AdvanceTo, StayAndRestart, NoOp]


def decide(
    direction: Direction,
    current_index: int,
    has_next: bool,
    has_prev: bool,
    repeat_mode: bool,
    queue_length: int,
) -> RepeatDecision:
    """Decide where an explicit next/prev intent goes.

    With repeat on, stepping past either end wraps around the queue.
    """
    if direction is Direction.NEXT:
        if has_next:
            return AdvanceTo(current_index + 1)
        if repeat_mode and queue_length > 0:
            return AdvanceTo(0)
        return NoOp()

    if has_prev:
        return AdvanceTo(current_index - 1)
    if repeat_mode and queue_length > 0:
        return AdvanceTo(queue_length - 1)
    return NoOp()


def decide_on_ended(
    current_index: int, has_next: bool, repeat_mode: bool, queue_length: int
) -> RepeatDecision:
    """Decide what follows a track that played to its end.

    Single-track repeat wins over advancing through the queue.
    """
    if repeat_mode and queue_length > 0:
        return StayAndRestart()
    if has_next:
        return AdvanceTo(current_index + 1)
    return NoOp()
