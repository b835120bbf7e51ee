"""Playback-specific exceptions for error handling."""


class PlaybackError(Exception):
    """Base exception for playback operations."""

    pass


class InvalidQueue(PlaybackError):
    """Raised when a selection is requested against an empty queue or an unknown track."""

    pass


class PlaybackRejected(PlaybackError):
    """Raised (or delivered through a play future) when the media source refuses to start."""

    pass


class PersistenceCorrupt(PlaybackError):
    """Raised when a stored session snapshot cannot be decoded."""

    pass
