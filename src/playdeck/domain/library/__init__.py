"""Library domain - track value type and (de)serialization."""

from .models import Track, track_from_dict, track_key, track_to_dict

__all__ = [
    "Track",
    "track_key",
    "track_to_dict",
    "track_from_dict",
]
