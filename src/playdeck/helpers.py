"""
Display helpers shared by the CLI commands.
"""

from typing import Optional

from playdeck.domain.library.models import Track
from playdeck.domain.playback.state import PlaybackState, PlayerStatus, QueueState


def format_time(seconds: float) -> str:
    """Format time in seconds to MM:SS format."""
    if seconds < 0:
        return "00:00"

    minutes = int(seconds // 60)
    secs = int(seconds % 60)
    return f"{minutes:02d}:{secs:02d}"


def volume_label(volume: float) -> str:
    """Coarse volume level: muted, low or high."""
    if volume <= 0:
        return "muted"
    if volume < 0.5:
        return "low"
    return "high"


def format_track(track: Optional[Track]) -> str:
    if track is None:
        return "No Track"
    return f"{track.title} - {track.author or 'Unknown Artist'}"


def format_status_line(
    status: PlayerStatus, queue: QueueState, playback: PlaybackState, track: Optional[Track]
) -> str:
    """One-line now-playing summary."""
    flags = []
    if queue.shuffle_mode:
        flags.append("shuffle")
    if queue.repeat_mode:
        flags.append("repeat")
    flag_text = f" [{', '.join(flags)}]" if flags else ""

    position = f"{queue.current_index + 1}/{len(queue)}" if not queue.is_empty else "0/0"
    return (
        f"{status.value:<8} {position:>7}  {format_track(track)}  "
        f"{format_time(playback.current_time)} / {format_time(playback.duration)}  "
        f"vol {round(playback.volume * 100)}% ({volume_label(playback.volume)}){flag_text}"
    )
