"""
playdeck CLI - entry point

Starts an interactive playback session, or inspects the catalog and the
saved session snapshot.
"""

import argparse
import sys
from pathlib import Path
from typing import Optional

from playdeck import __version__


def run_tracks(config, track_ids: Optional[list] = None) -> int:
    """Print the catalog as playdeck sees it."""
    from playdeck.helpers import format_track
    from playdeck.main import fetch_catalog

    tracks = fetch_catalog(config, track_ids)
    if tracks is None:
        return 1

    for i, track in enumerate(tracks, 1):
        print(f"{i:>4}. [{track.id}] {format_track(track)}")
    print(f"\n{len(tracks)} tracks")
    return 0


def run_session_info(config) -> int:
    """Print the saved session snapshot, if any."""
    from playdeck.core.config import get_snapshot_path
    from playdeck.domain.playback import JsonFilePersistence
    from playdeck.helpers import format_time, format_track

    path = get_snapshot_path(config)
    snapshot = JsonFilePersistence(path).load()
    if snapshot is None:
        print(f"No saved session at {path}")
        return 0

    current = snapshot.tracks[snapshot.current_index] if snapshot.tracks else None
    print(f"Session: {path}")
    print(f"  Tracks:   {len(snapshot.tracks)}")
    print(f"  Current:  {snapshot.current_index + 1}. {format_track(current)}")
    print(f"  Position: {format_time(snapshot.current_time)}")
    print(f"  Volume:   {round(snapshot.volume * 100)}%")
    print(f"  Shuffle:  {'on' if snapshot.shuffle_mode else 'off'}")
    print(f"  Repeat:   {'on' if snapshot.repeat_mode else 'off'}")
    return 0


def run_clear_session(config) -> int:
    from playdeck.core.config import get_snapshot_path
    from playdeck.domain.playback import JsonFilePersistence

    path = get_snapshot_path(config)
    JsonFilePersistence(path).clear()
    print(f"Cleared session at {path}")
    return 0


def main() -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="playdeck - queue-based music player",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"playdeck {__version__}")
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to config.toml (default: ~/.config/playdeck/config.toml)",
    )

    subparsers = parser.add_subparsers(dest="subcommand", help="Available commands")

    play_parser = subparsers.add_parser("play", help="Start an interactive session (default)")
    play_parser.add_argument("tracks", nargs="*", help="Only queue these track ids")
    play_parser.add_argument("--seed", type=int, help="Seed for shuffle order")

    tracks_parser = subparsers.add_parser("tracks", help="List catalog tracks")
    tracks_parser.add_argument("tracks", nargs="*", help="Only list these track ids")

    subparsers.add_parser("session", help="Show the saved session")
    subparsers.add_parser("clear-session", help="Delete the saved session")

    args = parser.parse_args()

    from playdeck.core.config import ensure_directories, load_config
    from playdeck.core.output import setup_from_config

    ensure_directories()
    config = load_config(args.config)
    setup_from_config(config.logging)

    if args.subcommand == "tracks":
        sys.exit(run_tracks(config, args.tracks or None))

    if args.subcommand == "session":
        sys.exit(run_session_info(config))

    if args.subcommand == "clear-session":
        sys.exit(run_clear_session(config))

    from playdeck.main import run_session

    track_ids = getattr(args, "tracks", None) or None
    seed = getattr(args, "seed", None)
    sys.exit(run_session(config, track_ids, seed))


if __name__ == "__main__":
    main()
