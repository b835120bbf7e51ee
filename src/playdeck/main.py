"""
playdeck - session setup and interactive loop
"""

import random
from typing import List, Optional

from loguru import logger

from playdeck.core import config as config_module
from playdeck.core.config import Config
from playdeck.core.output import log
from playdeck.domain.catalog import CatalogUnavailable, EmptyCatalog, load_catalog
from playdeck.domain.library.models import Track
from playdeck.domain.playback import (
    JsonFilePersistence,
    MemoryPersistence,
    PlaybackController,
)
from playdeck.domain.playback.mpv import MpvMediaSource, check_mpv_available, start_poller
from playdeck import router


def build_persistence(config: Config):
    """Pick the snapshot store for this session."""
    if not config.session.enabled:
        return MemoryPersistence()
    return JsonFilePersistence(config_module.get_snapshot_path(config))


def fetch_catalog(config: Config, track_ids: Optional[List[str]] = None) -> Optional[List[Track]]:
    """Load the catalog, reporting failures to the user instead of raising."""
    try:
        return load_catalog(config.catalog, track_ids)
    except EmptyCatalog as e:
        log(f"Nothing to play: {e}", level="warning")
    except CatalogUnavailable as e:
        log(f"Catalog unavailable: {e}", level="error")
    return None


def run_session(config: Config, track_ids: Optional[List[str]] = None, seed: Optional[int] = None) -> int:
    """Run an interactive playback session.

    Returns:
        Process exit code
    """
    tracks = fetch_catalog(config, track_ids)
    if tracks is None:
        return 1

    if not check_mpv_available():
        log("mpv is not installed or not on PATH", level="error")
        return 1

    source = MpvMediaSource(config.player.mpv_socket_path, volume=config.player.volume)
    if not source.start():
        log("Failed to start mpv", level="error")
        return 1

    controller = PlaybackController(
        source,
        persistence=build_persistence(config),
        rng=random.Random(seed),
        volume=config.player.volume,
        shuffle_mode=config.player.shuffle_on_start,
        repeat_mode=config.player.repeat_on_start,
    )
    stop_polling = start_poller(source, config.player.poll_interval)

    try:
        if controller.start(tracks):
            log("Restored previous session")
        log(f"{len(controller.queue)} tracks queued. Type 'help' for commands.")
        router.handle_status_command(controller)
        interactive_loop(controller)
    finally:
        stop_polling.set()
        controller.close()
        source.stop()
        logger.info("Session ended")

    return 0


def interactive_loop(controller: PlaybackController) -> None:
    """Read commands until quit or end of input."""
    while True:
        try:
            line = input("playdeck> ").strip()
        except (EOFError, KeyboardInterrupt):
            print()
            return

        if not line:
            continue

        parts = line.split()
        command, args = parts[0].lower(), parts[1:]
        try:
            if not router.handle_command(controller, command, args):
                return
        except Exception:
            logger.exception(f"Command failed: {line}")
            log(f"Command failed: {line}", level="error")
