"""
Command routing for the interactive playdeck session.

Routes user commands to controller intents.
"""

from typing import List

from playdeck.core.output import log, safe_print
from playdeck.domain.playback import InvalidQueue, NoOp, PlaybackController
from playdeck.helpers import format_status_line, format_time, format_track


def print_help() -> None:
    """Display help information for available commands."""
    help_text = """
playdeck - playback queue

Available commands:
  play <n>          Play track number n from the queue
  toggle, p         Play / pause
  next, n           Next track (wraps when repeat is on)
  prev, b           Previous track (wraps when repeat is on)
  shuffle, s        Toggle shuffle (current track stays selected)
  repeat, r         Toggle repeat
  seek <seconds>    Seek within the current track
  vol <0-100>       Set volume
  status            Show current track and player status
  list              Show the queue in play order
  help              Show this help
  quit, exit        Leave (the session is saved)
"""
    safe_print(help_text.strip())


def handle_status_command(controller: PlaybackController) -> bool:
    line = format_status_line(
        controller.status, controller.queue, controller.playback, controller.current_track
    )
    safe_print(line)
    return True


def handle_list_command(controller: PlaybackController) -> bool:
    queue = controller.queue
    if queue.is_empty:
        log("Queue is empty")
        return True

    for i, track in enumerate(queue.ordered_tracks):
        marker = ">" if i == queue.current_index else " "
        safe_print(f"{marker} {i + 1:>3}. {format_track(track)}")
    return True


def handle_play_command(controller: PlaybackController, args: List[str]) -> bool:
    if not args:
        controller.toggle_play_pause()
        return True

    try:
        position = int(args[0])
    except ValueError:
        log(f"Not a track number: {args[0]}", level="warning")
        return True

    try:
        controller.play_track_at_index(position - 1)
    except InvalidQueue as e:
        log(str(e), level="warning")
        return True

    log(f"Playing: {format_track(controller.current_track)}")
    return True


def handle_step_command(controller: PlaybackController, forward: bool) -> bool:
    decision = controller.next() if forward else controller.prev()
    if isinstance(decision, NoOp):
        log("No more tracks in that direction")
    else:
        log(f"Now: {format_track(controller.current_track)}")
    return True


def handle_seek_command(controller: PlaybackController, args: List[str]) -> bool:
    try:
        position = float(args[0])
    except (IndexError, ValueError):
        log("Usage: seek <seconds>", level="warning")
        return True

    if controller.seek(position) is False:
        log("Cannot seek yet: track length unknown", level="warning")
    else:
        log(f"Seeked to {format_time(controller.playback.current_time)}")
    return True


def handle_volume_command(controller: PlaybackController, args: List[str]) -> bool:
    try:
        percent = float(args[0])
    except (IndexError, ValueError):
        log(f"Volume: {round(controller.playback.volume * 100)}%")
        return True

    controller.set_volume(percent / 100.0)
    log(f"Volume: {round(controller.playback.volume * 100)}%")
    return True


def handle_command(controller: PlaybackController, command: str, args: List[str]) -> bool:
    """
    Handle a single command.

    Args:
        controller: Session playback controller
        command: Command name (lowercase)
        args: Remaining words

    Returns:
        False when the session should end, True otherwise
    """
    if command in ("quit", "exit"):
        return False

    if command == "help":
        print_help()
        return True

    if command == "play":
        return handle_play_command(controller, args)

    if command in ("toggle", "p", "pause", "resume"):
        controller.toggle_play_pause()
        return handle_status_command(controller)

    if command in ("next", "n", "skip"):
        return handle_step_command(controller, forward=True)

    if command in ("prev", "b"):
        return handle_step_command(controller, forward=False)

    if command in ("shuffle", "s"):
        enabled = controller.toggle_shuffle()
        log(f"Shuffle {'on' if enabled else 'off'}")
        return True

    if command in ("repeat", "r"):
        enabled = controller.toggle_repeat()
        log(f"Repeat {'on' if enabled else 'off'}")
        return True

    if command == "seek":
        return handle_seek_command(controller, args)

    if command in ("vol", "volume"):
        return handle_volume_command(controller, args)

    if command == "status":
        return handle_status_command(controller)

    if command in ("list", "queue"):
        return handle_list_command(controller)

    log(f"Unknown command: {command}. Type 'help' for available commands.", level="warning")
    return True
