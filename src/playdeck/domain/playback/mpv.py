"""
MPV media source over JSON IPC.

Implements the MediaSource capability: commands go over mpv's IPC socket,
and progress is turned into metadata/time/ended events by polling properties.
"""

import json
import os
import socket
import subprocess
import tempfile
import threading
import time
from concurrent.futures import Future
from pathlib import Path
from typing import Any, Optional

from loguru import logger

from .exceptions import PlaybackRejected
from .media import MediaEvent, MediaSourceBase

# Seconds to wait for mpv to create its IPC socket
SOCKET_TIMEOUT = 5.0

# Time updates smaller than this are not reported
TIME_EPSILON = 0.05


def check_mpv_available() -> bool:
    """Check if MPV is available on the system."""
    try:
        result = subprocess.run(
            ["mpv", "--version"], capture_output=True, text=True, timeout=5
        )
        return result.returncode == 0
    except (subprocess.SubprocessError, FileNotFoundError, OSError):
        return False


def _request(socket_path: Optional[str], command: dict[str, Any]) -> Optional[dict]:
    """Send one JSON IPC command and return the decoded reply."""
    if not socket_path or not os.path.exists(socket_path):
        return None

    try:
        sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        sock.settimeout(2.0)
        sock.connect(socket_path)
        sock.send((json.dumps(command) + "\n").encode("utf-8"))
        response = sock.recv(4096).decode("utf-8").strip()
        sock.close()
    except (socket.error, OSError):
        return None

    # mpv may interleave event lines; the reply is the line carrying "error"
    for line in response.splitlines():
        try:
            data = json.loads(line)
        except json.JSONDecodeError:
            continue
        if "error" in data:
            return data
    return None


def send_mpv_command(socket_path: Optional[str], command: dict[str, Any]) -> bool:
    """Send JSON IPC command to MPV."""
    reply = _request(socket_path, command)
    return reply is not None and reply.get("error") == "success"


def get_mpv_property(socket_path: Optional[str], property_name: str) -> Any:
    """Get a property value from MPV."""
    reply = _request(socket_path, {"command": ["get_property", property_name]})
    if reply and reply.get("error") == "success":
        return reply.get("data")
    return None


class MpvMediaSource(MediaSourceBase):
    """Media source backed by an mpv subprocess."""

    def __init__(self, socket_path: Optional[str] = None, volume: float = 1.0) -> None:
        super().__init__()
        if not socket_path:
            socket_path = str(Path(tempfile.gettempdir()) / f"playdeck-mpv-{os.getpid()}")
        self.socket_path = socket_path
        self.process: Optional[subprocess.Popen] = None
        self._initial_volume = volume
        self._lock = threading.Lock()  # guards load state shared with the poller
        self._locator: Optional[str] = None
        self._generation = 0  # bumped by every load()
        self._metadata_sent = False
        self._ended_sent = False
        self._last_time: Optional[float] = None

    # -- process lifecycle -----------------------------------------------------

    def start(self) -> bool:
        """Start mpv in idle mode with JSON IPC."""
        logger.info(f"Starting MPV player with socket: {self.socket_path}")

        if os.path.exists(self.socket_path):
            logger.debug(f"Removing existing socket: {self.socket_path}")
            os.unlink(self.socket_path)

        cmd = [
            "mpv",
            "--idle=yes",
            "--no-video",
            "--no-terminal",
            f"--input-ipc-server={self.socket_path}",
            f"--volume={round(self._initial_volume * 100)}",
            "--keep-open=yes",
            "--pause=yes",
            "--load-scripts=no",
        ]

        try:
            self.process = subprocess.Popen(
                cmd,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                stdin=subprocess.DEVNULL,
            )
        except (subprocess.SubprocessError, OSError) as e:
            logger.error(f"Failed to start MPV: {e}")
            return False

        start_time = time.time()
        while not os.path.exists(self.socket_path):
            if time.time() - start_time > SOCKET_TIMEOUT:
                logger.error(f"MPV socket creation timeout after {SOCKET_TIMEOUT}s")
                self.process.kill()
                return False
            time.sleep(0.1)

        if get_mpv_property(self.socket_path, "idle-active") is None:
            logger.error("MPV socket connection test failed")
            self.process.kill()
            return False

        logger.info("MPV started successfully")
        return True

    def stop(self) -> None:
        """Stop MPV process and cleanup."""
        if self.process:
            try:
                self.process.kill()
                self.process.wait(timeout=2.0)
            except (OSError, subprocess.TimeoutExpired):
                pass

        if os.path.exists(self.socket_path):
            try:
                os.unlink(self.socket_path)
            except OSError:
                pass

    def is_running(self) -> bool:
        if not self.process or self.process.poll() is not None:
            return False
        return os.path.exists(self.socket_path)

    # -- MediaSource capability --------------------------------------------------

    def load(self, locator: str) -> None:
        with self._lock:
            self._locator = locator
            self._generation += 1
            self._metadata_sent = False
            self._ended_sent = False
            self._last_time = None
        if not send_mpv_command(self.socket_path, {"command": ["loadfile", locator, "replace"]}):
            logger.error(f"MPV failed to load {locator}")
        send_mpv_command(self.socket_path, {"command": ["set_property", "pause", True]})

    def play(self) -> "Future[bool]":
        future: "Future[bool]" = Future()
        if self.is_running() and send_mpv_command(
            self.socket_path, {"command": ["set_property", "pause", False]}
        ):
            future.set_result(True)
        else:
            future.set_exception(PlaybackRejected("MPV refused to start playback"))
        return future

    def pause(self) -> None:
        send_mpv_command(self.socket_path, {"command": ["set_property", "pause", True]})

    @property
    def current_time(self) -> float:
        return get_mpv_property(self.socket_path, "time-pos") or 0.0

    @current_time.setter
    def current_time(self, value: float) -> None:
        if not send_mpv_command(self.socket_path, {"command": ["seek", value, "absolute"]}):
            return
        rewound = value < self.duration
        with self._lock:
            self._last_time = value
            if rewound:
                self._ended_sent = False

    @property
    def volume(self) -> float:
        value = get_mpv_property(self.socket_path, "volume")
        return (value / 100.0) if value is not None else self._initial_volume

    @volume.setter
    def volume(self, value: float) -> None:
        send_mpv_command(
            self.socket_path, {"command": ["set_property", "volume", round(value * 100)]}
        )

    @property
    def duration(self) -> float:
        return get_mpv_property(self.socket_path, "duration") or 0.0

    # -- event polling -----------------------------------------------------------

    def poll(self) -> None:
        """Read mpv properties once and emit metadata/time/ended events.

        Events carry the locator the properties were read for. A poll that
        overlaps a load() emits nothing; the next poll reads the new file.
        """
        with self._lock:
            locator = self._locator
            generation = self._generation
        if locator is None or not self.is_running():
            return

        # until mpv reports the new path, duration and position belong to the old file
        if get_mpv_property(self.socket_path, "path") != locator:
            return
        duration = get_mpv_property(self.socket_path, "duration")
        position = get_mpv_property(self.socket_path, "time-pos")
        eof_reached = get_mpv_property(self.socket_path, "eof-reached") is True

        events = []
        with self._lock:
            if generation != self._generation:
                return

            if not self._metadata_sent:
                if not duration or duration <= 0:
                    return
                self._metadata_sent = True
                events.append((MediaEvent.METADATA_READY, float(duration)))

            if position is not None and (
                self._last_time is None or abs(position - self._last_time) >= TIME_EPSILON
            ):
                self._last_time = position
                events.append((MediaEvent.TIME_UPDATED, float(position)))

            if eof_reached and not self._ended_sent:
                self._ended_sent = True
                events.append((MediaEvent.ENDED,))

        for event, *args in events:
            if event is MediaEvent.METADATA_READY:
                logger.info(f"Metadata loaded for {locator}: duration={args[0]:.2f}s")
            self._emit(event, *args, locator=locator)


def start_poller(source: MpvMediaSource, interval: float) -> threading.Event:
    """Poll the source on a daemon thread until the returned event is set."""
    stop = threading.Event()

    def _run() -> None:
        threading.current_thread().silent_logging = True
        while not stop.wait(interval):
            try:
                source.poll()
            except Exception:
                logger.exception("MPV poll failed")

    thread = threading.Thread(target=_run, name="mpv-poller", daemon=True)
    thread.start()
    return stop
