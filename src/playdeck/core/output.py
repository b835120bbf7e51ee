"""
Unified output system using Loguru.
User-facing messages go to the console and the log file; everything else is file-only.
"""

import sys
import threading
from pathlib import Path
from typing import Optional

from loguru import logger
from rich.console import Console

from .config import LoggingConfig, get_data_dir

_console: Optional[Console] = None

_LEVEL_STYLES = {
    "debug": "cyan",
    "info": None,
    "warning": "yellow",
    "error": "red",
}


def get_console() -> Console:
    """Shared Rich console for everything printed to the user."""
    global _console
    if _console is None:
        _console = Console()
    return _console


def safe_print(message: str, style: Optional[str] = None, markup: bool = False) -> None:
    """Print a line to the console.

    Markup is off by default: track titles and status lines contain
    square brackets that Rich would otherwise eat as tags.
    """
    get_console().print(message, style=style, markup=markup, highlight=False)


def get_log_file_path() -> Path:
    """Get the default path to the log file."""
    return get_data_dir() / "playdeck.log"


def setup_loguru(
    log_file: Optional[Path] = None,
    level: str = "INFO",
    max_file_size_mb: int = 10,
    backup_count: int = 5,
    console_output: bool = False,
) -> Path:
    """
    Configure loguru with a rotating file sink and an optional stderr sink.

    Args:
        log_file: Path to log file (default: ~/.local/share/playdeck/playdeck.log)
        level: Minimum level (DEBUG, INFO, WARNING, ERROR)
        max_file_size_mb: Rotate the file once it reaches this size
        backup_count: Number of rotated files to keep
        console_output: Also log to stderr

    Returns:
        The log file path in use
    """
    log_file = log_file or get_log_file_path()
    log_file.parent.mkdir(parents=True, exist_ok=True)

    logger.remove()

    logger.add(
        log_file,
        rotation=f"{max_file_size_mb} MB",
        retention=backup_count,
        level=level.upper(),
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{line} | {message}",
        enqueue=False,
    )

    if console_output:
        logger.add(sys.stderr, level=level.upper(), format="{level}: {message}")

    logger.info(f"Loguru initialized: {log_file} (level={level})")
    return log_file


def setup_from_config(config: LoggingConfig) -> Path:
    """Configure logging from the [logging] config section."""
    log_file = Path(config.log_file).expanduser() if config.log_file else None
    return setup_loguru(
        log_file=log_file,
        level=config.level,
        max_file_size_mb=config.max_file_size_mb,
        backup_count=config.backup_count,
        console_output=config.console_output,
    )


def log(message: str, level: str = "info") -> None:
    """
    Unified logging: writes to the log file AND prints to the console.

    Background threads that set `silent_logging = True` on themselves only
    write to the log file.

    Args:
        message: User-facing message
        level: Log level (debug, info, warning, error)
    """
    log_func = getattr(logger, level)
    log_func(message)

    if getattr(threading.current_thread(), "silent_logging", False):
        return

    safe_print(message, style=_LEVEL_STYLES.get(level))
