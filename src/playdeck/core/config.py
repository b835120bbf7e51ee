"""
Configuration management for playdeck
"""

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional


@dataclass
class PlayerConfig:
    """Configuration for the media source and playback defaults."""

    mpv_socket_path: Optional[str] = None
    volume: float = 1.0  # 0.0 - 1.0
    shuffle_on_start: bool = False
    repeat_on_start: bool = False
    poll_interval: float = 0.25  # seconds between mpv property polls

    def validate(self) -> None:
        """Validate player configuration values.

        Raises:
            ValueError: If configuration values are invalid
        """
        if not 0.0 <= self.volume <= 1.0:
            raise ValueError(f"Invalid volume {self.volume}: must be between 0.0 and 1.0")
        if self.poll_interval <= 0:
            raise ValueError(f"Invalid poll_interval {self.poll_interval}: must be positive")


@dataclass
class CatalogConfig:
    """Configuration for where tracks come from."""

    source: str = "local"  # 'local' or 'http'
    base_url: str = "http://localhost:3000"
    library_path: str = field(default_factory=lambda: str(Path.home() / "Music"))
    supported_formats: List[str] = field(
        default_factory=lambda: [".mp3", ".m4a", ".wav", ".flac", ".ogg", ".opus"]
    )
    timeout: float = 10.0

    def validate(self) -> None:
        """Validate catalog configuration values.

        Raises:
            ValueError: If configuration values are invalid
        """
        valid_sources = {"local", "http"}
        if self.source not in valid_sources:
            raise ValueError(
                f"Invalid catalog source: {self.source!r}. "
                f"Valid sources are: {valid_sources}"
            )


@dataclass
class SessionConfig:
    """Configuration for session snapshot persistence."""

    enabled: bool = True
    snapshot_file: Optional[str] = None  # default: <data dir>/session.json


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_file: Optional[str] = None  # default: ~/.local/share/playdeck/playdeck.log
    max_file_size_mb: int = 10
    backup_count: int = 5
    console_output: bool = False


@dataclass
class Config:
    """Main configuration object."""

    player: PlayerConfig = field(default_factory=PlayerConfig)
    catalog: CatalogConfig = field(default_factory=CatalogConfig)
    session: SessionConfig = field(default_factory=SessionConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def get_config_dir() -> Path:
    """Get the configuration directory path."""
    config_home = os.environ.get("XDG_CONFIG_HOME")
    if config_home:
        return Path(config_home) / "playdeck"
    return Path.home() / ".config" / "playdeck"


def get_data_dir() -> Path:
    """Get the data directory path."""
    data_home = os.environ.get("XDG_DATA_HOME")
    if data_home:
        return Path(data_home) / "playdeck"
    return Path.home() / ".local" / "share" / "playdeck"


def _find_project_config() -> Optional[Path]:
    """Find config.toml next to pyproject.toml when running from a checkout."""
    current = Path(__file__).resolve().parent
    for parent in [current] + list(current.parents):
        if (parent / "pyproject.toml").exists():
            config_path = parent / "config.toml"
            return config_path if config_path.exists() else None
    return None


def get_config_path() -> Path:
    """Get the main configuration file path.

    Checks for config.toml in the following order:
    1. Project root (detected via pyproject.toml) - for development
    2. Current working directory
    3. XDG_CONFIG_HOME/playdeck (or ~/.config/playdeck)
    """
    project_config = _find_project_config()
    if project_config:
        return project_config

    local_config = Path.cwd() / "config.toml"
    if local_config.exists():
        return local_config

    return get_config_dir() / "config.toml"


def get_snapshot_path(config: Config) -> Path:
    """Resolve where the session snapshot is stored."""
    if config.session.snapshot_file:
        return Path(config.session.snapshot_file).expanduser()
    return get_data_dir() / "session.json"


def create_default_config() -> str:
    """Create a default configuration TOML content."""
    return """
# playdeck Configuration

[player]
# Path for mpv socket (auto-detected if not specified)
# mpv_socket_path = "/tmp/playdeck-mpv"

# Initial volume (0.0 - 1.0), overridden by a restored session
volume = 1.0

# Start with shuffle / repeat enabled when there is no saved session
shuffle_on_start = false
repeat_on_start = false

# Seconds between mpv progress polls
poll_interval = 0.25

[catalog]
# Where tracks come from: "local" (scan library_path) or "http" (base_url/api/tracks)
source = "local"
base_url = "http://localhost:3000"
library_path = "~/Music"
supported_formats = [".mp3", ".m4a", ".wav", ".flac", ".ogg", ".opus"]

# HTTP request timeout in seconds
timeout = 10.0

[session]
# Save and restore the queue, position and volume between runs
enabled = true

# Custom snapshot path (default: ~/.local/share/playdeck/session.json)
# snapshot_file = "/path/to/session.json"

[logging]
# Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
level = "INFO"

# Custom log file path (default: ~/.local/share/playdeck/playdeck.log)
# log_file = "/path/to/custom/playdeck.log"

# Maximum log file size in MB before rotation
max_file_size_mb = 10

# Number of rotated log files to keep
backup_count = 5

# Also output logs to stderr (useful for debugging)
console_output = false
""".strip()


def parse_config(toml_data: dict) -> Config:
    """Build a Config from parsed TOML data, falling back to defaults per key."""
    config = Config()

    if "player" in toml_data:
        player_data = toml_data["player"]
        config.player = PlayerConfig(
            mpv_socket_path=player_data.get("mpv_socket_path"),
            volume=float(player_data.get("volume", config.player.volume)),
            shuffle_on_start=player_data.get(
                "shuffle_on_start", config.player.shuffle_on_start
            ),
            repeat_on_start=player_data.get(
                "repeat_on_start", config.player.repeat_on_start
            ),
            poll_interval=float(
                player_data.get("poll_interval", config.player.poll_interval)
            ),
        )
        config.player.validate()

    if "catalog" in toml_data:
        catalog_data = toml_data["catalog"]
        config.catalog = CatalogConfig(
            source=catalog_data.get("source", config.catalog.source),
            base_url=catalog_data.get("base_url", config.catalog.base_url),
            library_path=str(
                Path(
                    catalog_data.get("library_path", config.catalog.library_path)
                ).expanduser()
            ),
            supported_formats=catalog_data.get(
                "supported_formats", config.catalog.supported_formats
            ),
            timeout=float(catalog_data.get("timeout", config.catalog.timeout)),
        )
        config.catalog.validate()

    if "session" in toml_data:
        session_data = toml_data["session"]
        config.session = SessionConfig(
            enabled=session_data.get("enabled", config.session.enabled),
            snapshot_file=session_data.get("snapshot_file"),
        )

    if "logging" in toml_data:
        logging_data = toml_data["logging"]
        config.logging = LoggingConfig(
            level=logging_data.get("level", config.logging.level),
            log_file=logging_data.get("log_file"),
            max_file_size_mb=logging_data.get(
                "max_file_size_mb", config.logging.max_file_size_mb
            ),
            backup_count=logging_data.get("backup_count", config.logging.backup_count),
            console_output=logging_data.get(
                "console_output", config.logging.console_output
            ),
        )

    return config


def apply_env_overrides(config: Config) -> Config:
    """Override TOML values with environment variables.

    - PLAYDECK_CATALOG_URL: switches the catalog to http with this base URL
    - PLAYDECK_LIBRARY_PATH: local library directory
    - PLAYDECK_LOG_LEVEL: logging level
    """
    catalog_url = os.environ.get("PLAYDECK_CATALOG_URL")
    library_path = os.environ.get("PLAYDECK_LIBRARY_PATH")
    log_level = os.environ.get("PLAYDECK_LOG_LEVEL")

    if catalog_url:
        config.catalog.source = "http"
        config.catalog.base_url = catalog_url
    if library_path:
        config.catalog.library_path = str(Path(library_path).expanduser())
    if log_level:
        config.logging.level = log_level.upper()

    return config


def load_config(config_path: Optional[Path] = None) -> Config:
    """Load configuration from file or create default.

    Environment variables (including a .env file in the config directory)
    override TOML values, see apply_env_overrides().
    """
    from dotenv import load_dotenv

    env_path = get_config_dir() / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    config_path = config_path or get_config_path()

    if not config_path.exists():
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w", encoding="utf-8") as f:
            f.write(create_default_config())
        print(f"Created default configuration at: {config_path}")
        return apply_env_overrides(Config())

    try:
        with open(config_path, "rb") as f:
            toml_data = tomllib.load(f)
        config = parse_config(toml_data)
    except (OSError, tomllib.TOMLDecodeError, ValueError, TypeError) as e:
        print(f"Error loading configuration from {config_path}: {e}")
        print("Using default configuration.")
        config = Config()

    return apply_env_overrides(config)


def ensure_directories() -> None:
    """Ensure all necessary directories exist."""
    get_config_dir().mkdir(parents=True, exist_ok=True)
    get_data_dir().mkdir(parents=True, exist_ok=True)
