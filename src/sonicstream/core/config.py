"""
Configuration management for SonicStream
"""

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from loguru import logger


DEFAULT_INVIDIOUS_INSTANCES = [
    "https://inv.nadeko.net",
    "https://invidious.privacydev.net",
    "https://invidious.epicsite.xyz",
    "https://iv.ggtyler.dev",
    "https://invidious.nikkosphere.com",
    "https://yt.artemislena.eu",
    "https://invidious.perennialte.ch",
    "https://invidious.fdn.fr",
    "https://invidious.slipfox.xyz",
]


@dataclass
class SpotifyConfig:
    """Client credentials for the Spotify Web API."""

    client_id: str = ""
    client_secret: str = ""
    timeout_seconds: int = 15

    @property
    def has_credentials(self) -> bool:
        return bool(self.client_id and self.client_secret)


@dataclass
class InvidiousConfig:
    """Metadata mirrors queried before falling back to yt-dlp."""

    instances: List[str] = field(
        default_factory=lambda: list(DEFAULT_INVIDIOUS_INSTANCES)
    )
    page_cap: int = 10
    timeout_seconds: int = 12


@dataclass
class YtDlpConfig:
    """Settings for the local yt-dlp extractor."""

    binary: str = "yt-dlp"
    playlist_timeout_seconds: int = 120  # Large playlists are slow to flatten
    search_timeout_seconds: int = 30
    info_timeout_seconds: int = 30
    audio_format: str = "bestaudio[ext=m4a]/bestaudio/best"


@dataclass
class DatabaseConfig:
    """Configuration for the song catalog database."""

    path: str = ""  # Empty means <data dir>/sonicstream.db


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_file: Optional[str] = None  # Default: <data dir>/sonicstream.log
    rotation: str = "10 MB"
    retention: int = 5
    console_output: bool = True


@dataclass
class WebConfig:
    """Configuration for the HTTP server."""

    host: str = "0.0.0.0"
    port: int = 3000
    allowed_origins: List[str] = field(
        default_factory=lambda: ["http://localhost:5173"]
    )
    channel_size: int = 64  # Buffered progress events per import session


@dataclass
class Config:
    """Main configuration object."""

    spotify: SpotifyConfig = field(default_factory=SpotifyConfig)
    invidious: InvidiousConfig = field(default_factory=InvidiousConfig)
    ytdlp: YtDlpConfig = field(default_factory=YtDlpConfig)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    web: WebConfig = field(default_factory=WebConfig)


def get_config_dir() -> Path:
    """Get the configuration directory path."""
    config_home = os.environ.get("XDG_CONFIG_HOME")
    if config_home:
        return Path(config_home) / "sonicstream"
    return Path.home() / ".config" / "sonicstream"


def get_data_dir() -> Path:
    """Get the data directory path."""
    data_home = os.environ.get("XDG_DATA_HOME")
    if data_home:
        return Path(data_home) / "sonicstream"
    return Path.home() / ".local" / "share" / "sonicstream"


def _find_project_config() -> Optional[Path]:
    """Find config.toml in project root by looking for pyproject.toml.

    Returns:
        Path to config.toml in project root, or None if not found
    """
    current = Path(__file__).resolve().parent
    for parent in [current] + list(current.parents):
        if (parent / "pyproject.toml").exists():
            config_path = parent / "config.toml"
            if config_path.exists():
                return config_path
            return None
    return None


def get_config_path() -> Path:
    """Get the main configuration file path.

    Checks for config.toml in the following order:
    1. Project root (detected via pyproject.toml) - for development
    2. Current working directory
    3. XDG_CONFIG_HOME/sonicstream (or ~/.config/sonicstream)
    """
    project_config = _find_project_config()
    if project_config:
        return project_config

    local_config = Path.cwd() / "config.toml"
    if local_config.exists():
        return local_config

    return get_config_dir() / "config.toml"


def _parse_config(toml_data: dict) -> Config:
    """Build a Config from parsed TOML, keeping defaults for absent keys."""
    config = Config()

    if "spotify" in toml_data:
        spotify_data = toml_data["spotify"]
        config.spotify = SpotifyConfig(
            client_id=spotify_data.get("client_id", config.spotify.client_id),
            client_secret=spotify_data.get(
                "client_secret", config.spotify.client_secret
            ),
            timeout_seconds=spotify_data.get(
                "timeout_seconds", config.spotify.timeout_seconds
            ),
        )

    if "invidious" in toml_data:
        invidious_data = toml_data["invidious"]
        config.invidious = InvidiousConfig(
            instances=[
                str(url).rstrip("/")
                for url in invidious_data.get("instances", config.invidious.instances)
            ],
            page_cap=invidious_data.get("page_cap", config.invidious.page_cap),
            timeout_seconds=invidious_data.get(
                "timeout_seconds", config.invidious.timeout_seconds
            ),
        )

    if "ytdlp" in toml_data:
        ytdlp_data = toml_data["ytdlp"]
        config.ytdlp = YtDlpConfig(
            binary=ytdlp_data.get("binary", config.ytdlp.binary),
            playlist_timeout_seconds=ytdlp_data.get(
                "playlist_timeout_seconds", config.ytdlp.playlist_timeout_seconds
            ),
            search_timeout_seconds=ytdlp_data.get(
                "search_timeout_seconds", config.ytdlp.search_timeout_seconds
            ),
            info_timeout_seconds=ytdlp_data.get(
                "info_timeout_seconds", config.ytdlp.info_timeout_seconds
            ),
            audio_format=ytdlp_data.get("audio_format", config.ytdlp.audio_format),
        )

    if "database" in toml_data:
        database_data = toml_data["database"]
        db_path = database_data.get("path", "")
        config.database = DatabaseConfig(
            path=str(Path(db_path).expanduser()) if db_path else ""
        )

    if "logging" in toml_data:
        logging_data = toml_data["logging"]
        log_file = logging_data.get("log_file")
        if log_file:
            log_file = str(Path(log_file).expanduser())
        config.logging = LoggingConfig(
            level=logging_data.get("level", config.logging.level).upper(),
            log_file=log_file,
            rotation=logging_data.get("rotation", config.logging.rotation),
            retention=logging_data.get("retention", config.logging.retention),
            console_output=logging_data.get(
                "console_output", config.logging.console_output
            ),
        )

    if "web" in toml_data:
        web_data = toml_data["web"]
        config.web = WebConfig(
            host=web_data.get("host", config.web.host),
            port=web_data.get("port", config.web.port),
            allowed_origins=web_data.get(
                "allowed_origins", config.web.allowed_origins
            ),
            channel_size=web_data.get("channel_size", config.web.channel_size),
        )

    return config


def apply_env_overrides(config: Config) -> Config:
    """Override configuration values with environment variables if present."""
    spotify_client_id = os.environ.get("SPOTIFY_CLIENT_ID")
    spotify_client_secret = os.environ.get("SPOTIFY_CLIENT_SECRET")

    if spotify_client_id:
        config.spotify.client_id = spotify_client_id
    if spotify_client_secret:
        config.spotify.client_secret = spotify_client_secret

    db_path = os.environ.get("DB_PATH")
    if db_path:
        config.database.path = db_path

    port = os.environ.get("PORT")
    if port:
        try:
            config.web.port = int(port)
        except ValueError:
            logger.warning(f"Ignoring non-numeric PORT value: {port!r}")

    allowed_origins = os.environ.get("ALLOWED_ORIGINS")
    if allowed_origins:
        config.web.allowed_origins = [
            origin.strip() for origin in allowed_origins.split(",") if origin.strip()
        ]

    log_level = os.environ.get("LOG_LEVEL")
    if log_level:
        config.logging.level = log_level.upper()

    return config


def load_config() -> Config:
    """Load configuration from file, falling back to defaults.

    Environment variables override TOML values:
    - SPOTIFY_CLIENT_ID / SPOTIFY_CLIENT_SECRET
    - DB_PATH, PORT, ALLOWED_ORIGINS, LOG_LEVEL
    """
    from dotenv import load_dotenv

    env_path = get_config_dir() / ".env"
    if env_path.exists():
        load_dotenv(env_path)
    load_dotenv(Path.cwd() / ".env")

    config_path = get_config_path()
    config = Config()

    if config_path.exists():
        try:
            with open(config_path, "rb") as f:
                toml_data = tomllib.load(f)
            config = _parse_config(toml_data)
        except (tomllib.TOMLDecodeError, OSError, TypeError, ValueError) as e:
            logger.warning(f"Error loading configuration from {config_path}: {e}")
            logger.warning("Using default configuration.")
            config = Config()

    return apply_env_overrides(config)


def ensure_directories() -> None:
    """Ensure all necessary directories exist."""
    get_data_dir().mkdir(parents=True, exist_ok=True)
