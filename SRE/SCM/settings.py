"""
Runtime settings for the Sound Replacement Engine.

Reads a .env file (VKSR_ENV_FILE, default ./.env) and then environment
variables, with sensible defaults for everything.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_ENV_FILE = ".env"
LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

logger = logging.getLogger(__name__)


def _load_env_file():
    """Load variables from the .env file if it exists (never overrides)."""
    env_path = Path(os.getenv("VKSR_ENV_FILE", DEFAULT_ENV_FILE))
    if env_path.exists():
        load_dotenv(env_path, override=False)


def _env_int(name: str, default: int, minimum: int = 0) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}, got {value}")
    return value


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")
    return value


@dataclass
class ReplacerSettings:
    """Settings loaded from .env file and environment variables."""

    # Storage
    config_path: str = "~/.vksr/config.json"

    # Export
    platform: str = "windows"
    fetch_timeout: float = 15.0
    export_workers: int = 4

    # HTTP bridge
    host: str = "127.0.0.1"
    port: int = 5000
    upstream: str = ""

    # Logging
    log_level: str = "INFO"

    @classmethod
    def load(cls) -> "ReplacerSettings":
        """
        Load settings from the .env file and environment variables.

        Raises:
            ValueError: If a numeric variable cannot be parsed.
        """
        _load_env_file()
        defaults = cls()
        settings = cls(
            config_path=os.getenv("VKSR_CONFIG_PATH", defaults.config_path),
            platform=os.getenv("VKSR_PLATFORM", defaults.platform).strip().lower(),
            fetch_timeout=_env_float("VKSR_FETCH_TIMEOUT", defaults.fetch_timeout),
            export_workers=_env_int("VKSR_EXPORT_WORKERS", defaults.export_workers, minimum=1),
            host=os.getenv("VKSR_HOST", defaults.host),
            port=_env_int("VKSR_PORT", defaults.port, minimum=1),
            upstream=os.getenv("VKSR_UPSTREAM", defaults.upstream).rstrip("/"),
            log_level=os.getenv("VKSR_LOG_LEVEL", defaults.log_level).upper(),
        )
        logger.debug(f"Settings loaded: {settings}")
        return settings


def configure_logging(level: str = "INFO") -> None:
    """Install the project log format on the root logger."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
