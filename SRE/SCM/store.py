"""
Configuration storage for the Sound Replacement Engine.

One logical Configuration per process. Every read parses the persisted
document afresh, so edits made through another surface (the HTTP bridge,
a text editor, a second process) are visible on the very next selection.
Malformed or missing data never surfaces as an error: readers get the
default configuration instead.
"""

from __future__ import annotations

import json
import logging
import os
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from SRE.SCM.model import ConfigError, Configuration, default_configuration

logger = logging.getLogger(__name__)


class ConfigStore(ABC):
    """Synchronous read / write access to the persisted Configuration."""

    @abstractmethod
    def read(self) -> Configuration:
        """Return the current configuration, or defaults if absent/corrupt."""

    @abstractmethod
    def write(self, config: Configuration) -> None:
        """Persist the configuration."""


class JsonConfigStore(ConfigStore):
    """
    JSON file store with atomic writes.

    Writes go to a temporary file first and are moved over the target with
    os.replace, so a crash mid-write never leaves a truncated document.
    """

    def __init__(self, path: str | os.PathLike):
        self.path = Path(path).expanduser()
        self._lock = threading.Lock()
        logger.debug(f"JsonConfigStore initialized with path: {self.path}")

    def read(self) -> Configuration:
        if not self.path.exists():
            logger.debug(f"No config file at {self.path}, using defaults")
            return default_configuration()

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return Configuration.from_dict(data)
        except (OSError, ValueError) as e:
            # ConfigError and json.JSONDecodeError are both ValueErrors
            logger.warning(f"Failed to load config from {self.path}: {e}")
            return default_configuration()

    def write(self, config: Configuration) -> None:
        tmp = self.path.with_name(self.path.name + ".tmp")
        with self._lock:
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                with open(tmp, "w", encoding="utf-8") as f:
                    json.dump(config.to_dict(), f, indent=2, ensure_ascii=False)
                os.replace(tmp, self.path)
                logger.debug(f"Config saved to {self.path}")
            except OSError as e:
                logger.error(f"Failed to save config: {e}")
                if tmp.is_file():
                    tmp.unlink()
                raise


class MemoryConfigStore(ConfigStore):
    """
    In-process store. Holds the serialised document, not the objects, so
    every read() hands out an independent Configuration exactly like the
    file store does.
    """

    def __init__(self, config: Optional[Configuration] = None):
        self._data: Optional[dict] = config.to_dict() if config is not None else None
        self._lock = threading.Lock()
        self.writes = 0

    def read(self) -> Configuration:
        with self._lock:
            data = self._data
        if data is None:
            return default_configuration()
        try:
            return Configuration.from_dict(json.loads(json.dumps(data)))
        except ConfigError as e:
            logger.warning(f"Stored configuration is invalid: {e}")
            return default_configuration()

    def write(self, config: Configuration) -> None:
        with self._lock:
            self._data = config.to_dict()
            self.writes += 1


# ── Import / export ──────────────────────────────────────────────────────────

def export_config_json(store: ConfigStore) -> str:
    """The current configuration as indented JSON text."""
    return json.dumps(store.read().to_dict(), indent=2, ensure_ascii=False)


def import_config_json(store: ConfigStore, text: str) -> bool:
    """
    Replace the stored configuration with the given JSON text.

    Returns False (and leaves the store untouched) when the text is not a
    valid configuration document.
    """
    try:
        config = Configuration.from_dict(json.loads(text))
    except ValueError as e:
        logger.error(f"Failed to import config: {e}")
        return False
    store.write(config)
    return True
