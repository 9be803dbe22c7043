"""
Driver-script generator interface.

A generator turns the per-slot export table into a script that reproduces
the four selection modes on the target OS, where the notification sound is
played by a process we cannot hook.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

PLATFORM_NAMES = {
    "windows": "Windows",
    "macos":   "macOS",
    "linux":   "Linux",
}


@dataclass
class AudioFileInfo:
    """What the driver script needs to know about one exported slot."""

    target_filename: str                 # e.g. sound-cow-mooing.wav
    source_files:    list[str] = field(default_factory=list)   # under sounds/
    weights:         list[int] = field(default_factory=list)
    mode:            str = "single"


class PlatformScriptGenerator(ABC):
    platform: str = ""
    script_filename: str = ""

    @property
    def display_name(self) -> str:
        return PLATFORM_NAMES.get(self.platform, self.platform)

    @abstractmethod
    def generate_script(self, audio_infos: list[AudioFileInfo]) -> str:
        """Script text embedding the slot table."""

    @abstractmethod
    def generate_readme(self) -> str:
        """README.md text shipped next to the script."""
