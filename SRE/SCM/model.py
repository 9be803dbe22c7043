# =============================================================================
# model.py — SCM Data Model
# =============================================================================
#
# A Configuration maps slot identifiers (SMM.SOUND_FILES) to SoundSlots.
# A SoundSlot is a tagged variant over the four play modes:
#
#   SingleSlot    — sources only
#   RandomSlot    — sources only
#   SequenceSlot  — sources + cursor   ← the ONLY mode with mutable state
#   WeightedSlot  — sources only
#
# The cursor is stored raw and reduced modulo len(sources) at use time,
# because sources may have been removed since it was last advanced.
#
# JSON shape (same as the browser settings export):
#   {
#     "enabled": true,
#     "sounds": {
#       "ROOSTER": {
#         "mode": "weighted",
#         "sources": [{"url": "...", "weight": 3, "name": "..."}],
#         "sequenceIndex": 0
#       }
#     }
#   }
# =============================================================================

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Optional
from urllib.parse import unquote

from SRE.SMM.constants import (
    DEFAULT_PRESET_SLOT, DEFAULT_PRESET_SOURCE, DEFAULT_WEIGHT,
    MODE_RANDOM, MODE_SEQUENCE, MODE_SINGLE, MODE_WEIGHTED,
    SOUND_FILES,
)

logger = logging.getLogger(__name__)


class ConfigError(ValueError):
    """Raised when persisted configuration data has the wrong shape."""


# ── Sources ──────────────────────────────────────────────────────────────────

@dataclass
class AudioSource:
    """One candidate sound: a remote URL, a data: URL, or a local path."""

    url:    str
    weight: int = DEFAULT_WEIGHT
    name:   Optional[str] = None

    @property
    def effective_weight(self) -> int:
        """Weight used by weighted draws; unset or non-positive counts as 1."""
        if isinstance(self.weight, bool) or not isinstance(self.weight, int):
            return DEFAULT_WEIGHT
        return self.weight if self.weight > 0 else DEFAULT_WEIGHT

    @property
    def is_inline(self) -> bool:
        return self.url.startswith("data:")

    @property
    def display_name(self) -> str:
        if self.name:
            return self.name
        if self.is_inline:
            return "Local Audio"
        path = self.url.split("?", 1)[0].split("#", 1)[0]
        tail = unquote(path.rsplit("/", 1)[-1])
        if tail:
            return tail
        return self.url[:30] + ("..." if len(self.url) > 30 else "")

    def to_dict(self) -> dict:
        out = {"url": self.url, "weight": self.weight}
        if self.name is not None:
            out["name"] = self.name
        return out

    @classmethod
    def from_dict(cls, data) -> "AudioSource":
        if not isinstance(data, dict):
            raise ConfigError(f"source must be an object, got {type(data).__name__}")
        url = data.get("url", "")
        if not isinstance(url, str):
            raise ConfigError(f"source url must be a string, got {url!r}")

        weight = data.get("weight", DEFAULT_WEIGHT)
        if (isinstance(weight, bool) or not isinstance(weight, (int, float))
                or not math.isfinite(weight)):
            weight = DEFAULT_WEIGHT
        name = data.get("name")
        return cls(url=url, weight=int(weight),
                   name=name if isinstance(name, str) else None)


# ── Slots ────────────────────────────────────────────────────────────────────

@dataclass
class SoundSlot:
    """Base of the four mode variants. Use the subclasses."""

    sources: list[AudioSource] = field(default_factory=list)

    mode = MODE_SINGLE

    @property
    def is_empty(self) -> bool:
        return not self.sources

    def to_dict(self) -> dict:
        return {
            "mode":          self.mode,
            "sources":       [s.to_dict() for s in self.sources],
            "sequenceIndex": 0,
        }


@dataclass
class SingleSlot(SoundSlot):
    mode = MODE_SINGLE


@dataclass
class RandomSlot(SoundSlot):
    mode = MODE_RANDOM


@dataclass
class SequenceSlot(SoundSlot):
    cursor: int = 0

    mode = MODE_SEQUENCE

    def to_dict(self) -> dict:
        out = super().to_dict()
        out["sequenceIndex"] = self.cursor
        return out


@dataclass
class WeightedSlot(SoundSlot):
    mode = MODE_WEIGHTED


SLOT_TYPES = {
    MODE_SINGLE:   SingleSlot,
    MODE_RANDOM:   RandomSlot,
    MODE_SEQUENCE: SequenceSlot,
    MODE_WEIGHTED: WeightedSlot,
}


def slot_from_dict(data) -> SoundSlot:
    """Build the right SoundSlot variant from its JSON object."""
    if not isinstance(data, dict):
        raise ConfigError(f"sound config must be an object, got {type(data).__name__}")

    raw_sources = data.get("sources", [])
    if not isinstance(raw_sources, list):
        raise ConfigError("sound config 'sources' must be a list")
    sources = [AudioSource.from_dict(s) for s in raw_sources]

    mode = data.get("mode") or MODE_SINGLE
    if not isinstance(mode, str) or mode not in SLOT_TYPES:
        logger.warning(f"Unknown play mode {mode!r}, treating as {MODE_SINGLE!r}")
        mode = MODE_SINGLE

    if mode == MODE_SEQUENCE:
        cursor = data.get("sequenceIndex", 0)
        if isinstance(cursor, bool) or not isinstance(cursor, int) or cursor < 0:
            cursor = 0
        return SequenceSlot(sources=sources, cursor=cursor)
    return SLOT_TYPES[mode](sources=sources)


# ── Configuration ────────────────────────────────────────────────────────────

@dataclass
class Configuration:
    enabled: bool = True
    slots:   dict[str, SoundSlot] = field(default_factory=dict)

    def ensure_slots(self) -> "Configuration":
        """Give every known slot a (possibly empty) entry. Returns self."""
        for sound in SOUND_FILES:
            if sound not in self.slots:
                self.slots[sound] = SingleSlot()
        return self

    def to_dict(self) -> dict:
        return {
            "enabled": self.enabled,
            "sounds":  {sid: slot.to_dict() for sid, slot in self.slots.items()},
        }

    @classmethod
    def from_dict(cls, data) -> "Configuration":
        if not isinstance(data, dict):
            raise ConfigError(f"configuration must be an object, got {type(data).__name__}")
        sounds = data.get("sounds", {})
        if not isinstance(sounds, dict):
            raise ConfigError("configuration 'sounds' must be an object")

        config = cls(
            enabled=bool(data.get("enabled", True)),
            slots={str(sid): slot_from_dict(raw) for sid, raw in sounds.items()},
        )
        return config.ensure_slots()


def default_configuration() -> Configuration:
    """Fresh-install configuration: everything empty except the cow preset."""
    config = Configuration(enabled=True)
    for sound in SOUND_FILES:
        if sound == DEFAULT_PRESET_SLOT:
            config.slots[sound] = SingleSlot(
                sources=[AudioSource.from_dict(DEFAULT_PRESET_SOURCE)]
            )
        else:
            config.slots[sound] = SingleSlot()
    return config
