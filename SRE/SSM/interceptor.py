"""
Playback interception: recognise /api/sounds/<NAME> requests and swap in
the configured replacement.
"""

from __future__ import annotations

import logging
import re
from typing import Optional

from SRE.SMM.constants import SOUND_FILES, SOUND_URL_PATTERN
from SRE.SSM.selector import SelectionEngine

logger = logging.getLogger(__name__)

_SOUND_URL_RE = re.compile(SOUND_URL_PATTERN, re.IGNORECASE)


def extract_sound_name(url) -> Optional[str]:
    """Slot identifier named by a playback URL, or None if it names none we know."""
    if not url or not isinstance(url, str):
        return None
    match = _SOUND_URL_RE.search(url)
    if match and match.group(1).upper() in SOUND_FILES:
        return match.group(1).upper()
    return None


class PlaybackInterceptor:
    """Sits where the host creates an audio player and rewrites its source."""

    def __init__(self, engine: SelectionEngine):
        self.engine = engine

    def intercept(self, src: Optional[str]) -> Optional[str]:
        """
        Return the URL the host should actually play.

        Unrecognised URLs, disabled replacement and empty slots all fall
        through to the original ``src`` unchanged.
        """
        sound_name = extract_sound_name(src)
        if sound_name is None:
            return src

        replacement = self.engine.select_url(sound_name)
        if not replacement:
            return src

        logger.info(f"Replacing sound: {sound_name}")
        return replacement
