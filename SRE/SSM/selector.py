# =============================================================================
# selector.py — Source Selection Engine
# =============================================================================
#
# MODE RULES (n = current number of sources, n >= 1):
#
#   single    → index 0                                    no state
#   random    → uniform index in [0, n)                    no state
#   sequence  → index = cursor mod n                       cursor := (cursor+1) mod n
#                                                          persisted BEFORE return
#   weighted  → draw d uniform in [0, W), W = Σ weights    no state
#               walk sources in order, d -= weight_i,
#               first source where d <= 0 wins
#
#   n == 0    → None ("no replacement"), never an exception
#
# ATOMICITY:
#   read config → select → persist cursor runs under one lock per slot, so
#   two concurrent plays of the same sequence slot can never both see the
#   same cursor.  The persist step re-reads the store under a store-wide
#   write lock and patches only this slot's cursor, so concurrent selections
#   on DIFFERENT slots cannot overwrite each other's cursors either.
# =============================================================================

from __future__ import annotations

import logging
import random
import threading
from typing import Optional

from SRE.SCM.model import (
    AudioSource, RandomSlot, SequenceSlot, SoundSlot, WeightedSlot,
)
from SRE.SCM.store import ConfigStore

logger = logging.getLogger(__name__)


# ── Pure mode rules ──────────────────────────────────────────────────────────

def weighted_index(weights: list[int], draw: float) -> int:
    """
    Index chosen by a cumulative-weight walk.

    Args:
        weights: Effective (positive) weights, in source order.
        draw:    A value in [0, sum(weights)).

    Returns:
        The first index at which the running remainder drops to <= 0.
        Falls back to 0 when float residue leaves the remainder positive.
    """
    remaining = draw
    for index, weight in enumerate(weights):
        remaining -= weight
        if remaining <= 0:
            return index
    return 0


def select_source(slot: Optional[SoundSlot],
                  rng: Optional[random.Random] = None) -> Optional[AudioSource]:
    """
    Pick one source from a slot according to its play mode.

    A SequenceSlot's cursor is advanced in place; the caller is responsible
    for persisting it (SelectionEngine does).

    Returns:
        The chosen AudioSource, or None when the slot is missing or empty.
    """
    if slot is None or not slot.sources:
        return None

    rng = rng or random
    sources = slot.sources
    count = len(sources)

    if isinstance(slot, SequenceSlot):
        index = slot.cursor % count
        slot.cursor = (index + 1) % count
        return sources[index]

    if isinstance(slot, RandomSlot):
        return sources[rng.randrange(count)]

    if isinstance(slot, WeightedSlot):
        weights = [s.effective_weight for s in sources]
        draw = rng.random() * sum(weights)
        return sources[weighted_index(weights, draw)]

    # SingleSlot, and anything unrecognised
    return sources[0]


# ── Store-backed engine ──────────────────────────────────────────────────────

class SelectionEngine:
    """
    Selection against a live ConfigStore.

    The configuration is read fresh on every call; nothing is cached.

    Usage:
        engine = SelectionEngine(JsonConfigStore("~/.vksr/config.json"))
        source = engine.select("ROOSTER")     # AudioSource or None
    """

    def __init__(self, store: ConfigStore, rng: Optional[random.Random] = None) -> None:
        self.store = store
        self._rng = rng or random.Random()
        self._slot_locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()
        self._write_lock = threading.Lock()

    def _lock_for(self, slot_id: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._slot_locks.get(slot_id)
            if lock is None:
                lock = self._slot_locks[slot_id] = threading.Lock()
            return lock

    def select(self, slot_id: str) -> Optional[AudioSource]:
        """
        Choose the replacement source for one slot.

        Returns None when replacement is disabled, the slot is unknown, or
        the slot has no sources.
        """
        with self._lock_for(slot_id):
            config = self.store.read()
            if not config.enabled:
                return None

            slot = config.slots.get(slot_id)
            source = select_source(slot, self._rng)
            if source is None:
                return None

            if isinstance(slot, SequenceSlot):
                self._persist_cursor(slot_id, slot.cursor)
            return source

    def select_url(self, slot_id: str) -> Optional[str]:
        source = self.select(slot_id)
        return source.url if source is not None else None

    def _persist_cursor(self, slot_id: str, cursor: int) -> None:
        with self._write_lock:
            config = self.store.read()
            slot = config.slots.get(slot_id)
            if not isinstance(slot, SequenceSlot):
                # Reconfigured between our read and now; nothing to advance.
                return
            slot.cursor = cursor
            try:
                self.store.write(config)
            except OSError as e:
                # The pick stands; the next play repeats it.
                logger.error(f"{slot_id}: failed to save sequence cursor: {e}")
                return
            logger.debug(f"{slot_id}: sequence cursor -> {cursor}")
