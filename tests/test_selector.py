"""Tests for SRE.SSM.selector: the four play modes and the store-backed engine."""

import random
import threading
from collections import Counter

from SRE.SCM.model import (
    AudioSource, Configuration, RandomSlot, SequenceSlot, SingleSlot, WeightedSlot,
)
from SRE.SCM.store import JsonConfigStore, MemoryConfigStore
from SRE.SSM.selector import SelectionEngine, select_source, weighted_index


def _store_with(slot_id, slot, enabled=True):
    config = Configuration(enabled=enabled).ensure_slots()
    config.slots[slot_id] = slot
    return MemoryConfigStore(config)


class TestModeRules:
    def test_single_always_first(self, three_sources, rng):
        slot = SingleSlot(sources=three_sources)
        assert all(select_source(slot, rng) is three_sources[0] for _ in range(100))

    def test_empty_slot_is_no_replacement(self, rng):
        for slot in (SingleSlot(), RandomSlot(), SequenceSlot(cursor=5), WeightedSlot()):
            assert select_source(slot, rng) is None
        assert select_source(None, rng) is None

    def test_random_covers_every_source(self, three_sources, rng):
        slot = RandomSlot(sources=three_sources)
        seen = Counter(select_source(slot, rng).url for _ in range(600))
        assert set(seen) == {s.url for s in three_sources}
        assert all(count > 120 for count in seen.values())

    def test_sequence_wraps(self, three_sources):
        slot = SequenceSlot(sources=three_sources)
        picks = [three_sources.index(select_source(slot)) for _ in range(7)]
        assert picks == [0, 1, 2, 0, 1, 2, 0]
        assert slot.cursor == 1

    def test_sequence_cursor_reduced_after_sources_shrink(self, three_sources):
        slot = SequenceSlot(sources=three_sources[:2], cursor=5)
        assert select_source(slot) is three_sources[1]      # 5 mod 2 = 1
        assert slot.cursor == 0

    def test_weighted_index_walk(self):
        assert weighted_index([1, 3], 0.0) == 0
        assert weighted_index([1, 3], 1.0) == 0
        assert weighted_index([1, 3], 1.0001) == 1
        assert weighted_index([1, 3], 3.999) == 1

    def test_weighted_index_falls_back_to_first(self):
        assert weighted_index([1, 1], 2.0000001) == 0

    def test_weighted_distribution(self, rng):
        slot = WeightedSlot(sources=[AudioSource("a", weight=1), AudioSource("b", weight=3)])
        hits = sum(select_source(slot, rng).url == "b" for _ in range(4000))
        assert 0.71 <= hits / 4000 <= 0.79

    def test_weighted_non_positive_weight_counts_as_one(self, rng):
        slot = WeightedSlot(sources=[AudioSource("a", weight=0), AudioSource("b", weight=-4)])
        hits = sum(select_source(slot, rng).url == "a" for _ in range(2000))
        assert 0.44 <= hits / 2000 <= 0.56

    def test_weighted_uses_rng_random(self):
        class Fixed(random.Random):
            def random(self):
                return 0.5

        slot = WeightedSlot(sources=[AudioSource("a", weight=1), AudioSource("b", weight=1)])
        # draw = 0.5 * 2 = 1.0 ; 1.0 - 1 = 0 <= 0 -> first source
        assert select_source(slot, Fixed()).url == "a"


class TestSelectionEngine:
    def test_disabled_configuration_selects_nothing(self, three_sources):
        store = _store_with("ROOSTER", SingleSlot(sources=three_sources), enabled=False)
        assert SelectionEngine(store).select("ROOSTER") is None

    def test_unknown_slot_selects_nothing(self, memory_store):
        assert SelectionEngine(memory_store).select("NOT_A_SLOT") is None

    def test_empty_slot_selects_nothing(self, memory_store):
        assert SelectionEngine(memory_store).select_url("ROOSTER") is None

    def test_sequence_cursor_persisted_before_return(self, three_sources):
        store = _store_with("ROOSTER", SequenceSlot(sources=three_sources))
        engine = SelectionEngine(store)

        assert engine.select_url("ROOSTER") == three_sources[0].url
        assert store.read().slots["ROOSTER"].cursor == 1
        assert engine.select_url("ROOSTER") == three_sources[1].url
        assert store.read().slots["ROOSTER"].cursor == 2
        assert engine.select_url("ROOSTER") == three_sources[2].url
        assert store.read().slots["ROOSTER"].cursor == 0

    def test_non_sequence_modes_do_not_write(self, three_sources, rng):
        store = _store_with("ROOSTER", RandomSlot(sources=three_sources))
        engine = SelectionEngine(store, rng=rng)
        for _ in range(10):
            engine.select("ROOSTER")
        assert store.writes == 0

    def test_configuration_read_fresh_every_call(self, three_sources):
        store = _store_with("ROOSTER", SingleSlot(sources=three_sources))
        engine = SelectionEngine(store)
        assert engine.select_url("ROOSTER") == three_sources[0].url

        config = store.read()
        config.slots["ROOSTER"] = SingleSlot(sources=[AudioSource("https://example.com/new.wav")])
        store.write(config)
        assert engine.select_url("ROOSTER") == "https://example.com/new.wav"

    def test_sequence_with_removed_sources(self, three_sources):
        store = _store_with("ROOSTER", SequenceSlot(sources=three_sources, cursor=2))
        config = store.read()
        config.slots["ROOSTER"].sources = three_sources[:1]
        store.write(config)
        assert SelectionEngine(store).select_url("ROOSTER") == three_sources[0].url
        assert store.read().slots["ROOSTER"].cursor == 0

    def test_concurrent_sequence_selection_never_repeats(self):
        sources = [AudioSource(f"https://example.com/{i}.wav") for i in range(4)]
        store = _store_with("COW_MOOING", SequenceSlot(sources=sources))
        engine = SelectionEngine(store)
        picks, guard = [], threading.Lock()

        def worker():
            for _ in range(25):
                url = engine.select_url("COW_MOOING")
                with guard:
                    picks.append(url)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        counts = Counter(picks)
        assert len(picks) == 200
        assert all(counts[s.url] == 50 for s in sources)
        assert store.read().slots["COW_MOOING"].cursor == 0

    def test_concurrent_slots_keep_their_own_cursors(self):
        a = [AudioSource(f"a{i}") for i in range(3)]
        b = [AudioSource(f"b{i}") for i in range(5)]
        config = Configuration().ensure_slots()
        config.slots["ROOSTER"] = SequenceSlot(sources=a)
        config.slots["COW_MOOING"] = SequenceSlot(sources=b)
        store = MemoryConfigStore(config)
        engine = SelectionEngine(store)

        def run(slot_id, n):
            for _ in range(n):
                engine.select(slot_id)

        threads = [threading.Thread(target=run, args=("ROOSTER", 31)),
                   threading.Thread(target=run, args=("COW_MOOING", 42))]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        slots = store.read().slots
        assert slots["ROOSTER"].cursor == 31 % 3
        assert slots["COW_MOOING"].cursor == 42 % 5

    def test_failed_cursor_save_still_returns_pick(self, three_sources, caplog):
        class ReadOnlyStore(MemoryConfigStore):
            def write(self, config):
                raise PermissionError("read-only filesystem")

        config = Configuration().ensure_slots()
        config.slots["ROOSTER"] = SequenceSlot(sources=three_sources, cursor=1)
        engine = SelectionEngine(ReadOnlyStore(config))
        assert engine.select_url("ROOSTER") == three_sources[1].url
        assert engine.select_url("ROOSTER") == three_sources[1].url
        assert "failed to save sequence cursor" in caplog.text

    def test_unwritable_json_store(self, tmp_path, three_sources):
        path = tmp_path / "config.json"
        config = Configuration().ensure_slots()
        config.slots["ROOSTER"] = SequenceSlot(sources=three_sources)
        store = JsonConfigStore(path)
        store.write(config)
        # a directory where the temp file goes makes every save fail
        (tmp_path / "config.json.tmp").mkdir()

        engine = SelectionEngine(store)
        assert engine.select_url("ROOSTER") == three_sources[0].url
        assert store.read().slots["ROOSTER"].cursor == 0
