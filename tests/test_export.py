"""Tests for SRE.SPM.export: the end-to-end packaging pipeline."""

import io
import zipfile
from datetime import datetime

import pytest

from SRE.SCM.model import AudioSource, Configuration, SequenceSlot, SingleSlot, WeightedSlot
from SRE.SCM.store import MemoryConfigStore
from SRE.SPM.export import (
    ExportOrchestrator, archive_filename, export_package, source_filename,
)
from SRE.SPM.platforms import UnsupportedPlatformError
from SRE.SPM.sources import SourceFetchError
from SRE.SPM.wav_normalizer import is_canonical_wav
from SRE.SVM.zip_reader import extract_entries, verify_archive

from conftest import data_url, make_wav_bytes

WHEN = datetime(2025, 1, 2, 3, 4, 6)


class FakeFetcher:
    """url -> bytes from a dict; anything missing raises SourceFetchError."""

    def __init__(self, payloads):
        self.payloads = payloads
        self.calls = []

    def __call__(self, url):
        self.calls.append(url)
        if url not in self.payloads:
            raise SourceFetchError(f"404 for {url}")
        return self.payloads[url]


def test_archive_filename():
    assert archive_filename("windows") == "vksr-windows-script.zip"


def test_source_filename():
    assert source_filename("sound-rooster.wav", 3) == "sound-rooster_3.wav"


class TestEndToEnd:
    def test_one_inline_source_and_one_empty_slot(self, inline_config, wav_bytes):
        # ROOSTER: one inline WAV ; every other slot (COW_MOOING included) empty
        data = export_package(inline_config, platform="windows", when=WHEN)

        assert verify_archive(data) == []
        entries = extract_entries(data)
        assert [e.name for e in entries] == [
            "sounds/sound-rooster_0.wav",
            "sound-rooster.wav",
            "vksr-replace.ps1",
            "README.md",
        ]
        assert entries[0].data == wav_bytes
        assert entries[1].data == wav_bytes

        with zipfile.ZipFile(io.BytesIO(data)) as zf:
            assert zf.testzip() is None
            script = zf.read("vksr-replace.ps1").decode("utf-8")
        assert "Target = 'sound-rooster.wav'" in script
        assert "sound-cow-mooing" not in script

    def test_store_is_only_read(self, inline_config):
        store = MemoryConfigStore(inline_config)
        ExportOrchestrator(store).build(when=WHEN)
        assert store.writes == 0


class TestOrdering:
    @pytest.fixture
    def config(self):
        config = Configuration().ensure_slots()
        config.slots["ROOSTER"] = WeightedSlot(sources=[
            AudioSource("https://a.example/r0.wav", weight=2),
            AudioSource("https://a.example/r1.wav", weight=0),
        ])
        config.slots["ABSTRACT_SOUND2"] = SequenceSlot(sources=[
            AudioSource("https://a.example/a0.wav"),
        ], cursor=4)
        return config

    @pytest.fixture
    def fetcher(self):
        return FakeFetcher({
            "https://a.example/r0.wav": make_wav_bytes(frames=100),
            "https://a.example/r1.wav": make_wav_bytes(frames=200),
            "https://a.example/a0.wav": make_wav_bytes(frames=300),
        })

    def test_entry_order_follows_slot_enumeration(self, config, fetcher):
        bundle = ExportOrchestrator(None, fetch=fetcher, max_workers=3).collect(config)
        assert [e.name for e in bundle.entries] == [
            "sounds/sound-abstract-sound2_0.wav",
            "sounds/sound-rooster_0.wav",
            "sounds/sound-rooster_1.wav",
            "sound-abstract-sound2.wav",
            "sound-rooster.wav",
            "vksr-replace.ps1",
            "README.md",
        ]

    def test_audio_infos_record_mode_and_effective_weights(self, config, fetcher):
        bundle = ExportOrchestrator(None, fetch=fetcher).collect(config)
        infos = {i.target_filename: i for i in bundle.audio_infos}
        rooster = infos["sound-rooster.wav"]
        assert rooster.mode == "weighted"
        assert rooster.source_files == ["sound-rooster_0.wav", "sound-rooster_1.wav"]
        assert rooster.weights == [2, 1]
        assert infos["sound-abstract-sound2.wav"].mode == "sequence"

    def test_single_worker_gives_same_archive(self, config, fetcher):
        parallel = ExportOrchestrator(None, fetch=fetcher, max_workers=8).package(config, when=WHEN)
        serial = ExportOrchestrator(None, fetch=fetcher, max_workers=1).package(config, when=WHEN)
        assert parallel == serial


class TestFailures:
    def test_failed_source_is_skipped_and_index_kept(self, caplog):
        config = Configuration().ensure_slots()
        config.slots["ROOSTER"] = SingleSlot(sources=[
            AudioSource("https://a.example/broken.wav"),
            AudioSource("https://a.example/ok.wav"),
        ])
        fetcher = FakeFetcher({"https://a.example/ok.wav": make_wav_bytes()})
        bundle = ExportOrchestrator(None, fetch=fetcher).collect(config)

        names = [e.name for e in bundle.entries]
        assert names[:2] == ["sounds/sound-rooster_1.wav", "sound-rooster.wav"]
        assert bundle.skipped == [("ROOSTER", 0, "404 for https://a.example/broken.wav")]
        assert "Failed to process source 0 of ROOSTER" in caplog.text
        assert "(broken.wav)" in caplog.text

    def test_unreadable_local_path_is_skipped(self, wav_bytes):
        config = Configuration().ensure_slots()
        config.slots["ROOSTER"] = SingleSlot(sources=[
            AudioSource("a\x00b.wav"),
            AudioSource(data_url(wav_bytes)),
        ])
        bundle = ExportOrchestrator(None).collect(config)
        assert [e.name for e in bundle.entries][:2] == [
            "sounds/sound-rooster_1.wav", "sound-rooster.wav",
        ]
        assert [(s, i) for s, i, _ in bundle.skipped] == [("ROOSTER", 0)]

    def test_undecodable_source_is_skipped(self):
        config = Configuration().ensure_slots()
        config.slots["ROOSTER"] = SingleSlot(sources=[
            AudioSource(data_url(b"definitely not audio" * 4, mime="audio/mpeg")),
        ])
        bundle = ExportOrchestrator(None).collect(config)
        assert [e.name for e in bundle.entries] == ["vksr-replace.ps1", "README.md"]
        assert bundle.audio_infos == []
        assert len(bundle.skipped) == 1

    def test_slot_with_no_usable_source_is_omitted(self):
        config = Configuration().ensure_slots()
        config.slots["COW_MOOING"] = SingleSlot(sources=[AudioSource("https://gone/1.mp3")])
        bundle = ExportOrchestrator(None, fetch=FakeFetcher({})).collect(config)
        assert not any("cow" in e.name for e in bundle.entries)
        assert "sound-cow-mooing" not in bundle.entries[-2].data.decode("utf-8")

    def test_empty_urls_are_never_fetched(self):
        config = Configuration().ensure_slots()
        config.slots["ROOSTER"] = SingleSlot(sources=[AudioSource(""), AudioSource("https://x/1.wav")])
        fetcher = FakeFetcher({"https://x/1.wav": make_wav_bytes()})
        bundle = ExportOrchestrator(None, fetch=fetcher).collect(config)
        assert fetcher.calls == ["https://x/1.wav"]
        assert bundle.audio_infos[0].source_files == ["sound-rooster_1.wav"]

    def test_transcoded_sources_are_canonical(self, flac_bytes):
        config = Configuration().ensure_slots()
        config.slots["ROOSTER"] = SingleSlot(sources=[AudioSource(data_url(flac_bytes, "audio/flac"))])
        entries = extract_entries(export_package(config, when=WHEN))
        assert is_canonical_wav(entries[0].data)
        assert entries[0].data != flac_bytes

    def test_unsupported_platform_fails_up_front(self):
        with pytest.raises(UnsupportedPlatformError):
            ExportOrchestrator(None, platform="linux")

    def test_build_without_store(self):
        with pytest.raises(ValueError):
            ExportOrchestrator(None).build()
