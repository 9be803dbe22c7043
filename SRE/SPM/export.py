# =============================================================================
# export.py — Export Orchestrator
# =============================================================================
#
# Turns a Configuration into one self-contained, store-only ZIP archive:
#
#   sounds/<base>_<i>.wav   every usable source of every slot, normalized
#   <target>.wav            pre-placed copy of the slot's first usable source
#   <driver script>         selection logic for the external player
#   README.md               install notes for that platform
#
# <base> is the slot's target filename without ".wav" and <i> the source's
# position in the slot, so names stay stable even when an earlier source
# fails and is skipped.
#
# PIPELINE:
#   1. Enumerate slots in SOUND_FILES order, sources in list order.
#      Sources with an empty URL are dropped here.
#   2. Fetch + normalize every source on a thread pool.  Executor.map keeps
#      results in submission order, so step 3 sees the enumeration order.
#   3. Group results per slot.  A failed source (SourceFetchError or
#      AudioDecodeError) is logged and skipped; a slot with no usable
#      source is left out of the archive entirely.
#   4. Generate the platform script and README, then build_zip().
#
# The store is only ever read here.
# =============================================================================

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from functools import partial
from typing import Callable, Optional

from SRE.SCM.model import AudioSource, Configuration
from SRE.SCM.store import ConfigStore
from SRE.SMM.constants import SOUND_FILENAMES, SOUND_FILES, SOUNDS_DIR
from .platforms import AudioFileInfo, get_generator
from .sources import DEFAULT_TIMEOUT, SourceFetchError, load_source_bytes
from .wav_normalizer import AudioDecodeError, normalize_audio
from .zip_builder import ZipEntry, build_zip

logger = logging.getLogger(__name__)

README_FILENAME = "README.md"


def archive_filename(platform: str) -> str:
    """Download name of an export archive, e.g. vksr-windows-script.zip."""
    return f"vksr-{platform}-script.zip"


def source_filename(target_filename: str, index: int) -> str:
    base = target_filename[:-4] if target_filename.endswith(".wav") else target_filename
    return f"{base}_{index}.wav"


@dataclass
class ExportBundle:
    """Everything that goes into one archive, in archive order."""

    platform:    str
    entries:     list[ZipEntry] = field(default_factory=list)
    audio_infos: list[AudioFileInfo] = field(default_factory=list)
    skipped:     list[tuple[str, int, str]] = field(default_factory=list)  # (slot, index, reason)

    @property
    def filename(self) -> str:
        return archive_filename(self.platform)

    def to_zip(self, when: Optional[datetime] = None) -> bytes:
        return build_zip(self.entries, when=when)


@dataclass
class _Job:
    slot_id: str
    index:   int
    source:  AudioSource


class ExportOrchestrator:
    """
    Builds export archives from a ConfigStore.

    Args:
        store:       Where the configuration is read from (never written).
        platform:    Target platform id; resolved immediately, so an
                     unsupported platform fails here rather than mid-export.
        fetch:       url -> raw bytes.  Defaults to load_source_bytes with
                     the given timeout.
        normalize:   raw bytes -> canonical WAV bytes.
        max_workers: Thread pool size for fetch + normalize.
        timeout:     Per-request network timeout in seconds.

    Usage:
        orchestrator = ExportOrchestrator(JsonConfigStore(path))
        data = orchestrator.build()
        Path(orchestrator.filename).write_bytes(data)
    """

    def __init__(self, store: Optional[ConfigStore], platform: str = "windows",
                 fetch: Optional[Callable[[str], bytes]] = None,
                 normalize: Callable[[bytes], bytes] = normalize_audio,
                 max_workers: int = 4,
                 timeout: float = DEFAULT_TIMEOUT) -> None:
        self.store = store
        self.generator = get_generator(platform)
        self.platform = self.generator.platform
        self.fetch = fetch or partial(load_source_bytes, timeout=timeout)
        self.normalize = normalize
        self.max_workers = max(1, int(max_workers))

    @property
    def filename(self) -> str:
        return archive_filename(self.platform)

    # ── Public API ───────────────────────────────────────────────────────────

    def build(self, when: Optional[datetime] = None) -> bytes:
        """Read the store and return the finished archive bytes."""
        if self.store is None:
            raise ValueError("ExportOrchestrator has no store; use package(config)")
        return self.package(self.store.read(), when=when)

    def package(self, config: Configuration, when: Optional[datetime] = None) -> bytes:
        return self.collect(config).to_zip(when=when)

    def collect(self, config: Configuration) -> ExportBundle:
        """Normalize every source and assemble the ordered entry list."""
        jobs = self._enumerate(config)
        logger.info(f"Exporting {len(jobs)} source(s) for {self.generator.display_name}")

        if jobs:
            workers = min(self.max_workers, len(jobs))
            with ThreadPoolExecutor(max_workers=workers,
                                    thread_name_prefix="vksr-export") as pool:
                results = list(pool.map(self._process, jobs))
        else:
            results = []

        bundle = ExportBundle(platform=self.platform)
        sound_entries: list[ZipEntry] = []
        target_entries: list[ZipEntry] = []

        for slot_id in SOUND_FILES:
            slot = config.slots.get(slot_id)
            slot_results = [(job, res) for job, res in zip(jobs, results)
                            if job.slot_id == slot_id]
            if slot is None or not slot_results:
                continue

            target = SOUND_FILENAMES[slot_id]
            info = AudioFileInfo(target_filename=target, mode=slot.mode)
            first: Optional[bytes] = None

            for job, (data, error) in slot_results:
                if data is None:
                    bundle.skipped.append((slot_id, job.index, error))
                    continue
                name = source_filename(target, job.index)
                sound_entries.append(ZipEntry(f"{SOUNDS_DIR}/{name}", data))
                info.source_files.append(name)
                info.weights.append(job.source.effective_weight)
                if first is None:
                    first = data

            if first is None:
                logger.warning(f"{slot_id}: no usable sources, left out of export")
                continue
            target_entries.append(ZipEntry(target, first))
            bundle.audio_infos.append(info)

        bundle.entries.extend(sound_entries)
        bundle.entries.extend(target_entries)
        script = self.generator.generate_script(bundle.audio_infos)
        readme = self.generator.generate_readme()
        bundle.entries.append(ZipEntry(self.generator.script_filename, script.encode("utf-8")))
        bundle.entries.append(ZipEntry(README_FILENAME, readme.encode("utf-8")))

        logger.info(
            f"Export ready: {len(bundle.audio_infos)} sound(s), "
            f"{len(sound_entries)} file(s), {len(bundle.skipped)} skipped"
        )
        return bundle

    # ── Internals ────────────────────────────────────────────────────────────

    @staticmethod
    def _enumerate(config: Configuration) -> list[_Job]:
        jobs = []
        for slot_id in SOUND_FILES:
            slot = config.slots.get(slot_id)
            if slot is None or slot.is_empty:
                continue
            for index, source in enumerate(slot.sources):
                if not source.url:
                    continue
                jobs.append(_Job(slot_id, index, source))
        return jobs

    def _process(self, job: _Job) -> tuple[Optional[bytes], str]:
        """(canonical bytes, "") on success, (None, reason) on failure."""
        try:
            raw = self.fetch(job.source.url)
            return self.normalize(raw), ""
        except (SourceFetchError, AudioDecodeError) as e:
            logger.error(f"Failed to process source {job.index} of {job.slot_id} "
                         f"({job.source.display_name}): {e}")
            return None, str(e)


def export_package(config: Configuration, platform: str = "windows",
                   when: Optional[datetime] = None, **kwargs) -> bytes:
    """
    One-shot export of an in-memory configuration.

    Extra keyword arguments go to ExportOrchestrator (fetch, normalize,
    max_workers, timeout).

    Raises:
        UnsupportedPlatformError: if no generator exists for the platform.
    """
    return ExportOrchestrator(None, platform=platform, **kwargs).package(config, when=when)
