#!/usr/bin/env python3
# =============================================================================
# validate.py — SRE Self-Validation Suite
# =============================================================================
#
# Run directly:  python -m SRE.SVM.validate
#             or python SRE/SVM/validate.py (from project root)
#
# Tests:
#   1. Constants integrity  — slot tables complete, filenames unique
#   2. CRC32                — reference vectors, agreement with zlib
#   3. ZIP builder          — our reader AND the stdlib zipfile accept it
#   4. WAV normalizer       — passthrough sniff, FLAC → PCM16 transcode
#   5. Selection engine     — mode rules, sequence persistence, weights
#   6. Export               — end-to-end archive from an inline source
# =============================================================================

import io
import os
import random
import struct
import sys
import zipfile
import zlib
from datetime import datetime

import numpy as np
import soundfile as sf

# Allow running from project root without installing
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

from SRE.SMM.constants import (
    PLAY_MODES, SOUND_DISPLAY_NAMES, SOUND_FILENAMES, SOUND_FILES,
    WAV_HEADER_SIZE,
)
from SRE.SCM.model import (
    AudioSource, Configuration, SequenceSlot, SingleSlot, WeightedSlot,
)
from SRE.SCM.store import MemoryConfigStore
from SRE.SPM.crc32 import crc32
from SRE.SPM.export import export_package
from SRE.SPM.wav_normalizer import is_canonical_wav, normalize_audio
from SRE.SPM.zip_builder import ZipEntry, build_zip
from SRE.SSM.selector import SelectionEngine, select_source
from SRE.SVM.zip_reader import extract_entries, verify_archive

PASS = "[PASS]"
FAIL = "[FAIL]"
INFO = "[INFO]"

failures = 0

def check(label: str, condition: bool, detail: str = "") -> bool:
    global failures
    if condition:
        print(f"  {PASS} {label}")
    else:
        print(f"  {FAIL} {label}{(' -- ' + detail) if detail else ''}")
        failures += 1
    return condition


def section(title: str) -> None:
    print("\n" + "="*60)
    print(title)
    print("="*60)


# =============================================================================
# TEST 1 — Constants Integrity
# =============================================================================
section("TEST 1 — Constants Integrity")

check("7 known slots",                    len(SOUND_FILES) == 7, f"got {len(SOUND_FILES)}")
check("Every slot has a target filename", all(s in SOUND_FILENAMES for s in SOUND_FILES))
check("Every slot has a display name",    all(s in SOUND_DISPLAY_NAMES for s in SOUND_FILES))
check("Target filenames are unique",
      len(set(SOUND_FILENAMES.values())) == len(SOUND_FILENAMES))
check("Target filenames end in .wav",
      all(f.endswith(".wav") for f in SOUND_FILENAMES.values()))
check("4 play modes",                     len(PLAY_MODES) == 4)


# =============================================================================
# TEST 2 — CRC32
# =============================================================================
section("TEST 2 — CRC32")

check('crc32(b"") == 0',                   crc32(b"") == 0)
check('crc32(b"123456789") == CBF43926',   crc32(b"123456789") == 0xCBF43926,
      f"got {crc32(b'123456789'):08X}")

rng = random.Random(2024)
blob = bytes(rng.randrange(256) for _ in range(4096))
check("Agrees with zlib.crc32 on 4 KiB of noise", crc32(blob) == zlib.crc32(blob))
check("Running CRC == one-shot CRC",
      crc32(blob[2000:], crc32(blob[:2000])) == crc32(blob))


# =============================================================================
# TEST 3 — ZIP Builder
# =============================================================================
section("TEST 3 — ZIP Builder")

entries = [
    ZipEntry("sounds/a_0.wav", b"\x00" * 100),
    ZipEntry("sounds/a_1.wav", blob),
    ZipEntry("empty.txt",      b""),
    ZipEntry("README.md",      b"# hello\n"),
]
archive = build_zip(entries, when=datetime(2024, 6, 1, 12, 30, 44))
problems = verify_archive(archive)
check("verify_archive reports no problems", not problems, "; ".join(problems))

with zipfile.ZipFile(io.BytesIO(archive)) as zf:
    check("zipfile.testzip() finds no bad entry", zf.testzip() is None)
    check("zipfile sees entries in input order",
          zf.namelist() == [e.name for e in entries], f"{zf.namelist()}")
    check("zipfile data round-trips",
          all(zf.read(e.name) == e.data for e in entries))
    info = zf.getinfo("README.md")
    check("DOS timestamp = 2024-06-01 12:30:44",
          info.date_time == (2024, 6, 1, 12, 30, 44), f"got {info.date_time}")

check("Our reader extracts identical entries", extract_entries(archive) == entries)

empty_zip = build_zip([])
check("Empty archive is exactly one 22-byte EOCD", len(empty_zip) == 22)


# =============================================================================
# TEST 4 — WAV Normalizer
# =============================================================================
section("TEST 4 — WAV Normalizer")

t = np.arange(4410) / 44_100.0
stereo = np.stack([0.5 * np.sin(2 * np.pi * 440 * t),
                   0.5 * np.sin(2 * np.pi * 660 * t)], axis=1)

wav_buf = io.BytesIO()
sf.write(wav_buf, stereo, 44_100, format="WAV", subtype="PCM_16")
wav_bytes = wav_buf.getvalue()
check("soundfile WAV passes the sniff", is_canonical_wav(wav_bytes))
check("WAV input is passed through byte-identical", normalize_audio(wav_bytes) == wav_bytes)

flac_buf = io.BytesIO()
sf.write(flac_buf, stereo, 44_100, format="FLAC", subtype="PCM_16")
flac_bytes = flac_buf.getvalue()
check("FLAC input does not pass the sniff", not is_canonical_wav(flac_bytes))

out = normalize_audio(flac_bytes)
(riff, riff_size, wave, fmt, fmt_size, tag, channels, rate,
 byte_rate, block_align, bits, data_tag, data_len) = struct.unpack(
    "<4sI4s4sIHHIIHH4sI", out[:WAV_HEADER_SIZE])
check("Header: RIFF / WAVE / fmt / data tags",
      (riff, wave, fmt, data_tag) == (b"RIFF", b"WAVE", b"fmt ", b"data"))
check("Header: RIFF size = 36 + data length", riff_size == 36 + data_len)
check("Header: PCM, 2 ch, 44100 Hz, 16 bit",
      (fmt_size, tag, channels, rate, bits) == (16, 1, 2, 44_100, 16),
      f"got {(fmt_size, tag, channels, rate, bits)}")
check("Header: byte rate / block align",
      byte_rate == 44_100 * 4 and block_align == 4)
check("Payload: one int16 per sample",
      data_len == len(out) - WAV_HEADER_SIZE == stereo.size * 2,
      f"data_len={data_len}, expected {stereo.size * 2}")

decoded, _ = sf.read(io.BytesIO(out), dtype="int16", always_2d=True)
expected = np.round(stereo * 32767).astype(np.int16)
worst = int(np.max(np.abs(decoded.astype(int) - expected.astype(int))))
print(f"  {INFO} Worst sample deviation after FLAC → WAV: {worst} LSB")
check("Transcoded samples within 2 LSB of source", worst <= 2)


# =============================================================================
# TEST 5 — Selection Engine
# =============================================================================
section("TEST 5 — Selection Engine")

srcs = [AudioSource(f"https://example.com/{i}.mp3") for i in range(3)]

single = SingleSlot(sources=list(srcs))
check("Single: always source 0",
      all(select_source(single) is srcs[0] for _ in range(50)))

check("Empty slot → None", select_source(SingleSlot()) is None)

config = Configuration()
config.slots["ROOSTER"] = SequenceSlot(sources=list(srcs))
store = MemoryConfigStore(config.ensure_slots())
engine = SelectionEngine(store, rng=random.Random(7))
picked = [engine.select_url("ROOSTER") for _ in range(7)]
check("Sequence: 0,1,2,0,1,2,0",
      picked == [srcs[i].url for i in (0, 1, 2, 0, 1, 2, 0)], f"{picked}")
check("Sequence: cursor persisted in store",
      store.read().slots["ROOSTER"].cursor == 1)

weighted = WeightedSlot(sources=[AudioSource("a", weight=1), AudioSource("b", weight=3)])
draw_rng = random.Random(99)
hits = sum(select_source(weighted, draw_rng).url == "b" for _ in range(4000))
share = hits / 4000
print(f"  {INFO} Weighted 1:3 → share of heavier source: {share:.3f}")
check("Weighted: heavier source share within 0.72-0.78", 0.72 <= share <= 0.78)


# =============================================================================
# TEST 6 — Export
# =============================================================================
section("TEST 6 — Export")

import base64
inline = "data:audio/wav;base64," + base64.b64encode(wav_bytes).decode("ascii")
export_config = Configuration()
export_config.slots["ROOSTER"] = SingleSlot(sources=[AudioSource(inline)])
export_config.ensure_slots()

package = export_package(export_config, platform="windows")
problems = verify_archive(package)
check("Export archive verifies", not problems, "; ".join(problems))
names = [e.name for e in extract_entries(package)]
check("Export holds exactly 4 entries",
      names == ["sounds/sound-rooster_0.wav", "sound-rooster.wav",
                "vksr-replace.ps1", "README.md"], f"{names}")


# =============================================================================
# Summary
# =============================================================================
print("\n" + "="*60)
if failures == 0:
    print(f"  ALL TESTS PASSED")
else:
    print(f"  {failures} TEST(S) FAILED")
print("="*60 + "\n")
sys.exit(0 if failures == 0 else 1)
