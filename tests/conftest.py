"""
Shared pytest fixtures for the SRE test suite.

Stores are in-memory, sources are inline data: URLs or fakes, and audio is
synthesized with numpy + soundfile.  No network access is needed.
"""

import base64
import io
import random

import numpy as np
import pytest
import soundfile as sf

from SRE.SCM.model import AudioSource, Configuration, SingleSlot
from SRE.SCM.store import MemoryConfigStore


def make_wav_bytes(frames: int = 441, channels: int = 1, sample_rate: int = 44_100,
                   fmt: str = "WAV") -> bytes:
    """A short sine tone encoded by libsndfile in the given container format."""
    t = np.arange(frames) / sample_rate
    tone = 0.25 * np.sin(2 * np.pi * 440 * t)
    data = np.repeat(tone[:, None], channels, axis=1)
    buf = io.BytesIO()
    sf.write(buf, data, sample_rate, format=fmt, subtype="PCM_16")
    return buf.getvalue()


def data_url(payload: bytes, mime: str = "audio/wav") -> str:
    return f"data:{mime};base64," + base64.b64encode(payload).decode("ascii")


@pytest.fixture
def wav_bytes():
    """Mono 16-bit WAV, 441 frames (10 ms at 44.1 kHz)."""
    return make_wav_bytes()


@pytest.fixture
def flac_bytes():
    """Stereo FLAC, 882 frames at 22.05 kHz."""
    return make_wav_bytes(frames=882, channels=2, sample_rate=22_050, fmt="FLAC")


@pytest.fixture
def rng():
    """Seeded random source so random / weighted draws are reproducible."""
    return random.Random(1234)


@pytest.fixture
def empty_config():
    """Enabled configuration with every known slot present and empty."""
    return Configuration().ensure_slots()


@pytest.fixture
def memory_store(empty_config):
    return MemoryConfigStore(empty_config)


@pytest.fixture
def three_sources():
    return [AudioSource(f"https://example.com/sound{i}.mp3", name=f"s{i}") for i in range(3)]


@pytest.fixture
def inline_config(wav_bytes):
    """ROOSTER has one inline WAV source; every other slot is empty."""
    config = Configuration().ensure_slots()
    config.slots["ROOSTER"] = SingleSlot(sources=[AudioSource(data_url(wav_bytes))])
    return config
