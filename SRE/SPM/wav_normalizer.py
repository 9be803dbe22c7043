# =============================================================================
# wav_normalizer.py — Canonical WAV Normalizer
# =============================================================================
#
# Every exported sound must be a plain RIFF/WAVE PCM file, because that is
# the only thing the external notification player is guaranteed to load.
#
# PASSTHROUGH:
#   A buffer of >= 44 bytes whose bytes 0-3 are "RIFF" and bytes 8-11 are
#   "WAVE" is returned byte-identical.  This is a header sniff only: sizes,
#   chunk layout and codec are NOT checked, so a malformed file that passes
#   the sniff is passed through as-is.
#
# TRANSCODE (everything else):
#   1. Decode with libsndfile (soundfile) → float32 [frames, channels]
#      at the file's native sample rate.  No resampling, no downmix.
#   2. Interleave  [ch0@t0, ch1@t0, …, ch0@t1, …]   (row-major flatten)
#   3. Clamp to [-1.0, 1.0]
#   4. Quantize to int16, ASYMMETRIC:
#        s <  0  →  s * 32768   (reaches -32768)
#        s >= 0  →  s * 32767   (stops at  32767, never overflows)
#      truncated toward zero.
#   5. Prepend the 44-byte header:
#        RIFF <36 + data_len> WAVE
#        fmt  <16> PCM=1 <channels> <rate> <rate*ch*2> <ch*2> 16
#        data <data_len>
#
# The decoder handle is opened and closed around every conversion, whether
# decoding succeeds or raises.
#
# Main API:
#   normalize_audio(data: bytes) -> bytes
#   transcode(data: bytes) -> CanonicalAudio
#   is_canonical_wav(data: bytes) -> bool
# =============================================================================

from __future__ import annotations

import io
from contextlib import contextmanager
from dataclasses import dataclass

import numpy as np
import soundfile as sf

from SRE.SMM.constants import (
    PCM16_NEG_SCALE, PCM16_POS_SCALE,
    WAV_BITS_PER_SAMPLE, WAV_BYTES_PER_SAMPLE, WAV_FMT_CHUNK_SIZE,
    WAV_FORMAT_PCM, WAV_HEADER_SIZE,
)
from .binary import ascii4, concat, u16le, u32le


class AudioDecodeError(Exception):
    """Raised when input audio is corrupt or in a format libsndfile cannot read."""


@dataclass
class CanonicalAudio:
    """16-bit interleaved PCM plus the parameters needed to frame it."""

    sample_rate:     int
    channels:        int
    pcm:             bytes
    bits_per_sample: int = WAV_BITS_PER_SAMPLE

    @property
    def frames(self) -> int:
        block = self.channels * (self.bits_per_sample // 8)
        return len(self.pcm) // block if block else 0

    def header(self) -> bytes:
        return wav_header(len(self.pcm), self.sample_rate, self.channels,
                          self.bits_per_sample)

    def to_bytes(self) -> bytes:
        return self.header() + self.pcm


# ── Container ────────────────────────────────────────────────────────────────

def is_canonical_wav(data: bytes) -> bool:
    """Minimal RIFF/WAVE sniff: length >= 44, 'RIFF' at 0, 'WAVE' at 8."""
    return (
        len(data) >= WAV_HEADER_SIZE
        and bytes(data[0:4]) == b"RIFF"
        and bytes(data[8:12]) == b"WAVE"
    )


def wav_header(data_length: int, sample_rate: int, channels: int,
               bits_per_sample: int = WAV_BITS_PER_SAMPLE) -> bytes:
    """The canonical 44-byte PCM WAV header for a data chunk of given length."""
    block_align = channels * (bits_per_sample // 8)
    byte_rate   = sample_rate * block_align
    return concat([
        ascii4("RIFF"), u32le(36 + data_length), ascii4("WAVE"),
        ascii4("fmt "), u32le(WAV_FMT_CHUNK_SIZE),
        u16le(WAV_FORMAT_PCM),
        u16le(channels),
        u32le(sample_rate),
        u32le(byte_rate),
        u16le(block_align),
        u16le(bits_per_sample),
        ascii4("data"), u32le(data_length),
    ])


# ── Sample conversion ────────────────────────────────────────────────────────

def float_to_pcm16(samples) -> bytes:
    """
    Clamp and quantize float samples to little-endian int16 bytes.

    Args:
        samples: Array-like of floats, any shape.  Multi-channel input must
                 be [frames, channels] so the row-major flatten interleaves.

    Returns:
        2 bytes per sample.
    """
    flat = np.nan_to_num(np.asarray(samples, dtype=np.float64).reshape(-1))
    flat = np.clip(flat, -1.0, 1.0)
    scaled = np.where(flat < 0, flat * PCM16_NEG_SCALE, flat * PCM16_POS_SCALE)
    return scaled.astype("<i2").tobytes()


# ── Decoding ─────────────────────────────────────────────────────────────────

@contextmanager
def open_decoder(data: bytes):
    """
    Open an in-memory audio buffer with libsndfile; always closed on exit.

    Raises:
        AudioDecodeError: if the buffer is not a format libsndfile reads.
    """
    try:
        handle = sf.SoundFile(io.BytesIO(bytes(data)))
    except RuntimeError as exc:          # sf.LibsndfileError
        raise AudioDecodeError(f"Could not open audio: {exc}") from exc
    try:
        yield handle
    finally:
        handle.close()


def decode_audio(data: bytes) -> tuple[np.ndarray, int]:
    """
    Decode to float32 frames at the native sample rate.

    Returns:
        (samples, sample_rate) with samples shaped [frames, channels].
    """
    with open_decoder(data) as snd:
        try:
            samples = snd.read(dtype="float32", always_2d=True)
        except RuntimeError as exc:
            raise AudioDecodeError(f"Could not decode audio: {exc}") from exc
        return samples, snd.samplerate


def transcode(data: bytes) -> CanonicalAudio:
    """Decode any libsndfile-readable buffer into canonical 16-bit PCM."""
    samples, sample_rate = decode_audio(data)
    return CanonicalAudio(
        sample_rate=int(sample_rate),
        channels=int(samples.shape[1]),
        pcm=float_to_pcm16(samples),
        bits_per_sample=WAV_BYTES_PER_SAMPLE * 8,
    )


def normalize_audio(data: bytes) -> bytes:
    """
    Canonical WAV bytes for any input audio.

    Already-WAV input (by header sniff) is returned unchanged.

    Raises:
        AudioDecodeError: on corrupt or unsupported input.
    """
    if is_canonical_wav(data):
        return data
    return transcode(data).to_bytes()
