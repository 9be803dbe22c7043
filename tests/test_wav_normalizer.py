"""Tests for SRE.SPM.wav_normalizer."""

import io
import struct

import numpy as np
import pytest
import soundfile as sf

from SRE.SPM.wav_normalizer import (
    AudioDecodeError, CanonicalAudio, float_to_pcm16, is_canonical_wav,
    normalize_audio, open_decoder, transcode, wav_header,
)

HEADER = struct.Struct("<4sI4s4sIHHIIHH4sI")


class TestSniff:
    def test_minimal_riff_wave_passes(self):
        data = b"RIFF" + b"\x00" * 4 + b"WAVE" + b"\x00" * 32
        assert len(data) == 44
        assert is_canonical_wav(data)

    def test_only_magic_is_checked(self):
        # sizes and chunk layout are garbage, still passes
        data = b"RIFF\xff\xff\xff\xffWAVEjunk" + b"\x07" * 28
        assert is_canonical_wav(data)
        assert normalize_audio(data) is data

    def test_too_short(self):
        assert not is_canonical_wav(b"RIFF\x00\x00\x00\x00WAVE" + b"\x00" * 31)

    def test_wrong_magic(self):
        assert not is_canonical_wav(b"RIFX" + b"\x00" * 4 + b"WAVE" + b"\x00" * 32)
        assert not is_canonical_wav(b"RIFF" + b"\x00" * 4 + b"AVI " + b"\x00" * 32)


class TestQuantize:
    def test_asymmetric_scaling(self):
        pcm = float_to_pcm16([-1.0, 1.0, 0.5, -0.5, 2.0])
        assert list(np.frombuffer(pcm, dtype="<i2")) == [-32768, 32767, 16383, -16384, 32767]

    def test_clamps_below_minus_one(self):
        pcm = float_to_pcm16([-3.0, 0.0])
        assert list(np.frombuffer(pcm, dtype="<i2")) == [-32768, 0]

    def test_truncates_toward_zero(self):
        # 0.9999 * 32767 = 32763.7 -> 32763 ; -0.9999 * 32768 = -32764.7 -> -32764
        pcm = float_to_pcm16([0.9999, -0.9999])
        assert list(np.frombuffer(pcm, dtype="<i2")) == [32763, -32764]

    def test_interleaves_frames_by_channel(self):
        frames = np.array([[0.0, 1.0], [-1.0, 0.0]])
        pcm = float_to_pcm16(frames)
        assert list(np.frombuffer(pcm, dtype="<i2")) == [0, 32767, -32768, 0]

    def test_little_endian(self):
        assert float_to_pcm16([1.0]) == b"\xff\x7f"


class TestHeader:
    def test_fields(self):
        header = wav_header(1000, 48_000, 2)
        assert len(header) == 44
        fields = HEADER.unpack(header)
        assert fields == (b"RIFF", 1036, b"WAVE", b"fmt ", 16, 1, 2, 48_000,
                          192_000, 4, 16, b"data", 1000)

    def test_canonical_audio_to_bytes(self):
        audio = CanonicalAudio(sample_rate=8000, channels=1, pcm=b"\x01\x00" * 10)
        out = audio.to_bytes()
        assert out[:44] == wav_header(20, 8000, 1)
        assert out[44:] == audio.pcm
        assert audio.frames == 10


class TestTranscode:
    def test_wav_passthrough_is_identical(self, wav_bytes):
        assert is_canonical_wav(wav_bytes)
        assert normalize_audio(wav_bytes) == wav_bytes

    def test_flac_becomes_canonical_wav(self, flac_bytes):
        assert not is_canonical_wav(flac_bytes)
        out = normalize_audio(flac_bytes)
        fields = HEADER.unpack(out[:44])
        (riff, riff_size, wave, fmt, fmt_size, tag, channels, rate,
         byte_rate, block_align, bits, data_tag, data_len) = fields
        assert (riff, wave, fmt, data_tag) == (b"RIFF", b"WAVE", b"fmt ", b"data")
        assert (fmt_size, tag, bits) == (16, 1, 16)
        assert channels == 2
        assert rate == 22_050
        assert byte_rate == 22_050 * 2 * 2
        assert block_align == 4
        assert data_len == 882 * 2 * 2 == len(out) - 44
        assert riff_size == 36 + data_len

    def test_transcoded_audio_decodes_back(self, flac_bytes):
        out = normalize_audio(flac_bytes)
        original, _ = sf.read(io.BytesIO(flac_bytes), dtype="float32", always_2d=True)
        decoded, rate = sf.read(io.BytesIO(out), dtype="float32", always_2d=True)
        assert rate == 22_050
        assert decoded.shape == original.shape
        assert np.max(np.abs(decoded - original)) < 2.0 / 32768

    def test_transcode_returns_canonical_audio(self, flac_bytes):
        audio = transcode(flac_bytes)
        assert audio.channels == 2
        assert audio.sample_rate == 22_050
        assert audio.frames == 882

    def test_garbage_raises_decode_error(self):
        with pytest.raises(AudioDecodeError):
            normalize_audio(b"this is not audio at all" * 10)

    def test_empty_input_raises_decode_error(self):
        with pytest.raises(AudioDecodeError):
            normalize_audio(b"")

    def test_decoder_closed_on_success(self, flac_bytes):
        with open_decoder(flac_bytes) as snd:
            handle = snd
            assert not snd.closed
        assert handle.closed

    def test_decoder_closed_when_body_raises(self, flac_bytes):
        with pytest.raises(KeyError):
            with open_decoder(flac_bytes) as snd:
                handle = snd
                raise KeyError("boom")
        assert handle.closed
