"""
Quick checker for an audio file headed into an export.
Shows whether it passes the RIFF/WAVE sniff unchanged or will be transcoded,
and what the canonical 16-bit result looks like.

Usage: python tools/quick_check_wav.py path/to/sound.mp3 [--write out.wav]
"""
import io
import os
import sys

import numpy as np
import soundfile as sf

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from SRE.SPM.wav_normalizer import AudioDecodeError, is_canonical_wav, normalize_audio

if len(sys.argv) < 2:
    print("Usage: python tools/quick_check_wav.py file [--write out.wav]")
    raise SystemExit

f = sys.argv[1]
out_path = sys.argv[sys.argv.index("--write") + 1] if "--write" in sys.argv[2:-1] else None

with open(f, "rb") as fh:
    raw = fh.read()

print("=" * 60)
print(f"File        : {f}")
print(f"Size        : {len(raw):,} bytes")
print(f"RIFF/WAVE   : {'yes (passed through unchanged)' if is_canonical_wav(raw) else 'no (will be transcoded)'}")

try:
    canonical = normalize_audio(raw)
except AudioDecodeError as e:
    print(f"ERROR       : {e}")
    print("=" * 60)
    raise SystemExit(1)

try:
    data, sr = sf.read(io.BytesIO(canonical), always_2d=True)
except RuntimeError as e:
    # passed the sniff but libsndfile cannot parse it
    print(f"ERROR       : {e}")
    print("=" * 60)
    raise SystemExit(1)
n_ch = data.shape[1]
duration = data.shape[0] / sr

print(f"Sample rate : {sr} Hz")
print(f"Channels    : {n_ch}")
print(f"Duration    : {duration:.2f} s")
print(f"Output size : {len(canonical):,} bytes")
print("=" * 60)

for i in range(n_ch):
    ch = data[:, i]
    peak = np.max(np.abs(ch)) if len(ch) else 0.0
    rms  = np.sqrt(np.mean(ch ** 2)) if len(ch) else 0.0
    clip = int(np.sum(np.abs(ch) >= 0.999))
    flag = "  <-- CLIPPING" if clip else ""
    print(f"  Ch{i}: peak={peak:.3f}  rms={rms:.3f}  clipped={clip}{flag}")

if out_path:
    with open(out_path, "wb") as fh:
        fh.write(canonical)
    print(f"\nWrote canonical WAV to {out_path}")
print("=" * 60)
