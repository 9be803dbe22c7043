# =============================================================================
# SPM — Sound Packaging Module
# Subfolder of SRE (Sound Replacement Engine)
# =============================================================================
#
# Turns the configured sources into one self-contained, store-only ZIP:
#
#   sounds/<base>_<i>.wav   every source, normalized to 16-bit PCM WAV
#   <target>.wav            first good source per slot, pre-placed
#   <driver script>         replays the selection rules outside the browser
#   README.md               install notes for the target platform
#
# Modules:
#   crc32.py          — table-driven CRC32 (ZIP / PNG polynomial)
#   binary.py         — little-endian u16 / u32 writers, buffer concat
#   zip_builder.py    — local headers, central directory, EOCD
#   wav_normalizer.py — RIFF/WAVE sniff + soundfile transcode to PCM16
#   sources.py        — fetch bytes for http(s), data: and file sources
#   export.py         — the export orchestrator
#   platforms/        — driver-script generators (windows)
#
# Constants live in SRE/SMM/constants.py
# Verification tools live in SRE/SVM/
# =============================================================================
