# =============================================================================
# Sound Replacement Engine (SRE)
# Replaces vibe-kanban notification sounds and packages them for export.
# =============================================================================
#
# ── PYTHON OWNS THE SELECTION AND THE EXPORT BYTES ───────────────────────────
#
# RESPONSIBLE for:
#   - Source Selection
#       Every request for /api/sounds/<SLOT> is answered from the slot's
#       configured sources using one of four policies:
#         single   → always source 0
#         random   → uniform draw
#         sequence → cursor mod N, cursor advanced and persisted at once
#         weighted → cumulative-weight draw
#   - Configuration Persistence
#       One JSON document, re-read on every selection so edits made by the
#       settings surface take effect without a restart.
#   - Export Packaging
#       Every source is normalized to 16-bit PCM WAV and written, together
#       with a generated driver script and README, into a store-only ZIP
#       archive assembled byte-for-byte in Python (CRC32, local headers,
#       central directory, end-of-central-directory).
#
# NOT responsible for:
#   - Settings UI, page detection, DOM observation
#   - Actually playing audio (the host plays whatever URL we hand back)
#   - Compression (archives are STORE only)
#
# ── DATA FLOW ─────────────────────────────────────────────────────────────────
#   playback:  /api/sounds/ROOSTER → SSM.interceptor → SSM.selector
#                                  → store.read() → pick → (sequence) write
#                                  → replacement URL
#   export:    store.read() → SPM.export → SPM.sources (fetch / data: URL)
#                          → SPM.wav_normalizer → SPM.platforms (script)
#                          → SPM.zip_builder → one .zip blob
#
# ── Module layout ─────────────────────────────────────────────────────────────
#   SMM/  — Sound Mapping Module: slot names, filenames, format constants
#   SCM/  — Slot Configuration Module: data model, store, settings
#   SSM/  — Source Selection Module: selection engine, playback interceptor
#   SPM/  — Sound Packaging Module: CRC32, LE writer, ZIP, WAV, export
#   SVM/  — Sound Verification Module: archive reader, self-validation suite
#   SBM/  — Sound Bridge Module: flask HTTP bridge
# =============================================================================

__version__ = "1.2.0"
