# =============================================================================
# SRE/SSM/__init__.py — Source Selection Module
# =============================================================================
#
# Answers "which source plays for this request?" — synchronously, with no
# network or decode I/O.  Only a reference (URL / data: URL) is returned;
# the host delivers the audio.
#
# Sub-modules:
#   selector.py     — select_source() mode rules + SelectionEngine (store-
#                     backed, per-slot locked read→select→persist)
#   interceptor.py  — /api/sounds/<NAME> recognition and URL substitution
# =============================================================================
