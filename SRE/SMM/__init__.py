# =============================================================================
# SRE/SMM/__init__.py — Sound Mapping Module
# =============================================================================
#
# The SMM is the single source of truth for every name and number the rest
# of SRE agrees on: the slot identifiers vibe-kanban requests, the target
# filenames those slots map to on disk, the play-mode names, and the byte
# layouts of the WAV and ZIP containers.
#
# All other SRE sub-modules import exclusively from here.
# Never define slot names or container constants outside this module.
#
# Sub-modules:
#   constants.py  — slot tables, mode names, WAV/ZIP constants, default preset
# =============================================================================
