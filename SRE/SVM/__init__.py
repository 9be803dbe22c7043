# =============================================================================
# SRE/SVM/__init__.py — Sound Verification Module
# =============================================================================
#
# The SVM contains the tools for checking that what SPM produces is
# readable by ordinary ZIP and WAV consumers before it leaves the machine.
#
# Sub-modules:
#   zip_reader.py  — parses a store-only archive back into entries and lists
#                    every structural problem (offsets, counts, CRCs)
#   validate.py    — automated self-check suite for the whole SRE stack
# =============================================================================
