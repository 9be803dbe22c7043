# =============================================================================
# SRE/SCM/__init__.py — Slot Configuration Module
# =============================================================================
#
# Everything about what the user configured and where it lives.
#
# Sub-modules:
#   model.py     — AudioSource, the four SoundSlot variants, Configuration,
#                  and their JSON (de)serialisation
#   store.py     — ConfigStore interface, JSON-file and in-memory stores,
#                  config import / export
#   settings.py  — runtime settings from the environment (.env) and
#                  logging setup
# =============================================================================
