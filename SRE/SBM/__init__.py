# =============================================================================
# SRE/SBM/__init__.py — Sound Bridge Module
# =============================================================================
#
# A small flask app that stands in for the browser-side hooks when the
# engine runs as a local service:
#
#   GET  /api/sounds/<NAME>   — replacement audio (or pass-through)
#   GET  /vksr/config         — configuration export (JSON)
#   PUT  /vksr/config         — configuration import (JSON)
#   GET  /vksr/export         — download the export archive
#   GET  /vksr/health         — liveness
#
# Sub-modules:
#   server.py  — create_app() factory and the route handlers
# =============================================================================
