# ============================================================================
# VERSION - SOLO COORDINATION
# ============================================================================
# EPOCH: 1 - COORDINATION
# ============================================================================
"""
Version information for the coordination layer.

This is the single source of truth for the tool version; it is stamped
into remote config metadata as soloVersion.
"""
# Version format: major.minor.patch
__version__ = "0.1.0"
__version_info__ = tuple(int(x) for x in __version__.split("."))

# Build metadata
BUILD_DATE = "2026-10-15"

EPOCH = 1
CODENAME = "Solo Coordination"
