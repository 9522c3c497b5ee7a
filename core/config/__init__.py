# ============================================================================
# CONFIGURATION MODULE
# ============================================================================
# EPOCH: 1 - COORDINATION
# STATUS: Core - Configuration and defaults
# PURPOSE: Centralized configuration management
# CREATED: 12 OCT 2026
# ============================================================================
"""
Configuration Module

Provides environment-driven defaults, the operator's local config
file and the per-invocation flag bag.
"""

from core.config.defaults import (
    LockDefaults,
    RemoteConfigDefaults,
    KubeDefaults,
    Defaults,
    get_defaults,
    reset_defaults,
)
from core.config.command_flags import CommandFlags
from core.config.local_config import Deployment, LocalConfig

__all__ = [
    "LockDefaults",
    "RemoteConfigDefaults",
    "KubeDefaults",
    "Defaults",
    "get_defaults",
    "reset_defaults",
    "CommandFlags",
    "Deployment",
    "LocalConfig",
]
