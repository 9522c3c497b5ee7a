# ============================================================================
# CONFIGURATION DEFAULTS
# ============================================================================
# EPOCH: 1 - COORDINATION
# STATUS: Core - Default configuration values
# PURPOSE: Centralized defaults for leases, remote config and kube access
# CREATED: 12 OCT 2026
# ============================================================================
"""
Configuration Defaults

Lock timing, remote config bounds and Kubernetes client access, each
group a frozen dataclass with a from_env constructor.

Environment:
    SOLO_LEASE_DURATION            Lease duration in seconds
    SOLO_LEASE_ACQUIRE_ATTEMPTS    Attempts before giving up on a held lock
    SOLO_REMOTE_CONFIG_MAX_HISTORY Command history bound
    KUBECONFIG / SOLO_KUBE_CONTEXT Kube client selection
"""

import os
from dataclasses import dataclass, field
from typing import Optional

from core import constants
from core.errors import IllegalArgumentError


def _env_int(name: str, default: int, minimum: int = 1) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise IllegalArgumentError(f"{name} must be an integer, got {raw!r}", value=raw)
    if value < minimum:
        raise IllegalArgumentError(f"{name} must be >= {minimum}, got {value}", value=value)
    return value


@dataclass(frozen=True)
class LockDefaults:
    """
    Lease timing.

    The renewal ratio is the fraction of the lease duration after which
    a held lease is renewed.
    """
    lease_duration_seconds: int = constants.DEFAULT_LEASE_DURATION_SECONDS
    acquire_attempts: int = constants.DEFAULT_LOCK_ACQUIRE_ATTEMPTS
    renewal_ratio: float = constants.LEASE_RENEWAL_RATIO

    # Lease reads retry on transient 500s from the control plane
    lease_read_attempts: int = constants.LEASE_READ_ATTEMPTS
    lease_read_retry_seconds: float = constants.LEASE_READ_RETRY_SECONDS

    @classmethod
    def from_env(cls) -> "LockDefaults":
        return cls(
            lease_duration_seconds=_env_int("SOLO_LEASE_DURATION", constants.DEFAULT_LEASE_DURATION_SECONDS),
            acquire_attempts=_env_int("SOLO_LEASE_ACQUIRE_ATTEMPTS", constants.DEFAULT_LOCK_ACQUIRE_ATTEMPTS),
        )


@dataclass(frozen=True)
class RemoteConfigDefaults:
    configmap_name: str = constants.SOLO_REMOTE_CONFIGMAP_NAME
    max_command_history: int = constants.SOLO_REMOTE_CONFIG_MAX_COMMAND_IN_HISTORY

    @classmethod
    def from_env(cls) -> "RemoteConfigDefaults":
        return cls(
            max_command_history=_env_int(
                "SOLO_REMOTE_CONFIG_MAX_HISTORY",
                constants.SOLO_REMOTE_CONFIG_MAX_COMMAND_IN_HISTORY,
            ),
        )


@dataclass(frozen=True)
class KubeDefaults:
    """Kubeconfig path and context; None means the client library default."""
    kubeconfig: Optional[str] = None
    context: Optional[str] = None

    @classmethod
    def from_env(cls) -> "KubeDefaults":
        return cls(
            kubeconfig=os.getenv("KUBECONFIG") or None,
            context=os.getenv("SOLO_KUBE_CONTEXT") or None,
        )


@dataclass(frozen=True)
class Defaults:
    locks: LockDefaults = field(default_factory=LockDefaults)
    remote_config: RemoteConfigDefaults = field(default_factory=RemoteConfigDefaults)
    kube: KubeDefaults = field(default_factory=KubeDefaults)

    @classmethod
    def from_env(cls) -> "Defaults":
        return cls(
            locks=LockDefaults.from_env(),
            remote_config=RemoteConfigDefaults.from_env(),
            kube=KubeDefaults.from_env(),
        )


_defaults: Optional[Defaults] = None


def get_defaults() -> Defaults:
    """Process-wide defaults, read from the environment on first use."""
    global _defaults
    if _defaults is None:
        _defaults = Defaults.from_env()
    return _defaults


def reset_defaults() -> None:
    """Drop the cached defaults so the next get_defaults() rereads env."""
    global _defaults
    _defaults = None


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "LockDefaults",
    "RemoteConfigDefaults",
    "KubeDefaults",
    "Defaults",
    "get_defaults",
    "reset_defaults",
]
