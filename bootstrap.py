# ============================================================================
# COORDINATION BOOTSTRAP
# ============================================================================
# EPOCH: 1 - COORDINATION
# STATUS: Core - Composition root
# PURPOSE: Build the lock manager and remote config manager for one command
# CREATED: 15 OCT 2026
# ============================================================================
"""
Coordination Bootstrap

The single place the object graph is wired. Every collaborator is
passed in through constructors; there is no process-wide registry.

Usage:
    coordination = build_coordination(flags, local_config)
    lock = await coordination.lock_manager.create()
    ...
    await coordination.shutdown()
"""

import logging
from dataclasses import dataclass
from typing import Optional

from core.config.command_flags import CommandFlags
from core.config.defaults import Defaults, get_defaults
from core.config.local_config import LocalConfig
from infrastructure.kube import KubeClientFactory
from locking.holder import LockHolder
from locking.manager import LockManager
from locking.renewal import LockRenewalService
from remote_config.manager import RemoteConfigManager

logger = logging.getLogger(__name__)


@dataclass
class CoordinationContext:
    """Everything a command needs to lock its namespace and edit the remote config."""
    flags: CommandFlags
    defaults: Defaults
    holder: LockHolder
    kube_factory: KubeClientFactory
    renewal_service: LockRenewalService
    lock_manager: LockManager
    remote_config: RemoteConfigManager
    local_config: Optional[LocalConfig] = None

    async def shutdown(self) -> None:
        """Stop every scheduled lease renewal."""
        cancelled = await self.renewal_service.shutdown()
        if cancelled:
            logger.debug(f"Cancelled {len(cancelled)} lease renewals on shutdown")


def build_coordination(
    flags: CommandFlags,
    local_config: Optional[LocalConfig] = None,
    defaults: Optional[Defaults] = None,
    kube_factory: Optional[KubeClientFactory] = None,
    holder: Optional[LockHolder] = None,
) -> CoordinationContext:
    """
    Wire the coordination layer for one command invocation.

    Args:
        flags: Flags of the running command
        local_config: Operator config (needed by remote config operations)
        defaults: Process defaults (defaults to get_defaults())
        kube_factory: Client factory (defaults to one over KUBECONFIG)
        holder: Lock identity (defaults to this process)

    Returns:
        CoordinationContext
    """
    defaults = defaults or get_defaults()
    kube_factory = kube_factory or KubeClientFactory(kubeconfig=defaults.kube.kubeconfig)
    holder = holder or LockHolder.default()

    if flags.context is None and defaults.kube.context:
        flags.context = defaults.kube.context

    renewal_service = LockRenewalService(renewal_ratio=defaults.locks.renewal_ratio)
    lock_manager = LockManager(
        kube_factory,
        renewal_service,
        flags,
        defaults=defaults.locks,
        holder=holder,
    )
    remote_config = RemoteConfigManager(kube_factory, local_config, flags, defaults=defaults)

    logger.debug(f"Coordination wired for {holder} (context={flags.context})")

    return CoordinationContext(
        flags=flags,
        defaults=defaults,
        holder=holder,
        kube_factory=kube_factory,
        renewal_service=renewal_service,
        lock_manager=lock_manager,
        remote_config=remote_config,
        local_config=local_config,
    )


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = ["CoordinationContext", "build_coordination"]
