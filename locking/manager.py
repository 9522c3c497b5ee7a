# ============================================================================
# LOCK MANAGER
# ============================================================================
# EPOCH: 1 - COORDINATION
# STATUS: Locking - Lock factory
# PURPOSE: Resolve the target namespace and build a lock for this process
# CREATED: 13 OCT 2026
# ============================================================================
"""
Lock Manager

Builds the IntervalLock a command uses. The namespace comes from the
--namespace flag, falling back to --cluster-setup-namespace; with
neither set the lock coordinates nothing. A missing namespace is
created first, since the lease lives inside it.

Usage:
    manager = LockManager(kube_factory, renewals, flags)
    lock = await manager.create()
"""

import logging
from typing import Optional

from core.config.command_flags import CommandFlags
from core.config.defaults import LockDefaults, get_defaults
from core.errors import LockAcquisitionError
from infrastructure.kube import KubeClientFactory
from infrastructure.leases import LeaseClient
from locking.holder import LockHolder
from locking.interval_lock import IntervalLock
from locking.renewal import LockRenewalService

logger = logging.getLogger(__name__)


class LockManager:
    """Factory for namespace locks bound to this process's identity."""

    def __init__(
        self,
        kube_factory: KubeClientFactory,
        renewal_service: LockRenewalService,
        flags: CommandFlags,
        defaults: Optional[LockDefaults] = None,
        holder: Optional[LockHolder] = None,
    ):
        """
        Initialize lock manager.

        Args:
            kube_factory: Source of per-context kube clients
            renewal_service: Shared renewal scheduler
            flags: Flags of the running command
            defaults: Lock timing (defaults to get_defaults().locks)
            holder: Identity override (defaults to LockHolder.default())
        """
        self.kube_factory = kube_factory
        self.renewal_service = renewal_service
        self.flags = flags
        self.defaults = defaults or get_defaults().locks
        self._holder = holder

    def resolve_namespace(self) -> Optional[str]:
        return self.flags.namespace or self.flags.cluster_setup_namespace or None

    async def create(self) -> IntervalLock:
        """
        Build the lock for the resolved namespace.

        Raises:
            LockAcquisitionError: If the namespace cannot be created
        """
        holder = self._holder or LockHolder.default()
        namespace = self.resolve_namespace()

        if namespace is None:
            logger.debug("No namespace configured, lock will not coordinate")
            return IntervalLock(None, self.renewal_service, holder, None)

        kube = self.kube_factory.get(self.flags.context)
        await self._ensure_namespace(kube, namespace)

        leases = LeaseClient(
            kube,
            read_attempts=self.defaults.lease_read_attempts,
            read_retry_seconds=self.defaults.lease_read_retry_seconds,
        )
        return IntervalLock(
            leases,
            self.renewal_service,
            holder,
            namespace,
            duration_seconds=self.defaults.lease_duration_seconds,
        )

    async def _ensure_namespace(self, kube, namespace: str) -> None:
        try:
            if await kube.namespace_exists(namespace):
                return
            logger.info(f"Namespace {namespace} does not exist, creating it")
            await kube.create_namespace(namespace)
            created = await kube.namespace_exists(namespace)
        except Exception as e:
            raise LockAcquisitionError(f"failed to create the '{namespace}' namespace", cause=e)

        if not created:
            raise LockAcquisitionError(f"failed to create the '{namespace}' namespace")


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = ['LockManager']
