# ============================================================================
# LEASE CLIENT
# ============================================================================
# EPOCH: 1 - COORDINATION
# STATUS: Infrastructure - coordination.k8s.io/v1 Lease CRUD
# PURPOSE: Create/read/renew/transfer/delete the lease behind a namespace lock
# CREATED: 13 OCT 2026
# ============================================================================
"""
Lease Client

Lease CRUD over the Kubernetes Coordination API. Returns Lease
snapshots (core.models.lease) rather than raw V1Lease objects.

Replace calls carry the snapshot's resourceVersion, so a concurrent
writer surfaces as a 409 ApiException instead of a silent overwrite.
Reads retry on 500 responses, which the control plane returns
transiently under load.

Usage:
    from infrastructure.leases import LeaseClient

    leases = LeaseClient(kube)
    lease = await leases.read("solo-dev", "solo-dev")
    if lease is None:
        lease = await leases.create("solo-dev", "solo-dev", holder.to_json(), 20)
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Optional

from kubernetes import client
from kubernetes.client.rest import ApiException

from core import constants
from core.models.lease import Lease
from infrastructure.kube import KubeClient

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class LeaseClient:
    """Lease CRUD for one kube context."""

    def __init__(
        self,
        kube: KubeClient,
        read_attempts: int = constants.LEASE_READ_ATTEMPTS,
        read_retry_seconds: float = constants.LEASE_READ_RETRY_SECONDS,
    ):
        """
        Initialize lease client.

        Args:
            kube: Client bound to the context holding the lease
            read_attempts: Attempts for read when the API answers 500
            read_retry_seconds: Sleep between those attempts
        """
        self.kube = kube
        self.read_attempts = read_attempts
        self.read_retry_seconds = read_retry_seconds

    @staticmethod
    def _to_body(lease: Lease) -> client.V1Lease:
        return client.V1Lease(
            metadata=client.V1ObjectMeta(
                name=lease.name,
                namespace=lease.namespace,
                resource_version=lease.resource_version,
            ),
            spec=client.V1LeaseSpec(
                holder_identity=lease.holder_identity,
                lease_duration_seconds=lease.duration_seconds,
                acquire_time=lease.acquire_time,
                renew_time=lease.renew_time,
                lease_transitions=lease.lease_transitions,
            ),
        )

    async def _replace(self, lease: Lease) -> Lease:
        result = await self.kube.call(
            self.kube.coordination_api.replace_namespaced_lease,
            name=lease.name,
            namespace=lease.namespace,
            body=self._to_body(lease),
        )
        return Lease.from_v1_lease(result)

    async def create(
        self,
        namespace: str,
        name: str,
        holder_identity: str,
        duration_seconds: int,
    ) -> Lease:
        """
        Create a lease held by holder_identity, acquired now.

        Raises:
            ApiException: 409 if the lease already exists
        """
        lease = Lease(
            name=name,
            namespace=namespace,
            holder_identity=holder_identity,
            duration_seconds=duration_seconds,
            acquire_time=_now(),
            lease_transitions=0,
        )
        result = await self.kube.call(
            self.kube.coordination_api.create_namespaced_lease,
            namespace=namespace,
            body=self._to_body(lease),
        )
        logger.debug(f"Created lease {namespace}/{name}")
        return Lease.from_v1_lease(result)

    async def read(self, namespace: str, name: str) -> Optional[Lease]:
        """
        Read a lease.

        Returns:
            Lease snapshot, or None if it does not exist

        Raises:
            ApiException: Any non-404 error, or 500 after all attempts
        """
        attempt = 0
        while True:
            attempt += 1
            try:
                result = await self.kube.call(
                    self.kube.coordination_api.read_namespaced_lease,
                    name=name,
                    namespace=namespace,
                )
                return Lease.from_v1_lease(result)
            except ApiException as e:
                if e.status == 404:
                    return None
                if e.status == 500 and attempt < self.read_attempts:
                    logger.warning(
                        f"Lease read {namespace}/{name} returned 500 "
                        f"(attempt {attempt}/{self.read_attempts}), retrying"
                    )
                    await asyncio.sleep(self.read_retry_seconds)
                    continue
                raise

    async def renew(self, lease: Lease) -> Lease:
        """Stamp renew_time = now and replace."""
        renewed = lease.model_copy(update={"renew_time": _now()})
        return await self._replace(renewed)

    async def transfer(self, lease: Lease, holder_identity: str) -> Lease:
        """
        Hand the lease to a new holder.

        lease_transitions is incremented for observability only.
        """
        now = _now()
        transferred = lease.model_copy(
            update={
                "holder_identity": holder_identity,
                "acquire_time": now,
                "renew_time": now,
                "lease_transitions": lease.lease_transitions + 1,
            }
        )
        result = await self._replace(transferred)
        logger.info(
            f"Transferred lease {lease.namespace}/{lease.name} "
            f"(transitions={result.lease_transitions})"
        )
        return result

    async def delete(self, namespace: str, name: str) -> None:
        await self.kube.call(
            self.kube.coordination_api.delete_namespaced_lease,
            name=name,
            namespace=namespace,
        )
        logger.debug(f"Deleted lease {namespace}/{name}")


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = ['LeaseClient']
