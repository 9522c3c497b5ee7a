# ============================================================================
# INTERVAL LOCK
# ============================================================================
# EPOCH: 1 - COORDINATION
# STATUS: Locking - Namespace mutual exclusion
# PURPOSE: Lease-backed lock with background renewal and stale-holder transfer
# CREATED: 13 OCT 2026
# ============================================================================
"""
Interval Lock

Mutual exclusion for one namespace, built on a Kubernetes Lease plus
the LockHolder identity. While held, the lock is kept alive by the
LockRenewalService; if this process dies the lease simply expires.

Holder states (derived from the lease on every call, never cached):
- Unheld                 no lease
- HeldBySelf             holder identity equals ours
- HeldByOtherExpired     any holder, lease expired
- HeldBySameMachineDead  same user+host, holder pid no longer alive
- HeldByOtherAlive       anything else

acquire():
    Unheld / HeldBySelf             -> create or renew
    HeldByOtherExpired              -> transfer to self
    HeldBySameMachineDead           -> transfer to self
    HeldByOtherAlive                -> LockAcquisitionError

A live holder on another machine is never taken over before its lease
expires. There is no fencing token: a partitioned holder can still
write after a transfer; the renewal margin and the liveness check are
the only guards.

Usage:
    from locking.interval_lock import IntervalLock

    lock = IntervalLock(leases, renewals, LockHolder.default(), "solo-dev")
    await lock.acquire()
    try:
        ...  # critical section
    finally:
        await lock.release()
"""

import asyncio
from typing import Optional

from kubernetes.client.rest import ApiException

from core.config.defaults import get_defaults
from core.errors import (
    IllegalArgumentError,
    LockAcquisitionError,
    LockRelinquishmentError,
)
from core.logging import LogComponent, get_logger, log_checkpoint, log_context
from core.models.lease import Lease
from infrastructure.leases import LeaseClient
from locking.holder import LockHolder
from locking.renewal import LockRenewalService

logger = get_logger(__name__, LogComponent.LOCK)


class IntervalLock:
    """
    Lease-backed namespace lock.

    Not reentrant: callers serialize acquire/renew/release on one
    instance. A lock with no namespace coordinates nothing; its
    operations return immediately.
    """

    def __init__(
        self,
        leases: Optional[LeaseClient],
        renewal_service: LockRenewalService,
        holder: LockHolder,
        namespace: Optional[str],
        lease_name: Optional[str] = None,
        duration_seconds: Optional[int] = None,
    ):
        """
        Initialize the lock.

        Args:
            leases: Lease backend for the namespace's context (None without a namespace)
            renewal_service: Scheduler that keeps the lease alive
            holder: Identity of this process
            namespace: Namespace to lock (None = no coordination)
            lease_name: Lease name (defaults to the namespace)
            duration_seconds: Lease duration (defaults to SOLO_LEASE_DURATION / 20)
        """
        self.leases = leases
        self.renewal_service = renewal_service
        self.holder = holder
        self._namespace = namespace
        self._lease_name = lease_name or namespace
        self._duration_seconds = duration_seconds or get_defaults().locks.lease_duration_seconds
        self._schedule_id: Optional[int] = None

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def namespace(self) -> Optional[str]:
        return self._namespace

    @property
    def lease_name(self) -> Optional[str]:
        return self._lease_name

    @property
    def duration_seconds(self) -> int:
        return self._duration_seconds

    @property
    def schedule_id(self) -> Optional[int]:
        return self._schedule_id

    @property
    def is_coordinated(self) -> bool:
        return self._namespace is not None

    def __repr__(self) -> str:
        return f"IntervalLock(namespace={self._namespace!r}, lease={self._lease_name!r})"

    # =========================================================================
    # ACQUIRE
    # =========================================================================

    async def acquire(self) -> None:
        """
        Acquire the lock and schedule renewal.

        Raises:
            LockAcquisitionError: If a live holder owns the lease or the
                backend call fails
        """
        if not self.is_coordinated:
            return

        with log_context(namespace=self._namespace, lease=self._lease_name, operation="acquire"):
            lease = await self._retrieve_lease()

            if lease is None or self._is_held_by_self(lease):
                await self._create_or_renew_lease(lease)
            elif self._check_expiration(lease):
                logger.info(f"Lease {self._lease_name} expired, taking it over")
                await self._transfer_lease(lease)
            else:
                other = self._holder_of(lease)
                if (
                    other is not None
                    and self.holder.is_same_machine_identity(other)
                    and not other.is_process_alive()
                ):
                    logger.info(
                        f"Lease {self._lease_name} held by dead process {other.process_id} "
                        f"on this machine, taking it over"
                    )
                    await self._transfer_lease(lease)
                else:
                    raise self._held_by_other_error(lease, other)

            self._ensure_renewal_scheduled()
            log_checkpoint("lease_acquired", {"holder": self.holder.to_object()}, logger=logger)

    async def try_acquire(self) -> bool:
        try:
            await self.acquire()
            return True
        except Exception as e:
            logger.debug(f"try_acquire failed for {self}: {e}")
            return False

    # =========================================================================
    # RENEW
    # =========================================================================

    async def renew(self) -> None:
        """
        Renew the lease. Only valid while absent or held by self.

        Raises:
            LockAcquisitionError: If another process holds the lease
        """
        if not self.is_coordinated:
            return

        lease = await self._retrieve_lease()
        if lease is None or self._is_held_by_self(lease):
            await self._create_or_renew_lease(lease)
            return

        raise self._held_by_other_error(lease, self._holder_of(lease))

    async def try_renew(self) -> bool:
        try:
            await self.renew()
            return True
        except Exception as e:
            logger.error(f"Failed to renew lease {self._lease_name} in {self._namespace}: {e}")
            return False

    # =========================================================================
    # RELEASE
    # =========================================================================

    async def release(self) -> None:
        """
        Stop renewal and delete the lease.

        When a renewal was scheduled, waits one renewal delay after
        cancelling it so an in-flight renew cannot land after the delete.

        Raises:
            LockRelinquishmentError: If another live process holds the lease
                or the delete fails
        """
        if self.renewal_service.cancel(self._schedule_id):
            await asyncio.sleep(self.renewal_service.calculate_renewal_delay(self).seconds)
        self._schedule_id = None

        if not self.is_coordinated:
            return

        with log_context(namespace=self._namespace, lease=self._lease_name, operation="release"):
            try:
                lease = await self._retrieve_lease()
            except LockAcquisitionError as e:
                raise LockRelinquishmentError(e.message, cause=e.cause, meta=e.meta)

            if lease is None:
                return

            if self._is_held_by_self(lease) or self._check_expiration(lease):
                try:
                    await self.leases.delete(self._namespace, self._lease_name)
                except Exception as e:
                    raise LockRelinquishmentError(
                        f"Failed to delete lease {self._lease_name} in {self._namespace}: {e}",
                        cause=e,
                        meta=self._meta(lease),
                    )
                log_checkpoint("lease_released", logger=logger)
                return

            other = self._holder_of(lease)
            raise LockRelinquishmentError(
                f"Lease {self._lease_name} in {self._namespace} is held by {self._describe(other, lease)}, "
                f"refusing to release",
                meta=self._meta(lease),
            )

    async def try_release(self) -> bool:
        try:
            await self.release()
            return True
        except Exception as e:
            logger.debug(f"try_release failed for {self}: {e}")
            return False

    # =========================================================================
    # STATUS
    # =========================================================================

    async def is_acquired(self) -> bool:
        """True iff the lease exists, is unexpired and is held by self."""
        if not self.is_coordinated:
            return True
        lease = await self._retrieve_lease()
        return lease is not None and not self._check_expiration(lease) and self._is_held_by_self(lease)

    async def is_expired(self) -> bool:
        """True iff the lease exists and is expired, whoever holds it."""
        if not self.is_coordinated:
            return False
        lease = await self._retrieve_lease()
        return lease is not None and self._check_expiration(lease)

    async def lease(self) -> Optional[Lease]:
        """Current lease snapshot, or None."""
        if not self.is_coordinated:
            return None
        return await self._retrieve_lease()

    # =========================================================================
    # CONTEXT MANAGER
    # =========================================================================

    async def __aenter__(self) -> "IntervalLock":
        await self.acquire()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.release()

    # =========================================================================
    # INTERNALS
    # =========================================================================

    async def _retrieve_lease(self) -> Optional[Lease]:
        try:
            return await self.leases.read(self._namespace, self._lease_name)
        except Exception as e:
            raise LockAcquisitionError(
                f"Failed to read lease {self._lease_name} in {self._namespace}: {e}",
                cause=e,
                meta={"self": self.holder.to_json()},
            )

    async def _create_or_renew_lease(self, lease: Optional[Lease]) -> Lease:
        try:
            if lease is None:
                return await self.leases.create(
                    self._namespace,
                    self._lease_name,
                    self.holder.to_json(),
                    self._duration_seconds,
                )
            return await self.leases.renew(lease)
        except ApiException as e:
            if e.status == 409:
                raise LockAcquisitionError(
                    f"Lease {self._lease_name} in {self._namespace} was changed by another process",
                    cause=e,
                    meta={"self": self.holder.to_json()},
                )
            raise self._backend_error("create or renew", e)
        except Exception as e:
            raise self._backend_error("create or renew", e)

    async def _transfer_lease(self, lease: Lease) -> Lease:
        try:
            result = await self.leases.transfer(lease, self.holder.to_json())
        except Exception as e:
            raise self._backend_error("transfer", e, lease)
        log_checkpoint(
            "lease_transferred",
            {"from": lease.holder_identity, "transitions": result.lease_transitions},
            logger=logger,
        )
        return result

    def _ensure_renewal_scheduled(self) -> None:
        if not self.renewal_service.is_scheduled(self._schedule_id):
            self._schedule_id = self.renewal_service.schedule(self)

    def _check_expiration(self, lease: Lease) -> bool:
        return lease.is_expired(self._duration_seconds)

    def _holder_of(self, lease: Lease) -> Optional[LockHolder]:
        if not lease.holder_identity:
            return None
        try:
            return LockHolder.from_json(lease.holder_identity)
        except IllegalArgumentError:
            logger.warning(f"Lease {lease.name} has unreadable holder identity: {lease.holder_identity!r}")
            return None

    def _is_held_by_self(self, lease: Lease) -> bool:
        other = self._holder_of(lease)
        return other is not None and self.holder.equals(other)

    def _meta(self, lease: Optional[Lease]) -> dict:
        meta = {"self": self.holder.to_json()}
        if lease is not None and lease.holder_identity:
            meta["other"] = lease.holder_identity
        return meta

    def _describe(self, other: Optional[LockHolder], lease: Lease) -> str:
        if other is None:
            return f"an unknown holder ({lease.holder_identity!r})"
        return f"user {other.username} on host {other.hostname} (pid {other.process_id})"

    def _held_by_other_error(self, lease: Lease, other: Optional[LockHolder]) -> LockAcquisitionError:
        return LockAcquisitionError(
            f"Lock {self._lease_name} in namespace {self._namespace} is held by "
            f"{self._describe(other, lease)}",
            meta=self._meta(lease),
        )

    def _backend_error(self, operation: str, e: Exception, lease: Optional[Lease] = None) -> LockAcquisitionError:
        return LockAcquisitionError(
            f"Failed to {operation} lease {self._lease_name} in {self._namespace}: {e}",
            cause=e,
            meta=self._meta(lease),
        )


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = ['IntervalLock']
