# ============================================================================
# LOCK RENEWAL SERVICE
# ============================================================================
# EPOCH: 1 - COORDINATION
# STATUS: Locking - Background lease keep-alive
# PURPOSE: Renew held leases at a fraction of their duration until cancelled
# CREATED: 13 OCT 2026
# ============================================================================
"""
Lock Renewal Service

Keeps held locks alive. schedule(lock) starts a named asyncio task
that calls lock.try_renew() every calculate_renewal_delay(lock) until
cancelled; the returned schedule id is the handle used to cancel it.

A failed renewal is logged and the schedule keeps going: the next tick
may succeed, and if the lease really was lost the next acquire or
release reports it.

Usage:
    from locking.renewal import LockRenewalService

    renewals = LockRenewalService()
    schedule_id = renewals.schedule(lock)
    ...
    renewals.cancel(schedule_id)
    await asyncio.sleep(renewals.calculate_renewal_delay(lock).seconds)
"""

import asyncio
import itertools
import logging
from typing import Dict, Optional, Protocol

from core import constants
from core.time import Duration

logger = logging.getLogger(__name__)


class RenewableLock(Protocol):
    """What the renewal service needs from a lock."""
    duration_seconds: float

    async def try_renew(self) -> bool: ...


class LockRenewalService:
    """
    Background renewal scheduler.

    Runs on the caller's event loop; schedule() must be called from
    within a running loop.
    """

    def __init__(self, renewal_ratio: float = constants.LEASE_RENEWAL_RATIO):
        """
        Initialize renewal service.

        Args:
            renewal_ratio: Fraction of the lease duration between renewals
        """
        self.renewal_ratio = renewal_ratio
        self._scheduled: Dict[int, asyncio.Task] = {}
        self._ids = itertools.count(1)

    @property
    def scheduled_count(self) -> int:
        return len(self._scheduled)

    def calculate_renewal_delay(self, lock: RenewableLock) -> Duration:
        return Duration.of_seconds(lock.duration_seconds).multiplied_by(self.renewal_ratio)

    def schedule(self, lock: RenewableLock) -> int:
        """
        Start renewing lock in the background.

        Returns:
            Process-local schedule id
        """
        schedule_id = next(self._ids)
        delay = self.calculate_renewal_delay(lock)
        self._scheduled[schedule_id] = asyncio.create_task(
            self._renewal_loop(schedule_id, lock, delay),
            name=f"lease-renewal-{schedule_id}",
        )
        logger.debug(f"Scheduled lease renewal {schedule_id} every {delay}")
        return schedule_id

    def is_scheduled(self, schedule_id: Optional[int]) -> bool:
        return schedule_id is not None and schedule_id in self._scheduled

    def cancel(self, schedule_id: Optional[int]) -> bool:
        """
        Stop a schedule. Idempotent.

        Returns:
            True if a schedule was actually cancelled
        """
        if not schedule_id:
            return False

        task = self._scheduled.pop(schedule_id, None)
        if task is None:
            return False

        task.cancel()
        logger.debug(f"Cancelled lease renewal {schedule_id}")
        return True

    def cancel_all(self) -> Dict[int, bool]:
        return {schedule_id: self.cancel(schedule_id) for schedule_id in list(self._scheduled)}

    async def shutdown(self) -> Dict[int, bool]:
        """Cancel every schedule and wait for the tasks to finish."""
        tasks = list(self._scheduled.values())
        results = self.cancel_all()
        for task in tasks:
            try:
                await task
            except asyncio.CancelledError:
                pass
        return results

    async def _renewal_loop(self, schedule_id: int, lock: RenewableLock, delay: Duration) -> None:
        while True:
            await asyncio.sleep(delay.seconds)
            try:
                renewed = await lock.try_renew()
                if not renewed:
                    logger.warning(f"Lease renewal {schedule_id} failed, will retry in {delay}")
            except Exception as e:
                logger.error(f"Lease renewal {schedule_id} error: {e}")


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = ['LockRenewalService', 'RenewableLock']
