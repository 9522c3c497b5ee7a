# ============================================================================
# LOCKING MODULE
# ============================================================================
# EPOCH: 1 - COORDINATION
# STATUS: Locking - Lease-backed namespace locks
# PURPOSE: Export lock identity, lock, renewal service and lock manager
# CREATED: 13 OCT 2026
# ============================================================================
"""
Locking module.

Provides:
- LockHolder: username/hostname/pid identity of a lock owner
- LockRenewalService: background keep-alive for held leases
- IntervalLock: lease-backed namespace lock
- LockManager: builds the lock for the command's namespace
- acquire_with_retry / held_lock: caller-side retry and release

Usage:
    from locking import LockManager, held_lock

    lock = await LockManager(kube_factory, renewals, flags).create()
    async with held_lock(lock):
        ...
"""

from locking.holder import LockHolder
from locking.renewal import LockRenewalService
from locking.interval_lock import IntervalLock
from locking.manager import LockManager
from locking.retry import acquire_with_retry, held_lock

__all__ = [
    "LockHolder",
    "LockRenewalService",
    "IntervalLock",
    "LockManager",
    "acquire_with_retry",
    "held_lock",
]
