# ============================================================================
# LOCK ACQUIRE RETRY
# ============================================================================
# EPOCH: 1 - COORDINATION
# STATUS: Locking - Caller-side retry policy
# PURPOSE: Bounded acquire retries so racing commands serialize
# CREATED: 14 OCT 2026
# ============================================================================
"""
Lock Acquire Retry

The lock itself never waits. Commands that race for the same
namespace call acquire_with_retry, which retries up to a bounded
number of attempts (SOLO_LEASE_ACQUIRE_ATTEMPTS, default 10) and
sleeps one lease duration between attempts, long enough for a crashed
holder's lease to expire.

held_lock wraps the whole command contract: acquire with retry, run
the body, release in a finally block whatever happens.

Usage:
    async with held_lock(lock, progress=report):
        await remote_config.modify(mutate)
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Callable, Optional

from core.config.defaults import get_defaults
from core.errors import LockAcquisitionError
from locking.interval_lock import IntervalLock

logger = logging.getLogger(__name__)

# progress(attempt, max_attempts, error)
ProgressCallback = Callable[[int, int, Optional[Exception]], None]

MAX_ATTEMPTS_REACHED = "Failed to acquire lock, max attempts reached"


async def acquire_with_retry(
    lock: IntervalLock,
    attempts: Optional[int] = None,
    progress: Optional[ProgressCallback] = None,
) -> None:
    """
    Acquire lock, retrying on failure.

    Args:
        lock: Lock to acquire
        attempts: Max attempts (defaults to SOLO_LEASE_ACQUIRE_ATTEMPTS / 10)
        progress: Called after each failed attempt

    Raises:
        LockAcquisitionError: After the last attempt fails
    """
    max_attempts = attempts or get_defaults().locks.acquire_attempts
    last_error: Optional[Exception] = None

    for attempt in range(1, max_attempts + 1):
        try:
            await lock.acquire()
            if attempt > 1:
                logger.info(f"Acquired {lock} on attempt {attempt}/{max_attempts}")
            return
        except LockAcquisitionError as e:
            last_error = e
            logger.warning(f"Attempt {attempt}/{max_attempts} to acquire {lock} failed: {e}")
            if progress is not None:
                progress(attempt, max_attempts, e)

        if attempt < max_attempts:
            await asyncio.sleep(lock.duration_seconds)

    raise LockAcquisitionError(
        MAX_ATTEMPTS_REACHED,
        cause=last_error,
        meta=getattr(last_error, "meta", None),
    )


@asynccontextmanager
async def held_lock(
    lock: IntervalLock,
    attempts: Optional[int] = None,
    progress: Optional[ProgressCallback] = None,
):
    """Acquire with retry, yield the lock, always release."""
    await acquire_with_retry(lock, attempts=attempts, progress=progress)
    try:
        yield lock
    finally:
        try:
            await lock.release()
        except Exception as e:
            logger.error(f"Failed to release {lock}: {e}")
            raise


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = ['acquire_with_retry', 'held_lock', 'MAX_ATTEMPTS_REACHED', 'ProgressCallback']
