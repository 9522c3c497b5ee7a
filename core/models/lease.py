# ============================================================================
# LEASE MODEL
# ============================================================================
# EPOCH: 1 - COORDINATION
# STATUS: Core - Kubernetes Lease snapshot
# PURPOSE: Holder identity, timestamps and expiry rule for namespace locks
# CREATED: 13 OCT 2026
# ============================================================================
"""
Lease Model

Snapshot of a coordination.k8s.io/v1 Lease as seen by the lock.

Key properties:
- One lease per namespace (name defaults to the namespace)
- holder_identity holds the JSON-serialized LockHolder
- Expiry is measured from renew_time, falling back to acquire_time
- A lease exactly at its boundary is still valid
- resource_version carries optimistic concurrency into replace calls
"""

from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, Field


class Lease(BaseModel):
    """
    Namespace lease.

    Expired iff (now - (renew_time or acquire_time)) > duration_seconds.
    """

    name: str = Field(min_length=1, description="Lease name (defaults to the namespace)")
    namespace: str = Field(min_length=1)
    holder_identity: Optional[str] = Field(
        default=None,
        description="JSON-serialized LockHolder of the current owner"
    )
    duration_seconds: Optional[int] = Field(default=None, ge=0)
    acquire_time: Optional[datetime] = None
    renew_time: Optional[datetime] = None
    lease_transitions: int = Field(
        default=0,
        ge=0,
        description="Ownership hand-overs; informational only"
    )
    resource_version: Optional[str] = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "solo-dev",
                    "namespace": "solo-dev",
                    "holder_identity": '{"username": "ops", "hostname": "ws-1", "pid": 4242}',
                    "duration_seconds": 20,
                    "acquire_time": "2026-10-13T12:00:00Z",
                    "renew_time": "2026-10-13T12:00:10Z",
                    "lease_transitions": 0,
                }
            ]
        }
    }

    @classmethod
    def from_v1_lease(cls, v1_lease: Any) -> "Lease":
        """Build from a kubernetes.client.V1Lease."""
        spec = v1_lease.spec
        metadata = v1_lease.metadata
        return cls(
            name=metadata.name,
            namespace=metadata.namespace,
            holder_identity=spec.holder_identity if spec else None,
            duration_seconds=spec.lease_duration_seconds if spec else None,
            acquire_time=spec.acquire_time if spec else None,
            renew_time=spec.renew_time if spec else None,
            lease_transitions=(spec.lease_transitions or 0) if spec else 0,
            resource_version=metadata.resource_version,
        )

    @property
    def last_activity(self) -> Optional[datetime]:
        return self.renew_time or self.acquire_time

    def is_expired(self, default_duration_seconds: int, now: Optional[datetime] = None) -> bool:
        """
        Check if the lease has expired.

        Args:
            default_duration_seconds: Used when the lease carries no duration
            now: Current time (defaults to now, UTC)

        Returns:
            True if more than duration seconds passed since the last renewal
        """
        if now is None:
            now = datetime.now(timezone.utc)

        last = self.last_activity
        if last is None:
            return True

        if last.tzinfo is None:
            last = last.replace(tzinfo=timezone.utc)
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)

        duration = self.duration_seconds or default_duration_seconds
        elapsed = (now - last).total_seconds()
        return elapsed > duration


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = ['Lease']
