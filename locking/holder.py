# ============================================================================
# LOCK HOLDER IDENTITY
# ============================================================================
# EPOCH: 1 - COORDINATION
# STATUS: Locking - Owner identity
# PURPOSE: username/hostname/pid identity stored as the lease holderIdentity
# CREATED: 13 OCT 2026
# ============================================================================
"""
Lock Holder

Immutable identity of a lock owner. Serialized to JSON and stored as
the Kubernetes Lease holderIdentity:

    {"username": "ops", "hostname": "ws-1", "pid": 4242}

Two holders are equal when all three fields match (same process) and
"same machine" when username and hostname match.

Usage:
    from locking.holder import LockHolder

    me = LockHolder.default()
    other = LockHolder.from_json(lease.holder_identity)
    if me.is_same_machine_identity(other) and not other.is_process_alive():
        ...  # stale holder on this machine
"""

import errno
import getpass
import json
import os
import socket
from dataclasses import dataclass
from typing import Any, Dict

from core.errors import IllegalArgumentError, MissingArgumentError


@dataclass(frozen=True)
class LockHolder:
    """Identity of the process holding (or requesting) a lock."""
    username: str
    hostname: str
    process_id: int

    def __post_init__(self):
        if not self.username:
            raise MissingArgumentError("username is required")
        if not self.hostname:
            raise MissingArgumentError("hostname is required")
        if self.process_id is None:
            raise MissingArgumentError("pid is required")
        if not isinstance(self.process_id, int) or isinstance(self.process_id, bool):
            raise IllegalArgumentError(f"Invalid pid: {self.process_id!r}", value=self.process_id)

    # =========================================================================
    # FACTORIES
    # =========================================================================

    @classmethod
    def of(cls, username: str) -> "LockHolder":
        """Identity for username, on this host, in this process."""
        return cls(username=username, hostname=socket.gethostname(), process_id=os.getpid())

    @classmethod
    def default(cls) -> "LockHolder":
        """Identity of the current OS user in this process."""
        return cls.of(getpass.getuser())

    @classmethod
    def from_json(cls, value: str) -> "LockHolder":
        """
        Raises:
            IllegalArgumentError: If the value is not a serialized holder
        """
        try:
            data = json.loads(value)
            return cls(username=data["username"], hostname=data["hostname"], process_id=data["pid"])
        except (TypeError, ValueError, KeyError) as e:
            raise IllegalArgumentError(f"Invalid lock holder identity: {value!r}", value=value, cause=e)

    # =========================================================================
    # COMPARISON
    # =========================================================================

    def equals(self, other: "LockHolder") -> bool:
        return self == other

    def is_same_machine_identity(self, other: "LockHolder") -> bool:
        return self.username == other.username and self.hostname == other.hostname

    def is_process_alive(self) -> bool:
        """
        Zero-signal liveness check of process_id on this host.

        EPERM means the process exists but belongs to another user.
        """
        # kill() treats pid <= 0 as a process group
        if self.process_id <= 0:
            return False
        try:
            os.kill(self.process_id, 0)
        except OSError as e:
            if e.errno == errno.EPERM:
                return True
            return False
        return True

    # =========================================================================
    # SERIALIZATION
    # =========================================================================

    def to_object(self) -> Dict[str, Any]:
        return {"username": self.username, "hostname": self.hostname, "pid": self.process_id}

    def to_json(self) -> str:
        return json.dumps(self.to_object())

    def __str__(self) -> str:
        return self.to_json()


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = ['LockHolder']
