# ============================================================================
# ERROR HIERARCHY
# ============================================================================
# EPOCH: 1 - COORDINATION
# STATUS: Core - Exception taxonomy
# PURPOSE: Typed errors for lock, lease and remote config failures
# CREATED: 12 OCT 2026
# ============================================================================
"""
Error Hierarchy

All errors raised by the coordination layer derive from SoloError so
CLI entry points can map them to exit codes in one place.

    SoloError
    ├── MissingArgumentError
    ├── IllegalArgumentError
    ├── LockError
    │   ├── LockAcquisitionError
    │   └── LockRelinquishmentError
    ├── RemoteConfigValidationError
    ├── ComponentNotFoundError
    └── ResourceNotFoundError

Usage:
    from core.errors import LockAcquisitionError

    raise LockAcquisitionError(
        "Lease is held by another process",
        meta={"self": holder.to_json(), "other": other.to_json()},
    )
"""

from typing import Any, Dict, Optional


class SoloError(Exception):
    """Base exception for coordination errors."""

    def __init__(
        self,
        message: str,
        cause: Optional[BaseException] = None,
        meta: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.cause = cause
        self.meta = meta or {}
        super().__init__(message)
        if cause is not None:
            self.__cause__ = cause


class MissingArgumentError(SoloError):
    """Raised when a required argument is absent or empty."""
    pass


class IllegalArgumentError(SoloError):
    """Raised when an argument is present but invalid."""

    def __init__(self, message: str, value: Any = None, cause: Optional[BaseException] = None):
        self.value = value
        super().__init__(message, cause=cause)


# ============================================================================
# LOCK ERRORS
# ============================================================================

class LockError(SoloError):
    """Base exception for lock operations."""
    pass


class LockAcquisitionError(LockError):
    """
    Raised when a lock cannot be acquired, renewed or transferred.

    meta carries the serialized identities of this process ("self")
    and of the competing holder ("other") when one is known.
    """
    pass


class LockRelinquishmentError(LockError):
    """Raised when a lock cannot be released."""
    pass


# ============================================================================
# REMOTE CONFIG ERRORS
# ============================================================================

class RemoteConfigValidationError(SoloError):
    """Raised when the remote config document or a component is invalid."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Any = None,
        cause: Optional[BaseException] = None,
        meta: Optional[Dict[str, Any]] = None,
    ):
        self.field = field
        self.value = value
        super().__init__(message, cause=cause, meta=meta)


class ComponentNotFoundError(SoloError):
    """Raised when a component is absent from its type group."""

    def __init__(self, message: str, name: str, component_type: str):
        self.name = name
        self.component_type = component_type
        super().__init__(message)


class ResourceNotFoundError(SoloError):
    """Raised when a required Kubernetes resource does not exist."""

    def __init__(self, kind: str, name: str, namespace: Optional[str] = None):
        self.kind = kind
        self.name = name
        self.namespace = namespace
        location = f" in namespace {namespace}" if namespace else ""
        super().__init__(f"{kind} {name} not found{location}")


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "SoloError",
    "MissingArgumentError",
    "IllegalArgumentError",
    "LockError",
    "LockAcquisitionError",
    "LockRelinquishmentError",
    "RemoteConfigValidationError",
    "ComponentNotFoundError",
    "ResourceNotFoundError",
]
