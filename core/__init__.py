# ============================================================================
# CORE MODULE
# ============================================================================
# EPOCH: 1 - COORDINATION
# STATUS: Core module initialization
# PURPOSE: Export core contracts and errors
# LAST_REVIEWED: 13 OCT 2026
# ============================================================================

from core.contracts import ComponentType, ComponentState, ConsensusNodeState, DeploymentState
from core.errors import (
    SoloError,
    LockAcquisitionError,
    LockRelinquishmentError,
    RemoteConfigValidationError,
)
from core.time import Duration

__all__ = [
    # Enums
    "ComponentType",
    "ComponentState",
    "ConsensusNodeState",
    "DeploymentState",
    # Errors
    "SoloError",
    "LockAcquisitionError",
    "LockRelinquishmentError",
    "RemoteConfigValidationError",
    # Values
    "Duration",
]
