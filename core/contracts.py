# ============================================================================
# BASE CONTRACTS & ENUMS
# ============================================================================
# EPOCH: 1 - COORDINATION
# STATUS: Foundation - Core enums
# PURPOSE: Component kinds and lifecycle states for the remote config
# LAST_REVIEWED: 12 OCT 2026
# EXPORTS: ComponentType, ComponentState, ConsensusNodeState, DeploymentState
# DEPENDENCIES: enum
# ============================================================================
"""
Base contracts for the coordination subsystem.

The enum values are the wire values written into the remote config
ConfigMap, so they must stay stable across releases.
"""

from enum import Enum


# ============================================================================
# COMPONENT KINDS
# ============================================================================

class ComponentType(str, Enum):
    """
    Logical deployment component kinds.

    Each value doubles as the group key inside the serialized
    components section of the remote config.
    """
    CONSENSUS_NODE = "consensusNodes"
    RELAY = "relays"
    HA_PROXY = "haProxies"
    ENVOY_PROXY = "envoyProxies"
    MIRROR_NODE = "mirrorNodes"
    MIRROR_NODE_EXPLORER = "mirrorNodeExplorers"
    BLOCK_NODE = "blockNodes"

    @property
    def display_name(self) -> str:
        """Human readable singular name used in error messages."""
        return _DISPLAY_NAMES[self]


_DISPLAY_NAMES = {
    ComponentType.CONSENSUS_NODE: "Consensus node",
    ComponentType.RELAY: "Relay",
    ComponentType.HA_PROXY: "HaProxy",
    ComponentType.ENVOY_PROXY: "Envoy proxy",
    ComponentType.MIRROR_NODE: "Mirror node",
    ComponentType.MIRROR_NODE_EXPLORER: "Mirror node explorer",
    ComponentType.BLOCK_NODE: "Block node",
}


# ============================================================================
# STATUS ENUMS
# ============================================================================

class ComponentState(str, Enum):
    """
    Component lifecycle in the remote config.

    State transitions:
        ACTIVE -> DELETED
    """
    ACTIVE = "active"
    DELETED = "deleted"


class ConsensusNodeState(str, Enum):
    """
    Consensus node lifecycle.

    State transitions:
        NON_DEPLOYED -> REQUESTED -> INITIALIZED -> SETUP -> STARTED
        STARTED -> FROZEN | STOPPED
    """
    REQUESTED = "requested"          # Added to the config, not yet installed
    INITIALIZED = "initialized"      # Chart installed
    SETUP = "setup"                  # Keys and config copied
    STARTED = "started"              # Platform running
    FROZEN = "frozen"                # Network freeze in effect
    STOPPED = "stopped"              # Platform stopped
    NON_DEPLOYED = "non-deployed"    # Declared only

    def is_deployed(self) -> bool:
        """Check if pods are expected to exist for this state."""
        return self not in (ConsensusNodeState.REQUESTED, ConsensusNodeState.NON_DEPLOYED)


class DeploymentState(str, Enum):
    """Deployment lifecycle stamped into remote config metadata."""
    PRE_GENESIS = "pre-genesis"
    GENESIS = "genesis"


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "ComponentType",
    "ComponentState",
    "ConsensusNodeState",
    "DeploymentState",
]
