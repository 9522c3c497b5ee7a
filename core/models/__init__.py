# ============================================================================
# MODELS MODULE
# ============================================================================
# EPOCH: 1 - COORDINATION
# STATUS: Model exports
# PURPOSE: Central export point for all Pydantic models
# LAST_REVIEWED: 13 OCT 2026
# ============================================================================
"""
Models Module - Central Export Point

Pydantic models for leases and for the pieces of the remote config
document (clusters, metadata, components).
"""

from core.models.lease import Lease
from core.models.cluster import Cluster
from core.models.metadata import Migration, RemoteConfigMetadata
from core.models.components import (
    BaseComponent,
    ConsensusNodeComponent,
    RelayComponent,
    HaProxyComponent,
    EnvoyProxyComponent,
    MirrorNodeComponent,
    MirrorNodeExplorerComponent,
    BlockNodeComponent,
    COMPONENT_CLASSES,
)

__all__ = [
    "Lease",
    "Cluster",
    "Migration",
    "RemoteConfigMetadata",
    "BaseComponent",
    "ConsensusNodeComponent",
    "RelayComponent",
    "HaProxyComponent",
    "EnvoyProxyComponent",
    "MirrorNodeComponent",
    "MirrorNodeExplorerComponent",
    "BlockNodeComponent",
    "COMPONENT_CLASSES",
]
