# ============================================================================
# COMPONENT MODELS
# ============================================================================
# EPOCH: 1 - COORDINATION
# STATUS: Core - Deployment component variants
# PURPOSE: Typed records for every component tracked in the remote config
# CREATED: 13 OCT 2026
# ============================================================================
"""
Component Models

One pydantic model per component kind, all sharing
{name, cluster, namespace, state}. Variants are looked up through
COMPONENT_CLASSES, keyed by ComponentType, so the registry never needs
isinstance chains to find a group.

Serialized shape (camelCase, as stored in the ConfigMap):

    consensusNodes:
      node1: {name: node1, cluster: c1, namespace: ns, state: non-deployed, nodeId: 0}
    relays:
      relay-1: {name: relay-1, cluster: c1, namespace: ns, state: active,
                consensusNodeAliases: [node1]}

Usage:
    from core.models.components import component_from_object

    node = component_from_object(ComponentType.CONSENSUS_NODE, data)
    node.validate_component()
"""

import re
from typing import Any, ClassVar, Dict, List, Type

from pydantic import BaseModel, Field, ValidationError

from core.contracts import ComponentState, ComponentType, ConsensusNodeState
from core.errors import IllegalArgumentError, RemoteConfigValidationError


# ============================================================================
# BASE COMPONENT
# ============================================================================

class BaseComponent(BaseModel):
    """
    Common component fields.

    Two components are the same when kind, name, cluster and namespace
    all match (see compare).
    """

    kind: ClassVar[ComponentType]

    name: str
    cluster: str
    namespace: str
    state: ComponentState = ComponentState.ACTIVE

    model_config = {"populate_by_name": True}

    def compare(self, other: "BaseComponent") -> bool:
        return (
            self.kind == other.kind
            and self.name == other.name
            and self.cluster == other.cluster
            and self.namespace == other.namespace
        )

    def validate_component(self) -> None:
        """
        Re-check field invariants (attributes are assignable).

        Raises:
            RemoteConfigValidationError: On the first invalid field
        """
        for field_name in ("name", "cluster", "namespace"):
            value = getattr(self, field_name)
            if not value or not isinstance(value, str):
                raise RemoteConfigValidationError(
                    f"Invalid {field_name}: {value!r}", field=field_name, value=value
                )

        state_type = type(self).model_fields["state"].annotation
        if not isinstance(self.state, state_type):
            raise RemoteConfigValidationError(
                f"Invalid component state: {self.state!r}", field="state", value=self.state
            )

    def to_object(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def from_object(cls, data: Dict[str, Any]) -> "BaseComponent":
        """
        Raises:
            RemoteConfigValidationError: If the data does not fit the variant
        """
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise RemoteConfigValidationError(
                f"Invalid {cls.kind.display_name.lower()} data: {e}",
                value=data,
                cause=e,
            )


# ============================================================================
# VARIANTS
# ============================================================================

class ConsensusNodeComponent(BaseComponent):
    """A consensus node; state tracks the node lifecycle."""
    kind: ClassVar[ComponentType] = ComponentType.CONSENSUS_NODE

    state: ConsensusNodeState = ConsensusNodeState.NON_DEPLOYED
    node_id: int = Field(alias="nodeId", ge=0)

    def validate_component(self) -> None:
        super().validate_component()
        if not isinstance(self.node_id, int) or self.node_id < 0:
            raise RemoteConfigValidationError(
                f"Invalid node id: {self.node_id!r}", field="node_id", value=self.node_id
            )

    @property
    def node_alias(self) -> str:
        return render_node_alias(self.node_id)


class RelayComponent(BaseComponent):
    """JSON-RPC relay, bound to one or more consensus nodes."""
    kind: ClassVar[ComponentType] = ComponentType.RELAY

    consensus_node_aliases: List[str] = Field(default_factory=list, alias="consensusNodeAliases")

    def validate_component(self) -> None:
        super().validate_component()
        for alias in self.consensus_node_aliases:
            if not alias or not isinstance(alias, str):
                raise RemoteConfigValidationError(
                    f"Invalid consensus node alias: {alias!r}",
                    field="consensus_node_aliases",
                    value=alias,
                )


class HaProxyComponent(BaseComponent):
    kind: ClassVar[ComponentType] = ComponentType.HA_PROXY


class EnvoyProxyComponent(BaseComponent):
    kind: ClassVar[ComponentType] = ComponentType.ENVOY_PROXY


class MirrorNodeComponent(BaseComponent):
    kind: ClassVar[ComponentType] = ComponentType.MIRROR_NODE


class MirrorNodeExplorerComponent(BaseComponent):
    kind: ClassVar[ComponentType] = ComponentType.MIRROR_NODE_EXPLORER


class BlockNodeComponent(BaseComponent):
    kind: ClassVar[ComponentType] = ComponentType.BLOCK_NODE


COMPONENT_CLASSES: Dict[ComponentType, Type[BaseComponent]] = {
    cls.kind: cls
    for cls in (
        ConsensusNodeComponent,
        RelayComponent,
        HaProxyComponent,
        EnvoyProxyComponent,
        MirrorNodeComponent,
        MirrorNodeExplorerComponent,
        BlockNodeComponent,
    )
}

# Prefix of indexed component names (relay-1, mirror-node-2); consensus
# nodes are named by alias instead
COMPONENT_BASE_NAMES: Dict[ComponentType, str] = {
    ComponentType.RELAY: "relay",
    ComponentType.HA_PROXY: "haproxy",
    ComponentType.ENVOY_PROXY: "envoy-proxy",
    ComponentType.MIRROR_NODE: "mirror-node",
    ComponentType.MIRROR_NODE_EXPLORER: "mirror-node-explorer",
    ComponentType.BLOCK_NODE: "block-node",
}


# ============================================================================
# HELPERS
# ============================================================================

def component_class(kind: ComponentType) -> Type[BaseComponent]:
    """
    Raises:
        IllegalArgumentError: For an unknown component type
    """
    try:
        return COMPONENT_CLASSES[ComponentType(kind)]
    except (KeyError, ValueError):
        raise IllegalArgumentError(f"Unknown component type: {kind}", value=kind)


def component_from_object(kind: ComponentType, data: Dict[str, Any]) -> BaseComponent:
    return component_class(kind).from_object(data)


_TRAILING_DIGITS = re.compile(r"(\d+)$")


def node_id_from_alias(node_alias: str) -> int:
    """
    node1 -> 0, node12 -> 11.

    Raises:
        IllegalArgumentError: If the alias carries no trailing number
    """
    match = _TRAILING_DIGITS.search(node_alias or "")
    if not match or match.start() == 0:
        raise IllegalArgumentError(f"Can't get node id from node {node_alias}", value=node_alias)
    return int(match.group(1)) - 1


def render_node_alias(node_id: int) -> str:
    return f"node{node_id + 1}"


def render_component_name(base_name: str, index: int) -> str:
    return f"{base_name}-{index}"


def parse_component_index(name: str) -> int:
    """Index suffix of a rendered component name ("mirror-node-3" -> 3), 0 if none."""
    last = name.rsplit("-", 1)[-1]
    return int(last) if last.isdigit() else 0


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "BaseComponent",
    "ConsensusNodeComponent",
    "RelayComponent",
    "HaProxyComponent",
    "EnvoyProxyComponent",
    "MirrorNodeComponent",
    "MirrorNodeExplorerComponent",
    "BlockNodeComponent",
    "COMPONENT_CLASSES",
    "COMPONENT_BASE_NAMES",
    "component_class",
    "component_from_object",
    "node_id_from_alias",
    "render_node_alias",
    "render_component_name",
    "parse_component_index",
]
