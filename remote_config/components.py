# ============================================================================
# COMPONENTS DATA WRAPPER
# ============================================================================
# EPOCH: 1 - COORDINATION
# STATUS: Remote config - Component registry
# PURPOSE: Typed CRUD over the deployment's components, grouped by kind
# CREATED: 14 OCT 2026
# ============================================================================
"""
Components Data Wrapper

The components section of the remote config: one group per
ComponentType, each mapping component name -> component. Every
mutator re-validates the whole registry before returning.

Usage:
    components = ComponentsDataWrapper.initialize_with_nodes(["node1", "node2"], "c1", "solo-dev")
    components.add_new_component(RelayComponent(name="relay-1", cluster="c1", namespace="solo-dev"))
    relay = components.get_component(ComponentType.RELAY, "relay-1")
"""

import logging
from typing import Any, Dict, List, Optional

from core.contracts import ComponentState, ComponentType, ConsensusNodeState
from core.errors import (
    ComponentNotFoundError,
    IllegalArgumentError,
    RemoteConfigValidationError,
    SoloError,
)
from core.models.components import (
    COMPONENT_BASE_NAMES,
    BaseComponent,
    ConsensusNodeComponent,
    component_class,
    node_id_from_alias,
    parse_component_index,
    render_component_name,
)

logger = logging.getLogger(__name__)

ComponentGroup = Dict[str, BaseComponent]


class ComponentsDataWrapper:
    """Registry of components keyed by kind, then name."""

    def __init__(self, groups: Optional[Dict[ComponentType, ComponentGroup]] = None):
        self._groups: Dict[ComponentType, ComponentGroup] = {kind: {} for kind in ComponentType}
        for kind, group in (groups or {}).items():
            self._groups[self._resolve_kind(kind)] = dict(group)
        self.validate()

    # =========================================================================
    # FACTORIES
    # =========================================================================

    @classmethod
    def initialize_empty(cls) -> "ComponentsDataWrapper":
        return cls()

    @classmethod
    def initialize_with_nodes(
        cls,
        node_aliases: List[str],
        cluster: str,
        namespace: str,
    ) -> "ComponentsDataWrapper":
        """One NON_DEPLOYED consensus node per alias (node1 -> id 0)."""
        nodes = {
            alias: ConsensusNodeComponent(
                name=alias,
                cluster=cluster,
                namespace=namespace,
                state=ConsensusNodeState.NON_DEPLOYED,
                node_id=node_id_from_alias(alias),
            )
            for alias in node_aliases
        }
        return cls({ComponentType.CONSENSUS_NODE: nodes})

    @classmethod
    def from_object(cls, data: Optional[Dict[str, Any]]) -> "ComponentsDataWrapper":
        """
        Build from the serialized components section.

        Raises:
            RemoteConfigValidationError: On an unknown group or invalid component
        """
        groups: Dict[ComponentType, ComponentGroup] = {}
        for group_key, entries in (data or {}).items():
            try:
                kind = ComponentType(group_key)
            except ValueError:
                raise RemoteConfigValidationError(
                    f"Unknown component group: {group_key}", field="components", value=group_key
                )
            cls_ = component_class(kind)
            groups[kind] = {name: cls_.from_object(entry) for name, entry in (entries or {}).items()}
        return cls(groups)

    def to_object(self) -> Dict[str, Dict[str, Any]]:
        return {
            kind.value: {name: component.to_object() for name, component in group.items()}
            for kind, group in self._groups.items()
        }

    def clone(self) -> "ComponentsDataWrapper":
        return ComponentsDataWrapper.from_object(self.to_object())

    # =========================================================================
    # ACCESSORS
    # =========================================================================

    def get_components(self, kind: ComponentType) -> ComponentGroup:
        """Live group for kind (mutating it bypasses validation)."""
        return self._groups[self._resolve_kind(kind)]

    @property
    def consensus_nodes(self) -> ComponentGroup:
        return self._groups[ComponentType.CONSENSUS_NODE]

    @property
    def relays(self) -> ComponentGroup:
        return self._groups[ComponentType.RELAY]

    @property
    def ha_proxies(self) -> ComponentGroup:
        return self._groups[ComponentType.HA_PROXY]

    @property
    def envoy_proxies(self) -> ComponentGroup:
        return self._groups[ComponentType.ENVOY_PROXY]

    @property
    def mirror_nodes(self) -> ComponentGroup:
        return self._groups[ComponentType.MIRROR_NODE]

    @property
    def mirror_node_explorers(self) -> ComponentGroup:
        return self._groups[ComponentType.MIRROR_NODE_EXPLORER]

    @property
    def block_nodes(self) -> ComponentGroup:
        return self._groups[ComponentType.BLOCK_NODE]

    def all_components(self) -> List[BaseComponent]:
        return [component for group in self._groups.values() for component in group.values()]

    def get_new_component_index(self, kind: ComponentType) -> int:
        """Next free index for a rendered component name of this kind."""
        group = self.get_components(kind)
        highest = max((parse_component_index(name) for name in group), default=0)
        return highest + 1

    def create_new_component(self, kind: ComponentType, cluster: str, namespace: str, **fields: Any) -> BaseComponent:
        """
        Build the next indexed component of kind. Does not add it.

        Raises:
            IllegalArgumentError: For consensus nodes, which are named by alias
        """
        kind = self._resolve_kind(kind)
        base_name = COMPONENT_BASE_NAMES.get(kind)
        if base_name is None:
            raise IllegalArgumentError(f"{kind.display_name} components are not named by index", value=kind)

        name = render_component_name(base_name, self.get_new_component_index(kind))
        return component_class(kind)(name=name, cluster=cluster, namespace=namespace, **fields)

    # =========================================================================
    # CRUD
    # =========================================================================

    def add_new_component(self, component: BaseComponent) -> None:
        """
        Raises:
            SoloError: If an equal component, or one with the same name,
                already exists
        """
        group = self.get_components(component.kind)
        for existing in group.values():
            if existing.compare(component) or existing.name == component.name:
                raise SoloError(
                    "Component exists",
                    meta={"component": component.to_object()},
                )
        group[component.name] = component
        self.validate()

    def edit_component(self, component: BaseComponent) -> None:
        """
        Raises:
            ComponentNotFoundError: If no component of that name exists
        """
        group = self.get_components(component.kind)
        if component.name not in group:
            raise ComponentNotFoundError(
                f"Component doesn't exist, name: {component.name}",
                name=component.name,
                component_type=component.kind.value,
            )
        group[component.name] = component
        self.validate()

    def remove_component(self, name: str, kind: ComponentType) -> None:
        """
        Raises:
            ComponentNotFoundError: If the component is absent
        """
        kind = self._resolve_kind(kind)
        group = self._groups[kind]
        if name not in group:
            raise ComponentNotFoundError(
                f"Component {name} of type {kind.value} not found while attempting to remove",
                name=name,
                component_type=kind.value,
            )
        del group[name]
        self.validate()

    def get_component(self, kind: ComponentType, name: str) -> BaseComponent:
        """
        Raises:
            ComponentNotFoundError: If the component is absent
        """
        kind = self._resolve_kind(kind)
        component = self._groups[kind].get(name)
        if component is None:
            raise ComponentNotFoundError(
                f"Component {name} of type {kind.value} not found while attempting to read",
                name=name,
                component_type=kind.value,
            )
        return component

    def change_node_state(self, name: str, node_state: ConsensusNodeState) -> None:
        node = self.get_component(ComponentType.CONSENSUS_NODE, name)
        node.state = ConsensusNodeState(node_state)
        self.validate()

    def disable_component(self, name: str, kind: ComponentType) -> None:
        """
        Mark a component deleted, keeping its entry.

        Consensus nodes have their own lifecycle; use change_node_state
        or remove_component for them.
        """
        kind = self._resolve_kind(kind)
        if kind == ComponentType.CONSENSUS_NODE:
            raise IllegalArgumentError(
                "Consensus nodes cannot be disabled, change their node state instead",
                value=name,
            )
        component = self.get_component(kind, name)
        component.state = ComponentState.DELETED
        self.validate()

    # =========================================================================
    # VALIDATION
    # =========================================================================

    def validate(self) -> None:
        """
        Check every stored component against its group's variant.

        Raises:
            RemoteConfigValidationError: On a misfiled or invalid component
        """
        for kind, group in self._groups.items():
            expected = component_class(kind)
            if not isinstance(group, dict):
                raise RemoteConfigValidationError(
                    f"Invalid {kind.value} group: {group!r}", field=kind.value, value=group
                )
            for name, component in group.items():
                if not isinstance(name, str) or not name:
                    raise RemoteConfigValidationError(
                        f"Invalid component name key in {kind.value}: {name!r}", field=kind.value, value=name
                    )
                if type(component) is not expected:
                    raise RemoteConfigValidationError(
                        f"Invalid component type in {kind.value}: {type(component).__name__}, "
                        f"expected {expected.__name__}",
                        field=kind.value,
                        value=name,
                    )
                component.validate_component()
                if component.name != name:
                    raise RemoteConfigValidationError(
                        f"Component {component.name} is filed under {name} in {kind.value}",
                        field=kind.value,
                        value=name,
                    )

    @staticmethod
    def _resolve_kind(kind: Any) -> ComponentType:
        try:
            return ComponentType(kind)
        except ValueError:
            raise IllegalArgumentError(f"Unknown component type: {kind}", value=kind)


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = ["ComponentsDataWrapper"]
