# ============================================================================
# REMOTE CONFIG COMPONENT VALIDATOR
# ============================================================================
# EPOCH: 1 - COORDINATION
# STATUS: Remote config - In-cluster health check
# PURPOSE: Confirm every recorded component has running pods in its cluster
# CREATED: 15 OCT 2026
# ============================================================================
"""
Remote Config Component Validator

The document says what should be running; this checks that it is.
Each active component is looked up by pod label in the context its
cluster ref maps to. All lookups run concurrently.

Pod labels per kind:
    relays                app=hedera-json-rpc-relay
    haProxies             app=<name>
    envoyProxies          app=<name>
    mirrorNodes           app.kubernetes.io/component=importer,app.kubernetes.io/instance=mirror
    mirrorNodeExplorers   app.kubernetes.io/component=hedera-explorer
    consensusNodes        app=network-<name>
    blockNodes            app=<name>

Consensus nodes still in requested or non-deployed state have no pods
yet and are skipped, as are deleted components.

Usage:
    await RemoteConfigValidator.validate_components(
        "solo-dev", doc.components, kube_factory, local_config, skip_consensus_nodes=True
    )
"""

import asyncio
import logging
from typing import List, Optional

from core import constants
from core.config.local_config import LocalConfig
from core.contracts import ComponentState, ComponentType, ConsensusNodeState
from core.errors import RemoteConfigValidationError
from core.models.components import BaseComponent
from infrastructure.kube import KubeClientFactory
from remote_config.components import ComponentsDataWrapper

logger = logging.getLogger(__name__)

_UNDEPLOYED_NODE_STATES = (ConsensusNodeState.REQUESTED, ConsensusNodeState.NON_DEPLOYED)


class RemoteConfigValidator:
    """Static checks of recorded components against live pods."""

    @staticmethod
    def pod_labels(component: BaseComponent) -> List[str]:
        """Label selector terms identifying the component's pods."""
        kind = component.kind
        if kind == ComponentType.RELAY:
            return [constants.SOLO_RELAY_LABEL]
        if kind == ComponentType.MIRROR_NODE:
            return list(constants.SOLO_HEDERA_MIRROR_IMPORTER)
        if kind == ComponentType.MIRROR_NODE_EXPLORER:
            return [constants.SOLO_HEDERA_EXPLORER_LABEL]
        if kind == ComponentType.CONSENSUS_NODE:
            return [f"app=network-{component.name}"]
        return [f"app={component.name}"]

    @staticmethod
    def should_check(component: BaseComponent, skip_consensus_nodes: bool) -> bool:
        if component.kind == ComponentType.CONSENSUS_NODE:
            if skip_consensus_nodes:
                return False
            return component.state not in _UNDEPLOYED_NODE_STATES
        return component.state != ComponentState.DELETED

    @staticmethod
    async def validate_components(
        namespace: str,
        components: ComponentsDataWrapper,
        kube_factory: KubeClientFactory,
        local_config: Optional[LocalConfig],
        skip_consensus_nodes: bool = True,
    ) -> None:
        """
        Check every active component concurrently.

        Args:
            namespace: Deployment namespace
            components: Components to check
            kube_factory: Source of per-context clients
            local_config: Maps cluster refs to contexts (refs are used
                as context names when unmapped)
            skip_consensus_nodes: Skip consensus nodes entirely

        Raises:
            RemoteConfigValidationError: For the first missing component
        """
        checks = [
            RemoteConfigValidator._check_component(namespace, component, kube_factory, local_config)
            for component in components.all_components()
            if RemoteConfigValidator.should_check(component, skip_consensus_nodes)
        ]
        logger.debug(f"Validating {len(checks)} components in {namespace}")
        await asyncio.gather(*checks)

    @staticmethod
    async def _check_component(
        namespace: str,
        component: BaseComponent,
        kube_factory: KubeClientFactory,
        local_config: Optional[LocalConfig],
    ) -> None:
        context = None
        if local_config is not None:
            context = local_config.context_for_cluster(component.cluster)
        context = context or component.cluster

        labels = RemoteConfigValidator.pod_labels(component)
        try:
            pods = await kube_factory.get(context).list_pods(namespace, labels)
        except Exception as e:
            raise RemoteConfigValidationError(
                RemoteConfigValidator._not_found_message(component, namespace),
                field=component.kind.value,
                value=component.name,
                cause=e,
            )

        if not pods:
            raise RemoteConfigValidationError(
                RemoteConfigValidator._not_found_message(component, namespace),
                field=component.kind.value,
                value=component.name,
            )

    @staticmethod
    def _not_found_message(component: BaseComponent, namespace: str) -> str:
        return (
            f"{component.kind.display_name} in remote config with name {component.name} "
            f"was not found in namespace: {namespace}, cluster: {component.cluster}"
        )


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = ["RemoteConfigValidator"]
