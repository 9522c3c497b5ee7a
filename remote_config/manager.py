# ============================================================================
# REMOTE CONFIG MANAGER
# ============================================================================
# EPOCH: 1 - COORDINATION
# STATUS: Remote config - Load, mutate and replicate the deployment document
# PURPOSE: ConfigMap-backed remote config shared by every cluster of a deployment
# CREATED: 15 OCT 2026
# ============================================================================
"""
Remote Config Manager

Owns the in-memory copy of the remote config for one CLI process and
replicates it into a ConfigMap in every cluster context of the
deployment.

Lifecycle:
    create()             brand-new document, written to one context
    load_and_validate()  per-command entry point: default namespace and
                         context, load once, check components, record the
                         command, stamp versions, save
    modify(callback)     the only mutation path; validates, then saves
    unload()             drop the cached copy

Access is not exclusive: callers hold the namespace lock (see
locking.retry.held_lock) around modify. Saving is a best-effort fan-out;
every context is attempted and failures are reported together, with no
rollback of the contexts that succeeded.

Usage:
    manager = RemoteConfigManager(kube_factory, local_config, flags)
    await manager.load_and_validate()
    await manager.modify(lambda doc: doc.components.add_new_component(relay))
"""

import asyncio
import inspect
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

from __version__ import __version__
from core import constants
from core.config.command_flags import CommandFlags
from core.config.defaults import Defaults, get_defaults
from core.config.local_config import LocalConfig
from core.contracts import ComponentType, DeploymentState
from core.errors import (
    MissingArgumentError,
    RemoteConfigValidationError,
    ResourceNotFoundError,
    SoloError,
)
from core.logging import LogComponent, get_logger, log_checkpoint, log_context
from core.models.cluster import Cluster
from core.models.metadata import RemoteConfigMetadata
from core.models.components import BaseComponent, render_node_alias
from infrastructure.kube import ApiException, KubeClientFactory
from remote_config.components import ComponentsDataWrapper
from remote_config.data_wrapper import RemoteConfigDataWrapper
from remote_config.flags import CommonFlagsDataWrapper
from remote_config.validator import RemoteConfigValidator

logger = get_logger(__name__, LogComponent.REMOTE_CONFIG)

ModifyCallback = Callable[[RemoteConfigDataWrapper], Union[None, Awaitable[None]]]

# (command, subcommand) pairs that deploy the solo chart
_SOLO_CHART_COMMANDS = {
    ("network", "deploy"),
    ("network", "refresh"),
    ("node", "update"),
    ("node", "update-execute"),
    ("node", "add"),
    ("node", "add-execute"),
    ("node", "delete"),
    ("node", "delete-execute"),
}

# node subcommands that never touch the platform release
_NODE_SUBCOMMANDS_WITHOUT_RELEASE = {"keys", "logs", "states"}


# ============================================================================
# CONSENSUS NODE VIEW
# ============================================================================

@dataclass(frozen=True)
class ConsensusNode:
    """Read-only view of a consensus node joined with its cluster settings."""
    name: str
    node_id: int
    namespace: str
    cluster: str
    context: Optional[str]
    dns_base_domain: str
    dns_consensus_node_pattern: str
    full_fqdn: str


def render_consensus_node_fqdn(
    node_alias: str,
    node_id: int,
    namespace: str,
    cluster: str,
    dns_base_domain: str,
    dns_consensus_node_pattern: str,
) -> str:
    """Expand the cluster's DNS pattern for one node and append the base domain."""
    host = (
        dns_consensus_node_pattern.replace("{nodeAlias}", node_alias)
        .replace("{nodeId}", str(node_id))
        .replace("{namespace}", namespace)
        .replace("{cluster}", cluster)
    )
    return f"{host}.{dns_base_domain}"


# ============================================================================
# MANAGER
# ============================================================================

class RemoteConfigManager:
    """Remote config owner for one process."""

    def __init__(
        self,
        kube_factory: KubeClientFactory,
        local_config: Optional[LocalConfig],
        flags: CommandFlags,
        defaults: Optional[Defaults] = None,
    ):
        """
        Initialize the manager.

        Args:
            kube_factory: Source of per-context clients
            local_config: Operator config (deployments, cluster refs, email)
            flags: Flags of the running command; namespace and context are
                filled in when defaulted
            defaults: Process defaults (defaults to get_defaults())
        """
        self.kube_factory = kube_factory
        self._local_config = local_config
        self.flags = flags
        self.defaults = defaults or get_defaults()
        self._remote_config: Optional[RemoteConfigDataWrapper] = None

    # =========================================================================
    # STATE
    # =========================================================================

    @property
    def local_config(self) -> LocalConfig:
        if self._local_config is None:
            raise SoloError("Local config is required for remote config operations")
        return self._local_config

    @property
    def remote_config(self) -> Optional[RemoteConfigDataWrapper]:
        return self._remote_config

    @property
    def components(self) -> ComponentsDataWrapper:
        """Copy of the loaded components."""
        return self._require_loaded().components.clone()

    @property
    def clusters(self) -> Dict[str, Cluster]:
        """Copy of the loaded clusters."""
        return {ref: cluster.model_copy() for ref, cluster in self._require_loaded().clusters.items()}

    @property
    def configmap_name(self) -> str:
        return self.defaults.remote_config.configmap_name

    def is_loaded(self) -> bool:
        return self._remote_config is not None

    def unload(self) -> None:
        self._remote_config = None

    # =========================================================================
    # CREATE / MODIFY / SAVE
    # =========================================================================

    async def create(
        self,
        state: DeploymentState,
        node_aliases: List[str],
        namespace: str,
        deployment: str,
        cluster_ref: str,
        context: Optional[str],
        dns_base_domain: str = constants.DEFAULT_DNS_BASE_DOMAIN,
        dns_consensus_node_pattern: str = constants.DEFAULT_DNS_CONSENSUS_NODE_PATTERN,
    ) -> RemoteConfigDataWrapper:
        """
        Build a new document for one cluster and write it as a new ConfigMap.

        Args:
            state: Initial deployment state
            node_aliases: Consensus nodes to seed (node1, node2, ...)
            namespace: Deployment namespace
            deployment: Deployment name
            cluster_ref: Ref of the cluster being bootstrapped
            context: Context the ConfigMap is written to
            dns_base_domain: Cluster DNS base domain
            dns_consensus_node_pattern: Consensus node service name pattern

        Returns:
            The created document (now loaded)
        """
        current_command = " ".join(self.flags.command)

        with log_context(namespace=namespace, deployment=deployment, context=context, operation="create"):
            document = RemoteConfigDataWrapper(
                metadata=RemoteConfigMetadata(
                    name=namespace,
                    deployment_name=deployment,
                    state=state,
                    last_updated_at=datetime.now(timezone.utc),
                    last_update_by=self.local_config.user_email_address,
                    solo_version=__version__,
                ),
                clusters={
                    cluster_ref: Cluster(
                        name=cluster_ref,
                        namespace=namespace,
                        deployment=deployment,
                        dns_base_domain=dns_base_domain,
                        dns_consensus_node_pattern=dns_consensus_node_pattern,
                    )
                },
                components=ComponentsDataWrapper.initialize_with_nodes(node_aliases, cluster_ref, namespace),
                command_history=[current_command] if current_command else [],
                last_executed_command=current_command,
                flags=CommonFlagsDataWrapper.initialize(self.flags),
                max_command_history=self.defaults.remote_config.max_command_history,
            )

            await self.create_config_map(context, namespace=namespace, document=document)
            self._remote_config = document
            log_checkpoint(
                "remote_config_created",
                {"nodes": list(node_aliases), "cluster_ref": cluster_ref},
                logger=logger,
            )
            return document

    async def modify(self, callback: ModifyCallback) -> RemoteConfigDataWrapper:
        """
        Apply callback to a working copy, validate it and save.

        The callback may be sync or async. The loaded document is only
        replaced once the copy validates, so a failing callback leaves
        it untouched and nothing is written.

        Raises:
            SoloError: If nothing is loaded
            RemoteConfigValidationError: If the mutated document is invalid
        """
        if self._remote_config is None:
            raise SoloError("Attempting to modify remote config without loading it first")

        working = self._remote_config.clone()
        result = callback(working)
        if inspect.isawaitable(result):
            await result
        working.validate()

        self._remote_config = working
        await self.save()
        return working

    async def save(self) -> None:
        """
        Write the document to the ConfigMap of every deployment context.

        Raises:
            SoloError: If nothing is loaded, the deployment is unknown, or
                any context failed (after all were attempted)
        """
        if self._remote_config is None:
            raise SoloError("Attempted to save remote config without data")

        await self._replace_config_maps()

    # =========================================================================
    # LOAD
    # =========================================================================

    async def load(self, namespace: Optional[str] = None, context: Optional[str] = None) -> None:
        """
        Fetch the document once per process lifetime.

        Raises:
            ResourceNotFoundError: If the ConfigMap or its data key is absent
            RemoteConfigValidationError: If the stored document is invalid
            SoloError: On any other read failure
        """
        if self._remote_config is not None:
            return

        try:
            config_map = await self.get_config_map(namespace, context)
            self._remote_config = RemoteConfigDataWrapper.from_config_map(
                config_map,
                max_command_history=self.defaults.remote_config.max_command_history,
            )
        except (ResourceNotFoundError, RemoteConfigValidationError):
            raise
        except Exception as e:
            raise SoloError("Failed to load remote config from cluster", cause=e)

        logger.debug(f"Loaded remote config {self.configmap_name} (namespace={namespace}, context={context})")

    async def get(self, context: Optional[str] = None) -> RemoteConfigDataWrapper:
        """
        Load and fully validate, consensus nodes included.

        Raises:
            SoloError: If any recorded component is missing in-cluster
        """
        namespace = self.flags.namespace or self._get_namespace()
        await self.load(namespace, context)

        try:
            await RemoteConfigValidator.validate_components(
                namespace,
                self._remote_config.components,
                self.kube_factory,
                self._local_config,
                skip_consensus_nodes=False,
            )
        except RemoteConfigValidationError as e:
            raise SoloError(
                f"Remote config is invalid in context {context or self.kube_factory.current_context()}: {e}",
                cause=e,
            )
        return self._remote_config

    async def load_and_validate(self, validate: bool = True, skip_consensus_nodes: bool = True) -> None:
        """
        Per-command entry point.

        Defaults namespace and context, loads, checks components, then
        records the command in the history, stamps versions and
        reconciles common flags in one saved modification.

        Args:
            validate: Check components and record the command
            skip_consensus_nodes: Leave consensus nodes out of the check
        """
        self._set_default_namespace_if_not_set()
        self._set_default_context_if_not_set()

        with log_context(
            namespace=self.flags.namespace,
            deployment=self.flags.deployment,
            context=self.flags.context,
            command=" ".join(self.flags.command),
        ):
            await self.load()
            logger.info("Remote config loaded")
            if not validate:
                return

            await RemoteConfigValidator.validate_components(
                self.flags.namespace,
                self._remote_config.components,
                self.kube_factory,
                self._local_config,
                skip_consensus_nodes=skip_consensus_nodes,
            )

            email = self.local_config.user_email_address
            entry = f"Executed by {email}: {' '.join(self.flags.command)} {self.flags.to_argv_string()}".strip()

            def record(document: RemoteConfigDataWrapper) -> None:
                document.add_command_to_history(entry)
                document.metadata.last_updated_at = datetime.now(timezone.utc)
                document.metadata.last_update_by = email
                self.stamp_solo_version(document.metadata, email)
                self.populate_versions_in_metadata(document.metadata, self.flags)
                document.flags.handle_flags(self.flags)

            await self.modify(record)
            log_checkpoint("remote_config_saved", {"entry": entry}, logger=logger)

    # =========================================================================
    # METADATA
    # =========================================================================

    @staticmethod
    def stamp_solo_version(metadata: RemoteConfigMetadata, email: str) -> None:
        """
        Record this tool's version, leaving a migration record when the
        document was last written by a different one.
        """
        if metadata.solo_version == __version__:
            return
        if metadata.solo_version:
            logger.info(f"Remote config written by solo {metadata.solo_version}, migrating to {__version__}")
            metadata.make_migration(email, metadata.solo_version)
        metadata.solo_version = __version__

    @staticmethod
    def populate_versions_in_metadata(metadata: RemoteConfigMetadata, flags: CommandFlags) -> None:
        """
        Stamp the versions the command deploys.

        An explicitly passed version always wins; otherwise commands that
        deploy a chart stamp its default version and others leave the
        field alone.
        """
        command, subcommand = flags.command_name, flags.subcommand_name

        if flags.solo_chart_version:
            metadata.solo_chart_version = flags.solo_chart_version
        elif (command, subcommand) in _SOLO_CHART_COMMANDS:
            metadata.solo_chart_version = constants.SOLO_CHART_VERSION

        uses_release_tag = (command == "node" and subcommand not in _NODE_SUBCOMMANDS_WITHOUT_RELEASE) or (
            command == "network" and subcommand == "deploy"
        )
        if flags.release_tag:
            metadata.hedera_platform_version = flags.release_tag
        elif uses_release_tag:
            metadata.hedera_platform_version = constants.HEDERA_PLATFORM_VERSION

        if flags.mirror_node_version:
            metadata.hedera_mirror_node_chart_version = flags.mirror_node_version
        elif (command, subcommand) == ("mirror-node", "deploy"):
            metadata.hedera_mirror_node_chart_version = constants.MIRROR_NODE_VERSION

        if flags.hedera_explorer_version:
            metadata.hedera_explorer_chart_version = flags.hedera_explorer_version
        elif (command, subcommand) == ("explorer", "deploy"):
            metadata.hedera_explorer_chart_version = constants.HEDERA_EXPLORER_VERSION

        if flags.relay_release_tag:
            metadata.hedera_json_rpc_relay_chart_version = flags.relay_release_tag
        elif (command, subcommand) == ("relay", "deploy"):
            metadata.hedera_json_rpc_relay_chart_version = constants.HEDERA_JSON_RPC_RELAY_VERSION

    @staticmethod
    def compare(first: RemoteConfigDataWrapper, second: RemoteConfigDataWrapper) -> bool:
        """Same cluster refs in the same order."""
        return list(first.clusters) == list(second.clusters)

    # =========================================================================
    # CONFIG MAPS
    # =========================================================================

    async def get_config_map(self, namespace: Optional[str] = None, context: Optional[str] = None) -> Any:
        """
        Raises:
            ResourceNotFoundError: If the ConfigMap does not exist
            SoloError: If the read fails
        """
        namespace = namespace or self._get_namespace()
        context = context or self.flags.context or self._get_context_for_first_cluster()

        try:
            config_map = await self.kube_factory.get(context).read_config_map(namespace, self.configmap_name)
        except Exception as e:
            raise SoloError(
                f"Failed to read remote config from cluster for namespace: {namespace}, context: {context}",
                cause=e,
            )

        if config_map is None:
            raise ResourceNotFoundError("ConfigMap", self.configmap_name, namespace)
        return config_map

    async def create_config_map(
        self,
        context: Optional[str] = None,
        namespace: Optional[str] = None,
        document: Optional[RemoteConfigDataWrapper] = None,
    ) -> None:
        """
        Write document (the loaded one by default) as a new ConfigMap.

        Raises:
            SoloError: If the ConfigMap already exists or the write fails
        """
        document = document or self._require_loaded()
        namespace = namespace or self._get_namespace()

        try:
            await self.kube_factory.get(context).create_config_map(
                namespace,
                self.configmap_name,
                constants.SOLO_REMOTE_CONFIGMAP_LABELS,
                document.to_config_map_data(),
            )
        except ApiException as e:
            if e.status == 409:
                raise SoloError(
                    f"Remote config already exists in namespace: {namespace}, context: {context}",
                    cause=e,
                    meta={"namespace": namespace, "context": context, "status": e.status},
                )
            raise SoloError(
                f"Failed to create remote config in namespace: {namespace}, context: {context}: {e.reason}",
                cause=e,
                meta={"namespace": namespace, "context": context, "status": e.status},
            )

    async def _replace_config_maps(self) -> None:
        document = self._remote_config
        namespace = self._get_namespace()

        deployment_name = self.flags.deployment
        if not deployment_name:
            raise SoloError("Failed to get deployment")

        deployment = self.local_config.deployments.get(deployment_name)
        if deployment is None or not deployment.clusters:
            raise SoloError(f"Failed to get cluster refs from local config for deployment {deployment_name}")

        contexts = self.local_config.contexts_for_deployment(deployment_name, unmapped_as_context=True)
        data = document.to_config_map_data()

        results = await asyncio.gather(
            *[
                self.kube_factory.get(context).replace_config_map(
                    namespace, self.configmap_name, constants.SOLO_REMOTE_CONFIGMAP_LABELS, data
                )
                for context in contexts
            ],
            return_exceptions=True,
        )

        failed = []
        for context, result in zip(contexts, results):
            if isinstance(result, BaseException):
                logger.error(f"Failed to save remote config to context {context}: {result}")
                failed.append(context)

        if failed:
            raise SoloError(
                f"Failed to save remote config to contexts: {', '.join(failed)}",
                meta={"failed_contexts": failed, "contexts": contexts},
            )

        logger.debug(f"Saved remote config to {len(contexts)} contexts in {namespace}")

    async def delete_components(self) -> None:
        def clear(document: RemoteConfigDataWrapper) -> None:
            document.components = ComponentsDataWrapper.initialize_empty()

        await self.modify(clear)

    async def add_component(self, kind: ComponentType, cluster_ref: str, **fields: Any) -> BaseComponent:
        """
        Record the next indexed component of kind (relay-1, relay-2, ...)
        in cluster_ref and save.

        Args:
            kind: Any kind except consensus nodes
            cluster_ref: Cluster the component runs in
            **fields: Variant fields, e.g. consensus_node_aliases for relays

        Raises:
            SoloError: If nothing is loaded or the cluster is not in the document
        """
        document = self._require_loaded()
        if cluster_ref not in document.clusters:
            raise SoloError(
                f"Cluster ref {cluster_ref} is not part of the remote config",
                meta={"clusters": list(document.clusters)},
            )
        namespace = self._get_namespace()
        added: List[BaseComponent] = []

        def add(working: RemoteConfigDataWrapper) -> None:
            component = working.components.create_new_component(kind, cluster_ref, namespace, **fields)
            working.components.add_new_component(component)
            added.append(component)

        await self.modify(add)
        logger.info(f"Added {added[0].kind.display_name.lower()} {added[0].name} to cluster {cluster_ref}")
        return added[0]

    # =========================================================================
    # CONSENSUS NODES
    # =========================================================================

    def get_consensus_nodes(self) -> List[ConsensusNode]:
        """
        Raises:
            SoloError: If nothing is loaded
        """
        if not self.is_loaded():
            raise SoloError("Remote configuration is not loaded, and was expected to be loaded")

        document = self._remote_config
        nodes = []
        for node in document.components.consensus_nodes.values():
            cluster = document.clusters.get(node.cluster)
            dns_base_domain = cluster.dns_base_domain if cluster else constants.DEFAULT_DNS_BASE_DOMAIN
            dns_pattern = (
                cluster.dns_consensus_node_pattern if cluster else constants.DEFAULT_DNS_CONSENSUS_NODE_PATTERN
            )
            context = self._local_config.context_for_cluster(node.cluster) if self._local_config else None
            node_alias = render_node_alias(node.node_id)

            nodes.append(
                ConsensusNode(
                    name=node_alias,
                    node_id=node.node_id,
                    namespace=node.namespace,
                    cluster=node.cluster,
                    context=context,
                    dns_base_domain=dns_base_domain,
                    dns_consensus_node_pattern=dns_pattern,
                    full_fqdn=render_consensus_node_fqdn(
                        node_alias, node.node_id, node.namespace, node.cluster, dns_base_domain, dns_pattern
                    ),
                )
            )
        return nodes

    def get_contexts(self) -> List[str]:
        """Distinct contexts hosting consensus nodes, in first-seen order."""
        contexts: List[str] = []
        for node in self.get_consensus_nodes():
            if node.context and node.context not in contexts:
                contexts.append(node.context)
        return contexts

    def get_cluster_refs(self) -> Dict[str, Optional[str]]:
        """Cluster ref -> context for every cluster hosting consensus nodes."""
        cluster_refs: Dict[str, Optional[str]] = {}
        for node in self.get_consensus_nodes():
            cluster_refs.setdefault(node.cluster, node.context)
        return cluster_refs

    # =========================================================================
    # DEFAULTING
    # =========================================================================

    def _require_loaded(self) -> RemoteConfigDataWrapper:
        if self._remote_config is None:
            raise SoloError("Remote configuration is not loaded, and was expected to be loaded")
        return self._remote_config

    def _get_namespace(self) -> str:
        if self.flags.namespace:
            return self.flags.namespace
        if not self.flags.deployment:
            raise MissingArgumentError("Namespace is not passed and no deployment was selected")
        return self.local_config.get_deployment(self.flags.deployment).namespace

    def _set_default_namespace_if_not_set(self) -> None:
        if self.flags.namespace:
            return

        if not self.flags.deployment:
            raise MissingArgumentError("Deployment name is required when namespace is not passed")

        namespace = self.local_config.get_deployment(self.flags.deployment).namespace
        logger.warning(f"Namespace not found in flags, setting it to: {namespace}")
        self.flags.namespace = namespace

    def _set_default_context_if_not_set(self) -> None:
        if self.flags.context:
            return

        context = self._get_context_for_first_cluster() or self.kube_factory.current_context()
        if not context:
            raise SoloError("Context is not passed and default one can't be acquired")

        logger.warning(f"Context not found in flags, setting it to: {context}")
        self.flags.context = context

    def _get_context_for_first_cluster(self) -> Optional[str]:
        if self._local_config is None or not self.flags.deployment:
            return None

        deployment = self._local_config.deployments.get(self.flags.deployment)
        if deployment is None or not deployment.clusters:
            return None

        cluster_ref = deployment.clusters[0]
        context = self._local_config.context_for_cluster(cluster_ref)
        logger.debug(f"Using context {context} for cluster {cluster_ref} for deployment {self.flags.deployment}")
        return context


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "RemoteConfigManager",
    "ConsensusNode",
    "render_consensus_node_fqdn",
]
