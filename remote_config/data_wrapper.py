# ============================================================================
# REMOTE CONFIG DATA WRAPPER
# ============================================================================
# EPOCH: 1 - COORDINATION
# STATUS: Remote config - Versioned deployment document
# PURPOSE: Validated document stored (as YAML) in the remote config ConfigMap
# CREATED: 14 OCT 2026
# ============================================================================
"""
Remote Config Data Wrapper

The deployment-wide document shared by every cluster of a
deployment:

    version: 1.0.0
    metadata: {name, deploymentName, state, lastUpdatedAt, lastUpdateBy, ...}
    clusters: {<cluster ref>: {name, namespace, deployment, dnsBaseDomain, ...}}
    components: {consensusNodes: {...}, relays: {...}, ...}
    commandHistory: [...]          # bounded, oldest evicted first
    lastExecutedCommand: "..."
    flags: {releaseTag: ..., ...}

Construction always validates. Changes go through with_mutation,
which applies a change to a copy and validates once, so no caller ever
observes (or persists) an invalid document.

Usage:
    doc = RemoteConfigDataWrapper.from_config_map(config_map)
    doc = doc.with_mutation(lambda d: d.add_command_to_history("network deploy"))
"""

import logging
from typing import Any, Callable, Dict, List, Optional

import yaml

from core import constants
from core.config.defaults import get_defaults
from core.errors import RemoteConfigValidationError, ResourceNotFoundError
from core.models.cluster import Cluster
from core.models.metadata import RemoteConfigMetadata
from remote_config.components import ComponentsDataWrapper
from remote_config.flags import CommonFlagsDataWrapper

logger = logging.getLogger(__name__)


class RemoteConfigDataWrapper:
    """
    Remote config document.

    Attributes are plain and assignable; validate() (run by the
    constructor and by with_mutation) is the single consistency gate.
    """

    def __init__(
        self,
        metadata: RemoteConfigMetadata,
        clusters: Optional[Dict[str, Cluster]] = None,
        components: Optional[ComponentsDataWrapper] = None,
        command_history: Optional[List[str]] = None,
        last_executed_command: str = "",
        flags: Optional[CommonFlagsDataWrapper] = None,
        version: str = constants.REMOTE_CONFIG_VERSION,
        max_command_history: Optional[int] = None,
    ):
        self.version = version
        self.metadata = metadata
        self.clusters = clusters if clusters is not None else {}
        self.components = components if components is not None else ComponentsDataWrapper.initialize_empty()
        self.command_history = command_history if command_history is not None else []
        self.last_executed_command = last_executed_command
        self.flags = flags if flags is not None else CommonFlagsDataWrapper()
        self.max_command_history = max_command_history or get_defaults().remote_config.max_command_history
        self.validate()

    # =========================================================================
    # MUTATION
    # =========================================================================

    def add_command_to_history(self, command: str) -> None:
        """Append command, evicting the oldest entries past the bound."""
        self.command_history.append(command)
        self.last_executed_command = command
        while len(self.command_history) > self.max_command_history:
            self.command_history.pop(0)
        self.validate()

    def with_mutation(self, mutate: Callable[["RemoteConfigDataWrapper"], Any]) -> "RemoteConfigDataWrapper":
        """
        Apply mutate to a copy and validate it once.

        Returns:
            The mutated copy; self is left untouched

        Raises:
            RemoteConfigValidationError: If the mutated copy is invalid
        """
        working = self.clone()
        mutate(working)
        working.validate()
        return working

    def clone(self) -> "RemoteConfigDataWrapper":
        return RemoteConfigDataWrapper.from_object(self.to_object(), max_command_history=self.max_command_history)

    # =========================================================================
    # VALIDATION
    # =========================================================================

    def validate(self) -> None:
        """
        Raises:
            RemoteConfigValidationError: On the first invalid part
        """
        if not self.version or not isinstance(self.version, str):
            raise RemoteConfigValidationError(
                f"Invalid remote config version: {self.version!r}", field="version", value=self.version
            )

        if not isinstance(self.metadata, RemoteConfigMetadata):
            raise RemoteConfigValidationError(
                f"Invalid remote config metadata: {self.metadata!r}", field="metadata", value=self.metadata
            )
        self.metadata.validate_metadata()

        if not isinstance(self.clusters, dict):
            raise RemoteConfigValidationError(
                f"Invalid remote config clusters: {self.clusters!r}", field="clusters", value=self.clusters
            )
        for cluster_ref, cluster in self.clusters.items():
            if not cluster_ref or not isinstance(cluster_ref, str):
                raise RemoteConfigValidationError(
                    f"Invalid cluster ref: {cluster_ref!r}", field="clusters", value=cluster_ref
                )
            if not isinstance(cluster, Cluster):
                raise RemoteConfigValidationError(
                    f"Invalid cluster for ref {cluster_ref}: {cluster!r}", field="clusters", value=cluster
                )
            cluster.validate_cluster()

        if not isinstance(self.components, ComponentsDataWrapper):
            raise RemoteConfigValidationError(
                f"Invalid remote config components: {self.components!r}", field="components"
            )
        self.components.validate()

        if not isinstance(self.command_history, list) or not all(
            isinstance(command, str) for command in self.command_history
        ):
            raise RemoteConfigValidationError(
                f"Invalid remote config command history: {self.command_history!r}",
                field="command_history",
                value=self.command_history,
            )

        if not isinstance(self.last_executed_command, str):
            raise RemoteConfigValidationError(
                f"Invalid last executed command: {self.last_executed_command!r}",
                field="last_executed_command",
                value=self.last_executed_command,
            )
        if self.command_history and not self.last_executed_command:
            raise RemoteConfigValidationError(
                "Last executed command is required once commands were recorded",
                field="last_executed_command",
            )

        if not isinstance(self.flags, CommonFlagsDataWrapper):
            raise RemoteConfigValidationError(f"Invalid remote config flags: {self.flags!r}", field="flags")

    # =========================================================================
    # SERIALIZATION
    # =========================================================================

    def to_object(self) -> Dict[str, Any]:
        return {
            "metadata": self.metadata.to_object(),
            "version": self.version,
            "clusters": Cluster.to_clusters_map_object(self.clusters),
            "components": self.components.to_object(),
            "commandHistory": list(self.command_history),
            "lastExecutedCommand": self.last_executed_command,
            "flags": self.flags.to_object(),
        }

    def to_yaml(self) -> str:
        return yaml.safe_dump(self.to_object(), sort_keys=False)

    def to_config_map_data(self) -> Dict[str, str]:
        return {constants.SOLO_REMOTE_CONFIGMAP_DATA_KEY: self.to_yaml()}

    @classmethod
    def from_object(
        cls,
        data: Dict[str, Any],
        max_command_history: Optional[int] = None,
    ) -> "RemoteConfigDataWrapper":
        """
        Raises:
            RemoteConfigValidationError: If the data is not a valid document
        """
        if not isinstance(data, dict):
            raise RemoteConfigValidationError(f"Invalid remote config data: {data!r}", value=data)

        if not isinstance(data.get("metadata"), dict):
            raise RemoteConfigValidationError(
                f"Invalid remote config metadata: {data.get('metadata')!r}", field="metadata"
            )

        return cls(
            metadata=RemoteConfigMetadata.from_object(data["metadata"]),
            clusters=Cluster.from_clusters_map_object(data.get("clusters") or {}),
            components=ComponentsDataWrapper.from_object(data.get("components") or {}),
            command_history=data.get("commandHistory") if data.get("commandHistory") is not None else [],
            last_executed_command=data.get("lastExecutedCommand", ""),
            flags=CommonFlagsDataWrapper.from_object(data.get("flags")),
            version=data.get("version"),
            max_command_history=max_command_history,
        )

    @classmethod
    def from_yaml(cls, text: str, max_command_history: Optional[int] = None) -> "RemoteConfigDataWrapper":
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise RemoteConfigValidationError(f"Remote config is not valid YAML: {e}", cause=e)
        return cls.from_object(data, max_command_history=max_command_history)

    @classmethod
    def from_config_map(
        cls,
        config_map: Any,
        max_command_history: Optional[int] = None,
    ) -> "RemoteConfigDataWrapper":
        """
        Parse the document out of a V1ConfigMap.

        Raises:
            ResourceNotFoundError: If the data key is missing
        """
        data = getattr(config_map, "data", None) or {}
        text = data.get(constants.SOLO_REMOTE_CONFIGMAP_DATA_KEY)
        if not text:
            name = getattr(getattr(config_map, "metadata", None), "name", constants.SOLO_REMOTE_CONFIGMAP_NAME)
            raise ResourceNotFoundError(f"Data key {constants.SOLO_REMOTE_CONFIGMAP_DATA_KEY} of ConfigMap", name)
        return cls.from_yaml(text, max_command_history=max_command_history)


def with_mutation(
    doc: RemoteConfigDataWrapper,
    mutate: Callable[[RemoteConfigDataWrapper], Any],
) -> RemoteConfigDataWrapper:
    """Functional form of RemoteConfigDataWrapper.with_mutation."""
    return doc.with_mutation(mutate)


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = ["RemoteConfigDataWrapper", "with_mutation"]
