# ============================================================================
# CLUSTER MODEL
# ============================================================================
# EPOCH: 1 - COORDINATION
# STATUS: Core - Per-cluster deployment entry
# PURPOSE: Cluster ref -> namespace/deployment/DNS mapping in the remote config
# CREATED: 13 OCT 2026
# ============================================================================
"""
Cluster Model

One entry of the remote config `clusters` map, keyed by cluster ref.
"""

from typing import Any, Dict

from pydantic import BaseModel, Field, ValidationError

from core import constants
from core.errors import RemoteConfigValidationError


class Cluster(BaseModel):
    """Where a deployment lives inside one cluster."""

    name: str = Field(description="Cluster ref")
    namespace: str
    deployment: str
    dns_base_domain: str = Field(
        default=constants.DEFAULT_DNS_BASE_DOMAIN,
        alias="dnsBaseDomain",
    )
    dns_consensus_node_pattern: str = Field(
        default=constants.DEFAULT_DNS_CONSENSUS_NODE_PATTERN,
        alias="dnsConsensusNodePattern",
    )

    model_config = {"populate_by_name": True}

    def validate_cluster(self) -> None:
        """
        Raises:
            RemoteConfigValidationError: If a required field is empty or mistyped
        """
        for field_name in ("name", "namespace", "deployment", "dns_base_domain", "dns_consensus_node_pattern"):
            value = getattr(self, field_name)
            if value is None or value == "":
                raise RemoteConfigValidationError(f"{field_name} is required", field=field_name)
            if not isinstance(value, str):
                raise RemoteConfigValidationError(
                    f"Invalid type for {field_name}: {type(value).__name__}",
                    field=field_name,
                    value=value,
                )

    def to_object(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)

    @classmethod
    def from_object(cls, data: Dict[str, Any]) -> "Cluster":
        try:
            cluster = cls.model_validate(data)
        except ValidationError as e:
            raise RemoteConfigValidationError(f"Invalid cluster data: {e}", value=data, cause=e)
        cluster.validate_cluster()
        return cluster

    @staticmethod
    def to_clusters_map_object(clusters: Dict[str, "Cluster"]) -> Dict[str, Dict[str, Any]]:
        return {ref: cluster.to_object() for ref, cluster in clusters.items()}

    @classmethod
    def from_clusters_map_object(cls, data: Dict[str, Any]) -> Dict[str, "Cluster"]:
        return {ref: cls.from_object(value) for ref, value in (data or {}).items()}


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = ["Cluster"]
