# ============================================================================
# LOCAL CONFIGURATION
# ============================================================================
# EPOCH: 1 - COORDINATION
# STATUS: Core - Operator workstation configuration
# PURPOSE: Deployment -> cluster refs -> kube contexts mapping from YAML
# CREATED: 13 OCT 2026
# ============================================================================
"""
Local Configuration

The per-operator YAML file that maps deployments onto cluster
references and cluster references onto kubeconfig contexts:

    userEmailAddress: ops@example.com
    soloVersion: 0.1.0
    deployments:
      dev:
        namespace: solo-dev
        clusters: [cluster-1, cluster-2]
    clusterRefs:
      cluster-1: kind-solo
      cluster-2: kind-solo-2

Usage:
    from core.config.local_config import LocalConfig

    local_config = LocalConfig.load()
    contexts = local_config.contexts_for_deployment("dev")
"""

import logging
import os
from pathlib import Path
from typing import Dict, List, Optional, Union

import yaml
from pydantic import BaseModel, Field, ValidationError

from core.errors import SoloError

logger = logging.getLogger(__name__)

DEFAULT_LOCAL_CONFIG_PATH = Path.home() / ".solo" / "local-config.yaml"


class Deployment(BaseModel):
    """A named deployment: one namespace spread across cluster refs."""
    namespace: str = Field(min_length=1)
    clusters: List[str] = Field(default_factory=list)
    realm: int = Field(default=0, ge=0)
    shard: int = Field(default=0, ge=0)


class LocalConfig(BaseModel):
    """
    Operator-local configuration.

    Unknown top-level keys are rejected.
    """
    user_email_address: str = Field(alias="userEmailAddress", min_length=1)
    solo_version: str = Field(default="", alias="soloVersion")
    deployments: Dict[str, Deployment] = Field(default_factory=dict)
    cluster_refs: Dict[str, str] = Field(default_factory=dict, alias="clusterRefs")

    model_config = {"populate_by_name": True, "extra": "forbid"}

    # =========================================================================
    # LOADING
    # =========================================================================

    @staticmethod
    def default_path() -> Path:
        return Path(os.getenv("SOLO_LOCAL_CONFIG", str(DEFAULT_LOCAL_CONFIG_PATH)))

    @classmethod
    def load(cls, path: Optional[Union[str, Path]] = None) -> "LocalConfig":
        """
        Load local config from a YAML file.

        Args:
            path: File path (defaults to SOLO_LOCAL_CONFIG or ~/.solo/local-config.yaml)

        Raises:
            SoloError: If the file is missing or invalid
        """
        path = Path(path) if path else cls.default_path()
        if not path.exists():
            raise SoloError(f"Local config not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        logger.debug(f"Parsed local config from {path}: {data}")

        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise SoloError(f"Invalid local config in {path}: {e}", cause=e)

    def save(self, path: Optional[Union[str, Path]] = None) -> Path:
        """Write the config back as YAML."""
        path = Path(path) if path else self.default_path()
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            yaml.safe_dump(self.model_dump(by_alias=True), f, sort_keys=False)
        return path

    # =========================================================================
    # LOOKUPS
    # =========================================================================

    def get_deployment(self, name: str) -> Deployment:
        """
        Raises:
            SoloError: If the deployment is not configured
        """
        deployment = self.deployments.get(name)
        if deployment is None:
            raise SoloError(f"Selected deployment name is not set in local config - {name}")
        return deployment

    def context_for_cluster(self, cluster_ref: str) -> Optional[str]:
        return self.cluster_refs.get(cluster_ref)

    def contexts_for_deployment(self, name: str, unmapped_as_context: bool = False) -> List[str]:
        """
        Contexts of every cluster ref in the deployment, in order.

        Args:
            name: Deployment name
            unmapped_as_context: Use a ref without a clusterRefs entry as
                the context name instead of failing

        Raises:
            SoloError: If the deployment is unknown, or a ref is unmapped
                and unmapped_as_context is False
        """
        deployment = self.get_deployment(name)
        contexts = []
        for cluster_ref in deployment.clusters:
            context = self.cluster_refs.get(cluster_ref)
            if context is None:
                if not unmapped_as_context:
                    raise SoloError(f"Cluster ref {cluster_ref} has no context in local config")
                context = cluster_ref
            contexts.append(context)
        return contexts


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = ["Deployment", "LocalConfig", "DEFAULT_LOCAL_CONFIG_PATH"]
