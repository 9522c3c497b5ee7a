# ============================================================================
# REMOTE CONFIG METADATA
# ============================================================================
# EPOCH: 1 - COORDINATION
# STATUS: Core - Document header
# PURPOSE: Who/when/which-version stamps on the remote config document
# CREATED: 13 OCT 2026
# ============================================================================
"""
Remote Config Metadata

The header of the remote config document: owning namespace and
deployment, lifecycle state, last writer, tool version and the chart
versions that were last deployed.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, ValidationError

from core.contracts import DeploymentState
from core.errors import RemoteConfigValidationError


class Migration(BaseModel):
    """Record of a document migrated from an older tool version."""
    migrated_at: datetime = Field(alias="migratedAt")
    migrated_by: str = Field(alias="migratedBy")
    from_version: str = Field(alias="fromVersion")

    model_config = {"populate_by_name": True}

    def validate_migration(self) -> None:
        if not isinstance(self.migrated_at, datetime):
            raise RemoteConfigValidationError(f"Invalid migratedAt: {self.migrated_at}", field="migrated_at")
        if not self.migrated_by or not isinstance(self.migrated_by, str):
            raise RemoteConfigValidationError(f"Invalid migratedBy: {self.migrated_by}", field="migrated_by")
        if not self.from_version or not isinstance(self.from_version, str):
            raise RemoteConfigValidationError(f"Invalid fromVersion: {self.from_version}", field="from_version")


class RemoteConfigMetadata(BaseModel):
    """
    Document header.

    name is the namespace the deployment lives in.
    """

    name: str
    deployment_name: str = Field(alias="deploymentName")
    state: DeploymentState = DeploymentState.PRE_GENESIS
    last_updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        alias="lastUpdatedAt",
    )
    last_update_by: str = Field(alias="lastUpdateBy")
    solo_version: str = Field(default="", alias="soloVersion")

    # Versions of the last deployed charts/releases
    solo_chart_version: str = Field(default="", alias="soloChartVersion")
    hedera_platform_version: str = Field(default="", alias="hederaPlatformVersion")
    hedera_mirror_node_chart_version: str = Field(default="", alias="hederaMirrorNodeChartVersion")
    hedera_explorer_chart_version: str = Field(default="", alias="hederaExplorerChartVersion")
    hedera_json_rpc_relay_chart_version: str = Field(default="", alias="hederaJsonRpcRelayChartVersion")

    migration: Optional[Migration] = None

    model_config = {"populate_by_name": True}

    def make_migration(self, email: str, from_version: str) -> None:
        self.migration = Migration(
            migrated_at=datetime.now(timezone.utc),
            migrated_by=email,
            from_version=from_version,
        )

    def validate_metadata(self) -> None:
        """
        Raises:
            RemoteConfigValidationError: On the first invalid field
        """
        if not self.name or not isinstance(self.name, str):
            raise RemoteConfigValidationError(f"Invalid name: {self.name}", field="name", value=self.name)

        if not self.deployment_name or not isinstance(self.deployment_name, str):
            raise RemoteConfigValidationError(
                f"Invalid deploymentName: {self.deployment_name}",
                field="deployment_name",
                value=self.deployment_name,
            )

        if not isinstance(self.state, DeploymentState):
            raise RemoteConfigValidationError(f"Invalid state: {self.state}", field="state", value=self.state)

        if not isinstance(self.last_updated_at, datetime):
            raise RemoteConfigValidationError(
                f"Invalid lastUpdatedAt: {self.last_updated_at}",
                field="last_updated_at",
                value=self.last_updated_at,
            )

        if not self.last_update_by or not isinstance(self.last_update_by, str):
            raise RemoteConfigValidationError(
                f"Invalid lastUpdateBy: {self.last_update_by}",
                field="last_update_by",
                value=self.last_update_by,
            )

        if not isinstance(self.solo_version, str):
            raise RemoteConfigValidationError(
                f"Invalid soloVersion: {self.solo_version}",
                field="solo_version",
                value=self.solo_version,
            )

        if self.migration is not None:
            if not isinstance(self.migration, Migration):
                raise RemoteConfigValidationError(f"Invalid migration: {self.migration}", field="migration")
            self.migration.validate_migration()

    def to_object(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    @classmethod
    def from_object(cls, data: Dict[str, Any]) -> "RemoteConfigMetadata":
        try:
            metadata = cls.model_validate(data)
        except ValidationError as e:
            raise RemoteConfigValidationError(f"Invalid remote config metadata: {e}", value=data, cause=e)
        metadata.validate_metadata()
        return metadata


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = ["Migration", "RemoteConfigMetadata"]
