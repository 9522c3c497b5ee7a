# ============================================================================
# COORDINATION CONSTANTS
# ============================================================================
# EPOCH: 1 - COORDINATION
# STATUS: Core - Shared names, labels and bounds
# PURPOSE: Single place for Kubernetes object names and label selectors
# CREATED: 12 OCT 2026
# ============================================================================
"""
Coordination Constants

Names and labels shared by the lease manager, the remote config
manager and the component validator.
"""

from typing import Dict, List

# ============================================================================
# REMOTE CONFIG CONFIGMAP
# ============================================================================

SOLO_REMOTE_CONFIGMAP_NAME = "solo-remote-config"
SOLO_REMOTE_CONFIGMAP_LABELS: Dict[str, str] = {"solo.hedera.com/type": "remote-config"}
SOLO_REMOTE_CONFIGMAP_LABEL_SELECTOR = "solo.hedera.com/type=remote-config"
SOLO_REMOTE_CONFIGMAP_DATA_KEY = "remote-config-data"
SOLO_REMOTE_CONFIG_MAX_COMMAND_IN_HISTORY = 50

REMOTE_CONFIG_VERSION = "1.0.0"

# ============================================================================
# LEASES
# ============================================================================

DEFAULT_LEASE_DURATION_SECONDS = 20
DEFAULT_LOCK_ACQUIRE_ATTEMPTS = 10
LEASE_RENEWAL_RATIO = 0.5
LEASE_READ_ATTEMPTS = 4
LEASE_READ_RETRY_SECONDS = 5

# ============================================================================
# POD LABEL SELECTORS
# ============================================================================

SOLO_RELAY_LABEL = "app=hedera-json-rpc-relay"
SOLO_HEDERA_EXPLORER_LABEL = "app.kubernetes.io/component=hedera-explorer"
SOLO_HEDERA_MIRROR_IMPORTER: List[str] = [
    "app.kubernetes.io/component=importer",
    "app.kubernetes.io/instance=mirror",
]

# ============================================================================
# CLUSTER DNS
# ============================================================================

DEFAULT_DNS_BASE_DOMAIN = "cluster.local"
DEFAULT_DNS_CONSENSUS_NODE_PATTERN = "network-{nodeAlias}-svc.{namespace}.svc"

# ============================================================================
# CHART / RELEASE VERSION DEFAULTS
# ============================================================================

SOLO_CHART_VERSION = "0.44.0"
HEDERA_PLATFORM_VERSION = "v0.58.10"
MIRROR_NODE_VERSION = "v0.122.0"
HEDERA_EXPLORER_VERSION = "24.12.0"
HEDERA_JSON_RPC_RELAY_VERSION = "v0.63.2"


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "SOLO_REMOTE_CONFIGMAP_NAME",
    "SOLO_REMOTE_CONFIGMAP_LABELS",
    "SOLO_REMOTE_CONFIGMAP_LABEL_SELECTOR",
    "SOLO_REMOTE_CONFIGMAP_DATA_KEY",
    "SOLO_REMOTE_CONFIG_MAX_COMMAND_IN_HISTORY",
    "REMOTE_CONFIG_VERSION",
    "DEFAULT_LEASE_DURATION_SECONDS",
    "DEFAULT_LOCK_ACQUIRE_ATTEMPTS",
    "LEASE_RENEWAL_RATIO",
    "LEASE_READ_ATTEMPTS",
    "LEASE_READ_RETRY_SECONDS",
    "SOLO_RELAY_LABEL",
    "SOLO_HEDERA_EXPLORER_LABEL",
    "SOLO_HEDERA_MIRROR_IMPORTER",
    "DEFAULT_DNS_BASE_DOMAIN",
    "DEFAULT_DNS_CONSENSUS_NODE_PATTERN",
    "SOLO_CHART_VERSION",
    "HEDERA_PLATFORM_VERSION",
    "MIRROR_NODE_VERSION",
    "HEDERA_EXPLORER_VERSION",
    "HEDERA_JSON_RPC_RELAY_VERSION",
]
