# ============================================================================
# REMOTE CONFIG MODULE
# ============================================================================
# EPOCH: 1 - COORDINATION
# STATUS: Remote config - Replicated deployment document
# PURPOSE: Export the document wrappers, validator and manager
# CREATED: 14 OCT 2026
# ============================================================================
"""
Remote config module.

Provides:
- ComponentsDataWrapper: components grouped by kind
- CommonFlagsDataWrapper: remembered release/chart flags
- RemoteConfigDataWrapper: the validated document
- RemoteConfigValidator: in-cluster component checks
- RemoteConfigManager: load, modify and replicate the document

Usage:
    from remote_config import RemoteConfigManager

    manager = RemoteConfigManager(kube_factory, local_config, flags)
    await manager.load_and_validate()
"""

from remote_config.components import ComponentsDataWrapper
from remote_config.flags import CommonFlagsDataWrapper
from remote_config.data_wrapper import RemoteConfigDataWrapper, with_mutation
from remote_config.validator import RemoteConfigValidator
from remote_config.manager import ConsensusNode, RemoteConfigManager

__all__ = [
    "ComponentsDataWrapper",
    "CommonFlagsDataWrapper",
    "RemoteConfigDataWrapper",
    "with_mutation",
    "RemoteConfigValidator",
    "RemoteConfigManager",
    "ConsensusNode",
]
