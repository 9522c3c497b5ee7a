# ============================================================================
# COMMON FLAGS DATA WRAPPER
# ============================================================================
# EPOCH: 1 - COORDINATION
# STATUS: Remote config - Flag snapshot
# PURPOSE: Remember release/chart flags across commands of one deployment
# CREATED: 14 OCT 2026
# ============================================================================
"""
Common Flags Data Wrapper

The flags section of the remote config. Commands that omit a common
flag inherit the value the deployment was last run with; the first
value seen for a flag is recorded.

Usage:
    stored = CommonFlagsDataWrapper.from_object(doc["flags"])
    stored.handle_flags(command_flags)   # fills command_flags in place
"""

import logging
from typing import Any, Dict, Optional

from core.config.command_flags import CommandFlags

logger = logging.getLogger(__name__)

# Serialized key -> CommandFlags attribute
COMMON_FLAGS: Dict[str, str] = {
    "releaseTag": "release_tag",
    "chartDirectory": "chart_directory",
    "relayReleaseTag": "relay_release_tag",
    "soloChartVersion": "solo_chart_version",
    "mirrorNodeVersion": "mirror_node_version",
    "nodeAliasesUnparsed": "node_aliases",
    "hederaExplorerVersion": "hedera_explorer_version",
}


class CommonFlagsDataWrapper:
    """Stored values of the common flags."""

    def __init__(self, values: Optional[Dict[str, str]] = None):
        self._values: Dict[str, str] = {
            key: value for key, value in (values or {}).items() if key in COMMON_FLAGS and value
        }

    @classmethod
    def initialize(cls, flags: CommandFlags) -> "CommonFlagsDataWrapper":
        wrapper = cls()
        wrapper.handle_flags(flags)
        return wrapper

    @classmethod
    def from_object(cls, data: Optional[Dict[str, Any]]) -> "CommonFlagsDataWrapper":
        return cls({key: str(value) for key, value in (data or {}).items() if value is not None})

    def to_object(self) -> Dict[str, str]:
        return {key: self._values[key] for key in COMMON_FLAGS if key in self._values}

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def handle_flags(self, flags: CommandFlags) -> None:
        """
        Reconcile stored values with this invocation's flags.

        Missing invocation values are filled in from the stored ones;
        new values are recorded; mismatches are reported, not resolved.
        """
        for key, attribute in COMMON_FLAGS.items():
            stored = self._values.get(key)
            passed = getattr(flags, attribute)

            if passed:
                if not stored:
                    self._values[key] = passed
                elif stored != passed and not (flags.quiet or flags.force):
                    logger.warning(
                        f"Value of {key} in remote config ({stored}) differs from the one "
                        f"passed ({passed}); using {passed} for this command"
                    )
            elif stored:
                setattr(flags, attribute, stored)


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = ["CommonFlagsDataWrapper", "COMMON_FLAGS"]
