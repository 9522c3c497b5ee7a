# ============================================================================
# COMMAND FLAGS
# ============================================================================
# EPOCH: 1 - COORDINATION
# STATUS: Core - Per-invocation flag values
# PURPOSE: Flag bag read by the lock manager and remote config manager
# CREATED: 13 OCT 2026
# ============================================================================
"""
Command Flags

A plain record of the command-line flags the coordination layer
reads. The CLI fills it in; the lock manager and the remote config
manager read (and, for namespace/context defaulting, write) it.

Usage:
    flags = CommandFlags(
        command=["network", "deploy"],
        deployment="dev",
        release_tag="v0.58.10",
    )
    flags.to_argv_string()  # "--deployment dev --release-tag v0.58.10"
"""

from dataclasses import dataclass, field, fields
from typing import List, Optional


@dataclass
class CommandFlags:
    """Flag values for one command invocation."""
    command: List[str] = field(default_factory=list)

    namespace: Optional[str] = None
    cluster_setup_namespace: Optional[str] = None
    deployment: Optional[str] = None
    context: Optional[str] = None
    cluster_ref: Optional[str] = None

    quiet: bool = False
    force: bool = False

    node_aliases: Optional[str] = None
    release_tag: Optional[str] = None
    chart_directory: Optional[str] = None
    relay_release_tag: Optional[str] = None
    solo_chart_version: Optional[str] = None
    mirror_node_version: Optional[str] = None
    hedera_explorer_version: Optional[str] = None

    @property
    def command_name(self) -> str:
        return self.command[0] if self.command else ""

    @property
    def subcommand_name(self) -> str:
        return self.command[1] if len(self.command) > 1 else ""

    def node_alias_list(self) -> List[str]:
        """Split the comma separated node aliases flag."""
        if not self.node_aliases:
            return []
        return [alias.strip() for alias in self.node_aliases.split(",") if alias.strip()]

    def to_argv_string(self) -> str:
        """
        Render set flags as a command line fragment.

        Boolean flags are rendered only when true; unset flags are omitted.
        """
        parts = []
        for f in fields(self):
            if f.name == "command":
                continue
            value = getattr(self, f.name)
            option = "--" + f.name.replace("_", "-")
            if value is True:
                parts.append(option)
            elif value is None or value is False or value == "":
                continue
            else:
                parts.append(f"{option} {value}")
        return " ".join(parts)


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = ["CommandFlags"]
