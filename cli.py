#!/usr/bin/env python3
# ============================================================================
# SOLO COORDINATION CLI
# ============================================================================
# EPOCH: 1 - COORDINATION
# STATUS: CLI - Operator entry point
# PURPOSE: Inspect and drive namespace locks and the remote config
# CREATED: 15 OCT 2026
# ============================================================================
"""
Solo Coordination CLI

Commands:
    solo-coord lock acquire   --namespace NS [--attempts N] [--hold SECONDS]
    solo-coord lock release   --namespace NS
    solo-coord lock status    --namespace NS
    solo-coord remote-config show      --deployment D
    solo-coord remote-config create    --deployment D --cluster-ref C --node-aliases node1,node2
    solo-coord remote-config validate  --deployment D
    solo-coord remote-config history   --deployment D
    solo-coord remote-config add-component --deployment D --cluster-ref C --kind relays [--node-aliases node1]

Output is JSON on stdout unless --text is given. Errors go to stderr
with an exit code:
    2  remote config is invalid
    3  any other coordination error
    4  lock held by someone else / could not be released

Usage:
    solo-coord --log-level DEBUG lock acquire --namespace solo-dev --hold 30
"""

import argparse
import asyncio
import json
import os
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import yaml

from __version__ import __version__
from bootstrap import CoordinationContext, build_coordination
from core.config.command_flags import CommandFlags
from core.config.local_config import LocalConfig
from core.contracts import ComponentType, DeploymentState
from core.errors import LockError, RemoteConfigValidationError, SoloError
from core.logging import LogComponent, configure_logging, get_logger, log_context
from core.models.components import COMPONENT_BASE_NAMES
from infrastructure.kube import ApiException
from locking.retry import held_lock

logger = get_logger(__name__, LogComponent.CLI)

EXIT_OK = 0
EXIT_INVALID_REMOTE_CONFIG = 2
EXIT_ERROR = 3
EXIT_LOCK_UNAVAILABLE = 4


# ============================================================================
# OUTPUT HELPERS
# ============================================================================

def error_json(error: str, solution: str, exit_code: int) -> str:
    return json.dumps({"error": error, "solution": solution, "exit_code": exit_code})


def error_text(error: str, solution: str) -> str:
    return f"Error: {error}\n\nSolution: {solution}"


def _emit(result: Dict[str, Any], text: bool) -> None:
    if text:
        print(result.pop("_text", ""))
    else:
        result.pop("_text", None)
        print(json.dumps(result, default=str))


def _fail(error: Exception, solution: str, exit_code: int, text: bool) -> int:
    if text:
        print(error_text(str(error), solution), file=sys.stderr)
    else:
        print(error_json(str(error), solution, exit_code), file=sys.stderr)
    return exit_code


def _load_local_config(path: Optional[str], required: bool) -> Optional[LocalConfig]:
    resolved = Path(path) if path else LocalConfig.default_path()
    if not resolved.exists() and not required:
        logger.debug(f"No local config at {resolved}")
        return None
    return LocalConfig.load(resolved)


def _progress(text: bool) -> Callable[[int, int, Optional[Exception]], None]:
    def report(attempt: int, max_attempts: int, error: Optional[Exception]) -> None:
        if text:
            print(f"Attempt {attempt}/{max_attempts} failed: {error}", file=sys.stderr)

    return report


# ============================================================================
# LOCK COMMANDS
# ============================================================================

async def lock_acquire(args: argparse.Namespace, coordination: CoordinationContext) -> Dict[str, Any]:
    """Acquire the namespace lock, hold it, then release it."""
    lock = await coordination.lock_manager.create()
    async with held_lock(lock, attempts=args.attempts, progress=_progress(args.text)):
        if args.hold > 0:
            await asyncio.sleep(args.hold)

    return {
        "namespace": lock.namespace,
        "lease": lock.lease_name,
        "holder": coordination.holder.to_object(),
        "held_seconds": args.hold,
        "_text": f"Lock {lock.lease_name} in {lock.namespace} acquired and released by {coordination.holder.username}",
    }


async def lock_release(args: argparse.Namespace, coordination: CoordinationContext) -> Dict[str, Any]:
    """Delete the namespace lease if it is ours or has expired."""
    lock = await coordination.lock_manager.create()
    await lock.release()
    return {
        "namespace": lock.namespace,
        "lease": lock.lease_name,
        "released": True,
        "_text": f"Lock {lock.lease_name} in {lock.namespace} released",
    }


async def lock_status(args: argparse.Namespace, coordination: CoordinationContext) -> Dict[str, Any]:
    """Show who holds the namespace lock."""
    lock = await coordination.lock_manager.create()
    lease = await lock.lease()

    if lease is None:
        return {
            "namespace": args.namespace,
            "lease": lock.lease_name,
            "held": False,
            "_text": f"Lock {lock.lease_name} in {args.namespace} is free",
        }

    expired = lease.is_expired(lock.duration_seconds)
    return {
        "namespace": args.namespace,
        "lease": lease.name,
        "held": not expired,
        "holder": lease.holder_identity,
        "expired": expired,
        "acquire_time": lease.acquire_time,
        "renew_time": lease.renew_time,
        "lease_transitions": lease.lease_transitions,
        "_text": (
            f"Lock {lease.name} in {args.namespace} held by {lease.holder_identity}"
            f"{' (expired)' if expired else ''}, transitions: {lease.lease_transitions}"
        ),
    }


# ============================================================================
# REMOTE CONFIG COMMANDS
# ============================================================================

async def remote_config_show(args: argparse.Namespace, coordination: CoordinationContext) -> Dict[str, Any]:
    """Print the remote config document."""
    manager = coordination.remote_config
    await manager.load_and_validate(validate=False)
    document = manager.remote_config.to_object()
    return dict(document, _text=yaml.safe_dump(document, sort_keys=False).rstrip())


async def remote_config_create(args: argparse.Namespace, coordination: CoordinationContext) -> Dict[str, Any]:
    """Create the remote config for a new deployment under the namespace lock."""
    flags = coordination.flags
    local_config = coordination.local_config
    namespace = local_config.get_deployment(args.deployment).namespace
    flags.namespace = namespace
    # Lock the cluster the ConfigMap is written to
    flags.context = flags.context or local_config.context_for_cluster(args.cluster_ref)
    context = flags.context

    lock = await coordination.lock_manager.create()
    async with held_lock(lock, attempts=args.attempts, progress=_progress(args.text)):
        document = await coordination.remote_config.create(
            DeploymentState(args.state),
            flags.node_alias_list(),
            namespace,
            args.deployment,
            args.cluster_ref,
            context,
        )

    return dict(
        document.to_object(),
        _text=f"Remote config created in {namespace} with nodes {', '.join(flags.node_alias_list())}",
    )


async def remote_config_add_component(args: argparse.Namespace, coordination: CoordinationContext) -> Dict[str, Any]:
    """Record the next indexed component of a kind under the namespace lock."""
    flags = coordination.flags
    local_config = coordination.local_config
    flags.namespace = flags.namespace or local_config.get_deployment(args.deployment).namespace
    flags.context = flags.context or local_config.context_for_cluster(args.cluster_ref)

    kind = ComponentType(args.kind)
    fields: Dict[str, Any] = {}
    if kind == ComponentType.RELAY:
        fields["consensus_node_aliases"] = flags.node_alias_list()

    manager = coordination.remote_config
    lock = await coordination.lock_manager.create()
    async with held_lock(lock, attempts=args.attempts, progress=_progress(args.text)):
        await manager.load_and_validate()
        component = await manager.add_component(kind, args.cluster_ref, **fields)

    return dict(
        component.to_object(),
        _text=f"Added {kind.display_name.lower()} {component.name} to cluster {args.cluster_ref}",
    )


async def remote_config_validate(args: argparse.Namespace, coordination: CoordinationContext) -> Dict[str, Any]:
    """Check that every recorded component is running."""
    manager = coordination.remote_config
    await manager.load_and_validate(validate=False)
    document = await manager.get(coordination.flags.context)
    count = len(document.components.all_components())
    return {
        "deployment": args.deployment,
        "namespace": coordination.flags.namespace,
        "valid": True,
        "components": count,
        "_text": f"Remote config of {args.deployment} is valid ({count} components)",
    }


async def remote_config_history(args: argparse.Namespace, coordination: CoordinationContext) -> Dict[str, Any]:
    """List the commands recorded against the deployment, oldest first."""
    manager = coordination.remote_config
    await manager.load_and_validate(validate=False)
    document = manager.remote_config
    return {
        "commandHistory": list(document.command_history),
        "lastExecutedCommand": document.last_executed_command,
        "_text": "\n".join(document.command_history),
    }


# ============================================================================
# PARSER
# ============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="solo-coord",
        description="Namespace locks and remote config for solo deployments",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s lock acquire --namespace solo-dev --hold 30
  %(prog)s lock status --namespace solo-dev
  %(prog)s remote-config create --deployment dev --cluster-ref cluster-1 --node-aliases node1,node2
  %(prog)s remote-config add-component --deployment dev --cluster-ref cluster-1 --kind relays --node-aliases node1
  %(prog)s --text remote-config history --deployment dev

Environment Variables:
  SOLO_LEASE_DURATION           Lease duration in seconds (default: 20)
  SOLO_LEASE_ACQUIRE_ATTEMPTS   Lock acquire attempts (default: 10)
  SOLO_LOCAL_CONFIG             Local config path (default: ~/.solo/local-config.yaml)
  SOLO_KUBE_CONTEXT             Kubeconfig context
  KUBECONFIG                    Kubeconfig path
        """,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--log-level",
        default=os.environ.get("LOG_LEVEL", "WARNING"),
        help="Log level (default: WARNING)",
    )
    parser.add_argument("--json-logs", action="store_true", help="Emit logs as JSON lines on stderr")
    parser.add_argument(
        "--local-config",
        default=os.environ.get("SOLO_LOCAL_CONFIG"),
        help="Local config path (default: ~/.solo/local-config.yaml)",
    )
    parser.add_argument("--context", help="Kubeconfig context (default: SOLO_KUBE_CONTEXT)")
    parser.add_argument("--text", action="store_true", help="Output as human-readable text")

    groups = parser.add_subparsers(dest="group", required=True)

    # lock ...
    lock = groups.add_parser("lock", help="Lease-backed namespace locks")
    lock_commands = lock.add_subparsers(dest="command", required=True)

    acquire = lock_commands.add_parser("acquire", help="Acquire, hold and release the namespace lock")
    acquire.add_argument("--namespace", required=True, help="Namespace to lock")
    acquire.add_argument("--attempts", type=int, help="Max attempts (default: SOLO_LEASE_ACQUIRE_ATTEMPTS or 10)")
    acquire.add_argument("--hold", type=float, default=0.0, help="Seconds to hold the lock (default: 0)")
    acquire.set_defaults(handler=lock_acquire, needs_local_config=False)

    release = lock_commands.add_parser("release", help="Release the namespace lock if ours or expired")
    release.add_argument("--namespace", required=True, help="Namespace whose lock to release")
    release.set_defaults(handler=lock_release, needs_local_config=False)

    status = lock_commands.add_parser("status", help="Show the namespace lock holder")
    status.add_argument("--namespace", required=True, help="Namespace to inspect")
    status.set_defaults(handler=lock_status, needs_local_config=False)

    # remote-config ...
    remote_config = groups.add_parser("remote-config", help="Deployment-wide remote config")
    remote_config_commands = remote_config.add_subparsers(dest="command", required=True)

    for name, handler, help_text in (
        ("show", remote_config_show, "Print the remote config"),
        ("validate", remote_config_validate, "Check every recorded component is running"),
        ("history", remote_config_history, "List recorded commands"),
    ):
        sub = remote_config_commands.add_parser(name, help=help_text)
        sub.add_argument("--deployment", required=True, help="Deployment name from the local config")
        sub.add_argument("--namespace", help="Namespace (default: the deployment's)")
        sub.set_defaults(handler=handler, needs_local_config=True)

    create = remote_config_commands.add_parser("create", help="Create the remote config for a new deployment")
    create.add_argument("--deployment", required=True, help="Deployment name from the local config")
    create.add_argument("--cluster-ref", required=True, help="Cluster ref being bootstrapped")
    create.add_argument("--node-aliases", required=True, help="Comma separated consensus node aliases")
    create.add_argument(
        "--state",
        choices=[state.value for state in DeploymentState],
        default=DeploymentState.PRE_GENESIS.value,
        help="Initial deployment state (default: pre-genesis)",
    )
    create.add_argument("--attempts", type=int, help="Max lock attempts")
    create.set_defaults(handler=remote_config_create, needs_local_config=True)

    add_component = remote_config_commands.add_parser(
        "add-component", help="Record the next indexed component of a kind (relay-1, relay-2, ...)"
    )
    add_component.add_argument("--deployment", required=True, help="Deployment name from the local config")
    add_component.add_argument("--namespace", help="Namespace (default: the deployment's)")
    add_component.add_argument("--cluster-ref", required=True, help="Cluster ref the component runs in")
    add_component.add_argument(
        "--kind",
        required=True,
        choices=[kind.value for kind in COMPONENT_BASE_NAMES],
        help="Component group",
    )
    add_component.add_argument("--node-aliases", help="Consensus nodes a relay serves, comma separated")
    add_component.add_argument("--attempts", type=int, help="Max lock attempts")
    add_component.set_defaults(handler=remote_config_add_component, needs_local_config=True)

    return parser


def flags_from_args(args: argparse.Namespace) -> CommandFlags:
    return CommandFlags(
        command=[args.group, args.command],
        namespace=getattr(args, "namespace", None),
        deployment=getattr(args, "deployment", None),
        context=args.context,
        cluster_ref=getattr(args, "cluster_ref", None),
        node_aliases=getattr(args, "node_aliases", None),
    )


# ============================================================================
# ENTRY POINT
# ============================================================================

async def run(args: argparse.Namespace, flags: CommandFlags) -> Dict[str, Any]:
    """Wire the coordination layer and run the selected command."""
    local_config = _load_local_config(args.local_config, required=args.needs_local_config)
    coordination = build_coordination(flags, local_config=local_config)
    try:
        with log_context(command=" ".join(flags.command), namespace=flags.namespace, deployment=flags.deployment):
            return await args.handler(args, coordination)
    finally:
        await coordination.shutdown()


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(level=args.log_level, json_output=args.json_logs)
    flags = flags_from_args(args)

    try:
        result = asyncio.run(run(args, flags))
    except LockError as e:
        return _fail(
            e, "Wait for the holder to finish or for the lease to expire, then retry",
            EXIT_LOCK_UNAVAILABLE, args.text,
        )
    except RemoteConfigValidationError as e:
        return _fail(
            e, "Fix the remote config or redeploy the missing component",
            EXIT_INVALID_REMOTE_CONFIG, args.text,
        )
    except SoloError as e:
        return _fail(e, "Check the local config, kube context and cluster access", EXIT_ERROR, args.text)
    except ApiException as e:
        error = SoloError(f"Kubernetes API request failed ({e.status} {e.reason})", cause=e)
        return _fail(error, "Check the kube context and RBAC permissions for the namespace", EXIT_ERROR, args.text)

    _emit(result, args.text)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
