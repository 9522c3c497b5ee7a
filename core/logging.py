# ============================================================================
# STRUCTURED LOGGING
# ============================================================================
# EPOCH: 1 - COORDINATION
# STATUS: Core - Structured logging with context
# PURPOSE: Consistent, queryable logging across lock and config components
# CREATED: 12 OCT 2026
# ============================================================================
"""
Structured Logging

JSON lines for log shipping or a compact single-line format for
terminals. Both formats carry the active coordination context
(deployment, namespace, kube context, lease, command).

The context lives in a ContextVar rather than thread-local storage:
lease renewal runs as concurrent asyncio tasks on one thread and each
task must keep the context it was started under.

Usage:
    from core.logging import get_logger, log_context, LogComponent

    logger = get_logger(__name__, LogComponent.LOCK)

    with log_context(namespace="solo-dev", lease="solo-dev"):
        logger.info("Acquiring lease")
"""

import json
import logging
import os
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field, fields, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterator, Optional, Union


class LogComponent(str, Enum):
    """Subsystem tag attached to records."""
    LOCK = "lock"
    REMOTE_CONFIG = "remote_config"
    KUBERNETES = "kubernetes"
    CLI = "cli"


# Record attribute holding structured fields
RECORD_FIELD = "data"

# Short labels for the terminal format, in display order
_HUMAN_LABELS = (
    ("deployment", "deployment"),
    ("namespace", "ns"),
    ("context", "ctx"),
    ("lease", "lease"),
)


@dataclass(frozen=True)
class LogContext:
    """Coordination fields in effect for the current task."""
    deployment: Optional[str] = None
    namespace: Optional[str] = None
    context: Optional[str] = None
    lease: Optional[str] = None
    command: Optional[str] = None
    operation: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def merged(self, **values: Any) -> "LogContext":
        """Child context: known names override, anything else lands in extra."""
        known = {f.name for f in fields(self)} - {"extra"}
        updates = {k: v for k, v in values.items() if k in known}
        extra = {**self.extra, **{k: v for k, v in values.items() if k not in known}}
        return replace(self, extra=extra, **updates)

    def to_dict(self) -> Dict[str, Any]:
        result = {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if f.name != "extra" and getattr(self, f.name) is not None
        }
        result.update(self.extra)
        return result


_current_context: ContextVar[LogContext] = ContextVar("solo_log_context", default=LogContext())


def get_current_context() -> LogContext:
    return _current_context.get()


@contextmanager
def log_context(**values: Any) -> Iterator[LogContext]:
    """
    Layer fields onto the logging context for the enclosed block.

    Nested blocks inherit from the enclosing one. asyncio tasks created
    inside the block keep the context they were created with.

    Example:
        with log_context(deployment="dev", command="network deploy"):
            logger.info("Loading remote config")
    """
    child = get_current_context().merged(**values)
    token = _current_context.set(child)
    try:
        yield child
    finally:
        _current_context.reset(token)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _record_fields(record: logging.LogRecord) -> Dict[str, Any]:
    return getattr(record, RECORD_FIELD, None) or {}


class StructuredFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": _now().isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        context = get_current_context().to_dict()
        if context:
            payload["context"] = context

        data = _record_fields(record)
        if data:
            payload["data"] = data

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        payload["source"] = f"{record.filename}:{record.lineno}"
        return json.dumps(payload, default=str)


class HumanFormatter(logging.Formatter):
    """`time LEVEL logger [deployment=.., ns=..]: message`"""

    def format(self, record: logging.LogRecord) -> str:
        context = get_current_context()
        labels = [
            f"{label}={getattr(context, name)}"
            for name, label in _HUMAN_LABELS
            if getattr(context, name)
        ]
        where = f" [{', '.join(labels)}]" if labels else ""

        line = (
            f"{_now():%Y-%m-%d %H:%M:%S} {record.levelname:<8} "
            f"{record.name}{where}: {record.getMessage()}"
        )
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


class ContextLogger(logging.LoggerAdapter):
    """
    Adapter that stamps the component tag and caller supplied fields
    onto each record under a single attribute.
    """

    def process(self, msg, kwargs):
        data = dict(kwargs.pop("extra", None) or {})
        component = self.extra.get("component")
        if component:
            data.setdefault("component", component)
        kwargs["extra"] = {RECORD_FIELD: data}
        return msg, kwargs


def get_logger(name: str, component: Optional[LogComponent] = None) -> ContextLogger:
    """
    Get a component-tagged logger.

    Args:
        name: Logger name, normally __name__
        component: Subsystem tag written to each record

    Returns:
        ContextLogger wrapping logging.getLogger(name)
    """
    return ContextLogger(logging.getLogger(name), {"component": component.value if component else None})


def configure_logging(
    level: Union[str, int] = "INFO",
    json_output: bool = False,
    stream=None,
) -> None:
    """
    Install a single root handler.

    Args:
        level: Level name or number
        json_output: JSON lines instead of the terminal format;
            LOG_FORMAT=json in the environment forces it on
        stream: Defaults to stderr so stdout carries only command output
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    use_json = json_output or os.getenv("LOG_FORMAT", "").lower() == "json"

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(StructuredFormatter() if use_json else HumanFormatter())

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level)

    # The kubernetes client logs every request body at DEBUG
    logging.getLogger("kubernetes").setLevel(max(level, logging.INFO))
    logging.getLogger("urllib3").setLevel(logging.WARNING)


# ============================================================================
# CHECKPOINT LOGGING
# ============================================================================

def log_checkpoint(
    name: str,
    data: Optional[Dict[str, Any]] = None,
    logger: Optional[Union[logging.Logger, logging.LoggerAdapter]] = None,
) -> None:
    """
    Log a named milestone such as lease_acquired, lease_transferred or
    remote_config_saved, so one operation can be followed across the
    processes that contend for a namespace.
    """
    payload: Dict[str, Any] = {"checkpoint": name}
    if data:
        payload["detail"] = data

    logger = logger or logging.getLogger("checkpoint")
    if isinstance(logger, ContextLogger):
        logger.info(f"CHECKPOINT: {name}", extra=payload)
    else:
        logger.info(f"CHECKPOINT: {name}", extra={RECORD_FIELD: payload})


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "LogComponent",
    "LogContext",
    "StructuredFormatter",
    "HumanFormatter",
    "ContextLogger",
    "get_logger",
    "configure_logging",
    "log_context",
    "get_current_context",
    "log_checkpoint",
]
