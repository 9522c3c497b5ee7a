# ============================================================================
# DURATION VALUE TYPE
# ============================================================================
# EPOCH: 1 - COORDINATION
# STATUS: Core - Immutable time span
# PURPOSE: Lease timers, renewal intervals and retry backoff
# CREATED: 12 OCT 2026
# ============================================================================
"""
Duration

Immutable, millisecond-precision time span.

Usage:
    from core.time import Duration

    delay = Duration.of_seconds(20).multiplied_by(0.5)
    await asyncio.sleep(delay.seconds)
"""

from dataclasses import dataclass
from datetime import timedelta
from typing import Union

from core.errors import IllegalArgumentError

Number = Union[int, float]


@dataclass(frozen=True, order=True)
class Duration:
    """A span of time stored as whole milliseconds."""
    millis: int = 0

    def __post_init__(self):
        if not isinstance(self.millis, int) or isinstance(self.millis, bool):
            raise IllegalArgumentError(f"Invalid duration millis: {self.millis!r}", value=self.millis)

    # =========================================================================
    # FACTORIES
    # =========================================================================

    @classmethod
    def zero(cls) -> "Duration":
        return cls(0)

    @classmethod
    def of_millis(cls, millis: Number) -> "Duration":
        return cls(int(round(millis)))

    @classmethod
    def of_seconds(cls, seconds: Number) -> "Duration":
        return cls(int(round(seconds * 1000)))

    @classmethod
    def from_timedelta(cls, delta: timedelta) -> "Duration":
        return cls.of_seconds(delta.total_seconds())

    # =========================================================================
    # ACCESSORS
    # =========================================================================

    @property
    def seconds(self) -> float:
        """Span in (fractional) seconds, suitable for asyncio.sleep."""
        return self.millis / 1000

    def to_millis(self) -> int:
        return self.millis

    def to_timedelta(self) -> timedelta:
        return timedelta(milliseconds=self.millis)

    def is_zero(self) -> bool:
        return self.millis == 0

    def is_negative(self) -> bool:
        return self.millis < 0

    # =========================================================================
    # ARITHMETIC
    # =========================================================================

    def plus(self, other: "Duration") -> "Duration":
        return Duration(self.millis + other.millis)

    def minus(self, other: "Duration") -> "Duration":
        return Duration(self.millis - other.millis)

    def multiplied_by(self, factor: Number) -> "Duration":
        """
        Scale the span.

        Raises:
            IllegalArgumentError: If the factor is negative
        """
        if factor < 0:
            raise IllegalArgumentError(f"Duration factor must not be negative: {factor}", value=factor)
        return Duration.of_millis(self.millis * factor)

    def __str__(self) -> str:
        # ISO-8601, e.g. PT10S or PT0.5S
        seconds = self.millis / 1000
        if seconds == int(seconds):
            return f"PT{int(seconds)}S"
        return f"PT{seconds:g}S"


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = ["Duration"]
