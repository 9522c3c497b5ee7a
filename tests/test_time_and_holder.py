# ============================================================================
# DURATION AND LOCK HOLDER TESTS
# ============================================================================
# EPOCH: 1 - COORDINATION
# STATUS: Tests - Value types used by the lock
# PURPOSE: Verify Duration arithmetic and LockHolder identity semantics
# CREATED: 16 OCT 2026
# ============================================================================
"""
Duration and Lock Holder Tests

Covers:
1. Duration factories, conversion, arithmetic and ISO rendering
2. LockHolder validation and JSON identity round trip
3. Same-machine comparison and the process liveness check

Run with:
    pytest tests/test_time_and_holder.py -v
"""

import errno
import json
import os
from datetime import timedelta
from unittest.mock import patch

import pytest

from core.errors import IllegalArgumentError, MissingArgumentError
from core.time import Duration
from locking.holder import LockHolder


# ============================================================================
# DURATION
# ============================================================================

class TestDuration:
    """Duration value type."""

    def test_factories_agree(self):
        assert Duration.of_seconds(2) == Duration.of_millis(2000)
        assert Duration.zero().is_zero()

    def test_fractional_seconds(self):
        assert Duration.of_seconds(0.5).to_millis() == 500
        assert Duration.of_millis(1500).seconds == 1.5

    def test_timedelta_round_trip(self):
        delta = timedelta(seconds=12, milliseconds=250)
        assert Duration.from_timedelta(delta).to_timedelta() == delta

    def test_ordering(self):
        assert Duration.of_seconds(1) < Duration.of_seconds(2)
        assert max(Duration.of_seconds(3), Duration.of_millis(10)) == Duration.of_seconds(3)

    def test_arithmetic(self):
        ten = Duration.of_seconds(10)
        assert ten.plus(Duration.of_seconds(5)) == Duration.of_seconds(15)
        assert ten.minus(Duration.of_seconds(15)).is_negative()
        assert ten.multiplied_by(0.5) == Duration.of_seconds(5)

    def test_negative_factor_rejected(self):
        with pytest.raises(IllegalArgumentError):
            Duration.of_seconds(1).multiplied_by(-1)

    def test_non_integer_millis_rejected(self):
        with pytest.raises(IllegalArgumentError):
            Duration(1.5)

    def test_iso_rendering(self):
        assert str(Duration.of_seconds(10)) == "PT10S"
        assert str(Duration.of_millis(500)) == "PT0.5S"


# ============================================================================
# LOCK HOLDER
# ============================================================================

class TestLockHolderIdentity:
    """Construction and serialization."""

    def test_json_round_trip(self):
        holder = LockHolder("ops", "ws-1.example.com", 4242)
        assert LockHolder.from_json(holder.to_json()) == holder

    @pytest.mark.parametrize("username,hostname,pid", [
        ("a", "b", 1),
        ("user with spaces", "host-ü", 99999),
        ("root", "localhost", 0),
    ])
    def test_round_trip_preserves_all_fields(self, username, hostname, pid):
        restored = LockHolder.from_json(LockHolder(username, hostname, pid).to_json())
        assert (restored.username, restored.hostname, restored.process_id) == (username, hostname, pid)

    def test_json_uses_pid_key(self):
        data = json.loads(LockHolder("ops", "ws-1", 7).to_json())
        assert data == {"username": "ops", "hostname": "ws-1", "pid": 7}

    def test_str_is_json(self):
        holder = LockHolder("ops", "ws-1", 7)
        assert str(holder) == holder.to_json()

    def test_missing_username(self):
        with pytest.raises(MissingArgumentError):
            LockHolder("", "ws-1", 7)

    def test_missing_hostname(self):
        with pytest.raises(MissingArgumentError):
            LockHolder("ops", "", 7)

    def test_missing_pid(self):
        with pytest.raises(MissingArgumentError):
            LockHolder("ops", "ws-1", None)

    def test_invalid_pid(self):
        with pytest.raises(IllegalArgumentError):
            LockHolder("ops", "ws-1", "7")

    @pytest.mark.parametrize("value", [
        "not json",
        json.dumps({"username": "ops", "hostname": "ws-1"}),
        json.dumps(["ops", "ws-1", 7]),
    ])
    def test_from_json_rejects_malformed(self, value):
        with pytest.raises(IllegalArgumentError):
            LockHolder.from_json(value)

    def test_default_is_this_process(self):
        holder = LockHolder.default()
        assert holder.process_id == os.getpid()
        assert holder.hostname


class TestLockHolderComparison:
    """Equality, machine identity and liveness."""

    def test_equals(self):
        assert LockHolder("ops", "ws-1", 7).equals(LockHolder("ops", "ws-1", 7))
        assert not LockHolder("ops", "ws-1", 7).equals(LockHolder("ops", "ws-1", 8))

    def test_same_machine_ignores_pid(self):
        assert LockHolder("ops", "ws-1", 7).is_same_machine_identity(LockHolder("ops", "ws-1", 8))
        assert not LockHolder("ops", "ws-1", 7).is_same_machine_identity(LockHolder("ops", "ws-2", 7))
        assert not LockHolder("ops", "ws-1", 7).is_same_machine_identity(LockHolder("dev", "ws-1", 7))

    def test_current_process_is_alive(self):
        assert LockHolder.default().is_process_alive()

    def test_non_positive_pid_is_dead(self):
        assert not LockHolder("ops", "ws-1", 0).is_process_alive()
        assert not LockHolder("ops", "ws-1", -1).is_process_alive()

    def test_missing_process_is_dead(self):
        with patch("locking.holder.os.kill", side_effect=OSError(errno.ESRCH, "No such process")):
            assert not LockHolder("ops", "ws-1", 4242).is_process_alive()

    def test_foreign_process_is_alive(self):
        with patch("locking.holder.os.kill", side_effect=OSError(errno.EPERM, "Operation not permitted")):
            assert LockHolder("ops", "ws-1", 1).is_process_alive()
