# ============================================================================
# CONFIGURATION AND LOGGING TESTS
# ============================================================================
# EPOCH: 1 - COORDINATION
# STATUS: Tests - Ambient configuration layer
# PURPOSE: Verify env defaults, local config loading, flags and log output
# CREATED: 16 OCT 2026
# ============================================================================
"""
Configuration and Logging Tests

Covers:
1. Defaults.from_env overrides and the cached singleton
2. LocalConfig YAML loading, lookups and save round trip
3. CommandFlags argv rendering
4. Structured logging with log_context fields

Run with:
    pytest tests/test_config_and_logging.py -v
"""

import io
import json
import logging

import pytest

from core import constants
from core.config.command_flags import CommandFlags
from core.config.defaults import Defaults, get_defaults, reset_defaults
from core.config.local_config import LocalConfig
from core.errors import SoloError
from core.logging import LogComponent, configure_logging, get_logger, log_checkpoint, log_context


LOCAL_CONFIG_YAML = """\
userEmailAddress: ops@example.com
soloVersion: 0.1.0
deployments:
  dev:
    namespace: solo-dev
    clusters: [cluster-1, cluster-2]
clusterRefs:
  cluster-1: kind-solo
  cluster-2: kind-solo-2
"""


# ============================================================================
# FIXTURES
# ============================================================================

@pytest.fixture
def local_config_file(tmp_path):
    path = tmp_path / "local-config.yaml"
    path.write_text(LOCAL_CONFIG_YAML)
    return path


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


# ============================================================================
# DEFAULTS
# ============================================================================

class TestDefaults:
    """Environment driven defaults."""

    def test_builtin_values(self, monkeypatch):
        for name in ("SOLO_LEASE_DURATION", "SOLO_LEASE_ACQUIRE_ATTEMPTS", "SOLO_REMOTE_CONFIG_MAX_HISTORY"):
            monkeypatch.delenv(name, raising=False)
        defaults = Defaults.from_env()
        assert defaults.locks.lease_duration_seconds == constants.DEFAULT_LEASE_DURATION_SECONDS
        assert defaults.locks.acquire_attempts == constants.DEFAULT_LOCK_ACQUIRE_ATTEMPTS
        assert defaults.remote_config.max_command_history == constants.SOLO_REMOTE_CONFIG_MAX_COMMAND_IN_HISTORY

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("SOLO_LEASE_DURATION", "45")
        monkeypatch.setenv("SOLO_LEASE_ACQUIRE_ATTEMPTS", "2")
        monkeypatch.setenv("SOLO_REMOTE_CONFIG_MAX_HISTORY", "5")
        monkeypatch.setenv("SOLO_KUBE_CONTEXT", "kind-solo")
        defaults = Defaults.from_env()
        assert defaults.locks.lease_duration_seconds == 45
        assert defaults.locks.acquire_attempts == 2
        assert defaults.remote_config.max_command_history == 5
        assert defaults.kube.context == "kind-solo"

    @pytest.mark.parametrize("raw", ["soon", "0", "-3"])
    def test_invalid_env_value(self, monkeypatch, raw):
        monkeypatch.setenv("SOLO_LEASE_DURATION", raw)
        with pytest.raises(SoloError) as exc_info:
            Defaults.from_env()
        assert "SOLO_LEASE_DURATION" in exc_info.value.message

    def test_blank_env_uses_default(self, monkeypatch):
        monkeypatch.setenv("SOLO_LEASE_ACQUIRE_ATTEMPTS", " ")
        assert Defaults.from_env().locks.acquire_attempts == constants.DEFAULT_LOCK_ACQUIRE_ATTEMPTS

    def test_singleton_reset(self, monkeypatch):
        reset_defaults()
        monkeypatch.setenv("SOLO_LEASE_DURATION", "33")
        try:
            assert get_defaults() is get_defaults()
            assert get_defaults().locks.lease_duration_seconds == 33
        finally:
            reset_defaults()


# ============================================================================
# LOCAL CONFIG
# ============================================================================

class TestLocalConfig:
    """Operator workstation config."""

    def test_load(self, local_config_file):
        local_config = LocalConfig.load(local_config_file)
        assert local_config.user_email_address == "ops@example.com"
        assert local_config.get_deployment("dev").namespace == "solo-dev"
        assert local_config.context_for_cluster("cluster-2") == "kind-solo-2"
        assert local_config.context_for_cluster("cluster-9") is None

    def test_contexts_for_deployment_in_order(self, local_config_file):
        local_config = LocalConfig.load(local_config_file)
        assert local_config.contexts_for_deployment("dev") == ["kind-solo", "kind-solo-2"]

    def test_unknown_deployment(self, local_config_file):
        with pytest.raises(SoloError) as exc_info:
            LocalConfig.load(local_config_file).get_deployment("prod")
        assert exc_info.value.message == "Selected deployment name is not set in local config - prod"

    def test_unmapped_cluster_ref(self, tmp_path):
        path = tmp_path / "lc.yaml"
        path.write_text(LOCAL_CONFIG_YAML.replace("  cluster-2: kind-solo-2\n", ""))
        with pytest.raises(SoloError):
            LocalConfig.load(path).contexts_for_deployment("dev")

    def test_unmapped_cluster_ref_as_context(self, tmp_path):
        path = tmp_path / "lc.yaml"
        path.write_text(LOCAL_CONFIG_YAML.replace("  cluster-2: kind-solo-2\n", ""))
        contexts = LocalConfig.load(path).contexts_for_deployment("dev", unmapped_as_context=True)
        assert contexts == ["kind-solo", "cluster-2"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(SoloError):
            LocalConfig.load(tmp_path / "absent.yaml")

    def test_unknown_keys_rejected(self, tmp_path):
        path = tmp_path / "lc.yaml"
        path.write_text(LOCAL_CONFIG_YAML + "surprise: true\n")
        with pytest.raises(SoloError):
            LocalConfig.load(path)

    def test_env_path(self, local_config_file, monkeypatch):
        monkeypatch.setenv("SOLO_LOCAL_CONFIG", str(local_config_file))
        assert LocalConfig.load().user_email_address == "ops@example.com"

    def test_save_round_trip(self, local_config_file, tmp_path):
        original = LocalConfig.load(local_config_file)
        saved = original.save(tmp_path / "nested" / "copy.yaml")
        assert LocalConfig.load(saved) == original


# ============================================================================
# COMMAND FLAGS
# ============================================================================

class TestCommandFlags:
    """Flag rendering for command history entries."""

    def test_argv_string(self):
        flags = CommandFlags(
            command=["network", "deploy"],
            deployment="dev",
            release_tag="v0.58.10",
            quiet=True,
        )
        assert flags.to_argv_string() == "--deployment dev --quiet --release-tag v0.58.10"

    def test_empty_flags(self):
        assert CommandFlags(command=["x"]).to_argv_string() == ""

    def test_command_parts(self):
        flags = CommandFlags(command=["node", "add"])
        assert (flags.command_name, flags.subcommand_name) == ("node", "add")
        assert CommandFlags().command_name == ""

    def test_node_alias_list(self):
        assert CommandFlags(node_aliases="node1, node2,,node3").node_alias_list() == ["node1", "node2", "node3"]
        assert CommandFlags().node_alias_list() == []


# ============================================================================
# LOGGING
# ============================================================================

class TestLogging:
    """Structured output with context."""

    def test_json_output_includes_context(self, restore_logging):
        stream = io.StringIO()
        configure_logging("INFO", json_output=True, stream=stream)
        logger = get_logger("tests.logging", LogComponent.LOCK)

        with log_context(namespace="solo-dev", lease="solo-dev"):
            logger.info("lease acquired")

        record = json.loads(stream.getvalue().strip().splitlines()[-1])
        assert record["message"] == "lease acquired"
        assert record["context"] == {"namespace": "solo-dev", "lease": "solo-dev"}
        assert record["data"]["component"] == "lock"

    def test_nested_context_inherits(self, restore_logging):
        stream = io.StringIO()
        configure_logging("INFO", stream=stream)
        logger = get_logger("tests.logging")

        with log_context(deployment="dev"):
            with log_context(namespace="solo-dev"):
                logger.info("inner")
            logger.info("outer")

        inner, outer = stream.getvalue().strip().splitlines()
        assert "[deployment=dev, ns=solo-dev]" in inner
        assert "ns=solo-dev" not in outer

    def test_checkpoint(self, restore_logging):
        stream = io.StringIO()
        configure_logging("INFO", json_output=True, stream=stream)
        log_checkpoint("remote_config_saved", {"contexts": ["kind-solo"]})
        assert "remote_config_saved" in stream.getvalue()

    def test_level_filtering(self, restore_logging):
        stream = io.StringIO()
        configure_logging("WARNING", stream=stream)
        get_logger("tests.logging").info("hidden")
        assert stream.getvalue() == ""
