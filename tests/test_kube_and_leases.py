# ============================================================================
# KUBERNETES CLIENT AND LEASE CLIENT TESTS
# ============================================================================
# EPOCH: 1 - COORDINATION
# STATUS: Tests - Infrastructure layer
# PURPOSE: Verify kube API facade and Lease CRUD with mocked API handles
# CREATED: 16 OCT 2026
# ============================================================================
"""
Kubernetes Client and Lease Client Tests

Covers:
1. KubeClient status-code handling (404 / 409 pass-through rules)
2. KubeClientFactory per-context caching and current context lookup
3. LeaseClient create/read/renew/transfer/delete bodies
4. Read retry on transient 500 responses

The CoreV1Api and CoordinationV1Api handles are MagicMocks injected
through the KubeClient constructor; no cluster is contacted.

Run with:
    pytest tests/test_kube_and_leases.py -v
"""

import asyncio
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from kubernetes import client, config
from kubernetes.client.rest import ApiException

from core.errors import SoloError
from core.models.lease import Lease
from infrastructure.kube import KubeClient, KubeClientFactory
from infrastructure.leases import LeaseClient


# ============================================================================
# FIXTURES
# ============================================================================

@pytest.fixture
def kube():
    return KubeClient(context="kind-solo", core_api=MagicMock(), coordination_api=MagicMock())


def make_v1_lease(holder="h", transitions=0, resource_version="7"):
    return client.V1Lease(
        metadata=client.V1ObjectMeta(name="solo-e2e", namespace="solo-e2e", resource_version=resource_version),
        spec=client.V1LeaseSpec(
            holder_identity=holder,
            lease_duration_seconds=20,
            acquire_time=datetime(2026, 10, 13, 12, 0, tzinfo=timezone.utc),
            renew_time=datetime(2026, 10, 13, 12, 0, 10, tzinfo=timezone.utc),
            lease_transitions=transitions,
        ),
    )


def echo_body(**kwargs):
    """Mimic the API server returning what it was sent."""
    return kwargs["body"]


# ============================================================================
# KUBE CLIENT
# ============================================================================

class TestKubeClient:
    """Status code handling of the API facade."""

    def test_namespace_exists(self, kube):
        assert asyncio.run(kube.namespace_exists("solo-e2e")) is True
        kube.core_api.read_namespace.assert_called_once_with(name="solo-e2e")

    def test_namespace_missing(self, kube):
        kube.core_api.read_namespace.side_effect = ApiException(status=404)
        assert asyncio.run(kube.namespace_exists("solo-e2e")) is False

    def test_namespace_lookup_error_propagates(self, kube):
        kube.core_api.read_namespace.side_effect = ApiException(status=403)
        with pytest.raises(ApiException):
            asyncio.run(kube.namespace_exists("solo-e2e"))

    def test_create_namespace_conflict_is_success(self, kube):
        kube.core_api.create_namespace.side_effect = ApiException(status=409)
        assert asyncio.run(kube.create_namespace("solo-e2e")) is True

    def test_create_namespace_body(self, kube):
        asyncio.run(kube.create_namespace("solo-e2e"))
        body = kube.core_api.create_namespace.call_args.kwargs["body"]
        assert body.metadata.name == "solo-e2e"

    def test_read_config_map_missing(self, kube):
        kube.core_api.read_namespaced_config_map.side_effect = ApiException(status=404)
        assert asyncio.run(kube.read_config_map("solo-e2e", "solo-remote-config")) is None

    def test_replace_config_map_body(self, kube):
        asyncio.run(kube.replace_config_map(
            "solo-e2e", "solo-remote-config", {"solo.hedera.com/type": "remote-config"}, {"remote-config-data": "x"}
        ))
        kwargs = kube.core_api.replace_namespaced_config_map.call_args.kwargs
        assert kwargs["name"] == "solo-remote-config"
        assert kwargs["body"].data == {"remote-config-data": "x"}
        assert kwargs["body"].metadata.labels == {"solo.hedera.com/type": "remote-config"}

    def test_list_pods_joins_labels(self, kube):
        kube.core_api.list_namespaced_pod.return_value = MagicMock(items=["pod-a"])
        pods = asyncio.run(kube.list_pods("solo-e2e", ["a=1", "b=2"]))
        assert pods == ["pod-a"]
        assert kube.core_api.list_namespaced_pod.call_args.kwargs["label_selector"] == "a=1,b=2"

    def test_list_pods_empty(self, kube):
        kube.core_api.list_namespaced_pod.return_value = MagicMock(items=None)
        assert asyncio.run(kube.list_pods("solo-e2e", ["app=x"])) == []


class TestKubeClientFactory:
    """Per-context client cache."""

    def test_get_caches_per_context(self):
        builder = MagicMock(side_effect=lambda context: MagicMock(context=context))
        factory = KubeClientFactory(client_builder=builder)
        assert factory.get("a") is factory.get("a")
        assert factory.get("a") is not factory.get("b")
        assert builder.call_count == 2

    def test_default_is_none_context(self):
        builder = MagicMock(side_effect=lambda context: MagicMock(context=context))
        factory = KubeClientFactory(client_builder=builder)
        assert factory.default().context is None

    def test_unusable_kubeconfig_is_solo_error(self, tmp_path):
        kubeconfig = str(tmp_path / "absent")
        failure = config.ConfigException("Invalid kube-config file. No configuration found.")
        factory = KubeClientFactory(kubeconfig=kubeconfig)

        with patch.object(config, "new_client_from_config", side_effect=failure) as new_client:
            with pytest.raises(SoloError) as exc_info:
                factory.get("kind-solo")
            assert "kind-solo" in exc_info.value.message
            assert exc_info.value.cause is failure
            assert exc_info.value.meta == {"context": "kind-solo", "kubeconfig": kubeconfig}

            # failures are not cached
            with pytest.raises(SoloError) as exc_info:
                factory.default()
            assert "current context" in exc_info.value.message
            assert new_client.call_count == 2

    def test_current_context(self):
        with patch.object(config, "list_kube_config_contexts", return_value=([], {"name": "kind-solo"})):
            assert KubeClientFactory().current_context() == "kind-solo"

    def test_current_context_without_kubeconfig(self):
        with patch.object(config, "list_kube_config_contexts", side_effect=config.ConfigException("none")):
            assert KubeClientFactory().current_context() is None


# ============================================================================
# LEASE CLIENT
# ============================================================================

class TestLeaseClient:
    """Lease CRUD over the coordination API."""

    def test_create_body(self, kube):
        kube.coordination_api.create_namespaced_lease.side_effect = echo_body
        lease = asyncio.run(LeaseClient(kube).create("solo-e2e", "solo-e2e", '{"pid": 1}', 20))
        assert lease.holder_identity == '{"pid": 1}'
        assert lease.duration_seconds == 20
        assert lease.lease_transitions == 0
        assert lease.acquire_time is not None
        assert lease.renew_time is None

    def test_create_conflict_propagates(self, kube):
        kube.coordination_api.create_namespaced_lease.side_effect = ApiException(status=409)
        with pytest.raises(ApiException) as exc_info:
            asyncio.run(LeaseClient(kube).create("solo-e2e", "solo-e2e", "h", 20))
        assert exc_info.value.status == 409

    def test_read_maps_v1_lease(self, kube):
        kube.coordination_api.read_namespaced_lease.return_value = make_v1_lease(transitions=2)
        lease = asyncio.run(LeaseClient(kube).read("solo-e2e", "solo-e2e"))
        assert isinstance(lease, Lease)
        assert lease.lease_transitions == 2
        assert lease.resource_version == "7"

    def test_read_missing_is_none(self, kube):
        kube.coordination_api.read_namespaced_lease.side_effect = ApiException(status=404)
        assert asyncio.run(LeaseClient(kube).read("solo-e2e", "solo-e2e")) is None

    def test_read_retries_server_errors(self, kube):
        kube.coordination_api.read_namespaced_lease.side_effect = [
            ApiException(status=500),
            ApiException(status=500),
            make_v1_lease(),
        ]
        with patch("infrastructure.leases.asyncio.sleep", new=AsyncMock()) as sleep:
            lease = asyncio.run(LeaseClient(kube, read_attempts=3, read_retry_seconds=0.5).read("solo-e2e", "solo-e2e"))
        assert lease is not None
        assert sleep.await_count == 2
        sleep.assert_awaited_with(0.5)

    def test_read_gives_up_after_attempts(self, kube):
        kube.coordination_api.read_namespaced_lease.side_effect = ApiException(status=500)
        with patch("infrastructure.leases.asyncio.sleep", new=AsyncMock()):
            with pytest.raises(ApiException):
                asyncio.run(LeaseClient(kube, read_attempts=2).read("solo-e2e", "solo-e2e"))
        assert kube.coordination_api.read_namespaced_lease.call_count == 2

    def test_read_other_errors_not_retried(self, kube):
        kube.coordination_api.read_namespaced_lease.side_effect = ApiException(status=403)
        with pytest.raises(ApiException):
            asyncio.run(LeaseClient(kube).read("solo-e2e", "solo-e2e"))
        assert kube.coordination_api.read_namespaced_lease.call_count == 1

    def test_renew_stamps_renew_time_and_keeps_version(self, kube):
        kube.coordination_api.replace_namespaced_lease.side_effect = echo_body
        original = Lease.from_v1_lease(make_v1_lease())
        renewed = asyncio.run(LeaseClient(kube).renew(original))
        assert renewed.renew_time > original.renew_time
        assert renewed.holder_identity == original.holder_identity
        body = kube.coordination_api.replace_namespaced_lease.call_args.kwargs["body"]
        assert body.metadata.resource_version == "7"

    def test_transfer_increments_transitions(self, kube):
        kube.coordination_api.replace_namespaced_lease.side_effect = echo_body
        original = Lease.from_v1_lease(make_v1_lease(holder="old", transitions=4))
        moved = asyncio.run(LeaseClient(kube).transfer(original, "new"))
        assert moved.holder_identity == "new"
        assert moved.lease_transitions == 5
        assert moved.acquire_time == moved.renew_time

    def test_delete(self, kube):
        asyncio.run(LeaseClient(kube).delete("solo-e2e", "solo-e2e"))
        kube.coordination_api.delete_namespaced_lease.assert_called_once_with(name="solo-e2e", namespace="solo-e2e")
