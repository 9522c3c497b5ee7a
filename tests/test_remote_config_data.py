# ============================================================================
# REMOTE CONFIG DOCUMENT TESTS
# ============================================================================
# EPOCH: 1 - COORDINATION
# STATUS: Tests - Remote config data layer
# PURPOSE: Verify component registry, flags, metadata and the full document
# CREATED: 16 OCT 2026
# ============================================================================
"""
Remote Config Document Tests

Covers:
1. Component models (node id derivation, compare, validation)
2. ComponentsDataWrapper CRUD and its error cases
3. CommonFlagsDataWrapper inheritance of stored flag values
4. RemoteConfigDataWrapper validation, bounded history, with_mutation
5. ConfigMap parsing

Run with:
    pytest tests/test_remote_config_data.py -v
"""

from types import SimpleNamespace

import pytest
import yaml

from core import constants
from core.config.command_flags import CommandFlags
from core.contracts import ComponentState, ComponentType, ConsensusNodeState, DeploymentState
from core.errors import (
    ComponentNotFoundError,
    IllegalArgumentError,
    RemoteConfigValidationError,
    ResourceNotFoundError,
    SoloError,
)
from core.models.cluster import Cluster
from core.models.components import (
    ConsensusNodeComponent,
    HaProxyComponent,
    MirrorNodeComponent,
    RelayComponent,
    node_id_from_alias,
    render_component_name,
    render_node_alias,
)
from core.models.metadata import RemoteConfigMetadata
from remote_config import CommonFlagsDataWrapper, ComponentsDataWrapper, RemoteConfigDataWrapper, with_mutation


# ============================================================================
# FIXTURES
# ============================================================================

@pytest.fixture
def metadata():
    return RemoteConfigMetadata(name="solo-e2e", deployment_name="dev", last_update_by="ops@example.com")


@pytest.fixture
def make_doc(metadata):
    """Factory for a one-cluster document with two consensus nodes."""
    def _make(**overrides):
        values = dict(
            metadata=metadata.model_copy(),
            clusters={"c1": Cluster(name="c1", namespace="solo-e2e", deployment="dev")},
            components=ComponentsDataWrapper.initialize_with_nodes(["node1", "node2"], "c1", "solo-e2e"),
        )
        values.update(overrides)
        return RemoteConfigDataWrapper(**values)
    return _make


def relay(name="relay-1", **kwargs):
    return RelayComponent(name=name, cluster="c1", namespace="solo-e2e", **kwargs)


# ============================================================================
# COMPONENT MODELS
# ============================================================================

class TestComponentModels:
    """Component variants and naming helpers."""

    @pytest.mark.parametrize("alias,node_id", [("node1", 0), ("node2", 1), ("node12", 11)])
    def test_node_id_from_alias(self, alias, node_id):
        assert node_id_from_alias(alias) == node_id
        assert render_node_alias(node_id) == alias

    @pytest.mark.parametrize("alias", ["node", "12", ""])
    def test_node_id_requires_trailing_number(self, alias):
        with pytest.raises(IllegalArgumentError):
            node_id_from_alias(alias)

    def test_rendered_names(self):
        assert render_component_name("mirror-node", 3) == "mirror-node-3"

    def test_compare_uses_identity_fields(self):
        assert relay().compare(relay(consensus_node_aliases=["node1"]))
        assert not relay().compare(relay(name="relay-2"))
        assert not relay().compare(HaProxyComponent(name="relay-1", cluster="c1", namespace="solo-e2e"))

    def test_consensus_node_serializes_with_aliases(self):
        node = ConsensusNodeComponent(name="node1", cluster="c1", namespace="ns", node_id=0)
        data = node.to_object()
        assert data == {
            "name": "node1",
            "cluster": "c1",
            "namespace": "ns",
            "state": "non-deployed",
            "nodeId": 0,
        }
        assert ConsensusNodeComponent.from_object(data) == node
        assert node.node_alias == "node1"

    def test_invalid_component_data(self):
        with pytest.raises(RemoteConfigValidationError):
            RelayComponent.from_object({"name": "relay-1"})

    def test_validate_catches_assigned_garbage(self):
        node = ConsensusNodeComponent(name="node1", cluster="c1", namespace="ns", node_id=0)
        node.cluster = ""
        with pytest.raises(RemoteConfigValidationError):
            node.validate_component()


# ============================================================================
# COMPONENTS DATA WRAPPER
# ============================================================================

class TestComponentsDataWrapper:
    """Typed CRUD over component groups."""

    def test_initialize_with_nodes(self):
        components = ComponentsDataWrapper.initialize_with_nodes(["node1", "node2"], "c1", "solo-e2e")
        node = components.get_component(ComponentType.CONSENSUS_NODE, "node2")
        assert node.node_id == 1
        assert node.state == ConsensusNodeState.NON_DEPLOYED
        assert len(components.all_components()) == 2

    def test_add_and_get(self):
        components = ComponentsDataWrapper.initialize_empty()
        components.add_new_component(relay())
        assert components.get_component(ComponentType.RELAY, "relay-1") == relay()
        assert components.relays == {"relay-1": relay()}

    def test_add_duplicate_fails(self):
        components = ComponentsDataWrapper.initialize_empty()
        components.add_new_component(relay())
        with pytest.raises(SoloError) as exc_info:
            components.add_new_component(relay())
        assert exc_info.value.message == "Component exists"

    def test_add_same_name_other_cluster_fails(self):
        components = ComponentsDataWrapper.initialize_empty()
        components.add_new_component(relay())
        with pytest.raises(SoloError):
            components.add_new_component(RelayComponent(name="relay-1", cluster="c2", namespace="solo-e2e"))

    def test_edit_missing_fails(self):
        with pytest.raises(ComponentNotFoundError) as exc_info:
            ComponentsDataWrapper.initialize_empty().edit_component(relay())
        assert exc_info.value.message == "Component doesn't exist, name: relay-1"

    def test_edit_replaces(self):
        components = ComponentsDataWrapper.initialize_empty()
        components.add_new_component(relay())
        components.edit_component(relay(consensus_node_aliases=["node1"]))
        assert components.relays["relay-1"].consensus_node_aliases == ["node1"]

    def test_remove(self):
        components = ComponentsDataWrapper.initialize_empty()
        components.add_new_component(relay())
        components.remove_component("relay-1", ComponentType.RELAY)
        assert components.relays == {}

    def test_remove_missing_fails(self):
        with pytest.raises(ComponentNotFoundError) as exc_info:
            ComponentsDataWrapper.initialize_empty().remove_component("relay-1", ComponentType.RELAY)
        assert exc_info.value.component_type == "relays"

    def test_get_missing_fails(self):
        with pytest.raises(ComponentNotFoundError):
            ComponentsDataWrapper.initialize_empty().get_component(ComponentType.MIRROR_NODE, "mirror-node-1")

    def test_unknown_type(self):
        with pytest.raises(IllegalArgumentError):
            ComponentsDataWrapper.initialize_empty().get_components("widgets")

    def test_change_node_state(self):
        components = ComponentsDataWrapper.initialize_with_nodes(["node1"], "c1", "solo-e2e")
        components.change_node_state("node1", ConsensusNodeState.STARTED)
        assert components.consensus_nodes["node1"].state == ConsensusNodeState.STARTED

    def test_disable_component(self):
        components = ComponentsDataWrapper.initialize_empty()
        components.add_new_component(relay())
        components.disable_component("relay-1", ComponentType.RELAY)
        assert components.relays["relay-1"].state == ComponentState.DELETED

    def test_disable_consensus_node_rejected(self):
        components = ComponentsDataWrapper.initialize_with_nodes(["node1"], "c1", "solo-e2e")
        with pytest.raises(IllegalArgumentError):
            components.disable_component("node1", ComponentType.CONSENSUS_NODE)

    def test_new_component_index(self):
        components = ComponentsDataWrapper.initialize_empty()
        assert components.get_new_component_index(ComponentType.MIRROR_NODE) == 1
        components.add_new_component(
            MirrorNodeComponent(name="mirror-node-3", cluster="c1", namespace="solo-e2e")
        )
        assert components.get_new_component_index(ComponentType.MIRROR_NODE) == 4

    def test_create_new_component(self):
        components = ComponentsDataWrapper.initialize_empty()
        first = components.create_new_component(ComponentType.HA_PROXY, "c1", "solo-e2e")
        assert isinstance(first, HaProxyComponent)
        assert first.name == "haproxy-1"
        # not added until asked
        assert components.ha_proxies == {}

        components.add_new_component(first)
        second = components.create_new_component(ComponentType.HA_PROXY, "c2", "solo-e2e")
        assert (second.name, second.cluster) == ("haproxy-2", "c2")

    def test_create_new_relay_carries_fields(self):
        components = ComponentsDataWrapper.initialize_empty()
        relay_ = components.create_new_component(
            ComponentType.RELAY, "c1", "solo-e2e", consensus_node_aliases=["node1", "node2"]
        )
        assert relay_.name == "relay-1"
        assert relay_.consensus_node_aliases == ["node1", "node2"]

    def test_create_new_consensus_node_rejected(self):
        components = ComponentsDataWrapper.initialize_empty()
        with pytest.raises(IllegalArgumentError):
            components.create_new_component(ComponentType.CONSENSUS_NODE, "c1", "solo-e2e")

    def test_misfiled_component_rejected(self):
        components = ComponentsDataWrapper.initialize_empty()
        components.get_components(ComponentType.HA_PROXY)["relay-1"] = relay()
        with pytest.raises(RemoteConfigValidationError):
            components.validate()

    def test_unknown_group_in_data(self):
        with pytest.raises(RemoteConfigValidationError):
            ComponentsDataWrapper.from_object({"widgets": {}})

    def test_clone_is_independent(self):
        components = ComponentsDataWrapper.initialize_empty()
        components.add_new_component(relay())
        copy = components.clone()
        copy.remove_component("relay-1", ComponentType.RELAY)
        assert "relay-1" in components.relays


# ============================================================================
# COMMON FLAGS
# ============================================================================

class TestCommonFlags:
    """Stored flag values are inherited by later commands."""

    def test_first_value_recorded(self):
        stored = CommonFlagsDataWrapper()
        stored.handle_flags(CommandFlags(release_tag="v0.58.10"))
        assert stored.to_object() == {"releaseTag": "v0.58.10"}

    def test_missing_value_filled_in(self):
        stored = CommonFlagsDataWrapper({"releaseTag": "v0.58.10", "nodeAliasesUnparsed": "node1,node2"})
        flags = CommandFlags()
        stored.handle_flags(flags)
        assert flags.release_tag == "v0.58.10"
        assert flags.node_alias_list() == ["node1", "node2"]

    def test_mismatch_keeps_stored_and_passed(self, caplog):
        stored = CommonFlagsDataWrapper({"releaseTag": "v0.58.10"})
        flags = CommandFlags(release_tag="v0.59.0")
        with caplog.at_level("WARNING"):
            stored.handle_flags(flags)
        assert flags.release_tag == "v0.59.0"
        assert stored.get("releaseTag") == "v0.58.10"
        assert "differs" in caplog.text

    def test_mismatch_silent_when_forced(self, caplog):
        stored = CommonFlagsDataWrapper({"releaseTag": "v0.58.10"})
        with caplog.at_level("WARNING"):
            stored.handle_flags(CommandFlags(release_tag="v0.59.0", force=True))
        assert "differs" not in caplog.text

    def test_unknown_keys_dropped(self):
        assert CommonFlagsDataWrapper.from_object({"bogus": "x", "chartDirectory": "/charts"}).to_object() == {
            "chartDirectory": "/charts"
        }


# ============================================================================
# METADATA
# ============================================================================

class TestMetadata:
    """Document header."""

    def test_defaults(self, metadata):
        assert metadata.state == DeploymentState.PRE_GENESIS
        assert metadata.last_updated_at.tzinfo is not None

    def test_round_trip_uses_aliases(self, metadata):
        data = metadata.to_object()
        assert data["deploymentName"] == "dev"
        assert "migration" not in data
        assert RemoteConfigMetadata.from_object(data) == metadata

    def test_migration(self, metadata):
        metadata.make_migration("ops@example.com", "0.30.0")
        data = metadata.to_object()
        assert data["migration"]["fromVersion"] == "0.30.0"
        RemoteConfigMetadata.from_object(data).validate_metadata()

    def test_missing_deployment_name(self):
        with pytest.raises(RemoteConfigValidationError):
            RemoteConfigMetadata.from_object({"name": "solo-e2e", "lastUpdateBy": "ops"})


# ============================================================================
# DOCUMENT
# ============================================================================

class TestRemoteConfigDocument:
    """Validation and mutation of the full document."""

    def test_valid_document(self, make_doc):
        doc = make_doc()
        assert doc.version == constants.REMOTE_CONFIG_VERSION
        assert doc.command_history == []
        assert doc.last_executed_command == ""

    def test_empty_cluster_namespace_fails_fast(self, make_doc):
        with pytest.raises(RemoteConfigValidationError) as exc_info:
            make_doc(clusters={"c1": Cluster(name="c1", namespace="", deployment="dev")})
        assert exc_info.value.field == "namespace"

    def test_non_string_last_command_fails_fast(self, make_doc):
        with pytest.raises(RemoteConfigValidationError) as exc_info:
            make_doc(command_history=["a"], last_executed_command=42)
        assert exc_info.value.field == "last_executed_command"

    def test_history_requires_last_command(self, make_doc):
        with pytest.raises(RemoteConfigValidationError):
            make_doc(command_history=["a"], last_executed_command="")

    def test_non_string_history_entry(self, make_doc):
        with pytest.raises(RemoteConfigValidationError):
            make_doc(command_history=["a", 7], last_executed_command="a")

    def test_history_is_bounded_fifo(self, make_doc):
        doc = make_doc(max_command_history=5)
        for i in range(10):
            doc.add_command_to_history(f"cmd-{i}")
        assert doc.command_history == [f"cmd-{i}" for i in range(5, 10)]
        assert doc.last_executed_command == "cmd-9"

    def test_default_history_bound(self, make_doc):
        doc = make_doc()
        limit = constants.SOLO_REMOTE_CONFIG_MAX_COMMAND_IN_HISTORY
        for i in range(limit + 5):
            doc.add_command_to_history(f"cmd-{i}")
        assert len(doc.command_history) == limit
        assert doc.command_history[0] == "cmd-5"

    def test_with_mutation_returns_copy(self, make_doc):
        doc = make_doc()
        updated = doc.with_mutation(lambda d: d.add_command_to_history("network deploy"))
        assert updated.last_executed_command == "network deploy"
        assert doc.command_history == []

    def test_with_mutation_rejects_invalid_result(self, make_doc):
        doc = make_doc()

        def break_it(d):
            d.clusters["c2"] = Cluster(name="c2", namespace="solo-e2e", deployment="")

        with pytest.raises(RemoteConfigValidationError):
            with_mutation(doc, break_it)
        assert list(doc.clusters) == ["c1"]

    def test_yaml_round_trip(self, make_doc):
        doc = make_doc()
        doc.add_command_to_history("network deploy --deployment dev")
        doc.components.add_new_component(relay(consensus_node_aliases=["node1"]))
        restored = RemoteConfigDataWrapper.from_yaml(doc.to_yaml())
        assert restored.to_object() == doc.to_object()

    def test_document_layout(self, make_doc):
        data = yaml.safe_load(make_doc().to_yaml())
        assert list(data) == [
            "metadata", "version", "clusters", "components", "commandHistory", "lastExecutedCommand", "flags",
        ]
        assert data["clusters"]["c1"]["dnsBaseDomain"] == constants.DEFAULT_DNS_BASE_DOMAIN
        assert set(data["components"]["consensusNodes"]) == {"node1", "node2"}

    def test_invalid_yaml(self):
        with pytest.raises(RemoteConfigValidationError):
            RemoteConfigDataWrapper.from_yaml("metadata: [unclosed")

    def test_missing_metadata(self):
        with pytest.raises(RemoteConfigValidationError):
            RemoteConfigDataWrapper.from_object({"version": "1.0.0"})

    def test_from_config_map(self, make_doc):
        config_map = SimpleNamespace(
            metadata=SimpleNamespace(name=constants.SOLO_REMOTE_CONFIGMAP_NAME),
            data=make_doc().to_config_map_data(),
        )
        doc = RemoteConfigDataWrapper.from_config_map(config_map)
        assert doc.metadata.name == "solo-e2e"

    def test_from_config_map_missing_key(self):
        config_map = SimpleNamespace(metadata=SimpleNamespace(name="solo-remote-config"), data={"other": "x"})
        with pytest.raises(ResourceNotFoundError):
            RemoteConfigDataWrapper.from_config_map(config_map)
