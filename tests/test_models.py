"""Tests for sensitivity propagation and graph helpers of the parsed model."""
import json

from archrisk.loader import parse_model
from archrisk.types import Confidentiality, Criticality

from conftest import data_asset, technical_asset


class TestSensitivityPropagation:
    def test_asset_inherits_from_processed_data(self, sample_model_dict):
        model = parse_model(sample_model_dict)
        client = model.technical_assets["client1"]
        # own rating is public, processed customer records are strictly confidential
        assert client.confidentiality is Confidentiality.PUBLIC
        assert client.highest_confidentiality(model) is Confidentiality.STRICTLY_CONFIDENTIAL
        assert client.highest_integrity(model) is Criticality.CRITICAL

    def test_own_rating_wins_when_higher(self, sample_model_dict):
        model = parse_model(sample_model_dict)
        db = model.technical_assets["db1"]
        assert db.highest_availability(model) is Criticality.CRITICAL

    def test_stored_data_counts(self, sample_model_dict):
        sample_model_dict["data_assets"]["Keys"] = data_asset(
            "keys", confidentiality="strictly-confidential", integrity="mission-critical"
        )
        sample_model_dict["technical_assets"]["Vault Store"] = technical_asset(
            "store1", type="datastore", data_assets_stored=["keys"]
        )
        model = parse_model(sample_model_dict)
        store = model.technical_assets["store1"]
        assert store.highest_integrity(model) is Criticality.MISSION_CRITICAL

    def test_link_uses_sent_and_received_data(self, sample_model_dict):
        model = parse_model(sample_model_dict)
        link = model.communication_links["client1>ldap-lookup"]
        assert link.highest_confidentiality(model) is Confidentiality.CONFIDENTIAL
        assert link.highest_integrity(model) is Criticality.OPERATIONAL

    def test_repeated_calls_are_consistent(self, sample_model_dict):
        model = parse_model(sample_model_dict)
        client = model.technical_assets["client1"]
        first = client.highest_confidentiality(model)
        assert all(client.highest_confidentiality(model) is first for _ in range(5))

    def test_trust_boundary_aggregates_inside_assets(self, sample_model_dict):
        model = parse_model(sample_model_dict)
        boundary = model.trust_boundaries["data-center"]
        assert boundary.highest_confidentiality(model) is Confidentiality.STRICTLY_CONFIDENTIAL


class TestTrustBoundaryTraversal:
    def _nested(self, model_dict):
        model_dict["trust_boundaries"] = {
            "Outer": {
                "id": "outer",
                "type": "network-cloud-provider",
                "tags": ["aws"],
                "technical_assets_inside": ["client1"],
                "trust_boundaries_nested": ["inner"],
            },
            "Inner": {
                "id": "inner",
                "type": "execution-environment",
                "technical_assets_inside": ["ldap1", "db1"],
            },
        }
        return parse_model(model_dict)

    def test_parent_lookup(self, sample_model_dict):
        model = self._nested(sample_model_dict)
        assert model.trust_boundaries["inner"].parent_trust_boundary_id(model) == "outer"
        assert model.trust_boundaries["inner"].all_parent_trust_boundary_ids(model) == ["inner", "outer"]

    def test_network_boundary_skips_execution_environment(self, sample_model_dict):
        model = self._nested(sample_model_dict)
        assert model.network_trust_boundary_of("db1").id == "outer"
        assert model.trust_boundary_id_of("db1") == "inner"

    def test_tags_found_traversing_up(self, sample_model_dict):
        model = self._nested(sample_model_dict)
        assert model.technical_assets["db1"].is_tagged_with_any_traversing_up(model, "aws")
        assert not model.technical_assets["db1"].is_tagged_with_any("aws")

    def test_same_parent_boundary(self, sample_model_dict):
        model = self._nested(sample_model_dict)
        client, db = model.technical_assets["client1"], model.technical_assets["db1"]
        assert model.is_sharing_same_parent_trust_boundary(client, db)

    def test_link_within_network_boundary(self, sample_model_dict):
        model = self._nested(sample_model_dict)
        link = model.communication_links["client1>ldap-lookup"]
        assert link.is_across_trust_boundary(model)
        assert not link.is_across_trust_boundary_network_only(model)


class TestSerialization:
    def test_to_dict_is_json_serializable(self, sample_model_dict):
        model = parse_model(sample_model_dict)
        data = json.loads(json.dumps(model.to_dict()))
        assert data["technical_assets"]["db1"]["technology"] == "database"
        assert data["technical_assets"]["client1"]["communication_links"][0]["id"] == "client1>ldap-lookup"
        assert data["date"] == "2026-01-15"

    def test_tags_actually_used(self, sample_model_dict):
        model = parse_model(sample_model_dict)
        assert model.tags_actually_used() == ["internal-only"]
