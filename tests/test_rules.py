"""Tests for the built-in risk rules and their registry."""
import importlib

import pytest

from archrisk.context import AnalysisContext
from archrisk.loader import parse_model
from archrisk.models import Risk
from archrisk.risks import calculate_severity
from archrisk.rules.registry import BUILTIN_RULE_MODULES, builtin_rules, find_rule, rules_by_id
from archrisk.types import (
    STRIDE,
    RiskExploitationImpact,
    RiskExploitationLikelihood,
    RiskFunction,
    RiskSeverity,
)

from conftest import communication_link, technical_asset


def _risks_of(rule_id, model_dict):
    model = parse_model(model_dict)
    rule = find_rule(rule_id)
    return rule.generate_risks(AnalysisContext(model=model))


def _ids(risks):
    return [r.synthetic_id for r in risks]


class TestRegistry:
    def test_all_builtin_rules_present(self):
        rules = builtin_rules()
        assert len(rules) == len(BUILTIN_RULE_MODULES) == 42
        assert len(rules_by_id(rules)) == 42

    def test_module_and_rule_id_agree(self):
        for module_name in BUILTIN_RULE_MODULES:
            module = importlib.import_module(f"archrisk.rules.builtin.{module_name}")
            assert module.RULE.id == module_name.replace("_", "-")

    def test_categories_are_complete(self):
        for rule in builtin_rules():
            category = rule.category
            assert category.title
            assert category.description
            assert category.mitigation
            assert isinstance(category.function, RiskFunction)
            assert isinstance(category.stride, STRIDE)

    def test_find_unknown_rule(self):
        assert find_rule("no-such-rule") is None


class TestAllRulesOnSampleModel:
    @pytest.mark.parametrize("rule", builtin_rules(), ids=lambda r: r.id)
    def test_rule_output_is_well_formed(self, rule, sample_model_dict):
        model = parse_model(sample_model_dict)
        risks = rule.generate_risks(AnalysisContext(model=model))
        for risk in risks:
            assert isinstance(risk, Risk)
            assert risk.category is rule.category
            assert risk.synthetic_id.split("@")[0] == rule.id
            assert risk.severity is calculate_severity(risk.exploitation_likelihood, risk.exploitation_impact)

    @pytest.mark.parametrize("rule", builtin_rules(), ids=lambda r: r.id)
    def test_rule_does_not_modify_model(self, rule, sample_model_dict):
        model = parse_model(sample_model_dict)
        before = model.to_dict()
        rule.generate_risks(AnalysisContext(model=model))
        assert model.to_dict() == before


class TestUnencryptedAsset:
    def test_strictly_confidential_database(self, sample_model_dict):
        risks = _risks_of("unencrypted-asset", sample_model_dict)
        db_risk = next(r for r in risks if r.synthetic_id == "unencrypted-asset@db1")
        assert db_risk.exploitation_impact is RiskExploitationImpact.HIGH
        assert db_risk.exploitation_likelihood is RiskExploitationLikelihood.UNLIKELY
        # weight 3 x 1 falls into the medium bucket
        assert db_risk.severity is RiskSeverity.MEDIUM
        assert db_risk.most_relevant_technical_asset_id == "db1"

    def test_encrypted_database_is_fine(self, sample_model_dict):
        sample_model_dict["technical_assets"]["Customer Database"]["encryption"] = "data-with-enduser-individual-key"
        risks = _risks_of("unencrypted-asset", sample_model_dict)
        assert "unencrypted-asset@db1" not in _ids(risks)

    def test_out_of_scope_is_skipped(self, sample_model_dict):
        sample_model_dict["technical_assets"]["Customer Database"]["out_of_scope"] = True
        risks = _risks_of("unencrypted-asset", sample_model_dict)
        assert "unencrypted-asset@db1" not in _ids(risks)


class TestLdapInjection:
    def test_synthetic_id(self, sample_model_dict):
        risks = _risks_of("ldap-injection", sample_model_dict)
        assert _ids(risks) == ["ldap-injection@client1@ldap1@client1>ldap-lookup"]
        risk = risks[0]
        assert risk.most_relevant_technical_asset_id == "client1"
        assert risk.most_relevant_communication_link_id == "client1>ldap-lookup"
        assert risk.data_breach_technical_asset_ids == ["ldap1"]

    def test_out_of_scope_caller(self, sample_model_dict):
        sample_model_dict["technical_assets"]["Client"]["out_of_scope"] = True
        assert _risks_of("ldap-injection", sample_model_dict) == []

    def test_devops_usage_lowers_likelihood(self, sample_model_dict):
        links = sample_model_dict["technical_assets"]["Client"]["communication_links"]
        links["LDAP Lookup"]["usage"] = "devops"
        risk = _risks_of("ldap-injection", sample_model_dict)[0]
        assert risk.exploitation_likelihood is RiskExploitationLikelihood.UNLIKELY


class TestXmlExternalEntity:
    def test_xml_accepting_asset(self, sample_model_dict):
        sample_model_dict["technical_assets"]["LDAP Server"]["data_formats_accepted"] = ["xml", "json"]
        risks = _risks_of("xml-external-entity", sample_model_dict)
        assert _ids(risks) == ["xml-external-entity@ldap1"]
        assert risks[0].exploitation_impact is RiskExploitationImpact.MEDIUM

    def test_no_xml(self, sample_model_dict):
        assert _risks_of("xml-external-entity", sample_model_dict) == []


class TestUnnecessaryTechnicalAsset:
    def test_isolated_asset(self, sample_model_dict):
        sample_model_dict["technical_assets"]["Lonely Job"] = technical_asset(
            "job1", technology="batch-processing", data_assets_processed=["directory-entries"]
        )
        risks = _risks_of("unnecessary-technical-asset", sample_model_dict)
        assert "unnecessary-technical-asset@job1" in _ids(risks)
        assert "unnecessary-technical-asset@ldap1" not in _ids(risks)


class TestWrongCommunicationLinkContent:
    def test_readonly_link_without_received_data(self, sample_model_dict):
        links = sample_model_dict["technical_assets"]["Client"]["communication_links"]
        links["Status Poll"] = communication_link("ldap1", protocol="ldaps", readonly=True,
                                                  data_assets_sent=["directory-entries"])
        risks = _risks_of("wrong-communication-link-content", sample_model_dict)
        assert "wrong-communication-link-content@client1@client1>status-poll" in _ids(risks)


class TestIdentityStability:
    def test_unrelated_asset_keeps_ids(self, sample_model_dict):
        rules = builtin_rules()
        model = parse_model(sample_model_dict)
        ctx = AnalysisContext(model=model)
        before = {sid for rule in rules for sid in _ids(rule.generate_risks(ctx))}

        sample_model_dict["technical_assets"]["Report Job"] = technical_asset(
            "report1", technology="report-engine", data_assets_processed=["directory-entries"]
        )
        model = parse_model(sample_model_dict)
        ctx = AnalysisContext(model=model)
        after = {sid for rule in rules for sid in _ids(rule.generate_risks(ctx))}

        stable = {"unencrypted-asset@db1", "ldap-injection@client1@ldap1@client1>ldap-lookup"}
        assert stable <= before
        assert stable <= after
