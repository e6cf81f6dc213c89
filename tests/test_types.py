"""Tests for the closed value sets and the severity calculator."""
import itertools

import pytest

from archrisk.risks import calculate_severity
from archrisk.types import (
    ALL_ENUMS,
    Confidentiality,
    Criticality,
    Protocol,
    RiskExploitationImpact,
    RiskExploitationLikelihood,
    RiskSeverity,
    RiskStatus,
    Technology,
    TrustBoundaryType,
)


class TestOrderedEnum:
    def test_parse_canonical_string(self):
        assert Confidentiality.parse("strictly-confidential") is Confidentiality.STRICTLY_CONFIDENTIAL
        assert Protocol.parse(" ldaps ") is Protocol.LDAPS

    def test_parse_rejects_unknown_value(self):
        with pytest.raises(ValueError):
            Criticality.parse("super-critical")

    def test_parse_rejects_empty(self):
        with pytest.raises(ValueError):
            Technology.parse("")

    def test_ordering_follows_declaration(self):
        assert Confidentiality.PUBLIC < Confidentiality.INTERNAL < Confidentiality.RESTRICTED
        assert Confidentiality.CONFIDENTIAL < Confidentiality.STRICTLY_CONFIDENTIAL
        assert Criticality.ARCHIVE < Criticality.OPERATIONAL < Criticality.IMPORTANT
        assert Criticality.CRITICAL < Criticality.MISSION_CRITICAL
        assert max(Criticality.IMPORTANT, Criticality.ARCHIVE) is Criticality.IMPORTANT

    def test_cross_enum_comparison_is_refused(self):
        with pytest.raises(TypeError):
            Confidentiality.PUBLIC < Criticality.ARCHIVE

    def test_str_is_canonical_value(self):
        assert str(RiskStatus.FALSE_POSITIVE) == "false-positive"
        assert f"{TrustBoundaryType.NETWORK_CLOUD_PROVIDER}" == "network-cloud-provider"

    def test_every_enum_is_listed(self):
        assert ALL_ENUMS["protocol"] is Protocol
        for enum_cls in ALL_ENUMS.values():
            values = enum_cls.values()
            assert len(values) == len(set(values))


class TestStillAtRisk:
    @pytest.mark.parametrize("status", ["unchecked", "in-discussion", "accepted", "in-progress"])
    def test_open_statuses(self, status):
        assert RiskStatus.parse(status).is_still_at_risk()

    @pytest.mark.parametrize("status", ["mitigated", "false-positive"])
    def test_closed_statuses(self, status):
        assert not RiskStatus.parse(status).is_still_at_risk()


class TestCalculateSeverity:
    @pytest.mark.parametrize("likelihood,impact,expected", [
        ("unlikely", "low", "low"),
        ("unlikely", "medium", "medium"),
        ("unlikely", "high", "medium"),
        ("likely", "medium", "elevated"),
        ("very-likely", "medium", "elevated"),
        ("likely", "very-high", "elevated"),
        ("very-likely", "high", "high"),
        ("frequent", "high", "high"),
        ("frequent", "very-high", "critical"),
    ])
    def test_weight_product_buckets(self, likelihood, impact, expected):
        severity = calculate_severity(
            RiskExploitationLikelihood.parse(likelihood), RiskExploitationImpact.parse(impact)
        )
        assert severity is RiskSeverity.parse(expected)

    def test_total(self):
        for likelihood, impact in itertools.product(RiskExploitationLikelihood, RiskExploitationImpact):
            assert isinstance(calculate_severity(likelihood, impact), RiskSeverity)

    def test_monotonic_in_both_arguments(self):
        likelihoods = list(RiskExploitationLikelihood)
        impacts = list(RiskExploitationImpact)
        for l1, l2 in itertools.product(likelihoods, repeat=2):
            if l1 > l2:
                continue
            for i1, i2 in itertools.product(impacts, repeat=2):
                if i1 > i2:
                    continue
                assert calculate_severity(l1, i1) <= calculate_severity(l2, i2)
