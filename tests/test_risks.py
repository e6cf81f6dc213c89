"""Tests for synthetic risk identity, ordering and statistics."""
from archrisk.models import Risk, RiskCategory
from archrisk.risks import (
    categories_still_at_risk,
    category_statistics,
    create_synthetic_id,
    filter_by_model_failures,
    overall_risk_statistics,
    risk_counts_by_function,
    risk_counts_by_stride,
    sort_risks,
    sorted_category_ids,
)
from archrisk.types import (
    STRIDE,
    RiskFunction,
    RiskExploitationImpact,
    RiskExploitationLikelihood,
    RiskSeverity,
    RiskStatus,
)

ALPHA = RiskCategory(id="alpha-rule", title="Alpha Rule")
BETA = RiskCategory(id="beta-rule", title="Beta Rule", model_failure_possible_reason=True)
GAMMA = RiskCategory(
    id="gamma-rule", title="Gamma Rule", stride=STRIDE.TAMPERING, function=RiskFunction.OPERATIONS,
)


def _risk(category, synthetic_id, severity="medium", likelihood="likely", impact="medium",
          status="unchecked", title=None):
    return Risk(
        category=category,
        severity=RiskSeverity.parse(severity),
        exploitation_likelihood=RiskExploitationLikelihood.parse(likelihood),
        exploitation_impact=RiskExploitationImpact.parse(impact),
        title=title or synthetic_id,
        synthetic_id=synthetic_id,
        risk_status=RiskStatus.parse(status),
    )


class TestCreateSyntheticId:
    def test_category_only(self):
        assert create_synthetic_id("some-rule") == "some-rule"

    def test_fixed_segment_order(self):
        synthetic_id = create_synthetic_id(
            "some-rule",
            most_relevant_data_asset_id="data",
            most_relevant_shared_runtime_id="runtime",
            most_relevant_trust_boundary_id="zone",
            most_relevant_communication_link_id="asset>link",
            most_relevant_technical_asset_id="asset",
        )
        assert synthetic_id == "some-rule@asset@asset>link@zone@runtime@data"

    def test_empty_segments_are_skipped(self):
        assert create_synthetic_id(
            "some-rule", most_relevant_technical_asset_id="asset", most_relevant_data_asset_id="data"
        ) == "some-rule@asset@data"


class TestSortRisks:
    def test_severity_first(self):
        low = _risk(ALPHA, "alpha-rule@a", severity="low")
        high = _risk(ALPHA, "alpha-rule@b", severity="high")
        assert sort_risks([low, high]) == [high, low]

    def test_status_then_impact_then_likelihood_then_title(self):
        mitigated = _risk(ALPHA, "alpha-rule@a", status="mitigated")
        open_low_impact = _risk(ALPHA, "alpha-rule@b", impact="low")
        open_high_impact = _risk(ALPHA, "alpha-rule@c", impact="high")
        open_likely_z = _risk(ALPHA, "alpha-rule@d", impact="high", likelihood="frequent", title="z")
        ordered = sort_risks([mitigated, open_low_impact, open_high_impact, open_likely_z])
        assert ordered == [open_likely_z, open_high_impact, open_low_impact, mitigated]

    def test_title_breaks_ties(self):
        b = _risk(ALPHA, "alpha-rule@x", title="B")
        a = _risk(ALPHA, "alpha-rule@y", title="A")
        assert sort_risks([b, a]) == [a, b]


class TestSortedCategoryIds:
    def test_highest_open_severity_first(self):
        risks_by_category = {
            "alpha-rule": [_risk(ALPHA, "alpha-rule@a", severity="low")],
            "beta-rule": [_risk(BETA, "beta-rule@a", severity="high")],
        }
        categories = {"alpha-rule": ALPHA, "beta-rule": BETA}
        assert sorted_category_ids(risks_by_category, categories) == ["beta-rule", "alpha-rule"]

    def test_closed_risks_do_not_count(self):
        risks_by_category = {
            "alpha-rule": [_risk(ALPHA, "alpha-rule@a", severity="low")],
            "beta-rule": [_risk(BETA, "beta-rule@a", severity="critical", status="false-positive")],
        }
        categories = {"alpha-rule": ALPHA, "beta-rule": BETA}
        assert sorted_category_ids(risks_by_category, categories) == ["alpha-rule", "beta-rule"]


class TestStatistics:
    def test_every_cell_present(self):
        stats = overall_risk_statistics({})
        assert set(stats) == {s.value for s in RiskSeverity}
        assert all(set(row) == {s.value for s in RiskStatus} for row in stats.values())

    def test_counts(self):
        risks_by_category = {
            "alpha-rule": [
                _risk(ALPHA, "alpha-rule@a", severity="high"),
                _risk(ALPHA, "alpha-rule@b", severity="high", status="mitigated"),
            ],
            "beta-rule": [_risk(BETA, "beta-rule@a", severity="low")],
        }
        stats = overall_risk_statistics(risks_by_category)
        assert stats["high"]["unchecked"] == 1
        assert stats["high"]["mitigated"] == 1
        assert stats["low"]["unchecked"] == 1
        assert categories_still_at_risk(risks_by_category) == ["alpha-rule", "beta-rule"]

    def test_model_failure_filter(self):
        risks_by_category = {
            "alpha-rule": [_risk(ALPHA, "alpha-rule@a")],
            "beta-rule": [_risk(BETA, "beta-rule@a")],
        }
        assert list(filter_by_model_failures(risks_by_category)) == ["beta-rule"]


class TestGroupedStatistics:
    def _risks_by_category(self):
        return {
            "alpha-rule": [
                _risk(ALPHA, "alpha-rule@a", severity="elevated", likelihood="likely", impact="high"),
                _risk(ALPHA, "alpha-rule@b", severity="medium", likelihood="frequent", impact="low",
                      status="mitigated"),
            ],
            "gamma-rule": [_risk(GAMMA, "gamma-rule@a", severity="low", likelihood="unlikely", impact="low")],
        }

    def test_counts_by_stride(self):
        counts = risk_counts_by_stride(self._risks_by_category())
        assert set(counts) == {s.value for s in STRIDE}
        assert counts["spoofing"] == 2
        assert counts["tampering"] == 1
        assert counts["repudiation"] == 0

    def test_counts_by_function(self):
        counts = risk_counts_by_function(self._risks_by_category())
        assert set(counts) == {f.value for f in RiskFunction}
        assert counts["architecture"] == 2
        assert counts["operations"] == 1
        assert counts["business-side"] == 0

    def test_category_summary(self):
        categories = {"alpha-rule": ALPHA, "gamma-rule": GAMMA}
        summary = category_statistics(self._risks_by_category(), categories)
        assert list(summary) == ["alpha-rule", "gamma-rule"]
        assert summary["alpha-rule"] == {
            "title": "Alpha Rule",
            "count": 2,
            "still_at_risk": 1,
            "highest_severity": "elevated",
            "highest_exploitation_likelihood": "frequent",
            "highest_exploitation_impact": "high",
        }
        assert summary["gamma-rule"]["highest_severity"] == "low"
