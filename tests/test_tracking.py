"""Tests for risk tracking reconciliation."""
import datetime
import logging

import pytest

from archrisk.context import AnalysisContext
from archrisk.errors import RiskTrackingError
from archrisk.models import ParsedModel, Risk, RiskCategory, RiskTracking
from archrisk.tracking import (
    apply_wildcard_risk_tracking,
    compile_wildcard,
    reconcile_risk_tracking,
)
from archrisk.types import (
    RiskExploitationImpact,
    RiskExploitationLikelihood,
    RiskSeverity,
    RiskStatus,
)

RULE_X = RiskCategory(id="rule-x", title="Rule X")


def _context(synthetic_ids, exact=None, wildcards=None):
    model = ParsedModel(title="tracking")
    for key, status in (exact or {}).items():
        model.risk_tracking[key] = RiskTracking(synthetic_risk_id=key, status=RiskStatus.parse(status))
    for key, status in (wildcards or {}).items():
        model.wildcard_risk_tracking[key] = RiskTracking(
            synthetic_risk_id=key, status=RiskStatus.parse(status), justification="bulk", ticket="SEC-1",
            checked_by="ops", date=datetime.date(2026, 2, 1),
        )
    ctx = AnalysisContext(model=model)
    ctx.add_risks(RULE_X, [
        Risk(
            category=RULE_X,
            severity=RiskSeverity.MEDIUM,
            exploitation_likelihood=RiskExploitationLikelihood.LIKELY,
            exploitation_impact=RiskExploitationImpact.LOW,
            title=sid,
            synthetic_id=sid,
        )
        for sid in synthetic_ids
    ])
    ctx.index_synthetic_ids()
    return ctx


def _status(ctx, synthetic_id):
    return ctx.risks_by_synthetic_id[synthetic_id].risk_status


class TestCompileWildcard:
    def test_single_segment(self):
        expression = compile_wildcard("rule-x@*")
        assert expression.fullmatch("rule-x@asseta")
        assert not expression.fullmatch("rule-x@asseta@assetb")
        assert not expression.fullmatch("rule-x@")

    def test_multiple_segments(self):
        expression = compile_wildcard("rule-x@*@*")
        assert expression.fullmatch("rule-x@asseta@assetb")
        assert not expression.fullmatch("rule-x@asseta")

    def test_literal_characters_are_escaped(self):
        expression = compile_wildcard("rule-x@a>b.c@*")
        assert expression.fullmatch("rule-x@a>b.c@d")
        assert not expression.fullmatch("rule-x@a>bxc@d")


class TestExactTracking:
    def test_status_applied(self):
        ctx = _context(["rule-x@asseta", "rule-x@assetb"], exact={"rule-x@asseta": "mitigated"})
        reconcile_risk_tracking(ctx)
        assert _status(ctx, "rule-x@asseta") is RiskStatus.MITIGATED
        assert _status(ctx, "rule-x@assetb") is RiskStatus.UNCHECKED

    def test_mixed_case_risk_id(self):
        ctx = _context(["Rule-X@AssetA"], exact={"rule-x@asseta": "accepted"})
        reconcile_risk_tracking(ctx)
        assert ctx.all_risks()[0].risk_status is RiskStatus.ACCEPTED

    def test_orphan_is_fatal_by_default(self):
        ctx = _context(["rule-x@asseta"], exact={"some-rule@nonexistent-id": "accepted"})
        with pytest.raises(RiskTrackingError) as excinfo:
            reconcile_risk_tracking(ctx)
        assert "some-rule@nonexistent-id" in excinfo.value.message
        assert "-ignore-orphaned-risk-tracking" in excinfo.value.message
        assert excinfo.value.code == "ORPHANED_RISK_TRACKING"

    def test_orphan_is_logged_when_ignored(self, caplog):
        ctx = _context(["rule-x@asseta"], exact={"some-rule@nonexistent-id": "accepted"})
        with caplog.at_level(logging.WARNING, logger="archrisk.tracking"):
            reconcile_risk_tracking(ctx, ignore_orphans=True)
        assert "some-rule@nonexistent-id" in caplog.text
        assert _status(ctx, "rule-x@asseta") is RiskStatus.UNCHECKED


class TestWildcardTracking:
    def test_matches_exactly_one_segment(self):
        ctx = _context(["rule-x@asseta", "rule-x@asseta@assetb"], wildcards={"rule-x@*": "accepted"})
        reconcile_risk_tracking(ctx)
        assert _status(ctx, "rule-x@asseta") is RiskStatus.ACCEPTED
        assert _status(ctx, "rule-x@asseta@assetb") is RiskStatus.UNCHECKED

    def test_expanded_record_copies_disposition(self):
        ctx = _context(["rule-x@asseta"], wildcards={"rule-x@*": "in-progress"})
        apply_wildcard_risk_tracking(ctx)
        tracking = ctx.risk_tracking["rule-x@asseta"]
        assert tracking.synthetic_risk_id == "rule-x@asseta"
        assert tracking.status is RiskStatus.IN_PROGRESS
        assert tracking.ticket == "SEC-1"
        assert tracking.date == datetime.date(2026, 2, 1)

    def test_direct_record_wins_over_wildcard(self):
        ctx = _context(
            ["rule-x@asseta", "rule-x@assetb"],
            exact={"rule-x@asseta": "false-positive"},
            wildcards={"rule-x@*": "accepted"},
        )
        reconcile_risk_tracking(ctx)
        assert _status(ctx, "rule-x@asseta") is RiskStatus.FALSE_POSITIVE
        assert _status(ctx, "rule-x@assetb") is RiskStatus.ACCEPTED

    def test_unmatched_wildcard_is_fatal(self):
        ctx = _context(["rule-x@asseta"], wildcards={"rule-y@*": "accepted"})
        with pytest.raises(RiskTrackingError, match="wildcard risk tracking does not match any risk id: rule-y@\\*"):
            reconcile_risk_tracking(ctx)

    def test_unmatched_wildcard_is_logged_when_ignored(self, caplog):
        ctx = _context(["rule-x@asseta"], wildcards={"rule-y@*": "accepted"})
        with caplog.at_level(logging.WARNING, logger="archrisk.tracking"):
            reconcile_risk_tracking(ctx, ignore_orphans=True)
        assert "rule-y@*" in caplog.text

    def test_wildcard_only_covering_directly_tracked_ids_is_orphaned(self):
        ctx = _context(
            ["rule-x@asseta"], exact={"rule-x@asseta": "mitigated"}, wildcards={"rule-x@*": "accepted"}
        )
        with pytest.raises(RiskTrackingError):
            reconcile_risk_tracking(ctx)
