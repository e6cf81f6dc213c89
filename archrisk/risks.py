"""Severity calculation, synthetic risk identity and risk-set queries.

``calculate_severity`` and ``create_synthetic_id`` are the two pure
functions every rule relies on.  The remaining helpers sort, filter and
summarize a ``{category_id: [Risk, ...]}`` mapping for presentation.
"""

from __future__ import annotations

from typing import Iterable

from archrisk.models import Risk, RiskCategory
from archrisk.types import (
    STRIDE,
    RiskExploitationImpact,
    RiskExploitationLikelihood,
    RiskFunction,
    RiskSeverity,
    RiskStatus,
)

RisksByCategory = dict[str, list[Risk]]


# ---------------------------------------------------------------------------
# Severity
# ---------------------------------------------------------------------------

def calculate_severity(
    likelihood: RiskExploitationLikelihood,
    impact: RiskExploitationImpact,
) -> RiskSeverity:
    """Map a likelihood/impact pair onto one of the five severities.

    The product of both weights (1..4 each) is bucketed:
    ``<=1`` low, ``<=3`` medium, ``<=8`` elevated, ``<=12`` high, else critical.
    """
    result = likelihood.weight * impact.weight
    if result <= 1:
        return RiskSeverity.LOW
    if result <= 3:
        return RiskSeverity.MEDIUM
    if result <= 8:
        return RiskSeverity.ELEVATED
    if result <= 12:
        return RiskSeverity.HIGH
    return RiskSeverity.CRITICAL


# ---------------------------------------------------------------------------
# Identity
# ---------------------------------------------------------------------------

def create_synthetic_id(
    category_id: str,
    most_relevant_data_asset_id: str = "",
    most_relevant_technical_asset_id: str = "",
    most_relevant_communication_link_id: str = "",
    most_relevant_trust_boundary_id: str = "",
    most_relevant_shared_runtime_id: str = "",
) -> str:
    """Build ``category@asset@link@boundary@runtime@data`` skipping empty parts.

    Segment order is fixed regardless of argument order so that ids stay
    stable across runs and model edits.
    """
    result = category_id
    for part in (
        most_relevant_technical_asset_id,
        most_relevant_communication_link_id,
        most_relevant_trust_boundary_id,
        most_relevant_shared_runtime_id,
        most_relevant_data_asset_id,
    ):
        if part:
            result += "@" + part
    return result


# ---------------------------------------------------------------------------
# Sorting
# ---------------------------------------------------------------------------

def risk_sort_key(risk: Risk) -> tuple:
    return (
        -risk.severity.ordinal,
        risk.risk_status.ordinal,
        -risk.exploitation_impact.ordinal,
        -risk.exploitation_likelihood.ordinal,
        risk.title,
        risk.synthetic_id,
    )


def sort_risks(risks: Iterable[Risk]) -> list[Risk]:
    """Severity desc, tracking status asc, impact desc, likelihood desc, title."""
    return sorted(risks, key=risk_sort_key)


def sorted_category_ids(
    risks_by_category: RisksByCategory,
    categories: dict[str, RiskCategory],
) -> list[str]:
    """Order categories by highest still-open severity, then title.

    Among equally severe categories, those with open risks come first.
    """
    def key(category_id: str) -> tuple:
        still_at_risk = reduce_to_only_still_at_risk(risks_by_category.get(category_id, []))
        highest = highest_severity_still_at_risk(still_at_risk)
        return (-highest.ordinal, 0 if still_at_risk else 1, categories[category_id].title, category_id)

    return sorted(risks_by_category, key=key)


# ---------------------------------------------------------------------------
# Aggregates
# ---------------------------------------------------------------------------

def all_risks(risks_by_category: RisksByCategory) -> list[Risk]:
    return [risk for category_id in sorted(risks_by_category) for risk in risks_by_category[category_id]]


def count_risks(risks_by_category: RisksByCategory) -> int:
    return sum(len(risks) for risks in risks_by_category.values())


def highest_severity(risks: Iterable[Risk]) -> RiskSeverity:
    result = RiskSeverity.LOW
    for risk in risks:
        result = max(result, risk.severity)
    return result


def highest_severity_still_at_risk(risks: Iterable[Risk]) -> RiskSeverity:
    result = RiskSeverity.LOW
    for risk in risks:
        if risk.risk_status.is_still_at_risk():
            result = max(result, risk.severity)
    return result


def highest_exploitation_likelihood(risks: Iterable[Risk]) -> RiskExploitationLikelihood:
    result = RiskExploitationLikelihood.UNLIKELY
    for risk in risks:
        result = max(result, risk.exploitation_likelihood)
    return result


def highest_exploitation_impact(risks: Iterable[Risk]) -> RiskExploitationImpact:
    result = RiskExploitationImpact.LOW
    for risk in risks:
        result = max(result, risk.exploitation_impact)
    return result


def overall_risk_statistics(risks_by_category: RisksByCategory) -> dict[str, dict[str, int]]:
    """Count risks per severity and tracking status; every cell is present."""
    stats = {
        severity.value: {status.value: 0 for status in RiskStatus}
        for severity in reversed(list(RiskSeverity))
    }
    for risks in risks_by_category.values():
        for risk in risks:
            stats[risk.severity.value][risk.risk_status.value] += 1
    return stats


def risk_counts_by_stride(risks_by_category: RisksByCategory) -> dict[str, int]:
    return {stride.value: count_risks(risks_of_stride(risks_by_category, stride)) for stride in STRIDE}


def risk_counts_by_function(risks_by_category: RisksByCategory) -> dict[str, int]:
    return {
        function.value: count_risks(risks_of_function(risks_by_category, function))
        for function in RiskFunction
    }


def category_statistics(
    risks_by_category: RisksByCategory,
    categories: dict[str, RiskCategory],
) -> dict[str, dict[str, object]]:
    """Per-category summary in presentation order."""
    result: dict[str, dict[str, object]] = {}
    for category_id in sorted_category_ids(risks_by_category, categories):
        risks = risks_by_category[category_id]
        result[category_id] = {
            "title": categories[category_id].title,
            "count": len(risks),
            "still_at_risk": len(reduce_to_only_still_at_risk(risks)),
            "highest_severity": highest_severity(risks).value,
            "highest_exploitation_likelihood": highest_exploitation_likelihood(risks).value,
            "highest_exploitation_impact": highest_exploitation_impact(risks).value,
        }
    return result


# ---------------------------------------------------------------------------
# Filters
# ---------------------------------------------------------------------------

def reduce_to_only_still_at_risk(risks: Iterable[Risk]) -> list[Risk]:
    return [r for r in risks if r.risk_status.is_still_at_risk()]


def risks_of_stride(risks_by_category: RisksByCategory, stride: STRIDE) -> RisksByCategory:
    result: RisksByCategory = {}
    for category_id, risks in risks_by_category.items():
        matching = [r for r in risks if r.category.stride is stride]
        if matching:
            result[category_id] = matching
    return result


def risks_of_function(risks_by_category: RisksByCategory, function: RiskFunction) -> RisksByCategory:
    result: RisksByCategory = {}
    for category_id, risks in risks_by_category.items():
        matching = [r for r in risks if r.category.function is function]
        if matching:
            result[category_id] = matching
    return result


def filter_by_model_failures(risks_by_category: RisksByCategory) -> RisksByCategory:
    return {
        category_id: risks
        for category_id, risks in risks_by_category.items()
        if risks and risks[0].category.model_failure_possible_reason
    }


def categories_still_at_risk(risks_by_category: RisksByCategory) -> list[str]:
    return sorted(
        category_id for category_id, risks in risks_by_category.items()
        if reduce_to_only_still_at_risk(risks)
    )
