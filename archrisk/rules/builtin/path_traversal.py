"""Filesystems reachable by in-scope callers."""

from __future__ import annotations

from archrisk.context import AnalysisContext
from archrisk.models import CommunicationLink, ParsedModel, Risk, RiskCategory, TechnicalAsset
from archrisk.risks import calculate_severity
from archrisk.rules.registry import RiskRule
from archrisk.types import (
    STRIDE,
    Confidentiality,
    Criticality,
    DataBreachProbability,
    RiskExploitationImpact,
    RiskExploitationLikelihood,
    RiskFunction,
    Technology,
    Usage,
)

CATEGORY = RiskCategory(
    id="path-traversal",
    title="Path-Traversal",
    description=(
        "When a filesystem is accessed Path-Traversal or Local-File-Inclusion (LFI) risks might arise. "
        "The risk rating depends on the sensitivity of the technical asset itself and of the data assets processed or stored."
    ),
    impact=(
        "If this risk is unmitigated, attackers might be able to read sensitive files (configuration data, "
        "key/credential files, deployment files, business data files, etc.) from the filesystem of affected components."
    ),
    asvs="V12 - File and Resources Verification Requirements",
    cheat_sheet="https://cheatsheetseries.owasp.org/cheatsheets/Input_Validation_Cheat_Sheet.html",
    action="Path-Traversal Prevention",
    mitigation=(
        "Before accessing the file cross-check that it resides in the expected folder and is of the expected "
        "type and filename/suffix. Try to use a mapping if possible instead of directly accessing by a filename which is "
        "(partly or fully) provided by the caller. "
        "When a third-party product is used instead of custom developed software, check if the product applies the "
        "proper mitigation and ensure a reasonable patch-level."
    ),
    check="Are recommendations from the linked cheat sheet and referenced ASVS chapter applied?",
    function=RiskFunction.DEVELOPMENT,
    stride=STRIDE.INFORMATION_DISCLOSURE,
    detection_logic="Filesystems accessed by in-scope callers.",
    risk_assessment="The risk rating depends on the sensitivity of the data stored inside the technical asset.",
    false_positives=(
        "File accesses by filenames not consisting of parts controllable by the caller can be considered "
        "as false positives after individual review."
    ),
    model_failure_possible_reason=False,
    cwe=22,
)

SUPPORTED_TAGS: list[str] = []


def generate_risks(ctx: AnalysisContext) -> list[Risk]:
    model = ctx.model
    risks = []
    for asset in model.sorted_technical_assets():
        if asset.technology not in (Technology.FILE_SERVER, Technology.LOCAL_FILE_SYSTEM):
            continue
        for link in model.incoming_links(asset.id):
            if model.technical_assets[link.source_id].out_of_scope:
                continue
            likelihood = RiskExploitationLikelihood.VERY_LIKELY
            if link.usage is Usage.DEVOPS:
                likelihood = RiskExploitationLikelihood.LIKELY
            risks.append(_create_risk(model, asset, link, likelihood))
    return risks


def _create_risk(
    model: ParsedModel,
    asset: TechnicalAsset,
    incoming_flow: CommunicationLink,
    likelihood: RiskExploitationLikelihood,
) -> Risk:
    caller = model.technical_assets[incoming_flow.source_id]
    impact = RiskExploitationImpact.MEDIUM
    if (asset.highest_confidentiality(model) == Confidentiality.STRICTLY_CONFIDENTIAL
            or asset.highest_integrity(model) == Criticality.MISSION_CRITICAL):
        impact = RiskExploitationImpact.HIGH
    return Risk(
        category=CATEGORY,
        severity=calculate_severity(likelihood, impact),
        exploitation_likelihood=likelihood,
        exploitation_impact=impact,
        title=(
            "<b>Path-Traversal</b> risk at <b>" + caller.title + "</b> against filesystem <b>" + asset.title + "</b>"
            + " via <b>" + incoming_flow.title + "</b>"
        ),
        synthetic_id=CATEGORY.id + "@" + caller.id + "@" + asset.id + "@" + incoming_flow.id,
        most_relevant_technical_asset_id=caller.id,
        most_relevant_communication_link_id=incoming_flow.id,
        data_breach_probability=DataBreachProbability.PROBABLE,
        data_breach_technical_asset_ids=[asset.id],
    )


RULE = RiskRule(CATEGORY, tuple(SUPPORTED_TAGS), generate_risks)
