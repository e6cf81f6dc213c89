"""Non-container assets placed inside namespace-isolation boundaries."""

from __future__ import annotations

from archrisk.context import AnalysisContext
from archrisk.models import Risk, RiskCategory, TechnicalAsset
from archrisk.risks import calculate_severity
from archrisk.rules.registry import RiskRule
from archrisk.types import (
    STRIDE,
    DataBreachProbability,
    RiskExploitationImpact,
    RiskExploitationLikelihood,
    RiskFunction,
    RiskSeverity,
    TechnicalAssetMachine,
    TrustBoundaryType,
)

CATEGORY = RiskCategory(
    id="wrong-trust-boundary-content",
    title="Wrong Trust Boundary Content",
    description=(
        f"When a trust boundary of type {TrustBoundaryType.NETWORK_POLICY_NAMESPACE_ISOLATION} contains "
        "non-container assets it is likely to be a model failure."
    ),
    impact="If this potential model error is not fixed, some risks might not be visible.",
    asvs="V1 - Architecture, Design and Threat Modeling Requirements",
    cheat_sheet="https://cheatsheetseries.owasp.org/cheatsheets/Threat_Modeling_Cheat_Sheet.html",
    action="Model Consistency",
    mitigation="Try to model the correct types of trust boundaries and data assets.",
    check="Are recommendations from the linked cheat sheet and referenced ASVS chapter applied?",
    function=RiskFunction.ARCHITECTURE,
    stride=STRIDE.ELEVATION_OF_PRIVILEGE,
    detection_logic="Trust boundaries which should only contain containers, but have different assets inside.",
    risk_assessment=str(RiskSeverity.LOW),
    false_positives="Usually no false positives as this looks like an incomplete model.",
    model_failure_possible_reason=True,
    cwe=1008,
)

SUPPORTED_TAGS: list[str] = []


def generate_risks(ctx: AnalysisContext) -> list[Risk]:
    model = ctx.model
    risks = []
    for boundary_id in model.sorted_trust_boundary_ids():
        boundary = model.trust_boundaries[boundary_id]
        if boundary.type is not TrustBoundaryType.NETWORK_POLICY_NAMESPACE_ISOLATION:
            continue
        for asset_id in boundary.technical_assets_inside:
            asset = model.technical_assets[asset_id]
            if asset.machine not in (TechnicalAssetMachine.CONTAINER, TechnicalAssetMachine.SERVERLESS):
                risks.append(_create_risk(asset))
    return risks


def _create_risk(asset: TechnicalAsset) -> Risk:
    return Risk(
        category=CATEGORY,
        severity=calculate_severity(RiskExploitationLikelihood.UNLIKELY, RiskExploitationImpact.LOW),
        exploitation_likelihood=RiskExploitationLikelihood.UNLIKELY,
        exploitation_impact=RiskExploitationImpact.LOW,
        title=(
            "<b>Wrong Trust Boundary Content</b> (non-container asset inside container trust boundary) at <b>"
            + asset.title + "</b>"
        ),
        synthetic_id=CATEGORY.id + "@" + asset.id,
        most_relevant_technical_asset_id=asset.id,
        data_breach_probability=DataBreachProbability.IMPROBABLE,
        data_breach_technical_asset_ids=[asset.id],
    )


RULE = RiskRule(CATEGORY, tuple(SUPPORTED_TAGS), generate_risks)
