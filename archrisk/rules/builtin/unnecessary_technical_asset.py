"""Technical assets holding no data or lacking any connection."""

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
)

CATEGORY = RiskCategory(
    id="unnecessary-technical-asset",
    title="Unnecessary Technical Asset",
    description=(
        "When a technical asset does not process or store any data assets, this is "
        "an indicator for an unnecessary technical asset (or for an incomplete model). "
        "This is also the case if the asset has no communication links (either outgoing or incoming)."
    ),
    impact="If this risk is unmitigated, attackers might be able to target unnecessary technical assets.",
    asvs="V1 - Architecture, Design and Threat Modeling Requirements",
    cheat_sheet="https://cheatsheetseries.owasp.org/cheatsheets/Attack_Surface_Analysis_Cheat_Sheet.html",
    action="Attack Surface Reduction",
    mitigation="Try to avoid using technical assets that do not process or store anything.",
    check="Are recommendations from the linked cheat sheet and referenced ASVS chapter applied?",
    function=RiskFunction.ARCHITECTURE,
    stride=STRIDE.ELEVATION_OF_PRIVILEGE,
    detection_logic="Technical assets not processing or storing any data assets.",
    risk_assessment=str(RiskSeverity.LOW),
    false_positives="Usually no false positives as this looks like an incomplete model.",
    model_failure_possible_reason=True,
    cwe=1008,
)

SUPPORTED_TAGS: list[str] = []


def generate_risks(ctx: AnalysisContext) -> list[Risk]:
    model = ctx.model
    risks = []
    for asset in model.sorted_technical_assets():
        holds_no_data = not asset.data_assets_processed and not asset.data_assets_stored
        isolated = not asset.communication_links and not model.incoming_links(asset.id)
        if holds_no_data or isolated:
            risks.append(_create_risk(asset))
    return risks


def _create_risk(asset: TechnicalAsset) -> Risk:
    return Risk(
        category=CATEGORY,
        severity=calculate_severity(RiskExploitationLikelihood.UNLIKELY, RiskExploitationImpact.LOW),
        exploitation_likelihood=RiskExploitationLikelihood.UNLIKELY,
        exploitation_impact=RiskExploitationImpact.LOW,
        title="<b>Unnecessary Technical Asset</b> named <b>" + asset.title + "</b>",
        synthetic_id=CATEGORY.id + "@" + asset.id,
        most_relevant_technical_asset_id=asset.id,
        data_breach_probability=DataBreachProbability.IMPROBABLE,
        data_breach_technical_asset_ids=[asset.id],
    )


RULE = RiskRule(CATEGORY, tuple(SUPPORTED_TAGS), generate_risks)
