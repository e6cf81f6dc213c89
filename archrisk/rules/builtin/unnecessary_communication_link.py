"""Communication links that carry no data assets at all."""

from __future__ import annotations

from archrisk.context import AnalysisContext
from archrisk.models import CommunicationLink, Risk, RiskCategory, TechnicalAsset
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
    id="unnecessary-communication-link",
    title="Unnecessary Communication Link",
    description=(
        "When a technical communication link does not send or receive any data assets, this is "
        "an indicator for an unnecessary communication link (or for an incomplete model)."
    ),
    impact="If this risk is unmitigated, attackers might be able to target unnecessary communication links.",
    asvs="V1 - Architecture, Design and Threat Modeling Requirements",
    cheat_sheet="https://cheatsheetseries.owasp.org/cheatsheets/Attack_Surface_Analysis_Cheat_Sheet.html",
    action="Attack Surface Reduction",
    mitigation="Try to avoid using technical communication links that do not send or receive anything.",
    check="Are recommendations from the linked cheat sheet and referenced ASVS chapter applied?",
    function=RiskFunction.ARCHITECTURE,
    stride=STRIDE.ELEVATION_OF_PRIVILEGE,
    detection_logic="In-scope technical assets' technical communication links not sending or receiving any data assets.",
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
        for link in asset.communication_links:
            if link.data_assets_sent or link.data_assets_received:
                continue
            if not asset.out_of_scope or not model.technical_assets[link.target_id].out_of_scope:
                risks.append(_create_risk(asset, link))
    return risks


def _create_risk(asset: TechnicalAsset, link: CommunicationLink) -> Risk:
    return Risk(
        category=CATEGORY,
        severity=calculate_severity(RiskExploitationLikelihood.UNLIKELY, RiskExploitationImpact.LOW),
        exploitation_likelihood=RiskExploitationLikelihood.UNLIKELY,
        exploitation_impact=RiskExploitationImpact.LOW,
        title=(
            "<b>Unnecessary Communication Link</b> titled <b>" + link.title + "</b> at technical asset <b>"
            + asset.title + "</b>"
        ),
        synthetic_id=CATEGORY.id + "@" + link.id + "@" + asset.id,
        most_relevant_technical_asset_id=asset.id,
        most_relevant_communication_link_id=link.id,
        data_breach_probability=DataBreachProbability.IMPROBABLE,
        data_breach_technical_asset_ids=[asset.id],
    )


RULE = RiskRule(CATEGORY, tuple(SUPPORTED_TAGS), generate_risks)
