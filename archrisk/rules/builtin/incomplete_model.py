"""Unknown technologies or protocols hint at an incomplete model."""

from __future__ import annotations

from archrisk.context import AnalysisContext
from archrisk.models import CommunicationLink, Risk, RiskCategory, TechnicalAsset
from archrisk.risks import calculate_severity
from archrisk.rules.registry import RiskRule
from archrisk.types import (
    STRIDE,
    DataBreachProbability,
    Protocol,
    RiskExploitationImpact,
    RiskExploitationLikelihood,
    RiskFunction,
    RiskSeverity,
    Technology,
)

CATEGORY = RiskCategory(
    id="incomplete-model",
    title="Incomplete Model",
    description=(
        "When the threat model contains unknown technologies or transfers data over unknown protocols, this is "
        "an indicator for an incomplete model."
    ),
    impact="If this risk is unmitigated, other risks might not be noticed as the model is incomplete.",
    asvs="V1 - Architecture, Design and Threat Modeling Requirements",
    cheat_sheet="https://cheatsheetseries.owasp.org/cheatsheets/Threat_Modeling_Cheat_Sheet.html",
    action="Threat Modeling Completeness",
    mitigation="Try to find out what technology or protocol is used instead of specifying that it is unknown.",
    check="Are recommendations from the linked cheat sheet and referenced ASVS chapter applied?",
    function=RiskFunction.ARCHITECTURE,
    stride=STRIDE.INFORMATION_DISCLOSURE,
    detection_logic=(
        "All technical assets and communication links with technology type or protocol type specified as unknown."
    ),
    risk_assessment=RiskSeverity.LOW.value,
    false_positives="Usually no false positives as this looks like an incomplete model.",
    model_failure_possible_reason=True,
    cwe=1008,
)

SUPPORTED_TAGS: list[str] = []


def generate_risks(ctx: AnalysisContext) -> list[Risk]:
    risks = []
    for asset in ctx.model.sorted_technical_assets():
        if asset.out_of_scope:
            continue
        if asset.technology is Technology.UNKNOWN_TECHNOLOGY:
            risks.append(_create_risk_technical_asset(asset))
        for link in asset.communication_links:
            if link.protocol is Protocol.UNKNOWN_PROTOCOL:
                risks.append(_create_risk_communication_link(asset, link))
    return risks


def _create_risk_technical_asset(asset: TechnicalAsset) -> Risk:
    return Risk(
        category=CATEGORY,
        severity=calculate_severity(RiskExploitationLikelihood.UNLIKELY, RiskExploitationImpact.LOW),
        exploitation_likelihood=RiskExploitationLikelihood.UNLIKELY,
        exploitation_impact=RiskExploitationImpact.LOW,
        title="<b>Unknown Technology</b> specified at technical asset <b>" + asset.title + "</b>",
        synthetic_id=CATEGORY.id + "@" + asset.id,
        most_relevant_technical_asset_id=asset.id,
        data_breach_probability=DataBreachProbability.IMPROBABLE,
        data_breach_technical_asset_ids=[asset.id],
    )


def _create_risk_communication_link(asset: TechnicalAsset, link: CommunicationLink) -> Risk:
    return Risk(
        category=CATEGORY,
        severity=calculate_severity(RiskExploitationLikelihood.UNLIKELY, RiskExploitationImpact.LOW),
        exploitation_likelihood=RiskExploitationLikelihood.UNLIKELY,
        exploitation_impact=RiskExploitationImpact.LOW,
        title=(
            "<b>Unknown Protocol</b> specified for communication link <b>" + link.title
            + "</b> at technical asset <b>" + asset.title + "</b>"
        ),
        synthetic_id=CATEGORY.id + "@" + link.id + "@" + asset.id,
        most_relevant_technical_asset_id=asset.id,
        most_relevant_communication_link_id=link.id,
        data_breach_probability=DataBreachProbability.IMPROBABLE,
        data_breach_technical_asset_ids=[asset.id],
    )


RULE = RiskRule(CATEGORY, tuple(SUPPORTED_TAGS), generate_risks)
