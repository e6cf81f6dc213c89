"""Service registries whose lookup data could be poisoned."""

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
)

CATEGORY = RiskCategory(
    id="service-registry-poisoning",
    title="Service Registry Poisoning",
    description=(
        "When a service registry used for discovery of trusted service endpoints Service Registry Poisoning risks "
        "might arise."
    ),
    impact=(
        "If this risk remains unmitigated, attackers might be able to poison the service registry with malicious "
        "service endpoints or malicious lookup and config data leading to breach of sensitive data."
    ),
    asvs="V10 - Malicious Code Verification Requirements",
    cheat_sheet="https://cheatsheetseries.owasp.org/cheatsheets/Access_Control_Cheat_Sheet.html",
    action="Service Registry Integrity Check",
    mitigation=(
        "Try to strengthen the access control of the service registry and apply cross-checks to detect maliciously "
        "poisoned lookup data."
    ),
    check="Are recommendations from the linked cheat sheet and referenced ASVS chapter applied?",
    function=RiskFunction.ARCHITECTURE,
    stride=STRIDE.SPOOFING,
    detection_logic="In-scope service registries.",
    risk_assessment=(
        "The risk rating depends on the sensitivity of the technical assets accessing the service registry "
        "as well as the data assets processed or stored."
    ),
    false_positives=(
        "Service registries not used for service discovery "
        "can be considered as false positives after individual review."
    ),
    model_failure_possible_reason=False,
    cwe=693,
)

SUPPORTED_TAGS: list[str] = []


def _is_top_rated(model: ParsedModel, element: TechnicalAsset | CommunicationLink) -> bool:
    return (
        element.highest_confidentiality(model) == Confidentiality.STRICTLY_CONFIDENTIAL
        or element.highest_integrity(model) == Criticality.MISSION_CRITICAL
        or element.highest_availability(model) == Criticality.MISSION_CRITICAL
    )


def generate_risks(ctx: AnalysisContext) -> list[Risk]:
    model = ctx.model
    return [
        _create_risk(model, asset, model.incoming_links(asset.id))
        for asset in model.sorted_technical_assets()
        if not asset.out_of_scope and asset.technology is Technology.SERVICE_REGISTRY
    ]


def _create_risk(model: ParsedModel, asset: TechnicalAsset, incoming_flows: list[CommunicationLink]) -> Risk:
    impact = RiskExploitationImpact.LOW
    for flow in incoming_flows:
        caller = model.technical_assets[flow.source_id]
        if _is_top_rated(model, asset) or _is_top_rated(model, caller) or _is_top_rated(model, flow):
            impact = RiskExploitationImpact.MEDIUM
            break
    return Risk(
        category=CATEGORY,
        severity=calculate_severity(RiskExploitationLikelihood.UNLIKELY, impact),
        exploitation_likelihood=RiskExploitationLikelihood.UNLIKELY,
        exploitation_impact=impact,
        title="<b>Service Registry Poisoning</b> risk at <b>" + asset.title + "</b>",
        synthetic_id=CATEGORY.id + "@" + asset.id,
        most_relevant_technical_asset_id=asset.id,
        data_breach_probability=DataBreachProbability.IMPROBABLE,
        data_breach_technical_asset_ids=[asset.id],
    )


RULE = RiskRule(CATEGORY, tuple(SUPPORTED_TAGS), generate_risks)
