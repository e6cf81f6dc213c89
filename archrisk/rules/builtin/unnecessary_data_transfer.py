"""Sensitive data flowing through assets that neither process nor store it."""

from __future__ import annotations

from archrisk.context import AnalysisContext
from archrisk.models import CommunicationLink, DataAsset, ParsedModel, Risk, RiskCategory, TechnicalAsset
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
    RiskSeverity,
)

CATEGORY = RiskCategory(
    id="unnecessary-data-transfer",
    title="Unnecessary Data Transfer",
    description=(
        "When a technical asset sends or receives data assets, which it neither processes or stores this is "
        "an indicator for unnecessarily transferred data (or for an incomplete model). When the unnecessarily "
        "transferred data assets are sensitive, this poses an unnecessary risk of an increased attack surface."
    ),
    impact="If this risk is unmitigated, attackers might be able to target unnecessarily transferred data.",
    asvs="V1 - Architecture, Design and Threat Modeling Requirements",
    cheat_sheet="https://cheatsheetseries.owasp.org/cheatsheets/Attack_Surface_Analysis_Cheat_Sheet.html",
    action="Attack Surface Reduction",
    mitigation=(
        "Try to avoid sending or receiving sensitive data assets which are not required (i.e. neither "
        "processed or stored) by the involved technical asset."
    ),
    check="Are recommendations from the linked cheat sheet and referenced ASVS chapter applied?",
    function=RiskFunction.ARCHITECTURE,
    stride=STRIDE.ELEVATION_OF_PRIVILEGE,
    detection_logic=(
        "In-scope technical assets sending or receiving sensitive data assets which are neither processed nor "
        "stored by the technical asset are flagged with this risk. The risk rating (low or medium) depends on the "
        "confidentiality, integrity, and availability rating of the technical asset. Monitoring data is exempted "
        "from this risk."
    ),
    risk_assessment=(
        "The risk assessment is depending on the confidentiality and integrity rating of the transferred data asset "
        f"either {RiskSeverity.LOW} or {RiskSeverity.MEDIUM}."
    ),
    false_positives=(
        "Technical assets missing the model entries of either processing or storing the mentioned data assets "
        "can be considered as false positives (incomplete models) after individual review. These should then be "
        "addressed by completing the model so that all necessary data assets are processed and/or stored by the "
        "technical asset involved."
    ),
    model_failure_possible_reason=True,
    cwe=1008,
)

SUPPORTED_TAGS: list[str] = []


def generate_risks(ctx: AnalysisContext) -> list[Risk]:
    model = ctx.model
    risks: list[Risk] = []
    seen: set[str] = set()
    for asset in model.sorted_technical_assets():
        if asset.out_of_scope:
            continue
        for outgoing in asset.communication_links:
            if model.technical_assets[outgoing.target_id].technology.is_unnecessary_data_tolerated():
                continue
            _check_link(model, risks, seen, asset, outgoing, inverse_direction=False)
        for incoming in sorted(model.incoming_links(asset.id), key=lambda c: c.id):
            if model.technical_assets[incoming.source_id].technology.is_unnecessary_data_tolerated():
                continue
            _check_link(model, risks, seen, asset, incoming, inverse_direction=True)
    return risks


def _check_link(
    model: ParsedModel,
    risks: list[Risk],
    seen: set[str],
    asset: TechnicalAsset,
    data_flow: CommunicationLink,
    inverse_direction: bool,
) -> None:
    partner_id = data_flow.source_id if inverse_direction else data_flow.target_id
    partner = model.technical_assets[partner_id]
    for data_id in data_flow.data_assets_sent + data_flow.data_assets_received:
        if asset.processes_or_stores_data_asset(data_id):
            continue
        data_asset = model.data_assets[data_id]
        if data_asset.confidentiality >= Confidentiality.CONFIDENTIAL or data_asset.integrity >= Criticality.CRITICAL:
            risk = _create_risk(asset, data_asset, partner)
            if risk.synthetic_id not in seen:
                seen.add(risk.synthetic_id)
                risks.append(risk)


def _create_risk(asset: TechnicalAsset, data_asset: DataAsset, partner: TechnicalAsset) -> Risk:
    more_risky = (
        data_asset.confidentiality == Confidentiality.STRICTLY_CONFIDENTIAL
        or data_asset.integrity == Criticality.MISSION_CRITICAL
    )
    impact = RiskExploitationImpact.MEDIUM if more_risky else RiskExploitationImpact.LOW
    return Risk(
        category=CATEGORY,
        severity=calculate_severity(RiskExploitationLikelihood.UNLIKELY, impact),
        exploitation_likelihood=RiskExploitationLikelihood.UNLIKELY,
        exploitation_impact=impact,
        title=(
            "<b>Unnecessary Data Transfer</b> of <b>" + data_asset.title + "</b> data at <b>" + asset.title + "</b> "
            + "from/to <b>" + partner.title + "</b>"
        ),
        synthetic_id=CATEGORY.id + "@" + data_asset.id + "@" + asset.id + "@" + partner.id,
        most_relevant_technical_asset_id=asset.id,
        most_relevant_data_asset_id=data_asset.id,
        data_breach_probability=DataBreachProbability.IMPROBABLE,
        data_breach_technical_asset_ids=[asset.id],
    )


RULE = RiskRule(CATEGORY, tuple(SUPPORTED_TAGS), generate_risks)
