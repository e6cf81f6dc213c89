"""Highly available assets reachable across network trust boundaries."""

from __future__ import annotations

from archrisk.context import AnalysisContext
from archrisk.models import CommunicationLink, ParsedModel, Risk, RiskCategory, TechnicalAsset
from archrisk.risks import calculate_severity
from archrisk.rules.registry import RiskRule
from archrisk.types import (
    STRIDE,
    Criticality,
    DataBreachProbability,
    RiskExploitationImpact,
    RiskExploitationLikelihood,
    RiskFunction,
    RiskSeverity,
    Technology,
    Usage,
)

CATEGORY = RiskCategory(
    id="dos-risky-access-across-trust-boundary",
    title="DoS-risky Access Across Trust-Boundary",
    description=(
        "Assets accessed across trust boundaries with critical or mission-critical availability rating "
        "are more prone to Denial-of-Service (DoS) risks."
    ),
    impact="If this risk remains unmitigated, attackers might be able to disturb the availability of important parts of the system.",
    asvs="V1 - Architecture, Design and Threat Modeling Requirements",
    cheat_sheet="https://cheatsheetseries.owasp.org/cheatsheets/Denial_of_Service_Cheat_Sheet.html",
    action="Anti-DoS Measures",
    mitigation=(
        "Apply anti-DoS techniques like throttling and/or per-client load blocking with quotas. "
        "Also for maintenance access routes consider applying a VPN instead of public reachable interfaces. "
        "Generally applying redundancy on the targeted technical asset reduces the risk of DoS."
    ),
    check="Are recommendations from the linked cheat sheet and referenced ASVS chapter applied?",
    function=RiskFunction.OPERATIONS,
    stride=STRIDE.DENIAL_OF_SERVICE,
    detection_logic=(
        f"In-scope technical assets (excluding {Technology.LOAD_BALANCER}) with availability rating of "
        f"{Criticality.CRITICAL} or higher which have incoming data-flows across a network trust-boundary "
        f"(excluding {Usage.DEVOPS} usage)."
    ),
    risk_assessment=(
        f"Matching technical assets with availability rating of {Criticality.CRITICAL} or higher are at "
        f"{RiskSeverity.LOW} risk. When the availability rating is {Criticality.MISSION_CRITICAL} and neither a VPN nor "
        f"IP filter for the incoming data-flow nor redundancy for the asset is applied, the risk-rating is considered "
        f"{RiskSeverity.MEDIUM}."
    ),
    false_positives="When the accessed target operations are not time- or resource-consuming.",
    model_failure_possible_reason=False,
    cwe=400,
)

SUPPORTED_TAGS: list[str] = []


def generate_risks(ctx: AnalysisContext) -> list[Risk]:
    model = ctx.model
    risks: list[Risk] = []
    for asset in model.sorted_technical_assets():
        if asset.out_of_scope or asset.technology is Technology.LOAD_BALANCER:
            continue
        if asset.availability < Criticality.CRITICAL:
            continue
        for incoming in model.incoming_links(asset.id):
            source = model.technical_assets[incoming.source_id]
            if source.technology.is_traffic_forwarding():
                # walk the call chain up one hop to find the real client
                for callers_link in model.incoming_links(source.id):
                    _check_risk(model, asset, callers_link, source.title, risks)
            else:
                _check_risk(model, asset, incoming, "", risks)
    return risks


def _check_risk(
    model: ParsedModel,
    asset: TechnicalAsset,
    incoming: CommunicationLink,
    hop_between: str,
    risks: list[Risk],
) -> None:
    if (incoming.is_across_trust_boundary_network_only(model)
            and not incoming.protocol.is_process_local()
            and incoming.usage is not Usage.DEVOPS):
        high_risk = (
            asset.availability == Criticality.MISSION_CRITICAL
            and not incoming.vpn
            and not incoming.ip_filtered
            and not asset.redundant
        )
        client = model.technical_assets[incoming.source_id]
        risks.append(_create_risk(asset, incoming, hop_between, client, high_risk))


def _create_risk(
    asset: TechnicalAsset,
    data_flow: CommunicationLink,
    hop_between: str,
    client_outside_trust_boundary: TechnicalAsset,
    more_risky: bool,
) -> Risk:
    impact = RiskExploitationImpact.MEDIUM if more_risky else RiskExploitationImpact.LOW
    if hop_between:
        hop_between = " forwarded via <b>" + hop_between + "</b>"
    return Risk(
        category=CATEGORY,
        severity=calculate_severity(RiskExploitationLikelihood.UNLIKELY, impact),
        exploitation_likelihood=RiskExploitationLikelihood.UNLIKELY,
        exploitation_impact=impact,
        title=(
            "<b>Denial-of-Service</b> risky access of <b>" + asset.title + "</b> by <b>"
            + client_outside_trust_boundary.title + "</b> via <b>" + data_flow.title + "</b>" + hop_between
        ),
        synthetic_id=CATEGORY.id + "@" + asset.id + "@" + client_outside_trust_boundary.id + "@" + data_flow.id,
        most_relevant_technical_asset_id=asset.id,
        most_relevant_communication_link_id=data_flow.id,
        data_breach_probability=DataBreachProbability.IMPROBABLE,
        data_breach_technical_asset_ids=[],
    )


RULE = RiskRule(CATEGORY, tuple(SUPPORTED_TAGS), generate_risks)
