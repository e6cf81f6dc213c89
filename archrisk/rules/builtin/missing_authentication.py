"""Unauthenticated access to assets holding sensitive data.

``create_risk`` is shared with the two-factor variant, which reports the
same kind of finding for human-driven access paths.
"""

from __future__ import annotations

from archrisk.context import AnalysisContext
from archrisk.models import CommunicationLink, ParsedModel, Risk, RiskCategory, TechnicalAsset
from archrisk.risks import calculate_severity
from archrisk.rules.registry import RiskRule
from archrisk.types import (
    STRIDE,
    Authentication,
    Confidentiality,
    Criticality,
    DataBreachProbability,
    RiskExploitationImpact,
    RiskExploitationLikelihood,
    RiskFunction,
    TechnicalAssetType,
    Technology,
)

CATEGORY = RiskCategory(
    id="missing-authentication",
    title="Missing Authentication",
    description=(
        "Technical assets (especially multi-tenant systems) should authenticate incoming requests when the asset "
        "processes or stores sensitive data. "
    ),
    impact="If this risk is unmitigated, attackers might be able to access or modify sensitive data in an unauthenticated way.",
    asvs="V2 - Authentication Verification Requirements",
    cheat_sheet="https://cheatsheetseries.owasp.org/cheatsheets/Authentication_Cheat_Sheet.html",
    action="Authentication of Incoming Requests",
    mitigation=(
        "Apply an authentication method to the technical asset. To protect highly sensitive data consider "
        "the use of two-factor authentication for human users."
    ),
    check="Are recommendations from the linked cheat sheet and referenced ASVS chapter applied?",
    function=RiskFunction.ARCHITECTURE,
    stride=STRIDE.ELEVATION_OF_PRIVILEGE,
    detection_logic=(
        f"In-scope technical assets (except {Technology.LOAD_BALANCER}, {Technology.REVERSE_PROXY}, "
        f"{Technology.SERVICE_REGISTRY}, {Technology.WAF}, {Technology.IDS}, and {Technology.IPS} and in-process calls) "
        "should authenticate incoming requests when the asset processes or stores sensitive data. "
        "This is especially the case for all multi-tenant assets (there even non-sensitive ones)."
    ),
    risk_assessment=(
        "The risk rating (medium or high) depends on the sensitivity of the data sent across the communication link. "
        "Monitoring callers are exempted from this risk."
    ),
    false_positives=(
        "Technical assets which do not process requests regarding functionality or data linked to end-users (customers) "
        "can be considered as false positives after individual review."
    ),
    model_failure_possible_reason=False,
    cwe=306,
)

SUPPORTED_TAGS: list[str] = []

_EXEMPT_TECHNOLOGIES = (
    Technology.LOAD_BALANCER,
    Technology.REVERSE_PROXY,
    Technology.SERVICE_REGISTRY,
    Technology.WAF,
    Technology.IDS,
    Technology.IPS,
)


def generate_risks(ctx: AnalysisContext) -> list[Risk]:
    model = ctx.model
    risks = []
    for asset in model.sorted_technical_assets():
        if asset.out_of_scope or asset.technology in _EXEMPT_TECHNOLOGIES:
            continue
        if not (asset.highest_confidentiality(model) >= Confidentiality.CONFIDENTIAL
                or asset.highest_integrity(model) >= Criticality.CRITICAL
                or asset.highest_availability(model) >= Criticality.CRITICAL
                or asset.multi_tenant):
            continue
        for link in model.incoming_links(asset.id):
            caller = model.technical_assets[link.source_id]
            if caller.technology.is_unprotected_comms_tolerated() or caller.type is TechnicalAssetType.DATASTORE:
                continue
            high_risk = (
                link.highest_confidentiality(model) == Confidentiality.STRICTLY_CONFIDENTIAL
                or link.highest_integrity(model) == Criticality.MISSION_CRITICAL
            )
            low_risk = (
                link.highest_confidentiality(model) <= Confidentiality.INTERNAL
                and link.highest_integrity(model) == Criticality.OPERATIONAL
            )
            impact = RiskExploitationImpact.MEDIUM
            if high_risk:
                impact = RiskExploitationImpact.HIGH
            elif low_risk:
                impact = RiskExploitationImpact.LOW
            if link.authentication is Authentication.NONE and not link.protocol.is_process_local():
                risks.append(create_risk(
                    model, asset, link, link, "", impact, RiskExploitationLikelihood.LIKELY, False, CATEGORY,
                ))
    return risks


def create_risk(
    model: ParsedModel,
    asset: TechnicalAsset,
    incoming_access: CommunicationLink,
    incoming_access_origin: CommunicationLink,
    hop_between: str,
    impact: RiskExploitationImpact,
    likelihood: RiskExploitationLikelihood,
    two_factor: bool,
    category: RiskCategory,
) -> Risk:
    factor_string = "Two-Factor " if two_factor else ""
    if hop_between:
        hop_between = "forwarded via <b>" + hop_between + "</b> "
    origin = model.technical_assets[incoming_access_origin.source_id]
    return Risk(
        category=category,
        severity=calculate_severity(likelihood, impact),
        exploitation_likelihood=likelihood,
        exploitation_impact=impact,
        title=(
            "<b>Missing " + factor_string + "Authentication</b> covering communication link <b>"
            + incoming_access.title + "</b> from <b>" + origin.title + "</b> " + hop_between
            + "to <b>" + asset.title + "</b>"
        ),
        synthetic_id=category.id + "@" + incoming_access.id + "@" + incoming_access.source_id + "@" + asset.id,
        most_relevant_technical_asset_id=asset.id,
        most_relevant_communication_link_id=incoming_access.id,
        data_breach_probability=DataBreachProbability.POSSIBLE,
        data_breach_technical_asset_ids=[asset.id],
    )


RULE = RiskRule(CATEGORY, tuple(SUPPORTED_TAGS), generate_risks)
