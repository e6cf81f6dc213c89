"""Enduser-facing services authorizing without the propagated enduser identity."""

from __future__ import annotations

from archrisk.context import AnalysisContext
from archrisk.models import CommunicationLink, ParsedModel, Risk, RiskCategory, TechnicalAsset
from archrisk.risks import calculate_severity
from archrisk.rules.registry import RiskRule
from archrisk.types import (
    STRIDE,
    Authentication,
    Authorization,
    Confidentiality,
    Criticality,
    DataBreachProbability,
    RiskExploitationImpact,
    RiskExploitationLikelihood,
    RiskFunction,
    TechnicalAssetType,
    Usage,
)

CATEGORY = RiskCategory(
    id="missing-identity-propagation",
    title="Missing Identity Propagation",
    description=(
        "Technical assets (especially multi-tenant systems), which usually process data for endusers should "
        "authorize every request based on the identity of the enduser when the data flow is authenticated (i.e. non-public). "
        "For DevOps usages at least a technical-user authorization is required."
    ),
    impact=(
        "If this risk is unmitigated, attackers might be able to access or modify foreign data after a successful "
        "compromise of a component within the system due to missing resource-based authorization checks."
    ),
    asvs="V4 - Access Control Verification Requirements",
    cheat_sheet="https://cheatsheetseries.owasp.org/cheatsheets/Access_Control_Cheat_Sheet.html",
    action="Identity Propagation and Resource-based Authorization",
    mitigation=(
        "When processing requests for endusers if possible authorize in the backend against the propagated "
        "identity of the enduser. This can be achieved in passing JWTs or similar tokens and checking them in the backend "
        "services. For DevOps usages apply at least a technical-user authorization."
    ),
    check="Are recommendations from the linked cheat sheet and referenced ASVS chapter applied?",
    function=RiskFunction.ARCHITECTURE,
    stride=STRIDE.ELEVATION_OF_PRIVILEGE,
    detection_logic=(
        "In-scope service-like technical assets which usually process data based on enduser requests, if authenticated "
        "(i.e. non-public), should authorize incoming requests based on the propagated enduser identity when their "
        "rating is sensitive. This is especially the case for all multi-tenant assets (there even less-sensitive rated "
        "ones). DevOps usages are exempted from this risk."
    ),
    risk_assessment=(
        "The risk rating (medium or high) "
        "depends on the confidentiality, integrity, and availability rating of the technical asset."
    ),
    false_positives=(
        "Technical assets which do not process requests regarding functionality or data linked to end-users (customers) "
        "can be considered as false positives after individual review."
    ),
    model_failure_possible_reason=False,
    cwe=284,
)

SUPPORTED_TAGS: list[str] = []


def _is_sensitive(asset: TechnicalAsset) -> bool:
    if (asset.confidentiality >= Confidentiality.CONFIDENTIAL
            or asset.integrity >= Criticality.CRITICAL
            or asset.availability >= Criticality.CRITICAL):
        return True
    return asset.multi_tenant and (
        asset.confidentiality >= Confidentiality.RESTRICTED
        or asset.integrity >= Criticality.IMPORTANT
        or asset.availability >= Criticality.IMPORTANT
    )


def generate_risks(ctx: AnalysisContext) -> list[Risk]:
    model = ctx.model
    risks = []
    for asset in model.sorted_technical_assets():
        if asset.out_of_scope:
            continue
        if not asset.technology.is_usually_processing_enduser_requests() or not _is_sensitive(asset):
            continue
        for link in model.incoming_links(asset.id):
            caller = model.technical_assets[link.source_id]
            if (not caller.technology.is_usually_able_to_propagate_identity_to_outgoing_targets()
                    or caller.type is TechnicalAssetType.DATASTORE):
                continue
            if (link.authentication is Authentication.NONE
                    or link.authorization is Authorization.ENDUSER_IDENTITY_PROPAGATION):
                continue
            if link.usage is Usage.DEVOPS and link.authorization is not Authorization.NONE:
                continue
            high_risk = (
                asset.confidentiality == Confidentiality.STRICTLY_CONFIDENTIAL
                or asset.integrity == Criticality.MISSION_CRITICAL
                or asset.availability == Criticality.MISSION_CRITICAL
            )
            risks.append(_create_risk(model, asset, link, high_risk))
    return risks


def _create_risk(
    model: ParsedModel, asset: TechnicalAsset, incoming_access: CommunicationLink, more_risky: bool
) -> Risk:
    impact = RiskExploitationImpact.MEDIUM if more_risky else RiskExploitationImpact.LOW
    caller = model.technical_assets[incoming_access.source_id]
    return Risk(
        category=CATEGORY,
        severity=calculate_severity(RiskExploitationLikelihood.UNLIKELY, impact),
        exploitation_likelihood=RiskExploitationLikelihood.UNLIKELY,
        exploitation_impact=impact,
        title=(
            "<b>Missing Enduser Identity Propagation</b> over communication link <b>" + incoming_access.title + "</b> "
            + "from <b>" + caller.title + "</b> to <b>" + asset.title + "</b>"
        ),
        synthetic_id=CATEGORY.id + "@" + incoming_access.id + "@" + caller.id + "@" + asset.id,
        most_relevant_technical_asset_id=asset.id,
        most_relevant_communication_link_id=incoming_access.id,
        data_breach_probability=DataBreachProbability.IMPROBABLE,
        data_breach_technical_asset_ids=[asset.id],
    )


RULE = RiskRule(CATEGORY, tuple(SUPPORTED_TAGS), generate_risks)
