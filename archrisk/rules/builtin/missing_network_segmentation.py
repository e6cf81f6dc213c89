"""Sensitive assets sharing a network segment with less protected ones."""

from __future__ import annotations

from archrisk.context import AnalysisContext
from archrisk.models import Risk, RiskCategory, TechnicalAsset
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
    TechnicalAssetType,
    Technology,
)

RAA_LIMIT = 50

CATEGORY = RiskCategory(
    id="missing-network-segmentation",
    title="Missing Network Segmentation",
    description=(
        "Highly sensitive assets and/or datastores residing in the same network segment than other "
        "lower sensitive assets (like webservers or content management systems etc.) should be better protected "
        "by a network segmentation trust-boundary."
    ),
    impact=(
        "If this risk is unmitigated, attackers successfully attacking other components of the system might have an "
        "easy path towards more valuable targets, as they are not separated by network segmentation."
    ),
    asvs="V1 - Architecture, Design and Threat Modeling Requirements",
    cheat_sheet="https://cheatsheetseries.owasp.org/cheatsheets/Attack_Surface_Analysis_Cheat_Sheet.html",
    action="Network Segmentation",
    mitigation="Apply a network segmentation trust-boundary around the highly sensitive assets and/or datastores.",
    check="Are recommendations from the linked cheat sheet and referenced ASVS chapter applied?",
    function=RiskFunction.OPERATIONS,
    stride=STRIDE.ELEVATION_OF_PRIVILEGE,
    detection_logic=(
        "In-scope technical assets with high sensitivity and RAA values as well as datastores "
        "when surrounded by assets (without a network trust-boundary in-between) which are of type "
        f"{Technology.CLIENT_SYSTEM}, {Technology.WEB_SERVER}, {Technology.WEB_APPLICATION}, {Technology.CMS}, "
        f"{Technology.WEB_SERVICE_REST}, {Technology.WEB_SERVICE_SOAP}, {Technology.BUILD_PIPELINE}, "
        f"{Technology.SOURCECODE_REPOSITORY}, {Technology.MONITORING}, or similar and there is no direct connection "
        "between these (hence no requirement to be so close to each other)."
    ),
    risk_assessment=(
        f"Default is {RiskSeverity.LOW} risk. The risk is increased to {RiskSeverity.MEDIUM} when the asset missing the "
        f"trust-boundary protection is rated as {Confidentiality.STRICTLY_CONFIDENTIAL} or {Criticality.MISSION_CRITICAL}."
    ),
    false_positives=(
        "When all assets within the network segmentation trust-boundary are hardened and protected to the same extend "
        "as if all were containing/processing highly sensitive data."
    ),
    model_failure_possible_reason=False,
    cwe=1008,
)

SUPPORTED_TAGS: list[str] = []

_EXEMPT_TECHNOLOGIES = (
    Technology.REVERSE_PROXY, Technology.WAF, Technology.IDS, Technology.IPS, Technology.SERVICE_REGISTRY,
)


def _is_sensitive(asset: TechnicalAsset) -> bool:
    return (
        asset.type is TechnicalAssetType.DATASTORE
        or asset.confidentiality >= Confidentiality.CONFIDENTIAL
        or asset.integrity >= Criticality.CRITICAL
        or asset.availability >= Criticality.CRITICAL
    )


def generate_risks(ctx: AnalysisContext) -> list[Risk]:
    model = ctx.model
    risks = []
    assets = model.sorted_technical_assets()
    for asset in assets:
        if asset.out_of_scope or asset.technology in _EXEMPT_TECHNOLOGIES:
            continue
        if asset.raa < RAA_LIMIT or not _is_sensitive(asset):
            continue
        # one neighbour of a less protected type without a direct connection is enough
        for candidate in assets:
            if candidate.id == asset.id:
                continue
            if (candidate.technology.is_less_protected_type()
                    and asset.is_same_trust_boundary_network_only(model, candidate.id)
                    and not asset.has_direct_connection(model, candidate.id)
                    and not candidate.technology.is_close_to_high_value_targets_tolerated()):
                high_risk = (
                    asset.confidentiality == Confidentiality.STRICTLY_CONFIDENTIAL
                    or asset.integrity == Criticality.MISSION_CRITICAL
                    or asset.availability == Criticality.MISSION_CRITICAL
                )
                risks.append(_create_risk(asset, high_risk))
                break
    return risks


def _create_risk(asset: TechnicalAsset, more_risky: bool) -> Risk:
    impact = RiskExploitationImpact.MEDIUM if more_risky else RiskExploitationImpact.LOW
    return Risk(
        category=CATEGORY,
        severity=calculate_severity(RiskExploitationLikelihood.UNLIKELY, impact),
        exploitation_likelihood=RiskExploitationLikelihood.UNLIKELY,
        exploitation_impact=impact,
        title=(
            "<b>Missing Network Segmentation</b> to further encapsulate and protect <b>" + asset.title
            + "</b> against unrelated lower protected assets in the same network segment, which might be easier "
            "to compromise by attackers"
        ),
        synthetic_id=CATEGORY.id + "@" + asset.id,
        most_relevant_technical_asset_id=asset.id,
        data_breach_probability=DataBreachProbability.IMPROBABLE,
        data_breach_technical_asset_ids=[asset.id],
    )


RULE = RiskRule(CATEGORY, tuple(SUPPORTED_TAGS), generate_risks)
