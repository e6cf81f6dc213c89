"""High-value targets, judged by RAA, that need explicit hardening."""

from __future__ import annotations

from archrisk.context import AnalysisContext
from archrisk.models import ParsedModel, Risk, RiskCategory, TechnicalAsset
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
    TechnicalAssetType,
    Technology,
)

RAA_LIMIT = 55
RAA_LIMIT_REDUCED = 40

CATEGORY = RiskCategory(
    id="missing-hardening",
    title="Missing Hardening",
    description=(
        f"Technical assets with a Relative Attacker Attractiveness (RAA) value of {RAA_LIMIT} % or higher should be "
        "explicitly hardened taking best practices and vendor hardening guides into account."
    ),
    impact="If this risk remains unmitigated, attackers might be able to easier attack high-value targets.",
    asvs="V14 - Configuration Verification Requirements",
    cheat_sheet="https://cheatsheetseries.owasp.org/cheatsheets/Attack_Surface_Analysis_Cheat_Sheet.html",
    action="System Hardening",
    mitigation=(
        "Try to apply all hardening best practices (like CIS benchmarks, OWASP recommendations, vendor "
        "recommendations, DevSec Hardening Framework, DBSAT for Oracle databases, and others)."
    ),
    check="Are recommendations from the linked cheat sheet and referenced ASVS chapter applied?",
    function=RiskFunction.OPERATIONS,
    stride=STRIDE.TAMPERING,
    detection_logic=(
        f"In-scope technical assets with RAA values of {RAA_LIMIT} % or higher. "
        "Generally for high-value targets like datastores, application servers, identity providers and ERP systems "
        f"this limit is reduced to {RAA_LIMIT_REDUCED} %"
    ),
    risk_assessment="The risk rating depends on the sensitivity of the data processed or stored in the technical asset.",
    false_positives="Usually no false positives.",
    model_failure_possible_reason=False,
    cwe=16,
)

SUPPORTED_TAGS = ["tomcat"]


def _is_high_value_target(asset: TechnicalAsset) -> bool:
    return asset.type is TechnicalAssetType.DATASTORE or asset.technology in (
        Technology.APPLICATION_SERVER, Technology.IDENTITY_PROVIDER, Technology.ERP,
    )


def generate_risks(ctx: AnalysisContext) -> list[Risk]:
    model = ctx.model
    risks = []
    for asset in model.sorted_technical_assets():
        if asset.out_of_scope:
            continue
        if asset.raa >= RAA_LIMIT or (asset.raa >= RAA_LIMIT_REDUCED and _is_high_value_target(asset)):
            risks.append(_create_risk(model, asset))
    return risks


def _create_risk(model: ParsedModel, asset: TechnicalAsset) -> Risk:
    impact = RiskExploitationImpact.LOW
    if (asset.highest_confidentiality(model) == Confidentiality.STRICTLY_CONFIDENTIAL
            or asset.highest_integrity(model) == Criticality.MISSION_CRITICAL):
        impact = RiskExploitationImpact.MEDIUM
    return Risk(
        category=CATEGORY,
        severity=calculate_severity(RiskExploitationLikelihood.LIKELY, impact),
        exploitation_likelihood=RiskExploitationLikelihood.LIKELY,
        exploitation_impact=impact,
        title="<b>Missing Hardening</b> risk at <b>" + asset.title + "</b>",
        synthetic_id=CATEGORY.id + "@" + asset.id,
        most_relevant_technical_asset_id=asset.id,
        data_breach_probability=DataBreachProbability.IMPROBABLE,
        data_breach_technical_asset_ids=[asset.id],
    )


RULE = RiskRule(CATEGORY, tuple(SUPPORTED_TAGS), generate_risks)
