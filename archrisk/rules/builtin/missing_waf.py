"""Web applications and services reachable across a network boundary without a WAF."""

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
    Technology,
)

CATEGORY = RiskCategory(
    id="missing-waf",
    title="Missing Web Application Firewall (WAF)",
    description=(
        "To have a first line of filtering defense, security architectures with web-services or web-applications "
        "should include a WAF in front of them. Even though a WAF is not a replacement for security (all components "
        "must be secure even without a WAF) it adds another layer of defense to the overall system by delaying some "
        "attacks and having easier attack alerting through it."
    ),
    impact=(
        "If this risk is unmitigated, attackers might be able to apply standard attack pattern tests at great speed "
        "without any filtering."
    ),
    asvs="V1 - Architecture, Design and Threat Modeling Requirements",
    cheat_sheet="https://cheatsheetseries.owasp.org/cheatsheets/Virtual_Patching_Cheat_Sheet.html",
    action="Web Application Firewall (WAF)",
    mitigation=(
        "Consider placing a Web Application Firewall (WAF) in front of the web-services and/or web-applications. For "
        "cloud environments many cloud providers offer pre-configured WAFs. Even reverse proxies can be enhances by a "
        "WAF component via ModSecurity plugins."
    ),
    check="Is a Web Application Firewall (WAF) in place?",
    function=RiskFunction.OPERATIONS,
    stride=STRIDE.TAMPERING,
    detection_logic=(
        "In-scope web-services and/or web-applications accessed across a network trust boundary not having a Web "
        "Application Firewall (WAF) in front of them."
    ),
    risk_assessment=(
        "The risk rating depends on the sensitivity of the technical asset itself and of the data assets processed and stored."
    ),
    false_positives=(
        "Targets only accessible via WAFs or reverse proxies containing a WAF component (like ModSecurity) can be "
        "considered as false positives after individual review."
    ),
    model_failure_possible_reason=False,
    cwe=1008,
)

SUPPORTED_TAGS: list[str] = []


def generate_risks(ctx: AnalysisContext) -> list[Risk]:
    model = ctx.model
    risks = []
    for asset in model.sorted_technical_assets():
        if asset.out_of_scope:
            continue
        if not (asset.technology.is_web_application() or asset.technology.is_web_service()):
            continue
        for link in model.incoming_links(asset.id):
            if (link.is_across_trust_boundary_network_only(model)
                    and link.protocol.is_potential_web_access_protocol()
                    and model.technical_assets[link.source_id].technology is not Technology.WAF):
                risks.append(_create_risk(model, asset))
                break
    return risks


def _create_risk(model: ParsedModel, asset: TechnicalAsset) -> Risk:
    impact = RiskExploitationImpact.LOW
    if (asset.highest_confidentiality(model) == Confidentiality.STRICTLY_CONFIDENTIAL
            or asset.highest_integrity(model) == Criticality.MISSION_CRITICAL
            or asset.highest_availability(model) == Criticality.MISSION_CRITICAL):
        impact = RiskExploitationImpact.MEDIUM
    return Risk(
        category=CATEGORY,
        severity=calculate_severity(RiskExploitationLikelihood.UNLIKELY, impact),
        exploitation_likelihood=RiskExploitationLikelihood.UNLIKELY,
        exploitation_impact=impact,
        title="<b>Missing Web Application Firewall (WAF)</b> risk at <b>" + asset.title + "</b>",
        synthetic_id=CATEGORY.id + "@" + asset.id,
        most_relevant_technical_asset_id=asset.id,
        data_breach_probability=DataBreachProbability.IMPROBABLE,
        data_breach_technical_asset_ids=[asset.id],
    )


RULE = RiskRule(CATEGORY, tuple(SUPPORTED_TAGS), generate_risks)
