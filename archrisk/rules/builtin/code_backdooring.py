"""Backdoored artifacts shipped through an exposed build pipeline."""

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
    Usage,
)

CATEGORY = RiskCategory(
    id="code-backdooring",
    title="Code Backdooring",
    description=(
        "For each build-pipeline component Code Backdooring risks might arise where attackers compromise the build-pipeline "
        "in order to let backdoored artifacts be shipped into production. Aside from direct code backdooring this includes "
        "backdooring of dependencies and even of more lower-level build infrastructure, like backdooring compilers "
        "(similar to what the XcodeGhost malware did) or dependencies."
    ),
    impact=(
        "If this risk remains unmitigated, attackers might be able to execute code on and completely takeover "
        "production environments."
    ),
    asvs="V10 - Malicious Code Verification Requirements",
    cheat_sheet="https://cheatsheetseries.owasp.org/cheatsheets/Vulnerable_Dependency_Management_Cheat_Sheet.html",
    action="Build Pipeline Hardening",
    mitigation=(
        "Reduce the attack surface of backdooring the build pipeline by not directly exposing the build pipeline "
        "components on the public internet and also not exposing it in front of unmanaged (out-of-scope) developer clients. "
        "Also consider the use of code signing to prevent code modifications."
    ),
    check="Are recommendations from the linked cheat sheet and referenced ASVS chapter applied?",
    function=RiskFunction.OPERATIONS,
    stride=STRIDE.TAMPERING,
    detection_logic=(
        "In-scope development relevant technical assets which are either accessed by out-of-scope unmanaged "
        "developer clients and/or are directly accessed by any kind of internet-located (non-VPN) component or are "
        "themselves directly located on the internet."
    ),
    risk_assessment=(
        "The risk rating depends on the confidentiality and integrity rating of the code being handled and deployed "
        "as well as the placement/calling of this technical asset on/from the internet."
    ),
    false_positives=(
        "When the build-pipeline and sourcecode-repo is not exposed to the internet and considered fully "
        "trusted (which implies that all accessing clients are also considered fully trusted in terms of their patch management "
        "and applied hardening, which must be equivalent to a managed developer client environment) this can be considered "
        "a false positive after individual review."
    ),
    model_failure_possible_reason=False,
    cwe=912,
)

SUPPORTED_TAGS: list[str] = []


def generate_risks(ctx: AnalysisContext) -> list[Risk]:
    model = ctx.model
    risks = []
    for asset in model.sorted_technical_assets():
        if asset.out_of_scope or not asset.technology.is_development_relevant():
            continue
        if asset.internet:
            risks.append(_create_risk(model, asset, True))
            continue
        for caller_link in model.incoming_links(asset.id):
            caller = model.technical_assets[caller_link.source_id]
            if (not caller_link.vpn and caller.internet) or caller.out_of_scope:
                risks.append(_create_risk(model, asset, True))
                break
    return risks


def _create_risk(model: ParsedModel, asset: TechnicalAsset, elevated_risk: bool) -> Risk:
    title = "<b>Code Backdooring</b> risk at <b>" + asset.title + "</b>"
    impact = RiskExploitationImpact.LOW
    if asset.technology is not Technology.CODE_INSPECTION_PLATFORM:
        if elevated_risk:
            impact = RiskExploitationImpact.MEDIUM
        if (asset.highest_confidentiality(model) >= Confidentiality.CONFIDENTIAL
                or asset.highest_integrity(model) >= Criticality.CRITICAL):
            impact = RiskExploitationImpact.HIGH if elevated_risk else RiskExploitationImpact.MEDIUM
    # every deployment target receiving code-like data is breached as well
    breached = {asset.id}
    for deployment_link in asset.communication_links:
        if deployment_link.usage is not Usage.DEVOPS:
            continue
        for data_id in deployment_link.data_assets_sent:
            if model.data_assets[data_id].integrity >= Criticality.IMPORTANT:
                breached.add(deployment_link.target_id)
                break
    return Risk(
        category=CATEGORY,
        severity=calculate_severity(RiskExploitationLikelihood.UNLIKELY, impact),
        exploitation_likelihood=RiskExploitationLikelihood.UNLIKELY,
        exploitation_impact=impact,
        title=title,
        synthetic_id=CATEGORY.id + "@" + asset.id,
        most_relevant_technical_asset_id=asset.id,
        data_breach_probability=DataBreachProbability.PROBABLE,
        data_breach_technical_asset_ids=sorted(breached),
    )


RULE = RiskRule(CATEGORY, tuple(SUPPORTED_TAGS), generate_risks)
