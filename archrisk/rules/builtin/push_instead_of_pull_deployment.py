"""Build pipelines pushing deployments into production targets."""

from __future__ import annotations

from archrisk.context import AnalysisContext
from archrisk.models import CommunicationLink, Risk, RiskCategory, TechnicalAsset
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
    id="push-instead-of-pull-deployment",
    title="Push instead of Pull Deployment",
    description=(
        "When comparing push-based vs. pull-based deployments from a security perspective, pull-based "
        "deployments improve the overall security of the deployment targets. Every exposed interface of a production "
        "system to accept a deployment increases the attack surface of the production system, thus a pull-based "
        "approach exposes less attack surface relevant interfaces."
    ),
    impact=(
        "If this risk is unmitigated, attackers might have more potential target vectors for attacks, as the overall "
        "attack surface is unnecessarily increased."
    ),
    asvs="V1 - Architecture, Design and Threat Modeling Requirements",
    cheat_sheet="https://cheatsheetseries.owasp.org/cheatsheets/Attack_Surface_Analysis_Cheat_Sheet.html",
    action="Build Pipeline Hardening",
    mitigation=(
        "Try to prefer pull-based deployments (like GitOps scenarios offer) over push-based deployments to reduce "
        "the attack surface of the production system."
    ),
    check="Are recommendations from the linked cheat sheet and referenced ASVS chapter applied?",
    function=RiskFunction.ARCHITECTURE,
    stride=STRIDE.TAMPERING,
    detection_logic=(
        "Models with build pipeline components accessing in-scope targets of deployment (in a non-readonly way) which "
        "are not build-related components themselves."
    ),
    risk_assessment=(
        "The risk rating depends on the highest sensitivity of the deployment targets running custom-developed parts."
    ),
    false_positives=(
        "Communication links that are not deployment paths "
        "can be considered as false positives after individual review."
    ),
    model_failure_possible_reason=True,
    cwe=1127,
)

SUPPORTED_TAGS: list[str] = []


def generate_risks(ctx: AnalysisContext) -> list[Risk]:
    model = ctx.model
    risks = []
    for pipeline in model.sorted_technical_assets():
        if pipeline.technology is not Technology.BUILD_PIPELINE:
            continue
        for link in pipeline.communication_links_sorted():
            target = model.technical_assets[link.target_id]
            if link.readonly or link.usage is not Usage.DEVOPS:
                continue
            if target.out_of_scope or target.technology.is_development_relevant() or target.usage is not Usage.BUSINESS:
                continue
            impact = RiskExploitationImpact.LOW
            if (target.highest_confidentiality(model) >= Confidentiality.CONFIDENTIAL
                    or target.highest_integrity(model) >= Criticality.CRITICAL
                    or target.highest_availability(model) >= Criticality.CRITICAL):
                impact = RiskExploitationImpact.MEDIUM
            risks.append(_create_risk(pipeline, target, link, impact))
    return risks


def _create_risk(
    pipeline: TechnicalAsset,
    target: TechnicalAsset,
    deployment_link: CommunicationLink,
    impact: RiskExploitationImpact,
) -> Risk:
    return Risk(
        category=CATEGORY,
        severity=calculate_severity(RiskExploitationLikelihood.UNLIKELY, impact),
        exploitation_likelihood=RiskExploitationLikelihood.UNLIKELY,
        exploitation_impact=impact,
        title=(
            "<b>Push instead of Pull Deployment</b> at <b>" + target.title + "</b> via build pipeline asset <b>"
            + pipeline.title + "</b>"
        ),
        synthetic_id=CATEGORY.id + "@" + pipeline.id,
        most_relevant_technical_asset_id=target.id,
        most_relevant_communication_link_id=deployment_link.id,
        data_breach_probability=DataBreachProbability.IMPROBABLE,
        data_breach_technical_asset_ids=[target.id],
    )


RULE = RiskRule(CATEGORY, tuple(SUPPORTED_TAGS), generate_risks)
