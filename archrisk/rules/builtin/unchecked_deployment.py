"""Build infrastructure without DevSecOps scanning."""

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
    Usage,
)

CATEGORY = RiskCategory(
    id="unchecked-deployment",
    title="Unchecked Deployment",
    description=(
        "For each build-pipeline component Unchecked Deployment risks might arise when the build-pipeline "
        "does not include established DevSecOps best-practices. DevSecOps best-practices scan as part of CI/CD "
        "pipelines for vulnerabilities in source- or byte-code, dependencies, container layers, and dynamically "
        "against running test systems. There are several open-source and commercial tools existing in the categories "
        "DAST, SAST, and IAST."
    ),
    impact=(
        "If this risk remains unmitigated, vulnerabilities in custom-developed software or their dependencies "
        "might not be identified during continuous deployment cycles."
    ),
    asvs="V14 - Configuration Verification Requirements",
    cheat_sheet="https://cheatsheetseries.owasp.org/cheatsheets/Vulnerable_Dependency_Management_Cheat_Sheet.html",
    action="Build Pipeline Hardening",
    mitigation=(
        "Apply DevSecOps best-practices and use scanning tools to identify vulnerabilities in source- or byte-code,"
        "dependencies, container layers, and optionally also via dynamic scans against running test systems."
    ),
    check="Are recommendations from the linked cheat sheet and referenced ASVS chapter applied?",
    function=RiskFunction.ARCHITECTURE,
    stride=STRIDE.TAMPERING,
    detection_logic="All development-relevant technical assets.",
    risk_assessment=(
        "The risk rating depends on the highest rating of the technical assets and data assets processed by "
        "deployment-receiving targets."
    ),
    false_positives=(
        "When the build-pipeline does not build any software components it can be considered a false positive "
        "after individual review."
    ),
    model_failure_possible_reason=False,
    cwe=1127,
)

SUPPORTED_TAGS: list[str] = []


def generate_risks(ctx: AnalysisContext) -> list[Risk]:
    model = ctx.model
    return [
        _create_risk(model, asset)
        for asset in model.sorted_technical_assets()
        if asset.technology.is_development_relevant()
    ]


def _create_risk(model: ParsedModel, asset: TechnicalAsset) -> Risk:
    impact = RiskExploitationImpact.LOW
    # every deployment target receiving code is breached as well
    breached_ids = {asset.id}
    for link in asset.communication_links:
        if link.usage is not Usage.DEVOPS:
            continue
        for data_id in link.data_assets_sent:
            # elevated integrity of the sent data marks it as code
            if model.data_assets[data_id].integrity >= Criticality.IMPORTANT:
                breached_ids.add(link.target_id)
                target = model.technical_assets[link.target_id]
                if (target.highest_confidentiality(model) >= Confidentiality.CONFIDENTIAL
                        or target.highest_integrity(model) >= Criticality.CRITICAL
                        or target.highest_availability(model) >= Criticality.CRITICAL):
                    impact = RiskExploitationImpact.MEDIUM
                break
    return Risk(
        category=CATEGORY,
        severity=calculate_severity(RiskExploitationLikelihood.UNLIKELY, impact),
        exploitation_likelihood=RiskExploitationLikelihood.UNLIKELY,
        exploitation_impact=impact,
        title="<b>Unchecked Deployment</b> risk at <b>" + asset.title + "</b>",
        synthetic_id=CATEGORY.id + "@" + asset.id,
        most_relevant_technical_asset_id=asset.id,
        data_breach_probability=DataBreachProbability.POSSIBLE,
        data_breach_technical_asset_ids=sorted(breached_ids),
    )


RULE = RiskRule(CATEGORY, tuple(SUPPORTED_TAGS), generate_risks)
