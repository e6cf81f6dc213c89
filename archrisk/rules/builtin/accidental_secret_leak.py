"""Secrets accidentally committed to source repositories or packaged into artifacts."""

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
    id="accidental-secret-leak",
    title="Accidental Secret Leak",
    description=(
        "Sourcecode repositories (including their histories) as well as artifact registries can accidentally contain secrets like "
        "checked-in or packaged-in passwords, API tokens, certificates, crypto keys, etc."
    ),
    impact=(
        "If this risk is unmitigated, attackers which have access to affected sourcecode repositories or artifact registries might "
        "find secrets accidentally checked-in."
    ),
    asvs="V14 - Configuration Verification Requirements",
    cheat_sheet="https://cheatsheetseries.owasp.org/cheatsheets/Attack_Surface_Analysis_Cheat_Sheet.html",
    action="Build Pipeline Hardening",
    mitigation=(
        "Establish measures preventing accidental check-in or package-in of secrets into sourcecode repositories "
        "and artifact registries. This starts by using good .gitignore and .dockerignore files, but does not stop there. "
        "See for example tools like <i>\"git-secrets\" or \"Talisman\"</i> to have check-in preventive measures for secrets. "
        "Consider also to regularly scan your repositories for secrets accidentally checked-in using scanning tools like "
        "<i>\"gitleaks\" or \"gitrob\"</i>."
    ),
    check="Are recommendations from the linked cheat sheet and referenced ASVS chapter applied?",
    function=RiskFunction.OPERATIONS,
    stride=STRIDE.INFORMATION_DISCLOSURE,
    detection_logic="In-scope sourcecode repositories and artifact registries.",
    risk_assessment=(
        "The risk rating depends on the sensitivity of the technical asset itself and of the data assets processed and stored."
    ),
    false_positives="Usually no false positives.",
    model_failure_possible_reason=False,
    cwe=200,
)

SUPPORTED_TAGS = ["git", "nexus"]


def generate_risks(ctx: AnalysisContext) -> list[Risk]:
    model = ctx.model
    risks = []
    for asset in model.sorted_technical_assets():
        if asset.out_of_scope:
            continue
        if asset.technology not in (Technology.SOURCECODE_REPOSITORY, Technology.ARTIFACT_REGISTRY):
            continue
        if asset.is_tagged_with_any("git"):
            risks.append(_create_risk(model, asset, "Git", "Git Leak Prevention"))
        else:
            risks.append(_create_risk(model, asset, "", ""))
    return risks


def _create_risk(model: ParsedModel, asset: TechnicalAsset, prefix: str, details: str) -> Risk:
    if prefix:
        prefix = " (" + prefix + ")"
    title = "<b>Accidental Secret Leak" + prefix + "</b> risk at <b>" + asset.title + "</b>"
    if details:
        title += ": <u>" + details + "</u>"
    impact = RiskExploitationImpact.LOW
    if (asset.highest_confidentiality(model) >= Confidentiality.CONFIDENTIAL
            or asset.highest_integrity(model) >= Criticality.CRITICAL
            or asset.highest_availability(model) >= Criticality.CRITICAL):
        impact = RiskExploitationImpact.MEDIUM
    if (asset.highest_confidentiality(model) == Confidentiality.STRICTLY_CONFIDENTIAL
            or asset.highest_integrity(model) == Criticality.MISSION_CRITICAL
            or asset.highest_availability(model) == Criticality.MISSION_CRITICAL):
        impact = RiskExploitationImpact.HIGH
    return Risk(
        category=CATEGORY,
        severity=calculate_severity(RiskExploitationLikelihood.UNLIKELY, impact),
        exploitation_likelihood=RiskExploitationLikelihood.UNLIKELY,
        exploitation_impact=impact,
        title=title,
        synthetic_id=CATEGORY.id + "@" + asset.id,
        most_relevant_technical_asset_id=asset.id,
        data_breach_probability=DataBreachProbability.PROBABLE,
        data_breach_technical_asset_ids=[asset.id],
    )


RULE = RiskRule(CATEGORY, tuple(SUPPORTED_TAGS), generate_risks)
