"""Custom-developed parts without a modeled build infrastructure."""

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
    Technology,
)

CATEGORY = RiskCategory(
    id="missing-build-infrastructure",
    title="Missing Build Infrastructure",
    description=(
        "The modeled architecture does not contain a build infrastructure (devops-client, sourcecode-repo, build-pipeline, etc.), "
        "which might be the risk of a model missing critical assets (and thus not seeing their risks). "
        "If the architecture contains custom-developed parts, the pipeline where code gets developed "
        "and built needs to be part of the model."
    ),
    impact=(
        "If this risk is unmitigated, attackers might be able to exploit risks unseen in this threat model due to "
        "critical build infrastructure components missing in the model."
    ),
    asvs="V1 - Architecture, Design and Threat Modeling Requirements",
    cheat_sheet="https://cheatsheetseries.owasp.org/cheatsheets/Attack_Surface_Analysis_Cheat_Sheet.html",
    action="Build Pipeline Hardening",
    mitigation="Include the build infrastructure in the model.",
    check="Are recommendations from the linked cheat sheet and referenced ASVS chapter applied?",
    function=RiskFunction.ARCHITECTURE,
    stride=STRIDE.TAMPERING,
    detection_logic=(
        "Models with in-scope custom-developed parts missing in-scope development (code creation) and build infrastructure "
        "components (devops-client, sourcecode-repo, build-pipeline, etc.)."
    ),
    risk_assessment="The risk rating depends on the highest sensitivity of the in-scope assets running custom-developed parts.",
    false_positives=(
        "Models not having any custom-developed parts "
        "can be considered as false positives after individual review."
    ),
    model_failure_possible_reason=True,
    cwe=1127,
)

SUPPORTED_TAGS: list[str] = []


def generate_risks(ctx: AnalysisContext) -> list[Risk]:
    model = ctx.model
    has_custom_developed_parts = False
    has_build_pipeline = has_sourcecode_repo = has_devops_client = False
    impact = RiskExploitationImpact.LOW
    most_relevant: TechnicalAsset | None = None
    # sorted iteration keeps the example asset stable between runs
    for asset in model.sorted_technical_assets():
        if asset.custom_developed_parts and not asset.out_of_scope:
            has_custom_developed_parts = True
            if impact is RiskExploitationImpact.LOW:
                most_relevant = asset
                if (asset.highest_confidentiality(model) >= Confidentiality.CONFIDENTIAL
                        or asset.highest_integrity(model) >= Criticality.CRITICAL
                        or asset.highest_availability(model) >= Criticality.CRITICAL):
                    impact = RiskExploitationImpact.MEDIUM
            if (asset.confidentiality >= Confidentiality.CONFIDENTIAL
                    or asset.integrity >= Criticality.CRITICAL
                    or asset.availability >= Criticality.CRITICAL):
                impact = RiskExploitationImpact.MEDIUM
            if asset.highest_sensitivity_score() > most_relevant.highest_sensitivity_score():
                most_relevant = asset
        if asset.technology is Technology.BUILD_PIPELINE:
            has_build_pipeline = True
        if asset.technology is Technology.SOURCECODE_REPOSITORY:
            has_sourcecode_repo = True
        if asset.technology is Technology.DEVOPS_CLIENT:
            has_devops_client = True
    has_build_infrastructure = has_build_pipeline and has_sourcecode_repo and has_devops_client
    if has_custom_developed_parts and not has_build_infrastructure:
        return [_create_risk(most_relevant, impact)]
    return []


def _create_risk(asset: TechnicalAsset, impact: RiskExploitationImpact) -> Risk:
    return Risk(
        category=CATEGORY,
        severity=calculate_severity(RiskExploitationLikelihood.UNLIKELY, impact),
        exploitation_likelihood=RiskExploitationLikelihood.UNLIKELY,
        exploitation_impact=impact,
        title=(
            "<b>Missing Build Infrastructure</b> in the threat model (referencing asset <b>" + asset.title
            + "</b> as an example)"
        ),
        synthetic_id=CATEGORY.id + "@" + asset.id,
        most_relevant_technical_asset_id=asset.id,
        data_breach_probability=DataBreachProbability.IMPROBABLE,
        data_breach_technical_asset_ids=[],
    )


RULE = RiskRule(CATEGORY, tuple(SUPPORTED_TAGS), generate_risks)
