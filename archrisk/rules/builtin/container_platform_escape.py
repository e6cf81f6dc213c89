"""Escape from a compromised container onto the hosting container platform."""

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
    TechnicalAssetMachine,
    Technology,
)

CATEGORY = RiskCategory(
    id="container-platform-escape",
    title="Container Platform Escape",
    description=(
        "Container platforms are especially interesting targets for attackers as they host big parts of a containerized "
        "runtime infrastructure. When not configured and operated with security best practices in mind, attackers might "
        "exploit a vulnerability inside an container and escape towards the platform as highly privileged users. These "
        "scenarios might give attackers capabilities to attack every other container as owning the container platform "
        "(via container escape attacks) equals to owning every container."
    ),
    impact=(
        "If this risk is unmitigated, attackers which have successfully compromised a container (via other vulnerabilities) "
        "might be able to deeply persist in the target system by executing code in many deployed containers "
        "and the container platform itself."
    ),
    asvs="V14 - Configuration Verification Requirements",
    cheat_sheet="https://cheatsheetseries.owasp.org/cheatsheets/Docker_Security_Cheat_Sheet.html",
    action="Container Infrastructure Hardening",
    mitigation=(
        "Apply hardening of all container infrastructures. "
        "<p>See for example the <i>CIS-Benchmarks for Docker and Kubernetes</i> "
        "as well as the <i>Docker Bench for Security</i> ( <a href=\"https://github.com/docker/docker-bench-security\">"
        "https://github.com/docker/docker-bench-security</a> ) "
        "or <i>InSpec Checks for Docker and Kubernetes</i> ( <a href=\"https://github.com/dev-sec/cis-kubernetes-benchmark\">"
        "https://github.com/dev-sec/cis-docker-benchmark</a> and <a href=\"https://github.com/dev-sec/cis-kubernetes-benchmark\">"
        "https://github.com/dev-sec/cis-kubernetes-benchmark</a> ). "
        "Use only trusted base images, verify digital signatures and apply image creation best practices. Also consider using "
        "Google's <b>Distroless</i> base images or otherwise very small base images. "
        "Apply namespace isolation and nod affinity to separate pods from each other in terms of access and nodes the same "
        "style as you separate data."
    ),
    check="Are recommendations from the linked cheat sheet and referenced ASVS or CSVS chapter applied?",
    function=RiskFunction.OPERATIONS,
    stride=STRIDE.ELEVATION_OF_PRIVILEGE,
    detection_logic="In-scope container platforms.",
    risk_assessment=(
        "The risk rating depends on the sensitivity of the technical asset itself and of the data assets processed and stored."
    ),
    false_positives=(
        "Container platforms not running parts of the target architecture can be considered "
        "as false positives after individual review."
    ),
    model_failure_possible_reason=False,
    cwe=1008,
)

SUPPORTED_TAGS = ["docker", "kubernetes", "openshift"]


def generate_risks(ctx: AnalysisContext) -> list[Risk]:
    model = ctx.model
    return [
        _create_risk(model, asset)
        for asset in model.sorted_technical_assets()
        if not asset.out_of_scope and asset.technology is Technology.CONTAINER_PLATFORM
    ]


def _create_risk(model: ParsedModel, asset: TechnicalAsset) -> Risk:
    impact = RiskExploitationImpact.MEDIUM
    if (asset.highest_confidentiality(model) == Confidentiality.STRICTLY_CONFIDENTIAL
            or asset.highest_integrity(model) == Criticality.MISSION_CRITICAL
            or asset.highest_availability(model) == Criticality.MISSION_CRITICAL):
        impact = RiskExploitationImpact.HIGH
    # owning the platform means owning every container
    breached = [a.id for a in model.sorted_technical_assets() if a.machine is TechnicalAssetMachine.CONTAINER]
    return Risk(
        category=CATEGORY,
        severity=calculate_severity(RiskExploitationLikelihood.UNLIKELY, impact),
        exploitation_likelihood=RiskExploitationLikelihood.UNLIKELY,
        exploitation_impact=impact,
        title="<b>Container Platform Escape</b> risk at <b>" + asset.title + "</b>",
        synthetic_id=CATEGORY.id + "@" + asset.id,
        most_relevant_technical_asset_id=asset.id,
        data_breach_probability=DataBreachProbability.PROBABLE,
        data_breach_technical_asset_ids=breached,
    )


RULE = RiskRule(CATEGORY, tuple(SUPPORTED_TAGS), generate_risks)
