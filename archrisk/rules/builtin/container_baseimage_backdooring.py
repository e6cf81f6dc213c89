"""Vulnerable or backdoored layers in container base images."""

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
)

CATEGORY = RiskCategory(
    id="container-baseimage-backdooring",
    title="Container Base Image Backdooring",
    description=(
        "When a technical asset is built using container technologies, Base Image Backdooring risks might arise where "
        "base images and other layers used contain vulnerable components or backdoors."
        "<br><br>See for example: <a href=\"https://techcrunch.com/2018/06/15/tainted-crypto-mining-containers-pulled-from-docker-hub/\">"
        "https://techcrunch.com/2018/06/15/tainted-crypto-mining-containers-pulled-from-docker-hub/</a>"
    ),
    impact=(
        "If this risk is unmitigated, attackers might be able to deeply persist in the target system by executing code "
        "in deployed containers."
    ),
    asvs="V10 - Malicious Code Verification Requirements",
    cheat_sheet="https://cheatsheetseries.owasp.org/cheatsheets/Docker_Security_Cheat_Sheet.html",
    action="Container Infrastructure Hardening",
    mitigation=(
        "Apply hardening of all container infrastructures (see for example the <i>CIS-Benchmarks for Docker and Kubernetes</i> "
        "and the <i>Docker Bench for Security</i>). "
        "Use only trusted base images of the original vendors, verify digital signatures and apply image creation best practices. "
        "Also consider using Google's <i>Distroless</i> base images or otherwise very small base images. "
        "Regularly execute container image scans with tools checking the layers for vulnerable components."
    ),
    check="Are recommendations from the linked cheat sheet and referenced ASVS/CSVS applied?",
    function=RiskFunction.OPERATIONS,
    stride=STRIDE.TAMPERING,
    detection_logic="In-scope technical assets running as containers.",
    risk_assessment="The risk rating depends on the sensitivity of the technical asset itself and of the data assets.",
    false_positives=(
        "Fully trusted (i.e. reviewed and cryptographically signed or similar) base images of containers can be considered "
        "as false positives after individual review."
    ),
    model_failure_possible_reason=False,
    cwe=912,
)

SUPPORTED_TAGS: list[str] = []


def generate_risks(ctx: AnalysisContext) -> list[Risk]:
    model = ctx.model
    return [
        _create_risk(model, asset)
        for asset in model.sorted_technical_assets()
        if not asset.out_of_scope and asset.machine is TechnicalAssetMachine.CONTAINER
    ]


def _create_risk(model: ParsedModel, asset: TechnicalAsset) -> Risk:
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
        title="<b>Container Base Image Backdooring</b> risk at <b>" + asset.title + "</b>",
        synthetic_id=CATEGORY.id + "@" + asset.id,
        most_relevant_technical_asset_id=asset.id,
        data_breach_probability=DataBreachProbability.PROBABLE,
        data_breach_technical_asset_ids=[asset.id],
    )


RULE = RiskRule(CATEGORY, tuple(SUPPORTED_TAGS), generate_risks)
