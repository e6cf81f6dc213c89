"""Models without any vault for config secrets."""

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
    id="missing-vault",
    title="Missing Vault (Secret Storage)",
    description=(
        "In order to avoid the risk of secret leakage via config files (when attacked through vulnerabilities being "
        "able to read files like Path-Traversal and others), it is best practice to use a separate hardened process "
        "with proper authentication, authorization, and audit logging to access config secrets (like credentials, "
        "private keys, client certificates, etc.). This component is usually some kind of Vault."
    ),
    impact=(
        "If this risk is unmitigated, attackers might be able to easier steal config secrets (like credentials, "
        "private keys, client certificates, etc.) once a vulnerability to access files is present and exploited."
    ),
    asvs="V6 - Stored Cryptography Verification Requirements",
    cheat_sheet="https://cheatsheetseries.owasp.org/cheatsheets/Cryptographic_Storage_Cheat_Sheet.html",
    action="Vault (Secret Storage)",
    mitigation=(
        "Consider using a Vault (Secret Storage) to securely store and access config secrets (like credentials, "
        "private keys, client certificates, etc.)."
    ),
    check="Is a Vault (Secret Storage) in place?",
    function=RiskFunction.ARCHITECTURE,
    stride=STRIDE.INFORMATION_DISCLOSURE,
    detection_logic="Models without a Vault (Secret Storage).",
    risk_assessment=(
        "The risk rating depends on the sensitivity of the technical asset itself and of the data assets processed and stored."
    ),
    false_positives=(
        "Models where no technical assets have any kind of sensitive config data to protect "
        "can be considered as false positives after individual review."
    ),
    model_failure_possible_reason=True,
    cwe=522,
)

SUPPORTED_TAGS: list[str] = []


def generate_risks(ctx: AnalysisContext) -> list[Risk]:
    model = ctx.model
    has_vault = False
    # placeholder with the lowest possible score until a more sensitive asset shows up
    most_relevant = TechnicalAsset(id="", title="")
    impact = RiskExploitationImpact.LOW
    for asset in model.sorted_technical_assets():
        if asset.technology is Technology.VAULT:
            has_vault = True
        if (asset.highest_confidentiality(model) >= Confidentiality.CONFIDENTIAL
                or asset.highest_integrity(model) >= Criticality.CRITICAL
                or asset.highest_availability(model) >= Criticality.CRITICAL):
            impact = RiskExploitationImpact.MEDIUM
        if asset.highest_sensitivity_score() > most_relevant.highest_sensitivity_score():
            most_relevant = asset
    if has_vault:
        return []
    return [_create_risk(most_relevant, impact)]


def _create_risk(asset: TechnicalAsset, impact: RiskExploitationImpact) -> Risk:
    return Risk(
        category=CATEGORY,
        severity=calculate_severity(RiskExploitationLikelihood.UNLIKELY, impact),
        exploitation_likelihood=RiskExploitationLikelihood.UNLIKELY,
        exploitation_impact=impact,
        title=(
            "<b>Missing Vault (Secret Storage)</b> in the threat model (referencing asset <b>" + asset.title
            + "</b> as an example)"
        ),
        synthetic_id=CATEGORY.id + "@" + asset.id,
        most_relevant_technical_asset_id=asset.id,
        data_breach_probability=DataBreachProbability.IMPROBABLE,
        data_breach_technical_asset_ids=[],
    )


RULE = RiskRule(CATEGORY, tuple(SUPPORTED_TAGS), generate_risks)
