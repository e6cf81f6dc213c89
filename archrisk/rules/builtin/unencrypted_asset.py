"""Sensitive technical assets without (sufficient) encryption at rest."""

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
    EncryptionStyle,
    RiskExploitationImpact,
    RiskExploitationLikelihood,
    RiskFunction,
    Technology,
)

CATEGORY = RiskCategory(
    id="unencrypted-asset",
    title="Unencrypted Technical Assets",
    description=(
        "Due to the confidentiality rating of the technical asset itself and/or the processed data assets "
        "this technical asset must be encrypted. The risk rating depends on the sensitivity technical asset itself "
        "and of the data assets stored."
    ),
    impact=(
        "If this risk is unmitigated, attackers might be able to access unencrypted data when successfully "
        "compromising sensitive components."
    ),
    asvs="V6 - Stored Cryptography Verification Requirements",
    cheat_sheet="https://cheatsheetseries.owasp.org/cheatsheets/Cryptographic_Storage_Cheat_Sheet.html",
    action="Encryption of Technical Asset",
    mitigation="Apply encryption to the technical asset.",
    check="Are recommendations from the linked cheat sheet and referenced ASVS chapter applied?",
    function=RiskFunction.OPERATIONS,
    stride=STRIDE.INFORMATION_DISCLOSURE,
    detection_logic=(
        f"In-scope unencrypted technical assets (excluding {Technology.REVERSE_PROXY}, {Technology.LOAD_BALANCER}, "
        f"{Technology.WAF}, {Technology.IDS}, {Technology.IPS} and embedded components like {Technology.LIBRARY}) "
        f"storing data assets rated at least as {Confidentiality.CONFIDENTIAL} or {Criticality.CRITICAL}. "
        f"For technical assets storing data assets rated as {Confidentiality.STRICTLY_CONFIDENTIAL} or "
        f"{Criticality.MISSION_CRITICAL} the encryption must be of type {EncryptionStyle.DATA_WITH_ENDUSER_INDIVIDUAL_KEY}."
    ),
    risk_assessment="Depending on the confidentiality rating of the stored data-assets either medium or high risk.",
    false_positives="When all sensitive data stored within the asset is already fully encrypted on document or data level.",
    model_failure_possible_reason=False,
    cwe=311,
)

SUPPORTED_TAGS: list[str] = []

_SHARED_KEY_STYLES = (
    EncryptionStyle.TRANSPARENT,
    EncryptionStyle.DATA_WITH_SYMMETRIC_SHARED_KEY,
    EncryptionStyle.DATA_WITH_ASYMMETRIC_SHARED_KEY,
)


def is_encryption_waiver(asset: TechnicalAsset) -> bool:
    """Routing-only assets hold no storage of their own and need no encryption at rest."""
    return asset.technology in (
        Technology.REVERSE_PROXY, Technology.LOAD_BALANCER, Technology.WAF, Technology.IDS, Technology.IPS,
    ) or asset.technology.is_embedded_component()


def generate_risks(ctx: AnalysisContext) -> list[Risk]:
    model = ctx.model
    risks = []
    for asset in model.sorted_technical_assets():
        if asset.out_of_scope or is_encryption_waiver(asset):
            continue
        confidentiality = asset.highest_confidentiality(model)
        integrity = asset.highest_integrity(model)
        if confidentiality < Confidentiality.CONFIDENTIAL and integrity < Criticality.CRITICAL:
            continue
        very_sensitive = (
            confidentiality == Confidentiality.STRICTLY_CONFIDENTIAL or integrity == Criticality.MISSION_CRITICAL
        )
        requires_enduser_key = very_sensitive and asset.technology.is_usually_storing_enduser_data()
        if asset.encryption is EncryptionStyle.NONE:
            impact = RiskExploitationImpact.HIGH if very_sensitive else RiskExploitationImpact.MEDIUM
            risks.append(_create_risk(asset, impact, requires_enduser_key))
        elif requires_enduser_key and asset.encryption in _SHARED_KEY_STYLES:
            risks.append(_create_risk(asset, RiskExploitationImpact.MEDIUM, requires_enduser_key))
    return risks


def _create_risk(asset: TechnicalAsset, impact: RiskExploitationImpact, requires_enduser_key: bool) -> Risk:
    title = "<b>Unencrypted Technical Asset</b> named <b>" + asset.title + "</b>"
    if requires_enduser_key:
        title += f" missing enduser-individual encryption with {EncryptionStyle.DATA_WITH_ENDUSER_INDIVIDUAL_KEY}"
    return Risk(
        category=CATEGORY,
        severity=calculate_severity(RiskExploitationLikelihood.UNLIKELY, impact),
        exploitation_likelihood=RiskExploitationLikelihood.UNLIKELY,
        exploitation_impact=impact,
        title=title,
        synthetic_id=CATEGORY.id + "@" + asset.id,
        most_relevant_technical_asset_id=asset.id,
        data_breach_probability=DataBreachProbability.IMPROBABLE,
        data_breach_technical_asset_ids=[asset.id],
    )


RULE = RiskRule(CATEGORY, tuple(SUPPORTED_TAGS), generate_risks)
