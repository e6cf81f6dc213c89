"""Models with enduser-identity authorization but no identity store."""

from __future__ import annotations

from archrisk.context import AnalysisContext
from archrisk.models import Risk, RiskCategory, TechnicalAsset
from archrisk.risks import calculate_severity
from archrisk.rules.registry import RiskRule
from archrisk.types import (
    STRIDE,
    Authorization,
    Confidentiality,
    Criticality,
    DataBreachProbability,
    RiskExploitationImpact,
    RiskExploitationLikelihood,
    RiskFunction,
    Technology,
)

CATEGORY = RiskCategory(
    id="missing-identity-store",
    title="Missing Identity Store",
    description=(
        "The modeled architecture does not contain an identity store, which might be the risk of a model missing "
        "critical assets (and thus not seeing their risks)."
    ),
    impact=(
        "If this risk is unmitigated, attackers might be able to exploit risks unseen in this threat model in the "
        "identity provider/store that is currently missing in the model."
    ),
    asvs="V2 - Authentication Verification Requirements",
    cheat_sheet="https://cheatsheetseries.owasp.org/cheatsheets/Authentication_Cheat_Sheet.html",
    action="Identity Store",
    mitigation="Include an identity store in the model if the application has a login.",
    check="Are recommendations from the linked cheat sheet and referenced ASVS chapter applied?",
    function=RiskFunction.ARCHITECTURE,
    stride=STRIDE.SPOOFING,
    detection_logic="Models with authenticated data-flows authorized via enduser-identity missing an in-scope identity store.",
    risk_assessment=(
        "The risk rating depends on the sensitivity of the enduser-identity authorized technical assets and "
        "their data assets processed and stored."
    ),
    false_positives=(
        "Models only offering data/services without any real authentication need "
        "can be considered as false positives after individual review."
    ),
    model_failure_possible_reason=True,
    cwe=287,
)

SUPPORTED_TAGS: list[str] = []

_IDENTITY_STORES = (Technology.IDENTITY_STORE_LDAP, Technology.IDENTITY_STORE_DATABASE)


def generate_risks(ctx: AnalysisContext) -> list[Risk]:
    model = ctx.model
    for asset in model.technical_assets.values():
        if not asset.out_of_scope and asset.technology in _IDENTITY_STORES:
            return []

    risk_identified = False
    most_relevant: TechnicalAsset | None = None
    impact = RiskExploitationImpact.LOW
    # sorted iteration keeps the example asset stable between runs
    for asset in model.sorted_technical_assets():
        for link in asset.communication_links_sorted():
            if link.authorization is not Authorization.ENDUSER_IDENTITY_PROPAGATION:
                continue
            risk_identified = True
            target = model.technical_assets[link.target_id]
            if impact is RiskExploitationImpact.LOW:
                most_relevant = target
                if (target.highest_confidentiality(model) >= Confidentiality.CONFIDENTIAL
                        or target.highest_integrity(model) >= Criticality.CRITICAL
                        or target.highest_availability(model) >= Criticality.CRITICAL):
                    impact = RiskExploitationImpact.MEDIUM
            if (target.confidentiality >= Confidentiality.CONFIDENTIAL
                    or target.integrity >= Criticality.CRITICAL
                    or target.availability >= Criticality.CRITICAL):
                impact = RiskExploitationImpact.MEDIUM
            if asset.highest_sensitivity_score() > most_relevant.highest_sensitivity_score():
                most_relevant = asset
    if not risk_identified:
        return []
    return [_create_risk(most_relevant, impact)]


def _create_risk(asset: TechnicalAsset, impact: RiskExploitationImpact) -> Risk:
    return Risk(
        category=CATEGORY,
        severity=calculate_severity(RiskExploitationLikelihood.UNLIKELY, impact),
        exploitation_likelihood=RiskExploitationLikelihood.UNLIKELY,
        exploitation_impact=impact,
        title=(
            "<b>Missing Identity Store</b> in the threat model (referencing asset <b>" + asset.title
            + "</b> as an example)"
        ),
        synthetic_id=CATEGORY.id + "@" + asset.id,
        most_relevant_technical_asset_id=asset.id,
        data_breach_probability=DataBreachProbability.IMPROBABLE,
        data_breach_technical_asset_ids=[],
    )


RULE = RiskRule(CATEGORY, tuple(SUPPORTED_TAGS), generate_risks)
