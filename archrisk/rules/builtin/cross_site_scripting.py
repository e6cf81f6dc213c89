"""XSS in web applications."""

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
)

CATEGORY = RiskCategory(
    id="cross-site-scripting",
    title="Cross-Site Scripting (XSS)",
    description=(
        "For each web application Cross-Site Scripting (XSS) risks might arise. In terms "
        "of the overall risk level take other applications running on the same domain into account as well."
    ),
    impact=(
        "If this risk remains unmitigated, attackers might be able to access individual victim sessions and steal or "
        "modify user data."
    ),
    asvs="V5 - Validation, Sanitization and Encoding Verification Requirements",
    cheat_sheet="https://cheatsheetseries.owasp.org/cheatsheets/Cross_Site_Scripting_Prevention_Cheat_Sheet.html",
    action="XSS Prevention",
    mitigation=(
        "Try to encode all values sent back to the browser and also handle DOM-manipulations in a safe way "
        "to avoid DOM-based XSS. "
        "When a third-party product is used instead of custom developed software, check if the product applies the proper "
        "mitigation and ensure a reasonable patch-level."
    ),
    check="Are recommendations from the linked cheat sheet and referenced ASVS chapter applied?",
    function=RiskFunction.DEVELOPMENT,
    stride=STRIDE.TAMPERING,
    detection_logic="In-scope web applications.",
    risk_assessment="The risk rating depends on the sensitivity of the data processed or stored in the web application.",
    false_positives=(
        "When the technical asset "
        "is not accessed via a browser-like component (i.e not by a human user initiating the request that "
        "gets passed through all components until it reaches the web application) this can be considered a false positive."
    ),
    model_failure_possible_reason=False,
    cwe=79,
)

SUPPORTED_TAGS: list[str] = []


def generate_risks(ctx: AnalysisContext) -> list[Risk]:
    model = ctx.model
    return [
        _create_risk(model, asset)
        for asset in model.sorted_technical_assets()
        if not asset.out_of_scope and asset.technology.is_web_application()
    ]


def _create_risk(model: ParsedModel, asset: TechnicalAsset) -> Risk:
    impact = RiskExploitationImpact.MEDIUM
    if (asset.highest_confidentiality(model) == Confidentiality.STRICTLY_CONFIDENTIAL
            or asset.highest_integrity(model) == Criticality.MISSION_CRITICAL):
        impact = RiskExploitationImpact.HIGH
    return Risk(
        category=CATEGORY,
        severity=calculate_severity(RiskExploitationLikelihood.LIKELY, impact),
        exploitation_likelihood=RiskExploitationLikelihood.LIKELY,
        exploitation_impact=impact,
        title="<b>Cross-Site Scripting (XSS)</b> risk at <b>" + asset.title + "</b>",
        synthetic_id=CATEGORY.id + "@" + asset.id,
        most_relevant_technical_asset_id=asset.id,
        data_breach_probability=DataBreachProbability.POSSIBLE,
        data_breach_technical_asset_ids=[asset.id],
    )


RULE = RiskRule(CATEGORY, tuple(SUPPORTED_TAGS), generate_risks)
