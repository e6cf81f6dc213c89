"""CSRF against web applications reached over web protocols."""

from __future__ import annotations

from archrisk.context import AnalysisContext
from archrisk.models import CommunicationLink, ParsedModel, Risk, RiskCategory, TechnicalAsset
from archrisk.risks import calculate_severity
from archrisk.rules.registry import RiskRule
from archrisk.types import (
    STRIDE,
    Criticality,
    DataBreachProbability,
    RiskExploitationImpact,
    RiskExploitationLikelihood,
    RiskFunction,
    Usage,
)

CATEGORY = RiskCategory(
    id="cross-site-request-forgery",
    title="Cross-Site Request Forgery (CSRF)",
    description="When a web application is accessed via web protocols Cross-Site Request Forgery (CSRF) risks might arise.",
    impact=(
        "If this risk remains unmitigated, attackers might be able to trick logged-in victim users into unwanted actions "
        "within the web application by visiting an attacker controlled web site."
    ),
    asvs="V4 - Access Control Verification Requirements",
    cheat_sheet="https://cheatsheetseries.owasp.org/cheatsheets/Cross-Site_Request_Forgery_Prevention_Cheat_Sheet.html",
    action="CSRF Prevention",
    mitigation=(
        "Try to use anti-CSRF tokens ot the double-submit patterns (at least for logged-in requests). "
        "When your authentication scheme depends on cookies (like session or token cookies), consider marking them with "
        "the same-site flag. "
        "When a third-party product is used instead of custom developed software, check if the product applies the proper "
        "mitigation and ensure a reasonable patch-level."
    ),
    check="Are recommendations from the linked cheat sheet and referenced ASVS chapter applied?",
    function=RiskFunction.DEVELOPMENT,
    stride=STRIDE.SPOOFING,
    detection_logic="In-scope web applications accessed via typical web access protocols.",
    risk_assessment="The risk rating depends on the integrity rating of the data sent across the communication link.",
    false_positives=(
        "Web applications passing the authentication sate via custom headers instead of cookies can "
        "eventually be false positives. Also when the web application "
        "is not accessed via a browser-like component (i.e not by a human user initiating the request that "
        "gets passed through all components until it reaches the web application) this can be considered a false positive."
    ),
    model_failure_possible_reason=False,
    cwe=352,
)

SUPPORTED_TAGS: list[str] = []


def generate_risks(ctx: AnalysisContext) -> list[Risk]:
    model = ctx.model
    risks = []
    for asset in model.sorted_technical_assets():
        if asset.out_of_scope or not asset.technology.is_web_application():
            continue
        for incoming in model.incoming_links(asset.id):
            if not incoming.protocol.is_potential_web_access_protocol():
                continue
            likelihood = RiskExploitationLikelihood.VERY_LIKELY
            if incoming.usage is Usage.DEVOPS:
                likelihood = RiskExploitationLikelihood.LIKELY
            risks.append(_create_risk(model, asset, incoming, likelihood))
    return risks


def _create_risk(
    model: ParsedModel,
    asset: TechnicalAsset,
    incoming: CommunicationLink,
    likelihood: RiskExploitationLikelihood,
) -> Risk:
    source = model.technical_assets[incoming.source_id]
    title = (
        "<b>Cross-Site Request Forgery (CSRF)</b> risk at <b>" + asset.title + "</b> via <b>"
        + incoming.title + "</b> from <b>" + source.title + "</b>"
    )
    impact = RiskExploitationImpact.LOW
    if incoming.highest_integrity(model) == Criticality.MISSION_CRITICAL:
        impact = RiskExploitationImpact.MEDIUM
    return Risk(
        category=CATEGORY,
        severity=calculate_severity(likelihood, impact),
        exploitation_likelihood=likelihood,
        exploitation_impact=impact,
        title=title,
        synthetic_id=CATEGORY.id + "@" + asset.id + "@" + incoming.id,
        most_relevant_technical_asset_id=asset.id,
        most_relevant_communication_link_id=incoming.id,
        data_breach_probability=DataBreachProbability.IMPROBABLE,
        data_breach_technical_asset_ids=[asset.id],
    )


RULE = RiskRule(CATEGORY, tuple(SUPPORTED_TAGS), generate_risks)
