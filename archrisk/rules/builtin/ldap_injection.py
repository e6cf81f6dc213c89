"""LDAP-Injection from in-scope callers against LDAP servers."""

from __future__ import annotations

from archrisk.context import AnalysisContext
from archrisk.models import CommunicationLink, ParsedModel, Risk, RiskCategory, TechnicalAsset
from archrisk.risks import calculate_severity
from archrisk.rules.registry import RiskRule
from archrisk.types import (
    STRIDE,
    Confidentiality,
    Criticality,
    DataBreachProbability,
    Protocol,
    RiskExploitationImpact,
    RiskExploitationLikelihood,
    RiskFunction,
    Usage,
)

CATEGORY = RiskCategory(
    id="ldap-injection",
    title="LDAP-Injection",
    description=(
        "When an LDAP server is accessed LDAP-Injection risks might arise. "
        "The risk rating depends on the sensitivity of the LDAP server itself and of the data assets processed or stored."
    ),
    impact=(
        "If this risk remains unmitigated, attackers might be able to modify LDAP queries and access more data from the "
        "LDAP server than allowed."
    ),
    asvs="V5 - Validation, Sanitization and Encoding Verification Requirements",
    cheat_sheet="https://cheatsheetseries.owasp.org/cheatsheets/LDAP_Injection_Prevention_Cheat_Sheet.html",
    action="LDAP-Injection Prevention",
    mitigation=(
        "Try to use libraries that properly encode LDAP meta characters in searches and queries to access "
        "the LDAP sever in order to stay safe from LDAP-Injection vulnerabilities. "
        "When a third-party product is used instead of custom developed software, check if the product applies the proper "
        "mitigation and ensure a reasonable patch-level."
    ),
    check="Are recommendations from the linked cheat sheet and referenced ASVS chapter applied?",
    function=RiskFunction.DEVELOPMENT,
    stride=STRIDE.TAMPERING,
    detection_logic="In-scope clients accessing LDAP servers via typical LDAP access protocols.",
    risk_assessment=(
        "The risk rating depends on the sensitivity of the LDAP server itself and of the data assets processed or stored."
    ),
    false_positives=(
        "LDAP server queries by search values not consisting of parts controllable by the caller can be considered "
        "as false positives after individual review."
    ),
    model_failure_possible_reason=False,
    cwe=90,
)

SUPPORTED_TAGS: list[str] = []


def generate_risks(ctx: AnalysisContext) -> list[Risk]:
    model = ctx.model
    risks = []
    # the server's own scope does not matter, only the caller's
    for asset in model.sorted_technical_assets():
        for incoming in model.incoming_links(asset.id):
            if model.technical_assets[incoming.source_id].out_of_scope:
                continue
            if incoming.protocol not in (Protocol.LDAP, Protocol.LDAPS):
                continue
            likelihood = RiskExploitationLikelihood.LIKELY
            if incoming.usage is Usage.DEVOPS:
                likelihood = RiskExploitationLikelihood.UNLIKELY
            risks.append(_create_risk(model, asset, incoming, likelihood))
    return risks


def _create_risk(
    model: ParsedModel,
    asset: TechnicalAsset,
    incoming: CommunicationLink,
    likelihood: RiskExploitationLikelihood,
) -> Risk:
    caller = model.technical_assets[incoming.source_id]
    title = (
        "<b>LDAP-Injection</b> risk at <b>" + caller.title + "</b> against LDAP server <b>" + asset.title + "</b>"
        + " via <b>" + incoming.title + "</b>"
    )
    impact = RiskExploitationImpact.MEDIUM
    if (asset.highest_confidentiality(model) == Confidentiality.STRICTLY_CONFIDENTIAL
            or asset.highest_integrity(model) == Criticality.MISSION_CRITICAL):
        impact = RiskExploitationImpact.HIGH
    return Risk(
        category=CATEGORY,
        severity=calculate_severity(likelihood, impact),
        exploitation_likelihood=likelihood,
        exploitation_impact=impact,
        title=title,
        synthetic_id=CATEGORY.id + "@" + caller.id + "@" + asset.id + "@" + incoming.id,
        most_relevant_technical_asset_id=caller.id,
        most_relevant_communication_link_id=incoming.id,
        data_breach_probability=DataBreachProbability.PROBABLE,
        data_breach_technical_asset_ids=[asset.id],
    )


RULE = RiskRule(CATEGORY, tuple(SUPPORTED_TAGS), generate_risks)
