"""Callers of search engines and indexes over typical search protocols."""

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
    Technology,
    Usage,
)

CATEGORY = RiskCategory(
    id="search-query-injection",
    title="Search-Query Injection",
    description=(
        "When a search engine server is accessed Search-Query Injection risks might arise."
        "<br><br>See for example <a href=\"https://github.com/veracode-research/solr-injection\">"
        "https://github.com/veracode-research/solr-injection</a> and "
        "<a href=\"https://github.com/veracode-research/solr-injection/blob/master/slides/"
        "DEFCON-27-Michael-Stepankin-Apache-Solr-Injection.pdf\">https://github.com/veracode-research/solr-injection/"
        "blob/master/slides/DEFCON-27-Michael-Stepankin-Apache-Solr-Injection.pdf</a> "
        "for more details (here related to Solr, but in general showcasing the topic of search query injections)."
    ),
    impact=(
        "If this risk remains unmitigated, attackers might be able to read more data from the search index and "
        "eventually further escalate towards a deeper system penetration via code executions."
    ),
    asvs="V5 - Validation, Sanitization and Encoding Verification Requirements",
    cheat_sheet="https://cheatsheetseries.owasp.org/cheatsheets/Injection_Prevention_Cheat_Sheet.html",
    action="Search-Query Injection Prevention",
    mitigation=(
        "Try to use libraries that properly encode search query meta characters in searches and don't expose the "
        "query unfiltered to the caller. "
        "When a third-party product is used instead of custom developed software, check if the product applies the "
        "proper mitigation and ensure a reasonable patch-level."
    ),
    check="Are recommendations from the linked cheat sheet and referenced ASVS chapter applied?",
    function=RiskFunction.DEVELOPMENT,
    stride=STRIDE.TAMPERING,
    detection_logic="In-scope clients accessing search engine servers via typical search access protocols.",
    risk_assessment=(
        "The risk rating depends on the sensitivity of the search engine server itself and of the data assets "
        "processed or stored."
    ),
    false_positives=(
        "Server engine queries by search values not consisting of parts controllable by the caller can be considered "
        "as false positives after individual review."
    ),
    model_failure_possible_reason=False,
    cwe=74,
)

SUPPORTED_TAGS: list[str] = []

_SEARCH_PROTOCOLS = (Protocol.HTTP, Protocol.HTTPS, Protocol.BINARY, Protocol.BINARY_ENCRYPTED)


def generate_risks(ctx: AnalysisContext) -> list[Risk]:
    model = ctx.model
    risks = []
    for asset in model.sorted_technical_assets():
        if asset.technology not in (Technology.SEARCH_ENGINE, Technology.SEARCH_INDEX):
            continue
        for link in model.incoming_links(asset.id):
            if model.technical_assets[link.source_id].out_of_scope:
                continue
            if link.protocol in _SEARCH_PROTOCOLS:
                likelihood = RiskExploitationLikelihood.VERY_LIKELY
                if link.usage is Usage.DEVOPS:
                    likelihood = RiskExploitationLikelihood.LIKELY
                risks.append(_create_risk(model, asset, link, likelihood))
    return risks


def _create_risk(
    model: ParsedModel,
    asset: TechnicalAsset,
    incoming_flow: CommunicationLink,
    likelihood: RiskExploitationLikelihood,
) -> Risk:
    caller = model.technical_assets[incoming_flow.source_id]
    confidentiality = asset.highest_confidentiality(model)
    integrity = asset.highest_integrity(model)
    impact = RiskExploitationImpact.MEDIUM
    if confidentiality == Confidentiality.STRICTLY_CONFIDENTIAL or integrity == Criticality.MISSION_CRITICAL:
        impact = RiskExploitationImpact.HIGH
    elif confidentiality <= Confidentiality.INTERNAL and integrity == Criticality.OPERATIONAL:
        impact = RiskExploitationImpact.LOW
    return Risk(
        category=CATEGORY,
        severity=calculate_severity(likelihood, impact),
        exploitation_likelihood=likelihood,
        exploitation_impact=impact,
        title=(
            "<b>Search Query Injection</b> risk at <b>" + caller.title + "</b> against search engine server <b>"
            + asset.title + "</b>" + " via <b>" + incoming_flow.title + "</b>"
        ),
        synthetic_id=CATEGORY.id + "@" + caller.id + "@" + asset.id + "@" + incoming_flow.id,
        most_relevant_technical_asset_id=caller.id,
        most_relevant_communication_link_id=incoming_flow.id,
        data_breach_probability=DataBreachProbability.PROBABLE,
        data_breach_technical_asset_ids=[asset.id],
    )


RULE = RiskRule(CATEGORY, tuple(SUPPORTED_TAGS), generate_risks)
