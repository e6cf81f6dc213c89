"""Databases reached over database access protocols by in-scope callers."""

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
    RiskExploitationImpact,
    RiskExploitationLikelihood,
    RiskFunction,
    Technology,
    Usage,
)

CATEGORY = RiskCategory(
    id="sql-nosql-injection",
    title="SQL/NoSQL-Injection",
    description=(
        "When a database is accessed via database access protocols SQL/NoSQL-Injection risks might arise. "
        "The risk rating depends on the sensitivity technical asset itself and of the data assets processed or stored."
    ),
    impact=(
        "If this risk is unmitigated, attackers might be able to modify SQL/NoSQL queries to steal and modify data "
        "and eventually further escalate towards a deeper system penetration via code executions."
    ),
    asvs="V5 - Validation, Sanitization and Encoding Verification Requirements",
    cheat_sheet="https://cheatsheetseries.owasp.org/cheatsheets/SQL_Injection_Prevention_Cheat_Sheet.html",
    action="SQL/NoSQL-Injection Prevention",
    mitigation=(
        "Try to use parameter binding to be safe from injection vulnerabilities. "
        "When a third-party product is used instead of custom developed software, check if the product applies the "
        "proper mitigation and ensure a reasonable patch-level."
    ),
    check="Are recommendations from the linked cheat sheet and referenced ASVS chapter applied?",
    function=RiskFunction.DEVELOPMENT,
    stride=STRIDE.TAMPERING,
    detection_logic="Database accessed via typical database access protocols by in-scope clients.",
    risk_assessment="The risk rating depends on the sensitivity of the data stored inside the database.",
    false_positives=(
        "Database accesses by queries not consisting of parts controllable by the caller can be considered "
        "as false positives after individual review."
    ),
    model_failure_possible_reason=False,
    cwe=89,
)

SUPPORTED_TAGS: list[str] = []


def generate_risks(ctx: AnalysisContext) -> list[Risk]:
    model = ctx.model
    risks = []
    for asset in model.sorted_technical_assets():
        is_database = asset.technology in (Technology.DATABASE, Technology.IDENTITY_STORE_DATABASE)
        for link in model.incoming_links(asset.id):
            if model.technical_assets[link.source_id].out_of_scope:
                continue
            # lax protocols only count when the target really is a database
            if ((link.protocol.is_potential_database_access_protocol(True) and is_database)
                    or link.protocol.is_potential_database_access_protocol(False)):
                risks.append(_create_risk(model, asset, link))
    return risks


def _create_risk(model: ParsedModel, asset: TechnicalAsset, incoming_flow: CommunicationLink) -> Risk:
    caller = model.technical_assets[incoming_flow.source_id]
    impact = RiskExploitationImpact.MEDIUM
    if (asset.highest_confidentiality(model) == Confidentiality.STRICTLY_CONFIDENTIAL
            or asset.highest_integrity(model) == Criticality.MISSION_CRITICAL):
        impact = RiskExploitationImpact.HIGH
    likelihood = RiskExploitationLikelihood.VERY_LIKELY
    if incoming_flow.usage is Usage.DEVOPS:
        likelihood = RiskExploitationLikelihood.LIKELY
    return Risk(
        category=CATEGORY,
        severity=calculate_severity(likelihood, impact),
        exploitation_likelihood=likelihood,
        exploitation_impact=impact,
        title=(
            "<b>SQL/NoSQL-Injection</b> risk at <b>" + caller.title + "</b> against database <b>" + asset.title
            + "</b>" + " via <b>" + incoming_flow.title + "</b>"
        ),
        synthetic_id=CATEGORY.id + "@" + caller.id + "@" + asset.id + "@" + incoming_flow.id,
        most_relevant_technical_asset_id=caller.id,
        most_relevant_communication_link_id=incoming_flow.id,
        data_breach_probability=DataBreachProbability.PROBABLE,
        data_breach_technical_asset_ids=[asset.id],
    )


RULE = RiskRule(CATEGORY, tuple(SUPPORTED_TAGS), generate_risks)
