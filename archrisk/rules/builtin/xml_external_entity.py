"""Assets accepting XML input."""

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
    DataFormat,
    RiskExploitationImpact,
    RiskExploitationLikelihood,
    RiskFunction,
)

CATEGORY = RiskCategory(
    id="xml-external-entity",
    title="XML External Entity (XXE)",
    description="When a technical asset accepts data in XML format, XML External Entity (XXE) risks might arise.",
    impact=(
        "If this risk is unmitigated, attackers might be able to read sensitive files (configuration data, "
        "key/credential files, deployment files, business data files, etc.) form the filesystem of affected "
        "components and/or access sensitive services or files of other components."
    ),
    asvs="V14 - Configuration Verification Requirements",
    cheat_sheet="https://cheatsheetseries.owasp.org/cheatsheets/XML_External_Entity_Prevention_Cheat_Sheet.html",
    action="XML Parser Hardening",
    mitigation=(
        "Apply hardening of all XML parser instances in order to stay safe from XML External Entity (XXE) "
        "vulnerabilities. When a third-party product is used instead of custom developed software, check if the "
        "product applies the proper mitigation and ensure a reasonable patch-level."
    ),
    check="Are recommendations from the linked cheat sheet and referenced ASVS chapter applied?",
    function=RiskFunction.DEVELOPMENT,
    stride=STRIDE.INFORMATION_DISCLOSURE,
    detection_logic="In-scope technical assets accepting XML data formats.",
    risk_assessment=(
        "The risk rating depends on the sensitivity of the technical asset itself and of the data assets processed "
        "and stored. Also for cloud-based environments the exploitation impact is at least medium, as cloud backend "
        "services can be attacked via SSRF (and XXE vulnerabilities are often also SSRF vulnerabilities)."
    ),
    false_positives=(
        "Fully trusted (i.e. cryptographically signed or similar) XML data can be considered "
        "as false positives after individual review."
    ),
    model_failure_possible_reason=False,
    cwe=611,
)

SUPPORTED_TAGS: list[str] = []


def generate_risks(ctx: AnalysisContext) -> list[Risk]:
    model = ctx.model
    risks = []
    for asset in model.sorted_technical_assets():
        if asset.out_of_scope:
            continue
        for data_format in asset.data_formats_accepted:
            if data_format is DataFormat.XML:
                risks.append(_create_risk(model, asset))
    return risks


def _create_risk(model: ParsedModel, asset: TechnicalAsset) -> Risk:
    impact = RiskExploitationImpact.MEDIUM
    if (asset.highest_confidentiality(model) == Confidentiality.STRICTLY_CONFIDENTIAL
            or asset.highest_integrity(model) == Criticality.MISSION_CRITICAL
            or asset.highest_availability(model) == Criticality.MISSION_CRITICAL):
        impact = RiskExploitationImpact.HIGH
    return Risk(
        category=CATEGORY,
        severity=calculate_severity(RiskExploitationLikelihood.VERY_LIKELY, impact),
        exploitation_likelihood=RiskExploitationLikelihood.VERY_LIKELY,
        exploitation_impact=impact,
        title="<b>XML External Entity (XXE)</b> risk at <b>" + asset.title + "</b>",
        synthetic_id=CATEGORY.id + "@" + asset.id,
        most_relevant_technical_asset_id=asset.id,
        data_breach_probability=DataBreachProbability.PROBABLE,
        data_breach_technical_asset_ids=[asset.id],
    )


RULE = RiskRule(CATEGORY, tuple(SUPPORTED_TAGS), generate_risks)
