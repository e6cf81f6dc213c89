"""Assets accepting serialized objects or remote object protocols."""

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
    Protocol,
    RiskExploitationImpact,
    RiskExploitationLikelihood,
    RiskFunction,
    Technology,
)

CATEGORY = RiskCategory(
    id="untrusted-deserialization",
    title="Untrusted Deserialization",
    description=(
        "When a technical asset accepts data in a specific serialized form (like Java or .NET serialization), "
        "Untrusted Deserialization risks might arise."
        "<br><br>See <a href=\"https://christian-schneider.net/JavaDeserializationSecurityFAQ.html\">"
        "https://christian-schneider.net/JavaDeserializationSecurityFAQ.html</a> for more details."
    ),
    impact=(
        "If this risk is unmitigated, attackers might be able to execute code on target systems by exploiting "
        "untrusted deserialization endpoints."
    ),
    asvs="V5 - Validation, Sanitization and Encoding Verification Requirements",
    cheat_sheet="https://cheatsheetseries.owasp.org/cheatsheets/Deserialization_Cheat_Sheet.html",
    action="Prevention of Deserialization of Untrusted Data",
    mitigation=(
        "Try to avoid the deserialization of untrusted data (even of data within the same trust-boundary as long as "
        "it is sent across a remote connection) in order to stay safe from Untrusted Deserialization vulnerabilities. "
        "Alternatively a strict whitelisting approach of the classes/types/values to deserialize might help as well. "
        "When a third-party product is used instead of custom developed software, check if the product applies the "
        "proper mitigation and ensure a reasonable patch-level."
    ),
    check="Are recommendations from the linked cheat sheet and referenced ASVS chapter applied?",
    function=RiskFunction.ARCHITECTURE,
    stride=STRIDE.TAMPERING,
    detection_logic="In-scope technical assets accepting serialization data formats (including EJB and RMI protocols).",
    risk_assessment=(
        "The risk rating depends on the sensitivity of the technical asset itself and of the data assets processed and stored."
    ),
    false_positives=(
        "Fully trusted (i.e. cryptographically signed or similar) data deserialized can be considered "
        "as false positives after individual review."
    ),
    model_failure_possible_reason=False,
    cwe=502,
)

SUPPORTED_TAGS: list[str] = []

_REMOTE_OBJECT_PROTOCOLS = (Protocol.IIOP, Protocol.IIOP_ENCRYPTED, Protocol.JRMP, Protocol.JRMP_ENCRYPTED)


def generate_risks(ctx: AnalysisContext) -> list[Risk]:
    model = ctx.model
    risks = []
    for asset in model.sorted_technical_assets():
        if asset.out_of_scope:
            continue
        has_one = DataFormat.SERIALIZATION in asset.data_formats_accepted or asset.technology is Technology.EJB
        across_trust_boundary = False
        link_title = ""
        for link in model.incoming_links(asset.id):
            if link.protocol in _REMOTE_OBJECT_PROTOCOLS:
                has_one = True
                if link.is_across_trust_boundary_network_only(model):
                    across_trust_boundary = True
                    link_title = link.title
        if has_one:
            risks.append(_create_risk(model, asset, across_trust_boundary, link_title))
    return risks


def _create_risk(model: ParsedModel, asset: TechnicalAsset, across_trust_boundary: bool, link_title: str) -> Risk:
    title = "<b>Untrusted Deserialization</b> risk at <b>" + asset.title + "</b>"
    impact = RiskExploitationImpact.HIGH
    likelihood = RiskExploitationLikelihood.LIKELY
    if across_trust_boundary:
        likelihood = RiskExploitationLikelihood.VERY_LIKELY
        title += " across a trust boundary (at least via communication link <b>" + link_title + "</b>)"
    if (asset.highest_confidentiality(model) == Confidentiality.STRICTLY_CONFIDENTIAL
            or asset.highest_integrity(model) == Criticality.MISSION_CRITICAL
            or asset.highest_availability(model) == Criticality.MISSION_CRITICAL):
        impact = RiskExploitationImpact.VERY_HIGH
    return Risk(
        category=CATEGORY,
        severity=calculate_severity(likelihood, impact),
        exploitation_likelihood=likelihood,
        exploitation_impact=impact,
        title=title,
        synthetic_id=CATEGORY.id + "@" + asset.id,
        most_relevant_technical_asset_id=asset.id,
        data_breach_probability=DataBreachProbability.PROBABLE,
        data_breach_technical_asset_ids=[asset.id],
    )


RULE = RiskRule(CATEGORY, tuple(SUPPORTED_TAGS), generate_risks)
