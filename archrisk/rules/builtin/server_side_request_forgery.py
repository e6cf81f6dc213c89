"""Server-side components issuing outgoing web requests."""

from __future__ import annotations

from archrisk.context import AnalysisContext
from archrisk.models import CommunicationLink, ParsedModel, Risk, RiskCategory, TechnicalAsset
from archrisk.risks import calculate_severity
from archrisk.rules.registry import RiskRule
from archrisk.types import (
    STRIDE,
    Confidentiality,
    DataBreachProbability,
    RiskExploitationImpact,
    RiskExploitationLikelihood,
    RiskFunction,
    Technology,
    Usage,
)

CATEGORY = RiskCategory(
    id="server-side-request-forgery",
    title="Server-Side Request Forgery (SSRF)",
    description=(
        "When a server system (i.e. not a client) is accessing other server systems via typical web protocols "
        "Server-Side Request Forgery (SSRF) or Local-File-Inclusion (LFI) or Remote-File-Inclusion (RFI) risks might arise. "
    ),
    impact=(
        "If this risk is unmitigated, attackers might be able to access sensitive services or files of "
        "network-reachable components by modifying outgoing calls of affected components."
    ),
    asvs="V12 - File and Resources Verification Requirements",
    cheat_sheet="https://cheatsheetseries.owasp.org/cheatsheets/Server_Side_Request_Forgery_Prevention_Cheat_Sheet.html",
    action="SSRF Prevention",
    mitigation=(
        "Try to avoid constructing the outgoing target URL with caller controllable values. Alternatively use a "
        "mapping (whitelist) when accessing outgoing URLs instead of creating them including caller controllable values. "
        "When a third-party product is used instead of custom developed software, check if the product applies the "
        "proper mitigation and ensure a reasonable patch-level."
    ),
    check="Are recommendations from the linked cheat sheet and referenced ASVS chapter applied?",
    function=RiskFunction.DEVELOPMENT,
    stride=STRIDE.INFORMATION_DISCLOSURE,
    detection_logic=(
        "In-scope non-client systems accessing (using outgoing communication links) targets with either HTTP or "
        "HTTPS protocol."
    ),
    risk_assessment=(
        "The risk rating (low or medium) depends on the sensitivity of the data assets receivable via web protocols "
        "from targets within the same network trust-boundary as well on the sensitivity of the data assets receivable "
        "via web protocols from the target asset itself. Also for cloud-based environments the exploitation impact is "
        "at least medium, as cloud backend services can be attacked via SSRF."
    ),
    false_positives="Servers not sending outgoing web requests can be considered as false positives after review.",
    model_failure_possible_reason=False,
    cwe=918,
)

SUPPORTED_TAGS: list[str] = []


def generate_risks(ctx: AnalysisContext) -> list[Risk]:
    model = ctx.model
    risks = []
    for asset in model.sorted_technical_assets():
        if asset.out_of_scope or asset.technology.is_client() or asset.technology is Technology.LOAD_BALANCER:
            continue
        for link in asset.communication_links:
            if link.protocol.is_potential_web_access_protocol():
                risks.append(_create_risk(model, asset, link))
    return risks


def _create_risk(model: ParsedModel, asset: TechnicalAsset, outgoing_flow: CommunicationLink) -> Risk:
    target = model.technical_assets[outgoing_flow.target_id]
    impact = RiskExploitationImpact.LOW
    # the target itself can sit in another trust boundary
    if target.highest_confidentiality(model) == Confidentiality.STRICTLY_CONFIDENTIAL:
        impact = RiskExploitationImpact.MEDIUM
    # every web-reachable asset inside the same network boundary is a potential target
    breached_ids = {asset.id}
    for candidate in model.sorted_technical_assets():
        if not asset.is_same_trust_boundary_network_only(model, candidate.id):
            continue
        for incoming in model.incoming_links(candidate.id):
            if incoming.protocol.is_potential_web_access_protocol():
                breached_ids.add(candidate.id)
                if candidate.highest_confidentiality(model) == Confidentiality.STRICTLY_CONFIDENTIAL:
                    impact = RiskExploitationImpact.MEDIUM
    boundary = model.direct_trust_boundary_by_asset.get(asset.id)
    if impact is RiskExploitationImpact.LOW and boundary is not None and boundary.type.is_within_cloud():
        impact = RiskExploitationImpact.MEDIUM
    likelihood = RiskExploitationLikelihood.LIKELY
    if outgoing_flow.usage is Usage.DEVOPS:
        likelihood = RiskExploitationLikelihood.UNLIKELY
    return Risk(
        category=CATEGORY,
        severity=calculate_severity(likelihood, impact),
        exploitation_likelihood=likelihood,
        exploitation_impact=impact,
        title=(
            "<b>Server-Side Request Forgery (SSRF)</b> risk at <b>" + asset.title + "</b> server-side web-requesting "
            + "the target <b>" + target.title + "</b> via <b>" + outgoing_flow.title + "</b>"
        ),
        synthetic_id=CATEGORY.id + "@" + asset.id + "@" + target.id + "@" + outgoing_flow.id,
        most_relevant_technical_asset_id=asset.id,
        most_relevant_communication_link_id=outgoing_flow.id,
        data_breach_probability=DataBreachProbability.POSSIBLE,
        data_breach_technical_asset_ids=sorted(breached_ids),
    )


RULE = RiskRule(CATEGORY, tuple(SUPPORTED_TAGS), generate_risks)
