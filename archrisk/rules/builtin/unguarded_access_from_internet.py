"""Sensitive assets reached directly by internet clients."""

from __future__ import annotations

from archrisk.context import AnalysisContext
from archrisk.models import CommunicationLink, Risk, RiskCategory, TechnicalAsset
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
    RiskSeverity,
    Technology,
)

RAA_LIMIT = 40

CATEGORY = RiskCategory(
    id="unguarded-access-from-internet",
    title="Unguarded Access From Internet",
    description="Internet-exposed assets must be guarded by a protecting service, application, or reverse-proxy.",
    impact=(
        "If this risk is unmitigated, attackers might be able to directly attack sensitive systems without any "
        "hardening components in-between due to them being directly exposed on the internet."
    ),
    asvs="V1 - Architecture, Design and Threat Modeling Requirements",
    cheat_sheet="https://cheatsheetseries.owasp.org/cheatsheets/Attack_Surface_Analysis_Cheat_Sheet.html",
    action="Encapsulation of Technical Asset",
    mitigation=(
        "Encapsulate the asset behind a guarding service, application, or reverse-proxy. "
        "For admin maintenance a bastion-host should be used as a jump-server. "
        "For file transfer a store-and-forward-host should be used as an indirect file exchange platform."
    ),
    check="Are recommendations from the linked cheat sheet and referenced ASVS chapter applied?",
    function=RiskFunction.ARCHITECTURE,
    stride=STRIDE.ELEVATION_OF_PRIVILEGE,
    detection_logic=(
        f"In-scope technical assets (excluding {Technology.LOAD_BALANCER}) with confidentiality rating "
        f"of {Confidentiality.CONFIDENTIAL} (or higher) or with integrity rating of {Criticality.CRITICAL} (or higher) "
        f"when accessed directly from the internet. All {Technology.WEB_SERVER}, {Technology.WEB_APPLICATION}, "
        f"{Technology.REVERSE_PROXY}, {Technology.WAF}, and {Technology.GATEWAY} assets are exempted from this risk "
        "when they do not consist of custom developed code and the data-flow only consists of HTTP or FTP protocols. "
        f"Access from {Technology.MONITORING} systems as well as VPN-protected connections are exempted."
    ),
    risk_assessment=(
        f"The matching technical assets are at {RiskSeverity.LOW} risk. When either the confidentiality rating is "
        f"{Confidentiality.STRICTLY_CONFIDENTIAL} or the integrity rating is {Criticality.MISSION_CRITICAL}, the "
        f"risk-rating is considered {RiskSeverity.MEDIUM}. For assets with RAA values higher than {RAA_LIMIT} % the "
        "risk-rating increases."
    ),
    false_positives=(
        f"When other means of filtering client requests are applied equivalent of {Technology.REVERSE_PROXY}, "
        f"{Technology.WAF}, or {Technology.GATEWAY} components."
    ),
    model_failure_possible_reason=False,
    cwe=501,
)

SUPPORTED_TAGS: list[str] = []

_WEB_FRONT_TECHNOLOGIES = (
    Technology.WEB_SERVER, Technology.WEB_APPLICATION, Technology.REVERSE_PROXY, Technology.WAF, Technology.GATEWAY,
)
_FILE_TRANSFER_PROTOCOLS = (Protocol.FTP, Protocol.FTPS, Protocol.SFTP)


def _is_exempted_standard_traffic(asset: TechnicalAsset, link: CommunicationLink) -> bool:
    if asset.custom_developed_parts:
        return False
    if asset.technology in _WEB_FRONT_TECHNOLOGIES and link.protocol in (Protocol.HTTP, Protocol.HTTPS):
        return True
    return asset.technology is Technology.GATEWAY and link.protocol in _FILE_TRANSFER_PROTOCOLS


def generate_risks(ctx: AnalysisContext) -> list[Risk]:
    model = ctx.model
    risks = []
    for asset in model.sorted_technical_assets():
        if asset.out_of_scope or asset.technology is Technology.LOAD_BALANCER:
            continue
        for link in sorted(model.incoming_links(asset.id), key=lambda c: c.id):
            if _is_exempted_standard_traffic(asset, link):
                continue
            source = model.technical_assets[link.source_id]
            if source.technology is Technology.MONITORING or link.vpn:
                continue
            if asset.confidentiality < Confidentiality.CONFIDENTIAL and asset.integrity < Criticality.CRITICAL:
                continue
            if source.internet:
                high_risk = (
                    asset.confidentiality == Confidentiality.STRICTLY_CONFIDENTIAL
                    or asset.integrity == Criticality.MISSION_CRITICAL
                )
                risks.append(_create_risk(asset, link, source, high_risk))
    return risks


def _create_risk(
    asset: TechnicalAsset, data_flow: CommunicationLink, client_from_internet: TechnicalAsset, more_risky: bool
) -> Risk:
    impact = RiskExploitationImpact.LOW
    if more_risky or asset.raa > RAA_LIMIT:
        impact = RiskExploitationImpact.MEDIUM
    return Risk(
        category=CATEGORY,
        severity=calculate_severity(RiskExploitationLikelihood.VERY_LIKELY, impact),
        exploitation_likelihood=RiskExploitationLikelihood.VERY_LIKELY,
        exploitation_impact=impact,
        title=(
            "<b>Unguarded Access from Internet</b> of <b>" + asset.title + "</b> by <b>" + client_from_internet.title
            + "</b>" + " via <b>" + data_flow.title + "</b>"
        ),
        synthetic_id=CATEGORY.id + "@" + asset.id + "@" + client_from_internet.id + "@" + data_flow.id,
        most_relevant_technical_asset_id=asset.id,
        most_relevant_communication_link_id=data_flow.id,
        data_breach_probability=DataBreachProbability.POSSIBLE,
        data_breach_technical_asset_ids=[asset.id],
    )


RULE = RiskRule(CATEGORY, tuple(SUPPORTED_TAGS), generate_risks)
