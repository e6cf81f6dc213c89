"""Datastores reached directly across a network trust boundary."""

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
    TechnicalAssetType,
    Technology,
    Usage,
)

RAA_LIMIT = 40

CATEGORY = RiskCategory(
    id="unguarded-direct-datastore-access",
    title="Unguarded Direct Datastore Access",
    description="Datastores accessed across trust boundaries must be guarded by some protecting service or application.",
    impact=(
        "If this risk is unmitigated, attackers might be able to directly attack sensitive datastores without any "
        "protecting components in-between."
    ),
    asvs="V1 - Architecture, Design and Threat Modeling Requirements",
    cheat_sheet="https://cheatsheetseries.owasp.org/cheatsheets/Attack_Surface_Analysis_Cheat_Sheet.html",
    action="Encapsulation of Datastore",
    mitigation="Encapsulate the datastore access behind a guarding service or application.",
    check="Are recommendations from the linked cheat sheet and referenced ASVS chapter applied?",
    function=RiskFunction.ARCHITECTURE,
    stride=STRIDE.ELEVATION_OF_PRIVILEGE,
    detection_logic=(
        f"In-scope technical assets of type {TechnicalAssetType.DATASTORE} (except {Technology.IDENTITY_STORE_LDAP} "
        f"when accessed from {Technology.IDENTITY_PROVIDER} and {Technology.FILE_SERVER} when accessed via file "
        f"transfer protocols) with confidentiality rating of {Confidentiality.CONFIDENTIAL} (or higher) or with "
        f"integrity rating of {Criticality.CRITICAL} (or higher) which have incoming data-flows from assets outside "
        "across a network trust-boundary. DevOps config and deployment access is excluded from this risk."
    ),
    risk_assessment=(
        f"The matching technical assets are at {RiskSeverity.LOW} risk. When either the confidentiality rating is "
        f"{Confidentiality.STRICTLY_CONFIDENTIAL} or the integrity rating is {Criticality.MISSION_CRITICAL}, the "
        f"risk-rating is considered {RiskSeverity.MEDIUM}. For assets with RAA values higher than {RAA_LIMIT} % the "
        "risk-rating increases."
    ),
    false_positives="When the caller is considered fully trusted as if it was part of the datastore itself.",
    model_failure_possible_reason=False,
    cwe=501,
)

SUPPORTED_TAGS: list[str] = []


def is_file_server_access_via_ftp(asset: TechnicalAsset, link: CommunicationLink) -> bool:
    return asset.technology is Technology.FILE_SERVER and link.protocol in (Protocol.FTP, Protocol.FTPS, Protocol.SFTP)


def generate_risks(ctx: AnalysisContext) -> list[Risk]:
    model = ctx.model
    risks = []
    for asset in model.sorted_technical_assets():
        if asset.out_of_scope or asset.type is not TechnicalAssetType.DATASTORE:
            continue
        for link in model.incoming_links(asset.id):
            source = model.technical_assets[link.source_id]
            if (asset.technology in (Technology.IDENTITY_STORE_LDAP, Technology.IDENTITY_STORE_DATABASE)
                    and source.technology is Technology.IDENTITY_PROVIDER):
                continue
            if asset.confidentiality < Confidentiality.CONFIDENTIAL and asset.integrity < Criticality.CRITICAL:
                continue
            if (link.is_across_trust_boundary_network_only(model)
                    and not is_file_server_access_via_ftp(asset, link)
                    and link.usage is not Usage.DEVOPS
                    and not model.is_sharing_same_parent_trust_boundary(asset, source)):
                high_risk = (
                    asset.confidentiality == Confidentiality.STRICTLY_CONFIDENTIAL
                    or asset.integrity == Criticality.MISSION_CRITICAL
                )
                risks.append(_create_risk(asset, link, source, high_risk))
    return risks


def _create_risk(
    datastore: TechnicalAsset, data_flow: CommunicationLink, client: TechnicalAsset, more_risky: bool
) -> Risk:
    impact = RiskExploitationImpact.LOW
    if more_risky or datastore.raa > RAA_LIMIT:
        impact = RiskExploitationImpact.MEDIUM
    return Risk(
        category=CATEGORY,
        severity=calculate_severity(RiskExploitationLikelihood.LIKELY, impact),
        exploitation_likelihood=RiskExploitationLikelihood.LIKELY,
        exploitation_impact=impact,
        title=(
            "<b>Unguarded Direct Datastore Access</b> of <b>" + datastore.title + "</b> by <b>" + client.title
            + "</b> via <b>" + data_flow.title + "</b>"
        ),
        synthetic_id=CATEGORY.id + "@" + data_flow.id + "@" + client.id + "@" + datastore.id,
        most_relevant_technical_asset_id=datastore.id,
        most_relevant_communication_link_id=data_flow.id,
        data_breach_probability=DataBreachProbability.IMPROBABLE,
        data_breach_technical_asset_ids=[datastore.id],
    )


RULE = RiskRule(CATEGORY, tuple(SUPPORTED_TAGS), generate_risks)
