"""Communication links moving sensitive data without transport encryption."""

from __future__ import annotations

from archrisk.context import AnalysisContext
from archrisk.models import CommunicationLink, DataAsset, ParsedModel, Risk, RiskCategory, TechnicalAsset
from archrisk.risks import calculate_severity
from archrisk.rules.registry import RiskRule
from archrisk.types import (
    STRIDE,
    Authentication,
    Confidentiality,
    Criticality,
    DataBreachProbability,
    Protocol,
    RiskExploitationImpact,
    RiskExploitationLikelihood,
    RiskFunction,
    Technology,
)

CATEGORY = RiskCategory(
    id="unencrypted-communication",
    title="Unencrypted Communication",
    description=(
        "Due to the confidentiality and/or integrity rating of the data assets transferred over the "
        "communication link this connection must be encrypted."
    ),
    impact=(
        "If this risk is unmitigated, network attackers might be able to to eavesdrop on unencrypted sensitive data "
        "sent between components."
    ),
    asvs="V9 - Communication Verification Requirements",
    cheat_sheet="https://cheatsheetseries.owasp.org/cheatsheets/Transport_Layer_Protection_Cheat_Sheet.html",
    action="Encryption of Communication Links",
    mitigation="Apply transport layer encryption to the communication link.",
    check="Are recommendations from the linked cheat sheet and referenced ASVS chapter applied?",
    function=RiskFunction.OPERATIONS,
    stride=STRIDE.INFORMATION_DISCLOSURE,
    detection_logic=(
        f"Unencrypted technical communication links of in-scope technical assets (excluding {Technology.MONITORING} "
        f"traffic as well as {Protocol.LOCAL_FILE_ACCESS} and {Protocol.IN_PROCESS_LIBRARY_CALL}) "
        "transferring sensitive data."
    ),
    risk_assessment="Depending on the confidentiality rating of the transferred data-assets either medium or high risk.",
    false_positives=(
        "When all sensitive data sent over the communication link is already fully encrypted on document or data level. "
        "Also intra-container/pod communication can be considered false positive when container orchestration "
        "platform handles encryption."
    ),
    model_failure_possible_reason=False,
    cwe=319,
)

SUPPORTED_TAGS: list[str] = []


def _is_high_sensitivity(data_asset: DataAsset) -> bool:
    return (data_asset.confidentiality == Confidentiality.STRICTLY_CONFIDENTIAL
            or data_asset.integrity == Criticality.MISSION_CRITICAL)


def _is_medium_sensitivity(data_asset: DataAsset) -> bool:
    return data_asset.confidentiality == Confidentiality.CONFIDENTIAL or data_asset.integrity == Criticality.CRITICAL


def _classify(model: ParsedModel, link: CommunicationLink, data_ids: list[str], transferring_auth_data: bool):
    """Return True for a high risk, False for a medium one, None when nothing qualifies."""
    for data_id in data_ids:
        data_asset = model.data_assets[data_id]
        if _is_high_sensitivity(data_asset) or transferring_auth_data:
            return True
        if not link.vpn and _is_medium_sensitivity(data_asset):
            return False
    return None


def generate_risks(ctx: AnalysisContext) -> list[Risk]:
    model = ctx.model
    risks = []
    for asset in model.sorted_technical_assets():
        if asset.out_of_scope:
            continue
        for link in asset.communication_links:
            target = model.technical_assets[link.target_id]
            if link.protocol.is_encrypted() or link.protocol.is_process_local():
                continue
            if (asset.technology.is_unprotected_comms_tolerated()
                    or target.technology.is_unprotected_comms_tolerated()):
                continue
            transferring_auth_data = link.authentication is not Authentication.NONE
            high_risk = _classify(model, link, link.data_assets_sent, transferring_auth_data)
            if high_risk is None:
                high_risk = _classify(model, link, link.data_assets_received, transferring_auth_data)
            if high_risk is not None:
                risks.append(_create_risk(model, asset, link, high_risk, transferring_auth_data))
    return risks


def _create_risk(
    model: ParsedModel,
    asset: TechnicalAsset,
    data_flow: CommunicationLink,
    high_risk: bool,
    transferring_auth_data: bool,
) -> Risk:
    impact = RiskExploitationImpact.HIGH if high_risk else RiskExploitationImpact.MEDIUM
    target = model.technical_assets[data_flow.target_id]
    title = (
        "<b>Unencrypted Communication</b> named <b>" + data_flow.title + "</b> between <b>" + asset.title
        + "</b> and <b>" + target.title + "</b>"
    )
    if transferring_auth_data:
        title += " transferring authentication data (like credentials, token, session-id, etc.)"
    if data_flow.vpn:
        title += (
            " (even VPN-protected connections need to encrypt their data in-transit when confidentiality is "
            f"rated {Confidentiality.STRICTLY_CONFIDENTIAL} or integrity is rated {Criticality.MISSION_CRITICAL})"
        )
    likelihood = RiskExploitationLikelihood.UNLIKELY
    if data_flow.is_across_trust_boundary_network_only(model):
        likelihood = RiskExploitationLikelihood.LIKELY
    return Risk(
        category=CATEGORY,
        severity=calculate_severity(likelihood, impact),
        exploitation_likelihood=likelihood,
        exploitation_impact=impact,
        title=title,
        synthetic_id=CATEGORY.id + "@" + data_flow.id + "@" + asset.id + "@" + target.id,
        most_relevant_technical_asset_id=asset.id,
        most_relevant_communication_link_id=data_flow.id,
        data_breach_probability=DataBreachProbability.POSSIBLE,
        data_breach_technical_asset_ids=[target.id],
    )


RULE = RiskRule(CATEGORY, tuple(SUPPORTED_TAGS), generate_risks)
