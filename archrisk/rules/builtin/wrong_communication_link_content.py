"""Links whose readonly flag or protocol contradicts what they carry or reach."""

from __future__ import annotations

from archrisk.context import AnalysisContext
from archrisk.models import CommunicationLink, Risk, RiskCategory, TechnicalAsset
from archrisk.risks import calculate_severity
from archrisk.rules.registry import RiskRule
from archrisk.types import (
    STRIDE,
    DataBreachProbability,
    Protocol,
    RiskExploitationImpact,
    RiskExploitationLikelihood,
    RiskFunction,
    RiskSeverity,
    TechnicalAssetMachine,
    Technology,
)

CATEGORY = RiskCategory(
    id="wrong-communication-link-content",
    title="Wrong Communication Link Content",
    description=(
        "When a communication link is defined as readonly, but does not receive any data asset, "
        "or when it is defined as not readonly, but does not send any data asset, it is likely to be a model failure."
    ),
    impact="If this potential model error is not fixed, some risks might not be visible.",
    asvs="V1 - Architecture, Design and Threat Modeling Requirements",
    cheat_sheet="https://cheatsheetseries.owasp.org/cheatsheets/Threat_Modeling_Cheat_Sheet.html",
    action="Model Consistency",
    mitigation=(
        "Try to model the correct readonly flag and/or data sent/received of communication links. "
        "Also try to use  communication link types matching the target technology/machine types."
    ),
    check="Are recommendations from the linked cheat sheet and referenced ASVS chapter applied?",
    function=RiskFunction.ARCHITECTURE,
    stride=STRIDE.INFORMATION_DISCLOSURE,
    detection_logic=(
        "Communication links with inconsistent data assets being sent/received not matching their readonly flag or "
        "otherwise inconsistent protocols not matching the target technology type."
    ),
    risk_assessment=str(RiskSeverity.LOW),
    false_positives="Usually no false positives as this looks like an incomplete model.",
    model_failure_possible_reason=True,
    cwe=1008,
)

SUPPORTED_TAGS: list[str] = []

_READONLY_MISMATCH = "(data assets sent/received not matching the communication link's readonly flag)"


def _protocol_mismatch(protocol: Protocol, kind: str, actual: str, expected: str) -> str:
    return f'(protocol type "{protocol}" does not match target {kind} type "{actual}": expected "{expected}")'


def generate_risks(ctx: AnalysisContext) -> list[Risk]:
    model = ctx.model
    risks = []
    for asset in model.sorted_technical_assets():
        for link in asset.communication_links:
            if link.readonly and not link.data_assets_received:
                risks.append(_create_risk(asset, link, _READONLY_MISMATCH))
            elif not link.readonly and not link.data_assets_sent:
                risks.append(_create_risk(asset, link, _READONLY_MISMATCH))
            target = model.technical_assets[link.target_id]
            if link.protocol is Protocol.IN_PROCESS_LIBRARY_CALL and target.technology is not Technology.LIBRARY:
                risks.append(_create_risk(asset, link, _protocol_mismatch(
                    link.protocol, "technology", target.technology, Technology.LIBRARY)))
            if link.protocol is Protocol.LOCAL_FILE_ACCESS and target.technology is not Technology.LOCAL_FILE_SYSTEM:
                risks.append(_create_risk(asset, link, _protocol_mismatch(
                    link.protocol, "technology", target.technology, Technology.LOCAL_FILE_SYSTEM)))
            if link.protocol is Protocol.CONTAINER_SPAWNING and target.machine is not TechnicalAssetMachine.CONTAINER:
                risks.append(_create_risk(asset, link, _protocol_mismatch(
                    link.protocol, "machine", target.machine, TechnicalAssetMachine.CONTAINER)))
    return risks


def _create_risk(asset: TechnicalAsset, link: CommunicationLink, reason: str) -> Risk:
    return Risk(
        category=CATEGORY,
        severity=calculate_severity(RiskExploitationLikelihood.UNLIKELY, RiskExploitationImpact.LOW),
        exploitation_likelihood=RiskExploitationLikelihood.UNLIKELY,
        exploitation_impact=RiskExploitationImpact.LOW,
        title=(
            "<b>Wrong Communication Link Content</b> " + reason + " at <b>" + asset.title + "</b> "
            + "regarding communication link <b>" + link.title + "</b>"
        ),
        synthetic_id=CATEGORY.id + "@" + asset.id + "@" + link.id,
        most_relevant_technical_asset_id=asset.id,
        most_relevant_communication_link_id=link.id,
        data_breach_probability=DataBreachProbability.IMPROBABLE,
        data_breach_technical_asset_ids=[],
    )


RULE = RiskRule(CATEGORY, tuple(SUPPORTED_TAGS), generate_risks)
