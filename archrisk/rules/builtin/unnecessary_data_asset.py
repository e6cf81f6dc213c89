"""Data assets nothing processes, stores or transfers."""

from __future__ import annotations

from archrisk.context import AnalysisContext
from archrisk.models import DataAsset, Risk, RiskCategory
from archrisk.risks import calculate_severity
from archrisk.rules.registry import RiskRule
from archrisk.types import (
    STRIDE,
    DataBreachProbability,
    RiskExploitationImpact,
    RiskExploitationLikelihood,
    RiskFunction,
    RiskSeverity,
)

CATEGORY = RiskCategory(
    id="unnecessary-data-asset",
    title="Unnecessary Data Asset",
    description=(
        "When a data asset is not processed or stored by any data assets and also not transferred by any "
        "communication links, this is an indicator for an unnecessary data asset (or for an incomplete model)."
    ),
    impact="If this risk is unmitigated, attackers might be able to access unnecessary data assets using other vulnerabilities.",
    asvs="V1 - Architecture, Design and Threat Modeling Requirements",
    cheat_sheet="https://cheatsheetseries.owasp.org/cheatsheets/Attack_Surface_Analysis_Cheat_Sheet.html",
    action="Attack Surface Reduction",
    mitigation="Try to avoid having data assets that are not required/used.",
    check="Are recommendations from the linked cheat sheet and referenced ASVS chapter applied?",
    function=RiskFunction.ARCHITECTURE,
    stride=STRIDE.ELEVATION_OF_PRIVILEGE,
    detection_logic=(
        "Modelled data assets not processed or stored by any data assets and also not transferred by any "
        "communication links."
    ),
    risk_assessment=str(RiskSeverity.LOW),
    false_positives="Usually no false positives as this looks like an incomplete model.",
    model_failure_possible_reason=True,
    cwe=1008,
)

SUPPORTED_TAGS: list[str] = []


def generate_risks(ctx: AnalysisContext) -> list[Risk]:
    model = ctx.model
    unused = set(model.data_assets)
    for asset in model.technical_assets.values():
        unused.difference_update(asset.data_assets_processed)
        unused.difference_update(asset.data_assets_stored)
        for link in asset.communication_links:
            unused.difference_update(link.data_assets_sent)
            unused.difference_update(link.data_assets_received)
    return [_create_risk(model.data_assets[data_id]) for data_id in sorted(unused)]


def _create_risk(data_asset: DataAsset) -> Risk:
    return Risk(
        category=CATEGORY,
        severity=calculate_severity(RiskExploitationLikelihood.UNLIKELY, RiskExploitationImpact.LOW),
        exploitation_likelihood=RiskExploitationLikelihood.UNLIKELY,
        exploitation_impact=RiskExploitationImpact.LOW,
        title="<b>Unnecessary Data Asset</b> named <b>" + data_asset.title + "</b>",
        synthetic_id=CATEGORY.id + "@" + data_asset.id,
        most_relevant_data_asset_id=data_asset.id,
        data_breach_probability=DataBreachProbability.IMPROBABLE,
        data_breach_technical_asset_ids=[data_asset.id],
    )


RULE = RiskRule(CATEGORY, tuple(SUPPORTED_TAGS), generate_risks)
