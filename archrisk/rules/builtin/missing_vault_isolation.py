"""Vaults sharing a network segment with unrelated assets."""

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
    RiskExploitationImpact,
    RiskExploitationLikelihood,
    RiskFunction,
    TechnicalAssetType,
    Technology,
    TrustBoundaryType,
)

CATEGORY = RiskCategory(
    id="missing-vault-isolation",
    title="Missing Vault Isolation",
    description=(
        "Highly sensitive vault assets and their datastores should be isolated from other assets "
        f"by their own network segmentation trust-boundary ({TrustBoundaryType.EXECUTION_ENVIRONMENT} boundaries do "
        "not count as network isolation)."
    ),
    impact=(
        "If this risk is unmitigated, attackers successfully attacking other components of the system might have an "
        "easy path towards highly sensitive vault assets and their datastores, as they are not separated by network "
        "segmentation."
    ),
    asvs="V1 - Architecture, Design and Threat Modeling Requirements",
    cheat_sheet="https://cheatsheetseries.owasp.org/cheatsheets/Attack_Surface_Analysis_Cheat_Sheet.html",
    action="Network Segmentation",
    mitigation="Apply a network segmentation trust-boundary around the highly sensitive vault assets and their datastores.",
    check="Are recommendations from the linked cheat sheet and referenced ASVS chapter applied?",
    function=RiskFunction.OPERATIONS,
    stride=STRIDE.ELEVATION_OF_PRIVILEGE,
    detection_logic=(
        "In-scope vault assets "
        "when surrounded by other (not vault-related) assets (without a network trust-boundary in-between). "
        "This risk is especially prevalent when other non-vault related assets are within the same execution "
        "environment (i.e. same database or same application server)."
    ),
    risk_assessment=(
        f"Default is {RiskExploitationImpact.MEDIUM} impact. The impact is increased to {RiskExploitationImpact.HIGH} "
        f"when the asset missing the trust-boundary protection is rated as {Confidentiality.STRICTLY_CONFIDENTIAL} or "
        f"{Criticality.MISSION_CRITICAL}."
    ),
    false_positives=(
        "When all assets within the network segmentation trust-boundary are hardened and protected to the same extend "
        "as if all were vaults with data of highest sensitivity."
    ),
    model_failure_possible_reason=False,
    cwe=1008,
)

SUPPORTED_TAGS: list[str] = []


def _is_vault_storage(model: ParsedModel, vault: TechnicalAsset, storage: TechnicalAsset) -> bool:
    return storage.type is TechnicalAssetType.DATASTORE and vault.has_direct_connection(model, storage.id)


def generate_risks(ctx: AnalysisContext) -> list[Risk]:
    model = ctx.model
    risks = []
    for asset in model.sorted_technical_assets():
        if asset.out_of_scope or asset.technology is not Technology.VAULT:
            continue
        more_impact = (
            asset.confidentiality == Confidentiality.STRICTLY_CONFIDENTIAL
            or asset.integrity == Criticality.MISSION_CRITICAL
            or asset.availability == Criticality.MISSION_CRITICAL
        )
        same_execution_env = False
        create_risk_entry = False
        for candidate in model.sorted_technical_assets():
            if candidate.id == asset.id:
                continue
            if candidate.technology is Technology.VAULT or _is_vault_storage(model, asset, candidate):
                continue
            if asset.is_same_execution_environment(model, candidate.id):
                create_risk_entry = True
                same_execution_env = True
            elif asset.is_same_trust_boundary_network_only(model, candidate.id):
                create_risk_entry = True
        if create_risk_entry:
            risks.append(_create_risk(asset, more_impact, same_execution_env))
    return risks


def _create_risk(asset: TechnicalAsset, more_impact: bool, same_execution_env: bool) -> Risk:
    impact = RiskExploitationImpact.HIGH if more_impact else RiskExploitationImpact.MEDIUM
    likelihood = RiskExploitationLikelihood.UNLIKELY
    others = "<b>in the same network segment</b>"
    if same_execution_env:
        likelihood = RiskExploitationLikelihood.LIKELY
        others = "<b>in the same execution environment</b>"
    return Risk(
        category=CATEGORY,
        severity=calculate_severity(likelihood, impact),
        exploitation_likelihood=likelihood,
        exploitation_impact=impact,
        title=(
            "<b>Missing Vault Isolation</b> to further encapsulate and protect vault-related asset <b>" + asset.title
            + "</b> against unrelated lower protected assets " + others
            + ", which might be easier to compromise by attackers"
        ),
        synthetic_id=CATEGORY.id + "@" + asset.id,
        most_relevant_technical_asset_id=asset.id,
        data_breach_probability=DataBreachProbability.IMPROBABLE,
        data_breach_technical_asset_ids=[asset.id],
    )


RULE = RiskRule(CATEGORY, tuple(SUPPORTED_TAGS), generate_risks)
