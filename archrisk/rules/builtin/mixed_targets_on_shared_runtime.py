"""Shared runtimes hosting assets of different trust levels."""

from __future__ import annotations

from archrisk.context import AnalysisContext
from archrisk.models import ParsedModel, Risk, RiskCategory, SharedRuntime
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
)

CATEGORY = RiskCategory(
    id="mixed-targets-on-shared-runtime",
    title="Mixed Targets on Shared Runtime",
    description=(
        "Different attacker targets (like frontend and backend/datastore components) should not be running on the "
        "same shared (underlying) runtime."
    ),
    impact=(
        "If this risk is unmitigated, attackers successfully attacking other components of the system might have an "
        "easy path towards more valuable targets, as they are running on the same shared runtime."
    ),
    asvs="V1 - Architecture, Design and Threat Modeling Requirements",
    cheat_sheet="https://cheatsheetseries.owasp.org/cheatsheets/Attack_Surface_Analysis_Cheat_Sheet.html",
    action="Runtime Separation",
    mitigation=(
        "Use separate runtime environments for running different target components or apply similar separation "
        "styles to prevent load- or breach-related problems originating from one more attacker-facing asset impacts "
        "also the other more critical rated backend/datastore assets."
    ),
    check="Are recommendations from the linked cheat sheet and referenced ASVS chapter applied?",
    function=RiskFunction.OPERATIONS,
    stride=STRIDE.ELEVATION_OF_PRIVILEGE,
    detection_logic=(
        "Shared runtime running technical assets of different trust-boundaries is at risk. "
        "Also mixing backend/datastore with frontend components on the same shared runtime is considered a risk."
    ),
    risk_assessment=(
        "The risk rating (low or medium) depends on the confidentiality, integrity, and availability rating of "
        "the technical asset running on the shared runtime."
    ),
    false_positives=(
        "When all assets running on the shared runtime are hardened and protected to the same extend as if all were "
        "containing/processing highly sensitive data."
    ),
    model_failure_possible_reason=False,
    cwe=1008,
)

SUPPORTED_TAGS: list[str] = []


def generate_risks(ctx: AnalysisContext) -> list[Risk]:
    model = ctx.model
    risks = []
    for runtime_id in model.sorted_shared_runtime_ids():
        runtime = model.shared_runtimes[runtime_id]
        current_boundary_id = ""
        has_frontend = has_backend = False
        risk_added = False
        for asset_id in runtime.technical_assets_running:
            asset = model.technical_assets[asset_id]
            boundary_id = model.trust_boundary_id_of(asset_id)
            if current_boundary_id and current_boundary_id != boundary_id:
                risks.append(_create_risk(model, runtime))
                risk_added = True
                break
            current_boundary_id = boundary_id
            if asset.technology.is_exclusively_frontend_related():
                has_frontend = True
            if asset.technology.is_exclusively_backend_related():
                has_backend = True
        if not risk_added and has_frontend and has_backend:
            risks.append(_create_risk(model, runtime))
    return risks


def _is_more_risky(model: ParsedModel, runtime: SharedRuntime) -> bool:
    for asset_id in runtime.technical_assets_running:
        asset = model.technical_assets[asset_id]
        if (asset.confidentiality == Confidentiality.STRICTLY_CONFIDENTIAL
                or asset.integrity == Criticality.MISSION_CRITICAL
                or asset.availability == Criticality.MISSION_CRITICAL):
            return True
    return False


def _create_risk(model: ParsedModel, runtime: SharedRuntime) -> Risk:
    impact = RiskExploitationImpact.MEDIUM if _is_more_risky(model, runtime) else RiskExploitationImpact.LOW
    return Risk(
        category=CATEGORY,
        severity=calculate_severity(RiskExploitationLikelihood.UNLIKELY, impact),
        exploitation_likelihood=RiskExploitationLikelihood.UNLIKELY,
        exploitation_impact=impact,
        title=(
            "<b>Mixed Targets on Shared Runtime</b> named <b>" + runtime.title
            + "</b> might enable attackers moving from one less valuable target to a more valuable one"
        ),
        synthetic_id=CATEGORY.id + "@" + runtime.id,
        most_relevant_shared_runtime_id=runtime.id,
        data_breach_probability=DataBreachProbability.IMPROBABLE,
        data_breach_technical_asset_ids=list(runtime.technical_assets_running),
    )


RULE = RiskRule(CATEGORY, tuple(SUPPORTED_TAGS), generate_risks)
