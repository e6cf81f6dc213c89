"""Human access to highly sensitive assets without two-factor authentication."""

from __future__ import annotations

from archrisk.context import AnalysisContext
from archrisk.models import RiskCategory, Risk
from archrisk.rules.builtin.missing_authentication import create_risk
from archrisk.rules.registry import RiskRule
from archrisk.types import (
    STRIDE,
    Authentication,
    Confidentiality,
    Criticality,
    RiskExploitationImpact,
    RiskExploitationLikelihood,
    RiskFunction,
    RiskSeverity,
    TechnicalAssetType,
    Technology,
)

CATEGORY = RiskCategory(
    id="missing-authentication-second-factor",
    title="Missing Two-Factor Authentication (2FA)",
    description=(
        "Technical assets (especially multi-tenant systems) should authenticate incoming requests with "
        "two-factor (2FA) authentication when the asset processes or stores highly sensitive data (in terms of "
        "confidentiality, integrity, and availability) and is accessed by humans."
    ),
    impact=(
        "If this risk is unmitigated, attackers might be able to access or modify highly sensitive data without strong "
        "authentication."
    ),
    asvs="V2 - Authentication Verification Requirements",
    cheat_sheet="https://cheatsheetseries.owasp.org/cheatsheets/Multifactor_Authentication_Cheat_Sheet.html",
    action="Authentication with Second Factor (2FA)",
    mitigation=(
        "Apply an authentication method to the technical asset protecting highly sensitive data via "
        "two-factor authentication for human users."
    ),
    check="Are recommendations from the linked cheat sheet and referenced ASVS chapter applied?",
    function=RiskFunction.BUSINESS_SIDE,
    stride=STRIDE.ELEVATION_OF_PRIVILEGE,
    detection_logic=(
        f"In-scope technical assets (except {Technology.LOAD_BALANCER}, {Technology.REVERSE_PROXY}, {Technology.WAF}, "
        f"{Technology.IDS}, and {Technology.IPS}) should authenticate incoming requests via two-factor authentication "
        "(2FA) when the asset processes or stores highly sensitive data (in terms of confidentiality, integrity, and "
        "availability) and is accessed by a client used by a human user."
    ),
    risk_assessment=RiskSeverity.MEDIUM.value,
    false_positives=(
        "Technical assets which do not process requests regarding functionality or data linked to end-users (customers) "
        "can be considered as false positives after individual review."
    ),
    model_failure_possible_reason=False,
    cwe=308,
)

SUPPORTED_TAGS: list[str] = []


def generate_risks(ctx: AnalysisContext) -> list[Risk]:
    model = ctx.model
    risks = []
    for asset in model.sorted_technical_assets():
        if (asset.out_of_scope
                or asset.technology.is_traffic_forwarding()
                or asset.technology.is_unprotected_comms_tolerated()):
            continue
        if not (asset.highest_confidentiality(model) >= Confidentiality.CONFIDENTIAL
                or asset.highest_integrity(model) >= Criticality.CRITICAL
                or asset.highest_availability(model) >= Criticality.CRITICAL
                or asset.multi_tenant):
            continue
        for link in model.incoming_links(asset.id):
            caller = model.technical_assets[link.source_id]
            if caller.technology.is_unprotected_comms_tolerated() or caller.type is TechnicalAssetType.DATASTORE:
                continue
            if caller.used_as_client_by_human:
                more_risky = (
                    link.highest_confidentiality(model) >= Confidentiality.CONFIDENTIAL
                    or link.highest_integrity(model) >= Criticality.CRITICAL
                )
                if more_risky and link.authentication is not Authentication.TWO_FACTOR:
                    risks.append(create_risk(
                        model, asset, link, link, "",
                        RiskExploitationImpact.MEDIUM, RiskExploitationLikelihood.UNLIKELY, True, CATEGORY,
                    ))
            elif caller.technology.is_traffic_forwarding():
                # walk the call chain up one hop to find a caller's caller used by a human
                for callers_link in model.incoming_links(caller.id):
                    callers_caller = model.technical_assets[callers_link.source_id]
                    if (callers_caller.technology.is_unprotected_comms_tolerated()
                            or callers_caller.type is TechnicalAssetType.DATASTORE):
                        continue
                    if not callers_caller.used_as_client_by_human:
                        continue
                    more_risky = (
                        callers_link.highest_confidentiality(model) >= Confidentiality.CONFIDENTIAL
                        or callers_link.highest_integrity(model) >= Criticality.CRITICAL
                    )
                    if more_risky and callers_link.authentication is not Authentication.TWO_FACTOR:
                        risks.append(create_risk(
                            model, asset, link, callers_link, caller.title,
                            RiskExploitationImpact.MEDIUM, RiskExploitationLikelihood.UNLIKELY, True, CATEGORY,
                        ))
    return risks


RULE = RiskRule(CATEGORY, tuple(SUPPORTED_TAGS), generate_risks)
