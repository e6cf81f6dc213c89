"""Custom code accepting files without strict validation."""

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
    RiskExploitationImpact,
    RiskExploitationLikelihood,
    RiskFunction,
)

CATEGORY = RiskCategory(
    id="missing-file-validation",
    title="Missing File Validation",
    description="When a technical asset accepts files, these input files should be strictly validated about filename and type.",
    impact="If this risk is unmitigated, attackers might be able to provide malicious files to the application.",
    asvs="V12 - File and Resources Verification Requirements",
    cheat_sheet="https://cheatsheetseries.owasp.org/cheatsheets/File_Upload_Cheat_Sheet.html",
    action="File Validation",
    mitigation=(
        "Filter by file extension and discard (if feasible) the name provided. Whitelist the accepted file types "
        "and determine the mime-type on the server-side (for example via \"Apache Tika\" or similar checks). If the file "
        "is retrievable by endusers and/or backoffice employees, consider performing scans for popular malware (if the "
        "files can be retrieved much later than they were uploaded, also apply a fresh malware scan during retrieval to "
        "scan with newer signatures of popular malware). Also enforce limits on maximum file size to avoid "
        "denial-of-service like scenarios."
    ),
    check="Are recommendations from the linked cheat sheet and referenced ASVS chapter applied?",
    function=RiskFunction.DEVELOPMENT,
    stride=STRIDE.SPOOFING,
    detection_logic="In-scope technical assets with custom-developed code accepting file data formats.",
    risk_assessment=(
        "The risk rating depends on the sensitivity of the technical asset itself and of the data assets processed and stored."
    ),
    false_positives=(
        "Fully trusted (i.e. cryptographically signed or similar) files can be considered "
        "as false positives after individual review."
    ),
    model_failure_possible_reason=False,
    cwe=434,
)

SUPPORTED_TAGS: list[str] = []


def generate_risks(ctx: AnalysisContext) -> list[Risk]:
    model = ctx.model
    risks = []
    for asset in model.sorted_technical_assets():
        if asset.out_of_scope or not asset.custom_developed_parts:
            continue
        for data_format in asset.data_formats_accepted:
            if data_format is DataFormat.FILE:
                risks.append(_create_risk(model, asset))
    return risks


def _create_risk(model: ParsedModel, asset: TechnicalAsset) -> Risk:
    impact = RiskExploitationImpact.LOW
    if (asset.highest_confidentiality(model) == Confidentiality.STRICTLY_CONFIDENTIAL
            or asset.highest_integrity(model) == Criticality.MISSION_CRITICAL
            or asset.highest_availability(model) == Criticality.MISSION_CRITICAL):
        impact = RiskExploitationImpact.MEDIUM
    return Risk(
        category=CATEGORY,
        severity=calculate_severity(RiskExploitationLikelihood.VERY_LIKELY, impact),
        exploitation_likelihood=RiskExploitationLikelihood.VERY_LIKELY,
        exploitation_impact=impact,
        title="<b>Missing File Validation</b> risk at <b>" + asset.title + "</b>",
        synthetic_id=CATEGORY.id + "@" + asset.id,
        most_relevant_technical_asset_id=asset.id,
        data_breach_probability=DataBreachProbability.PROBABLE,
        data_breach_technical_asset_ids=[asset.id],
    )


RULE = RiskRule(CATEGORY, tuple(SUPPORTED_TAGS), generate_risks)
