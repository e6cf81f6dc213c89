"""Cloud components lacking vendor-recommended hardening.

Components are grouped per cloud provider via their base tag (``aws``,
``azure``, ``gcp``, ``ocp``), inherited from enclosing trust boundaries and
shared runtimes.  Shared runtimes and trust boundaries get one risk each;
for a provider with neither, the most sensitive asset stands in as a single
example.  Assets carrying specific AWS subtags additionally get EC2/S3 risks.
"""

from __future__ import annotations

from archrisk.context import AnalysisContext
from archrisk.models import (
    ParsedModel,
    Risk,
    RiskCategory,
    SharedRuntime,
    TechnicalAsset,
    TrustBoundary,
    is_tagged_with_base_tag,
)
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
    id="missing-cloud-hardening",
    title="Missing Cloud Hardening",
    description=(
        "Cloud components should be hardened according to the cloud vendor best practices. This affects their "
        "configuration, auditing, and further areas."
    ),
    impact="If this risk is unmitigated, attackers might access cloud components in an unintended way.",
    asvs="V1 - Architecture, Design and Threat Modeling Requirements",
    cheat_sheet="https://cheatsheetseries.owasp.org/cheatsheets/Attack_Surface_Analysis_Cheat_Sheet.html",
    action="Cloud Hardening",
    mitigation=(
        "Apply hardening of all cloud components and services, taking special care to follow the individual risk "
        "descriptions (which depend on the cloud provider tags in the model). "
        "<br><br>For <b>Amazon Web Services (AWS)</b>: Follow the <i>CIS Benchmark for Amazon Web Services</i> (see also "
        "the automated checks of cloud audit tools like <i>\"PacBot\", \"CloudSploit\", \"CloudMapper\", \"ScoutSuite\", "
        "or \"Prowler AWS CIS Benchmark Tool\"</i>). "
        "<br>For EC2 and other servers running Amazon Linux, follow the <i>CIS Benchmark for Amazon Linux</i> and switch "
        "to IMDSv2. "
        "<br>For S3 buckets follow the <i>Security Best Practices for Amazon S3</i> at "
        "<a href=\"https://docs.aws.amazon.com/AmazonS3/latest/dev/security-best-practices.html\">"
        "https://docs.aws.amazon.com/AmazonS3/latest/dev/security-best-practices.html</a> to avoid accidental leakage. "
        "<br>Also take a look at some of these tools: <a href=\"https://github.com/toniblyx/my-arsenal-of-aws-security-tools\">"
        "https://github.com/toniblyx/my-arsenal-of-aws-security-tools</a> "
        "<br><br>For <b>Microsoft Azure</b>: Follow the <i>CIS Benchmark for Microsoft Azure</i> (see also the automated "
        "checks of cloud audit tools like <i>\"CloudSploit\" or \"ScoutSuite\"</i>)."
        "<br><br>For <b>Google Cloud Platform</b>: Follow the <i>CIS Benchmark for Google Cloud Computing Platform</i> "
        "(see also the automated checks of cloud audit tools like <i>\"CloudSploit\" or \"ScoutSuite\"</i>). "
        "<br><br>For <b>Oracle Cloud Platform</b>: Follow the hardening best practices (see also the automated checks "
        "of cloud audit tools like <i>\"CloudSploit\"</i>)."
    ),
    check="Are recommendations from the linked cheat sheet and referenced ASVS chapter applied?",
    function=RiskFunction.OPERATIONS,
    stride=STRIDE.TAMPERING,
    detection_logic=(
        "In-scope cloud components (either residing in cloud trust boundaries or more specifically tagged with cloud "
        "provider types)."
    ),
    risk_assessment=(
        "The risk rating depends on the sensitivity of the technical asset itself and of the data assets processed and stored."
    ),
    false_positives=(
        "Cloud components not running parts of the target architecture can be considered "
        "as false positives after individual review."
    ),
    model_failure_possible_reason=False,
    cwe=1008,
)

SPECIFIC_SUBTAGS_AWS = [
    "aws:vpc", "aws:ec2", "aws:s3", "aws:ebs", "aws:apigateway",
    "aws:lambda", "aws:dynamodb", "aws:rds", "aws:sqs", "aws:iam",
]

SUPPORTED_TAGS = ["aws", "azure", "gcp", "ocp"] + SPECIFIC_SUBTAGS_AWS

# base tag -> (title prefix, benchmark named in the title)
PROVIDERS = {
    "aws": ("AWS", "CIS Benchmark for AWS"),
    "azure": ("Azure", "CIS Benchmark for Microsoft Azure"),
    "gcp": ("GCP", "CIS Benchmark for Google Cloud Computing Platform"),
    "ocp": ("OCP", "Vendor Best Practices for Oracle Cloud Platform"),
}


def _empty_buckets() -> dict[str, set[str]]:
    return {provider: set() for provider in PROVIDERS}


def generate_risks(ctx: AnalysisContext) -> list[Risk]:
    model = ctx.model
    runtimes_unspecific: set[str] = set()
    boundaries_unspecific: set[str] = set()
    assets_unspecific: set[str] = set()
    runtime_ids = _empty_buckets()
    boundary_ids = _empty_buckets()
    asset_ids = _empty_buckets()
    assets_with_subtag_risks: set[str] = set()

    def add_asset(asset: TechnicalAsset, tags: list[str]) -> None:
        if asset.is_tagged_with_any(*SPECIFIC_SUBTAGS_AWS):
            assets_with_subtag_risks.add(asset.id)
        for provider in PROVIDERS:
            if is_tagged_with_base_tag(tags, provider):
                asset_ids[provider].add(asset.id)

    for boundary_id in model.sorted_trust_boundary_ids():
        boundary = model.trust_boundaries[boundary_id]
        tagged_outer = boundary.is_tagged_with_any(*SUPPORTED_TAGS)
        if not (tagged_outer or boundary.type.is_within_cloud()):
            continue
        if tagged_outer:
            for provider in PROVIDERS:
                if boundary.is_tagged_with_base_tag(provider):
                    boundary_ids[provider].add(boundary.id)
        else:
            boundaries_unspecific.add(boundary.id)
        for asset_id in boundary.recursively_all_technical_asset_ids_inside(model):
            asset = model.technical_assets[asset_id]
            if asset.is_tagged_with_any(*SUPPORTED_TAGS):
                add_asset(asset, asset.tags)
            elif tagged_outer:
                add_asset(asset, boundary.tags)
            else:
                assets_unspecific.add(asset_id)

    # model-wide by tag
    for asset in model.technical_assets_tagged_with_any(*SUPPORTED_TAGS):
        add_asset(asset, asset.tags)
    for boundary in model.trust_boundaries_tagged_with_any(*SUPPORTED_TAGS):
        for asset_id in boundary.recursively_all_technical_asset_ids_inside(model):
            asset = model.technical_assets[asset_id]
            if asset.is_tagged_with_any(*SUPPORTED_TAGS):
                add_asset(asset, asset.tags)
            else:
                add_asset(asset, boundary.tags)
    for runtime in model.shared_runtimes_tagged_with_any(*SUPPORTED_TAGS):
        for provider in PROVIDERS:
            if runtime.is_tagged_with_base_tag(provider):
                runtime_ids[provider].add(runtime.id)
        for asset_id in runtime.technical_assets_running:
            add_asset(model.technical_assets[asset_id], runtime.tags)

    for provider in PROVIDERS:
        runtimes_unspecific -= runtime_ids[provider]
        boundaries_unspecific -= boundary_ids[provider]
        assets_unspecific -= asset_ids[provider]
    assets_unspecific -= assets_with_subtag_risks

    risks = []
    added = {provider: False for provider in PROVIDERS}

    # shared runtimes first, then trust boundaries
    for provider, (prefix, details) in PROVIDERS.items():
        for runtime_id in sorted(runtime_ids[provider]):
            risks.append(_create_risk_for_shared_runtime(model, model.shared_runtimes[runtime_id], prefix, details))
            added[provider] = True
    for runtime_id in sorted(runtimes_unspecific):
        risks.append(_create_risk_for_shared_runtime(model, model.shared_runtimes[runtime_id], "", ""))

    for provider, (prefix, details) in PROVIDERS.items():
        for boundary_id in sorted(boundary_ids[provider]):
            risks.append(_create_risk_for_trust_boundary(model, model.trust_boundaries[boundary_id], prefix, details))
            added[provider] = True
    for boundary_id in sorted(boundaries_unspecific):
        risks.append(_create_risk_for_trust_boundary(model, model.trust_boundaries[boundary_id], "", ""))

    # one example asset per provider instead of one risk per asset
    for provider, (prefix, details) in PROVIDERS.items():
        if added[provider]:
            continue
        most_relevant = _find_most_sensitive_technical_asset(model, asset_ids[provider])
        if most_relevant is not None:
            risks.append(_create_risk_for_technical_asset(model, most_relevant, prefix, details))

    # subtag-specific risks are asset-specific anyway
    for asset_id in sorted(assets_with_subtag_risks):
        asset = model.technical_assets[asset_id]
        if asset.is_tagged_with_any_traversing_up(model, "aws:ec2"):
            risks.append(_create_risk_for_technical_asset(model, asset, "EC2", "CIS Benchmark for Amazon Linux"))
        if asset.is_tagged_with_any_traversing_up(model, "aws:s3"):
            risks.append(_create_risk_for_technical_asset(model, asset, "S3", "Security Best Practices for AWS S3"))

    return risks


def _find_most_sensitive_technical_asset(model: ParsedModel, asset_ids: set[str]) -> TechnicalAsset | None:
    most_relevant = None
    for asset_id in sorted(asset_ids):
        asset = model.technical_assets[asset_id]
        if most_relevant is None or asset.highest_sensitivity_score() > most_relevant.highest_sensitivity_score():
            most_relevant = asset
    return most_relevant


def _title(name: str, prefix: str, details: str) -> str:
    if prefix:
        prefix = " (" + prefix + ")"
    title = "<b>Missing Cloud Hardening" + prefix + "</b> risk at <b>" + name + "</b>"
    if details:
        title += ": <u>" + details + "</u>"
    return title


def _impact(
    confidentiality: Confidentiality, integrity: Criticality, availability: Criticality
) -> RiskExploitationImpact:
    impact = RiskExploitationImpact.MEDIUM
    if (confidentiality >= Confidentiality.CONFIDENTIAL
            or integrity >= Criticality.CRITICAL
            or availability >= Criticality.CRITICAL):
        impact = RiskExploitationImpact.HIGH
    if (confidentiality == Confidentiality.STRICTLY_CONFIDENTIAL
            or integrity == Criticality.MISSION_CRITICAL
            or availability == Criticality.MISSION_CRITICAL):
        impact = RiskExploitationImpact.VERY_HIGH
    return impact


def _create_risk_for_shared_runtime(model: ParsedModel, runtime: SharedRuntime, prefix: str, details: str) -> Risk:
    impact = _impact(
        runtime.highest_confidentiality(model), runtime.highest_integrity(model), runtime.highest_availability(model)
    )
    return Risk(
        category=CATEGORY,
        severity=calculate_severity(RiskExploitationLikelihood.UNLIKELY, impact),
        exploitation_likelihood=RiskExploitationLikelihood.UNLIKELY,
        exploitation_impact=impact,
        title=_title(runtime.title, prefix, details),
        synthetic_id=CATEGORY.id + "@" + runtime.id,
        most_relevant_shared_runtime_id=runtime.id,
        data_breach_probability=DataBreachProbability.PROBABLE,
        data_breach_technical_asset_ids=list(runtime.technical_assets_running),
    )


def _create_risk_for_trust_boundary(model: ParsedModel, boundary: TrustBoundary, prefix: str, details: str) -> Risk:
    impact = _impact(
        boundary.highest_confidentiality(model), boundary.highest_integrity(model), boundary.highest_availability(model)
    )
    return Risk(
        category=CATEGORY,
        severity=calculate_severity(RiskExploitationLikelihood.UNLIKELY, impact),
        exploitation_likelihood=RiskExploitationLikelihood.UNLIKELY,
        exploitation_impact=impact,
        title=_title(boundary.title, prefix, details),
        synthetic_id=CATEGORY.id + "@" + boundary.id,
        most_relevant_trust_boundary_id=boundary.id,
        data_breach_probability=DataBreachProbability.PROBABLE,
        data_breach_technical_asset_ids=boundary.recursively_all_technical_asset_ids_inside(model),
    )


def _create_risk_for_technical_asset(model: ParsedModel, asset: TechnicalAsset, prefix: str, details: str) -> Risk:
    impact = _impact(
        asset.highest_confidentiality(model), asset.highest_integrity(model), asset.highest_availability(model)
    )
    return Risk(
        category=CATEGORY,
        severity=calculate_severity(RiskExploitationLikelihood.UNLIKELY, impact),
        exploitation_likelihood=RiskExploitationLikelihood.UNLIKELY,
        exploitation_impact=impact,
        title=_title(asset.title, prefix, details),
        synthetic_id=CATEGORY.id + "@" + asset.id,
        most_relevant_technical_asset_id=asset.id,
        data_breach_probability=DataBreachProbability.PROBABLE,
        data_breach_technical_asset_ids=[asset.id],
    )


RULE = RiskRule(CATEGORY, tuple(SUPPORTED_TAGS), generate_risks)
