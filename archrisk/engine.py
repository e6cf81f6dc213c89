"""Analysis pipeline: load, annotate, generate risks, reconcile tracking.

``run_analysis`` is the single entry point used by the CLI.  It performs one
synchronous pass over a model and returns the populated ``AnalysisContext``;
any ``ArchRiskError`` raised along the way aborts the whole run.
"""

from __future__ import annotations

import logging

from archrisk.config import AnalysisSettings
from archrisk.context import AnalysisContext
from archrisk.errors import DuplicateIdError
from archrisk.loader import load_model_file
from archrisk.models import ParsedModel
from archrisk.plugins import apply_raa, load_custom_risk_rules
from archrisk.risks import count_risks
from archrisk.rules.registry import RiskRule, builtin_rules
from archrisk.tracking import reconcile_risk_tracking

logger = logging.getLogger(__name__)


def check_unique_category_ids(model: ParsedModel, rules: list[RiskRule]) -> None:
    """Built-in, custom and individual categories share one id space."""
    seen: set[str] = set()
    for category_id in [rule.id for rule in rules] + sorted(model.individual_risk_categories):
        if category_id in seen:
            raise DuplicateIdError(f"duplicate risk category id: {category_id}", id=category_id)
        seen.add(category_id)


def apply_risk_generation(
    ctx: AnalysisContext,
    rules: list[RiskRule],
    skip_rule_ids: list[str] | None = None,
) -> None:
    """Run every rule not named in *skip_rule_ids* and collect its risks.

    Individual risks declared in the model are added afterwards.  Skip ids
    that name no rule are reported as a warning.
    """
    logger.info("Applying risk generation")
    unused_skips = set(skip_rule_ids or [])
    for rule in rules:
        if rule.id in unused_skips:
            logger.info("Skipping risk rule %r", rule.id)
            unused_skips.discard(rule.id)
            continue
        ctx.register_tags(list(rule.supported_tags))
        risks = rule.generate_risks(ctx)
        logger.debug("Rule %s produced %d risk(s)", rule.id, len(risks))
        ctx.add_risks(rule.category, risks)

    if unused_skips:
        logger.warning("Unknown risk rules to skip: %s", sorted(unused_skips))

    for category_id in sorted(ctx.model.individual_risk_categories):
        category = ctx.model.individual_risk_categories[category_id]
        ctx.add_risks(category, list(ctx.model.individual_risks.get(category_id, [])))

    ctx.index_synthetic_ids()


def analyze_model(
    model: ParsedModel,
    settings: AnalysisSettings,
    rules: list[RiskRule] | None = None,
) -> AnalysisContext:
    """Analyze an already loaded *model* according to *settings*."""
    ctx = AnalysisContext(model=model)
    if settings.raa_plugin:
        ctx.raa_summary = apply_raa(model, settings.raa_plugin, settings.plugin_timeout_seconds)

    if rules is None:
        rules = builtin_rules() + load_custom_risk_rules(
            settings.custom_risk_rules_plugins, settings.plugin_timeout_seconds
        )
    check_unique_category_ids(model, rules)

    apply_risk_generation(ctx, rules, settings.skipped_rule_ids)
    reconcile_risk_tracking(ctx, settings.ignore_orphaned_risk_tracking)
    logger.info(
        "Identified %d risk(s) in %d categor%s",
        count_risks(ctx.risks_by_category),
        len(ctx.risks_by_category),
        "y" if len(ctx.risks_by_category) == 1 else "ies",
    )
    return ctx


def run_analysis(settings: AnalysisSettings) -> AnalysisContext:
    """Load ``settings.model_file`` and analyze it."""
    model = load_model_file(settings.model_file)
    return analyze_model(model, settings)
