"""Risk tracking reconciliation.

Tracking records from the model are matched against the freshly generated
risks of an ``AnalysisContext``:

1. exact records apply to the risk with the same (lower-cased) synthetic id;
2. wildcard records apply to every generated id they match that has no
   exact record of its own; each ``*`` spans one ``@``-delimited segment;
3. a record matching nothing is orphaned, which is fatal unless orphans
   are explicitly ignored, in which case it is only logged.

Risks left without a record stay ``unchecked``.
"""

from __future__ import annotations

import logging
import re

from archrisk.config import WILDCARD_SEGMENT_PATTERN
from archrisk.context import AnalysisContext
from archrisk.errors import RiskTrackingError
from archrisk.models import RiskTracking
from archrisk.types import RiskStatus

logger = logging.getLogger(__name__)

ORPHAN_NOTE = (
    "\n\nNOTE: For risk tracking each risk-id needs to be defined (the string with the @ sign in it). "
    "These unique risk IDs are visible in the JSON output as well as in the risk listing of the CLI. "
    "Some risk IDs have only one @ sign in them, while others multiple. The idea is to allow for unique "
    "but still speaking IDs. Therefore each risk instance creates its individual ID by taking all affected "
    "elements causing the risk to be within an @-delimited part. Using wildcards (the * sign) for parts "
    "delimited by @ signs allows to handle groups of certain risks at once."
)


def compile_wildcard(pattern: str) -> re.Pattern[str]:
    """Turn a tracking pattern into a regex matching whole synthetic ids."""
    escaped = re.escape(pattern.strip().lower())
    return re.compile(escaped.replace(r"\*", WILDCARD_SEGMENT_PATTERN))


def apply_wildcard_risk_tracking(ctx: AnalysisContext, ignore_orphans: bool = False) -> None:
    """Expand wildcard records into per-risk records on ``ctx.risk_tracking``."""
    logger.info("Executing risk tracking evaluation")
    generated_ids = sorted(ctx.risks_by_synthetic_id)
    for pattern in sorted(ctx.model.wildcard_risk_tracking):
        tracking = ctx.model.wildcard_risk_tracking[pattern]
        logger.info("Applying wildcard risk tracking for risk id: %s", pattern)
        expression = compile_wildcard(pattern)
        found_some = False
        for synthetic_id in generated_ids:
            if synthetic_id in ctx.model.risk_tracking:
                continue
            if expression.fullmatch(synthetic_id):
                found_some = True
                ctx.risk_tracking[synthetic_id] = RiskTracking(
                    synthetic_risk_id=synthetic_id,
                    status=tracking.status,
                    justification=tracking.justification,
                    ticket=tracking.ticket,
                    checked_by=tracking.checked_by,
                    date=tracking.date,
                )
                logger.info("  => %s", synthetic_id)
        if not found_some:
            if ignore_orphans:
                logger.warning("Wildcard risk tracking does not match any risk id: %s", pattern)
            else:
                raise RiskTrackingError(
                    f"wildcard risk tracking does not match any risk id: {pattern}", pattern=pattern
                )


def check_risk_tracking(ctx: AnalysisContext, ignore_orphans: bool = False) -> None:
    """Reject (or log) exact records whose id no generated risk carries."""
    logger.info("Checking risk tracking")
    for synthetic_id in sorted(ctx.model.risk_tracking):
        if synthetic_id in ctx.risks_by_synthetic_id:
            ctx.risk_tracking[synthetic_id] = ctx.model.risk_tracking[synthetic_id]
            continue
        if ignore_orphans:
            logger.warning("Risk tracking references unknown risk (risk id not found): %s", synthetic_id)
        else:
            raise RiskTrackingError(
                "Risk tracking references unknown risk (risk id not found) - you might want to use the "
                f"option -ignore-orphaned-risk-tracking: {synthetic_id}" + ORPHAN_NOTE,
                id=synthetic_id,
            )


def apply_risk_status(ctx: AnalysisContext) -> None:
    """Copy each effective tracking status onto its risk.

    Walks every risk rather than the id index, so risks that share a
    synthetic id all receive the status.
    """
    for risk in ctx.all_risks():
        tracking = ctx.risk_tracking.get(risk.synthetic_id.lower())
        risk.risk_status = tracking.status if tracking else RiskStatus.UNCHECKED


def reconcile_risk_tracking(ctx: AnalysisContext, ignore_orphans: bool = False) -> None:
    """Run the full reconciliation over an already generated risk set."""
    ctx.risk_tracking = {}
    apply_wildcard_risk_tracking(ctx, ignore_orphans)
    check_risk_tracking(ctx, ignore_orphans)
    apply_risk_status(ctx)
