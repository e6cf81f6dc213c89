"""JSON output of an analysis run.

Three files are written into the output directory:

- ``risks.json``: every risk, categories ordered by open severity, risks
  ordered within their category;
- ``stats.json``: risk counts per severity and tracking status, per STRIDE
  category and risk function, plus a summary per risk category;
- ``technical-assets.json``: the technical assets including their RAA.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict
from pathlib import Path
from typing import Any

from archrisk.config import (
    RISKS_JSON_FILENAME,
    STATS_JSON_FILENAME,
    TECHNICAL_ASSETS_JSON_FILENAME,
)
from archrisk.context import AnalysisContext
from archrisk.models import Risk
from archrisk.risks import (
    categories_still_at_risk,
    category_statistics,
    filter_by_model_failures,
    overall_risk_statistics,
    risk_counts_by_function,
    risk_counts_by_stride,
    sort_risks,
    sorted_category_ids,
)

logger = logging.getLogger(__name__)


def sorted_risks(ctx: AnalysisContext) -> list[Risk]:
    """All risks in presentation order."""
    result = []
    for category_id in sorted_category_ids(ctx.risks_by_category, ctx.categories):
        result.extend(sort_risks(ctx.risks_by_category[category_id]))
    return result


def risks_payload(ctx: AnalysisContext) -> list[dict[str, Any]]:
    return [risk.to_dict() for risk in sorted_risks(ctx)]


def stats_payload(ctx: AnalysisContext) -> dict[str, Any]:
    risks_by_category = ctx.risks_by_category
    return {
        "risks": overall_risk_statistics(risks_by_category),
        "by_stride": risk_counts_by_stride(risks_by_category),
        "by_function": risk_counts_by_function(risks_by_category),
        "categories": category_statistics(risks_by_category, ctx.categories),
        "categories_still_at_risk": categories_still_at_risk(risks_by_category),
        "possible_model_failures": sorted(filter_by_model_failures(risks_by_category)),
    }


def technical_assets_payload(ctx: AnalysisContext) -> dict[str, Any]:
    return {
        asset.id: asdict(asset) for asset in ctx.model.sorted_technical_assets()
    }


def _write_json(path: Path, data: Any) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False, default=str)
    logger.info("Wrote %s", path)


def write_outputs(ctx: AnalysisContext, output_dir: str | Path) -> list[Path]:
    """Write the JSON files for *ctx* and return their paths."""
    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)

    written = []
    for filename, data in (
        (RISKS_JSON_FILENAME, risks_payload(ctx)),
        (STATS_JSON_FILENAME, stats_payload(ctx)),
        (TECHNICAL_ASSETS_JSON_FILENAME, technical_assets_payload(ctx)),
    ):
        path = output_path / filename
        _write_json(path, data)
        written.append(path)
    return written
