"""Per-run analysis state.

An ``AnalysisContext`` is created once per analysis run and handed to every
rule.  It owns the parsed graph, the tag catalogue (model tags plus the tags
each executed rule declares) and the accumulating risk map.  Nothing here is
module-level, so independent runs never share state.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from archrisk.models import ParsedModel, Risk, RiskCategory, RiskTracking, normalize_tag
from archrisk.risks import RisksByCategory


@dataclass
class AnalysisContext:
    model: ParsedModel
    tag_catalogue: set[str] = field(default_factory=set)
    categories: dict[str, RiskCategory] = field(default_factory=dict)
    risks_by_category: RisksByCategory = field(default_factory=dict)
    # lower-cased synthetic id -> risk, filled after generation
    risks_by_synthetic_id: dict[str, Risk] = field(default_factory=dict)
    # effective tracking per lower-cased synthetic id, wildcards expanded
    risk_tracking: dict[str, RiskTracking] = field(default_factory=dict)
    raa_summary: str = ""

    def __post_init__(self) -> None:
        self.tag_catalogue.update(normalize_tag(t) for t in self.model.tags_available)

    def register_tags(self, tags: list[str]) -> None:
        self.tag_catalogue.update(normalize_tag(t) for t in tags)

    def sorted_tags(self) -> list[str]:
        return sorted(self.tag_catalogue)

    def add_risks(self, category: RiskCategory, risks: list[Risk]) -> None:
        """Record *risks* under *category*; empty lists are not stored."""
        self.categories[category.id] = category
        if risks:
            self.risks_by_category.setdefault(category.id, []).extend(risks)

    def index_synthetic_ids(self) -> None:
        self.risks_by_synthetic_id = {}
        for category_id in sorted(self.risks_by_category):
            for risk in self.risks_by_category[category_id]:
                self.risks_by_synthetic_id[risk.synthetic_id.lower()] = risk

    def all_risks(self) -> list[Risk]:
        return [risk for category_id in sorted(self.risks_by_category) for risk in self.risks_by_category[category_id]]
