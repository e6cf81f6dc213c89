"""Domain model for archrisk: the architecture graph and risk records.

The graph (data assets, technical assets, communication links, trust
boundaries and shared runtimes) is built once by the loader and is treated
as read-only while rules run.  Derived lookups that need the whole graph
(highest sensitivity, trust-boundary traversal) take the owning
``ParsedModel`` explicitly instead of reaching for module state.
"""

from __future__ import annotations

import datetime
import re
from dataclasses import asdict, dataclass, field
from typing import Any

from archrisk.types import (
    STRIDE,
    Authentication,
    Authorization,
    Confidentiality,
    Criticality,
    DataBreachProbability,
    DataFormat,
    EncryptionStyle,
    Protocol,
    Quantity,
    RiskExploitationImpact,
    RiskExploitationLikelihood,
    RiskFunction,
    RiskSeverity,
    RiskStatus,
    TechnicalAssetMachine,
    TechnicalAssetSize,
    TechnicalAssetType,
    Technology,
    TrustBoundaryType,
    Usage,
)


# ---------------------------------------------------------------------------
# Tag helpers
# ---------------------------------------------------------------------------

def normalize_tag(tag: str) -> str:
    return tag.strip().lower()


def contains_case_insensitive_any(values: list[str], *candidates: str) -> bool:
    """True if any candidate equals any value, ignoring case and surrounding space."""
    wanted = {normalize_tag(c) for c in candidates}
    return any(normalize_tag(v) in wanted for v in values)


def is_tagged_with_base_tag(tags: list[str], base_tag: str) -> bool:
    """Base tags precede the colon: ``aws:ec2`` has base tag ``aws``.

    A bare ``aws`` tag also matches the base tag ``aws``.
    """
    base_tag = normalize_tag(base_tag)
    for tag in tags:
        tag = normalize_tag(tag)
        if tag == base_tag or tag.startswith(base_tag + ":"):
            return True
    return False


def make_id(value: str) -> str:
    """Slugify *value* into an id fragment (``"Web Access"`` -> ``"web-access"``)."""
    return re.sub(r"[^A-Za-z0-9]+", "-", value.strip()).strip("- ").lower()


class _Tagged:
    tags: list[str]

    def is_tagged_with_any(self, *tags: str) -> bool:
        return contains_case_insensitive_any(self.tags, *tags)

    def is_tagged_with_base_tag(self, base_tag: str) -> bool:
        return is_tagged_with_base_tag(self.tags, base_tag)


# ---------------------------------------------------------------------------
# Graph elements
# ---------------------------------------------------------------------------

@dataclass
class Author:
    name: str = ""
    homepage: str = ""


@dataclass
class Overview:
    description: str = ""
    images: list[dict[str, str]] = field(default_factory=list)


@dataclass
class DataAsset(_Tagged):
    """A logical piece of information processed, stored or transferred."""
    id: str
    title: str
    description: str = ""
    usage: Usage = Usage.BUSINESS
    tags: list[str] = field(default_factory=list)
    origin: str = ""
    owner: str = ""
    quantity: Quantity = Quantity.VERY_FEW
    confidentiality: Confidentiality = Confidentiality.PUBLIC
    integrity: Criticality = Criticality.ARCHIVE
    availability: Criticality = Criticality.ARCHIVE
    justification_cia_rating: str = ""


@dataclass
class CommunicationLink(_Tagged):
    """A directed data flow from ``source_id`` to ``target_id``."""
    id: str
    source_id: str
    target_id: str
    title: str
    description: str = ""
    protocol: Protocol = Protocol.UNKNOWN_PROTOCOL
    tags: list[str] = field(default_factory=list)
    vpn: bool = False
    ip_filtered: bool = False
    readonly: bool = False
    authentication: Authentication = Authentication.NONE
    authorization: Authorization = Authorization.NONE
    usage: Usage = Usage.BUSINESS
    data_assets_sent: list[str] = field(default_factory=list)
    data_assets_received: list[str] = field(default_factory=list)
    diagram_tweak_weight: int = 1
    diagram_tweak_constraint: bool = True

    def highest_confidentiality(self, model: ParsedModel) -> Confidentiality:
        highest = Confidentiality.PUBLIC
        for data_id in self.data_assets_sent + self.data_assets_received:
            highest = max(highest, model.data_assets[data_id].confidentiality)
        return highest

    def highest_integrity(self, model: ParsedModel) -> Criticality:
        highest = Criticality.ARCHIVE
        for data_id in self.data_assets_sent + self.data_assets_received:
            highest = max(highest, model.data_assets[data_id].integrity)
        return highest

    def highest_availability(self, model: ParsedModel) -> Criticality:
        highest = Criticality.ARCHIVE
        for data_id in self.data_assets_sent + self.data_assets_received:
            highest = max(highest, model.data_assets[data_id].availability)
        return highest

    def is_across_trust_boundary(self, model: ParsedModel) -> bool:
        return model.trust_boundary_id_of(self.source_id) != model.trust_boundary_id_of(self.target_id)

    def is_across_trust_boundary_network_only(self, model: ParsedModel) -> bool:
        source_boundary = model.network_trust_boundary_of(self.source_id)
        target_boundary = model.network_trust_boundary_of(self.target_id)
        source_id = source_boundary.id if source_boundary else ""
        target_id = target_boundary.id if target_boundary else ""
        # an asset outside any boundary counts as plain network placement
        target_is_network = target_boundary is None or target_boundary.type.is_network_boundary()
        return source_id != target_id and target_is_network


@dataclass
class TechnicalAsset(_Tagged):
    """A system component: external entity, process or datastore."""
    id: str
    title: str
    description: str = ""
    usage: Usage = Usage.BUSINESS
    type: TechnicalAssetType = TechnicalAssetType.PROCESS
    size: TechnicalAssetSize = TechnicalAssetSize.SERVICE
    technology: Technology = Technology.UNKNOWN_TECHNOLOGY
    machine: TechnicalAssetMachine = TechnicalAssetMachine.VIRTUAL
    internet: bool = False
    multi_tenant: bool = False
    redundant: bool = False
    custom_developed_parts: bool = False
    out_of_scope: bool = False
    used_as_client_by_human: bool = False
    encryption: EncryptionStyle = EncryptionStyle.NONE
    justification_out_of_scope: str = ""
    owner: str = ""
    confidentiality: Confidentiality = Confidentiality.PUBLIC
    integrity: Criticality = Criticality.ARCHIVE
    availability: Criticality = Criticality.ARCHIVE
    justification_cia_rating: str = ""
    tags: list[str] = field(default_factory=list)
    data_assets_processed: list[str] = field(default_factory=list)
    data_assets_stored: list[str] = field(default_factory=list)
    data_formats_accepted: list[DataFormat] = field(default_factory=list)
    communication_links: list[CommunicationLink] = field(default_factory=list)
    diagram_tweak_order: int = 0
    # set by the attractiveness plugin, if one is configured
    raa: float = 0.0

    # -- sensitivity -------------------------------------------------------

    def highest_confidentiality(self, model: ParsedModel) -> Confidentiality:
        highest = self.confidentiality
        for data_id in self.data_assets_processed + self.data_assets_stored:
            highest = max(highest, model.data_assets[data_id].confidentiality)
        return highest

    def highest_integrity(self, model: ParsedModel) -> Criticality:
        highest = self.integrity
        for data_id in self.data_assets_processed + self.data_assets_stored:
            highest = max(highest, model.data_assets[data_id].integrity)
        return highest

    def highest_availability(self, model: ParsedModel) -> Criticality:
        highest = self.availability
        for data_id in self.data_assets_processed + self.data_assets_stored:
            highest = max(highest, model.data_assets[data_id].availability)
        return highest

    def highest_sensitivity_score(self) -> float:
        return (
            self.confidentiality.attacker_attractiveness_for_asset
            + self.integrity.attacker_attractiveness_for_asset
            + self.availability.attacker_attractiveness_for_asset
        )

    # -- graph -------------------------------------------------------------

    def is_tagged_with_any_traversing_up(self, model: ParsedModel, *tags: str) -> bool:
        """Check own tags, then enclosing trust boundaries upwards, then shared runtimes."""
        if self.is_tagged_with_any(*tags):
            return True
        boundary = model.direct_trust_boundary_by_asset.get(self.id)
        if boundary is not None and boundary.is_tagged_with_any_traversing_up(model, *tags):
            return True
        for runtime in model.shared_runtimes.values():
            if self.id in runtime.technical_assets_running and runtime.is_tagged_with_any(*tags):
                return True
        return False

    def is_same_execution_environment(self, model: ParsedModel, other_asset_id: str) -> bool:
        mine = model.direct_trust_boundary_by_asset.get(self.id)
        other = model.direct_trust_boundary_by_asset.get(other_asset_id)
        if mine is None or other is None:
            return False
        if (mine.type is TrustBoundaryType.EXECUTION_ENVIRONMENT
                and other.type is TrustBoundaryType.EXECUTION_ENVIRONMENT):
            return mine.id == other.id
        return False

    def is_same_trust_boundary_network_only(self, model: ParsedModel, other_asset_id: str) -> bool:
        mine = model.network_trust_boundary_of(self.id)
        other = model.network_trust_boundary_of(other_asset_id)
        return (mine.id if mine else "") == (other.id if other else "")

    def has_direct_connection(self, model: ParsedModel, other_asset_id: str) -> bool:
        for link in model.incoming_links_by_target.get(self.id, []):
            if link.source_id == other_asset_id:
                return True
        # check both directions, hence two times, just reversed
        for link in model.incoming_links_by_target.get(other_asset_id, []):
            if link.source_id == self.id:
                return True
        return False

    def processes_or_stores_data_asset(self, data_asset_id: str) -> bool:
        return data_asset_id in self.data_assets_processed or data_asset_id in self.data_assets_stored

    def communication_links_sorted(self) -> list[CommunicationLink]:
        return sorted(self.communication_links, key=lambda c: c.title)


@dataclass
class TrustBoundary(_Tagged):
    """A containment scope around technical assets and nested boundaries."""
    id: str
    title: str
    description: str = ""
    type: TrustBoundaryType = TrustBoundaryType.NETWORK_ON_PREM
    tags: list[str] = field(default_factory=list)
    technical_assets_inside: list[str] = field(default_factory=list)
    trust_boundaries_nested: list[str] = field(default_factory=list)

    def parent_trust_boundary_id(self, model: ParsedModel) -> str:
        for candidate_id in sorted(model.trust_boundaries):
            if self.id in model.trust_boundaries[candidate_id].trust_boundaries_nested:
                return candidate_id
        return ""

    def is_tagged_with_any_traversing_up(self, model: ParsedModel, *tags: str) -> bool:
        if self.is_tagged_with_any(*tags):
            return True
        parent_id = self.parent_trust_boundary_id(model)
        return bool(parent_id) and model.trust_boundaries[parent_id].is_tagged_with_any_traversing_up(model, *tags)

    def recursively_all_technical_asset_ids_inside(self, model: ParsedModel) -> list[str]:
        result = list(self.technical_assets_inside)
        for nested_id in self.trust_boundaries_nested:
            result.extend(model.trust_boundaries[nested_id].recursively_all_technical_asset_ids_inside(model))
        return result

    def all_parent_trust_boundary_ids(self, model: ParsedModel) -> list[str]:
        """This boundary's id followed by every ancestor id, innermost first."""
        result = [self.id]
        parent_id = self.parent_trust_boundary_id(model)
        while parent_id and parent_id not in result:
            result.append(parent_id)
            parent_id = model.trust_boundaries[parent_id].parent_trust_boundary_id(model)
        return result

    def highest_confidentiality(self, model: ParsedModel) -> Confidentiality:
        highest = Confidentiality.PUBLIC
        for asset_id in self.recursively_all_technical_asset_ids_inside(model):
            highest = max(highest, model.technical_assets[asset_id].highest_confidentiality(model))
        return highest

    def highest_integrity(self, model: ParsedModel) -> Criticality:
        highest = Criticality.ARCHIVE
        for asset_id in self.recursively_all_technical_asset_ids_inside(model):
            highest = max(highest, model.technical_assets[asset_id].highest_integrity(model))
        return highest

    def highest_availability(self, model: ParsedModel) -> Criticality:
        highest = Criticality.ARCHIVE
        for asset_id in self.recursively_all_technical_asset_ids_inside(model):
            highest = max(highest, model.technical_assets[asset_id].highest_availability(model))
        return highest


@dataclass
class SharedRuntime(_Tagged):
    """A deployment unit hosting several technical assets."""
    id: str
    title: str
    description: str = ""
    tags: list[str] = field(default_factory=list)
    technical_assets_running: list[str] = field(default_factory=list)

    def highest_confidentiality(self, model: ParsedModel) -> Confidentiality:
        highest = Confidentiality.PUBLIC
        for asset_id in self.technical_assets_running:
            highest = max(highest, model.technical_assets[asset_id].highest_confidentiality(model))
        return highest

    def highest_integrity(self, model: ParsedModel) -> Criticality:
        highest = Criticality.ARCHIVE
        for asset_id in self.technical_assets_running:
            highest = max(highest, model.technical_assets[asset_id].highest_integrity(model))
        return highest

    def highest_availability(self, model: ParsedModel) -> Criticality:
        highest = Criticality.ARCHIVE
        for asset_id in self.technical_assets_running:
            highest = max(highest, model.technical_assets[asset_id].highest_availability(model))
        return highest


# ---------------------------------------------------------------------------
# Risks
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RiskCategory:
    """Static metadata describing one kind of risk."""
    id: str
    title: str
    description: str = ""
    impact: str = ""
    asvs: str = ""
    cheat_sheet: str = ""
    action: str = ""
    mitigation: str = ""
    check: str = ""
    function: RiskFunction = RiskFunction.ARCHITECTURE
    stride: STRIDE = STRIDE.SPOOFING
    detection_logic: str = ""
    risk_assessment: str = ""
    false_positives: str = ""
    model_failure_possible_reason: bool = False
    cwe: int = 0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RiskCategory:
        return cls(
            id=str(data["id"]),
            title=str(data.get("title", "")),
            description=str(data.get("description", "")),
            impact=str(data.get("impact", "")),
            asvs=str(data.get("asvs", "")),
            cheat_sheet=str(data.get("cheat_sheet", "")),
            action=str(data.get("action", "")),
            mitigation=str(data.get("mitigation", "")),
            check=str(data.get("check", "")),
            function=RiskFunction.parse(data.get("function") or RiskFunction.ARCHITECTURE.value),
            stride=STRIDE.parse(data.get("stride") or STRIDE.SPOOFING.value),
            detection_logic=str(data.get("detection_logic", "")),
            risk_assessment=str(data.get("risk_assessment", "")),
            false_positives=str(data.get("false_positives", "")),
            model_failure_possible_reason=bool(data.get("model_failure_possible_reason", False)),
            cwe=int(data.get("cwe", 0) or 0),
        )


@dataclass
class Risk:
    """One concrete finding produced by a rule."""
    category: RiskCategory
    severity: RiskSeverity
    exploitation_likelihood: RiskExploitationLikelihood
    exploitation_impact: RiskExploitationImpact
    title: str
    synthetic_id: str = ""
    most_relevant_data_asset_id: str = ""
    most_relevant_technical_asset_id: str = ""
    most_relevant_communication_link_id: str = ""
    most_relevant_trust_boundary_id: str = ""
    most_relevant_shared_runtime_id: str = ""
    data_breach_probability: DataBreachProbability = DataBreachProbability.IMPROBABLE
    data_breach_technical_asset_ids: list[str] = field(default_factory=list)
    # assigned during tracking reconciliation
    risk_status: RiskStatus = RiskStatus.UNCHECKED

    @property
    def category_id(self) -> str:
        return self.category.id

    def to_dict(self) -> dict[str, Any]:
        return {
            "category": self.category.id,
            "risk_status": self.risk_status.value,
            "severity": self.severity.value,
            "exploitation_likelihood": self.exploitation_likelihood.value,
            "exploitation_impact": self.exploitation_impact.value,
            "title": self.title,
            "synthetic_id": self.synthetic_id,
            "most_relevant_data_asset": self.most_relevant_data_asset_id,
            "most_relevant_technical_asset": self.most_relevant_technical_asset_id,
            "most_relevant_trust_boundary": self.most_relevant_trust_boundary_id,
            "most_relevant_shared_runtime": self.most_relevant_shared_runtime_id,
            "most_relevant_communication_link": self.most_relevant_communication_link_id,
            "data_breach_probability": self.data_breach_probability.value,
            "data_breach_technical_assets": list(self.data_breach_technical_asset_ids),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any], category: RiskCategory) -> Risk:
        """Build a risk from its serialized form; enum fields are validated."""
        return cls(
            category=category,
            severity=RiskSeverity.parse(data["severity"]),
            exploitation_likelihood=RiskExploitationLikelihood.parse(data["exploitation_likelihood"]),
            exploitation_impact=RiskExploitationImpact.parse(data["exploitation_impact"]),
            title=str(data["title"]),
            synthetic_id=str(data["synthetic_id"]),
            most_relevant_data_asset_id=str(data.get("most_relevant_data_asset") or ""),
            most_relevant_technical_asset_id=str(data.get("most_relevant_technical_asset") or ""),
            most_relevant_communication_link_id=str(data.get("most_relevant_communication_link") or ""),
            most_relevant_trust_boundary_id=str(data.get("most_relevant_trust_boundary") or ""),
            most_relevant_shared_runtime_id=str(data.get("most_relevant_shared_runtime") or ""),
            data_breach_probability=DataBreachProbability.parse(
                data.get("data_breach_probability") or DataBreachProbability.IMPROBABLE.value
            ),
            data_breach_technical_asset_ids=[str(x) for x in data.get("data_breach_technical_assets") or []],
        )


@dataclass
class RiskTracking:
    """A recorded human disposition for one risk id or wildcard pattern."""
    synthetic_risk_id: str
    status: RiskStatus = RiskStatus.UNCHECKED
    justification: str = ""
    ticket: str = ""
    checked_by: str = ""
    date: datetime.date | None = None

    @property
    def is_wildcard(self) -> bool:
        return "*" in self.synthetic_risk_id


# ---------------------------------------------------------------------------
# Model root
# ---------------------------------------------------------------------------

@dataclass
class ParsedModel:
    """The validated, cross-referenced architecture graph."""
    title: str = ""
    author: Author = field(default_factory=Author)
    date: datetime.date = field(default_factory=datetime.date.today)
    management_summary_comment: str = ""
    business_overview: Overview = field(default_factory=Overview)
    technical_overview: Overview = field(default_factory=Overview)
    business_criticality: Criticality = Criticality.IMPORTANT
    security_requirements: dict[str, str] = field(default_factory=dict)
    questions: dict[str, str] = field(default_factory=dict)
    abuse_cases: dict[str, str] = field(default_factory=dict)
    tags_available: list[str] = field(default_factory=list)
    data_assets: dict[str, DataAsset] = field(default_factory=dict)
    technical_assets: dict[str, TechnicalAsset] = field(default_factory=dict)
    trust_boundaries: dict[str, TrustBoundary] = field(default_factory=dict)
    shared_runtimes: dict[str, SharedRuntime] = field(default_factory=dict)
    individual_risk_categories: dict[str, RiskCategory] = field(default_factory=dict)
    # risks declared by hand in the model, keyed by category id
    individual_risks: dict[str, list[Risk]] = field(default_factory=dict)
    # exact-id tracking keyed by lower-cased synthetic id; wildcard tracking keyed by pattern
    risk_tracking: dict[str, RiskTracking] = field(default_factory=dict)
    wildcard_risk_tracking: dict[str, RiskTracking] = field(default_factory=dict)

    # derived lookups, filled by build_indexes()
    communication_links: dict[str, CommunicationLink] = field(default_factory=dict, repr=False)
    incoming_links_by_target: dict[str, list[CommunicationLink]] = field(default_factory=dict, repr=False)
    direct_trust_boundary_by_asset: dict[str, TrustBoundary] = field(default_factory=dict, repr=False)
    direct_shared_runtime_by_asset: dict[str, SharedRuntime] = field(default_factory=dict, repr=False)

    def build_indexes(self) -> None:
        """Populate the derived lookup maps from the primary collections."""
        self.communication_links = {}
        self.incoming_links_by_target = {}
        for asset_id in self.sorted_technical_asset_ids():
            for link in self.technical_assets[asset_id].communication_links:
                self.communication_links[link.id] = link
                self.incoming_links_by_target.setdefault(link.target_id, []).append(link)
        self.direct_trust_boundary_by_asset = {}
        for boundary_id in sorted(self.trust_boundaries):
            boundary = self.trust_boundaries[boundary_id]
            for asset_id in boundary.technical_assets_inside:
                self.direct_trust_boundary_by_asset[asset_id] = boundary
        self.direct_shared_runtime_by_asset = {}
        for runtime_id in sorted(self.shared_runtimes):
            runtime = self.shared_runtimes[runtime_id]
            for asset_id in runtime.technical_assets_running:
                self.direct_shared_runtime_by_asset[asset_id] = runtime

    # -- ordered views -----------------------------------------------------

    def sorted_technical_asset_ids(self) -> list[str]:
        return sorted(self.technical_assets)

    def sorted_technical_assets(self) -> list[TechnicalAsset]:
        return [self.technical_assets[i] for i in self.sorted_technical_asset_ids()]

    def sorted_trust_boundary_ids(self) -> list[str]:
        return sorted(self.trust_boundaries)

    def sorted_shared_runtime_ids(self) -> list[str]:
        return sorted(self.shared_runtimes)

    def incoming_links(self, asset_id: str) -> list[CommunicationLink]:
        return self.incoming_links_by_target.get(asset_id, [])

    def tags_actually_used(self) -> list[str]:
        used: set[str] = set()
        for asset in self.technical_assets.values():
            used.update(asset.tags)
            for link in asset.communication_links:
                used.update(link.tags)
        for collection in (self.data_assets, self.trust_boundaries, self.shared_runtimes):
            for element in collection.values():
                used.update(element.tags)
        return sorted(used)

    # -- trust boundary traversal -----------------------------------------

    def trust_boundary_id_of(self, asset_id: str) -> str:
        boundary = self.direct_trust_boundary_by_asset.get(asset_id)
        return boundary.id if boundary else ""

    def network_trust_boundary_of(self, asset_id: str) -> TrustBoundary | None:
        """Direct boundary of the asset, replaced by its parent when not network-based."""
        boundary = self.direct_trust_boundary_by_asset.get(asset_id)
        if boundary is not None and not boundary.type.is_network_boundary():
            parent_id = boundary.parent_trust_boundary_id(self)
            boundary = self.trust_boundaries.get(parent_id) if parent_id else None
        return boundary

    def is_sharing_same_parent_trust_boundary(self, left: TechnicalAsset, right: TechnicalAsset) -> bool:
        left_id, right_id = self.trust_boundary_id_of(left.id), self.trust_boundary_id_of(right.id)
        if not left_id and not right_id:
            return True
        if not left_id or not right_id:
            return False
        if left_id == right_id:
            return True
        left_parents = self.trust_boundaries[left_id].all_parent_trust_boundary_ids(self)
        right_parents = set(self.trust_boundaries[right_id].all_parent_trust_boundary_ids(self))
        return any(p in right_parents for p in left_parents)

    # -- tagged lookups -----------------------------------------------------

    def technical_assets_tagged_with_any(self, *tags: str) -> list[TechnicalAsset]:
        return [a for a in self.sorted_technical_assets() if a.is_tagged_with_any(*tags)]

    def trust_boundaries_tagged_with_any(self, *tags: str) -> list[TrustBoundary]:
        return [self.trust_boundaries[i] for i in self.sorted_trust_boundary_ids()
                if self.trust_boundaries[i].is_tagged_with_any(*tags)]

    def shared_runtimes_tagged_with_any(self, *tags: str) -> list[SharedRuntime]:
        return [self.shared_runtimes[i] for i in self.sorted_shared_runtime_ids()
                if self.shared_runtimes[i].is_tagged_with_any(*tags)]

    # -- serialization --------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Plain-JSON form of the graph, as handed to out-of-process plugins."""
        return {
            "title": self.title,
            "author": asdict(self.author),
            "date": self.date.isoformat(),
            "management_summary_comment": self.management_summary_comment,
            "business_criticality": self.business_criticality.value,
            "security_requirements": dict(self.security_requirements),
            "questions": dict(self.questions),
            "abuse_cases": dict(self.abuse_cases),
            "tags_available": list(self.tags_available),
            "data_assets": {k: asdict(v) for k, v in sorted(self.data_assets.items())},
            "technical_assets": {k: asdict(v) for k, v in sorted(self.technical_assets.items())},
            "trust_boundaries": {k: asdict(v) for k, v in sorted(self.trust_boundaries.items())},
            "shared_runtimes": {k: asdict(v) for k, v in sorted(self.shared_runtimes.items())},
            "individual_risk_categories": {
                k: v.to_dict() for k, v in sorted(self.individual_risk_categories.items())
            },
        }
