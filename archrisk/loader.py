"""Model loader and validator.

Reads a YAML architecture model and turns it into a cross-referenced
``ParsedModel``.  Validation is strict: the first unknown enum value,
malformed or duplicate id, dangling reference, unregistered tag or
double trust-boundary claim aborts the load with a ``ModelValidationError``
subclass naming the field, the element and the offending value.

Collections in the document are maps keyed by element title; every entry
carries its own ``id``.  Entries are processed in sorted title order so the
first reported error is stable across runs.
"""

from __future__ import annotations

import datetime
import logging
import re
from pathlib import Path
from typing import Any, Type, TypeVar

import yaml

from archrisk.config import DATE_FORMAT, ID_PATTERN
from archrisk.errors import (
    DuplicateIdError,
    InvalidDateError,
    InvalidIdError,
    MissingReferenceError,
    ModelValidationError,
    MultipleTrustBoundariesError,
    UnknownValueError,
)
from archrisk.models import (
    Author,
    CommunicationLink,
    DataAsset,
    Overview,
    ParsedModel,
    Risk,
    RiskCategory,
    RiskTracking,
    SharedRuntime,
    TechnicalAsset,
    TrustBoundary,
    make_id,
    normalize_tag,
)
from archrisk.risks import create_synthetic_id
from archrisk.types import (
    STRIDE,
    Authentication,
    Authorization,
    Confidentiality,
    Criticality,
    DataBreachProbability,
    DataFormat,
    EncryptionStyle,
    OrderedEnum,
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

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=OrderedEnum)

_ID_RE = re.compile(ID_PATTERN)


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------

def load_model_file(path: str | Path) -> ParsedModel:
    """Read and validate the YAML model at *path*."""
    path = Path(path)
    logger.info("Loading model from %s", path)
    with open(path, "r", encoding="utf-8") as f:
        try:
            raw = yaml.safe_load(f)
        except yaml.YAMLError as exc:
            raise ModelValidationError(f"unable to parse model yaml: {exc}", file=str(path)) from exc
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ModelValidationError("model document must be a mapping", file=str(path))
    return parse_model(raw)


def parse_model(raw: dict[str, Any]) -> ParsedModel:
    """Validate a raw model document and build the domain graph."""
    return _ModelParser(raw).parse()


# ---------------------------------------------------------------------------
# Field helpers
# ---------------------------------------------------------------------------

def _str(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _str_list(value: Any) -> list[str]:
    if not value:
        return []
    if isinstance(value, (str, int, float)):
        return [str(value)]
    return [_str(v) for v in value]


def _map(value: Any) -> dict[str, Any]:
    if not value:
        return {}
    return {str(k): (v or {}) for k, v in value.items()}


def _with_default(value: Any, default: str) -> str:
    text = _str(value).strip()
    return text if text else default


def _parse_enum(enum_cls: Type[E], value: Any, message_prefix: str) -> E:
    """Parse *value* into *enum_cls* or raise ``UnknownValueError``.

    ``message_prefix`` is the text before the colon, e.g.
    ``"unknown 'usage' value of data asset 'Customer Data'"``.
    """
    text = _str(value)
    try:
        return enum_cls.parse(text)
    except ValueError:
        raise UnknownValueError(f"{message_prefix}: {text}", value=text, enum=enum_cls.__name__) from None


def _parse_date(value: Any, message: str) -> datetime.date:
    # PyYAML already turns unquoted ISO dates into date objects
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    try:
        return datetime.datetime.strptime(_str(value).strip(), DATE_FORMAT).date()
    except ValueError:
        raise InvalidDateError(message, value=_str(value)) from None


def _check_id_syntax(element_id: str) -> None:
    if not _ID_RE.match(element_id):
        raise InvalidIdError(
            f"invalid id syntax used (only letters, numbers, and hyphen allowed): {element_id}",
            id=element_id,
        )


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------

class _ModelParser:
    """Single-use parser holding the partially built model and the id registry."""

    def __init__(self, raw: dict[str, Any]):
        self.raw = raw
        self.model = ParsedModel()
        self.ids_used: set[str] = set()

    def parse(self) -> ParsedModel:
        self._parse_metadata()
        self._parse_data_assets()
        self._parse_technical_assets()
        self._parse_trust_boundaries()
        self._parse_shared_runtimes()
        self._parse_individual_risk_categories()
        self._parse_risk_tracking()
        self._check_communication_link_targets()
        self.model.build_indexes()
        logger.info(
            "Parsed model %r: %d data assets, %d technical assets, %d trust boundaries, %d shared runtimes",
            self.model.title,
            len(self.model.data_assets),
            len(self.model.technical_assets),
            len(self.model.trust_boundaries),
            len(self.model.shared_runtimes),
        )
        return self.model

    # -- shared checks ------------------------------------------------------

    def _check_id_unique(self, element_id: str) -> None:
        if element_id in self.ids_used:
            raise DuplicateIdError(f"duplicate id used: {element_id}", id=element_id)
        self.ids_used.add(element_id)

    def _check_tags(self, tags: list[str], where: str) -> list[str]:
        result = []
        for tag in tags:
            tag = normalize_tag(tag)
            if tag not in self.model.tags_available:
                raise MissingReferenceError(
                    f"missing referenced tag in overall tag list at {where}: {tag}",
                    tag=tag,
                    where=where,
                )
            result.append(tag)
        return result

    def _check_data_asset_references(self, data_ids: list[str], where: str) -> list[str]:
        for data_id in data_ids:
            if data_id not in self.model.data_assets:
                raise MissingReferenceError(
                    f"missing referenced data asset target at {where}: {data_id}",
                    id=data_id,
                    where=where,
                )
        return data_ids

    # -- metadata -----------------------------------------------------------

    def _parse_metadata(self) -> None:
        raw = self.raw
        model = self.model
        model.title = _str(raw.get("title"))
        author = raw.get("author") or {}
        model.author = Author(name=_str(author.get("name")), homepage=_str(author.get("homepage")))
        model.management_summary_comment = _str(raw.get("management_summary_comment"))
        for key in ("business_overview", "technical_overview"):
            overview = raw.get(key) or {}
            setattr(model, key, Overview(
                description=_str(overview.get("description")),
                images=list(overview.get("images") or []),
            ))
        model.security_requirements = {str(k): _str(v) for k, v in (raw.get("security_requirements") or {}).items()}
        model.questions = {str(k): _str(v) for k, v in (raw.get("questions") or {}).items()}
        model.abuse_cases = {str(k): _str(v) for k, v in (raw.get("abuse_cases") or {}).items()}

        criticality = _str(raw.get("business_criticality")).strip() or Criticality.IMPORTANT.value
        model.business_criticality = _parse_enum(
            Criticality, criticality, "unknown 'business_criticality' value of application"
        )

        if raw.get("date") in (None, ""):
            model.date = datetime.date.today()
        else:
            model.date = _parse_date(raw["date"], "unable to parse 'date' value of model file")

        model.tags_available = sorted({normalize_tag(t) for t in _str_list(raw.get("tags_available"))})

    # -- data assets ----------------------------------------------------------

    def _parse_data_assets(self) -> None:
        entries = _map(self.raw.get("data_assets"))
        for title in sorted(entries):
            entry = entries[title]
            where = f"data asset '{title}'"
            asset_id = _str(entry.get("id"))
            data_asset = DataAsset(
                id=asset_id,
                title=title,
                description=_with_default(entry.get("description"), title),
                usage=_parse_enum(Usage, entry.get("usage"), f"unknown 'usage' value of {where}"),
                origin=_str(entry.get("origin")),
                owner=_str(entry.get("owner")),
                quantity=_parse_enum(Quantity, entry.get("quantity"), f"unknown 'quantity' value of {where}"),
                confidentiality=_parse_enum(
                    Confidentiality, entry.get("confidentiality"), f"unknown 'confidentiality' value of {where}"
                ),
                integrity=_parse_enum(Criticality, entry.get("integrity"), f"unknown 'integrity' value of {where}"),
                availability=_parse_enum(
                    Criticality, entry.get("availability"), f"unknown 'availability' value of {where}"
                ),
                justification_cia_rating=_str(entry.get("justification_cia_rating")),
            )
            _check_id_syntax(asset_id)
            self._check_id_unique(asset_id)
            data_asset.tags = self._check_tags(_str_list(entry.get("tags")), where)
            self.model.data_assets[asset_id] = data_asset

    # -- technical assets -----------------------------------------------------

    def _parse_technical_assets(self) -> None:
        entries = _map(self.raw.get("technical_assets"))
        for title in sorted(entries):
            entry = entries[title]
            where = f"technical asset '{title}'"
            asset_id = _str(entry.get("id"))

            usage = _parse_enum(Usage, entry.get("usage"), f"unknown 'usage' value of {where}")
            processed = self._check_data_asset_references(
                _str_list(entry.get("data_assets_processed")), where
            )
            stored = self._check_data_asset_references(_str_list(entry.get("data_assets_stored")), where)

            asset = TechnicalAsset(
                id=asset_id,
                title=title,
                description=_with_default(entry.get("description"), title),
                usage=usage,
                type=_parse_enum(TechnicalAssetType, entry.get("type"), f"unknown 'type' value of {where}"),
                size=_parse_enum(TechnicalAssetSize, entry.get("size"), f"unknown 'size' value of {where}"),
                technology=_parse_enum(
                    Technology, entry.get("technology"), f"unknown 'technology' value of {where}"
                ),
                encryption=_parse_enum(
                    EncryptionStyle, entry.get("encryption"), f"unknown 'encryption' value of {where}"
                ),
                machine=_parse_enum(
                    TechnicalAssetMachine, entry.get("machine"), f"unknown 'machine' value of {where}"
                ),
                confidentiality=_parse_enum(
                    Confidentiality, entry.get("confidentiality"), f"unknown 'confidentiality' value of {where}"
                ),
                integrity=_parse_enum(Criticality, entry.get("integrity"), f"unknown 'integrity' value of {where}"),
                availability=_parse_enum(
                    Criticality, entry.get("availability"), f"unknown 'availability' value of {where}"
                ),
                data_formats_accepted=[
                    _parse_enum(DataFormat, v, f"unknown 'data_formats_accepted' value of {where}")
                    for v in _str_list(entry.get("data_formats_accepted"))
                ],
                internet=bool(entry.get("internet", False)),
                multi_tenant=bool(entry.get("multi_tenant", False)),
                redundant=bool(entry.get("redundant", False)),
                custom_developed_parts=bool(entry.get("custom_developed_parts", False)),
                out_of_scope=bool(entry.get("out_of_scope", False)),
                used_as_client_by_human=bool(entry.get("used_as_client_by_human", False)),
                justification_out_of_scope=_str(entry.get("justification_out_of_scope")),
                owner=_str(entry.get("owner")),
                justification_cia_rating=_str(entry.get("justification_cia_rating")),
                data_assets_processed=processed,
                data_assets_stored=stored,
                diagram_tweak_order=int(entry.get("diagram_tweak_order") or 0),
            )
            asset.communication_links = self._parse_communication_links(asset, title, entry)

            _check_id_syntax(asset_id)
            self._check_id_unique(asset_id)
            asset.tags = self._check_tags(_str_list(entry.get("tags")), where)
            self.model.technical_assets[asset_id] = asset

    def _parse_communication_links(
        self, asset: TechnicalAsset, asset_title: str, entry: dict[str, Any]
    ) -> list[CommunicationLink]:
        links = []
        raw_links = _map(entry.get("communication_links"))
        for link_title in sorted(raw_links):
            raw_link = raw_links[link_title]
            where = f"technical asset '{asset_title}' communication link '{link_title}'"
            link_where = f"communication link '{link_title}' of technical asset '{asset_title}'"

            authentication = _parse_enum(
                Authentication, raw_link.get("authentication"), f"unknown 'authentication' value of {where}"
            )
            authorization = _parse_enum(
                Authorization, raw_link.get("authorization"), f"unknown 'authorization' value of {where}"
            )
            usage = _parse_enum(Usage, raw_link.get("usage"), f"unknown 'usage' value of {where}")
            protocol = _parse_enum(Protocol, raw_link.get("protocol"), f"unknown 'protocol' of {where}")
            sent = self._check_data_asset_references(_str_list(raw_link.get("data_assets_sent")), link_where)
            received = self._check_data_asset_references(
                _str_list(raw_link.get("data_assets_received")), link_where
            )
            weight = raw_link.get("diagram_tweak_weight")

            link = CommunicationLink(
                id=f"{asset.id}>{make_id(link_title)}",
                source_id=asset.id,
                target_id=_str(raw_link.get("target")),
                title=link_title,
                description=_with_default(raw_link.get("description"), link_title),
                protocol=protocol,
                vpn=bool(raw_link.get("vpn", False)),
                ip_filtered=bool(raw_link.get("ip_filtered", False)),
                readonly=bool(raw_link.get("readonly", False)),
                authentication=authentication,
                authorization=authorization,
                usage=usage,
                data_assets_sent=sent,
                data_assets_received=received,
                diagram_tweak_weight=int(weight) if weight else 1,
                diagram_tweak_constraint=not bool(raw_link.get("diagram_tweak_constraint", False)),
            )
            link.tags = self._check_tags(_str_list(raw_link.get("tags")), link_where)
            links.append(link)
        return links

    # -- trust boundaries -----------------------------------------------------

    def _parse_trust_boundaries(self) -> None:
        entries = _map(self.raw.get("trust_boundaries"))
        claimed_by: dict[str, str] = {}
        for title in sorted(entries):
            entry = entries[title]
            where = f"trust boundary '{title}'"
            boundary_id = _str(entry.get("id"))

            inside = _str_list(entry.get("technical_assets_inside"))
            for asset_id in inside:
                if asset_id not in self.model.technical_assets:
                    raise MissingReferenceError(
                        f"missing referenced technical asset {asset_id} at {where}",
                        id=asset_id,
                        where=where,
                    )
                if asset_id in claimed_by:
                    raise MultipleTrustBoundariesError(
                        f"referenced technical asset {asset_id} at {where} is modeled in multiple trust boundaries",
                        id=asset_id,
                        where=where,
                        other_boundary=claimed_by[asset_id],
                    )
                claimed_by[asset_id] = boundary_id

            boundary = TrustBoundary(
                id=boundary_id,
                title=title,
                description=_with_default(entry.get("description"), title),
                type=_parse_enum(TrustBoundaryType, entry.get("type"), f"unknown 'type' of {where}"),
                technical_assets_inside=inside,
                trust_boundaries_nested=_str_list(entry.get("trust_boundaries_nested")),
            )
            boundary.tags = self._check_tags(_str_list(entry.get("tags")), where)
            _check_id_syntax(boundary_id)
            self._check_id_unique(boundary_id)
            self.model.trust_boundaries[boundary_id] = boundary

        for boundary_id in sorted(self.model.trust_boundaries):
            for nested_id in self.model.trust_boundaries[boundary_id].trust_boundaries_nested:
                if nested_id not in self.model.trust_boundaries:
                    raise MissingReferenceError(
                        f"missing referenced nested trust boundary: {nested_id}",
                        id=nested_id,
                        where=f"trust boundary '{self.model.trust_boundaries[boundary_id].title}'",
                    )

    # -- shared runtimes ------------------------------------------------------

    def _parse_shared_runtimes(self) -> None:
        entries = _map(self.raw.get("shared_runtimes"))
        for title in sorted(entries):
            entry = entries[title]
            where = f"shared runtime '{title}'"
            runtime_id = _str(entry.get("id"))
            running = _str_list(entry.get("technical_assets_running"))
            for asset_id in running:
                if asset_id not in self.model.technical_assets:
                    raise MissingReferenceError(
                        f"missing referenced technical asset target at {where}: {asset_id}",
                        id=asset_id,
                        where=where,
                    )
            runtime = SharedRuntime(
                id=runtime_id,
                title=title,
                description=_with_default(entry.get("description"), title),
                technical_assets_running=running,
            )
            runtime.tags = self._check_tags(_str_list(entry.get("tags")), where)
            _check_id_syntax(runtime_id)
            self._check_id_unique(runtime_id)
            self.model.shared_runtimes[runtime_id] = runtime

    # -- individual risks -----------------------------------------------------

    def _parse_individual_risk_categories(self) -> None:
        entries = _map(self.raw.get("individual_risk_categories"))
        for title in sorted(entries):
            entry = entries[title]
            where = f"individual risk category '{title}'"
            category_id = _str(entry.get("id"))
            category = RiskCategory(
                id=category_id,
                title=title,
                description=_with_default(entry.get("description"), title),
                impact=_str(entry.get("impact")),
                asvs=_str(entry.get("asvs")),
                cheat_sheet=_str(entry.get("cheat_sheet")),
                action=_str(entry.get("action")),
                mitigation=_str(entry.get("mitigation")),
                check=_str(entry.get("check")),
                function=_parse_enum(RiskFunction, entry.get("function"), f"unknown 'function' value of {where}"),
                stride=_parse_enum(STRIDE, entry.get("stride"), f"unknown 'stride' value of {where}"),
                detection_logic=_str(entry.get("detection_logic")),
                risk_assessment=_str(entry.get("risk_assessment")),
                false_positives=_str(entry.get("false_positives")),
                model_failure_possible_reason=bool(entry.get("model_failure_possible_reason", False)),
                cwe=int(entry.get("cwe") or 0),
            )
            _check_id_syntax(category_id)
            self._check_id_unique(category_id)
            self.model.individual_risk_categories[category_id] = category

            risks = []
            identified = _map(entry.get("risks_identified"))
            for risk_title in sorted(identified):
                risks.append(self._parse_individual_risk(category, risk_title, identified[risk_title]))
            if risks:
                self.model.individual_risks[category_id] = risks

    def _parse_individual_risk(self, category: RiskCategory, title: str, entry: dict[str, Any]) -> Risk:
        where = f"individual risk instance '{title}'"
        severity = _parse_enum(
            RiskSeverity,
            _with_default(entry.get("severity"), RiskSeverity.MEDIUM.value),
            f"unknown 'severity' value of {where}",
        )
        likelihood = _parse_enum(
            RiskExploitationLikelihood,
            _with_default(entry.get("exploitation_likelihood"), RiskExploitationLikelihood.LIKELY.value),
            f"unknown 'exploitation_likelihood' value of {where}",
        )
        impact = _parse_enum(
            RiskExploitationImpact,
            _with_default(entry.get("exploitation_impact"), RiskExploitationImpact.MEDIUM.value),
            f"unknown 'exploitation_impact' value of {where}",
        )
        probability = _parse_enum(
            DataBreachProbability,
            _with_default(entry.get("data_breach_probability"), DataBreachProbability.POSSIBLE.value),
            f"unknown 'data_breach_probability' value of {where}",
        )

        ref_where = f"individual risk '{title}'"
        data_id = _str(entry.get("most_relevant_data_asset"))
        if data_id:
            self._check_data_asset_references([data_id], ref_where)
        asset_id = _str(entry.get("most_relevant_technical_asset"))
        if asset_id:
            self._check_technical_asset_references([asset_id], ref_where)
        link_id = _str(entry.get("most_relevant_communication_link"))
        if link_id and not self._communication_link_exists(link_id):
            raise MissingReferenceError(
                f"missing referenced communication link at {ref_where}: {link_id}", id=link_id, where=ref_where
            )
        boundary_id = _str(entry.get("most_relevant_trust_boundary"))
        if boundary_id and boundary_id not in self.model.trust_boundaries:
            raise MissingReferenceError(
                f"missing referenced trust boundary at {ref_where}: {boundary_id}", id=boundary_id, where=ref_where
            )
        runtime_id = _str(entry.get("most_relevant_shared_runtime"))
        if runtime_id and runtime_id not in self.model.shared_runtimes:
            raise MissingReferenceError(
                f"missing referenced shared runtime at {ref_where}: {runtime_id}", id=runtime_id, where=ref_where
            )
        breach_ids = self._check_technical_asset_references(
            _str_list(entry.get("data_breach_technical_assets")),
            f"data breach technical assets of {ref_where}",
        )

        return Risk(
            category=category,
            severity=severity,
            exploitation_likelihood=likelihood,
            exploitation_impact=impact,
            title=title,
            synthetic_id=create_synthetic_id(
                category.id,
                most_relevant_data_asset_id=data_id,
                most_relevant_technical_asset_id=asset_id,
                most_relevant_communication_link_id=link_id,
                most_relevant_trust_boundary_id=boundary_id,
                most_relevant_shared_runtime_id=runtime_id,
            ),
            most_relevant_data_asset_id=data_id,
            most_relevant_technical_asset_id=asset_id,
            most_relevant_communication_link_id=link_id,
            most_relevant_trust_boundary_id=boundary_id,
            most_relevant_shared_runtime_id=runtime_id,
            data_breach_probability=probability,
            data_breach_technical_asset_ids=breach_ids,
        )

    def _check_technical_asset_references(self, asset_ids: list[str], where: str) -> list[str]:
        for asset_id in asset_ids:
            if asset_id not in self.model.technical_assets:
                raise MissingReferenceError(
                    f"missing referenced technical asset target at {where}: {asset_id}",
                    id=asset_id,
                    where=where,
                )
        return asset_ids

    def _communication_link_exists(self, link_id: str) -> bool:
        return any(
            link.id == link_id
            for asset in self.model.technical_assets.values()
            for link in asset.communication_links
        )

    # -- risk tracking --------------------------------------------------------

    def _parse_risk_tracking(self) -> None:
        entries = _map(self.raw.get("risk_tracking"))
        for synthetic_id in sorted(entries):
            entry = entries[synthetic_id]
            date = None
            if entry.get("date") not in (None, ""):
                date = _parse_date(
                    entry["date"], f"unable to parse 'date' of risk tracking '{synthetic_id}': {_str(entry['date'])}"
                )
            status = _parse_enum(
                RiskStatus, entry.get("status"), f"unknown 'status' value of risk tracking '{synthetic_id}'"
            )
            key = synthetic_id.strip().lower()
            if key in self.model.risk_tracking or key in self.model.wildcard_risk_tracking:
                raise DuplicateIdError(
                    f"duplicate risk tracking id (ids are case-insensitive): {synthetic_id}",
                    id=synthetic_id,
                )
            tracking = RiskTracking(
                synthetic_risk_id=key,
                status=status,
                justification=_str(entry.get("justification")),
                ticket=_str(entry.get("ticket")),
                checked_by=_str(entry.get("checked_by")),
                date=date,
            )
            if tracking.is_wildcard:
                self.model.wildcard_risk_tracking[key] = tracking
            else:
                self.model.risk_tracking[key] = tracking

    # -- final cross-check ----------------------------------------------------

    def _check_communication_link_targets(self) -> None:
        for asset_id in sorted(self.model.technical_assets):
            asset = self.model.technical_assets[asset_id]
            for link in asset.communication_links:
                if link.target_id not in self.model.technical_assets:
                    where = f"communication link '{link.title}' of technical asset '{asset.title}'"
                    raise MissingReferenceError(
                        f"missing referenced technical asset target at {where}: {link.target_id}",
                        id=link.target_id,
                        where=where,
                    )
