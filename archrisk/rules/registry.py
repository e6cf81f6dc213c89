"""Risk rule records and the ordered registry of built-in rules.

Every rule, built-in or supplied by a plugin, is a ``RiskRule``: a category
descriptor, the tags it understands and a generation function taking the
``AnalysisContext``.  The engine treats all of them identically.
"""

from __future__ import annotations

import importlib
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

from archrisk.models import Risk, RiskCategory

if TYPE_CHECKING:
    from archrisk.context import AnalysisContext

GenerateRisks = Callable[["AnalysisContext"], list[Risk]]

# Applied in this order; one module per rule under archrisk.rules.builtin
BUILTIN_RULE_MODULES = [
    "accidental_secret_leak",
    "code_backdooring",
    "container_baseimage_backdooring",
    "container_platform_escape",
    "cross_site_request_forgery",
    "cross_site_scripting",
    "dos_risky_access_across_trust_boundary",
    "incomplete_model",
    "ldap_injection",
    "missing_authentication",
    "missing_authentication_second_factor",
    "missing_build_infrastructure",
    "missing_cloud_hardening",
    "missing_file_validation",
    "missing_hardening",
    "missing_identity_propagation",
    "missing_identity_provider_isolation",
    "missing_identity_store",
    "missing_network_segmentation",
    "missing_vault",
    "missing_vault_isolation",
    "missing_waf",
    "mixed_targets_on_shared_runtime",
    "path_traversal",
    "push_instead_of_pull_deployment",
    "search_query_injection",
    "server_side_request_forgery",
    "service_registry_poisoning",
    "sql_nosql_injection",
    "unchecked_deployment",
    "unencrypted_asset",
    "unencrypted_communication",
    "unguarded_access_from_internet",
    "unguarded_direct_datastore_access",
    "unnecessary_communication_link",
    "unnecessary_data_asset",
    "unnecessary_data_transfer",
    "unnecessary_technical_asset",
    "untrusted_deserialization",
    "wrong_communication_link_content",
    "wrong_trust_boundary_content",
    "xml_external_entity",
]


@dataclass(frozen=True)
class RiskRule:
    category: RiskCategory
    supported_tags: tuple[str, ...]
    generate_risks: GenerateRisks

    @property
    def id(self) -> str:
        return self.category.id


def builtin_rules() -> list[RiskRule]:
    """All built-in rules in their fixed application order."""
    rules = []
    for module_name in BUILTIN_RULE_MODULES:
        module = importlib.import_module(f"archrisk.rules.builtin.{module_name}")
        rules.append(module.RULE)
    return rules


def rules_by_id(rules: list[RiskRule]) -> dict[str, RiskRule]:
    return {rule.id: rule for rule in rules}


def find_rule(rule_id: str, rules: list[RiskRule] | None = None) -> RiskRule | None:
    if rules is None:
        rules = builtin_rules()
    return rules_by_id(rules).get(rule_id)
