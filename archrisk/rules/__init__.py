"""Risk rules: the registry and the built-in rule catalogue."""

from archrisk.rules.registry import RiskRule, builtin_rules, find_rule, rules_by_id

__all__ = ["RiskRule", "builtin_rules", "find_rule", "rules_by_id"]
