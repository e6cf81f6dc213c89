"""Tests for the rich console output."""
from archrisk.models import RiskCategory
from archrisk.report import print_risk_rule_explanation, print_risk_rules
from archrisk.rules.registry import RiskRule


def _odd_rule():
    category = RiskCategory(
        id="odd-rule",
        title="Odd [/oops] Rule",
        description="Matches [red] literally.",
        mitigation="Escape [bold]everything[/bold].",
    )
    return RiskRule(category, ("[tag]",), lambda ctx: [])


class TestMarkupInCategoryText:
    def test_explanation_prints_brackets_literally(self, capsys):
        print_risk_rule_explanation(_odd_rule())
        out = capsys.readouterr().out
        assert "[/oops]" in out
        assert "[red]" in out
        assert "[bold]everything[/bold]" in out
        assert "[tag]" in out

    def test_rule_listing_accepts_markup_like_titles(self, capsys):
        print_risk_rules([_odd_rule()])
        out = capsys.readouterr().out
        assert "odd-rule" in out
        assert "[/oops]" in out
