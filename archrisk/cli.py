"""Main CLI entry point for archrisk."""

import logging
import sys

import click

from archrisk import __version__
from archrisk.errors import ArchRiskError


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _fail(exc: ArchRiskError) -> None:
    from rich.console import Console
    from rich.markup import escape

    Console(stderr=True).print(f"[bold red]Error:[/bold red] {escape(str(exc))}", highlight=False)
    sys.exit(1)


@click.group()
@click.version_option(version=__version__)
def main():
    """archrisk: rule-based security risk analysis of architecture models."""


@main.command()
@click.option("-m", "--model", "model_file", type=click.Path(), default=None,
              help="Architecture model YAML file (default: threat-model.yaml).")
@click.option("-o", "--output", "output_dir", type=click.Path(), default=None,
              help="Directory for risks.json, stats.json and technical-assets.json.")
@click.option("--skip-risk-rules", default=None,
              help="Comma-separated risk rule ids to skip.")
@click.option("--ignore-orphaned-risk-tracking", is_flag=True, default=None,
              help="Log orphaned risk tracking entries instead of failing.")
@click.option("--custom-risk-rules-plugin", "custom_plugins", multiple=True,
              help="Executable custom risk rule plugin (repeatable).")
@click.option("--raa-plugin", default=None,
              help="Executable calculating relative attacker attractiveness.")
@click.option("--plugin-timeout", type=float, default=None,
              help="Per-call plugin timeout in seconds.")
@click.option("--config", "config_file", type=click.Path(exists=True), default=None,
              help="YAML or JSON settings file; command-line options take precedence.")
@click.option("--show", default=30, help="Number of risks to list on the console.")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
def analyze(model_file, output_dir, skip_risk_rules, ignore_orphaned_risk_tracking, custom_plugins,
            raa_plugin, plugin_timeout, config_file, show, verbose):
    """Analyze a model and write the identified risks as JSON."""
    import yaml

    from archrisk.config import AnalysisSettings
    from archrisk.report import run_analyze

    try:
        settings = AnalysisSettings.from_file(config_file) if config_file else AnalysisSettings()
    except (OSError, ValueError, TypeError, yaml.YAMLError) as exc:
        raise click.ClickException(f"unable to read settings file {config_file}: {exc}")

    overrides = {
        "model_file": model_file,
        "output_dir": output_dir,
        "skip_risk_rules": skip_risk_rules,
        "ignore_orphaned_risk_tracking": ignore_orphaned_risk_tracking,
        "raa_plugin": raa_plugin,
        "plugin_timeout_seconds": plugin_timeout,
    }
    for name, value in overrides.items():
        if value is not None:
            setattr(settings, name, value)
    if custom_plugins:
        settings.custom_risk_rules_plugins = list(custom_plugins)
    settings.verbose = settings.verbose or verbose

    _setup_logging(settings.verbose)
    try:
        run_analyze(settings, show)
    except ArchRiskError as exc:
        _fail(exc)


@main.command("list-risk-rules")
@click.option("--custom-risk-rules-plugin", "custom_plugins", multiple=True,
              help="Also list the rule of this plugin (repeatable).")
def list_risk_rules(custom_plugins):
    """List all built-in (and optionally custom) risk rules."""
    from archrisk.plugins import load_custom_risk_rules
    from archrisk.report import print_risk_rules
    from archrisk.rules.registry import builtin_rules

    try:
        rules = builtin_rules() + load_custom_risk_rules(list(custom_plugins))
    except ArchRiskError as exc:
        _fail(exc)
    print_risk_rules(rules)


@main.command("explain-risk-rule")
@click.argument("rule_id")
def explain_risk_rule(rule_id):
    """Show the detection logic and mitigation of RULE_ID."""
    from archrisk.report import print_risk_rule_explanation
    from archrisk.rules.registry import find_rule

    rule = find_rule(rule_id)
    if rule is None:
        raise click.ClickException(f"unknown risk rule: {rule_id}")
    print_risk_rule_explanation(rule)


@main.command("list-types")
def list_types():
    """List the accepted values of every enum-valued model field."""
    from archrisk.report import print_types

    print_types()


if __name__ == "__main__":
    main()
