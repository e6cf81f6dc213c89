"""Console runners for the CLI commands.

Each ``run_*`` function is what one ``archrisk`` subcommand invokes.  They
print with rich and leave file output to ``archrisk.export``.
"""

from __future__ import annotations

import time

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from archrisk.config import AnalysisSettings
from archrisk.context import AnalysisContext
from archrisk.risks import overall_risk_statistics, reduce_to_only_still_at_risk, risk_counts_by_stride
from archrisk.rules.registry import RiskRule
from archrisk.types import ALL_ENUMS, STRIDE, RiskSeverity, RiskStatus

console = Console()

_SEVERITY_STYLES = {
    RiskSeverity.CRITICAL: "bold magenta",
    RiskSeverity.HIGH: "bold red",
    RiskSeverity.ELEVATED: "red",
    RiskSeverity.MEDIUM: "yellow",
    RiskSeverity.LOW: "cyan",
}


def _print_statistics(ctx: AnalysisContext, elapsed: float) -> None:
    """Severity x status matrix plus a one-line overview."""
    stats = overall_risk_statistics(ctx.risks_by_category)
    all_risks = ctx.all_risks()
    overview = (
        f"Model: [bold]{escape(ctx.model.title or '(untitled)')}[/bold]  |  "
        f"Technical assets: [bold]{len(ctx.model.technical_assets)}[/bold]  |  "
        f"Risks: [bold]{len(all_risks)}[/bold]  |  "
        f"Still at risk: [bold]{len(reduce_to_only_still_at_risk(all_risks))}[/bold]\n"
        f"Elapsed: {elapsed:.1f}s"
    )
    console.print(Panel(overview, title="Risk Analysis Summary", border_style="green"))

    table = Table(title="Risks by Severity and Status", show_header=True, header_style="bold cyan")
    table.add_column("Severity", style="bold")
    for status in RiskStatus:
        table.add_column(status.title, justify="right")
    for severity in reversed(list(RiskSeverity)):
        row = stats[severity.value]
        table.add_row(
            f"[{_SEVERITY_STYLES[severity]}]{severity.title}[/]",
            *[str(row[status.value]) for status in RiskStatus],
        )
    console.print(table)

    stride_counts = risk_counts_by_stride(ctx.risks_by_category)
    stride_table = Table(title="Risks by STRIDE Category", show_header=True, header_style="bold cyan")
    stride_table.add_column("STRIDE", style="bold")
    stride_table.add_column("Risks", justify="right")
    for stride in STRIDE:
        stride_table.add_row(stride.title, str(stride_counts[stride.value]))
    console.print(stride_table)


def _print_risks(risks: list, limit: int) -> None:
    table = Table(title="Identified Risks", show_header=True, header_style="bold cyan")
    table.add_column("Severity")
    table.add_column("Status")
    table.add_column("Synthetic ID", style="dim", max_width=70)
    for risk in risks[:limit]:
        table.add_row(
            f"[{_SEVERITY_STYLES[risk.severity]}]{risk.severity.title}[/]",
            risk.risk_status.title,
            escape(risk.synthetic_id),
        )
    if len(risks) > limit:
        table.add_row("...", "", f"{len(risks) - limit} more", style="dim")
    console.print(table)


def run_analyze(settings: AnalysisSettings, show: int = 30) -> AnalysisContext:
    """Analyze the configured model, write JSON output and print a summary.

    This is the function invoked by ``archrisk analyze``.
    """
    from archrisk.engine import run_analysis
    from archrisk.export import sorted_risks, write_outputs

    console.print(
        Panel(
            f"Model: [bold]{escape(str(settings.model_file))}[/bold]\n"
            f"Output: [bold]{escape(str(settings.output_dir))}[/bold]",
            title="archrisk analyze",
            border_style="blue",
        )
    )
    start = time.perf_counter()
    ctx = run_analysis(settings)
    elapsed = time.perf_counter() - start

    if ctx.raa_summary:
        console.print(f"  RAA: {escape(ctx.raa_summary)}")
    _print_statistics(ctx, elapsed)
    if show > 0:
        _print_risks(sorted_risks(ctx), show)

    written = write_outputs(ctx, settings.output_dir)
    for path in written:
        console.print(f"  Written [bold green]{escape(str(path))}[/bold green]")
    return ctx


def print_risk_rules(rules: list[RiskRule]) -> None:
    table = Table(title="Risk Rules", show_header=True, header_style="bold cyan")
    table.add_column("ID", style="bold", no_wrap=True)
    table.add_column("Title")
    table.add_column("Function")
    table.add_column("STRIDE")
    table.add_column("CWE", justify="right")
    for rule in rules:
        category = rule.category
        table.add_row(escape(category.id), escape(category.title), category.function.title, category.stride.title,
                      str(category.cwe))
    console.print(table)


def print_risk_rule_explanation(rule: RiskRule) -> None:
    category = rule.category
    # category text may come from a plugin, so none of it is trusted as markup
    body = (
        f"[bold]{escape(category.title)}[/bold]  ({category.function.title}, {category.stride.title}, "
        f"CWE-{category.cwe})\n\n"
        f"{escape(category.description)}\n\n"
        f"[bold]Impact:[/bold] {escape(category.impact)}\n"
        f"[bold]Detection:[/bold] {escape(category.detection_logic)}\n"
        f"[bold]Rating:[/bold] {escape(category.risk_assessment)}\n"
        f"[bold]False positives:[/bold] {escape(category.false_positives)}\n"
        f"[bold]Mitigation ({escape(category.action)}):[/bold] {escape(category.mitigation)}\n"
        f"[bold]ASVS:[/bold] {escape(category.asvs)}\n"
        f"[bold]Cheat sheet:[/bold] {escape(category.cheat_sheet)}"
    )
    if rule.supported_tags:
        body += f"\n[bold]Supported tags:[/bold] {escape(', '.join(rule.supported_tags))}"
    console.print(Panel(body, title=escape(category.id), border_style="cyan"))


def print_types() -> None:
    table = Table(title="Model Value Types", show_header=True, header_style="bold cyan")
    table.add_column("Field", style="bold", no_wrap=True)
    table.add_column("Values")
    for name in sorted(ALL_ENUMS):
        table.add_row(name, ", ".join(ALL_ENUMS[name].values()))
    console.print(table)
