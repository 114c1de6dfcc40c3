# src/kronjob/cli/formatter.py
from typing import List, Optional

from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from kronjob.core.models import Action, Step
from kronjob.manifests.exporter import ManifestExporter
from kronjob.reconcile.executor import ExecutionReport

# Shared console so tests can swap in a recording one
console = Console()

ACTION_STYLES = {
    Action.CREATE: "green",
    Action.UPDATE: "yellow",
    Action.DELETE: "red",
}


class PlanFormatter:
    """
    Renders plans, per-step YAML comparisons and the final run summary.
    """

    def __init__(self, out: Optional[Console] = None, exporter: Optional[ManifestExporter] = None):
        self.console = out or console
        self.exporter = exporter or ManifestExporter()

    def print_plan(self, plan: List[Step]):
        if not plan:
            self.console.print("[dim]ℹ Cluster already matches the manifests.[/dim]")
            return

        table = Table(title="Kronjob Plan", show_lines=True, header_style="bold magenta")
        table.add_column("#", justify="right", style="dim")
        table.add_column("Action", style="bold")
        table.add_column("Kind")
        table.add_column("Namespace", style="cyan")
        table.add_column("Name", style="white")
        table.add_column("Changed Fields", style="dim")

        for i, step in enumerate(plan, 1):
            target = step.pair.desired or step.pair.observed
            kind = target.kind
            if step.pair.desired and step.pair.observed and \
                    step.pair.desired.kind != step.pair.observed.kind:
                kind = f"{step.pair.observed.kind} → {step.pair.desired.kind}"
            color = ACTION_STYLES[step.action]
            table.add_row(
                str(i),
                f"[{color}]{step.action.value}[/{color}]",
                kind,
                target.metadata.namespace,
                target.metadata.name,
                ", ".join(sorted(step.fields)),
            )

        self.console.print(table)

    def show_side_by_side(self, step: Step):
        """Observed vs desired YAML for an update step."""
        if step.action != Action.UPDATE:
            return

        observed = Syntax(self.exporter.to_yaml(step.pair.observed).strip(), "yaml",
                          theme="ansi_dark", line_numbers=True)
        desired = Syntax(self.exporter.to_yaml(step.pair.desired).strip(), "yaml",
                         theme="monokai", line_numbers=True)

        layout_table = Table.grid(expand=True, padding=1)
        layout_table.add_column(ratio=1)
        layout_table.add_column(ratio=1)
        layout_table.add_row(
            Panel(observed, title=f"[bold red]CLUSTER: {step.pair.observed.metadata.name}[/bold red]",
                  border_style="red"),
            Panel(desired, title=f"[bold green]MANIFEST: {step.pair.desired.metadata.name}[/bold green]",
                  border_style="green"),
        )
        self.console.print(layout_table)

    def print_summary(self, report: ExecutionReport, desired_count: int, observed_count: int):
        mode = "[bold green]APPLIED[/bold green]" if report.executed else "[bold yellow]PREVIEW[/bold yellow]"
        lines = "\n".join(f"  • {d}" for d in report.descriptions) or "  (none)"
        self.console.print(Panel(
            f"[bold white]Summary Report[/bold white]\n"
            f"════════════════════════════════════════\n"
            f"Mode:            {mode}\n"
            f"Desired Objects: {desired_count}\n"
            f"Cluster Objects: {observed_count}\n"
            f"Steps Applied:   {report.applied}/{len(report.descriptions)}\n"
            f"Steps:\n{lines}\n\n"
            f"[bold]{report.outcome}[/bold]",
            border_style="dim"
        ))
