"""Rich terminal rendering of an AnalysisReport."""

from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .models import AnalysisReport, Severity
from .utils.formatting import abbreviate_path

MAX_BRANCH_ROWS = 10

SEVERITY_STYLES = {
    Severity.HIGH: "red",
    Severity.MEDIUM: "yellow",
    Severity.LOW: "blue",
}


def _large_files_table(report: AnalysisReport) -> Table:
    table = Table(title="Large Files")
    table.add_column("File", style="cyan")
    table.add_column("Size", justify="right", style="magenta")
    table.add_column("Branches", justify="right")
    table.add_column("In Main?", justify="center")

    for file in report.large_files:
        in_main = "[green]✓[/green]" if file.is_on_primary_branch else "[red]✗[/red]"
        table.add_row(
            escape(abbreviate_path(file.path, 50)),
            file.formatted_size,
            str(len(file.referencing_branches)),
            in_main,
        )
    return table


def _branches_table(report: AnalysisReport) -> Table:
    table = Table(title="Branch Analysis")
    table.add_column("Branch", style="cyan")
    table.add_column("Type")
    table.add_column("Last Commit", style="blue")
    table.add_column("Large Files", justify="right")

    for branch in report.branches[:MAX_BRANCH_ROWS]:
        last_commit = (
            branch.last_commit_date.strftime("%Y-%m-%d")
            if branch.last_commit_date
            else "Unknown"
        )
        large_files = (
            str(len(branch.large_files))
            if branch.large_files_computed
            else "not computed"
        )
        table.add_row(
            escape(abbreviate_path(branch.name, 30)),
            "Remote" if branch.is_remote else "Local",
            last_commit,
            large_files,
        )
    return table


def display_report(report: AnalysisReport, console: Optional[Console] = None) -> None:
    """Print the summary, tables, recommendations and warnings of a report."""
    console = console or Console()
    summary = report.summary

    console.print("\n🔍 Git Repository Space Analysis", style="bold blue")
    console.print("─" * 50, style="dim")

    console.print("\n📊 Summary:", style="bold")
    console.print(f"Repository: {report.repository_path}", markup=False)
    console.print(f"Primary branch: {report.primary_branch}", markup=False)
    console.print(f"Total size: [yellow]{report.total_size_formatted}[/yellow]")
    console.print(f"Large files found: [yellow]{summary.total_files}[/yellow]")
    console.print(f"Branches analyzed: [yellow]{summary.total_branches}[/yellow]")
    console.print(
        "Potential cleanup savings: "
        f"[green]{summary.estimated_cleanup_savings_formatted}[/green]"
    )

    if report.large_files:
        console.print()
        console.print(_large_files_table(report))

    if report.recommendations:
        console.print("\n💡 Recommendations:", style="bold")
        for number, rec in enumerate(report.recommendations, start=1):
            style = SEVERITY_STYLES.get(rec.severity, "blue")
            console.print(
                f"\n{number}. [{style}]{rec.severity.value.upper()}[/{style}]: "
                f"{rec.description}"
            )
            console.print(
                f"   Potential savings: [green]{rec.estimated_savings_formatted}[/green]"
            )
            if rec.suggested_action:
                console.print(f"   [dim]Action:[/dim] {rec.suggested_action}")

    if report.branches:
        console.print()
        console.print(_branches_table(report))
        remaining = len(report.branches) - MAX_BRANCH_ROWS
        if remaining > 0:
            console.print(f"... and {remaining} more branches", style="dim")

    if report.warnings:
        console.print(f"\n⚠️  {len(report.warnings)} items could not be analyzed:", style="yellow")
        for warning in report.warnings:
            console.print(f"   • [{warning.scope}] {warning.message}", style="dim", markup=False)

    console.print("\n" + "─" * 50, style="dim")
    console.print("✨ Analysis complete!", style="bold green")

    if summary.estimated_cleanup_savings > 0:
        console.print(
            "\n⚠️  Consider cleaning up large files not in the main branch to save space.",
            style="yellow",
        )
        console.print(
            "Use tools like BFG Repo-Cleaner or git filter-repo for history cleanup.",
            style="dim",
        )
