"""Command line interface for Git Space Analyzer."""

import json
import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console

from . import __version__
from .config import ConfigManager
from .errors import GitSpaceAnalyzerError
from .report_display import display_report
from .services.analyzer import GitSpaceAnalyzer

logger = logging.getLogger(__name__)

console = Console()

CLI_DEFAULT_LIMIT = 50


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.version_option(version=__version__, prog_name="git-space-analyzer")
@click.pass_context
def cli(ctx, verbose: bool):
    """Analyze Git repository space usage and identify large files.

    \b
    EXAMPLES:
      git-space-analyzer analyze                      # Current directory
      git-space-analyzer analyze ../repo -t 5242880   # Blobs of 5MB and more
      git-space-analyzer analyze --branches main,dev  # Summarize two branches
      git-space-analyzer analyze --json > report.json

    \b
    CONFIGURATION:
      Optional file: <repository>/.git-space-analyzer.json
      Command line options take precedence over the file.
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s:%(name)s:%(message)s",
    )


@cli.command()
@click.argument("path", required=False, default=".", type=click.Path())
@click.option(
    "--threshold",
    "-t",
    type=int,
    default=None,
    help="Minimum file size to consider in bytes (default: 1048576)",
)
@click.option(
    "--limit",
    "-l",
    type=int,
    default=None,
    help=f"Maximum number of results to show (default: {CLI_DEFAULT_LIMIT})",
)
@click.option(
    "--branches",
    default=None,
    help="Comma-separated list of branches to analyze (default: all)",
)
@click.option(
    "--exclude",
    default=None,
    help="Comma-separated list of file patterns to exclude",
)
@click.option("--no-history", is_flag=True, help="Skip historical analysis")
@click.option(
    "--json", "as_json", is_flag=True, help="Print the report as JSON"
)
@click.pass_context
def analyze(
    ctx,
    path: str,
    threshold: Optional[int],
    limit: Optional[int],
    branches: Optional[str],
    exclude: Optional[str],
    no_history: bool,
    as_json: bool,
):
    """Analyze a Git repository.

    PATH is the repository to analyze (default: current directory).
    """
    repository_path = Path(path).resolve()

    try:
        config = ConfigManager(repository_path).load(
            defaults={"max_results": CLI_DEFAULT_LIMIT},
            threshold=threshold,
            max_results=limit,
            include_branches=branches,
            exclude_patterns=exclude,
            analyze_history=False if no_history else None,
        )
        analyzer = GitSpaceAnalyzer(repository_path, config)

        if as_json:
            report = analyzer.analyze()
        else:
            with console.status("Analyzing repository..."):
                report = analyzer.analyze()
    except GitSpaceAnalyzerError as e:
        console.print(
            f"❌ Analysis failed: {e}", style="red", markup=False, soft_wrap=True
        )
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
        return

    console.print("✅ Analysis completed", style="green")
    display_report(report, console)


def main():
    """Main entry point."""
    try:
        cli(obj={})
    except KeyboardInterrupt:
        console.print("\n❌ Interrupted by user", style="red")
        sys.exit(1)
    except Exception as e:
        console.print(f"❌ Unexpected error: {str(e)}", style="red", markup=False)
        sys.exit(1)


if __name__ == "__main__":
    main()
