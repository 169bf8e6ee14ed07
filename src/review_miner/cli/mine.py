"""Mine command: run the pipeline and print or save the result."""

import json
from pathlib import Path
from typing import List, Optional

import typer
from rich.markup import escape
from rich.table import Table

from ..exceptions import ConfigurationError, GitQueryError, InvalidDateError
from ..history import GitExtractor
from ..logging_config import setup_logging
from ..pipeline import MiningResult, ReviewMiner
from . import app
from ._common import console, resolve_config


@app.command("mine")
def mine_command(
    author: str = typer.Option(..., "--author", "-a", help="Author name or email (git --author)"),
    since: str = typer.Option(..., "--since", help="Window start, YYYY-MM-DD"),
    until: str = typer.Option(..., "--until", help="Window end, YYYY-MM-DD"),
    repo: Path = typer.Option(
        Path("."),
        "-C",
        "--repo",
        help="Repository to mine (default: current directory)",
        exists=True,
        file_okay=False,
        dir_okay=True,
        readable=True,
    ),
    min_lines: Optional[int] = typer.Option(
        None, "--min-lines", min=0, help="Lines changed for a PR to count as major"
    ),
    min_gap_days: Optional[int] = typer.Option(
        None, "--min-gap-days", min=1, help="Shortest inactivity span to report"
    ),
    keyword: Optional[List[str]] = typer.Option(
        None, "--keyword", "-k", help="PR title keyword marking a PR as major (repeatable)"
    ),
    bug_keyword: Optional[List[str]] = typer.Option(
        None, "--bug-keyword", help="Replace the default bug keywords (repeatable)"
    ),
    no_hotfix: bool = typer.Option(
        False, "--no-hotfix", help="Skip release-branch containment queries"
    ),
    workers: Optional[int] = typer.Option(
        None, "--workers", "-w", min=1, max=32, help="Parallel branch queries", hidden=True
    ),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Write the full result as JSON to this file"
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the full result as JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Configuration file (TOML)",
        exists=True,
        file_okay=True,
        dir_okay=False,
    ),
):
    """
    Mine one author's commits between two dates.

    [bold cyan]Examples:[/bold cyan]

      review-miner mine -a alice@example.com --since 2024-01-01 --until 2024-06-30

      review-miner mine -a alice --since 2024-01-01 --until 2024-12-31 -k migration -o review.json
    """
    try:
        settings = resolve_config(
            config=config,
            min_lines=min_lines,
            min_gap_days=min_gap_days,
            keywords=keyword,
            bug_keywords=bug_keyword,
            no_hotfix=no_hotfix,
            workers=workers,
            verbose=verbose,
        )
    except ConfigurationError as e:
        console.print(f"[red]Configuration error:[/red] {escape(str(e))}")
        raise typer.Exit(2)

    logger = setup_logging(
        verbose=settings.verbosity == "verbose",
        quiet=settings.verbosity == "quiet",
    )

    extractor = GitExtractor(str(repo), timeout_seconds=settings.git_timeout_seconds)
    if not extractor.is_git_repo():
        console.print(f"[red]Error:[/red] {escape(str(repo))} is not a git repository")
        raise typer.Exit(1)

    try:
        result = ReviewMiner(extractor, settings).run(author, since, until)
    except InvalidDateError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(2)
    except GitQueryError as e:
        logger.debug("History query failed", exc_info=True)
        console.print(f"[red]Git query failed:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    payload = json.dumps(result.to_dict(), indent=2)
    if output is not None:
        output.write_text(payload, encoding="utf-8")
        logger.info("Result saved to %s", output)

    # stdout carries only JSON in this mode
    if as_json:
        typer.echo(payload)
        return

    if output is not None:
        console.print(f"Result saved to: [bold green]{escape(str(output))}[/bold green]")

    _print_summary(result)


def _print_summary(result: MiningResult) -> None:
    if result.is_empty:
        console.print(
            f"[yellow]No activity[/yellow] for [bold]{escape(result.author)}[/bold] "
            f"between {result.since} and {result.until}."
        )
        return

    overview = Table(title=f"{escape(result.author)}  {result.since} .. {result.until}", show_header=False)
    overview.add_column("Metric", style="cyan")
    overview.add_column("Value", justify="right")
    overview.add_row("Commits", str(len(result.commits)))
    overview.add_row("Active days", str(result.activity.active_days))
    overview.add_row("Lines added / deleted", f"+{result.total_lines_added} / -{result.total_lines_deleted}")
    overview.add_row("Pull requests", str(len(result.pr_groups)))
    overview.add_row("Bug-related commits", str(result.bug_analysis.total_bugs))
    overview.add_row("Hotfixes", str(result.bug_analysis.hotfix_count))
    console.print(overview)

    if result.major_prs:
        table = Table(title="Major pull requests")
        table.add_column("PR", justify="right")
        table.add_column("Title")
        table.add_column("Lines", justify="right")
        table.add_column("Complexity")
        table.add_column("Dates")
        for pr in result.major_prs:
            g = pr.group
            table.add_row(
                str(g.number),
                escape(g.title),
                f"+{g.total_lines_added} / -{g.total_lines_deleted}",
                pr.complexity.value,
                g.first_date if g.first_date == g.last_date else f"{g.first_date} .. {g.last_date}",
            )
        console.print(table)

    if result.gaps:
        table = Table(title="Activity gaps")
        table.add_column("From")
        table.add_column("To")
        table.add_column("Days", justify="right")
        for gap in result.gaps:
            table.add_row(gap.start_date, gap.end_date, str(gap.duration_days))
        console.print(table)

    for flag in result.bug_analysis.red_flags:
        console.print(f"[red]⚑[/red] {escape(flag.message)}")

    if result.skipped_lines:
        console.print(f"[dim]{result.skipped_lines} unrecognised log lines skipped[/dim]")
