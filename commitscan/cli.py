"""Command line entry point: ``commitscan``."""

from __future__ import annotations

import asyncio

import click
import openai
from rich.console import Console
from rich.table import Table
from rich.text import Text

from commitscan import __version__
from commitscan.analysis import CommitAnalyzer
from commitscan.async_engine import PoolStats
from commitscan.config import ScanConfig, create_client, load_env_file
from commitscan.core.errors import CommitScanError
from commitscan.core.types import CommitAnalysis
from commitscan.git import GitRepository
from commitscan.scan import ScanReport, scan_commits
from commitscan.utils.logging_utils import (
    bind_scan_context,
    clear_scan_context,
    get_logger,
    setup_logging,
)

logger = get_logger("cli")

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


def print_result(console: Console, result: CommitAnalysis) -> None:
    commit = result.commit
    line = Text(f"[{result.confidence_label}] ", style="bold")
    line.append(f"{commit.hash} ({commit.date}) - {commit.message}")
    console.print(line)
    if result.failed:
        console.print(Text(f"  {result.error}", style="red"))
    elif result.confidence is not None and result.confidence > 0:
        console.print(Text(f"  {result.reasoning or ''}", style="dim"))


def print_top_results(console: Console, report: ScanReport) -> None:
    console.print()
    if not report.top:
        console.print("No suspicious commits found.")
        return
    table = Table(title="Top Results", show_header=True, header_style="bold magenta")
    table.add_column("Confidence", justify="right")
    table.add_column("Commit", style="cyan", no_wrap=True)
    table.add_column("Date")
    table.add_column("Message")
    table.add_column("Reasoning")
    for result in report.ranked:
        commit = result.commit
        table.add_row(
            result.confidence_label,
            commit.short_hash,
            commit.date,
            Text(commit.message),
            Text(result.reasoning or ""),
        )
    console.print(table)


async def run_scan(
    target_dir: str,
    config: ScanConfig,
    console: Console,
    *,
    author: str | None = None,
) -> ScanReport:
    config.validate_for_analysis()
    repository = GitRepository(target_dir, max_show_output=config.max_show_output)
    if author:
        commits = await repository.commits_by_author(author)
    else:
        commits = await repository.log()
    logger.info("Analyzing commits", commits=len(commits), concurrency=config.concurrency)

    client = create_client(config)
    analyzer = CommitAnalyzer(
        client, config.model, repository, max_retries=config.max_retries
    )
    stats = PoolStats()
    try:
        report = await scan_commits(
            commits,
            analyzer.analyze,
            concurrency=config.concurrency,
            top=config.top,
            on_result=lambda result: print_result(console, result),
            stats=stats,
        )
    finally:
        await client.close()
        logger.debug(
            "Worker pool finished",
            pulled=stats.pulled,
            completed=stats.completed,
            failed=stats.failed,
        )
    return report


@click.group(name="commitscan")
@click.version_option(version=__version__, message="%(version)s")
def cli():
    """Rank the commits of a git repository by how suspicious they look."""


@cli.command()
@click.argument("target_dir", type=click.Path(exists=True, file_okay=False))
@click.option("--author", help="Only analyze commits with this author email.")
@click.option(
    "--concurrency",
    type=click.IntRange(min=1),
    default=None,
    help="Number of commits analyzed at once [env: COMMITSCAN_CONCURRENCY].",
)
@click.option(
    "--top",
    type=click.IntRange(min=1),
    default=None,
    help="Size of the top results list [env: COMMITSCAN_TOP].",
)
@click.option(
    "--env-file",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Load environment variables from this file instead of ./.env.",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="INFO",
    show_default=True,
)
def scan(target_dir, author, concurrency, top, env_file, log_level):
    """Analyze every commit in TARGET_DIR and list the most suspicious ones."""
    setup_logging(log_level)
    load_env_file(env_file)
    console = Console(highlight=False)
    try:
        config = ScanConfig.from_env()
        if concurrency is not None:
            config.concurrency = concurrency
        if top is not None:
            config.top = top
        bind_scan_context(repository=target_dir, model=config.model)
        logger.debug("Configuration loaded", **config.to_dict())
        report = asyncio.run(run_scan(target_dir, config, console, author=author))
    except (CommitScanError, openai.APIError) as e:
        logger.error("Scan failed", error=str(e))
        raise click.ClickException(str(e)) from e
    finally:
        clear_scan_context()

    print_top_results(console, report)
    logger.info(
        "Scan complete",
        analyzed=report.analyzed,
        failed=report.failed,
        flagged=report.flagged,
    )


@cli.command()
@click.argument("target_dir", type=click.Path(exists=True, file_okay=False))
def authors(target_dir):
    """List the unique commit authors of TARGET_DIR."""
    try:
        names = asyncio.run(GitRepository(target_dir).authors())
    except CommitScanError as e:
        raise click.ClickException(str(e)) from e
    for name in names:
        click.echo(name)


def main():
    cli()
