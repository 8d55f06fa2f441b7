# ABOUTME: The `cbzcheck check` command for validating CBZ archives.
# ABOUTME: Checks each archive against bedetheque.com and its own pages, then prints one block per book.

import logging
from contextlib import closing
from pathlib import Path

import click
from rich.console import Console
from rich.text import Text

from cbzcheck.cli.options import config_option, load_config_or_fail
from cbzcheck.config import CheckerConfig
from cbzcheck.core.report import RunReport
from cbzcheck.core.validator import BookValidator, validate_books
from cbzcheck.formats.cbz import collect_archives
from cbzcheck.metadata.bedetheque import BEDETHEQUE_HOME, BedethequeProvider
from cbzcheck.metadata.http import CbzcheckHttpClient
from cbzcheck.metadata.provider import CandidateProvider

logger = logging.getLogger(__name__)

console = Console()


def _create_http_client(config: CheckerConfig) -> CbzcheckHttpClient:
    """Create the HTTP client shared by every book of a run."""
    return CbzcheckHttpClient(
        referer=BEDETHEQUE_HOME,
        timeout=config.timeout,
        min_request_interval=config.request_interval,
    )


def _create_provider(config: CheckerConfig, http_client: CbzcheckHttpClient) -> CandidateProvider:
    """Create the default candidate provider (bedetheque.com)."""
    return BedethequeProvider(http_client=http_client)


def _print_report(run: RunReport, show_clean: bool) -> None:
    """Print book blocks, coloring each header by outcome."""
    for i, block in enumerate(run.blocks(show_clean=show_clean)):
        if i:
            console.print()
        console.print(Text(block.header, style="green" if block.ok else "red"), soft_wrap=True)
        for line in block.lines:
            console.print(Text(line), soft_wrap=True)


@click.command("check")
@click.argument(
    "paths",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, path_type=Path),
)
@config_option
@click.option(
    "--show-clean",
    is_flag=True,
    default=False,
    help="Also list books without any issue.",
)
@click.option(
    "--keep-going",
    is_flag=True,
    default=False,
    help="Still check pages when the bibliographic lookup fails.",
)
@click.option(
    "--tolerance",
    type=click.IntRange(min=0),
    default=None,
    help="Accepted page width deviation, in percent (default: 10).",
)
@click.option(
    "-j",
    "--jobs",
    type=click.IntRange(min=1),
    default=1,
    help="Number of books checked concurrently.",
)
@click.option(
    "-q",
    "--quiet",
    is_flag=True,
    default=False,
    help="Do not print the summary line.",
)
def check(
    paths: tuple[Path, ...],
    config_path: Path | None,
    show_clean: bool,
    keep_going: bool,
    tolerance: int | None,
    jobs: int,
    quiet: bool,
) -> None:
    """Check CBZ files (or directories of CBZ files) against their name."""
    config = load_config_or_fail(config_path)
    config.show_clean = config.show_clean or show_clean
    config.keep_going = config.keep_going or keep_going
    if tolerance is not None:
        config.pages.tolerance_percent = tolerance

    collected = collect_archives(paths)
    for path, reason in collected.skipped:
        console.print(Text(f"WARN  skip {path}: {reason}", style="yellow"), soft_wrap=True)

    if not collected.archives:
        console.print("[dim]No CBZ file to check.[/dim]")
        return

    with closing(_create_http_client(config)) as http_client:
        validator = BookValidator(_create_provider(config, http_client), config)
        run = RunReport(validate_books(validator, collected.archives, jobs=jobs))
    _print_report(run, config.show_clean)

    total = len(run.books)
    if run.has_issues:
        if not quiet:
            console.print(
                f"\n[red]{run.total_issues} issue(s) found in "
                f"{run.books_with_issues} of {total} book(s).[/red]"
            )
        raise SystemExit(1)

    if not quiet:
        console.print(f"[green]All {total} book(s) passed.[/green]")
