# ABOUTME: The `cbzcheck parse` command for viewing the fields read from a filename.
# ABOUTME: Works offline; useful to see why a name is rejected or how it will be searched.

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from cbzcheck.metadata.filename import MalformedNameError, format_filename, parse_filename
from cbzcheck.metadata.types import CountOverflowError

console = Console()


@click.command()
@click.argument("names", nargs=-1, required=True)
def parse(names: tuple[str, ...]) -> None:
    """Show the series, volume, year and authors read from CBZ filenames."""
    failed = False
    for name in names:
        try:
            parsed = parse_filename(name)
        except (MalformedNameError, CountOverflowError) as exc:
            console.print(f"[red]Error:[/red] {escape(str(exc))}", soft_wrap=True)
            failed = True
            continue

        table = Table(title=escape(name), show_header=False, pad_edge=False)
        table.add_column("Field", style="bold")
        table.add_column("Value")

        table.add_row("Series", escape(parsed.series))
        table.add_row("Search", escape(parsed.search_title))
        volume = str(parsed.volume) if parsed.volume is not None else "[dim]one-shot[/dim]"
        table.add_row("Volume", volume)
        table.add_row("Year", str(parsed.year) if parsed.year else "[dim]none[/dim]")
        table.add_row("Authors", escape(", ".join(parsed.authors)))
        table.add_row("Release", parsed.release or "[dim]none[/dim]")
        table.add_row("Width", str(parsed.width) if parsed.width else "[dim]none[/dim]")
        table.add_row("Canonical", escape(format_filename(parsed)))

        console.print(table)

    if failed:
        raise SystemExit(1)
