"""
CLI command for flattening a folder.

Copies (or moves) every file under SOURCE into SOURCE_unfolded, renaming
colliding names and writing a documentation.md audit log.
"""

import json
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table

from .. import __version__
from ..core.types import (
    LogEntryType,
    ProgressEvent,
    RunError,
    RunMode,
    RunOptions,
    RunResult,
)
from ..flatten.messages import render_message
from ..flatten.runner import Unfolder
from ..shared import format_bytes, format_duration, setup_logging

console = Console()

SUMMARY_STYLES = {
    LogEntryType.INFO: "cyan",
    LogEntryType.SUCCESS: "green",
    LogEntryType.FATAL: "red",
}


@click.command()
@click.argument(
    "source",
    type=click.Path(exists=True, file_okay=False, dir_okay=True, path_type=Path),
)
@click.option(
    "--mode",
    type=click.Choice(["copy", "move", "dry-run"], case_sensitive=False),
    default="copy",
    help="copy (safe), move (deletes the source after a clean copy) or dry-run",
)
@click.option(
    "--dry-run",
    is_flag=True,
    default=False,
    help="Preview the flattening without touching the filesystem",
)
@click.option(
    "--zip",
    "should_zip",
    is_flag=True,
    default=False,
    help="Also package the output into SOURCE_unfolded.zip",
)
@click.option(
    "--open",
    "should_open",
    is_flag=True,
    default=False,
    help="Open the output folder when done",
)
@click.option(
    "--verify",
    is_flag=True,
    default=False,
    help="Verify each copy with a SHA-256 checksum",
)
@click.option(
    "-y",
    "--yes",
    is_flag=True,
    default=False,
    help="Do not ask for confirmation before a move",
)
@click.option(
    "--json",
    "as_json",
    is_flag=True,
    default=False,
    help="Print the run result as JSON instead of a table",
)
@click.option(
    "-v",
    "--verbose",
    is_flag=True,
    default=False,
    help="Verbose output",
)
@click.option(
    "-q",
    "--quiet",
    is_flag=True,
    default=False,
    help="Only log warnings and errors",
)
@click.version_option(__version__, prog_name="unfold")
def cli(
    source: Path,
    mode: str,
    dry_run: bool,
    should_zip: bool,
    should_open: bool,
    verify: bool,
    yes: bool,
    as_json: bool,
    verbose: bool,
    quiet: bool,
) -> None:
    """
    Flatten SOURCE into a single SOURCE_unfolded folder.

    \b
    Examples:
        # Preview what would happen
        unfold ~/Downloads/photos --dry-run

        # Copy everything into ~/Downloads/photos_unfolded
        unfold ~/Downloads/photos

        # Move and archive (the source is deleted only if every copy succeeds)
        unfold ~/Downloads/photos --mode move --zip

    \b
    Colliding names:
        a.txt and sub/a.txt become [conflict-1]-a.txt and [conflict-2]-a.txt
    """
    setup_logging(verbose=verbose, quiet=quiet)

    run_mode = RunMode.DRY_RUN if dry_run else RunMode(mode.lower())
    options = RunOptions(
        mode=run_mode,
        should_zip=should_zip,
        should_open=should_open,
        verify=verify,
    )

    if run_mode == RunMode.MOVE and not yes:
        console.print(
            "[red]⚠ WARNING: MOVE will delete the source folder once every "
            "file is copied![/red]"
        )
        if not click.confirm("Continue with MOVE operation?"):
            console.print("[yellow]Cancelled[/yellow]")
            return

    unfolder = Unfolder(source, options)

    if not as_json:
        console.print(
            f"\n[cyan]Unfolding[/cyan] {escape(str(unfolder.source_root))}"
        )
        console.print(f"  Output: {escape(str(unfolder.output_root))}")
        console.print(f"  Mode: {run_mode.value}")
        if options.is_dry_run:
            console.print(
                "\n[yellow]⚠ DRY RUN MODE - No files will be modified[/yellow]"
            )
        console.print()

    result: Optional[RunResult] = None
    error: Optional[RunError] = None

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
        TimeElapsedColumn(),
        console=console,
        disable=as_json,
    ) as progress:
        task = progress.add_task("Scanning...", total=100)

        for event in unfolder.iter_events():
            if isinstance(event, ProgressEvent):
                progress.update(
                    task, completed=event.progress, description=event.file or "Done"
                )
            elif isinstance(event, RunError):
                error = event
            else:
                result = event

    if error is not None:
        if as_json:
            click.echo(json.dumps({"message": error.message}, indent=2))
        else:
            console.print(f"\n[red]✗ Error: {escape(error.message)}[/red]")
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(result.to_json_dict(), indent=2))
    else:
        _display_result(unfolder, result, verbose)

    if result.has_failures:
        sys.exit(1)


def _display_result(unfolder: Unfolder, result: RunResult, verbose: bool) -> None:
    """Display the run result."""
    console.print("\n[green]✓ Unfold complete![/green]\n")

    table = Table(title="Results")
    table.add_column("Metric", style="cyan")
    table.add_column("Count", style="green", justify="right")

    table.add_row("Copied", str(result.count(LogEntryType.COPIED)))
    table.add_row("Renamed", str(result.count(LogEntryType.RENAMED)))
    table.add_row("Errors", str(result.error_count))
    if unfolder.transfer_result is not None:
        table.add_row(
            "Bytes copied", format_bytes(unfolder.transfer_result.bytes_copied)
        )
    table.add_row("Duration", f"{format_duration(result.duration_ms)} s")

    console.print(table)

    for entry in result.log_entries:
        if entry.type.is_run_level:
            style = SUMMARY_STYLES[entry.type]
            text = render_message(entry.message_key, entry.vars)
            console.print(f"[{style}]{entry.type.value}: {escape(text)}[/{style}]")

    if unfolder.options.is_dry_run:
        console.print("\n[yellow]This was a DRY RUN - no files were modified[/yellow]")
    else:
        console.print(f"\nOutput: {escape(str(result.output_path))}")
        if result.archive_path:
            console.print(f"Archive: {escape(str(result.archive_path))}")

    errors = [e for e in result.log_entries if e.type == LogEntryType.ERROR]
    if errors:
        console.print("\n[red]Errors:[/red]")
        for entry in errors[:10]:
            console.print(
                f"  [red]• {escape(str(entry.from_path))}: "
                f"{escape(str(entry.message))}[/red]"
            )
        if len(errors) > 10:
            console.print(f"  [dim]... and {len(errors) - 10} more[/dim]")

    if verbose and unfolder.walk_stats is not None:
        console.print(f"\n[dim]{unfolder.walk_stats.to_summary()}[/dim]")


if __name__ == "__main__":
    cli()
