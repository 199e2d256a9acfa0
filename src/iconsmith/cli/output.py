"""Rich console output helpers for the CLI.

This module provides user-friendly console output using Rich library
with progress status, tables, and formatted messages.
"""

from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.progress import BarColumn, Progress, TaskProgressColumn, TextColumn, TimeElapsedColumn
from rich.table import Table
from rich.text import Text

from iconsmith.domain import BuildStatus, CollectionResult
from iconsmith.exceptions import CollectionBuildError

console = Console()

# Unicode symbols for consistent visual language
SYM_STEP = "▸"  # Step indicator
SYM_OK = "✓"  # Success
SYM_ERR = "✗"  # Error
SYM_SKIP = "–"  # Skipped
SYM_DOT = "·"  # Separator/secondary info


def create_progress() -> Progress:
    """Create a rich progress bar counting finished collections.

    Returns:
        Configured Progress instance with bar and time elapsed.
    """
    return Progress(
        TextColumn("  "),
        BarColumn(bar_width=40, complete_style="green", finished_style="green"),
        TaskProgressColumn(),
        TimeElapsedColumn(),
        console=console,
        transient=False,
    )


def print_header(version: str) -> None:
    """Print application header.

    Args:
        version: Application version string
    """
    console.print(f"\n[bold]Iconsmith[/bold] v{version}")
    console.print("─" * 44)


def print_step(message: str) -> None:
    """Print a processing step indicator.

    Args:
        message: Step description message
    """
    console.print(f"\n{SYM_STEP} {message}")


def print_collections(names: list[str], output_root: Path) -> None:
    """Print the collections about to be built."""
    console.print(f"  {len(names)} collections {SYM_DOT} {', '.join(names)}")
    line = Text(f"  output {SYM_DOT} ")
    line.append(str(output_root))
    console.print(line)


def print_stage(collection: str, stage: str) -> None:
    """Print a stage transition of one collection (verbose mode)."""
    console.print(f"  [dim]{collection}[/dim] {SYM_DOT} {stage}")


def _format_time(seconds: float) -> str:
    """Format seconds into human-readable time string."""
    if seconds < 1:
        return f"{seconds * 1000:.0f}ms"
    elif seconds < 60:
        return f"{seconds:.1f}s"
    else:
        mins = int(seconds // 60)
        secs = seconds % 60
        return f"{mins}m {secs:.1f}s"


def format_file_size(path: Path) -> str:
    """Format file size in human-readable form.

    Args:
        path: Path to file

    Returns:
        Human-readable file size (e.g., "42 KB")
    """
    try:
        size_bytes = path.stat().st_size
    except OSError:
        return "unknown"
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.0f} KB"
    else:
        return f"{size_bytes / (1024 * 1024):.1f} MB"


def print_results(results: list[CollectionResult], verbose: bool) -> None:
    """Print a summary table of collection results.

    Args:
        results: One result per collection
        verbose: Whether to list every output file
    """
    table = Table(box=None, pad_edge=False, show_header=False)
    table.add_column(justify="left")
    table.add_column(justify="left")
    table.add_column(justify="right")
    table.add_column(justify="left")

    for result in results:
        if result.status is BuildStatus.BUILT:
            symbol = f"[green]{SYM_OK}[/green]"
            detail = f"{result.glyph_count} glyphs"
        elif result.status is BuildStatus.SKIPPED:
            symbol = f"[yellow]{SYM_SKIP}[/yellow]"
            detail = "no glyphs"
        else:
            symbol = f"[red]{SYM_ERR}[/red]"
            detail = _describe_error(result.error)
        timing = _format_time(result.duration_seconds) if result.duration_seconds else ""
        table.add_row(f"  {symbol}", result.collection, timing, detail)

    console.print(table)

    for result in results:
        if result.skipped_glyphs:
            console.print(
                f"  [yellow]{result.collection}[/yellow] dropped "
                f"{len(result.skipped_glyphs)} malformed glyphs: "
                f"{', '.join(result.skipped_glyphs)}"
            )
        if verbose and result.manifest is not None:
            for path in result.manifest.paths():
                line = Text("    ")
                line.append(str(path))
                line.append(f" ({format_file_size(path)})")
                console.print(line)


def _describe_error(error: Exception | None) -> str:
    if isinstance(error, CollectionBuildError):
        glyph = f" {SYM_DOT} glyph '{error.glyph_name}'" if error.glyph_name else ""
        where = escape(f"{error.stage}{glyph}")
        return f"[red]{where}[/red] {SYM_DOT} {escape(error.reason)}"
    return f"[red]{escape(str(error))}[/red]"


def print_summary(built: int, skipped: int, failed: int, glyphs: int, total_time_s: float) -> None:
    """Print the final build summary."""
    time_str = _format_time(total_time_s)
    if failed:
        console.print(f"\n[bold red]{SYM_ERR} Failed[/bold red] in {time_str}")
    else:
        console.print(f"\n[bold green]{SYM_OK} Complete[/bold green] in {time_str}")
    error_style = "red" if failed > 0 else "green"
    console.print(
        f"  {built} built {SYM_DOT} {skipped} skipped {SYM_DOT} "
        f"[{error_style}]{failed} failed[/{error_style}] {SYM_DOT} {glyphs} glyphs"
    )


def print_error(message: str, details: str | None = None) -> None:
    """Print error message.

    Args:
        message: Main error message
        details: Optional detailed error information
    """
    console.print(f"\n[bold red]{SYM_ERR} Error:[/bold red] {escape(message)}")
    if details:
        console.print(f"  {escape(details)}")


def print_cancellation_notice() -> None:
    """Print cancellation acknowledgment."""
    console.print(f"\n{SYM_DOT} [bold]Cancelled[/bold]")
    console.print("  In-progress collections were discarded, no partial fonts written")
