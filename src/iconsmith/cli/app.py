"""CLI application entry point for iconsmith.

This module provides the main CLI interface using Typer.
"""

from pathlib import Path
from typing import Annotated

import typer

from iconsmith import __version__
from iconsmith.cli.output import (
    console,
    create_progress,
    print_cancellation_notice,
    print_collections,
    print_error,
    print_header,
    print_results,
    print_stage,
    print_step,
    print_summary,
)
from iconsmith.config import (
    CollectionSpec,
    FontConfig,
    IconsmithSettings,
    LoggingConfig,
    OutputConfig,
    ProcessingConfig,
)
from iconsmith.core import BuildStage, IconsmithPipeline
from iconsmith.domain import BuildStatus
from iconsmith.exceptions import BuildCancelledError, IconsmithError
from iconsmith.utils import pascal_case

# Create the Typer app
app = typer.Typer(
    name="iconsmith",
    help="Build icon fonts (SVG, TTF, EOT, WOFF, WOFF2) from directories of SVG icons.",
    add_completion=False,
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold blue]Iconsmith[/bold blue] v{__version__}")
        raise typer.Exit()


def parse_code_point(value: str) -> int:
    """Parse a code point given as hex (``0xE614``, ``U+E614``) or decimal."""
    text = value.strip()
    if text.upper().startswith("U+"):
        return int(text[2:], 16)
    return int(text, 0)


def parse_suffix_rules(values: list[str] | None) -> dict[str, str]:
    """Parse ``COLLECTION=SUFFIX`` pairs, e.g. ``filled=-fill``."""
    rules: dict[str, str] = {}
    for value in values or []:
        name, sep, suffix = value.partition("=")
        if not sep or not name.strip() or not suffix.strip():
            raise ValueError(f"Invalid suffix rule '{value}', expected COLLECTION=SUFFIX")
        rules[name.strip()] = suffix.strip()
    return rules


def collection_specs(
    icons_dir: Path,
    family: str,
    collections: list[str] | None = None,
    name_suffixes: dict[str, str] | None = None,
) -> list[CollectionSpec]:
    """Describe one collection per subdirectory of ``icons_dir``.

    Args:
        icons_dir: Directory whose subdirectories hold SVG icons
        family: Family name prefix, e.g. "Aviala Icons"
        collections: Optional subset of subdirectory names, in build order
        name_suffixes: Suffix stripped from icon names, per collection

    Returns:
        Collection specs; family "<family> <Collection>", PascalCase file name

    Raises:
        FileNotFoundError: If a requested collection directory is missing
        ValueError: If a suffix is given for a collection that is not built
    """
    name_suffixes = name_suffixes or {}
    if collections:
        names = list(dict.fromkeys(collections))
        for name in names:
            if not (icons_dir / name).is_dir():
                raise FileNotFoundError(f"Collection directory not found: {icons_dir / name}")
    else:
        names = sorted(
            p.name for p in icons_dir.iterdir() if p.is_dir() and not p.name.startswith(".")
        )

    unknown = sorted(set(name_suffixes) - set(names))
    if unknown:
        raise ValueError(f"Suffix given for unknown collection: {', '.join(unknown)}")

    specs = []
    for name in names:
        font_name = f"{family} {pascal_case(name)}".strip()
        specs.append(
            CollectionSpec(
                name=name,
                source_dir=icons_dir / name,
                font_name=font_name,
                file_name=pascal_case(font_name),
                name_suffix=name_suffixes.get(name),
            )
        )
    return specs


@app.callback()
def main_callback(
    _version: Annotated[  # noqa: ARG001
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """Build icon fonts from directories of SVG icons."""


@app.command()
def build(
    icons_dir: Annotated[
        Path,
        typer.Argument(
            help="Directory containing one subdirectory of SVG icons per collection",
            show_default=False,
        ),
    ],
    output: Annotated[
        Path,
        typer.Option(
            "--output",
            "-o",
            help="Output root directory",
        ),
    ] = Path("dist"),
    family: Annotated[
        str,
        typer.Option(
            "--family",
            "-f",
            help="Font family prefix; each collection's name is appended",
        ),
    ] = "Aviala Icons",
    collection: Annotated[
        list[str] | None,
        typer.Option(
            "--collection",
            "-c",
            help="Collection subdirectory to build (repeatable, default: all)",
        ),
    ] = None,
    base_code_point: Annotated[
        str,
        typer.Option(
            "--base-code-point",
            help="First code point assigned in each collection",
        ),
    ] = "0xE614",
    strip_suffix: Annotated[
        list[str] | None,
        typer.Option(
            "--strip-suffix",
            help="Strip a suffix from icon names, as COLLECTION=SUFFIX (repeatable)",
        ),
    ] = None,
    skip_malformed: Annotated[
        bool,
        typer.Option(
            "--skip-malformed",
            help="Drop unparsable icons instead of failing their collection",
        ),
    ] = False,
    log_file: Annotated[
        Path | None,
        typer.Option(
            "--log-file",
            help="Write detailed logs to file",
        ),
    ] = None,
    log_level: Annotated[
        str,
        typer.Option(
            "--log-level",
            help="Logging level (DEBUG|INFO|WARNING|ERROR)",
        ),
    ] = "WARNING",
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Verbose console output",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Minimal console output",
        ),
    ] = False,
) -> None:
    """Build every icon collection into SVG, TTF, EOT, WOFF and WOFF2 fonts.

    Each subdirectory of ICONS_DIR is one collection. Icons get code points
    in file-name order starting at the base code point.

    Example:
        iconsmith build icons --output dist

    With icons/outline and icons/filled this writes dist/fonts/outline/
    AvialaIconsOutline.{svg,ttf,eot,woff,woff2} and the same for filled.
    """
    if verbose and quiet:
        print_error("Cannot use --verbose and --quiet together")
        raise typer.Exit(code=1)

    if not icons_dir.is_dir():
        print_error(
            f"Icons directory not found: {icons_dir}",
            details=f"The directory '{icons_dir}' does not exist or is not a directory.",
        )
        raise typer.Exit(code=1)

    try:
        first_code_point = parse_code_point(base_code_point)
    except ValueError:
        print_error(
            f"Invalid base code point: {base_code_point}",
            details="Use hex (0xE614 or U+E614) or decimal.",
        )
        raise typer.Exit(code=1)

    try:
        specs = collection_specs(
            icons_dir, family, collection, parse_suffix_rules(strip_suffix)
        )
        settings = IconsmithSettings(
            font=FontConfig(base_code_point=first_code_point),
            output=OutputConfig(root=output),
            processing=ProcessingConfig(skip_malformed=skip_malformed),
            logging=LoggingConfig(
                log_file=log_file,
                log_level=log_level if not quiet else "ERROR",
            ),
        )
    except (FileNotFoundError, ValueError) as e:
        print_error(str(e))
        raise typer.Exit(code=1)

    if not specs:
        if not quiet:
            console.print("\nNo collections found. Nothing to build.")
        raise typer.Exit(code=0)

    if not quiet:
        print_header(__version__)
        print_step("Collections")
        print_collections([spec.name for spec in specs], output)
        print_step("Building")

    pipeline = IconsmithPipeline(settings)

    try:
        if not quiet:
            with create_progress() as progress:
                task_id = progress.add_task("Building", total=len(specs))

                def update_progress(name: str, stage: str) -> None:
                    if verbose:
                        print_stage(name, stage)
                    if stage == BuildStage.DONE:
                        progress.advance(task_id)

                results = pipeline.process(specs, progress_callback=update_progress)
                progress.update(task_id, completed=len(specs))
        else:
            results = pipeline.process(specs)
    except (BuildCancelledError, KeyboardInterrupt):
        if not quiet:
            print_cancellation_notice()
        raise typer.Exit(code=130) from None  # Standard Unix SIGINT exit code
    except IconsmithError as e:
        print_error(str(e))
        raise typer.Exit(code=1)

    failed = [r for r in results if r.status is BuildStatus.FAILED]
    stats = pipeline.stats

    if not quiet:
        print_step("Results")
        print_results(results, verbose)
        print_summary(
            built=stats.built_count,
            skipped=stats.skipped_count,
            failed=len(failed),
            glyphs=stats.glyph_count,
            total_time_s=stats.duration_seconds,
        )
    else:
        for result in failed:
            print_error(str(result.error))

    if failed:
        raise typer.Exit(code=1)


def cli() -> None:
    """Entry point for the CLI application."""
    app()


def main() -> None:
    """Entry point for the CLI application (alias for cli)."""
    cli()


if __name__ == "__main__":
    cli()
