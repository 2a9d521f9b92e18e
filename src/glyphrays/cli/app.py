"""CLI application entry point for glyphrays.

This module provides the main CLI interface using Typer.
"""

import os
from pathlib import Path
from typing import Annotated

import typer

from glyphrays import __version__
from glyphrays.cli.output import (
    console,
    create_progress,
    print_cancellation_notice,
    print_error,
    print_font_info,
    print_header,
    print_hierarchy_config,
    print_hierarchy_summary,
    print_processing_info,
    print_step,
    print_success,
)
from glyphrays.config import (
    AtlasConfig,
    GlyphRaysSettings,
    HierarchyConfig,
    LoggingConfig,
    ProcessingConfig,
)
from glyphrays.core.processor import FontEncoder, build_render_data
from glyphrays.domain import FillRule
from glyphrays.exceptions import (
    FontLoadError,
    FontSaveError,
    GlyphNotFoundError,
    GlyphRaysError,
)
from glyphrays.io import AtlasWriter, FontReader
from glyphrays.utils import configure_logging

app = typer.Typer(
    name="glyphrays",
    help="Encode font glyphs into restricted-ray box hierarchies for GPU rendering.",
    add_completion=False,
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold blue]glyphrays[/bold blue] v{__version__}")
        raise typer.Exit()


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
    """Encode font glyphs into restricted-ray box hierarchies for GPU rendering."""


def _parse_fill_rule(value: str) -> FillRule:
    try:
        return FillRule(value.lower())
    except ValueError:
        print_error(
            f"Invalid fill rule: {value}",
            details="Valid values: " + ", ".join(rule.value for rule in FillRule),
        )
        raise typer.Exit(code=1)


def _check_font_path(path: Path) -> None:
    if not path.exists():
        print_error(
            f"Input file not found: {path}",
            details=f"The file '{path}' does not exist or is not accessible.",
        )
        raise typer.Exit(code=1)
    if not path.is_file():
        print_error(
            f"Input path is not a file: {path}",
            details="Please provide a path to a TTF or OTF font file.",
        )
        raise typer.Exit(code=1)


@app.command()
def encode(
    input_font: Annotated[
        Path,
        typer.Argument(
            help="Path to input TTF/OTF font file",
            show_default=False,
        ),
    ],
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Output atlas path (default: {name}.rays)",
        ),
    ] = None,
    max_recursion: Annotated[
        int,
        typer.Option(
            "--max-recursion",
            help="Maximum depth of the box hierarchy",
            min=0,
            max=32,
        ),
    ] = 12,
    split_thresh: Annotated[
        int,
        typer.Option(
            "--split-thresh",
            help="Boxes with at most this many curves are not split",
            min=0,
        ),
    ] = 4,
    min_render_size: Annotated[
        float,
        typer.Option(
            "--min-render-size",
            help="Smallest expected render size in pixels per EM",
            min=0.001,
        ),
    ] = 32.0,
    fill_rule: Annotated[
        str,
        typer.Option(
            "--fill-rule",
            help="Fill rule (nonzero|odd_even|complement_nonzero|complement_odd_even)",
        ),
    ] = "nonzero",
    capacity: Annotated[
        int,
        typer.Option(
            "--capacity",
            help="Atlas capacity in 32-bit words",
            min=1,
        ),
    ] = 1 << 22,
    workers: Annotated[
        int | None,
        typer.Option(
            "--workers",
            "-j",
            help="Number of parallel workers (default: auto)",
            min=1,
        ),
    ] = None,
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
    """Encode every glyph of a font into an atlas of packed words.

    Example:
        glyphrays encode Roboto-Regular.ttf

    This will create Roboto-Regular.rays and Roboto-Regular.rays.json.
    """
    if verbose and quiet:
        print_error("Cannot use --verbose and --quiet together")
        raise typer.Exit(code=1)

    _check_font_path(input_font)
    rule = _parse_fill_rule(fill_rule)

    if not quiet:
        print_header(__version__)

    settings = GlyphRaysSettings(
        hierarchy=HierarchyConfig(
            max_recursion=max_recursion,
            split_thresh=split_thresh,
            expected_min_render_size=min_render_size,
        ),
        atlas=AtlasConfig(capacity_words=capacity),
        processing=ProcessingConfig(max_workers=workers, fill_rule=rule),
        logging=LoggingConfig(
            log_file=log_file,
            log_level="DEBUG" if verbose else log_level,
        ),
    )

    try:
        if not quiet:
            print_step("Loading font")

        try:
            with FontReader(input_font) as reader:
                font_type = reader.format
                glyph_count = reader.glyph_count
                upm = reader.units_per_em
        except Exception as e:
            raise FontLoadError(str(input_font), str(e)) from e

        if not quiet:
            print_font_info(
                font_path=str(input_font),
                font_type=font_type,
                glyph_count=glyph_count,
                upm=upm,
            )
            print_hierarchy_config(settings.hierarchy)
            actual_workers = workers if workers else os.cpu_count() or 1
            print_step("Encoding")
            print_processing_info(actual_workers, is_auto=(workers is None))

        logger = configure_logging(
            log_file=settings.logging.log_file,
            console_level=settings.logging.log_level,
            file_level=settings.logging.file_log_level,
            quiet=quiet,
        )
        encoder = FontEncoder(settings, logger=logger)
        output_path = output if output is not None else AtlasWriter.get_atlas_path(input_font)

        try:
            if not quiet:
                with create_progress() as progress:
                    task_id = progress.add_task(
                        f"Encoding {glyph_count} glyphs",
                        total=glyph_count,
                    )

                    def update_progress(completed: int, total: int, *_: object) -> None:
                        progress.update(task_id, completed=completed, total=total)

                    stats = encoder.encode(
                        font_path=input_font,
                        output_path=output_path,
                        max_workers=workers,
                        progress_callback=update_progress,
                    )
            else:
                stats = encoder.encode(
                    font_path=input_font,
                    output_path=output_path,
                    max_workers=workers,
                )
        except KeyboardInterrupt:
            if not quiet:
                print_cancellation_notice()
            raise typer.Exit(code=130) from None

        if not quiet:
            print_success(
                output_path=str(output_path),
                file_size=_format_file_size(output_path),
                total_time_s=stats.duration_seconds,
                encoded=stats.encoded_count,
                words=stats.words_written,
                failed=stats.failed_count,
                errors=stats.error_count,
                avg_time_ms=stats.avg_glyph_time_ms,
                min_time_ms=stats.min_glyph_time_ms,
                max_time_ms=stats.max_glyph_time_ms,
            )
            if verbose and stats.errors:
                console.print("\n[bold]Not encoded[/bold]")
                for glyph_name, reason in stats.errors[:20]:
                    console.print(f"  {glyph_name}: {reason}")

    except FontLoadError as e:
        print_error(f"Could not load font: {e.reason}")
        raise typer.Exit(code=1)
    except FontSaveError as e:
        print_error(f"Could not save atlas: {e.reason}")
        raise typer.Exit(code=1)
    except GlyphRaysError as e:
        print_error(str(e))
        raise typer.Exit(code=1)
    except typer.Exit:
        raise
    except Exception as e:
        print_error(f"Unexpected error: {e}")
        raise typer.Exit(code=1)


@app.command()
def inspect(
    input_font: Annotated[
        Path,
        typer.Argument(help="Path to input TTF/OTF font file", show_default=False),
    ],
    glyph: Annotated[
        str,
        typer.Argument(help="Glyph name, or a single character", show_default=False),
    ],
    max_recursion: Annotated[
        int,
        typer.Option("--max-recursion", help="Maximum depth of the box hierarchy", min=0, max=32),
    ] = 12,
    split_thresh: Annotated[
        int,
        typer.Option("--split-thresh", help="Boxes with at most this many curves are not split", min=0),
    ] = 4,
    min_render_size: Annotated[
        float,
        typer.Option("--min-render-size", help="Smallest expected render size in pixels per EM", min=0.001),
    ] = 32.0,
) -> None:
    """Show the box hierarchy built for a single glyph.

    Example:
        glyphrays inspect Roboto-Regular.ttf g
    """
    _check_font_path(input_font)
    config = HierarchyConfig(
        max_recursion=max_recursion,
        split_thresh=split_thresh,
        expected_min_render_size=min_render_size,
    )

    try:
        with FontReader(input_font) as reader:
            upm = reader.units_per_em
            try:
                domain_glyph = reader.get_glyph(glyph)
            except GlyphNotFoundError:
                domain_glyph = reader.get_glyph_for_char(glyph)

        if domain_glyph.is_empty():
            console.print(f"\n{domain_glyph.name}: empty glyph")
            raise typer.Exit(code=0)

        render_data = build_render_data(domain_glyph, config, upm, FillRule.NONZERO)
        hierarchy = render_data.hierarchy
        packed = render_data.packed
        min_point, max_point = render_data.bounds

        rows = [
            ("curves", str(domain_glyph.curve_count)),
            ("bounds", f"{min_point.to_tuple()} - {max_point.to_tuple()}"),
            ("nodes", str(len(hierarchy.nodes))),
            ("leaves", str(len(hierarchy.leaves))),
            ("max depth", str(hierarchy.max_depth)),
            ("largest curve list", str(hierarchy.largest_curve_list)),
        ]
        if packed is not None:
            rows += [
                ("hierarchy words", str(len(packed.hierarchy))),
                ("curve list words", str(len(packed.curve_lists))),
                ("point words", str(len(packed.points))),
                ("total words", str(packed.size)),
            ]
        else:
            rows.append(("packing", f"failed: {render_data.packing_error}"))
        print_hierarchy_summary(domain_glyph.name, rows)

    except GlyphNotFoundError as e:
        print_error(str(e))
        raise typer.Exit(code=1)
    except GlyphRaysError as e:
        print_error(str(e))
        raise typer.Exit(code=1)
    except typer.Exit:
        raise
    except Exception as e:
        print_error(f"Could not inspect glyph: {e}")
        raise typer.Exit(code=1)


def _format_file_size(path: Path) -> str:
    """Format file size in human-readable form.

    Args:
        path: Path to file

    Returns:
        Human-readable file size (e.g., "428 KB")
    """
    try:
        size_bytes = path.stat().st_size
        if size_bytes < 1024:
            return f"{size_bytes} B"
        elif size_bytes < 1024 * 1024:
            return f"{size_bytes / 1024:.0f} KB"
        else:
            return f"{size_bytes / (1024 * 1024):.1f} MB"
    except OSError:
        return "unknown"


def cli() -> None:
    """Entry point for the CLI application."""
    app()


def main() -> None:
    """Entry point for the CLI application (alias for cli)."""
    cli()


if __name__ == "__main__":
    cli()
