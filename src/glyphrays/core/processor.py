"""Parallel encoding of every glyph of a font.

Glyph builds are independent of each other, so they run in worker processes;
the finished glyphs are then uploaded to one atlas in the main process, in
glyph order, so the atlas layout does not depend on worker scheduling.

Key components:
- encode_glyph: Top-level picklable function for parallel execution
- EncodedGlyph: Where a glyph landed in the atlas
- FontEncoder: Main orchestrator class for font encoding
"""

import time
import traceback
from collections.abc import Callable
from concurrent.futures import ProcessPoolExecutor, as_completed
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import structlog

from glyphrays.atlas import GlyphAtlas, GlyphAttribute, GlyphAttributeIndex
from glyphrays.config import GlyphRaysSettings, HierarchyConfig
from glyphrays.core.render_data import RestrictedRaysGlyph
from glyphrays.domain import FillRule, Glyph
from glyphrays.io import AtlasWriter, FontReader
from glyphrays.io.converter import domain_glyph_to_render_data
from glyphrays.utils import ProcessingLogger, ProcessingStats


def encode_glyph(
    glyph_dict: dict[str, Any],
    config_dict: dict[str, Any],
    upm: int,
    fill_rule: str,
) -> dict[str, Any]:
    """Build and pack a single glyph.

    Top-level function designed to be picklable for use with ProcessPoolExecutor.

    Args:
        glyph_dict: Serialized glyph (from Glyph.to_dict())
        config_dict: Serialized hierarchy configuration
        upm: Font units per em
        fill_rule: FillRule value

    Returns:
        Dictionary containing either:
        - Success: {"render_data": RestrictedRaysGlyph, "duration_ms": float}
        - Error: {"error": str, "glyph_name": str, "traceback": str, "duration_ms": float}
    """
    start_time = time.time()

    try:
        glyph = Glyph.from_dict(glyph_dict)
        config = HierarchyConfig(**config_dict)

        render_data = build_render_data(glyph, config, upm, FillRule(fill_rule))

        duration_ms = (time.time() - start_time) * 1000
        return {
            "render_data": render_data,
            "duration_ms": duration_ms,
        }

    except Exception as e:
        duration_ms = (time.time() - start_time) * 1000
        tb = traceback.format_exc()
        return {
            "error": str(e),
            "glyph_name": glyph_dict.get("metadata", {}).get("name", "unknown"),
            "traceback": tb,
            "duration_ms": duration_ms,
        }


def build_render_data(
    glyph: Glyph,
    config: HierarchyConfig,
    upm: float,
    fill_rule: FillRule,
) -> RestrictedRaysGlyph:
    """Feed a glyph's contours to a RestrictedRaysGlyph and finalize it.

    Raises:
        ValueError: If the glyph has no outline
    """
    if glyph.bounds is None:
        raise ValueError(f"Glyph '{glyph.name}' has no outline")

    render_data = domain_glyph_to_render_data(glyph)
    min_x, min_y, max_x, max_y = glyph.bounds
    render_data.finalize(fill_rule, (min_x, min_y), (max_x, max_y), upm, config=config)
    return render_data


@dataclass(frozen=True)
class EncodedGlyph:
    """A glyph stored in the atlas.

    Attributes:
        name: Glyph name
        unicode: Unicode code point (None for unencoded glyphs)
        fill_rule: Fill rule the glyph is rendered with
        min_point: Glyph-coordinate origin in font units
        attributes: Values indexed by GlyphAttributeIndex
    """

    name: str
    unicode: int | None
    fill_rule: FillRule
    min_point: tuple[int, int]
    attributes: tuple[GlyphAttribute, ...]

    @property
    def offset(self) -> int:
        return self.attributes[GlyphAttributeIndex.GLYPH_OFFSET].data[0]

    @property
    def width(self) -> int:
        return self.attributes[GlyphAttributeIndex.GLYPH_WIDTH].data[0]

    @property
    def height(self) -> int:
        return self.attributes[GlyphAttributeIndex.GLYPH_HEIGHT].data[0]

    def to_dict(self) -> dict[str, Any]:
        """Serialize for the JSON glyph index."""
        return {
            "name": self.name,
            "unicode": self.unicode,
            "fill_rule": self.fill_rule.value,
            "min_point": list(self.min_point),
            "attributes": [list(a.data) for a in self.attributes],
        }


class FontEncoder:
    """Orchestrates parallel encoding of a font into a glyph atlas.

    Manages the complete workflow:
    1. Load font file
    2. Filter glyphs with outlines
    3. Build and pack glyphs in parallel using worker processes
    4. Upload packed glyphs to the atlas in glyph order
    5. Write the atlas store and its glyph index

    Example:
        encoder = FontEncoder(GlyphRaysSettings())
        stats = encoder.encode(Path("font.ttf"), max_workers=4)
    """

    def __init__(
        self,
        config: GlyphRaysSettings,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        """Initialize font encoder with configuration.

        Args:
            config: Settings holding the hierarchy, atlas and processing config
            logger: Logger to report to (the "glyphrays" logger if None)
        """
        self.config = config
        self.logger = logger if logger is not None else structlog.get_logger("glyphrays")
        self.processing_logger = ProcessingLogger(self.logger)
        self.atlas = GlyphAtlas(capacity=config.atlas.capacity_words)
        self.encoded: list[EncodedGlyph] = []

    def encode(
        self,
        font_path: Path,
        output_path: Path | None = None,
        max_workers: int | None = None,
        glyph_names: list[str] | None = None,
        progress_callback: Callable[[int, int, str, bool], None] | None = None,
    ) -> ProcessingStats:
        """Encode a font file and write the atlas.

        Args:
            font_path: Path to input font file (TTF or OTF)
            output_path: Path for the atlas store (auto-generated if None)
            max_workers: Maximum worker processes (None = config default,
                1 = encode in this process)
            glyph_names: Only encode these glyphs (all glyphs if None)
            progress_callback: Optional callback(completed, total, glyph_name, success)

        Returns:
            ProcessingStats with counts, timing, and error details

        Raises:
            FileNotFoundError: If font file does not exist
        """
        stats = self.processing_logger.stats
        stats.start_time = time.time()

        if max_workers is None:
            max_workers = self.config.processing.max_workers
        if output_path is None:
            output_path = AtlasWriter.get_atlas_path(font_path)

        self.logger.info(
            "Starting font encoding",
            input=str(font_path),
            output=str(output_path),
            max_workers=max_workers,
        )

        with FontReader(font_path) as reader:
            upm = reader.units_per_em
            self.logger.info(
                "Font loaded",
                format=reader.format,
                upm=upm,
                glyph_count=reader.glyph_count,
            )

            glyphs: list[Glyph] = []
            if glyph_names is not None:
                source = (reader.get_glyph(name) for name in glyph_names)
            else:
                source = reader.iter_glyphs()
            for glyph in source:
                if glyph.is_empty():
                    self.processing_logger.log_glyph_skipped(glyph.name, "empty glyph")
                    continue
                if self.config.processing.skip_composite and glyph.is_composite():
                    self.processing_logger.log_glyph_skipped(glyph.name, "composite glyph")
                    continue
                glyphs.append(glyph)

        self.encode_glyphs(glyphs, upm, max_workers, progress_callback)

        AtlasWriter(output_path).write(self.atlas, self.encoded, upm=upm)

        stats.end_time = time.time()
        self.logger.info(
            "Encoding complete",
            encoded=stats.encoded_count,
            skipped=stats.skipped_count,
            failed=stats.failed_count,
            errors=stats.error_count,
            words=stats.words_written,
            duration_seconds=round(stats.duration_seconds, 2),
        )
        return stats

    def encode_glyphs(
        self,
        glyphs: list[Glyph],
        upm: int,
        max_workers: int | None = None,
        progress_callback: Callable[[int, int, str, bool], None] | None = None,
    ) -> list[EncodedGlyph]:
        """Build, pack and upload glyphs to the encoder's atlas.

        Args:
            glyphs: Glyphs with outlines
            upm: Font units per em
            max_workers: Maximum worker processes (1 = encode in this process)
            progress_callback: Optional callback(completed, total, glyph_name, success)

        Returns:
            The glyphs newly stored in the atlas, in input order
        """
        config_dict = self.config.hierarchy.model_dump()
        fill_rule = self.config.processing.fill_rule.value
        tasks = {glyph.name: glyph for glyph in glyphs}
        results: dict[str, dict[str, Any]] = {}
        total = len(tasks)

        def collect(name: str, result: dict[str, Any], completed: int) -> None:
            results[name] = result
            if progress_callback is not None:
                progress_callback(completed, total, name, "error" not in result)

        if max_workers == 1:
            for completed, (name, glyph) in enumerate(tasks.items(), start=1):
                self.processing_logger.log_glyph_start(name)
                collect(name, encode_glyph(glyph.to_dict(), config_dict, upm, fill_rule), completed)
        else:
            self.logger.info(
                "Starting parallel encoding",
                glyph_count=total,
                max_workers=max_workers,
            )
            with ProcessPoolExecutor(max_workers=max_workers) as executor:
                pending = {
                    executor.submit(encode_glyph, glyph.to_dict(), config_dict, upm, fill_rule): name
                    for name, glyph in tasks.items()
                }
                for completed, future in enumerate(as_completed(pending), start=1):
                    name = pending[future]
                    try:
                        result = future.result()
                    except Exception as e:
                        result = {
                            "error": str(e),
                            "glyph_name": name,
                            "traceback": traceback.format_exc(),
                        }
                    collect(name, result, completed)

        new_entries: list[EncodedGlyph] = []
        for name, glyph in tasks.items():
            entry = self._upload(glyph, results[name])
            if entry is not None:
                new_entries.append(entry)
        self.encoded.extend(new_entries)
        return new_entries

    def _upload(self, glyph: Glyph, result: dict[str, Any]) -> EncodedGlyph | None:
        if "error" in result:
            self.processing_logger.log_glyph_error(
                glyph_name=glyph.name,
                error=result["error"],
                traceback=result.get("traceback"),
            )
            return None

        render_data: RestrictedRaysGlyph = result["render_data"]
        hierarchy = render_data.hierarchy
        self.processing_logger.log_hierarchy(
            glyph.name,
            nodes=len(hierarchy.nodes),
            leaves=len(hierarchy.leaves),
            max_depth=hierarchy.max_depth,
        )

        attributes: list[GlyphAttribute] = []
        size_before = self.atlas.size
        if not render_data.upload_to_atlas(self.atlas, attributes):
            reason = (
                str(render_data.packing_error)
                if render_data.packing_error is not None
                else "atlas full"
            )
            self.processing_logger.log_glyph_failed(glyph.name, reason)
            return None

        self.processing_logger.log_glyph_complete(
            glyph_name=glyph.name,
            words=self.atlas.size - size_before,
            duration_ms=result["duration_ms"],
        )
        min_point, _ = render_data.bounds
        return EncodedGlyph(
            name=glyph.name,
            unicode=glyph.metadata.unicode,
            fill_rule=render_data.fill_rule,
            min_point=min_point.to_tuple(),
            attributes=tuple(attributes),
        )
