"""Core build pipeline for iconsmith.

This module contains the icon-to-font build pipeline:

- Code-point allocation (positional, private-use area)
- Glyph source adaptation (PascalCase glyph names, open read streams)
- Streaming SVG font composition on asyncio
- Binary transcoding (TTF, then EOT, WOFF and WOFF2)
- Per-collection orchestration with atomic output promotion

Key functions:
- allocate_code_points: Assign base + k to the k-th asset
- open_glyph_sources: Adapt exported files to glyph sources
- parse_glyph_outline: Record a single-glyph SVG outline
- compose_font: Drive the streaming composer over a list of sources

Key classes:
- VectorFontComposer: Push-based streaming SVG font composer
- TranscoderChain: SVG -> TTF -> {EOT, WOFF, WOFF2}
- IconsmithPipeline: Builds collections concurrently
"""

from iconsmith.core.adapter import display_name_for, open_glyph_sources
from iconsmith.core.codepoints import (
    DEFAULT_BASE_CODE_POINT,
    allocate_code_points,
    code_point_map,
)
from iconsmith.core.composer import (
    PlacedGlyph,
    VectorFontComposer,
    compose_font,
    layout_glyphs,
    render_svg_font,
)
from iconsmith.core.outline import GlyphOutline, parse_glyph_outline
from iconsmith.core.pipeline import BuildStage, IconsmithPipeline
from iconsmith.core.transcoder import (
    TranscodeResult,
    TranscoderChain,
    svg_font_to_ttf,
    ttf_to_eot,
    ttf_to_woff,
    ttf_to_woff2,
)

__all__ = [
    "DEFAULT_BASE_CODE_POINT",
    # Pipeline classes
    "BuildStage",
    "GlyphOutline",
    "IconsmithPipeline",
    "PlacedGlyph",
    "TranscodeResult",
    "TranscoderChain",
    "VectorFontComposer",
    # Functions
    "allocate_code_points",
    "code_point_map",
    "compose_font",
    "display_name_for",
    "layout_glyphs",
    "open_glyph_sources",
    "parse_glyph_outline",
    "render_svg_font",
    "svg_font_to_ttf",
    "ttf_to_eot",
    "ttf_to_woff",
    "ttf_to_woff2",
]
