"""File and font I/O layer for iconsmith.

This module handles reading icon collections from disk, converting the
composed SVG font into binary fonts using fontTools, and writing
artifacts atomically.

Key responsibilities:
- Load a collection's SVG files in build order
- Parse SVG fonts and build TrueType fonts from them
- Re-encode TrueType as EOT, WOFF and WOFF2
- Stage and atomically promote output artifacts

Key classes:
- CollectionReader: Load icon collections
- ArtifactStage: Stage and promote a collection's artifacts
"""

from iconsmith.io.converter import (
    SvgFont,
    SvgFontGlyph,
    build_ttfont,
    load_ttf,
    parse_svg_font,
    svg_font_to_ttf_bytes,
    ttf_to_flavor,
)
from iconsmith.io.eot import read_eot_font_data, ttf_to_eot_bytes
from iconsmith.io.reader import CollectionReader
from iconsmith.io.writer import (
    ArtifactStage,
    atomic_write_bytes,
    ensure_directory,
    export_glyphs,
)

__all__ = [
    "ArtifactStage",
    "CollectionReader",
    "SvgFont",
    "SvgFontGlyph",
    "atomic_write_bytes",
    "build_ttfont",
    "ensure_directory",
    "export_glyphs",
    "load_ttf",
    "parse_svg_font",
    "read_eot_font_data",
    "svg_font_to_ttf_bytes",
    "ttf_to_eot_bytes",
    "ttf_to_flavor",
]
