"""Converters between SVG fonts and binary fonts.

This module parses the composed SVG font document and builds TrueType
fonts from it with fontTools, then re-encodes TrueType bytes as WOFF or
WOFF2.

All conversions start from immutable bytes and never recalculate
timestamps, so the same input always produces the same output bytes.
"""

import io
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field

from fontTools.fontBuilder import FontBuilder
from fontTools.pens.cu2quPen import Cu2QuPen
from fontTools.pens.ttGlyphPen import TTGlyphPen
from fontTools.svgLib.path import parse_path
from fontTools.ttLib import TTFont

from iconsmith.config import FontConfig

# Max error when approximating cubic curves with quadratic ones, in font units
CURVE_TOLERANCE = 1.0


@dataclass(frozen=True)
class SvgFontGlyph:
    """One <glyph> element of an SVG font."""

    name: str
    unicode: str
    advance_width: int
    path_data: str

    @property
    def code_point(self) -> int | None:
        """Code point of single-character glyphs."""
        return ord(self.unicode) if len(self.unicode) == 1 else None


@dataclass
class SvgFont:
    """Parsed SVG font document.

    Attributes:
        family: font-family of the font-face
        font_id: id of the font element
        units_per_em: Em size in design units
        ascent: Ascent in design units
        descent: Descent in design units (zero or negative)
        default_advance: Font-level horiz-adv-x
        glyphs: Glyphs in document order
    """

    family: str
    font_id: str
    units_per_em: int
    ascent: int
    descent: int
    default_advance: int
    glyphs: list[SvgFontGlyph] = field(default_factory=list)


def _local(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _find(element: ET.Element, name: str) -> ET.Element | None:
    for child in element.iter():
        if _local(child.tag) == name:
            return child
    return None


def _int_attr(element: ET.Element | None, name: str, default: int) -> int:
    if element is None or element.get(name) is None:
        return default
    return round(float(element.get(name)))  # type: ignore[arg-type]


def parse_svg_font(document: bytes) -> SvgFont:
    """Parse an SVG font document.

    Args:
        document: SVG font markup

    Returns:
        Parsed font

    Raises:
        ValueError: If the document holds no <font> element
        xml.etree.ElementTree.ParseError: If the markup is not XML
    """
    root = ET.fromstring(document)
    font_el = _find(root, "font")
    if font_el is None:
        raise ValueError("SVG document has no <font> element")

    face = _find(font_el, "font-face")
    units_per_em = _int_attr(face, "units-per-em", 1000)
    ascent = _int_attr(face, "ascent", units_per_em)
    descent = -abs(_int_attr(face, "descent", 0))
    default_advance = _int_attr(font_el, "horiz-adv-x", units_per_em)

    glyphs: list[SvgFontGlyph] = []
    for index, glyph_el in enumerate(g for g in font_el if _local(g.tag) == "glyph"):
        unicode_value = glyph_el.get("unicode")
        if not unicode_value:
            continue
        name = glyph_el.get("glyph-name") or (
            f"uni{ord(unicode_value):04X}" if len(unicode_value) == 1 else f"glyph{index}"
        )
        glyphs.append(
            SvgFontGlyph(
                name=name,
                unicode=unicode_value,
                advance_width=_int_attr(glyph_el, "horiz-adv-x", default_advance),
                path_data=glyph_el.get("d") or "",
            )
        )

    return SvgFont(
        family=face.get("font-family", "") if face is not None else "",
        font_id=font_el.get("id", ""),
        units_per_em=units_per_em,
        ascent=ascent,
        descent=descent,
        default_advance=default_advance,
        glyphs=glyphs,
    )


def _draw_glyph(path_data: str):
    """Build a TrueType glyph from SVG path data in font coordinates."""
    tt_pen = TTGlyphPen(None)
    if path_data:
        # Outlines flipped from SVG space wind counter-clockwise; TrueType wants clockwise
        parse_path(path_data, Cu2QuPen(tt_pen, max_err=CURVE_TOLERANCE, reverse_direction=True))
    return tt_pen.glyph()


def _postscript_name(family: str) -> str:
    name = "".join(ch for ch in family if ch.isalnum() or ch in "-_")
    return (name or "Iconsmith")[:63 - len("-Regular")] + "-Regular"


def build_ttfont(svg_font: SvgFont, config: FontConfig) -> TTFont:
    """Build a TrueType font from a parsed SVG font.

    Args:
        svg_font: Parsed SVG font
        config: Font configuration (version string, timestamp)

    Returns:
        The fontTools font object

    Raises:
        ValueError: If two glyphs share a name or a code point
    """
    glyph_order = [".notdef"]
    glyphs = {".notdef": _draw_glyph("")}
    advances = {".notdef": 0}
    cmap: dict[int, str] = {}

    for glyph in svg_font.glyphs:
        if glyph.name in glyphs:
            raise ValueError(f"Duplicate glyph name '{glyph.name}'")
        code_point = glyph.code_point
        if code_point is None:
            continue
        if code_point in cmap:
            raise ValueError(f"Duplicate code point U+{code_point:04X}")
        glyph_order.append(glyph.name)
        glyphs[glyph.name] = _draw_glyph(glyph.path_data)
        advances[glyph.name] = glyph.advance_width
        cmap[code_point] = glyph.name

    family = svg_font.family or svg_font.font_id or "Iconsmith"
    timestamp = config.font_timestamp

    fb = FontBuilder(svg_font.units_per_em, isTTF=True)
    fb.font.recalcTimestamp = False
    head = fb.font["head"]
    head.created = timestamp
    head.modified = timestamp
    fb.setupGlyphOrder(glyph_order)
    fb.setupCharacterMap(cmap)
    fb.setupGlyf(glyphs)

    glyf_table = fb.font["glyf"]
    metrics = {
        name: (advances[name], getattr(glyf_table[name], "xMin", 0))
        for name in glyph_order
    }
    fb.setupHorizontalMetrics(metrics)
    fb.setupHorizontalHeader(ascent=svg_font.ascent, descent=svg_font.descent)
    fb.setupNameTable(
        {
            "familyName": family,
            "styleName": "Regular",
            "uniqueFontIdentifier": f"{family}:{config.version}",
            "fullName": family,
            "psName": _postscript_name(family),
            "version": config.version,
        }
    )
    fb.setupOS2(
        sTypoAscender=svg_font.ascent,
        sTypoDescender=svg_font.descent,
        sTypoLineGap=0,
        usWinAscent=svg_font.ascent,
        usWinDescent=abs(svg_font.descent),
        usWeightClass=400,
    )
    fb.setupPost(keepGlyphNames=True)
    fb.setupMaxp()
    return fb.font


def save_font(font: TTFont, flavor: str | None = None) -> bytes:
    """Serialize a font, optionally as WOFF or WOFF2."""
    font.flavor = flavor
    buffer = io.BytesIO()
    font.save(buffer)
    return buffer.getvalue()


def svg_font_to_ttf_bytes(document: bytes, config: FontConfig) -> bytes:
    """Convert an SVG font document to TrueType bytes."""
    return save_font(build_ttfont(parse_svg_font(document), config))


def load_ttf(data: bytes) -> TTFont:
    """Load TrueType bytes without touching timestamps."""
    return TTFont(io.BytesIO(data), recalcTimestamp=False)


def ttf_to_flavor(data: bytes, flavor: str) -> bytes:
    """Re-encode TrueType bytes as ``woff`` or ``woff2``."""
    font = load_ttf(data)
    try:
        return save_font(font, flavor)
    finally:
        font.close()
