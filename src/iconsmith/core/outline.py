"""Single-glyph SVG outline extraction.

Parses one normalized icon SVG with fontTools' svgLib and records its
outline in SVG user space (y axis pointing down), together with the
viewport the icon was drawn in.
"""

import re
from dataclasses import dataclass
from typing import Any

from fontTools.misc import etree
from fontTools.pens.basePen import AbstractPen
from fontTools.pens.boundsPen import BoundsPen
from fontTools.pens.recordingPen import RecordingPen, replayRecording
from fontTools.svgLib.path import SVGPath

from iconsmith.exceptions import MalformedGlyphError

_NUMBER = re.compile(r"^\s*([-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)")
_SEPARATORS = re.compile(r"[\s,]+")


@dataclass(frozen=True)
class GlyphOutline:
    """Recorded outline of one glyph.

    Attributes:
        name: Glyph name used in error reports
        recording: RecordingPen commands in SVG user space
        viewport: (x, y, width, height) of the icon's viewport
        bounds: (x_min, y_min, x_max, y_max) of the outline in SVG user space
    """

    name: str
    recording: tuple[tuple[str, tuple[Any, ...]], ...]
    viewport: tuple[float, float, float, float]
    bounds: tuple[float, float, float, float]

    @property
    def width(self) -> float:
        return self.viewport[2]

    @property
    def height(self) -> float:
        return self.viewport[3]

    def draw(self, pen: AbstractPen) -> None:
        """Replay the outline into a pen."""
        replayRecording(self.recording, pen)


def _parse_length(value: str | None) -> float | None:
    """Parse an SVG length such as "24", "24px" or "1.5e1"."""
    if not value:
        return None
    match = _NUMBER.match(value)
    if match is None:
        return None
    return float(match.group(1))


def _parse_viewbox(value: str | None) -> tuple[float, float, float, float] | None:
    if not value:
        return None
    parts = [p for p in _SEPARATORS.split(value.strip()) if p]
    if len(parts) != 4:
        raise ValueError(f"bad viewBox '{value}'")
    x, y, w, h = (float(p) for p in parts)
    return x, y, w, h


def parse_glyph_outline(name: str, content: bytes | str) -> GlyphOutline:
    """Parse a single-glyph SVG document.

    The viewport is taken from ``viewBox``, else from ``width``/``height``,
    else from the outline bounds.

    Args:
        name: Glyph name used in error reports
        content: SVG markup

    Returns:
        The recorded outline

    Raises:
        MalformedGlyphError: If the markup, its path data or its viewport
            cannot be parsed, or if it draws nothing
    """
    if isinstance(content, str):
        content = content.encode("utf-8")

    try:
        svg = SVGPath.fromstring(content)
    except etree.ParseError as e:
        raise MalformedGlyphError(name, f"invalid XML: {e}") from e

    root = svg.root
    if root.tag.rsplit("}", 1)[-1] != "svg":
        raise MalformedGlyphError(name, f"root element is <{root.tag}>, expected <svg>")

    recorder = RecordingPen()
    try:
        svg.draw(recorder)
        viewbox = _parse_viewbox(root.get("viewBox"))
    except (ValueError, TypeError, IndexError, KeyError, ZeroDivisionError) as e:
        raise MalformedGlyphError(name, f"invalid shape data: {e}") from e

    bounds_pen = BoundsPen(None)
    replayRecording(recorder.value, bounds_pen)
    if not recorder.value or bounds_pen.bounds is None:
        raise MalformedGlyphError(name, "no drawable outline")
    bounds = tuple(float(v) for v in bounds_pen.bounds)

    if viewbox is None:
        width = _parse_length(root.get("width"))
        height = _parse_length(root.get("height"))
        if width is not None and height is not None:
            viewbox = (0.0, 0.0, width, height)
        else:
            x_min, y_min, x_max, y_max = bounds
            viewbox = (x_min, y_min, x_max - x_min, y_max - y_min)

    if viewbox[2] <= 0 or viewbox[3] <= 0:
        raise MalformedGlyphError(name, f"empty viewport {viewbox}")

    return GlyphOutline(
        name=name,
        recording=tuple(recorder.value),
        viewport=viewbox,
        bounds=bounds,  # type: ignore[arg-type]
    )
