"""Streaming SVG font composition.

The composer accepts glyph sources one at a time, in code-point order,
and merges them into a single SVG font document normalized to a common
design grid. Composition runs as a background asyncio task:

1. ``start()`` spawns the task
2. ``write(source)`` pushes each glyph source (FIFO)
3. ``end()`` signals end of input
4. ``await wait()`` resolves once the destination file is fully written
   and renamed into place, or raises the error that stopped composition

Key components:
- PlacedGlyph: A glyph outline positioned on the design grid
- layout_glyphs: Scale, center and size glyphs per ComposerOptions
- render_svg_font: Serialize placed glyphs as an SVG font document
- VectorFontComposer: The push-based streaming composer
- compose_font: Drive the composer over a list of sources
"""

import asyncio
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from xml.sax.saxutils import quoteattr

import structlog
from fontTools.pens.boundsPen import BoundsPen
from fontTools.pens.svgPathPen import SVGPathPen
from fontTools.pens.transformPen import TransformPen

from iconsmith.config import ComposerOptions
from iconsmith.core.outline import GlyphOutline, parse_glyph_outline
from iconsmith.domain import FontArtifact, FontFormat, GlyphSource
from iconsmith.exceptions import (
    ArtifactWriteError,
    CompositionError,
    MalformedGlyphError,
)
from iconsmith.io.writer import atomic_write_bytes

logger = structlog.get_logger(__name__)

_END_OF_INPUT = None


@dataclass(frozen=True)
class PlacedGlyph:
    """A glyph positioned on the font's design grid.

    Attributes:
        name: Glyph name stored in the font
        code_point: Code point the glyph is mapped to
        advance_width: Horizontal advance in design units
        path_data: SVG path data in font coordinates (y axis up)
    """

    name: str
    code_point: int
    advance_width: int
    path_data: str


def _number_formatter(precision: int):
    def ntos(value: float) -> str:
        text = f"{value:.{precision}f}"
        if "." in text:
            text = text.rstrip("0").rstrip(".")
        return "0" if text in ("-0", "") else text

    return ntos


def layout_glyphs(
    entries: Iterable[tuple[GlyphSource, GlyphOutline]],
    options: ComposerOptions,
) -> list[PlacedGlyph]:
    """Position glyph outlines on the design grid.

    Each outline is flipped into font coordinates and, depending on the
    options, scaled to the em height, centered in its advance width and
    in the em box, and given the advance width of the widest glyph.

    Args:
        entries: Glyph sources with their parsed outlines, in push order
        options: Composition options

    Returns:
        Placed glyphs in the same order
    """
    entries = list(entries)
    scaled: list[tuple[GlyphSource, GlyphOutline, float, float]] = []
    for source, outline in entries:
        scale = options.font_height / outline.height if options.normalize else 1.0
        scaled.append((source, outline, scale, outline.width * scale))

    max_width = max((width for *_, width in scaled), default=0.0)
    ntos = _number_formatter(options.precision)

    placed: list[PlacedGlyph] = []
    for source, outline, scale, width in scaled:
        advance = max_width if options.fixed_width else width
        vx, vy, _, vh = outline.viewport

        # SVG user space (y down) to font space (y up), viewport at the origin
        base = (scale, 0, 0, -scale, -vx * scale, (vy + vh) * scale)
        bounds_pen = BoundsPen(None)
        outline.draw(TransformPen(bounds_pen, base))
        x_min, y_min, x_max, y_max = bounds_pen.bounds

        dx = 0.0
        dy = 0.0
        if options.center_horizontally:
            dx = (advance - (x_max - x_min)) / 2 - x_min
        if options.center_vertically:
            dy = (options.font_height - (y_max - y_min)) / 2 - y_min
        dy -= options.descent

        transform = (scale, 0, 0, -scale, base[4] + dx, base[5] + dy)
        path_pen = SVGPathPen(None, ntos=ntos)
        outline.draw(TransformPen(path_pen, transform))

        placed.append(
            PlacedGlyph(
                name=source.display_name,
                code_point=source.code_point,
                advance_width=round(advance),
                path_data=path_pen.getCommands(),
            )
        )
    return placed


def render_svg_font(glyphs: list[PlacedGlyph], options: ComposerOptions) -> bytes:
    """Serialize placed glyphs as an SVG font document."""
    default_advance = max((g.advance_width for g in glyphs), default=0)
    lines = [
        '<?xml version="1.0" standalone="no"?>',
        '<!DOCTYPE svg PUBLIC "-//W3C//DTD SVG 1.1//EN" '
        '"http://www.w3.org/Graphics/SVG/1.1/DTD/svg11.dtd" >',
        '<svg xmlns="http://www.w3.org/2000/svg">',
        "<defs>",
        f'  <font id={quoteattr(options.element_id)} horiz-adv-x="{default_advance}">',
        f"    <font-face font-family={quoteattr(options.font_name)}"
        f' units-per-em="{options.font_height}" ascent="{options.ascent}"'
        f' descent="{-options.descent}" />',
        '    <missing-glyph horiz-adv-x="0" />',
    ]
    for glyph in glyphs:
        lines.append(
            f"    <glyph glyph-name={quoteattr(glyph.name)}"
            f' unicode="&#x{glyph.code_point:X};"'
            f' horiz-adv-x="{glyph.advance_width}"'
            f" d={quoteattr(glyph.path_data)} />"
        )
    lines.extend(["  </font>", "</defs>", "</svg>", ""])
    return "\n".join(lines).encode("utf-8")


class VectorFontComposer:
    """Push-based streaming composer producing one SVG font.

    Example:
        composer = VectorFontComposer(options, Path("font.svg"))
        composer.start()
        for source in sources:
            composer.write(source)
        composer.end()
        artifact = await composer.wait()
    """

    def __init__(
        self,
        options: ComposerOptions,
        destination: Path,
        collection: str | None = None,
    ) -> None:
        """Initialize the composer.

        Args:
            options: Composition options
            destination: Path the SVG font is written to
            collection: Collection name used in error reports and logs
        """
        self.options = options
        self.destination = destination
        self.collection = collection
        self._queue: asyncio.Queue[GlyphSource | None] = asyncio.Queue()
        self._ended = False
        self._task: asyncio.Task[None] | None = None
        self._finished: asyncio.Future[FontArtifact] | None = None
        self._logger = logger.bind(collection=collection)

    def start(self) -> None:
        """Spawn the background composition task.

        Raises:
            RuntimeError: If called twice or outside a running event loop
        """
        if self._task is not None:
            raise RuntimeError("Composer already started")
        loop = asyncio.get_running_loop()
        self._finished = loop.create_future()
        self._task = loop.create_task(self._run())

    @property
    def finished(self) -> "asyncio.Future[FontArtifact]":
        """Future resolved when the destination is fully written."""
        if self._finished is None:
            raise RuntimeError("Composer not started. Call start() first.")
        return self._finished

    def write(self, source: GlyphSource) -> None:
        """Push one glyph source.

        Raises:
            CompositionError: If end of input was already signaled
        """
        if self._ended:
            source.close()
            raise CompositionError("glyph written after end of input", self.collection)
        if self._finished is None:
            source.close()
            raise RuntimeError("Composer not started. Call start() first.")
        if self._finished.done():
            # Composition already failed, nobody will consume this source
            source.close()
            return
        self._queue.put_nowait(source)

    def end(self) -> None:
        """Signal that no more glyph sources follow."""
        if self._ended:
            return
        self._ended = True
        self._queue.put_nowait(_END_OF_INPUT)

    async def wait(self) -> FontArtifact:
        """Wait until the SVG font is written.

        Returns:
            The composed SVG font document

        Raises:
            MalformedGlyphError: If a glyph cannot be parsed
            CompositionError: If composition or writing the destination fails
        """
        return await self.finished

    async def cancel(self) -> None:
        """Cancel composition and release every pending glyph source."""
        if self._task is not None and not self._task.done():
            self._task.cancel()
            await asyncio.gather(self._task, return_exceptions=True)
        if self._finished is not None and not self._finished.done():
            self._finished.cancel()
        self._drain()

    async def __aenter__(self) -> "VectorFontComposer":
        self.start()
        return self

    async def __aexit__(self, exc_type: object, _exc_val: object, _exc_tb: object) -> None:
        if exc_type is not None:
            await self.cancel()

    def _drain(self) -> None:
        while not self._queue.empty():
            source = self._queue.get_nowait()
            if source is not None:
                source.close()

    def _fail(self, error: BaseException) -> None:
        if self._finished is not None and not self._finished.done():
            self._finished.set_exception(error)

    async def _run(self) -> None:
        entries: list[tuple[GlyphSource, GlyphOutline]] = []
        try:
            while True:
                source = await self._queue.get()
                if source is _END_OF_INPUT:
                    break
                entries.append((source, await self._consume(source)))

            self._logger.debug("Composing font", glyphs=len(entries))
            placed = layout_glyphs(entries, self.options)
            document = render_svg_font(placed, self.options)

            try:
                await asyncio.to_thread(atomic_write_bytes, self.destination, document)
            except ArtifactWriteError as e:
                raise CompositionError(e.reason, self.collection) from e

            self._logger.info(
                "Font composed",
                destination=str(self.destination),
                glyphs=len(placed),
                size=len(document),
            )
            if self._finished is not None and not self._finished.done():
                self._finished.set_result(FontArtifact(FontFormat.SVG, document))

        except MalformedGlyphError as e:
            self._logger.error("Malformed glyph", glyph=e.glyph_name, reason=e.reason)
            self._fail(e.with_collection(self.collection) if self.collection else e)
        except CompositionError as e:
            self._logger.error("Composition failed", reason=e.reason)
            self._fail(e)
        except asyncio.CancelledError:
            if self._finished is not None and not self._finished.done():
                self._finished.cancel()
            raise
        except Exception as e:
            self._logger.error("Composition failed", error=str(e), error_type=type(e).__name__)
            error = CompositionError(str(e), self.collection)
            error.__cause__ = e
            self._fail(error)
        finally:
            self._drain()

    async def _consume(self, source: GlyphSource) -> GlyphOutline:
        """Read, close and parse one glyph source."""
        with source:
            try:
                content = await asyncio.to_thread(source.read)
            except OSError as e:
                raise CompositionError(
                    f"cannot read glyph '{source.asset_name}': {e}", self.collection
                ) from e
        return await asyncio.to_thread(parse_glyph_outline, source.asset_name, content)


async def compose_font(
    sources: list[GlyphSource],
    options: ComposerOptions,
    destination: Path,
    collection: str | None = None,
) -> FontArtifact:
    """Compose glyph sources into an SVG font written to ``destination``.

    Args:
        sources: Glyph sources in code-point order (ownership is taken)
        options: Composition options
        destination: Output path of the SVG font
        collection: Collection name for error reports

    Returns:
        The composed SVG font document
    """
    async with VectorFontComposer(options, destination, collection) as composer:
        for index, source in enumerate(sources):
            try:
                composer.write(source)
            except BaseException:
                for pending in sources[index + 1:]:
                    pending.close()
                raise
        composer.end()
        return await composer.wait()
