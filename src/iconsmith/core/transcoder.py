"""Binary font transcoder chain.

Derives binary fonts from a composed SVG font:

    SVG font -> TTF -> EOT
                    -> WOFF
                    -> WOFF2

TTF is produced first; the three derivations that follow consume the
same immutable TTF buffer and run concurrently in worker threads. Each
stage is a pure function of its input bytes.
"""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass

import structlog

from iconsmith.config import FontConfig
from iconsmith.domain import FontArtifact, FontFormat
from iconsmith.exceptions import TranscodingError
from iconsmith.io.converter import svg_font_to_ttf_bytes, ttf_to_flavor
from iconsmith.io.eot import ttf_to_eot_bytes

logger = structlog.get_logger(__name__)


def _expect(artifact: FontArtifact, font_format: FontFormat) -> None:
    if artifact.format is not font_format:
        raise ValueError(f"Expected {font_format.name} input, got {artifact.format.name}")


def svg_font_to_ttf(svg: FontArtifact, config: FontConfig) -> FontArtifact:
    """Convert an SVG font to TrueType."""
    _expect(svg, FontFormat.SVG)
    return FontArtifact(FontFormat.TTF, svg_font_to_ttf_bytes(svg.data, config))


def ttf_to_eot(ttf: FontArtifact) -> FontArtifact:
    """Wrap TrueType in an Embedded OpenType container."""
    _expect(ttf, FontFormat.TTF)
    return FontArtifact(FontFormat.EOT, ttf_to_eot_bytes(ttf.data))


def ttf_to_woff(ttf: FontArtifact) -> FontArtifact:
    """Re-encode TrueType as WOFF."""
    _expect(ttf, FontFormat.TTF)
    return FontArtifact(FontFormat.WOFF, ttf_to_flavor(ttf.data, "woff"))


def ttf_to_woff2(ttf: FontArtifact) -> FontArtifact:
    """Re-encode TrueType as WOFF2."""
    _expect(ttf, FontFormat.TTF)
    return FontArtifact(FontFormat.WOFF2, ttf_to_flavor(ttf.data, "woff2"))


TTF_DERIVATIONS: dict[FontFormat, Callable[[FontArtifact], FontArtifact]] = {
    FontFormat.EOT: ttf_to_eot,
    FontFormat.WOFF: ttf_to_woff,
    FontFormat.WOFF2: ttf_to_woff2,
}


@dataclass
class TranscodeResult:
    """Binary fonts derived from one SVG font."""

    ttf: FontArtifact
    eot: FontArtifact
    woff: FontArtifact
    woff2: FontArtifact

    def artifacts(self) -> list[FontArtifact]:
        """All artifacts in production order."""
        return [self.ttf, self.eot, self.woff, self.woff2]


class TranscoderChain:
    """Runs the SVG -> TTF -> {EOT, WOFF, WOFF2} chain.

    Every derivation runs to completion, even when a sibling fails. If
    any failed, a single TranscodingError naming each failed format is
    raised and no result is returned.

    Example:
        chain = TranscoderChain(FontConfig())
        result = await chain.run(svg_artifact)
    """

    def __init__(self, config: FontConfig, collection: str | None = None) -> None:
        """Initialize the chain.

        Args:
            config: Font configuration
            collection: Collection name used in logs
        """
        self.config = config
        self.collection = collection
        self._logger = logger.bind(collection=collection)

    async def to_ttf(self, svg: FontArtifact) -> FontArtifact:
        """Produce the TrueType font.

        Raises:
            TranscodingError: If the conversion fails
        """
        try:
            ttf = await asyncio.to_thread(svg_font_to_ttf, svg, self.config)
        except Exception as e:
            self._logger.error("Transcoding failed", format="ttf", error=str(e))
            raise TranscodingError({FontFormat.TTF.value: e}) from e
        self._logger.debug("Transcoded", format="ttf", size=len(ttf))
        return ttf

    async def derive(self, ttf: FontArtifact) -> dict[FontFormat, FontArtifact]:
        """Produce EOT, WOFF and WOFF2 concurrently from TrueType.

        Raises:
            TranscodingError: If any derivation fails
        """
        formats = list(TTF_DERIVATIONS)
        outcomes = await asyncio.gather(
            *(asyncio.to_thread(TTF_DERIVATIONS[fmt], ttf) for fmt in formats),
            return_exceptions=True,
        )

        derived: dict[FontFormat, FontArtifact] = {}
        failures: dict[str, Exception] = {}
        for fmt, outcome in zip(formats, outcomes, strict=True):
            if isinstance(outcome, Exception):
                self._logger.error("Transcoding failed", format=fmt.value, error=str(outcome))
                failures[fmt.value] = outcome
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                self._logger.debug("Transcoded", format=fmt.value, size=len(outcome))
                derived[fmt] = outcome

        if failures:
            raise TranscodingError(failures)
        return derived

    async def run(self, svg: FontArtifact) -> TranscodeResult:
        """Run the whole chain on a composed SVG font."""
        ttf = await self.to_ttf(svg)
        derived = await self.derive(ttf)
        return TranscodeResult(
            ttf=ttf,
            eot=derived[FontFormat.EOT],
            woff=derived[FontFormat.WOFF],
            woff2=derived[FontFormat.WOFF2],
        )
