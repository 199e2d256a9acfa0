"""Glyph sources consumed by the font composer."""

from dataclasses import dataclass
from typing import BinaryIO


@dataclass
class GlyphSource:
    """One glyph ready to be pushed into the composer.

    The source owns an open read stream over the glyph's SVG content.
    Ownership passes to the composer, which reads and closes it.

    Attributes:
        asset_name: Name of the originating asset
        display_name: PascalCase glyph name stored in the font
        code_point: Private-use code point assigned to the glyph
        stream: Open binary stream over the SVG content
    """

    asset_name: str
    display_name: str
    code_point: int
    stream: BinaryIO

    @property
    def unicode(self) -> str:
        """Single-character string wrapping the code point."""
        return chr(self.code_point)

    @property
    def closed(self) -> bool:
        return self.stream.closed

    def read(self) -> bytes:
        """Read the whole SVG content from the stream."""
        return self.stream.read()

    def close(self) -> None:
        """Close the underlying stream."""
        if not self.stream.closed:
            self.stream.close()

    def __enter__(self) -> "GlyphSource":
        return self

    def __exit__(self, _exc_type: object, _exc_val: object, _exc_tb: object) -> None:
        self.close()
