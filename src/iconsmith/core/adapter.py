"""Glyph source adapter.

Turns exported glyph files plus their allocated code points into the
``GlyphSource`` units the composer consumes.
"""

from collections.abc import Sequence
from pathlib import Path

from iconsmith.domain import GlyphSource
from iconsmith.utils.naming import pascal_case


def display_name_for(path: Path) -> str:
    """Glyph name for a file: base name without extension, in PascalCase."""
    return pascal_case(path.stem)


def open_glyph_sources(
    paths: Sequence[Path],
    code_points: Sequence[int],
) -> list[GlyphSource]:
    """Open one glyph source per exported file.

    Args:
        paths: Exported glyph files in build order
        code_points: Allocated code points, one per path

    Returns:
        Glyph sources with open read streams, in input order

    Raises:
        ValueError: If paths and code points differ in length
        OSError: If a file cannot be opened (already opened streams are closed)
    """
    if len(paths) != len(code_points):
        raise ValueError(
            f"Got {len(paths)} glyph files but {len(code_points)} code points"
        )

    sources: list[GlyphSource] = []
    try:
        for path, code_point in zip(paths, code_points, strict=True):
            sources.append(
                GlyphSource(
                    asset_name=path.stem,
                    display_name=display_name_for(path),
                    code_point=code_point,
                    stream=path.open("rb"),
                )
            )
    except BaseException:
        for source in sources:
            source.close()
        raise
    return sources
