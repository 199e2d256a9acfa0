"""Domain models for iconsmith.

This module contains the core domain models representing icon assets,
the glyph sources fed to the composer and the artifacts a build produces.
All models are designed to be:

- Immutable where possible (using frozen dataclasses)
- Independent of fontTools implementation details

Key classes:
- GlyphAsset: A single-glyph SVG document with its name
- IconCollection: Ordered assets sharing one visual style
- GlyphSource: An asset adapted for composition (glyph name, code point, stream)
- FontArtifact: An immutable font byte buffer tagged with its format
- BuildManifest: Output paths of one collection build
- CollectionResult: Outcome of one collection build
"""

from iconsmith.domain.artifact import (
    BuildManifest,
    BuildStatus,
    CollectionResult,
    FontArtifact,
    FontFormat,
)
from iconsmith.domain.asset import GlyphAsset, IconCollection
from iconsmith.domain.source import GlyphSource

__all__: list[str] = [
    # Enums
    "BuildStatus",
    "FontFormat",
    # Core types
    "BuildManifest",
    "CollectionResult",
    "FontArtifact",
    "GlyphAsset",
    "GlyphSource",
    "IconCollection",
]
