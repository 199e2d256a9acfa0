"""Icon assets and collections.

This module defines the input side of the build: a single-glyph SVG
asset and the ordered, immutable collection of assets that becomes
one font.
"""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import Any

from iconsmith.exceptions import DuplicateGlyphError


@dataclass(frozen=True)
class GlyphAsset:
    """A normalized single-glyph SVG document.

    Attributes:
        name: Kebab-case identifier, unique within its collection
        content: SVG markup as bytes
    """

    name: str
    content: bytes

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("Glyph asset name must not be empty")
        if "/" in self.name or "\\" in self.name:
            raise ValueError(f"Glyph asset name must not contain path separators: {self.name!r}")
        if isinstance(self.content, str):
            object.__setattr__(self, "content", self.content.encode("utf-8"))

    @property
    def file_name(self) -> str:
        """File name used when the asset is exported."""
        return f"{self.name}.svg"

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary.

        Returns:
            Dictionary representation of the asset
        """
        return {"name": self.name, "content": self.content.decode("utf-8")}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GlyphAsset":
        """Deserialize from dictionary."""
        return cls(name=data["name"], content=data["content"])


@dataclass(frozen=True)
class IconCollection:
    """Ordered assets sharing one visual style.

    Order is significant: it is the only input to code-point allocation.

    Attributes:
        name: Collection name (e.g., "outline", "filled")
        assets: Assets in build order
    """

    name: str
    assets: tuple[GlyphAsset, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Collection name must not be empty")
        assets = tuple(self.assets)
        seen: set[str] = set()
        for asset in assets:
            if asset.name in seen:
                raise DuplicateGlyphError(self.name, asset.name)
            seen.add(asset.name)
        object.__setattr__(self, "assets", assets)

    @classmethod
    def from_pairs(cls, name: str, pairs: Iterable[tuple[str, bytes | str]]) -> "IconCollection":
        """Build a collection from ``(name, markup)`` pairs."""
        return cls(name=name, assets=tuple(GlyphAsset(n, c) for n, c in pairs))

    def __len__(self) -> int:
        return len(self.assets)

    def __iter__(self) -> Iterator[GlyphAsset]:
        return iter(self.assets)

    def is_empty(self) -> bool:
        """Check if the collection has no assets."""
        return not self.assets

    @property
    def names(self) -> list[str]:
        """Asset names in build order."""
        return [asset.name for asset in self.assets]

    def without(self, names: Iterable[str]) -> "IconCollection":
        """Return a copy of this collection with the named assets removed."""
        excluded = set(names)
        return IconCollection(
            name=self.name,
            assets=tuple(a for a in self.assets if a.name not in excluded),
        )
