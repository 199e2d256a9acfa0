"""Collection reader for loading icon directories.

This module provides the CollectionReader class for loading the
normalized SVG files of one collection into an IconCollection.
"""

from collections.abc import Iterator
from pathlib import Path

from iconsmith.domain import GlyphAsset, IconCollection
from iconsmith.utils.naming import kebab_case


class CollectionReader:
    """Loads one collection's SVG files.

    Files are taken from a single directory, sorted by file name. Icon
    names are the kebab-case form of the file stem, with an optional
    suffix removed (e.g. "heart-fill.svg" -> "heart").

    Example:
        reader = CollectionReader(Path("icons/filled"), "filled", name_suffix="-fill")
        collection = reader.load()
    """

    def __init__(
        self,
        source_dir: Path,
        collection: str,
        name_suffix: str | None = None,
    ) -> None:
        """Initialize the collection reader.

        Args:
            source_dir: Directory holding the SVG files
            collection: Collection name
            name_suffix: Suffix stripped from icon names
        """
        self._source_dir = source_dir
        self._collection = collection
        self._name_suffix = name_suffix

    def icon_name(self, path: Path) -> str:
        """Icon name for a file."""
        name = kebab_case(path.stem)
        suffix = self._name_suffix
        if suffix and name.endswith(suffix) and name != suffix:
            name = name[: -len(suffix)]
        return name

    def iter_files(self) -> Iterator[Path]:
        """Iterate over SVG files in build order.

        Raises:
            FileNotFoundError: If the source directory does not exist
        """
        if not self._source_dir.is_dir():
            raise FileNotFoundError(f"Icon directory not found: {self._source_dir}")
        yield from sorted(
            (p for p in self._source_dir.iterdir() if p.is_file() and p.suffix.lower() == ".svg"),
            key=lambda p: p.name,
        )

    def load(self) -> IconCollection:
        """Load the collection.

        Raises:
            FileNotFoundError: If the source directory does not exist
            DuplicateGlyphError: If two files map to the same icon name
        """
        assets = [
            GlyphAsset(name=self.icon_name(path), content=path.read_bytes())
            for path in self.iter_files()
        ]
        return IconCollection(name=self._collection, assets=tuple(assets))
