"""Font artifacts and build results.

Every stage of the transcoder chain exchanges ``FontArtifact`` values:
an immutable byte buffer tagged with its format. Results and manifests
describe what a collection build produced and where.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any


class FontFormat(str, Enum):
    """Output font formats, in production order."""

    SVG = "svg"
    TTF = "ttf"
    EOT = "eot"
    WOFF = "woff"
    WOFF2 = "woff2"

    @property
    def extension(self) -> str:
        """File extension including the leading dot."""
        return f".{self.value}"


@dataclass(frozen=True)
class FontArtifact:
    """An immutable font byte buffer.

    Attributes:
        format: Font format of the buffer
        data: Font bytes
    """

    format: FontFormat
    data: bytes

    def __post_init__(self) -> None:
        if isinstance(self.data, (bytearray, memoryview)):
            object.__setattr__(self, "data", bytes(self.data))
        if not self.data:
            raise ValueError(f"{self.format.name} artifact must not be empty")

    def __len__(self) -> int:
        return len(self.data)

    def text(self) -> str:
        """Decode the buffer as UTF-8 (SVG fonts only)."""
        if self.format is not FontFormat.SVG:
            raise ValueError(f"{self.format.name} artifact is binary")
        return self.data.decode("utf-8")


@dataclass
class BuildManifest:
    """Output paths of one collection build.

    Attributes:
        collection: Collection name
        fonts: Output path per font format
        code_points: Path of the JSON code-point map, if written
    """

    collection: str
    fonts: dict[FontFormat, Path] = field(default_factory=dict)
    code_points: Path | None = None

    def add(self, font_format: FontFormat, path: Path) -> None:
        """Register an output path.

        Raises:
            ValueError: If the path is already used by another format
        """
        if path in self.paths():
            raise ValueError(f"Output path already registered: {path}")
        self.fonts[font_format] = path

    def paths(self) -> list[Path]:
        """All registered output paths."""
        paths = list(self.fonts.values())
        if self.code_points is not None:
            paths.append(self.code_points)
        return paths

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "collection": self.collection,
            "fonts": {fmt.value: str(path) for fmt, path in self.fonts.items()},
            "code_points": str(self.code_points) if self.code_points else None,
        }


class BuildStatus(str, Enum):
    """Outcome of one collection build."""

    BUILT = "built"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class CollectionResult:
    """Result of building one collection.

    Attributes:
        collection: Collection name
        status: Build outcome
        glyph_count: Number of glyphs in the built font
        manifest: Output paths (built collections only)
        error: Failure cause (failed collections only)
        skipped_glyphs: Names of malformed glyphs dropped before the build
        duration_seconds: Wall time spent on the collection
    """

    collection: str
    status: BuildStatus
    glyph_count: int = 0
    manifest: BuildManifest | None = None
    error: Exception | None = None
    skipped_glyphs: list[str] = field(default_factory=list)
    duration_seconds: float = 0.0

    @property
    def ok(self) -> bool:
        """Whether the build succeeded or was a no-op."""
        return self.status is not BuildStatus.FAILED
