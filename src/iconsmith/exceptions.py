"""Exception hierarchy for Iconsmith."""


class IconsmithError(Exception):
    """Base exception for all Iconsmith errors."""

    pass


class AssetError(IconsmithError):
    """Errors related to icon assets and collections."""

    pass


class DuplicateGlyphError(AssetError):
    """Two assets in one collection share a name."""

    def __init__(self, collection: str, glyph_name: str) -> None:
        self.collection = collection
        self.glyph_name = glyph_name
        super().__init__(
            f"Duplicate glyph name '{glyph_name}' in collection '{collection}'"
        )


class GlyphError(IconsmithError):
    """Errors related to individual glyphs."""

    pass


class MalformedGlyphError(GlyphError):
    """A glyph's vector content cannot be parsed or composed."""

    def __init__(self, glyph_name: str, reason: str, collection: str | None = None) -> None:
        self.glyph_name = glyph_name
        self.reason = reason
        self.collection = collection
        where = f" in collection '{collection}'" if collection else ""
        super().__init__(f"Malformed glyph '{glyph_name}'{where}: {reason}")

    def with_collection(self, collection: str) -> "MalformedGlyphError":
        """Return a copy of this error tagged with its collection."""
        error = MalformedGlyphError(self.glyph_name, self.reason, collection)
        error.__cause__ = self.__cause__
        return error


class CodePointRangeError(IconsmithError):
    """Allocated code points would leave the private-use area."""

    def __init__(self, base: int, count: int) -> None:
        self.base = base
        self.count = count
        super().__init__(
            f"Cannot allocate {count} code points from U+{base:04X} "
            "inside the private-use area U+E000..U+F8FF"
        )


class CompositionError(IconsmithError):
    """The streaming composer or its destination failed."""

    def __init__(self, reason: str, collection: str | None = None) -> None:
        self.reason = reason
        self.collection = collection
        super().__init__(f"Font composition failed: {reason}")


class TranscodingError(IconsmithError):
    """One or more binary font derivations failed."""

    def __init__(self, failures: dict[str, Exception]) -> None:
        self.failures = failures
        details = "; ".join(f"{fmt}: {err}" for fmt, err in failures.items())
        super().__init__(f"Transcoding failed for {', '.join(failures)}: {details}")

    @property
    def formats(self) -> list[str]:
        """Names of the formats that failed."""
        return list(self.failures)


class ArtifactWriteError(IconsmithError):
    """Error writing an output artifact or directory."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to write '{path}': {reason}")


class CollectionBuildError(IconsmithError):
    """Building one collection failed at a given stage."""

    def __init__(
        self,
        collection: str,
        stage: str,
        reason: str,
        glyph_name: str | None = None,
    ) -> None:
        self.collection = collection
        self.stage = stage
        self.reason = reason
        self.glyph_name = glyph_name
        glyph = f" (glyph '{glyph_name}')" if glyph_name else ""
        super().__init__(
            f"Collection '{collection}' failed at {stage}{glyph}: {reason}"
        )


class BuildCancelledError(IconsmithError):
    """The build was cancelled by the user."""

    def __init__(self, completed_count: int, pending_count: int) -> None:
        self.completed_count = completed_count
        self.pending_count = pending_count
        super().__init__(
            f"Build cancelled: {completed_count} completed, {pending_count} pending"
        )
