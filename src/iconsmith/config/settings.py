"""Configuration settings for Iconsmith."""

from pathlib import Path

from pydantic import BaseModel, Field, field_validator

# Seconds between 1904-01-01 (font epoch) and 1970-01-01
MAC_EPOCH_OFFSET = 2082844800

PRIVATE_USE_START = 0xE000
PRIVATE_USE_END = 0xF8FF


class ComposerOptions(BaseModel):
    """Options for composing glyphs into one SVG font.

    Coordinates are in font design units; ``font_height`` doubles as the
    units-per-em of every derived binary font.
    """

    font_name: str = Field(
        default="Iconsmith",
        min_length=1,
        description="Font family name",
    )
    font_id: str | None = Field(
        default=None,
        description="SVG font element id (defaults to font_name without spaces)",
    )
    font_height: int = Field(
        default=1920,
        ge=16,
        le=16384,
        description="Em height in design units",
    )
    descent: int = Field(
        default=0,
        ge=0,
        description="Descent below the baseline in design units",
    )
    fixed_width: bool = Field(
        default=True,
        description="Give every glyph the advance width of the widest glyph",
    )
    normalize: bool = Field(
        default=True,
        description="Scale each glyph so its viewport height equals font_height",
    )
    center_horizontally: bool = Field(
        default=True,
        description="Center outlines horizontally inside their advance width",
    )
    center_vertically: bool = Field(
        default=True,
        description="Center outlines vertically inside the em box",
    )
    precision: int = Field(
        default=2,
        ge=0,
        le=6,
        description="Decimal places kept in glyph path data",
    )

    @property
    def ascent(self) -> int:
        """Ascent above the baseline."""
        return self.font_height - self.descent

    @property
    def element_id(self) -> str:
        """Identifier used for the SVG font element."""
        return self.font_id or self.font_name.replace(" ", "")


class FontConfig(BaseModel):
    """Configuration shared by every font built in one run."""

    base_code_point: int = Field(
        default=0xE614,
        ge=PRIVATE_USE_START,
        le=PRIVATE_USE_END,
        description="First private-use code point handed out",
    )
    font_height: int = Field(default=1920, ge=16, le=16384)
    descent: int = Field(default=0, ge=0)
    fixed_width: bool = True
    normalize: bool = True
    center_horizontally: bool = True
    center_vertically: bool = True
    precision: int = Field(default=2, ge=0, le=6)
    version: str = Field(
        default="Version 1.0",
        description="Version string stored in the name table",
    )
    timestamp: int = Field(
        default=0,
        ge=0,
        description="Unix timestamp stored as created/modified time (fixed for reproducible output)",
    )

    @property
    def font_timestamp(self) -> int:
        """Timestamp in seconds since the 1904 font epoch."""
        return self.timestamp + MAC_EPOCH_OFFSET

    def composer_options(self, font_name: str) -> ComposerOptions:
        """Build composer options for one font family."""
        return ComposerOptions(
            font_name=font_name,
            font_height=self.font_height,
            descent=self.descent,
            fixed_width=self.fixed_width,
            normalize=self.normalize,
            center_horizontally=self.center_horizontally,
            center_vertically=self.center_vertically,
            precision=self.precision,
        )


class CollectionSpec(BaseModel):
    """One icon collection to build."""

    name: str = Field(min_length=1, description="Collection name, e.g. 'outline'")
    source_dir: Path = Field(description="Directory holding the collection's SVG files")
    font_name: str = Field(min_length=1, description="Font family name")
    file_name: str = Field(min_length=1, description="Base file name of the artifacts")
    subfolder: str | None = Field(
        default=None,
        description="Output subfolder (defaults to the collection name)",
    )
    name_suffix: str | None = Field(
        default=None,
        description="Suffix stripped from icon names, e.g. '-fill'",
    )

    @field_validator("file_name")
    @classmethod
    def _no_path_separators(cls, value: str) -> str:
        if "/" in value or "\\" in value:
            raise ValueError("file_name must not contain path separators")
        return value

    @property
    def output_subfolder(self) -> str:
        """Subfolder used under the fonts and svg output directories."""
        return self.subfolder or self.name


class OutputConfig(BaseModel):
    """Where build artifacts are written."""

    root: Path = Field(
        default=Path("dist"),
        description="Output root directory",
    )
    fonts_dir: str = Field(default="fonts", description="Font subdirectory name")
    svg_dir: str = Field(default="svg", description="Exported glyph subdirectory name")
    write_manifest: bool = Field(
        default=True,
        description="Write a JSON map of icon name to code point per collection",
    )

    def fonts_path(self, subfolder: str) -> Path:
        """Directory holding a collection's fonts."""
        return self.root / self.fonts_dir / subfolder

    def svg_path(self, subfolder: str) -> Path:
        """Directory holding a collection's exported glyphs."""
        return self.root / self.svg_dir / subfolder


class ProcessingConfig(BaseModel):
    """Configuration for build processing."""

    skip_malformed: bool = Field(
        default=False,
        description="Drop malformed glyphs instead of failing the collection",
    )
    max_concurrent_collections: int | None = Field(
        default=None,
        ge=1,
        description="Max collections built at once (None = all)",
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    log_file: Path | None = Field(
        default=None,
        description="Path to log file",
    )
    log_level: str = Field(
        default="WARNING",
        description="Console log level",
    )
    file_log_level: str = Field(
        default="DEBUG",
        description="File log level (more verbose)",
    )


class IconsmithSettings(BaseModel):
    """Main application settings."""

    font: FontConfig = Field(default_factory=FontConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    processing: ProcessingConfig = Field(default_factory=ProcessingConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def get_default_settings() -> IconsmithSettings:
    """Get default application settings."""
    return IconsmithSettings()
