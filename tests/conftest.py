"""Shared fixtures for iconsmith tests."""

from pathlib import Path

import pytest

from iconsmith.config import (
    CollectionSpec,
    FontConfig,
    IconsmithSettings,
    OutputConfig,
)

# 24x24 icons in the usual normalized form
SQUARE_SVG = (
    '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 24 24">'
    '<path d="M4 4H20V20H4Z"/></svg>'
)
TRIANGLE_SVG = (
    '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 24 24">'
    '<path d="M12 2L22 22H2Z"/></svg>'
)
CURVE_SVG = (
    '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 24 24">'
    '<path d="M2 12C2 6 6 2 12 2C18 2 22 6 22 12C22 18 18 22 12 22C6 22 2 18 2 12Z"/></svg>'
)
# Outline in the top-left corner of its viewport
CORNER_SVG = (
    '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 24 24">'
    '<path d="M0 0H8V8H0Z"/></svg>'
)
# Twice as wide as it is tall
WIDE_SVG = (
    '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 48 24">'
    '<path d="M0 0H48V24H0Z"/></svg>'
)
MALFORMED_SVG = '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 24 24"><path d="M4 4'
EMPTY_SVG = '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 24 24"></svg>'


def write_icons(directory: Path, icons: dict[str, str]) -> Path:
    """Write ``{file stem: markup}`` as SVG files into ``directory``."""
    directory.mkdir(parents=True, exist_ok=True)
    for stem, markup in icons.items():
        (directory / f"{stem}.svg").write_text(markup, encoding="utf-8")
    return directory


@pytest.fixture
def output_root(tmp_path: Path) -> Path:
    """Output root for build artifacts."""
    return tmp_path / "dist"


@pytest.fixture
def settings(output_root: Path) -> IconsmithSettings:
    """Settings writing into a temporary output root."""
    return IconsmithSettings(
        font=FontConfig(),
        output=OutputConfig(root=output_root),
    )


@pytest.fixture
def arrows_dir(tmp_path: Path) -> Path:
    """Collection with two arrow icons."""
    return write_icons(
        tmp_path / "icons" / "outline",
        {"arrow-left": TRIANGLE_SVG, "arrow-right": SQUARE_SVG},
    )


@pytest.fixture
def arrows_spec(arrows_dir: Path) -> CollectionSpec:
    """Spec of the arrows collection."""
    return CollectionSpec(
        name="outline",
        source_dir=arrows_dir,
        font_name="Aviala Icons Outline",
        file_name="AvialaIconsOutline",
    )
