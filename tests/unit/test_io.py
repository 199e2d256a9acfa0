"""Unit tests for the I/O layer.

Tests for CollectionReader, artifact writing and SVG font parsing.
"""

import json
import os
from pathlib import Path
from unittest.mock import patch

import pytest
from conftest import SQUARE_SVG, write_icons

from iconsmith.config import FontConfig
from iconsmith.domain import FontArtifact, FontFormat, GlyphAsset
from iconsmith.exceptions import ArtifactWriteError, DuplicateGlyphError
from iconsmith.io import (
    ArtifactStage,
    CollectionReader,
    atomic_write_bytes,
    build_ttfont,
    export_glyphs,
    parse_svg_font,
    read_eot_font_data,
)

SVG_FONT = b"""<?xml version="1.0" standalone="no"?>
<svg xmlns="http://www.w3.org/2000/svg">
<defs>
  <font id="TestIcons" horiz-adv-x="1000">
    <font-face font-family="Test Icons" units-per-em="1000" ascent="900" descent="-100" />
    <missing-glyph horiz-adv-x="0" />
    <glyph glyph-name="Home" unicode="&#xE614;" horiz-adv-x="800" d="M0 0L800 0L400 800Z" />
    <glyph unicode="&#xE615;" d="M0 0L1000 0L1000 1000Z" />
    <glyph glyph-name="Ligature" unicode="ab" d="M0 0L10 0L10 10Z" />
    <glyph glyph-name="NoUnicode" d="M0 0L10 0L10 10Z" />
  </font>
</defs>
</svg>
"""


class TestCollectionReader:
    """Tests for CollectionReader."""

    def test_load_sorted_by_file_name(self, tmp_path):
        """Test that files are loaded in file-name order."""
        write_icons(tmp_path, {"b-icon": SQUARE_SVG, "a-icon": SQUARE_SVG})
        (tmp_path / "notes.txt").write_text("ignored")

        collection = CollectionReader(tmp_path, "outline").load()

        assert collection.name == "outline"
        assert collection.names == ["a-icon", "b-icon"]
        assert collection.assets[0].content == SQUARE_SVG.encode("utf-8")

    def test_names_normalized_to_kebab_case(self, tmp_path):
        write_icons(tmp_path, {"ArrowLeft": SQUARE_SVG})
        assert CollectionReader(tmp_path, "outline").load().names == ["arrow-left"]

    def test_name_suffix_stripped(self, tmp_path):
        write_icons(tmp_path, {"heart-fill": SQUARE_SVG, "star": SQUARE_SVG})
        reader = CollectionReader(tmp_path, "filled", name_suffix="-fill")
        assert reader.load().names == ["heart", "star"]

    def test_missing_directory(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            CollectionReader(tmp_path / "missing", "outline").load()

    def test_empty_directory(self, tmp_path):
        assert CollectionReader(tmp_path, "outline").load().is_empty()

    def test_colliding_names(self, tmp_path):
        write_icons(tmp_path, {"arrow-left": SQUARE_SVG, "arrow_left": SQUARE_SVG})
        with pytest.raises(DuplicateGlyphError):
            CollectionReader(tmp_path, "outline").load()


class TestAtomicWrite:
    """Tests for atomic_write_bytes and export_glyphs."""

    def test_write_creates_parents(self, tmp_path):
        path = atomic_write_bytes(tmp_path / "a" / "b" / "font.svg", b"data")
        assert path.read_bytes() == b"data"

    def test_no_temporary_files_left(self, tmp_path):
        atomic_write_bytes(tmp_path / "font.svg", b"data")
        assert [p.name for p in tmp_path.iterdir()] == ["font.svg"]

    def test_failed_write_keeps_previous_content(self, tmp_path):
        """Test that a failed replace leaves the old file untouched."""
        path = tmp_path / "font.svg"
        path.write_bytes(b"old")

        with patch("iconsmith.io.writer.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(ArtifactWriteError, match="disk full"):
                atomic_write_bytes(path, b"new")

        assert path.read_bytes() == b"old"
        assert [p.name for p in tmp_path.iterdir()] == ["font.svg"]

    def test_export_glyphs(self, tmp_path):
        assets = [GlyphAsset("arrow-left", b"<svg>l</svg>"), GlyphAsset("home", b"<svg>h</svg>")]
        paths = export_glyphs(assets, tmp_path / "svg")
        assert paths == [tmp_path / "svg" / "arrow-left.svg", tmp_path / "svg" / "home.svg"]
        assert paths[1].read_bytes() == b"<svg>h</svg>"

    def test_export_removes_stale_glyphs(self, tmp_path):
        """Test that icons removed from the collection disappear from the export."""
        svg_dir = tmp_path / "svg"
        export_glyphs([GlyphAsset("home", b"<svg/>"), GlyphAsset("old", b"<svg/>")], svg_dir)
        (svg_dir / "notes.txt").write_text("kept")

        export_glyphs([GlyphAsset("home", b"<svg>new</svg>")], svg_dir)

        assert sorted(p.name for p in svg_dir.iterdir()) == ["home.svg", "notes.txt"]
        assert (svg_dir / "home.svg").read_bytes() == b"<svg>new</svg>"


class TestArtifactStage:
    """Tests for ArtifactStage."""

    def test_promote(self, tmp_path):
        target = tmp_path / "fonts"
        with ArtifactStage(target, "TestIcons", "outline") as stage:
            stage.write(FontArtifact(FontFormat.TTF, b"ttf"))
            stage.write(FontArtifact(FontFormat.WOFF, b"woff"))
            assert not (target / "TestIcons.ttf").exists()
            manifest = stage.promote()

        assert manifest.fonts == {
            FontFormat.TTF: target / "TestIcons.ttf",
            FontFormat.WOFF: target / "TestIcons.woff",
        }
        assert (target / "TestIcons.woff").read_bytes() == b"woff"
        assert [p.name for p in target.iterdir() if p.name.startswith(".")] == []

    def test_discard_leaves_target_untouched(self, tmp_path):
        """Test that discarding a stage writes nothing at final paths."""
        target = tmp_path / "fonts"
        target.mkdir()
        (target / "TestIcons.ttf").write_bytes(b"previous")

        stage = ArtifactStage(target, "TestIcons", "outline")
        stage.open()
        stage.write(FontArtifact(FontFormat.TTF, b"new"))
        stage.discard()

        assert (target / "TestIcons.ttf").read_bytes() == b"previous"
        assert sorted(p.name for p in target.iterdir()) == ["TestIcons.ttf"]

    def test_mark_staged(self, tmp_path):
        stage = ArtifactStage(tmp_path, "TestIcons", "outline")
        stage.open()
        try:
            with pytest.raises(ArtifactWriteError, match="missing"):
                stage.mark_staged(FontFormat.SVG)
            stage.path_for(FontFormat.SVG).write_bytes(b"<svg/>")
            assert stage.mark_staged(FontFormat.SVG).name == "TestIcons.svg"
        finally:
            stage.discard()

    def test_code_points_json(self, tmp_path):
        with ArtifactStage(tmp_path, "TestIcons", "outline") as stage:
            stage.write(FontArtifact(FontFormat.TTF, b"ttf"))
            stage.write_code_points({"arrow-left": 0xE614, "arrow-right": 0xE615})
            manifest = stage.promote()

        assert manifest.code_points == tmp_path / "TestIcons.json"
        assert json.loads(manifest.code_points.read_text()) == {
            "arrow-left": {"codepoint": 0xE614, "unicode": "e614"},
            "arrow-right": {"codepoint": 0xE615, "unicode": "e615"},
        }

    def test_failed_promote_restores_previous_set(self, tmp_path):
        """Test that a move failing midway puts the previous artifacts back."""
        target = tmp_path / "fonts"
        target.mkdir()
        for ext in ("svg", "ttf", "woff"):
            (target / f"TestIcons.{ext}").write_bytes(b"previous " + ext.encode())
        replace = os.replace

        def fail_for_woff(src, dst):
            if Path(dst) == target / "TestIcons.woff":
                raise OSError("device busy")
            return replace(src, dst)

        with ArtifactStage(target, "TestIcons", "outline") as stage:
            for font_format in (FontFormat.SVG, FontFormat.TTF, FontFormat.EOT, FontFormat.WOFF):
                stage.write(FontArtifact(font_format, b"new"))
            with patch("iconsmith.io.writer.os.replace", side_effect=fail_for_woff):
                with pytest.raises(ArtifactWriteError, match="device busy"):
                    stage.promote()

        assert sorted(p.name for p in target.iterdir()) == [
            "TestIcons.svg",
            "TestIcons.ttf",
            "TestIcons.woff",
        ]
        for ext in ("svg", "ttf", "woff"):
            assert (target / f"TestIcons.{ext}").read_bytes() == b"previous " + ext.encode()

    def test_promote_replaces_previous_set(self, tmp_path):
        target = tmp_path / "fonts"
        target.mkdir()
        (target / "TestIcons.ttf").write_bytes(b"previous")

        with ArtifactStage(target, "TestIcons", "outline") as stage:
            stage.write(FontArtifact(FontFormat.TTF, b"new"))
            stage.promote()

        assert (target / "TestIcons.ttf").read_bytes() == b"new"
        assert sorted(p.name for p in target.iterdir()) == ["TestIcons.ttf"]

    def test_directory_before_open(self, tmp_path):
        with pytest.raises(RuntimeError, match="not opened"):
            _ = ArtifactStage(tmp_path, "TestIcons", "outline").directory


class TestParseSvgFont:
    """Tests for parse_svg_font and build_ttfont."""

    def test_font_face(self):
        font = parse_svg_font(SVG_FONT)
        assert font.family == "Test Icons"
        assert font.font_id == "TestIcons"
        assert font.units_per_em == 1000
        assert font.ascent == 900
        assert font.descent == -100
        assert font.default_advance == 1000

    def test_glyphs(self):
        glyphs = parse_svg_font(SVG_FONT).glyphs
        assert [g.name for g in glyphs] == ["Home", "uniE615", "Ligature"]
        assert glyphs[0].advance_width == 800
        assert glyphs[1].advance_width == 1000
        assert glyphs[0].code_point == 0xE614
        assert glyphs[2].code_point is None

    def test_no_font_element(self):
        with pytest.raises(ValueError, match="no <font> element"):
            parse_svg_font(b'<svg xmlns="http://www.w3.org/2000/svg"/>')

    def test_build_ttfont_skips_multi_character_glyphs(self):
        font = build_ttfont(parse_svg_font(SVG_FONT), FontConfig())
        assert font.getGlyphOrder() == [".notdef", "Home", "uniE615"]
        assert font["hmtx"]["Home"][0] == 800

    def test_build_ttfont_duplicate_code_point(self):
        document = SVG_FONT.replace(b"&#xE615;", b"&#xE614;")
        with pytest.raises(ValueError, match="Duplicate code point"):
            build_ttfont(parse_svg_font(document), FontConfig())


class TestReadEotFontData:
    """Tests for read_eot_font_data validation."""

    def test_too_short(self):
        with pytest.raises(ValueError, match="too short"):
            read_eot_font_data(b"\x00")

    def test_size_mismatch(self):
        with pytest.raises(ValueError, match="does not match"):
            read_eot_font_data(bytes(100))


def test_reader_accepts_path_objects(tmp_path):
    write_icons(tmp_path / "nested", {"home": SQUARE_SVG})
    reader = CollectionReader(Path(tmp_path / "nested"), "outline")
    assert [p.name for p in reader.iter_files()] == ["home.svg"]
