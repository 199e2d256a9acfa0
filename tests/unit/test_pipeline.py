"""Tests for per-collection build orchestration."""

import asyncio
import threading
from unittest.mock import MagicMock, patch

import pytest
from conftest import MALFORMED_SVG, SQUARE_SVG, TRIANGLE_SVG, write_icons

from iconsmith.config import CollectionSpec, IconsmithSettings, ProcessingConfig
from iconsmith.core.composer import compose_font
from iconsmith.core.pipeline import BuildStage, IconsmithPipeline, _open_sources
from iconsmith.domain import BuildStatus, FontFormat, IconCollection
from iconsmith.exceptions import BuildCancelledError, CollectionBuildError, TranscodingError


@pytest.fixture
def make_pipeline():
    """Create pipelines without touching global logging configuration."""

    def factory(settings: IconsmithSettings) -> IconsmithPipeline:
        with patch("iconsmith.core.pipeline.configure_logging", return_value=MagicMock()):
            return IconsmithPipeline(settings)

    return factory


def spec_for(source_dir, name: str) -> CollectionSpec:
    return CollectionSpec(
        name=name,
        source_dir=source_dir,
        font_name=f"Test {name.title()}",
        file_name=f"Test{name.title()}",
    )


class ComposeTracker:
    """Stand-in for compose_font that records overlapping calls.

    Each call waits until ``gather`` calls are running at once, then
    composes for real.
    """

    def __init__(self, gather: int = 1) -> None:
        self.gather = gather
        self.running = 0
        self.peak = 0
        self.calls = 0
        self._all_in: asyncio.Event | None = None

    async def __call__(self, *args, **kwargs):
        if self._all_in is None:
            self._all_in = asyncio.Event()
        self.calls += 1
        self.running += 1
        self.peak = max(self.peak, self.running)
        if self.running >= self.gather:
            self._all_in.set()
        try:
            await asyncio.wait_for(self._all_in.wait(), timeout=5)
            await asyncio.sleep(0.01)
            return await compose_font(*args, **kwargs)
        finally:
            self.running -= 1


class StallingCompose:
    """Stand-in for compose_font that writes partial output and never finishes."""

    def __init__(self) -> None:
        self.entered = 0
        self.closed_sources = 0

    async def wait_until_entered(self, count: int) -> None:
        while self.entered < count:
            await asyncio.sleep(0.01)

    async def __call__(self, sources, options, destination, **kwargs):
        try:
            destination.write_bytes(b"<svg")
            self.entered += 1
            await asyncio.Event().wait()
        finally:
            for source in sources:
                source.close()
                self.closed_sources += 1


class TestBuildCollection:
    """Tests for IconsmithPipeline.build_collection."""

    def test_builds_every_format(self, make_pipeline, settings, arrows_spec):
        pipeline = make_pipeline(settings)
        collection = pipeline.load_collection(arrows_spec)

        result = asyncio.run(pipeline.build_collection(collection, arrows_spec))

        assert result.status is BuildStatus.BUILT
        assert result.glyph_count == 2
        fonts_dir = settings.output.fonts_path("outline")
        assert set(result.manifest.fonts) == set(FontFormat)
        for font_format, path in result.manifest.fonts.items():
            assert path == fonts_dir / f"AvialaIconsOutline{font_format.extension}"
            assert path.stat().st_size > 0
        assert result.manifest.code_points == fonts_dir / "AvialaIconsOutline.json"
        assert sorted(p.name for p in fonts_dir.iterdir() if p.name.startswith(".")) == []

    def test_glyphs_exported(self, make_pipeline, settings, arrows_spec):
        pipeline = make_pipeline(settings)
        collection = pipeline.load_collection(arrows_spec)
        asyncio.run(pipeline.build_collection(collection, arrows_spec))

        svg_dir = settings.output.svg_path("outline")
        assert sorted(p.name for p in svg_dir.iterdir()) == ["arrow-left.svg", "arrow-right.svg"]

    def test_stage_order(self, make_pipeline, settings, arrows_spec):
        pipeline = make_pipeline(settings)
        collection = pipeline.load_collection(arrows_spec)
        stages = []

        asyncio.run(
            pipeline.build_collection(
                collection, arrows_spec, lambda name, stage: stages.append((name, stage))
            )
        )

        assert [stage for _, stage in stages] == [
            BuildStage.EXPORT,
            BuildStage.ALLOCATE,
            BuildStage.COMPOSE,
            BuildStage.TRANSCODE,
            BuildStage.WRITE,
            BuildStage.DONE,
        ]
        assert {name for name, _ in stages} == {"outline"}

    def test_empty_collection_is_noop(self, make_pipeline, settings, arrows_spec):
        """Test that an empty collection produces no files at all."""
        pipeline = make_pipeline(settings)

        result = asyncio.run(pipeline.build_collection(IconCollection("outline"), arrows_spec))

        assert result.status is BuildStatus.SKIPPED
        assert result.manifest is None
        assert not settings.output.root.exists()
        assert pipeline.stats.skipped_count == 1

    def test_malformed_glyph_fails_collection(self, make_pipeline, settings, tmp_path):
        icons = write_icons(tmp_path / "bad", {"good": SQUARE_SVG, "broken": MALFORMED_SVG})
        spec = spec_for(icons, "bad")
        pipeline = make_pipeline(settings)
        collection = pipeline.load_collection(spec)

        with pytest.raises(CollectionBuildError) as exc_info:
            asyncio.run(pipeline.build_collection(collection, spec))

        error = exc_info.value
        assert error.collection == "bad"
        assert error.stage == BuildStage.COMPOSE
        assert error.glyph_name == "broken"
        fonts_dir = settings.output.fonts_path("bad")
        assert list(fonts_dir.iterdir()) == []
        assert pipeline.stats.failed_count == 1

    def test_skip_malformed_drops_glyph(self, make_pipeline, settings, tmp_path):
        icons = write_icons(tmp_path / "bad", {"good": SQUARE_SVG, "broken": MALFORMED_SVG})
        spec = spec_for(icons, "bad")
        settings = settings.model_copy(
            update={"processing": ProcessingConfig(skip_malformed=True)}
        )
        pipeline = make_pipeline(settings)
        collection = pipeline.load_collection(spec)

        result = asyncio.run(pipeline.build_collection(collection, spec))

        assert result.status is BuildStatus.BUILT
        assert result.glyph_count == 1
        assert result.skipped_glyphs == ["broken"]
        assert pipeline.stats.dropped_glyphs[0][0] == "bad/broken"

    def test_transcoding_failure_writes_nothing(self, make_pipeline, settings, arrows_spec):
        """Test that no final artifact appears when transcoding fails."""
        pipeline = make_pipeline(settings)
        collection = pipeline.load_collection(arrows_spec)

        async def fail(self, _svg):
            raise TranscodingError({"woff2": RuntimeError("brotli missing")})

        with patch("iconsmith.core.pipeline.TranscoderChain.run", fail):
            with pytest.raises(CollectionBuildError) as exc_info:
                asyncio.run(pipeline.build_collection(collection, arrows_spec))

        assert exc_info.value.stage == BuildStage.TRANSCODE
        assert "woff2" in exc_info.value.reason
        fonts_dir = settings.output.fonts_path("outline")
        assert list(fonts_dir.iterdir()) == []

    def test_glyph_name_collision(self, make_pipeline, settings, arrows_spec):
        pipeline = make_pipeline(settings)
        collection = IconCollection.from_pairs(
            "outline", [("arrow-left", SQUARE_SVG), ("arrow_left", SQUARE_SVG)]
        )

        with pytest.raises(CollectionBuildError, match="ArrowLeft") as exc_info:
            asyncio.run(pipeline.build_collection(collection, arrows_spec))
        assert exc_info.value.stage == BuildStage.EXPORT


class TestBuildAll:
    """Tests for concurrent builds of several collections."""

    def test_failure_isolated(self, make_pipeline, settings, tmp_path):
        """Test that a failing collection leaves its siblings intact."""
        good = write_icons(tmp_path / "good", {"home": SQUARE_SVG, "up": TRIANGLE_SVG})
        bad = write_icons(tmp_path / "bad", {"broken": MALFORMED_SVG})
        specs = [spec_for(good, "good"), spec_for(bad, "bad")]
        pipeline = make_pipeline(settings)

        results = pipeline.process(specs)

        assert [r.collection for r in results] == ["good", "bad"]
        assert results[0].status is BuildStatus.BUILT
        assert results[1].status is BuildStatus.FAILED
        assert isinstance(results[1].error, CollectionBuildError)
        assert (settings.output.fonts_path("good") / "TestGood.woff2").exists()
        assert not (settings.output.fonts_path("bad") / "TestBad.ttf").exists()
        assert pipeline.stats.built_count == 1
        assert pipeline.stats.failed_count == 1

    def test_missing_directory_reported(self, make_pipeline, settings, tmp_path):
        pipeline = make_pipeline(settings)

        [result] = pipeline.process([spec_for(tmp_path / "missing", "missing")])

        assert result.status is BuildStatus.FAILED
        assert result.error.stage == BuildStage.LOAD

    def test_collections_overlap(self, make_pipeline, settings, tmp_path):
        """Test that collections compose at the same time when unlimited."""
        specs = [
            spec_for(write_icons(tmp_path / name, {"home": SQUARE_SVG}), name)
            for name in ("one", "two", "three")
        ]
        tracker = ComposeTracker(gather=3)
        pipeline = make_pipeline(settings)

        with patch("iconsmith.core.pipeline.compose_font", tracker):
            results = pipeline.process(specs)

        assert all(r.status is BuildStatus.BUILT for r in results)
        assert tracker.peak == 3

    def test_concurrency_limit(self, make_pipeline, settings, tmp_path):
        specs = [
            spec_for(write_icons(tmp_path / name, {"home": SQUARE_SVG}), name)
            for name in ("one", "two", "three")
        ]
        settings = settings.model_copy(
            update={"processing": ProcessingConfig(max_concurrent_collections=1)}
        )
        tracker = ComposeTracker()
        pipeline = make_pipeline(settings)

        with patch("iconsmith.core.pipeline.compose_font", tracker):
            results = pipeline.process(specs)

        assert all(r.status is BuildStatus.BUILT for r in results)
        assert tracker.peak == 1
        assert tracker.calls == 3
        assert pipeline.stats.duration_seconds > 0

    def test_keyboard_interrupt_marks_cancelled(self, make_pipeline, settings, arrows_spec):
        pipeline = make_pipeline(settings)

        with patch("iconsmith.core.pipeline.asyncio.run", side_effect=KeyboardInterrupt):
            with pytest.raises(BuildCancelledError) as exc_info:
                pipeline.process([arrows_spec])

        assert pipeline.stats.was_cancelled
        assert exc_info.value.completed_count == 0
        assert exc_info.value.pending_count == 1


class TestCancellation:
    """Cancelling builds while a font is being composed."""

    def test_cancel_build_collection(self, make_pipeline, settings, arrows_spec):
        """Test that a cancelled build leaves no files at final or staging paths."""
        pipeline = make_pipeline(settings)
        collection = pipeline.load_collection(arrows_spec)
        stall = StallingCompose()

        async def run():
            task = asyncio.create_task(pipeline.build_collection(collection, arrows_spec))
            await stall.wait_until_entered(1)
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task

        with patch("iconsmith.core.pipeline.compose_font", stall):
            asyncio.run(run())

        assert list(settings.output.fonts_path("outline").iterdir()) == []
        assert stall.closed_sources == 2

    def test_cancel_build_all(self, make_pipeline, settings, tmp_path):
        names = ("one", "two")
        jobs = []
        pipeline = make_pipeline(settings)
        for name in names:
            spec = spec_for(write_icons(tmp_path / name, {"home": SQUARE_SVG}), name)
            jobs.append((pipeline.load_collection(spec), spec))
        stall = StallingCompose()

        async def run():
            task = asyncio.create_task(pipeline.build_all(jobs))
            await stall.wait_until_entered(len(jobs))
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task

        with patch("iconsmith.core.pipeline.compose_font", stall):
            asyncio.run(run())

        for name in names:
            assert list(settings.output.fonts_path(name).iterdir()) == []
        assert pipeline.stats.built_count == 0

    def test_cancel_while_opening_sources(self, tmp_path):
        """Test that streams opened after cancellation are still closed."""
        release = threading.Event()
        opened = [MagicMock(), MagicMock()]
        threads = []

        def slow_open(paths, code_points):
            threads.append(threading.current_thread())
            release.wait(5)
            return opened

        async def run():
            task = asyncio.create_task(
                _open_sources([tmp_path / "a.svg", tmp_path / "b.svg"], [0xE614, 0xE615])
            )
            while not threads:
                await asyncio.sleep(0.01)
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task
            release.set()
            for _ in range(100):
                if all(source.close.called for source in opened):
                    break
                await asyncio.sleep(0.01)

        with patch("iconsmith.core.pipeline.open_glyph_sources", slow_open):
            asyncio.run(run())

        assert threads[0] is not threading.main_thread()
        for source in opened:
            source.close.assert_called_once()
