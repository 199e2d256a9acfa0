"""Build orchestration for icon collections.

This module drives one build per icon collection and runs collections
concurrently on a single asyncio event loop.

Within a collection, stages run strictly in order:
1. Export normalized glyph SVGs to the collection's svg directory
2. Allocate code points in file order
3. Adapt exported files to glyph sources
4. Compose the SVG font into a staging directory
5. Read the composed document back and run the transcoder chain
6. Write TTF, EOT, WOFF, WOFF2 and the code-point map into staging
7. Promote the complete artifact set to the fonts directory

A failure at any stage discards the staging directory, so a collection
either produces all of its artifacts or changes nothing at its final
output paths.

Key components:
- BuildStage: Stage names reported in errors and progress
- IconsmithPipeline: Main orchestrator class
"""

import asyncio
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path

from iconsmith.config import CollectionSpec, IconsmithSettings
from iconsmith.core.adapter import open_glyph_sources
from iconsmith.core.codepoints import allocate_code_points
from iconsmith.core.composer import compose_font
from iconsmith.core.outline import parse_glyph_outline
from iconsmith.core.transcoder import TranscoderChain
from iconsmith.domain import (
    BuildManifest,
    BuildStatus,
    CollectionResult,
    FontArtifact,
    FontFormat,
    GlyphSource,
    IconCollection,
)
from iconsmith.exceptions import (
    ArtifactWriteError,
    BuildCancelledError,
    CollectionBuildError,
    CompositionError,
    MalformedGlyphError,
)
from iconsmith.io import ArtifactStage, CollectionReader, export_glyphs
from iconsmith.utils import BuildLogger, BuildStats, configure_logging, pascal_case

ProgressCallback = Callable[[str, str], None]


class BuildStage:
    """Stage names reported in errors and progress updates."""

    LOAD = "load"
    EXPORT = "export"
    ALLOCATE = "allocate"
    COMPOSE = "compose"
    TRANSCODE = "transcode"
    WRITE = "write"
    DONE = "done"


@dataclass
class _BuildState:
    collection: str
    stage: str = BuildStage.EXPORT


def _reason(error: Exception) -> str:
    if isinstance(error, CompositionError):
        return error.reason
    if isinstance(error, ArtifactWriteError):
        return f"{error.path}: {error.reason}"
    return str(error) or type(error).__name__


def _close_sources(task: asyncio.Future[list[GlyphSource]]) -> None:
    if not task.cancelled() and task.exception() is None:
        for source in task.result():
            source.close()


async def _open_sources(paths: list[Path], code_points: list[int]) -> list[GlyphSource]:
    """Open glyph sources in a worker thread.

    If the caller is cancelled while the files are being opened, the
    streams are closed as soon as the worker finishes.
    """
    opening = asyncio.ensure_future(asyncio.to_thread(open_glyph_sources, paths, code_points))
    try:
        return await asyncio.shield(opening)
    except asyncio.CancelledError:
        opening.add_done_callback(_close_sources)
        raise


class IconsmithPipeline:
    """Orchestrates icon font builds.

    Example:
        settings = IconsmithSettings()
        pipeline = IconsmithPipeline(settings)
        results = pipeline.process([
            CollectionSpec(
                name="filled",
                source_dir=Path("icons/filled"),
                font_name="Aviala Icons Filled",
                file_name="AvialaIconsFilled",
            ),
        ])
    """

    def __init__(self, config: IconsmithSettings) -> None:
        """Initialize the pipeline with configuration.

        Args:
            config: Iconsmith settings (fonts, output locations, processing, logging)
        """
        self.config = config
        self.logger = configure_logging(
            log_file=config.logging.log_file,
            console_level=config.logging.log_level,
            file_level=config.logging.file_log_level,
        )
        self.build_logger = BuildLogger(self.logger)

    @property
    def stats(self) -> BuildStats:
        """Statistics of every build run by this pipeline."""
        return self.build_logger.stats

    def load_collection(self, spec: CollectionSpec) -> IconCollection:
        """Load a collection's SVG files.

        Raises:
            CollectionBuildError: If the directory is missing or names collide
        """
        reader = CollectionReader(spec.source_dir, spec.name, name_suffix=spec.name_suffix)
        try:
            return reader.load()
        except Exception as e:
            error = CollectionBuildError(spec.name, BuildStage.LOAD, _reason(e))
            self.build_logger.log_collection_error(spec.name, error, BuildStage.LOAD)
            raise error from e

    async def drop_malformed(self, collection: IconCollection) -> tuple[IconCollection, list[str]]:
        """Remove assets whose SVG cannot be parsed.

        Returns:
            The filtered collection and the names of the dropped assets
        """
        dropped: list[str] = []
        for asset in collection:
            try:
                await asyncio.to_thread(parse_glyph_outline, asset.name, asset.content)
            except MalformedGlyphError as e:
                self.build_logger.log_glyph_dropped(collection.name, asset.name, e.reason)
                dropped.append(asset.name)
        if not dropped:
            return collection, dropped
        return collection.without(dropped), dropped

    async def build_collection(
        self,
        collection: IconCollection,
        spec: CollectionSpec,
        progress_callback: ProgressCallback | None = None,
    ) -> CollectionResult:
        """Build every artifact of one collection.

        Args:
            collection: Assets to build, in code-point order
            spec: Collection naming and output settings
            progress_callback: Optional callback(collection, stage)

        Returns:
            Result with status ``built``, or ``skipped`` for an empty collection

        Raises:
            CollectionBuildError: If any stage fails
        """
        start_time = time.time()
        skipped_glyphs: list[str] = []

        if self.config.processing.skip_malformed and not collection.is_empty():
            collection, skipped_glyphs = await self.drop_malformed(collection)

        if collection.is_empty():
            self.build_logger.log_collection_skipped(collection.name, "no glyphs")
            return CollectionResult(
                collection=collection.name,
                status=BuildStatus.SKIPPED,
                skipped_glyphs=skipped_glyphs,
            )

        self.build_logger.log_collection_start(collection.name, len(collection))
        state = _BuildState(collection=collection.name)

        def advance(stage: str) -> None:
            state.stage = stage
            if progress_callback is not None:
                progress_callback(collection.name, stage)

        staging = ArtifactStage(
            self.config.output.fonts_path(spec.output_subfolder),
            spec.file_name,
            collection.name,
        )
        try:
            manifest = await self._run_stages(collection, spec, staging, advance)
        except MalformedGlyphError as e:
            error = CollectionBuildError(collection.name, state.stage, e.reason, e.glyph_name)
            self.build_logger.log_collection_error(collection.name, error, state.stage)
            raise error from e
        except Exception as e:
            error = CollectionBuildError(collection.name, state.stage, _reason(e))
            self.build_logger.log_collection_error(collection.name, error, state.stage)
            raise error from e
        finally:
            staging.discard()

        advance(BuildStage.DONE)
        duration = time.time() - start_time
        self.build_logger.log_collection_built(collection.name, len(collection), duration * 1000)
        return CollectionResult(
            collection=collection.name,
            status=BuildStatus.BUILT,
            glyph_count=len(collection),
            manifest=manifest,
            skipped_glyphs=skipped_glyphs,
            duration_seconds=duration,
        )

    async def _run_stages(
        self,
        collection: IconCollection,
        spec: CollectionSpec,
        staging: ArtifactStage,
        advance: Callable[[str], None],
    ) -> BuildManifest:
        font_config = self.config.font
        name = collection.name

        advance(BuildStage.EXPORT)
        self._check_glyph_names(collection)
        paths = await asyncio.to_thread(
            export_glyphs,
            collection.assets,
            self.config.output.svg_path(spec.output_subfolder),
        )
        self.build_logger.log_stage(name, BuildStage.EXPORT, files=len(paths))

        advance(BuildStage.ALLOCATE)
        code_points = allocate_code_points(paths, font_config.base_code_point)

        advance(BuildStage.COMPOSE)
        await asyncio.to_thread(staging.open)
        sources = await _open_sources(paths, code_points)
        await compose_font(
            sources,
            font_config.composer_options(spec.font_name),
            staging.path_for(FontFormat.SVG),
            collection=name,
        )
        svg_path = staging.mark_staged(FontFormat.SVG)
        svg = FontArtifact(FontFormat.SVG, await asyncio.to_thread(svg_path.read_bytes))
        self.build_logger.log_stage(name, BuildStage.COMPOSE, size=len(svg))

        advance(BuildStage.TRANSCODE)
        transcoded = await TranscoderChain(font_config, collection=name).run(svg)
        self.build_logger.log_stage(name, BuildStage.TRANSCODE)

        advance(BuildStage.WRITE)
        for artifact in transcoded.artifacts():
            await asyncio.to_thread(staging.write, artifact)
        if self.config.output.write_manifest:
            mapping = dict(zip(collection.names, code_points, strict=True))
            await asyncio.to_thread(staging.write_code_points, mapping)
        manifest = await asyncio.to_thread(staging.promote)
        self.build_logger.log_stage(name, BuildStage.WRITE, files=len(manifest.paths()))
        return manifest

    @staticmethod
    def _check_glyph_names(collection: IconCollection) -> None:
        """Ensure every asset maps to a distinct glyph name."""
        seen: dict[str, str] = {}
        for asset_name in collection.names:
            glyph_name = pascal_case(asset_name)
            if not glyph_name:
                raise ValueError(f"Icon name '{asset_name}' yields an empty glyph name")
            if glyph_name in seen:
                raise ValueError(
                    f"Icons '{seen[glyph_name]}' and '{asset_name}' "
                    f"both map to glyph name '{glyph_name}'"
                )
            seen[glyph_name] = asset_name

    async def build_all(
        self,
        jobs: Sequence[tuple[IconCollection, CollectionSpec]],
        progress_callback: ProgressCallback | None = None,
    ) -> list[CollectionResult]:
        """Build collections concurrently.

        A failing collection does not affect the others.

        Args:
            jobs: Collections with their specs
            progress_callback: Optional callback(collection, stage)

        Returns:
            One result per job, in job order
        """
        limit = self.config.processing.max_concurrent_collections
        semaphore = asyncio.Semaphore(limit) if limit else None

        async def guarded(collection: IconCollection, spec: CollectionSpec) -> CollectionResult:
            if semaphore is None:
                return await self.build_collection(collection, spec, progress_callback)
            async with semaphore:
                return await self.build_collection(collection, spec, progress_callback)

        outcomes = await asyncio.gather(
            *(guarded(collection, spec) for collection, spec in jobs),
            return_exceptions=True,
        )

        results: list[CollectionResult] = []
        for (collection, _), outcome in zip(jobs, outcomes, strict=True):
            if isinstance(outcome, Exception):
                results.append(
                    CollectionResult(
                        collection=collection.name,
                        status=BuildStatus.FAILED,
                        error=outcome,
                    )
                )
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                results.append(outcome)
        return results

    async def build_specs(
        self,
        specs: Sequence[CollectionSpec],
        progress_callback: ProgressCallback | None = None,
    ) -> list[CollectionResult]:
        """Load and build collections from their specs.

        Collections that fail to load are reported as failed without
        stopping the others.
        """
        loaded: dict[int, tuple[IconCollection, CollectionSpec]] = {}
        failed: dict[int, CollectionResult] = {}
        for index, spec in enumerate(specs):
            if progress_callback is not None:
                progress_callback(spec.name, BuildStage.LOAD)
            try:
                loaded[index] = (self.load_collection(spec), spec)
            except CollectionBuildError as e:
                failed[index] = CollectionResult(
                    collection=spec.name,
                    status=BuildStatus.FAILED,
                    error=e,
                )

        built = await self.build_all(list(loaded.values()), progress_callback)
        by_index = dict(zip(loaded, built, strict=True))
        return [by_index[i] if i in by_index else failed[i] for i in range(len(specs))]

    def process(
        self,
        specs: Sequence[CollectionSpec],
        progress_callback: ProgressCallback | None = None,
    ) -> list[CollectionResult]:
        """Build every collection and return their results.

        Args:
            specs: Collections to build
            progress_callback: Optional callback(collection, stage)

        Returns:
            One result per spec, in spec order

        Raises:
            BuildCancelledError: If the build is cancelled by the user
        """
        stats = self.stats
        stats.start_time = time.time()

        self.logger.info(
            "Starting build",
            collections=[spec.name for spec in specs],
            output=str(self.config.output.root),
        )

        try:
            results = asyncio.run(self.build_specs(specs, progress_callback))
        except KeyboardInterrupt:
            self.logger.info("Cancellation requested by user")
            stats.was_cancelled = True
            raise BuildCancelledError(
                completed_count=stats.total_count,
                pending_count=len(specs) - stats.total_count,
            ) from None
        finally:
            stats.end_time = time.time()

        self.logger.info(
            "Build complete",
            built=stats.built_count,
            skipped=stats.skipped_count,
            failed=stats.failed_count,
            glyphs=stats.glyph_count,
            duration_seconds=round(stats.duration_seconds, 2),
        )
        return results
