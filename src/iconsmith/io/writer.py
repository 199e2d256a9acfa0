"""Artifact writing with atomic promotion.

Nothing is ever written in place at a final output path. Single files go
through a temporary sibling and ``os.replace``; a collection's artifact
set is assembled in a staging directory and only promoted once complete.
"""

import json
import os
import shutil
import tempfile
from collections.abc import Iterable
from pathlib import Path

from iconsmith.domain import BuildManifest, FontArtifact, FontFormat, GlyphAsset
from iconsmith.exceptions import ArtifactWriteError


def ensure_directory(path: Path) -> Path:
    """Create a directory and its parents.

    Raises:
        ArtifactWriteError: If the directory cannot be created
    """
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ArtifactWriteError(str(path), str(e)) from e
    return path


def atomic_write_bytes(path: Path, data: bytes) -> Path:
    """Write bytes to ``path`` through a temporary file and rename.

    Either the complete content appears at ``path`` or nothing changes.

    Raises:
        ArtifactWriteError: If the file cannot be written
    """
    ensure_directory(path.parent)
    tmp_name: str | None = None
    try:
        with tempfile.NamedTemporaryFile(
            "wb", dir=path.parent, prefix=f".{path.name}.", suffix=".tmp", delete=False
        ) as tmp:
            tmp_name = tmp.name
            tmp.write(data)
            tmp.flush()
            os.fsync(tmp.fileno())
        os.replace(tmp_name, path)
    except OSError as e:
        if tmp_name is not None and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise ArtifactWriteError(str(path), str(e)) from e
    return path


def export_glyphs(assets: Iterable[GlyphAsset], directory: Path) -> list[Path]:
    """Write each asset as ``<name>.svg`` into ``directory``.

    SVG files left in ``directory`` by earlier builds whose icons are no
    longer part of the collection are removed, so the directory mirrors
    the collection.

    Args:
        assets: Assets in build order
        directory: Export directory (created if missing)

    Returns:
        Exported file paths in the same order as the assets
    """
    ensure_directory(directory)
    paths = [atomic_write_bytes(directory / asset.file_name, asset.content) for asset in assets]
    current = {path.name for path in paths}
    for stale in sorted(directory.glob("*.svg")):
        if stale.name in current:
            continue
        try:
            stale.unlink()
        except OSError as e:
            raise ArtifactWriteError(str(stale), str(e)) from e
    return paths


class ArtifactStage:
    """Staging area for one collection's artifacts.

    Artifacts are written into a hidden temporary directory next to the
    final location. ``promote()`` moves them into place; ``discard()``
    removes the staging directory. Used as a context manager, the
    staging directory is always removed on exit.

    Example:
        with ArtifactStage(fonts_dir, "AvialaIconsFilled", "filled") as stage:
            stage.write(svg_artifact)
            stage.write(ttf_artifact)
            manifest = stage.promote()
    """

    def __init__(self, target_dir: Path, file_name: str, collection: str) -> None:
        """Initialize the stage.

        Args:
            target_dir: Final directory of the artifacts
            file_name: Base file name shared by all artifacts
            collection: Collection name recorded in the manifest
        """
        self.target_dir = target_dir
        self.file_name = file_name
        self.collection = collection
        self._dir: Path | None = None
        self._staged: dict[FontFormat, Path] = {}
        self._code_points: Path | None = None

    def open(self) -> Path:
        """Create the staging directory."""
        if self._dir is None:
            ensure_directory(self.target_dir)
            try:
                self._dir = Path(
                    tempfile.mkdtemp(prefix=f".{self.file_name}.", dir=self.target_dir)
                )
            except OSError as e:
                raise ArtifactWriteError(str(self.target_dir), str(e)) from e
        return self._dir

    @property
    def directory(self) -> Path:
        """Staging directory path."""
        if self._dir is None:
            raise RuntimeError("Stage not opened. Call open() first.")
        return self._dir

    def path_for(self, font_format: FontFormat) -> Path:
        """Staged path of an artifact."""
        return self.directory / f"{self.file_name}{font_format.extension}"

    def final_path(self, font_format: FontFormat) -> Path:
        """Final path of an artifact."""
        return self.target_dir / f"{self.file_name}{font_format.extension}"

    def mark_staged(self, font_format: FontFormat) -> Path:
        """Record an artifact written directly into the stage by someone else."""
        path = self.path_for(font_format)
        if not path.is_file():
            raise ArtifactWriteError(str(path), "staged artifact is missing")
        self._staged[font_format] = path
        return path

    def write(self, artifact: FontArtifact) -> Path:
        """Write an artifact into the stage."""
        path = atomic_write_bytes(self.path_for(artifact.format), artifact.data)
        self._staged[artifact.format] = path
        return path

    def write_code_points(self, mapping: dict[str, int]) -> Path:
        """Write the icon name to code point map as JSON."""
        payload = {
            name: {"codepoint": code_point, "unicode": f"{code_point:x}"}
            for name, code_point in mapping.items()
        }
        data = (json.dumps(payload, indent=2) + "\n").encode("utf-8")
        self._code_points = atomic_write_bytes(self.directory / f"{self.file_name}.json", data)
        return self._code_points

    def promote(self) -> BuildManifest:
        """Move every staged artifact to its final path.

        Artifacts already at the final paths are first copied into the stage
        as backups. If any move fails, the artifacts promoted so far are
        replaced by their backups (or removed when there was none), so the
        final directory keeps the previous set.

        Returns:
            Manifest of the final paths

        Raises:
            ArtifactWriteError: If the artifacts cannot be moved into place
        """
        moves: list[tuple[FontFormat | None, Path, Path]] = [
            (font_format, self._staged[font_format], self.final_path(font_format))
            for font_format in FontFormat
            if font_format in self._staged
        ]
        if self._code_points is not None:
            moves.append((None, self._code_points, self.target_dir / self._code_points.name))

        backup_dir = self.directory / "previous"
        promoted: list[tuple[Path, Path | None]] = []
        manifest = BuildManifest(collection=self.collection)
        try:
            backup_dir.mkdir()
            for font_format, staged, final in moves:
                backup = None
                if final.exists():
                    backup = Path(shutil.copy2(final, backup_dir / final.name))
                os.replace(staged, final)
                promoted.append((final, backup))
                if font_format is None:
                    manifest.code_points = final
                else:
                    manifest.add(font_format, final)
        except OSError as e:
            unrestored = self._rollback(promoted)
            reason = str(e)
            if unrestored:
                reason += f"; could not restore {', '.join(unrestored)}"
            raise ArtifactWriteError(str(self.target_dir), reason) from e
        return manifest

    @staticmethod
    def _rollback(promoted: list[tuple[Path, Path | None]]) -> list[str]:
        """Undo a partial promotion.

        Returns:
            Names of final files that could not be put back
        """
        unrestored: list[str] = []
        for final, backup in promoted:
            try:
                if backup is None:
                    final.unlink(missing_ok=True)
                else:
                    os.replace(backup, final)
            except OSError:
                unrestored.append(final.name)
        return unrestored

    def discard(self) -> None:
        """Remove the staging directory and everything in it."""
        if self._dir is not None:
            shutil.rmtree(self._dir, ignore_errors=True)
            self._dir = None
            self._staged.clear()
            self._code_points = None

    def __enter__(self) -> "ArtifactStage":
        self.open()
        return self

    def __exit__(self, _exc_type: object, _exc_val: object, _exc_tb: object) -> None:
        self.discard()
