"""Filesystem access for bundle sources and built artifacts.

:class:`SourceTree` resolves registered script names below the configured
source root.  :class:`ArtifactStore` owns the build output directory and
publishes artifacts atomically: content is written to a temporary file in
the same directory, stamped with the source timestamps and only then moved
into place with :func:`os.replace`.  Readers therefore never observe a
partially written or wrongly timestamped artifact.
"""

from __future__ import annotations

import logging
import os
import stat
from dataclasses import dataclass
from pathlib import Path
from tempfile import NamedTemporaryFile

from .errors import PersistError

logger = logging.getLogger(__name__)

# NamedTemporaryFile creates 0600 files; published artifacts must be world-readable.
ARTIFACT_MODE = 0o644


@dataclass(frozen=True)
class SourceFile:
    name: str
    path: Path
    mtime_ns: int
    atime_ns: int


class SourceTree:
    """Read-only view of the directory holding registrable scripts."""

    def __init__(self, source_root: str | Path) -> None:
        self.base_path = Path(source_root).resolve()

    def resolve(self, name: str) -> Path | None:
        """Return the absolute path for ``name`` or ``None`` if it escapes the root."""
        try:
            path = (self.base_path / name.lstrip("/")).resolve()
        except ValueError:
            # embedded NUL bytes
            logger.warning("Invalid script name %r", name)
            return None
        try:
            path.relative_to(self.base_path)
        except ValueError:
            logger.warning("Script name %r resolves outside %s", name, self.base_path)
            return None
        return path

    def stat(self, name: str) -> SourceFile | None:
        path = self.resolve(name)
        if path is None:
            return None
        try:
            result = path.stat()
        except (OSError, ValueError):
            logger.info("Skipping missing script %s", name)
            return None
        if not stat.S_ISREG(result.st_mode):
            logger.info("Skipping non-file script %s", name)
            return None
        return SourceFile(name, path, result.st_mtime_ns, result.st_atime_ns)


class ArtifactStore:
    """Directory of built bundles named ``<version>.<hash>.js``."""

    def __init__(self, build_output_dir: str | Path) -> None:
        self.base_path = Path(build_output_dir).resolve()
        self.base_path.mkdir(parents=True, exist_ok=True)

    def path(self, name: str) -> Path:
        return self.base_path / name

    def exists(self, name: str) -> bool:
        return self.path(name).is_file()

    def write(self, name: str, content: str, atime_ns: int, mtime_ns: int) -> Path:
        """Atomically publish ``content`` as ``name`` with the given timestamps."""
        target = self.path(name)
        tmp_path = None
        try:
            with NamedTemporaryFile(
                mode="w",
                encoding="utf-8",
                dir=self.base_path,
                prefix=".",
                suffix=".part",
                delete=False,
            ) as tmp:
                tmp_path = Path(tmp.name)
                tmp.write(content)
        except OSError as exc:
            if tmp_path is not None:
                tmp_path.unlink(missing_ok=True)
            logger.error("Failed to write bundle %s: %s", target, exc)
            raise PersistError("Error building js") from exc

        try:
            try:
                os.chmod(tmp_path, ARTIFACT_MODE)
            except OSError as exc:
                logger.error("Failed to set mode on bundle %s: %s", target, exc)
                raise PersistError("Error building js") from exc
            try:
                os.utime(tmp_path, ns=(atime_ns, mtime_ns))
            except OSError as exc:
                logger.error("Failed to set times on bundle %s: %s", target, exc)
                raise PersistError("Error setting file times") from exc
            try:
                os.replace(tmp_path, target)
            except OSError as exc:
                logger.error("Failed to publish bundle %s: %s", target, exc)
                raise PersistError("Error building js") from exc
        except PersistError:
            tmp_path.unlink(missing_ok=True)
            raise
        return target


__all__ = ["SourceFile", "SourceTree", "ArtifactStore"]
