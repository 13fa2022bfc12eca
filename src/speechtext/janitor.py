"""
Tracking and removal of the temporary artifacts a pipeline run creates.

Every stage registers what it writes (the downloaded source, the canonical
WAV, each segment file, the run's segment directory) with the run's
ResourceJanitor. The orchestrator enters the janitor as a context manager
around the whole pipeline body, so removal happens once on every exit path.
"""

from __future__ import annotations

import logging
import os
import tempfile
import threading
from pathlib import Path

logger = logging.getLogger(__name__)


class ResourceJanitor:
    """Best-effort, exactly-once removal of tracked files and directories."""

    def __init__(self, base_dir: str | None = None) -> None:
        self._base_dir = base_dir
        self._lock = threading.Lock()
        self._files: list[Path] = []
        self._dirs: list[Path] = []
        self._cleaned = False

    @property
    def cleaned(self) -> bool:
        return self._cleaned

    @property
    def tracked(self) -> list[Path]:
        """Tracked paths in registration order (files, then directories)."""
        with self._lock:
            return [*self._files, *self._dirs]

    def track(self, path: str | os.PathLike) -> Path:
        """Register a file for removal. Returns it as a Path."""
        path = Path(path)
        with self._lock:
            if self._cleaned:
                raise RuntimeError("janitor already cleaned up")
            if path not in self._files:
                self._files.append(path)
        return path

    def make_temp_file(self, suffix: str = "") -> Path:
        """Create an empty temporary file and track it."""
        fd, name = tempfile.mkstemp(suffix=suffix, dir=self._base_dir)
        os.close(fd)
        return self.track(name)

    def make_temp_dir(self, prefix: str = "speechtext_") -> Path:
        """Create a temporary directory and track it."""
        path = Path(tempfile.mkdtemp(prefix=prefix, dir=self._base_dir))
        with self._lock:
            if self._cleaned:
                path.rmdir()
                raise RuntimeError("janitor already cleaned up")
            self._dirs.append(path)
        return path

    def cleanup(self) -> int:
        """Remove every tracked artifact that still exists.

        Runs at most once; later calls are no-ops. A failure on one path is
        logged and does not stop removal of the others.

        Returns:
            Number of paths actually removed.
        """
        with self._lock:
            if self._cleaned:
                return 0
            self._cleaned = True
            files = list(self._files)
            dirs = list(self._dirs)

        removed = 0
        for path in files:
            try:
                path.unlink()
                removed += 1
            except FileNotFoundError:
                pass
            except OSError as e:
                logger.warning(
                    "Failed to remove temporary file",
                    extra={"path": str(path), "error": str(e)},
                )

        # Directories last, deepest first, so tracked files inside are gone
        for path in sorted(dirs, key=lambda p: len(p.parts), reverse=True):
            try:
                path.rmdir()
                removed += 1
            except FileNotFoundError:
                pass
            except OSError as e:
                logger.warning(
                    "Failed to remove temporary directory",
                    extra={"path": str(path), "error": str(e)},
                )

        logger.debug(
            "Temporary artifacts removed",
            extra={"removed": removed, "tracked": len(files) + len(dirs)},
        )
        return removed

    def __enter__(self) -> ResourceJanitor:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.cleanup()
