"""Scoped temporary files in a shared directory.

Several requests may write into the same temp directory at once, so every
name carries a millisecond timestamp and a random suffix.
"""

import logging
import time
import uuid
from pathlib import Path
from types import TracebackType

logger = logging.getLogger(__name__)


def unique_name(prefix: str, suffix: str = "") -> str:
    """Generate a collision-resistant file name.

    Example: ``chunk_1718000000000_3f9a1c2b7d4e.mp3``
    """
    return f"{prefix}_{int(time.time() * 1000)}_{uuid.uuid4().hex[:12]}{suffix}"


class TempWorkspace:
    """Tracks temp files created for one attempt and removes them on exit.

    Usage:
        with TempWorkspace(temp_dir, "say") as ws:
            aiff = ws.path(".aiff")
            ...
    """

    def __init__(self, base_dir: Path | str, prefix: str = "tmp") -> None:
        self._base_dir = Path(base_dir)
        self._prefix = prefix
        self._paths: list[Path] = []
        self._kept: set[Path] = set()

    def __enter__(self) -> "TempWorkspace":
        self._base_dir.mkdir(parents=True, exist_ok=True)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.cleanup()

    @property
    def base_dir(self) -> Path:
        """Directory holding the workspace files."""
        return self._base_dir

    @property
    def paths(self) -> list[Path]:
        """Paths handed out so far, in creation order."""
        return list(self._paths)

    def path(self, suffix: str = "", prefix: str | None = None) -> Path:
        """Reserve a unique path in the workspace (the file is not created)."""
        path = self._base_dir / unique_name(prefix or self._prefix, suffix)
        self._paths.append(path)
        return path

    def write(self, data: bytes, suffix: str = "", prefix: str | None = None) -> Path:
        """Write bytes to a new unique file and return its path."""
        path = self.path(suffix, prefix)
        path.write_bytes(data)
        return path

    def keep(self, path: Path) -> None:
        """Exclude a path from cleanup, handing ownership to the caller."""
        self._kept.add(path)

    def cleanup(self) -> None:
        """Delete every tracked file that still exists."""
        for path in self._paths:
            if path in self._kept:
                continue
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                logger.warning(f"Failed to remove temp file {path}: {e}")
        self._paths = [p for p in self._paths if p in self._kept]


__all__ = ["TempWorkspace", "unique_name"]
