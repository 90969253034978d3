"""Read-only view over a project directory.

Every detector reads the project through a DetectionContext instead of
touching the filesystem directly. Relative paths are resolved against the
root and may not escape it (no `..` traversal, no symlink hops outside).
"""

import glob
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Mapping

logger = logging.getLogger(__name__)


class PathEscapeError(ValueError):
    """Raised when a relative path resolves outside the project root."""


@dataclass(frozen=True)
class DetectionContext:
    """Filesystem evidence plus whitelisted environment overrides.

    root: Absolute path to the project root.
    env: Override values keyed by environment variable name. A missing key
        means "not overridden".
    """

    root: Path
    env: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "root", Path(self.root).resolve())
        object.__setattr__(self, "env", MappingProxyType(dict(self.env)))

    def has_file(self, name: str) -> bool:
        """Return True if `name` exists under the root (file or directory)."""
        try:
            path = self._resolve(name)
        except PathEscapeError:
            logger.warning("Ignoring path outside project root: %s", name)
            return False
        return path.exists()

    def read_file(self, name: str) -> bytes:
        """Read a file relative to the root.

        Raises:
            PathEscapeError: If the path resolves outside the root.
            FileNotFoundError: If the file does not exist.
            OSError: On any other read failure.
        """
        return self._resolve(name).read_bytes()

    def read_text(self, name: str) -> str:
        return self.read_file(name).decode("utf-8", errors="replace")

    def list_files(self, pattern: str) -> list[str]:
        """List root-relative paths matching a glob pattern, sorted.

        A pattern that matches nothing yields an empty list. Matches that
        resolve outside the root are dropped.
        """
        matches = glob.glob(pattern, root_dir=self.root)
        results: list[str] = []
        for match in sorted(matches):
            try:
                self._resolve(match)
            except PathEscapeError:
                continue
            results.append(Path(match).as_posix())
        return results

    def _resolve(self, name: str) -> Path:
        if os.path.isabs(name):
            raise PathEscapeError(f"Absolute paths are not allowed: {name}")
        path = (self.root / name).resolve()
        if path != self.root and not path.is_relative_to(self.root):
            raise PathEscapeError(f"Path escapes project root: {name}")
        return path
