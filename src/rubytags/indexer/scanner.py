"""File discovery engine that walks a project tree respecting .gitignore."""

from __future__ import annotations

import fnmatch
import os
from dataclasses import dataclass
from pathlib import Path

from rich.console import Console

from rubytags.config import TagsConfig
from rubytags.exceptions import IndexerError

console = Console(stderr=True)

_ALWAYS_SKIP: frozenset[str] = frozenset(
    {
        ".git",
        ".hg",
        ".svn",
        ".bundle",
        "node_modules",
        "vendor",
        "tmp",
        "log",
        "coverage",
        "pkg",
    }
)


@dataclass(frozen=True, slots=True)
class FileInfo:
    """A single discovered Ruby source file.

    Attributes:
        path: File path relative to the scan root.
        size: File size in bytes.
    """

    path: Path
    size: int

    @property
    def tag_name(self) -> str:
        """Path as written into tag records (forward slashes)."""
        return self.path.as_posix()


class FileScanner:
    """Discovers Ruby source files under a root, respecting .gitignore.

    Usage::

        scanner = FileScanner(Path("/my/project"), config)
        files = scanner.scan()
    """

    def __init__(self, root: Path, config: TagsConfig) -> None:
        """Initialize the scanner.

        Args:
            root: Directory to walk.
            config: Supplies recognized extensions, file names and size limit.

        Raises:
            IndexerError: If root does not exist or is not a directory.
        """
        self._root = root.resolve()
        if not self._root.is_dir():
            raise IndexerError(f"Directory does not exist: {self._root}")
        self._config = config
        self._gitignore_patterns = self._load_gitignore()

    def scan(self) -> list[FileInfo]:
        """Walk the tree and return discovered Ruby files.

        Returns:
            A list of FileInfo instances sorted by path.
        """
        results: list[FileInfo] = []
        try:
            for dirpath_str, dirnames, filenames in os.walk(self._root, topdown=True):
                dirpath = Path(dirpath_str)

                dirnames[:] = [
                    d
                    for d in dirnames
                    if not self._should_skip_dir(d) and not self._is_ignored(dirpath / d)
                ]

                for fname in filenames:
                    full = dirpath / fname
                    if not self.is_ruby_file(full):
                        continue

                    try:
                        size = full.stat().st_size
                    except OSError:
                        continue

                    if size > self._config.max_file_size:
                        if self._config.debug:
                            console.print(f"[dim]Scanner skipping {full} ({size} bytes)[/dim]")
                        continue

                    if self._is_ignored(full):
                        continue

                    results.append(FileInfo(path=full.relative_to(self._root), size=size))
        except OSError as exc:
            raise IndexerError(f"Failed to scan directory: {exc}") from exc

        results.sort(key=lambda fi: fi.path)
        if self._config.debug:
            console.print(f"[green]Scanner[/green] found [bold]{len(results)}[/bold] Ruby files")
        return results

    def is_ruby_file(self, path: Path) -> bool:
        """Return True if path looks like Ruby source by suffix or well-known name."""
        return path.suffix.lower() in self._config.extensions or path.name in self._config.filenames

    def _load_gitignore(self) -> list[str]:
        """Load .gitignore patterns, returning empty list if missing."""
        gitignore_path = self._root / ".gitignore"
        if not gitignore_path.is_file():
            return []

        lines: list[str] = []
        text = gitignore_path.read_text(encoding="utf-8", errors="replace")
        for raw_line in text.splitlines():
            line = raw_line.strip()
            if line and not line.startswith("#"):
                lines.append(line)
        return lines

    def _is_ignored(self, path: Path) -> bool:
        """Check whether path matches any .gitignore pattern."""
        if not self._gitignore_patterns:
            return False

        try:
            rel = path.relative_to(self._root).as_posix()
        except ValueError:
            return False

        basename = rel.rsplit("/", 1)[-1]
        ignored = False
        for pattern in self._gitignore_patterns:
            negated = pattern.startswith("!")
            pat = pattern.lstrip("!").strip("/")

            if "/" in pat:
                matched = fnmatch.fnmatch(rel, pat)
            else:
                matched = fnmatch.fnmatch(basename, pat)
            if matched:
                ignored = not negated
        return ignored

    @staticmethod
    def _should_skip_dir(dirname: str) -> bool:
        """Return True if dirname should always be skipped."""
        return dirname.startswith(".") or dirname in _ALWAYS_SKIP
