"""Tag builder: per-file pipeline and multi-file merge."""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path

from rich.console import Console

from rubytags.config import TagsConfig
from rubytags.exceptions import IndexerError
from rubytags.indexer.parser import RubyParser
from rubytags.indexer.scanner import FileInfo, FileScanner
from rubytags.indexer.tags import Diagnostic, TagIndex, merge_indexes
from rubytags.indexer.traversal import TraversalResult, collect_definitions

console = Console(stderr=True)


@dataclass(frozen=True, slots=True)
class FileFailure:
    """A file that could not be indexed (unreadable or unparsable)."""

    path: str
    error: IndexerError


@dataclass
class TagsRun:
    """Outcome of indexing a directory.

    Attributes:
        index: Sorted, sealed index over every file that succeeded.
        warnings: Recoverable problems from all files, in file order.
        failures: Files skipped because of a fatal per-file error.
        files: Number of files discovered.
    """

    index: TagIndex
    warnings: list[Diagnostic] = field(default_factory=list)
    failures: list[FileFailure] = field(default_factory=list)
    files: int = 0

    @property
    def ok(self) -> bool:
        return not self.failures


class TagsBuilder:
    """Builds tag indexes for single files or whole directories."""

    def __init__(self, config: TagsConfig) -> None:
        self._config = config
        self._local = threading.local()

    def build_file(self, path: Path, display_name: str | None = None) -> TraversalResult:
        """Read, parse and traverse one file.

        Args:
            path: File to index.
            display_name: Identifier written into tag records; defaults to ``str(path)``.

        Returns:
            The unsorted per-file result.

        Raises:
            SourceReadError: If the file cannot be read or decoded.
            ParseError: If the file has syntax errors.
        """
        parsed = self._parser().parse_file(path, name=display_name, encoding=self._config.encoding)
        result = collect_definitions(
            parsed.root, parsed.source, accessor_prefixes=self._config.accessor_prefixes
        )
        if self._config.debug:
            console.print(
                f"[dim]Indexed {result.file}: {len(result.index)} definitions, "
                f"{len(result.warnings)} warnings[/dim]"
            )
        return result

    def build_tree(self, root: Path) -> TagsRun:
        """Index every Ruby file under ``root``.

        Fatal per-file errors are collected in ``failures`` and never stop
        sibling files. Per-file indexes are concatenated in path order and
        sorted once.

        Raises:
            IndexerError: If ``root`` cannot be scanned.
        """
        files = FileScanner(root, self._config).scan()
        base = root.resolve()

        if self._config.jobs > 1 and len(files) > 1:
            with ThreadPoolExecutor(max_workers=self._config.jobs) as pool:
                outcomes = list(pool.map(lambda fi: self._build_one(base, fi), files))
        else:
            outcomes = [self._build_one(base, fi) for fi in files]

        results: list[TraversalResult] = []
        failures: list[FileFailure] = []
        for outcome in outcomes:
            if isinstance(outcome, FileFailure):
                console.print(f"[yellow]Warning[/yellow]: Skipping {outcome.path}: {outcome.error}")
                failures.append(outcome)
            else:
                results.append(outcome)

        run = TagsRun(
            index=merge_indexes(r.index for r in results),
            warnings=[w for r in results for w in r.warnings],
            failures=failures,
            files=len(files),
        )
        if self._config.debug:
            console.print(
                f"[green]Indexer[/green] tagged [bold]{len(run.index)}[/bold] definitions "
                f"across [bold]{len(files)}[/bold] files"
            )
        return run

    def _build_one(self, base: Path, fi: FileInfo) -> TraversalResult | FileFailure:
        try:
            return self.build_file(base / fi.path, display_name=fi.tag_name)
        except IndexerError as exc:
            return FileFailure(path=fi.tag_name, error=exc)

    def _parser(self) -> RubyParser:
        """Return this thread's parser, creating it on first use."""
        parser = getattr(self._local, "parser", None)
        if parser is None:
            parser = RubyParser()
            self._local.parser = parser
        return parser
