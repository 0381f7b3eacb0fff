"""rubytags exception hierarchy.

All exceptions inherit from RubyTagsError so callers can catch the base
class when they want to handle any rubytags failure uniformly.
"""

from __future__ import annotations

from pathlib import Path


class RubyTagsError(Exception):
    """Base exception for all rubytags errors."""


class ConfigError(RubyTagsError):
    """Configuration-related errors (bad TOML values, invalid env vars, etc.)."""


class IndexerError(RubyTagsError):
    """Errors during source discovery, parsing, or tag extraction."""


class SourceReadError(IndexerError):
    """The source file cannot be read or decoded."""

    def __init__(self, path: Path | str, cause: str) -> None:
        super().__init__(f"Cannot read {path}: {cause}")
        self.path = str(path)
        self.cause = cause


class ParseError(IndexerError):
    """tree-sitter could not produce an error-free syntax tree."""

    def __init__(self, path: Path | str, line: int | None = None) -> None:
        where = f" at line {line}" if line is not None else ""
        super().__init__(f"Syntax error in {path}{where}")
        self.path = str(path)
        self.line = line


class UnsupportedConstructError(IndexerError):
    """A definition carries a name shape that cannot be resolved statically."""


class SpanResolutionError(IndexerError):
    """A span does not map back onto the source buffer."""


class TagIndexError(RubyTagsError):
    """A sealed tag index was modified or sorted a second time."""
