"""Ruby tag extraction: parsing, classification, traversal and rendering."""

from __future__ import annotations

from rubytags.indexer.classifier import Classification, DefinitionClassifier
from rubytags.indexer.index import FileFailure, TagsBuilder, TagsRun
from rubytags.indexer.parser import ParsedSource, RubyParser
from rubytags.indexer.scanner import FileInfo, FileScanner
from rubytags.indexer.source import SourceBuffer, Span
from rubytags.indexer.tags import (
    Definition,
    Diagnostic,
    Kind,
    TagIndex,
    format_tag,
    format_tags,
    merge_indexes,
)
from rubytags.indexer.traversal import TraversalResult, collect_definitions

__all__ = [
    "Classification",
    "Definition",
    "DefinitionClassifier",
    "Diagnostic",
    "FileFailure",
    "FileInfo",
    "FileScanner",
    "Kind",
    "ParsedSource",
    "RubyParser",
    "SourceBuffer",
    "Span",
    "TagIndex",
    "TagsBuilder",
    "TagsRun",
    "TraversalResult",
    "collect_definitions",
    "format_tag",
    "format_tags",
    "merge_indexes",
]
