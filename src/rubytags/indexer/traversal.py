"""Depth-first walk that feeds every node to the classifier."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from rubytags.indexer.classifier import (
    DEFAULT_ACCESSOR_PREFIXES,
    DefinitionClassifier,
)
from rubytags.indexer.nodes import Node, iter_preorder
from rubytags.indexer.source import SourceBuffer
from rubytags.indexer.tags import Diagnostic, TagIndex


@dataclass
class TraversalResult:
    """Definitions and warnings collected from one file.

    Attributes:
        file: File identifier of the traversed source.
        index: Unsorted tag index in discovery order.
        warnings: Recoverable problems, in discovery order.
    """

    file: str
    index: TagIndex = field(default_factory=TagIndex)
    warnings: list[Diagnostic] = field(default_factory=list)


def collect_definitions(
    root: Node,
    source: SourceBuffer,
    *,
    accessor_prefixes: Iterable[str] = DEFAULT_ACCESSOR_PREFIXES,
    classifier: DefinitionClassifier | None = None,
) -> TraversalResult:
    """Walk ``root`` pre-order and collect every definition under it.

    Args:
        root: Typed syntax tree of one file.
        source: Buffer the tree's spans point into; its name becomes the tag file field.
        accessor_prefixes: Call-name prefixes that declare accessor methods.
        classifier: Custom classifier; built from ``source`` when omitted.

    Returns:
        A TraversalResult whose index is still unsorted.
    """
    if classifier is None:
        classifier = DefinitionClassifier(source, accessor_prefixes)
    result = TraversalResult(file=source.name)
    for node in iter_preorder(root):
        outcome = classifier.classify(node)
        result.index.extend(outcome.definitions)
        result.warnings.extend(outcome.warnings)
    return result
