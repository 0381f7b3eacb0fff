"""Typed Ruby syntax tree consumed by the tag classifier.

Only the constructs that can carry a definition, and the two name shapes
they resolve through, get their own variant. Everything else is lowered
to ``Generic`` and is only walked for its children.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from rubytags.indexer.source import Span


@dataclass(frozen=True, slots=True)
class Const:
    """Constant reference; ``name`` is the last path segment (``Bar`` in ``Foo::Bar``)."""

    name: str
    span: Span
    children: tuple[Node, ...] = ()


@dataclass(frozen=True, slots=True)
class Sym:
    """Symbol literal or bare method-name token, with ``name`` already decoded."""

    name: str
    span: Span
    children: tuple[Node, ...] = ()


@dataclass(frozen=True, slots=True)
class ClassDecl:
    name: Node
    span: Span
    children: tuple[Node, ...] = ()


@dataclass(frozen=True, slots=True)
class ModuleDecl:
    name: Node
    span: Span
    children: tuple[Node, ...] = ()


@dataclass(frozen=True, slots=True)
class MethodDef:
    name: str
    span: Span
    children: tuple[Node, ...] = ()


@dataclass(frozen=True, slots=True)
class SingletonMethodDef:
    """``def self.name`` or ``def obj.name``."""

    name: str
    span: Span
    children: tuple[Node, ...] = ()


@dataclass(frozen=True, slots=True)
class ConstAssign:
    name: str
    span: Span
    children: tuple[Node, ...] = ()


@dataclass(frozen=True, slots=True)
class AliasDecl:
    """``alias new_name old_name``."""

    new_name: Node
    old_name: Node
    span: Span
    children: tuple[Node, ...] = ()


@dataclass(frozen=True, slots=True)
class Call:
    """Method call; ``args`` are the positional arguments in source order."""

    method: str
    args: tuple[Node, ...]
    span: Span
    children: tuple[Node, ...] = ()


@dataclass(frozen=True, slots=True)
class Generic:
    """Any construct the classifier has no rule for; ``kind`` is the grammar node type."""

    kind: str
    span: Span
    children: tuple[Node, ...] = ()


Node = (
    Const
    | Sym
    | ClassDecl
    | ModuleDecl
    | MethodDef
    | SingletonMethodDef
    | ConstAssign
    | AliasDecl
    | Call
    | Generic
)


def iter_preorder(root: Node) -> Iterator[Node]:
    """Yield ``root`` and all descendants, parents before children."""
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))
