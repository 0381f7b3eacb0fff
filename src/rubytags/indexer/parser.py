"""tree-sitter front end: parses Ruby and lowers the CST into typed nodes."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import tree_sitter_ruby
from tree_sitter import Language, Parser
from tree_sitter import Node as TSNode

from rubytags.exceptions import ParseError
from rubytags.indexer.nodes import (
    AliasDecl,
    Call,
    ClassDecl,
    Const,
    ConstAssign,
    Generic,
    MethodDef,
    ModuleDecl,
    Node,
    SingletonMethodDef,
    Sym,
)
from rubytags.indexer.source import SourceBuffer, Span

_LANGUAGE: Language | None = None

# Tokens that name a method in ``alias new old`` without a leading colon.
_BARE_METHOD_NAMES: frozenset[str] = frozenset({"identifier", "constant", "operator", "setter"})


def _get_language() -> Language:
    """Load the Ruby grammar once per process."""
    global _LANGUAGE
    if _LANGUAGE is None:
        _LANGUAGE = Language(tree_sitter_ruby.language())
    return _LANGUAGE


@dataclass(frozen=True, slots=True)
class ParsedSource:
    """A typed syntax tree together with the buffer its spans point into."""

    source: SourceBuffer
    root: Node


class RubyParser:
    """Parses Ruby source with tree-sitter.

    A RubyParser wraps one tree-sitter parser and must not be shared
    between threads; create one per worker.

    Usage::

        parsed = RubyParser().parse(SourceBuffer.from_text("a.rb", "class A; end"))
    """

    def __init__(self) -> None:
        self._parser = Parser(_get_language())

    def parse(self, source: SourceBuffer) -> ParsedSource:
        """Parse a buffer into a typed tree.

        Raises:
            ParseError: If the source contains syntax errors.
        """
        tree = self._parser.parse(source.data)
        root = tree.root_node
        if root.has_error:
            raise ParseError(source.name, _first_error_line(root))
        return ParsedSource(source=source, root=_Lowering(source.data).lower(root))

    def parse_file(self, path: Path, name: str | None = None, encoding: str = "utf-8") -> ParsedSource:
        """Read and parse a file.

        Raises:
            SourceReadError: If the file cannot be read or decoded.
            ParseError: If the source contains syntax errors.
        """
        return self.parse(SourceBuffer.read(path, name=name, encoding=encoding))


def _first_error_line(root: TSNode) -> int | None:
    """Return the 1-based line of the first ERROR or missing node, if any."""
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            return node.start_point[0] + 1
        if node.has_error:
            stack.extend(reversed(node.children))
    return None


def _span(node: TSNode) -> Span:
    return Span(start=node.start_byte, end=node.end_byte, row=node.start_point[0])


class _Frame:
    """A tree-sitter node whose named children are still being lowered."""

    __slots__ = ("node", "named", "lowered")

    def __init__(self, node: TSNode) -> None:
        self.node = node
        self.named = node.named_children
        self.lowered: list[Node] = []


class _Lowering:
    """Converts tree-sitter nodes into :mod:`rubytags.indexer.nodes` variants.

    The walk keeps its own stack so nesting depth is bounded by memory,
    not by the interpreter's recursion limit.
    """

    def __init__(self, data: bytes) -> None:
        self._data = data

    def lower(self, root: TSNode) -> Node:
        stack = [_Frame(root)]
        while True:
            frame = stack[-1]
            if len(frame.lowered) < len(frame.named):
                child = frame.named[len(frame.lowered)]
                if frame.node.type == "alias" and child.type in _BARE_METHOD_NAMES:
                    frame.lowered.append(Sym(name=self._text(child), span=_span(child)))
                else:
                    stack.append(_Frame(child))
                continue

            stack.pop()
            lowered = self._build(frame.node, frame.named, tuple(frame.lowered))
            if not stack:
                return lowered
            stack[-1].lowered.append(lowered)

    def _build(self, node: TSNode, named: list[TSNode], children: tuple[Node, ...]) -> Node:
        span = _span(node)

        def field(name: str) -> Node | None:
            target = node.child_by_field_name(name)
            if target is None:
                return None
            for ts_child, lowered in zip(named, children):
                if ts_child == target:
                    return lowered
            return None

        match node.type:
            case "constant":
                return Const(name=self._text(node), span=span, children=children)
            case "scope_resolution":
                name_node = node.child_by_field_name("name")
                if name_node is not None and name_node.type == "constant":
                    return Const(name=self._text(name_node), span=span, children=children)
            case "simple_symbol":
                return Sym(name=self._text(node).removeprefix(":"), span=span, children=children)
            case "delimited_symbol":
                if not any(child.type == "interpolation" for child in named):
                    return Sym(name=self._symbol_body(named), span=span, children=children)
            case "class":
                name = field("name")
                if name is not None:
                    return ClassDecl(name=name, span=span, children=children)
            case "module":
                name = field("name")
                if name is not None:
                    return ModuleDecl(name=name, span=span, children=children)
            case "method":
                name_node = node.child_by_field_name("name")
                if name_node is not None:
                    return MethodDef(name=self._text(name_node), span=span, children=children)
            case "singleton_method":
                name_node = node.child_by_field_name("name")
                if name_node is not None:
                    return SingletonMethodDef(
                        name=self._text(name_node), span=span, children=children
                    )
            case "assignment" | "operator_assignment":
                left = field("left")
                if isinstance(left, Const):
                    return ConstAssign(name=left.name, span=span, children=children)
            case "left_assignment_list" | "destructured_left_assignment" | "rest_assignment":
                # Each constant target of ``A, (B, *C) = ...`` is its own assignment.
                targets = tuple(
                    ConstAssign(name=c.name, span=c.span, children=c.children)
                    if isinstance(c, Const)
                    else c
                    for c in children
                )
                return Generic(kind=node.type, span=span, children=targets)
            case "alias":
                new_name, old_name = field("name"), field("alias")
                if new_name is not None and old_name is not None:
                    return AliasDecl(
                        new_name=new_name, old_name=old_name, span=span, children=children
                    )
            case "call":
                method_node = node.child_by_field_name("method")
                if method_node is not None:
                    arguments = field("arguments")
                    args = arguments.children if arguments is not None else ()
                    return Call(
                        method=self._text(method_node), args=args, span=span, children=children
                    )
        return Generic(kind=node.type, span=span, children=children)

    def _symbol_body(self, named: list[TSNode]) -> str:
        """Raw text between the delimiters of ``:"..."`` or ``%s(...)``."""
        if not named:
            return ""
        body = self._data[named[0].start_byte : named[-1].end_byte]
        return body.decode("utf-8", errors="replace")

    def _text(self, node: TSNode) -> str:
        return self._data[node.start_byte : node.end_byte].decode("utf-8", errors="replace")
