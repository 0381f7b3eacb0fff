"""Per-construct rules deciding which nodes define which tags."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from rubytags.exceptions import SpanResolutionError, UnsupportedConstructError
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
from rubytags.indexer.source import SourceBuffer
from rubytags.indexer.tags import Definition, Diagnostic, Kind

DEFAULT_ACCESSOR_PREFIXES: tuple[str, ...] = ("attr_",)


@dataclass
class Classification:
    """Outcome of classifying one node.

    Attributes:
        definitions: Definitions in discovery order (argument order for accessors).
        warnings: Recoverable problems; the node may still have produced definitions.
    """

    definitions: list[Definition] = field(default_factory=list)
    warnings: list[Diagnostic] = field(default_factory=list)


def resolve_name(node: Node) -> str:
    """Return the literal name carried by a constant or symbol node.

    Raises:
        UnsupportedConstructError: For any other shape, e.g. a global
            variable or an interpolated symbol.
    """
    match node:
        case Const(name=name) | Sym(name=name) if name:
            return name
        case Const() | Sym():
            raise UnsupportedConstructError("empty name")
        case Generic(kind=kind):
            raise UnsupportedConstructError(f"cannot take a static name from {kind}")
        case _:
            raise UnsupportedConstructError(
                f"cannot take a static name from {type(node).__name__}"
            )


class DefinitionClassifier:
    """Maps typed nodes to definitions for one source buffer.

    Subclass and override :meth:`classify` to recognize more constructs;
    fall back to ``super().classify(node)`` for everything else.
    """

    def __init__(
        self,
        source: SourceBuffer,
        accessor_prefixes: Iterable[str] = DEFAULT_ACCESSOR_PREFIXES,
    ) -> None:
        self._source = source
        self._prefixes = tuple(accessor_prefixes)

    def classify(self, node: Node) -> Classification:
        """Classify a single node without looking at its children."""
        try:
            match node:
                case ClassDecl(name=name_node):
                    return self._single(node, resolve_name(name_node), Kind.CLASS)
                case ModuleDecl(name=name_node):
                    return self._single(node, resolve_name(name_node), Kind.MODULE)
                case MethodDef(name=name):
                    return self._single(node, name, Kind.METHOD)
                case SingletonMethodDef(name=name):
                    return self._single(node, name, Kind.SINGLETON_METHOD)
                case ConstAssign(name=name):
                    return self._single(node, name, Kind.CONSTANT)
                case AliasDecl(new_name=new_name):
                    return self._single(node, resolve_name(new_name), Kind.ALIAS)
                case Call(method=method, args=args) if method.startswith(self._prefixes):
                    return self._accessors(node, args)
                case _:
                    return Classification()
        except UnsupportedConstructError as exc:
            warning = self._warning(node, "unsupported-construct", str(exc))
            return Classification(warnings=[warning])

    def _single(self, node: Node, name: str, kind: Kind) -> Classification:
        if not name:
            raise UnsupportedConstructError("empty name")
        result = Classification()
        excerpt = self._excerpt(node, result)
        result.definitions.append(
            Definition(name=name, file=self._source.name, excerpt=excerpt, kind=kind)
        )
        return result

    def _accessors(self, node: Call, args: tuple[Node, ...]) -> Classification:
        result = Classification()
        excerpt: str | None = None
        for arg in args:
            match arg:
                case Sym(name=""):
                    result.warnings.append(
                        self._warning(arg, "unsupported-construct", "empty accessor name")
                    )
                case Sym(name=name):
                    if excerpt is None:
                        excerpt = self._excerpt(node, result)
                    result.definitions.append(
                        Definition(
                            name=name, file=self._source.name, excerpt=excerpt, kind=Kind.METHOD
                        )
                    )
                case Generic(kind="delimited_symbol"):
                    result.warnings.append(
                        self._warning(arg, "unsupported-construct", "interpolated accessor name")
                    )
        return result

    def _excerpt(self, node: Node, result: Classification) -> str:
        try:
            return self._source.excerpt(node.span)
        except SpanResolutionError as exc:
            result.warnings.append(self._warning(node, "span-resolution", str(exc)))
            return ""

    def _warning(self, node: Node, code: str, message: str) -> Diagnostic:
        return Diagnostic(file=self._source.name, line=node.span.line, code=code, message=message)
