"""Tag records, the tag index, and tag-file rendering."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from enum import Enum

from rubytags.exceptions import TagIndexError


class Kind(Enum):
    CLASS = "class"
    MODULE = "module"
    METHOD = "method"
    SINGLETON_METHOD = "singleton_method"
    CONSTANT = "constant"
    ALIAS = "alias"


_KIND_CHARS: dict[Kind, str] = {
    Kind.CLASS: "c",
    Kind.MODULE: "m",
    Kind.METHOD: "f",
    Kind.SINGLETON_METHOD: "F",
    Kind.CONSTANT: "C",
    Kind.ALIAS: "a",
}


@dataclass(frozen=True, slots=True)
class Definition:
    """A single definition found in a source file.

    Attributes:
        name: Symbol identifier; never empty.
        file: File identifier shared by every definition of one traversal.
        excerpt: First line of the defining construct; never contains a newline.
        kind: What was defined.
    """

    name: str
    file: str
    excerpt: str
    kind: Kind

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("definition name must not be empty")
        if "\n" in self.excerpt:
            raise ValueError(f"excerpt for {self.name!r} spans more than one line")


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """A recoverable problem met while indexing one file.

    Attributes:
        file: File identifier.
        line: 1-based line of the offending construct, if known.
        code: ``unsupported-construct`` or ``span-resolution``.
        message: Human readable description.
    """

    file: str
    line: int | None
    code: str
    message: str

    def __str__(self) -> str:
        where = f"{self.file}:{self.line}" if self.line is not None else self.file
        return f"{where}: {self.message} [{self.code}]"


class TagIndex:
    """Append-only collection of definitions, sorted once and then sealed.

    Usage::

        index = TagIndex()
        index.add(definition)
        index.sort()
        text = format_tags(index)
    """

    def __init__(self, definitions: Iterable[Definition] = ()) -> None:
        self._definitions: list[Definition] = list(definitions)
        self._sealed = False

    def __len__(self) -> int:
        return len(self._definitions)

    def __iter__(self) -> Iterator[Definition]:
        return iter(self._definitions)

    @property
    def sealed(self) -> bool:
        """True once :meth:`sort` has run."""
        return self._sealed

    def add(self, definition: Definition) -> None:
        self._check_open()
        self._definitions.append(definition)

    def extend(self, definitions: Iterable[Definition]) -> None:
        self._check_open()
        self._definitions.extend(definitions)

    def sort(self) -> TagIndex:
        """Stable-sort by name (code point order) and seal the index.

        Returns:
            The index itself, for chaining.

        Raises:
            TagIndexError: If the index was already sorted.
        """
        self._check_open()
        self._definitions.sort(key=lambda d: d.name)
        self._sealed = True
        return self

    def _check_open(self) -> None:
        if self._sealed:
            raise TagIndexError("tag index is sealed; it was already sorted")


def merge_indexes(indexes: Iterable[TagIndex]) -> TagIndex:
    """Concatenate unsorted per-file indexes and sort the result once."""
    merged = TagIndex()
    for index in indexes:
        merged.extend(index)
    return merged.sort()


def kind_char(kind: Kind) -> str:
    return _KIND_CHARS[kind]


def escape_pattern(excerpt: str) -> str:
    """Escape ``\\`` and ``/`` so the excerpt can sit inside a ``/^...$/`` address."""
    return excerpt.replace("\\", "\\\\").replace("/", "\\/")


def format_tag(definition: Definition) -> str:
    """Render one tag-file record (without line terminator)."""
    return (
        f"{definition.name}\t{definition.file}\t"
        f'/^{escape_pattern(definition.excerpt)}$/;"\t{kind_char(definition.kind)}'
    )


def format_tags(definitions: Iterable[Definition]) -> str:
    """Render records one per line, newline-terminated; empty input gives ``""``."""
    lines = [format_tag(d) for d in definitions]
    if not lines:
        return ""
    return "\n".join(lines) + "\n"
