"""Source buffers and span-to-text resolution."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from rubytags.exceptions import SourceReadError, SpanResolutionError


@dataclass(frozen=True, slots=True)
class Span:
    """Half-open byte range into a UTF-8 source buffer.

    Attributes:
        start: Offset of the first byte.
        end: Offset one past the last byte.
        row: 0-based line of ``start``, used for diagnostics.
    """

    start: int
    end: int
    row: int = 0

    @property
    def line(self) -> int:
        """1-based line number of the span start."""
        return self.row + 1


@dataclass(frozen=True, slots=True)
class SourceBuffer:
    """Decoded source held in memory for the duration of one traversal.

    Attributes:
        name: File identifier written into every tag record.
        data: Source re-encoded as UTF-8; spans index into this.
    """

    name: str
    data: bytes

    @classmethod
    def from_bytes(cls, name: str, raw: bytes, encoding: str = "utf-8") -> SourceBuffer:
        """Decode raw file bytes and normalize them to UTF-8.

        Raises:
            SourceReadError: If ``raw`` is not valid in ``encoding``.
        """
        try:
            text = raw.decode(encoding)
        except (UnicodeDecodeError, LookupError) as exc:
            raise SourceReadError(name, f"not decodable as {encoding}: {exc}") from exc
        return cls(name=name, data=text.encode("utf-8"))

    @classmethod
    def from_text(cls, name: str, text: str) -> SourceBuffer:
        return cls(name=name, data=text.encode("utf-8"))

    @classmethod
    def read(cls, path: Path, name: str | None = None, encoding: str = "utf-8") -> SourceBuffer:
        """Load a file from disk.

        Args:
            path: File to read.
            name: Identifier to record; defaults to ``str(path)``.
            encoding: Encoding of the file on disk.

        Raises:
            SourceReadError: If the file is missing, unreadable, or mis-encoded.
        """
        display = name if name is not None else str(path)
        try:
            raw = path.read_bytes()
        except OSError as exc:
            raise SourceReadError(display, exc.strerror or str(exc)) from exc
        return cls.from_bytes(display, raw, encoding)

    def resolve(self, span: Span) -> str:
        """Return the text covered by ``span``.

        Raises:
            SpanResolutionError: If the span is out of range or splits a
                multi-byte character.
        """
        if span.start < 0 or span.end < span.start or span.end > len(self.data):
            raise SpanResolutionError(
                f"span {span.start}..{span.end} outside {self.name} ({len(self.data)} bytes)"
            )
        try:
            return self.data[span.start : span.end].decode("utf-8")
        except UnicodeDecodeError as exc:
            raise SpanResolutionError(
                f"span {span.start}..{span.end} in {self.name} is not valid UTF-8"
            ) from exc

    def excerpt(self, span: Span) -> str:
        """Return the physical source line on which ``span`` starts.

        The line runs from the preceding newline to the next one, so the
        excerpt keeps its indentation and never contains a newline; a
        trailing carriage return is dropped.

        Raises:
            SpanResolutionError: If the span itself does not resolve.
        """
        self.resolve(span)
        start = self.data.rfind(b"\n", 0, span.start) + 1
        end = self.data.find(b"\n", span.start)
        if end == -1:
            end = len(self.data)
        try:
            return self.data[start:end].decode("utf-8").rstrip("\r")
        except UnicodeDecodeError as exc:
            raise SpanResolutionError(
                f"line at byte {span.start} in {self.name} is not valid UTF-8"
            ) from exc
