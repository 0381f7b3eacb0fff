"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from rubytags.config import TagsConfig
from rubytags.indexer.parser import ParsedSource, RubyParser
from rubytags.indexer.source import SourceBuffer
from rubytags.indexer.traversal import TraversalResult, collect_definitions


@pytest.fixture
def ruby_parser() -> RubyParser:
    return RubyParser()


@pytest.fixture
def parse(ruby_parser: RubyParser) -> Callable[..., ParsedSource]:
    """Parse a Ruby snippet held in memory."""

    def _parse(code: str, name: str = "a.rb") -> ParsedSource:
        return ruby_parser.parse(SourceBuffer.from_text(name, code))

    return _parse


@pytest.fixture
def collect(parse: Callable[..., ParsedSource]) -> Callable[..., TraversalResult]:
    """Parse a snippet and collect its definitions in discovery order."""

    def _collect(code: str, name: str = "a.rb", **kwargs: object) -> TraversalResult:
        parsed = parse(code, name)
        return collect_definitions(parsed.root, parsed.source, **kwargs)  # type: ignore[arg-type]

    return _collect


@pytest.fixture
def tags_config(tmp_path: Path) -> TagsConfig:
    """A default config rooted at tmp_path."""
    return TagsConfig(project_dir=tmp_path)


@pytest.fixture
def ruby_project(tmp_path: Path) -> Path:
    """A small Ruby project with nested directories."""
    lib = tmp_path / "lib"
    (lib / "shop").mkdir(parents=True)
    (lib / "shop.rb").write_text(
        "module Shop\n  VERSION = \"1.0\"\nend\n", encoding="utf-8"
    )
    (lib / "shop" / "cart.rb").write_text(
        "module Shop\n"
        "  class Cart\n"
        "    attr_reader :items, :owner\n"
        "\n"
        "    def self.empty\n"
        "      new([])\n"
        "    end\n"
        "\n"
        "    def add(item)\n"
        "      items << item\n"
        "    end\n"
        "    alias push add\n"
        "  end\n"
        "end\n",
        encoding="utf-8",
    )
    (tmp_path / "Rakefile").write_text("task :default\n", encoding="utf-8")
    (tmp_path / "README.md").write_text("# Shop\n", encoding="utf-8")
    return tmp_path
