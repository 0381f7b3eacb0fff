"""Tests for the CLI commands."""

from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from rubytags import __version__
from rubytags import config as config_module
from rubytags.cli import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(config_module, "_GLOBAL_CONFIG_PATH", tmp_path / "no-global.toml")
    monkeypatch.delenv("RUBYTAGS_JOBS", raising=False)
    monkeypatch.delenv("RUBYTAGS_LOG_LEVEL", raising=False)


class TestTags:
    def test_single_file_to_stdout(self, tmp_path: Path) -> None:
        (tmp_path / "a.rb").write_text("class A\n  def foo\n  end\nend", encoding="utf-8")
        result = runner.invoke(app, ["tags", "a.rb"])
        assert result.exit_code == 0
        assert result.stdout == 'A\ta.rb\t/^class A$/;"\tc\nfoo\ta.rb\t/^  def foo$/;"\tf\n'

    def test_output_file(self, tmp_path: Path) -> None:
        (tmp_path / "b.rb").write_text("module B\n  X = 1\nend\n", encoding="utf-8")
        result = runner.invoke(app, ["tags", "b.rb", "-o", "tags"])
        assert result.exit_code == 0
        assert (tmp_path / "tags").read_bytes() == (
            b'B\tb.rb\t/^module B$/;"\tm\nX\tb.rb\t/^  X = 1$/;"\tC\n'
        )

    def test_missing_file_fails(self) -> None:
        result = runner.invoke(app, ["tags", "missing.rb"])
        assert result.exit_code == 1
        assert "cannot read" in result.output.lower()

    def test_syntax_error_fails(self, tmp_path: Path) -> None:
        (tmp_path / "bad.rb").write_text("def oops(\n", encoding="utf-8")
        result = runner.invoke(app, ["tags", "bad.rb"])
        assert result.exit_code == 1
        assert "syntax error" in result.output.lower()

    def test_directory(self, ruby_project: Path) -> None:
        result = runner.invoke(app, ["tags", str(ruby_project), "-o", "tags", "-j", "2"])
        assert result.exit_code == 0
        lines = (ruby_project / "tags").read_text(encoding="utf-8").splitlines()
        assert lines[0] == 'Cart\tlib/shop/cart.rb\t/^  class Cart$/;"\tc'
        assert 'push\tlib/shop/cart.rb\t/^    alias push add$/;"\ta' in lines

    def test_directory_with_broken_file(self, ruby_project: Path) -> None:
        (ruby_project / "lib" / "broken.rb").write_text("def x(\n", encoding="utf-8")
        result = runner.invoke(app, ["tags", str(ruby_project), "-o", "tags"])
        assert result.exit_code == 1
        assert (ruby_project / "tags").is_file()
        assert "could not be indexed" in result.output

    def test_empty_directory(self, tmp_path: Path) -> None:
        (tmp_path / "src").mkdir()
        result = runner.invoke(app, ["tags", "src"])
        assert result.exit_code == 0
        assert "no ruby source files" in result.output.lower()

    def test_invalid_jobs(self, tmp_path: Path) -> None:
        (tmp_path / "a.rb").write_text("A = 1\n", encoding="utf-8")
        result = runner.invoke(app, ["tags", "a.rb", "-j", "0"])
        assert result.exit_code == 2


class TestShow:
    def test_show_lists_definitions(self, tmp_path: Path) -> None:
        (tmp_path / "c.rb").write_text(
            "class C\n  attr_reader :size\n  def self.make; end\nend\n", encoding="utf-8"
        )
        result = runner.invoke(app, ["show", "c.rb"])
        assert result.exit_code == 0
        assert "size" in result.output
        assert "make" in result.output
        assert "3" in result.output

    def test_show_missing_file(self) -> None:
        result = runner.invoke(app, ["show", "nope.rb"])
        assert result.exit_code == 1


class TestVersion:
    def test_version(self) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output
