"""Configuration management for rubytags.

Settings are loaded from three sources in order of priority:
1. Environment variables (highest priority)
2. Project-level config: .rubytags.toml
3. Global config: ~/.config/rubytags/config.toml (lowest priority)

Command-line options are applied on top by the CLI.
"""

from __future__ import annotations

import codecs
import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from rich.console import Console

from rubytags.exceptions import ConfigError

console = Console(stderr=True)

_GLOBAL_CONFIG_DIR = Path.home() / ".config" / "rubytags"
_GLOBAL_CONFIG_PATH = _GLOBAL_CONFIG_DIR / "config.toml"
_PROJECT_CONFIG_NAME = ".rubytags.toml"

_LOG_LEVELS: frozenset[str] = frozenset({"DEBUG", "INFO", "WARNING", "ERROR"})


@dataclass
class TagsConfig:
    """rubytags configuration.

    Attributes:
        project_dir: Directory whose config file is consulted.
        accessor_prefixes: Call-name prefixes that declare accessor methods.
        encoding: Encoding used to decode source files.
        jobs: Number of files indexed concurrently in directory mode.
        log_level: Verbosity (DEBUG, INFO, WARNING, ERROR).
        max_file_size: Files larger than this many bytes are skipped when scanning.
        extensions: File suffixes treated as Ruby source.
        filenames: Extension-less file names treated as Ruby source.
    """

    project_dir: Path = field(default_factory=Path.cwd)
    accessor_prefixes: tuple[str, ...] = ("attr_",)
    encoding: str = "utf-8"
    jobs: int = 1
    log_level: str = "INFO"
    max_file_size: int = 1_048_576
    extensions: frozenset[str] = frozenset({".rb", ".rake", ".gemspec", ".ru"})
    filenames: frozenset[str] = frozenset({"Rakefile", "Gemfile", "Guardfile", "Vagrantfile"})

    @property
    def debug(self) -> bool:
        return self.log_level == "DEBUG"


def load_config(project_dir: Path) -> TagsConfig:
    """Load configuration from env vars, project config, and global config.

    Priority: env vars > .rubytags.toml > ~/.config/rubytags/config.toml

    Args:
        project_dir: Directory containing the project config file.

    Returns:
        A fully resolved and validated TagsConfig instance.

    Raises:
        ConfigError: If any setting has an invalid value.
    """
    config = TagsConfig(project_dir=project_dir)

    # Layer 1: Global config (lowest priority)
    _apply_toml(config, _load_toml(_GLOBAL_CONFIG_PATH))

    # Layer 2: Project config
    _apply_toml(config, _load_toml(project_dir / _PROJECT_CONFIG_NAME))

    # Layer 3: Environment variables (highest priority)
    _apply_env(config)

    validate_config(config)
    return config


def validate_config(config: TagsConfig) -> None:
    """Check value ranges and names.

    Raises:
        ConfigError: On the first invalid setting.
    """
    if config.jobs < 1:
        raise ConfigError(f"jobs must be at least 1, got {config.jobs}")
    if config.max_file_size < 1:
        raise ConfigError(f"max_file_size must be positive, got {config.max_file_size}")
    if config.log_level not in _LOG_LEVELS:
        raise ConfigError(
            f"Unknown log_level {config.log_level!r}; expected one of {sorted(_LOG_LEVELS)}"
        )
    try:
        codecs.lookup(config.encoding)
    except LookupError as exc:
        raise ConfigError(f"Unknown encoding {config.encoding!r}") from exc
    if any(not prefix for prefix in config.accessor_prefixes):
        raise ConfigError("accessor_prefixes must not contain empty strings")


def _load_toml(path: Path) -> dict[str, Any]:
    """Load a TOML file, returning an empty dict if missing or invalid."""
    if not path.is_file():
        return {}
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except (tomllib.TOMLDecodeError, OSError) as exc:
        console.print(f"[yellow]Warning:[/yellow] Could not parse {path}: {exc}")
        return {}


def _apply_toml(config: TagsConfig, settings: dict[str, Any]) -> None:
    """Merge TOML settings into a TagsConfig."""
    try:
        if "accessor_prefixes" in settings:
            config.accessor_prefixes = _as_tuple(settings["accessor_prefixes"])
        if "encoding" in settings:
            config.encoding = str(settings["encoding"])
        if "jobs" in settings:
            config.jobs = int(settings["jobs"])
        if "log_level" in settings:
            config.log_level = str(settings["log_level"]).upper()
        if "max_file_size" in settings:
            config.max_file_size = int(settings["max_file_size"])
        if "extensions" in settings:
            suffixes = _as_tuple(settings["extensions"])
            config.extensions = frozenset(_normalize_suffix(s) for s in suffixes)
        if "filenames" in settings:
            config.filenames = frozenset(_as_tuple(settings["filenames"]))
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid configuration value: {exc}") from exc


def _apply_env(config: TagsConfig) -> None:
    """Override config with environment variables where set."""
    try:
        if prefixes := os.environ.get("RUBYTAGS_ACCESSOR_PREFIXES"):
            config.accessor_prefixes = _as_tuple(prefixes)
        if encoding := os.environ.get("RUBYTAGS_ENCODING"):
            config.encoding = encoding
        if jobs := os.environ.get("RUBYTAGS_JOBS"):
            config.jobs = int(jobs)
        if log_level := os.environ.get("RUBYTAGS_LOG_LEVEL"):
            config.log_level = log_level.upper()
        if max_size := os.environ.get("RUBYTAGS_MAX_FILE_SIZE"):
            config.max_file_size = int(max_size)
    except ValueError as exc:
        raise ConfigError(f"Invalid environment setting: {exc}") from exc


def _as_tuple(value: Any) -> tuple[str, ...]:
    """Accept a TOML list or a comma-separated string."""
    if isinstance(value, str):
        return tuple(part.strip() for part in value.split(",") if part.strip())
    if isinstance(value, list):
        return tuple(str(item) for item in value)
    raise TypeError(f"expected a list or comma-separated string, got {type(value).__name__}")


def _normalize_suffix(suffix: str) -> str:
    suffix = suffix.lower()
    return suffix if suffix.startswith(".") else f".{suffix}"
