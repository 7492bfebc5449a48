"""Configuration loading and management for repo-miner.

Configuration sources are merged in priority order:
    1. Defaults (defined in MinerConfig)
    2. Project config (./repo-miner.toml)
    3. Explicit config file
    4. Environment variables (REPO_MINER_* prefix)
    5. Keyword overrides (typically CLI flags)

Example:
    >>> config = load_config(fail_fast=True)
    >>> config.fail_fast
    True
    >>> config.brain_method.mloc
    65
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Optional, get_type_hints

from .exceptions import ConfigurationError, InvalidConfigError

PROJECT_CONFIG_NAME = "repo-miner.toml"
ENV_PREFIX = "REPO_MINER_"


def _require_non_negative(obj: Any) -> None:
    for f in fields(obj):
        value = getattr(obj, f.name)
        if value < 0:
            raise InvalidConfigError(
                f"{type(obj).__name__}.{f.name}", value, "must be non-negative"
            )


@dataclass(frozen=True)
class BrainMethodThresholds:
    """Thresholds for the Brain Method smell.

    A method is flagged when:
        MLOC > mloc / 2 AND CYCLO >= cc AND MAXNESTING >= max_nesting AND NOAV > noav

    Attributes:
        mloc: Method lines threshold; halved (integer division) before comparison
        cc: Minimum cyclomatic complexity
        max_nesting: Minimum nesting depth
        noav: NOAV must exceed this
    """

    mloc: int = 65
    cc: float = 10
    max_nesting: int = 5
    noav: int = 5

    def __post_init__(self) -> None:
        _require_non_negative(self)


@dataclass(frozen=True)
class ComplexMethodThresholds:
    """Thresholds for the Complex Method smell (CYCLO >= cc)."""

    cc: float = 10

    def __post_init__(self) -> None:
        _require_non_negative(self)


@dataclass(frozen=True)
class LongMethodThresholds:
    """Thresholds for the Long Method smell (MLOC > mloc)."""

    mloc: int = 65

    def __post_init__(self) -> None:
        _require_non_negative(self)


_THRESHOLD_SECTIONS: dict[str, type] = {
    "brain_method": BrainMethodThresholds,
    "complex_method": ComplexMethodThresholds,
    "long_method": LongMethodThresholds,
}


@dataclass(frozen=True)
class MinerConfig:
    """Configuration for a mining run.

    Attributes:
        Git integration:
            binary_file_threshold: Changed content in bytes (added plus removed
                lines) above which a change is treated as binary and excluded
                from line counting (0 disables)
            git_timeout_seconds: Timeout for each git subprocess call

        Orchestration:
            fail_fast: Re-raise the first per-commit failure instead of skipping
            include_smells: Run smell detectors after metrics

        Source filtering:
            exclude_patterns: Glob patterns skipped by the source AST provider

        Smell thresholds:
            brain_method, complex_method, long_method
    """

    # Git integration
    binary_file_threshold: int = 2048
    git_timeout_seconds: int = 120

    # Orchestration
    fail_fast: bool = False
    include_smells: bool = True

    # Source filtering
    exclude_patterns: list[str] = field(
        default_factory=lambda: [
            "venv/*",
            ".venv/*",
            "__pycache__/*",
            "node_modules/*",
            "build/*",
            "dist/*",
            "*.egg-info/*",
        ]
    )

    # Smell thresholds (nested config)
    brain_method: BrainMethodThresholds = field(default_factory=BrainMethodThresholds)
    complex_method: ComplexMethodThresholds = field(default_factory=ComplexMethodThresholds)
    long_method: LongMethodThresholds = field(default_factory=LongMethodThresholds)

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.binary_file_threshold < 0:
            raise InvalidConfigError(
                "binary_file_threshold", self.binary_file_threshold, "must be non-negative"
            )
        if self.git_timeout_seconds < 1:
            raise InvalidConfigError(
                "git_timeout_seconds", self.git_timeout_seconds, "must be at least 1"
            )

    def thresholds_dict(self) -> dict[str, dict[str, Any]]:
        """All smell thresholds, keyed by section name."""
        return {name: asdict(getattr(self, name)) for name in _THRESHOLD_SECTIONS}


DEFAULT_CONFIG = MinerConfig()


def load_config(config_file: Optional[Path] = None, **overrides: Any) -> MinerConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        **overrides: Direct overrides (typically from CLI flags). ``None``
            values are ignored so unset CLI options fall through.

    Returns:
        Validated MinerConfig instance

    Raises:
        ConfigurationError: If a config file is invalid or missing
        InvalidConfigError: If a value or key is invalid
    """
    merged: dict[str, Any] = {}

    project_config = Path.cwd() / PROJECT_CONFIG_NAME
    if project_config.exists():
        _merge(merged, _load_toml_file(project_config))

    if config_file is not None:
        if not config_file.exists():
            raise ConfigurationError(f"Config file not found: {config_file}")
        _merge(merged, _load_toml_file(config_file))

    _merge(merged, _load_env_vars())
    _merge(merged, {k: v for k, v in overrides.items() if v is not None})

    for section, cls in _THRESHOLD_SECTIONS.items():
        raw = merged.pop(section, None)
        if raw is None:
            continue
        if isinstance(raw, cls):
            merged[section] = raw
            continue
        if not isinstance(raw, dict):
            raise InvalidConfigError(section, raw, "expected a table")
        try:
            merged[section] = cls(**raw)
        except TypeError as e:
            raise InvalidConfigError(section, raw, str(e))

    known = {f.name for f in fields(MinerConfig)}
    for key in merged:
        if key not in known:
            raise InvalidConfigError(key, merged[key], "unknown configuration key")

    return MinerConfig(**merged)


def _merge(target: dict[str, Any], source: dict[str, Any]) -> None:
    """Merge source into target; threshold tables are merged key by key."""
    for key, value in source.items():
        if key in _THRESHOLD_SECTIONS and isinstance(value, dict):
            existing = target.get(key)
            if isinstance(existing, dict):
                target[key] = {**existing, **value}
                continue
        target[key] = value


def _load_env_vars() -> dict[str, Any]:
    """Load scalar settings from REPO_MINER_* environment variables.

    Supported: REPO_MINER_BINARY_FILE_THRESHOLD, REPO_MINER_GIT_TIMEOUT_SECONDS,
    REPO_MINER_FAIL_FAST, REPO_MINER_INCLUDE_SMELLS.
    """
    type_hints = get_type_hints(MinerConfig)
    result: dict[str, Any] = {}

    for name, hint in type_hints.items():
        if hint not in (bool, int, float, str):
            continue
        env_key = f"{ENV_PREFIX}{name.upper()}"
        env_value = os.environ.get(env_key)
        if env_value is None:
            continue
        try:
            result[name] = _parse_env_value(env_value, hint)
        except ValueError as e:
            raise InvalidConfigError(env_key, env_value, str(e))

    return result


def _parse_env_value(value: str, type_hint: type) -> Any:
    """Parse environment variable string to the annotated type."""
    if type_hint is bool:
        lower = value.lower()
        if lower in ("true", "1", "yes", "on"):
            return True
        if lower in ("false", "0", "no", "off"):
            return False
        raise ValueError(f"expected true/false, got '{value}'")
    return type_hint(value)


def _load_toml_file(path: Path) -> dict[str, Any]:
    """Load TOML file and return parsed dict."""
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigurationError(f"Invalid config file '{path}': {e}")
