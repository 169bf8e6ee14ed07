"""Configuration loading and management for Review Miner.

Configuration sources are merged in priority order:
    1. Defaults (defined in MinerConfig)
    2. Global config (~/.review-miner.toml)
    3. Project config (./review-miner.toml)
    4. Explicit config file
    5. Environment variables (REVIEW_MINER_* prefix)
    6. CLI overrides (passed as kwargs)

Example:
    >>> config = load_config(min_lines=250)
    >>> config.min_lines
    250
    >>> config.thresholds.recurring_category
    3
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal, Optional, get_type_hints

from .analysis.bug_patterns import DEFAULT_BUG_KEYWORDS, DEFAULT_RELEASE_PATTERN, RedFlagThresholds
from .exceptions import ConfigurationError, InvalidConfigError

Verbosity = Literal["quiet", "normal", "verbose"]

ENV_PREFIX = "REVIEW_MINER_"
CONFIG_FILENAME = "review-miner.toml"


@dataclass(frozen=True)
class MinerConfig:
    """Tuning for a mining run.

    The author and date window are per-run arguments, not configuration.

    Attributes:
        Pull requests:
            min_lines: Lines changed for a PR to count as major
            major_pr_keywords: Title keywords that make a PR major regardless of size
            pr_patterns: Extra PR-number regexes tried after the built-in rule
            include_github_merges: Also recognise "Merge pull request #N"

        Activity:
            min_gap_days: Shortest inactivity span reported as a gap

        Bug patterns:
            bug_keywords: Message substrings marking a commit as bug-related
            detect_hotfixes: Query release-branch containment per bug commit
            release_branch_pattern: Regex identifying release branches
            hot_file_limit: Number of most-fixed files to report

        Execution:
            workers: Threads for branch-containment queries
            git_timeout_seconds: Timeout for each git invocation
            verbosity: Logging verbosity level
    """

    # Pull requests
    min_lines: int = 100
    major_pr_keywords: list[str] = field(default_factory=list)
    pr_patterns: list[str] = field(default_factory=list)
    include_github_merges: bool = False

    # Activity
    min_gap_days: int = 14

    # Bug patterns
    bug_keywords: list[str] = field(default_factory=lambda: list(DEFAULT_BUG_KEYWORDS))
    detect_hotfixes: bool = True
    release_branch_pattern: str = DEFAULT_RELEASE_PATTERN
    hot_file_limit: int = 10

    # Execution
    workers: int = 1
    git_timeout_seconds: int = 60
    verbosity: Verbosity = "normal"

    # Red-flag thresholds (nested config)
    thresholds: RedFlagThresholds = field(default_factory=RedFlagThresholds)

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.min_lines < 0:
            raise ValueError("min_lines must be non-negative")
        if self.min_gap_days < 1:
            raise ValueError("min_gap_days must be at least 1")
        if not any(kw.strip() for kw in self.bug_keywords):
            raise ValueError("bug_keywords must contain at least one keyword")
        if self.hot_file_limit < 0:
            raise ValueError("hot_file_limit must be non-negative")
        if self.workers < 1:
            raise ValueError("workers must be at least 1")
        if self.git_timeout_seconds < 1:
            raise ValueError("git_timeout_seconds must be at least 1")
        if self.verbosity not in ("quiet", "normal", "verbose"):
            raise ValueError("verbosity must be one of quiet, normal, verbose")

        for pattern in [self.release_branch_pattern, *self.pr_patterns]:
            try:
                re.compile(pattern)
            except re.error as e:
                raise ValueError(f"invalid regex {pattern!r}: {e}")


def load_config(config_file: Optional[Path] = None, **overrides) -> MinerConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        **overrides: Direct overrides (typically from CLI flags). ``None``
            values are ignored so unset CLI options fall through.

    Returns:
        Validated MinerConfig instance

    Raises:
        ConfigurationError: If a config file or value is invalid
    """
    merged: dict = {}

    global_config = Path.home() / f".{CONFIG_FILENAME}"
    if global_config.exists():
        merged.update(_load_toml_section(global_config))

    project_config = Path.cwd() / CONFIG_FILENAME
    if project_config.exists():
        merged.update(_load_toml_section(project_config))

    if config_file is not None:
        if not config_file.exists():
            raise ConfigurationError(f"Config file not found: {config_file}")
        merged.update(_load_toml_section(config_file))

    merged.update(_load_env_vars())

    if overrides.pop("verbose", False):
        overrides["verbosity"] = "verbose"
    if overrides.pop("quiet", False):
        overrides["verbosity"] = "quiet"

    merged.update({k: v for k, v in overrides.items() if v is not None})

    # [thresholds] table from TOML
    thresholds = merged.pop("thresholds", None)
    if isinstance(thresholds, dict):
        try:
            merged["thresholds"] = RedFlagThresholds(**thresholds)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid [thresholds] config: {e}")
    elif isinstance(thresholds, RedFlagThresholds):
        merged["thresholds"] = thresholds

    try:
        return MinerConfig(**merged)
    except TypeError as e:
        # Unknown field
        raise ConfigurationError(f"Invalid configuration: {e}")
    except ValueError as e:
        raise ConfigurationError(str(e))


def _load_env_vars() -> dict[str, Any]:
    """Load configuration from REVIEW_MINER_* environment variables.

    Scalar fields only, e.g. REVIEW_MINER_MIN_LINES=250 or
    REVIEW_MINER_DETECT_HOTFIXES=false.
    """
    type_hints = get_type_hints(MinerConfig)
    result: dict[str, Any] = {}

    for field_name in MinerConfig.__dataclass_fields__:
        env_key = f"{ENV_PREFIX}{field_name.upper()}"
        env_value = os.environ.get(env_key)
        if env_value is None:
            continue

        type_hint = type_hints.get(field_name)
        if type_hint is None:
            continue

        try:
            parsed = _parse_env_value(env_value, type_hint)
        except ValueError as e:
            raise InvalidConfigError(env_key, env_value, str(e))
        if parsed is not None:
            result[field_name] = parsed

    return result


def _parse_env_value(value: str, type_hint: Any) -> Any:
    """Parse an environment string to the field's type; None if unsupported."""
    origin = getattr(type_hint, "__origin__", None)

    # Lists and nested configs are file-only
    if origin is list or type_hint is list or type_hint is RedFlagThresholds:
        return None

    if type_hint is bool:
        lower = value.lower()
        if lower in ("true", "1", "yes", "on"):
            return True
        if lower in ("false", "0", "no", "off"):
            return False
        raise ValueError(f"expected true/false, got '{value}'")

    if type_hint is int:
        return int(value)

    if type_hint is str or origin is Literal:
        return value

    return None


def _load_toml_section(path: Path) -> dict:
    """Read a TOML file; settings may sit at top level or under [review-miner]."""
    try:
        data = _load_toml_file(path)
    except ConfigurationError:
        raise
    except Exception as e:
        raise ConfigurationError(f"Invalid config file '{path}': {e}")
    section = data.get("review-miner")
    return dict(section) if isinstance(section, dict) else data


def _load_toml_file(path: Path) -> dict:
    try:
        # Python 3.11+ has tomllib in stdlib
        import tomllib
    except ModuleNotFoundError:
        try:
            import tomli as tomllib  # type: ignore
        except ImportError:
            raise ConfigurationError(
                "TOML support requires Python 3.11+ or 'tomli' package. "
                "Install with: pip install tomli"
            )

    with open(path, "rb") as f:
        return tomllib.load(f)
