"""Shared CLI helpers."""

from pathlib import Path
from typing import Optional

from rich.console import Console

from ..config import MinerConfig, load_config

console = Console()


def resolve_config(
    config: Optional[Path] = None,
    min_lines: Optional[int] = None,
    min_gap_days: Optional[int] = None,
    keywords: Optional[list[str]] = None,
    bug_keywords: Optional[list[str]] = None,
    no_hotfix: bool = False,
    workers: Optional[int] = None,
    verbose: bool = False,
) -> MinerConfig:
    """Build config from CLI options; unset options fall through to files/env."""
    overrides: dict = {
        "min_lines": min_lines,
        "min_gap_days": min_gap_days,
        "workers": workers,
    }
    if keywords:
        overrides["major_pr_keywords"] = list(keywords)
    if bug_keywords:
        overrides["bug_keywords"] = list(bug_keywords)
    if no_hotfix:
        overrides["detect_hotfixes"] = False
    if verbose:
        overrides["verbose"] = True
    return load_config(config_file=config, **overrides)
