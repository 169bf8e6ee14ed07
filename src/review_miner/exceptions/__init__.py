"""Exception hierarchy for Review Miner."""

from .analysis import AnalysisError, InvalidDateError
from .base import ReviewMinerError
from .config import ConfigurationError, InvalidConfigError
from .extraction import GitNotFoundError, GitQueryError

__all__ = [
    "ReviewMinerError",
    "AnalysisError",
    "InvalidDateError",
    "ConfigurationError",
    "InvalidConfigError",
    "GitQueryError",
    "GitNotFoundError",
]
