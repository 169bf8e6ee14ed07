"""
Review Miner - contributor history mining for engineering reviews

Reads one author's git history over a date window and derives pull-request
groups, complexity tiers, inactivity gaps, and bug-pattern signals.
"""

__version__ = "0.3.0"

from .pipeline import MiningResult, ReviewMiner, mine

__all__ = [
    "mine",  # Main entry point
    "ReviewMiner",  # Advanced usage (custom history sources)
    "MiningResult",
]
