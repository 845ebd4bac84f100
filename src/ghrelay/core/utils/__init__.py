"""
Shared utilities for logging and pattern matching.
"""

from ghrelay.core.utils.logging import configure_logging, log_operation
from ghrelay.core.utils.patterns import first_line, matches_glob, shorten

__all__ = [
    "configure_logging",
    "first_line",
    "log_operation",
    "matches_glob",
    "shorten",
]
