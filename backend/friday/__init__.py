"""FRIDAY leaderboard API: score submissions, rankings and backups."""

__version__ = "1.0.0"
__author__ = "FRIDAY Team"

__all__ = ["__version__", "__author__"]
