"""Service module exports."""

from . import habits, ledger, progress, stats, streaks

__all__ = ["habits", "ledger", "progress", "stats", "streaks"]
