"""
CLI entry point using Typer.

Provides commands for the training log and recommendations:
- init: Initialize the profile and log directory
- add-exercise: Add an exercise to the catalog
- log-session: Log completed sets of an exercise
- recommend: Prescribe the next session
- muscles: Weekly muscle workload and fatigue status
- volume: Weekly training volume
- last: Last logged set of an exercise
"""

from .app import app
from .commands import analysis, planning, profile, sessions  # noqa: F401  (registers commands)

__all__ = ["app"]


if __name__ == "__main__":
    app()
