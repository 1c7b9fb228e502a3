"""Shared Typer app object, shared option types, and store utility."""

from pathlib import Path
from typing import Annotated, Optional

import typer

from ..io.history_store import TrainingLogStore, get_default_store
from . import views

# Shared --log-dir option type used across all commands
LogDirOption = Annotated[
    Optional[Path],
    typer.Option("--log-dir", "-d", help="Training log directory (default: ~/.overload-planner)"),
]

JsonOption = Annotated[
    bool,
    typer.Option("--json", "-j", help="Output as JSON for machine processing"),
]

app = typer.Typer(
    name="overload-planner",
    help="Progressive-overload recommendations for strength training sessions.",
    no_args_is_help=True,
)


def get_store(log_dir: Path | None) -> TrainingLogStore:
    """Get the training log store from a path or the default location."""
    if log_dir is None:
        return get_default_store()
    return TrainingLogStore(log_dir)


def require_store(log_dir: Path | None) -> TrainingLogStore:
    """Return an initialized store or exit with an error."""
    store = get_store(log_dir)
    if not store.exists():
        views.print_error(f"Training log not found: {store.log_dir}")
        views.print_info("Run 'init' first to create the profile and log.")
        raise typer.Exit(1)
    return store
