"""Analysis commands: muscles, volume."""

import json
from datetime import datetime, timezone
from typing import Annotated, Optional

import typer

from ...core.config import DEFAULT_PROGRESS_WEEKS
from ...core.models import GOALS, WEIGHT_UNITS
from ...core.muscle_progress import aggregate_muscle_progress, aggregate_weekly_volume, filter_recent
from ...core.rules import load_progression_rules
from ...io.serializers import ValidationError, muscle_progress_to_dict, weekly_volume_to_dict
from .. import views
from ..app import JsonOption, LogDirOption, app, require_store

WeeksOption = Annotated[
    int,
    typer.Option("--weeks", "-w", help="Number of weeks to include"),
]


@app.command()
def muscles(
    goal: Annotated[
        Optional[str],
        typer.Option("--goal", "-g", help="STRENGTH | HYPERTROPHY | ENDURANCE (default: profile)"),
    ] = None,
    unit: Annotated[
        Optional[str],
        typer.Option("--unit", help="Volume unit: kg | lbs (default: profile)"),
    ] = None,
    weeks: WeeksOption = DEFAULT_PROGRESS_WEEKS,
    json_out: JsonOption = False,
    log_dir: LogDirOption = None,
) -> None:
    """
    Show weekly effective sets and fatigue status per muscle.
    """
    store = require_store(log_dir)

    try:
        profile = store.load_profile()
        exercises = store.load_exercises()
        history = store.load_sets()
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    goal = (goal or profile.goal).upper()
    unit = unit or profile.preferred_unit
    if goal not in GOALS or unit not in WEIGHT_UNITS:
        views.print_error(f"Goal must be one of {GOALS} and unit one of {WEIGHT_UNITS}")
        raise typer.Exit(1)
    if weeks < 1:
        views.print_error("Weeks must be at least 1")
        raise typer.Exit(1)

    now = datetime.now(timezone.utc)
    rules = load_progression_rules()
    points = aggregate_muscle_progress(
        filter_recent(history, weeks, now),
        exercises,
        goal=goal,
        target_unit=unit,
        now=now,
        targets=rules.muscle_set_targets[goal],
    )

    if json_out:
        print(json.dumps({"muscles": [muscle_progress_to_dict(p) for p in points]}, indent=2))
        return

    if not points:
        views.print_info("No working sets logged in this period.")
        return

    views.console.print(views.format_muscle_table(points))


@app.command()
def volume(
    unit: Annotated[
        str,
        typer.Option("--unit", help="Volume unit: kg | lbs"),
    ] = "kg",
    weeks: WeeksOption = DEFAULT_PROGRESS_WEEKS,
    json_out: JsonOption = False,
    log_dir: LogDirOption = None,
) -> None:
    """
    Show total training volume per week.
    """
    store = require_store(log_dir)

    if unit not in WEIGHT_UNITS:
        views.print_error(f"Unit must be one of: {', '.join(WEIGHT_UNITS)}")
        raise typer.Exit(1)

    try:
        history = store.load_sets()
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    points = aggregate_weekly_volume(filter_recent(history, weeks), target_unit=unit)

    if json_out:
        print(json.dumps({"weeks": [weekly_volume_to_dict(p) for p in points]}, indent=2))
        return

    if not points:
        views.print_info("No sets logged in this period.")
        return

    views.console.print(views.format_volume_table(points, unit))
