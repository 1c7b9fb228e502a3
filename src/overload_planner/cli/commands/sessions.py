"""Session commands: log-session, last."""

import json
import uuid
from datetime import datetime, timezone
from typing import Annotated, Optional

import typer

from ...core.models import HistoricalSet
from ...core.muscle_progress import last_performance
from ...io.serializers import (
    ValidationError,
    last_performance_to_dict,
    parse_datetime,
    parse_sets_string,
)
from .. import views
from ..app import JsonOption, LogDirOption, app, require_store


@app.command("log-session")
def log_session(
    exercise_id: Annotated[str, typer.Argument(help="Exercise id from the catalog")],
    sets: Annotated[
        str,
        typer.Option(
            "--sets", "-s",
            help="Sets: REPS[xN][@WEIGHT][/TYPE] or NNs, e.g. 60@40/w,8x3@60",
        ),
    ],
    started_at: Annotated[
        Optional[str],
        typer.Option("--date", help="Session start (ISO date or timestamp, default: now)"),
    ] = None,
    session_id: Annotated[
        Optional[str],
        typer.Option("--session-id", help="Workout session id (default: new id)"),
    ] = None,
    unit: Annotated[
        Optional[str],
        typer.Option("--unit", help="Unit of the logged weights (default: profile unit)"),
    ] = None,
    log_dir: LogDirOption = None,
) -> None:
    """
    Log the completed sets of one exercise in a workout session.

      overload-planner log-session bench_press --date 2026-02-18 \\
        --sets "12@40/w,8x3@60"

    Reusing --session-id adds sets to an existing session; set indices
    continue after the ones already logged.
    """
    store = require_store(log_dir)

    try:
        profile = store.load_profile()
        exercises = store.load_exercises()
        parsed = parse_sets_string(sets)
        history = store.load_sets()
        when = parse_datetime(started_at) if started_at else datetime.now(timezone.utc)
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if exercise_id not in exercises:
        views.print_error(f"Unknown exercise: {exercise_id}")
        views.print_info("Add it first with 'add-exercise'.")
        raise typer.Exit(1)

    weight_unit = unit or profile.preferred_unit
    if session_id is None:
        session_id = uuid.uuid4().hex[:12]

    existing = [
        s for s in history
        if s.workout_session_id == session_id and s.exercise_id == exercise_id
    ]
    if existing:
        when = existing[0].started_at
    first_index = max((s.set_index for s in existing), default=-1) + 1

    try:
        new_sets = [
            HistoricalSet(
                workout_session_id=session_id,
                started_at=when,
                set_index=first_index + offset,
                type=p.type,  # type: ignore[arg-type]
                reps=p.reps,
                weight=p.weight,
                weight_unit=weight_unit if p.weight is not None else None,  # type: ignore[arg-type]
                duration_sec=p.duration_sec,
                exercise_id=exercise_id,
            )
            for offset, p in enumerate(parsed)
        ]
    except ValueError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    store.append_sets(new_sets)
    views.print_success(f"Logged {len(new_sets)} set(s) of {exercise_id} in session {session_id}")


@app.command()
def last(
    exercise_id: Annotated[str, typer.Argument(help="Exercise id from the catalog")],
    json_out: JsonOption = False,
    log_dir: LogDirOption = None,
) -> None:
    """
    Show the last logged set of an exercise.
    """
    store = require_store(log_dir)

    try:
        history = store.load_sets()
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    perf = last_performance(history, exercise_id)

    if json_out:
        print(json.dumps(last_performance_to_dict(perf) if perf else None, indent=2))
        return

    if perf is None:
        views.print_info(f"No sets logged for {exercise_id} yet.")
        return

    views.print_last_performance(perf)
