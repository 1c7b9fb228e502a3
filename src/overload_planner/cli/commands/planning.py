"""Planning command: recommend."""

import json
from typing import Annotated, Optional

import typer

from ...core.models import GOALS, WEIGHT_UNITS, RecommendationOptions
from ...core.rules import load_progression_rules
from ...io.serializers import ValidationError, format_datetime, recommendation_to_dict
from ...service import get_workout_recommendations
from .. import views
from ..app import JsonOption, LogDirOption, app, require_store


@app.command()
def recommend(
    exercise_ids: Annotated[list[str], typer.Argument(help="Exercise ids to prescribe")],
    goal: Annotated[
        Optional[str],
        typer.Option("--goal", "-g", help="STRENGTH | HYPERTROPHY | ENDURANCE (default: profile)"),
    ] = None,
    unit: Annotated[
        Optional[str],
        typer.Option("--unit", help="kg | lbs (default: profile)"),
    ] = None,
    warmup: Annotated[
        bool,
        typer.Option("--warmup/--no-warmup", help="Include warm-up sets for weighted exercises"),
    ] = True,
    workouts: Annotated[
        int,
        typer.Option("--workouts", "-w", help="Recent workouts to analyse (1-5)"),
    ] = 3,
    threshold: Annotated[
        int,
        typer.Option("--threshold", help="Sessions in a row needed to change load (1-4)"),
    ] = 2,
    fallback_muscle: Annotated[
        Optional[list[str]],
        typer.Option("--fallback-muscle", help="Muscle to assume when an exercise has none"),
    ] = None,
    user_id: Annotated[
        Optional[str],
        typer.Option("--user-id", "-u", help="Request as this user (default: profile owner)"),
    ] = None,
    json_out: JsonOption = False,
    log_dir: LogDirOption = None,
) -> None:
    """
    Recommend the next session for one or more exercises.

      overload-planner recommend bench_press squat --goal STRENGTH --unit kg
    """
    store = require_store(log_dir)

    try:
        profile = store.load_profile()
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    goal = (goal or profile.goal).upper()
    unit = unit or profile.preferred_unit
    if goal not in GOALS:
        views.print_error(f"Goal must be one of: {', '.join(GOALS)}")
        raise typer.Exit(1)
    if unit not in WEIGHT_UNITS:
        views.print_error(f"Unit must be one of: {', '.join(WEIGHT_UNITS)}")
        raise typer.Exit(1)

    options = RecommendationOptions(
        goal=goal,  # type: ignore[arg-type]
        preferred_unit=unit,  # type: ignore[arg-type]
        include_warmup_sets=warmup,
        analysis_workout_count=workouts,
        success_streak_threshold=threshold,
    )

    result = get_workout_recommendations(
        store,
        user_id=profile.user_id,
        session_user_id=user_id or profile.user_id,
        exercise_ids=exercise_ids,
        options=options,
        fallback_muscles=[m.upper() for m in fallback_muscle or []],
        rules=load_progression_rules(),
    )

    if result.data is None:
        views.print_error(result.server_error or "Unknown error")
        raise typer.Exit(1)

    data = result.data

    if json_out:
        payload = {
            "recommendations": {
                ex_id: recommendation_to_dict(rec) for ex_id, rec in data.recommendations.items()
            },
            "meta": {
                "goal": data.goal,
                "preferred_unit": data.preferred_unit,
                "analysis_workout_count": data.analysis_workout_count,
                "generated_at": format_datetime(data.generated_at) if data.generated_at else None,
            },
        }
        print(json.dumps(payload, indent=2))
        return

    exercises = store.load_exercises()
    for ex_id in exercise_ids:
        if ex_id not in data.recommendations:
            views.print_warning(f"Unknown exercise skipped: {ex_id}")
            continue
        views.print_recommendation(exercises.get(ex_id), data.recommendations[ex_id])
