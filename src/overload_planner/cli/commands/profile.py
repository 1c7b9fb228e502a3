"""Profile commands: init, add-exercise."""

from typing import Annotated, Optional

import typer

from ...core.equipment import normalize_attribute
from ...core.models import ATTRIBUTE_NAMES, GOALS, WEIGHT_UNITS, Exercise, UserProfile
from ...io.serializers import ValidationError
from .. import views
from ..app import LogDirOption, app, get_store, require_store


@app.command()
def init(
    user_id: Annotated[
        str,
        typer.Option("--user-id", "-u", help="Owner of this training log"),
    ],
    unit: Annotated[
        str,
        typer.Option("--unit", help="Preferred weight unit: kg | lbs"),
    ] = "lbs",
    goal: Annotated[
        str,
        typer.Option("--goal", "-g", help="Training goal: STRENGTH | HYPERTROPHY | ENDURANCE"),
    ] = "HYPERTROPHY",
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Overwrite an existing profile"),
    ] = False,
    log_dir: LogDirOption = None,
) -> None:
    """
    Initialize the training log and user profile.

    Existing exercises and sets are kept; only the profile is (re)written.
    """
    goal = goal.upper()
    if unit not in WEIGHT_UNITS:
        views.print_error(f"Unit must be one of: {', '.join(WEIGHT_UNITS)}")
        raise typer.Exit(1)
    if goal not in GOALS:
        views.print_error(f"Goal must be one of: {', '.join(GOALS)}")
        raise typer.Exit(1)

    store = get_store(log_dir)
    if store.profile_path.exists() and not force:
        views.print_error(f"Profile already exists: {store.profile_path}")
        views.print_info("Use --force to overwrite it.")
        raise typer.Exit(1)

    try:
        profile = UserProfile(user_id=user_id, preferred_unit=unit, goal=goal)  # type: ignore[arg-type]
    except ValueError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    store.init(profile)
    views.print_success(f"Initialized training log at {store.log_dir}")
    views.print_info(f"User {profile.user_id}, goal {profile.goal}, unit {profile.preferred_unit}")


@app.command("add-exercise")
def add_exercise(
    exercise_id: Annotated[str, typer.Argument(help="Exercise identifier, e.g. bench_press")],
    name: Annotated[
        Optional[str],
        typer.Option("--name", "-n", help="Display name (default: the id)"),
    ] = None,
    primary: Annotated[
        Optional[str],
        typer.Option("--primary", help="Primary muscle, e.g. CHEST"),
    ] = None,
    secondary: Annotated[
        Optional[list[str]],
        typer.Option("--secondary", help="Secondary muscle (repeatable)"),
    ] = None,
    equipment: Annotated[
        Optional[str],
        typer.Option("--equipment", "-e", help="Equipment, e.g. BARBELL, DUMBBELL, BODY_ONLY"),
    ] = None,
    exercise_type: Annotated[
        Optional[str],
        typer.Option("--type", "-t", help="Exercise type, e.g. STRENGTH, CARDIO, BODYWEIGHT"),
    ] = None,
    attribute: Annotated[
        Optional[list[str]],
        typer.Option("--attribute", "-a", help="Extra attribute as NAME=VALUE (repeatable)"),
    ] = None,
    log_dir: LogDirOption = None,
) -> None:
    """
    Add or replace an exercise in the catalog.

      overload-planner add-exercise bench_press --name "Bench Press" \\
        --primary CHEST --secondary TRICEPS --secondary SHOULDERS --equipment BARBELL
    """
    store = require_store(log_dir)

    pairs: list[tuple[str, str]] = []
    if primary:
        pairs.append(("PRIMARY_MUSCLE", primary))
    for muscle in secondary or []:
        pairs.append(("SECONDARY_MUSCLE", muscle))
    if equipment:
        pairs.append(("EQUIPMENT", equipment))
    if exercise_type:
        pairs.append(("TYPE", exercise_type))
    for raw in attribute or []:
        attr_name, sep, attr_value = raw.partition("=")
        if not sep or not attr_value.strip():
            views.print_error(f"Invalid attribute {raw!r}. Expected NAME=VALUE")
            raise typer.Exit(1)
        pairs.append((attr_name, attr_value))

    attributes = tuple(normalize_attribute(pair) for pair in pairs)
    for a in attributes:
        if a.name not in ATTRIBUTE_NAMES:
            views.print_error(f"Unknown attribute name {a.name!r}. Must be one of {ATTRIBUTE_NAMES}")
            raise typer.Exit(1)

    exercise = Exercise(exercise_id=exercise_id, name=name or exercise_id, attributes=attributes)
    try:
        store.upsert_exercise(exercise)
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    views.print_success(f"Saved exercise {exercise_id} ({len(attributes)} attributes)")
