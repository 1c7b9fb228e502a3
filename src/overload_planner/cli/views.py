"""
CLI view formatters using Rich for pretty console output.

Handles table formatting and display of recommendations and read models.
"""

from rich.console import Console
from rich.table import Table

from ..core.adaptation import format_number
from ..core.models import (
    Exercise,
    ExerciseRecommendation,
    LastPerformance,
    MuscleProgressPoint,
    WeeklyVolumePoint,
)

console = Console()

_STATUS_STYLE = {"LOW": "cyan", "TARGET": "green", "HIGH": "red"}


def _fmt_set_values(rec_set) -> str:
    parts: list[str] = []
    if rec_set.weight is not None:
        parts.append(f"{format_number(rec_set.weight)} {rec_set.units[0] if rec_set.units else ''}".strip())
    if rec_set.reps is not None:
        parts.append(f"× {rec_set.reps}" if parts else f"{rec_set.reps} reps")
    if rec_set.values_sec:
        parts.append(f"{rec_set.values_sec[0]} s")
    return " ".join(parts) or "-"


def format_recommendation_table(exercise: Exercise | None, rec: ExerciseRecommendation) -> Table:
    """
    Create a Rich table with the suggested sets for one exercise.

    Args:
        exercise: Catalog entry (for the title), or None
        rec: Recommendation to display

    Returns:
        Rich Table object
    """
    title = exercise.name if exercise is not None else rec.exercise_id
    table = Table(title=f"{title} ({rec.goal.lower()})")

    table.add_column("#", justify="right", style="dim", width=3)
    table.add_column("Type", style="magenta")
    table.add_column("Prescription", style="bold")

    for s in rec.sets:
        style = "dim" if s.type == "WARMUP" else None
        table.add_row(str(s.set_index + 1), s.type, _fmt_set_values(s), style=style)

    return table


def print_recommendation(exercise: Exercise | None, rec: ExerciseRecommendation) -> None:
    console.print(format_recommendation_table(exercise, rec))
    streaks = f"success streak {rec.success_streak}, failure streak {rec.failure_streak}"
    console.print(f"[dim]{streaks}[/dim]")
    console.print(f"[italic]{rec.reason}[/italic]")
    console.print()


def format_muscle_table(points: list[MuscleProgressPoint]) -> Table:
    """
    Create a Rich table of weekly muscle workload.

    Args:
        points: Aggregated muscle progress, already sorted

    Returns:
        Rich Table object
    """
    table = Table(title="Weekly Muscle Workload")

    table.add_column("Muscle", style="cyan")
    table.add_column("Status")
    table.add_column("Sets (wk)", justify="right", style="bold")
    table.add_column("Target", justify="right")
    table.add_column("Ratio", justify="right")
    table.add_column("Volume (wk)", justify="right")
    table.add_column("Top exercises")

    for p in points:
        style = _STATUS_STYLE.get(p.fatigue_status, "white")
        top = ", ".join(f"{e.exercise_name} ({format_number(e.effective_sets)})" for e in p.top_exercises)
        table.add_row(
            p.muscle,
            f"[{style}]{p.fatigue_status}[/{style}]",
            format_number(p.current_week_effective_sets),
            f"{format_number(p.target_min_sets)}-{format_number(p.target_max_sets)}",
            f"{p.fatigue_ratio:.2f}",
            f"{p.current_week_total_volume:.0f}",
            top or "-",
        )

    return table


def format_volume_table(points: list[WeeklyVolumePoint], unit: str) -> Table:
    table = Table(title=f"Weekly Volume ({unit})")

    table.add_column("Week of", style="cyan")
    table.add_column("Volume", justify="right", style="bold")
    table.add_column("Sets", justify="right")

    for p in points:
        table.add_row(p.week_start, f"{p.total_volume:.1f}", str(p.sets_count))

    return table


def print_last_performance(perf: LastPerformance) -> None:
    """Print the last logged set of an exercise."""
    parts = []
    if perf.weight is not None:
        parts.append(f"{format_number(perf.weight)} {perf.weight_unit or 'kg'}")
    if perf.reps is not None:
        parts.append(f"{perf.reps} reps")
    if perf.duration_sec is not None:
        parts.append(f"{perf.duration_sec} s")
    console.print(
        f"[bold]{perf.exercise_id}[/bold] on {perf.started_at:%Y-%m-%d %H:%M} "
        f"(set {perf.set_index + 1}, {perf.type}): {', '.join(parts)}"
    )


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]{message}[/green]")


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[red]Error: {message}[/red]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]Warning: {message}[/yellow]")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[blue]{message}[/blue]")
