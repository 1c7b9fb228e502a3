"""
File-based training log storage.

A log directory holds three files:

    profile.json     user_id, preferred_unit, goal
    exercises.json   exercise catalog: [{id, name, attributes}]
    sets.jsonl       one completed set per line
"""

import json
import os
from pathlib import Path

from ..core.models import Exercise, HistoricalSet, UserProfile
from .serializers import (
    ValidationError,
    dict_to_exercise,
    dict_to_user_profile,
    exercise_to_dict,
    json_line_to_set,
    set_to_json_line,
    user_profile_to_dict,
)

PROFILE_FILE = "profile.json"
EXERCISES_FILE = "exercises.json"
SETS_FILE = "sets.jsonl"


class TrainingLogStore:
    """
    Manages one user's training log directory.

    Sets are append-only; the catalog and profile are rewritten whole.
    """

    def __init__(self, log_dir: str | Path):
        """
        Initialize the store.

        Args:
            log_dir: Directory holding the log files
        """
        self.log_dir = Path(log_dir)
        self.profile_path = self.log_dir / PROFILE_FILE
        self.exercises_path = self.log_dir / EXERCISES_FILE
        self.sets_path = self.log_dir / SETS_FILE

    def exists(self) -> bool:
        """Check if the log has been initialized."""
        return self.profile_path.exists() and self.sets_path.exists()

    def init(self, profile: UserProfile) -> None:
        """
        Create the log directory and write the profile.

        Existing sets and exercises are kept.
        """
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.save_profile(profile)
        if not self.exercises_path.exists():
            self.save_exercises({})
        if not self.sets_path.exists():
            self.sets_path.touch()

    def _require(self, path: Path) -> None:
        if not path.exists():
            raise FileNotFoundError(f"Training log file not found: {path}. Run 'init' first.")

    # -- profile -------------------------------------------------------------

    def load_profile(self) -> UserProfile:
        """
        Load the user profile.

        Raises:
            FileNotFoundError: If the log has not been initialized
            ValidationError: If profile.json is invalid
        """
        self._require(self.profile_path)
        try:
            with open(self.profile_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValidationError(f"Invalid JSON in {self.profile_path}: {e}") from e
        return dict_to_user_profile(data)

    def save_profile(self, profile: UserProfile) -> None:
        with open(self.profile_path, "w", encoding="utf-8") as f:
            json.dump(user_profile_to_dict(profile), f, indent=2)

    # -- exercises -----------------------------------------------------------

    def load_exercises(self) -> dict[str, Exercise]:
        """
        Load the exercise catalog keyed by exercise id.

        Raises:
            FileNotFoundError: If exercises.json is missing
            ValidationError: If the catalog is malformed
        """
        self._require(self.exercises_path)
        try:
            with open(self.exercises_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValidationError(f"Invalid JSON in {self.exercises_path}: {e}") from e
        if not isinstance(data, list):
            raise ValidationError(f"{self.exercises_path} must contain a JSON list")

        exercises: dict[str, Exercise] = {}
        for entry in data:
            exercise = dict_to_exercise(entry)
            exercises[exercise.exercise_id] = exercise
        return exercises

    def save_exercises(self, exercises: dict[str, Exercise]) -> None:
        with open(self.exercises_path, "w", encoding="utf-8") as f:
            json.dump([exercise_to_dict(e) for e in exercises.values()], f, indent=2)

    def upsert_exercise(self, exercise: Exercise) -> None:
        """Add an exercise to the catalog, replacing any entry with the same id."""
        exercises = self.load_exercises()
        exercises[exercise.exercise_id] = exercise
        self.save_exercises(exercises)

    # -- sets ----------------------------------------------------------------

    def load_sets(self) -> list[HistoricalSet]:
        """
        Load all logged sets in file order.

        Raises:
            FileNotFoundError: If sets.jsonl doesn't exist
            ValidationError: If a line cannot be parsed (with line number)
        """
        self._require(self.sets_path)

        sets: list[HistoricalSet] = []
        with open(self.sets_path, "r", encoding="utf-8") as f:
            for line_num, line in enumerate(f, 1):
                line = line.strip()
                if not line:
                    continue
                try:
                    sets.append(json_line_to_set(line))
                except ValidationError as e:
                    raise ValidationError(
                        f"Error parsing line {line_num} in {self.sets_path}: {e}"
                    ) from e
        return sets

    def append_sets(self, sets: list[HistoricalSet]) -> None:
        """Append sets to sets.jsonl."""
        self._require(self.sets_path)
        with open(self.sets_path, "a", encoding="utf-8") as f:
            for s in sets:
                f.write(set_to_json_line(s) + "\n")


def get_default_log_dir() -> Path:
    """
    Default training log directory.

    OVERLOAD_PLANNER_HOME overrides ~/.overload-planner.
    """
    env = os.environ.get("OVERLOAD_PLANNER_HOME")
    if env:
        return Path(env).expanduser()
    return Path.home() / ".overload-planner"


def get_default_store() -> TrainingLogStore:
    return TrainingLogStore(get_default_log_dir())
