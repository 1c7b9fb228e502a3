"""
Tests for serialization, the file-based training log and the YAML rules.
"""

from datetime import datetime, timedelta, timezone

import pytest

from overload_planner.core.engine.config_loader import load_model_config
from overload_planner.core.models import Exercise, ExerciseAttribute, HistoricalSet, UserProfile
from overload_planner.core.rules import DEFAULT_RULES, load_progression_rules, rules_from_config
from overload_planner.io.history_store import TrainingLogStore, get_default_log_dir
from overload_planner.io.serializers import (
    ParsedSet,
    ValidationError,
    dict_to_exercise,
    dict_to_historical_set,
    dict_to_user_profile,
    format_datetime,
    historical_set_to_dict,
    json_line_to_set,
    parse_datetime,
    parse_sets_string,
)

UTC = timezone.utc


class TestParseSetsString:
    def test_weighted_sets(self):
        assert parse_sets_string("8@60, 7@60") == [
            ParsedSet(8, 60.0, None, "NORMAL"),
            ParsedSet(7, 60.0, None, "NORMAL"),
        ]

    def test_repeat_count(self):
        result = parse_sets_string("8x3@62.5")
        assert result == [ParsedSet(8, 62.5, None, "NORMAL")] * 3

    def test_set_types_and_aliases(self):
        result = parse_sets_string("12@40/w, 10@60/amrap, 15/wu")
        assert [p.type for p in result] == ["WARMUP", "AMRAP", "WARMUP"]
        assert result[2].weight is None

    def test_timed_set(self):
        assert parse_sets_string("45s, 60s/warmup") == [
            ParsedSet(None, None, 45, "NORMAL"),
            ParsedSet(None, None, 60, "WARMUP"),
        ]

    def test_bodyweight_reps(self):
        assert parse_sets_string("12") == [ParsedSet(12, None, None, "NORMAL")]

    @pytest.mark.parametrize("bad", ["", "   ", "abc", "8@", "8@60/heavy", "8x0@60", ",,"])
    def test_invalid(self, bad):
        with pytest.raises(ValidationError):
            parse_sets_string(bad)


class TestDatetimes:
    def test_trailing_z(self):
        assert parse_datetime("2026-02-16T10:00:00Z") == datetime(2026, 2, 16, 10, tzinfo=UTC)

    def test_bare_date_is_midnight_utc(self):
        assert parse_datetime("2026-02-16") == datetime(2026, 2, 16, tzinfo=UTC)

    def test_offset_converted_to_utc(self):
        parsed = parse_datetime("2026-02-16T10:00:00+02:00")
        assert parsed == datetime(2026, 2, 16, 8, tzinfo=UTC)
        assert parsed.utcoffset() == timedelta(0)

    def test_naive_is_utc(self):
        assert parse_datetime("2026-02-16T10:00:00").tzinfo is not None

    @pytest.mark.parametrize("bad", ["", "yesterday", "2026-13-01"])
    def test_invalid(self, bad):
        with pytest.raises(ValidationError):
            parse_datetime(bad)

    def test_format(self):
        assert format_datetime(datetime(2026, 2, 16, 10, 30, tzinfo=UTC)) == "2026-02-16T10:30:00Z"


class TestSetRecords:
    def test_unrecorded_fields_omitted(self):
        s = HistoricalSet("s1", datetime(2026, 2, 16, tzinfo=UTC), 0, reps=10, exercise_id="push-up")
        data = historical_set_to_dict(s)
        assert data == {
            "session_id": "s1",
            "exercise_id": "push-up",
            "started_at": "2026-02-16T00:00:00Z",
            "set_index": 0,
            "type": "NORMAL",
            "reps": 10,
        }
        assert dict_to_historical_set(data) == s

    def test_missing_field(self):
        with pytest.raises(ValidationError, match="session_id"):
            dict_to_historical_set({"started_at": "2026-02-16", "set_index": 0})

    @pytest.mark.parametrize(
        "patch",
        [
            {"type": "HEAVY"},
            {"weight_unit": "stone"},
            {"reps": -1},
            {"weight": "ten"},
            {"reps": 8.7},
            {"duration_sec": 30.5},
            {"set_index": 1.5},
        ],
    )
    def test_invalid_values(self, patch):
        data = {"session_id": "s1", "started_at": "2026-02-16", "set_index": 0, **patch}
        with pytest.raises(ValidationError):
            dict_to_historical_set(data)

    def test_whole_floats_accepted(self):
        s = dict_to_historical_set(
            {"session_id": "s1", "started_at": "2026-02-16", "set_index": 2.0, "reps": 8.0, "weight": 62.5}
        )
        assert (s.set_index, s.reps, s.weight) == (2, 8, 62.5)
        assert isinstance(s.reps, int)

    def test_bad_json_line(self):
        with pytest.raises(ValidationError, match="Invalid JSON"):
            json_line_to_set("{not json")
        with pytest.raises(ValidationError):
            json_line_to_set("[1, 2]")


class TestCatalogAndProfile:
    def test_exercise_attribute_shapes(self):
        exercise = dict_to_exercise(
            {
                "id": "bench-press",
                "name": "Bench Press",
                "attributes": [
                    {"name": "primary_muscle", "value": "chest"},
                    {"attributeName": "EQUIPMENT", "attributeValue": "BARBELL"},
                    {"attributeName": {"name": "TYPE"}, "attributeValue": {"value": "STRENGTH"}},
                    ["SECONDARY_MUSCLE", "TRICEPS"],
                ],
            }
        )
        assert exercise.attributes == (
            ExerciseAttribute("PRIMARY_MUSCLE", "CHEST"),
            ExerciseAttribute("EQUIPMENT", "BARBELL"),
            ExerciseAttribute("TYPE", "STRENGTH"),
            ExerciseAttribute("SECONDARY_MUSCLE", "TRICEPS"),
        )

    def test_exercise_name_defaults_to_id(self):
        assert dict_to_exercise({"id": "plank"}).name == "plank"

    def test_exercise_errors(self):
        with pytest.raises(ValidationError, match="id"):
            dict_to_exercise({"name": "No id"})
        with pytest.raises(ValidationError, match="plank"):
            dict_to_exercise({"id": "plank", "attributes": [{"name": "TYPE"}]})

    def test_profile_defaults(self):
        profile = dict_to_user_profile({"user_id": "u1"})
        assert profile == UserProfile("u1", "lbs", "HYPERTROPHY")

    @pytest.mark.parametrize(
        "data",
        [{}, {"user_id": ""}, {"user_id": "u1", "goal": "POWER"}, {"user_id": "u1", "preferred_unit": "g"}],
    )
    def test_profile_errors(self, data):
        with pytest.raises(ValidationError):
            dict_to_user_profile(data)


class TestTrainingLogStore:
    def _store(self, tmp_path):
        store = TrainingLogStore(tmp_path / "log")
        store.init(UserProfile("u1", "kg", "STRENGTH"))
        return store

    def test_init_creates_files(self, tmp_path):
        store = self._store(tmp_path)
        assert store.exists()
        assert store.load_profile() == UserProfile("u1", "kg", "STRENGTH")
        assert store.load_exercises() == {}
        assert store.load_sets() == []

    def test_reinit_keeps_history(self, tmp_path):
        store = self._store(tmp_path)
        s = HistoricalSet("s1", datetime(2026, 2, 16, tzinfo=UTC), 0, reps=5, exercise_id="x")
        store.append_sets([s])
        store.init(UserProfile("u1", "lbs"))
        assert store.load_sets() == [s]
        assert store.load_profile().preferred_unit == "lbs"

    def test_missing_log(self, tmp_path):
        store = TrainingLogStore(tmp_path / "nowhere")
        assert not store.exists()
        with pytest.raises(FileNotFoundError):
            store.load_profile()
        with pytest.raises(FileNotFoundError):
            store.append_sets([])

    def test_upsert_exercise(self, tmp_path):
        store = self._store(tmp_path)
        store.upsert_exercise(Exercise("squat", "Squat"))
        store.upsert_exercise(
            Exercise("squat", "Back Squat", (ExerciseAttribute("PRIMARY_MUSCLE", "QUADRICEPS"),))
        )
        catalog = store.load_exercises()
        assert list(catalog) == ["squat"]
        assert catalog["squat"].name == "Back Squat"

    def test_append_and_load_sets(self, tmp_path):
        store = self._store(tmp_path)
        sets = [
            HistoricalSet("s1", datetime(2026, 2, 16, 9, tzinfo=UTC), i, reps=5, weight=100, weight_unit="kg", exercise_id="squat")
            for i in range(3)
        ]
        store.append_sets(sets[:2])
        store.append_sets(sets[2:])
        assert store.load_sets() == sets

    def test_bad_line_reports_line_number(self, tmp_path):
        store = self._store(tmp_path)
        store.append_sets([HistoricalSet("s1", datetime(2026, 2, 16, tzinfo=UTC), 0, reps=5)])
        with open(store.sets_path, "a", encoding="utf-8") as f:
            f.write("\n{broken\n")
        with pytest.raises(ValidationError, match="line 3"):
            store.load_sets()

    def test_catalog_must_be_list(self, tmp_path):
        store = self._store(tmp_path)
        store.exercises_path.write_text('{"id": "x"}', encoding="utf-8")
        with pytest.raises(ValidationError):
            store.load_exercises()

    def test_default_log_dir_env(self, tmp_path, monkeypatch):
        monkeypatch.setenv("OVERLOAD_PLANNER_HOME", str(tmp_path / "custom"))
        assert get_default_log_dir() == tmp_path / "custom"


class TestProgressionRules:
    def test_bundled_yaml_matches_defaults(self, tmp_path, monkeypatch):
        monkeypatch.setenv("HOME", str(tmp_path))
        rules = load_progression_rules()
        assert rules.goals == DEFAULT_RULES.goals
        assert rules.goal_weight_multipliers == DEFAULT_RULES.goal_weight_multipliers
        assert rules.muscle_set_targets == DEFAULT_RULES.muscle_set_targets
        assert rules.base_weight_kg("CHEST") == DEFAULT_RULES.base_weight_kg("CHEST")
        assert rules.base_weight_kg(None) == DEFAULT_RULES.default_muscle_base_weight_kg

    def test_partial_override(self):
        rules = rules_from_config(
            {
                "goals": {
                    "STRENGTH": {
                        "deload_percent": 0.1,
                        "weight_multiplier": 1.2,
                        "weekly_muscle_sets": {"min": 5},
                    }
                },
                "muscle_base_weights_kg": {"default": 12, "chest": 22},
            }
        )
        strength = rules.goal_config("STRENGTH")
        assert strength.deload_percent == 0.1
        assert (strength.rep_range.min, strength.rep_range.max) == (4, 6)
        assert rules.goal_weight_multipliers["STRENGTH"] == 1.2
        assert rules.muscle_set_targets["STRENGTH"].min_sets == 5
        assert rules.muscle_set_targets["STRENGTH"].max_sets == 10
        assert rules.base_weight_kg("CHEST") == 22
        assert rules.base_weight_kg("NECK") == 12
        assert rules.goal_config("HYPERTROPHY") == DEFAULT_RULES.goal_config("HYPERTROPHY")

    def test_unknown_goal_warns(self):
        with pytest.warns(UserWarning, match="POWER"):
            rules = rules_from_config({"goals": {"POWER": {"deload_percent": 0.2}}})
        assert "POWER" not in rules.goals

    def test_bad_weight_multiplier_warns(self):
        with pytest.warns(UserWarning, match="weight_multiplier"):
            rules = rules_from_config(
                {"goals": {"STRENGTH": {"weight_multiplier": "big", "deload_percent": 0.1}}}
            )
        assert rules.goal_weight_multipliers["STRENGTH"] == DEFAULT_RULES.goal_weight_multipliers["STRENGTH"]
        # The rest of the section still applies
        assert rules.goal_config("STRENGTH").deload_percent == 0.1

    def test_bad_base_weight_warns(self):
        with pytest.warns(UserWarning, match="CHEST"):
            rules = rules_from_config({"muscle_base_weights_kg": {"CHEST": "heavy", "BACK": 30}})
        assert rules.base_weight_kg("CHEST") == DEFAULT_RULES.base_weight_kg("CHEST")
        assert rules.base_weight_kg("BACK") == 30

    @pytest.mark.parametrize(
        "muscle_sets",
        [{"min": "many"}, {"min": 20, "max": 10}],
    )
    def test_bad_weekly_muscle_sets_warns(self, muscle_sets):
        with pytest.warns(UserWarning, match="weekly_muscle_sets"):
            rules = rules_from_config({"goals": {"ENDURANCE": {"weekly_muscle_sets": muscle_sets}}})
        assert rules.muscle_set_targets["ENDURANCE"] == DEFAULT_RULES.muscle_set_targets["ENDURANCE"]

    @pytest.mark.parametrize(
        "section",
        [{"rep_range": {"min": 12, "max": 8}}, {"rep_range": {"min": "few"}}, {"rep_range": [8, 12]}],
    )
    def test_bad_rep_range_keeps_default_goal(self, section):
        with pytest.warns(UserWarning, match="HYPERTROPHY"):
            rules = rules_from_config({"goals": {"HYPERTROPHY": section}})
        assert rules.goal_config("HYPERTROPHY") == DEFAULT_RULES.goal_config("HYPERTROPHY")

    def test_user_override_merged(self, tmp_path, monkeypatch):
        config_dir = tmp_path / ".overload-planner"
        config_dir.mkdir()
        (config_dir / "progression.yaml").write_text(
            "goals:\n  HYPERTROPHY:\n    deload_percent: 0.08\n", encoding="utf-8"
        )
        monkeypatch.setenv("HOME", str(tmp_path))

        cfg = load_model_config()
        hypertrophy = cfg["goals"]["HYPERTROPHY"]
        assert hypertrophy["deload_percent"] == 0.08
        # Untouched keys still come from the bundled file
        assert hypertrophy["rep_range"] == {"min": 8, "max": 12}

    def test_broken_user_override_ignored(self, tmp_path, monkeypatch):
        config_dir = tmp_path / ".overload-planner"
        config_dir.mkdir()
        (config_dir / "progression.yaml").write_text("goals: [unclosed\n", encoding="utf-8")
        monkeypatch.setenv("HOME", str(tmp_path))

        with pytest.warns(UserWarning, match="Ignoring progression config"):
            rules = load_progression_rules()
        assert rules.goals == DEFAULT_RULES.goals
