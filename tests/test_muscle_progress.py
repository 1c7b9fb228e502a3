"""
Tests for the weekly muscle workload and volume read models.

Reference week: Monday 2026-02-16 to Sunday 2026-02-22; "now" is the
Wednesday of that week.
"""

from datetime import datetime, timedelta, timezone

import pytest

from overload_planner.core.models import Exercise, ExerciseAttribute, HistoricalSet, MuscleSetTargets
from overload_planner.core.muscle_progress import (
    aggregate_muscle_progress,
    aggregate_weekly_volume,
    fatigue_context_for,
    fatigue_status,
    filter_recent,
    last_performance,
    muscle_contributions,
    set_volume,
    week_key,
)

NOW = datetime(2026, 2, 18, 12, 0, tzinfo=timezone.utc)
YESTERDAY = NOW - timedelta(days=1)
LAST_WEEK = NOW - timedelta(days=7)


def _exercise(ex_id, name, primary=None, secondary=()):
    attrs = []
    if primary:
        attrs.append(ExerciseAttribute("PRIMARY_MUSCLE", primary))
    attrs.extend(ExerciseAttribute("SECONDARY_MUSCLE", m) for m in secondary)
    return Exercise(exercise_id=ex_id, name=name, attributes=tuple(attrs))


def _set(ex_id, started_at, reps=10, weight=None, unit=None, duration=None, set_type="NORMAL", idx=0, session="s1"):
    return HistoricalSet(
        workout_session_id=session,
        started_at=started_at,
        set_index=idx,
        type=set_type,
        reps=reps,
        weight=weight,
        weight_unit=unit,
        duration_sec=duration,
        exercise_id=ex_id,
    )


CATALOG = {
    "bench-press": _exercise("bench-press", "Barbell Bench Press", "CHEST", ("TRICEPS",)),
    "push-up": _exercise("push-up", "Push Up", "CHEST"),
}


class TestWeeks:
    def test_week_starts_on_monday(self):
        assert week_key(datetime(2026, 2, 16, 0, 0, tzinfo=timezone.utc)) == "2026-02-16"
        assert week_key(datetime(2026, 2, 22, 23, 59, tzinfo=timezone.utc)) == "2026-02-16"
        assert week_key(datetime(2026, 2, 23, 0, 0, tzinfo=timezone.utc)) == "2026-02-23"

    def test_week_uses_utc(self):
        # Monday 01:00 at UTC+5 is still Sunday in UTC
        tz = timezone(timedelta(hours=5))
        assert week_key(datetime(2026, 2, 16, 1, 0, tzinfo=tz)) == "2026-02-09"


class TestSetVolume:
    def test_weighted_volume_converted(self):
        s = _set("x", NOW, reps=10, weight=100, unit="lbs")
        # 10 × 45.3592
        assert set_volume(s, "kg") == pytest.approx(453.592)

    def test_missing_unit_is_kg(self):
        s = _set("x", NOW, reps=10, weight=100)
        assert set_volume(s, "kg") == 1000

    def test_reps_then_duration_then_zero(self):
        assert set_volume(_set("x", NOW, reps=12), "kg") == 12
        assert set_volume(_set("x", NOW, reps=None, duration=30), "kg") == 30
        assert set_volume(_set("x", NOW, reps=None), "kg") == 0


class TestMuscleCredits:
    def test_primary_and_secondaries(self):
        ex = _exercise("row", "Row", "BACK", ("BICEPS", "FOREARMS"))
        assert muscle_contributions(ex.attributes) == [("BACK", 1.0), ("BICEPS", 0.5), ("FOREARMS", 0.5)]

    def test_first_secondary_promoted_keeps_secondary_credit(self):
        ex = _exercise("curl", "Curl", None, ("BICEPS", "FOREARMS", "BICEPS"))
        assert muscle_contributions(ex.attributes) == [
            ("BICEPS", 1.0),
            ("BICEPS", 0.5),
            ("FOREARMS", 0.5),
        ]

    def test_promoted_muscle_aggregates_to_one_and_a_half(self):
        catalog = {"curl": _exercise("curl", "Curl", None, ("BICEPS", "FOREARMS"))}
        sets = [_set("curl", NOW, reps=10)]
        result = {p.muscle: p for p in aggregate_muscle_progress(sets, catalog, now=NOW)}
        # 1.0 promoted + 0.5 secondary
        assert result["BICEPS"].current_week_effective_sets == 1.5
        assert result["BICEPS"].current_week_total_volume == 15
        assert result["BICEPS"].top_exercises[0].effective_sets == 1.5
        assert result["FOREARMS"].current_week_effective_sets == 0.5

    def test_duplicates_and_primary_repeats_dropped(self):
        ex = _exercise("dip", "Dip", "TRICEPS", ("CHEST", "CHEST", "TRICEPS"))
        assert muscle_contributions(ex.attributes) == [("TRICEPS", 1.0), ("CHEST", 0.5)]

    def test_no_muscles(self):
        assert muscle_contributions([ExerciseAttribute("EQUIPMENT", "BARBELL")]) == []


class TestFatigueStatus:
    TARGETS = MuscleSetTargets(min_sets=10, max_sets=20)

    def test_boundaries(self):
        # LOW below 10 × 0.8 = 8; HIGH above 20 × 1.1 = 22
        assert fatigue_status(7.5, self.TARGETS) == "LOW"
        assert fatigue_status(8, self.TARGETS) == "TARGET"
        assert fatigue_status(22, self.TARGETS) == "TARGET"
        assert fatigue_status(22.5, self.TARGETS) == "HIGH"


class TestAggregateMuscleProgress:
    def test_primary_and_secondary_credits(self):
        sets = [
            _set("bench-press", YESTERDAY, reps=10, weight=100, unit="lbs"),
            _set("push-up", NOW, reps=10, weight=80, unit="lbs", session="s2"),
        ]
        result = aggregate_muscle_progress(sets, CATALOG, "HYPERTROPHY", "lbs", now=NOW)
        by_muscle = {p.muscle: p for p in result}

        chest = by_muscle["CHEST"]
        assert chest.current_week_effective_sets == 2
        assert chest.current_week_total_volume == 1800
        assert len(chest.top_exercises) == 2
        assert chest.fatigue_status == "LOW"
        # 2 / ((10 + 20) / 2) = 0.133 → 0.13
        assert chest.fatigue_ratio == 0.13
        assert (chest.target_min_sets, chest.target_max_sets) == (10, 20)

        triceps = by_muscle["TRICEPS"]
        assert triceps.current_week_effective_sets == 0.5
        assert triceps.current_week_total_volume == 500
        assert triceps.top_exercises[0].exercise_id == "bench-press"
        assert triceps.top_exercises[0].exercise_name == "Barbell Bench Press"

        assert [p.muscle for p in result] == ["CHEST", "TRICEPS"]

    def test_warmups_are_ignored(self):
        sets = [_set("bench-press", NOW, reps=8, weight=60, unit="lbs", set_type="WARMUP")]
        assert aggregate_muscle_progress(sets, CATALOG, now=NOW) == []

    def test_untracked_and_unknown_sets_are_ignored(self):
        sets = [
            _set("bench-press", NOW, reps=None),
            _set("mystery", NOW, reps=10),
            _set(None, NOW, reps=10),
        ]
        assert aggregate_muscle_progress(sets, CATALOG, now=NOW) == []

    def test_weekly_series_and_current_week(self):
        sets = [_set("push-up", LAST_WEEK, idx=i, session="old") for i in range(3)]
        sets += [_set("push-up", NOW, idx=i, session="new") for i in range(2)]
        (chest,) = aggregate_muscle_progress(sets, CATALOG, "STRENGTH", "kg", now=NOW)

        assert [(w.week_start, w.effective_sets) for w in chest.weekly] == [
            ("2026-02-09", 3),
            ("2026-02-16", 2),
        ]
        assert chest.current_week_effective_sets == 2
        # STRENGTH targets 6-10: 2 < 4.8 → LOW
        assert chest.fatigue_status == "LOW"

    def test_muscle_not_trained_this_week(self):
        sets = [_set("push-up", LAST_WEEK)]
        (chest,) = aggregate_muscle_progress(sets, CATALOG, now=NOW)
        assert chest.current_week_effective_sets == 0
        assert chest.fatigue_ratio == 0

    def test_high_workload(self):
        sets = [_set("push-up", NOW, idx=i) for i in range(23)]
        (chest,) = aggregate_muscle_progress(sets, CATALOG, now=NOW)
        assert chest.fatigue_status == "HIGH"

    def test_top_exercises_limited_and_sorted(self):
        catalog = {
            f"ex{i}": _exercise(f"ex{i}", f"Exercise {i}", "CHEST") for i in range(4)
        }
        sets = []
        for i in range(4):
            sets += [_set(f"ex{i}", NOW, idx=j, session=f"s{i}") for j in range(i + 1)]
        (chest,) = aggregate_muscle_progress(sets, catalog, now=NOW)
        assert [e.exercise_id for e in chest.top_exercises] == ["ex3", "ex2", "ex1"]
        assert chest.current_week_effective_sets == 10

    def test_custom_targets(self):
        sets = [_set("push-up", NOW, idx=i) for i in range(5)]
        (chest,) = aggregate_muscle_progress(
            sets, CATALOG, now=NOW, targets=MuscleSetTargets(min_sets=2, max_sets=4)
        )
        # 5 ≤ 4 × 1.1 = 4.4 is false → HIGH
        assert chest.fatigue_status == "HIGH"

    def test_fatigue_context_for(self):
        sets = [_set("push-up", NOW, idx=i) for i in range(12)]
        points = aggregate_muscle_progress(sets, CATALOG, now=NOW)
        ctx = fatigue_context_for(points, "CHEST")
        assert ctx is not None
        assert ctx.fatigue_status == "TARGET"
        assert ctx.current_week_effective_sets == 12
        assert (ctx.target_min_sets, ctx.target_max_sets) == (10, 20)
        assert fatigue_context_for(points, "BACK") is None
        assert fatigue_context_for(points, None) is None


class TestWeeklyVolume:
    def test_mixed_units_reps_and_time(self):
        sets = [
            _set(None, datetime(2026, 2, 16, 10, tzinfo=timezone.utc), reps=10, weight=100, unit="kg"),
            _set(None, datetime(2026, 2, 18, 10, tzinfo=timezone.utc), reps=10, weight=100, unit="lbs"),
            _set(None, datetime(2026, 2, 24, 10, tzinfo=timezone.utc), reps=12),
            _set(None, datetime(2026, 2, 24, 10, tzinfo=timezone.utc), reps=None, duration=30),
        ]
        result = aggregate_weekly_volume(sets, "kg")
        # 1000 + 453.592 = 1453.59; 12 + 30 = 42
        assert [(p.week_start, p.total_volume, p.sets_count) for p in result] == [
            ("2026-02-16", 1453.59, 2),
            ("2026-02-23", 42, 2),
        ]

    def test_zero_volume_sets_skipped(self):
        sets = [_set(None, NOW, reps=None), _set(None, NOW, reps=0)]
        assert aggregate_weekly_volume(sets) == []


class TestLastPerformance:
    def test_latest_session_highest_trackable_set(self):
        sets = [
            _set("ex-1", LAST_WEEK, reps=12, weight=70, unit="kg", idx=0, session="old"),
            _set("ex-1", NOW, reps=8, weight=80, unit="kg", idx=1, session="session-1", set_type="AMRAP"),
            _set("ex-1", NOW, reps=None, idx=2, session="session-1"),
            _set("ex-2", NOW + timedelta(hours=1), reps=5, idx=0, session="other"),
        ]
        perf = last_performance(sets, "ex-1")
        assert perf is not None
        assert perf.session_id == "session-1"
        assert perf.exercise_id == "ex-1"
        assert perf.set_index == 1
        assert perf.type == "AMRAP"
        assert perf.reps == 8
        assert perf.weight == 80
        assert perf.weight_unit == "kg"

    def test_none_when_no_sets(self):
        assert last_performance([], "ex-1") is None

    def test_none_when_latest_session_untracked(self):
        sets = [
            _set("ex-1", LAST_WEEK, reps=12, session="old"),
            _set("ex-1", NOW, reps=None, session="new"),
        ]
        assert last_performance(sets, "ex-1") is None


class TestFilterRecent:
    def test_cutoff_is_midnight_utc(self):
        inside = _set("x", datetime(2026, 2, 11, 0, 0, tzinfo=timezone.utc))
        outside = _set("x", datetime(2026, 2, 10, 23, 59, tzinfo=timezone.utc))
        assert filter_recent([inside, outside], weeks=1, now=NOW) == [inside]
