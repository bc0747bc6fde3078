"""
Tests for the dashboard aggregates and dataframe builders.
"""
from datetime import datetime

import pandas as pd
import pytest

from walk_tracker_app.metrics import BMICategory, calculate_bmi
from walk_tracker_app.models import WalkSession, WeightEntry
from walk_tracker_app.utils import (
    flash,
    pop_flash,
    rolling_avg,
    summarize_progress,
    walk_df,
    week_start,
    weekly_walk_summary,
    weight_df,
)


def _walk(day, miles, calories, hours=1.0, sid=None):
    return WalkSession(id=sid or f"w{day.isoformat()}", date=day, duration=hours, speed=miles / hours,
                       calories_burned=calories, miles_walked=miles)


class TestSummarizeProgress:
    """Headline dashboard numbers."""

    def test_without_entries_uses_profile_weight(self, profile):
        s = summarize_progress(profile, [], [])
        assert s["current_weight"] == s["initial_weight"] == 200
        assert s["weight_lost"] == 0
        assert s["weight_remaining"] == 20
        assert s["goal_progress"] == 0
        assert s["total_walks"] == 0
        assert s["total_miles"] == 0

    def test_latest_and_earliest_by_date(self, profile):
        """Entries are ordered by date regardless of storage order."""
        entries = [
            WeightEntry(id="b", date=datetime(2025, 1, 20), weight=190),
            WeightEntry(id="a", date=datetime(2025, 1, 1), weight=200),
            WeightEntry(id="c", date=datetime(2025, 1, 10), weight=195),
        ]
        s = summarize_progress(profile, entries, [])
        assert s["initial_weight"] == 200
        assert s["current_weight"] == 190
        assert s["weight_lost"] == 10
        assert s["weight_remaining"] == 10
        assert s["goal_progress"] == pytest.approx(50)
        assert s["bmi"] == pytest.approx(calculate_bmi(60, 190))
        assert s["bmi_category"] is BMICategory.OBESE

    def test_progress_is_clamped(self, profile):
        entries = [
            WeightEntry(date=datetime(2025, 1, 1), weight=200),
            WeightEntry(date=datetime(2025, 3, 1), weight=170),
        ]
        assert summarize_progress(profile, entries, [])["goal_progress"] == 100
        entries[1].weight = 210
        assert summarize_progress(profile, entries, [])["goal_progress"] == 0

    def test_walk_totals(self, profile):
        sessions = [
            _walk(datetime(2025, 1, 6), 1.5, 136.0, hours=1.0),
            _walk(datetime(2025, 1, 7), 2.0, 150.0, hours=0.5),
        ]
        s = summarize_progress(profile, [], sessions)
        assert s["total_walks"] == 2
        assert s["total_miles"] == pytest.approx(3.5)
        assert s["total_calories"] == pytest.approx(286.0)
        assert s["total_hours"] == pytest.approx(1.5)


class TestFrames:
    """Dataframes feeding the charts."""

    def test_empty_frames_keep_columns(self):
        assert list(weight_df([]).columns) == ["id", "date", "weight", "body_fat", "bmi"]
        assert "miles_walked" in walk_df([]).columns
        assert list(weekly_walk_summary([]).columns) == ["week", "miles", "calories", "count"]

    def test_weight_df_sorted_and_bmi_filled(self):
        entries = [
            WeightEntry(id="2", date=datetime(2025, 1, 8), weight=198, bmi=30.0),
            WeightEntry(id="1", date=datetime(2025, 1, 1), weight=200),
        ]
        df = weight_df(entries, height_inches=60)
        assert list(df["id"]) == ["1", "2"]
        assert df.loc[0, "bmi"] == pytest.approx(calculate_bmi(60, 200))
        assert df.loc[1, "bmi"] == 30.0

    def test_week_starts_on_sunday(self):
        assert week_start(pd.Timestamp("2025-01-08 15:00")) == pd.Timestamp("2025-01-05")
        assert week_start(pd.Timestamp("2025-01-05")) == pd.Timestamp("2025-01-05")
        assert week_start(pd.Timestamp("2025-01-04")) == pd.Timestamp("2024-12-29")

    def test_weekly_walk_summary(self):
        sessions = [
            _walk(datetime(2025, 1, 13), 1.0, 100.0),  # week of Jan 12
            _walk(datetime(2025, 1, 6), 1.5, 130.0),   # week of Jan 5
            _walk(datetime(2025, 1, 11), 2.0, 170.0),  # Saturday, week of Jan 5
        ]
        out = weekly_walk_summary(sessions)
        assert list(out["week"]) == [pd.Timestamp("2025-01-05"), pd.Timestamp("2025-01-12")]
        assert list(out["count"]) == [2, 1]
        assert out.loc[0, "miles"] == pytest.approx(3.5)
        assert out.loc[0, "calories"] == pytest.approx(300.0)

    def test_rolling_avg_short_series(self):
        s = pd.Series([200.0, 198.0])
        assert list(rolling_avg(s, 7)) == [200.0, 199.0]


class TestFlash:
    """Message carried across a rerun in session state."""

    def test_flash_is_shown_once(self):
        state = {}
        flash(state, "Saved 199 lbs")
        assert pop_flash(state) == "Saved 199 lbs"
        assert pop_flash(state) is None

    def test_latest_flash_wins(self):
        state = {}
        flash(state, "first")
        flash(state, "second")
        assert pop_flash(state) == "second"
