# utils.py
# Dataframe builders, dashboard aggregates and a one-shot flash message.

from datetime import timedelta
from typing import List, MutableMapping, Optional
import pandas as pd
from walk_tracker_app.metrics import calculate_bmi, get_bmi_category
from walk_tracker_app.models import UserProfile, WalkSession, WeightEntry


# ---- UI helpers --------------------------------------------------------------

FLASH_KEY = "_flash"


def flash(state: MutableMapping, message: str) -> None:
    """Queue a success message to show after the next rerun."""
    state[FLASH_KEY] = message


def pop_flash(state: MutableMapping) -> Optional[str]:
    return state.pop(FLASH_KEY, None)


# ---- Column sets so empty frames still have the expected shape ---------------
WEIGHT_COLS = ["id", "date", "weight", "body_fat", "bmi"]
WALK_COLS = ["id", "date", "duration", "speed", "equipment", "incline", "calories_burned", "miles_walked"]
WEEKLY_WALK_COLS = ["week", "miles", "calories", "count"]


def _frame(rows, cols: List[str]) -> pd.DataFrame:
    if not rows:
        return pd.DataFrame(columns=cols)
    df = pd.DataFrame([r.model_dump() for r in rows])
    df["date"] = pd.to_datetime(df["date"])
    return df.sort_values("date", kind="stable").reset_index(drop=True)


# ---- Public API ---------------------------------------------------------------

def weight_df(entries: List[WeightEntry], height_inches: Optional[float] = None) -> pd.DataFrame:
    """Weight entries sorted by date; missing BMI filled from height when given."""
    df = _frame(entries, WEIGHT_COLS)
    if df.empty or not height_inches:
        return df
    computed = df["weight"].apply(lambda w: calculate_bmi(height_inches, w))
    df["bmi"] = pd.to_numeric(df["bmi"], errors="coerce").fillna(computed)
    return df


def walk_df(sessions: List[WalkSession]) -> pd.DataFrame:
    return _frame(sessions, WALK_COLS)


def week_start(ts: pd.Timestamp) -> pd.Timestamp:
    """Sunday that opens the week containing ts (midnight)."""
    ts = pd.Timestamp(ts).normalize()
    # weekday(): Monday=0 ... Sunday=6
    return ts - timedelta(days=(ts.weekday() + 1) % 7)


def weekly_walk_summary(sessions: List[WalkSession]) -> pd.DataFrame:
    """Miles, calories and session count per Sunday-started week, oldest first."""
    df = walk_df(sessions)
    if df.empty:
        return pd.DataFrame(columns=WEEKLY_WALK_COLS)
    df["week"] = df["date"].apply(week_start)
    out = (
        df.groupby("week")
        .agg(miles=("miles_walked", "sum"), calories=("calories_burned", "sum"), count=("id", "count"))
        .reset_index()
        .sort_values("week")
        .reset_index(drop=True)
    )
    return out


def summarize_progress(profile: UserProfile, entries: List[WeightEntry], sessions: List[WalkSession]) -> dict:
    """
    Headline numbers for the dashboard:
      - current / initial weight (latest and earliest entry, else profile weight)
      - weight lost since start and remaining to target
      - BMI and its category at the current weight
      - walking totals (sessions, miles, calories, hours)
      - goal progress percent, clamped to [0, 100]
    """
    ordered = sorted(entries, key=lambda e: e.date)
    current = ordered[-1].weight if ordered else profile.weight
    initial = ordered[0].weight if ordered else profile.weight

    weight_lost = initial - current
    bmi = calculate_bmi(profile.height, current)

    to_lose = initial - profile.target_weight
    if to_lose > 0:
        progress = max(0.0, min(100.0, weight_lost / to_lose * 100))
    else:
        progress = 100.0 if current <= profile.target_weight else 0.0

    return {
        "current_weight": current,
        "initial_weight": initial,
        "weight_lost": weight_lost,
        "weight_remaining": current - profile.target_weight,
        "bmi": bmi,
        "bmi_category": get_bmi_category(bmi),
        "total_walks": len(sessions),
        "total_miles": sum(s.miles_walked for s in sessions),
        "total_calories": sum(s.calories_burned for s in sessions),
        "total_hours": sum(s.duration for s in sessions),
        "goal_progress": progress,
    }


def rolling_avg(series: pd.Series, window: int = 7) -> pd.Series:
    """Rolling average with graceful handling for short series."""
    return series.rolling(window=window, min_periods=1).mean()
