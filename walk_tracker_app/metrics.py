# metrics.py
# Body and walking formulas. Inputs are imperial (inches, lbs, mph, hours).

from datetime import date, datetime, timedelta
from enum import Enum
from typing import Optional, Union

METERS_PER_INCH = 0.0254
KG_PER_LB = 0.453592

# (upper speed bound in mph, exclusive) -> MET; anything faster gets WALKING_MET_MAX
WALKING_MET_TABLE = [
    (2.0, 2.0),
    (2.5, 2.5),
    (3.0, 3.0),
    (3.5, 3.5),
    (4.0, 4.0),
]
WALKING_MET_MAX = 4.5
MET_PER_INCLINE_PERCENT = 0.5


class BMICategory(str, Enum):
    UNDERWEIGHT = "Underweight"
    NORMAL = "Normal weight"
    OVERWEIGHT = "Overweight"
    OBESE = "Obese"


def calculate_bmi(height_inches: float, weight_lbs: float) -> float:
    """BMI = weight (kg) / height (m)^2. Caller guarantees positive inputs."""
    height_m = height_inches * METERS_PER_INCH
    weight_kg = weight_lbs * KG_PER_LB
    return weight_kg / (height_m * height_m)


def get_bmi_category(bmi: float) -> BMICategory:
    if bmi < 18.5:
        return BMICategory.UNDERWEIGHT
    if bmi < 25:
        return BMICategory.NORMAL
    if bmi < 30:
        return BMICategory.OVERWEIGHT
    return BMICategory.OBESE


def walking_met(speed_mph: float, incline: float = 0) -> float:
    met = WALKING_MET_MAX
    for upper, value in WALKING_MET_TABLE:
        if speed_mph < upper:
            met = value
            break
    # no cap on purpose: steep inclines keep raising the MET
    return met + incline * MET_PER_INCLINE_PERCENT


def calculate_calories_burned(weight_lbs: float, speed_mph: float, duration_hours: float, incline: float = 0) -> float:
    """Calories = MET x weight (kg) x duration (hours).

    MET comes from the walking speed band and is raised by 0.5 for every
    percent of treadmill incline.
    """
    return walking_met(speed_mph, incline) * weight_lbs * KG_PER_LB * duration_hours


def calculate_miles_walked(speed_mph: float, duration_hours: float) -> float:
    return speed_mph * duration_hours


def calculate_weight_loss_date(
    current_weight: float,
    target_weight: float,
    weekly_loss_rate: float,
    today: Optional[datetime] = None,
) -> datetime:
    """Project the date the target weight is reached at a constant weekly loss.

    No validation happens here: a target above the current weight gives a
    date in the past and a zero rate raises ZeroDivisionError. The form
    layer keeps rate > 0 and target < current.
    """
    weeks_needed = (current_weight - target_weight) / weekly_loss_rate
    days_needed = int(weeks_needed * 7)  # whole days, truncated toward zero
    start = today or datetime.now()
    return start + timedelta(days=days_needed)


def format_date(d: Union[date, datetime]) -> str:
    """'Jan 5, 2025' style label used across the dashboard."""
    return f"{d.strftime('%b')} {d.day}, {d.year}"
