# models.py
from typing import Optional
from datetime import datetime
from enum import Enum
from sqlmodel import Field, SQLModel


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class MilestoneType(str, Enum):
    WEIGHT = "weight"
    CONSISTENCY = "consistency"
    DISTANCE = "distance"


# ---- Storage table -----------------------------------------------------------

class KeyValue(SQLModel, table=True):
    """One row per store key; value is the JSON text of a whole collection."""
    __tablename__ = "keyvalue"
    __table_args__ = {"extend_existing": True}

    key: str = Field(primary_key=True)
    value: str


# ---- Records (serialized into KeyValue.value, not tables) --------------------

class UserProfile(SQLModel):
    id: Optional[str] = None
    height: float             # inches
    weight: float             # lbs
    age: int
    gender: Gender = Gender.OTHER
    target_weight: float      # lbs
    weekly_weight_loss_goal: float  # lbs/week
    target_date: datetime     # derived from the three above


class WeightEntry(SQLModel):
    id: Optional[str] = None
    date: datetime
    weight: float                     # lbs
    body_fat: Optional[float] = None  # percentage
    bmi: Optional[float] = None


class WalkSession(SQLModel):
    id: Optional[str] = None
    date: datetime
    duration: float   # hours
    speed: float      # mph
    equipment: str = ""
    incline: float = 0.0  # percent
    calories_burned: float = 0.0
    miles_walked: float = 0.0


class Milestone(SQLModel):
    id: Optional[str] = None
    date: datetime
    type: MilestoneType
    description: str = ""
    achieved: bool = False
