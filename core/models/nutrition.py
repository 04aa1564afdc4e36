from __future__ import annotations
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Gender(str, Enum):
    male = "male"
    female = "female"
    other = "other"


class ActivityLevel(str, Enum):
    sedentary = "sedentary"
    lightly_active = "lightly_active"
    moderately_active = "moderately_active"
    very_active = "very_active"
    extra_active = "extra_active"


class WeightGoal(str, Enum):
    lose = "lose"
    maintain = "maintain"
    gain = "gain"


class WeightUnit(str, Enum):
    kg = "kg"
    lbs = "lbs"


class HeightUnit(str, Enum):
    cm = "cm"
    ft = "ft"


class _Record(BaseModel):
    """Immutable record, camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class Anthropometrics(_Record):
    weight: float = Field(..., gt=0, description="kg")
    height: float = Field(..., gt=0, description="cm")
    age: int = Field(..., gt=0)
    gender: Gender
    activity_level: ActivityLevel


class Goals(_Record):
    weight_goal: WeightGoal
    target_weight: float = Field(0, description="kg, ignored for maintain")
    weekly_weight_change: float = Field(0, ge=0, description="kg per week")


class MacroGoals(_Record):
    daily_calories: int
    protein: int   # grams
    carbs: int     # grams, never negative
    fat: int       # grams


class Preferences(_Record):
    weight_unit: WeightUnit = WeightUnit.kg
    height_unit: HeightUnit = HeightUnit.cm


class NutritionProfile(_Record):
    """Same shape as the backend's user-nutrition-profile document."""

    id: str | None = None
    user_id: str
    anthropometrics: Anthropometrics
    goals: Goals
    macro_goals: MacroGoals
    preferences: Preferences = Field(default_factory=Preferences)
    created_at: datetime | None = None
    updated_at: datetime | None = None


# ─── small result records ────────────────────────────────────────────
class WeightChangeRange(_Record):
    min: float
    max: float
    recommended: float


class TimeToGoal(_Record):
    weeks: int
    months: float


class MetabolicRates(_Record):
    bmr: int
    tdee: float
