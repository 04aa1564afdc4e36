"""Re-export the nutrition records for easy imports."""

from .nutrition import (
    ActivityLevel,
    Anthropometrics,
    Gender,
    Goals,
    HeightUnit,
    MacroGoals,
    MetabolicRates,
    NutritionProfile,
    Preferences,
    TimeToGoal,
    WeightChangeRange,
    WeightGoal,
    WeightUnit,
)

__all__ = [
    "ActivityLevel",
    "Anthropometrics",
    "Gender",
    "Goals",
    "HeightUnit",
    "MacroGoals",
    "MetabolicRates",
    "NutritionProfile",
    "Preferences",
    "TimeToGoal",
    "WeightChangeRange",
    "WeightGoal",
    "WeightUnit",
]
