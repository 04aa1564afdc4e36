"""
core/macro_calc.py
────────────────────────────────────────────────────────────────────────
Daily calorie + macro targets for a nutrition profile:

1. BMR  (Mifflin–St Jeor)
2. TDEE (activity multiplier)
3. Target calories (weekly weight change → daily surplus / deficit)
4. Protein / fat / carbs split per weight goal

Every value that gets rounded is rounded half-up, so the numbers match the
ones the mobile app has always stored for a profile.
"""

from __future__ import annotations

import logging
import math
from enum import Enum
from typing import TypeVar

from core.errors import InvalidArgument
from core.models.nutrition import (
    ActivityLevel,
    Anthropometrics,
    Gender,
    Goals,
    MacroGoals,
    MetabolicRates,
    TimeToGoal,
    WeightChangeRange,
    WeightGoal,
)

Logger = logging.getLogger(__name__)

_E = TypeVar("_E", bound=Enum)

# ──────────────────────────────────────────────────────────────────────
#  Tables
# ──────────────────────────────────────────────────────────────────────
ACTIVITY_MULTIPLIERS: dict[ActivityLevel, float] = {
    ActivityLevel.sedentary: 1.2,
    ActivityLevel.lightly_active: 1.375,
    ActivityLevel.moderately_active: 1.55,
    ActivityLevel.very_active: 1.725,
    ActivityLevel.extra_active: 1.9,  # hard training twice a day / physical job
}

# Mifflin–St Jeor sex constant; "other" sits halfway between the two
_GENDER_OFFSET: dict[Gender, float] = {
    Gender.male: 5,
    Gender.female: -161,
    Gender.other: -78,
}

# goal → (protein g per kg body weight, share of kcal from fat)
_MACRO_SPLIT: dict[WeightGoal, tuple[float, float]] = {
    WeightGoal.lose: (2.2, 0.25),      # keep muscle on a cut
    WeightGoal.gain: (2.0, 0.25),
    WeightGoal.maintain: (1.8, 0.30),
}

_WEIGHT_CHANGE_RANGES: dict[WeightGoal, WeightChangeRange] = {
    WeightGoal.lose: WeightChangeRange(min=0.25, max=1.0, recommended=0.5),
    WeightGoal.gain: WeightChangeRange(min=0.25, max=0.5, recommended=0.35),
    WeightGoal.maintain: WeightChangeRange(min=0, max=0, recommended=0),
}

KCAL_PER_KG_BODY_WEIGHT = 7700
MIN_DAILY_CALORIES = 1200
WEEKS_PER_MONTH = 4.33

KCAL_PER_G_PROTEIN = 4
KCAL_PER_G_CARBS = 4
KCAL_PER_G_FAT = 9


def round_half_up(x: float) -> int:
    """Halves go up, like Math.round: 2.5 → 3, -2.5 → -2."""
    whole = math.floor(x)
    # x - floor(x) is exact, floor(x + 0.5) is not
    return whole + 1 if x - whole >= 0.5 else whole


def _coerce(enum_cls: type[_E], value: _E | str) -> _E:
    try:
        return enum_cls(value)
    except ValueError:
        raise InvalidArgument(f"unknown {enum_cls.__name__}: {value!r}") from None


# ──────────────────────────────────────────────────────────────────────
#  Calculator
# ──────────────────────────────────────────────────────────────────────
class MacroCalculator:
    """Stateless; one instance can be shared by every caller."""

    # --------------- public entrypoint --------------------------------
    def macro_goals(self, anthro: Anthropometrics, goals: Goals) -> MacroGoals:
        bmr = self.bmr(anthro.weight, anthro.height, anthro.age, anthro.gender)
        tdee = self.tdee(bmr, anthro.activity_level)
        kcal = self.target_calories(tdee, goals.weight_goal, goals.weekly_weight_change)
        result = self.macros(kcal, anthro.weight, goals.weight_goal)
        Logger.debug(
            "macro goals: bmr=%.1f tdee=%.1f target=%.1f -> %s",
            bmr, tdee, kcal, result,
        )
        return result

    # --------------- BMR / TDEE -------------------------------------
    def bmr(
        self, weight: float, height: float, age: int, gender: Gender | str
    ) -> float:
        """
        Mifflin–St Jeor:
        10 × weight(kg) + 6.25 × height(cm) − 5 × age(years) + sex constant
        """
        base = 10 * weight + 6.25 * height - 5 * age
        return base + _GENDER_OFFSET[_coerce(Gender, gender)]

    def tdee(self, bmr: float, activity_level: ActivityLevel | str) -> float:
        return bmr * ACTIVITY_MULTIPLIERS[_coerce(ActivityLevel, activity_level)]

    def metabolic_rates(self, anthro: Anthropometrics) -> MetabolicRates:
        """BMR (rounded) and TDEE for display next to the goals."""
        bmr = self.bmr(anthro.weight, anthro.height, anthro.age, anthro.gender)
        return MetabolicRates(
            bmr=round_half_up(bmr),
            tdee=self.tdee(bmr, anthro.activity_level),
        )

    # --------------- Calories ---------------------------------------
    def target_calories(
        self,
        tdee: float,
        weight_goal: WeightGoal | str,
        weekly_weight_change: float,
    ) -> float:
        goal = _coerce(WeightGoal, weight_goal)
        if goal is WeightGoal.maintain:
            return tdee

        daily_adjustment = round_half_up(
            weekly_weight_change * KCAL_PER_KG_BODY_WEIGHT / 7
        )
        if goal is WeightGoal.lose:
            return max(MIN_DAILY_CALORIES, tdee - daily_adjustment)
        return tdee + daily_adjustment

    # --------------- Macros -----------------------------------------
    def macros(
        self, target_calories: float, weight: float, weight_goal: WeightGoal | str
    ) -> MacroGoals:
        """
        Protein is set per kg of body weight, fat as a share of calories and
        carbs take whatever is left. At very low calorie targets protein +
        fat can use up the whole budget, in which case carbs bottom out at 0.
        """
        density, fat_share = _MACRO_SPLIT[_coerce(WeightGoal, weight_goal)]

        protein_g = round_half_up(weight * density)
        fat_g = round_half_up(target_calories * fat_share / KCAL_PER_G_FAT)
        carbs_kcal = (
            target_calories
            - protein_g * KCAL_PER_G_PROTEIN
            - fat_g * KCAL_PER_G_FAT
        )
        carbs_g = max(0, round_half_up(carbs_kcal / KCAL_PER_G_CARBS))

        return MacroGoals(
            daily_calories=round_half_up(target_calories),
            protein=protein_g,
            carbs=carbs_g,
            fat=fat_g,
        )

    # --------------- Goal helpers -----------------------------------
    def recommended_weight_change_range(
        self, weight_goal: WeightGoal | str
    ) -> WeightChangeRange:
        return _WEIGHT_CHANGE_RANGES[_coerce(WeightGoal, weight_goal)]

    def estimated_time_to_goal(
        self, current_weight: float, target_weight: float, weekly_weight_change: float
    ) -> TimeToGoal:
        # weekly_weight_change must be > 0; maintain never gets here
        weeks = math.ceil(abs(target_weight - current_weight) / weekly_weight_change)
        months = round_half_up(weeks / WEEKS_PER_MONTH * 10) / 10
        return TimeToGoal(weeks=weeks, months=months)
