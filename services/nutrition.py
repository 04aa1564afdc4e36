"""
services/nutrition.py
────────────────────────────────────────────────────────────────────────
Typed wrappers for the nutrition-profile endpoints.

The backend stores integers for height / age / macros and fixed decimals
for weights, so profiles are normalised before they are sent.
"""
from __future__ import annotations

import logging
from typing import Any

from core.macro_calc import MacroCalculator, round_half_up
from core.models.nutrition import (
    Anthropometrics,
    Goals,
    MacroGoals,
    NutritionProfile,
)
from services.api_client import ApiClient

_LOG = logging.getLogger(__name__)


def _round_to(x: float, places: int = 0) -> float:
    factor = 10 ** places
    return round_half_up(x * factor) / factor


def normalize_profile(profile: NutritionProfile) -> dict[str, Any]:
    """Wire payload for POST nutrition/profile (server-owned fields dropped)."""
    a, g, m = profile.anthropometrics, profile.goals, profile.macro_goals
    return {
        "userId": profile.user_id,
        "anthropometrics": {
            "weight": _round_to(a.weight, 1),
            "height": int(_round_to(a.height)),
            "age": a.age,
            "gender": a.gender.value,
            "activityLevel": a.activity_level.value,
        },
        "goals": {
            "weightGoal": g.weight_goal.value,
            "targetWeight": _round_to(g.target_weight, 1),
            "weeklyWeightChange": _round_to(g.weekly_weight_change, 2),
        },
        "macroGoals": m.model_dump(by_alias=True),
        "preferences": profile.preferences.model_dump(by_alias=True, mode="json"),
    }


class NutritionService:
    def __init__(self, client: ApiClient, calc: MacroCalculator | None = None) -> None:
        self._client = client
        self._calc = calc or MacroCalculator()

    async def get_user_profile(self, user_id: str) -> NutritionProfile:
        # a user without a profile gets a 401 here, surfaced as HttpError
        data = await self._client.get(f"nutrition/profile/{user_id}")
        return NutritionProfile.model_validate(data)

    async def create_user_profile(self, profile: NutritionProfile) -> NutritionProfile:
        data = await self._client.post("nutrition/profile", normalize_profile(profile))
        return NutritionProfile.model_validate(data)

    async def update_user_profile(
        self, user_id: str, updates: dict[str, Any]
    ) -> NutritionProfile:
        data = await self._client.put(f"nutrition/profile/{user_id}", updates)
        return NutritionProfile.model_validate(data)

    async def update_macro_goals(
        self, user_id: str, macro_goals: MacroGoals
    ) -> NutritionProfile:
        data = await self._client.put(
            f"nutrition/profile/{user_id}/goals",
            macro_goals.model_dump(by_alias=True),
        )
        return NutritionProfile.model_validate(data)

    async def recalculate_macro_goals(
        self, user_id: str, anthro: Anthropometrics, goals: Goals
    ) -> NutritionProfile:
        """Recompute all four targets from scratch and store them."""
        macro_goals = self._calc.macro_goals(anthro, goals)
        _LOG.info("pushing macro goals for user %s: %s", user_id, macro_goals)
        return await self.update_macro_goals(user_id, macro_goals)
