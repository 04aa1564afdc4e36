"""
scripts/macro_goals.py
────────────────────────────────────────────────────────────────────────
Compute – and optionally store – a user's daily macro goals:

    python -m scripts.macro_goals --weight 80 --height 180 --age 30 \
        --gender male --activity moderately_active --goal lose \
        --weekly-change 0.5 --target-weight 75

Push the result to the backend (tokens come from ACCESS_TOKEN /
REFRESH_TOKEN in the environment or .env):

    python -m scripts.macro_goals ... --push <user-id>
"""
from __future__ import annotations

import asyncio
import json
import logging
from argparse import ArgumentParser, Namespace
from typing import Any

from dotenv import load_dotenv
load_dotenv()

from config import settings
from core.macro_calc import MacroCalculator
from core.models.nutrition import (
    ActivityLevel,
    Anthropometrics,
    Gender,
    Goals,
    WeightGoal,
)
from services.api_client import ApiClient
from services.auth import AuthSession, SessionStore
from services.errors import ApiError
from services.nutrition import NutritionService

_LOG = logging.getLogger(__name__)

calc = MacroCalculator()


def _parser() -> ArgumentParser:
    ap = ArgumentParser(description="daily calorie + macro goals")
    ap.add_argument("--weight", type=float, required=True, help="kg")
    ap.add_argument("--height", type=float, required=True, help="cm")
    ap.add_argument("--age", type=int, required=True)
    ap.add_argument("--gender", choices=[g.value for g in Gender], required=True)
    ap.add_argument(
        "--activity",
        choices=[a.value for a in ActivityLevel],
        default=ActivityLevel.sedentary.value,
    )
    ap.add_argument(
        "--goal", choices=[w.value for w in WeightGoal], default=WeightGoal.maintain.value
    )
    ap.add_argument("--weekly-change", type=float, default=None,
                    help="kg/week (default: recommended for the goal)")
    ap.add_argument("--target-weight", type=float, default=None, help="kg")
    ap.add_argument("--push", metavar="USER_ID", help="store the goals for this user")
    return ap


def build_report(args: Namespace) -> tuple[Anthropometrics, Goals, dict[str, Any]]:
    anthro = Anthropometrics(
        weight=args.weight,
        height=args.height,
        age=args.age,
        gender=args.gender,
        activity_level=args.activity,
    )
    weekly = args.weekly_change
    if weekly is None:
        weekly = calc.recommended_weight_change_range(args.goal).recommended
    goals = Goals(
        weight_goal=args.goal,
        target_weight=args.target_weight if args.target_weight is not None else args.weight,
        weekly_weight_change=weekly,
    )

    report: dict[str, Any] = {
        "metabolicRates": calc.metabolic_rates(anthro).model_dump(by_alias=True),
        "macroGoals": calc.macro_goals(anthro, goals).model_dump(by_alias=True),
        "recommendedWeeklyChange": calc.recommended_weight_change_range(
            goals.weight_goal
        ).model_dump(),
    }
    if (
        args.target_weight is not None
        and goals.weight_goal is not WeightGoal.maintain
        and goals.weekly_weight_change > 0
    ):
        report["timeToGoal"] = calc.estimated_time_to_goal(
            anthro.weight, goals.target_weight, goals.weekly_weight_change
        ).model_dump()
    return anthro, goals, report


async def _push(user_id: str, anthro: Anthropometrics, goals: Goals) -> None:
    store = SessionStore(
        AuthSession(
            access_token=settings.access_token,
            refresh_token=settings.refresh_token,
            authenticated=bool(settings.access_token),
        )
    )
    async with ApiClient(store) as client:
        await NutritionService(client, calc).recalculate_macro_goals(
            user_id, anthro, goals
        )


# ───────────────────────────────
# CLI entrypoint
# ───────────────────────────────
def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(
        level=settings.log_level, format="%(asctime)s - %(levelname)s - %(message)s"
    )
    args = _parser().parse_args(argv)
    anthro, goals, report = build_report(args)
    print(json.dumps(report, indent=2))

    if not args.push:
        return 0
    try:
        asyncio.run(_push(args.push, anthro, goals))
    except ApiError as exc:
        _LOG.error("could not store goals for user %s: %s", args.push, exc)
        return 1
    print(f"✓ macro goals stored for user {args.push}")
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
