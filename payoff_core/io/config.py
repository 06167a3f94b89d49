from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List

from payoff_core.domain.models import (
    OneTimeFunding,
    RecordError,
    RecurringFunding,
    Strategy,
    StrategySettings,
)


def load_strategy_settings(path: str | Path) -> StrategySettings:
    data = read_json(path)
    if not isinstance(data, dict):
        raise RecordError("strategy: root must be a JSON object")
    return strategy_from_dict(data)


def strategy_from_dict(data: Dict[str, Any], path: str = "strategy") -> StrategySettings:
    raw_strategy = str(data.get("strategy", Strategy.AVALANCHE.value)).lower()
    try:
        strategy = Strategy(raw_strategy)
    except ValueError as exc:
        raise RecordError(f"{path}.strategy: '{raw_strategy}' is not one of avalanche, snowball") from exc

    recurring = data.get("recurring_funding", {}) or {}
    if not isinstance(recurring, dict):
        raise RecordError(f"{path}.recurring_funding: expected object")

    fundings: List[OneTimeFunding] = []
    for idx, item in enumerate(data.get("one_time_fundings", []) or []):
        item_path = f"{path}.one_time_fundings[{idx}]"
        if not isinstance(item, dict):
            raise RecordError(f"{item_path}: expected object")
        for key in ("amount", "date"):
            if key not in item:
                raise RecordError(f"{item_path}.{key}: missing required field")
        try:
            fundings.append(
                OneTimeFunding(
                    id=str(item.get("id", idx)),
                    name=item.get("name", ""),
                    amount=item["amount"],
                    date=item["date"],
                    is_applied=bool(item.get("is_applied", False)),
                )
            )
        except (ArithmeticError, TypeError, ValueError) as exc:
            raise RecordError(f"{item_path}: {exc}") from exc

    try:
        funding = RecurringFunding(
            amount=recurring.get("amount", 0),
            day_of_month=int(recurring.get("day_of_month", 1)),
        )
    except (ArithmeticError, TypeError, ValueError) as exc:
        raise RecordError(f"{path}.recurring_funding: {exc}") from exc

    return StrategySettings(strategy=strategy, recurring_funding=funding, one_time_fundings=tuple(fundings))


def strategy_to_dict(settings: StrategySettings) -> Dict[str, Any]:
    return {
        "strategy": settings.strategy.value,
        "recurring_funding": {
            "amount": float(settings.recurring_funding.amount),
            "day_of_month": settings.recurring_funding.day_of_month,
        },
        "one_time_fundings": [
            {
                "id": f.id,
                "name": f.name,
                "amount": float(f.amount),
                "date": f.date.isoformat(),
                "is_applied": f.is_applied,
            }
            for f in settings.one_time_fundings
        ],
    }


def read_json(path: str | Path) -> Any:
    with open(path, "r", encoding="utf-8") as f:
        try:
            return json.load(f)
        except json.JSONDecodeError as exc:
            raise RecordError(f"{path}: invalid JSON ({exc.msg})") from exc
