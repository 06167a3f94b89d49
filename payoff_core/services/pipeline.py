from __future__ import annotations

import dataclasses
from decimal import Decimal
from typing import Optional, Sequence

from payoff_core.domain.models import Debt, PayoffPlan, Strategy, StrategyComparison, StrategySettings
from payoff_core.services import scenario as scenario_service
from payoff_core.services import simulator


@dataclasses.dataclass(frozen=True)
class WhatIfComparison:
    baseline: PayoffPlan
    scenario: PayoffPlan
    extra_monthly: Decimal
    interest_saved: Decimal
    months_saved: Optional[int]  # None unless both plans converge


def compare_strategies(
    debts: Sequence[Debt],
    settings: StrategySettings,
    *,
    start=None,
    floor_funding: bool = True,
) -> StrategyComparison:
    """Run avalanche and snowball on the same inputs; positive deltas favour avalanche."""
    if floor_funding:
        settings = scenario_service.floor_at_minimums(debts, settings)
    avalanche = simulator.simulate(debts, scenario_service.with_strategy(settings, Strategy.AVALANCHE), start=start)
    snowball = simulator.simulate(debts, scenario_service.with_strategy(settings, Strategy.SNOWBALL), start=start)
    return StrategyComparison(
        avalanche=avalanche,
        snowball=snowball,
        interest_saved=snowball.total_interest - avalanche.total_interest,
        months_saved=snowball.months - avalanche.months,
    )


def compare_what_if(debts: Sequence[Debt], settings: StrategySettings, extra_monthly, *, start=None) -> WhatIfComparison:
    baseline = simulator.simulate(debts, settings, start=start)
    adjusted = scenario_service.apply_what_if(settings, extra_monthly)
    scenario = simulator.simulate(debts, adjusted, start=start)

    months_saved = None
    if baseline.debt_free_date and scenario.debt_free_date:
        months_saved = baseline.months - scenario.months

    return WhatIfComparison(
        baseline=baseline,
        scenario=scenario,
        extra_monthly=adjusted.recurring_funding.amount - settings.recurring_funding.amount,
        interest_saved=baseline.total_interest - scenario.total_interest,
        months_saved=months_saved,
    )
