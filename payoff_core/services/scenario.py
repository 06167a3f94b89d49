from __future__ import annotations

import dataclasses
from typing import Iterable

from payoff_core.domain.models import Debt, Strategy, StrategySettings, ZERO, to_money


def apply_what_if(settings: StrategySettings, extra_monthly) -> StrategySettings:
    """
    Returns a copy of ``settings`` with ``extra_monthly`` added to the recurring budget.
    """
    funding = settings.recurring_funding
    boosted = dataclasses.replace(funding, amount=funding.amount + to_money(extra_monthly))
    return dataclasses.replace(settings, recurring_funding=boosted)


def with_strategy(settings: StrategySettings, strategy: Strategy | str) -> StrategySettings:
    return dataclasses.replace(settings, strategy=Strategy(strategy))


def floor_at_minimums(debts: Iterable[Debt], settings: StrategySettings) -> StrategySettings:
    """
    Raise the recurring budget to the sum of active minimums when it falls short,
    so a comparison always shows a plan that can be followed.
    """
    minimums = sum((d.minimum_payment for d in debts if d.balance > 0), ZERO)
    funding = settings.recurring_funding
    if funding.amount >= minimums:
        return settings
    return dataclasses.replace(settings, recurring_funding=dataclasses.replace(funding, amount=minimums))
