from __future__ import annotations

import dataclasses
import datetime as dt
import logging
from decimal import Decimal
from typing import Dict, Iterable, List, Sequence

import pandas as pd

from payoff_core.domain.models import (
    DEFAULT_STRATEGY,
    ZERO,
    Debt,
    InvalidInputError,
    MonthEntry,
    OneTimeFunding,
    PaymentLine,
    PayoffPlan,
    PlanStatus,
    StrategySettings,
)
from payoff_core.services.interest import monthly_interest
from payoff_core.services.milestones import build_steps
from payoff_core.services.strategy import order_debts

logger = logging.getLogger(__name__)

MAX_MONTHS = 600  # 50 years
NOT_FINITE = "must be a finite number"


def validate_inputs(debts: Sequence[Debt], settings: StrategySettings, max_months: int = MAX_MONTHS) -> None:
    """Raise InvalidInputError listing every malformed field; return None when inputs are usable."""
    errors: List[str] = []
    seen = set()
    for idx, debt in enumerate(debts):
        base = f"debts[{idx}]"
        if debt.id in seen:
            errors.append(f"{base}.id: duplicate debt id '{debt.id}'")
        seen.add(debt.id)
        if not debt.balance.is_finite():
            errors.append(f"{base}.balance: {NOT_FINITE}")
        elif debt.balance < 0:
            errors.append(f"{base}.balance: must be >= 0")
        if not debt.apr.is_finite():
            errors.append(f"{base}.apr: {NOT_FINITE}")
        elif debt.apr < 0 or debt.apr > 100:
            errors.append(f"{base}.apr: must be between 0 and 100")
        if not debt.minimum_payment.is_finite():
            errors.append(f"{base}.minimum_payment: {NOT_FINITE}")
        elif debt.minimum_payment < 0:
            errors.append(f"{base}.minimum_payment: must be >= 0")
    budget = settings.recurring_funding.amount
    if not budget.is_finite():
        errors.append(f"strategy.recurring_funding.amount: {NOT_FINITE}")
    elif budget < 0:
        errors.append("strategy.recurring_funding.amount: must be >= 0")
    for idx, funding in enumerate(settings.one_time_fundings):
        if not funding.amount.is_finite():
            errors.append(f"strategy.one_time_fundings[{idx}].amount: {NOT_FINITE}")
        elif funding.amount < 0:
            errors.append(f"strategy.one_time_fundings[{idx}].amount: must be >= 0")
    if max_months < 1:
        errors.append("max_months: must be >= 1")
    if errors:
        raise InvalidInputError(errors)


def month_period(value=None) -> pd.Period:
    """Calendar month of ``value`` (date, datetime, 'YYYY-MM' or Period); defaults to today."""
    if value is None:
        value = dt.date.today()
    if isinstance(value, pd.Period):
        return value.asfreq("M")
    return pd.Period(value, freq="M")


def month_key(period: pd.Period) -> str:
    return period.strftime("%Y-%m")


def simulate(
    debts: Iterable[Debt],
    settings: StrategySettings = DEFAULT_STRATEGY,
    *,
    start=None,
    max_months: int = MAX_MONTHS,
) -> PayoffPlan:
    """
    Project a month-by-month payoff schedule.

    Each month accrues interest, pays minimums from the recurring budget in
    priority order, then cascades whatever is left (plus one-time fundings
    dated in that month) down the priority list. The loop ends when every debt
    is cleared or after ``max_months``; the inputs are never modified.
    """
    debts = tuple(debts)
    validate_inputs(debts, settings, max_months)

    start_period = month_period(start)
    strategy = settings.strategy
    fundings = list(settings.one_time_fundings)
    active = [d for d in debts if d.balance > 0]

    if not active:
        return PayoffPlan(
            strategy=strategy,
            start_month=month_key(start_period),
            monthly_breakdown=(),
            steps=(),
            debt_free_date=None,
            total_interest=ZERO,
            total_paid=ZERO,
            one_time_fundings=tuple(fundings),
            status=PlanStatus.EMPTY,
        )

    budget = settings.recurring_funding.amount
    total_minimums = sum((d.minimum_payment for d in active), ZERO)
    if budget < total_minimums:
        logger.warning(
            "Monthly funding %s is less than total minimum payments %s; minimums are paid in priority order",
            budget,
            total_minimums,
        )

    balances: Dict[str, Decimal] = {d.id: d.balance for d in active}
    applied: Dict[int, str] = {}
    ledger: List[MonthEntry] = []
    total_interest = ZERO
    total_paid = ZERO

    for offset in range(max_months):
        period = start_period + offset
        key = month_key(period)
        ordered = order_debts(active, strategy, balances)

        interest = {d.id: monthly_interest(balances[d.id], d.apr) for d in ordered}
        owed = {d.id: balances[d.id] + interest[d.id] for d in ordered}

        # Minimums come out of the recurring budget first, in priority order.
        available = budget
        shortfall = ZERO
        minimums: Dict[str, Decimal] = {}
        for debt in ordered:
            due = min(debt.minimum_payment, owed[debt.id])
            paid = min(due, available)
            minimums[debt.id] = paid
            available -= paid
            shortfall += due - paid

        one_time = ZERO
        for idx, funding in enumerate(fundings):
            if idx in applied or funding.is_applied:
                continue
            if month_period(funding.date) == period:
                one_time += funding.amount
                applied[idx] = key

        pool = available + one_time
        lines: List[PaymentLine] = []
        for debt in ordered:
            extra = min(pool, owed[debt.id] - minimums[debt.id])
            pool -= extra
            remaining = owed[debt.id] - minimums[debt.id] - extra
            lines.append(
                PaymentLine(
                    debt_id=debt.id,
                    debt_name=debt.name,
                    starting_balance=balances[debt.id],
                    interest=interest[debt.id],
                    minimum=minimums[debt.id],
                    extra=extra,
                    remaining_balance=remaining,
                )
            )
            balances[debt.id] = remaining
            total_interest += interest[debt.id]
            total_paid += minimums[debt.id] + extra

        ledger.append(
            MonthEntry(
                month=key,
                payments=tuple(lines),
                priority=tuple(d.id for d in ordered),
                one_time_funding=one_time,
                shortfall=shortfall,
                unallocated=pool,
            )
        )

        for debt in ordered:
            if balances[debt.id] == 0:
                logger.debug("%s paid off in %s", debt.name, key)
        active = [d for d in active if balances[d.id] > 0]
        if not active:
            break

    if not active:
        status = PlanStatus.COMPLETE
        debt_free_date = ledger[-1].month
        logger.debug("Debt-free in %s after %d months", debt_free_date, len(ledger))
    else:
        status = PlanStatus.INCOMPLETE
        debt_free_date = None
        logger.info(
            "Plan incomplete after %d months (%d debts still open)",
            len(ledger),
            len(active),
        )

    return PayoffPlan(
        strategy=strategy,
        start_month=month_key(start_period),
        monthly_breakdown=tuple(ledger),
        steps=build_steps(ledger),
        debt_free_date=debt_free_date,
        total_interest=total_interest,
        total_paid=total_paid,
        one_time_fundings=_mark_applied(fundings, applied),
        status=status,
    )


def _mark_applied(fundings: List[OneTimeFunding], applied: Dict[int, str]):
    return tuple(
        dataclasses.replace(f, is_applied=True, applied_month=applied[idx]) if idx in applied else f
        for idx, f in enumerate(fundings)
    )
