from __future__ import annotations

from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from payoff_core.domain.models import (
    ZERO,
    Debt,
    DebtTimelineEntry,
    MonthEntry,
    OverallMilestone,
    PayoffMilestone,
    PayoffPlan,
    PayoffStep,
    to_money,
)

PROGRESS_MILESTONES = (
    (25, "Quarter Way!"),
    (50, "Halfway!"),
    (75, "Almost There!"),
    (100, "Debt Free!"),
)


def extract_milestones(ledger: Iterable[MonthEntry]) -> List[PayoffMilestone]:
    """Every debt that hits a zero balance, with cumulative paid and interest at that month."""
    return [m for step in build_steps(ledger) for m in step.milestones]


def build_steps(ledger: Iterable[MonthEntry]) -> Tuple[PayoffStep, ...]:
    """
    Fold the monthly ledger into payoff steps.

    A step runs from the month after the previous payoff up to the month in
    which one or more debts reach zero. The focus debt and the minimum-only
    debts are taken from the priority order of the step's first month.
    """
    paid: Dict[str, Decimal] = {}
    interest_paid: Dict[str, Decimal] = {}
    steps: List[PayoffStep] = []
    step_start: Optional[MonthEntry] = None

    for entry in ledger:
        if step_start is None:
            step_start = entry
        reached: List[PayoffMilestone] = []
        for line in entry.payments:
            paid[line.debt_id] = paid.get(line.debt_id, ZERO) + line.amount
            interest_paid[line.debt_id] = interest_paid.get(line.debt_id, ZERO) + line.interest_paid
            if line.remaining_balance == 0:
                reached.append(
                    PayoffMilestone(
                        debt_id=line.debt_id,
                        debt_name=line.debt_name,
                        payoff_month=entry.month,
                        total_paid=paid[line.debt_id],
                        interest_paid=interest_paid[line.debt_id],
                    )
                )
        if reached:
            priority = step_start.priority
            steps.append(
                PayoffStep(
                    step_number=len(steps) + 1,
                    completion_month=entry.month,
                    debt_receiving_extra=priority[0] if priority else None,
                    debts_paying_minimum=tuple(priority[1:]),
                    milestones=tuple(reached),
                )
            )
            step_start = None
    return tuple(steps)


def overall_milestones(debts: Sequence[Debt], plan: PayoffPlan) -> List[OverallMilestone]:
    total_original = sum((d.original_balance for d in debts), ZERO)
    total_balance = sum((d.balance for d in debts), ZERO)
    already_paid = total_original - total_balance
    percent_paid = float(already_paid / total_original * 100) if total_original > 0 else 0.0

    out: List[OverallMilestone] = []
    for percent, label in PROGRESS_MILESTONES:
        target = to_money(total_original * percent / 100)
        estimated: Optional[str] = None
        if target > already_paid:
            cumulative = already_paid
            for entry in plan.monthly_breakdown:
                cumulative += entry.total_principal
                if cumulative >= target:
                    estimated = entry.month
                    break
        out.append(
            OverallMilestone(
                percent=percent,
                label=label,
                is_reached=total_original > 0 and percent_paid >= percent,
                amount_at_milestone=target,
                estimated_month=estimated,
            )
        )
    return out


def payoff_timeline(debts: Sequence[Debt], plan: PayoffPlan) -> List[DebtTimelineEntry]:
    entries: List[DebtTimelineEntry] = []
    for debt in debts:
        milestone = plan.milestone_for(debt.id)
        original = debt.original_balance
        percent = 0.0
        if original > 0:
            percent = min(100.0, float((original - debt.balance) / original * 100))
        completed = debt.balance <= 0
        if completed:
            payoff_month = None
        elif milestone is not None:
            payoff_month = milestone.payoff_month
        else:
            payoff_month = plan.debt_free_date
        entries.append(
            DebtTimelineEntry(
                debt_id=debt.id,
                debt_name=debt.name,
                payoff_month=payoff_month,
                current_balance=debt.balance,
                original_balance=original,
                percent_paid=percent,
                is_completed=completed,
            )
        )
    # completed first, then soonest payoff; unknown payoff dates last
    entries.sort(key=lambda e: (not e.is_completed, e.payoff_month is None, e.payoff_month or "", e.debt_name))
    return entries
