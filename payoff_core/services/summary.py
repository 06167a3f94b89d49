from __future__ import annotations

from decimal import Decimal
from typing import Dict, Sequence

from payoff_core.domain.models import ZERO, Debt, DebtSummary
from payoff_core.services.interest import utilization


def summarize_debts(debts: Sequence[Debt]) -> DebtSummary:
    """
    Totals for display alongside a plan:
    - utilization only counts debts that carry a credit limit
    - progress compares current balances with original balances
    """
    total_balance = sum((d.balance for d in debts), ZERO)
    total_original = sum((d.original_balance for d in debts), ZERO)
    total_minimums = sum((d.minimum_payment for d in debts), ZERO)

    limited = [d for d in debts if d.credit_limit is not None and d.credit_limit > 0]
    total_limit = sum((d.credit_limit for d in limited), ZERO)
    used = sum((d.balance for d in limited), ZERO)

    by_category: Dict[str, Decimal] = {}
    for debt in debts:
        by_category[debt.category] = by_category.get(debt.category, ZERO) + debt.balance

    principal_paid = total_original - total_balance
    percent_paid = float(principal_paid / total_original * 100) if total_original > 0 else 0.0

    return DebtSummary(
        total_balance=total_balance,
        total_minimum_payments=total_minimums,
        total_credit_limit=total_limit,
        credit_utilization=utilization(used, total_limit),
        debts_by_category=by_category,
        principal_paid=principal_paid,
        percent_paid=percent_paid,
    )


def format_time_until(months: int) -> str:
    """Render a month count as e.g. '2 years 3 months'."""
    if months <= 0:
        return "Already debt-free!"
    years, rem = divmod(months, 12)

    def _plural(n: int, unit: str) -> str:
        return f"{n} {unit}{'' if n == 1 else 's'}"

    if years == 0:
        return _plural(rem, "month")
    if rem == 0:
        return _plural(years, "year")
    return f"{_plural(years, 'year')} {_plural(rem, 'month')}"
