from __future__ import annotations

from decimal import Decimal
from typing import List, Optional, Tuple

from payoff_core.domain.models import ZERO, AmortizationRow, Debt, InvalidInputError, to_money
from payoff_core.services.interest import monthly_interest, split_payment
from payoff_core.services.simulator import month_key, month_period

MAX_AMORTIZATION_MONTHS = 360  # 30 years


def amortization_schedule(
    debt: Debt,
    payment,
    *,
    start=None,
    max_months: int = MAX_AMORTIZATION_MONTHS,
) -> List[AmortizationRow]:
    """Month-by-month schedule for a single debt paid at a fixed amount."""
    payment = to_money(payment)
    if payment < 0:
        raise InvalidInputError(["payment: must be >= 0"])
    period = month_period(start)
    balance = debt.balance
    rows: List[AmortizationRow] = []
    while balance > 0 and len(rows) < max_months:
        charged = monthly_interest(balance, debt.apr)
        principal, interest_paid = split_payment(balance, debt.apr, payment)
        # unpaid interest capitalizes
        balance = balance + charged - principal - interest_paid
        rows.append(
            AmortizationRow(
                month=month_key(period + len(rows)),
                payment=principal + interest_paid,
                principal=principal,
                interest=charged,
                balance=balance,
            )
        )
    return rows


def payoff_projection(debt: Debt, payment, *, start=None) -> Tuple[Optional[str], int, Decimal]:
    """
    (payoff month, months, total interest) for one debt at a fixed payment.
    The payoff month is None when the debt does not clear within the schedule
    bound, or when it has nothing owing to begin with.
    """
    rows = amortization_schedule(debt, payment, start=start)
    total_interest = sum((r.interest for r in rows), ZERO)
    if rows and rows[-1].balance == 0:
        return rows[-1].month, len(rows), total_interest
    return None, len(rows), total_interest
