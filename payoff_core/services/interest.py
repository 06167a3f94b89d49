from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Tuple

from payoff_core.domain.models import CENT, ZERO, to_decimal, to_money

MONTHS_PER_YEAR = Decimal(12)
HUNDRED = Decimal(100)


def round_cents(value) -> Decimal:
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def monthly_rate(apr) -> Decimal:
    """APR in percent (e.g. 19.99) to a monthly decimal rate."""
    return to_decimal(apr) / HUNDRED / MONTHS_PER_YEAR


def monthly_interest(balance, apr) -> Decimal:
    """
    Interest charged on ``balance`` for one month, rounded half-up to the cent.
    A non-positive balance or a zero APR accrues nothing.
    """
    balance = to_money(balance)
    if balance <= 0:
        return ZERO
    return round_cents(balance * monthly_rate(apr))


def split_payment(balance, apr, payment) -> Tuple[Decimal, Decimal]:
    """
    Split ``payment`` into (principal, interest) for a single month.

    Interest is covered first; the payment is capped at what is owed, so the two
    parts always sum to the amount actually applied.
    """
    balance = to_money(balance)
    interest = monthly_interest(balance, apr)
    applied = min(to_money(payment), balance + interest)
    interest_paid = min(interest, applied)
    return applied - interest_paid, interest_paid


def utilization(balance, limit) -> float:
    limit = to_decimal(limit)
    if limit <= 0:
        return 0.0
    return float(to_decimal(balance) / limit * HUNDRED)
