from __future__ import annotations

from decimal import Decimal
from typing import Callable, Dict, Iterable, List, Sequence, Tuple

from payoff_core.domain.models import Debt, Strategy

PriorityKey = Callable[[Debt, Decimal], Tuple]


def _avalanche_key(debt: Debt, balance: Decimal) -> Tuple:
    # highest APR, then largest balance
    return (-debt.apr, -balance, debt.id)


def _snowball_key(debt: Debt, balance: Decimal) -> Tuple:
    # smallest balance, then highest APR
    return (balance, -debt.apr, debt.id)


_KEYS: Dict[Strategy, PriorityKey] = {
    Strategy.AVALANCHE: _avalanche_key,
    Strategy.SNOWBALL: _snowball_key,
}


def priority_key(strategy: Strategy | str) -> PriorityKey:
    return _KEYS[Strategy(strategy)]


def order_debts(
    debts: Iterable[Debt],
    strategy: Strategy | str,
    balances: Dict[str, Decimal] | None = None,
) -> List[Debt]:
    """
    Sort debts by payoff priority.

    ``balances`` overrides each debt's own balance, which lets the simulator
    re-rank on the current simulated balance every month.
    """
    key = priority_key(strategy)
    balances = balances or {}
    return sorted(debts, key=lambda d: key(d, balances.get(d.id, d.balance)))


def priority_ids(debts: Sequence[Debt], strategy: Strategy | str) -> Tuple[str, ...]:
    return tuple(d.id for d in order_debts(debts, strategy))
