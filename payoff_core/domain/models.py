from __future__ import annotations

import dataclasses
import datetime as dt
import enum
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional, Tuple

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def to_money(value) -> Decimal:
    """Coerce a number to a Decimal rounded half-up to the cent. NaN and infinity pass through."""
    value = to_decimal(value)
    if not value.is_finite():
        return value
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


class InvalidInputError(ValueError):
    """Raised before simulation when debts or settings are malformed."""

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


class RecordError(ValueError):
    """Raised when a stored record cannot be read into domain objects."""


class Strategy(str, enum.Enum):
    AVALANCHE = "avalanche"
    SNOWBALL = "snowball"


class PlanStatus(str, enum.Enum):
    EMPTY = "empty"
    COMPLETE = "complete"
    INCOMPLETE = "incomplete"


@dataclasses.dataclass(frozen=True)
class Debt:
    id: str
    balance: Decimal
    apr: Decimal
    minimum_payment: Decimal
    due_day: int = 1
    name: str = ""
    category: str = "other"
    original_balance: Optional[Decimal] = None
    credit_limit: Optional[Decimal] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "id", str(self.id))
        object.__setattr__(self, "balance", to_money(self.balance))
        object.__setattr__(self, "apr", to_decimal(self.apr))
        object.__setattr__(self, "minimum_payment", to_money(self.minimum_payment))
        if not self.name:
            object.__setattr__(self, "name", self.id)
        original = self.balance if self.original_balance is None else to_money(self.original_balance)
        object.__setattr__(self, "original_balance", original)
        if self.credit_limit is not None:
            object.__setattr__(self, "credit_limit", to_money(self.credit_limit))


@dataclasses.dataclass(frozen=True)
class RecurringFunding:
    amount: Decimal = ZERO
    day_of_month: int = 1

    def __post_init__(self) -> None:
        object.__setattr__(self, "amount", to_money(self.amount))


@dataclasses.dataclass(frozen=True)
class OneTimeFunding:
    amount: Decimal
    date: dt.date
    id: str = ""
    name: str = ""
    is_applied: bool = False
    applied_month: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "amount", to_money(self.amount))
        if isinstance(self.date, dt.datetime):
            object.__setattr__(self, "date", self.date.date())
        elif isinstance(self.date, str):
            object.__setattr__(self, "date", _parse_date(self.date))


@dataclasses.dataclass(frozen=True)
class StrategySettings:
    strategy: Strategy = Strategy.AVALANCHE
    recurring_funding: RecurringFunding = dataclasses.field(default_factory=RecurringFunding)
    one_time_fundings: Tuple[OneTimeFunding, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "strategy", Strategy(self.strategy))
        object.__setattr__(self, "one_time_fundings", tuple(self.one_time_fundings))


DEFAULT_STRATEGY = StrategySettings()


@dataclasses.dataclass(frozen=True)
class PaymentLine:
    debt_id: str
    debt_name: str
    starting_balance: Decimal
    interest: Decimal
    minimum: Decimal
    extra: Decimal
    remaining_balance: Decimal

    @property
    def amount(self) -> Decimal:
        return self.minimum + self.extra

    @property
    def interest_paid(self) -> Decimal:
        return min(self.interest, self.amount)

    @property
    def principal(self) -> Decimal:
        return self.amount - self.interest_paid

    @property
    def kind(self) -> str:
        return "extra" if self.extra > 0 else "minimum"


@dataclasses.dataclass(frozen=True)
class MonthEntry:
    month: str
    payments: Tuple[PaymentLine, ...]
    priority: Tuple[str, ...]
    one_time_funding: Decimal = ZERO
    shortfall: Decimal = ZERO
    unallocated: Decimal = ZERO

    @property
    def total_payment(self) -> Decimal:
        return sum((p.amount for p in self.payments), ZERO)

    @property
    def total_principal(self) -> Decimal:
        return sum((p.principal for p in self.payments), ZERO)

    @property
    def total_interest(self) -> Decimal:
        return sum((p.interest for p in self.payments), ZERO)

    def payment_for(self, debt_id: str) -> Optional[PaymentLine]:
        for line in self.payments:
            if line.debt_id == debt_id:
                return line
        return None


@dataclasses.dataclass(frozen=True)
class PayoffMilestone:
    debt_id: str
    debt_name: str
    payoff_month: str
    total_paid: Decimal
    interest_paid: Decimal


@dataclasses.dataclass(frozen=True)
class PayoffStep:
    step_number: int
    completion_month: str
    debt_receiving_extra: Optional[str]
    debts_paying_minimum: Tuple[str, ...]
    milestones: Tuple[PayoffMilestone, ...]


@dataclasses.dataclass(frozen=True)
class PayoffPlan:
    strategy: Strategy
    start_month: str
    monthly_breakdown: Tuple[MonthEntry, ...]
    steps: Tuple[PayoffStep, ...]
    debt_free_date: Optional[str]
    total_interest: Decimal
    total_paid: Decimal
    one_time_fundings: Tuple[OneTimeFunding, ...]
    status: PlanStatus

    @property
    def months(self) -> int:
        return len(self.monthly_breakdown)

    @property
    def converged(self) -> bool:
        return self.status is not PlanStatus.INCOMPLETE

    @property
    def milestones(self) -> Tuple[PayoffMilestone, ...]:
        return tuple(m for step in self.steps for m in step.milestones)

    def milestone_for(self, debt_id: str) -> Optional[PayoffMilestone]:
        for milestone in self.milestones:
            if milestone.debt_id == debt_id:
                return milestone
        return None


@dataclasses.dataclass(frozen=True)
class DebtSummary:
    total_balance: Decimal
    total_minimum_payments: Decimal
    total_credit_limit: Decimal
    credit_utilization: float
    debts_by_category: dict
    principal_paid: Decimal
    percent_paid: float


@dataclasses.dataclass(frozen=True)
class OverallMilestone:
    percent: int
    label: str
    is_reached: bool
    amount_at_milestone: Decimal
    estimated_month: Optional[str] = None


@dataclasses.dataclass(frozen=True)
class DebtTimelineEntry:
    debt_id: str
    debt_name: str
    payoff_month: Optional[str]
    current_balance: Decimal
    original_balance: Decimal
    percent_paid: float
    is_completed: bool


@dataclasses.dataclass(frozen=True)
class StrategyComparison:
    avalanche: PayoffPlan
    snowball: PayoffPlan
    interest_saved: Decimal  # snowball interest minus avalanche interest
    months_saved: int  # snowball months minus avalanche months

    @property
    def recommended(self) -> Strategy:
        if self.interest_saved > 0:
            return Strategy.AVALANCHE
        if self.interest_saved < 0:
            return Strategy.SNOWBALL
        return Strategy.AVALANCHE if self.months_saved >= 0 else Strategy.SNOWBALL


@dataclasses.dataclass(frozen=True)
class AmortizationRow:
    month: str
    payment: Decimal
    principal: Decimal
    interest: Decimal
    balance: Decimal


def _parse_date(value: str) -> dt.date:
    text = value.strip()
    if len(text) == 7:
        text = f"{text}-01"
    return dt.date.fromisoformat(text[:10])
