from payoff_core.domain.models import (  # noqa: F401
    DEFAULT_STRATEGY,
    AmortizationRow,
    Debt,
    DebtSummary,
    DebtTimelineEntry,
    InvalidInputError,
    MonthEntry,
    OneTimeFunding,
    OverallMilestone,
    PaymentLine,
    PayoffMilestone,
    PayoffPlan,
    PayoffStep,
    PlanStatus,
    RecordError,
    RecurringFunding,
    Strategy,
    StrategyComparison,
    StrategySettings,
)

__all__ = [
    "DEFAULT_STRATEGY",
    "AmortizationRow",
    "Debt",
    "DebtSummary",
    "DebtTimelineEntry",
    "InvalidInputError",
    "MonthEntry",
    "OneTimeFunding",
    "OverallMilestone",
    "PaymentLine",
    "PayoffMilestone",
    "PayoffPlan",
    "PayoffStep",
    "PlanStatus",
    "RecordError",
    "RecurringFunding",
    "Strategy",
    "StrategyComparison",
    "StrategySettings",
]
