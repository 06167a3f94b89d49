from payoff_core.services.amortization import amortization_schedule, payoff_projection  # noqa: F401
from payoff_core.services.milestones import build_steps, overall_milestones, payoff_timeline  # noqa: F401
from payoff_core.services.pipeline import compare_strategies, compare_what_if  # noqa: F401
from payoff_core.services.scenario import apply_what_if  # noqa: F401
from payoff_core.services.simulator import MAX_MONTHS, simulate, validate_inputs  # noqa: F401
from payoff_core.services.strategy import order_debts  # noqa: F401
from payoff_core.services.summary import summarize_debts  # noqa: F401

__all__ = [
    "MAX_MONTHS",
    "amortization_schedule",
    "apply_what_if",
    "build_steps",
    "compare_strategies",
    "compare_what_if",
    "order_debts",
    "overall_milestones",
    "payoff_projection",
    "payoff_timeline",
    "simulate",
    "summarize_debts",
    "validate_inputs",
]
