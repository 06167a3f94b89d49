from payoff_core.io.debts import load_debts  # noqa: F401
from payoff_core.io.config import load_strategy_settings  # noqa: F401
from payoff_core.io.export import plan_to_dict, plan_to_frame, write_schedule_csv  # noqa: F401
from payoff_core.io.store import Snapshot, load_snapshot, save_snapshot  # noqa: F401

__all__ = [
    "load_debts",
    "load_strategy_settings",
    "load_snapshot",
    "save_snapshot",
    "Snapshot",
    "plan_to_dict",
    "plan_to_frame",
    "write_schedule_csv",
]
