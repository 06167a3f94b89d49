from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

import pandas as pd

from payoff_core.domain.models import PayoffPlan

SCHEDULE_COLUMNS = [
    "month",
    "debt_id",
    "debt_name",
    "kind",
    "starting_balance",
    "interest",
    "minimum",
    "extra",
    "payment",
    "principal",
    "remaining_balance",
]


def plan_to_dict(plan: PayoffPlan) -> Dict[str, Any]:
    return {
        "strategy": plan.strategy.value,
        "status": plan.status.value,
        "start_month": plan.start_month,
        "debt_free_date": plan.debt_free_date,
        "months": plan.months,
        "total_interest": float(plan.total_interest),
        "total_paid": float(plan.total_paid),
        "steps": [
            {
                "step_number": step.step_number,
                "completion_month": step.completion_month,
                "debt_receiving_extra": step.debt_receiving_extra,
                "debts_paying_minimum": list(step.debts_paying_minimum),
                "milestones": [
                    {
                        "debt_id": m.debt_id,
                        "debt_name": m.debt_name,
                        "payoff_month": m.payoff_month,
                        "total_paid": float(m.total_paid),
                        "interest_paid": float(m.interest_paid),
                    }
                    for m in step.milestones
                ],
            }
            for step in plan.steps
        ],
        "monthly_breakdown": [
            {
                "month": entry.month,
                "priority": list(entry.priority),
                "total_payment": float(entry.total_payment),
                "total_principal": float(entry.total_principal),
                "total_interest": float(entry.total_interest),
                "one_time_funding": float(entry.one_time_funding),
                "shortfall": float(entry.shortfall),
                "unallocated": float(entry.unallocated),
                "payments": [
                    {
                        "debt_id": line.debt_id,
                        "debt_name": line.debt_name,
                        "starting_balance": float(line.starting_balance),
                        "minimum": float(line.minimum),
                        "extra": float(line.extra),
                        "amount": float(line.amount),
                        "principal": float(line.principal),
                        "interest": float(line.interest),
                        "interest_paid": float(line.interest_paid),
                        "remaining_balance": float(line.remaining_balance),
                        "type": line.kind,
                    }
                    for line in entry.payments
                ],
            }
            for entry in plan.monthly_breakdown
        ],
        "one_time_fundings": [
            {
                "id": f.id,
                "name": f.name,
                "amount": float(f.amount),
                "date": f.date.isoformat(),
                "is_applied": f.is_applied,
                "applied_month": f.applied_month,
            }
            for f in plan.one_time_fundings
        ],
    }


def plan_to_frame(plan: PayoffPlan) -> pd.DataFrame:
    """One row per debt per simulated month."""
    rows = [
        {
            "month": entry.month,
            "debt_id": line.debt_id,
            "debt_name": line.debt_name,
            "kind": line.kind,
            "starting_balance": float(line.starting_balance),
            "interest": float(line.interest),
            "minimum": float(line.minimum),
            "extra": float(line.extra),
            "payment": float(line.amount),
            "principal": float(line.principal),
            "remaining_balance": float(line.remaining_balance),
        }
        for entry in plan.monthly_breakdown
        for line in entry.payments
    ]
    return pd.DataFrame(rows, columns=SCHEDULE_COLUMNS)


def write_schedule_csv(plan: PayoffPlan, path: str | Path) -> Path:
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    plan_to_frame(plan).to_csv(target, index=False)
    return target
