from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List

import pandas as pd

from payoff_core.domain.models import Debt, RecordError


REQUIRED_COLUMNS = {"id", "balance", "apr", "minimum_payment"}


def load_debts(csv_path: str | Path) -> List[Debt]:
    path = Path(csv_path)
    if not path.exists():
        raise FileNotFoundError(path)

    # amounts stay as text so they reach Decimal without float noise
    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    missing = REQUIRED_COLUMNS - set(df.columns)
    if missing:
        raise RecordError(f"Missing columns in debts CSV: {sorted(missing)}")

    debts: List[Debt] = []
    for idx, row in df.iterrows():
        record = {k: v.strip() for k, v in row.items() if isinstance(v, str) and v.strip() != ""}
        debts.append(debt_from_dict(record, f"debts[{idx}]"))
    return debts


def debt_from_dict(data: Dict[str, Any], path: str) -> Debt:
    for key in sorted(REQUIRED_COLUMNS):
        if key not in data or data[key] is None:
            raise RecordError(f"{path}.{key}: missing required field")
    try:
        return Debt(
            id=str(data["id"]),
            name=str(data.get("name") or ""),
            balance=data["balance"],
            apr=data["apr"],
            minimum_payment=data["minimum_payment"],
            due_day=int(data.get("due_day") or 1),
            category=str(data.get("category") or "other"),
            original_balance=data.get("original_balance"),
            credit_limit=data.get("credit_limit"),
        )
    except (ArithmeticError, TypeError, ValueError) as exc:
        raise RecordError(f"{path}: {exc}") from exc


def debt_to_dict(debt: Debt) -> Dict[str, Any]:
    return {
        "id": debt.id,
        "name": debt.name,
        "balance": float(debt.balance),
        "apr": float(debt.apr),
        "minimum_payment": float(debt.minimum_payment),
        "due_day": debt.due_day,
        "category": debt.category,
        "original_balance": float(debt.original_balance),
        "credit_limit": float(debt.credit_limit) if debt.credit_limit is not None else None,
    }
