"""
Read-mostly access to the user's saved records.

The record file mirrors the app's export format::

    {"version": "1.0.0", "debts": [...], "strategy": {...}, "settings": {...}}

Everything handed back is a frozen ``Snapshot`` so the simulator never sees a
live, mutable reference.
"""

from __future__ import annotations

import dataclasses
import datetime as dt
import json
from pathlib import Path
from typing import Any, Dict, Tuple

from payoff_core.domain.models import DEFAULT_STRATEGY, Debt, RecordError, StrategySettings
from payoff_core.io.config import read_json, strategy_from_dict, strategy_to_dict
from payoff_core.io.debts import debt_from_dict, debt_to_dict

STORE_VERSION = "1.0.0"


@dataclasses.dataclass(frozen=True)
class UserSettings:
    user_name: str = ""
    currency: str = "USD"
    date_format: str = "MM/DD/YYYY"


@dataclasses.dataclass(frozen=True)
class Snapshot:
    debts: Tuple[Debt, ...] = ()
    strategy: StrategySettings = DEFAULT_STRATEGY
    settings: UserSettings = dataclasses.field(default_factory=UserSettings)
    version: str = STORE_VERSION
    exported_at: str | None = None

    def active_debts(self) -> Tuple[Debt, ...]:
        return tuple(d for d in self.debts if d.balance > 0)


def load_snapshot(path: str | Path) -> Snapshot:
    source = Path(path)
    if not source.exists():
        raise FileNotFoundError(source)
    data = read_json(source)
    if not isinstance(data, dict):
        raise RecordError("store: root must be a JSON object")
    return snapshot_from_dict(data)


def snapshot_from_dict(data: Dict[str, Any]) -> Snapshot:
    raw_debts = data.get("debts", []) or []
    if not isinstance(raw_debts, list):
        raise RecordError("debts: expected array")
    debts = []
    for idx, item in enumerate(raw_debts):
        if not isinstance(item, dict):
            raise RecordError(f"debts[{idx}]: expected object")
        debts.append(debt_from_dict(item, f"debts[{idx}]"))

    raw_strategy = data.get("strategy", {}) or {}
    if not isinstance(raw_strategy, dict):
        raise RecordError("strategy: expected object")

    raw_settings = data.get("settings", {}) or {}
    if not isinstance(raw_settings, dict):
        raise RecordError("settings: expected object")
    settings = UserSettings(
        user_name=str(raw_settings.get("user_name", "")),
        currency=str(raw_settings.get("currency", "USD")),
        date_format=str(raw_settings.get("date_format", "MM/DD/YYYY")),
    )
    return Snapshot(
        debts=tuple(debts),
        strategy=strategy_from_dict(raw_strategy),
        settings=settings,
        version=str(data.get("version", STORE_VERSION)),
        exported_at=data.get("exported_at"),
    )


def snapshot_to_dict(snapshot: Snapshot) -> Dict[str, Any]:
    return {
        "version": snapshot.version,
        "debts": [debt_to_dict(d) for d in snapshot.debts],
        "strategy": strategy_to_dict(snapshot.strategy),
        "settings": dataclasses.asdict(snapshot.settings),
        "exported_at": snapshot.exported_at,
    }


def save_snapshot(path: str | Path, snapshot: Snapshot) -> Path:
    """Write an export copy of ``snapshot``, stamped with the export time."""
    target = Path(path)
    stamped = dataclasses.replace(snapshot, exported_at=dt.datetime.now(dt.timezone.utc).isoformat())
    target.parent.mkdir(parents=True, exist_ok=True)
    with target.open("w", encoding="utf-8") as f:
        json.dump(snapshot_to_dict(stamped), f, indent=2)
    return target
