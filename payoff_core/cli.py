from __future__ import annotations

import dataclasses
import json
import logging
from pathlib import Path
from typing import List, Optional, Tuple

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from payoff_core.domain.models import (
    Debt,
    PayoffPlan,
    PlanStatus,
    RecordError,
    Strategy,
    StrategySettings,
    to_money,
)
from payoff_core.io import config as config_io
from payoff_core.io import debts as debts_io
from payoff_core.io import export as export_io
from payoff_core.io import store as store_io
from payoff_core.services import amortization, milestones, pipeline, simulator
from payoff_core.services import scenario as scenario_service
from payoff_core.services.summary import format_time_until, summarize_debts

app = typer.Typer(help="Debt payoff planner: avalanche and snowball schedules.")
console = Console()

# InvalidInputError, RecordError and bad --start values are all ValueErrors
INPUT_ERRORS = (ValueError, FileNotFoundError)


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Show engine log output")):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _save_json(path: Path, payload):
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2)


def _fail(exc: Exception) -> typer.Exit:
    console.print(f"[red]Error:[/red] {exc}")
    return typer.Exit(code=2)


def _load_inputs(
    snapshot: Optional[Path],
    debts: Optional[Path],
    settings: Optional[Path],
    strategy: Optional[Strategy],
    budget: Optional[float],
) -> Tuple[List[Debt], StrategySettings]:
    if snapshot:
        snap = store_io.load_snapshot(snapshot)
        loaded_debts, loaded_settings = list(snap.debts), snap.strategy
    elif debts:
        loaded_debts = debts_io.load_debts(debts)
        loaded_settings = config_io.load_strategy_settings(settings) if settings else StrategySettings()
    else:
        raise typer.BadParameter("Provide either --snapshot or --debts")

    if strategy is not None:
        loaded_settings = scenario_service.with_strategy(loaded_settings, strategy)
    if budget is not None:
        funding = dataclasses.replace(loaded_settings.recurring_funding, amount=to_money(budget))
        loaded_settings = dataclasses.replace(loaded_settings, recurring_funding=funding)
    return loaded_debts, loaded_settings


def _print_plan(plan: PayoffPlan) -> None:
    table = Table(title=f"{plan.strategy.value.title()} payoff plan")
    table.add_column("Step", justify="right")
    table.add_column("Debt")
    table.add_column("Paid off", justify="center")
    table.add_column("Total paid", justify="right")
    table.add_column("Interest", justify="right")
    for step in plan.steps:
        for m in step.milestones:
            table.add_row(
                str(step.step_number),
                m.debt_name,
                m.payoff_month,
                f"{m.total_paid:,.2f}",
                f"{m.interest_paid:,.2f}",
            )
    console.print(table)

    if plan.status is PlanStatus.EMPTY:
        console.print("[green]No open debts. Nothing to plan.[/green]")
    elif plan.status is PlanStatus.COMPLETE:
        console.print(
            f"Debt-free in [bold]{plan.debt_free_date}[/bold] ({format_time_until(plan.months)}), "
            f"total interest [bold]{plan.total_interest:,.2f}[/bold]"
        )
    else:
        console.print(
            f"[yellow]Plan does not reach debt-free within {plan.months} months. "
            "Increase your monthly budget to at least cover the minimum payments.[/yellow]"
        )


@app.command()
def plan(
    snapshot: Optional[Path] = typer.Option(None, help="Saved records JSON (debts + strategy)"),
    debts: Optional[Path] = typer.Option(None, help="CSV with id,name,balance,apr,minimum_payment"),
    settings: Optional[Path] = typer.Option(None, help="Strategy settings JSON (used with --debts)"),
    strategy: Optional[Strategy] = typer.Option(None, help="Override strategy"),
    budget: Optional[float] = typer.Option(None, help="Override monthly budget"),
    start: Optional[str] = typer.Option(None, help="First simulated month, YYYY-MM (default: this month)"),
    out: Optional[Path] = typer.Option(None, help="Output path for plan JSON"),
):
    """Simulate a payoff plan."""
    try:
        debt_list, strategy_settings = _load_inputs(snapshot, debts, settings, strategy, budget)
        result = simulator.simulate(debt_list, strategy_settings, start=start)
    except INPUT_ERRORS as exc:
        raise _fail(exc) from exc

    if out:
        _save_json(out, export_io.plan_to_dict(result))
        typer.echo(f"Plan written to {out}")
    else:
        _print_plan(result)


@app.command()
def compare(
    snapshot: Optional[Path] = typer.Option(None, help="Saved records JSON (debts + strategy)"),
    debts: Optional[Path] = typer.Option(None, help="CSV with id,name,balance,apr,minimum_payment"),
    settings: Optional[Path] = typer.Option(None, help="Strategy settings JSON (used with --debts)"),
    budget: Optional[float] = typer.Option(None, help="Override monthly budget"),
    start: Optional[str] = typer.Option(None, help="First simulated month, YYYY-MM"),
):
    """Compare avalanche and snowball on the same inputs."""
    try:
        debt_list, strategy_settings = _load_inputs(snapshot, debts, settings, None, budget)
        result = pipeline.compare_strategies(debt_list, strategy_settings, start=start)
    except INPUT_ERRORS as exc:
        raise _fail(exc) from exc

    table = Table(title="Strategy comparison")
    table.add_column("Strategy")
    table.add_column("Debt-free", justify="center")
    table.add_column("Months", justify="right")
    table.add_column("Total interest", justify="right")
    for name, p in (("Avalanche", result.avalanche), ("Snowball", result.snowball)):
        table.add_row(name, p.debt_free_date or "-", str(p.months), f"{p.total_interest:,.2f}")
    console.print(table)
    console.print(
        f"Avalanche saves [bold]{result.interest_saved:,.2f}[/bold] in interest "
        f"and {result.months_saved} months; recommended: [bold]{result.recommended.value}[/bold]"
    )


@app.command("what-if")
def what_if(
    extra: float = typer.Option(..., help="Extra monthly amount to add to the budget"),
    snapshot: Optional[Path] = typer.Option(None, help="Saved records JSON (debts + strategy)"),
    debts: Optional[Path] = typer.Option(None, help="CSV with id,name,balance,apr,minimum_payment"),
    settings: Optional[Path] = typer.Option(None, help="Strategy settings JSON (used with --debts)"),
    strategy: Optional[Strategy] = typer.Option(None, help="Override strategy"),
    budget: Optional[float] = typer.Option(None, help="Override monthly budget"),
    start: Optional[str] = typer.Option(None, help="First simulated month, YYYY-MM"),
):
    """Show how an extra monthly payment changes the plan."""
    try:
        debt_list, strategy_settings = _load_inputs(snapshot, debts, settings, strategy, budget)
        result = pipeline.compare_what_if(debt_list, strategy_settings, extra, start=start)
    except INPUT_ERRORS as exc:
        raise _fail(exc) from exc

    console.print(f"Baseline debt-free: {result.baseline.debt_free_date or 'not reached'}")
    console.print(f"With +{result.extra_monthly:,.2f}/mo: {result.scenario.debt_free_date or 'not reached'}")
    if result.months_saved is not None:
        console.print(f"Months saved: [bold]{result.months_saved}[/bold]")
    console.print(f"Interest saved: [bold]{result.interest_saved:,.2f}[/bold]")


@app.command()
def summary(
    snapshot: Optional[Path] = typer.Option(None, help="Saved records JSON (debts + strategy)"),
    debts: Optional[Path] = typer.Option(None, help="CSV with id,name,balance,apr,minimum_payment"),
    settings: Optional[Path] = typer.Option(None, help="Strategy settings JSON (used with --debts)"),
    start: Optional[str] = typer.Option(None, help="First simulated month, YYYY-MM"),
):
    """Totals, utilization and progress milestones for the current debts."""
    try:
        debt_list, strategy_settings = _load_inputs(snapshot, debts, settings, None, None)
        result = simulator.simulate(debt_list, strategy_settings, start=start)
    except INPUT_ERRORS as exc:
        raise _fail(exc) from exc

    totals = summarize_debts(debt_list)
    console.print(f"Total balance: [bold]{totals.total_balance:,.2f}[/bold]")
    console.print(f"Total minimum payments: {totals.total_minimum_payments:,.2f}")
    if totals.total_credit_limit > 0:
        console.print(f"Credit utilization: {totals.credit_utilization:.1f}%")
    console.print(f"Paid so far: {totals.principal_paid:,.2f} ({totals.percent_paid:.1f}%)")
    for category, amount in sorted(totals.debts_by_category.items()):
        console.print(f"  {category}: {amount:,.2f}")

    for m in milestones.overall_milestones(debt_list, result):
        mark = "[green]reached[/green]" if m.is_reached else (m.estimated_month or "-")
        console.print(f"{m.percent:>3}% {m.label:<14} {mark}")


@app.command()
def schedule(
    out: Path = typer.Option(..., help="Output CSV path"),
    snapshot: Optional[Path] = typer.Option(None, help="Saved records JSON (debts + strategy)"),
    debts: Optional[Path] = typer.Option(None, help="CSV with id,name,balance,apr,minimum_payment"),
    settings: Optional[Path] = typer.Option(None, help="Strategy settings JSON (used with --debts)"),
    strategy: Optional[Strategy] = typer.Option(None, help="Override strategy"),
    budget: Optional[float] = typer.Option(None, help="Override monthly budget"),
    start: Optional[str] = typer.Option(None, help="First simulated month, YYYY-MM"),
):
    """Write the month-by-month payment schedule as CSV."""
    try:
        debt_list, strategy_settings = _load_inputs(snapshot, debts, settings, strategy, budget)
        result = simulator.simulate(debt_list, strategy_settings, start=start)
    except INPUT_ERRORS as exc:
        raise _fail(exc) from exc

    export_io.write_schedule_csv(result, out)
    typer.echo(f"Schedule written to {out}")


@app.command()
def amortize(
    debt_id: str = typer.Option(..., help="Debt id to amortize"),
    payment: float = typer.Option(..., help="Fixed monthly payment"),
    snapshot: Optional[Path] = typer.Option(None, help="Saved records JSON"),
    debts: Optional[Path] = typer.Option(None, help="Debts CSV"),
    start: Optional[str] = typer.Option(None, help="First month, YYYY-MM"),
):
    """Amortization schedule for one debt at a fixed payment."""
    try:
        debt_list, _ = _load_inputs(snapshot, debts, None, None, None)
        debt = next((d for d in debt_list if d.id == debt_id), None)
        if debt is None:
            raise RecordError(f"no debt with id '{debt_id}'")
        rows = amortization.amortization_schedule(debt, payment, start=start)
    except INPUT_ERRORS as exc:
        raise _fail(exc) from exc

    table = Table(title=f"{debt.name} at {to_money(payment):,.2f}/mo")
    for col in ("Month", "Payment", "Principal", "Interest", "Balance"):
        table.add_column(col, justify="right")
    for row in rows:
        table.add_row(row.month, f"{row.payment:,.2f}", f"{row.principal:,.2f}", f"{row.interest:,.2f}", f"{row.balance:,.2f}")
    console.print(table)
    if rows and rows[-1].balance > 0:
        console.print("[yellow]Payment does not clear the balance within 30 years.[/yellow]")


if __name__ == "__main__":
    app()
