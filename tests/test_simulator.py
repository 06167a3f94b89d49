import dataclasses
import datetime as dt
import json
from decimal import Decimal

import pytest

from payoff_core.domain.models import (
    Debt,
    InvalidInputError,
    OneTimeFunding,
    PlanStatus,
    RecurringFunding,
    Strategy,
    StrategySettings,
)
from payoff_core.io.export import plan_to_dict
from payoff_core.services.simulator import MAX_MONTHS, simulate

START = "2026-01"


def _debts():
    return [
        Debt(id="x", name="Debt X", balance=1000, apr=20, minimum_payment=50),
        Debt(id="y", name="Debt Y", balance=500, apr=5, minimum_payment=25),
    ]


def _settings(strategy="avalanche", amount=100, fundings=()):
    return StrategySettings(
        strategy=Strategy(strategy),
        recurring_funding=RecurringFunding(amount=amount),
        one_time_fundings=tuple(fundings),
    )


def _balances(plan, debt_id):
    return [e.payment_for(debt_id).remaining_balance for e in plan.monthly_breakdown if e.payment_for(debt_id)]


def test_single_zero_apr_debt_pays_off_in_twelve_months():
    debt = Debt(id="a", balance=1200, apr=0, minimum_payment=100)
    plan = simulate([debt], _settings(amount=100), start=START)

    assert plan.status is PlanStatus.COMPLETE
    assert plan.months == 12
    assert plan.debt_free_date == "2026-12"
    assert plan.total_interest == 0
    assert plan.milestone_for("a").total_paid == Decimal("1200.00")


def test_avalanche_sends_extra_to_highest_apr():
    plan = simulate(_debts(), _settings("avalanche"), start=START)
    first = plan.monthly_breakdown[0]

    assert first.priority == ("x", "y")
    assert first.payment_for("x").extra == Decimal("25.00")
    assert first.payment_for("y").extra == 0
    assert plan.steps[0].debt_receiving_extra == "x"
    assert plan.steps[0].debts_paying_minimum == ("y",)
    assert plan.steps[0].milestones[0].debt_id == "x"


def test_snowball_pays_off_smallest_balance_earlier_than_avalanche():
    avalanche = simulate(_debts(), _settings("avalanche"), start=START)
    snowball = simulate(_debts(), _settings("snowball"), start=START)

    first = snowball.monthly_breakdown[0]
    assert first.priority == ("y", "x")
    assert first.payment_for("y").extra == Decimal("25.00")
    assert snowball.milestone_for("y").payoff_month < avalanche.milestone_for("y").payoff_month
    assert snowball.steps[0].milestones[0].debt_id == "y"


def test_underfunded_plan_has_no_debt_free_date():
    # 40 a month never covers the 50 of interest on x
    debts = [
        Debt(id="x", name="Debt X", balance=3000, apr=20, minimum_payment=50),
        Debt(id="y", name="Debt Y", balance=500, apr=5, minimum_payment=25),
    ]
    plan = simulate(debts, _settings(amount=40), start=START)

    assert plan.debt_free_date is None
    assert plan.status is PlanStatus.INCOMPLETE
    assert not plan.converged
    assert plan.monthly_breakdown[0].shortfall == Decimal("35.00")


def test_temporary_shortfall_still_reaches_debt_free():
    # x clears on partial minimums, which frees the whole budget for y
    debts = [
        Debt(id="x", balance=100, apr=0, minimum_payment=50),
        Debt(id="y", balance=1000, apr=0, minimum_payment=50),
    ]
    plan = simulate(debts, _settings(amount=60), start=START)

    assert plan.monthly_breakdown[0].shortfall == Decimal("40.00")
    assert plan.milestone_for("x").payoff_month == "2026-10"
    assert plan.status is PlanStatus.COMPLETE
    assert plan.converged
    assert plan.months == 19
    assert plan.debt_free_date == "2027-07"


def test_zero_funding_runs_to_the_iteration_bound():
    plan = simulate(_debts(), _settings(amount=0), start=START, max_months=24)

    assert plan.months == 24
    assert plan.debt_free_date is None
    assert plan.steps == ()


def test_underfunded_minimums_follow_priority_order():
    avalanche = simulate(_debts(), _settings("avalanche", amount=60), start=START).monthly_breakdown[0]
    snowball = simulate(_debts(), _settings("snowball", amount=60), start=START).monthly_breakdown[0]

    assert avalanche.payment_for("x").minimum == Decimal("50.00")
    assert avalanche.payment_for("y").minimum == Decimal("10.00")
    assert snowball.payment_for("y").minimum == Decimal("25.00")
    assert snowball.payment_for("x").minimum == Decimal("35.00")
    assert avalanche.shortfall == snowball.shortfall == Decimal("15.00")


def test_one_time_funding_shortens_the_plan():
    bonus = OneTimeFunding(id="bonus", amount=500, date=dt.date(2026, 3, 20))
    settings = _settings(fundings=[bonus])
    baseline = simulate(_debts(), _settings(), start=START)
    boosted = simulate(_debts(), settings, start=START)

    assert boosted.debt_free_date < baseline.debt_free_date
    assert boosted.monthly_breakdown[2].one_time_funding == Decimal("500.00")
    assert boosted.one_time_fundings[0].is_applied
    assert boosted.one_time_fundings[0].applied_month == "2026-03"
    assert settings.one_time_fundings[0].is_applied is False


@pytest.mark.parametrize(
    "funding_date",
    [dt.date(2025, 12, 1), dt.date(2060, 1, 1)],
)
def test_one_time_funding_outside_the_schedule_is_ignored(funding_date):
    funding = OneTimeFunding(id="f", amount=500, date=funding_date)
    plan = simulate(_debts(), _settings(fundings=[funding]), start=START)
    baseline = simulate(_debts(), _settings(), start=START)

    assert plan.monthly_breakdown == baseline.monthly_breakdown
    assert plan.one_time_fundings[0].is_applied is False


def test_already_applied_funding_is_not_consumed_again():
    funding = OneTimeFunding(id="f", amount=500, date=dt.date(2026, 1, 1), is_applied=True)
    plan = simulate(_debts(), _settings(fundings=[funding]), start=START)

    assert plan.monthly_breakdown[0].one_time_funding == 0


def test_cascade_flows_to_next_debt_in_the_same_month():
    debts = [
        Debt(id="a", balance=30, apr=0, minimum_payment=10),
        Debt(id="b", balance=1000, apr=0, minimum_payment=10),
    ]
    plan = simulate(debts, _settings("snowball", amount=100), start=START)
    first = plan.monthly_breakdown[0]

    assert first.payment_for("a").extra == Decimal("20.00")
    assert first.payment_for("a").remaining_balance == 0
    assert first.payment_for("b").extra == Decimal("60.00")
    assert plan.steps[0].completion_month == "2026-01"
    assert plan.monthly_breakdown[1].payment_for("a") is None
    assert plan.monthly_breakdown[1].payment_for("b").amount == Decimal("100.00")


def test_payment_lines_conserve_money():
    plan = simulate(_debts(), _settings(), start=START)

    for entry in plan.monthly_breakdown:
        for line in entry.payments:
            assert line.principal + line.interest_paid == line.amount
            assert line.remaining_balance == line.starting_balance + line.interest - line.amount
            assert line.remaining_balance >= 0


def test_balances_never_increase_in_a_funded_plan():
    plan = simulate(_debts(), _settings(), start=START)

    for debt_id in ("x", "y"):
        balances = _balances(plan, debt_id)
        assert balances == sorted(balances, reverse=True)


def test_total_interest_matches_monthly_interest():
    plan = simulate(_debts(), _settings("snowball"), start=START)

    assert plan.total_interest == sum(e.total_interest for e in plan.monthly_breakdown)
    assert plan.total_interest > 0
    assert plan.total_paid == sum(e.total_payment for e in plan.monthly_breakdown)


def test_first_extra_dollar_goes_to_highest_apr_under_avalanche():
    debts = _debts() + [Debt(id="z", balance=300, apr=20, minimum_payment=30)]
    plan = simulate(debts, _settings(amount=200), start=START)
    aprs = {d.id: d.apr for d in debts}

    for entry in plan.monthly_breakdown:
        open_lines = [l for l in entry.payments if l.starting_balance + l.interest > l.minimum]
        receiving = [l for l in entry.payments if l.extra > 0]
        if not receiving:
            continue
        assert aprs[receiving[0].debt_id] == max(aprs[l.debt_id] for l in open_lines)
    # equal APR: larger balance first
    assert plan.monthly_breakdown[0].priority == ("x", "z", "y")


def test_first_extra_dollar_goes_to_smallest_balance_under_snowball():
    debts = _debts() + [Debt(id="z", balance=300, apr=12, minimum_payment=30)]
    plan = simulate(debts, _settings("snowball", amount=200), start=START)

    checked = 0
    for entry in plan.monthly_breakdown:
        open_lines = [l for l in entry.payments if l.starting_balance + l.interest > l.minimum]
        receiving = [l for l in entry.payments if l.extra > 0]
        if not receiving:
            continue
        assert receiving[0].starting_balance == min(l.starting_balance for l in open_lines)
        checked += 1
    assert checked > 0
    assert plan.monthly_breakdown[0].priority == ("z", "y", "x")


@pytest.mark.parametrize("amount", [76, 100, 250])
def test_funding_above_minimums_converges(amount):
    plan = simulate(_debts(), _settings(amount=amount), start=START)

    assert plan.debt_free_date is not None
    assert plan.months < MAX_MONTHS


def test_identical_inputs_give_identical_plans():
    first = simulate(_debts(), _settings("snowball"), start=START)
    second = simulate(_debts(), _settings("snowball"), start=START)

    assert first == second
    assert json.dumps(plan_to_dict(first)) == json.dumps(plan_to_dict(second))


def test_inputs_are_not_mutated():
    debts = _debts()
    before = [dataclasses.asdict(d) for d in debts]
    simulate(debts, _settings(), start=START)

    assert [dataclasses.asdict(d) for d in debts] == before


def test_empty_and_paid_off_debts_give_empty_plan():
    paid = Debt(id="done", balance=0, apr=18, minimum_payment=0)
    for debts in ([], [paid]):
        plan = simulate(debts, _settings(), start=START)
        assert plan.status is PlanStatus.EMPTY
        assert plan.debt_free_date is None
        assert plan.months == 0
        assert plan.steps == ()
        assert plan.converged


def test_paid_off_debt_is_skipped_alongside_open_debts():
    debts = _debts() + [Debt(id="done", balance=0, apr=18, minimum_payment=40)]
    plan = simulate(debts, _settings(), start=START)

    assert plan.monthly_breakdown[0].payment_for("done") is None
    assert plan.milestone_for("done") is None
    assert plan.status is PlanStatus.COMPLETE


def test_invalid_inputs_are_rejected_before_simulation():
    debts = [
        Debt(id="a", balance=-10, apr=5, minimum_payment=10),
        Debt(id="a", balance=100, apr=120, minimum_payment=-1),
    ]
    with pytest.raises(InvalidInputError) as excinfo:
        simulate(debts, _settings(amount=-5), start=START)

    errors = excinfo.value.errors
    assert "debts[0].balance: must be >= 0" in errors
    assert "debts[1].id: duplicate debt id 'a'" in errors
    assert "debts[1].apr: must be between 0 and 100" in errors
    assert "debts[1].minimum_payment: must be >= 0" in errors
    assert "strategy.recurring_funding.amount: must be >= 0" in errors


def test_invalid_input_error_is_a_value_error():
    with pytest.raises(ValueError):
        simulate([Debt(id="a", balance=100, apr=-1, minimum_payment=10)], _settings(), start=START)


@pytest.mark.parametrize("value", ["nan", "NaN", "inf", "-Infinity"])
def test_non_finite_amounts_are_invalid_input(value):
    debts = [
        Debt(id="a", balance=value, apr=5, minimum_payment=10),
        Debt(id="b", balance=100, apr=value, minimum_payment=value),
    ]
    funding = OneTimeFunding(id="f", amount=value, date=dt.date(2026, 2, 1))
    with pytest.raises(InvalidInputError) as excinfo:
        simulate(debts, _settings(amount=value, fundings=[funding]), start=START)

    assert excinfo.value.errors == [
        "debts[0].balance: must be a finite number",
        "debts[1].apr: must be a finite number",
        "debts[1].minimum_payment: must be a finite number",
        "strategy.recurring_funding.amount: must be a finite number",
        "strategy.one_time_fundings[0].amount: must be a finite number",
    ]


def test_start_month_accepts_dates():
    plan = simulate(_debts(), _settings(), start=dt.date(2026, 1, 31))

    assert plan.start_month == "2026-01"
    assert plan.monthly_breakdown[0].month == "2026-01"
    assert plan.monthly_breakdown[12].month == "2027-01"
