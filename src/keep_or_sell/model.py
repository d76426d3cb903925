from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from .debt import annual_balance_trace
from .numeric import compound, pct, round_half_up, safe_number
from .schemas import (
    BalanceTrace,
    Decision,
    DecisionInputs,
    DecisionResult,
    SeriesPoint,
    YearlySnapshot,
)

logger = logging.getLogger(__name__)


def compute_decision(inputs: DecisionInputs) -> DecisionResult:
    """
    Project the keep and sell strategies year by year and pick one.

    Both strategies start at ``client_age`` and run to ``planning_age``
    inclusive. Selling wins (``Decision.YES``) when its estate value at the
    planning age beats keeping by at least ``decision_margin_percent``.
    """
    client_age = round_half_up(inputs.client_age)
    planning_age = max(client_age, round_half_up(inputs.planning_age))
    years = planning_age - client_age + 1

    current_value_start = safe_number(inputs.current_property_value)
    current_mortgage_start = safe_number(inputs.current_mortgage_balance)
    current_trace = annual_balance_trace(
        current_mortgage_start, inputs.loan_rate, inputs.loan_amortization_years, years
    )

    sale_tax = capital_gains_tax(
        current_value_start,
        inputs.current_property_acb,
        inputs.capital_gains_inclusion_rate,
        inputs.marginal_tax_rate,
    )
    sale_costs = (
        pct(inputs.realtor_fees_percent) + pct(inputs.property_transfer_tax_percent)
    ) * current_value_start
    proceeds = max(
        0.0,
        safe_number(
            current_value_start - current_mortgage_start - sale_tax - sale_costs
        ),
    )
    new_value_start, new_mortgage_start = size_replacement(
        proceeds, inputs.new_loan_to_value
    )
    new_trace = annual_balance_trace(
        new_mortgage_start, inputs.loan_rate, inputs.loan_amortization_years, years
    )

    investment_growth = 1 + after_tax_return(
        inputs.investment_account_roi, inputs.marginal_tax_rate
    )
    current_investment = 0.0
    new_investment = 0.0
    current_series: List[YearlySnapshot] = []
    new_series: List[YearlySnapshot] = []
    series: List[SeriesPoint] = []

    for index in range(years):
        age = client_age + index

        current_value = safe_number(
            current_value_start * compound(1 + pct(inputs.current_growth_rate), index)
        )
        current_cg_tax = capital_gains_tax(
            current_value,
            inputs.current_property_acb,
            inputs.capital_gains_inclusion_rate,
            inputs.marginal_tax_rate,
        )
        current_snap, current_investment = _project_year(
            age=age,
            index=index,
            property_value=current_value,
            cap_rate_pct=inputs.current_cap_rate,
            trace=current_trace,
            inputs=inputs,
            investment=current_investment,
            investment_growth=investment_growth,
            capital_gains_tax_if_sold=current_cg_tax,
        )

        # The sale already happened at t=0; its tax was netted out of proceeds.
        new_value = safe_number(
            new_value_start * compound(1 + pct(inputs.new_growth_rate), index)
        )
        new_snap, new_investment = _project_year(
            age=age,
            index=index,
            property_value=new_value,
            cap_rate_pct=inputs.new_cap_rate,
            trace=new_trace,
            inputs=inputs,
            investment=new_investment,
            investment_growth=investment_growth,
            capital_gains_tax_if_sold=0.0,
        )

        current_series.append(current_snap)
        new_series.append(new_snap)
        series.append(
            SeriesPoint(
                age=age,
                current_value=current_snap.strategy_value,
                new_value=new_snap.strategy_value,
                delta=safe_number(
                    new_snap.strategy_value - current_snap.strategy_value
                ),
            )
        )

    current_at_planning = current_series[-1]
    new_at_planning = new_series[-1]
    margin_percent = safe_number(inputs.decision_margin_percent)
    threshold = current_at_planning.strategy_value * (1 + margin_percent / 100.0)
    decision = (
        Decision.YES if new_at_planning.strategy_value >= threshold else Decision.NO
    )
    delta_at_planning = series[-1].delta
    peak_age, peak_value = peak_delta(series)

    logger.debug(
        "Decision %s at age %s (delta %.2f, %d projected years)",
        decision.value,
        planning_age,
        delta_at_planning,
        years,
    )

    return DecisionResult(
        decision=decision,
        decision_reason=decision_reason(decision, delta_at_planning, planning_age),
        margin_percent=margin_percent,
        planning_age=planning_age,
        current_at_planning=current_at_planning,
        new_at_planning=new_at_planning,
        break_even_age=break_even_age(series),
        peak_delta_age=peak_age,
        peak_delta_value=peak_value,
        current_series=current_series,
        new_series=new_series,
        series=series,
    )


def _project_year(
    *,
    age: int,
    index: int,
    property_value: float,
    cap_rate_pct: float,
    trace: BalanceTrace,
    inputs: DecisionInputs,
    investment: float,
    investment_growth: float,
    capital_gains_tax_if_sold: float,
) -> Tuple[YearlySnapshot, float]:
    mortgage_balance = trace.balance_at(index)
    net_income = safe_number(pct(cap_rate_pct) * property_value)
    interest_expense = safe_number(mortgage_balance * pct(inputs.loan_rate))
    # negative when interest exceeds income: a tax shield, not floored
    tax_payable = safe_number(
        (net_income - interest_expense) * pct(inputs.marginal_tax_rate)
    )
    cash_flow = safe_number(net_income - tax_payable - trace.annual_debt_service)
    investment = safe_number(investment * investment_growth + cash_flow)
    strategy_value = safe_number(
        property_value - mortgage_balance - capital_gains_tax_if_sold + investment
    )
    snapshot = YearlySnapshot(
        age=age,
        property_value=property_value,
        mortgage_balance=mortgage_balance,
        net_income=net_income,
        tax_payable=tax_payable,
        cash_flow=cash_flow,
        investment_account=investment,
        strategy_value=strategy_value,
        capital_gains_tax=capital_gains_tax_if_sold,
    )
    return snapshot, investment


def capital_gains_tax(
    value: float, acb: float, inclusion_rate_pct: float, tax_rate_pct: float
) -> float:
    gain = safe_number(value) - safe_number(acb)
    return safe_number(gain * pct(inclusion_rate_pct) * pct(tax_rate_pct))


def after_tax_return(roi_pct: float, tax_rate_pct: float) -> float:
    return pct(roi_pct) * (1 - pct(tax_rate_pct))


def size_replacement(proceeds: float, loan_to_value_pct: float) -> Tuple[float, float]:
    """Return ``(property_value, mortgage)`` affordable with ``proceeds`` as equity."""
    ltv = pct(loan_to_value_pct)
    if ltv >= 1:
        return 0.0, 0.0
    value = safe_number(proceeds / (1 - ltv))
    return value, max(0.0, safe_number(value * ltv))


def break_even_age(series: List[SeriesPoint]) -> Optional[int]:
    for point in series:
        if point.delta >= 0:
            return point.age
    return None


def peak_delta(series: List[SeriesPoint]) -> Tuple[Optional[int], float]:
    peak_age: Optional[int] = None
    peak_value = float("-inf")
    for point in series:
        if point.delta > peak_value:
            peak_age = point.age
            peak_value = point.delta
    if peak_age is None:
        return None, 0.0
    return peak_age, peak_value


def decision_reason(decision: Decision, delta: float, planning_age: int) -> str:
    if decision is Decision.YES:
        return f"New strategy exceeds current by ${delta:,.0f} at age {planning_age}."
    return (
        f"Current strategy remains ahead by ${abs(delta):,.0f} at age {planning_age}."
    )
