from __future__ import annotations

from dataclasses import dataclass

from .debt import monthly_debt_service
from .numeric import pct, safe_number, safe_ratio
from .schemas import (
    ComparisonMetrics,
    CurrentPropertyInputs,
    ExpenseInputs,
    NewPropertyInputs,
    PropertyMetrics,
)


def compute_current_metrics(inputs: CurrentPropertyInputs) -> PropertyMetrics:
    """Monthly and annual economics of the property the owner holds today."""
    income = _income(inputs.rent, inputs.other_income, inputs.vacancy_percent)
    operating_expenses = operating_expenses_monthly(
        safe_number(inputs.rent), income.gross, inputs.expenses
    )
    value = safe_number(inputs.sale_price)
    return _metrics(
        income=income,
        operating_expenses=operating_expenses,
        debt_service=safe_number(inputs.monthly_payment),
        value=value,
        cash_invested=sale_net_proceeds(inputs),
    )


def compute_candidate_metrics(inputs: NewPropertyInputs) -> PropertyMetrics:
    """Same metrics for the property being considered, financed from scratch."""
    income = _income(inputs.rent, inputs.other_income, inputs.vacancy_percent)
    operating_expenses = operating_expenses_monthly(
        safe_number(inputs.rent), income.gross, inputs.expenses
    )
    price = safe_number(inputs.purchase_price)
    down_payment = pct(inputs.down_payment_percent) * price
    loan_amount = candidate_loan_amount(inputs)
    debt_service = monthly_debt_service(
        loan_amount, inputs.interest_rate, inputs.loan_term_years
    )
    cash_invested = max(
        0.0, down_payment + closing_costs(inputs) + safe_number(inputs.rehab)
    )
    return _metrics(
        income=income,
        operating_expenses=operating_expenses,
        debt_service=debt_service,
        value=price,
        cash_invested=cash_invested,
    )


def compute_comparison(
    current: CurrentPropertyInputs, candidate: NewPropertyInputs
) -> ComparisonMetrics:
    loan_amount = candidate_loan_amount(candidate)
    return ComparisonMetrics(
        current=compute_current_metrics(current),
        candidate=compute_candidate_metrics(candidate),
        sale_net_proceeds=sale_net_proceeds(current),
        new_loan_amount=loan_amount,
        new_monthly_payment=monthly_debt_service(
            loan_amount, candidate.interest_rate, candidate.loan_term_years
        ),
    )


def operating_expenses_monthly(
    rent: float, gross_income: float, expenses: ExpenseInputs
) -> float:
    # maintenance% applies to rent, management% to gross income
    maintenance = safe_number(expenses.maintenance_monthly) + pct(
        expenses.maintenance_percent
    ) * rent
    management = pct(expenses.management_percent) * gross_income
    return (
        safe_number(expenses.taxes)
        + safe_number(expenses.insurance)
        + maintenance
        + management
        + safe_number(expenses.utilities)
        + safe_number(expenses.hoa)
        + safe_number(expenses.reserves)
    )


def sale_net_proceeds(inputs: CurrentPropertyInputs) -> float:
    sale_price = safe_number(inputs.sale_price)
    selling_costs = pct(inputs.selling_cost_percent) * sale_price
    return max(0.0, sale_price - selling_costs - safe_number(inputs.loan_balance))


def candidate_loan_amount(inputs: NewPropertyInputs) -> float:
    price = safe_number(inputs.purchase_price)
    return max(0.0, price - pct(inputs.down_payment_percent) * price)


def closing_costs(inputs: NewPropertyInputs) -> float:
    explicit = safe_number(inputs.closing_costs)
    if explicit > 0:
        return explicit
    return pct(inputs.closing_costs_percent) * safe_number(inputs.purchase_price)


@dataclass(frozen=True)
class _Income:
    gross: float
    vacancy_loss: float

    @property
    def effective(self) -> float:
        return self.gross - self.vacancy_loss


def _income(rent: float, other_income: float, vacancy_percent: float) -> _Income:
    gross = safe_number(rent) + safe_number(other_income)
    return _Income(gross=gross, vacancy_loss=pct(vacancy_percent) * gross)


def _metrics(
    *,
    income: _Income,
    operating_expenses: float,
    debt_service: float,
    value: float,
    cash_invested: float,
) -> PropertyMetrics:
    noi_monthly = income.effective - operating_expenses
    noi_annual = noi_monthly * 12
    cash_flow_monthly = noi_monthly - debt_service
    cash_flow_annual = cash_flow_monthly * 12
    return PropertyMetrics(
        gross_monthly_income=income.gross,
        vacancy_loss_monthly=income.vacancy_loss,
        effective_monthly_income=income.effective,
        operating_expenses_monthly=operating_expenses,
        noi_monthly=noi_monthly,
        noi_annual=noi_annual,
        debt_service_monthly=debt_service,
        cash_flow_monthly=cash_flow_monthly,
        cash_flow_annual=cash_flow_annual,
        cap_rate=safe_ratio(noi_annual, value),
        cash_invested=cash_invested,
        cash_on_cash=safe_ratio(cash_flow_annual, cash_invested),
    )
